"""Core quantum state representation using state vectors.

States are immutable: every transform produces a fresh state, and the
amplitude array held by a state is a private read-only copy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Iterator, Sequence

import numpy as np

from .basis import BasisLike, ComputationalBasis, index_to_labels
from .errors import MalformedBasisError, NotPowerOfTwoError
from .extensions import (
    PRECISION, from_bits, is_normalized, is_power_of_two, two_norm,
)


@dataclass(frozen=True)
class Register:
    """A named, ordered group of qubit indexes read together as one integer.

    The first index is the most significant bit of the register value.
    """
    name: str
    qubit_indexes: tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, "qubit_indexes", tuple(self.qubit_indexes))

    @classmethod
    def span(cls, name: str, start: int, length: int) -> Register:
        """Register over the contiguous qubits start .. start+length-1."""
        return cls(name, tuple(range(start, start + length)))

    @property
    def size(self) -> int:
        return len(self.qubit_indexes)

    def check_fits(self, num_qubits: int):
        for q in self.qubit_indexes:
            if q < 0 or q >= num_qubits:
                raise ValueError(
                    f"Register '{self.name}': qubit {q} out of range [0, {num_qubits - 1}]")

    def value_of(self, labels: Sequence[bool]) -> int:
        return from_bits([labels[q] for q in self.qubit_indexes])


class QuantumState(ABC):
    """An amplitude vector of length 2^n, indexed by computational basis."""

    @property
    @abstractmethod
    def amplitudes(self) -> np.ndarray:
        """Read-only complex128 array in basis-index order."""

    @property
    def dimension(self) -> int:
        return len(self.amplitudes)

    @property
    def num_qubits(self) -> int:
        return self.dimension.bit_length() - 1

    @property
    def probabilities(self) -> np.ndarray:
        """Returns |amplitude|^2 for each basis state."""
        return np.abs(self.amplitudes) ** 2

    def __iter__(self) -> Iterator[complex]:
        return (complex(a) for a in self.amplitudes)

    def __len__(self) -> int:
        return self.dimension

    def get_amplitude(self, basis: BasisLike) -> complex:
        basis = ComputationalBasis.coerce(basis)
        if basis.num_qubits != self.num_qubits:
            raise MalformedBasisError(
                f"Basis has {basis.num_qubits} qubits, state has {self.num_qubits}")
        return complex(self.amplitudes[basis.amp_index])

    def two_norm(self) -> float:
        return two_norm(self.amplitudes)

    def is_normalized(self, tol: float = PRECISION) -> bool:
        return is_normalized(self.amplitudes, tol)

    def _check_qubit(self, qubit: int):
        if qubit < 0 or qubit >= self.num_qubits:
            raise ValueError(f"Qubit {qubit} out of range [0, {self.num_qubits - 1}]")

    def _bit_values(self, qubit: int) -> np.ndarray:
        """Label of `qubit` (0 or 1) for every basis index."""
        self._check_qubit(qubit)
        # Qubit 0 is the most significant bit
        bit_position = self.num_qubits - 1 - qubit
        return (np.arange(self.dimension) >> bit_position) & 1

    def true_chance(self, qubit: int) -> float:
        """Probability that `qubit` reads 1 when measured."""
        return float(np.sum(self.probabilities[self._bit_values(qubit) == 1]))

    def chance(self, *constraints: tuple[int, bool]) -> float:
        """Joint probability that every (qubit, value) pair holds at once."""
        mask = np.ones(self.dimension, dtype=bool)
        for qubit, value in constraints:
            mask &= self._bit_values(qubit) == int(bool(value))
        return float(np.sum(self.probabilities[mask]))

    def collapse_qubit(self, qubit: int, value: bool) -> StateVector:
        """Projects onto `qubit == value`. The result is not renormalized."""
        keep = self._bit_values(qubit) == int(bool(value))
        return StateVector(np.where(keep, self.amplitudes, 0))

    def get_distribution(self, register: Register) -> np.ndarray:
        """Probability of every register value, indexed by that value."""
        register.check_fits(self.num_qubits)
        values = np.zeros(self.dimension, dtype=np.int64)
        for q in register.qubit_indexes:
            values = (values << 1) | self._bit_values(q)
        return np.bincount(values, weights=self.probabilities,
                           minlength=1 << register.size)

    def default_registers(self) -> tuple[Register, ...]:
        return tuple(Register(f"q{i}", (i,)) for i in range(self.num_qubits))

    def render(self, *registers: Register) -> str:
        """Sum of non-negligible terms, e.g. '+0.50|1>|0>-0.50|2>|1>'.

        Each term is the real part (and the imaginary part when present)
        followed by one |value> per register, in basis-index order.
        """
        if not registers:
            registers = self.default_registers()
        for reg in registers:
            reg.check_fits(self.num_qubits)

        parts = []
        for index, amp in enumerate(self.amplitudes):
            if abs(amp) < PRECISION:
                continue
            term = f"{amp.real:+.2f}"
            if abs(amp.imag) >= PRECISION:
                term += f",{amp.imag:+.2f}"
            labels = index_to_labels(index, self.num_qubits)
            term += "".join(f"|{reg.value_of(labels)}>" for reg in registers)
            parts.append(term)
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Qubit(QuantumState):
    """A single two-level state."""
    amp_zero: complex
    amp_one: complex

    def __post_init__(self):
        object.__setattr__(self, "amp_zero", complex(self.amp_zero))
        object.__setattr__(self, "amp_one", complex(self.amp_one))

    @property
    def amplitudes(self) -> np.ndarray:
        arr = np.array([self.amp_zero, self.amp_one], dtype=np.complex128)
        arr.setflags(write=False)
        return arr

    @property
    def dimension(self) -> int:
        return 2

    @property
    def num_qubits(self) -> int:
        return 1

    def true_chance(self, qubit: int = 0) -> float:
        self._check_qubit(qubit)
        return abs(self.amp_one) ** 2


Qubit.CLASSIC_ZERO = Qubit(1, 0)
Qubit.CLASSIC_ONE = Qubit(0, 1)


class StateVector(QuantumState):
    """Represents an n-qubit quantum state as a complex numpy array.

    Normalization is not enforced: unnormalized vectors are accepted as-is,
    and callers check `is_normalized()` before trusting probabilities.
    """

    def __init__(self, amplitudes: Iterable[complex]):
        data = np.array(amplitudes if isinstance(amplitudes, np.ndarray)
                        else list(amplitudes), dtype=np.complex128)
        if data.ndim != 1:
            raise ValueError(f"Expected a 1-D amplitude array, got shape {data.shape}")
        if not is_power_of_two(len(data)):
            raise NotPowerOfTwoError(len(data))
        data.setflags(write=False)
        self._data = data

    @property
    def amplitudes(self) -> np.ndarray:
        return self._data

    @classmethod
    def from_qubits(cls, *qubits: Qubit | Sequence[Qubit]) -> StateVector:
        """Full tensor product of independent qubits, first qubit most significant."""
        if len(qubits) == 1 and not isinstance(qubits[0], QuantumState):
            qubits = tuple(qubits[0])
        if not qubits:
            raise ValueError("At least one qubit is required")
        return cls(reduce(np.kron, (q.amplitudes for q in qubits)))

    @classmethod
    def tensor(cls, a: QuantumState, b: QuantumState) -> StateVector:
        """Tensor product of two registers; a's qubits become the high block."""
        return cls(np.kron(a.amplitudes, b.amplitudes))

    @classmethod
    def basis_vector(cls, amp_index: int, num_qubits: int) -> StateVector:
        """Classical state: amplitude 1 at amp_index, 0 elsewhere."""
        basis = ComputationalBasis(amp_index, num_qubits)
        data = np.zeros(1 << num_qubits, dtype=np.complex128)
        data[basis.amp_index] = 1.0 + 0.0j
        return cls(data)

    @classmethod
    def from_initial_states(cls, initial_states: list[int]) -> StateVector:
        """Create a classical state from per-qubit values, e.g. [0, 1, 0] -> |010>."""
        basis = ComputationalBasis.from_labels([bool(s) for s in initial_states])
        return cls.basis_vector(basis.amp_index, basis.num_qubits)

    @classmethod
    def zeros(cls, num_qubits: int) -> StateVector:
        """|00...0>"""
        return cls.basis_vector(0, num_qubits)

    def normalized(self) -> StateVector:
        norm = np.sqrt(self.two_norm())
        if norm < PRECISION:
            raise ValueError("Cannot normalize a zero vector")
        return StateVector(self._data / norm)

    def __repr__(self) -> str:
        return f"StateVector(num_qubits={self.num_qubits})"
