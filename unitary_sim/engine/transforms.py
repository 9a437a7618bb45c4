"""Unitary transforms acting on quantum states.

Every transform is an immutable value object sharing one contract:
`transform(state)` returns a new state of the same dimension,
`inverse()` and `pow(exponent)` return new transforms, and `num_gates`
counts the primitive operations the transform stands for.

Small transforms are lifted into larger state spaces by
`ControlledTransform` (adds a control qubit) and `PartialTransform`
(applies to an arbitrary subset of qubit indexes), and chained with
`CompositeTransform`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from .errors import DimensionMismatchError, NotPowerOfTwoError, SingularTransformError
from .extensions import PRECISION, is_power_of_two
from .state_vector import QuantumState, Qubit, StateVector


class UnitaryTransform(ABC):
    """Abstract base for a linear operator on a 2^n amplitude vector."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """2^num_qubits"""

    @property
    def num_qubits(self) -> int:
        return self.dimension.bit_length() - 1

    @property
    @abstractmethod
    def num_gates(self) -> int:
        """Number of primitive gates it takes to represent this transform."""

    @abstractmethod
    def transform(self, state: QuantumState) -> QuantumState:
        ...

    @abstractmethod
    def inverse(self) -> UnitaryTransform:
        ...

    def pow(self, exponent: int) -> UnitaryTransform:
        """Repeated application. Subclasses override this with shortcuts."""
        if exponent < 0:
            return self.inverse().pow(-exponent)
        if exponent == 0:
            return IdentityTransform(self.num_qubits)
        if exponent == 1:
            return self
        return CompositeTransform([self] * exponent)

    def to_matrix(self) -> np.ndarray:
        """Dense matrix whose column j is the image of basis vector |j>."""
        columns = [self.transform(StateVector.basis_vector(j, self.num_qubits)).amplitudes
                   for j in range(self.dimension)]
        return np.column_stack(columns)

    def _check_input(self, state: QuantumState):
        if state.dimension != self.dimension:
            raise DimensionMismatchError(self.dimension, state.dimension)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(num_qubits={self.num_qubits}, "
                f"num_gates={self.num_gates})")


@dataclass(frozen=True, repr=False)
class Gate(UnitaryTransform):
    """A single-qubit gate [[a, b], [c, d]]. Unitarity is not enforced."""
    a: complex
    b: complex
    c: complex
    d: complex

    def __post_init__(self):
        for name in ("a", "b", "c", "d"):
            object.__setattr__(self, name, complex(getattr(self, name)))

    @property
    def dimension(self) -> int:
        return 2

    @property
    def num_qubits(self) -> int:
        return 1

    @property
    def num_gates(self) -> int:
        return 1

    @property
    def determinant(self) -> complex:
        return self.a * self.d - self.b * self.c

    def scale(self, factor: complex) -> Gate:
        return Gate(self.a * factor, self.b * factor, self.c * factor, self.d * factor)

    def transform(self, state: QuantumState) -> Qubit:
        self._check_input(state)
        zero, one = state.amplitudes
        return Qubit(zero * self.a + one * self.b, zero * self.c + one * self.d)

    def inverse(self) -> Gate:
        # Conjugate transpose scaled by 1/|det|; only a true inverse for
        # unitary (or magnitude-normalized) matrices.
        det = abs(self.determinant)
        if det < PRECISION:
            raise SingularTransformError(f"Gate is singular (|det| = {det:.3g}): {self!r}")
        return Gate(
            self.a.conjugate(), self.c.conjugate(),
            self.b.conjugate(), self.d.conjugate(),
        ).scale(1 / det)

    def to_matrix(self) -> np.ndarray:
        return np.array([[self.a, self.b],
                         [self.c, self.d]], dtype=np.complex128)

    def __repr__(self) -> str:
        return f"Gate([[{self.a}, {self.b}], [{self.c}, {self.d}]])"


class ControlledTransform(UnitaryTransform):
    """Adds one control qubit (the most significant) to an inner transform.

    The half of the amplitude vector with the control at 0 passes through
    unchanged; the half with the control at 1 goes through the inner transform.
    """

    def __init__(self, inner: UnitaryTransform):
        self._inner = inner

    @property
    def inner(self) -> UnitaryTransform:
        return self._inner

    @property
    def dimension(self) -> int:
        return 2 * self._inner.dimension

    @property
    def num_gates(self) -> int:
        return self._inner.num_gates

    def transform(self, state: QuantumState) -> StateVector:
        self._check_input(state)
        half = self._inner.dimension
        amps = state.amplitudes
        transformed = self._inner.transform(StateVector(amps[half:]))
        return StateVector(np.concatenate([amps[:half], transformed.amplitudes]))

    def inverse(self) -> ControlledTransform:
        return ControlledTransform(self._inner.inverse())

    def pow(self, exponent: int) -> UnitaryTransform:
        return ControlledTransform(self._inner.pow(exponent))


class IdentityTransform(UnitaryTransform):
    """Does nothing to n qubits; costs no gates."""

    def __init__(self, num_qubits: int):
        if num_qubits < 0:
            raise ValueError(f"num_qubits must be >= 0, got {num_qubits}")
        self._num_qubits = num_qubits

    @property
    def dimension(self) -> int:
        return 1 << self._num_qubits

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def num_gates(self) -> int:
        return 0

    def transform(self, state: QuantumState) -> QuantumState:
        self._check_input(state)
        return state

    def inverse(self) -> IdentityTransform:
        return self

    def pow(self, exponent: int) -> IdentityTransform:
        return self

    def to_matrix(self) -> np.ndarray:
        return np.eye(self.dimension, dtype=np.complex128)


class MatrixGate(UnitaryTransform):
    """A dense square matrix standing in for `num_gates` primitive gates.

    `pow_func`, when given, computes `self.pow(exponent)` directly (for
    example by powering the underlying classical function) instead of
    chaining `exponent` copies.
    """

    def __init__(self, elements, num_gates: int,
                 pow_func: Callable[[int], UnitaryTransform] | None = None):
        matrix = np.array(elements, dtype=np.complex128)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise DimensionMismatchError(
                matrix.shape[0], matrix.shape[-1], what="square matrix side")
        if not is_power_of_two(matrix.shape[0]):
            raise NotPowerOfTwoError(matrix.shape[0])
        matrix.setflags(write=False)
        self._matrix = matrix
        self._num_gates = num_gates
        self._pow_func = pow_func

    @property
    def dimension(self) -> int:
        return self._matrix.shape[0]

    @property
    def num_gates(self) -> int:
        return self._num_gates

    def transform(self, state: QuantumState) -> StateVector:
        self._check_input(state)
        return StateVector(self._matrix @ state.amplitudes)

    def inverse(self) -> MatrixGate:
        return MatrixGate(np.linalg.inv(self._matrix), self._num_gates)

    def pow(self, exponent: int) -> UnitaryTransform:
        if exponent == 1 or self._pow_func is None:
            return super().pow(exponent)
        return self._pow_func(exponent)

    def to_matrix(self) -> np.ndarray:
        return self._matrix


class PartialTransform(UnitaryTransform):
    """Applies a k-qubit transform to chosen qubit indexes of an n-qubit state.

    For every basis state of the full space, the labels at the target
    indexes select an input basis of the inner transform; its output
    amplitudes are written back over those labels and summed into the
    destination. This is the contraction of the inner transform's
    2^k x 2^k matrix with the target axes of the state tensor, which is
    O(2^n * 2^k) and never builds the 2^n x 2^n matrix.
    """

    def __init__(self, num_qubits: int, inner: UnitaryTransform,
                 target_qubits: Sequence[int]):
        target_qubits = tuple(target_qubits)
        if inner.dimension != 1 << len(target_qubits):
            raise DimensionMismatchError(
                1 << len(target_qubits), inner.dimension, what="inner transform")
        if len(target_qubits) > num_qubits:
            raise DimensionMismatchError(
                1 << num_qubits, inner.dimension, what="embedding space")
        for q in target_qubits:
            if q < 0 or q >= num_qubits:
                raise ValueError(f"Qubit index {q} out of range [0, {num_qubits - 1}]")
        if len(set(target_qubits)) != len(target_qubits):
            raise ValueError(f"Target qubits must be distinct, got {list(target_qubits)}")

        self._num_qubits = num_qubits
        self._inner = inner
        self._targets = target_qubits
        self._inner_matrix: np.ndarray | None = None

    @property
    def inner(self) -> UnitaryTransform:
        return self._inner

    @property
    def target_qubits(self) -> tuple[int, ...]:
        return self._targets

    @property
    def dimension(self) -> int:
        return 1 << self._num_qubits

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def num_gates(self) -> int:
        return self._inner.num_gates

    def _sub_matrix(self) -> np.ndarray:
        # Computed once; the inner transform is immutable.
        if self._inner_matrix is None:
            self._inner_matrix = self._inner.to_matrix()
        return self._inner_matrix

    def transform(self, state: QuantumState) -> StateVector:
        self._check_input(state)
        n = self._num_qubits
        k = len(self._targets)
        if k == 0:
            return StateVector(self._sub_matrix()[0, 0] * state.amplitudes)

        # Reshape state to (2, 2, ..., 2) tensor with n axes
        state_tensor = state.amplitudes.reshape([2] * n)

        # Reshape gate to (2, 2, ..., 2) tensor with 2k axes
        gate_tensor = self._sub_matrix().reshape([2] * (2 * k))

        # Contract: input axes of gate (k..2k-1) with target axes of state
        input_axes = list(range(k, 2 * k))
        result = np.tensordot(gate_tensor, state_tensor,
                              axes=(input_axes, list(self._targets)))

        # Result has target axes moved to front; move them back in place
        result = np.moveaxis(result, list(range(k)), list(self._targets))
        return StateVector(result.reshape(1 << n))

    def inverse(self) -> PartialTransform:
        return PartialTransform(self._num_qubits, self._inner.inverse(), self._targets)

    def pow(self, exponent: int) -> PartialTransform:
        return PartialTransform(self._num_qubits, self._inner.pow(exponent), self._targets)


class CompositeTransform(UnitaryTransform):
    """An ordered sequence of same-sized transforms, applied first to last.

    The `apply*` methods return a new composite with one more step; the
    receiver is never modified.
    """

    def __init__(self, transforms: Sequence[UnitaryTransform] | UnitaryTransform):
        if isinstance(transforms, UnitaryTransform):
            transforms = [transforms]
        transforms = tuple(transforms)
        if not transforms:
            raise ValueError("A composite transform needs at least one transform")
        dimension = transforms[0].dimension
        for t in transforms[1:]:
            if t.dimension != dimension:
                raise DimensionMismatchError(dimension, t.dimension, what="transform")
        self._transforms = transforms
        self._dimension = dimension
        self._num_gates = sum(t.num_gates for t in transforms)

    @property
    def transforms(self) -> tuple[UnitaryTransform, ...]:
        return self._transforms

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def num_gates(self) -> int:
        return self._num_gates

    def __len__(self) -> int:
        return len(self._transforms)

    def transform(self, state: QuantumState) -> QuantumState:
        self._check_input(state)
        for t in self._transforms:
            state = t.transform(state)
        return state

    def inverse(self) -> CompositeTransform:
        return CompositeTransform([t.inverse() for t in reversed(self._transforms)])

    def pow(self, exponent: int) -> UnitaryTransform:
        if exponent <= 1:
            return super().pow(exponent)
        return CompositeTransform(self._transforms * exponent)

    # --- Fluent construction ---

    def apply(self, transform: UnitaryTransform, exponent: int = 1) -> CompositeTransform:
        """Appends a full-width transform, raised to `exponent` first."""
        return CompositeTransform(self._transforms + (transform.pow(exponent),))

    def apply_gate(self, gate: Gate, qubit_index: int,
                   exponent: int = 1) -> CompositeTransform:
        """Appends a single-qubit gate acting on `qubit_index`."""
        return self.apply_to(gate, [qubit_index], exponent)

    def apply_to(self, transform: UnitaryTransform, qubit_indexes: Sequence[int],
                 exponent: int = 1) -> CompositeTransform:
        """Appends a transform acting on the given qubit indexes, in order."""
        partial = PartialTransform(self.num_qubits, transform, qubit_indexes)
        return self.apply(partial, exponent)

    def apply_controlled(self, transform: UnitaryTransform, control_index: int,
                         target_indexes: int | Sequence[int],
                         exponent: int = 1) -> CompositeTransform:
        """Appends `transform` on the targets, conditioned on the control qubit."""
        if isinstance(target_indexes, int):
            target_indexes = [target_indexes]
        return self.apply_to(ControlledTransform(transform),
                             [control_index, *target_indexes], exponent)
