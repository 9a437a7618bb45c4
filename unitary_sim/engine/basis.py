"""Computational basis indexing.

A basis state of n qubits is addressed either by its integer amplitude
index or by its per-qubit labels. Labels are big-endian: qubit 0 is the
most significant bit of the index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from .errors import MalformedBasisError
from .extensions import MAX_QUBITS, from_bit_string, from_bits, to_bits_pad


@dataclass(frozen=True)
class ComputationalBasis:
    """One of the 2^n classical configurations of n qubits."""
    amp_index: int
    num_qubits: int

    def __post_init__(self):
        if self.num_qubits < 0 or self.num_qubits > MAX_QUBITS:
            raise MalformedBasisError(
                f"num_qubits must be 0-{MAX_QUBITS}, got {self.num_qubits}")
        if self.amp_index < 0 or self.amp_index >= (1 << self.num_qubits):
            raise MalformedBasisError(
                f"Index {self.amp_index} out of range for {self.num_qubits} qubits")

    @classmethod
    def from_labels(cls, labels: Sequence[bool]) -> ComputationalBasis:
        if len(labels) > MAX_QUBITS:
            raise MalformedBasisError(
                f"Too many labels: {len(labels)} > {MAX_QUBITS}")
        return cls(from_bits(labels), len(labels))

    @classmethod
    def from_bitstring(cls, bit_str: str) -> ComputationalBasis:
        """'101' -> index 5 over 3 qubits."""
        try:
            labels = from_bit_string(bit_str)
        except ValueError as e:
            raise MalformedBasisError(str(e)) from e
        return cls.from_labels(labels)

    @classmethod
    def coerce(cls, basis: BasisLike) -> ComputationalBasis:
        """Accepts a basis, a bit string or a sequence of booleans."""
        if isinstance(basis, ComputationalBasis):
            return basis
        if isinstance(basis, str):
            return cls.from_bitstring(basis)
        return cls.from_labels(list(basis))

    def labels(self) -> list[bool]:
        return to_bits_pad(self.amp_index, self.num_qubits)

    def __str__(self) -> str:
        return format(self.amp_index, f"0{self.num_qubits}b") if self.num_qubits else ""


BasisLike = Union[ComputationalBasis, str, Sequence[bool]]


def index_to_labels(index: int, num_qubits: int) -> list[bool]:
    return ComputationalBasis(index, num_qubits).labels()


def labels_to_index(labels: Sequence[bool]) -> int:
    return ComputationalBasis.from_labels(labels).amp_index
