"""Numeric and bit-twiddling helpers shared by the whole engine."""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

PRECISION = 1e-8

ONE_OVER_ROOT_TWO = complex(1 / np.sqrt(2), 0)

# Indexes are kept within a signed 64-bit integer.
MAX_QUBITS = 60


# --- Complex vectors ---

def _as_array(amplitudes: Iterable[complex]) -> np.ndarray:
    if isinstance(amplitudes, np.ndarray):
        return amplitudes.astype(np.complex128, copy=False)
    return np.array(list(amplitudes), dtype=np.complex128)


def two_norm(amplitudes: Iterable[complex]) -> float:
    """Sum of squared magnitudes."""
    return float(np.sum(np.abs(_as_array(amplitudes)) ** 2))


def normalize(amplitudes: Iterable[complex]) -> np.ndarray:
    arr = _as_array(amplitudes)
    return arr / np.sqrt(two_norm(arr))


def is_normalized(amplitudes: Iterable[complex], tol: float = PRECISION) -> bool:
    return abs(two_norm(amplitudes) - 1.0) < tol


# --- Integers and bits ---

def is_power_of_two(num: int) -> bool:
    return num > 0 and (num & (num - 1)) == 0


def from_bits(bits: Sequence[bool]) -> int:
    """Big-endian: bits[0] is the most significant bit."""
    total = 0
    for bit in bits:
        total = (total << 1) | int(bool(bit))
    return total


def to_bits(n: int) -> list[bool]:
    """Minimal big-endian bit list for a non-negative integer (0 -> [False])."""
    if n < 0:
        raise ValueError(f"Cannot convert negative number {n} to bits")
    if n < 2:
        return [n == 1]
    return [c == "1" for c in format(n, "b")]


def to_bits_pad(n: int, pad_length: int) -> list[bool]:
    """Big-endian bits of n, left-padded with False to exactly pad_length."""
    if n == 0:
        return [False] * pad_length
    bits = to_bits(n)
    if len(bits) > pad_length:
        raise ValueError(f"{n} does not fit in {pad_length} bits")
    return [False] * (pad_length - len(bits)) + bits


def bits_ceiling(n: int) -> int:
    """Minimum number of bits required to index n distinct values."""
    if n < 1:
        raise ValueError(f"bits_ceiling requires n >= 1, got {n}")
    return (n - 1).bit_length()


def to_bit_string(bits: Iterable[bool]) -> str:
    return "".join("1" if bit else "0" for bit in bits)


def from_bit_string(bit_str: str) -> list[bool]:
    if any(c not in "01" for c in bit_str):
        raise ValueError(f"Not a bit string: {bit_str!r}")
    return [c == "1" for c in bit_str]
