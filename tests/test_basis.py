import pytest

from unitary_sim.engine.basis import (
    ComputationalBasis, index_to_labels, labels_to_index,
)
from unitary_sim.engine.errors import MalformedBasisError
from unitary_sim.engine.extensions import (
    bits_ceiling, from_bit_string, from_bits, is_power_of_two, to_bit_string,
    to_bits, to_bits_pad,
)


@pytest.mark.parametrize("bit_str, index", [
    ("101", 5),
    ("001", 1),
    ("1001", 9),
    ("00", 0),
])
def test_labels_are_big_endian(bit_str, index):
    basis = ComputationalBasis.from_bitstring(bit_str)
    assert basis.amp_index == index
    assert basis.num_qubits == len(bit_str)
    assert basis.labels() == from_bit_string(bit_str)
    assert str(basis) == bit_str


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
def test_round_trip_every_index(n):
    for i in range(2 ** n):
        assert labels_to_index(index_to_labels(i, n)) == i


def test_round_trip_at_sixty_qubits():
    for i in (0, 1, 2 ** 59, 2 ** 60 - 1, 123456789012345):
        labels = index_to_labels(i, 60)
        assert len(labels) == 60
        assert labels_to_index(labels) == i


def test_more_than_sixty_qubits_rejected():
    with pytest.raises(MalformedBasisError):
        ComputationalBasis.from_labels([False] * 61)
    with pytest.raises(MalformedBasisError):
        ComputationalBasis(0, 61)


def test_index_must_fit_qubit_count():
    with pytest.raises(MalformedBasisError):
        ComputationalBasis(4, 2)
    with pytest.raises(MalformedBasisError):
        ComputationalBasis(-1, 2)


def test_bad_bitstring_rejected():
    with pytest.raises(MalformedBasisError):
        ComputationalBasis.from_bitstring("10x")


def test_coerce_accepts_strings_and_sequences():
    expected = ComputationalBasis(6, 3)
    assert ComputationalBasis.coerce("110") == expected
    assert ComputationalBasis.coerce([True, True, False]) == expected
    assert ComputationalBasis.coerce(expected) is expected


def test_bit_helpers():
    assert to_bits(0) == [False]
    assert to_bits(6) == [True, True, False]
    assert to_bits_pad(1, 4) == [False, False, False, True]
    assert to_bits_pad(0, 3) == [False, False, False]
    assert from_bits([True, False, True, True]) == 11
    assert to_bit_string([True, False]) == "10"
    with pytest.raises(ValueError):
        to_bits_pad(8, 3)
    with pytest.raises(ValueError):
        to_bits(-1)


def test_power_of_two_and_bits_ceiling():
    assert [n for n in range(20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]
    assert bits_ceiling(2) == 1
    assert bits_ceiling(3) == 2
    assert bits_ceiling(4) == 2
    assert bits_ceiling(21) == 5
