import numpy as np
import pytest

from unitary_sim.engine.errors import MalformedBasisError, NotPowerOfTwoError
from unitary_sim.engine.extensions import ONE_OVER_ROOT_TWO, is_normalized, normalize
from unitary_sim.engine.state_vector import Qubit, Register, StateVector

PLUS = Qubit(ONE_OVER_ROOT_TWO, ONE_OVER_ROOT_TWO)


def test_normalize():
    res = normalize([1, 1])
    np.testing.assert_allclose(res, [ONE_OVER_ROOT_TWO, ONE_OVER_ROOT_TWO], atol=1e-12)


def test_is_normalized_tolerance():
    assert is_normalized([0.6, 0.8j])
    assert not is_normalized([1, 1])
    assert is_normalized([1 + 1e-10, 0])
    state = StateVector([1.001, 0])
    assert not state.is_normalized()
    assert state.is_normalized(tol=1e-2)


def test_qubit_basics():
    q = Qubit(0.6, 0.8j)
    assert q.dimension == 2
    assert q.num_qubits == 1
    assert q.get_amplitude("1") == 0.8j
    assert q.true_chance(0) == pytest.approx(0.64)
    assert q.chance((0, False)) == pytest.approx(0.36)
    assert q.is_normalized()
    assert list(q) == [0.6, 0.8j]
    with pytest.raises(ValueError):
        q.true_chance(1)


def test_tensor_of_qubits_puts_first_qubit_high():
    state = StateVector.from_qubits(Qubit.CLASSIC_ONE, Qubit.CLASSIC_ZERO, Qubit.CLASSIC_ONE)
    assert state.num_qubits == 3
    assert state.get_amplitude("101") == 1
    assert state.two_norm() == pytest.approx(1)


def test_from_qubits_accepts_a_list():
    a = StateVector.from_qubits([PLUS, Qubit.CLASSIC_ZERO])
    b = StateVector.from_qubits(PLUS, Qubit.CLASSIC_ZERO)
    np.testing.assert_array_equal(a.amplitudes, b.amplitudes)


def test_register_concatenation():
    a = StateVector.from_qubits(PLUS)
    b = StateVector.basis_vector(2, 2)
    combined = StateVector.tensor(a, b)
    assert combined.num_qubits == 3
    for ia in range(2):
        for ib in range(4):
            expected = a.amplitudes[ia] * b.amplitudes[ib]
            assert combined.amplitudes[ia * 4 + ib] == pytest.approx(expected)


def test_basis_vector_and_initial_states():
    state = StateVector.basis_vector(5, 3)
    assert state.get_amplitude([True, False, True]) == 1
    assert state.two_norm() == 1
    np.testing.assert_array_equal(
        StateVector.from_initial_states([1, 0, 1]).amplitudes, state.amplitudes)


def test_rejects_non_power_of_two():
    with pytest.raises(NotPowerOfTwoError):
        StateVector([1, 0, 0])


def test_unnormalized_input_kept_as_is():
    state = StateVector([3, 4])
    assert not state.is_normalized()
    np.testing.assert_array_equal(state.amplitudes, [3, 4])
    np.testing.assert_allclose(state.normalized().amplitudes, [0.6, 0.8])


def test_state_is_immutable():
    data = np.array([1, 0, 0, 0], dtype=np.complex128)
    state = StateVector(data)
    data[0] = 0
    assert state.get_amplitude("00") == 1
    with pytest.raises(ValueError):
        state.amplitudes[0] = 5


def test_amplitude_lookup_checks_qubit_count():
    state = StateVector.zeros(3)
    with pytest.raises(MalformedBasisError):
        state.get_amplitude("00")


def test_true_chance_and_joint_chance():
    state = StateVector(np.sqrt([0.1, 0.2, 0.3, 0.4]))
    assert state.true_chance(0) == pytest.approx(0.7)
    assert state.true_chance(1) == pytest.approx(0.6)
    assert state.chance((0, True), (1, False)) == pytest.approx(0.3)
    assert state.chance((0, False), (1, True)) == pytest.approx(0.2)
    assert state.chance() == pytest.approx(1.0)
    with pytest.raises(ValueError):
        state.true_chance(2)


def test_collapse_qubit_projects_without_renormalizing():
    state = StateVector(np.full(4, 0.5))
    collapsed = state.collapse_qubit(0, True)
    np.testing.assert_allclose(collapsed.amplitudes, [0, 0, 0.5, 0.5])
    assert collapsed.two_norm() == pytest.approx(0.5)
    # the source is untouched
    np.testing.assert_allclose(state.amplitudes, np.full(4, 0.5))


def test_distribution_over_register():
    state = StateVector(np.sqrt([0.1, 0.2, 0.3, 0.4]))
    np.testing.assert_allclose(state.get_distribution(Register("r", (0, 1))),
                               [0.1, 0.2, 0.3, 0.4])
    # reversed qubit order swaps the significance
    np.testing.assert_allclose(state.get_distribution(Register("r", (1, 0))),
                               [0.1, 0.3, 0.2, 0.4])
    np.testing.assert_allclose(state.get_distribution(Register("r", (1,))), [0.4, 0.6])
    with pytest.raises(ValueError):
        state.get_distribution(Register("r", (2,)))


def test_render_default_registers():
    state = StateVector.from_qubits(Qubit.CLASSIC_ONE, Qubit.CLASSIC_ZERO)
    assert state.render() == "+1.00|1>|0>"
    assert str(state) == "+1.00|1>|0>"


def test_render_signs_and_imaginary_parts():
    state = StateVector([0.5, -0.5, 0.5j, 1e-10])
    assert state.render(Register("all", (0, 1))) == "+0.50|0>-0.50|1>+0.00,+0.50|2>"


def test_render_grouped_registers():
    state = StateVector.tensor(StateVector.zeros(2), StateVector.basis_vector(1, 2))
    work, phase = Register.span("work", 2, 2), Register.span("phase", 0, 2)
    assert state.render(work, phase) == "+1.00|1>|0>"
