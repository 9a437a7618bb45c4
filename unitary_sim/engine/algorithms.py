"""Quantum algorithm constructions built on the transform algebra.

These factories only use the public contract of the engine: gates
applied at indexes, controlled gates, composition, inversion, powers,
and register sampling through `MeasurementEngine`.
"""

from __future__ import annotations

import logging
import math
from fractions import Fraction
from typing import Callable, Sequence

import numpy as np

from unitary_sim.core.config import SimConfig

from . import gates
from .errors import UnsupportedTransformError
from .extensions import ONE_OVER_ROOT_TWO, bits_ceiling
from .measurement import MeasurementEngine
from .state_vector import Register, StateVector
from .transforms import (
    CompositeTransform, Gate, IdentityTransform, MatrixGate, UnitaryTransform,
)

logger = logging.getLogger(__name__)


class Fourier:
    """Quantum Fourier transform circuits."""

    @staticmethod
    def fourier_transform(num_qubits: int, scale: bool = True,
                          swap: bool = True) -> CompositeTransform:
        """QFT over qubits 0..n-1, qubit 0 most significant.

        With `scale`, every qubit gets an extra 1/sqrt(2) so the result is
        the classical DFT normalized by 1/N (not unitary). With `swap`, the
        output qubit order is reversed using three controlled NOTs per pair.
        Without either, the gate count is n(n+1)/2.
        """
        fourier = CompositeTransform(IdentityTransform(num_qubits))
        for bit in range(num_qubits):
            fourier = fourier.apply_gate(gates.H, bit)
            # R_k controlled by the qubit k-1 places below the target
            for k in range(2, num_qubits - bit + 1):
                fourier = fourier.apply_controlled(gates.phase(k), bit + k - 1, bit)

        if scale:
            scale_gate = gates.I.scale(ONE_OVER_ROOT_TWO)
            for bit in range(num_qubits):
                fourier = fourier.apply_gate(scale_gate, bit)

        if swap:
            for bit in range(num_qubits // 2):
                fourier = Fourier.swap(fourier, bit, num_qubits - bit - 1)

        return fourier

    @staticmethod
    def swap(circuit: CompositeTransform, a: int, b: int) -> CompositeTransform:
        """Swaps two qubits with three controlled NOTs."""
        return (circuit
                .apply_controlled(gates.NOT, a, b)
                .apply_controlled(gates.NOT, b, a)
                .apply_controlled(gates.NOT, a, b))

    @staticmethod
    def transform_amplitudes(amplitudes: Sequence[complex]) -> np.ndarray:
        """Scaled, swapped QFT of a raw amplitude array."""
        state = StateVector(amplitudes)
        return Fourier.fourier_transform(state.num_qubits).transform(state).amplitudes


class PhaseEstimator:
    """Phase estimation for single-qubit gates.

    Layout: qubits 0..t-1 are the t register (qubit 0 is the most
    significant bit of the estimated phase), the eigenvector follows.
    """

    @staticmethod
    def _require_gate(u: UnitaryTransform):
        if not isinstance(u, Gate):
            raise UnsupportedTransformError(
                f"Phase estimation is only implemented for elementary gates, "
                f"got {type(u).__name__}")

    @staticmethod
    def gate_phase_estimator_start(u: UnitaryTransform, t: int) -> CompositeTransform:
        """Hadamards on the t register, then t-qubit i controls u^(2^(t-1-i))."""
        PhaseEstimator._require_gate(u)
        total = t + u.num_qubits
        eigen_qubits = list(range(t, total))
        estimator = CompositeTransform(IdentityTransform(total))
        for ti in range(t):
            estimator = estimator.apply_gate(gates.H, ti)
            estimator = estimator.apply_controlled(
                u, ti, eigen_qubits, exponent=2 ** (t - 1 - ti))
        return estimator

    @staticmethod
    def gate_phase_estimator(u: UnitaryTransform, t: int) -> CompositeTransform:
        """Full estimator: the start followed by the inverse QFT on the t register."""
        start = PhaseEstimator.gate_phase_estimator_start(u, t)
        inverse_qft = Fourier.fourier_transform(t, scale=False).inverse()
        return start.apply_to(inverse_qft, list(range(t)))


class Grover:
    """Amplitude-amplification search over a boolean table."""

    @staticmethod
    def oracle(black_box: Sequence[bool]) -> MatrixGate:
        """|x> -> (-1)^f(x) |x>"""
        diagonal = [-1 if marked else 1 for marked in black_box]
        return MatrixGate(np.diag(diagonal), 1)

    @staticmethod
    def diffusion_operator(black_box: Sequence[bool]) -> CompositeTransform:
        """One Grover iteration: oracle, then inversion about the mean."""
        n = bits_ceiling(len(black_box))
        grover = CompositeTransform(Grover.oracle(black_box))
        for i in range(n):
            grover = grover.apply_gate(gates.H, i)

        # Phase flip every basis state except |0>
        diagonal = -np.ones(len(black_box))
        diagonal[0] = 1
        grover = grover.apply(MatrixGate(np.diag(diagonal), n))

        for i in range(n):
            grover = grover.apply_gate(gates.H, i)
        return grover

    @staticmethod
    def iteration_count(num_states: int, num_marked: int) -> int:
        if num_marked == 0:
            return 0
        theta = math.asin(math.sqrt(num_marked / num_states))
        return int(math.pi / (4 * theta))

    @staticmethod
    def grover_transform(black_box: Sequence[bool]) -> CompositeTransform:
        """Uniform superposition followed by the optimal number of iterations."""
        if len(black_box) < 2:
            raise ValueError("Search space needs at least two items")
        n = bits_ceiling(len(black_box))
        result = CompositeTransform(IdentityTransform(n))
        for i in range(n):
            result = result.apply_gate(gates.H, i)
        iterations = Grover.iteration_count(len(black_box), sum(map(bool, black_box)))
        if iterations:
            result = result.apply(Grover.diffusion_operator(black_box), exponent=iterations)
        return result

    @staticmethod
    def find(black_box: Sequence[bool], rng: np.random.Generator | None = None,
             max_attempts: int | None = None,
             config: SimConfig | None = None) -> int:
        """Samples until an input with f(x) = True comes out."""
        if not any(black_box):
            raise ValueError("Black box has no marked inputs")
        config = config or SimConfig()
        max_attempts = max_attempts or config.max_sampling_attempts

        n = bits_ceiling(len(black_box))
        reg = Register.span("x", 0, n)
        sim = MeasurementEngine(Grover.grover_transform(black_box), reg,
                                rng=rng, config=config)
        initial = StateVector.zeros(n)
        for attempt in range(1, max_attempts + 1):
            value = sim.simulate(initial)["x"]
            if black_box[value]:
                return value
            logger.debug("Grover attempt %d sampled unmarked %d", attempt, value)
        raise RuntimeError(f"No marked input found after {max_attempts} attempts")


class NumberTheoryTransforms:
    """Classical reversible functions as permutation-matrix transforms."""

    @staticmethod
    def from_function(func: Callable[[int], int], num_bits: int,
                      pow_func: Callable[[int], UnitaryTransform] | None = None) -> MatrixGate:
        """|i> -> |func(i)>, charged as O(L^3) primitive gates."""
        dimension = 2 ** num_bits
        elements = np.zeros((dimension, dimension), dtype=np.complex128)
        for i in range(dimension):
            out = func(i)
            if out < 0 or out >= dimension:
                raise ValueError(f"func({i}) = {out} is outside [0, {dimension})")
            elements[out, i] = 1
        return MatrixGate(elements, num_bits ** 3, pow_func)

    @staticmethod
    def mod_mult(x: int, n: int, j: int = 1) -> MatrixGate:
        """U|y> = |x^j * y mod n> for y < n; basis states y >= n are left alone."""
        if n < 2:
            raise ValueError(f"Modulus must be >= 2, got {n}")
        if math.gcd(x, n) != 1:
            raise ValueError(f"{x} and {n} must be coprime")
        num_bits = bits_ceiling(n)
        factor = pow(x, j, n)

        def mod_mult(y: int) -> int:
            return (factor * y) % n if y < n else y

        return NumberTheoryTransforms.from_function(
            mod_mult, num_bits,
            pow_func=lambda exponent: NumberTheoryTransforms.mod_mult(x, n, j * exponent))


class OrderFinding:
    """Order finding: the smallest r > 0 with x^r = 1 (mod n).

    Layout: qubits 0..t-1 hold the phase register, qubits t..t+l-1 the
    work register that starts at |1>.
    """

    @staticmethod
    def precision(n: int) -> int:
        return 2 * bits_ceiling(n) + 1

    @staticmethod
    def registers(l: int, t: int) -> tuple[Register, Register]:
        """(work register, phase register)"""
        return Register.span("work", t, l), Register.span("phase", 0, t)

    @staticmethod
    def initial_state(n: int, t: int) -> StateVector:
        return StateVector.tensor(StateVector.zeros(t),
                                  StateVector.basis_vector(1, bits_ceiling(n)))

    @staticmethod
    def start(x: int, n: int, t: int) -> CompositeTransform:
        l = bits_ceiling(n)
        work_qubits = list(range(t, t + l))
        finder = CompositeTransform(IdentityTransform(t + l))
        for i in range(t):
            finder = finder.apply_gate(gates.H, i)
        mult = NumberTheoryTransforms.mod_mult(x, n)
        for i in range(t):
            finder = finder.apply_controlled(mult, i, work_qubits, exponent=2 ** (t - 1 - i))
        return finder

    @staticmethod
    def order_finding_transform(x: int, n: int, t: int) -> CompositeTransform:
        inverse_qft = Fourier.fourier_transform(t, scale=False).inverse()
        return OrderFinding.start(x, n, t).apply_to(inverse_qft, list(range(t)))

    @staticmethod
    def find_order(x: int, n: int, t: int | None = None,
                   rng: np.random.Generator | None = None,
                   max_attempts: int | None = None,
                   config: SimConfig | None = None) -> int:
        """Samples the phase register until a denominator checks out."""
        if not 1 < x < n:
            raise ValueError(f"Need 1 < x < n, got x={x}, n={n}")
        config = config or SimConfig()
        max_attempts = max_attempts or config.max_sampling_attempts
        t = t or OrderFinding.precision(n)

        _, phase_reg = OrderFinding.registers(bits_ceiling(n), t)
        sim = MeasurementEngine(OrderFinding.order_finding_transform(x, n, t),
                                phase_reg, rng=rng, config=config)
        initial = OrderFinding.initial_state(n, t)
        for attempt in range(1, max_attempts + 1):
            value = sim.simulate(initial)[phase_reg.name]
            if value == 0:
                logger.debug("Order finding attempt %d sampled 0, retrying", attempt)
                continue
            r = Fraction(value, 2 ** t).limit_denominator(n).denominator
            if pow(x, r, n) == 1:
                logger.debug("Order of %d mod %d is %d (%d gates processed)",
                             x, n, r, sim.gates_processed)
                return r
            logger.debug("Order finding attempt %d: candidate %d rejected", attempt, r)
        raise RuntimeError(f"Order of {x} mod {n} not found after {max_attempts} attempts")
