"""Measurement sampling for simulated quantum states."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from unitary_sim.core.config import SimConfig

from .errors import DimensionMismatchError
from .state_vector import QuantumState, Register
from .transforms import UnitaryTransform

logger = logging.getLogger(__name__)


class MeasurementEngine:
    """Runs a transform on an input state and samples one value per register.

    Each `simulate` call applies the transform exactly once and draws one
    uniform number per register; resampling unusable outcomes is up to
    the caller. `gates_processed` tallies the gate count of every run.
    """

    def __init__(self, transform: UnitaryTransform,
                 registers: Register | Sequence[Register],
                 rng: np.random.Generator | None = None,
                 seed: int | None = None,
                 config: SimConfig | None = None):
        if isinstance(registers, Register):
            registers = [registers]
        registers = tuple(registers)
        names = [reg.name for reg in registers]
        if len(set(names)) != len(names):
            raise ValueError(f"Register names must be unique, got {names}")
        for reg in registers:
            reg.check_fits(transform.num_qubits)

        self._config = config or SimConfig()
        if rng is None:
            rng = np.random.default_rng(
                seed if seed is not None else self._config.default_seed)
        self._rng = rng
        self._transform = transform
        self._registers = registers
        self._gates_processed = 0

    @property
    def transform(self) -> UnitaryTransform:
        return self._transform

    @property
    def registers(self) -> tuple[Register, ...]:
        return self._registers

    @property
    def gates_processed(self) -> int:
        return self._gates_processed

    def simulate(self, state: QuantumState) -> dict[str, int]:
        """Applies the transform once; returns {register name: sampled value}."""
        if state.dimension != self._transform.dimension:
            raise DimensionMismatchError(self._transform.dimension, state.dimension)
        if state.num_qubits > self._config.large_state_warning_qubits:
            logger.warning("Simulating %d qubits (%d amplitudes); this may be slow.",
                           state.num_qubits, state.dimension)

        result = self._transform.transform(state)

        samples: dict[str, int] = {}
        for reg in self._registers:
            probs = result.get_distribution(reg)
            samples[reg.name] = self.sample_index(probs, self._rng.random())
            logger.debug("Register '%s' sampled %d", reg.name, samples[reg.name])

        self._gates_processed += self._transform.num_gates
        return samples

    @staticmethod
    def sample_index(probs: np.ndarray, draw: float) -> int:
        """Smallest index whose cumulative probability exceeds `draw`.

        If rounding leaves the total below `draw`, the last index with
        non-zero probability is returned.
        """
        cumulative = np.cumsum(probs)
        hits = np.nonzero(cumulative > draw)[0]
        if len(hits):
            return int(hits[0])
        nonzero = np.nonzero(probs)[0]
        return int(nonzero[-1]) if len(nonzero) else len(probs) - 1
