"""Simulation settings management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class SimConfig:
    """Persistent simulation settings."""
    # Seed for measurement engines built without an explicit rng or seed
    default_seed: int | None = None
    # Dense states above this width are logged as a warning
    large_state_warning_qubits: int = 24
    # Retry bound for drivers that resample unusable outcomes
    max_sampling_attempts: int = 1000

    _config_dir: Path = field(
        default_factory=lambda: Path.home() / ".unitary_sim",
        repr=False)

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def save(self):
        self._config_dir.mkdir(parents=True, exist_ok=True)
        data = {
            "default_seed": self.default_seed,
            "large_state_warning_qubits": self.large_state_warning_qubits,
            "max_sampling_attempts": self.max_sampling_attempts,
        }
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> SimConfig:
        config = cls() if config_dir is None else cls(_config_dir=Path(config_dir))
        if config.config_path.exists():
            try:
                with open(config.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for key, value in data.items():
                    if hasattr(config, key) and not key.startswith('_'):
                        setattr(config, key, value)
            except (json.JSONDecodeError, OSError):
                logger.warning("Ignoring unreadable config file: %s",
                               config.config_path, exc_info=True)
        return config
