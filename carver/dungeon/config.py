import os
from dataclasses import dataclass
from typing import Optional

MIN_GRID_SIZE = 9
DEFAULT_GRID_SIZE = 27
DEFAULT_ROOM_ATTEMPTS = 200
DEFAULT_EXTRA_CONNECTOR_CHANCE = 0.2


class ConfigurationError(ValueError):
    """Raised when a generator is configured with values it cannot run on."""


@dataclass
class GeneratorConfig:
    grid_size: int = DEFAULT_GRID_SIZE
    room_attempts: int = DEFAULT_ROOM_ATTEMPTS
    seed: Optional[int] = None
    extra_connector_chance: float = DEFAULT_EXTRA_CONNECTOR_CHANCE

    def validate(self) -> "GeneratorConfig":
        size = self.grid_size
        if isinstance(size, bool) or not isinstance(size, int):
            raise ConfigurationError(f"grid_size must be an integer, got {size!r}")
        if size < MIN_GRID_SIZE:
            raise ConfigurationError(f"grid_size must be at least {MIN_GRID_SIZE}, got {size}")
        if size % 2 == 0:
            raise ConfigurationError(f"grid_size must be odd, got {size}")
        attempts = self.room_attempts
        if isinstance(attempts, bool) or not isinstance(attempts, int):
            raise ConfigurationError(f"room_attempts must be an integer, got {attempts!r}")
        if attempts < 1:
            raise ConfigurationError(f"room_attempts must be positive, got {attempts}")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError(f"seed must be an integer or None, got {self.seed!r}")
        chance = self.extra_connector_chance
        if isinstance(chance, bool) or not isinstance(chance, (int, float)) or not 0.0 <= chance <= 1.0:
            raise ConfigurationError(f"extra_connector_chance must be within [0, 1], got {chance!r}")
        return self

    @classmethod
    def from_env(cls, environ=None) -> "GeneratorConfig":
        """Build a config from CARVER_* environment variables, falling back to defaults.

        Values are parsed but not validated; call ``validate()`` (or hand the
        config to a generator) to reject unusable settings.
        """
        env = os.environ if environ is None else environ
        cfg = cls()
        env_map = {
            "CARVER_GRID_SIZE": ("grid_size", int),
            "CARVER_ROOM_ATTEMPTS": ("room_attempts", int),
            "CARVER_SEED": ("seed", int),
            "CARVER_EXTRA_CONNECTOR_CHANCE": ("extra_connector_chance", float),
        }
        for env_key, (attr, cast) in env_map.items():
            raw = env.get(env_key, "").strip()
            if not raw:
                continue
            try:
                setattr(cfg, attr, cast(raw))
            except ValueError as exc:
                raise ConfigurationError(f"{env_key}={raw!r} is not a valid {cast.__name__}") from exc
        return cfg


__all__ = [
    "ConfigurationError",
    "GeneratorConfig",
    "DEFAULT_GRID_SIZE",
    "DEFAULT_ROOM_ATTEMPTS",
    "DEFAULT_EXTRA_CONNECTOR_CHANCE",
    "MIN_GRID_SIZE",
]
