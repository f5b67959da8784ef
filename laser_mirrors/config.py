"""Tunable parameters for the beam simulation."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Callable, Dict, Mapping, Optional, Tuple

MAX_BOUNCES_ENV_VAR = "LASER_MIRRORS_MAX_BOUNCES"
RAY_LENGTH_ENV_VAR = "LASER_MIRRORS_RAY_LENGTH"
MIN_HIT_DISTANCE_ENV_VAR = "LASER_MIRRORS_MIN_HIT_DISTANCE"
TARGET_TOLERANCE_ENV_VAR = "LASER_MIRRORS_TARGET_TOLERANCE"
CHARGE_MS_ENV_VAR = "LASER_MIRRORS_CHARGE_MS"


@dataclass(frozen=True)
class PuzzleConfig:
    """Simulation constants.

    The distance thresholds were tuned by hand for a play area of a few hundred
    pixels. They only need to stay small and positive; nothing relies on their
    exact magnitude.
    """

    max_bounces: int = 20
    ray_length: float = 2000.0
    min_hit_distance: float = 5.0
    target_tolerance: float = 5.0
    parallel_epsilon: float = 1e-9
    charge_duration_ms: float = 2000.0
    emitter_offset: float = 20.0
    mirror_half_length: float = 40.0

    def validate(self) -> "PuzzleConfig":
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces must not be negative: {self.max_bounces}")
        for name in (
            "ray_length",
            "min_hit_distance",
            "parallel_epsilon",
            "charge_duration_ms",
            "mirror_half_length",
        ):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"{name} must be positive: {value}")
        if self.target_tolerance < 0:
            raise ValueError(
                f"target_tolerance must not be negative: {self.target_tolerance}"
            )
        return self

    def as_dict(self) -> Dict[str, float]:
        return {item.name: getattr(self, item.name) for item in fields(self)}

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PuzzleConfig":
        """Build a configuration, applying overrides from environment variables."""

        environ = os.environ if environ is None else environ
        overrides: Dict[str, object] = {}
        for env_var, (name, parse) in _ENV_OVERRIDES.items():
            raw = environ.get(env_var)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[name] = parse(raw.strip())
            except ValueError as exc:
                raise ValueError(f"Invalid value for {env_var}: {raw!r}") from exc
        return replace(cls(), **overrides).validate()


_ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], object]]] = {
    MAX_BOUNCES_ENV_VAR: ("max_bounces", int),
    RAY_LENGTH_ENV_VAR: ("ray_length", float),
    MIN_HIT_DISTANCE_ENV_VAR: ("min_hit_distance", float),
    TARGET_TOLERANCE_ENV_VAR: ("target_tolerance", float),
    CHARGE_MS_ENV_VAR: ("charge_duration_ms", float),
}


DEFAULT_CONFIG = PuzzleConfig()


__all__ = [
    "CHARGE_MS_ENV_VAR",
    "DEFAULT_CONFIG",
    "MAX_BOUNCES_ENV_VAR",
    "MIN_HIT_DISTANCE_ENV_VAR",
    "PuzzleConfig",
    "RAY_LENGTH_ENV_VAR",
    "TARGET_TOLERANCE_ENV_VAR",
]
