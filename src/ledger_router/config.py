"""Routing table configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .core.constants import (
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_MAX_AGE_MS,
    DEFAULT_MAX_POINTS,
    MIN_SIMPLIFY_POINTS,
)


@dataclass(frozen=True)
class RoutingConfig:
    """Routing table configuration.

    max_age_ms: lifetime of a learned route after its last advertisement.
    max_points: point budget per exported curve.
    decimal_precision: significant digits for non-terminating amounts in output.
    """
    max_age_ms: int = DEFAULT_MAX_AGE_MS
    max_points: int = DEFAULT_MAX_POINTS
    decimal_precision: int = DEFAULT_DECIMAL_PRECISION

    def __post_init__(self) -> None:
        if self.max_age_ms <= 0:
            raise ValueError(f"max_age_ms must be > 0, got {self.max_age_ms}")
        if self.max_points < MIN_SIMPLIFY_POINTS:
            raise ValueError(f"max_points must be >= {MIN_SIMPLIFY_POINTS}, got {self.max_points}")
        if self.decimal_precision <= 0:
            raise ValueError(f"decimal_precision must be > 0, got {self.decimal_precision}")

    @classmethod
    def from_env(cls, prefix: str = "LEDGER_ROUTER_", environ: Optional[Mapping[str, str]] = None) -> "RoutingConfig":
        """Load overrides from `<prefix>MAX_AGE_MS`, `<prefix>MAX_POINTS` and
        `<prefix>DECIMAL_PRECISION`; unset variables keep their defaults."""
        env = os.environ if environ is None else environ

        def _int(name: str, default: int) -> int:
            raw = env.get(prefix + name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"{prefix + name} must be an integer, got {raw!r}") from e

        return cls(
            max_age_ms=_int("MAX_AGE_MS", DEFAULT_MAX_AGE_MS),
            max_points=_int("MAX_POINTS", DEFAULT_MAX_POINTS),
            decimal_precision=_int("DECIMAL_PRECISION", DEFAULT_DECIMAL_PRECISION),
        )


__all__ = ["RoutingConfig"]
