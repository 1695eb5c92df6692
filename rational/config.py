"""TOML configuration for overflow policy and logging.

Example ``rational.toml``::

    [rational]
    overflow = "wrap"
    int_bits = 64
    log_level = "debug"
"""
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .log import setup_logging
from .rational import IntegerLike, Rational

logger = logging.getLogger(__name__)

OVERFLOW_POLICIES = ("widen", "wrap")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class RationalConfig:
    overflow: str = "widen"
    int_bits: int = 64
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.overflow not in OVERFLOW_POLICIES:
            raise ValueError(f"overflow must be one of {OVERFLOW_POLICIES}, got {self.overflow!r}")
        if isinstance(self.int_bits, bool) or not isinstance(self.int_bits, int):
            raise ValueError(f"int_bits must be an integer, got {self.int_bits!r}")
        if self.int_bits < 2:
            raise ValueError("int_bits must be >= 2")
        level = str(self.log_level).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        object.__setattr__(self, "log_level", level)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RationalConfig":
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**values)

    @property
    def effective_int_bits(self) -> Optional[int]:
        """Width passed to :class:`Rational`; ``None`` when widening."""
        if self.overflow == "wrap":
            return self.int_bits
        return None

    def apply(self) -> logging.Logger:
        return setup_logging(self.log_level)

    def from_int(self, numerator: IntegerLike) -> Rational:
        return Rational.from_int(numerator, int_bits=self.effective_int_bits)

    def new(self, numerator: IntegerLike, denominator: IntegerLike) -> Rational:
        return Rational.new(numerator, denominator, int_bits=self.effective_int_bits)

    def parse(self, text: str) -> Rational:
        return Rational.parse(text, int_bits=self.effective_int_bits)


def load_config(path: Union[str, Path]) -> RationalConfig:
    """Read the ``[rational]`` table of a TOML file."""
    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with config_path.open("rb") as fh:
        data = tomllib.load(fh)
    config = RationalConfig.from_mapping(data.get("rational", {}))
    logger.debug("loaded %s from %s", config, config_path)
    return config


__all__ = ["RationalConfig", "load_config", "OVERFLOW_POLICIES", "LOG_LEVELS"]
