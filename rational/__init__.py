"""Exact rational numbers with NaN propagation."""
import logging

from .config import RationalConfig, load_config
from .log import setup_logging
from .rational import (
    InvalidDenominator,
    NaN,
    Rational,
    as_rational_array,
    gcd,
    isnan,
    nans,
    parse,
    rationalize,
    zeros,
    zeros_like,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Rational",
    "InvalidDenominator",
    "NaN",
    "gcd",
    "parse",
    "rationalize",
    "isnan",
    "as_rational_array",
    "zeros",
    "zeros_like",
    "nans",
    "RationalConfig",
    "load_config",
    "setup_logging",
]
