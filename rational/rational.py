"""Exact rational numbers with NaN propagation and NumPy interoperability."""
from __future__ import annotations

import logging
import numbers
import operator
import re
from fractions import Fraction
from typing import Any, Optional, Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

IntegerLike = Union[int, numbers.Integral]
RationalLike = Union["Rational", Fraction, numbers.Integral, str]

_RATIONAL_FORMAT = re.compile(
    r"""
    \A\s*
    (?:
        (?P<nan>nan)
    |
        (?P<num>[-+]?\d+)
        (?:/(?P<den>[-+]?\d+))?
    )
    \s*\Z
    """,
    re.VERBOSE | re.IGNORECASE,
)


class InvalidDenominator(ZeroDivisionError):
    """Raised when a rational number is requested with a zero denominator."""

    def __init__(self, numerator: int) -> None:
        super().__init__(f"denominator must be non-zero (numerator {numerator})")
        self.numerator = numerator


def _ensure_int(value: Any, *, name: str) -> int:
    """Convert *value* to ``int`` when it represents an integer."""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, numbers.Integral):
        return int(value)
    raise TypeError(f"{name} must be an integer, got {type(value)!r}")


def _wrap(value: int, int_bits: Optional[int]) -> int:
    """Reduce *value* into the signed two's-complement range of ``int_bits``."""
    if int_bits is None:
        return value
    half = 1 << (int_bits - 1)
    wrapped = (value + half) % (1 << int_bits) - half
    if wrapped != value:
        logger.debug("wrapped %d to %d (%d-bit)", value, wrapped, int_bits)
    return wrapped


def _power(base: int, exponent: int, int_bits: Optional[int]) -> int:
    if int_bits is None:
        return base ** exponent
    return _wrap(pow(base, exponent, 1 << int_bits), int_bits)


def _truncated_mod(a: int, b: int) -> int:
    """Remainder of ``a / b`` rounded toward zero; it takes the sign of *a*."""
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def gcd(a: int, b: int) -> int:
    """Greatest common divisor of *a* and *b* by Euclid's algorithm.

    The result is signed: ``gcd(0, n)`` and ``gcd(n, 0)`` are ``n``,
    ``gcd(4, -6)`` is ``-2`` and ``gcd(0, 0)`` is ``0``.
    """
    while b != 0:
        a, b = b, _truncated_mod(a, b)
    return a


class Rational:
    """Immutable rational number.

    A denominator of ``0`` marks the value as not-a-number (NaN). Every
    arithmetic operation involving a NaN operand returns NaN, so chains of
    operations only need to be checked once, at the end, with
    :meth:`is_nan`.

    Calling the class directly stores the given pair unchanged; use
    :meth:`new` or :meth:`from_int` for normalized values.
    """

    __slots__ = ("_numerator", "_denominator", "_int_bits")
    __array_priority__ = 1000.0  # Prefer Rational semantics in NumPy expressions.

    def __init__(
        self,
        numerator: IntegerLike = 0,
        denominator: IntegerLike = 0,
        *,
        int_bits: Optional[int] = None,
    ) -> None:
        if int_bits is not None and int_bits < 2:
            raise ValueError("int_bits must be >= 2")
        self._numerator = _ensure_int(numerator, name="numerator")
        self._denominator = _ensure_int(denominator, name="denominator")
        self._int_bits = int_bits

    # ------------------------------------------------------------------
    # Constructors
    @classmethod
    def from_int(cls, numerator: IntegerLike, *, int_bits: Optional[int] = None) -> "Rational":
        """Return ``numerator/1``. Never NaN."""
        num = _wrap(_ensure_int(numerator, name="numerator"), int_bits)
        return cls(num, 1, int_bits=int_bits)

    @classmethod
    def new(
        cls,
        numerator: IntegerLike,
        denominator: IntegerLike,
        *,
        int_bits: Optional[int] = None,
    ) -> "Rational":
        """Return the normalized value of ``numerator/denominator``.

        Raises :class:`InvalidDenominator` if *denominator* is zero. This is
        the only constructor that can fail.
        """
        num = _wrap(_ensure_int(numerator, name="numerator"), int_bits)
        den = _wrap(_ensure_int(denominator, name="denominator"), int_bits)
        if den == 0:
            raise InvalidDenominator(num)
        num, den = cls._normalize(num, den, int_bits)
        return cls(num, den, int_bits=int_bits)

    @classmethod
    def from_fraction(cls, value: Fraction, *, int_bits: Optional[int] = None) -> "Rational":
        """Create a :class:`Rational` from :class:`fractions.Fraction`."""
        return cls.new(value.numerator, value.denominator, int_bits=int_bits)

    @classmethod
    def parse(cls, text: str, *, int_bits: Optional[int] = None) -> "Rational":
        """Parse ``"n"``, ``"n/d"`` or ``"NaN"``.

        This is the inverse of ``str()``. A zero denominator raises
        :class:`InvalidDenominator`; any other malformed input raises
        :class:`ValueError`.
        """
        match = _RATIONAL_FORMAT.match(text)
        if match is None:
            raise ValueError(f"Invalid literal for Rational: {text!r}")
        if match.group("nan"):
            return cls(0, 0, int_bits=int_bits)
        den = match.group("den")
        return cls.new(
            int(match.group("num")),
            1 if den is None else int(den),
            int_bits=int_bits,
        )

    @classmethod
    def rationalize(cls, value: RationalLike, *, int_bits: Optional[int] = None) -> "Rational":
        """Coerce a rational-like value into :class:`Rational`.

        A :class:`Rational` is returned unchanged unless *int_bits* names a
        different width; it is then re-tagged with its components wrapped to
        that width.
        """
        if isinstance(value, Rational):
            if int_bits is None or int_bits == value.int_bits:
                return value
            return cls(
                _wrap(value.numerator, int_bits),
                _wrap(value.denominator, int_bits),
                int_bits=int_bits,
            )
        if isinstance(value, Fraction):
            return cls.from_fraction(value, int_bits=int_bits)
        if isinstance(value, str):
            return cls.parse(value, int_bits=int_bits)
        if isinstance(value, np.generic):
            return cls.rationalize(value.item(), int_bits=int_bits)
        if isinstance(value, numbers.Integral):
            return cls.from_int(value, int_bits=int_bits)
        raise TypeError(f"Cannot convert {type(value)!r} to Rational")

    # ------------------------------------------------------------------
    # Properties and helpers
    @property
    def numerator(self) -> int:
        return self._numerator

    @property
    def denominator(self) -> int:
        return self._denominator

    @property
    def int_bits(self) -> Optional[int]:
        return self._int_bits

    def is_nan(self) -> bool:
        """Report whether this value is not a number (zero denominator)."""
        return self._denominator == 0

    def normalized(self) -> "Rational":
        """Return this value reduced to lowest terms with a non-negative denominator."""
        num, den = self._normalize(self._numerator, self._denominator, self._int_bits)
        return Rational(num, den, int_bits=self._int_bits)

    def as_fraction(self) -> Fraction:
        """Return a :class:`Fraction` with the same value."""
        if self.is_nan():
            raise ValueError("cannot convert NaN to Fraction")
        return Fraction(self._numerator, self._denominator)

    # ------------------------------------------------------------------
    # Representation
    def __repr__(self) -> str:
        return f"Rational({self._numerator}, {self._denominator})"

    def __str__(self) -> str:
        if self.is_nan():
            return "NaN"
        if self._denominator == 1:
            return str(self._numerator)
        return f"{self._numerator}/{self._denominator}"

    def __format__(self, format_spec: str) -> str:
        if format_spec in ("", "r", "R"):
            return str(self)
        return format(str(self), format_spec)

    def __bool__(self) -> bool:
        # NaN is truthy, like float("nan").
        return self._numerator != 0 or self._denominator == 0

    # ------------------------------------------------------------------
    # Internal helpers
    def _coerce_scalar(self, value: Any) -> "Rational":
        if isinstance(value, Rational):
            return value
        if isinstance(value, np.generic):  # NumPy scalars
            return self._coerce_scalar(value.item())
        if isinstance(value, numbers.Integral):
            return Rational.from_int(value, int_bits=self._int_bits)
        raise TypeError(f"Cannot interpret {type(value)!r} as Rational")

    def _vectorize_iterable(self, iterable, func):
        return np.array([func(item) for item in iterable], dtype=object)

    def _elementwise(self, other: Any, func):
        """Apply *func* to *other* coerced, or to each of its items."""
        def apply(item):
            return func(self._coerce_scalar(item))

        if isinstance(other, np.ndarray):
            return np.vectorize(apply, otypes=[object])(other)
        if isinstance(other, (list, tuple)):
            return self._vectorize_iterable(other, apply)
        return apply(other)

    def _binary_operation(self, other: Any, op):
        return self._elementwise(other, lambda right: op(self, right))

    def _reflected_operation(self, other: Any, op):
        return self._elementwise(other, lambda left: op(left, self))

    @staticmethod
    def _combine_int_bits(a: "Rational", b: "Rational") -> Optional[int]:
        if a._int_bits is None or b._int_bits is None:
            return None
        return max(a._int_bits, b._int_bits)

    @staticmethod
    def _normalize(num: int, den: int, int_bits: Optional[int]) -> Tuple[int, int]:
        divisor = gcd(num, den)
        if divisor == 0:
            return 0, 0
        num = _wrap(num // divisor, int_bits)
        den = _wrap(den // divisor, int_bits)
        if den < 1:
            num, den = _wrap(-num, int_bits), _wrap(-den, int_bits)
        return num, den

    @staticmethod
    def _result(num: int, den: int, int_bits: Optional[int]) -> "Rational":
        num = _wrap(num, int_bits)
        den = _wrap(den, int_bits)
        num, den = Rational._normalize(num, den, int_bits)
        return Rational(num, den, int_bits=int_bits)

    def _coerce_power(self, value: Any) -> int:
        if isinstance(value, Rational):
            if value.is_nan() or value.denominator != 1:
                raise ValueError("Exponent must be an integer")
            return value.numerator
        return _ensure_int(value, name="exponent")

    # ------------------------------------------------------------------
    # Arithmetic
    def plus(self, other: Any) -> "Rational":
        """Return ``self + other``, normalized. NaN if either operand is NaN."""
        right = self._coerce_scalar(other)
        bits = self._combine_int_bits(self, right)
        if self.is_nan() or right.is_nan():
            return Rational(0, 0, int_bits=bits)
        return self._result(
            _wrap(right._numerator * self._denominator, bits)
            + _wrap(self._numerator * right._denominator, bits),
            self._denominator * right._denominator,
            bits,
        )

    def minus(self, other: Any) -> "Rational":
        """Return ``self - other``, normalized. NaN if either operand is NaN."""
        right = self._coerce_scalar(other)
        bits = self._combine_int_bits(self, right)
        if self.is_nan() or right.is_nan():
            return Rational(0, 0, int_bits=bits)
        return self._result(
            _wrap(self._numerator * right._denominator, bits)
            - _wrap(right._numerator * self._denominator, bits),
            self._denominator * right._denominator,
            bits,
        )

    def times(self, other: Any) -> "Rational":
        """Return ``self * other``, normalized. NaN if either operand is NaN."""
        right = self._coerce_scalar(other)
        bits = self._combine_int_bits(self, right)
        if self.is_nan() or right.is_nan():
            return Rational(0, 0, int_bits=bits)
        return self._result(
            self._numerator * right._numerator,
            self._denominator * right._denominator,
            bits,
        )

    def divide_by(self, other: Any) -> "Rational":
        """Return ``self / other``, normalized.

        NaN if either operand is NaN, or if *other* is zero: the product
        ``self.denominator * other.numerator`` is then zero, and a zero
        denominator survives normalization.
        """
        right = self._coerce_scalar(other)
        bits = self._combine_int_bits(self, right)
        if self.is_nan() or right.is_nan():
            return Rational(0, 0, int_bits=bits)
        result = self._result(
            self._numerator * right._denominator,
            self._denominator * right._numerator,
            bits,
        )
        if result.is_nan():
            logger.debug("%s / %s is NaN", self, right)
        return result

    # ------------------------------------------------------------------
    # Arithmetic operators
    def __add__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational.plus)

    def __radd__(self, other: Any) -> Any:
        return self._reflected_operation(other, Rational.plus)

    def __sub__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational.minus)

    def __rsub__(self, other: Any) -> Any:
        return self._reflected_operation(other, Rational.minus)

    def __mul__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational.times)

    def __rmul__(self, other: Any) -> Any:
        return self._reflected_operation(other, Rational.times)

    def __truediv__(self, other: Any) -> Any:
        return self._binary_operation(other, Rational.divide_by)

    def __rtruediv__(self, other: Any) -> Any:
        return self._reflected_operation(other, Rational.divide_by)

    def __pow__(self, exponent: Any) -> Any:
        if isinstance(exponent, np.ndarray):
            vectorised = np.vectorize(lambda x: self.__pow__(x), otypes=[object])
            return vectorised(exponent)
        power = self._coerce_power(exponent)
        if self.is_nan():
            return Rational(0, 0, int_bits=self._int_bits)
        bits = self._int_bits
        if power >= 0:
            return self._result(
                _power(self._numerator, power, bits),
                _power(self._denominator, power, bits),
                bits,
            )
        # A zero base gives a zero denominator, hence NaN.
        return self._result(
            _power(self._denominator, -power, bits),
            _power(self._numerator, -power, bits),
            bits,
        )

    def __neg__(self) -> "Rational":
        if self.is_nan():
            return Rational(0, 0, int_bits=self._int_bits)
        return self._result(-self._numerator, self._denominator, self._int_bits)

    def __pos__(self) -> "Rational":
        return self

    def __abs__(self) -> "Rational":
        if self.is_nan():
            return Rational(0, 0, int_bits=self._int_bits)
        return self._result(abs(self._numerator), abs(self._denominator), self._int_bits)

    # ------------------------------------------------------------------
    # Comparisons
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Rational):
            return NotImplemented
        return (
            self._numerator == other._numerator
            and self._denominator == other._denominator
        )

    def __hash__(self) -> int:
        return hash((self._numerator, self._denominator))

    def _compare(self, other: Any, op) -> bool:
        try:
            other_rat = self._coerce_scalar(other)
        except TypeError:
            return NotImplemented
        if self.is_nan() or other_rat.is_nan():
            return False
        left = self.normalized()
        right = other_rat.normalized()
        return op(
            left._numerator * right._denominator,
            right._numerator * left._denominator,
        )

    def __lt__(self, other: Any) -> bool:
        return self._compare(other, operator.lt)

    def __le__(self, other: Any) -> bool:
        return self._compare(other, operator.le)

    def __gt__(self, other: Any) -> bool:
        return self._compare(other, operator.gt)

    def __ge__(self, other: Any) -> bool:
        return self._compare(other, operator.ge)

    # ------------------------------------------------------------------
    # NumPy interoperability
    # Keyed by ufunc name; NumPy 1.x names np.divide "true_divide".
    _UFUNC_OPERATORS = {
        "add": operator.add,
        "subtract": operator.sub,
        "multiply": operator.mul,
        "divide": operator.truediv,
        "true_divide": operator.truediv,
        "negative": operator.neg,
        "positive": operator.pos,
        "absolute": operator.abs,
        "power": operator.pow,
    }

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        op = self._UFUNC_OPERATORS.get(ufunc.__name__)
        if op is None or method != "__call__":
            return NotImplemented
        if kwargs.get("out") is not None:
            raise NotImplementedError("Rational ufuncs cannot write into `out`")

        if not any(isinstance(value, np.ndarray) for value in inputs):
            return op(*map(self._coerce_scalar, inputs))
        to_rational = np.vectorize(self._coerce_scalar, otypes=[object])
        operands = [
            to_rational(value) if isinstance(value, np.ndarray) else self._coerce_scalar(value)
            for value in inputs
        ]
        return np.vectorize(op, otypes=[object])(*operands)


NaN = Rational()


def parse(text: str, *, int_bits: Optional[int] = None) -> Rational:
    """Public helper to parse the ``str()`` form of a :class:`Rational`."""

    return Rational.parse(text, int_bits=int_bits)


def rationalize(value: RationalLike, *, int_bits: Optional[int] = None) -> Rational:
    """Public helper to convert *value* into :class:`Rational`."""

    return Rational.rationalize(value, int_bits=int_bits)


def isnan(values: Any) -> Any:
    """Apply :meth:`Rational.is_nan` to a scalar or elementwise to an array."""

    if isinstance(values, (np.ndarray, list, tuple)):
        array = as_rational_array(values, copy=False)
        return np.vectorize(lambda item: item.is_nan(), otypes=[bool])(array)
    return Rational.rationalize(values).is_nan()


def as_rational_array(
    values: Any,
    *,
    int_bits: Optional[int] = None,
    copy: bool = True,
) -> "np.ndarray":
    """Return a ``numpy.ndarray`` of :class:`Rational` values.

    ``values`` can be any iterable of rational-like entries or an existing
    NumPy array. When ``copy`` is ``False`` and ``values`` is already an
    object array holding only :class:`Rational` values, it is returned as is.
    Floating point entries raise :class:`TypeError`.
    """

    if isinstance(values, np.ndarray):
        array = values.copy() if copy else values
        if array.dtype == object and all(isinstance(item, Rational) for item in array.flat):
            return array
        if array.dtype != object:
            array = array.astype(object)
        vectorised = np.vectorize(
            lambda item: Rational.rationalize(item, int_bits=int_bits),
            otypes=[object],
        )
        return vectorised(array)

    if isinstance(values, (list, tuple)):
        coerced = [Rational.rationalize(item, int_bits=int_bits) for item in values]
        array = np.empty(len(coerced), dtype=object)
        array[:] = coerced
        return array

    return as_rational_array(list(values), int_bits=int_bits, copy=copy)


def _filled(length: int, value: Rational) -> "np.ndarray":
    if length < 0:
        raise ValueError("length must be non-negative")
    array = np.empty(length, dtype=object)
    array[:] = [value] * length
    return array


def zeros(length: int, *, int_bits: Optional[int] = None) -> "np.ndarray":
    """Return a one-dimensional array of length ``length`` filled with zeros."""

    return _filled(length, Rational(0, 1, int_bits=int_bits))


def nans(length: int, *, int_bits: Optional[int] = None) -> "np.ndarray":
    """Return a one-dimensional array of length ``length`` filled with NaN."""

    return _filled(length, Rational(0, 0, int_bits=int_bits))


def zeros_like(values: Any, *, int_bits: Optional[int] = None) -> "np.ndarray":
    """Return a zero-filled array that matches the shape of ``values``."""

    array = as_rational_array(values, int_bits=int_bits, copy=False)
    return zeros(array.size, int_bits=int_bits).reshape(array.shape)


__all__ = [
    "InvalidDenominator",
    "NaN",
    "Rational",
    "as_rational_array",
    "gcd",
    "isnan",
    "nans",
    "parse",
    "rationalize",
    "zeros",
    "zeros_like",
]
