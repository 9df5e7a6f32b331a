"""Value type inference for ELP measurement values.

Producers can declare a value's type with lexical hints:

* String: enclose the value in single quotes, e.g. ``'primary 10.0.0.1'``
* Boolean: ``true`` or ``false``
* Byte / Short / Integer / Long: append ``b`` / ``s`` / ``i`` / ``l``,
  e.g. ``123i``
* Float / Double: append ``f`` / ``d``, e.g. ``123.456f``
* BigInteger / BigDecimal: append ``bi`` / ``bd``, e.g. ``10bi``

Values without a hint are classified by shape: integral values get the
narrowest of INTEGER, LONG and BIG_INTEGER that holds them, decimal values
are BIG_DECIMAL, and any other bare text is UNKNOWN.

Detection is an ordered table of ``(predicate, constructor)`` rules; the
first rule whose predicate matches builds the result.
"""

from __future__ import annotations

import math
import re
from typing import Callable, Dict, List, Tuple

import structlog

from elp_codec.errors import UnrecognizedValueTypeError
from elp_codec.schemas import ValueType

logger = structlog.get_logger(__name__)

InferredValue = Tuple[str, ValueType]

_INTEGRAL_RE = re.compile(r"[+-]?\d+")
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_QUOTES = ("'", '"')
_BOOLEANS = ("true", "false")

# Signed ranges of the fixed-width integral types.
_INTEGRAL_RANGES: Dict[ValueType, Tuple[int, int]] = {
    ValueType.BYTE: (-(2**7), 2**7 - 1),
    ValueType.SHORT: (-(2**15), 2**15 - 1),
    ValueType.INTEGER: (-(2**31), 2**31 - 1),
    ValueType.LONG: (-(2**63), 2**63 - 1),
}

_FLOAT32_MAX = 3.4028234663852886e38

_WIDE_SUFFIXES: Dict[str, ValueType] = {
    "bi": ValueType.BIG_INTEGER,
    "bd": ValueType.BIG_DECIMAL,
}

_SUFFIXES: Dict[str, ValueType] = {
    "b": ValueType.BYTE,
    "s": ValueType.SHORT,
    "i": ValueType.INTEGER,
    "l": ValueType.LONG,
    "f": ValueType.FLOAT,
    "d": ValueType.DOUBLE,
}

# Reverse lookup used when formatting records back into lines.
TYPE_SUFFIXES: Dict[ValueType, str] = {
    **{vt: sfx for sfx, vt in _WIDE_SUFFIXES.items()},
    **{vt: sfx for sfx, vt in _SUFFIXES.items()},
}

_INTEGRAL_TYPES = frozenset(
    {
        ValueType.BYTE,
        ValueType.SHORT,
        ValueType.INTEGER,
        ValueType.LONG,
        ValueType.BIG_INTEGER,
    }
)
_DECIMAL_TYPES = frozenset(
    {ValueType.FLOAT, ValueType.DOUBLE, ValueType.BIG_DECIMAL}
)


# ---------------------------------------------------------------------------
# Shape checks
# ---------------------------------------------------------------------------

def _fits(literal: str, value_type: ValueType) -> bool:
    """Return ``True`` if *literal* is a valid literal of *value_type*."""
    if value_type in _INTEGRAL_TYPES:
        if not _INTEGRAL_RE.fullmatch(literal):
            return False
        bounds = _INTEGRAL_RANGES.get(value_type)
        if bounds is None:
            return True
        return bounds[0] <= int(literal) <= bounds[1]

    if value_type in _DECIMAL_TYPES:
        if not _DECIMAL_RE.fullmatch(literal):
            return False
        if value_type is ValueType.BIG_DECIMAL:
            return True
        number = float(literal)
        if not math.isfinite(number):
            return False
        return value_type is ValueType.DOUBLE or abs(number) <= _FLOAT32_MAX

    return False


def is_consistent(value: str, value_type: ValueType) -> bool:
    """Check that a canonical literal agrees with its declared type."""
    if value_type in (ValueType.STRING, ValueType.UNKNOWN):
        return True
    if value_type is ValueType.BOOLEAN:
        return value in _BOOLEANS
    return _fits(value, value_type)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _is_quoted(token: str) -> bool:
    return len(token) >= 2 and token[0] in _QUOTES and token[-1] == token[0]


def _as_string(token: str) -> InferredValue:
    return token[1:-1], ValueType.STRING


def _is_boolean(token: str) -> bool:
    return token in _BOOLEANS


def _as_boolean(token: str) -> InferredValue:
    return token, ValueType.BOOLEAN


def _has_wide_suffix(token: str) -> bool:
    return token[-2:] in _WIDE_SUFFIXES and bool(_DECIMAL_RE.fullmatch(token[:-2]))


def _as_wide_suffixed(token: str) -> InferredValue:
    return _suffixed(token, token[:-2], _WIDE_SUFFIXES[token[-2:]])


def _has_suffix(token: str) -> bool:
    return token[-1:] in _SUFFIXES and bool(_DECIMAL_RE.fullmatch(token[:-1]))


def _as_suffixed(token: str) -> InferredValue:
    return _suffixed(token, token[:-1], _SUFFIXES[token[-1]])


def _suffixed(token: str, literal: str, value_type: ValueType) -> InferredValue:
    """A numeric literal carrying a type hint must honour that type."""
    if not _fits(literal, value_type):
        raise UnrecognizedValueTypeError(
            token, f"'{literal}' is not a valid {value_type.value} value"
        )
    return literal, value_type


def _is_integral(token: str) -> bool:
    return bool(_INTEGRAL_RE.fullmatch(token))


def _as_bare_integral(token: str) -> InferredValue:
    for value_type in (ValueType.INTEGER, ValueType.LONG):
        if _fits(token, value_type):
            return token, value_type
    return token, ValueType.BIG_INTEGER


def _is_decimal(token: str) -> bool:
    return bool(_DECIMAL_RE.fullmatch(token))


def _as_bare_decimal(token: str) -> InferredValue:
    return token, ValueType.BIG_DECIMAL


def _is_bare_text(token: str) -> bool:
    return token[0] not in _QUOTES and token[-1] not in _QUOTES


def _as_unknown(token: str) -> InferredValue:
    return token, ValueType.UNKNOWN


# Precedence is top to bottom.  Two-letter suffixes go before single-letter
# ones so ``10bi`` is never read as a BYTE.
_RULES: List[Tuple[Callable[[str], bool], Callable[[str], InferredValue]]] = [
    (_is_quoted, _as_string),
    (_is_boolean, _as_boolean),
    (_has_wide_suffix, _as_wide_suffixed),
    (_has_suffix, _as_suffixed),
    (_is_integral, _as_bare_integral),
    (_is_decimal, _as_bare_decimal),
    (_is_bare_text, _as_unknown),
]


def infer_value(token: str) -> InferredValue:
    """Detect the type of a raw value token and strip its type hint.

    Returns ``(canonical_literal, value_type)``.

    Raises
    ------
    UnrecognizedValueTypeError
        If the token is empty, has an unbalanced quote, or carries a type
        suffix its number does not satisfy.
    """
    if not token:
        raise UnrecognizedValueTypeError(token, "empty value")

    for predicate, construct in _RULES:
        if predicate(token):
            literal, value_type = construct(token)
            logger.debug(
                "elp_value_type_detected",
                token=token,
                value=literal,
                value_type=value_type.value,
            )
            return literal, value_type

    raise UnrecognizedValueTypeError(token, "unbalanced quote")
