"""Runtime values for CSP pseudocode.

The set of values is closed: Number, Text, Boolean, List and Null. Values
are immutable; every operation builds a new value. ``NULL`` is a real
value (what a call that returns nothing evaluates to) and is not the same
thing as the interpreter's "block produced no return" signal, which is
plain ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
import math


class Value:
    """Base class for runtime values."""
    __slots__ = ()


@dataclass(frozen=True)
class NumberValue(Value):
    value: float

    def __repr__(self) -> str:
        return f"Number({self.value!r})"


@dataclass(frozen=True)
class TextValue(Value):
    value: str

    def __repr__(self) -> str:
        return f"Text({self.value!r})"


@dataclass(frozen=True)
class BooleanValue(Value):
    value: bool

    def __repr__(self) -> str:
        return f"Boolean({self.value!r})"


@dataclass(frozen=True)
class ListValue(Value):
    """An ordered, heterogeneous sequence of values."""
    items: Tuple[Value, ...] = ()

    def __repr__(self) -> str:
        return f"List({list(self.items)!r})"


class NullValue(Value):
    """Marker type for the single ``NULL`` value."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'Null'


NULL = NullValue()


def type_name(value: Value) -> str:
    """Return the language-level name of a value's type."""
    if isinstance(value, NumberValue):
        return 'Number'
    if isinstance(value, TextValue):
        return 'Text'
    if isinstance(value, BooleanValue):
        return 'Boolean'
    if isinstance(value, ListValue):
        return 'List'
    if isinstance(value, NullValue):
        return 'Null'
    return type(value).__name__


def format_number(x: float) -> str:
    """Render a number the way the DISPLAY procedure shows it.

    Whole numbers print without a fractional part (``3`` rather than
    ``3.0``). Exponent notation is used only from ``1e21`` up and below
    ``1e-6``, written as ``1e+21`` or ``1.5e-7``.
    """
    if math.isnan(x):
        return 'NaN'
    if math.isinf(x):
        return 'Infinity' if x > 0 else '-Infinity'
    if x == 0:
        return '0'
    sign = '-' if x < 0 else ''
    digits, point = _shortest_digits(abs(x))
    k = len(digits)
    if k <= point <= 21:
        return sign + digits + '0' * (point - k)
    if 0 < point <= 21:
        return sign + digits[:point] + '.' + digits[point:]
    if -6 < point <= 0:
        return sign + '0.' + '0' * -point + digits
    exponent = point - 1
    mantissa = digits if k == 1 else digits[0] + '.' + digits[1:]
    return f"{sign}{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"


def _shortest_digits(x: float) -> Tuple[str, int]:
    """Significant digits of ``repr(x)`` and where the decimal point falls.

    ``0.0125`` gives ``('125', -1)``: the value is ``0.125 * 10 ** -1``.
    """
    text = repr(x)
    exponent = 0
    if 'e' in text:
        text, exp_text = text.split('e')
        exponent = int(exp_text)
    whole, _, fraction = text.partition('.')
    if whole.strip('0'):
        point = len(whole) + exponent
    else:
        point = exponent - (len(fraction) - len(fraction.lstrip('0')))
    digits = (whole + fraction).strip('0')
    return digits, point


def to_display(value: Value) -> str:
    """Convert a value to the text shown to the user.

    Lists and Null are rendered too so that they can appear in traces, but
    DISPLAY itself refuses them.
    """
    if isinstance(value, NumberValue):
        return format_number(value.value)
    if isinstance(value, TextValue):
        return value.value
    if isinstance(value, BooleanValue):
        return 'true' if value.value else 'false'
    if isinstance(value, ListValue):
        return '[' + ', '.join(to_display(item) for item in value.items) + ']'
    if isinstance(value, NullValue):
        return 'null'
    return str(value)


def is_number_literal(text: str) -> bool:
    """True if ``text`` is spelled like a NUMBER token (digits, at most one dot)."""
    if not text or text == '.' or text.count('.') > 1:
        return False
    return all(c == '.' or '0' <= c <= '9' for c in text)
