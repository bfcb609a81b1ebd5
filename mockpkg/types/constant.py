"""Exact arithmetic on Go constant values.

Values are plain Python objects: ``bool``, ``int``, ``Fraction`` (floats),
``complex`` and ``str``.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Dict, Optional, Tuple, Union

from .model import BasicKind, COMPLEX_KINDS, FLOAT_KINDS, INTEGER_KINDS

Value = Union[bool, int, Fraction, complex, str]

INT_RANGES: Dict[BasicKind, Tuple[int, int]] = {
    BasicKind.INT8: (-(2**7), 2**7 - 1),
    BasicKind.INT16: (-(2**15), 2**15 - 1),
    BasicKind.INT32: (-(2**31), 2**31 - 1),
    BasicKind.INT64: (-(2**63), 2**63 - 1),
    BasicKind.INT: (-(2**63), 2**63 - 1),
    BasicKind.UINT8: (0, 2**8 - 1),
    BasicKind.UINT16: (0, 2**16 - 1),
    BasicKind.UINT32: (0, 2**32 - 1),
    BasicKind.UINT64: (0, 2**64 - 1),
    BasicKind.UINT: (0, 2**64 - 1),
    BasicKind.UINTPTR: (0, 2**64 - 1),
}

_UNSIGNED_BITS = {
    BasicKind.UINT8: 8,
    BasicKind.UINT16: 16,
    BasicKind.UINT32: 32,
    BasicKind.UINT64: 64,
    BasicKind.UINT: 64,
    BasicKind.UINTPTR: 64,
}


class ConstantError(ValueError):
    """Raised for invalid constant operations; the checker adds the position."""


def parse_int(text: str) -> int:
    digits = text.replace("_", "")
    lower = digits.lower()
    if lower.startswith("0x"):
        return int(digits[2:], 16)
    if lower.startswith("0b"):
        return int(digits[2:], 2)
    if lower.startswith("0o"):
        return int(digits[2:], 8)
    if len(digits) > 1 and digits.startswith("0"):
        return int(digits[1:], 8)
    return int(digits)


def parse_float(text: str) -> Fraction:
    digits = text.replace("_", "")
    if digits.lower().startswith("0x"):
        return Fraction(float.fromhex(digits))
    return Fraction(digits)


def parse_imag(text: str) -> complex:
    digits = text.replace("_", "").rstrip("i")
    if digits.lower().startswith("0x"):
        return complex(0, float.fromhex(digits))
    return complex(0, float(Fraction(digits)))


def is_integral(value: Value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, Fraction):
        return value.denominator == 1
    if isinstance(value, complex):
        return value.imag == 0 and float(value.real).is_integer()
    return False


def to_int(value: Value) -> int:
    if not is_integral(value):
        raise ConstantError(f"{value!r} truncated to integer")
    if isinstance(value, complex):
        return int(value.real)
    return int(value)


def represent(value: Value, kind: BasicKind) -> Value:
    """Convert ``value`` to the representation of ``kind`` or raise ``ConstantError``."""
    if kind in INTEGER_KINDS:
        if isinstance(value, (str, bool)):
            raise ConstantError(f"cannot use {value!r} as {kind.value} value")
        number = to_int(value)
        bounds = INT_RANGES.get(kind)
        if bounds is not None and not bounds[0] <= number <= bounds[1]:
            raise ConstantError(f"constant {number} overflows {kind.value}")
        return number
    if kind in FLOAT_KINDS:
        if isinstance(value, (str, bool)):
            raise ConstantError(f"cannot use {value!r} as {kind.value} value")
        if isinstance(value, complex):
            if value.imag != 0:
                raise ConstantError(f"{value!r} truncated to {kind.value}")
            return Fraction(value.real)
        return Fraction(value)
    if kind in COMPLEX_KINDS:
        if isinstance(value, (str, bool)):
            raise ConstantError(f"cannot use {value!r} as {kind.value} value")
        return complex(value)
    if kind in {BasicKind.STRING, BasicKind.UNTYPED_STRING}:
        if not isinstance(value, str):
            raise ConstantError(f"cannot use {value!r} as string value")
        return value
    if kind in {BasicKind.BOOL, BasicKind.UNTYPED_BOOL}:
        if not isinstance(value, bool):
            raise ConstantError(f"cannot use {value!r} as bool value")
        return value
    raise ConstantError(f"invalid constant type {kind.value}")


def binary_op(op: str, left: Value, right: Value, *, integer: bool) -> Value:
    """Apply an arithmetic or logical operator; ``integer`` selects truncating division."""
    if op in {"&&", "||"}:
        if not isinstance(left, bool) or not isinstance(right, bool):
            raise ConstantError(f"operator {op} not defined on non-boolean constants")
        return (left and right) if op == "&&" else (left or right)
    if isinstance(left, str) or isinstance(right, str):
        if op == "+" and isinstance(left, str) and isinstance(right, str):
            return left + right
        raise ConstantError(f"operator {op} not defined on string constants")
    if isinstance(left, bool) or isinstance(right, bool):
        raise ConstantError(f"operator {op} not defined on boolean constants")
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            raise ConstantError("division by zero")
        if integer:
            quotient = abs(to_int(left)) // abs(to_int(right))
            return quotient if (to_int(left) >= 0) == (to_int(right) >= 0) else -quotient
        if isinstance(left, complex) or isinstance(right, complex):
            return complex(left) / complex(right)
        return Fraction(left) / Fraction(right)
    if op in {"%", "&", "|", "^", "&^"}:
        a, b = to_int(left), to_int(right)
        if op == "%":
            if b == 0:
                raise ConstantError("division by zero")
            remainder = abs(a) % abs(b)
            return remainder if a >= 0 else -remainder
        if op == "&":
            return a & b
        if op == "|":
            return a | b
        if op == "^":
            return a ^ b
        return a & ~b
    raise ConstantError(f"unsupported constant operator {op}")


def shift(op: str, left: Value, count: Value) -> int:
    amount = to_int(count)
    if amount < 0:
        raise ConstantError(f"negative shift count {amount}")
    base = to_int(left)
    return base << amount if op == "<<" else base >> amount


def compare(op: str, left: Value, right: Value) -> bool:
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    if isinstance(left, (bool, complex)) or isinstance(right, (bool, complex)):
        raise ConstantError(f"operator {op} not defined on these constants")
    if isinstance(left, str) != isinstance(right, str):
        raise ConstantError("mismatched constant types")
    if op == "<":
        return left < right  # type: ignore[operator]
    if op == "<=":
        return left <= right  # type: ignore[operator]
    if op == ">":
        return left > right  # type: ignore[operator]
    if op == ">=":
        return left >= right  # type: ignore[operator]
    raise ConstantError(f"unsupported comparison {op}")


def unary_op(op: str, value: Value, kind: Optional[BasicKind] = None) -> Value:
    if op == "+":
        if isinstance(value, (str, bool)):
            raise ConstantError("operator + not defined")
        return value
    if op == "-":
        if isinstance(value, (str, bool)):
            raise ConstantError("operator - not defined")
        return -value
    if op == "!":
        if not isinstance(value, bool):
            raise ConstantError("operator ! not defined on non-boolean constant")
        return not value
    if op == "^":
        number = to_int(value)
        bits = _UNSIGNED_BITS.get(kind) if kind is not None else None
        if bits is not None:
            return number ^ ((1 << bits) - 1)
        return ~number
    raise ConstantError(f"operator {op} not defined on constants")


def format_value(value: Value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if isinstance(value, Fraction):
        if value.denominator == 1:
            return str(value.numerator)
        return repr(float(value))
    return str(value)


__all__ = [
    "ConstantError",
    "INT_RANGES",
    "Value",
    "binary_op",
    "compare",
    "format_value",
    "is_integral",
    "parse_float",
    "parse_imag",
    "parse_int",
    "represent",
    "shift",
    "to_int",
    "unary_op",
]
