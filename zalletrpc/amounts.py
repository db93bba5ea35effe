"""Conversions between JSON monetary values and zatoshi amounts."""

from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Any

from .errors import LegacyCode

COIN = 100_000_000
MAX_MONEY = 21_000_000 * COIN

# 10^18 - 1 is the largest arbitrary decimal that fits in a signed 64-bit integer.
_UPPER_BOUND = 10**18 - 1
_DIGITS = frozenset("0123456789")
_EIGHT_PLACES = Decimal("1E-8")


class _Zec(Decimal):
    """A decimal amount that always renders in plain fixed-point notation."""

    def __str__(self) -> str:
        return format(self, "f")

    def __repr__(self) -> str:
        return f"Decimal('{self}')"


class _Mantissa:
    """Accumulates mantissa digits, deferring trailing zeros."""

    def __init__(self) -> None:
        self.value = 0
        self.trailing_zeros = 0

    def push(self, ch: str) -> bool:
        """Add one digit; returns False on overflow."""
        if ch == "0":
            self.trailing_zeros += 1
            return True
        for _ in range(self.trailing_zeros + 1):
            if self.value > _UPPER_BOUND // 10:
                return False
            self.value *= 10
        self.value += int(ch)
        self.trailing_zeros = 0
        return True


def _digit_run(val: str, pos: int) -> tuple[str, int]:
    end = pos
    while end < len(val) and val[end] in _DIGITS:
        end += 1
    return val[pos:end], end


def parse_fixed_point(val: str, decimals: int) -> int | None:
    """Parse a decimal string into a fixed-point integer with `decimals` places.

    Returns None if the string is malformed, too precise, or out of range.
    """
    mantissa = _Mantissa()
    pos = 0
    negative = val.startswith("-")
    if negative:
        pos = 1

    if pos >= len(val):
        return None  # empty string or loose '-'
    first = val[pos]
    if first == "0":
        pos += 1  # pass single 0
    elif first in _DIGITS:
        digits, pos = _digit_run(val, pos)
        for digit in digits:
            if not mantissa.push(digit):
                return None
    else:
        return None  # missing expected digit

    point_ofs = 0
    if val.startswith(".", pos):
        pos += 1
        digits, pos = _digit_run(val, pos)
        if not digits:
            return None
        for digit in digits:
            if not mantissa.push(digit):
                return None
            point_ofs += 1

    exponent = 0
    if pos < len(val) and val[pos] in "eE":
        pos += 1
        exponent_negative = False
        if val.startswith("+", pos):
            pos += 1
        elif val.startswith("-", pos):
            exponent_negative = True
            pos += 1
        digits, pos = _digit_run(val, pos)
        if not digits:
            return None
        for digit in digits:
            if exponent > _UPPER_BOUND // 10:
                return None
            exponent = exponent * 10 + int(digit)
        if exponent_negative:
            exponent = -exponent

    if pos != len(val):
        return None  # trailing garbage

    exponent = exponent - point_ofs + mantissa.trailing_zeros + decimals
    value = -mantissa.value if negative else mantissa.value

    if exponent < 0:
        return None  # smaller than 10^-decimals
    if exponent >= 18:
        return None  # larger than or equal to 10^(18-decimals)

    bound = _UPPER_BOUND // 10
    for _ in range(exponent):
        if not -bound <= value <= bound:
            return None
        value *= 10
    if not -_UPPER_BOUND <= value <= _UPPER_BOUND:
        return None
    return value


def zatoshis_from_value(value: Any) -> int:
    """Parse a JSON amount in ZEC (number or string) into zatoshis."""
    if isinstance(value, str):
        text = value
    elif isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        text = str(value)
    else:
        raise LegacyCode.TYPE.with_message("Amount is not a number or string")

    amount = parse_fixed_point(text, 8)
    if amount is None:
        raise LegacyCode.TYPE.with_message("Invalid amount")
    if amount < 0:
        raise LegacyCode.INVALID_PARAMETER.with_message(
            "Invalid parameter, amount must be positive"
        )
    if amount > MAX_MONEY:
        raise LegacyCode.TYPE.with_message("Amount out of range")
    return amount


def value_from_zat_balance(value: int) -> Decimal:
    """Express a signed zatoshi balance in ZEC, truncated to eight places."""
    if abs(value) > MAX_MONEY:
        raise ValueError(f"balance {value} is outside the valid monetary range")
    amount = Decimal(value).scaleb(-8).quantize(_EIGHT_PLACES, rounding=ROUND_DOWN)
    return _Zec(amount)


def value_from_zatoshis(value: int) -> Decimal:
    """Express a non-negative zatoshi amount in ZEC."""
    if value < 0:
        raise ValueError(f"zatoshi amount {value} is negative")
    return value_from_zat_balance(value)