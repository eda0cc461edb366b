"""
Lenient value coercion for loosely-typed quiz payloads.

Quiz content and student answers arrive from browser clients as whatever
JSON the editor produced: indices may be ints, floats or digit strings,
answers may be strings or lists. These helpers give one stable rendering
so that sanitizing and scoring agree on what "the same answer" means.
"""
import math
import re
import sys
from typing import Any, Optional

_LEADING_INT = re.compile(r"^([+-]?)0*(\d+)")

# longer digit runs saturate instead of being converted
_MAX_INT_DIGITS = 18


def _float_text(value: float) -> str:
    """Shortest round-trip digits, laid out the way JS Number#toString does."""
    text = repr(value)
    if "e" not in text:
        return text

    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    sign = "-" if mantissa.startswith("-") else ""
    mantissa = mantissa.lstrip("-")

    if -6 <= exponent < 21:
        digits = mantissa.replace(".", "")
        return f"{sign}0.{'0' * (-exponent - 1)}{digits}"
    return f"{sign}{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"


def to_text(value: Any) -> str:
    """
    Render a JSON value as text, the way browser clients stringify it.

    None -> "null", booleans -> "true"/"false", integral floats lose
    their ".0", lists are comma-joined (None members render empty).
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return _float_text(value)
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else to_text(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def as_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """Parse the leading integer of ``value``; ``default`` when there is none."""
    match = _LEADING_INT.match(to_text(value).strip())
    if not match:
        return default

    sign, digits = match.groups()
    if len(digits) > _MAX_INT_DIGITS:
        return -sys.maxsize if sign == "-" else sys.maxsize
    return int(sign + digits)


def clamp(n: int, low: int, high: int) -> int:
    return min(max(n, low), high)
