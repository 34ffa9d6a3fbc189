"""
normalize.py - input sanitizing

Every loose value that enters the calculators passes through here once.
Non-numeric, missing or non-finite values fall back to a default; nothing
in this module raises.
"""

import math
from typing import Any, Dict, Iterable, Optional, Tuple


def to_number(value: Any, fallback: float = 0.0) -> float:
    """Safe float conversion.

    None, bools, non-numeric strings and NaN/inf all give `fallback`.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError):
            return fallback
    return number if math.isfinite(number) else fallback


def non_negative(value: Any, fallback: float = 0.0) -> float:
    """to_number clamped to >= 0"""
    return max(0.0, to_number(value, fallback))


def optional_number(value: Any) -> Optional[float]:
    """Number or None when absent.

    Used for per-line overrides where "not given" must stay distinguishable
    from an explicit value.
    """
    if value is None or value == "":
        return None
    return to_number(value, None)


def to_text(value: Any) -> str:
    """Trimmed string, '' for None"""
    if value is None:
        return ""
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    text = to_text(value)
    return text or None


def normalize_key(value: Any) -> str:
    """Case-insensitive comparison key"""
    return to_text(value).lower()


def round_money(value: float) -> int:
    """Round half up to a whole currency unit.

    Amounts are non-negative, so floor(x + 0.5) matches the rounding the
    price lists were built with (Python's round() is half-to-even).
    """
    return int(math.floor(to_number(value) + 0.5))


SIZE_SEPARATORS = ("X", "×", "х", "Х", "*")


def parse_size(size: Optional[str]) -> Tuple[float, float, float]:
    """Parse "WxHxD" in millimetres -> (w, h, d).

    Missing or unreadable parts are 0.
    """
    if not size:
        return (0.0, 0.0, 0.0)
    text = str(size)
    for sep in SIZE_SEPARATORS:
        text = text.replace(sep, "x")
    parts = [to_number(part, 0.0) for part in text.split("x")]
    parts += [0.0] * (3 - len(parts))
    return (parts[0], parts[1], parts[2])


def pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present key among camelCase / snake_case aliases"""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes, dict)):
        return list(value)
    return []
