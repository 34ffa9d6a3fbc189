from .helpers import format_currency, format_percent, safe_divide

__all__ = [
    "format_currency",
    "format_percent",
    "safe_divide",
]
