"""
helpers.py - formatting helpers
"""


def format_currency(amount: float, symbol: str = "KGS") -> str:
    """1234567 -> '1 234 567 KGS' (space grouping as on the price lists)"""
    return f"{amount:,.0f}".replace(",", " ") + f" {symbol}"


def format_percent(value: float, decimals: int = 1) -> str:
    return f"{value:.{decimals}f}%"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    if denominator == 0:
        return default
    return numerator / denominator
