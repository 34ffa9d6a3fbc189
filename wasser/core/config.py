"""
config.py - calculation defaults

All costing / pricing constants are kept here, in one place.
"""

from dataclasses import dataclass, field
from typing import Dict


# Collection multipliers for the quick listing estimate.
# Keys are lower-case; lookup trims and lower-cases the collection name.
COLLECTION_MULTIPLIERS: Dict[str, float] = {
    "premium": 1.8,
    "luxury": 1.5,
    "standard": 1.2,
    "comfort": 1.2,
    "economy": 1.0,
    "basic": 0.9,
    "премиум": 1.8,
    "люкс": 1.5,
    "стандарт": 1.2,
    "комфорт": 1.2,
    "эконом": 1.0,
    "базовый": 0.9,
}

DEFAULT_COLLECTION_MULTIPLIER = 1.0

# Minimum margin (%) for a listing price to count as rentable
MIN_PROFIT_MARGIN = 20.0

# Upper bound accepted by validate_product_price
MAX_PRODUCT_PRICE = 10_000_000


@dataclass
class AppConfig:
    """Calculation settings

    Only ever passed *into* the calculators; nothing here reads the
    environment (see wasser.config for that).
    """
    # currency label (display only)
    currency: str = "KGS"

    # paint / finish
    paint_loss_percent: float = 15.0        # waste applied to paint cost

    # master engine defaults
    default_labor_cost: float = 0.0
    default_markup_percent: float = 0.0
    missing_recipe_policy: str = "ignore"   # "ignore" | "flag"

    # listing estimate
    min_profit_margin: float = MIN_PROFIT_MARGIN
    collection_multipliers: Dict[str, float] = field(
        default_factory=lambda: dict(COLLECTION_MULTIPLIERS)
    )

    # caller-owned LRU price cache
    price_cache_size: int = 256


DEFAULT_CONFIG = AppConfig()
