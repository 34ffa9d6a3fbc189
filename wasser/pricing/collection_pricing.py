"""
collection_pricing.py - quick listing price (collection multiplier)

Key features:
1. Collection multiplier from catalog records, then the static table
2. Optional materials cost (price x quantity x consumption coeff)
3. Profit margin, rentability check and recommended price
4. Price-list helpers: totals, averages, per-collection stats, discounts

A coarse estimate for listing views. Authoritative technical-card costing
lives in wasser.domain.logic.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..core.config import (
    AppConfig,
    DEFAULT_CONFIG,
    DEFAULT_COLLECTION_MULTIPLIER,
    MAX_PRODUCT_PRICE,
)
from ..domain.models import (
    CollectionRecord,
    FurnitureMaterial,
    FurniturePriceResult,
    MaterialBreakdownRow,
    coerce_quantities,
)
from ..domain.normalize import non_negative, normalize_key, round_money, to_number, to_text
from ..notifications.events import EventEmitter, EventType
from ..utils.helpers import format_currency, safe_divide
from .cache import PriceCache


@dataclass
class FurnitureItem:
    """Listing product"""
    id: str
    name: str
    collection: str
    base_price: float
    article: str = ""
    category: str = ""
    is_active: bool = True


@dataclass
class PriceListItem:
    """Price-list row"""
    product: FurnitureItem
    calculated_price: int
    collection_multiplier: float
    formatted_price: str


@dataclass
class CollectionStats:
    """Per-collection totals"""
    collection: str
    count: int
    total_value: int
    average_price: int
    multiplier: float
    products: List[FurnitureItem] = field(default_factory=list)


def get_collection_multiplier(
    collection_name: Optional[str],
    collections: Optional[Sequence[CollectionRecord]] = None,
    config: Optional[AppConfig] = None,
) -> float:
    """Multiplier for a collection name.

    Active catalog records win over the static table; unknown names give 1.0.
    """
    config = config or DEFAULT_CONFIG
    key = normalize_key(collection_name)
    if not key:
        return DEFAULT_COLLECTION_MULTIPLIER

    for record in collections or []:
        if record.is_active and normalize_key(record.name) == key:
            return record.multiplier

    return config.collection_multipliers.get(key, DEFAULT_COLLECTION_MULTIPLIER)


def calculate_materials_cost(
    materials: Optional[Iterable[FurnitureMaterial]],
    quantities: Optional[Dict[str, Any]],
) -> float:
    """Sum of price x quantity x coeff over active materials"""
    quantities = coerce_quantities(quantities)
    total = 0.0
    for material in materials or []:
        if not material.is_active:
            continue
        total += material.price * quantities.get(material.id, 0.0) * material.consumption_coeff
    return total


def materials_breakdown(
    materials: Optional[Iterable[FurnitureMaterial]],
    quantities: Optional[Dict[str, Any]],
) -> List[MaterialBreakdownRow]:
    """Active materials with a quantity, most expensive first"""
    quantities = coerce_quantities(quantities)
    rows = []
    for material in materials or []:
        quantity = quantities.get(material.id, 0.0)
        if not material.is_active or quantity <= 0:
            continue
        rows.append(MaterialBreakdownRow(
            id=material.id,
            name=material.name,
            quantity=quantity,
            unit_price=material.price,
            coefficient=material.consumption_coeff,
            cost=material.price * quantity * material.consumption_coeff,
            unit=material.unit,
            category=material.category,
        ))
    rows.sort(key=lambda row: row.cost, reverse=True)
    return rows


def calculate_furniture_price(
    base_price: Any,
    collection_name: Optional[str],
    materials: Optional[Sequence[FurnitureMaterial]] = None,
    quantities: Optional[Dict[str, Any]] = None,
    collections: Optional[Sequence[CollectionRecord]] = None,
    config: Optional[AppConfig] = None,
) -> FurniturePriceResult:
    """Listing price = (base price + materials cost) x collection multiplier

    Args:
        base_price: base price (missing / negative -> 0)
        collection_name: collection, matched case-insensitively
        materials: catalog materials for the materials-cost variant
        quantities: material id -> quantity
        collections: catalog collection records
        config: calculation settings

    Returns:
        FurniturePriceResult: `profit_margin` is the raw figure and drives
        `is_rentable`; `display_margin` is floored at the minimum margin
        for display only.
    """
    config = config or DEFAULT_CONFIG
    base = non_negative(base_price)
    multiplier = get_collection_multiplier(collection_name, collections, config)
    materials_cost = calculate_materials_cost(materials, quantities)

    subtotal = base + materials_cost
    final_price = subtotal * multiplier
    markup = final_price - subtotal
    profit_margin = markup / subtotal * 100 if subtotal > 0 else 0.0

    min_margin = config.min_profit_margin
    is_rentable = profit_margin >= min_margin
    if is_rentable:
        recommended = final_price
    else:
        recommended = subtotal * (1 + min_margin / 100) * multiplier

    return FurniturePriceResult(
        base_price=base,
        materials_cost=materials_cost,
        collection_multiplier=multiplier,
        subtotal=subtotal,
        final_price=final_price,
        markup=markup,
        profit_margin=profit_margin,
        display_margin=max(profit_margin, min_margin),
        is_rentable=is_rentable,
        recommended_price=recommended,
        materials_breakdown=materials_breakdown(materials, quantities),
    )


def is_rentable(result: FurniturePriceResult, config: Optional[AppConfig] = None) -> bool:
    config = config or DEFAULT_CONFIG
    return result.profit_margin >= config.min_profit_margin


# ============================================================
# Price-list helpers
# ============================================================

def calculate_collection_price(
    base_price: Any, collection: Optional[str], config: Optional[AppConfig] = None
) -> int:
    """Rounded base price x collection multiplier"""
    return round_money(non_negative(base_price) * get_collection_multiplier(collection, config=config))


def calculate_price_list_item(
    product: FurnitureItem, config: Optional[AppConfig] = None
) -> PriceListItem:
    config = config or DEFAULT_CONFIG
    price = calculate_collection_price(product.base_price, product.collection, config)
    return PriceListItem(
        product=product,
        calculated_price=price,
        collection_multiplier=get_collection_multiplier(product.collection, config=config),
        formatted_price=format_currency(price, config.currency),
    )


def calculate_total_value(
    products: Iterable[FurnitureItem], config: Optional[AppConfig] = None
) -> int:
    return sum(calculate_collection_price(p.base_price, p.collection, config) for p in products)


def calculate_average_price(
    products: Sequence[FurnitureItem], config: Optional[AppConfig] = None
) -> int:
    if not products:
        return 0
    return round_money(calculate_total_value(products, config) / len(products))


def calculate_collection_stats(
    products: Iterable[FurnitureItem], config: Optional[AppConfig] = None
) -> List[CollectionStats]:
    """Group products by collection (first-seen order)"""
    groups: Dict[str, CollectionStats] = {}
    for product in products:
        stats = groups.get(product.collection)
        if stats is None:
            stats = CollectionStats(
                collection=product.collection,
                count=0,
                total_value=0,
                average_price=0,
                multiplier=get_collection_multiplier(product.collection, config=config),
            )
            groups[product.collection] = stats
        stats.products.append(product)
        stats.count += 1
        stats.total_value += calculate_collection_price(product.base_price, product.collection, config)

    for stats in groups.values():
        stats.average_price = round_money(stats.total_value / stats.count)
    return list(groups.values())


def apply_discount(
    base_price: Any,
    collection: Optional[str],
    discount_percent: Any,
    config: Optional[AppConfig] = None,
) -> int:
    original = calculate_collection_price(base_price, collection, config)
    discount = round_money(original * non_negative(discount_percent) / 100)
    return original - discount


def validate_product_price(base_price: Any) -> bool:
    """0 < price <= 10M"""
    price = to_number(base_price, -1.0)
    return 0 < price <= MAX_PRODUCT_PRICE


def calculate_trend_percentage(current_value: Any, previous_value: Any) -> int:
    """Whole-percent change, 0 when there is no previous value"""
    previous = to_number(previous_value)
    change = safe_divide(to_number(current_value) - previous, previous)
    return round_money(change * 100)


# ============================================================
# Service (cache + events)
# ============================================================

class PricingService:
    """Listing price calculator with optional cache and events"""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        cache: Optional[PriceCache] = None,
        emitter: Optional[EventEmitter] = None,
        use_cache: bool = False,
    ):
        """
        Args:
            config: calculation settings. Defaults when None.
            cache: caller-owned PriceCache; no caching when None
            emitter: receives price.calculated and margin.warning
            use_cache: without `cache`, create one of `config.price_cache_size`
        """
        self.config = config or DEFAULT_CONFIG
        if cache is None and use_cache:
            cache = PriceCache(self.config.price_cache_size)
        self.cache = cache
        self.emitter = emitter

    def price(
        self,
        base_price: Any,
        collection_name: Optional[str],
        materials: Optional[Sequence[FurnitureMaterial]] = None,
        quantities: Optional[Dict[str, Any]] = None,
        collections: Optional[Sequence[CollectionRecord]] = None,
        product_id: Optional[str] = None,
    ) -> FurniturePriceResult:
        def compute() -> FurniturePriceResult:
            return calculate_furniture_price(
                base_price, collection_name, materials, quantities, collections, self.config
            )

        if self.cache is not None:
            key = PriceCache.make_key(
                product_id, base_price, collection_name, materials, quantities, collections
            )
            result = self.cache.get_or_compute(key, compute)
        else:
            result = compute()

        if self.emitter is not None:
            data = {
                "product_id": product_id,
                "collection": to_text(collection_name),
                "final_price": result.final_price,
                "profit_margin": result.profit_margin,
            }
            self.emitter.emit(EventType.PRICE_CALCULATED, data, source="pricing")
            if not result.is_rentable:
                self.emitter.emit(EventType.MARGIN_WARNING, data, source="pricing")

        return result
