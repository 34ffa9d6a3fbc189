"""Pricing module - listing estimate and price cache"""
from .cache import PriceCache
from .collection_pricing import (
    FurnitureItem,
    PriceListItem,
    CollectionStats,
    get_collection_multiplier,
    calculate_materials_cost,
    materials_breakdown,
    calculate_furniture_price,
    is_rentable,
    calculate_collection_price,
    calculate_price_list_item,
    calculate_total_value,
    calculate_average_price,
    calculate_collection_stats,
    apply_discount,
    validate_product_price,
    calculate_trend_percentage,
    PricingService,
)

__all__ = [
    "PriceCache",
    "FurnitureItem",
    "PriceListItem",
    "CollectionStats",
    "get_collection_multiplier",
    "calculate_materials_cost",
    "materials_breakdown",
    "calculate_furniture_price",
    "is_rentable",
    "calculate_collection_price",
    "calculate_price_list_item",
    "calculate_total_value",
    "calculate_average_price",
    "calculate_collection_stats",
    "apply_discount",
    "validate_product_price",
    "calculate_trend_percentage",
    "PricingService",
]
