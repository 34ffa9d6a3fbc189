"""
WASSER costing - furniture unit cost and price engine

Quick start:
    from wasser import CostDatasets, ProductLike, calculate_product_cost

    result = calculate_product_cost(product, datasets, labor_cost=200, markup_percent=50)
    print(result.total_cost, result.final_price)
"""

__version__ = "1.0.0"

from .core import (
    AppConfig,
    DEFAULT_CONFIG,
    WasserError,
    ConfigurationError,
    DataImportError,
    AuditError,
)
from .domain import (
    MissingRecipePolicy,
    MaterialRecord,
    PaintRecipe,
    PaintComplexity,
    Settings,
    CostDatasets,
    BomLine,
    PaintJob,
    ProductLike,
    MasterCostResult,
    CollectionRecord,
    FurnitureMaterial,
    FurniturePriceResult,
    find_material,
    calculate_material_cost,
    process_bom,
    calculate_paint_cost,
    calculate_product_cost,
    CostEngine,
)
from .pricing import PriceCache, PricingService, calculate_furniture_price
from .audit import CalculationAuditLog
from .notifications import EventEmitter, EventType

__all__ = [
    "__version__",
    "AppConfig",
    "DEFAULT_CONFIG",
    "WasserError",
    "ConfigurationError",
    "DataImportError",
    "AuditError",
    "MissingRecipePolicy",
    "MaterialRecord",
    "PaintRecipe",
    "PaintComplexity",
    "Settings",
    "CostDatasets",
    "BomLine",
    "PaintJob",
    "ProductLike",
    "MasterCostResult",
    "CollectionRecord",
    "FurnitureMaterial",
    "FurniturePriceResult",
    "find_material",
    "calculate_material_cost",
    "process_bom",
    "calculate_paint_cost",
    "calculate_product_cost",
    "CostEngine",
    "PriceCache",
    "PricingService",
    "calculate_furniture_price",
    "CalculationAuditLog",
    "EventEmitter",
    "EventType",
]
