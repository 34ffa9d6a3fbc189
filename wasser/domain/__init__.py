"""Domain module - pure costing logic"""
from .models import (
    MissingRecipePolicy,
    MaterialRecord,
    PaintRecipe,
    PaintComplexity,
    STANDARD_COMPLEXITY,
    Settings,
    CostDatasets,
    BomLine,
    PaintJob,
    ProductLike,
    MaterialCostRow,
    BomResult,
    PaintJobResult,
    PaintCostResult,
    CostBreakdown,
    MasterCostResult,
    CollectionRecord,
    FurnitureMaterial,
    MaterialBreakdownRow,
    FurniturePriceResult,
)
from .logic import (
    find_material,
    calculate_material_cost,
    process_bom,
    surface_area_m2,
    calculate_paint_cost,
    calculate_product_cost,
    format_cost_breakdown,
    log_cost_breakdown,
    CostEngine,
)

__all__ = [
    # catalog / input models
    "MissingRecipePolicy",
    "MaterialRecord",
    "PaintRecipe",
    "PaintComplexity",
    "STANDARD_COMPLEXITY",
    "Settings",
    "CostDatasets",
    "BomLine",
    "PaintJob",
    "ProductLike",
    # results
    "MaterialCostRow",
    "BomResult",
    "PaintJobResult",
    "PaintCostResult",
    "CostBreakdown",
    "MasterCostResult",
    # listing estimate
    "CollectionRecord",
    "FurnitureMaterial",
    "MaterialBreakdownRow",
    "FurniturePriceResult",
    # logic
    "find_material",
    "calculate_material_cost",
    "process_bom",
    "surface_area_m2",
    "calculate_paint_cost",
    "calculate_product_cost",
    "format_cost_breakdown",
    "log_cost_breakdown",
    "CostEngine",
]
