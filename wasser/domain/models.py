"""
models.py - domain models

Plain dataclasses, no external dependencies.
Inputs sanitize themselves in __post_init__, so whatever reaches the
calculators is already finite and non-negative. `from_dict` accepts the
loose camelCase / snake_case records coming from the catalog tables.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .normalize import (
    as_list,
    non_negative,
    optional_number,
    optional_text,
    pick,
    to_text,
)


class MissingRecipePolicy(Enum):
    """What a paint job with an unknown recipe does to has_errors"""
    IGNORE = "ignore"       # skipped silently (catalog default)
    FLAG = "flag"           # skipped, and the result is marked incomplete

    @classmethod
    def parse(cls, value: Any, strict: bool = False) -> "MissingRecipePolicy":
        """Unknown values mean IGNORE unless strict (then ValueError)"""
        if isinstance(value, cls):
            return value
        try:
            return cls(to_text(value).lower() or cls.IGNORE.value)
        except ValueError:
            if strict:
                raise
            return cls.IGNORE


# ============================================================
# Catalog records (read-only to the engine)
# ============================================================

@dataclass
class MaterialRecord:
    """Catalog material"""
    name: str
    id: Optional[str] = None
    article: Optional[str] = None
    unit: Optional[str] = None
    price: float = 0.0                          # unit price
    consumption_coeff: Optional[float] = None   # default waste multiplier
    type: Optional[str] = None

    def __post_init__(self):
        self.name = to_text(self.name)
        self.id = optional_text(self.id)
        self.article = optional_text(self.article)
        self.unit = optional_text(self.unit)
        self.price = non_negative(self.price)
        coeff = optional_number(self.consumption_coeff)
        self.consumption_coeff = None if coeff is None else max(0.0, coeff)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaterialRecord":
        return cls(
            id=pick(data, "id"),
            name=pick(data, "name", default=""),
            article=pick(data, "article"),
            unit=pick(data, "unit"),
            price=pick(data, "price", default=0),
            consumption_coeff=pick(data, "consumptionCoeff", "consumption_coeff"),
            type=pick(data, "type"),
        )


@dataclass
class PaintRecipe:
    """Finish recipe

    Either a direct price per m2, or cost per gram x grams per m2.
    """
    id: str
    name: str
    price_per_m2: float = 0.0
    cost_per_g: float = 0.0
    consumption_g_per_m2: float = 0.0
    complexity_id: Optional[str] = None

    def __post_init__(self):
        self.id = to_text(self.id)
        self.name = to_text(self.name)
        self.price_per_m2 = non_negative(self.price_per_m2)
        self.cost_per_g = non_negative(self.cost_per_g)
        self.consumption_g_per_m2 = non_negative(self.consumption_g_per_m2)
        self.complexity_id = optional_text(self.complexity_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaintRecipe":
        cost_per_g = non_negative(pick(data, "costPerG", "cost_per_g"))
        if cost_per_g <= 0:
            # legacy column: mixture cost per kilogram
            cost_per_g = non_negative(pick(data, "cost")) / 1000
        return cls(
            id=pick(data, "id", default=""),
            name=pick(data, "name", default=""),
            price_per_m2=pick(data, "pricePerM2", "price_per_m2"),
            cost_per_g=cost_per_g,
            consumption_g_per_m2=pick(data, "consumptionGPerM2", "consumption_g_per_m2"),
            complexity_id=pick(data, "complexityId", "complexity_id"),
        )


@dataclass
class PaintComplexity:
    """Finish difficulty multiplier"""
    id: str
    name: str
    coeff: float = 1.0

    def __post_init__(self):
        self.id = to_text(self.id)
        self.name = to_text(self.name)
        self.coeff = non_negative(self.coeff, 1.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaintComplexity":
        return cls(
            id=pick(data, "id", default=""),
            name=pick(data, "name", default=""),
            coeff=pick(data, "coeff", "coefficient", default=1.0),
        )


STANDARD_COMPLEXITY = PaintComplexity(id="std", name="Standard", coeff=1.0)


@dataclass
class Settings:
    """Global coefficients"""
    currency: str = "KGS"
    paint_loss_coeff: float = 15.0      # percent, e.g. 15 means 15%

    def __post_init__(self):
        self.currency = to_text(self.currency) or "KGS"
        self.paint_loss_coeff = non_negative(self.paint_loss_coeff)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        data = data or {}
        return cls(
            currency=pick(data, "currency", default="KGS"),
            paint_loss_coeff=pick(data, "paintLossCoeff", "paint_loss_coeff", default=15.0),
        )


@dataclass
class CostDatasets:
    """Read-only context for every calculation"""
    materials: List[MaterialRecord] = field(default_factory=list)
    recipes: List[PaintRecipe] = field(default_factory=list)
    complexities: List[PaintComplexity] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)

    def __post_init__(self):
        self.materials = as_list(self.materials)
        self.recipes = as_list(self.recipes)
        self.complexities = as_list(self.complexities)
        if self.settings is None:
            self.settings = Settings()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CostDatasets":
        data = data or {}
        return cls(
            materials=[MaterialRecord.from_dict(m) for m in as_list(data.get("materials"))],
            recipes=[PaintRecipe.from_dict(r) for r in as_list(data.get("recipes"))],
            complexities=[PaintComplexity.from_dict(c) for c in as_list(data.get("complexities"))],
            settings=Settings.from_dict(data.get("settings")),
        )


# ============================================================
# Costing subject
# ============================================================

@dataclass
class BomLine:
    """Technical card line"""
    material_id: Optional[str] = None
    article: Optional[str] = None
    name: Optional[str] = None
    quantity: float = 0.0
    unit: Optional[str] = None
    consumption_coeff: Optional[float] = None   # per-line override

    def __post_init__(self):
        self.material_id = optional_text(self.material_id)
        self.article = optional_text(self.article)
        self.name = optional_text(self.name)
        self.unit = optional_text(self.unit)
        self.quantity = non_negative(self.quantity)
        coeff = optional_number(self.consumption_coeff)
        self.consumption_coeff = None if coeff is None else max(0.0, coeff)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BomLine":
        return cls(
            material_id=pick(data, "materialId", "material_id"),
            article=pick(data, "article"),
            name=pick(data, "name"),
            quantity=pick(data, "quantity", "qty", default=0),
            unit=pick(data, "unit"),
            consumption_coeff=pick(data, "consumptionCoeff", "consumption_coeff"),
        )


@dataclass
class PaintJob:
    """One application of a recipe"""
    recipe_id: str
    layers: float = 0.0
    complexity_id: Optional[str] = None

    def __post_init__(self):
        self.recipe_id = to_text(self.recipe_id)
        self.layers = non_negative(self.layers)
        self.complexity_id = optional_text(self.complexity_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaintJob":
        return cls(
            recipe_id=pick(data, "recipeId", "recipe_id", default=""),
            layers=pick(data, "layers", default=0),
            complexity_id=pick(data, "complexityId", "complexity_id"),
        )


@dataclass
class ProductLike:
    """Costing subject"""
    name: str
    id: Optional[str] = None
    article: Optional[str] = None
    size: Optional[str] = None          # "WxHxD" in mm, e.g. "600x800x150"
    tech_card: List[BomLine] = field(default_factory=list)
    paint_jobs: List[PaintJob] = field(default_factory=list)

    def __post_init__(self):
        self.name = to_text(self.name)
        self.id = optional_text(self.id)
        self.article = optional_text(self.article)
        self.size = optional_text(self.size)
        self.tech_card = as_list(self.tech_card)
        self.paint_jobs = as_list(self.paint_jobs)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductLike":
        return cls(
            id=pick(data, "id"),
            name=pick(data, "name", default=""),
            article=pick(data, "article"),
            size=pick(data, "size"),
            tech_card=[BomLine.from_dict(r) for r in as_list(pick(data, "techCard", "tech_card"))],
            paint_jobs=[PaintJob.from_dict(j) for j in as_list(pick(data, "paintJobs", "paint_jobs"))],
        )


# ============================================================
# Results (never persisted, never mutated after return)
# ============================================================

@dataclass
class MaterialCostRow:
    """Cost of one BOM line"""
    name: str
    quantity: float
    unit_price: float
    consumption_coeff: float
    total_cost: float
    is_valid: bool
    id: Optional[str] = None
    article: Optional[str] = None
    unit: Optional[str] = None


@dataclass
class BomResult:
    """Materials subtotal"""
    total: float
    items: List[MaterialCostRow] = field(default_factory=list)
    has_errors: bool = False


@dataclass
class PaintJobResult:
    """Cost of one paint job"""
    recipe_name: str
    complexity: str
    layers: float
    cost_per_m2: float
    total_cost: float


@dataclass
class PaintCostResult:
    """Paint subtotal"""
    total: int
    surface_area: float
    jobs: List[PaintJobResult] = field(default_factory=list)
    skipped_jobs: List[str] = field(default_factory=list)   # unknown recipe ids


@dataclass
class CostBreakdown:
    """Line-item detail for display"""
    materials: List[MaterialCostRow] = field(default_factory=list)
    paint: List[PaintJobResult] = field(default_factory=list)


@dataclass
class MasterCostResult:
    """Unit cost and sale price of a product"""
    # cost
    materials_cost: int
    paint_cost: int
    labor_cost: int
    production_cost: int            # materials + paint
    total_cost: int                 # production + labor

    # pricing
    markup_percent: float
    final_price: int

    # business metrics
    gross_profit: int
    gross_margin: float             # % of final price
    roi: float                      # % of production cost

    # quality
    has_errors: bool
    breakdown: CostBreakdown = field(default_factory=CostBreakdown)
    surface_area: float = 0.0
    skipped_paint_jobs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Fields in the shape the product table stores them"""
        return {
            "total_cost": self.total_cost,
            "markup": self.markup_percent,
            "base_price": self.final_price,
            "materials_cost": self.materials_cost,
            "paint_cost": self.paint_cost,
            "labor_cost": self.labor_cost,
            "gross_profit": self.gross_profit,
            "gross_margin": round(self.gross_margin, 2),
            "roi": round(self.roi, 2),
            "has_errors": self.has_errors,
        }


# ============================================================
# Listing estimate (collection multiplier path)
# ============================================================

@dataclass
class CollectionRecord:
    """Collection row from the catalog"""
    name: str
    multiplier: float = 1.0
    is_active: bool = True

    def __post_init__(self):
        self.name = to_text(self.name)
        self.multiplier = non_negative(self.multiplier, 1.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectionRecord":
        return cls(
            name=pick(data, "name", default=""),
            multiplier=pick(data, "multiplier", default=1.0),
            is_active=bool(pick(data, "isActive", "is_active", default=True)),
        )


@dataclass
class FurnitureMaterial:
    """Material as seen by the listing estimate"""
    id: str
    name: str
    price: float = 0.0
    consumption_coeff: float = 1.0
    unit: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True

    def __post_init__(self):
        self.id = to_text(self.id)
        self.name = to_text(self.name)
        self.price = non_negative(self.price)
        self.consumption_coeff = non_negative(self.consumption_coeff, 1.0)


@dataclass
class MaterialBreakdownRow:
    id: str
    name: str
    quantity: float
    unit_price: float
    coefficient: float
    cost: float
    unit: Optional[str] = None
    category: Optional[str] = None


@dataclass
class FurniturePriceResult:
    """Quick listing price"""
    base_price: float
    materials_cost: float
    collection_multiplier: float
    subtotal: float
    final_price: float
    markup: float
    profit_margin: float            # raw %
    display_margin: float           # floored at the minimum margin
    is_rentable: bool
    recommended_price: float
    materials_breakdown: List[MaterialBreakdownRow] = field(default_factory=list)


def coerce_quantities(quantities: Optional[Dict[str, Any]]) -> Dict[str, float]:
    """material id -> non-negative quantity"""
    return {str(k): non_negative(v) for k, v in (quantities or {}).items()}
