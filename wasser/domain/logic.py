"""
logic.py - core costing logic

Pure Python, no I/O:
- material lookup and BOM costing (price x quantity x consumption coeff)
- paint / finish costing on the box surface of the product
- master engine: materials + paint + labor, markup, profit metrics

Incomplete catalog data never raises. Missing materials give invalid
zero-cost rows, missing paint recipes are skipped, and every numeric input
has already been sanitized by the models.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from .models import (
    BomLine,
    BomResult,
    CostBreakdown,
    CostDatasets,
    MasterCostResult,
    MaterialCostRow,
    MaterialRecord,
    MissingRecipePolicy,
    PaintComplexity,
    PaintCostResult,
    PaintJobResult,
    PaintRecipe,
    ProductLike,
    STANDARD_COMPLEXITY,
)
from .normalize import non_negative, normalize_key, parse_size, round_money
from ..core.config import AppConfig, DEFAULT_CONFIG
from ..notifications.events import EventEmitter, EventType


UNKNOWN_MATERIAL_NAME = "Материал"


# ============================================================
# Material lookup / BOM
# ============================================================

def find_material(
    ref: BomLine, materials: Optional[Sequence[MaterialRecord]]
) -> Optional[MaterialRecord]:
    """Resolve a BOM line: id, then article, then name (first match wins)"""
    if not materials:
        return None

    if ref.material_id:
        for material in materials:
            if material.id == ref.material_id:
                return material

    if ref.article:
        article = normalize_key(ref.article)
        for material in materials:
            if normalize_key(material.article) == article:
                return material

    if ref.name:
        name = normalize_key(ref.name)
        for material in materials:
            if normalize_key(material.name) == name:
                return material

    return None


def calculate_material_cost(
    line: BomLine, materials: Optional[Sequence[MaterialRecord]]
) -> MaterialCostRow:
    """Cost of one line: unit price x quantity x consumption coeff.

    Coefficient precedence: line override, material default, 1.
    """
    material = find_material(line, materials)
    quantity = non_negative(line.quantity)
    unit_price = material.price if material else 0.0

    if line.consumption_coeff is not None:
        coeff = line.consumption_coeff
    elif material is not None and material.consumption_coeff is not None:
        coeff = material.consumption_coeff
    else:
        coeff = 1.0
    coeff = non_negative(coeff, 1.0)

    if material is None:
        return MaterialCostRow(
            name=line.name or UNKNOWN_MATERIAL_NAME,
            article=line.article,
            unit=line.unit,
            quantity=quantity,
            unit_price=unit_price,
            consumption_coeff=coeff,
            total_cost=0.0,
            is_valid=False,
        )

    return MaterialCostRow(
        id=material.id,
        name=material.name,
        article=material.article,
        unit=line.unit or material.unit,
        quantity=quantity,
        unit_price=unit_price,
        consumption_coeff=coeff,
        total_cost=unit_price * quantity * coeff,
        # zero price or quantity means an unfinished catalog entry / line
        is_valid=unit_price > 0 and quantity > 0,
    )


def process_bom(product: ProductLike, datasets: Optional[CostDatasets]) -> BomResult:
    """Cost every technical card line and sum the materials subtotal"""
    datasets = datasets or CostDatasets()
    items = [calculate_material_cost(line, datasets.materials) for line in product.tech_card]
    return BomResult(
        total=sum(row.total_cost for row in items),
        items=items,
        has_errors=any(not row.is_valid for row in items),
    )


# ============================================================
# Paint / finish
# ============================================================

def surface_area_m2(size: Optional[str]) -> float:
    """Closed box surface 2*(WH + WD + HD) in m2 from a "WxHxD" mm string.

    The product is treated as a rectangular prism; any non-positive side
    gives 0.
    """
    w, h, d = (dim / 1000 for dim in parse_size(size))
    if w <= 0 or h <= 0 or d <= 0:
        return 0.0
    return 2 * (w * h + w * d + h * d)


def find_recipe(recipe_id: str, recipes: Sequence[PaintRecipe]) -> Optional[PaintRecipe]:
    for recipe in recipes:
        if recipe.id == recipe_id:
            return recipe
    return None


def resolve_complexity(
    complexity_id: Optional[str], complexities: Sequence[PaintComplexity]
) -> PaintComplexity:
    """Complexity by id, Standard (1.0) when absent or unknown"""
    if complexity_id:
        for complexity in complexities:
            if complexity.id == complexity_id:
                return complexity
    return STANDARD_COMPLEXITY


def recipe_price_per_m2(recipe: PaintRecipe) -> float:
    """Direct price per m2 if set, else cost per gram x grams per m2"""
    direct = non_negative(recipe.price_per_m2)
    if direct > 0:
        return direct
    return non_negative(recipe.cost_per_g) * non_negative(recipe.consumption_g_per_m2)


def calculate_paint_cost(
    product: ProductLike, datasets: Optional[CostDatasets]
) -> PaintCostResult:
    """Paint cost over all paint jobs.

    Per job: price/m2 x complexity x (1 + loss%) x surface area x layers.
    Jobs whose recipe is unknown contribute nothing and are listed in
    `skipped_jobs`. The total is rounded to a whole currency unit.
    """
    datasets = datasets or CostDatasets()
    area = surface_area_m2(product.size)
    if not product.paint_jobs or area <= 0:
        skipped_ids = [
            job.recipe_id for job in product.paint_jobs
            if find_recipe(job.recipe_id, datasets.recipes) is None
        ]
        return PaintCostResult(total=0, surface_area=area, skipped_jobs=skipped_ids)

    loss = non_negative(datasets.settings.paint_loss_coeff) / 100
    total = 0.0
    jobs: List[PaintJobResult] = []
    skipped: List[str] = []

    for job in product.paint_jobs:
        recipe = find_recipe(job.recipe_id, datasets.recipes)
        if recipe is None:
            skipped.append(job.recipe_id)
            continue

        complexity = resolve_complexity(
            job.complexity_id or recipe.complexity_id, datasets.complexities
        )
        layers = non_negative(job.layers)
        cost_per_m2 = recipe_price_per_m2(recipe) * complexity.coeff * (1 + loss)
        job_cost = cost_per_m2 * area * layers

        total += job_cost
        jobs.append(PaintJobResult(
            recipe_name=recipe.name,
            complexity=complexity.name,
            layers=layers,
            cost_per_m2=cost_per_m2,
            total_cost=job_cost,
        ))

    return PaintCostResult(
        total=round_money(total),
        surface_area=area,
        jobs=jobs,
        skipped_jobs=skipped,
    )


# ============================================================
# Master engine
# ============================================================

def calculate_product_cost(
    product: ProductLike,
    datasets: Optional[CostDatasets] = None,
    labor_cost: Optional[float] = None,
    markup_percent: Optional[float] = None,
    missing_recipe_policy: Union[MissingRecipePolicy, str] = MissingRecipePolicy.IGNORE,
) -> MasterCostResult:
    """Unit cost and sale price from the technical card and paint jobs

    Args:
        product: costing subject
        datasets: materials, recipes, complexities, settings
        labor_cost: labor per unit (missing / negative -> 0)
        markup_percent: markup on total cost (missing / negative -> 0)
        missing_recipe_policy: FLAG also marks the result incomplete when a
            paint job references an unknown recipe

    Returns:
        MasterCostResult: headline money fields rounded to whole units,
        margin and ROI as fractional percentages
    """
    datasets = datasets or CostDatasets()
    policy = MissingRecipePolicy.parse(missing_recipe_policy)

    bom = process_bom(product, datasets)
    paint = calculate_paint_cost(product, datasets)
    production_cost = bom.total + paint.total

    labor = non_negative(labor_cost)
    total_cost = production_cost + labor

    markup = non_negative(markup_percent)
    final_price = total_cost * (1 + markup / 100)

    gross_profit = final_price - total_cost
    gross_margin = gross_profit / final_price * 100 if final_price > 0 else 0.0
    roi = gross_profit / production_cost * 100 if production_cost > 0 else 0.0

    has_errors = bom.has_errors
    if policy is MissingRecipePolicy.FLAG and paint.skipped_jobs:
        has_errors = True

    return MasterCostResult(
        materials_cost=round_money(bom.total),
        paint_cost=round_money(paint.total),
        labor_cost=round_money(labor),
        production_cost=round_money(production_cost),
        total_cost=round_money(total_cost),
        markup_percent=markup,
        final_price=round_money(final_price),
        gross_profit=round_money(gross_profit),
        gross_margin=gross_margin,
        roi=roi,
        has_errors=has_errors,
        breakdown=CostBreakdown(materials=bom.items, paint=paint.jobs),
        surface_area=paint.surface_area,
        skipped_paint_jobs=list(paint.skipped_jobs),
    )


def format_cost_breakdown(
    product: ProductLike, result: MasterCostResult, currency: str = "KGS"
) -> List[str]:
    """Human readable breakdown lines"""
    return [
        f"Calculating cost for: {product.name} ({product.article or '-'})",
        "Production cost:",
        f"  Materials: {result.materials_cost:.2f} {currency}",
        f"  Paint: {result.paint_cost:.2f} {currency}",
        f"  Total production: {result.production_cost:.2f} {currency}",
        "Pricing:",
        f"  Labor: {result.labor_cost:.2f} {currency}",
        f"  Markup: {result.markup_percent:g}%",
        f"  Final price: {result.final_price:.2f} {currency}",
    ]


def log_cost_breakdown(
    log: logging.Logger,
    product: ProductLike,
    result: MasterCostResult,
    currency: str = "KGS",
    level: int = logging.DEBUG,
):
    for line in format_cost_breakdown(product, result, currency):
        log.log(level, line)


class CostEngine:
    """Master cost / price engine with caller-supplied hooks

    Wraps calculate_product_cost with config defaults (labor, markup,
    missing recipe policy), an optional breakdown logger and an optional
    event emitter. Holds no state between calls.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        emitter: Optional[EventEmitter] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            config: calculation settings. Defaults when None.
            emitter: EventEmitter receiving cost.calculated / cost.incomplete
            logger: receives the formatted breakdown at DEBUG
        """
        self.config = config or DEFAULT_CONFIG
        self.emitter = emitter
        self.logger = logger

    def calculate(
        self,
        product: Union[ProductLike, Dict[str, Any]],
        datasets: Union[CostDatasets, Dict[str, Any], None] = None,
        labor_cost: Optional[float] = None,
        markup_percent: Optional[float] = None,
    ) -> MasterCostResult:
        if isinstance(product, dict):
            product = ProductLike.from_dict(product)
        if datasets is None or isinstance(datasets, dict):
            data = dict(datasets or {})
            if data.get("settings") is None:
                # catalog without a settings row: take the configured defaults
                data["settings"] = {
                    "currency": self.config.currency,
                    "paint_loss_coeff": self.config.paint_loss_percent,
                }
            datasets = CostDatasets.from_dict(data)

        result = calculate_product_cost(
            product,
            datasets,
            labor_cost=self.config.default_labor_cost if labor_cost is None else labor_cost,
            markup_percent=(
                self.config.default_markup_percent if markup_percent is None else markup_percent
            ),
            missing_recipe_policy=self.config.missing_recipe_policy,
        )

        if self.logger is not None:
            log_cost_breakdown(self.logger, product, result, datasets.settings.currency)

        if self.emitter is not None:
            self._emit(product, result)

        return result

    def _emit(self, product: ProductLike, result: MasterCostResult):
        data = {"product_id": product.id, "product_name": product.name, **result.to_dict()}
        self.emitter.emit(EventType.COST_CALCULATED, data, source="cost_engine")
        if result.has_errors:
            invalid = [row.name for row in result.breakdown.materials if not row.is_valid]
            self.emitter.emit(
                EventType.COST_INCOMPLETE,
                {
                    "product_id": product.id,
                    "product_name": product.name,
                    "invalid_materials": invalid,
                    "skipped_paint_jobs": list(result.skipped_paint_jobs),
                },
                source="cost_engine",
            )
