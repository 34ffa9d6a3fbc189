"""
CLI commands

Subcommands:
- cost: unit cost / sale price of a product from a JSON file
- price: quick listing price from base price and collection
- import-materials: read a material catalog workbook
- import-techcard: read a tech card workbook into a product

Output is rendered with rich tables.
"""

import argparse
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..audit import CalculationAuditLog
from ..config import get_settings
from ..core.config import AppConfig
from ..core.exceptions import DataImportError, ErrorCodes, ValidationError, WasserError
from ..core.logging import setup_logger
from ..domain.logic import CostEngine
from ..domain.models import (
    FurniturePriceResult,
    MasterCostResult,
    MissingRecipePolicy,
    ProductLike,
    Settings,
)
from ..importers import MaterialImport, TechCardImport, TechCardImporter
from ..logging_config import get_context_logger, get_perf_logger, setup_logging
from ..notifications import Event, EventEmitter, EventType
from ..pricing import PricingService, validate_product_price
from ..utils.helpers import format_currency, format_percent

logger = logging.getLogger(__name__)


@dataclass
class CLIConfig:
    """CLI settings"""
    verbose: bool = False
    no_color: bool = False
    log_dir: Optional[str] = None
    json_logs: bool = False


class CLI:
    """Console output for the WASSER costing commands"""

    def __init__(self, config: CLIConfig = None, console: Console = None):
        self.config = config or CLIConfig()
        self.console = console or Console(no_color=self.config.no_color, highlight=False)

    def print_header(self, title: str):
        self.console.rule(f"[bold]{escape(title)}")

    def print_result(self, key: str, value: Any):
        self.console.print(f"  {key}: [bold]{escape(str(value))}[/bold]")

    def print_success(self, message: str):
        self.console.print(f"[green]{escape(message)}[/green]")

    def print_warning(self, message: str):
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def print_error(self, message: str):
        self.console.print(f"[red]{escape(message)}[/red]")

    # ---------- renderers ----------

    def render_cost(self, product: ProductLike, result: MasterCostResult, currency: str):
        self.print_header(f"{product.name} ({product.article or '-'})")

        if result.breakdown.materials:
            table = Table(title="Materials")
            table.add_column("Material", overflow="fold")
            table.add_column("Qty", justify="right")
            table.add_column("Price", justify="right")
            table.add_column("Coeff", justify="right")
            table.add_column("Total", justify="right")
            for row in result.breakdown.materials:
                name = escape(row.name) if row.is_valid else f"[red]{escape(row.name)} (!)[/red]"
                table.add_row(
                    name,
                    f"{row.quantity:g}",
                    f"{row.unit_price:g}",
                    f"{row.consumption_coeff:g}",
                    f"{row.total_cost:.2f}",
                )
            self.console.print(table)

        if result.breakdown.paint:
            table = Table(title=f"Paint ({result.surface_area:.3f} m2)")
            table.add_column("Recipe", overflow="fold")
            table.add_column("Complexity")
            table.add_column("Layers", justify="right")
            table.add_column("Per m2", justify="right")
            table.add_column("Total", justify="right")
            for job in result.breakdown.paint:
                table.add_row(
                    escape(job.recipe_name),
                    job.complexity,
                    f"{job.layers:g}",
                    f"{job.cost_per_m2:.2f}",
                    f"{job.total_cost:.2f}",
                )
            self.console.print(table)

        self.print_result("Materials", format_currency(result.materials_cost, currency))
        self.print_result("Paint", format_currency(result.paint_cost, currency))
        self.print_result("Labor", format_currency(result.labor_cost, currency))
        self.print_result("Total cost", format_currency(result.total_cost, currency))
        self.print_result("Markup", format_percent(result.markup_percent, 0))
        self.print_result("Final price", format_currency(result.final_price, currency))
        self.print_result("Gross profit", format_currency(result.gross_profit, currency))
        self.print_result("Gross margin", format_percent(result.gross_margin, 2))
        self.print_result("ROI", format_percent(result.roi, 2))

        if result.skipped_paint_jobs:
            self.print_warning(f"Unknown paint recipes: {', '.join(result.skipped_paint_jobs)}")
        if result.has_errors:
            self.print_warning("Result is incomplete: check the marked materials")
        else:
            self.print_success("Cost calculated")

    def render_price(self, result: FurniturePriceResult, collection: str, currency: str):
        self.print_header(f"Listing price - {collection or '-'}")
        self.print_result("Base price", format_currency(result.base_price, currency))
        self.print_result("Materials", format_currency(result.materials_cost, currency))
        self.print_result("Multiplier", f"x{result.collection_multiplier:g}")
        self.print_result("Final price", format_currency(result.final_price, currency))
        self.print_result("Margin", format_percent(result.display_margin))
        if result.is_rentable:
            self.print_success("Margin OK")
        else:
            self.print_warning(
                f"Margin below minimum, recommended price "
                f"{format_currency(result.recommended_price, currency)}"
            )

    def render_materials(self, imported: MaterialImport, currency: str):
        table = Table(title=f"Materials ({imported.total_rows})")
        table.add_column("Article")
        table.add_column("Name", overflow="fold")
        table.add_column("Unit")
        table.add_column("Price", justify="right")
        table.add_column("Category")
        for material in imported.materials:
            table.add_row(
                material.article or "",
                escape(material.name),
                material.unit or "",
                format_currency(material.price, currency),
                material.type or "",
            )
        self.console.print(table)
        if imported.used_fallback_columns:
            self.print_warning("No header row found; read columns A-D")

    def render_tech_card(self, imported: TechCardImport):
        table = Table(title=f"{imported.product_name} x {imported.items_in_order}")
        table.add_column("Article")
        table.add_column("Name", overflow="fold")
        table.add_column("Unit")
        table.add_column("Qty", justify="right")
        table.add_column("Coeff", justify="right")
        table.add_column("Total qty", justify="right")
        for row in imported.rows:
            table.add_row(
                row.article or "",
                escape(row.name),
                row.unit or "",
                f"{row.base_qty:g}",
                "" if row.coefficient is None else f"{row.coefficient:g}",
                f"{row.quantity:g}",
            )
        self.console.print(table)


def create_parser() -> argparse.ArgumentParser:
    """CLI parser"""
    parser = argparse.ArgumentParser(
        prog="wasser-costing",
        description="WASSER furniture cost and price calculator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # unit cost with 50%% markup
  %(prog)s cost --input tumba.json --labor 200 --markup 50

  # listing price
  %(prog)s price --base-price 1000 --collection premium

  # import a tech card
  %(prog)s import-techcard techcard.xlsx --output tumba.json
"""
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="debug output")
    parser.add_argument("--no-color", action="store_true", help="disable colors")
    parser.add_argument("--log-dir", help="also write rotating log files here")
    parser.add_argument("--json-logs", action="store_true", help="JSON log records in files")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="available commands")

    cost_parser = subparsers.add_parser("cost", help="unit cost and sale price")
    cost_parser.add_argument("--input", required=True, help="product JSON (product + catalog)")
    cost_parser.add_argument("--labor", type=float, help="labor cost per unit")
    cost_parser.add_argument("--markup", type=float, help="markup percent")
    cost_parser.add_argument(
        "--flag-missing-recipes",
        action="store_true",
        help="mark the result incomplete when a paint recipe is unknown",
    )
    cost_parser.add_argument("--audit", help="audit log JSON to record the result in")
    cost_parser.add_argument("--json", action="store_true", help="print the result as JSON")

    price_parser = subparsers.add_parser("price", help="listing price by collection")
    price_parser.add_argument("--base-price", type=float, required=True, help="base price")
    price_parser.add_argument("--collection", default="", help="collection name")

    materials_parser = subparsers.add_parser("import-materials", help="read a material catalog")
    materials_parser.add_argument("file", help=".xlsx file")
    materials_parser.add_argument("--output", help="write materials to this JSON file")

    techcard_parser = subparsers.add_parser("import-techcard", help="read a tech card")
    techcard_parser.add_argument("file", help=".xlsx file")
    techcard_parser.add_argument("--size", help="product size WxHxD in mm")
    techcard_parser.add_argument("--output", help="write the product to this JSON file")

    return parser


def load_json_input(path: str) -> Dict[str, Any]:
    """Read a JSON input file

    Raises:
        DataImportError: missing file or invalid JSON
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise DataImportError(
            f"File not found: {path}",
            file_path=path,
            error_code=ErrorCodes.IMPORT_FILE_NOT_FOUND,
            cause=e,
        ) from e
    except json.JSONDecodeError as e:
        raise DataImportError(
            f"Invalid JSON: {e}",
            file_path=path,
            row_number=e.lineno,
            error_code=ErrorCodes.IMPORT_PARSE_ERROR,
            cause=e,
        ) from e

    if not isinstance(data, dict):
        raise DataImportError(
            "Expected a JSON object", file_path=path, error_code=ErrorCodes.IMPORT_PARSE_ERROR
        )
    return data


def write_json_output(path: str, data: Any):
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def log_warning_event(event: Event):
    """Log margin warnings and incomplete costs"""
    if event.event_type is EventType.MARGIN_WARNING:
        logger.warning("Margin below minimum: %s", event.data.get("collection"))
    elif event.event_type is EventType.COST_INCOMPLETE:
        logger.warning(
            "Incomplete cost for %s: %s",
            event.data.get("product_name"),
            ", ".join(event.data.get("invalid_materials") or []) or "unknown paint recipes",
        )


def cmd_cost(args, cli: CLI, config: AppConfig, emitter: EventEmitter) -> int:
    data = load_json_input(args.input)
    product = ProductLike.from_dict(data.get("product") or {})
    catalog = data.get("datasets") or data
    catalog_settings = catalog.get("settings")
    currency = Settings.from_dict(catalog_settings).currency if catalog_settings else config.currency

    if args.flag_missing_recipes:
        config.missing_recipe_policy = MissingRecipePolicy.FLAG.value

    engine = CostEngine(config, emitter=emitter, logger=logger)
    result = engine.calculate(product, catalog, labor_cost=args.labor, markup_percent=args.markup)

    audit_path = args.audit or get_settings().audit_path
    if audit_path:
        entry = CalculationAuditLog(audit_path, emitter=emitter).record(product, result)
        audit_logger = get_context_logger(
            "cli", product_id=product.id, product_name=product.name, operation="audit"
        )
        audit_logger.info("Audit %s: %s", entry.key, entry.fingerprint)

    if args.json:
        cli.console.print_json(data=result.to_dict())
    else:
        cli.render_cost(product, result, currency)
    return 0


def cmd_price(args, cli: CLI, config: AppConfig, emitter: EventEmitter) -> int:
    if not validate_product_price(args.base_price):
        raise ValidationError(
            "Base price must be above 0 and at most 10 000 000",
            field="base_price",
            value=args.base_price,
        )
    service = PricingService(config, emitter=emitter)
    result = service.price(args.base_price, args.collection)
    cli.render_price(result, args.collection, config.currency)
    return 0


def cmd_import_materials(args, cli: CLI, config: AppConfig, emitter: EventEmitter) -> int:
    imported = TechCardImporter(emitter=emitter).import_materials(args.file)
    cli.render_materials(imported, config.currency)
    if args.output:
        write_json_output(args.output, [asdict(m) for m in imported.materials])
        cli.print_success(f"Saved: {args.output}")
    return 0


def cmd_import_techcard(args, cli: CLI, config: AppConfig, emitter: EventEmitter) -> int:
    imported = TechCardImporter(emitter=emitter).import_tech_card(args.file)
    cli.render_tech_card(imported)
    if args.output:
        product = imported.to_product(size=args.size)
        write_json_output(args.output, {"product": asdict(product)})
        cli.print_success(f"Saved: {args.output}")
    return 0


COMMANDS = {
    "cost": cmd_cost,
    "price": cmd_price,
    "import-materials": cmd_import_materials,
    "import-techcard": cmd_import_techcard,
}


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point, returns the exit code"""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli_config = CLIConfig(
        verbose=args.verbose,
        no_color=args.no_color,
        log_dir=args.log_dir,
        json_logs=args.json_logs,
    )
    cli = CLI(cli_config)

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    level = "DEBUG" if args.verbose or settings.debug_mode else settings.log_level
    if cli_config.log_dir:
        setup_logging(
            level=level,
            log_dir=cli_config.log_dir,
            log_to_console=False,
            json_format=cli_config.json_logs,
        )
    setup_logger("wasser", level)

    emitter = EventEmitter()
    emitter.on(EventType.MARGIN_WARNING, log_warning_event)
    emitter.on(EventType.COST_INCOMPLETE, log_warning_event)

    try:
        config = settings.to_app_config()
        with get_perf_logger("cli").track(args.command):
            return COMMANDS[args.command](args, cli, config, emitter)
    except WasserError as e:
        cli.print_error(str(e))
        emitter.emit(EventType.ERROR_OCCURRED, e.to_dict(), source="cli")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
