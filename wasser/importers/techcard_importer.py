"""
techcard_importer.py - Excel tech card / material catalog importer

Key features:
1. Tech card sheets from the factory template (Russian headers)
   - meta rows above the table: "Изделие", "Количество изделий в заказе"
   - header row found by name + quantity columns
   - stops at two consecutive empty rows
2. Material catalog sheets (name + price columns, Russian or English),
   falling back to columns A-D when no header row is found
3. Tolerant numbers: "1 234,56", "1,5", plain floats
"""

import logging
import math
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from ..core.exceptions import DataImportError, ErrorCodes
from ..domain.models import BomLine, MaterialRecord, PaintJob, ProductLike
from ..domain.normalize import round_money
from ..notifications.events import EventEmitter, EventType

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_NAME = "Изделие"
DEFAULT_MATERIAL_NAME = "Материал"
DEFAULT_UNIT = "шт"

META_SCAN_ROWS = 21


@dataclass
class TechCardRow:
    """One material row of a tech card sheet"""
    name: str
    base_qty: float                         # quantity as written in the sheet
    items_in_order: int = 1
    coefficient: Optional[float] = None     # None when the sheet has no value
    article: Optional[str] = None
    unit: Optional[str] = None
    note: Optional[str] = None
    price: Optional[float] = None

    @property
    def quantity(self) -> float:
        """base qty x coefficient x items in order"""
        coeff = 1.0 if self.coefficient is None else self.coefficient
        return max(0.0, self.base_qty * coeff * (self.items_in_order or 1))

    def to_bom_line(self) -> BomLine:
        # the coefficient stays a line override so it is applied exactly once
        return BomLine(
            article=self.article,
            name=self.name,
            unit=self.unit,
            quantity=self.base_qty * (self.items_in_order or 1),
            consumption_coeff=self.coefficient,
        )


@dataclass
class TechCardImport:
    """Parsed tech card (first sheet)"""
    product_name: str
    items_in_order: int = 1
    rows: List[TechCardRow] = field(default_factory=list)
    file_path: str = ""

    def to_product(
        self,
        size: Optional[str] = None,
        paint_jobs: Optional[Sequence[PaintJob]] = None,
        product_id: Optional[str] = None,
        article: Optional[str] = None,
    ) -> ProductLike:
        return ProductLike(
            id=product_id,
            name=self.product_name,
            article=article,
            size=size,
            tech_card=[row.to_bom_line() for row in self.rows],
            paint_jobs=list(paint_jobs or []),
        )


@dataclass
class MaterialImport:
    """Parsed material catalog"""
    materials: List[MaterialRecord] = field(default_factory=list)
    total_rows: int = 0
    used_fallback_columns: bool = False
    file_path: str = ""


def cell_text(value: Any) -> str:
    """Cell -> trimmed string ('' for empty / NaN)"""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def cell_number(value: Any) -> Optional[float]:
    """Cell -> float, None when unreadable

    Spaces are thousands separators and a comma is the decimal point,
    so "1 234,56" -> 1234.56.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = cell_text(value)
    if not text:
        return None
    text = re.sub(r"\s+", "", text).replace(",", ".")
    text = re.sub(r"[^0-9.\-]", "", text)
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class TechCardImporter:
    """Excel importer for tech cards and material catalogs"""

    def __init__(self, emitter: Optional[EventEmitter] = None):
        """
        Args:
            emitter: EventEmitter receiving import.completed
        """
        self.emitter = emitter

    # ---------- reading ----------

    def _read_grid(self, file_path: str, sheet_name: Any = 0) -> List[List[Any]]:
        """First sheet as a list of raw rows"""
        if not os.path.exists(file_path):
            raise DataImportError(
                f"File not found: {file_path}",
                file_path=file_path,
                error_code=ErrorCodes.IMPORT_FILE_NOT_FOUND,
            )
        try:
            df = pd.read_excel(file_path, sheet_name=sheet_name, header=None, dtype=object)
        except Exception as e:
            raise DataImportError(
                f"Could not read workbook: {e}",
                file_path=file_path,
                error_code=ErrorCodes.IMPORT_PARSE_ERROR,
                cause=e,
            ) from e
        return df.astype(object).where(pd.notna(df), None).values.tolist()

    @staticmethod
    def _cell(row: Sequence[Any], index: Optional[int]) -> Any:
        if index is None or index >= len(row):
            return None
        return row[index]

    # ---------- tech card ----------

    @staticmethod
    def _map_techcard_header(row: Sequence[Any]) -> Optional[Dict[str, int]]:
        lower = [cell_text(v).lower() for v in row]
        has_name = any("наимен" in s or "материал" in s or s == "name" for s in lower)
        has_qty = any(
            "количество" in s or "кол-во" in s or "qty" in s or "quantity" in s for s in lower
        )
        if not (has_name and has_qty):
            return None

        mapping: Dict[str, int] = {}
        for idx, s in enumerate(lower):
            if not s:
                continue
            if "артик" in s or s == "article":
                mapping.setdefault("article", idx)
            elif "наимен" in s or "материал" in s or s == "name":
                mapping.setdefault("name", idx)
            elif "примеч" in s or s == "note":
                mapping.setdefault("note", idx)
            elif "коэф" in s or "coef" in s:
                mapping.setdefault("coef", idx)
            elif "кол" in s or "qty" in s or "quantity" in s:
                mapping.setdefault("qty", idx)
            elif "ед" in s or "изм" in s or s == "unit":
                mapping.setdefault("unit", idx)
            elif "цена" in s or s == "price":
                mapping.setdefault("price", idx)
        return mapping

    def import_tech_card(self, file_path: str, sheet_name: Any = 0) -> TechCardImport:
        """
        Parse a tech card workbook

        Args:
            file_path: .xlsx path
            sheet_name: sheet (first by default)

        Returns:
            TechCardImport: product name, items in order and material rows
        """
        grid = self._read_grid(file_path, sheet_name)
        result = TechCardImport(product_name=DEFAULT_PRODUCT_NAME, file_path=file_path)

        # meta rows
        for row in grid[:META_SCAN_ROWS]:
            label = cell_text(self._cell(row, 0)).lower()
            value = self._cell(row, 1)
            if not label:
                continue
            if "изделие" in label:
                result.product_name = cell_text(value) or result.product_name
            elif "количество изделий" in label or "в заказе" in label:
                n = cell_number(value)
                result.items_in_order = round_money(n) if n is not None and n > 0 else 1

        header_index = -1
        mapping: Dict[str, int] = {}
        for idx, row in enumerate(grid):
            found = self._map_techcard_header(row)
            if found is not None:
                header_index, mapping = idx, found
                break

        if header_index < 0 or "name" not in mapping:
            logger.warning("No tech card header found in %s", file_path)
            self._emit(file_path, "tech_card", 0)
            return result

        row_index = header_index + 1
        while row_index < len(grid):
            row = grid[row_index]
            name = cell_text(self._cell(row, mapping["name"]))
            if not name:
                # two empty rows in a row end the table
                next_row = grid[row_index + 1] if row_index + 1 < len(grid) else []
                if not cell_text(self._cell(next_row, mapping["name"])):
                    break
                row_index += 1
                continue

            coef = cell_number(self._cell(row, mapping.get("coef")))
            base_qty = cell_number(self._cell(row, mapping.get("qty")))
            price = cell_number(self._cell(row, mapping.get("price")))
            result.rows.append(TechCardRow(
                name=name,
                base_qty=max(0.0, base_qty) if base_qty is not None else 0.0,
                items_in_order=result.items_in_order,
                coefficient=max(0.0, coef) if coef is not None else None,
                article=cell_text(self._cell(row, mapping.get("article"))) or None,
                unit=cell_text(self._cell(row, mapping.get("unit"))) or None,
                note=cell_text(self._cell(row, mapping.get("note"))) or None,
                price=price if price is not None and price > 0 else None,
            ))
            row_index += 1

        logger.info(
            "Imported tech card '%s': %d rows, %d items in order",
            result.product_name, len(result.rows), result.items_in_order,
        )
        self._emit(file_path, "tech_card", len(result.rows))
        return result

    # ---------- material catalog ----------

    @staticmethod
    def _map_materials_header(row: Sequence[Any]) -> Optional[Dict[str, int]]:
        lower = [cell_text(v).lower() for v in row]
        has_name = any("наимен" in s or "материал" in s or "name" in s for s in lower)
        has_price = any("цена" in s or "стоим" in s or "price" in s for s in lower)
        if not (has_name and has_price):
            return None

        mapping: Dict[str, int] = {}
        for idx, s in enumerate(lower):
            if not s:
                continue
            if "артик" in s or s == "article":
                mapping.setdefault("article", idx)
            elif "наимен" in s or "материал" in s or s == "name":
                mapping.setdefault("name", idx)
            elif ("ед" in s and "изм" in s) or s in ("ед.", "unit"):
                mapping.setdefault("unit", idx)
            elif "цена" in s or "стоим" in s or s == "price" or "сом" in s:
                mapping.setdefault("price", idx)
            elif "катег" in s or "тип" in s or s == "category":
                mapping.setdefault("category", idx)
            elif "коэф" in s or "coef" in s:
                mapping.setdefault("coef", idx)
        return mapping

    def import_materials(self, file_path: str, sheet_name: Any = 0) -> MaterialImport:
        """
        Parse a material catalog workbook

        Args:
            file_path: .xlsx path
            sheet_name: sheet (first by default)

        Returns:
            MaterialImport: MaterialRecord list (no ids; the catalog assigns them)
        """
        grid = self._read_grid(file_path, sheet_name)
        result = MaterialImport(file_path=file_path)

        header_index = -1
        mapping: Dict[str, int] = {}
        for idx, row in enumerate(grid):
            found = self._map_materials_header(row)
            if found is not None:
                header_index, mapping = idx, found
                break

        if header_index < 0 or "name" not in mapping or "price" not in mapping:
            result.used_fallback_columns = True
            result.materials = self._materials_from_fixed_columns(grid[1:])
        else:
            result.materials = self._materials_from_header(grid[header_index + 1:], mapping)

        result.total_rows = len(result.materials)
        logger.info("Imported %d materials from %s", result.total_rows, file_path)
        self._emit(file_path, "materials", result.total_rows)
        return result

    def _materials_from_fixed_columns(self, rows: Iterable[Sequence[Any]]) -> List[MaterialRecord]:
        """Columns A-D: name, unit, price, category"""
        materials = []
        for row in rows:
            name = cell_text(self._cell(row, 0))
            unit = cell_text(self._cell(row, 1))
            price = cell_number(self._cell(row, 2))
            category = cell_text(self._cell(row, 3))
            if not name and not unit and not price:
                continue
            materials.append(MaterialRecord(
                name=name or DEFAULT_MATERIAL_NAME,
                unit=unit or DEFAULT_UNIT,
                price=price or 0.0,
                type=category or None,
            ))
        return materials

    def _materials_from_header(
        self, rows: Sequence[Sequence[Any]], mapping: Dict[str, int]
    ) -> List[MaterialRecord]:
        materials = []
        for idx, row in enumerate(rows):
            name = cell_text(self._cell(row, mapping["name"]))
            price_raw = self._cell(row, mapping["price"])
            if not name and cell_text(price_raw) == "":
                next_row = rows[idx + 1] if idx + 1 < len(rows) else []
                if not cell_text(self._cell(next_row, mapping["name"])):
                    break
                continue

            price = cell_number(price_raw)
            materials.append(MaterialRecord(
                name=name or DEFAULT_MATERIAL_NAME,
                unit=cell_text(self._cell(row, mapping.get("unit"))) or DEFAULT_UNIT,
                price=price if price is not None else 0.0,
                article=cell_text(self._cell(row, mapping.get("article"))) or None,
                type=cell_text(self._cell(row, mapping.get("category"))) or None,
                consumption_coeff=cell_number(self._cell(row, mapping.get("coef"))),
            ))
        return materials

    def _emit(self, file_path: str, kind: str, rows: int):
        if self.emitter is not None:
            self.emitter.emit(
                EventType.IMPORT_COMPLETED,
                {"file_path": file_path, "kind": kind, "rows": rows},
                source="importer",
            )


def estimate_total_cost(
    rows: Iterable[TechCardRow],
    price_map: Optional[Dict[str, float]] = None,
    labor_cost: float = 0.0,
) -> int:
    """Quick spreadsheet estimate: sum(price x quantity) + labor

    Uses the row price when the sheet has one, else `price_map[name]`.
    Rows without a positive quantity are ignored.
    """
    price_map = price_map or {}
    total = 0.0
    for row in rows:
        quantity = row.quantity
        if quantity <= 0:
            continue
        unit_price = row.price if row.price and row.price > 0 else price_map.get(row.name, 0.0)
        total += unit_price * quantity
    return round_money(total + max(0.0, labor_cost or 0.0))
