"""Importers module - Excel tech cards and material catalogs"""
from .techcard_importer import (
    TechCardRow,
    TechCardImport,
    MaterialImport,
    TechCardImporter,
    cell_text,
    cell_number,
    estimate_total_cost,
)

__all__ = [
    "TechCardRow",
    "TechCardImport",
    "MaterialImport",
    "TechCardImporter",
    "cell_text",
    "cell_number",
    "estimate_total_cost",
]
