"""CLI module tests"""

import json
import logging
import sys
from pathlib import Path

import pytest
from openpyxl import Workbook

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasser.cli.commands import (
    CLI,
    CLIConfig,
    create_parser,
    load_json_input,
    main,
)
from wasser.config import reload_settings
from wasser.core.exceptions import DataImportError, ErrorCodes


PRODUCT_INPUT = {
    "product": {
        "id": "p1",
        "name": "Шкаф 1000",
        "article": "SH-1000",
        "size": "1000x2000x500",
        "techCard": [{"materialId": "m1", "quantity": 2}],
        "paintJobs": [{"recipeId": "r1", "layers": 1, "complexityId": "c2"}],
    },
    "materials": [{"id": "m1", "name": "ЛДСП 16мм", "price": 250}],
    "recipes": [{"id": "r1", "name": "Эмаль", "pricePerM2": 100}],
    "complexities": [{"id": "c2", "name": "Фрезеровка", "coeff": 1.2}],
    "settings": {"currency": "KGS", "paintLossCoeff": 10},
}


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("WASSER_AUDIT_PATH", "WASSER_MISSING_RECIPE_POLICY", "WASSER_CURRENCY",
                "LOG_LEVEL", "DEBUG"):
        monkeypatch.delenv(key, raising=False)
    reload_settings()
    yield
    reload_settings()


def write_input(tmp_path, data=None):
    path = tmp_path / "product.json"
    path.write_text(json.dumps(data or PRODUCT_INPUT, ensure_ascii=False), encoding="utf-8")
    return str(path)


class TestCLIConfig:
    """CLIConfig"""

    def test_default_config(self):
        config = CLIConfig()
        assert config.verbose is False
        assert config.no_color is False
        assert config.log_dir is None

    def test_cli_uses_config(self):
        cli = CLI(CLIConfig(no_color=True))
        assert cli.console.no_color is True


class TestParser:
    """create_parser"""

    def setup_method(self):
        self.parser = create_parser()

    def test_cost_args(self):
        args = self.parser.parse_args(
            ["cost", "--input", "p.json", "--labor", "200", "--markup", "50",
             "--flag-missing-recipes"]
        )
        assert args.command == "cost"
        assert args.labor == 200
        assert args.markup == 50
        assert args.flag_missing_recipes is True
        assert args.audit is None

    def test_cost_requires_input(self):
        with pytest.raises(SystemExit):
            self.parser.parse_args(["cost"])

    def test_price_args(self):
        args = self.parser.parse_args(["price", "--base-price", "1000", "--collection", "premium"])
        assert args.base_price == 1000
        assert args.collection == "premium"

    def test_import_args(self):
        args = self.parser.parse_args(["import-techcard", "card.xlsx", "--output", "out.json"])
        assert args.file == "card.xlsx"
        assert args.output == "out.json"


class TestLoadJsonInput:
    """load_json_input"""

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataImportError) as exc_info:
            load_json_input(str(tmp_path / "nope.json"))
        assert exc_info.value.error_code == ErrorCodes.IMPORT_FILE_NOT_FOUND

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(DataImportError) as exc_info:
            load_json_input(str(path))
        assert exc_info.value.error_code == ErrorCodes.IMPORT_PARSE_ERROR

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(DataImportError):
            load_json_input(str(path))


class TestCommands:
    """main()"""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "wasser-costing" in capsys.readouterr().out

    def test_cost(self, tmp_path, capsys):
        path = write_input(tmp_path)
        code = main(["--no-color", "cost", "--input", path, "--labor", "200", "--markup", "50"])
        out = capsys.readouterr().out
        assert code == 0
        assert "1 624 KGS" in out
        assert "2 436 KGS" in out

    def test_cost_json(self, tmp_path, capsys):
        path = write_input(tmp_path)
        code = main(["cost", "--input", path, "--labor", "200", "--markup", "50", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["total_cost"] == 1624
        assert data["base_price"] == 2436
        assert data["has_errors"] is False

    def test_cost_flag_missing_recipes(self, tmp_path, capsys):
        data = json.loads(json.dumps(PRODUCT_INPUT))
        data["product"]["paintJobs"] = [{"recipeId": "ghost", "layers": 1}]
        path = write_input(tmp_path, data)

        main(["cost", "--input", path, "--json"])
        assert json.loads(capsys.readouterr().out)["has_errors"] is False

        main(["cost", "--input", path, "--json", "--flag-missing-recipes"])
        assert json.loads(capsys.readouterr().out)["has_errors"] is True

    def test_cost_audit(self, tmp_path, capsys):
        path = write_input(tmp_path)
        audit_path = tmp_path / "audit.json"
        code = main(["cost", "--input", path, "--json", "--audit", str(audit_path)])
        assert code == 0
        records = json.loads(audit_path.read_text(encoding="utf-8"))
        assert records[0]["key"] == "calc_p1"

    def test_cost_audit_log_context(self, tmp_path, capsys, caplog):
        caplog.set_level(logging.INFO, logger="wasser.cli")
        path = write_input(tmp_path)
        main(["cost", "--input", path, "--json", "--audit", str(tmp_path / "audit.json")])
        records = [r for r in caplog.records if r.getMessage().startswith("Audit calc_p1")]
        assert len(records) == 1
        assert records[0].context["product_id"] == "p1"
        assert records[0].context["operation"] == "audit"

    def test_cost_missing_input(self, tmp_path, capsys):
        code = main(["--no-color", "cost", "--input", str(tmp_path / "missing.json")])
        assert code == 1
        assert ErrorCodes.IMPORT_FILE_NOT_FOUND in capsys.readouterr().out

    def test_price(self, capsys):
        code = main(["--no-color", "price", "--base-price", "1000", "--collection", "Premium"])
        out = capsys.readouterr().out
        assert code == 0
        assert "1 800 KGS" in out
        assert "x1.8" in out

    def test_price_low_margin(self, capsys):
        code = main(["--no-color", "price", "--base-price", "1000", "--collection", "basic"])
        out = capsys.readouterr().out
        assert code == 0
        assert "1 080 KGS" in out

    def test_price_rejects_invalid_base_price(self, capsys):
        code = main(["--no-color", "price", "--base-price", "-5", "--collection", "premium"])
        assert code == 1
        assert ErrorCodes.VALIDATION in capsys.readouterr().out

    def test_import_techcard(self, tmp_path, capsys):
        wb = Workbook()
        ws = wb.active
        ws.append(["Изделие", "Тумба 600"])
        ws.append(["Наименование", "Количество"])
        ws.append(["ЛДСП", 2])
        xlsx = tmp_path / "card.xlsx"
        wb.save(xlsx)
        output = tmp_path / "out" / "product.json"

        code = main(["--no-color", "import-techcard", str(xlsx), "--output", str(output),
                     "--size", "600x800x450"])
        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["product"]["name"] == "Тумба 600"
        assert data["product"]["size"] == "600x800x450"
        assert data["product"]["tech_card"][0]["quantity"] == 2

    def test_import_techcard_output_feeds_cost(self, tmp_path, capsys):
        wb = Workbook()
        ws = wb.active
        ws.append(["Наименование", "Количество"])
        ws.append(["ЛДСП 16мм", 2])
        xlsx = tmp_path / "card.xlsx"
        wb.save(xlsx)
        output = tmp_path / "product.json"
        main(["import-techcard", str(xlsx), "--output", str(output)])
        capsys.readouterr()

        data = json.loads(output.read_text(encoding="utf-8"))
        data["materials"] = PRODUCT_INPUT["materials"]
        output.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

        main(["cost", "--input", str(output), "--json"])
        assert json.loads(capsys.readouterr().out)["materials_cost"] == 500

    def test_import_materials(self, tmp_path, capsys):
        wb = Workbook()
        ws = wb.active
        ws.append(["Наименование", "Ед. изм.", "Цена"])
        ws.append(["Петля", "шт", 45])
        xlsx = tmp_path / "materials.xlsx"
        wb.save(xlsx)
        output = tmp_path / "materials.json"

        code = main(["--no-color", "import-materials", str(xlsx), "--output", str(output)])
        assert code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data[0]["name"] == "Петля"
        assert data[0]["price"] == 45

    def test_import_missing_file(self, tmp_path, capsys):
        code = main(["--no-color", "import-materials", str(tmp_path / "missing.xlsx")])
        assert code == 1
