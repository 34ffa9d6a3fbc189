"""fingerprint.py tests"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from wasser.audit.fingerprint import (
    build_audit_payload,
    fingerprint,
    audit_key,
    AuditRecord,
    CalculationAuditLog,
)
from wasser.core.exceptions import AuditError, ErrorCodes
from wasser.domain.logic import calculate_product_cost
from wasser.domain.models import (
    BomLine,
    CostDatasets,
    MaterialRecord,
    PaintJob,
    PaintRecipe,
    ProductLike,
)
from wasser.notifications.events import EventEmitter, EventType


def make_case(markup=50):
    datasets = CostDatasets(
        materials=[MaterialRecord(id="m1", name="ЛДСП", price=250)],
        recipes=[PaintRecipe(id="r1", name="Эмаль", price_per_m2=100)],
    )
    product = ProductLike(
        id="p1",
        name="Шкаф",
        size="1000x2000x500",
        tech_card=[BomLine(material_id="m1", quantity=2)],
        paint_jobs=[PaintJob(recipe_id="r1", layers=1)],
    )
    return product, calculate_product_cost(product, datasets, 200, markup)


class TestPayload:
    """payload and fingerprint"""

    def test_payload_shape(self):
        product, result = make_case()
        payload = build_audit_payload(product, result)
        assert payload["materials"] == [
            {"id": "m1", "name": "ЛДСП", "qty": 2.0, "price": 250.0, "coeff": 1.0}
        ]
        assert payload["paint"][0]["recipe"] == "Эмаль"
        assert payload["paint"][0]["layers"] == 1.0
        assert payload["total"] == result.total_cost
        assert payload["final"] == result.final_price

    def test_fingerprint_deterministic(self):
        product, result = make_case()
        first = fingerprint(build_audit_payload(product, result))
        second = fingerprint(build_audit_payload(*make_case()))
        assert first == second
        assert len(first) == 64

    def test_fingerprint_key_order_independent(self):
        assert fingerprint({"a": 1, "b": 2}) == fingerprint({"b": 2, "a": 1})

    def test_different_results_differ(self):
        product, result = make_case(markup=50)
        _, other = make_case(markup=60)
        assert fingerprint(build_audit_payload(product, result)) != fingerprint(
            build_audit_payload(product, other)
        )

    def test_audit_key(self):
        assert audit_key(ProductLike(id="p1", name="Шкаф")) == "calc_p1"
        assert audit_key(ProductLike(name="Шкаф")) == "calc_Шкаф"


class TestCalculationAuditLog:
    """CalculationAuditLog"""

    def test_record_and_verify(self):
        log = CalculationAuditLog()
        product, result = make_case()
        entry = log.record(product, result)
        assert entry.key == "calc_p1"
        assert entry.final_price == result.final_price
        assert "calc_p1" in log
        assert len(log) == 1
        assert log.verify(product, result) is True

    def test_verify_detects_change(self):
        log = CalculationAuditLog()
        product, result = make_case(markup=50)
        log.record(product, result)
        _, changed = make_case(markup=60)
        assert log.verify(product, changed) is False

    def test_verify_unknown_product(self):
        product, result = make_case()
        assert CalculationAuditLog().verify(product, result) is False

    def test_record_replaces(self):
        log = CalculationAuditLog()
        product, result = make_case(markup=50)
        log.record(product, result)
        _, changed = make_case(markup=60)
        log.record(product, changed)
        assert len(log) == 1
        assert log.get("calc_p1").final_price == changed.final_price

    def test_persist_and_reload(self, tmp_path):
        path = tmp_path / "audit" / "log.json"
        product, result = make_case()
        CalculationAuditLog(path).record(product, result)
        assert path.exists()

        reloaded = CalculationAuditLog(path)
        assert len(reloaded) == 1
        assert reloaded.verify(product, result) is True

    def test_file_format(self, tmp_path):
        path = tmp_path / "log.json"
        product, result = make_case()
        CalculationAuditLog(path).record(product, result)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[0]["key"] == "calc_p1"
        assert AuditRecord.from_dict(data[0]).fingerprint == data[0]["fingerprint"]

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "log.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(AuditError) as exc_info:
            CalculationAuditLog(path)
        assert exc_info.value.error_code == ErrorCodes.AUDIT_READ_FAILED
        assert exc_info.value.operation == "load"

    def test_file_not_a_list(self, tmp_path):
        path = tmp_path / "log.json"
        path.write_text('{"key": "calc_p1"}', encoding="utf-8")
        with pytest.raises(AuditError) as exc_info:
            CalculationAuditLog(path)
        assert exc_info.value.error_code == ErrorCodes.AUDIT_READ_FAILED

    def test_record_without_key(self, tmp_path):
        path = tmp_path / "log.json"
        path.write_text('[{"fingerprint": "abc"}, 5]', encoding="utf-8")
        with pytest.raises(AuditError) as exc_info:
            CalculationAuditLog(path)
        assert exc_info.value.error_code == ErrorCodes.AUDIT_READ_FAILED
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_save_without_path(self):
        with pytest.raises(AuditError):
            CalculationAuditLog().save()

    def test_emits_event(self):
        emitter = EventEmitter()
        events = []
        emitter.on(EventType.AUDIT_RECORDED, events.append)
        product, result = make_case()
        CalculationAuditLog(emitter=emitter).record(product, result)
        assert len(events) == 1
        assert events[0].data["key"] == "calc_p1"
