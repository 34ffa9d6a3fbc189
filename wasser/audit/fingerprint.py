"""
fingerprint.py - calculation audit log

Advisory integrity trail for costing results, not a security control.
The engine never calls this; the caller records a result after
calculate_product_cost returns it.

Payload: material rows (id/name/qty/price/coeff), paint rows
(recipe/layers/costPerM2), total and final price. The fingerprint is the
SHA-256 of the canonical JSON, so equal results always fingerprint equal.
"""

import hashlib
import json
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..core.exceptions import AuditError, ErrorCodes
from ..domain.models import MasterCostResult, ProductLike
from ..notifications.events import EventEmitter, EventType


def build_audit_payload(product: ProductLike, result: MasterCostResult) -> Dict[str, Any]:
    """Deterministic payload for one calculation"""
    return {
        "materials": [
            {
                "id": row.id,
                "name": row.name,
                "qty": row.quantity,
                "price": row.unit_price,
                "coeff": row.consumption_coeff,
            }
            for row in result.breakdown.materials
        ],
        "paint": [
            {
                "recipe": job.recipe_name,
                "layers": job.layers,
                "costPerM2": job.cost_per_m2,
            }
            for job in result.breakdown.paint
        ],
        "total": result.total_cost,
        "final": result.final_price,
    }


def fingerprint(payload: Dict[str, Any]) -> str:
    canonical = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def audit_key(product: ProductLike) -> str:
    return f"calc_{product.id or product.name}"


@dataclass
class AuditRecord:
    """One stored fingerprint"""
    key: str
    fingerprint: str
    total_cost: int
    final_price: int
    recorded_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditRecord":
        return cls(
            key=data["key"],
            fingerprint=data["fingerprint"],
            total_cost=int(data.get("total_cost", 0)),
            final_price=int(data.get("final_price", 0)),
            recorded_at=data.get("recorded_at", ""),
        )


class CalculationAuditLog:
    """Fingerprints keyed by product id / name

    In memory by default; with `path` every record is also written to a
    local JSON file.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        emitter: Optional[EventEmitter] = None,
    ):
        """
        Args:
            path: JSON file to persist to (None = memory only)
            emitter: EventEmitter receiving audit.recorded
        """
        self.path = Path(path) if path else None
        self.emitter = emitter
        self._records: Dict[str, AuditRecord] = {}
        if self.path is not None and self.path.exists():
            self.load()

    def record(self, product: ProductLike, result: MasterCostResult) -> AuditRecord:
        """Store the fingerprint of a result (replaces an older one)"""
        key = audit_key(product)
        entry = AuditRecord(
            key=key,
            fingerprint=fingerprint(build_audit_payload(product, result)),
            total_cost=result.total_cost,
            final_price=result.final_price,
            recorded_at=datetime.now().isoformat(),
        )
        self._records[key] = entry
        if self.path is not None:
            self.save()

        if self.emitter is not None:
            self.emitter.emit(EventType.AUDIT_RECORDED, entry.to_dict(), source="audit")
        return entry

    def get(self, key: str) -> Optional[AuditRecord]:
        return self._records.get(key)

    def verify(self, product: ProductLike, result: MasterCostResult) -> bool:
        """True when `result` matches the stored fingerprint for `product`"""
        entry = self._records.get(audit_key(product))
        if entry is None:
            return False
        return entry.fingerprint == fingerprint(build_audit_payload(product, result))

    def save(self):
        if self.path is None:
            raise AuditError("Audit log has no file path", operation="save")
        data = [entry.to_dict() for entry in self._records.values()]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise AuditError(
                f"Could not write audit log: {self.path}",
                operation="save",
                error_code=ErrorCodes.AUDIT_WRITE_FAILED,
                cause=e,
            ) from e

    def load(self):
        if self.path is None:
            raise AuditError("Audit log has no file path", operation="load")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise AuditError(
                f"Could not read audit log: {self.path}",
                operation="load",
                error_code=ErrorCodes.AUDIT_READ_FAILED,
                cause=e,
            ) from e
        if not isinstance(data, list):
            raise AuditError(
                f"Audit log is not a list of records: {self.path}",
                operation="load",
                error_code=ErrorCodes.AUDIT_READ_FAILED,
            )
        records = {}
        for index, item in enumerate(data):
            try:
                entry = AuditRecord.from_dict(item)
            except (TypeError, KeyError, ValueError) as e:
                raise AuditError(
                    f"Malformed audit record #{index} in {self.path}",
                    operation="load",
                    error_code=ErrorCodes.AUDIT_READ_FAILED,
                    cause=e,
                ) from e
            records[entry.key] = entry
        self._records = records

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records
