"""Audit module - calculation fingerprints"""
from .fingerprint import (
    build_audit_payload,
    fingerprint,
    audit_key,
    AuditRecord,
    CalculationAuditLog,
)

__all__ = [
    "build_audit_payload",
    "fingerprint",
    "audit_key",
    "AuditRecord",
    "CalculationAuditLog",
]
