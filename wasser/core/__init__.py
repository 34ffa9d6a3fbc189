"""Core module"""
from .exceptions import (
    WasserError,
    ValidationError,
    ConfigurationError,
    DataImportError,
    AuditError,
    ErrorCodes,
)
from .config import (
    AppConfig,
    DEFAULT_CONFIG,
    COLLECTION_MULTIPLIERS,
    DEFAULT_COLLECTION_MULTIPLIER,
    MIN_PROFIT_MARGIN,
    MAX_PRODUCT_PRICE,
)
from .logging import setup_logger

__all__ = [
    # exceptions
    "WasserError",
    "ValidationError",
    "ConfigurationError",
    "DataImportError",
    "AuditError",
    "ErrorCodes",
    # config
    "AppConfig",
    "DEFAULT_CONFIG",
    "COLLECTION_MULTIPLIERS",
    "DEFAULT_COLLECTION_MULTIPLIER",
    "MIN_PROFIT_MARGIN",
    "MAX_PRODUCT_PRICE",
    "setup_logger",
]
