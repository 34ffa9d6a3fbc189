"""
Custom exceptions

All custom exceptions raised at the edges of the WASSER costing package.
The calculation core itself never raises; these cover importers, audit
persistence, configuration and the CLI.
"""

from typing import Optional, Dict, Any


class WasserError(Exception):
    """Base exception"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        cause: Exception = None
    ):
        """
        Args:
            message: error message
            error_code: error code
            details: extra details
            cause: underlying exception
        """
        self.message = message
        self.error_code = error_code or self._default_code()
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def _default_code(self) -> str:
        return "WSR_UNKNOWN"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "type": self.__class__.__name__
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ValidationError(WasserError):
    """Input validation error"""

    def __init__(
        self,
        message: str,
        field: str = None,
        value: Any = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        details = kwargs.pop("details", {})
        details["field"] = field
        details["value"] = str(value)[:100]
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "WSR_VALIDATION"


class ConfigurationError(WasserError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        config_key: str = None,
        **kwargs
    ):
        self.config_key = config_key
        details = kwargs.pop("details", {})
        details["config_key"] = config_key
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "WSR_CONFIG"


class DataImportError(WasserError):
    """Spreadsheet / JSON import error"""

    def __init__(
        self,
        message: str,
        file_path: str = None,
        row_number: int = None,
        **kwargs
    ):
        self.file_path = file_path
        self.row_number = row_number
        details = kwargs.pop("details", {})
        details["file_path"] = file_path
        details["row_number"] = row_number
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "WSR_IMPORT"


class AuditError(WasserError):
    """Audit log persistence error"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs
    ):
        self.key = key
        self.operation = operation
        details = kwargs.pop("details", {})
        details["key"] = key
        details["operation"] = operation
        super().__init__(message, details=details, **kwargs)

    def _default_code(self) -> str:
        return "WSR_AUDIT"


class ErrorCodes:
    """Error code constants"""

    # general
    UNKNOWN = "WSR_UNKNOWN"
    VALIDATION = "WSR_VALIDATION"
    CONFIG = "WSR_CONFIG"

    # import
    IMPORT_FAILED = "WSR_IMPORT"
    IMPORT_FILE_NOT_FOUND = "WSR_IMPORT_NOT_FOUND"
    IMPORT_PARSE_ERROR = "WSR_IMPORT_PARSE"

    # audit
    AUDIT_FAILED = "WSR_AUDIT"
    AUDIT_WRITE_FAILED = "WSR_AUDIT_WRITE"
    AUDIT_READ_FAILED = "WSR_AUDIT_READ"
