"""
translated_select Error Hierarchy — Structured exceptions for attribute operations.

All errors carry the attribute reference and operation that failed so a
log line or stored error record can be traced back to its call site.

Hierarchy:
    TranslatedSelectError
    ├── StoreOperationError  — Storage collaborator failed (connection, SQL, constraint)
    ├── ConfigError          — Invalid settings file or attribute configuration
    └── ValidationError      — Invalid caller input
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class TranslatedSelectError(Exception):
    """
    Base error for all translated select failures.
    All context is kept serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.attribute_ref: Optional[str] = context.get("attribute_ref")
        self.operation: Optional[str] = context.get("operation")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "attribute_ref": self.attribute_ref,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("attribute_ref", "operation")
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.attribute_ref:
            parts.append(f"attribute_ref={self.attribute_ref}")
        if self.operation:
            parts.append(f"operation={self.operation}")
        return " | ".join(parts)


class StoreOperationError(TranslatedSelectError):
    """
    A statement against the relational store failed.
    Raised from the underlying SQLAlchemy exception, never retried.
    """

    def __init__(self, message: str, **context: Any):
        self.statement: Optional[str] = context.get("statement")
        self.table: Optional[str] = context.get("table")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["statement"] = self.statement
        d["table"] = self.table
        return d


class ConfigError(TranslatedSelectError):
    """Configuration error — invalid translated_select.yaml or attribute settings."""

    def __init__(self, message: str, **context: Any):
        self.config_path: Optional[str] = context.get("config_path")
        self.validation_errors: Optional[list] = context.get("validation_errors")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["config_path"] = self.config_path
        d["validation_errors"] = self.validation_errors
        return d


class ValidationError(TranslatedSelectError):
    """Caller input rejected before any statement was built."""

    def __init__(self, message: str, **context: Any):
        self.field: Optional[str] = context.get("field")
        self.value: Any = context.get("value")
        super().__init__(message, **context)
