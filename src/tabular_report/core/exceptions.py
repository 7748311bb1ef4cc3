"""Custom exception classes for report construction and synchronization."""

from typing import Any


class ReportError(Exception):
    """Base exception for all report object errors."""

    def __init__(
        self,
        message: str,
        code: str = "REPORT_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        """Convert to a serializable error payload."""
        response: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class ColumnNotFoundError(ReportError):
    """Operation references a column the payload or metadata does not have."""

    def __init__(self, column: str, available: list[str] | None = None):
        details: dict[str, Any] = {"column": column}
        if available is not None:
            details["available"] = list(available)
        super().__init__(
            message=f"Column not found: {column}",
            code="COLUMN_NOT_FOUND",
            details=details,
        )
        self.column = column


class DuplicateColumnError(ReportError):
    """The same column name is declared more than once."""

    def __init__(self, columns: list[str]):
        super().__init__(
            message=f"Duplicate column names: {', '.join(columns)}",
            code="DUPLICATE_COLUMN",
            details={"columns": list(columns)},
        )
        self.columns = list(columns)


class DesynchronizationError(ReportError):
    """Column metadata and payload columns have drifted apart."""

    def __init__(
        self,
        orphaned: list[str] | None = None,
        untracked: list[str] | None = None,
    ):
        orphaned = list(orphaned or [])
        untracked = list(untracked or [])
        parts = []
        if orphaned:
            parts.append(f"metadata references missing columns {orphaned}")
        if untracked:
            parts.append(f"payload columns without metadata {untracked}")
        super().__init__(
            message="Metadata is out of sync with payload: " + "; ".join(parts),
            code="DESYNCHRONIZED",
            details={"orphaned": orphaned, "untracked": untracked},
        )
        self.orphaned = orphaned
        self.untracked = untracked


class MergeConflictError(ReportError):
    """Column names collide during a merge and no resolution was supplied."""

    def __init__(self, columns: list[str], message: str | None = None):
        super().__init__(
            message=message or (
                f"Ambiguous column collision during merge: {', '.join(columns)}. "
                f"Supply suffixes to disambiguate."
            ),
            code="MERGE_CONFLICT",
            details={"columns": list(columns)},
        )
        self.columns = list(columns)


class PayloadValidationError(ReportError):
    """Payload violates the structural column contract."""

    def __init__(self, message: str, missing: list[str] | None = None):
        details = {"missing": list(missing)} if missing else {}
        super().__init__(
            message=message,
            code="INVALID_PAYLOAD",
            details=details,
        )


class RowNotFoundError(ReportError):
    """No payload row matches a cross-reference lookup."""

    def __init__(self, variable: str, level: str | None = None):
        target = variable if level is None else f"{variable} (level={level})"
        details: dict[str, Any] = {"variable": variable}
        if level is not None:
            details["level"] = level
        super().__init__(
            message=f"No row found for variable {target}",
            code="ROW_NOT_FOUND",
            details=details,
        )


class UnknownBackendError(ReportError):
    """Requested rendering backend is not registered or not compiled."""

    def __init__(self, backend: str):
        super().__init__(
            message=f"Unknown rendering backend: {backend}",
            code="UNKNOWN_BACKEND",
            details={"backend": backend},
        )
