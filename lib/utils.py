# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common helpers used across the engine: value predicates and the base error
# class for contract/input errors raised outside of a validation run.
# =============================================================================

import math
from typing import Any

import numpy as np


# =============================================================================
# Value Predicates
# =============================================================================

def is_blank(value: Any) -> bool:
    """
    True for values treated as missing in a cell: None, NaN and
    empty/whitespace-only strings.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def is_finite_number(value: Any) -> bool:
    """True for real numbers (booleans excluded) that are finite."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return bool(np.isfinite(value))


# =============================================================================
# Base Error Class
# =============================================================================

class ApplicationError(Exception):
    """
    Base error class for engine errors.

    Validation problems never raise: they become ValidationIssue entries.
    This hierarchy covers the edges (loading specs, reading files) where the
    caller handed us something unusable.

    Attributes:
        code: Error code for categorization
        message: Human-readable error message
        suggestion: Actionable suggestion for fixing the error
        details: Additional context for debugging

    Example:
        TableReadError("Not a file: data", details={"path": "data"}) prints as

            [TABLE_READ_ERROR] Not a file: data
              path: data
              Suggestion: Check the file encoding and delimiter, ...
    """

    def __init__(
        self,
        message: str,
        code: str = "APPLICATION_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        lines = [f"[{self.code}] {self.message}"]
        lines.extend(f"  {key}: {value}" for key, value in self.details.items())
        if self.suggestion:
            lines.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; an unset suggestion or empty details are left out."""
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.suggestion:
            data["suggestion"] = self.suggestion
        if self.details:
            data["details"] = self.details
        return data


class SpecLoadError(ApplicationError):
    """Raised when a Spec document cannot be parsed."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault(
            "suggestion",
            "Check that the document is valid JSON with 'name', 'version' and unique field names",
        )
        super().__init__(message, code="SPEC_LOAD_ERROR", **kwargs)


class TableReadError(ApplicationError):
    """Raised when a tabular file cannot be read into header + rows."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault(
            "suggestion",
            "Check the file encoding and delimiter, or pass them explicitly",
        )
        super().__init__(message, code="TABLE_READ_ERROR", **kwargs)
