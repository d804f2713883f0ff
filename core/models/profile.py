# =============================================================================
# core/models/profile.py - Dataset Profile Schemas
# =============================================================================
# Statistical summary of a dataset snapshot, produced by lib/profiler.py and
# consumed by the profile-drift detector and the Spec-proposal step.
#
# A profile is a cache keyed by sample_hash (row count + column names):
# callers must recompute it when the hash changes.
# =============================================================================

from enum import Enum

from pydantic import Field

from core.models.spec import CamelModel


class InferredType(str, Enum):
    """Type inferred for a column from its sampled values."""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    UNKNOWN = "unknown"


class ColumnProfile(CamelModel):
    """
    Profile of a single column.

    Example:
        {
            "name": "weight_kg",
            "inferredType": "number",
            "nullRate": 0.05,
            "distinctCount": 120,
            "unitCandidates": ["kg"]
        }
    """

    name: str = Field(..., description="Column name from the header")

    inferred_type: InferredType = Field(
        default=InferredType.UNKNOWN,
        description="Type inferred from sampled values"
    )

    null_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of empty values (0..1)"
    )

    distinct_count: int = Field(
        default=0,
        ge=0,
        description="Number of distinct non-empty values"
    )

    unit_candidates: list[str] | None = Field(
        default=None,
        max_length=3,
        description="Ranked measurement unit candidates"
    )

    regex_hits: dict[str, int] | None = Field(
        default=None,
        description="Pattern name -> number of matching samples"
    )


class DatasetProfileResult(CamelModel):
    """Profile of a whole dataset snapshot."""

    row_count: int = Field(..., description="Body rows (header excluded); -1 on failure")
    columns: list[ColumnProfile] = Field(default_factory=list)
    error: str | None = None
    sample_hash: str | None = Field(
        default=None,
        description="SHA-1 of row count + column names"
    )

    def get_column_names(self) -> list[str]:
        """Get profiled column names in header order."""
        return [c.name for c in self.columns]
