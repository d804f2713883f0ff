# =============================================================================
# core/models/validation.py - Validation Result Schemas
# =============================================================================
# Output of one validation run of a dataset against a Spec:
# - ValidationIssue: one append-only finding (severity, code, row/column)
# - SchemaMatch: precision/recall/F1 over column presence
# - ProfileDrift: disagreement between a dataset profile and the Spec
# - ValidationMetrics / ValidationResult: the bundle persisted by the caller
#
# A run PASSES iff no issue has severity "error".
# =============================================================================

from enum import Enum

from pydantic import ConfigDict, Field

from core.models.spec import CamelModel


class IssueSeverity(str, Enum):
    """Severity of a validation issue. Only ERROR fails a run."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class IssueCode(str, Enum):
    """Fixed vocabulary of validation issue codes."""
    # Header level
    MISSING_COLUMN = "MISSING_COLUMN"
    EXTRA_COLUMN = "EXTRA_COLUMN"
    CAPITAL_MISMATCH = "CAPITAL_MISMATCH"

    # Row level
    TYPE_OR_RULE_MISMATCH = "TYPE_OR_RULE_MISMATCH"
    UNRECOGNIZED_KEY = "UNRECOGNIZED_KEY"

    # Spec level
    INVALID_RULE = "INVALID_RULE"

    # Profile drift
    PROFILE_TYPE_DRIFT = "PROFILE_TYPE_DRIFT"
    PROFILE_HIGH_NULL_RATE = "PROFILE_HIGH_NULL_RATE"


class ValidationIssue(CamelModel):
    """
    One finding of a validation run.

    Example:
        {
            "severity": "error",
            "code": "TYPE_OR_RULE_MISMATCH",
            "colName": "amount",
            "rowIndex": 3,
            "value": "abc",
            "expected": "number",
            "message": "Expected number, received 'abc'"
        }
    """

    model_config = ConfigDict(frozen=True)

    severity: IssueSeverity
    code: IssueCode
    col_name: str | None = None
    row_index: int | None = Field(
        default=None,
        ge=1,
        description="1-based body row position (header excluded)"
    )
    value: str | None = None
    expected: str | None = None
    message: str


class SchemaMatch(CamelModel):
    """Precision/recall/F1 over a set of column names."""

    precision: float = Field(default=0.0, ge=0.0, le=1.0)
    recall: float = Field(default=0.0, ge=0.0, le=1.0)
    f1: float = Field(default=0.0, ge=0.0, le=1.0)


class TypeDisagreement(CamelModel):
    """A column whose profiled type disagrees with the declared Spec type."""

    column: str
    spec: str
    profile: str


class HighNull(CamelModel):
    """A column whose null rate exceeds the threshold."""

    column: str
    null_rate: float
    threshold: float


class ProfileDrift(CamelModel):
    """Differences between a dataset profile and a Spec."""

    missing_in_profile: list[str] = Field(default_factory=list)
    new_in_profile: list[str] = Field(default_factory=list)
    type_disagreements: list[TypeDisagreement] = Field(default_factory=list)
    high_nulls: list[HighNull] = Field(default_factory=list)


class ValidationMetrics(CamelModel):
    """Metrics of one validation run."""

    schema_match: SchemaMatch = Field(default_factory=SchemaMatch)
    valid_rows: int = Field(default=0, ge=0)
    total_rows: int = Field(default=0, ge=0)
    profile_drift: ProfileDrift | None = None

    @property
    def valid_rows_pct(self) -> float | None:
        """Share of valid rows, None when there are no rows."""
        if self.total_rows <= 0:
            return None
        return self.valid_rows / self.total_rows


class ValidationResult(CamelModel):
    """Outcome of validating a dataset against a Spec."""

    passed: bool
    metrics: ValidationMetrics
    issues: list[ValidationIssue] = Field(default_factory=list)

    @classmethod
    def from_issues(
        cls,
        metrics: ValidationMetrics,
        issues: list[ValidationIssue],
    ) -> "ValidationResult":
        """Build a result, deriving `passed` from the issue severities."""
        passed = not any(i.severity == IssueSeverity.ERROR for i in issues)
        return cls(passed=passed, metrics=metrics, issues=issues)

    def get_errors(self) -> list[ValidationIssue]:
        """Issues that fail the run."""
        return [i for i in self.issues if i.severity == IssueSeverity.ERROR]

    def get_warnings(self) -> list[ValidationIssue]:
        """Advisory issues."""
        return [i for i in self.issues if i.severity == IssueSeverity.WARN]

    def issues_by_code(self, code: IssueCode | str) -> list[ValidationIssue]:
        """Issues carrying the given code."""
        return [i for i in self.issues if i.code == code]
