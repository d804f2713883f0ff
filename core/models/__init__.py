# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for the validation engine:
# - spec.py: SpecDoc / FieldSpec (validation ground truth) and PredictedSpec
# - profile.py: DatasetProfileResult / ColumnProfile (dataset statistics)
# - validation.py: ValidationResult, metrics and issues
# - experiment.py: TrialRow, PredictionScore and drift-delta report rows
#
# These models define the "contract" between the engine and its callers.
# =============================================================================

# -----------------------------------------------------------------------------
# Spec Models - Validation ground truth
# -----------------------------------------------------------------------------
from .spec import (
    CamelModel,
    FieldSpec,
    FieldType,
    OnDelete,
    PredictedField,
    PredictedSpec,
    SpecDoc,
    SpecDomain,
    SpecKeys,
    SpecRelation,
)

# -----------------------------------------------------------------------------
# Profile Models - Dataset statistics
# -----------------------------------------------------------------------------
from .profile import (
    ColumnProfile,
    DatasetProfileResult,
    InferredType,
)

# -----------------------------------------------------------------------------
# Validation Models - Run output
# -----------------------------------------------------------------------------
from .validation import (
    HighNull,
    IssueCode,
    IssueSeverity,
    ProfileDrift,
    SchemaMatch,
    TypeDisagreement,
    ValidationIssue,
    ValidationMetrics,
    ValidationResult,
)

# -----------------------------------------------------------------------------
# Experiment Models - Trials and drift deltas
# -----------------------------------------------------------------------------
from .experiment import (
    DeltaRow,
    DriftReport,
    DriftSummary,
    PredictionScore,
    TrialRow,
)

__all__ = [
    # Spec
    "CamelModel",
    "FieldSpec",
    "FieldType",
    "OnDelete",
    "PredictedField",
    "PredictedSpec",
    "SpecDoc",
    "SpecDomain",
    "SpecKeys",
    "SpecRelation",
    # Profile
    "ColumnProfile",
    "DatasetProfileResult",
    "InferredType",
    # Validation
    "HighNull",
    "IssueCode",
    "IssueSeverity",
    "ProfileDrift",
    "SchemaMatch",
    "TypeDisagreement",
    "ValidationIssue",
    "ValidationMetrics",
    "ValidationResult",
    # Experiment
    "DeltaRow",
    "DriftReport",
    "DriftSummary",
    "PredictionScore",
    "TrialRow",
]
