# =============================================================================
# core/models/experiment.py - Experiment Trial & Drift Report Schemas
# =============================================================================
# An experiment sweeps {model, prompt mode, unit tool, drift case}. Each
# combination yields a scored Trial. The drift-delta aggregator
# (lib/drift.py) compares drifted trials against their no-drift baseline.
#
# Metrics are optional everywhere: a metric with no contributing values is
# None ("undefined") and never treated as zero.
# =============================================================================

from datetime import datetime

from pydantic import ConfigDict, Field

from core.models.spec import CamelModel


class PredictionScore(CamelModel):
    """Score of one predicted Spec against the ground truth."""

    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0
    type_acc: float = 0.0
    unit_acc: float = 0.0


class TrialRow(CamelModel):
    """
    One scored experiment trial.

    drift_case encodes a kind and an optional level 1-3, e.g.
    "unit_change_L2". None or "none" marks a baseline trial.
    """

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    prompt_mode: str = ""
    unit_tool: bool = False
    drift_case: str | None = None

    f1: float | None = None
    precision: float | None = None
    recall: float | None = None
    type_acc: float | None = None
    unit_acc: float | None = None
    valid_rows_pct: float | None = None
    valid_rows: int | None = None
    total_rows: int | None = None

    created_at: datetime | None = None


class DeltaRow(CamelModel):
    """Mean metric change of one drifted scenario vs. its baseline."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    prompt_mode: str
    unit_tool: bool
    drift_kind: str
    drift_level: int | None = None
    n: int = Field(default=0, ge=0, description="Trials in the drifted group")

    d_f1: float | None = None
    d_precision: float | None = None
    d_recall: float | None = None
    d_type_acc: float | None = None
    d_unit_acc: float | None = None
    d_valid_rows_pct: float | None = None


class DriftSummary(CamelModel):
    """Mean of per-scenario deltas for one (drift kind, level)."""

    drift_kind: str
    drift_level: int | None = None
    n: int = Field(default=0, ge=0, description="Summed trial count")

    d_f1: float | None = None
    d_precision: float | None = None
    d_recall: float | None = None
    d_type_acc: float | None = None
    d_unit_acc: float | None = None
    d_valid_rows_pct: float | None = None


class DriftReport(CamelModel):
    """Output of the drift-delta aggregator."""

    delta_rows: list[DeltaRow] = Field(default_factory=list)
    delta_summary: list[DriftSummary] = Field(default_factory=list)
