# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Pins engine settings through the environment before any imports
# - Clears the cached Settings around every test
# - Provides common Spec, dataset, profile and trial fixtures
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# get_settings() is cached, so the environment must be in place first

os.environ.setdefault("NULL_RATE_THRESHOLD", "0.2")
os.environ.setdefault("UNIT_TOOL_DEFAULT", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest

from core.config import get_settings
from core.models import (
    ColumnProfile,
    DatasetProfileResult,
    FieldSpec,
    FieldType,
    InferredType,
    SpecDoc,
    TrialRow,
)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Each test sees settings built from the current environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def orders_spec() -> SpecDoc:
    """A small finance-style Spec covering every check kind."""
    return SpecDoc(
        name="orders",
        version="v1",
        domain="ecommerce",
        fields=[
            FieldSpec(name="order_id", type=FieldType.STRING, nullable=False, regex=r"^ORD-\d+$", is_primary=True),
            FieldSpec(name="amount", type=FieldType.NUMBER, nullable=False, unit="MYR"),
            FieldSpec(name="paid", type=FieldType.BOOLEAN, nullable=True),
            FieldSpec(name="order_date", type=FieldType.DATE, nullable=False),
            FieldSpec(name="status", nullable=False, enum_vals=["pending", "shipped", "completed"]),
        ],
    )


@pytest.fixture
def orders_header() -> list[str]:
    return ["order_id", "amount", "paid", "order_date", "status"]


@pytest.fixture
def orders_rows() -> list[list[str]]:
    """Three clean rows and one row failing on amount and status."""
    return [
        ["ORD-1", "1,200.50", "yes", "2024-01-15", "pending"],
        ["ORD-2", "(30.00)", "", "2024-01-16", "shipped"],
        ["ORD-3", "99", "false", "2024-02-01 10:30:00", "completed"],
        ["ORD-4", "abc", "no", "2024-02-02", "lost"],
    ]


@pytest.fixture
def orders_profile() -> DatasetProfileResult:
    """Profile of the orders dataset with one drifted type and a sparse column."""
    return DatasetProfileResult(
        row_count=4,
        columns=[
            ColumnProfile(name="order_id", inferred_type=InferredType.STRING, null_rate=0.0, distinct_count=4),
            ColumnProfile(name="amount", inferred_type=InferredType.STRING, null_rate=0.0, distinct_count=4),
            ColumnProfile(name="paid", inferred_type=InferredType.STRING, null_rate=0.25, distinct_count=3),
            ColumnProfile(name="order_date", inferred_type=InferredType.DATE, null_rate=0.0, distinct_count=4),
            ColumnProfile(name="status", inferred_type=InferredType.STRING, null_rate=0.0, distinct_count=4),
        ],
    )


@pytest.fixture
def sample_trials() -> list[TrialRow]:
    """Two baselines and three drifted trials for one scenario."""
    common = {"model_id": "gpt-4o", "prompt_mode": "few_shot", "unit_tool": False}
    return [
        TrialRow(**common, drift_case="none", f1=0.9, precision=1.0, recall=0.8, type_acc=1.0, unit_acc=0.5, valid_rows=9, total_rows=10),
        TrialRow(**common, drift_case=None, f1=0.7, precision=0.8, recall=0.6, type_acc=0.8, unit_acc=None, valid_rows_pct=0.7),
        TrialRow(**common, drift_case="header_noise_L1", f1=0.6, precision=0.7, recall=0.5, type_acc=0.9, unit_acc=None, valid_rows_pct=0.5),
        TrialRow(**common, drift_case="header_noise:L1", f1=0.4, precision=0.5, recall=0.3, type_acc=0.7, unit_acc=None, valid_rows_pct=0.3),
        TrialRow(**common, drift_case="unit_change_level2", f1=0.8, precision=0.9, recall=0.7, type_acc=1.0, unit_acc=0.0),
    ]
