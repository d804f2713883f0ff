# =============================================================================
# lib/validator.py - Row-Set Validator & Profile-Drift Detector
# =============================================================================
# Runs a compiled Spec across a parsed dataset and collects everything that is
# wrong with it, instead of stopping at the first problem:
#
#   - Column presence: MISSING_COLUMN (error) / EXTRA_COLUMN (warn)
#   - Schema-match precision/recall/F1 over column names
#   - Per-row checks: one TYPE_OR_RULE_MISMATCH per failing field
#   - Optional profile drift: PROFILE_TYPE_DRIFT / PROFILE_HIGH_NULL_RATE (warn)
#
# A run passes iff no issue has severity "error". Row validation is total:
# one bad row never aborts the scan.
#
# Two entry points:
#   run_validation()      - exact-case header matching
#   run_tool_validation() - case-insensitive header matching with
#                           CAPITAL_MISMATCH and per-row UNRECOGNIZED_KEY
#                           diagnostics, used when grading predicted Specs
# =============================================================================

import logging
from dataclasses import dataclass, field
from typing import Any

from core.config import get_settings
from core.models import (
    DatasetProfileResult,
    FieldType,
    HighNull,
    InferredType,
    IssueCode,
    IssueSeverity,
    ProfileDrift,
    SchemaMatch,
    SpecDoc,
    TypeDisagreement,
    ValidationIssue,
    ValidationMetrics,
    ValidationResult,
)
from lib.compiler import CompiledSpec, Violation, compile_spec
from lib.tabular import FileInput, read_table

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Column Presence & Schema Match
# =============================================================================

@dataclass
class ColumnPresence:
    """Set comparison of expected (Spec) and found (header) column names."""
    expected: list[str]
    found: list[str]
    missing: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)

    @property
    def tp(self) -> int:
        """Expected columns present in the header."""
        return len(set(self.expected)) - len(self.missing)


def _unique(names: list[str]) -> list[str]:
    return list(dict.fromkeys(names))


def compare_columns(
    expected: list[str],
    found: list[str],
    case_insensitive: bool = False,
) -> ColumnPresence:
    """
    Compare Spec field names against header names.

    missing keeps Spec order; extra keeps header order. Duplicates count once.
    """
    expected = _unique(expected)
    found = _unique(found)

    if case_insensitive:
        found_keys = {name.lower() for name in found}
        expected_keys = {name.lower() for name in expected}
        missing = [n for n in expected if n.lower() not in found_keys]
        extra = [n for n in found if n.lower() not in expected_keys]
    else:
        found_set = set(found)
        expected_set = set(expected)
        missing = [n for n in expected if n not in found_set]
        extra = [n for n in found if n not in expected_set]

    return ColumnPresence(expected=expected, found=found, missing=missing, extra=extra)


def schema_match(presence: ColumnPresence) -> SchemaMatch:
    """
    Precision/recall/F1 of header columns against Spec fields.

    Zero denominators are floored at 1, so an empty header scores 0 rather
    than raising.
    """
    tp = presence.tp
    precision = tp / ((tp + len(presence.extra)) or 1)
    recall = tp / ((tp + len(presence.missing)) or 1)
    f1 = (2 * precision * recall) / ((precision + recall) or 1)
    return SchemaMatch(precision=precision, recall=recall, f1=f1)


def _presence_issues(presence: ColumnPresence) -> list[ValidationIssue]:
    issues = [
        ValidationIssue(
            severity=IssueSeverity.ERROR,
            code=IssueCode.MISSING_COLUMN,
            col_name=c,
            message=f"Column {c} not found",
        )
        for c in presence.missing
    ]
    issues.extend(
        ValidationIssue(
            severity=IssueSeverity.WARN,
            code=IssueCode.EXTRA_COLUMN,
            col_name=c,
            message=f"Unexpected column {c}",
        )
        for c in presence.extra
    )
    return issues


# =============================================================================
# Profile Drift
# =============================================================================

def types_agree(spec_type: FieldType | str, inferred: InferredType | str) -> bool:
    """
    Whether a declared Spec type agrees with a profiled type.

    Exact matches agree. A number field also agrees with an inferred string
    (numeric-looking text); the reverse does not hold.
    """
    spec_value = FieldType(spec_type).value
    inferred_value = InferredType(inferred).value
    if spec_value == inferred_value:
        return True
    return spec_value == FieldType.NUMBER.value and inferred_value == InferredType.STRING.value


def compute_profile_drift(
    spec: SpecDoc,
    profile: DatasetProfileResult,
    null_rate_threshold: float | None = None,
) -> ProfileDrift:
    """
    Compare a dataset profile against a Spec.

    Args:
        spec: Declared schema
        profile: Profile of the dataset being validated
        null_rate_threshold: Null rate above which a column is flagged
                             (default NULL_RATE_THRESHOLD)
    """
    if null_rate_threshold is None:
        null_rate_threshold = get_settings().NULL_RATE_THRESHOLD

    spec_cols = _unique(spec.get_field_names())
    prof_cols = _unique(profile.get_column_names())
    spec_set = set(spec_cols)
    prof_set = set(prof_cols)

    spec_types = {f.name: f.type for f in spec.fields}
    disagreements = [
        TypeDisagreement(
            column=c.name,
            spec=spec_types[c.name].value,
            profile=c.inferred_type.value,
        )
        for c in profile.columns
        if c.name in spec_types and not types_agree(spec_types[c.name], c.inferred_type)
    ]

    high_nulls = [
        HighNull(column=c.name, null_rate=c.null_rate, threshold=null_rate_threshold)
        for c in profile.columns
        if c.null_rate > null_rate_threshold
    ]

    return ProfileDrift(
        missing_in_profile=[c for c in spec_cols if c not in prof_set],
        new_in_profile=[c for c in prof_cols if c not in spec_set],
        type_disagreements=disagreements,
        high_nulls=high_nulls,
    )


def profile_drift_issues(drift: ProfileDrift) -> list[ValidationIssue]:
    """Surface drift entries as warnings. Profile drift never fails a run."""
    issues = [
        ValidationIssue(
            severity=IssueSeverity.WARN,
            code=IssueCode.PROFILE_TYPE_DRIFT,
            col_name=d.column,
            expected=d.spec,
            message=f"Spec type {d.spec} vs profile type {d.profile}",
        )
        for d in drift.type_disagreements
    ]
    issues.extend(
        ValidationIssue(
            severity=IssueSeverity.WARN,
            code=IssueCode.PROFILE_HIGH_NULL_RATE,
            col_name=n.column,
            message=f"Null-rate {n.null_rate:.2f} exceeds threshold {n.threshold}",
        )
        for n in drift.high_nulls
    )
    return issues


# =============================================================================
# Row Checks
# =============================================================================

def _cell(row: list[Any], index: int | None) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _raw_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _violation_issue(
    violation: Violation,
    row_index: int,
    severity: IssueSeverity = IssueSeverity.ERROR,
) -> ValidationIssue:
    return ValidationIssue(
        severity=severity,
        code=violation.code,
        col_name=violation.field,
        row_index=row_index,
        value=_raw_text(violation.value),
        expected=violation.expected,
        message=violation.message,
    )


def _rule_issues(compiled: CompiledSpec) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            severity=IssueSeverity.WARN,
            code=w.code,
            col_name=w.field,
            expected=w.expected,
            message=w.message,
        )
        for w in compiled.warnings
    ]


def _finish(
    issues: list[ValidationIssue],
    presence: ColumnPresence,
    valid_rows: int,
    total_rows: int,
    spec: SpecDoc,
    profile: DatasetProfileResult | None,
    null_rate_threshold: float | None,
) -> ValidationResult:
    drift = None
    if profile is not None:
        drift = compute_profile_drift(spec, profile, null_rate_threshold)
        issues.extend(profile_drift_issues(drift))

    metrics = ValidationMetrics(
        schema_match=schema_match(presence),
        valid_rows=valid_rows,
        total_rows=total_rows,
        profile_drift=drift,
    )
    result = ValidationResult.from_issues(metrics, issues)

    logger.info(
        f"Validated {total_rows} rows against '{spec.name}' {spec.version}: "
        f"{valid_rows} valid, {len(result.get_errors())} errors, "
        f"{len(result.get_warnings())} warnings, passed={result.passed}"
    )
    return result


# =============================================================================
# Entry Points
# =============================================================================

def run_validation(
    header: list[str],
    rows: list[list[Any]],
    spec: SpecDoc,
    unit_tool: bool | None = None,
    profile: DatasetProfileResult | None = None,
    null_rate_threshold: float | None = None,
) -> ValidationResult:
    """
    Validate parsed rows against a Spec using exact-case header matching.

    Each record holds only the Spec's fields, looked up by the first header
    column carrying that exact name. Fields whose column is missing read as
    empty on every row.

    Args:
        header: Column names as read from the file
        rows: Body rows of raw cells (header excluded)
        spec: Spec to validate against
        unit_tool: Strip unit text from numeric cells (default UNIT_TOOL_DEFAULT)
        profile: Dataset profile; enables profile-drift warnings
        null_rate_threshold: Threshold for PROFILE_HIGH_NULL_RATE

    Returns:
        ValidationResult with metrics and the itemized issues
    """
    if unit_tool is None:
        unit_tool = get_settings().UNIT_TOOL_DEFAULT

    compiled = compile_spec(spec, unit_tool=unit_tool, strict=True)
    presence = compare_columns(spec.get_field_names(), header)

    issues = _rule_issues(compiled)
    issues.extend(_presence_issues(presence))

    col_index: dict[str, int] = {}
    for i, name in enumerate(header):
        col_index.setdefault(name, i)

    valid_rows = 0
    for idx, row in enumerate(rows):
        record = {
            name: _cell(row, col_index.get(name))
            for name in compiled.field_names
        }
        result = compiled.validate(record)
        if result.ok:
            valid_rows += 1
            continue
        issues.extend(_violation_issue(v, idx + 1) for v in result.violations)

    return _finish(
        issues, presence, valid_rows, len(rows), spec, profile, null_rate_threshold
    )


def run_tool_validation(
    header: list[str],
    rows: list[list[Any]],
    spec: SpecDoc,
    unit_tool: bool | None = None,
    profile: DatasetProfileResult | None = None,
    null_rate_threshold: float | None = None,
) -> ValidationResult:
    """
    Validate parsed rows with case-insensitive header resolution.

    A header naming a Spec field exactly is bound to that field. Any other
    header falls back to the first field with the same lower-cased name. A
    column that matches a field only when case is ignored is used
    for that field and reported once as CAPITAL_MISMATCH. Every header column
    goes into the record: unmatched columns keep their header name, so each
    one is reported on each row as an UNRECOGNIZED_KEY warning and the row is
    not counted valid.
    """
    if unit_tool is None:
        unit_tool = get_settings().UNIT_TOOL_DEFAULT

    compiled = compile_spec(spec, unit_tool=unit_tool, strict=True)
    presence = compare_columns(spec.get_field_names(), header, case_insensitive=True)

    issues = _rule_issues(compiled)
    issues.extend(_presence_issues(presence))

    declared = set(spec.get_field_names())
    spec_lookup: dict[str, str] = {}
    for name in spec.get_field_names():
        spec_lookup.setdefault(name.lower(), name)
    header_names = set(header)

    # Column position -> record key
    keys: list[tuple[int, str]] = []
    claimed: set[str] = set()
    for i, name in enumerate(header):
        if name in claimed:
            continue
        # An exact-case field always owns its column
        field_name = name if name in declared else spec_lookup.get(name.lower())
        if (
            field_name is None
            or field_name in claimed
            or (name != field_name and field_name in header_names)
        ):
            # Unmatched, or an exact-case column owns this field
            keys.append((i, name))
            claimed.add(name)
            continue
        if name != field_name:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.WARN,
                    code=IssueCode.CAPITAL_MISMATCH,
                    col_name=field_name,
                    value=name,
                    expected=field_name,
                    message=f"Column {name} matches field {field_name} with different capitalization",
                )
            )
        keys.append((i, field_name))
        claimed.add(field_name)

    valid_rows = 0
    for idx, row in enumerate(rows):
        record = {key: _cell(row, i) for i, key in keys}
        result = compiled.validate(record)
        if result.ok:
            valid_rows += 1
            continue
        for v in result.violations:
            severity = (
                IssueSeverity.WARN
                if v.code == IssueCode.UNRECOGNIZED_KEY
                else IssueSeverity.ERROR
            )
            issues.append(_violation_issue(v, idx + 1, severity))

    return _finish(
        issues, presence, valid_rows, len(rows), spec, profile, null_rate_threshold
    )


def validate_table(
    source: FileInput,
    spec: SpecDoc,
    unit_tool: bool | None = None,
    profile: DatasetProfileResult | None = None,
    null_rate_threshold: float | None = None,
    tolerant_headers: bool = False,
) -> ValidationResult:
    """
    Read a CSV and validate it against a Spec.

    Raises:
        TableReadError: If the file cannot be read
    """
    header, rows = read_table(source)
    runner = run_tool_validation if tolerant_headers else run_validation
    return runner(
        header,
        rows,
        spec,
        unit_tool=unit_tool,
        profile=profile,
        null_rate_threshold=null_rate_threshold,
    )
