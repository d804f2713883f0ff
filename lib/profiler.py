# =============================================================================
# lib/profiler.py - Dataset Profiling Engine
# =============================================================================
# This module turns parsed tabular rows into a DatasetProfileResult that the
# validator uses for drift checks and the Spec proposal step uses as a draft:
#
#   - Type inference from sampled values (date -> number -> boolean -> string)
#   - Measurement unit detection from header and value hints
#   - Null rate and distinct counts per column
#   - Pattern hit counts (email, url, percentage, ...)
#   - A content hash used as the profile cache key
#
# Profiles are computed on at most PROFILE_SAMPLE_LIMIT non-empty values per
# column for type/unit inference; null rates and distinct counts use all rows.
# =============================================================================

import hashlib
import json
import logging
import re
from typing import Any

import pandas as pd

from core.config import get_settings
from core.models import (
    ColumnProfile,
    DatasetProfileResult,
    FieldSpec,
    FieldType,
    InferredType,
    SpecDoc,
    SpecDomain,
)
from lib.tabular import FileInput, read_table
from lib.utils import TableReadError

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[ T]\d{2}:\d{2}:\d{2})?$", re.ASCII)
NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$", re.ASCII)
DIGITS_PATTERN = re.compile(r"^\d+$", re.ASCII)

# Header hints, tested against the lower-cased column name
HEADER_UNIT_HINTS = [
    ("kg", re.compile(r"\bkg\b", re.ASCII)),
    ("g", re.compile(r"\b(g|gram)s?\b", re.ASCII)),
    ("cm", re.compile(r"\bcm\b", re.ASCII)),
    ("mm", re.compile(r"\bmm\b", re.ASCII)),
    ("MYR", re.compile(r"\b(myr|rm)\b", re.ASCII)),
    ("USD", re.compile(r"\busd\b", re.ASCII)),
    ("%", re.compile(r"%|percent|percentage")),
]

# Value hints, tested against each lower-cased sample
VALUE_UNIT_HINTS = [
    ("kg", re.compile(r"\d\s?kg\b", re.ASCII)),
    ("g", re.compile(r"\d\s?g\b", re.ASCII)),
    ("cm", re.compile(r"\d\s?cm\b", re.ASCII)),
    ("mm", re.compile(r"\d\s?mm\b", re.ASCII)),
    ("MYR", re.compile(r"(myr|rm)\s?\d", re.ASCII)),
]
USD_VALUE_HINT = re.compile(r"\$\s?\d|\b\d", re.ASCII)
PERCENT_VALUE_HINT = re.compile(r"%\s*$")

# Named patterns reported in ColumnProfile.regex_hits
PATTERNS = {
    "email": re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"),
    "url": re.compile(r"^https?://[^\s]+$"),
    "date_iso": re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII),
    "datetime_iso": re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}", re.ASCII),
    "currency": re.compile(r"^[$€£¥]\s?[\d,]+\.?\d*$|^[\d,]+\.?\d*\s?[$€£¥]$", re.ASCII),
    "percentage": re.compile(r"^-?\d+\.?\d*\s?%$", re.ASCII),
}


def _is_null(value: Any) -> bool:
    """None, NaN and the empty string count as null cells."""
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return value == ""


# =============================================================================
# Type Inference
# =============================================================================

def infer_type(samples: list[Any]) -> InferredType:
    """
    Infer a column type from sampled values.

    Each non-empty sample is classified once: native booleans count as
    boolean, native numbers as number, strings are tested as date first and
    number second. Ties go to the earlier family in date -> number ->
    boolean -> string order.

    Examples:
        ["2024-01-01", "5"]      -> DATE
        ["5", "2024-01-01", "6"] -> NUMBER
        ["1", "2", "3"]          -> INTEGER
        ["2024-01-01 10:00:00"]  -> DATETIME
    """
    n = b = d = 0
    date_hits: list[str] = []
    present: list[Any] = []

    for value in samples:
        if _is_null(value):
            continue
        present.append(value)

        if isinstance(value, bool):
            b += 1
            continue
        if isinstance(value, (int, float)):
            n += 1
            continue

        s = str(value).strip()
        if DATE_PATTERN.match(s):
            d += 1
            date_hits.append(s)
            continue
        if NUMBER_PATTERN.match(s):
            n += 1

    if d > 0 and d >= n and d >= b:
        if any(":" in s for s in date_hits):
            return InferredType.DATETIME
        return InferredType.DATE

    if n > 0 and n >= b:
        if all(DIGITS_PATTERN.match(str(v).strip()) for v in present):
            return InferredType.INTEGER
        return InferredType.NUMBER

    if b > 0:
        return InferredType.BOOLEAN

    return InferredType.STRING


# =============================================================================
# Unit Detection
# =============================================================================

def detect_units(col_name: str, samples: list[Any], limit: int | None = None) -> list[str]:
    """
    Rank measurement unit candidates for a column.

    Header hints come first, then value hints in sample order. USD is only
    inferred from values when MYR has not been seen.

    Returns:
        Up to `limit` (default MAX_UNIT_CANDIDATES) distinct candidates
    """
    if limit is None:
        limit = get_settings().MAX_UNIT_CANDIDATES

    name = col_name.lower()
    candidates: dict[str, None] = {}

    for unit, pattern in HEADER_UNIT_HINTS:
        if pattern.search(name):
            candidates[unit] = None

    for value in samples:
        if value is None:
            continue
        s = str(value).lower()
        for unit, pattern in VALUE_UNIT_HINTS:
            if pattern.search(s):
                candidates[unit] = None
        if "MYR" not in candidates and USD_VALUE_HINT.search(s):
            candidates["USD"] = None
        if PERCENT_VALUE_HINT.search(s):
            candidates["%"] = None

    return list(candidates)[:limit]


def compute_null_rate(values: list[Any], total: int) -> float:
    """Share of null cells among `values`, relative to `total` rows."""
    if total <= 0:
        return 0.0
    nulls = sum(1 for v in values if _is_null(v))
    return nulls / total


def _count_pattern_hits(samples: list[Any]) -> dict[str, int]:
    """Count how many samples fully match each named pattern."""
    hits: dict[str, int] = {}
    for name, pattern in PATTERNS.items():
        count = sum(1 for v in samples if pattern.match(str(v).strip()))
        if count:
            hits[name] = count
    return hits


# =============================================================================
# Dataset Profiling
# =============================================================================

def profile_hash(row_count: int, column_names: list[str]) -> str:
    """
    SHA-1 of the compact JSON {"rc": row_count, "cols": [...]}.

    Used as the cache key of a profile: a new hash means the dataset changed
    shape and the profile (and any cached validation run) is stale.
    """
    payload = json.dumps(
        {"rc": row_count, "cols": list(column_names)},
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def analyze_column(
    name: str,
    series: pd.Series,
    total_rows: int,
    sample_limit: int,
) -> ColumnProfile:
    """Profile one column given all of its cells."""
    values = series.tolist()
    null_mask = series.map(_is_null).astype(bool)
    non_null = series[~null_mask]
    samples = non_null.head(sample_limit).tolist()

    null_rate = compute_null_rate(values, total_rows) if total_rows else 1.0
    units = detect_units(name, samples)
    hits = _count_pattern_hits(samples)

    return ColumnProfile(
        name=name,
        inferred_type=infer_type(samples),
        null_rate=null_rate,
        distinct_count=int(non_null.astype(str).nunique()),
        unit_candidates=units or None,
        regex_hits=hits or None,
    )


def profile_rows(
    header: list[str],
    rows: list[list[Any]],
    sample_limit: int | None = None,
) -> DatasetProfileResult:
    """
    Build a DatasetProfileResult from parsed rows.

    Short rows are padded with empty cells; cells beyond the header are
    ignored. Columns are addressed by position so duplicate header names
    each get their own profile.
    """
    if sample_limit is None:
        sample_limit = get_settings().PROFILE_SAMPLE_LIMIT

    width = len(header)
    padded = [list(row[:width]) + [""] * (width - len(row)) for row in rows]
    df = pd.DataFrame(padded, columns=range(width), dtype=object)

    columns = [
        analyze_column(str(name), df[i], len(rows), sample_limit)
        for i, name in enumerate(header)
    ]

    logger.info(f"Profiled {len(rows)} rows × {width} columns")

    return DatasetProfileResult(
        row_count=len(rows),
        columns=columns,
        sample_hash=profile_hash(len(rows), [c.name for c in columns]),
    )


def profile_file(
    source: FileInput,
    sample_limit: int | None = None,
) -> DatasetProfileResult:
    """
    Read a CSV and profile it.

    Unreadable input does not raise: it yields a result with row_count -1 and
    the reader's message in `error`, the shape callers persist for failed
    profiling attempts.
    """
    try:
        header, rows = read_table(source)
    except TableReadError as e:
        logger.warning(f"Profiling failed: {e.message}")
        return DatasetProfileResult(row_count=-1, columns=[], error=e.message)

    return profile_rows(header, rows, sample_limit=sample_limit)


# =============================================================================
# Draft Spec
# =============================================================================

INFERRED_TO_FIELD_TYPE = {
    InferredType.STRING: FieldType.STRING,
    InferredType.NUMBER: FieldType.NUMBER,
    InferredType.INTEGER: FieldType.NUMBER,
    InferredType.BOOLEAN: FieldType.BOOLEAN,
    InferredType.DATE: FieldType.DATE,
    InferredType.DATETIME: FieldType.DATETIME,
    InferredType.UNKNOWN: FieldType.STRING,
}


def propose_spec(
    profile: DatasetProfileResult,
    name: str,
    version: str = "v1",
    domain: SpecDomain | str = SpecDomain.GENERIC,
) -> SpecDoc:
    """
    Draft a Spec from a profile without any model in the loop.

    One field per profiled column: integer becomes number, unknown becomes
    string, nullable iff any null was seen, unit from the top candidate.
    Duplicate column names keep their first occurrence.
    """
    fields: list[FieldSpec] = []
    seen: set[str] = set()

    for col in profile.columns:
        if col.name in seen:
            continue
        seen.add(col.name)
        fields.append(
            FieldSpec(
                name=col.name,
                type=INFERRED_TO_FIELD_TYPE[col.inferred_type],
                nullable=col.null_rate > 0,
                unit=col.unit_candidates[0] if col.unit_candidates else None,
            )
        )

    logger.debug(f"Proposed spec '{name}' {version} with {len(fields)} fields")
    return SpecDoc(name=name, version=version, domain=domain, fields=fields)
