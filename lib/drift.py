# =============================================================================
# lib/drift.py - Drift Cases: Parsing, Injection & Delta Aggregation
# =============================================================================
# A drift case names a synthetic perturbation applied to a dataset before a
# prediction trial, optionally with a level 1-3:
#
#     "none"            -> baseline
#     "unit_change_L2"  -> ("unit_change", 2)
#     "header_noise"    -> ("header_noise", None)
#
# This module:
#   - parses drift case strings into (kind, level)
#   - injects the perturbation into header/rows (apply_drift)
#   - aggregates scored trials into per-scenario deltas against the
#     no-drift baseline, plus a summary per (kind, level)
#
# Aggregation runs on pandas groupbys. Missing and non-finite metrics are
# NaN inside the frames and None in the returned models.
# =============================================================================

import logging
import re
from typing import Any

import numpy as np
import pandas as pd

from core.config import get_settings
from core.models import DeltaRow, DriftReport, DriftSummary, TrialRow
from lib.utils import is_finite_number

# Set up logging for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BASELINE = "none"

LEVEL_SUFFIX = re.compile(r"(?:^|[:_\-])l(?:evel)?\s*([1-3])$", re.IGNORECASE)
BARE_LEVEL = re.compile(r"([1-3])$")
TRAILING_SEPARATOR = re.compile(r"[:_\-\s]$")

SCENARIO_KEY = ["model_id", "prompt_mode", "unit_tool"]
DRIFT_KEY = ["drift_kind", "drift_level"]
METRICS = ["f1", "precision", "recall", "type_acc", "unit_acc", "valid_rows_pct"]

UNIT_CHANGE_HEADERS = re.compile(r"(amount|price|total)", re.IGNORECASE)


# =============================================================================
# Parsing
# =============================================================================

def parse_drift(raw: str | None) -> tuple[str, int | None]:
    """
    Split a drift case into (kind, level).

    A trailing level marker (":L2", "_level3", "-l1") or a bare trailing
    digit 1-3 is the level. The rest, minus one trailing separator, is the
    kind. When nothing is left the kind is the original string.

    Examples:
        parse_drift(None)              -> ("none", None)
        parse_drift("unit_change_L2")  -> ("unit_change", 2)
        parse_drift("type_shift3")     -> ("type_shift", 3)
        parse_drift("L2")              -> ("L2", 2)
    """
    if raw is None:
        return BASELINE, None
    s = str(raw)
    if not s.strip() or s.lower() == BASELINE:
        return BASELINE, None

    match = LEVEL_SUFFIX.search(s)
    if match:
        cut = match.start()
    else:
        match = BARE_LEVEL.search(s)
        if not match:
            return s, None
        cut = match.start(1)

    kind = TRAILING_SEPARATOR.sub("", s[:cut])
    return kind or s, int(match.group(1))


def is_baseline(drift_case: str | None) -> bool:
    return parse_drift(drift_case)[0] == BASELINE


def valid_pct_of(trial: TrialRow) -> float | None:
    """
    Valid-row share of a trial.

    Uses valid_rows_pct when finite, else valid_rows / total_rows when both
    are present and total_rows > 0, else None.
    """
    if is_finite_number(trial.valid_rows_pct):
        return float(trial.valid_rows_pct)
    if (
        is_finite_number(trial.valid_rows)
        and is_finite_number(trial.total_rows)
        and trial.total_rows > 0
    ):
        return trial.valid_rows / trial.total_rows
    return None


# =============================================================================
# Aggregation
# =============================================================================

def _trial_frame(trials: list[TrialRow]) -> pd.DataFrame:
    """One row per trial: scenario key, parsed drift, numeric metrics."""
    records = []
    for t in trials:
        kind, level = parse_drift(t.drift_case)
        records.append({
            "model_id": t.model_id,
            "prompt_mode": t.prompt_mode,
            "unit_tool": t.unit_tool,
            "drift_kind": kind,
            "drift_level": level,
            "f1": t.f1,
            "precision": t.precision,
            "recall": t.recall,
            "type_acc": t.type_acc,
            "unit_acc": t.unit_acc,
            "valid_rows_pct": valid_pct_of(t),
        })

    df = pd.DataFrame.from_records(records, columns=SCENARIO_KEY + DRIFT_KEY + METRICS)
    for col in METRICS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    df[METRICS] = df[METRICS].replace([np.inf, -np.inf], np.nan)
    return df


def _optional(value: Any) -> float | None:
    return None if pd.isna(value) else float(value)


def _level(value: Any) -> int | None:
    return None if pd.isna(value) else int(value)


def compute_drift_deltas(
    all_trials: list[TrialRow],
    filtered_trials: list[TrialRow] | None = None,
) -> DriftReport:
    """
    Compare drifted trials against their no-drift baseline.

    Baselines are averaged per (model, prompt mode, unit tool) over ALL
    trials. Drifted groups come from `filtered_trials` when it is non-empty,
    else from all trials. A drift group with no baseline for its scenario is
    skipped. A delta is None when either side has no finite values.

    Returns:
        DriftReport with one DeltaRow per (scenario, kind, level) in
        first-seen order, and a DriftSummary per (kind, level)
    """
    working = filtered_trials if filtered_trials else all_trials

    all_df = _trial_frame(all_trials)
    baseline_df = all_df[all_df["drift_kind"] == BASELINE]
    baselines: dict[tuple, pd.Series] = {
        key: group[METRICS].mean()
        for key, group in baseline_df.groupby(SCENARIO_KEY, dropna=False, sort=False)
    }

    work_df = _trial_frame(working)
    drifted = work_df[work_df["drift_kind"] != BASELINE]

    delta_rows: list[DeltaRow] = []
    for key, group in drifted.groupby(SCENARIO_KEY + DRIFT_KEY, dropna=False, sort=False):
        model_id, prompt_mode, unit_tool, kind, level = key
        base = baselines.get((model_id, prompt_mode, unit_tool))
        if base is None:
            logger.debug(f"No baseline for {model_id}/{prompt_mode}/{unit_tool}; skipping {kind}")
            continue

        delta = group[METRICS].mean() - base
        delta_rows.append(
            DeltaRow(
                model_id=model_id,
                prompt_mode=prompt_mode or "baseline",
                unit_tool=bool(unit_tool),
                drift_kind=kind,
                drift_level=_level(level),
                n=len(group),
                **{f"d_{m}": _optional(delta[m]) for m in METRICS},
            )
        )

    summary = _summarize(delta_rows)

    logger.info(
        f"Computed {len(delta_rows)} drift deltas over {len(working)} trials "
        f"({len(baselines)} baseline scenarios)"
    )
    return DriftReport(delta_rows=delta_rows, delta_summary=summary)


def _summarize(delta_rows: list[DeltaRow]) -> list[DriftSummary]:
    """Mean of the defined deltas per (kind, level), with summed n."""
    if not delta_rows:
        return []

    delta_cols = [f"d_{m}" for m in METRICS]
    df = pd.DataFrame.from_records(
        [r.model_dump(include=set(DRIFT_KEY + ["n"] + delta_cols)) for r in delta_rows],
        columns=DRIFT_KEY + ["n"] + delta_cols,
    )
    for col in delta_cols:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)

    summary = []
    for (kind, level), group in df.groupby(DRIFT_KEY, dropna=False, sort=False):
        means = group[delta_cols].mean()
        summary.append(
            DriftSummary(
                drift_kind=kind,
                drift_level=_level(level),
                n=int(group["n"].sum()),
                **{col: _optional(means[col]) for col in delta_cols},
            )
        )
    return summary


# =============================================================================
# Injection
# =============================================================================

def apply_drift(
    header: list[str],
    rows: list[list[str]],
    drift_case: str | None,
    seed: int | None = None,
) -> tuple[list[str], list[list[str]]]:
    """
    Apply the perturbation named by a drift case to a parsed dataset.

    Kinds (the level is ignored):
        header_noise  - each header, with HEADER_NOISE_RATE probability,
                        has "_" replaced by " " and is upper-cased
        unit_change   - headers containing amount/price/total get " (USD)"
        type_shift    - each cell, with TYPE_SHIFT_RATE probability, is
                        wrapped in double quotes
        missing_field - the last column is dropped

    Baseline and unknown kinds return copies of the inputs unchanged.
    """
    settings = get_settings()
    kind, _ = parse_drift(drift_case)
    header = list(header)
    rows = [list(r) for r in rows]

    if seed is None:
        seed = settings.DRIFT_SEED
    rng = np.random.default_rng(seed)

    if kind == "header_noise":
        header = [
            h.replace("_", " ").upper() if rng.random() < settings.HEADER_NOISE_RATE else h
            for h in header
        ]
    elif kind == "unit_change":
        header = [f"{h} (USD)" if UNIT_CHANGE_HEADERS.search(h) else h for h in header]
    elif kind == "type_shift":
        rows = [
            [f'"{v}"' if rng.random() < settings.TYPE_SHIFT_RATE else v for v in row]
            for row in rows
        ]
    elif kind == "missing_field":
        header = header[:-1]
        rows = [row[:-1] for row in rows]
    elif kind != BASELINE:
        logger.warning(f"Unknown drift kind '{kind}'; leaving data unchanged")

    return header, rows
