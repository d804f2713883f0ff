# =============================================================================
# lib/ - Validation & Scoring Engines
# =============================================================================
# Self-contained engines that can be used and tested in isolation:
# - coercion.py: number/boolean/date coercion primitives
# - compiler.py: SpecDoc -> CompiledSpec record validator
# - validator.py: row-set validation and profile-drift detection
# - profiler.py: type inference, unit detection, dataset profiles
# - scoring.py: predicted-Spec grading
# - drift.py: drift case parsing, injection and delta aggregation
# - tabular.py: CSV reading
# - spec_io.py: Spec loading and version bumping
# - utils.py: shared predicates and the ApplicationError hierarchy
# =============================================================================

from lib.compiler import CompiledSpec, RecordResult, Violation, compile_spec
from lib.drift import apply_drift, compute_drift_deltas, parse_drift, valid_pct_of
from lib.profiler import (
    detect_units,
    infer_type,
    profile_file,
    profile_hash,
    profile_rows,
    propose_spec,
)
from lib.scoring import (
    compare_field_sets,
    score_prediction,
    type_match_rate,
    unit_match_rate,
)
from lib.spec_io import bump_version, load_spec
from lib.tabular import read_table
from lib.utils import ApplicationError, SpecLoadError, TableReadError
from lib.validator import (
    compare_columns,
    compute_profile_drift,
    run_tool_validation,
    run_validation,
    schema_match,
    validate_table,
)

__all__ = [
    # Compiler
    "CompiledSpec",
    "RecordResult",
    "Violation",
    "compile_spec",
    # Validation
    "compare_columns",
    "compute_profile_drift",
    "run_tool_validation",
    "run_validation",
    "schema_match",
    "validate_table",
    # Profiling
    "detect_units",
    "infer_type",
    "profile_file",
    "profile_hash",
    "profile_rows",
    "propose_spec",
    # Scoring
    "compare_field_sets",
    "score_prediction",
    "type_match_rate",
    "unit_match_rate",
    # Drift
    "apply_drift",
    "compute_drift_deltas",
    "parse_drift",
    "valid_pct_of",
    # I/O
    "bump_version",
    "load_spec",
    "read_table",
    # Errors
    "ApplicationError",
    "SpecLoadError",
    "TableReadError",
]
