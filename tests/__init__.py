# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the validation engine:
# - test_models.py: Pydantic model validation and serialization
# - test_coercion.py / test_compiler.py: value coercion and Spec compilation
# - test_validator.py: row-set validation and profile drift
# - test_profiler.py: type inference, units and dataset profiles
# - test_scoring.py / test_drift.py: prediction grading and drift deltas
# - test_tabular.py / test_spec_io.py / test_config.py: edges and settings
# - test_utils.py: shared predicates and the error hierarchy
#
# Run tests with: pytest
# =============================================================================
