# =============================================================================
# core/ - Models & Configuration Package
# =============================================================================
# This package contains framework-agnostic definitions:
# - models/: Pydantic schemas (Spec, profile, validation, experiment)
# - config.py: Engine settings (pydantic-settings)
# - log_config.py: Logging setup for applications embedding the engine
#
# Code in this package should NOT import from lib/.
# =============================================================================
