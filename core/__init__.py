"""Core shared utilities: logging, startup config and run artifacts."""

from core.structured_logging import (
    configure_structured_logging,
    get_phase,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.startup_config import (
    ConfigValidationError,
    load_config_file,
    resolve_strict_config_validation,
)
from core.run_artifacts import (
    write_diagnostics_log,
    write_elements_json,
    write_run_report,
)

__all__ = [
    "configure_structured_logging",
    "get_phase",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "load_config_file",
    "resolve_strict_config_validation",
    "write_diagnostics_log",
    "write_elements_json",
    "write_run_report",
]
