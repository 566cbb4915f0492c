"""Core module exports."""

from docplane.core.errors import (
    CodedError,
    ConfigError,
    DocPlaneError,
    ErrorCode,
    error_payload,
)
from docplane.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "CodedError",
    "DocPlaneError",
    "ConfigError",
    "ErrorCode",
    "error_payload",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
