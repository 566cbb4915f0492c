"""Config module exports."""

from docplane.config.loader import load_config
from docplane.config.models import (
    CommentConfig,
    CommentStyle,
    ConverterConfig,
    DocPlaneConfig,
    LoggingConfig,
)

__all__ = [
    "load_config",
    "CommentConfig",
    "CommentStyle",
    "ConverterConfig",
    "DocPlaneConfig",
    "LoggingConfig",
]
