"""DocPlane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Conversion
- 4xxx: Reflection model

Config errors are frozen records built through factories. Errors raised from
inside a traversal (``docplane.converter.errors``, ``docplane.models.errors``)
are ``CodedError`` subclasses: ordinary exceptions with the code fixed per
class, so they can be raised positionally and still reported uniformly.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Conversion (3xxx)
    CONVERSION_MISSING_BINDING = 3001
    CONVERSION_INACTIVE_PROGRAM = 3002

    # Reflection model (4xxx)
    MODEL_REGISTRATION_CONFLICT = 4001


def error_payload(code: ErrorCode, message: str, details: dict[str, Any]) -> dict[str, Any]:
    """Structured form shared by every DocPlane error, used in log records."""
    return {
        "code": code.value,
        "error": code.name,
        "message": message,
        "details": details,
    }


@dataclass(frozen=True, slots=True)
class DocPlaneError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return error_payload(self.code, self.message, self.details)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DocPlaneError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class CodedError(Exception):
    """Exception whose subclasses each carry one ``ErrorCode``.

    ``str(error)`` is the plain message; ``to_dict`` adds the code and the
    keyword details given at construction.
    """

    code: ClassVar[ErrorCode]

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def error_name(self) -> str:
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return error_payload(self.code, self.message, self.details)
