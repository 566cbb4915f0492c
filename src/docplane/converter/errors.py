"""Converter error types.

Both errors signal a bug in the caller (a visitor or the orchestrator), not
a property of the converted program. They are raised immediately and never
retried.
"""

from docplane.core.errors import CodedError, ErrorCode


class ConversionError(CodedError):
    """Base error for conversion invariant violations."""

    pass


class MissingBindingError(ConversionError):
    """A node expected to declare a binding resolved to none."""

    code = ErrorCode.CONVERSION_MISSING_BINDING

    def __init__(self, kind: str, file_name: str, line: int) -> None:
        super().__init__(
            f"Expected a binding for node with kind {kind} at {file_name}:{line}",
            kind=kind,
            file_name=file_name,
            line=line,
        )
        self.kind = kind
        self.file_name = file_name
        self.line = line  # 1-based


class InactiveProgramError(ConversionError):
    """The active program (or its resolver) was read while no program is active."""

    code = ErrorCode.CONVERSION_INACTIVE_PROGRAM

    def __init__(self) -> None:
        super().__init__("Tried to access Context.program when not converting a source file")
