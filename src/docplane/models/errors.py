"""Model error types."""

from docplane.core.errors import CodedError, ErrorCode


class ModelError(CodedError):
    """Base error for reflection model invariants."""

    pass


class RegistrationConflictError(ModelError):
    """A binding is already registered to a different reflection."""

    code = ErrorCode.MODEL_REGISTRATION_CONFLICT

    def __init__(self, binding_name: str, existing_id: int, new_id: int) -> None:
        super().__init__(
            f"Binding '{binding_name}' is already registered to reflection {existing_id}, "
            f"cannot register it to reflection {new_id}",
            binding_name=binding_name,
            existing_id=existing_id,
            new_id=new_id,
        )
        self.binding_name = binding_name
        self.existing_id = existing_id
        self.new_id = new_id
