"""Uniform failure shape raised by account lifecycle workflows."""

from __future__ import annotations

_DEFAULT_STATUS_CODE = 500


class WorkflowError(Exception):
    """Workflow failure carrying the status code and message callers receive."""

    def __init__(self, *, message: str, status_code: int = _DEFAULT_STATUS_CODE) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @classmethod
    def from_error(cls, error: Exception) -> WorkflowError:
        """Wrap a collaborator failure, keeping the status code it carries, if any."""

        status_code = getattr(error, "status_code", None)
        if not isinstance(status_code, int):
            status_code = _DEFAULT_STATUS_CODE
        message = getattr(error, "message", None)
        if not isinstance(message, str) or not message:
            message = str(error) or type(error).__name__
        return cls(message=message, status_code=status_code)


class WorkflowValidationError(WorkflowError):
    """Client input was missing or malformed; raised before any side effect."""

    def __init__(self, message: str, *, errors: dict[str, str] | None = None) -> None:
        super().__init__(message=message, status_code=400)
        self.errors = dict(errors or {})
