"""Shared error types and error-formatting utilities."""

from typing import Protocol


class _HasErrors(Protocol):
    def errors(self) -> list: ...


class EventValidationError(Exception):
    """A recognized webhook payload could not be normalized into a valid event."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def format_validation_errors(exc: _HasErrors) -> list[str]:
    """Flatten a pydantic (or FastAPI request) validation error into "field: reason" strings.

    Pydantic reports errors as [{"loc": ("author",), "msg": "...", ...}, ...].
    Returns one entry per failing field, "payload: reason" for root errors.
    """
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "payload"
        messages.append(f"{field}: {err.get('msg', 'invalid value')}")
    return messages
