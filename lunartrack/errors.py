"""Error types raised and reported by the rocket tracking service."""

from __future__ import annotations

from http import HTTPStatus


class APIError(Exception):
    """An error carrying an HTTP status code, a message and optional details."""

    def __init__(self, code: int, message: str, details: str = "") -> None:
        super().__init__(code, message, details)
        self.code = code
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"API Error {self.code}: {self.message} ({self.details})"
        return f"API Error {self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"APIError(code={self.code!r}, message={self.message!r}, details={self.details!r})"


class ValidationError(Exception):
    """Invalid input in one named field."""

    def __init__(self, field: str, message: str, value: str = "") -> None:
        super().__init__(field, message, value)
        self.field = field
        self.message = message
        self.value = value

    def __str__(self) -> str:
        return f"Validation error for field '{self.field}': {self.message}"

    def __repr__(self) -> str:
        return f"ValidationError(field={self.field!r}, message={self.message!r}, value={self.value!r})"


class MessageProcessingError(Exception):
    """A rocket message that could not be applied to the rocket's state."""

    def __init__(self, rocket_id: str, message_number: int, message_type: str, reason: str) -> None:
        super().__init__(rocket_id, message_number, message_type, reason)
        self.rocket_id = rocket_id
        self.message_number = message_number
        self.message_type = message_type
        self.reason = reason

    def __str__(self) -> str:
        return (
            f"Failed to process message {self.message_number} for rocket {self.rocket_id} "
            f"(type: {self.message_type}): {self.reason}"
        )

    def __repr__(self) -> str:
        return (
            f"MessageProcessingError(rocket_id={self.rocket_id!r}, message_number={self.message_number!r}, "
            f"message_type={self.message_type!r}, reason={self.reason!r})"
        )


ERR_INVALID_JSON = APIError(HTTPStatus.BAD_REQUEST, "Invalid JSON format")
ERR_METHOD_NOT_ALLOWED = APIError(HTTPStatus.METHOD_NOT_ALLOWED, "HTTP method not allowed")
ERR_ROCKET_NOT_FOUND = APIError(HTTPStatus.NOT_FOUND, "Rocket not found")
ERR_MISSING_ROCKET_ID = APIError(HTTPStatus.BAD_REQUEST, "Rocket ID is required")
ERR_INTERNAL_SERVER = APIError(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")