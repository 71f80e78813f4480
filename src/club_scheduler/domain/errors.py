"""Error taxonomy for club scheduling."""

from dataclasses import dataclass


class ClubSchedulerError(Exception):
    """Base class for application errors."""


class RepositoryUnavailable(ClubSchedulerError):
    """Raised when the record store cannot be reached."""


class RepositoryError(ClubSchedulerError):
    """Raised when the record store rejects a request."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Record store returned {status}: {body}")
        self.status = status
        self.body = body


class ValidationFailure(ClubSchedulerError):
    """Raised for invalid user input before anything is persisted."""


class TruncationRisk(ValidationFailure):
    """Raised when a document would exceed the store's text field ceiling."""

    def __init__(self, encoded_length: int, limit: int) -> None:
        super().__init__(
            f"Encoded document is {encoded_length} characters; the store keeps "
            f"at most {limit} and the file would be cut off."
        )
        self.encoded_length = encoded_length
        self.limit = limit


class SessionNotFound(ClubSchedulerError):
    """Raised when a session id is not in the loaded snapshot."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


@dataclass(frozen=True)
class DecodeWarning:
    """A single optional field of a record that failed to decode."""

    record_id: str
    field: str
    message: str
