"""
Error types raised by the stores and translated into error envelopes at the
HTTP boundary.

- StatusFeedError: Base exception, carries a stable ``code``
- ValidationError: One or more field-level rule violations
- NotFoundError: A referenced status update or child record does not exist
- InternalError: Unexpected failure (storage, integrity)
- TransitionRecordError: The transition recorder could not append to the log

Invariants:
    - ``code`` is always one of ERROR_CODES
    - ValidationError keeps one message per violated rule
"""
from typing import Optional

VALIDATION_ERROR = "validation_error"
NOT_FOUND = "not_found"
INTERNAL_ERROR = "internal_error"

ERROR_CODES = frozenset({VALIDATION_ERROR, NOT_FOUND, INTERNAL_ERROR})


class StatusFeedError(Exception):
    """Base exception for every error the API knows how to report.

    Attributes:
        message: Human-readable description
        code: Stable error code clients can branch on
        status_code: HTTP status the error maps to
    """

    code = INTERNAL_ERROR
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StatusFeedError):
    """Input violated one or more rules.

    Raised when:
    - body is blank or too long
    - mood/status/reaction kind is outside its vocabulary
    - a transition value is outside the vocabulary of its field
    """

    code = VALIDATION_ERROR
    status_code = 422

    def __init__(self, messages: list[str]) -> None:
        if not messages:
            raise ValueError("ValidationError needs at least one message")
        super().__init__("; ".join(messages))
        self.messages = list(messages)


class NotFoundError(StatusFeedError):
    code = NOT_FOUND
    status_code = 404

    def __init__(self, kind: str, identifier: Optional[object] = None) -> None:
        label = kind.replace("_", " ").capitalize()
        message = f"{label} not found" if identifier is None else f"{label} {identifier} not found"
        super().__init__(message)
        self.kind = kind
        self.identifier = identifier


class InternalError(StatusFeedError):
    code = INTERNAL_ERROR
    status_code = 500


class TransitionRecordError(InternalError):
    """The update could not be recorded in the transition log.

    The recorder's inputs are derived from persisted state, so this signals a
    data-integrity bug rather than bad client input. The enclosing update is
    rolled back before this is raised.
    """
