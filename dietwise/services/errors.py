"""Domain errors raised by the service layer and mapped to HTTP codes by the API."""


class ConflictError(ValueError):
    """The request collides with data that already exists."""


class DuplicateSubmissionError(ConflictError):
    """The participant has already submitted this survey."""


class DuplicateParticipantError(ConflictError):
    """Another participant already uses this email address."""
