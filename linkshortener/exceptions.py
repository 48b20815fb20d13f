class LinkShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:linkshortener_error'


class ForbiddenError(LinkShortenerError):
    """Raised when a requester is not the owner of the URL record it operates on."""

    error_code = 'app:forbidden_error'


class ValidationError(LinkShortenerError):
    """Raised when caller-provided input violates a precondition (URL, code, title, description)."""

    error_code = 'app:validation_error'

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
