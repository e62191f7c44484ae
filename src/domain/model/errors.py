"""Domain-level exceptions.

Use cases and repositories raise these errors to express failures.
Route handlers catch them and map to HTTP status codes; no other layer
translates them.
"""


class DomainError(Exception):
    """Base class for all domain errors.

    Each kind carries a stable machine-readable ``code``, the default
    transport ``status_code`` and whether a caller may retry it.
    """
    code = 'DomainError'
    status_code = 500
    retryable = False
    default_message = 'Domain error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Input violates a business validation rule."""
    code = 'ValidationError'
    status_code = 400
    default_message = 'Request validation failed'


class AlreadyExistsError(DomainError):
    """Entity with the same unique key already exists."""
    code = 'UserAlreadyExists'
    status_code = 400
    default_message = 'A user with this userId already exists'


class NotFoundError(DomainError):
    """Requested entity does not exist."""
    code = 'NotFound'
    status_code = 404
    default_message = 'User not found'


class ThrottledError(DomainError):
    """Store signalled capacity exhaustion."""
    code = 'Throttled'
    status_code = 429
    retryable = True
    default_message = 'Too many requests, please retry later'


class StoreUnavailableError(DomainError):
    """Any other storage-layer fault."""
    code = 'StoreUnavailable'
    status_code = 500
    retryable = True
    default_message = 'An internal service error occurred'
