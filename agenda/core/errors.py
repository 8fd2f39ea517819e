"""Typed errors raised by the scheduling core.

Every error carries a stable machine-readable ``code`` plus a human
message. The HTTP layer is the only place that turns them into status codes.
"""


class DomainError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __repr__(self) -> str:
        return f'{type(self).__name__}(code={self.code!r}, message={self.message!r})'


class ValidationError(DomainError):
    """Caller-supplied data breaks a structural rule."""


class BusinessRuleError(DomainError):
    """Input is well-formed but not allowed given the current state."""


class NotFoundError(DomainError):
    """A referenced provider, service, appointment or availability is missing."""


class UnauthorizedError(DomainError):
    """The actor is not allowed to touch the referenced record."""
