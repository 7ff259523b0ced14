"""Domain exceptions and their HTTP status mapping."""

from geocats.schemas.policy import DenyReason

DENY_REASON_STATUS: dict[DenyReason, int] = {
    DenyReason.NOT_AUTHENTICATED: 401,
    DenyReason.INVALID_IDENTIFIER: 400,
    DenyReason.NOT_OWNER: 403,
    DenyReason.NOT_ADMIN: 403,
    DenyReason.NOT_FOUND: 404,
}

DENY_REASON_MESSAGE: dict[DenyReason, str] = {
    DenyReason.NOT_AUTHENTICATED: "Not authenticated",
    DenyReason.INVALID_IDENTIFIER: "Invalid id",
    DenyReason.NOT_OWNER: "Not owner of resource",
    DenyReason.NOT_ADMIN: "Admin access required",
    DenyReason.NOT_FOUND: "Resource not found",
}


class AuthError(Exception):
    """Raised when a bearer credential is missing or cannot be verified."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class MissingCredentialError(AuthError):
    def __init__(self, message: str = "No token provided") -> None:
        super().__init__(message)


class InvalidCredentialError(AuthError):
    def __init__(self, message: str = "Invalid or expired token") -> None:
        super().__init__(message)


class AuthzError(Exception):
    """Raised when the policy engine denies an action. Carries the deny reason."""

    def __init__(self, reason: DenyReason, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or DENY_REASON_MESSAGE[reason]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return DENY_REASON_STATUS[self.reason]


class InvalidIdentifierError(ValueError):
    """Raised when a value is not a syntactically valid resource identifier."""

    def __init__(self, value: object) -> None:
        self.value = value
        self.message = "Invalid id"
        super().__init__(f"Invalid identifier: {value!r}")


class QueryError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRegionError(QueryError):
    """Raised for malformed region input; no filtering runs."""


class RepositoryError(Exception):
    """Opaque storage failure. The message is logged, never returned to clients."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class RepositoryConflictError(RepositoryError):
    """A unique constraint was violated (e.g. user name or email already taken)."""
