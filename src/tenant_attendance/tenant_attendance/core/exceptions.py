class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a tenant touches a resource it does not own."""

    http_status = 403


class InvalidCoordinates(ValidationError):
    pass


class InvalidEmbedding(ValidationError):
    pass


class EmployeeNotFound(DomainError):
    http_status = 404


class TenantNotFound(DomainError):
    http_status = 404


class InvalidOrExpiredLocationToken(DomainError):
    """The location proof failed signature or expiry checks; restart the location check."""

    http_status = 401


class EmployeeMismatch(DomainError):
    http_status = 403


class TenantMismatch(DomainError):
    http_status = 403


class FaceVerificationFailed(DomainError):
    pass


class FaceVerificationUnavailable(FaceVerificationFailed):
    """The oracle errored or timed out; the check-in fails, the client may retry."""

    http_status = 502


class AlreadyCheckedInToday(DomainError):
    http_status = 409


class InvalidOrRevokedRefreshToken(DomainError):
    http_status = 401


class ExpiredRefreshToken(DomainError):
    http_status = 401


class SessionNotFound(InvalidOrRevokedRefreshToken):
    pass


class SessionRevoked(InvalidOrRevokedRefreshToken):
    pass


class SessionExpired(ExpiredRefreshToken):
    pass


class UsernameTaken(DomainError):
    http_status = 409


class TaxIdTaken(DomainError):
    http_status = 409


class UpstreamError(DomainError):
    """An external dependency failed; clients may retry with backoff."""

    http_status = 502


class StorageFailure(UpstreamError):
    pass


class OracleFailure(UpstreamError):
    pass


class InvalidToken(Exception):
    """Signature, format or kind check failed."""


class ExpiredToken(InvalidToken):
    """Signature is valid but the validity window has passed."""
