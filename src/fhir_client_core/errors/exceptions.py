"""Structured exceptions for FHIR client errors."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from fhir_client_core.errors.models import OperationOutcome


class FhirClientError(Exception):
    """Base exception for every error raised by this library."""

    pass


class ConfigurationError(FhirClientError):
    """Invalid client configuration."""

    pass


class UnsupportedVersionError(ConfigurationError):
    """Raised when a FHIR version token is not one of the known spellings.

    Attributes:
        version: The offending token, verbatim.
    """

    def __init__(self, version: str):
        super().__init__(f"Unsupported FHIR version: {version}")
        self.version = version


class ValidationError(FhirClientError):
    """Request arguments rejected before anything was sent."""

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class TransportError(FhirClientError):
    """Failure reported by the HTTP layer (network error or non-2xx status)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: "httpx.Response | None" = None,
        operation_outcome: "OperationOutcome | None" = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response
        self.operation_outcome = operation_outcome


class HTTPStatusError(TransportError):
    """Server answered with a non-2xx status."""

    pass


class ClientError(HTTPStatusError):
    """4xx client errors."""

    pass


class BadRequestError(ClientError):
    """400 Bad Request."""

    pass


class UnauthorizedError(ClientError):
    """401 Unauthorized."""

    pass


class ForbiddenError(ClientError):
    """403 Forbidden."""

    pass


class NotFoundError(ClientError):
    """404 Not Found."""

    pass


class ConflictError(ClientError):
    """409 Conflict."""

    pass


class GoneError(ClientError):
    """410 Gone (resource was deleted)."""

    pass


class PreconditionFailedError(ClientError):
    """412 Precondition Failed (version conflict on conditional update)."""

    pass


class UnprocessableEntityError(ClientError):
    """422 Unprocessable Entity (server-side profile or business rule violation)."""

    pass


class RateLimitError(ClientError):
    """429 Too Many Requests."""

    def __init__(self, message: str, retry_after: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ServerError(HTTPStatusError):
    """5xx server errors."""

    pass


class ResolutionError(FhirClientError):
    """A reference could not be resolved to exactly one resource."""

    def __init__(self, message: str, reference: str | None = None):
        super().__init__(message)
        self.reference = reference


class NoMatchError(ResolutionError):
    """The reference matched no resource."""

    pass


class MultipleMatchesError(ResolutionError):
    """The reference matched more than one resource."""

    def __init__(self, message: str, count: int, reference: str | None = None):
        super().__init__(message, reference=reference)
        self.count = count


class MalformedResourceError(ResolutionError):
    """The matched resource lacks the type tag or id needed to use it."""

    pass


class BoundExceededError(FhirClientError):
    """Raised when a fetch-all search collects more results than allowed.

    Attributes:
        bound: The effective result limit.
        count: Number of resources accumulated when the walk stopped.
    """

    def __init__(self, bound: int, count: int):
        super().__init__(f"Fetch-all search exceeded the limit of {bound} results ({count} collected)")
        self.bound = bound
        self.count = count
