"""Error taxonomy and FHIR OperationOutcome support."""

from fhir_client_core.errors.exceptions import (
    BadRequestError,
    BoundExceededError,
    ClientError,
    ConfigurationError,
    ConflictError,
    FhirClientError,
    ForbiddenError,
    GoneError,
    HTTPStatusError,
    MalformedResourceError,
    MultipleMatchesError,
    NoMatchError,
    NotFoundError,
    PreconditionFailedError,
    RateLimitError,
    ResolutionError,
    ServerError,
    TransportError,
    UnauthorizedError,
    UnprocessableEntityError,
    UnsupportedVersionError,
    ValidationError,
)
from fhir_client_core.errors.handler import raise_for_status
from fhir_client_core.errors.models import OperationOutcome, OutcomeIssue

__all__ = [
    "BadRequestError",
    "BoundExceededError",
    "ClientError",
    "ConfigurationError",
    "ConflictError",
    "FhirClientError",
    "ForbiddenError",
    "GoneError",
    "HTTPStatusError",
    "MalformedResourceError",
    "MultipleMatchesError",
    "NoMatchError",
    "NotFoundError",
    "OperationOutcome",
    "OutcomeIssue",
    "PreconditionFailedError",
    "RateLimitError",
    "ResolutionError",
    "ServerError",
    "TransportError",
    "UnauthorizedError",
    "UnprocessableEntityError",
    "UnsupportedVersionError",
    "ValidationError",
    "raise_for_status",
]
