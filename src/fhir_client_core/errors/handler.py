"""Error handling utilities for HTTP responses."""

import httpx

from fhir_client_core.errors.exceptions import (
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    GoneError,
    HTTPStatusError,
    NotFoundError,
    PreconditionFailedError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
    UnprocessableEntityError,
)
from fhir_client_core.errors.models import OperationOutcome

STATUS_EXCEPTIONS: dict[int, type[ClientError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    410: GoneError,
    412: PreconditionFailedError,
    422: UnprocessableEntityError,
    429: RateLimitError,
}


def raise_for_status(response: httpx.Response) -> None:
    """Raise appropriate exception for HTTP error responses.

    Uses the OperationOutcome in the body for the message when the server
    sent one, otherwise falls back to the status code and response text.

    Args:
        response: HTTP response object

    Raises:
        HTTPStatusError subclass based on status code
    """
    if response.is_success:
        return

    outcome = OperationOutcome.from_response(response)
    status_code = response.status_code

    if status_code in STATUS_EXCEPTIONS:
        exc_class: type[HTTPStatusError] = STATUS_EXCEPTIONS[status_code]
    elif 400 <= status_code < 500:
        exc_class = ClientError
    elif 500 <= status_code < 600:
        exc_class = ServerError
    else:
        exc_class = HTTPStatusError

    if outcome:
        message = f"HTTP {status_code}: {outcome.to_exception_message()}"
    else:
        response_text = response.text[:200]
        message = f"HTTP {status_code}: {response_text}" if response_text else f"HTTP {status_code}"

    if exc_class is RateLimitError:
        retry_after = None
        if "retry-after" in response.headers:
            try:
                retry_after = int(response.headers["retry-after"])
            except (ValueError, TypeError):
                # HTTP-date form is left to the caller
                retry_after = None
        raise RateLimitError(
            message=message,
            retry_after=retry_after,
            status_code=status_code,
            response=response,
            operation_outcome=outcome,
        )

    raise exc_class(
        message=message,
        status_code=status_code,
        response=response,
        operation_outcome=outcome,
    )
