"""Default HttpTransport built on ``httpx.AsyncClient``.

Example:
    ```python
    from fhir_client_core.auth import BasicAuth
    from fhir_client_core.transport import FhirRequest, HttpxTransport

    transport = HttpxTransport(
        base_url="https://hapi.example.org/fhir",
        auth=BasicAuth("user", "secret"),
        timeout=30.0,
    )
    patient = await transport.send(FhirRequest("GET", "Patient/123"))
    await transport.aclose()
    ```

Tests can pass ``transport=httpx.MockTransport(handler)`` to exercise the
full request/response path without a network.
"""

import logging
from typing import Any

import httpx

from fhir_client_core.auth.providers import CredentialProvider
from fhir_client_core.errors import TransportError, raise_for_status
from fhir_client_core.transport.base import FhirRequest, merge_headers

logger = logging.getLogger(__name__)


class HttpxTransport:
    """Send FhirRequests through a shared ``httpx.AsyncClient``.

    Args:
        base_url: FHIR server base address; relative request urls resolve against it.
        auth: Optional credential provider consulted on every request.
        timeout: Per-request timeout in seconds.
        client: Pre-built client to use instead of creating one. Its lifetime
            stays with the caller.
        transport: Optional httpx transport for the created client (e.g. a
            ``MockTransport`` in tests).
    """

    def __init__(
        self,
        *,
        base_url: str,
        auth: CredentialProvider | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.auth = auth
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(self, request: FhirRequest) -> Any:
        """Perform one HTTP exchange and decode the JSON body.

        Raises:
            HTTPStatusError subclass for non-2xx responses.
            TransportError for network-level failures and undecodable bodies.
        """
        headers = merge_headers(self.auth.auth_headers() if self.auth else None, request.headers)

        try:
            response = await self._client.request(
                request.method,
                request.url,
                params=request.params,
                headers=headers,
                json=request.json,
                content=request.content,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

        logger.debug(f"{request.method} {response.request.url} -> {response.status_code}")
        raise_for_status(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Response to {request.method} {request.url} is not valid JSON",
                status_code=response.status_code,
                response=response,
            ) from e
