"""Transport layer: the request descriptor, the transport protocol and its httpx implementation.

Modules:
    base: ``FhirRequest`` and the ``HttpTransport`` protocol
    httpx_transport: ``HttpxTransport``, the default ``httpx.AsyncClient`` backed transport

Example:
    ```python
    from fhir_client_core.transport import HttpxTransport

    transport = HttpxTransport(base_url="https://hapi.example.org/fhir", timeout=10.0)
    client = FhirClient(config, transport=transport)
    ```
"""

from fhir_client_core.transport.base import MUTATING_METHODS, FhirRequest, HttpTransport, merge_headers
from fhir_client_core.transport.httpx_transport import HttpxTransport

__all__ = [
    "MUTATING_METHODS",
    "FhirRequest",
    "HttpTransport",
    "HttpxTransport",
    "merge_headers",
]
