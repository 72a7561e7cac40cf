"""FHIR Client Core - asynchronous client library for FHIR REST servers.

- Resource CRUD, search, batch and transaction interactions
- Search parameter merging and bounded fetch-all pagination
- LRU/TTL response cache for reads
- Reference resolution ("Patient/123" or a search) to exactly one resource
- Pluggable transport (httpx by default) and credential providers

Example:
    ```python
    from fhir_client_core import FhirClient, FhirClientConfig

    async with FhirClient(FhirClientConfig.from_env()) as client:
        bundle = await client.search("Patient", {"family": "Doe"})
    ```
"""

from fhir_client_core.client import FhirClient
from fhir_client_core.config import CacheConfig, FhirClientConfig

__version__ = "0.1.0"

__all__ = ["CacheConfig", "FhirClient", "FhirClientConfig", "__version__"]
