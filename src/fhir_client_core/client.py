"""Asynchronous FHIR REST client.

Example:
    ```python
    from fhir_client_core import CacheConfig, FhirClient, FhirClientConfig

    config = FhirClientConfig(
        base_url="https://hapi.example.org/fhir",
        fhir_version="R4",
        cache=CacheConfig(enable=True),
    )

    async with FhirClient(config) as client:
        patient = await client.read("Patient", "123")
        everyone = await client.search("Patient?family=Doe", fetch_all=True)
        reference = await client.to_literal_reference("Patient", {"identifier": "urn:mrn|42"})
    ```
"""

import logging
from collections.abc import Mapping
from typing import Any

from fhir_client_core.cache import ResponseCache
from fhir_client_core.config import FhirClientConfig
from fhir_client_core.errors import ValidationError
from fhir_client_core.executor import RequestExecutor
from fhir_client_core.params import ParamValue
from fhir_client_core.resolver import ResourceResolver
from fhir_client_core.resources import Bundle, Resource, bundle_type, resource_type
from fhir_client_core.search import SearchEngine
from fhir_client_core.transport import FhirRequest, HttpTransport, HttpxTransport
from fhir_client_core.versions import media_type

logger = logging.getLogger(__name__)

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"


class FhirClient:
    """Client for the FHIR RESTful API.

    Args:
        config: Client configuration.
        transport: HTTP layer to use. Defaults to an ``HttpxTransport`` built
            from ``config``; an injected transport is not closed by ``aclose``.
    """

    def __init__(self, config: FhirClientConfig, transport: HttpTransport | None = None):
        self.config = config
        self._owns_transport = transport is None
        self.transport = transport or HttpxTransport(
            base_url=config.base_url,
            auth=config.auth,
            timeout=config.timeout_ms / 1000,
        )

        # Extra headers go under the computed Accept header
        headers = {key: value for key, value in (config.headers or {}).items() if key.lower() != "accept"}
        headers["Accept"] = media_type(config.fhir_version)

        if config.cache_enabled:
            self.cache = ResponseCache(max_entries=config.cache.max_entries, ttl_ms=config.cache.ttl_ms)
        else:
            self.cache = ResponseCache.disabled()

        self.executor = RequestExecutor(self.transport, config.fhir_version, cache=self.cache, headers=headers)
        self.search_engine = SearchEngine(self.executor, max_fetch_all_results=config.max_fetch_all_results)
        self.resolver = ResourceResolver(self.search_engine, read=self.read)

    async def __aenter__(self) -> "FhirClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    async def read(self, resource_type: str, id: str, *, no_cache: bool = False) -> Resource:
        return await self.executor.execute(FhirRequest("GET", f"{resource_type}/{id}"), no_cache=no_cache)

    async def get_capabilities(self, *, no_cache: bool = False) -> Resource:
        """Fetch the server's CapabilityStatement."""
        return await self.executor.execute(FhirRequest("GET", "metadata"), no_cache=no_cache)

    async def create(self, resource_type: str, resource: Resource) -> Resource:
        _require(resource_type, "create requires a resource type")
        return await self.executor.execute(FhirRequest("POST", resource_type, json=resource))

    async def update(self, resource_type: str, id: str, resource: Resource) -> Resource:
        _require(resource_type, "update requires a resource type")
        _require(id, "update requires a resource id")
        return await self.executor.execute(FhirRequest("PUT", f"{resource_type}/{id}", json=resource))

    async def patch(self, resource_type: str, id: str, operations: list[dict[str, Any]]) -> Resource:
        """Apply a JSON Patch document to a resource."""
        _require(resource_type, "patch requires a resource type")
        _require(id, "patch requires a resource id")
        request = FhirRequest(
            "PATCH",
            f"{resource_type}/{id}",
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
            json=operations,
        )
        return await self.executor.execute(request)

    async def delete(self, resource_type: str, id: str) -> None:
        _require(resource_type, "delete requires a resource type")
        _require(id, "delete requires a resource id")
        await self.executor.execute(FhirRequest("DELETE", f"{resource_type}/{id}"))

    async def search(
        self,
        target_or_query: str,
        params: Mapping[str, ParamValue] | None = None,
        *,
        fetch_all: bool = False,
        max_results: int | None = None,
        as_post: bool = False,
        no_cache: bool = False,
    ) -> Bundle | list[Resource]:
        """Search; see ``SearchEngine.search`` for the options."""
        return await self.search_engine.search(
            target_or_query,
            params,
            fetch_all=fetch_all,
            max_results=max_results,
            as_post=as_post,
            no_cache=no_cache,
        )

    async def process_transaction(self, bundle: Bundle) -> Bundle:
        """Submit a transaction Bundle; the server applies it atomically."""
        _check_bundle(bundle, "transaction")
        return await self.executor.execute(FhirRequest("POST", "", json=bundle))

    async def process_batch(self, bundle: Bundle) -> Bundle:
        """Submit a batch Bundle; each entry is processed independently."""
        _check_bundle(bundle, "batch")
        return await self.executor.execute(FhirRequest("POST", "", json=bundle))

    async def resolve(self, target_or_reference: str, params: Mapping[str, ParamValue] | None = None) -> Resource:
        return await self.resolver.resolve(target_or_reference, params)

    async def to_literal_reference(
        self, target_or_reference: str, params: Mapping[str, ParamValue] | None = None
    ) -> str:
        return await self.resolver.to_literal_reference(target_or_reference, params)

    async def to_id(self, target_or_reference: str, params: Mapping[str, ParamValue] | None = None) -> str:
        return await self.resolver.to_id(target_or_reference, params)


def _require(value: str | None, message: str) -> None:
    if not value:
        raise ValidationError(message)


def _check_bundle(bundle: Bundle, expected: str) -> None:
    if not isinstance(bundle, dict) or resource_type(bundle) != "Bundle":
        actual = resource_type(bundle) if isinstance(bundle, dict) else type(bundle).__name__
        raise ValidationError(f"Expected a Bundle resource, got {actual}", expected="Bundle", actual=actual)

    actual = bundle_type(bundle)
    if actual != expected:
        raise ValidationError(
            f"Expected a Bundle of type '{expected}', got '{actual}'",
            expected=expected,
            actual=actual,
        )
