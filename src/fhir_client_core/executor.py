"""Single-request execution with FHIR header defaults and response caching."""

import logging
from dataclasses import replace
from typing import Any

from fhir_client_core.cache import MISSING, ResponseCache, is_cacheable, make_cache_key
from fhir_client_core.transport.base import FhirRequest, HttpTransport, merge_headers
from fhir_client_core.versions import media_type

logger = logging.getLogger(__name__)


class RequestExecutor:
    """Issue one request through the transport, consulting the cache for reads.

    Args:
        transport: HTTP layer the request is sent through.
        fhir_version: Version token used for the Content-Type of mutating
            requests.
        cache: Response cache; None behaves like a disabled cache.
        headers: Session headers merged under each request's own headers.
    """

    def __init__(
        self,
        transport: HttpTransport,
        fhir_version: str,
        cache: ResponseCache | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.transport = transport
        self.fhir_version = fhir_version
        self.cache = cache if cache is not None else ResponseCache.disabled()
        self.headers = dict(headers or {})

    def prepare(self, request: FhirRequest) -> FhirRequest:
        """Apply session headers and the default Content-Type."""
        headers = merge_headers(self.headers, request.headers)
        if request.is_mutating and request.header("Content-Type") is None:
            # Session headers sit under the computed Content-Type, whatever their case
            headers = merge_headers(headers, {"Content-Type": media_type(self.fhir_version)})
        return replace(request, headers=headers)

    async def execute(self, request: FhirRequest, no_cache: bool = False) -> Any:
        """Send ``request`` and return the decoded response body.

        GET requests are served from and stored into the cache unless
        ``no_cache`` is set. Transport errors propagate unchanged and leave
        the cache untouched.
        """
        request = self.prepare(request)
        use_cache = self.cache.enabled and is_cacheable(request.method) and not no_cache

        key = None
        if use_cache:
            key = make_cache_key(request)
            cached = self.cache.get(key)
            if cached is not MISSING:
                logger.debug(f"Cache hit for {request.method} {request.url}")
                return cached

        body = await self.transport.send(request)

        if use_cache:
            self.cache.set(key, body)
            logger.debug(f"Cached response for {request.method} {request.url}")

        return body
