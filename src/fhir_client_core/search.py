"""FHIR search: request building and bounded fetch-all pagination.

Example:
    ```python
    engine = SearchEngine(executor, max_fetch_all_results=5_000)

    bundle = await engine.search("Patient?name=john", {"active": True})
    patients = await engine.search("Observation", {"code": ["1234-5", "6789-0"]}, fetch_all=True)
    ```
"""

import logging
from collections.abc import Mapping
from urllib.parse import urlencode

from fhir_client_core.config import DEFAULT_MAX_FETCH_ALL_RESULTS
from fhir_client_core.errors import BoundExceededError
from fhir_client_core.executor import RequestExecutor
from fhir_client_core.params import ParamValue, SearchParams, merge_search_params, to_pairs
from fhir_client_core.resources import Bundle, Resource, entry_resources, next_link
from fhir_client_core.transport.base import FhirRequest

logger = logging.getLogger(__name__)

SEARCH_SUFFIX = "_search"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def split_query(target_or_query: str, params: Mapping[str, ParamValue] | None = None) -> tuple[str, SearchParams]:
    """Split ``"Type?query"`` on the first ``?`` and merge the query with ``params``."""
    path, sep, query = target_or_query.partition("?")
    if sep:
        return path, merge_search_params(query, params)
    return path, dict(params or {})


def search_path(path: str) -> str:
    """Return the POST search endpoint for ``path`` (``Type/_search``)."""
    stripped = path.rstrip("/")
    if stripped == SEARCH_SUFFIX or stripped.endswith(f"/{SEARCH_SUFFIX}"):
        return stripped
    return f"{stripped}/{SEARCH_SUFFIX}" if stripped else SEARCH_SUFFIX


class PaginationWalker:
    """Follow a searchset's ``next`` links and collect every resource.

    Pages are fetched strictly one after another. The walk fails with
    ``BoundExceededError`` as soon as the collected count passes the bound,
    without requesting another page. A transport error on any page
    propagates to the caller; partial results are never returned.
    """

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def walk(self, first_page: Bundle, bound: int, no_cache: bool = False) -> list[Resource]:
        results: list[Resource] = []
        page = first_page
        pages = 1

        while True:
            results.extend(entry_resources(page))
            if len(results) > bound:
                raise BoundExceededError(bound=bound, count=len(results))

            url = next_link(page)
            if not url:
                break

            logger.debug(f"Fetching search page {pages + 1} ({len(results)} resources so far)")
            page = await self.executor.execute(FhirRequest("GET", url), no_cache=no_cache) or {}
            pages += 1

        logger.debug(f"Search complete: {len(results)} resources across {pages} page(s)")
        return results


class SearchEngine:
    """Build and run FHIR search interactions."""

    def __init__(self, executor: RequestExecutor, max_fetch_all_results: int | None = None):
        self.executor = executor
        self.max_fetch_all_results = max_fetch_all_results
        self.walker = PaginationWalker(executor)

    def build_request(
        self,
        target_or_query: str,
        params: Mapping[str, ParamValue] | None = None,
        as_post: bool = False,
    ) -> FhirRequest:
        """Build the GET (query pairs) or POST (form body) search request."""
        path, merged = split_query(target_or_query, params)

        if as_post:
            return FhirRequest(
                "POST",
                search_path(path),
                headers={"Content-Type": FORM_CONTENT_TYPE},
                content=urlencode(to_pairs(merged)),
            )
        return FhirRequest("GET", path, params=to_pairs(merged))

    def effective_bound(self, max_results: int | None = None) -> int:
        if max_results is not None:
            return max_results
        if self.max_fetch_all_results is not None:
            return self.max_fetch_all_results
        return DEFAULT_MAX_FETCH_ALL_RESULTS

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
        """Run a search.

        Args:
            target_or_query: Resource type or path, optionally with a ``?query``.
            params: Extra parameters; list values are sent as repeated keys.
            fetch_all: Follow ``next`` links and return every resource.
            max_results: Bound for ``fetch_all`` (defaults to the client setting).
            as_post: Submit as a form-encoded POST to ``<type>/_search``.
            no_cache: Skip the response cache for every page.

        Returns:
            The searchset Bundle, or the list of resources when ``fetch_all``.

        Raises:
            BoundExceededError: If ``fetch_all`` collects more than the bound.
        """
        request = self.build_request(target_or_query, params, as_post=as_post)
        bundle = await self.executor.execute(request, no_cache=no_cache)

        if not fetch_all:
            return bundle

        return await self.walker.walk(bundle or {}, self.effective_bound(max_results), no_cache=no_cache)
