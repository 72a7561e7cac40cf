"""Resolve a reference or search expression to exactly one resource.

``"Patient/123"`` (with no extra parameters) is read directly; anything else
is run as a search and must match exactly one resource. The distinction is
purely syntactic: a target with one slash and no ``?`` is always treated as
a literal reference.
"""

import logging
import re
from collections.abc import Awaitable, Callable, Mapping

from fhir_client_core.errors import MalformedResourceError, MultipleMatchesError, NoMatchError
from fhir_client_core.params import ParamValue
from fhir_client_core.resources import (
    SEARCH_MODE_OUTCOME,
    Resource,
    entries,
    resource_id,
    resource_type,
    search_mode,
)
from fhir_client_core.search import SearchEngine

logger = logging.getLogger(__name__)

LITERAL_REFERENCE = re.compile(r"^[^/?]+/[^/?]+$")


def is_literal_reference(target: str) -> bool:
    return LITERAL_REFERENCE.match(target) is not None


class ResourceResolver:
    """Resolve references on top of a SearchEngine.

    Args:
        search_engine: Engine used for search expressions.
        read: Coroutine function ``read(type, id)`` used for literal references.
    """

    def __init__(self, search_engine: SearchEngine, read: Callable[[str, str], Awaitable[Resource]]):
        self.search_engine = search_engine
        self._read = read

    async def resolve(self, target_or_reference: str, params: Mapping[str, ParamValue] | None = None) -> Resource:
        """Return the single resource the reference or search identifies.

        Raises:
            NoMatchError: The search matched nothing.
            MultipleMatchesError: The search matched more than one resource.
            MalformedResourceError: The match has neither a type nor an id.
        """
        if not params and is_literal_reference(target_or_reference):
            type_, id_ = target_or_reference.split("/")
            return await self._read(type_, id_)

        bundle = await self.search_engine.search(target_or_reference, params) or {}
        matches = [
            entry["resource"]
            for entry in entries(bundle)
            if entry.get("resource") is not None and search_mode(entry) != SEARCH_MODE_OUTCOME
        ]

        if not matches:
            raise NoMatchError(f"No resource matches {target_or_reference}", reference=target_or_reference)
        if len(matches) > 1:
            raise MultipleMatchesError(
                f"{len(matches)} resources match {target_or_reference}, expected exactly one",
                count=len(matches),
                reference=target_or_reference,
            )

        resource = matches[0]
        if resource_type(resource) is None and resource_id(resource) is None:
            raise MalformedResourceError(
                f"Resource matching {target_or_reference} has neither resourceType nor id",
                reference=target_or_reference,
            )
        logger.debug(f"Resolved {target_or_reference} to {resource_type(resource)}/{resource_id(resource)}")
        return resource

    async def to_literal_reference(self, target_or_reference: str, params: Mapping[str, ParamValue] | None = None) -> str:
        """Resolve and return ``"Type/id"``."""
        resource = await self.resolve(target_or_reference, params)
        type_, id_ = resource_type(resource), resource_id(resource)
        if type_ is None or id_ is None:
            raise MalformedResourceError(
                f"Resource matching {target_or_reference} needs both resourceType and id for a reference",
                reference=target_or_reference,
            )
        return f"{type_}/{id_}"

    async def to_id(self, target_or_reference: str, params: Mapping[str, ParamValue] | None = None) -> str:
        """Resolve and return the resource id."""
        resource = await self.resolve(target_or_reference, params)
        id_ = resource_id(resource)
        if id_ is None:
            raise MalformedResourceError(
                f"Resource matching {target_or_reference} has no id",
                reference=target_or_reference,
            )
        return id_
