"""Accessors for the few resource and Bundle fields the client inspects.

Resources are plain JSON mappings. Nothing here validates a schema; these
helpers only read ``resourceType``, ``id``, the Bundle ``type``, entry
``search.mode`` and link ``relation``/``url``.
"""

from collections.abc import Iterator
from typing import Any

Resource = dict[str, Any]
Bundle = dict[str, Any]
BundleEntry = dict[str, Any]

SEARCH_MODE_OUTCOME = "outcome"


def resource_type(resource: Resource) -> str | None:
    return resource.get("resourceType") or None


def resource_id(resource: Resource) -> str | None:
    return resource.get("id") or None


def bundle_type(bundle: Bundle) -> str | None:
    return bundle.get("type") or None


def entries(bundle: Bundle) -> list[BundleEntry]:
    return bundle.get("entry") or []


def search_mode(entry: BundleEntry) -> str | None:
    search = entry.get("search")
    if isinstance(search, dict):
        return search.get("mode")
    return None


def entry_resources(bundle: Bundle) -> Iterator[Resource]:
    """Yield entry resources in order, skipping entries without one."""
    for entry in entries(bundle):
        resource = entry.get("resource")
        if resource is not None:
            yield resource


def link_url(bundle: Bundle, relation: str) -> str | None:
    """Return the url of the first link with ``relation``, or None.

    An empty url is reported as None.
    """
    for link in bundle.get("link") or []:
        if link.get("relation") == relation:
            return link.get("url") or None
    return None


def next_link(bundle: Bundle) -> str | None:
    return link_url(bundle, "next")
