"""Search parameter merging and wire encoding.

A search may arrive as ``"Patient?name=john"`` plus an explicit parameter
mapping. ``merge_search_params`` folds both into one ordered multi-value
mapping; ``to_pairs`` flattens that mapping into the ``(key, value)`` pairs
sent on the wire, repeating the key for every value.
"""

from collections.abc import Mapping
from urllib.parse import parse_qsl

Scalar = str | int | float | bool
ParamValue = Scalar | list[Scalar] | None
SearchParams = dict[str, ParamValue]


def _as_list(value: ParamValue) -> list[Scalar]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def merge_search_params(query: str, params: Mapping[str, ParamValue] | None = None) -> SearchParams:
    """Merge a raw query string with explicit search parameters.

    Values from ``query`` always precede values from ``params`` for the same
    key. A key that ends up with more than one value is a list; a key seen
    exactly once stays a scalar unless it was given as a list. Nothing is
    deduplicated and neither input is mutated.

    Args:
        query: URL-encoded query string, without the leading ``?``.
        params: Explicit parameters, applied in the caller's order.

    Returns:
        New ordered parameter mapping.

    Example:
        ```python
        merge_search_params("name=john&name=jane", {"name": "joe", "active": True})
        # {"name": ["john", "jane", "joe"], "active": True}
        ```
    """
    merged: SearchParams = {}

    for key, value in parse_qsl(query, keep_blank_values=True):
        if key in merged:
            merged[key] = [*_as_list(merged[key]), value]
        else:
            merged[key] = value

    for key, value in (params or {}).items():
        if key in merged:
            merged[key] = [*_as_list(merged[key]), *_as_list(value)]
        elif isinstance(value, (list, tuple)):
            merged[key] = list(value)
        else:
            merged[key] = value

    return merged


def format_value(value: Scalar) -> str:
    """Render a scalar the way FHIR search expects (booleans lower-case)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_pairs(params: Mapping[str, ParamValue] | None) -> list[tuple[str, str]]:
    """Flatten parameters into wire pairs, repeating keys for list values.

    List values are never comma-joined or bracket-suffixed:
    ``{"_id": ["a", "b"]}`` becomes ``[("_id", "a"), ("_id", "b")]``.
    None values, alone or inside a list, are left out.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        for item in _as_list(value):
            if item is not None:
                pairs.append((key, format_value(item)))
    return pairs
