"""Transport-neutral request description and the transport protocol."""

from dataclasses import dataclass, field
from typing import Any, Protocol

MUTATING_METHODS: frozenset[str] = frozenset(["POST", "PUT", "PATCH"])


@dataclass(frozen=True)
class FhirRequest:
    """One outbound FHIR HTTP request.

    ``url`` is relative to the server base, or absolute (pagination links).
    ``params`` are already flattened to wire pairs. At most one of ``json``
    and ``content`` carries the body.
    """

    method: str
    url: str
    params: list[tuple[str, str]] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    content: str | bytes | None = None

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def is_mutating(self) -> bool:
        return self.method.upper() in MUTATING_METHODS


def merge_headers(base: dict[str, str] | None, override: dict[str, str] | None) -> dict[str, str]:
    """Merge two header dicts case-insensitively; ``override`` wins."""
    override = override or {}
    overridden = {key.lower() for key in override}
    merged = {key: value for key, value in (base or {}).items() if key.lower() not in overridden}
    merged.update(override)
    return merged


class HttpTransport(Protocol):
    """What the request executor needs from an HTTP layer.

    ``send`` performs exactly one HTTP exchange and returns the decoded JSON
    body (None for an empty body). Failures are raised as
    ``fhir_client_core.errors.TransportError`` subclasses; implementations
    must not retry on their own account.
    """

    async def send(self, request: FhirRequest) -> Any: ...

    async def aclose(self) -> None: ...
