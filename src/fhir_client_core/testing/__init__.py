"""Testing utilities for code built on fhir-client-core.

``RecordingTransport`` stands in for the HTTP layer: it records every
request and answers from a queue of canned bodies (or exceptions).
``make_bundle`` builds searchset Bundles for pagination scenarios.

Example:
    ```python
    from fhir_client_core import FhirClient, FhirClientConfig
    from fhir_client_core.testing import RecordingTransport, make_bundle

    transport = RecordingTransport([make_bundle([{"resourceType": "Patient", "id": "1"}])])
    client = FhirClient(FhirClientConfig(base_url="http://fhir.test", fhir_version="R4"), transport=transport)

    await client.search("Patient")
    assert transport.requests[0].url == "Patient"
    ```
"""

from collections import deque
from collections.abc import Iterable
from typing import Any

from fhir_client_core.transport.base import FhirRequest


class RecordingTransport:
    """HttpTransport fake that replays queued responses.

    Queued items that are exceptions are raised instead of returned. When
    the queue is empty, ``default`` is returned.
    """

    def __init__(self, responses: Iterable[Any] = (), default: Any = None):
        self.responses: deque[Any] = deque(responses)
        self.default = default
        self.requests: list[FhirRequest] = []
        self.closed = False

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def send(self, request: FhirRequest) -> Any:
        self.requests.append(request)
        response = self.responses.popleft() if self.responses else self.default
        if isinstance(response, BaseException):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


def make_bundle(
    resources: Iterable[dict[str, Any]] = (),
    next_url: str | None = None,
    bundle_type: str = "searchset",
    mode: str | None = None,
) -> dict[str, Any]:
    """Build a Bundle with one entry per resource and an optional ``next`` link."""
    entries = []
    for resource in resources:
        entry: dict[str, Any] = {"resource": resource}
        if mode is not None:
            entry["search"] = {"mode": mode}
        entries.append(entry)

    bundle: dict[str, Any] = {"resourceType": "Bundle", "type": bundle_type, "entry": entries}
    if next_url is not None:
        bundle["link"] = [{"relation": "next", "url": next_url}]
    return bundle


def patients(start: int, count: int) -> list[dict[str, Any]]:
    """``count`` minimal Patient resources with ids ``start`` .. ``start + count - 1``."""
    return [{"resourceType": "Patient", "id": str(i)} for i in range(start, start + count)]


__all__ = ["RecordingTransport", "make_bundle", "patients"]
