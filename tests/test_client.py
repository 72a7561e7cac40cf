"""Tests for the FhirClient facade."""

import json

import httpx
import pytest

from fhir_client_core import CacheConfig, FhirClient, FhirClientConfig
from fhir_client_core.auth import BasicAuth
from fhir_client_core.errors import BoundExceededError, NotFoundError, UnsupportedVersionError, ValidationError
from fhir_client_core.testing import RecordingTransport, make_bundle, patients
from fhir_client_core.transport import HttpxTransport

BASE_URL = "http://fhir.test/fhir"
FHIR_JSON_R4 = "application/fhir+json; fhirVersion=4.0"


class TestCrud:
    """Test the CRUD interactions."""

    @pytest.mark.unit
    async def test_read(self, client, transport):
        """Test read makes a GET to Type/id."""
        transport.queue({"resourceType": "Patient", "id": "123"})

        result = await client.read("Patient", "123")

        request = transport.requests[0]
        assert (request.method, request.url) == ("GET", "Patient/123")
        assert request.headers["Accept"] == FHIR_JSON_R4
        assert result == {"resourceType": "Patient", "id": "123"}

    @pytest.mark.unit
    async def test_get_capabilities(self, client, transport):
        """Test get_capabilities reads the metadata endpoint."""
        statement = {"resourceType": "CapabilityStatement", "status": "active", "fhirVersion": "4.0.1"}
        transport.queue(statement)

        assert await client.get_capabilities() == statement
        assert transport.requests[0].url == "metadata"

    @pytest.mark.unit
    async def test_create(self, client, transport):
        """Test create POSTs the resource with the FHIR Content-Type."""
        patient = {"resourceType": "Patient", "name": [{"family": "Doe"}]}
        transport.queue({**patient, "id": "123"})

        result = await client.create("Patient", patient)

        request = transport.requests[0]
        assert (request.method, request.url, request.json) == ("POST", "Patient", patient)
        assert request.headers["Content-Type"] == FHIR_JSON_R4
        assert result["id"] == "123"

    @pytest.mark.unit
    async def test_update(self, client, transport):
        """Test update PUTs the resource to Type/id."""
        patient = {"resourceType": "Patient", "id": "123", "active": True}
        transport.queue(patient)

        await client.update("Patient", "123", patient)

        request = transport.requests[0]
        assert (request.method, request.url, request.json) == ("PUT", "Patient/123", patient)
        assert request.headers["Content-Type"] == FHIR_JSON_R4

    @pytest.mark.unit
    @pytest.mark.parametrize(("resource_type", "id"), [("", "1"), ("Patient", ""), ("Patient", None)])
    async def test_update_requires_type_and_id(self, client, transport, resource_type, id):
        """Test update without a type or id is rejected before sending."""
        with pytest.raises(ValidationError):
            await client.update(resource_type, id, {"resourceType": "Patient"})

        assert transport.call_count == 0

    @pytest.mark.unit
    async def test_patch(self, client, transport):
        """Test patch sends a JSON Patch document."""
        operations = [{"op": "replace", "path": "/active", "value": False}]

        await client.patch("Patient", "123", operations)

        request = transport.requests[0]
        assert (request.method, request.url, request.json) == ("PATCH", "Patient/123", operations)
        assert request.headers["Content-Type"] == "application/json-patch+json"

    @pytest.mark.unit
    async def test_delete(self, client, transport):
        """Test delete sends a DELETE and returns nothing."""
        assert await client.delete("Patient", "123") is None

        request = transport.requests[0]
        assert (request.method, request.url) == ("DELETE", "Patient/123")
        assert request.header("Content-Type") is None


class TestBundles:
    """Test transaction and batch submission."""

    @pytest.mark.unit
    async def test_process_transaction(self, client, transport):
        """Test a transaction Bundle is POSTed to the server root."""
        bundle = {"resourceType": "Bundle", "type": "transaction", "entry": []}
        transport.queue({"resourceType": "Bundle", "type": "transaction-response"})

        result = await client.process_transaction(bundle)

        request = transport.requests[0]
        assert (request.method, request.url, request.json) == ("POST", "", bundle)
        assert result["type"] == "transaction-response"

    @pytest.mark.unit
    async def test_process_batch(self, client, transport):
        """Test a batch Bundle is POSTed to the server root."""
        bundle = {"resourceType": "Bundle", "type": "batch", "entry": []}

        await client.process_batch(bundle)

        assert transport.requests[0].json == bundle

    @pytest.mark.unit
    async def test_transaction_rejects_batch_bundle(self, client, transport):
        """Test the wrong bundle type fails naming expected and actual."""
        with pytest.raises(ValidationError) as exc_info:
            await client.process_transaction({"resourceType": "Bundle", "type": "batch"})

        assert exc_info.value.expected == "transaction"
        assert exc_info.value.actual == "batch"
        assert "transaction" in str(exc_info.value)
        assert "batch" in str(exc_info.value)
        assert transport.call_count == 0

    @pytest.mark.unit
    async def test_batch_rejects_transaction_bundle(self, client, transport):
        """Test process_batch refuses a transaction bundle."""
        with pytest.raises(ValidationError):
            await client.process_batch({"resourceType": "Bundle", "type": "transaction"})

        assert transport.call_count == 0

    @pytest.mark.unit
    @pytest.mark.parametrize("bundle", [{"resourceType": "Patient", "type": "batch"}, {"type": "batch"}, []])
    async def test_rejects_non_bundle(self, client, transport, bundle):
        """Test something that is not a Bundle is rejected."""
        with pytest.raises(ValidationError):
            await client.process_batch(bundle)

        assert transport.call_count == 0


class TestCaching:
    """Test the response cache through the client."""

    @pytest.mark.unit
    async def test_read_twice_hits_network_once(self, cached_client, transport):
        """Test repeated reads are served from the cache; no_cache bypasses it."""
        transport.queue({"resourceType": "Patient", "id": "123"}, {"resourceType": "Patient", "id": "123", "v": 2})

        first = await cached_client.read("Patient", "123")
        second = await cached_client.read("Patient", "123")

        assert transport.call_count == 1
        assert first == second

        third = await cached_client.read("Patient", "123", no_cache=True)

        assert transport.call_count == 2
        assert third["v"] == 2

    @pytest.mark.unit
    async def test_cache_disabled_by_default(self, client, transport):
        """Test without cache configuration every read goes to the network."""
        await client.read("Patient", "1")
        await client.read("Patient", "1")

        assert transport.call_count == 2

    @pytest.mark.unit
    async def test_cache_config_without_enable(self, transport):
        """Test a CacheConfig with enable=False leaves caching off."""
        config = FhirClientConfig(base_url=BASE_URL, fhir_version="R4", cache=CacheConfig(enable=False))
        client = FhirClient(config, transport=transport)

        await client.get_capabilities()
        await client.get_capabilities()

        assert transport.call_count == 2

    @pytest.mark.unit
    async def test_writes_are_never_cached(self, cached_client, transport):
        """Test repeated creates are all sent."""
        await cached_client.create("Patient", {"resourceType": "Patient"})
        await cached_client.create("Patient", {"resourceType": "Patient"})

        assert transport.call_count == 2
        assert len(cached_client.cache) == 0

    @pytest.mark.unit
    async def test_search_results_are_cached(self, cached_client, transport):
        """Test identical searches share a cache entry."""
        transport.queue(make_bundle(patients(0, 1)))

        await cached_client.search("Patient", {"name": "x"})
        await cached_client.search("Patient?name=x")

        assert transport.call_count == 1


class TestSearch:
    """Test search through the client."""

    @pytest.mark.unit
    async def test_search_with_query_and_params(self, client, transport):
        """Test query strings and params are merged onto the GET."""
        transport.queue(make_bundle())

        await client.search("Patient?name=john", {"active": True})

        request = transport.requests[0]
        assert request.url == "Patient"
        assert request.params == [("name", "john"), ("active", "true")]

    @pytest.mark.unit
    async def test_fetch_all_uses_client_bound(self, transport):
        """Test max_fetch_all_results from the config bounds fetch_all."""
        config = FhirClientConfig(base_url=BASE_URL, fhir_version="R4", max_fetch_all_results=4)
        client = FhirClient(config, transport=transport)
        transport.queue(make_bundle(patients(0, 3), next_url="http://fhir.test/fhir?page=2"), make_bundle(patients(3, 3)))

        with pytest.raises(BoundExceededError) as exc_info:
            await client.search("Patient", fetch_all=True)

        assert exc_info.value.bound == 4

    @pytest.mark.unit
    async def test_fetch_all_follows_pages(self, client, transport):
        """Test fetch_all returns resources from every page."""
        transport.queue(make_bundle(patients(0, 1), next_url="http://fhir.test/fhir?page=2"), make_bundle(patients(1, 1)))

        results = await client.search("Patient", {}, fetch_all=True)

        assert results == [{"resourceType": "Patient", "id": "0"}, {"resourceType": "Patient", "id": "1"}]


class TestConstruction:
    """Test configuration handling and lifecycle."""

    @pytest.mark.unit
    def test_unknown_version_rejected_at_construction(self):
        """Test an unsupported version fails when the config is built."""
        with pytest.raises(UnsupportedVersionError):
            FhirClientConfig(base_url=BASE_URL, fhir_version="2.0")

    @pytest.mark.unit
    @pytest.mark.parametrize(("token", "canonical"), [("R3", "3.0"), ("5.0.0", "5.0")])
    async def test_accept_header_uses_version(self, transport, token, canonical):
        """Test the Accept header follows the configured version."""
        client = FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version=token), transport=transport)

        await client.read("Patient", "1")

        assert transport.requests[0].headers["Accept"] == f"application/fhir+json; fhirVersion={canonical}"

    @pytest.mark.unit
    async def test_extra_headers_merged_under_accept(self, transport):
        """Test custom headers are sent but cannot replace Accept."""
        config = FhirClientConfig(
            base_url=BASE_URL,
            fhir_version="R4",
            headers={"X-Request-Source": "tests", "accept": "application/xml"},
        )
        client = FhirClient(config, transport=transport)

        await client.read("Patient", "1")

        assert transport.requests[0].headers == {"X-Request-Source": "tests", "Accept": FHIR_JSON_R4}

    @pytest.mark.unit
    async def test_async_context_manager_closes_own_transport(self):
        """Test the default transport is closed on exit."""
        async with FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version="R4")) as client:
            assert isinstance(client.transport, HttpxTransport)

        assert client.transport._client.is_closed

    @pytest.mark.unit
    async def test_injected_transport_left_open(self):
        """Test an injected transport is the caller's to close."""
        transport = RecordingTransport()

        async with FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version="R4"), transport=transport):
            pass

        assert not transport.closed


class TestOverHttpx:
    """Exercise the client against httpx.MockTransport."""

    @pytest.mark.unit
    async def test_full_request_on_the_wire(self):
        """Test URL, headers, auth and body as httpx sends them."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={**json.loads(request.content), "id": "new"})

        transport = HttpxTransport(
            base_url=BASE_URL,
            auth=BasicAuth("user", "pass"),
            transport=httpx.MockTransport(handler),
        )
        client = FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version="R4"), transport=transport)

        result = await client.create("Patient", {"resourceType": "Patient"})

        request = seen[0]
        assert str(request.url) == "http://fhir.test/fhir/Patient"
        assert request.headers["Accept"] == FHIR_JSON_R4
        assert request.headers["Content-Type"] == FHIR_JSON_R4
        assert request.headers["Authorization"] == "Basic dXNlcjpwYXNz"
        assert result == {"resourceType": "Patient", "id": "new"}
        await transport.aclose()

    @pytest.mark.unit
    async def test_extra_content_type_header_sent_once(self):
        """Test a configured content-type never doubles the wire header."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"resourceType": "Patient", "id": "new"})

        transport = HttpxTransport(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        config = FhirClientConfig(base_url=BASE_URL, fhir_version="R4", headers={"content-type": "application/json"})
        client = FhirClient(config, transport=transport)

        await client.create("Patient", {"resourceType": "Patient"})

        assert seen[0].headers.get_list("content-type") == [FHIR_JSON_R4]
        await transport.aclose()

    @pytest.mark.unit
    async def test_repeated_query_keys_on_the_wire(self):
        """Test list params reach the server as repeated keys."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=make_bundle())

        transport = HttpxTransport(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        client = FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version="R4"), transport=transport)

        await client.search("Observation?code=a", {"code": "b"})

        assert seen[0].url.params.get_list("code") == ["a", "b"]
        await transport.aclose()

    @pytest.mark.unit
    async def test_not_found_raises(self):
        """Test a 404 surfaces as NotFoundError with the OperationOutcome."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                json={
                    "resourceType": "OperationOutcome",
                    "issue": [{"severity": "error", "code": "not-found", "diagnostics": "Patient/999 is not known"}],
                },
            )

        transport = HttpxTransport(base_url=BASE_URL, transport=httpx.MockTransport(handler))
        client = FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version="R4"), transport=transport)

        with pytest.raises(NotFoundError) as exc_info:
            await client.read("Patient", "999")

        assert "Patient/999 is not known" in str(exc_info.value)
        assert exc_info.value.operation_outcome.issues[0].code == "not-found"
        await transport.aclose()
