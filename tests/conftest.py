"""Pytest configuration and shared fixtures for fhir-client-core tests."""

import pytest

from fhir_client_core import CacheConfig, FhirClient, FhirClientConfig
from fhir_client_core.testing import RecordingTransport

BASE_URL = "http://fhir.test/fhir"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Auto-cleanup: Clear FHIR and test environment variables before each test.

    This prevents a developer's own FHIR_* settings leaking into config tests.
    """
    import os

    test_prefixes = ("TEST_", "FHIR_")

    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in test_prefixes):
            monkeypatch.delenv(key, raising=False)

    yield


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def client(transport):
    return FhirClient(FhirClientConfig(base_url=BASE_URL, fhir_version="R4"), transport=transport)


@pytest.fixture
def cached_client(transport):
    config = FhirClientConfig(
        base_url=BASE_URL,
        fhir_version="R4",
        cache=CacheConfig(enable=True, max_entries=50, ttl_ms=30_000),
    )
    return FhirClient(config, transport=transport)
