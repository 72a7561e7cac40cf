"""Pluggable credential providers.

A provider contributes authentication headers to every outbound request.
The transport asks for them per request, so a provider may rotate tokens
between calls.

Example:
    ```python
    from fhir_client_core.auth import BasicAuth, BearerTokenAuth

    config = FhirClientConfig(base_url=url, fhir_version="R4", auth=BasicAuth("user", "secret"))
    config = FhirClientConfig(base_url=url, fhir_version="R4", auth=BearerTokenAuth(token))
    ```
"""

import base64
from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialProvider(Protocol):
    """Anything that can produce authentication headers."""

    def auth_headers(self) -> dict[str, str]: ...


class BasicAuth:
    """HTTP Basic authentication."""

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def auth_headers(self) -> dict[str, str]:
        token = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        return {"Authorization": f"Basic {token}"}

    def __repr__(self) -> str:
        return f"BasicAuth(username={self.username!r}, password='***')"


class BearerTokenAuth:
    """OAuth2 / SMART bearer token authentication."""

    def __init__(self, token: str):
        self.token = token

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        return "BearerTokenAuth(token='***')"
