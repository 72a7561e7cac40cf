"""Authentication for FHIR clients.

- Credential providers (``BasicAuth``, ``BearerTokenAuth``) contributing request headers
- Multi-source credential resolution (value → env → .env → default)

Example:
    ```python
    from fhir_client_core.auth import CredentialResolver

    auth = CredentialResolver().resolve_auth()  # from FHIR_TOKEN / FHIR_USERNAME / FHIR_PASSWORD
    ```
"""

from fhir_client_core.auth.credentials import CredentialResolver
from fhir_client_core.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
)
from fhir_client_core.auth.providers import BasicAuth, BearerTokenAuth, CredentialProvider

__all__ = [
    "BasicAuth",
    "BearerTokenAuth",
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialProvider",
    "CredentialResolver",
]
