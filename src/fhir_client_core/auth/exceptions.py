"""Exceptions raised while resolving client credentials.

Example:
    ```python
    from fhir_client_core.auth.exceptions import CredentialNotFoundError

    if not password:
        raise CredentialNotFoundError("FHIR password not set", env_var_name="FHIR_PASSWORD")
    ```
"""

from fhir_client_core.errors import ConfigurationError


class CredentialError(ConfigurationError):
    """Base exception for credential resolution errors."""

    pass


class CredentialNotFoundError(CredentialError):
    """A required credential was not found in any source.

    Attributes:
        env_var_name: The environment variable that was checked (if any).
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """A credential file could not be read."""

    pass
