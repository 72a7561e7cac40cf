"""Multi-source resolution of FHIR server settings and credentials.

Values are looked up in priority order:

1. Explicitly provided value
2. Environment variable (including anything loaded from a ``.env`` file)
3. Default value

``FhirClientConfig.from_env`` uses this to assemble a client configuration,
and ``resolve_auth`` picks a credential provider from the standard
``FHIR_*`` variables.

Example:
    ```python
    from fhir_client_core.auth import CredentialResolver

    resolver = CredentialResolver()
    token = resolver.resolve(env_var_name="FHIR_TOKEN")
    token = token or resolver.resolve_from_file(env_var_name="FHIR_TOKEN_FILE")
    ```

Credentials are never logged; only the source they came from is.
"""

import logging
import os
from pathlib import Path
from threading import Lock

from dotenv import load_dotenv

from fhir_client_core.auth.exceptions import CredentialFileError, CredentialNotFoundError
from fhir_client_core.auth.providers import BasicAuth, BearerTokenAuth, CredentialProvider

logger = logging.getLogger(__name__)

USERNAME_ENV = "FHIR_USERNAME"
PASSWORD_ENV = "FHIR_PASSWORD"
TOKEN_ENV = "FHIR_TOKEN"
TOKEN_FILE_ENV = "FHIR_TOKEN_FILE"


class CredentialResolver:
    """Resolve settings from explicit values, the environment and ``.env``.

    Args:
        dotenv_path: Path to a ``.env`` file. None lets python-dotenv search
            parent directories.
        load_dotenv: Set to False to skip ``.env`` loading entirely.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self._dotenv_loaded = False
        self._dotenv_lock = Lock()
        self._dotenv_path = dotenv_path

        if load_dotenv:
            self._ensure_dotenv_loaded()

    def _ensure_dotenv_loaded(self) -> None:
        with self._dotenv_lock:
            if self._dotenv_loaded:
                return
            try:
                load_dotenv(dotenv_path=self._dotenv_path)
                logger.debug("Loaded .env file for FHIR client settings")
            except OSError as e:
                logger.warning(f"Failed to load .env file: {e}")
            # Only attempt once
            self._dotenv_loaded = True

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        secret: bool = True,
    ) -> str | None:
        """Resolve one value; the first source that has it wins.

        Args:
            value: Explicit value, ignores every other source when given.
            env_var_name: Environment variable to consult.
            default: Fallback when nothing else is set.
            required: Raise instead of returning None.
            secret: Mask the value in debug logs.

        Raises:
            CredentialNotFoundError: If ``required`` and nothing was found.
        """
        if value is not None:
            result, source = value, "explicit parameter"
        elif env_var_name and env_var_name in os.environ:
            result, source = os.environ[env_var_name], f"environment variable '{env_var_name}'"
        elif default is not None:
            result, source = default, "default value"
        else:
            result, source = None, None

        if result is not None:
            logger.debug(f"Resolved {env_var_name or 'value'} from {source}: {'***' if secret else result}")

        if required and result is None:
            message = "Required setting not found"
            if env_var_name:
                message += f" (checked env var: {env_var_name})"
            raise CredentialNotFoundError(message, env_var_name=env_var_name)

        return result

    def resolve_from_file(
        self,
        *,
        file_path: str | Path | None = None,
        env_var_name: str | None = None,
        required: bool = False,
    ) -> str | None:
        """Read a credential from a file, whitespace-stripped.

        The path may be given directly or through ``env_var_name``, and may
        contain ``~`` and ``$VAR`` references.

        Raises:
            CredentialFileError: If ``required`` and the file can't be read.
        """
        path = str(file_path) if file_path is not None else None
        if path is None and env_var_name:
            path = self.resolve(env_var_name=env_var_name, secret=False)

        if not path:
            if required:
                message = "No credential file path provided"
                if env_var_name:
                    message += f" (env var '{env_var_name}' not set)"
                raise CredentialFileError(message)
            return None

        path_obj = Path(os.path.expanduser(os.path.expandvars(path)))
        try:
            content = path_obj.read_text().strip()
        except OSError as e:
            message = f"Cannot read credential file {path_obj}: {e}"
            if required:
                raise CredentialFileError(message) from e
            logger.warning(message)
            return None

        logger.debug(f"Resolved credential from file: {path_obj} (***)")
        return content

    def resolve_auth(
        self,
        *,
        username: str | None = None,
        password: str | None = None,
        token: str | None = None,
    ) -> CredentialProvider | None:
        """Pick a credential provider from explicit values or ``FHIR_*`` variables.

        A bearer token (``FHIR_TOKEN`` or the file named by
        ``FHIR_TOKEN_FILE``) takes precedence over basic credentials. A
        username without a password is an error.
        """
        token = self.resolve(value=token, env_var_name=TOKEN_ENV)
        if token is None:
            token = self.resolve_from_file(env_var_name=TOKEN_FILE_ENV)
        if token:
            return BearerTokenAuth(token)

        username = self.resolve(value=username, env_var_name=USERNAME_ENV, secret=False)
        if username is None:
            return None
        password = self.resolve(value=password, env_var_name=PASSWORD_ENV, required=True)
        return BasicAuth(username, password)
