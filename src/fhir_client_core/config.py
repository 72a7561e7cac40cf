"""Client configuration.

Example:
    ```python
    from fhir_client_core import CacheConfig, FhirClientConfig

    config = FhirClientConfig(
        base_url="https://hapi.example.org/fhir",
        fhir_version="R4",
        cache=CacheConfig(enable=True, max_entries=50, ttl_ms=30_000),
    )

    # or from FHIR_* environment variables / .env
    config = FhirClientConfig.from_env()
    ```
"""

import logging
from dataclasses import dataclass

from fhir_client_core.auth import CredentialProvider, CredentialResolver
from fhir_client_core.errors import ConfigurationError
from fhir_client_core.versions import normalize_fhir_version

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_CACHE_MAX_ENTRIES = 100
DEFAULT_CACHE_TTL_MS = 300_000
DEFAULT_MAX_FETCH_ALL_RESULTS = 10_000

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])
_FALSE_VALUES = frozenset(["0", "false", "no", "off", ""])


@dataclass
class CacheConfig:
    """Response cache settings; the cache is off unless ``enable`` is True."""

    enable: bool = False
    max_entries: int = DEFAULT_CACHE_MAX_ENTRIES
    ttl_ms: int = DEFAULT_CACHE_TTL_MS

    def __post_init__(self) -> None:
        if self.max_entries < 1:
            raise ConfigurationError(f"Cache max_entries must be at least 1, got {self.max_entries}")


@dataclass
class FhirClientConfig:
    """Everything a FhirClient is built from.

    Attributes:
        base_url: FHIR server base address.
        fhir_version: Version token, e.g. ``"R4"`` or ``"4.0.1"``.
        auth: Optional credential provider.
        headers: Extra headers sent with every request. The computed
            ``Accept`` header takes precedence over an entry here.
        timeout_ms: Per-request timeout.
        cache: Response cache settings; None disables caching.
        max_fetch_all_results: Default bound for fetch-all searches.
    """

    base_url: str
    fhir_version: str
    auth: CredentialProvider | None = None
    headers: dict[str, str] | None = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    cache: CacheConfig | None = None
    max_fetch_all_results: int = DEFAULT_MAX_FETCH_ALL_RESULTS

    def __post_init__(self) -> None:
        # Fail at construction rather than on the first request
        normalize_fhir_version(self.fhir_version)
        if not self.base_url:
            raise ConfigurationError("base_url must not be empty")

    @property
    def cache_enabled(self) -> bool:
        return self.cache is not None and self.cache.enable

    @classmethod
    def from_env(
        cls,
        *,
        base_url: str | None = None,
        fhir_version: str | None = None,
        dotenv_path: str | None = None,
        load_dotenv: bool = True,
    ) -> "FhirClientConfig":
        """Build a configuration from ``FHIR_*`` environment variables.

        Explicit arguments take priority over the environment.

        Raises:
            CredentialNotFoundError: If ``FHIR_BASE_URL`` is missing, or a
                username is set without a password.
            ConfigurationError: If a numeric or boolean variable is malformed.
        """
        resolver = CredentialResolver(dotenv_path=dotenv_path, load_dotenv=load_dotenv)

        def setting(name: str, value: str | None = None, default: str | None = None) -> str | None:
            return resolver.resolve(value=value, env_var_name=name, default=default, secret=False)

        cache = None
        if _parse_bool("FHIR_CACHE_ENABLE", setting("FHIR_CACHE_ENABLE", default="false")):
            cache = CacheConfig(
                enable=True,
                max_entries=_parse_int("FHIR_CACHE_MAX", setting("FHIR_CACHE_MAX"), DEFAULT_CACHE_MAX_ENTRIES),
                ttl_ms=_parse_int("FHIR_CACHE_TTL_MS", setting("FHIR_CACHE_TTL_MS"), DEFAULT_CACHE_TTL_MS),
            )

        config = cls(
            base_url=resolver.resolve(value=base_url, env_var_name="FHIR_BASE_URL", required=True, secret=False),
            fhir_version=setting("FHIR_VERSION", fhir_version, default="R4"),
            auth=resolver.resolve_auth(),
            timeout_ms=_parse_int("FHIR_TIMEOUT_MS", setting("FHIR_TIMEOUT_MS"), DEFAULT_TIMEOUT_MS),
            cache=cache,
            max_fetch_all_results=_parse_int(
                "FHIR_MAX_FETCH_ALL_RESULTS",
                setting("FHIR_MAX_FETCH_ALL_RESULTS"),
                DEFAULT_MAX_FETCH_ALL_RESULTS,
            ),
        )
        logger.debug(f"Loaded FHIR client configuration for {config.base_url} (FHIR {config.fhir_version})")
        return config


def _parse_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _parse_bool(name: str, raw: str | None) -> bool:
    normalized = (raw or "").strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")
