"""FHIR version token normalization.

Accepted tokens are the short release codes (``R3``, ``R4``, ``R5``), the
dotted major.minor versions, and the full patch-level releases. Matching is
exact and case-sensitive.

Example:
    ```python
    from fhir_client_core.versions import normalize_fhir_version, media_type

    normalize_fhir_version("4.0.1")  # "4.0"
    media_type("R4")  # "application/fhir+json; fhirVersion=4.0"
    ```
"""

from fhir_client_core.errors import UnsupportedVersionError

FHIR_VERSIONS: dict[str, str] = {
    "3.0.1": "3.0",
    "3.0": "3.0",
    "R3": "3.0",
    "4.0.1": "4.0",
    "4.0": "4.0",
    "R4": "4.0",
    "5.0.0": "5.0",
    "5.0": "5.0",
    "R5": "5.0",
}


def normalize_fhir_version(version: str) -> str:
    """Map a version token to its canonical two-part form.

    Raises:
        UnsupportedVersionError: If the token is not a known spelling.
    """
    try:
        return FHIR_VERSIONS[version]
    except (KeyError, TypeError):
        raise UnsupportedVersionError(version) from None


def media_type(version: str) -> str:
    """Build the FHIR JSON media type used for Accept and Content-Type headers."""
    return f"application/fhir+json; fhirVersion={normalize_fhir_version(version)}"
