"""FHIR OperationOutcome model used to describe server-side failures."""

from dataclasses import dataclass, field
from typing import Any

import httpx


@dataclass
class OutcomeIssue:
    """One ``issue`` element of an OperationOutcome."""

    severity: str | None = None  # fatal | error | warning | information
    code: str | None = None  # e.g. "not-found", "invalid", "conflict"
    diagnostics: str | None = None
    details: str | None = None  # CodeableConcept.text
    expression: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OutcomeIssue":
        details = data.get("details")
        return cls(
            severity=data.get("severity"),
            code=data.get("code"),
            diagnostics=data.get("diagnostics"),
            details=details.get("text") if isinstance(details, dict) else None,
            expression=list(data.get("expression") or []),
        )

    def describe(self) -> str:
        text = self.diagnostics or self.details or "no details"
        prefix = "/".join(part for part in (self.severity, self.code) if part)
        line = f"[{prefix}] {text}" if prefix else text
        if self.expression:
            line += f" (at {', '.join(self.expression)})"
        return line


@dataclass
class OperationOutcome:
    """FHIR OperationOutcome resource.

    See: https://hl7.org/fhir/operationoutcome.html
    """

    issues: list[OutcomeIssue] = field(default_factory=list)
    id: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "OperationOutcome | None":
        """Build an OperationOutcome from decoded JSON, or None if it isn't one."""
        if not isinstance(data, dict) or data.get("resourceType") != "OperationOutcome":
            return None

        issues = [OutcomeIssue.from_dict(issue) for issue in data.get("issue") or [] if isinstance(issue, dict)]
        return cls(issues=issues, id=data.get("id"))

    @classmethod
    def from_response(cls, response: httpx.Response) -> "OperationOutcome | None":
        """Parse an OperationOutcome from an HTTP response body.

        Args:
            response: HTTP response object

        Returns:
            OperationOutcome or None if the body is not JSON or not an OperationOutcome
        """
        try:
            data = response.json()
        except (ValueError, TypeError, AttributeError):
            # JSON decode errors, empty bodies, or missing .json() method
            return None

        return cls.from_dict(data)

    def to_exception_message(self) -> str:
        """Convert the outcome's issues to an exception message."""
        if not self.issues:
            return "Unknown FHIR server error"
        return "\n".join(issue.describe() for issue in self.issues)
