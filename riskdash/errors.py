"""
Error taxonomy for the risk dashboard.

Form problems block a submission, upstream problems are shown to the user and
never retried, and corrupt persisted documents are discarded by the
repositories rather than raised to callers.
"""

from collections.abc import Mapping


class RiskDashError(Exception):
    """Base class for all errors raised by riskdash."""


class DomainError(RiskDashError, ValueError):
    """Input outside the mathematical domain of the risk model (e.g. ln of <= 0)."""


class FormValidationError(RiskDashError):
    """One or more questionnaire fields are missing or malformed.

    ``field_errors`` maps the form's field name to a message, so a caller can
    render each error next to its field.
    """

    def __init__(self, form: str, field_errors: Mapping[str, str]) -> None:
        self.form = form
        self.field_errors = dict(field_errors)
        fields = ", ".join(sorted(self.field_errors)) or "unknown"
        super().__init__(f"Invalid {form} form: {fields}")


class UpstreamError(RiskDashError):
    """An external service was unreachable, answered non-2xx or sent a malformed payload."""

    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PersistenceCorruption(RiskDashError):
    """A stored document could not be parsed or did not match its schema."""

    def __init__(self, slot: str, reason: str) -> None:
        self.slot = slot
        self.reason = reason
        super().__init__(f"Stored document '{slot}' is corrupt: {reason}")
