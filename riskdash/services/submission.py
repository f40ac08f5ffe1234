"""
Questionnaire validation and submission to the prediction services.

Raw form data uses the services' wire names (``Loan_Amount``, ``sysBP``...).
Validation errors are reported per field so they can be shown inline; a form
with any error is never sent.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from riskdash.adapters.http_clients import RiskServicesClient
from riskdash.adapters.storage import DashboardRepository
from riskdash.domain.models import (
    FinanceAssessmentInput,
    FinancialStabilityResult,
    HealthAssessmentInput,
    HealthPredictionResult,
)
from riskdash.errors import FormValidationError

logger = structlog.get_logger(__name__)

_MARITAL_STATUS_CHANGE = {"Married": 1, "Divorced": 2}


def _field_errors(error: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "form"
        errors.setdefault(field, item["msg"])
    return errors


def _as_number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def derive_finance_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Fill the computed finance fields: debt-to-income ratio and marital status change."""
    values = dict(data)

    loan_amount = _as_number(values.get("Loan_Amount"))
    income = _as_number(values.get("Income"))
    if loan_amount and income:
        values["Debt_to_Income_Ratio"] = loan_amount / income

    marital_status = values.get("Marital_Status")
    values["Marital_Status_Change"] = (
        _MARITAL_STATUS_CHANGE.get(marital_status, 0) if isinstance(marital_status, str) else 0
    )
    return values


def _require_mapping(form: str, data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise FormValidationError(form, {"form": "expected a JSON object"})
    return data


def validate_finance_form(data: Mapping[str, Any]) -> FinanceAssessmentInput:
    values = derive_finance_fields(_require_mapping("finance", data))
    try:
        return FinanceAssessmentInput.model_validate(values)
    except ValidationError as e:
        raise FormValidationError("finance", _field_errors(e)) from e


def validate_health_form(data: Mapping[str, Any]) -> HealthAssessmentInput:
    values = dict(_require_mapping("health", data))
    try:
        return HealthAssessmentInput.model_validate(values)
    except ValidationError as e:
        raise FormValidationError("health", _field_errors(e)) from e


class AssessmentSubmitter:
    """
    Sends validated questionnaires to the prediction services.

    On success the form and its result are merged into the stored dashboard
    document. On any failure the stored document is left as it was.
    """

    def __init__(self, client: RiskServicesClient, repository: DashboardRepository) -> None:
        self.client = client
        self.repository = repository
        self.logger = logger.bind(component="assessment_submitter")

    async def submit_finance(self, data: Mapping[str, Any]) -> FinancialStabilityResult:
        """
        Raises:
            FormValidationError: the form is incomplete or malformed.
            UpstreamError: the finance service failed or answered malformed data.
        """
        form = validate_finance_form(data)
        result = await self.client.predict_finance(form)
        self.repository.update(finance_form=form, finance_result=result)
        self.logger.info("finance_assessment_submitted", fsi=result.fsi)
        return result

    async def submit_health(self, data: Mapping[str, Any]) -> HealthPredictionResult:
        """
        Raises:
            FormValidationError: the form is incomplete or malformed.
            UpstreamError: the health service failed or answered malformed data.
        """
        form = validate_health_form(data)
        result = await self.client.predict_health(form)
        self.repository.update(health_form=form, health_result=result)
        self.logger.info("health_assessment_submitted", risk=result.risk)
        return result
