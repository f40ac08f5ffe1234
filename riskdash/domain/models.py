"""
Domain models for financial and cardiovascular risk assessment.

These models represent the core business concepts and are framework-agnostic.
Wire names used by the prediction services (``sysBP``, ``Loan_Amount``, ``FSI``)
are kept as field aliases so stored documents and request bodies keep the
services' shape, while Python code works with snake_case attributes.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class RiskClassification(str, Enum):
    """Risk bucket for a single assessment (health or finance)."""

    LOW = "Low Risk"
    MEDIUM = "Medium Risk"
    HIGH = "High Risk"
    NO_DATA = "No Data"


class TimeHorizonInterpretation(str, Enum):
    LONG_TERM_SAFE = "Long-term safe zone"
    MODERATE = "Moderate horizon"
    SHORT = "Short horizon"


class OverallRiskInterpretation(str, Enum):
    LOW = "Low Overall Risk (Safe)"
    MEDIUM = "Medium Overall Risk"
    HIGH = "High Overall Risk"


class ChatRole(str, Enum):
    """Who authored a chat log entry. LOADING marks the transient placeholder."""

    USER = "user"
    ASSISTANT = "assistant"
    LOADING = "loading"


class HealthAssessmentInput(BaseModel):
    """Health questionnaire as submitted to the health prediction service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    male: int = Field(ge=0, le=1, description="1 for male, 0 for female")
    age: int = Field(gt=0)
    education: int = Field(default=1, ge=1, le=4)
    current_smoker: int = Field(default=0, ge=0, le=1, alias="currentSmoker")
    cigs_per_day: float = Field(default=0.0, ge=0.0, alias="cigsPerDay")
    bp_meds: int = Field(default=0, ge=0, le=1, alias="BPMeds")
    prevalent_stroke: int = Field(default=0, ge=0, le=1, alias="prevalentStroke")
    prevalent_hyp: int = Field(default=0, ge=0, le=1, alias="prevalentHyp")
    diabetes: int = Field(default=0, ge=0, le=1)
    total_cholesterol: float = Field(default=0.0, ge=0.0, alias="totChol")
    systolic_bp: float = Field(gt=0.0, alias="sysBP")
    diastolic_bp: float = Field(default=0.0, ge=0.0, alias="diaBP")
    bmi: float = Field(gt=0.0, alias="BMI")
    heart_rate: float = Field(default=0.0, ge=0.0, alias="heartRate")
    glucose: float = Field(default=0.0, ge=0.0)

    @property
    def is_male(self) -> bool:
        return self.male == 1

    @property
    def on_bp_medication(self) -> bool:
        return self.bp_meds == 1

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class FinanceAssessmentInput(BaseModel):
    """Financial questionnaire as submitted to the finance prediction service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    age: int = Field(gt=0, alias="Age")
    gender: Literal["Male", "Female"] = Field(alias="Gender")
    education_level: Literal["High School", "Bachelor's", "Master's", "PhD"] = Field(
        alias="Education_Level"
    )
    marital_status: Literal["Single", "Married", "Divorced", "Widowed"] = Field(
        alias="Marital_Status"
    )
    income: float = Field(gt=0.0, alias="Income")
    credit_score: float = Field(ge=0.0, alias="Credit_Score")
    loan_amount: float = Field(ge=0.0, alias="Loan_Amount")
    loan_purpose: Literal["Home", "Auto", "Business", "Personal"] = Field(alias="Loan_Purpose")
    employment_status: Literal["Employed", "Unemployed", "Self-employed"] = Field(
        alias="Employment_Status"
    )
    years_at_current_job: float = Field(ge=0.0, alias="Years_at_Current_Job")
    payment_history: Literal["Poor", "Fair", "Good", "Excellent"] = Field(alias="Payment_History")
    debt_to_income_ratio: float = Field(default=0.0, ge=0.0, alias="Debt_to_Income_Ratio")
    assets_value: float = Field(ge=0.0, alias="Assets_Value")
    number_of_dependents: int = Field(ge=0, alias="Number_of_Dependents")
    previous_defaults: int = Field(ge=0, alias="Previous_Defaults")
    marital_status_change: int = Field(default=0, ge=0, le=2, alias="Marital_Status_Change")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class FinancialStabilityResult(BaseModel):
    """Finance prediction payload. Extra fields returned by the service are kept."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    fsi: float = Field(ge=0.0, le=1.0, alias="FSI", description="Higher means riskier")
    risk: str | None = None
    score: float | None = None


class HealthPredictionResult(BaseModel):
    """Health prediction payload; the service shape is open beyond these fields."""

    model_config = ConfigDict(frozen=True, extra="allow")

    risk: str | None = None
    score: float | None = None


class DashboardData(BaseModel):
    """The persisted risk-assessment session: submitted forms and their results."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    finance_result: FinancialStabilityResult | None = Field(default=None, alias="financeResult")
    health_result: HealthPredictionResult | None = Field(default=None, alias="healthResult")
    finance_form: FinanceAssessmentInput | None = Field(default=None, alias="financeForm")
    health_form: HealthAssessmentInput | None = Field(default=None, alias="healthForm")

    @property
    def has_finance(self) -> bool:
        return self.finance_result is not None and self.finance_form is not None

    @property
    def has_health(self) -> bool:
        return self.health_result is not None and self.health_form is not None

    @property
    def has_risk_data(self) -> bool:
        """Both assessments submitted; required before the assistant can answer."""
        return self.has_finance and self.has_health

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ScoreBundle(BaseModel):
    """Derived scores for one dashboard document. Recomputed, never patched."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    health_score: int = Field(ge=0, le=100, alias="healthScore")
    finance_score: int = Field(ge=0, le=100, alias="financeScore")
    time_horizon_score: int = Field(ge=0, le=100, alias="timeHorizonScore")
    overall_risk_score: int = Field(ge=0, le=100, alias="overallRiskScore")
    health_classification: RiskClassification = Field(alias="healthClassification")
    finance_classification: RiskClassification = Field(alias="financeClassification")
    time_horizon_interpretation: TimeHorizonInterpretation = Field(
        alias="timeHorizonInterpretation"
    )
    overall_risk_interpretation: OverallRiskInterpretation = Field(
        alias="overallRiskInterpretation"
    )

    # A zero score with NO_DATA is a display default, not a computed result
    @property
    def has_health_data(self) -> bool:
        return self.health_classification is not RiskClassification.NO_DATA

    @property
    def has_finance_data(self) -> bool:
        return self.finance_classification is not RiskClassification.NO_DATA


class AnalysisNarrative(BaseModel):
    """One short AI-generated comment per score, each fetched independently."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    health: str
    finance: str
    time_horizon: str = Field(alias="timeHorizon")
    overall: str


class DashboardReport(BaseModel):
    """Scores plus narrative, ready for display."""

    model_config = ConfigDict(frozen=True)

    scores: ScoreBundle
    analysis: AnalysisNarrative
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChatMessage(BaseModel):
    """Single entry of the append-only assistant chat log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: ChatRole = Field(alias="type")
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sources: list[str] = Field(default_factory=list)


class AssistantQuery(BaseModel):
    """Request body for the Q&A assistant: the question plus the risk context."""

    input: str = Field(min_length=1)
    health_risk: str = ""
    health_score: float = 0
    finance_risk: str = ""
    finance_score: float = 0
    time_horizon_risk: str = ""
    time_horizon_score: float = 0


class AssistantAnswer(BaseModel):
    """Validated Q&A assistant reply."""

    answer: str = ""
    sources: list[str] = Field(default_factory=list)
