"""
Risk scoring model.

Pure, deterministic functions that turn prediction outputs into dashboard
scores:

- Health: Framingham-style 10-year cardiovascular probability (p10) from
  sex-specific coefficients (D'Agostino et al., 2008, simplified BMI variant).
- Finance: the Financial Stability Index (FSI) returned by the finance model.
- Time horizon: average of both probabilities.
- Overall: fixed 0.4 / 0.4 / 0.2 blend of the three scores.

Scores are on a 0-100 scale where higher is safer. Rounding is half-up so a
score of x.5 always goes up, independent of Python's round-half-even.
"""

import math
from dataclasses import dataclass

from riskdash.domain.models import (
    HealthAssessmentInput,
    OverallRiskInterpretation,
    RiskClassification,
    TimeHorizonInterpretation,
)
from riskdash.errors import DomainError


@dataclass(frozen=True)
class FraminghamCoefficients:
    """Sex-specific coefficient table for the cardiovascular model."""

    beta0: float
    beta_ln_age: float
    beta_ln_bmi: float
    beta_ln_sbp_treated: float
    beta_ln_sbp_untreated: float
    beta_smoker: float
    beta_diabetes: float
    l_mean: float
    s0: float


MALE_COEFFICIENTS = FraminghamCoefficients(
    beta0=-29.799,
    beta_ln_age=4.884,
    beta_ln_bmi=0.645,
    beta_ln_sbp_treated=2.019,
    beta_ln_sbp_untreated=1.957,
    beta_smoker=0.549,
    beta_diabetes=0.645,
    l_mean=61.18,
    s0=0.88431,
)

FEMALE_COEFFICIENTS = FraminghamCoefficients(
    beta0=-29.067,
    beta_ln_age=4.276,
    beta_ln_bmi=0.302,
    beta_ln_sbp_treated=2.469,
    beta_ln_sbp_untreated=2.323,
    beta_smoker=0.691,
    beta_diabetes=0.874,
    l_mean=26.1931,
    s0=0.95012,
)

# Classification thresholds (lower bound of the next bucket, strict-less comparison)
HEALTH_LOW_RISK_BELOW = 0.05
HEALTH_MEDIUM_RISK_BELOW = 0.15
FINANCE_LOW_RISK_BELOW = 0.3
FINANCE_MEDIUM_RISK_BELOW = 0.7

TIME_HORIZON_SAFE_FROM = 70
TIME_HORIZON_MODERATE_FROM = 40
OVERALL_LOW_RISK_FROM = 80
OVERALL_MEDIUM_RISK_FROM = 50

HEALTH_WEIGHT = 0.4
FINANCE_WEIGHT = 0.4
TIME_HORIZON_WEIGHT = 0.2


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def coefficients_for(health: HealthAssessmentInput) -> FraminghamCoefficients:
    return MALE_COEFFICIENTS if health.is_male else FEMALE_COEFFICIENTS


def compute_cardiovascular_risk_probability(health: HealthAssessmentInput) -> float:
    """
    Ten-year cardiovascular event probability (p10), clamped to [0, 1].

    Raises:
        DomainError: if age, BMI or systolic blood pressure is not positive.
    """
    for name, value in (
        ("age", health.age),
        ("BMI", health.bmi),
        ("sysBP", health.systolic_bp),
    ):
        if value <= 0:
            raise DomainError(f"{name} must be positive for the risk model, got {value}")

    coeff = coefficients_for(health)
    beta_ln_sbp = (
        coeff.beta_ln_sbp_treated if health.on_bp_medication else coeff.beta_ln_sbp_untreated
    )

    linear_predictor = (
        coeff.beta0
        + coeff.beta_ln_age * math.log(health.age)
        + coeff.beta_ln_bmi * math.log(health.bmi)
        + beta_ln_sbp * math.log(health.systolic_bp)
        + coeff.beta_smoker * health.current_smoker
        + coeff.beta_diabetes * health.diabetes
    )

    try:
        p10 = 1 - coeff.s0 ** math.exp(linear_predictor - coeff.l_mean)
    except OverflowError:
        # exp() saturated: survival is effectively zero
        p10 = 1.0

    return _clamp(p10)


def classify_health_risk(p10: float) -> RiskClassification:
    if p10 < HEALTH_LOW_RISK_BELOW:
        return RiskClassification.LOW
    if p10 < HEALTH_MEDIUM_RISK_BELOW:
        return RiskClassification.MEDIUM
    return RiskClassification.HIGH


def classify_finance_risk(fsi: float) -> RiskClassification:
    if fsi < FINANCE_LOW_RISK_BELOW:
        return RiskClassification.LOW
    if fsi < FINANCE_MEDIUM_RISK_BELOW:
        return RiskClassification.MEDIUM
    return RiskClassification.HIGH


def compute_finance_score(fsi: float) -> int:
    """Finance score from the FSI.

    The FSI must already be validated to [0, 1]; out-of-range values are not
    clamped here and produce scores outside 0-100.
    """
    return _round_half_up(100 * (1 - fsi))


def compute_health_score(p10: float) -> int:
    return _round_half_up(100 * (1 - p10))


def compute_time_horizon_score(health_prob: float | None, finance_prob: float | None) -> int:
    """Score from the mean of both risk probabilities.

    A side without an assessment counts as probability 0, which favours the
    score when only one questionnaire was submitted.
    """
    average = ((health_prob or 0.0) + (finance_prob or 0.0)) / 2
    return _round_half_up(100 * (1 - average))


def interpret_time_horizon(score: int) -> TimeHorizonInterpretation:
    if score >= TIME_HORIZON_SAFE_FROM:
        return TimeHorizonInterpretation.LONG_TERM_SAFE
    if score >= TIME_HORIZON_MODERATE_FROM:
        return TimeHorizonInterpretation.MODERATE
    return TimeHorizonInterpretation.SHORT


def compute_overall_score(health_score: int, finance_score: int, time_horizon_score: int) -> int:
    return _round_half_up(
        HEALTH_WEIGHT * health_score
        + FINANCE_WEIGHT * finance_score
        + TIME_HORIZON_WEIGHT * time_horizon_score
    )


def interpret_overall(score: int) -> OverallRiskInterpretation:
    if score >= OVERALL_LOW_RISK_FROM:
        return OverallRiskInterpretation.LOW
    if score >= OVERALL_MEDIUM_RISK_FROM:
        return OverallRiskInterpretation.MEDIUM
    return OverallRiskInterpretation.HIGH
