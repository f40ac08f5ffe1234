"""Shared fixtures: realistic questionnaires and in-memory repositories."""

from __future__ import annotations

from typing import Any

import pytest

from riskdash.adapters.storage import ChatHistoryRepository, DashboardRepository, InMemoryStore
from riskdash.domain.models import (
    DashboardData,
    FinanceAssessmentInput,
    FinancialStabilityResult,
    HealthAssessmentInput,
    HealthPredictionResult,
)


@pytest.fixture
def finance_form_data() -> dict[str, Any]:
    return {
        "Age": 35,
        "Gender": "Female",
        "Education_Level": "Master's",
        "Marital_Status": "Married",
        "Income": 85000,
        "Credit_Score": 720,
        "Loan_Amount": 17000,
        "Loan_Purpose": "Home",
        "Employment_Status": "Employed",
        "Years_at_Current_Job": 6,
        "Payment_History": "Good",
        "Assets_Value": 150000,
        "Number_of_Dependents": 1,
        "Previous_Defaults": 0,
    }


@pytest.fixture
def health_form_data() -> dict[str, Any]:
    return {
        "male": 1,
        "age": 50,
        "education": 2,
        "currentSmoker": 0,
        "cigsPerDay": 0,
        "BPMeds": 0,
        "prevalentStroke": 0,
        "prevalentHyp": 0,
        "diabetes": 0,
        "totChol": 210,
        "sysBP": 130,
        "diaBP": 85,
        "BMI": 25,
        "heartRate": 72,
        "glucose": 90,
    }


@pytest.fixture
def finance_form(finance_form_data: dict[str, Any]) -> FinanceAssessmentInput:
    return FinanceAssessmentInput.model_validate(finance_form_data)


@pytest.fixture
def health_form(health_form_data: dict[str, Any]) -> HealthAssessmentInput:
    return HealthAssessmentInput.model_validate(health_form_data)


@pytest.fixture
def finance_result() -> FinancialStabilityResult:
    return FinancialStabilityResult.model_validate({"FSI": 0.25, "risk": "Low", "model": "xgb"})


@pytest.fixture
def health_result() -> HealthPredictionResult:
    return HealthPredictionResult.model_validate({"risk": "Low", "score": 0.08})


@pytest.fixture
def full_dashboard(
    finance_result: FinancialStabilityResult,
    health_result: HealthPredictionResult,
    finance_form: FinanceAssessmentInput,
    health_form: HealthAssessmentInput,
) -> DashboardData:
    return DashboardData(
        finance_result=finance_result,
        health_result=health_result,
        finance_form=finance_form,
        health_form=health_form,
    )


@pytest.fixture
def dashboard_repo() -> DashboardRepository:
    return DashboardRepository(InMemoryStore("dashboardData"))


@pytest.fixture
def history_repo() -> ChatHistoryRepository:
    return ChatHistoryRepository(InMemoryStore("chatHistory"))
