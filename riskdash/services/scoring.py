"""
Score orchestration: from stored assessment results to a displayable report.

Pipeline:
1. Assemble the score bundle from whichever assessments are present
2. Ask the text generator for one short narrative per score, concurrently
3. Join the four results, substituting a fixed fallback for each failure

A failed narrative never affects its siblings or the scores themselves.
"""

import asyncio
import time

import structlog

from riskdash.adapters.storage import DashboardRepository
from riskdash.domain.models import (
    AnalysisNarrative,
    DashboardData,
    DashboardReport,
    FinanceAssessmentInput,
    FinancialStabilityResult,
    HealthAssessmentInput,
    HealthPredictionResult,
    RiskClassification,
    ScoreBundle,
)
from riskdash.domain.risk_model import (
    classify_finance_risk,
    classify_health_risk,
    compute_cardiovascular_risk_probability,
    compute_finance_score,
    compute_health_score,
    compute_overall_score,
    compute_time_horizon_score,
    interpret_overall,
    interpret_time_horizon,
)
from riskdash.services.narrative import TextGenerator
from riskdash.services.result import Result

logger = structlog.get_logger(__name__)

ANALYSIS_UNAVAILABLE = "Analysis unavailable"


def narrative_prompts(bundle: ScoreBundle) -> dict[str, str]:
    """One prompt per AnalysisNarrative field."""
    descriptions = {
        "health": (
            f"health score of {bundle.health_score} "
            f"(classification: {bundle.health_classification.value})"
        ),
        "finance": (
            f"finance score of {bundle.finance_score} "
            f"(classification: {bundle.finance_classification.value})"
        ),
        "time_horizon": (
            f"time horizon score of {bundle.time_horizon_score} "
            f"({bundle.time_horizon_interpretation.value})"
        ),
        "overall": (
            f"overall risk score of {bundle.overall_risk_score} "
            f"({bundle.overall_risk_interpretation.value})"
        ),
    }
    return {
        field: f"Provide a short analysis (1-2 lines) of a {description}. "
        "Be concise and actionable."
        for field, description in descriptions.items()
    }


def assemble(
    finance_result: FinancialStabilityResult | None = None,
    health_result: HealthPredictionResult | None = None,
    finance_form: FinanceAssessmentInput | None = None,
    health_form: HealthAssessmentInput | None = None,
) -> ScoreBundle:
    """
    Build the score bundle from the assessments that were submitted.

    A side is scored only when both its result and its form are present.
    Otherwise its score is 0 with classification NO_DATA, a display default
    that callers must not confuse with a computed zero.
    """
    health_prob: float | None = None
    health_score = 0
    health_classification = RiskClassification.NO_DATA
    if health_result is not None and health_form is not None:
        health_prob = compute_cardiovascular_risk_probability(health_form)
        health_score = compute_health_score(health_prob)
        health_classification = classify_health_risk(health_prob)

    finance_prob: float | None = None
    finance_score = 0
    finance_classification = RiskClassification.NO_DATA
    if finance_result is not None and finance_form is not None:
        finance_prob = finance_result.fsi
        finance_score = compute_finance_score(finance_prob)
        finance_classification = classify_finance_risk(finance_prob)

    time_horizon_score = compute_time_horizon_score(health_prob, finance_prob)
    overall_risk_score = compute_overall_score(health_score, finance_score, time_horizon_score)

    return ScoreBundle(
        health_score=health_score,
        finance_score=finance_score,
        time_horizon_score=time_horizon_score,
        overall_risk_score=overall_risk_score,
        health_classification=health_classification,
        finance_classification=finance_classification,
        time_horizon_interpretation=interpret_time_horizon(time_horizon_score),
        overall_risk_interpretation=interpret_overall(overall_risk_score),
    )


def assemble_from(dashboard: DashboardData) -> ScoreBundle:
    return assemble(
        finance_result=dashboard.finance_result,
        health_result=dashboard.health_result,
        finance_form=dashboard.finance_form,
        health_form=dashboard.health_form,
    )


class ScoreOrchestrator:
    """Computes score bundles and gathers their narratives."""

    def __init__(self, text_generator: TextGenerator) -> None:
        self.text_generator = text_generator
        self.logger = logger.bind(component="score_orchestrator")

    def assemble(
        self,
        finance_result: FinancialStabilityResult | None = None,
        health_result: HealthPredictionResult | None = None,
        finance_form: FinanceAssessmentInput | None = None,
        health_form: HealthAssessmentInput | None = None,
    ) -> ScoreBundle:
        bundle = assemble(finance_result, health_result, finance_form, health_form)
        self.logger.debug(
            "scores_assembled",
            health_score=bundle.health_score,
            finance_score=bundle.finance_score,
            time_horizon_score=bundle.time_horizon_score,
            overall_risk_score=bundle.overall_risk_score,
        )
        return bundle

    def assemble_from(self, dashboard: DashboardData) -> ScoreBundle:
        return self.assemble(
            finance_result=dashboard.finance_result,
            health_result=dashboard.health_result,
            finance_form=dashboard.finance_form,
            health_form=dashboard.health_form,
        )

    async def fetch_narratives(self, bundle: ScoreBundle) -> AnalysisNarrative:
        """
        Request all four narratives concurrently and join them.

        Each request resolves to a Result; failures become ANALYSIS_UNAVAILABLE
        for that field only. No retries.
        """
        start_time = time.perf_counter()

        # _generate never raises, so the TaskGroup never cancels siblings
        async with asyncio.TaskGroup() as task_group:
            tasks = {
                field: task_group.create_task(self._generate(field, prompt))
                for field, prompt in narrative_prompts(bundle).items()
            }

        results = {field: task.result() for field, task in tasks.items()}
        failed = [field for field, result in results.items() if result.is_err()]

        self.logger.info(
            "narratives_fetched",
            failed_fields=failed,
            duration_seconds=round(time.perf_counter() - start_time, 3),
        )

        return AnalysisNarrative(
            **{field: result.unwrap_or(ANALYSIS_UNAVAILABLE) for field, result in results.items()}
        )

    async def _generate(self, field: str, prompt: str) -> Result[str, Exception]:
        try:
            text = await self.text_generator.generate(prompt)
        except Exception as e:
            self.logger.warning("narrative_request_failed", field=field, error=str(e))
            return Result.err(e)

        if not text or not text.strip():
            self.logger.warning("narrative_empty", field=field)
            return Result.err(ValueError(f"Empty narrative for {field}"))

        return Result.ok(text.strip())

    async def build_report(self, repository: DashboardRepository) -> DashboardReport | None:
        """Load the stored session and produce scores plus narratives.

        Returns None when no assessment has been stored yet.
        """
        dashboard = repository.load()
        if dashboard is None:
            self.logger.info("no_dashboard_data")
            return None

        scores = self.assemble_from(dashboard)
        analysis = await self.fetch_narratives(scores)
        return DashboardReport(scores=scores, analysis=analysis)
