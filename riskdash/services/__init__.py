"""
Core services for the application.

This package contains the service implementations that drive the risk model:
score orchestration with AI narratives, questionnaire submission, and the
assistant chat session.
"""

from .result import Result
from .narrative import AgentTextGenerator, HttpTextGenerator, TextGenerator, build_text_generator
from .scoring import ANALYSIS_UNAVAILABLE, ScoreOrchestrator, assemble, assemble_from
from .submission import AssessmentSubmitter, validate_finance_form, validate_health_form
from .chat import ChatSession, TurnState

__all__ = [
    "ANALYSIS_UNAVAILABLE",
    "AgentTextGenerator",
    "AssessmentSubmitter",
    "ChatSession",
    "HttpTextGenerator",
    "Result",
    "ScoreOrchestrator",
    "TextGenerator",
    "TurnState",
    "assemble",
    "assemble_from",
    "build_text_generator",
    "validate_finance_form",
    "validate_health_form",
]
