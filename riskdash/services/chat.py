"""
Risk assistant chat session.

Each turn moves through composing -> sent -> awaiting_reply -> answered | failed.
Only one turn can be awaiting a reply. While it waits, a ``loading``
placeholder sits at the end of the in-memory log; it is swapped for the reply
(or a fixed error message) in a single assignment and is never persisted.
"""

from enum import Enum
from typing import Protocol
from uuid import uuid4

import structlog

from riskdash.adapters.storage import ChatHistoryRepository, DashboardRepository
from riskdash.domain.models import (
    AssistantAnswer,
    AssistantQuery,
    ChatMessage,
    ChatRole,
    DashboardData,
    ScoreBundle,
)
from riskdash.services.scoring import assemble_from

logger = structlog.get_logger(__name__)

WELCOME_MESSAGE_ID = "welcome"
LOADING_TEXT = "Retrieving info..."
EMPTY_ANSWER_TEXT = "I apologize, but I couldn't generate a response at this time."
CONNECTION_ERROR_TEXT = (
    "I'm sorry, I'm having trouble connecting to my knowledge base right now. "
    "Please try again later."
)


class TurnState(str, Enum):
    COMPOSING = "composing"
    SENT = "sent"
    AWAITING_REPLY = "awaiting_reply"
    ANSWERED = "answered"
    FAILED = "failed"


class Assistant(Protocol):
    """Q&A collaborator. Any exception counts as a failed turn."""

    async def ask(self, query: AssistantQuery) -> AssistantAnswer: ...


def welcome_text(scores: ScoreBundle | None) -> str:
    if scores is None:
        return (
            "Hello! I'm your AI Risk Advisor. To provide personalized advice, please complete "
            "the Finance and Health Risk Assessment forms first. Once you've submitted both "
            "forms, I'll be able to analyze your data and provide tailored recommendations."
        )
    return (
        "Hello! I'm your AI Risk Advisor. Here are your current scores:\n"
        f"- Total Risk Score: {scores.overall_risk_score}\n"
        f"- Financial Score: {scores.finance_score}\n"
        f"- Health Score: {scores.health_score}\n"
        f"- Time Horizon Score: {scores.time_horizon_score}\n\n"
        "I can provide advice and suggestions based on these scores."
    )


def build_query(question: str, data: DashboardData) -> AssistantQuery:
    """Assistant request for ``question``.

    Health and finance context is what the prediction services returned;
    the dashboard's own labels and scores fill in only when a service left
    a field out. The time horizon exists only as a dashboard score.
    """
    scores = assemble_from(data)
    health, finance = data.health_result, data.finance_result
    health_risk = health.risk if health is not None else None
    health_score = health.score if health is not None else None
    finance_risk = finance.risk if finance is not None else None
    finance_score = finance.score if finance is not None else None

    return AssistantQuery(
        input=question,
        health_risk=health_risk or scores.health_classification.value,
        health_score=scores.health_score if health_score is None else health_score,
        finance_risk=finance_risk or scores.finance_classification.value,
        finance_score=scores.finance_score if finance_score is None else finance_score,
        time_horizon_risk=scores.time_horizon_interpretation.value,
        time_horizon_score=scores.time_horizon_score,
    )


class ChatSession:
    """
    Append-only chat log bound to the stored dashboard session.

    Use ChatSession.open() to restore the persisted history. Every change to
    the log is saved immediately, minus any loading placeholder.
    """

    def __init__(
        self,
        assistant: Assistant,
        history: ChatHistoryRepository,
        dashboard: DashboardRepository,
    ) -> None:
        self.assistant = assistant
        self.history = history
        self.dashboard = dashboard
        self.logger = logger.bind(component="chat_session")

        self.messages: list[ChatMessage] = []
        self.state = TurnState.COMPOSING
        self._in_flight = False

    @classmethod
    def open(
        cls,
        assistant: Assistant,
        history: ChatHistoryRepository,
        dashboard: DashboardRepository,
    ) -> "ChatSession":
        session = cls(assistant, history, dashboard)
        session.messages = history.load()
        if not session.messages:
            session.messages = [session._welcome_message()]
            session._persist()
        session.logger.info("chat_session_opened", message_count=len(session.messages))
        return session

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def risk_data(self) -> DashboardData | None:
        """The stored session, or None unless both assessments are in it."""
        data = self.dashboard.load()
        if data is None or not data.has_risk_data:
            return None
        return data

    def risk_scores(self) -> ScoreBundle | None:
        data = self.risk_data()
        return None if data is None else assemble_from(data)

    async def send(self, text: str) -> ChatMessage | None:
        """
        Ask the assistant a question.

        Returns the assistant's reply, or None when the send was refused: empty
        input, a reply still pending, or no stored risk data. A refused send
        leaves the log untouched.
        """
        if not text or not text.strip():
            self.logger.debug("chat_send_refused", reason="empty_input")
            return None
        if self._in_flight:
            self.logger.info("chat_send_refused", reason="request_in_flight")
            return None
        data = self.risk_data()
        if data is None:
            self.logger.info("chat_send_refused", reason="no_risk_data")
            return None

        # Set before the first await: interleaved sends see the flag
        self._in_flight = True
        try:
            user_message = ChatMessage(role=ChatRole.USER, content=text)
            placeholder = ChatMessage(
                id=f"loading-{uuid4().hex}", role=ChatRole.LOADING, content=LOADING_TEXT
            )
            self.messages = [*self.messages, user_message, placeholder]
            self.state = TurnState.SENT
            self._persist()

            self.state = TurnState.AWAITING_REPLY
            try:
                answer = await self.assistant.ask(build_query(text, data))
            except Exception as e:
                self.logger.error("chat_reply_failed", error=str(e))
                reply = ChatMessage(role=ChatRole.ASSISTANT, content=CONNECTION_ERROR_TEXT)
                self.state = TurnState.FAILED
            else:
                reply = ChatMessage(
                    role=ChatRole.ASSISTANT,
                    content=answer.answer or EMPTY_ANSWER_TEXT,
                    sources=list(answer.sources),
                )
                self.state = TurnState.ANSWERED
                self.logger.info("chat_reply_received", source_count=len(reply.sources))

            self.messages = [m for m in self.messages if m.role is not ChatRole.LOADING] + [reply]
            self._persist()
            return reply
        finally:
            self._in_flight = False

    def clear(self) -> None:
        """Drop the history and start over from the welcome message."""
        self.messages = [self._welcome_message()]
        self.state = TurnState.COMPOSING
        self._persist()
        self.logger.info("chat_history_cleared")

    def _welcome_message(self) -> ChatMessage:
        return ChatMessage(
            id=WELCOME_MESSAGE_ID,
            role=ChatRole.ASSISTANT,
            content=welcome_text(self.risk_scores()),
        )

    def _persist(self) -> None:
        self.history.save(self.messages)
