"""
Console front end: renders the risk dashboard and talks to the assistant.

Run with: python -m riskdash [dashboard|submit FORM PATH|ask QUESTION|clear-chat|config]
"""

import argparse
import asyncio
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from riskdash.adapters.http_clients import RiskServicesClient
from riskdash.adapters.storage import chat_history_repository, dashboard_repository
from riskdash.config import AppConfig, get_config, print_config_summary
from riskdash.domain.models import ChatMessage, ChatRole, DashboardReport
from riskdash.errors import FormValidationError, UpstreamError
from riskdash.logging_setup import configure_logging
from riskdash.services.chat import ChatSession
from riskdash.services.narrative import build_text_generator
from riskdash.services.scoring import ScoreOrchestrator
from riskdash.services.submission import AssessmentSubmitter

console = Console()


def score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def render_report(report: DashboardReport, out: Console = console) -> None:
    scores = report.scores
    analysis = report.analysis

    table = Table(title="Risk Dashboard")
    table.add_column("Score", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Assessment", style="magenta")
    table.add_column("Analysis", style="white")

    rows = [
        (
            "Health Risk",
            scores.health_score,
            scores.health_classification.value,
            analysis.health,
            scores.has_health_data,
        ),
        (
            "Financial Risk",
            scores.finance_score,
            scores.finance_classification.value,
            analysis.finance,
            scores.has_finance_data,
        ),
        (
            "Time Horizon",
            scores.time_horizon_score,
            scores.time_horizon_interpretation.value,
            analysis.time_horizon,
            True,
        ),
        (
            "Overall Risk",
            scores.overall_risk_score,
            scores.overall_risk_interpretation.value,
            analysis.overall,
            True,
        ),
    ]
    for name, value, label, text, has_data in rows:
        # No-data sides show a dash, never a computed-looking zero
        shown = f"[{score_style(value)}]{value}[/]" if has_data else "[dim]-[/]"
        table.add_row(name, shown, label, text)

    out.print(table)


def render_chat(messages: Sequence[ChatMessage], out: Console = console) -> None:
    for message in messages:
        if message.role is ChatRole.USER:
            out.print(Panel(message.content, title="You", style="blue"))
            continue
        body = message.content
        if message.sources:
            body += "\n\nSources:\n" + "\n".join(f"- {source}" for source in message.sources)
        out.print(Panel(body, title="AI Risk Advisor", style="green"))


async def show_dashboard(config: AppConfig) -> int:
    repository = dashboard_repository(config.storage)
    async with RiskServicesClient(config.endpoints) as client:
        orchestrator = ScoreOrchestrator(build_text_generator(config.narrative, client))
        report = await orchestrator.build_report(repository)

    if report is None:
        console.print(
            "No assessment stored yet. Submit the finance or health form first.", style="yellow"
        )
        return 1

    render_report(report)
    return 0


async def ask(config: AppConfig, question: str) -> int:
    async with RiskServicesClient(config.endpoints) as client:
        session = ChatSession.open(
            client,
            chat_history_repository(config.storage),
            dashboard_repository(config.storage),
        )
        reply = await session.send(question)

    if reply is None:
        console.print(
            "Question not sent: it is empty or both assessments are still missing.",
            style="yellow",
        )
        render_chat(session.messages[-1:])
        return 1

    render_chat(session.messages[-2:])
    return 0


def render_field_errors(error: FormValidationError, out: Console = console) -> None:
    table = Table(title=f"Invalid {error.form} form")
    table.add_column("Field", style="cyan")
    table.add_column("Problem", style="red")
    for field, message in error.field_errors.items():
        table.add_row(field, message)
    out.print(table)


def read_form_file(form: str, path: Path) -> Any:
    """Parse a questionnaire file; unreadable or non-JSON files are form errors."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise FormValidationError(form, {"file": f"{path} is not valid JSON: {e.msg}"}) from e
    except (OSError, UnicodeDecodeError) as e:
        raise FormValidationError(form, {"file": f"cannot read {path}: {e}"}) from e


async def submit(config: AppConfig, form: str, path: Path) -> int:
    try:
        data = read_form_file(form, path)
    except FormValidationError as e:
        render_field_errors(e)
        return 2

    async with RiskServicesClient(config.endpoints) as client:
        submitter = AssessmentSubmitter(client, dashboard_repository(config.storage))
        try:
            if form == "finance":
                finance = await submitter.submit_finance(data)
                console.print(f"✅ Finance assessment stored (FSI {finance.fsi:.3f})")
            else:
                health = await submitter.submit_health(data)
                console.print(f"✅ Health assessment stored ({health.risk or 'ok'})")
        except FormValidationError as e:
            render_field_errors(e)
            return 2
        except UpstreamError as e:
            console.print(f"❌ {e.message}", style="red")
            return 1
    return 0


def clear_chat(config: AppConfig) -> int:
    history = chat_history_repository(config.storage)
    history.clear()
    console.print("Chat history cleared", style="green")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="riskdash", description="Risk assessment dashboard")
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("dashboard", help="Show scores and AI analysis")
    ask_parser = commands.add_parser("ask", help="Ask the AI risk advisor a question")
    ask_parser.add_argument("question", nargs="+")
    submit_parser = commands.add_parser("submit", help="Submit a questionnaire JSON file")
    submit_parser.add_argument("form", choices=["finance", "health"])
    submit_parser.add_argument("path", type=Path)
    commands.add_parser("clear-chat", help="Reset the assistant chat history")
    commands.add_parser("config", help="Print the configuration summary")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    configure_logging(config.logging)

    if args.command == "ask":
        return asyncio.run(ask(config, " ".join(args.question)))
    if args.command == "submit":
        return asyncio.run(submit(config, args.form, args.path))
    if args.command == "clear-chat":
        return clear_chat(config)
    if args.command == "config":
        print_config_summary()
        return 0
    return asyncio.run(show_dashboard(config))
