"""
demo_session.py – Console demo of an autonomous Career Copilot session

Run:
    python demo_session.py                 # Google, canned answers
    python demo_session.py Amazon          # any company from the directory

Uses live providers when GROQ_API_KEY / GEMINI_API_KEY are set in .env,
mock replies otherwise (or when FORCE_MOCK_MODE=true).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── make src/ importable without installing the package ──────────────────────
sys.path.insert(0, str(Path(__file__).parent / "src"))

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from career_copilot.agent_trace import RunTrace
from career_copilot.config import get_settings
from career_copilot.models import AgentOutput, SessionState
from career_copilot.orchestrator import Orchestrator

console = Console()

RESUME = (
    "Final-year CS student. Built a real-time chat app (React, Node.js, Socket.IO) "
    "used by 300 students, a Python web scraper feeding a Postgres dashboard, and "
    "contributed bug fixes to an open-source CLI."
)

CANNED_ANSWERS = [
    "I'd start with a hash map from key to node plus a doubly linked list, giving O(1) get and put.",
    "BFS from the source with a queue; each edge is relaxed once so it's O(V + E).",
    "Shard by user id, put a cache in front of the read path and accept eventual consistency for feeds.",
    "Use a min-heap of size k; every push or pop is O(log k) so the whole pass is O(n log k).",
    "I'd add retries with exponential backoff and an idempotency key on the write endpoint.",
]

STATUS_STYLE = {
    "success":  "green",
    "fallback": "yellow",
    "failed":   "red",
    "blocked":  "magenta",
}


# ─── Display helpers ─────────────────────────────────────────────────────────

def _bar(score: int, width: int = 20) -> str:
    filled = round(score / 100 * width)
    return "[" + "█" * filled + "░" * (width - filled) + f"] {score}%"


def show_step(index: int, output: AgentOutput) -> None:
    colour = "green" if output.success else "red"
    title  = f"[bold]{index}. {output.action}[/bold] → {output.capability or '—'}"
    body   = Table(box=None, show_header=False, padding=(0, 1))
    body.add_column("Key",   style="bold cyan", no_wrap=True)
    body.add_column("Value", style="white")

    data = output.data
    if output.message:
        body.add_row("Message", f"[red]{output.message}[/red]")
    if "question" in data:
        body.add_row("Question", data["question"])
        body.add_row("Phase / difficulty", f"{data.get('phase')} / {data.get('difficulty')}")
    if data.get("evaluation"):
        ev = data["evaluation"]
        body.add_row(
            "Last answer",
            f"depth {ev['technical_depth']:.0f} · clarity {ev['clarity']:.0f} · structure {ev['structure']:.0f}",
        )
    if "readiness_score" in data:
        body.add_row("Readiness", _bar(data["readiness_score"]))
    if "priority_gaps" in data:
        body.add_row("Priority gaps", ", ".join(data["priority_gaps"]))
    if "daily_plan" in data:
        body.add_row("Plan", f"{len(data['daily_plan'])} days over {data.get('time_horizon')}")
    if output.fallback:
        body.add_row("Note", "[yellow]fallback reply used[/yellow]")

    console.print(Panel(body, title=title, border_style=colour, expand=False))


def show_summary(state: SessionState, trace: RunTrace) -> None:
    console.print()
    console.rule("[bold magenta]Session Summary[/bold magenta]")

    summary = Table(box=box.ROUNDED, show_header=False, padding=(0, 1))
    summary.add_column("Key",   style="bold cyan", no_wrap=True)
    summary.add_column("Value", style="white")
    company = state.target_company_profile.name if state.target_company_profile else "[dim]Unknown[/dim]"
    summary.add_row("Target company", company)
    summary.add_row("Stage",          state.session_stage.value)
    summary.add_row("Readiness",      _bar(state.readiness_score))
    summary.add_row("Interviews",     str(len(state.interview_history)))
    summary.add_row("Weak areas",     ", ".join(state.weak_areas) or "[dim]None[/dim]")
    summary.add_row("Strengths",      ", ".join(state.strengths) or "[dim]None[/dim]")
    console.print(Panel(summary, title="[bold]Candidate[/bold]", border_style="magenta"))

    timeline = Table(box=box.SIMPLE_HEAD, header_style="bold white on dark_violet", padding=(0, 1))
    timeline.add_column("#",          justify="right")
    timeline.add_column("Action",     style="white")
    timeline.add_column("Capability", style="cyan")
    timeline.add_column("Status",     justify="center")
    timeline.add_column("HTTP",       justify="right")
    timeline.add_column("ms",         justify="right")
    timeline.add_column("Warnings",   style="dim white")
    for i, step in enumerate(trace.steps, 1):
        style = STATUS_STYLE.get(step.status, "white")
        timeline.add_row(
            str(i),
            step.action,
            step.capability or "—",
            f"[{style}]{step.status}[/{style}]",
            str(step.detail.get("status_code", "")),
            f"{step.duration_ms:.0f}",
            "; ".join(step.warnings),
        )
    console.print(Panel(
        timeline,
        title=f"[bold]Run {trace.run_id} · {trace.mode} · {trace.total_ms:.0f} ms[/bold]",
        border_style="blue",
    ))


# ─── Main ────────────────────────────────────────────────────────────────────

def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.app.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    company = sys.argv[1] if len(sys.argv) > 1 else "Google"
    console.print()
    console.print(Panel(
        "[bold]Career Copilot — Autonomous Interview Preparation[/bold]\n"
        f"[dim]Target: {company}  •  Profile → Skill Gap → Interview → Plan[/dim]",
        style="on dark_violet",
        expand=False,
    ))
    for provider, badge in settings.status_summary().items():
        console.print(f"  {badge}  {provider}")
    console.print()

    answers = iter(CANNED_ANSWERS * 2)

    def answer(question: str) -> str:
        reply = next(answers)
        console.print(f"[dim]Q:[/dim] {question}\n[dim]A:[/dim] [italic]{reply}[/italic]")
        return reply

    try:
        orchestrator = Orchestrator(settings=settings)
        payload = {
            "resumeText":     RESUME,
            "declaredSkills": "Python, JavaScript, React, Node.js, SQL",
            "academicYear":   "Final Year",
            "targetCompany":  company,
        }
        for i, output in enumerate(orchestrator.run(payload, answer_fn=answer), 1):
            show_step(i, output)
        show_summary(orchestrator.store.get_state(), orchestrator.trace)

    except EnvironmentError as e:
        console.print(f"\n[bold red]Configuration error:[/bold red] {e}")
        console.print("[dim]Set GROQ_API_KEY / GEMINI_API_KEY in .env, or FORCE_MOCK_MODE=true.[/dim]")
        sys.exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(0)

    except Exception:
        console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
