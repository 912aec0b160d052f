import argparse
from collections import deque
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lowborn import bootstrap
from lowborn.application.services.balance_tables import SIMULATION_TRANSITION_GUARD
from lowborn.application.services.run_journal import build_shareable_run_text
from lowborn.application.services.run_session_service import DEFAULT_SLOT, RunSessionService
from lowborn.application.services.simulation_batch import SimulationReport, default_run_count, run_simulation_report
from lowborn.application.services.week_summary import build_week_summary
from lowborn.domain.errors import LowbornError
from lowborn.domain.models.run_state import DayPhase, RunState

_TITLE_STYLE = "bold yellow"
_SUMMARY_BORDER = "magenta"
_DAWN_BORDER = "cyan"


def _ornate_title(title: str) -> str:
    return f"[{_TITLE_STYLE}]{title}[/{_TITLE_STYLE}]"


def render_simulation_report(console: Console, report: SimulationReport) -> None:
    table = Table(show_header=True, header_style=_TITLE_STYLE, title="Simulation Report")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Runs", str(report.runs))
    table.add_row("Average nights survived", f"{report.average_nights_survived:.2f}")
    table.add_row("Average end morale", f"{report.average_end_morale:.2f}")
    table.add_row("Average rumor", f"{report.average_rumor:.2f}")
    console.print(table)

    causes = Table(show_header=True, header_style=_TITLE_STYLE, title="Collapse Causes")
    causes.add_column("First break")
    causes.add_column("Runs", justify="right")
    for label, count in sorted(report.collapse_cause_distribution.items(), key=lambda row: (-row[1], row[0])):
        causes.add_row(escape(label), str(count))
    console.print(causes)


def play_week(
    session: RunSessionService,
    choices: Sequence[str] = (),
    console: Optional[Console] = None,
    *,
    resume: bool = False,
    seed: Optional[str] = None,
) -> RunState:
    """Play the current week to its summary, taking supplied choices in order.

    Stops early on a finished run, on a refused transition, or once the
    transition guard trips.
    """

    state = session.resume() if resume else session.new_run(seed)
    pending = deque(choices)
    for _ in range(SIMULATION_TRANSITION_GUARD):
        if state.complete or state.phase is DayPhase.WEEK_SUMMARY:
            break
        if state.phase is DayPhase.DAY:
            advanced = session.begin_night()
        elif state.phase is DayPhase.NIGHT_SCENE:
            advanced = session.resolve_night(pending.popleft() if pending else None)
        else:
            if console is not None and state.dawn_report is not None:
                console.print(
                    Panel.fit(
                        escape(state.dawn_report.summary),
                        title=_ornate_title(state.dawn_report.title),
                        border_style=_DAWN_BORDER,
                    )
                )
            advanced = session.start_next_day()
        if advanced is state:
            break
        state = advanced
    return state


def _cmd_simulate(args: argparse.Namespace, console: Console) -> int:
    runs = args.runs if args.runs is not None else default_run_count()
    report = run_simulation_report(args.seed or bootstrap.default_seed(), runs)
    render_simulation_report(console, report)
    return 0


def _cmd_play(args: argparse.Namespace, console: Console) -> int:
    session = bootstrap.create_session_service(slot=args.slot)
    state = play_week(
        session,
        args.choice or (),
        console,
        resume=args.resume,
        seed=args.seed or bootstrap.default_seed(),
    )
    if state.week_summary is not None:
        share_text = state.week_summary.share_text
    elif state.complete:
        # finished saves from older versions carry no stored summary
        share_text = build_week_summary(state).share_text
    else:
        console.print(f"Week {state.week} stopped before its summary (phase {state.phase.value}).")
        return 1
    console.print(
        Panel.fit(
            escape(share_text),
            title=_ornate_title(f"Week {state.week} Summary"),
            border_style=_SUMMARY_BORDER,
        )
    )
    return 0


def _cmd_journal(args: argparse.Namespace, console: Console) -> int:
    session = bootstrap.create_session_service(slot=args.slot)
    state = play_week(session, (), None, seed=args.seed or bootstrap.default_seed())
    console.print(escape(build_shareable_run_text(state)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lowborn", description="Seven nights on the Lowborn watch.")
    parser.add_argument("--log-level", default=None, help="Overrides LOWBORN_LOG_LEVEL.")
    commands = parser.add_subparsers(dest="command", required=True)

    simulate = commands.add_parser("simulate", help="Auto-play many seeded weeks and report outcomes.")
    simulate.add_argument("--seed", default=None)
    simulate.add_argument("--runs", type=int, default=None)
    simulate.set_defaults(handler=_cmd_simulate)

    play = commands.add_parser("play", help="Auto-play one week, printing each dawn report.")
    play.add_argument("--seed", default=None)
    play.add_argument("--choice", action="append", help="Choice id for the next night; repeat in order.")
    play.add_argument("--slot", default=DEFAULT_SLOT)
    play.add_argument("--resume", action="store_true", help="Continue the run stored in --slot.")
    play.set_defaults(handler=_cmd_play)

    journal = commands.add_parser("journal", help="Auto-play one week and print the shareable run journal.")
    journal.add_argument("--seed", default=None)
    journal.add_argument("--slot", default=DEFAULT_SLOT)
    journal.set_defaults(handler=_cmd_journal)
    return parser


def main(argv: Optional[Sequence[str]] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    bootstrap.configure_logging(args.log_level)
    console = console or Console()
    try:
        return args.handler(args, console)
    except KeyboardInterrupt:
        console.print("\nSession ended.")
        return 130
    except LowbornError as exc:
        console.print("The watch could not continue.")
        console.print(f"Reason: {escape(str(exc))}")
        return 1
