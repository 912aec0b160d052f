from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Optional

from lowborn.application.services import balance_tables as tables
from lowborn.application.services.run_engine import begin_night, create_run, resolve_night_scene, start_next_day
from lowborn.domain.models.run_state import DayPhase, RunState

logger = logging.getLogger(__name__)

SIM_RUNS_ENV = "LOWBORN_SIM_RUNS"
DEFAULT_SIM_RUNS = 100

ChoicePolicy = Callable[[RunState], Optional[str]]


@dataclass(frozen=True)
class SimulationReport:
    runs: int
    average_nights_survived: float
    average_end_morale: float
    average_rumor: float
    collapse_cause_distribution: dict[str, int] = field(default_factory=dict)


def _safe_int(raw_value, fallback: int) -> int:
    try:
        return int(raw_value)
    except (TypeError, ValueError):
        return int(fallback)


def default_run_count() -> int:
    return max(1, _safe_int(os.getenv(SIM_RUNS_ENV), DEFAULT_SIM_RUNS))


def first_choice(state: RunState) -> Optional[str]:
    scene = state.active_night_scene
    if scene is None or not scene.choices:
        return None
    return scene.choices[0].id


def play_out_week(state: RunState, choose: Optional[ChoicePolicy] = None) -> RunState:
    """Drive a run to its week summary, stopping early if the guard trips."""

    policy = choose or first_choice
    for _ in range(tables.SIMULATION_TRANSITION_GUARD):
        if state.phase is DayPhase.DAY:
            state = begin_night(state)
        elif state.phase is DayPhase.NIGHT_SCENE:
            state = resolve_night_scene(state, policy(state))
        elif state.phase is DayPhase.DAWN_REPORT:
            state = start_next_day(state)
        else:
            break
    return state


def run_simulation_report(
    base_seed: str = tables.DEFAULT_SEED,
    runs: int = DEFAULT_SIM_RUNS,
    *,
    log: bool = True,
    choose: Optional[ChoicePolicy] = None,
) -> SimulationReport:
    total_runs = max(1, int(runs))
    total_nights = 0
    total_morale = 0
    total_rumor = 0
    causes: dict[str, int] = {}

    for index in range(total_runs):
        state = play_out_week(create_run(f"{base_seed}-sim-{index + 1}"), choose)
        total_nights += len(state.night_logs)
        total_morale += state.camp_stats.morale
        total_rumor += state.camp_stats.rumor
        cause = state.week_summary.first_break_label if state.week_summary else tables.NO_BREAK_LABEL
        causes[cause] = causes.get(cause, 0) + 1

    report = SimulationReport(
        runs=total_runs,
        average_nights_survived=round(total_nights / total_runs, 2),
        average_end_morale=round(total_morale / total_runs, 2),
        average_rumor=round(total_rumor / total_runs, 2),
        collapse_cause_distribution=causes,
    )

    if log:
        logger.info("Simulation report")
        logger.info("Runs: %s", report.runs)
        logger.info("Average nights survived: %s", report.average_nights_survived)
        logger.info("Average end morale: %s", report.average_end_morale)
        logger.info("Average rumor: %s", report.average_rumor)
        logger.info("Collapse cause distribution: %s", report.collapse_cause_distribution)
    return report
