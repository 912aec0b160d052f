"""Entry points for one seven-day run.

Every function takes a snapshot and returns a snapshot. Calling one in
the wrong phase hands the input back unchanged.
"""

from __future__ import annotations

import logging
from typing import Optional

from lowborn.application.services.balance_tables import DEFAULT_SEED
from lowborn.application.services.disruption_service import apply_daily_disruption, with_today_disruption
from lowborn.application.services.night_scene_builder import build_night_scene
from lowborn.application.services.npc_roster import build_npc_profiles, pick_threat_seed
from lowborn.application.services.resolution import resolve_scene
from lowborn.application.services.schedule_service import day_summary, generate_week_schedule, summarize_disruption
from lowborn.application.services.week_summary import build_week_summary
from lowborn.domain.models.night import SceneType
from lowborn.domain.models.run_state import DayPhase, HiddenState, RunState, fresh_rumor_network
from lowborn.domain.models.schedule import DutyType, WEEK_LENGTH
from lowborn.domain.models.stats import BASE_CAMP_STATS, BASE_PLAYER_STATS

logger = logging.getLogger(__name__)


def normalize_seed(seed_input: Optional[str]) -> str:
    return ((seed_input or "").strip() or DEFAULT_SEED).lower()


def create_run(seed_input: Optional[str] = None) -> RunState:
    seed = normalize_seed(seed_input)
    profiles = build_npc_profiles(seed)
    schedule = list(generate_week_schedule(seed, 1))
    schedule[0] = apply_daily_disruption(schedule[0], seed, 1)
    patrol_days = sum(1 for entry in schedule if entry.scheduled_duty is DutyType.PATROL)

    state = RunState(
        seed=seed,
        week=1,
        today_index=0,
        schedule=tuple(schedule),
        phase=DayPhase.DAY,
        player_stats=BASE_PLAYER_STATS,
        camp_stats=BASE_CAMP_STATS,
        npc_profiles=profiles,
        hidden=HiddenState(threat_seed=pick_threat_seed(seed), rumor_adoption=fresh_rumor_network(profiles)),
        recent_events=(
            f'Week 1 initialized with seed "{seed}".',
            f"Schedule posted with {patrol_days} patrol day(s).",
            f"Roster assembled: {len(profiles)} watchers assigned.",
        ),
        today_summary=day_summary(schedule[0]),
    )
    logger.debug("Run created", extra={"seed": seed, "roster_size": len(profiles), "patrol_days": patrol_days})
    return state


def begin_night(state: RunState) -> RunState:
    if state.complete or state.phase is not DayPhase.DAY:
        return state

    scene = build_night_scene(state)
    if scene is None:
        return state

    today = state.today
    if scene.scene_type is SceneType.PATROL:
        summary = "Patrol scene active. Make one decision to resolve the night."
    else:
        summary = "Camp scene active. Patrols are returning for debrief."
    logger.debug(
        "Night began",
        extra={"seed": state.seed, "day": today.day, "scene_type": scene.scene_type.value, "card": scene.event_card.id},
    )
    return state.evolve(
        phase=DayPhase.NIGHT_SCENE,
        active_night_scene=scene,
        dawn_report=None,
        today_summary=summary,
        recent_events=state.with_events(
            f"{today.label}: Night began ({scene.scene_type.value}).",
            f"Event: {scene.event_card.title}.",
        ),
    )


def resolve_night_scene(state: RunState, choice_id: Optional[str] = None) -> RunState:
    if state.complete or state.phase is not DayPhase.NIGHT_SCENE or state.active_night_scene is None:
        return state

    resolved = resolve_scene(state, choice_id)
    logger.debug(
        "Night resolved",
        extra={
            "seed": state.seed,
            "day": state.today.day,
            "choice_id": choice_id,
            "rumor_reach": resolved.dawn_report.rumor_reach_count,
        },
    )
    return resolved


def start_next_day(state: RunState) -> RunState:
    if state.complete or state.phase is not DayPhase.DAWN_REPORT:
        return state

    if state.today_index >= WEEK_LENGTH - 1:
        summary = build_week_summary(state)
        logger.debug("Week complete", extra={"seed": state.seed, "first_break": summary.first_break_label})
        return state.evolve(
            phase=DayPhase.WEEK_SUMMARY,
            active_night_scene=None,
            dawn_report=None,
            complete=True,
            week_summary=summary,
            today_summary="Week complete. Review your summary and decide your next run.",
            recent_events=state.with_events(f"Week {state.week} complete.", summary.first_break_label),
        )

    next_index = state.today_index + 1
    schedule = with_today_disruption(state.schedule, next_index, state.seed, state.week)
    today = schedule[next_index]
    logger.debug(
        "Day started",
        extra={"seed": state.seed, "day": today.day, "disruption": today.disruption.type.value},
    )
    return state.evolve(
        today_index=next_index,
        schedule=schedule,
        phase=DayPhase.DAY,
        active_night_scene=None,
        dawn_report=None,
        week_summary=None,
        today_summary=day_summary(today),
        recent_events=state.with_events(
            f"{today.label} started: {today.assigned_duty.value}/{today.assigned_shift.value}.",
            summarize_disruption(today.disruption),
        ),
    )


advance_to_night = begin_night
next_day = start_next_day
