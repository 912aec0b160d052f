from __future__ import annotations

from dataclasses import replace
from typing import Mapping, Optional, Sequence

from lowborn.application.services import balance_tables as tables
from lowborn.application.services.night_scene_builder import threat_modifier_for_event
from lowborn.application.services.rumor_propagation import (
    PropagationResult,
    build_rumor_packets,
    propagate_rumors,
)
from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.application.services.testimony import make_patrol_field_reports, summarize_flags
from lowborn.domain.models.night import (
    DAWN_DELTA_KEYS,
    DawnReport,
    DebriefChoiceId,
    DebriefSnapshot,
    NightLog,
    PatrolReport,
    SceneType,
)
from lowborn.domain.models.npc import NPCProfile
from lowborn.domain.models.run_state import DayPhase, RunState
from lowborn.domain.models.schedule import DisruptionType
from lowborn.domain.models.stats import clamp, merge_camp_deltas, merge_player_deltas, with_sign

DAWN_SUMMARY_LABELS = {
    "supplies": "Supplies",
    "morale": "Morale",
    "discipline": "Discipline",
    "rumor": "Rumor",
    "warmth": "Warmth",
    "stamina": "Stamina",
    "sanity": "Sanity",
    "injury": "Injury",
}


def apply_accuse_liar_trust_shift(
    profiles: tuple[NPCProfile, ...], reports: Sequence[PatrolReport]
) -> tuple[tuple[NPCProfile, ...], Optional[str]]:
    """Punish the least confident mismatched reporter; truthful reporters gain a little trust."""

    if not reports:
        return profiles, None
    mismatched = [report for report in reports if not report.is_truthful]
    candidates = mismatched or list(reports)
    target_id = min(candidates, key=lambda report: report.confidence).npc_id
    truthful_ids = {report.npc_id for report in reports if report.is_truthful}
    shift = tables.ACCUSATION_TARGET_SHIFT

    target_name = None
    shifted = []
    for npc in profiles:
        if npc.id == target_id:
            target_name = npc.name
            npc = npc.shifted(trust=shift["trust"], loyalty=shift["loyalty"], fear=shift["fear"])
        elif npc.id in truthful_ids:
            npc = npc.shifted(trust=tables.ACCUSATION_TRUTHFUL_TRUST)
        shifted.append(npc)
    return tuple(shifted), target_name


def build_dawn_summary(deltas: Mapping[str, int], rumor_reach_count: int) -> str:
    changes = [f"{DAWN_SUMMARY_LABELS[key]} {with_sign(deltas[key])}" for key in DAWN_DELTA_KEYS]
    changes.append(f"Rumor reach {rumor_reach_count}")
    return f"Dawn tally: {', '.join(changes)}."


def create_dawn_report(
    day: int, player_delta: Mapping[str, int], camp_delta: Mapping[str, int], rumor_reach_count: int
) -> DawnReport:
    merged = {**camp_delta, **player_delta}
    deltas = {key: int(merged.get(key, 0)) for key in DAWN_DELTA_KEYS}
    return DawnReport(
        day=day,
        title=f"Dawn Report - Day {day}",
        summary=build_dawn_summary(deltas, rumor_reach_count),
        rumor_reach_count=rumor_reach_count,
        deltas=deltas,
    )


def resolve_scene(state: RunState, choice_id: Optional[str] = None) -> RunState:
    """Apply one decision to the active scene and move to the dawn report.

    Callers check the phase first; this assumes an active scene.
    """

    today = state.today
    scene = state.active_night_scene
    choice = scene.find_choice(choice_id)
    camp_scene = scene.scene_type is SceneType.CAMP
    debrief_choice = DebriefChoiceId(choice.id) if camp_scene else None
    extra_watch = today.has_extra_watch
    investigating = scene.scene_type is SceneType.PATROL and scene.investigation_active

    threat_player, threat_camp = threat_modifier_for_event(state.hidden.threat_seed, scene.event_card, today.day)
    player_delta = merge_player_deltas(
        scene.event_card.base_player_delta,
        choice.player_delta,
        threat_player,
        tables.EXTRA_DUTY_PLAYER_PENALTY if extra_watch else {},
        tables.INVESTIGATION_PLAYER_PENALTY if investigating else {},
    )
    base_camp_delta = merge_camp_deltas(
        scene.event_card.base_camp_delta,
        choice.camp_delta,
        threat_camp,
        tables.EXTRA_DUTY_CAMP_PENALTY if extra_watch else {},
        tables.INVESTIGATION_CAMP_EFFECT if investigating else {},
    )

    if camp_scene:
        reports = scene.debrief_reports
    else:
        reports = make_patrol_field_reports(state, today.day, scene.event_card.observation_pool)
    flags = summarize_flags(reports, today)

    if camp_scene:
        packets = build_rumor_packets(reports, today.day, debrief_choice)
        spread = propagate_rumors(state, today.day, packets, debrief_choice)
    else:
        conflict_rumor = 1 if "CONFLICTING_TESTIMONY" in flags else 0
        spread = PropagationResult((), 0, {"rumor": conflict_rumor}, state.hidden.rumor_adoption)

    events = [
        scene.event_card.title,
        scene.event_card.outcome,
        f"Decision: {choice.label}. {choice.log_text}",
    ]
    if scene.event_card.is_calm:
        events.append("Calm watch held. No urgent signs forced an alert.")

    profiles = state.npc_profiles
    pending_conflict = state.hidden.pending_accusation_conflict
    if debrief_choice is DebriefChoiceId.ACCUSE_LIAR:
        profiles, target_name = apply_accuse_liar_trust_shift(profiles, reports)
        pending_conflict = True
        if target_name:
            events.append(f"{target_name} took the accusation personally.")

    backlash_rng = SeededRng(decision_key(state.seed, "accusation-backlash", week=state.week, day=today.day))
    backlash_delta: Mapping[str, int] = {}
    if camp_scene and pending_conflict and backlash_rng.next_float() < tables.ACCUSATION_BACKLASH_CHANCE:
        backlash_delta = tables.ACCUSATION_BACKLASH_DELTA
        pending_conflict = False
        events.append("Accusation backlash flared after lights-out, splitting the barracks.")
        flags.append("ACCUSE_CONFLICT")

    camp_delta = merge_camp_deltas(base_camp_delta, spread.camp_delta, backlash_delta)
    dawn_report = create_dawn_report(today.day, player_delta, camp_delta, spread.rumor_reach_count)

    if scene.route_description:
        events.append(f"Route: {scene.route_description}")
    if camp_scene:
        events.append("You waited for patrol return and processed debrief reports.")
        quiet_count = sum(1 for report in reports if report.claim == tables.NOTHING_UNUSUAL)
        if quiet_count >= max(1, len(reports) - 1):
            events.append("Debriefs stayed mostly quiet: nothing unusual dominated the hall.")
    if today.disruption.type is not DisruptionType.NONE:
        events.append(f"Disruption note: {today.disruption.reason}")

    night_log = NightLog(
        day=today.day,
        events=tuple(events),
        duty_resolved=today.assigned_duty,
        debrief_choice=debrief_choice,
        rumor_reach_count=spread.rumor_reach_count,
        player_delta=player_delta,
        camp_delta=camp_delta,
        reports=tuple(reports),
        rumor_packets=spread.packets,
        flags=tuple(flags),
    )

    schedule = list(state.schedule)
    schedule[state.today_index] = replace(
        today,
        resolved=True,
        event_title=scene.event_card.title,
        summary=f"{scene.event_card.outcome} {choice.log_text}".strip(),
    )

    if debrief_choice is DebriefChoiceId.INVESTIGATE_QUIETLY:
        focus_delta = 1
    elif investigating:
        focus_delta = -1
    else:
        focus_delta = 0
    investigation_focus = int(clamp(state.hidden.investigation_focus + focus_delta, 0, tables.MAX_INVESTIGATION_FOCUS))
    if scene.event_card.is_intense:
        intense_streak = min(state.hidden.intense_streak + 1, tables.MAX_INTENSE_STREAK)
    else:
        intense_streak = 0

    last_debrief = state.hidden.last_debrief
    if camp_scene:
        last_debrief = DebriefSnapshot(
            day=today.day,
            choice_id=debrief_choice,
            reports=tuple(reports),
            packets=spread.packets,
            rumor_reach_count=spread.rumor_reach_count,
        )

    hidden = replace(
        state.hidden,
        investigation_focus=investigation_focus,
        intense_streak=intense_streak,
        pending_accusation_conflict=pending_conflict,
        rumor_adoption=dict(spread.rumor_adoption),
        last_debrief=last_debrief,
    )

    return state.evolve(
        phase=DayPhase.DAWN_REPORT,
        schedule=tuple(schedule),
        active_night_scene=None,
        dawn_report=dawn_report,
        player_stats=state.player_stats.apply(player_delta),
        camp_stats=state.camp_stats.apply(camp_delta),
        npc_profiles=profiles,
        night_logs=state.night_logs + (night_log,),
        recent_events=state.with_events(
            f"{today.label}: {scene.event_card.title}",
            choice.log_text,
            f"Rumor reached {spread.rumor_reach_count} watcher(s)." if camp_scene else "",
            dawn_report.summary,
        ),
        today_summary="Dawn report ready. Review changes, then start the next day.",
        week_summary=None,
        hidden=hidden,
    )
