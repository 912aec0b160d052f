"""Convert run snapshots to and from the camelCase save payload."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel

from lowborn.application.services.balance_tables import MAX_INVESTIGATION_FOCUS, NOTHING_UNUSUAL
from lowborn.application.services.week_summary import build_week_summary
from lowborn.domain.models.night import (
    DawnReport,
    DebriefChoiceId,
    DebriefSnapshot,
    DistortionLevel,
    NightDecisionOption,
    NightEventCard,
    NightEventTag,
    NightLog,
    NightScene,
    PatrolReport,
    ReportEmotion,
    RumorPacket,
    SceneType,
)
from lowborn.domain.models.npc import NPCProfile, NpcRumorState
from lowborn.domain.models.run_state import (
    RECENT_EVENT_LIMIT,
    CollapseIndicators,
    DayPhase,
    HiddenState,
    RunState,
    ThreatSeed,
    WeekSummary,
)
from lowborn.domain.models.schedule import DailyDisruption, DayAssignment, DisruptionType, DutyType, ShiftType
from lowborn.domain.models.stats import CampStats, PlayerStats
from lowborn.infrastructure.save_schema import (
    DayAssignmentModel,
    DebriefSnapshotModel,
    GameStateModel,
    NightDecisionOptionModel,
    NightEventCardModel,
    NightLogModel,
    NightSceneModel,
    PatrolReportModel,
    RumorPacketModel,
    validate_payload,
)

def _value(enum_member) -> Optional[str]:
    return enum_member.value if enum_member is not None else None


def _delta(values: Mapping[str, int]) -> dict[str, int]:
    return {key: int(value) for key, value in values.items()}


def _model_delta(model: BaseModel) -> dict[str, int]:
    return {key: value for key, value in model.model_dump().items() if value is not None}


# -----------------------------------------------------------------------------
# Encoding
# -----------------------------------------------------------------------------

def encode_report(report: PatrolReport) -> dict[str, Any]:
    return {
        "npcId": report.npc_id,
        "npcName": report.npc_name,
        "claimedObservations": list(report.claimed_observations),
        "truthObservation": report.truth_observation,
        "presentedClaim": report.presented_claim,
        "confidence": report.confidence,
        "emotion": report.emotion.value,
        "isLying": report.is_lying,
    }


def encode_profile(npc: NPCProfile) -> dict[str, Any]:
    return {
        "id": npc.id,
        "name": npc.name,
        "loyalty": npc.loyalty,
        "fear": npc.fear,
        "belief": npc.belief,
        "trustInPlayer": npc.trust_in_player,
        "role": npc.role,
    }


def encode_packet(packet: RumorPacket) -> dict[str, Any]:
    return {
        "id": packet.id,
        "day": packet.day,
        "sourceNpcId": packet.source_npc_id,
        "claim": packet.claim,
        "truth": packet.truth,
        "intensity": packet.intensity,
        "adoptedBy": list(packet.adopted_by),
    }


def _encode_assignment(entry: DayAssignment) -> dict[str, Any]:
    return {
        "day": entry.day,
        "label": entry.label,
        "scheduledDuty": entry.scheduled_duty.value,
        "scheduledShift": entry.scheduled_shift.value,
        "assignedDuty": entry.assigned_duty.value,
        "assignedShift": entry.assigned_shift.value,
        "disruption": {
            "type": entry.disruption.type.value,
            "chance": entry.disruption.chance,
            "reason": entry.disruption.reason,
            "extraDuty": _value(entry.disruption.extra_duty),
        },
        "resolved": entry.resolved,
        "eventTitle": entry.event_title,
        "summary": entry.summary,
    }


def _encode_card(card: NightEventCard) -> dict[str, Any]:
    return {
        "id": card.id,
        "sceneType": card.scene_type.value,
        "title": card.title,
        "outcome": card.outcome,
        "tags": [tag.value for tag in card.tags],
        "routeTemplates": list(card.route_templates),
        "basePlayerDelta": _delta(card.base_player_delta),
        "baseCampDelta": _delta(card.base_camp_delta),
        "observationPool": list(card.observation_pool),
    }


def _encode_scene(scene: Optional[NightScene]) -> Optional[dict[str, Any]]:
    if scene is None:
        return None
    return {
        "sceneType": scene.scene_type.value,
        "day": scene.day,
        "assignmentDuty": scene.assignment_duty.value,
        "routeDescription": scene.route_description,
        "presentedRouteDescription": scene.presented_route_description,
        "eventCard": _encode_card(scene.event_card),
        "presentedOutcome": scene.presented_outcome,
        "falsePerceptionOverlay": scene.false_perception_overlay,
        "distortionLevel": scene.distortion_level.value,
        "investigationActive": scene.investigation_active,
        "debriefReports": [encode_report(report) for report in scene.debrief_reports],
        "choices": [
            {
                "id": option.id,
                "label": option.label,
                "description": option.description,
                "playerDelta": _delta(option.player_delta),
                "campDelta": _delta(option.camp_delta),
                "logText": option.log_text,
            }
            for option in scene.choices
        ],
    }


def _encode_log(log: NightLog) -> dict[str, Any]:
    return {
        "day": log.day,
        "events": list(log.events),
        "dutyResolved": log.duty_resolved.value,
        "debriefChoice": _value(log.debrief_choice),
        "rumorReachCount": log.rumor_reach_count,
        "deltas": {"player": _delta(log.player_delta), "camp": _delta(log.camp_delta)},
        "reports": [encode_report(report) for report in log.reports],
        "rumorPackets": [encode_packet(packet) for packet in log.rumor_packets],
        "flags": list(log.flags),
    }


def _encode_hidden(hidden: HiddenState) -> dict[str, Any]:
    last = hidden.last_debrief
    return {
        "threatSeed": hidden.threat_seed.value,
        "investigationFocus": hidden.investigation_focus,
        "intenseStreak": hidden.intense_streak,
        "pendingAccusationConflict": hidden.pending_accusation_conflict,
        "rumorAdoption": {
            npc_id: {
                "adopted": node.adopted,
                "heardCount": node.heard_count,
                "spreadCount": node.spread_count,
                "lastHeardDay": node.last_heard_day,
            }
            for npc_id, node in hidden.rumor_adoption.items()
        },
        "lastDebrief": None
        if last is None
        else {
            "day": last.day,
            "choiceId": _value(last.choice_id),
            "reports": [encode_report(report) for report in last.reports],
            "packets": [encode_packet(packet) for packet in last.packets],
            "rumorReachCount": last.rumor_reach_count,
        },
    }


def encode_state(state: RunState) -> dict[str, Any]:
    dawn = state.dawn_report
    summary = state.week_summary
    return {
        "seed": state.seed,
        "week": state.week,
        "todayIndex": state.today_index,
        "schedule": [_encode_assignment(entry) for entry in state.schedule],
        "phase": state.phase.value,
        "activeNightScene": _encode_scene(state.active_night_scene),
        "dawnReport": None
        if dawn is None
        else {
            "day": dawn.day,
            "title": dawn.title,
            "summary": dawn.summary,
            "rumorReachCount": dawn.rumor_reach_count,
            "deltas": _delta(dawn.deltas),
        },
        "playerStats": state.player_stats.as_dict(),
        "campStats": state.camp_stats.as_dict(),
        "npcProfiles": [encode_profile(npc) for npc in state.npc_profiles],
        "nightLogs": [_encode_log(log) for log in state.night_logs],
        "recentEvents": list(state.recent_events),
        "todaySummary": state.today_summary,
        "weekSummary": None
        if summary is None
        else {
            "week": summary.week,
            "nightsSurvived": summary.nights_survived,
            "collapseIndicators": {
                "moraleLow": summary.collapse_indicators.morale_low,
                "disciplineLow": summary.collapse_indicators.discipline_low,
                "rumorHigh": summary.collapse_indicators.rumor_high,
            },
            "firstBreakLabel": summary.first_break_label,
            "shareText": summary.share_text,
        },
        "complete": state.complete,
        "hidden": _encode_hidden(state.hidden),
    }


# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------

def decode_report(model: PatrolReportModel) -> PatrolReport:
    """Build a report, backfilling fields older saves did not record."""

    primary = model.claimedObservations[0] if model.claimedObservations else NOTHING_UNUSUAL
    return PatrolReport(
        npc_id=model.npcId,
        npc_name=model.npcName or model.npcId,
        claimed_observations=tuple(model.claimedObservations) or (primary,),
        truth_observation=model.truthObservation or primary,
        presented_claim=model.presentedClaim or primary,
        confidence=float(model.confidence),
        emotion=ReportEmotion(model.emotion),
        is_lying=model.isLying,
    )


def decode_packet(model: RumorPacketModel) -> RumorPacket:
    return RumorPacket(
        id=model.id,
        day=model.day,
        source_npc_id=model.sourceNpcId,
        claim=model.claim,
        truth=model.truth,
        intensity=float(model.intensity),
        adopted_by=tuple(model.adoptedBy),
    )


def _decode_assignment(model: DayAssignmentModel) -> DayAssignment:
    disruption = model.disruption
    return DayAssignment(
        day=model.day,
        label=model.label,
        scheduled_duty=DutyType(model.scheduledDuty),
        scheduled_shift=ShiftType(model.scheduledShift),
        assigned_duty=DutyType(model.assignedDuty),
        assigned_shift=ShiftType(model.assignedShift),
        disruption=DailyDisruption(
            type=DisruptionType(disruption.type),
            chance=float(disruption.chance),
            reason=disruption.reason or None,
            extra_duty=DutyType(disruption.extraDuty) if disruption.extraDuty else None,
        ),
        resolved=model.resolved,
        event_title=model.eventTitle or None,
        summary=model.summary or None,
    )


def _decode_card(model: NightEventCardModel) -> NightEventCard:
    return NightEventCard(
        id=model.id,
        scene_type=SceneType(model.sceneType),
        title=model.title,
        outcome=model.outcome,
        tags=tuple(NightEventTag(tag) for tag in model.tags),
        route_templates=tuple(model.routeTemplates),
        base_player_delta=_model_delta(model.basePlayerDelta),
        base_camp_delta=_model_delta(model.baseCampDelta),
        observation_pool=tuple(model.observationPool),
    )


def _decode_option(model: NightDecisionOptionModel) -> NightDecisionOption:
    return NightDecisionOption(
        id=model.id,
        label=model.label,
        description=model.description,
        player_delta=_model_delta(model.playerDelta),
        camp_delta=_model_delta(model.campDelta),
        log_text=model.logText,
    )


def _decode_scene(model: Optional[NightSceneModel]) -> Optional[NightScene]:
    if model is None:
        return None
    card = _decode_card(model.eventCard)
    return NightScene(
        scene_type=SceneType(model.sceneType),
        day=model.day,
        assignment_duty=DutyType(model.assignmentDuty),
        route_description=model.routeDescription or None,
        presented_route_description=model.presentedRouteDescription or model.routeDescription or None,
        event_card=card,
        presented_outcome=model.presentedOutcome or card.outcome,
        false_perception_overlay=model.falsePerceptionOverlay or None,
        distortion_level=DistortionLevel(model.distortionLevel),
        investigation_active=bool(model.investigationActive),
        debrief_reports=tuple(decode_report(report) for report in model.debriefReports or ()),
        choices=tuple(_decode_option(option) for option in model.choices),
    )


def _decode_log(model: NightLogModel) -> NightLog:
    return NightLog(
        day=model.day,
        events=tuple(model.events),
        duty_resolved=DutyType(model.dutyResolved),
        debrief_choice=DebriefChoiceId(model.debriefChoice) if model.debriefChoice else None,
        rumor_reach_count=model.rumorReachCount or 0,
        player_delta=_model_delta(model.deltas.player),
        camp_delta=_model_delta(model.deltas.camp),
        reports=tuple(decode_report(report) for report in model.reports),
        rumor_packets=tuple(decode_packet(packet) for packet in model.rumorPackets or ()),
        flags=tuple(model.flags),
    )


def _decode_debrief(model: Optional[DebriefSnapshotModel]) -> Optional[DebriefSnapshot]:
    if model is None:
        return None
    return DebriefSnapshot(
        day=model.day,
        choice_id=DebriefChoiceId(model.choiceId) if model.choiceId else None,
        reports=tuple(decode_report(report) for report in model.reports),
        packets=tuple(decode_packet(packet) for packet in model.packets),
        rumor_reach_count=model.rumorReachCount,
    )


def decode_state(model: GameStateModel) -> RunState:
    """Build a validated snapshot from a parsed current-version payload.

    The rumor network is re-keyed to the roster, and a finished week saved
    without its summary gets one rebuilt from the night logs.
    """

    profiles = tuple(
        NPCProfile(
            id=npc.id,
            name=npc.name,
            loyalty=npc.loyalty,
            fear=npc.fear,
            belief=npc.belief,
            trust_in_player=npc.trustInPlayer,
            role=npc.role,
        )
        for npc in model.npcProfiles
    )
    adoption = {}
    for npc in profiles:
        prior = model.hidden.rumorAdoption.get(npc.id)
        adoption[npc.id] = (
            NpcRumorState(
                adopted=prior.adopted,
                heard_count=prior.heardCount,
                spread_count=prior.spreadCount,
                last_heard_day=prior.lastHeardDay,
            )
            if prior is not None
            else NpcRumorState()
        )
    hidden = HiddenState(
        threat_seed=ThreatSeed(model.hidden.threatSeed),
        investigation_focus=min(model.hidden.investigationFocus, MAX_INVESTIGATION_FOCUS),
        intense_streak=model.hidden.intenseStreak or 0,
        pending_accusation_conflict=model.hidden.pendingAccusationConflict,
        rumor_adoption=adoption,
        last_debrief=_decode_debrief(model.hidden.lastDebrief),
    )

    night_logs = tuple(_decode_log(log) for log in model.nightLogs)
    dawn = None
    if model.dawnReport is not None:
        reach = model.dawnReport.rumorReachCount
        if reach is None:
            reach = night_logs[-1].rumor_reach_count if night_logs else 0
        dawn = DawnReport(
            day=model.dawnReport.day,
            title=model.dawnReport.title,
            summary=model.dawnReport.summary,
            rumor_reach_count=reach,
            deltas=model.dawnReport.deltas.model_dump(),
        )

    summary = None
    if model.weekSummary is not None:
        indicators = model.weekSummary.collapseIndicators
        summary = WeekSummary(
            week=model.weekSummary.week,
            nights_survived=model.weekSummary.nightsSurvived,
            collapse_indicators=CollapseIndicators(
                morale_low=indicators.moraleLow,
                discipline_low=indicators.disciplineLow,
                rumor_high=indicators.rumorHigh,
            ),
            first_break_label=model.weekSummary.firstBreakLabel,
            share_text=model.weekSummary.shareText,
        )

    phase = DayPhase(model.phase)
    rebuild_summary = phase is DayPhase.WEEK_SUMMARY and summary is None
    state = RunState(
        seed=model.seed,
        week=model.week,
        today_index=model.todayIndex,
        schedule=tuple(_decode_assignment(entry) for entry in model.schedule),
        phase=DayPhase.DAY if rebuild_summary else phase,
        player_stats=PlayerStats(**model.playerStats.model_dump()),
        camp_stats=CampStats(**model.campStats.model_dump()),
        npc_profiles=profiles,
        hidden=hidden,
        active_night_scene=_decode_scene(model.activeNightScene),
        dawn_report=dawn,
        night_logs=night_logs,
        recent_events=tuple(model.recentEvents)[-RECENT_EVENT_LIMIT:],
        today_summary=model.todaySummary,
        week_summary=summary,
        complete=model.complete,
    )
    if rebuild_summary:
        state = state.evolve(phase=DayPhase.WEEK_SUMMARY, week_summary=build_week_summary(state))
    return state


def decode_payload(payload: Mapping[str, Any]) -> RunState:
    return decode_state(validate_payload(GameStateModel, payload))
