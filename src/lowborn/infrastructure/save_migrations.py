"""Recognise saved payloads by version and upgrade them to the current shape.

Each legacy envelope is upgraded to a current-shape payload dict, then
decoded through the same path as a fresh save. Anything no envelope model
accepts, or that decodes to an invalid snapshot, is a miss.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import ValidationError

from lowborn.application.services.npc_roster import build_npc_profiles, pick_threat_seed
from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.run_state import RunState, ThreatSeed
from lowborn.domain.models.schedule import DutyType, ShiftType, WEEK_LENGTH
from lowborn.domain.models.stats import CAMP_STAT_KEYS, PLAYER_STAT_KEYS, clamp
from lowborn.infrastructure.save_schema import (
    GameStateModel,
    SaveEnvelopeV1,
    SaveEnvelopeV2,
    SaveEnvelopeV3,
    SaveEnvelopeV4,
    SaveEnvelopeV5,
    SaveEnvelopeV6,
    validate_payload,
)
from lowborn.infrastructure.state_codec import decode_payload, decode_state, encode_profile, encode_state

logger = logging.getLogger(__name__)

CURRENT_SAVE_VERSION = 6

LEGACY_SHIFT_ROTATION = (ShiftType.DAWN, ShiftType.DAY, ShiftType.DUSK)
LEGACY_CAMP_DUTIES = (DutyType.CAMP_WORK, DutyType.CAMP_WAIT, DutyType.REST)
LEGACY_LOG_EVENT = "Legacy log entry"
LEGACY_DAWN_SUMMARY = "Migrated report: review stats before starting next day."


@dataclass(frozen=True)
class MigrationResult:
    state: RunState
    migrated: bool


def normalize_threat_seed(value: Any) -> str:
    known = {seed.value for seed in ThreatSeed}
    return value if value in known else ThreatSeed.NONE.value


def map_legacy_duty(duty: str, seed_key: str) -> str:
    """Old saves only knew PATROL and CAMP; camp days spread over the newer camp duties."""

    if duty == "PATROL":
        return DutyType.PATROL.value
    return LEGACY_CAMP_DUTIES[len(seed_key) % len(LEGACY_CAMP_DUTIES)].value


def _clamp_day(day: int) -> int:
    return int(clamp(day, 1, WEEK_LENGTH))


def _pick_deltas(values: Optional[Mapping[str, Any]], keys: Iterable[str]) -> dict[str, int]:
    values = values or {}
    return {key: values[key] for key in keys if values.get(key) is not None}


def _no_disruption() -> dict[str, Any]:
    return {"type": "NONE", "chance": 0, "reason": None, "extraDuty": None}


def normalize_night_logs(logs: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    normalized = []
    for log in logs:
        deltas = log.get("deltas") or {}
        normalized.append(
            {
                "day": _clamp_day(log.get("day") or 1),
                "events": list(log.get("events") or [LEGACY_LOG_EVENT]),
                "dutyResolved": log.get("dutyResolved") or DutyType.CAMP_WAIT.value,
                "debriefChoice": log.get("debriefChoice"),
                "rumorReachCount": log.get("rumorReachCount") or 0,
                "deltas": {
                    "player": _pick_deltas(deltas.get("player"), PLAYER_STAT_KEYS),
                    "camp": _pick_deltas(deltas.get("camp"), CAMP_STAT_KEYS),
                },
                "reports": list(log.get("reports") or []),
                "rumorPackets": list(log.get("rumorPackets") or []),
                "flags": list(log.get("flags") or []),
            }
        )
    return normalized


def build_legacy_dawn_report(day: int, log: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    camp = (log or {}).get("deltas", {}).get("camp", {})
    player = (log or {}).get("deltas", {}).get("player", {})
    return {
        "day": day,
        "title": f"Dawn Report - Day {day}",
        "summary": LEGACY_DAWN_SUMMARY,
        "rumorReachCount": (log or {}).get("rumorReachCount") or 0,
        "deltas": {
            "supplies": camp.get("supplies", 0),
            "morale": camp.get("morale", 0),
            "discipline": camp.get("discipline", 0),
            "rumor": camp.get("rumor", 0),
            "warmth": player.get("warmth", 0),
            "stamina": player.get("stamina", 0),
            "sanity": player.get("sanity", 0),
            "injury": player.get("injury", 0),
        },
    }


def map_legacy_phase(
    phase: str, complete: bool, day: int, logs: list[dict[str, Any]]
) -> tuple[str, Optional[dict[str, Any]]]:
    if complete or phase != "NIGHT":
        return "DAY", None
    latest = next((log for log in logs if log["day"] == day), logs[-1] if logs else None)
    return "DAWN_REPORT", build_legacy_dawn_report(day, latest)


def _finalize(payload: dict[str, Any]) -> RunState:
    logs = normalize_night_logs(payload.get("nightLogs") or [])
    dawn = payload.get("dawnReport")
    if dawn is not None and dawn.get("rumorReachCount") is None:
        dawn = {**dawn, "rumorReachCount": logs[-1]["rumorReachCount"] if logs else 0}
    hidden = dict(payload.get("hidden") or {})
    hidden["threatSeed"] = normalize_threat_seed(hidden.get("threatSeed") or pick_threat_seed(payload["seed"]).value)
    return decode_payload(
        {
            **payload,
            "nightLogs": logs,
            "dawnReport": dawn,
            "weekSummary": payload.get("weekSummary"),
            "recentEvents": [line for line in payload.get("recentEvents") or [] if line],
            "hidden": hidden,
        }
    )


def migrate_from_v5(envelope: SaveEnvelopeV5) -> RunState:
    game = envelope.gameState.model_dump(mode="json")
    if game["hidden"].get("intenseStreak") is None:
        game["hidden"]["intenseStreak"] = 0
    return _finalize(game)


def migrate_from_v4(envelope: SaveEnvelopeV4) -> RunState:
    game = envelope.gameState.model_dump(mode="json")
    scene = game.get("activeNightScene")
    if scene is not None:
        scene["investigationActive"] = bool(scene.get("investigationActive"))
        scene["debriefReports"] = scene.get("debriefReports") or []
    game["hidden"] = {"threatSeed": normalize_threat_seed(game["hidden"]["threatSeed"])}
    return _finalize(game)


def migrate_from_v3(envelope: SaveEnvelopeV3) -> RunState:
    game = envelope.gameState.model_dump(mode="json")
    logs = normalize_night_logs(game["nightLogs"])
    day = _clamp_day(game["todayIndex"] + 1)
    phase, dawn = map_legacy_phase(game["phase"], game["complete"], day, logs)
    return _finalize(
        {
            **game,
            "phase": phase,
            "activeNightScene": None,
            "dawnReport": dawn,
            "nightLogs": logs,
            "hidden": {"threatSeed": normalize_threat_seed(game["hidden"]["threatSeed"])},
        }
    )


def migrate_from_v2(envelope: SaveEnvelopeV2) -> RunState:
    game = envelope.gameState
    today_index = int(clamp(game.day - 1, 0, WEEK_LENGTH - 1))
    schedule = []
    for entry in game.weekSchedule:
        duty = map_legacy_duty(entry.dutyType, f"{game.seed}:legacy-v2:day:{entry.day}")
        schedule.append(
            {
                "day": entry.day,
                "label": entry.label,
                "scheduledDuty": duty,
                "scheduledShift": entry.shift,
                "assignedDuty": duty,
                "assignedShift": entry.shift,
                "disruption": _no_disruption(),
                "resolved": entry.resolved,
                "eventTitle": entry.eventTitle,
                "summary": entry.summary,
            }
        )

    logs = normalize_night_logs(
        {
            "day": log.day,
            "events": log.events,
            "dutyResolved": schedule[_clamp_day(log.day) - 1]["assignedDuty"],
            "deltas": {"player": dict(log.deltas.player), "camp": dict(log.deltas.camp)},
            "reports": [report.model_dump(mode="json") for report in log.reports],
            "flags": log.flags or [f"LEGACY_LOG_{index + 1}"],
        }
        for index, log in enumerate(game.nightLogs)
    )
    show_dawn = not game.complete and schedule[today_index]["resolved"]

    return _finalize(
        {
            "seed": game.seed,
            "week": game.week,
            "todayIndex": today_index,
            "schedule": schedule,
            "phase": "DAWN_REPORT" if show_dawn else "DAY",
            "activeNightScene": None,
            "dawnReport": build_legacy_dawn_report(game.day, logs[-1] if logs else None) if show_dawn else None,
            "playerStats": game.playerStats.model_dump(),
            "campStats": game.campStats.model_dump(),
            "npcProfiles": [npc.model_dump() for npc in game.npcProfiles],
            "nightLogs": logs,
            "recentEvents": game.recentEvents,
            "todaySummary": game.todaySummary,
            "complete": game.complete,
            "hidden": {"threatSeed": normalize_threat_seed(game.hidden.threatSeed)},
        }
    )


def migrate_from_v1(envelope: SaveEnvelopeV1) -> RunState:
    snapshot = envelope.snapshot
    stats = snapshot.stats
    schedule = []
    for index, entry in enumerate(snapshot.schedule):
        duty = map_legacy_duty(entry.plannedDuty, f"{snapshot.seed}:legacy-v1:day:{entry.day}")
        shift = LEGACY_SHIFT_ROTATION[index % len(LEGACY_SHIFT_ROTATION)].value
        schedule.append(
            {
                "day": entry.day,
                "label": entry.label,
                "scheduledDuty": duty,
                "scheduledShift": shift,
                "assignedDuty": duty,
                "assignedShift": shift,
                "disruption": _no_disruption(),
                "resolved": entry.resolved,
                "eventTitle": entry.eventTitle,
                "summary": entry.summary,
            }
        )

    return _finalize(
        {
            "seed": snapshot.seed,
            "week": snapshot.week,
            "todayIndex": int(clamp(snapshot.day - 1, 0, WEEK_LENGTH - 1)),
            "schedule": schedule,
            "phase": "DAY",
            "activeNightScene": None,
            "dawnReport": None,
            "playerStats": {
                "warmth": stats.warmth,
                "stamina": stats.stamina,
                "injury": max(0, 100 - stats.stamina),
                "hunger": max(0, 100 - stats.supplies),
                "sanity": stats.sanity,
            },
            "campStats": {
                "supplies": stats.supplies,
                "morale": stats.morale,
                "discipline": stats.discipline,
                "rumor": stats.rumor,
            },
            "npcProfiles": [encode_profile(npc) for npc in build_npc_profiles(snapshot.seed)],
            "nightLogs": [],
            "recentEvents": snapshot.log,
            "todaySummary": snapshot.todaySummary,
            "complete": snapshot.complete,
            "hidden": {"threatSeed": pick_threat_seed(snapshot.seed).value},
        }
    )


MIGRATION_CHAIN: tuple[tuple[type, Callable[[Any], RunState], bool], ...] = (
    (SaveEnvelopeV6, lambda envelope: decode_state(envelope.gameState), False),
    (SaveEnvelopeV5, migrate_from_v5, True),
    (SaveEnvelopeV4, migrate_from_v4, True),
    (SaveEnvelopeV3, migrate_from_v3, True),
    (SaveEnvelopeV2, migrate_from_v2, True),
    (SaveEnvelopeV1, migrate_from_v1, True),
)


def migrate_save_payload(raw: Any) -> Optional[MigrationResult]:
    for envelope_model, upgrade, migrated in MIGRATION_CHAIN:
        try:
            envelope = envelope_model.model_validate(raw)
        except ValidationError:
            continue
        try:
            state = upgrade(envelope)
        except StateValidationError:
            logger.warning("Save payload matched %s but could not be upgraded", envelope_model.__name__, exc_info=True)
            return None
        return MigrationResult(state=state, migrated=migrated)
    return None


def to_save_envelope(state: RunState) -> dict[str, Any]:
    game_state = encode_state(state)
    validate_payload(GameStateModel, game_state)
    return {
        "version": CURRENT_SAVE_VERSION,
        "savedAt": datetime.now(timezone.utc).isoformat(),
        "gameState": game_state,
    }


def read_save_text(raw_text: Optional[str]) -> Optional[MigrationResult]:
    """Parse stored JSON text; unreadable text is treated as an empty slot."""
    if not raw_text:
        return None
    try:
        payload = json.loads(raw_text)
    except ValueError:
        logger.warning("Stored save is not valid JSON; ignoring it")
        return None
    return migrate_save_payload(payload)


def write_save_text(state: RunState) -> str:
    return json.dumps(to_save_envelope(state), separators=(",", ":"))
