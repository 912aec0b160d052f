from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from lowborn.domain.models.night import NightLog
from lowborn.domain.models.run_state import RunState
from lowborn.domain.models.schedule import DisruptionType, WEEK_LENGTH
from lowborn.domain.models.stats import with_sign

PENDING = "Pending"

DELTA_ABBREVIATIONS = (
    ("camp", "supplies", "Sup"),
    ("camp", "morale", "Mor"),
    ("camp", "discipline", "Dis"),
    ("camp", "rumor", "Rum"),
    ("player", "warmth", "Warm"),
    ("player", "stamina", "Sta"),
    ("player", "sanity", "San"),
    ("player", "injury", "Inj"),
)


@dataclass(frozen=True)
class JournalDayEntry:
    day: int
    label: str
    assignment: str
    disruption: str
    night_summary: str
    dawn_delta_summary: str


def summarize_log_deltas(log: Optional[NightLog]) -> str:
    if log is None:
        return PENDING
    groups = {"camp": log.camp_delta, "player": log.player_delta}
    return " | ".join(
        f"{short} {with_sign(int(groups[group].get(key, 0)))}" for group, key, short in DELTA_ABBREVIATIONS
    )


def build_run_journal_entries(state: RunState) -> list[JournalDayEntry]:
    logs_by_day = {log.day: log for log in state.night_logs}
    entries = []
    for assignment in state.schedule:
        disruption = assignment.disruption
        if disruption.type is DisruptionType.NONE:
            disruption_text = "None"
        else:
            disruption_text = disruption.reason or disruption.type.value
        entries.append(
            JournalDayEntry(
                day=assignment.day,
                label=assignment.label,
                assignment=f"{assignment.assigned_duty.value} / {assignment.assigned_shift.value}",
                disruption=disruption_text,
                night_summary=assignment.summary or PENDING,
                dawn_delta_summary=summarize_log_deltas(logs_by_day.get(assignment.day)),
            )
        )
    return entries


def build_shareable_run_text(state: RunState) -> str:
    camp = state.camp_stats
    player = state.player_stats
    lines = [
        "Lowborn Run Journal",
        f"Seed: {state.seed}",
        f"Week: {state.week} | Phase: {state.phase.value} | Nights resolved: {len(state.night_logs)}/{WEEK_LENGTH}",
        f"Camp: supplies {camp.supplies}, morale {camp.morale}, discipline {camp.discipline}, rumor {camp.rumor}",
        f"Player: warmth {player.warmth}, stamina {player.stamina}, sanity {player.sanity}, injury {player.injury}",
        "",
        "Daily Journal:",
    ]
    for entry in build_run_journal_entries(state):
        lines.extend(
            [
                f"Day {entry.day} ({entry.label})",
                f"  Assignment: {entry.assignment}",
                f"  Disruption: {entry.disruption}",
                f"  Night: {entry.night_summary}",
                f"  Dawn deltas: {entry.dawn_delta_summary}",
            ]
        )
    if state.week_summary is not None:
        lines.extend(["", "Week Summary:", state.week_summary.share_text])
    return "\n".join(lines)
