from __future__ import annotations

from typing import Optional

from lowborn.application.services import balance_tables as tables
from lowborn.domain.models.run_state import CollapseIndicators, RunState, WeekSummary
from lowborn.domain.models.schedule import WEEK_LENGTH
from lowborn.domain.models.stats import BASE_CAMP_STATS, BASE_PLAYER_STATS


def _tripped(value: int, direction: str, threshold: int) -> bool:
    if direction == "low":
        return value <= threshold
    return value >= threshold


def detect_first_break(state: RunState) -> tuple[str, Optional[int]]:
    """Replay the night logs from base stats and report the first threshold hit."""

    stats = {"player": BASE_PLAYER_STATS, "camp": BASE_CAMP_STATS}
    for log in sorted(state.night_logs, key=lambda entry: entry.day):
        stats = {
            "player": stats["player"].apply(log.player_delta),
            "camp": stats["camp"].apply(log.camp_delta),
        }
        for group, stat, direction, threshold, label in tables.COLLAPSE_CHECKS:
            if _tripped(getattr(stats[group], stat), direction, threshold):
                return label, log.day
    return tables.NO_COLLAPSE_LABEL, None


def collapse_indicators(state: RunState) -> CollapseIndicators:
    camp = state.camp_stats
    return CollapseIndicators(
        morale_low=camp.morale <= 35,
        discipline_low=camp.discipline <= 35,
        rumor_high=camp.rumor >= 65,
    )


def build_week_share_text(state: RunState, first_break_label: str) -> str:
    camp = state.camp_stats
    player = state.player_stats
    indicators = collapse_indicators(state)
    indicator_text = ", ".join(
        [
            f"morale {'LOW' if indicators.morale_low else 'steady'} ({camp.morale})",
            f"discipline {'LOW' if indicators.discipline_low else 'steady'} ({camp.discipline})",
            f"rumor {'HIGH' if indicators.rumor_high else 'contained'} ({camp.rumor})",
        ]
    )
    return "\n".join(
        [
            f"Lowborn Week {state.week} Summary",
            f"Seed: {state.seed}",
            f"Nights survived: {len(state.night_logs)}/{WEEK_LENGTH}",
            f"Collapse indicators: {indicator_text}",
            f"What broke first: {first_break_label}",
            f"Final camp -> supplies {camp.supplies}, morale {camp.morale}, "
            f"discipline {camp.discipline}, rumor {camp.rumor}",
            f"Final player -> warmth {player.warmth}, stamina {player.stamina}, "
            f"sanity {player.sanity}, injury {player.injury}",
        ]
    )


def build_week_summary(state: RunState) -> WeekSummary:
    label, day = detect_first_break(state)
    first_break_label = f"{label} on Day {day}" if day else label
    return WeekSummary(
        week=state.week,
        nights_survived=len(state.night_logs),
        collapse_indicators=collapse_indicators(state),
        first_break_label=first_break_label,
        share_text=build_week_share_text(state, first_break_label),
    )
