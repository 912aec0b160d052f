from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from lowborn.domain.models.validation import require_stat

PLAYER_STAT_KEYS = ("warmth", "stamina", "injury", "hunger", "sanity")
CAMP_STAT_KEYS = ("supplies", "morale", "discipline", "rumor")

StatDelta = Mapping[str, int]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_stat(value: int) -> int:
    return int(clamp(int(value), 0, 100))


def with_sign(value: int) -> str:
    if value > 0:
        return f"+{value}"
    return str(value)


def merge_deltas(keys: tuple[str, ...], *deltas: StatDelta) -> dict[str, int]:
    """Sum partial deltas field by field; every key is present in the result."""

    return {key: sum(int(delta.get(key, 0) or 0) for delta in deltas) for key in keys}


def merge_player_deltas(*deltas: StatDelta) -> dict[str, int]:
    return merge_deltas(PLAYER_STAT_KEYS, *deltas)


def merge_camp_deltas(*deltas: StatDelta) -> dict[str, int]:
    return merge_deltas(CAMP_STAT_KEYS, *deltas)


@dataclass(frozen=True)
class PlayerStats:
    warmth: int = 55
    stamina: int = 60
    injury: int = 8
    hunger: int = 35
    sanity: int = 55

    def __post_init__(self) -> None:
        for item in fields(self):
            require_stat(f"player.{item.name}", getattr(self, item.name))

    def apply(self, delta: StatDelta) -> "PlayerStats":
        return PlayerStats(
            **{key: clamp_stat(getattr(self, key) + int(delta.get(key, 0) or 0)) for key in PLAYER_STAT_KEYS}
        )

    def as_dict(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in PLAYER_STAT_KEYS}


@dataclass(frozen=True)
class CampStats:
    supplies: int = 50
    morale: int = 50
    discipline: int = 50
    rumor: int = 25

    def __post_init__(self) -> None:
        for item in fields(self):
            require_stat(f"camp.{item.name}", getattr(self, item.name))

    def apply(self, delta: StatDelta) -> "CampStats":
        return CampStats(
            **{key: clamp_stat(getattr(self, key) + int(delta.get(key, 0) or 0)) for key in CAMP_STAT_KEYS}
        )

    def as_dict(self) -> dict[str, int]:
        return {key: getattr(self, key) for key in CAMP_STAT_KEYS}


BASE_PLAYER_STATS = PlayerStats()
BASE_CAMP_STATS = CampStats()


def player_stats_from_mapping(values: Mapping[str, Any] | None) -> PlayerStats:
    raw = values or {}
    return PlayerStats(**{key: raw[key] for key in PLAYER_STAT_KEYS if key in raw})


def camp_stats_from_mapping(values: Mapping[str, Any] | None) -> CampStats:
    raw = values or {}
    return CampStats(**{key: raw[key] for key in CAMP_STAT_KEYS if key in raw})
