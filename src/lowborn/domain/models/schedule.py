from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.validation import (
    require_enum,
    require_int,
    require_optional_text,
    require_text,
    require_unit_float,
)


class DutyType(str, Enum):
    PATROL = "PATROL"
    CAMP_WORK = "CAMP_WORK"
    CAMP_WAIT = "CAMP_WAIT"
    NIGHT_WATCH = "NIGHT_WATCH"
    REST = "REST"


class ShiftType(str, Enum):
    DAWN = "DAWN"
    DAY = "DAY"
    DUSK = "DUSK"
    NIGHT = "NIGHT"


class DisruptionType(str, Enum):
    NONE = "NONE"
    FILL_IN_PATROL = "FILL_IN_PATROL"
    SWAP = "SWAP"
    EXTRA_DUTY = "EXTRA_DUTY"


DAY_LABELS = (
    "Day 1 - Frostwake",
    "Day 2 - Longwind",
    "Day 3 - Coldreach",
    "Day 4 - Ironveil",
    "Day 5 - Ashrest",
    "Day 6 - Graywatch",
    "Day 7 - Last Ember",
)

WEEK_LENGTH = len(DAY_LABELS)


@dataclass(frozen=True)
class DailyDisruption:
    type: DisruptionType = DisruptionType.NONE
    chance: float = 0.0
    reason: Optional[str] = None
    extra_duty: Optional[DutyType] = None

    def __post_init__(self) -> None:
        require_enum("disruption.type", self.type, DisruptionType)
        require_unit_float("disruption.chance", self.chance)
        require_optional_text("disruption.reason", self.reason)
        if self.extra_duty is not None:
            require_enum("disruption.extra_duty", self.extra_duty, DutyType)
        if self.type is DisruptionType.NONE and self.extra_duty is not None:
            raise StateValidationError("A NONE disruption cannot carry an extra duty.")
        if self.type is DisruptionType.EXTRA_DUTY and self.extra_duty is not DutyType.NIGHT_WATCH:
            raise StateValidationError("EXTRA_DUTY disruptions must post NIGHT_WATCH.")


def no_disruption(chance: float = 0.0) -> DailyDisruption:
    return DailyDisruption(type=DisruptionType.NONE, chance=chance)


@dataclass(frozen=True)
class DayAssignment:
    day: int
    label: str
    scheduled_duty: DutyType
    scheduled_shift: ShiftType
    assigned_duty: DutyType
    assigned_shift: ShiftType
    disruption: DailyDisruption = field(default_factory=no_disruption)
    resolved: bool = False
    event_title: Optional[str] = None
    summary: Optional[str] = None

    def __post_init__(self) -> None:
        require_int("assignment.day", self.day, 1, WEEK_LENGTH)
        require_text("assignment.label", self.label)
        require_enum("assignment.scheduled_duty", self.scheduled_duty, DutyType)
        require_enum("assignment.assigned_duty", self.assigned_duty, DutyType)
        require_enum("assignment.scheduled_shift", self.scheduled_shift, ShiftType)
        require_enum("assignment.assigned_shift", self.assigned_shift, ShiftType)
        if not isinstance(self.disruption, DailyDisruption):
            raise StateValidationError("assignment.disruption must be a DailyDisruption.")
        if not isinstance(self.resolved, bool):
            raise StateValidationError("assignment.resolved must be a boolean.")
        require_optional_text("assignment.event_title", self.event_title)
        require_optional_text("assignment.summary", self.summary)
        self._check_disruption_fit()

    def _check_disruption_fit(self) -> None:
        kind = self.disruption.type
        scheduled_patrol = self.scheduled_duty is DutyType.PATROL
        assigned_patrol = self.assigned_duty is DutyType.PATROL
        if kind in (DisruptionType.NONE, DisruptionType.EXTRA_DUTY):
            if self.assigned_duty is not self.scheduled_duty:
                raise StateValidationError(
                    f"Day {self.day}: a {kind.value} disruption keeps the scheduled duty "
                    f"({self.scheduled_duty.value}), not {self.assigned_duty.value}."
                )
            if kind is DisruptionType.EXTRA_DUTY and self.scheduled_duty is DutyType.NIGHT_WATCH:
                raise StateValidationError(f"Day {self.day}: EXTRA_DUTY cannot stack on a scheduled NIGHT_WATCH.")
        elif kind is DisruptionType.FILL_IN_PATROL:
            if scheduled_patrol or not assigned_patrol:
                raise StateValidationError(
                    f"Day {self.day}: FILL_IN_PATROL moves a non-patrol duty onto PATROL."
                )
        elif scheduled_patrol == assigned_patrol:
            raise StateValidationError(f"Day {self.day}: SWAP must trade PATROL for camp duty or back.")

    @property
    def has_extra_watch(self) -> bool:
        return self.disruption.extra_duty is DutyType.NIGHT_WATCH


def require_week_schedule(schedule: object) -> None:
    if not isinstance(schedule, tuple) or len(schedule) != WEEK_LENGTH:
        raise StateValidationError(f"Week schedule must contain exactly {WEEK_LENGTH} assignments.")
    for index, entry in enumerate(schedule):
        if not isinstance(entry, DayAssignment):
            raise StateValidationError("Week schedule entries must be DayAssignment values.")
        if entry.day != index + 1:
            raise StateValidationError(f"Schedule slot {index} holds day {entry.day}; days must run 1-7 in order.")
