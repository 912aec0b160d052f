from dataclasses import dataclass
from typing import Optional


@dataclass
class NightBegan:
    seed: str
    day: int
    scene_type: str
    event_title: str


@dataclass
class NightResolved:
    seed: str
    day: int
    choice_id: str
    rumor_reach_count: int
    flags: tuple


@dataclass
class DayStarted:
    seed: str
    day: int
    assigned_duty: str
    assigned_shift: str
    disruption_type: str


@dataclass
class WeekCompleted:
    seed: str
    week: int
    nights_survived: int
    first_break_label: str
    save_slot: Optional[str] = None
