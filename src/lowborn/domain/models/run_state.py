from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional

from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.night import DawnReport, DebriefSnapshot, NightLog, NightScene
from lowborn.domain.models.npc import NPCProfile, NpcRumorState, require_unique_roster
from lowborn.domain.models.schedule import DayAssignment, WEEK_LENGTH, require_week_schedule
from lowborn.domain.models.stats import CampStats, PlayerStats
from lowborn.domain.models.validation import require_enum, require_int, require_text, require_tuple

RECENT_EVENT_LIMIT = 120


class DayPhase(str, Enum):
    DAY = "DAY"
    NIGHT_SCENE = "NIGHT_SCENE"
    DAWN_REPORT = "DAWN_REPORT"
    WEEK_SUMMARY = "WEEK_SUMMARY"


class ThreatSeed(str, Enum):
    REAL = "REAL"
    EXAGGERATED = "EXAGGERATED"
    NONE = "NONE"


@dataclass(frozen=True)
class CollapseIndicators:
    morale_low: bool
    discipline_low: bool
    rumor_high: bool


@dataclass(frozen=True)
class WeekSummary:
    week: int
    nights_survived: int
    collapse_indicators: CollapseIndicators
    first_break_label: str
    share_text: str

    def __post_init__(self) -> None:
        require_int("summary.week", self.week, 1, 9999)
        require_int("summary.nights_survived", self.nights_survived, 0, WEEK_LENGTH)
        require_text("summary.first_break_label", self.first_break_label)
        require_text("summary.share_text", self.share_text)


@dataclass(frozen=True)
class HiddenState:
    """Simulation truth the player never sees directly."""

    threat_seed: ThreatSeed
    investigation_focus: int = 0
    intense_streak: int = 0
    pending_accusation_conflict: bool = False
    rumor_adoption: Mapping[str, NpcRumorState] = field(default_factory=dict)
    last_debrief: Optional[DebriefSnapshot] = None

    def __post_init__(self) -> None:
        require_enum("hidden.threat_seed", self.threat_seed, ThreatSeed)
        require_int("hidden.investigation_focus", self.investigation_focus, 0, 3)
        require_int("hidden.intense_streak", self.intense_streak, 0, WEEK_LENGTH)
        if not isinstance(self.pending_accusation_conflict, bool):
            raise StateValidationError("hidden.pending_accusation_conflict must be a boolean.")
        for npc_id, node in self.rumor_adoption.items():
            if not isinstance(node, NpcRumorState):
                raise StateValidationError(f"hidden.rumor_adoption[{npc_id!r}] must be an NpcRumorState.")
        if self.last_debrief is not None and not isinstance(self.last_debrief, DebriefSnapshot):
            raise StateValidationError("hidden.last_debrief must be a DebriefSnapshot or None.")


def fresh_rumor_network(profiles: tuple[NPCProfile, ...]) -> dict[str, NpcRumorState]:
    return {npc.id: NpcRumorState() for npc in profiles}


@dataclass(frozen=True)
class RunState:
    """Immutable snapshot of one seven-day run.

    The phase tag and its payloads are checked together: an active scene
    exists only during NIGHT_SCENE, a dawn report only during DAWN_REPORT
    and a week summary only during WEEK_SUMMARY.
    """

    seed: str
    week: int
    today_index: int
    schedule: tuple[DayAssignment, ...]
    phase: DayPhase
    player_stats: PlayerStats
    camp_stats: CampStats
    npc_profiles: tuple[NPCProfile, ...]
    hidden: HiddenState
    active_night_scene: Optional[NightScene] = None
    dawn_report: Optional[DawnReport] = None
    night_logs: tuple[NightLog, ...] = ()
    recent_events: tuple[str, ...] = ()
    today_summary: str = ""
    week_summary: Optional[WeekSummary] = None
    complete: bool = False

    def __post_init__(self) -> None:
        require_text("state.seed", self.seed)
        require_int("state.week", self.week, 1, 9999)
        require_int("state.today_index", self.today_index, 0, WEEK_LENGTH - 1)
        require_week_schedule(self.schedule)
        require_enum("state.phase", self.phase, DayPhase)
        if not isinstance(self.player_stats, PlayerStats) or not isinstance(self.camp_stats, CampStats):
            raise StateValidationError("state stats must be PlayerStats and CampStats values.")
        require_tuple("state.npc_profiles", self.npc_profiles)
        require_unique_roster(self.npc_profiles)
        if not isinstance(self.hidden, HiddenState):
            raise StateValidationError("state.hidden must be a HiddenState.")
        require_tuple("state.night_logs", self.night_logs)
        if len(self.night_logs) > WEEK_LENGTH:
            raise StateValidationError(f"A week holds at most {WEEK_LENGTH} night logs.")
        require_tuple("state.recent_events", self.recent_events)
        if len(self.recent_events) > RECENT_EVENT_LIMIT:
            raise StateValidationError(f"state.recent_events is capped at {RECENT_EVENT_LIMIT} entries.")
        if not isinstance(self.complete, bool):
            raise StateValidationError("state.complete must be a boolean.")
        self._check_phase_payloads()

    def _check_phase_payloads(self) -> None:
        expected = {
            "active_night_scene": self.phase is DayPhase.NIGHT_SCENE,
            "dawn_report": self.phase is DayPhase.DAWN_REPORT,
            "week_summary": self.phase is DayPhase.WEEK_SUMMARY,
        }
        for name, required in expected.items():
            present = getattr(self, name) is not None
            if present != required:
                state = "requires" if required else "forbids"
                raise StateValidationError(f"Phase {self.phase.value} {state} {name}.")

    @property
    def today(self) -> DayAssignment:
        return self.schedule[self.today_index]

    def evolve(self, **changes) -> "RunState":
        return replace(self, **changes)

    def with_events(self, *lines: str) -> tuple[str, ...]:
        """Return ``recent_events`` extended by the non-empty lines, capped."""

        merged = self.recent_events + tuple(line for line in lines if line)
        return merged[-RECENT_EVENT_LIMIT:]
