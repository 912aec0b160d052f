from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.schedule import DutyType
from lowborn.domain.models.stats import CAMP_STAT_KEYS, PLAYER_STAT_KEYS
from lowborn.domain.models.validation import (
    require_delta,
    require_enum,
    require_int,
    require_optional_text,
    require_text,
    require_tuple,
    require_unit_float,
)


class SceneType(str, Enum):
    PATROL = "PATROL"
    CAMP = "CAMP"


class NightEventTag(str, Enum):
    MUNDANE = "mundane"
    AMBIGUOUS = "ambiguous"
    HAZARD = "hazard"
    INTERNAL = "internal"
    SHOCK = "shock"


INTENSE_TAGS = frozenset({NightEventTag.HAZARD, NightEventTag.INTERNAL, NightEventTag.SHOCK})


class ReportEmotion(str, Enum):
    STEADY = "STEADY"
    ANXIOUS = "ANXIOUS"
    DEFIANT = "DEFIANT"
    PANICKED = "PANICKED"


class DistortionLevel(str, Enum):
    NONE = "NONE"
    UNEASY = "UNEASY"
    SEVERE = "SEVERE"


class DebriefChoiceId(str, Enum):
    ESCALATE_COMMANDER = "ESCALATE_COMMANDER"
    DOWNPLAY = "DOWNPLAY"
    INVESTIGATE_QUIETLY = "INVESTIGATE_QUIETLY"
    ACCUSE_LIAR = "ACCUSE_LIAR"


@dataclass(frozen=True)
class PatrolReport:
    """One NPC's testimony.

    ``claimed_observations`` and ``presented_claim`` are player-facing;
    ``truth_observation`` and ``is_lying`` are hidden simulation truth and
    must never be rendered directly. ``is_lying`` marks intent only: a
    mistaken reporter can also claim something other than the truth.
    """

    npc_id: str
    npc_name: str
    claimed_observations: tuple[str, ...]
    truth_observation: str
    presented_claim: str
    confidence: float
    emotion: ReportEmotion
    is_lying: bool

    def __post_init__(self) -> None:
        require_text("report.npc_id", self.npc_id)
        require_text("report.npc_name", self.npc_name)
        require_tuple("report.claimed_observations", self.claimed_observations, min_length=1)
        require_text("report.truth_observation", self.truth_observation)
        require_text("report.presented_claim", self.presented_claim)
        require_unit_float("report.confidence", self.confidence)
        require_enum("report.emotion", self.emotion, ReportEmotion)
        if not isinstance(self.is_lying, bool):
            raise StateValidationError("report.is_lying must be a boolean.")

    @property
    def claim(self) -> str:
        return self.claimed_observations[0]

    @property
    def is_truthful(self) -> bool:
        return self.claim == self.truth_observation


@dataclass(frozen=True)
class RumorPacket:
    id: str
    day: int
    source_npc_id: str
    claim: str
    truth: str
    intensity: float
    adopted_by: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_text("packet.id", self.id)
        require_int("packet.day", self.day, 1, 7)
        require_text("packet.source_npc_id", self.source_npc_id)
        require_text("packet.claim", self.claim)
        require_text("packet.truth", self.truth)
        require_unit_float("packet.intensity", self.intensity)
        require_tuple("packet.adopted_by", self.adopted_by)


@dataclass(frozen=True)
class NightEventCard:
    id: str
    scene_type: SceneType
    title: str
    outcome: str
    tags: tuple[NightEventTag, ...]
    route_templates: tuple[str, ...]
    base_player_delta: Mapping[str, int] = field(default_factory=dict)
    base_camp_delta: Mapping[str, int] = field(default_factory=dict)
    observation_pool: tuple[str, ...] = ("nothing unusual",)

    def __post_init__(self) -> None:
        require_text("card.id", self.id)
        require_enum("card.scene_type", self.scene_type, SceneType)
        require_text("card.title", self.title)
        require_text("card.outcome", self.outcome)
        require_tuple("card.tags", self.tags, min_length=1)
        for tag in self.tags:
            require_enum("card.tags", tag, NightEventTag)
        require_tuple("card.route_templates", self.route_templates, min_length=1)
        require_delta("card.base_player_delta", self.base_player_delta, PLAYER_STAT_KEYS)
        require_delta("card.base_camp_delta", self.base_camp_delta, CAMP_STAT_KEYS)
        require_tuple("card.observation_pool", self.observation_pool, min_length=1)

    def has_tag(self, tag: NightEventTag) -> bool:
        return tag in self.tags

    @property
    def is_intense(self) -> bool:
        return any(tag in INTENSE_TAGS for tag in self.tags)

    @property
    def is_calm(self) -> bool:
        return self.has_tag(NightEventTag.MUNDANE) and not self.is_intense


@dataclass(frozen=True)
class NightDecisionOption:
    id: str
    label: str
    description: str
    player_delta: Mapping[str, int]
    camp_delta: Mapping[str, int]
    log_text: str

    def __post_init__(self) -> None:
        require_text("choice.id", self.id)
        require_text("choice.label", self.label)
        require_text("choice.description", self.description)
        require_delta("choice.player_delta", self.player_delta, PLAYER_STAT_KEYS)
        require_delta("choice.camp_delta", self.camp_delta, CAMP_STAT_KEYS)
        require_text("choice.log_text", self.log_text)


@dataclass(frozen=True)
class NightScene:
    scene_type: SceneType
    day: int
    assignment_duty: DutyType
    route_description: Optional[str]
    presented_route_description: Optional[str]
    event_card: NightEventCard
    presented_outcome: str
    false_perception_overlay: Optional[str]
    distortion_level: DistortionLevel
    investigation_active: bool
    debrief_reports: tuple[PatrolReport, ...]
    choices: tuple[NightDecisionOption, ...]

    def __post_init__(self) -> None:
        require_enum("scene.scene_type", self.scene_type, SceneType)
        require_int("scene.day", self.day, 1, 7)
        require_enum("scene.assignment_duty", self.assignment_duty, DutyType)
        require_optional_text("scene.route_description", self.route_description)
        require_optional_text("scene.presented_route_description", self.presented_route_description)
        if not isinstance(self.event_card, NightEventCard):
            raise StateValidationError("scene.event_card must be a NightEventCard.")
        require_text("scene.presented_outcome", self.presented_outcome)
        require_optional_text("scene.false_perception_overlay", self.false_perception_overlay)
        require_enum("scene.distortion_level", self.distortion_level, DistortionLevel)
        require_tuple("scene.debrief_reports", self.debrief_reports)
        require_tuple("scene.choices", self.choices, min_length=1)

    def find_choice(self, choice_id: Optional[str]) -> NightDecisionOption:
        """Return the matching option, falling back to the first one."""

        for option in self.choices:
            if option.id == choice_id:
                return option
        return self.choices[0]


DAWN_DELTA_KEYS = ("supplies", "morale", "discipline", "rumor", "warmth", "stamina", "sanity", "injury")


@dataclass(frozen=True)
class DawnReport:
    day: int
    title: str
    summary: str
    rumor_reach_count: int
    deltas: Mapping[str, int]

    def __post_init__(self) -> None:
        require_int("dawn.day", self.day, 1, 7)
        require_text("dawn.title", self.title)
        require_text("dawn.summary", self.summary)
        require_int("dawn.rumor_reach_count", self.rumor_reach_count, 0, 100)
        require_delta("dawn.deltas", self.deltas, DAWN_DELTA_KEYS)
        missing = [key for key in DAWN_DELTA_KEYS if key not in self.deltas]
        if missing:
            raise StateValidationError(f"dawn.deltas is missing {', '.join(missing)}.")


@dataclass(frozen=True)
class NightLog:
    day: int
    events: tuple[str, ...]
    duty_resolved: DutyType
    debrief_choice: Optional[DebriefChoiceId]
    rumor_reach_count: int
    player_delta: Mapping[str, int]
    camp_delta: Mapping[str, int]
    reports: tuple[PatrolReport, ...] = ()
    rumor_packets: tuple[RumorPacket, ...] = ()
    flags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_int("log.day", self.day, 1, 7)
        require_tuple("log.events", self.events, min_length=1)
        require_enum("log.duty_resolved", self.duty_resolved, DutyType)
        if self.debrief_choice is not None:
            require_enum("log.debrief_choice", self.debrief_choice, DebriefChoiceId)
        require_int("log.rumor_reach_count", self.rumor_reach_count, 0, 100)
        require_delta("log.player_delta", self.player_delta, PLAYER_STAT_KEYS)
        require_delta("log.camp_delta", self.camp_delta, CAMP_STAT_KEYS)
        require_tuple("log.reports", self.reports)
        require_tuple("log.rumor_packets", self.rumor_packets)
        require_tuple("log.flags", self.flags)


@dataclass(frozen=True)
class DebriefSnapshot:
    day: int
    choice_id: Optional[DebriefChoiceId]
    reports: tuple[PatrolReport, ...]
    packets: tuple[RumorPacket, ...]
    rumor_reach_count: int

    def __post_init__(self) -> None:
        require_int("debrief.day", self.day, 1, 7)
        if self.choice_id is not None:
            require_enum("debrief.choice_id", self.choice_id, DebriefChoiceId)
        require_tuple("debrief.reports", self.reports)
        require_tuple("debrief.packets", self.packets)
        require_int("debrief.rumor_reach_count", self.rumor_reach_count, 0, 100)
