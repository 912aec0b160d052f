"""
Pydantic models for persisted Lowborn saves.

Field names mirror the JSON payload (camelCase). Each historical save
version keeps its own envelope model so a payload can be recognised by
structure before it is upgraded.
"""

from typing import Annotated, Literal, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.night import DebriefChoiceId, DistortionLevel, NightEventTag, ReportEmotion, SceneType
from lowborn.domain.models.run_state import DayPhase, ThreatSeed
from lowborn.domain.models.schedule import DisruptionType, DutyType, ShiftType

Stat = Annotated[int, Field(ge=0, le=100)]
Delta = Annotated[int, Field(ge=-100, le=100)]
DayNumber = Annotated[int, Field(ge=1, le=7)]
Text = Annotated[str, Field(min_length=1)]
UnitFloat = Annotated[float, Field(ge=0, le=1)]
ReachCount = Annotated[int, Field(ge=0, le=100)]
Counter = Annotated[int, Field(ge=0, le=999)]


class SaveModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# -----------------------------------------------------------------------------
# Current (v6) shape
# -----------------------------------------------------------------------------

class PlayerStatsModel(SaveModel):
    warmth: Stat
    stamina: Stat
    injury: Stat
    hunger: Stat
    sanity: Stat


class CampStatsModel(SaveModel):
    supplies: Stat
    morale: Stat
    discipline: Stat
    rumor: Stat


class PlayerDeltaModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    warmth: Optional[Delta] = None
    stamina: Optional[Delta] = None
    injury: Optional[Delta] = None
    hunger: Optional[Delta] = None
    sanity: Optional[Delta] = None


class CampDeltaModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    supplies: Optional[Delta] = None
    morale: Optional[Delta] = None
    discipline: Optional[Delta] = None
    rumor: Optional[Delta] = None


class DisruptionModel(SaveModel):
    type: DisruptionType
    chance: UnitFloat
    reason: Optional[str]
    extraDuty: Optional[DutyType]


class DayAssignmentModel(SaveModel):
    day: DayNumber
    label: Text
    scheduledDuty: DutyType
    scheduledShift: ShiftType
    assignedDuty: DutyType
    assignedShift: ShiftType
    disruption: DisruptionModel
    resolved: bool
    eventTitle: Optional[str]
    summary: Optional[str]


WeekScheduleModel = Annotated[list[DayAssignmentModel], Field(min_length=7, max_length=7)]


class NpcProfileModel(SaveModel):
    id: Text
    name: Text
    loyalty: Stat
    fear: Stat
    belief: Stat
    trustInPlayer: Stat
    role: Text


class PatrolReportModel(SaveModel):
    # Older saves may lack the name and the truth/presentation split.
    npcId: Text
    npcName: Optional[Text] = None
    claimedObservations: Annotated[list[Text], Field(min_length=1)]
    truthObservation: Optional[Text] = None
    presentedClaim: Optional[Text] = None
    confidence: UnitFloat
    emotion: ReportEmotion
    isLying: bool


class RumorPacketModel(SaveModel):
    id: Text
    day: DayNumber
    sourceNpcId: Text
    claim: Text
    truth: Text
    intensity: UnitFloat
    adoptedBy: list[Text]


class LogDeltasModel(SaveModel):
    player: PlayerDeltaModel
    camp: CampDeltaModel


class NightLogModel(SaveModel):
    day: DayNumber
    events: Annotated[list[Text], Field(min_length=1)]
    dutyResolved: DutyType
    debriefChoice: Optional[DebriefChoiceId] = None
    rumorReachCount: ReachCount = 0
    deltas: LogDeltasModel
    reports: list[PatrolReportModel]
    rumorPackets: list[RumorPacketModel] = Field(default_factory=list)
    flags: list[Text]


class NightEventCardModel(SaveModel):
    id: Text
    sceneType: SceneType
    title: Text
    outcome: Text
    tags: Annotated[list[NightEventTag], Field(min_length=1)]
    routeTemplates: Annotated[list[Text], Field(min_length=1)]
    basePlayerDelta: PlayerDeltaModel
    baseCampDelta: CampDeltaModel
    observationPool: Annotated[list[Text], Field(min_length=1)]


class NightDecisionOptionModel(SaveModel):
    id: Text
    label: Text
    description: Text
    playerDelta: PlayerDeltaModel
    campDelta: CampDeltaModel
    logText: Text


class NightSceneModel(SaveModel):
    sceneType: SceneType
    day: DayNumber
    assignmentDuty: DutyType
    routeDescription: Optional[str]
    presentedRouteDescription: Optional[str] = None
    eventCard: NightEventCardModel
    presentedOutcome: str = ""
    falsePerceptionOverlay: Optional[str] = None
    distortionLevel: DistortionLevel = DistortionLevel.NONE
    investigationActive: bool = False
    debriefReports: list[PatrolReportModel] = Field(default_factory=list)
    choices: Annotated[list[NightDecisionOptionModel], Field(min_length=1)]


class DawnDeltasModel(SaveModel):
    supplies: Delta
    morale: Delta
    discipline: Delta
    rumor: Delta
    warmth: Delta
    stamina: Delta
    sanity: Delta
    injury: Delta


class DawnReportModel(SaveModel):
    day: DayNumber
    title: Text
    summary: Text
    rumorReachCount: ReachCount = 0
    deltas: DawnDeltasModel


class CollapseIndicatorsModel(SaveModel):
    moraleLow: bool
    disciplineLow: bool
    rumorHigh: bool


class WeekSummaryModel(SaveModel):
    week: Annotated[int, Field(gt=0)]
    nightsSurvived: Annotated[int, Field(ge=0, le=7)]
    collapseIndicators: CollapseIndicatorsModel
    firstBreakLabel: Text
    shareText: Text


class NpcRumorStateModel(SaveModel):
    adopted: bool
    heardCount: Counter
    spreadCount: Counter
    lastHeardDay: Optional[DayNumber]


class DebriefSnapshotModel(SaveModel):
    day: DayNumber
    choiceId: Optional[DebriefChoiceId]
    reports: list[PatrolReportModel]
    packets: list[RumorPacketModel]
    rumorReachCount: ReachCount


class HiddenStateModel(SaveModel):
    threatSeed: ThreatSeed
    investigationFocus: Annotated[int, Field(ge=0, le=7)] = 0
    intenseStreak: Annotated[int, Field(ge=0, le=7)] = 0
    pendingAccusationConflict: bool = False
    rumorAdoption: dict[str, NpcRumorStateModel] = Field(default_factory=dict)
    lastDebrief: Optional[DebriefSnapshotModel] = None


class GameStateModel(SaveModel):
    seed: Text
    week: Annotated[int, Field(gt=0)]
    todayIndex: Annotated[int, Field(ge=0, le=6)]
    schedule: WeekScheduleModel
    phase: DayPhase
    activeNightScene: Optional[NightSceneModel]
    dawnReport: Optional[DawnReportModel]
    playerStats: PlayerStatsModel
    campStats: CampStatsModel
    npcProfiles: list[NpcProfileModel]
    nightLogs: list[NightLogModel]
    recentEvents: list[Text]
    todaySummary: str
    weekSummary: Optional[WeekSummaryModel] = None
    complete: bool
    hidden: HiddenStateModel


class SaveEnvelopeV6(SaveModel):
    version: Literal[6]
    savedAt: str
    gameState: GameStateModel


# -----------------------------------------------------------------------------
# Legacy shapes
# -----------------------------------------------------------------------------

class HiddenStateV5Model(SaveModel):
    threatSeed: ThreatSeed
    investigationFocus: Annotated[int, Field(ge=0, le=7)] = 0
    intenseStreak: Optional[Annotated[int, Field(ge=0, le=7)]] = None
    pendingAccusationConflict: bool = False
    rumorAdoption: dict[str, NpcRumorStateModel] = Field(default_factory=dict)
    lastDebrief: Optional[DebriefSnapshotModel] = None


class GameStateV5Model(SaveModel):
    """v5 predates the pacing streak; the week summary could be absent."""

    seed: Text
    week: Annotated[int, Field(gt=0)]
    todayIndex: Annotated[int, Field(ge=0, le=6)]
    schedule: WeekScheduleModel
    phase: DayPhase
    activeNightScene: Optional[NightSceneModel]
    dawnReport: Optional[DawnReportModel]
    playerStats: PlayerStatsModel
    campStats: CampStatsModel
    npcProfiles: list[NpcProfileModel]
    nightLogs: list[NightLogModel]
    recentEvents: list[str]
    todaySummary: str
    weekSummary: Optional[WeekSummaryModel] = None
    complete: bool
    hidden: HiddenStateV5Model


class SaveEnvelopeV5(SaveModel):
    version: Literal[5]
    savedAt: str
    gameState: GameStateV5Model


class LegacyHiddenModel(SaveModel):
    threatSeed: str


class NightSceneV4Model(SaveModel):
    """v4 scenes had no investigation toggle or debrief testimony."""

    sceneType: SceneType
    day: DayNumber
    assignmentDuty: DutyType
    routeDescription: Optional[str]
    presentedRouteDescription: Optional[str] = None
    eventCard: NightEventCardModel
    presentedOutcome: str = ""
    falsePerceptionOverlay: Optional[str] = None
    distortionLevel: DistortionLevel = DistortionLevel.NONE
    investigationActive: Optional[bool] = None
    debriefReports: Optional[list[PatrolReportModel]] = None
    choices: Annotated[list[NightDecisionOptionModel], Field(min_length=1)]


class DawnReportV4Model(SaveModel):
    day: DayNumber
    title: Text
    summary: Text
    rumorReachCount: Optional[ReachCount] = None
    deltas: DawnDeltasModel


class NightLogV4Model(SaveModel):
    day: DayNumber
    events: Annotated[list[Text], Field(min_length=1)]
    dutyResolved: DutyType
    debriefChoice: Optional[DebriefChoiceId] = None
    rumorReachCount: Optional[ReachCount] = None
    deltas: LogDeltasModel
    reports: list[PatrolReportModel]
    rumorPackets: Optional[list[RumorPacketModel]] = None
    flags: list[Text]


class GameStateV4Model(SaveModel):
    """v4 predates the rumor network."""

    seed: Text
    week: Annotated[int, Field(gt=0)]
    todayIndex: Annotated[int, Field(ge=0, le=6)]
    schedule: WeekScheduleModel
    phase: DayPhase
    activeNightScene: Optional[NightSceneV4Model]
    dawnReport: Optional[DawnReportV4Model]
    playerStats: PlayerStatsModel
    campStats: CampStatsModel
    npcProfiles: list[NpcProfileModel]
    nightLogs: list[NightLogV4Model]
    recentEvents: list[str]
    todaySummary: str
    complete: bool
    hidden: LegacyHiddenModel


class SaveEnvelopeV4(SaveModel):
    version: Literal[4]
    savedAt: str
    gameState: GameStateV4Model


class GameStateV3Model(SaveModel):
    """v3 had a two-phase day with no night scene or dawn report."""

    seed: Text
    week: Annotated[int, Field(gt=0)]
    todayIndex: Annotated[int, Field(ge=0, le=6)]
    schedule: WeekScheduleModel
    phase: Literal["DAY", "NIGHT"]
    playerStats: PlayerStatsModel
    campStats: CampStatsModel
    npcProfiles: list[NpcProfileModel]
    nightLogs: list[NightLogV4Model]
    recentEvents: list[str]
    todaySummary: str
    complete: bool
    hidden: LegacyHiddenModel


class SaveEnvelopeV3(SaveModel):
    version: Literal[3]
    savedAt: str
    gameState: GameStateV3Model


class LegacyV2AssignmentModel(SaveModel):
    day: DayNumber
    label: Text
    dutyType: Literal["PATROL", "CAMP"]
    shift: Literal["DAWN", "DUSK", "NIGHT"]
    resolved: bool
    eventTitle: Optional[str]
    summary: Optional[str]


class LegacyV2DeltasModel(SaveModel):
    player: dict[str, Delta]
    camp: dict[str, Delta]


class LegacyV2NightLogModel(SaveModel):
    day: DayNumber
    events: list[Text]
    deltas: LegacyV2DeltasModel
    reports: list[PatrolReportModel]
    flags: list[Text]


class GameStateV2Model(SaveModel):
    seed: Text
    week: Annotated[int, Field(gt=0)]
    day: DayNumber
    weekSchedule: Annotated[list[LegacyV2AssignmentModel], Field(min_length=7, max_length=7)]
    playerStats: PlayerStatsModel
    campStats: CampStatsModel
    npcProfiles: list[NpcProfileModel]
    nightLogs: list[LegacyV2NightLogModel]
    recentEvents: list[str]
    todaySummary: str
    complete: bool
    hidden: LegacyHiddenModel


class SaveEnvelopeV2(SaveModel):
    version: Literal[2]
    savedAt: str
    gameState: GameStateV2Model


class LegacyV1AssignmentModel(SaveModel):
    day: DayNumber
    label: Text
    plannedDuty: Literal["PATROL", "CAMP"]
    resolved: bool
    eventTitle: Optional[str]
    summary: Optional[str]


class LegacyV1StatsModel(SaveModel):
    supplies: Stat
    morale: Stat
    discipline: Stat
    rumor: Stat
    warmth: Stat
    stamina: Stat
    sanity: Stat


class LegacyRunSnapshotModel(SaveModel):
    seed: Text
    week: Annotated[int, Field(gt=0)]
    day: DayNumber
    schedule: Annotated[list[LegacyV1AssignmentModel], Field(min_length=7, max_length=7)]
    stats: LegacyV1StatsModel
    todaySummary: str
    log: list[str]
    complete: bool


class SaveEnvelopeV1(SaveModel):
    version: Literal[1]
    savedAt: str
    snapshot: LegacyRunSnapshotModel


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: Type[ModelT], payload: Mapping) -> ModelT:
    """Validate ``payload`` against ``model``, raising the domain error on failure."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.error_count() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "invalid value")
        raise StateValidationError(
            f"{model.__name__} rejected the payload at '{location}': {message} ({exc.error_count()} error(s))."
        ) from exc
