from __future__ import annotations

from typing import Optional, Sequence

from lowborn.application.services import balance_tables as tables
from lowborn.application.services.perception import (
    distort_outcome_text,
    distort_route_text,
    distortion_level_for_sanity,
    false_perception_overlay,
)
from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.application.services.testimony import make_camp_debrief_reports
from lowborn.content.events import cards_for_scene
from lowborn.domain.models.night import (
    DebriefChoiceId,
    NightDecisionOption,
    NightEventCard,
    NightEventTag,
    NightScene,
    SceneType,
)
from lowborn.domain.models.run_state import RunState, ThreatSeed
from lowborn.domain.models.schedule import DutyType

TAG_ORDER = (NightEventTag.MUNDANE, NightEventTag.AMBIGUOUS, NightEventTag.HAZARD, NightEventTag.INTERNAL)


def build_patrol_choices(card: NightEventCard) -> tuple[NightDecisionOption, ...]:
    hazard = card.has_tag(NightEventTag.HAZARD)
    ambiguous = card.has_tag(NightEventTag.AMBIGUOUS)
    internal = card.has_tag(NightEventTag.INTERNAL)
    shock = card.has_tag(NightEventTag.SHOCK)
    mundane = card.has_tag(NightEventTag.MUNDANE) and not (hazard or internal or shock)
    unsettling = ambiguous or shock
    rumor_swing = 1 if unsettling else (-1 if mundane else 0)

    if hazard:
        press_injury = 2 + (1 if shock else 0)
    else:
        press_injury = 0 if mundane else 1
    if ambiguous:
        press_sanity = -1 - (1 if shock else 0)
    elif shock:
        press_sanity = -2
    else:
        press_sanity = 1 if mundane else 0

    return (
        NightDecisionOption(
            id="press-forward",
            label="Press forward",
            description="Push deeper to confirm signs before returning.",
            player_delta={"stamina": -1 if mundane else -3, "injury": press_injury, "sanity": press_sanity},
            camp_delta={"discipline": 1, "rumor": rumor_swing},
            log_text="You pushed deeper before falling back to the line.",
        ),
        NightDecisionOption(
            id="mark-and-return",
            label="Mark and return",
            description="Mark the route and report at first safe chance.",
            player_delta={"stamina": -1, "sanity": -1 if unsettling else 1},
            camp_delta={"discipline": 1, "rumor": rumor_swing, "morale": -1 if internal else 0},
            log_text="You marked the route and returned with a measured report.",
        ),
        NightDecisionOption(
            id="hold-position",
            label="Hold position",
            description="Conserve strength and shadow the area from distance.",
            player_delta={"warmth": -1, "stamina": -1, "sanity": -1 if shock else 1},
            camp_delta={
                "rumor": 0 if mundane else (3 if shock else 2),
                "morale": 0 if mundane else (-2 if shock else -1),
            },
            log_text="You held observation and returned with limited certainty.",
        ),
    )


CAMP_CHOICES = (
    NightDecisionOption(
        id=DebriefChoiceId.ESCALATE_COMMANDER.value,
        label="Escalate to commander",
        description="File an immediate alarm and force stricter report protocol.",
        player_delta={"sanity": -1},
        camp_delta={"discipline": 2, "morale": -2, "rumor": 2},
        log_text="You escalated the debrief to command authority.",
    ),
    NightDecisionOption(
        id=DebriefChoiceId.DOWNPLAY.value,
        label="Downplay",
        description="Treat the debrief as noise and calm the line publicly.",
        player_delta={"sanity": 1},
        camp_delta={"discipline": -2, "morale": 2, "rumor": -2},
        log_text="You downplayed the reports and steadied the hall.",
    ),
    NightDecisionOption(
        id=DebriefChoiceId.INVESTIGATE_QUIETLY.value,
        label="Investigate quietly",
        description="Track the claims privately and pull threads on the next patrol.",
        player_delta={"stamina": -1, "sanity": -1},
        camp_delta={"discipline": 1, "rumor": 1},
        log_text="You opened a quiet inquiry and kept it off the board.",
    ),
    NightDecisionOption(
        id=DebriefChoiceId.ACCUSE_LIAR.value,
        label="Accuse liar",
        description="Call out one report as false in front of the barracks.",
        player_delta={"sanity": -2},
        camp_delta={"discipline": 1, "morale": -1, "rumor": 2},
        log_text="You accused one scout of lying during debrief.",
    ),
)


def event_weight_for_threat(
    card: NightEventCard,
    scene_type: SceneType,
    threat_seed: ThreatSeed,
    day: int,
    investigation_active: bool,
    intense_streak: int,
) -> float:
    curve = tables.threat_escalation_curve(day)
    tag_weights = tables.EVENT_TAG_WEIGHTS[(scene_type, threat_seed)]

    weight = 1.0
    for tag in TAG_ORDER:
        if card.has_tag(tag):
            base, slope = tag_weights[tag.value]
            weight += base + curve * slope
    if card.has_tag(NightEventTag.SHOCK):
        quiet_until, quiet_weight, base, slope = tables.SHOCK_TAG_WEIGHTS[(scene_type, threat_seed)]
        weight += quiet_weight if day <= quiet_until else base + curve * slope

    if tables.is_early_week(day) and card.is_intense:
        weight *= tables.EARLY_INTENSE_FACTOR
    if investigation_active and (
        card.has_tag(NightEventTag.HAZARD) or card.has_tag(NightEventTag.AMBIGUOUS) or card.has_tag(NightEventTag.SHOCK)
    ):
        weight += tables.INVESTIGATION_WEIGHT_BONUS

    if intense_streak >= 1 and card.has_tag(NightEventTag.SHOCK):
        weight *= tables.SHOCK_STREAK_FACTOR
    if intense_streak >= tables.COOLDOWN_STREAK and card.is_intense:
        weight *= tables.COOLDOWN_INTENSE_FACTOR
    if intense_streak >= tables.COOLDOWN_STREAK and card.has_tag(NightEventTag.MUNDANE):
        weight *= tables.COOLDOWN_MUNDANE_FACTOR

    return max(tables.MIN_EVENT_WEIGHT, round(weight, 3))


def apply_pacing_pool(cards: Sequence[NightEventCard], intense_streak: int) -> Sequence[NightEventCard]:
    if intense_streak < tables.COOLDOWN_STREAK:
        return cards
    cool_down = [card for card in cards if not card.is_intense or card.has_tag(NightEventTag.MUNDANE)]
    return cool_down or cards


def pick_event_card(
    rng: SeededRng,
    cards: Sequence[NightEventCard],
    scene_type: SceneType,
    threat_seed: ThreatSeed,
    day: int,
    investigation_active: bool,
    intense_streak: int,
) -> NightEventCard:
    pool = apply_pacing_pool(cards, intense_streak)
    return rng.weighted_pick(
        (card, event_weight_for_threat(card, scene_type, threat_seed, day, investigation_active, intense_streak))
        for card in pool
    )


def threat_modifier_for_event(threat_seed: ThreatSeed, card: NightEventCard, day: int) -> tuple[dict, dict]:
    """Return the (player, camp) deltas the hidden threat adds to tonight."""

    early = tables.is_early_week(day)
    if threat_seed is ThreatSeed.NONE:
        return {"sanity": 1}, {"rumor": -1, "morale": 1}

    if card.is_calm:
        if threat_seed is ThreatSeed.REAL:
            return {"sanity": 0 if early else -1}, {"rumor": 1}
        return {"sanity": 0 if early else -1}, {"rumor": 1, "discipline": 0 if early else -1}

    if threat_seed is ThreatSeed.REAL:
        return (
            {"sanity": -1, "stamina": 0 if early else -1},
            {"rumor": 1 if early else 2, "morale": 0 if early else -1},
        )
    return {"sanity": 0 if early else -1}, {"rumor": 2 if early else 3, "discipline": 0 if early else -1}


def build_night_scene(state: RunState) -> Optional[NightScene]:
    today = state.today
    scene_type = SceneType.PATROL if today.assigned_duty is DutyType.PATROL else SceneType.CAMP
    investigation_active = scene_type is SceneType.PATROL and state.hidden.investigation_focus > 0
    pool = cards_for_scene(scene_type)
    if not pool:
        return None

    rng = SeededRng(decision_key(state.seed, "night-scene", week=state.week, day=today.day))
    card = pick_event_card(
        rng,
        pool,
        scene_type,
        state.hidden.threat_seed,
        today.day,
        investigation_active,
        state.hidden.intense_streak,
    )
    route = None
    if scene_type is SceneType.PATROL:
        route = f"{rng.pick(card.route_templates)} {rng.pick(tables.PATROL_ROUTE_SUFFIXES)}"

    # route, outcome, then overlay share one presentation stream in that order
    presentation_rng = SeededRng(decision_key(state.seed, "scene-presentation", week=state.week, day=today.day))
    level = distortion_level_for_sanity(state.player_stats.sanity)
    presented_route = distort_route_text(route, level, presentation_rng)
    presented_outcome = distort_outcome_text(card.outcome, level, presentation_rng)
    overlay = false_perception_overlay(level, presentation_rng)

    if scene_type is SceneType.CAMP:
        reports = make_camp_debrief_reports(state, today.day, card)
        choices = CAMP_CHOICES
    else:
        reports = ()
        choices = build_patrol_choices(card)

    return NightScene(
        scene_type=scene_type,
        day=today.day,
        assignment_duty=today.assigned_duty,
        route_description=route,
        presented_route_description=presented_route,
        event_card=card,
        presented_outcome=presented_outcome,
        false_perception_overlay=overlay,
        distortion_level=level,
        investigation_active=investigation_active,
        debrief_reports=reports,
        choices=choices,
    )
