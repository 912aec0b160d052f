from __future__ import annotations

from lowborn.domain.models.night import DebriefChoiceId, SceneType
from lowborn.domain.models.run_state import ThreatSeed

DEFAULT_SEED = "lowborn-week-seed"

REAL = ThreatSeed.REAL
EXAGGERATED = ThreatSeed.EXAGGERATED
NO_THREAT = ThreatSeed.NONE

NOTHING_UNUSUAL = "nothing unusual"
DEBRIEF_CLAIMS = (
    "tracks in snow",
    "distant light",
    "howl",
    "missing man",
    NOTHING_UNUSUAL,
    "strange symbol",
)
ALARMING_DEBRIEF_CLAIMS = tuple(claim for claim in DEBRIEF_CLAIMS if claim != NOTHING_UNUSUAL)

PATROL_ROUTE_SUFFIXES = (
    "Snowfall is thin enough to read tracks.",
    "Lantern light barely reaches the outer stakes.",
    "Wind carries every sound from the ridge.",
    "The frost line has swallowed old path markers.",
)

SANITY_OVERLAY_LINES = (
    "For one breath, you see a second patrol crossing your own tracks.",
    "Lantern shadows gather into a shape that vanishes when you turn.",
    "You hear your own name carried from beyond the marker line.",
    "Footsteps echo behind you, but the snow remains untouched.",
)

UNEASY_OUTCOME_SUFFIXES = (
    "The silence around it lingers too long.",
    "The detail sits wrong in your mind.",
    "It feels less resolved than the words suggest.",
)
SEVERE_OUTCOME_SUFFIXES = (
    "Every shadow seems to repeat the scene.",
    "For a moment you doubt what happened first.",
    "The memory plays back with missing pieces.",
)
UNEASY_ROUTE_SUFFIXES = (
    "The path feels narrower than it is.",
    "Markers look misplaced in the dark.",
    "Your map memory stutters on this stretch.",
)
SEVERE_ROUTE_SUFFIXES = (
    "You could swear this bend was not here before.",
    "For several steps, every trail points at you.",
    "The marker lights seem to move when you blink.",
)
CLAIM_SENSORY_PREFIXES = (
    "through the dark",
    "under the wind",
    "between lantern cuts",
    "past the frozen markers",
)

SEVERE_SANITY_BELOW = 25
UNEASY_SANITY_BELOW = 45
VERBATIM_CLAIM_SANITY = 35
HOLLOW_QUIET_SANITY_BELOW = 22
OVERLAY_CHANCE = {"UNEASY": 0.26, "SEVERE": 0.6}

# Additive tag weights per (scene, threat): tag -> (base, escalation slope).
EVENT_TAG_WEIGHTS = {
    (SceneType.PATROL, REAL): {"mundane": (2.1, -0.7), "ambiguous": (0.6, 1.3), "hazard": (0.25, 1.1), "internal": (0.2, 0.8)},
    (SceneType.PATROL, EXAGGERATED): {"mundane": (2.0, -0.6), "ambiguous": (0.8, 1.2), "hazard": (0.2, 0.8), "internal": (0.35, 0.9)},
    (SceneType.PATROL, NO_THREAT): {"mundane": (2.5, -0.4), "ambiguous": (0.35, 0.55), "hazard": (0.08, 0.3), "internal": (0.15, 0.3)},
    (SceneType.CAMP, REAL): {"mundane": (1.9, -0.4), "ambiguous": (0.45, 0.7), "hazard": (0.25, 0.8), "internal": (0.7, 1.0)},
    (SceneType.CAMP, EXAGGERATED): {"mundane": (1.8, -0.35), "ambiguous": (0.65, 0.95), "hazard": (0.2, 0.65), "internal": (0.95, 1.25)},
    (SceneType.CAMP, NO_THREAT): {"mundane": (2.3, -0.2), "ambiguous": (0.25, 0.4), "hazard": (0.08, 0.2), "internal": (0.35, 0.35)},
}

# Shock weight per (scene, threat): (last quiet day, quiet weight, base, slope).
SHOCK_TAG_WEIGHTS = {
    (SceneType.PATROL, REAL): (3, 0.03, 0.12, 0.35),
    (SceneType.PATROL, EXAGGERATED): (3, 0.03, 0.1, 0.3),
    (SceneType.PATROL, NO_THREAT): (4, 0.02, 0.06, 0.18),
    (SceneType.CAMP, REAL): (3, 0.03, 0.1, 0.35),
    (SceneType.CAMP, EXAGGERATED): (3, 0.03, 0.09, 0.3),
    (SceneType.CAMP, NO_THREAT): (4, 0.02, 0.05, 0.15),
}

EARLY_WEEK_LAST_DAY = 2
EARLY_INTENSE_FACTOR = 0.7
INVESTIGATION_WEIGHT_BONUS = 1.6
SHOCK_STREAK_FACTOR = 0.35
COOLDOWN_STREAK = 2
COOLDOWN_INTENSE_FACTOR = 0.08
COOLDOWN_MUNDANE_FACTOR = 2.8
MIN_EVENT_WEIGHT = 0.05

# Hidden debrief truth per (calm night, threat): (claim, base, escalation slope).
DEBRIEF_TRUTH_WEIGHTS = {
    (True, REAL): (
        (NOTHING_UNUSUAL, 5.2, -0.8),
        ("tracks in snow", 1.4, 0.5),
        ("distant light", 1.1, 0.35),
        ("howl", 0.9, 0.25),
        ("strange symbol", 0.8, 0.3),
        ("missing man", 0.55, 0.15),
    ),
    (True, EXAGGERATED): (
        (NOTHING_UNUSUAL, 6.4, -0.3),
        ("tracks in snow", 0.95, 0.2),
        ("distant light", 0.9, 0.15),
        ("howl", 0.65, 0.1),
        ("strange symbol", 0.6, 0.1),
        ("missing man", 0.45, 0.05),
    ),
    (True, NO_THREAT): (
        (NOTHING_UNUSUAL, 7.2, -0.2),
        ("tracks in snow", 0.8, 0.1),
        ("distant light", 0.75, 0.08),
        ("howl", 0.6, 0.08),
        ("strange symbol", 0.55, 0.05),
        ("missing man", 0.35, 0.04),
    ),
    (False, REAL): (
        ("missing man", 2.0, 2.1),
        ("tracks in snow", 2.4, 1.8),
        ("distant light", 1.8, 1.4),
        ("howl", 1.6, 1.2),
        ("strange symbol", 1.4, 1.5),
        (NOTHING_UNUSUAL, 1.3, -0.7),
    ),
    (False, EXAGGERATED): (
        (NOTHING_UNUSUAL, 3.3, -0.6),
        ("tracks in snow", 1.8, 0.3),
        ("distant light", 1.6, 0.3),
        ("howl", 1.0, 0.2),
        ("strange symbol", 1.0, 0.2),
        ("missing man", 0.9, 0.1),
    ),
    (False, NO_THREAT): (
        (NOTHING_UNUSUAL, 5.5, -0.5),
        ("tracks in snow", 1.0, 0.15),
        ("distant light", 1.0, 0.1),
        ("howl", 0.9, 0.1),
        ("strange symbol", 0.8, 0.15),
        ("missing man", 0.7, 0.1),
    ),
}

CAMP_LIE_BASE = {REAL: 0.09, EXAGGERATED: 0.2, NO_THREAT: 0.05}
CAMP_MISTAKE_BASE = {REAL: 0.16, EXAGGERATED: 0.3, NO_THREAT: 0.12}
FIELD_LIE_BASE = {REAL: 0.05, EXAGGERATED: 0.15, NO_THREAT: 0.03}
FIELD_MISTAKE_BASE = {REAL: 0.11, EXAGGERATED: 0.2, NO_THREAT: 0.08}

ALARMING_BIAS_THRESHOLD = 120
ALARMING_CLAIM_WEIGHT = 3
CALM_CLAIM_WEIGHT = 1
FORCED_CONFLICT_CHANCE = 0.7
LOW_CONFIDENCE_AVERAGE = 0.45

PACKET_INTENSITY_BIAS = {
    DebriefChoiceId.ESCALATE_COMMANDER: 0.12,
    DebriefChoiceId.DOWNPLAY: -0.18,
    DebriefChoiceId.ACCUSE_LIAR: 0.1,
}
SPREAD_CHOICE_BIAS = {
    DebriefChoiceId.ESCALATE_COMMANDER: 0.08,
    DebriefChoiceId.DOWNPLAY: -0.16,
    DebriefChoiceId.ACCUSE_LIAR: 0.11,
}
RUMOR_REACH_SCALE = 7
RUMOR_MORALE_RATIO = 0.55
RUMOR_DISCIPLINE_RATIO = 0.72

EXTRA_DUTY_PLAYER_PENALTY = {"sanity": -3, "stamina": -2, "warmth": -1}
EXTRA_DUTY_CAMP_PENALTY = {"rumor": 1}
INVESTIGATION_PLAYER_PENALTY = {"stamina": -1, "sanity": -1}
INVESTIGATION_CAMP_EFFECT = {"rumor": 1}
MAX_INVESTIGATION_FOCUS = 3
MAX_INTENSE_STREAK = 7

ACCUSATION_TARGET_SHIFT = {"trust": -14, "loyalty": -8, "fear": 6}
ACCUSATION_TRUTHFUL_TRUST = 2
ACCUSATION_BACKLASH_CHANCE = 0.42
ACCUSATION_BACKLASH_DELTA = {"morale": -2, "discipline": -1, "rumor": 2}

# Ordered collapse checks: (stats group, stat, direction, threshold, label).
COLLAPSE_CHECKS = (
    ("camp", "morale", "low", 35, "Morale collapsed first"),
    ("camp", "discipline", "low", 35, "Discipline cracked first"),
    ("camp", "rumor", "high", 65, "Rumor pressure broke containment first"),
    ("player", "sanity", "low", 30, "Sanity erosion broke your judgment first"),
    ("camp", "supplies", "low", 30, "Supply strain broke the line first"),
    ("player", "injury", "high", 25, "Injury load broke patrol capacity first"),
)
NO_COLLAPSE_LABEL = "No single collapse trigger fired before week end"

SIMULATION_TRANSITION_GUARD = 80
NO_BREAK_LABEL = "No break label"


def threat_escalation_curve(day: int) -> float:
    return max(0.0, min(1.0, (day - 1) / 6))


def is_early_week(day: int) -> bool:
    return day <= EARLY_WEEK_LAST_DAY
