"""Sanity-driven wording for player-facing text.

Nothing here touches hidden truth or stat deltas; each helper only
rewrites a string it is handed.
"""

from __future__ import annotations

from typing import Optional

from lowborn.application.services import balance_tables as tables
from lowborn.application.services.seed_policy import SeededRng
from lowborn.domain.models.night import DistortionLevel


def distortion_level_for_sanity(sanity: int) -> DistortionLevel:
    if sanity < tables.SEVERE_SANITY_BELOW:
        return DistortionLevel.SEVERE
    if sanity < tables.UNEASY_SANITY_BELOW:
        return DistortionLevel.UNEASY
    return DistortionLevel.NONE


def distort_outcome_text(outcome: str, level: DistortionLevel, rng: SeededRng) -> str:
    if level is DistortionLevel.NONE:
        return outcome
    # the uneasy suffix is always drawn first so SEVERE keeps the same stream position
    uneasy = rng.pick(tables.UNEASY_OUTCOME_SUFFIXES)
    if level is DistortionLevel.UNEASY:
        return f"{outcome} {uneasy}"
    return f"{outcome} {rng.pick(tables.SEVERE_OUTCOME_SUFFIXES)}"


def distort_route_text(route: Optional[str], level: DistortionLevel, rng: SeededRng) -> Optional[str]:
    if not route or level is DistortionLevel.NONE:
        return route
    pool = tables.UNEASY_ROUTE_SUFFIXES if level is DistortionLevel.UNEASY else tables.SEVERE_ROUTE_SUFFIXES
    return f"{route} {rng.pick(pool)}"


def false_perception_overlay(level: DistortionLevel, rng: SeededRng) -> Optional[str]:
    if level is DistortionLevel.NONE:
        return None
    if rng.next_float() < tables.OVERLAY_CHANCE[level.value]:
        return rng.pick(tables.SANITY_OVERLAY_LINES)
    return None


def claim_to_presentation(claim: str, sanity: int, rng: SeededRng) -> str:
    if sanity >= tables.VERBATIM_CLAIM_SANITY:
        return claim
    if claim == tables.NOTHING_UNUSUAL:
        if sanity < tables.HOLLOW_QUIET_SANITY_BELOW:
            return "nothing unusual, though the silence felt wrong"
        return "nothing unusual, but the quiet rang in your ears"
    return f"{rng.pick(tables.CLAIM_SENSORY_PREFIXES)}: {claim}"
