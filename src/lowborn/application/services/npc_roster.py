from __future__ import annotations

from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.content.names import FRONTIER_NAMES
from lowborn.content.npcs import NPC_TEMPLATES
from lowborn.domain.models.npc import NPCProfile
from lowborn.domain.models.run_state import ThreatSeed

THREAT_SEED_WEIGHTS = ((ThreatSeed.REAL, 5), (ThreatSeed.EXAGGERATED, 3), (ThreatSeed.NONE, 2))


def pick_threat_seed(seed: str) -> ThreatSeed:
    return SeededRng(decision_key(seed, "threat-seed")).weighted_pick(THREAT_SEED_WEIGHTS)


def build_npc_profiles(seed: str) -> tuple[NPCProfile, ...]:
    rng = SeededRng(decision_key(seed, "npcs"))
    roster_size = rng.next_int(8, 14)
    available = list(FRONTIER_NAMES)
    roster = []

    for index in range(roster_size):
        template = rng.pick(NPC_TEMPLATES)
        if available:
            base_name = available.pop(rng.next_int(0, len(available) - 1))
        else:
            base_name = rng.pick(FRONTIER_NAMES)
        suffix = f"-{index + 1}" if index >= len(FRONTIER_NAMES) else ""
        roster.append(
            NPCProfile(
                id=f"npc-{index + 1}",
                name=f"{base_name}{suffix}",
                loyalty=rng.next_int(30, 85),
                fear=rng.next_int(10, 80),
                belief=rng.next_int(15, 90),
                trust_in_player=rng.next_int(25, 80),
                role=template.role,
            )
        )
    return tuple(roster)
