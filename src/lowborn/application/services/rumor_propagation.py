from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Sequence

from lowborn.application.services import balance_tables as tables
from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.domain.models.night import DebriefChoiceId, PatrolReport, RumorPacket
from lowborn.domain.models.npc import NpcRumorState
from lowborn.domain.models.run_state import RunState
from lowborn.domain.models.stats import clamp


@dataclass(frozen=True)
class PropagationResult:
    packets: tuple[RumorPacket, ...]
    rumor_reach_count: int
    camp_delta: Mapping[str, int]
    rumor_adoption: Mapping[str, NpcRumorState]


def build_rumor_packets(
    reports: Sequence[PatrolReport], day: int, choice_id: Optional[DebriefChoiceId]
) -> tuple[RumorPacket, ...]:
    bias = tables.PACKET_INTENSITY_BIAS.get(choice_id, 0.0)
    packets = []
    for index, report in enumerate(reports):
        claim = report.claim
        alarming = claim != tables.NOTHING_UNUSUAL
        intensity = clamp(0.18 + (0.26 if alarming else -0.08) + report.confidence * 0.3 + bias, 0.04, 0.98)
        packets.append(
            RumorPacket(
                id=f"rumor-{day}-{report.npc_id}-{index + 1}",
                day=day,
                source_npc_id=report.npc_id,
                claim=claim,
                truth=report.truth_observation,
                intensity=round(intensity, 2),
            )
        )
    return tuple(packets)


def propagate_rumors(
    state: RunState, day: int, packets: Sequence[RumorPacket], choice_id: Optional[DebriefChoiceId]
) -> PropagationResult:
    """Spread tonight's packets through the roster.

    Adoption state carries over from earlier nights; a watcher who already
    adopted a rumor is more likely to take the next one.
    """

    rng = SeededRng(decision_key(state.seed, "rumor-propagation", week=state.week, day=day))
    spread_bias = tables.SPREAD_CHOICE_BIAS.get(choice_id, 0.0)
    discipline = state.camp_stats.discipline
    adoption = dict(state.hidden.rumor_adoption)
    reached: set[str] = set()
    spread_packets = []

    for packet in packets:
        source = adoption.get(packet.source_npc_id, NpcRumorState())
        adoption[packet.source_npc_id] = replace(
            source,
            adopted=True,
            heard_count=source.heard_count + 1,
            spread_count=source.spread_count + 1,
            last_heard_day=day,
        )
        adopted_by = [packet.source_npc_id]
        reached.add(packet.source_npc_id)

        for npc in state.npc_profiles:
            if npc.id == packet.source_npc_id:
                continue
            node = adoption.get(npc.id, NpcRumorState())
            chance = clamp(
                packet.intensity * 0.55
                + npc.fear / 260
                + npc.belief / 300
                + (0.08 if node.adopted else 0)
                + spread_bias
                - discipline / 320,
                0.03,
                0.93,
            )
            if rng.next_float() < chance:
                adopted_by.append(npc.id)
                reached.add(npc.id)
                spreads = rng.next_float() < clamp(0.2 + npc.belief / 260, 0.15, 0.78)
                node = replace(
                    node,
                    adopted=True,
                    heard_count=node.heard_count + 1,
                    spread_count=node.spread_count + (1 if spreads else 0),
                    last_heard_day=day,
                )
            adoption[npc.id] = node

        spread_packets.append(replace(packet, adopted_by=tuple(adopted_by)))

    reach = len(reached)
    camp_delta = rumor_reach_camp_delta(reach, len(state.npc_profiles), choice_id)
    return PropagationResult(tuple(spread_packets), reach, camp_delta, adoption)


def rumor_reach_camp_delta(reach: int, roster_size: int, choice_id: Optional[DebriefChoiceId]) -> dict[str, int]:
    """Camp pressure from how much of the roster heard tonight's rumors.

    Reach is scaled and rounded half-up into rumor. Escalating to the
    commander spares discipline even when the rumor runs through most of
    the camp.
    """

    ratio = reach / max(roster_size, 1)
    discipline_hit = ratio > tables.RUMOR_DISCIPLINE_RATIO and choice_id is not DebriefChoiceId.ESCALATE_COMMANDER
    return {
        "rumor": max(0, math.floor(ratio * tables.RUMOR_REACH_SCALE + 0.5)),
        "morale": -1 if ratio > tables.RUMOR_MORALE_RATIO else 0,
        "discipline": -1 if discipline_hit else 0,
    }
