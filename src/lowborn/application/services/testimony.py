"""Debrief and field-report generation.

Each report is drawn in two passes: the hidden truth and the NPC's intent
come from a truth stream keyed on the decision, while the player-facing
wording comes from a per-NPC presentation stream. Sanity only ever feeds
the presentation pass.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterator, Sequence

from lowborn.application.services import balance_tables as tables
from lowborn.application.services.perception import claim_to_presentation
from lowborn.application.services.seed_policy import SeededRng, decision_key
from lowborn.domain.models.night import NightEventCard, PatrolReport, ReportEmotion
from lowborn.domain.models.npc import NPCProfile
from lowborn.domain.models.run_state import RunState, ThreatSeed
from lowborn.domain.models.schedule import DayAssignment
from lowborn.domain.models.stats import clamp


def debrief_truth_for_threat(rng: SeededRng, threat_seed: ThreatSeed, day: int, calm_night: bool) -> str:
    curve = tables.threat_escalation_curve(day)
    rows = tables.DEBRIEF_TRUTH_WEIGHTS[(calm_night, threat_seed)]
    return rng.weighted_pick((claim, base + curve * slope) for claim, base, slope in rows)


def distorted_claim_for_npc(rng: SeededRng, truth: str, npc: NPCProfile, threat_seed: ThreatSeed) -> str:
    pool = [claim for claim in tables.DEBRIEF_CLAIMS if claim != truth]
    if not pool:
        return truth
    if threat_seed is ThreatSeed.EXAGGERATED or npc.fear + npc.belief > tables.ALARMING_BIAS_THRESHOLD:
        return rng.weighted_pick(
            (
                claim,
                tables.ALARMING_CLAIM_WEIGHT if claim in tables.ALARMING_DEBRIEF_CLAIMS else tables.CALM_CLAIM_WEIGHT,
            )
            for claim in pool
        )
    return rng.pick(pool)


def emotion_for_report(rng: SeededRng, npc: NPCProfile, claim: str) -> ReportEmotion:
    if claim != tables.NOTHING_UNUSUAL and npc.fear > 60:
        return rng.pick((ReportEmotion.ANXIOUS, ReportEmotion.PANICKED))
    if npc.belief > 65:
        return rng.pick((ReportEmotion.ANXIOUS, ReportEmotion.DEFIANT))
    return rng.pick((ReportEmotion.STEADY, ReportEmotion.ANXIOUS, ReportEmotion.DEFIANT))


def has_conflicting_claims(reports: Sequence[PatrolReport]) -> bool:
    claims = [report.claim for report in reports]
    quiet = tables.NOTHING_UNUSUAL in claims
    return quiet and any(claim != tables.NOTHING_UNUSUAL for claim in claims)


def _iter_reporters(rng: SeededRng, roster: Sequence[NPCProfile], count: int) -> Iterator[NPCProfile]:
    """Yield distinct reporters lazily.

    Each pick happens right before that reporter's own draws, so the truth
    stream interleaves per NPC.
    """

    pool = list(roster)
    for _ in range(min(len(pool), count)):
        npc = rng.pick(pool)
        pool.remove(npc)
        yield npc


def _with_claim(report: PatrolReport, claim: str, sanity: int, key: str) -> PatrolReport:
    return replace(
        report,
        claimed_observations=(claim,),
        presented_claim=claim_to_presentation(claim, sanity, SeededRng(key)),
        is_lying=claim != report.truth_observation,
    )


def make_camp_debrief_reports(state: RunState, day: int, card: NightEventCard) -> tuple[PatrolReport, ...]:
    key = decision_key(state.seed, "camp-debrief", week=state.week, day=day)
    truth_rng = SeededRng(key)
    threat = state.hidden.threat_seed
    sanity = state.player_stats.sanity
    curve = tables.threat_escalation_curve(day)
    calm_night = card.is_calm
    count = truth_rng.next_int(2, 4)

    reports: list[PatrolReport] = []
    for npc in _iter_reporters(truth_rng, state.npc_profiles, count):
        truth = debrief_truth_for_threat(truth_rng, threat, day, calm_night)
        lie_chance = clamp(
            tables.CAMP_LIE_BASE[threat]
            + (100 - npc.trust_in_player) / 310
            + npc.belief / 620
            + curve * 0.05
            - (0.05 if calm_night else 0),
            0.03,
            0.74,
        )
        mistake_chance = clamp(
            tables.CAMP_MISTAKE_BASE[threat]
            + npc.fear / 230
            + npc.belief / 360
            - npc.loyalty / 620
            + curve * 0.08
            - (0.08 if calm_night else 0),
            0.06,
            0.9,
        )
        roll = truth_rng.next_float()
        is_lying = roll < lie_chance
        is_mistaken = not is_lying and roll < lie_chance + mistake_chance
        claim = distorted_claim_for_npc(truth_rng, truth, npc, threat) if is_lying or is_mistaken else truth
        confidence = round(
            clamp((npc.loyalty + npc.trust_in_player) / 220 + truth_rng.next_float() * 0.25, 0.1, 0.98), 2
        )
        presentation_rng = SeededRng(f"{key}:presentation:{npc.id}")
        reports.append(
            PatrolReport(
                npc_id=npc.id,
                npc_name=npc.name,
                claimed_observations=(claim,),
                truth_observation=truth,
                presented_claim=claim_to_presentation(claim, sanity, presentation_rng),
                confidence=confidence,
                emotion=emotion_for_report(truth_rng, npc, claim),
                is_lying=is_lying,
            )
        )

    if (
        not calm_night
        and len(reports) > 1
        and not has_conflicting_claims(reports)
        and truth_rng.next_float() < tables.FORCED_CONFLICT_CHANCE
    ):
        target = truth_rng.pick(reports)
        if target.claim == tables.NOTHING_UNUSUAL:
            forced = truth_rng.pick(tables.ALARMING_DEBRIEF_CLAIMS)
        else:
            forced = tables.NOTHING_UNUSUAL
        index = reports.index(target)
        reports[index] = _with_claim(target, forced, sanity, f"{key}:presentation:{target.npc_id}:forced")

    if calm_night and reports and not any(report.claim == tables.NOTHING_UNUSUAL for report in reports):
        target = sorted(reports, key=lambda report: report.confidence, reverse=True)[0]
        index = reports.index(target)
        reports[index] = _with_claim(
            target, tables.NOTHING_UNUSUAL, sanity, f"{key}:presentation:{target.npc_id}:calm-fallback"
        )

    return tuple(reports)


def make_patrol_field_reports(state: RunState, day: int, observation_pool: Sequence[str]) -> tuple[PatrolReport, ...]:
    key = decision_key(state.seed, "patrol-field-reports", week=state.week, day=day)
    truth_rng = SeededRng(key)
    threat = state.hidden.threat_seed
    curve = tables.threat_escalation_curve(day)
    count = truth_rng.next_int(2, 3)

    reports = []
    for npc in _iter_reporters(truth_rng, state.npc_profiles, count):
        truth = truth_rng.pick(observation_pool)
        lie_chance = clamp(
            tables.FIELD_LIE_BASE[threat] + (100 - npc.trust_in_player) / 360 + npc.belief / 700 + curve * 0.04,
            0.02,
            0.58,
        )
        mistake_chance = clamp(
            tables.FIELD_MISTAKE_BASE[threat]
            + npc.fear / 280
            + npc.belief / 460
            - npc.loyalty / 700
            + curve * 0.05,
            0.04,
            0.72,
        )
        roll = truth_rng.next_float()
        is_lying = roll < lie_chance
        is_mistaken = not is_lying and roll < lie_chance + mistake_chance
        claim = distorted_claim_for_npc(truth_rng, truth, npc, threat) if is_lying or is_mistaken else truth
        presentation_rng = SeededRng(f"{key}:presentation:{npc.id}")
        reports.append(
            PatrolReport(
                npc_id=npc.id,
                npc_name=npc.name,
                claimed_observations=(claim,),
                truth_observation=truth,
                presented_claim=claim_to_presentation(claim, state.player_stats.sanity, presentation_rng),
                confidence=round(clamp(0.5 + truth_rng.next_float() * 0.4, 0.2, 0.95), 2),
                emotion=truth_rng.pick((ReportEmotion.STEADY, ReportEmotion.ANXIOUS, ReportEmotion.DEFIANT)),
                is_lying=is_lying,
            )
        )
    return tuple(reports)


def summarize_flags(reports: Sequence[PatrolReport], assignment: DayAssignment) -> list[str]:
    flags = []
    if any(report.is_lying for report in reports):
        flags.append("POTENTIAL_FALSE_REPORT")
    if has_conflicting_claims(reports):
        flags.append("CONFLICTING_TESTIMONY")
    average = sum(report.confidence for report in reports) / max(len(reports), 1)
    if average < tables.LOW_CONFIDENCE_AVERAGE:
        flags.append("LOW_CONFIDENCE")
    if assignment.has_extra_watch:
        flags.append("EXTRA_DUTY_APPLIED")
    return flags
