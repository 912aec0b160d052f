import sys
from dataclasses import replace
from pathlib import Path
import unittest
from typing import Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lowborn.application.services.balance_tables import NOTHING_UNUSUAL
from lowborn.application.services.perception import claim_to_presentation, distortion_level_for_sanity
from lowborn.application.services.run_engine import begin_night, create_run, resolve_night_scene, start_next_day
from lowborn.application.services.seed_policy import SeededRng
from lowborn.application.services.testimony import has_conflicting_claims, make_patrol_field_reports
from lowborn.domain.models.night import DistortionLevel, NightEventTag, SceneType
from lowborn.domain.models.run_state import DayPhase, RunState, ThreatSeed
from lowborn.domain.models.schedule import DutyType
from lowborn.domain.models.stats import PlayerStats


def _advance_to_duty_day(seed: str, patrol: bool) -> Optional[RunState]:
    """Walk a run forward until a DAY phase lands on the requested duty kind."""

    state = create_run(seed)
    while state.phase is not DayPhase.WEEK_SUMMARY:
        if state.phase is DayPhase.DAY:
            if (state.today.assigned_duty is DutyType.PATROL) == patrol:
                return state
            state = begin_night(state)
        elif state.phase is DayPhase.NIGHT_SCENE:
            state = resolve_night_scene(state)
        else:
            state = start_next_day(state)
    return None


def _with_sanity(state: RunState, sanity: int) -> RunState:
    return state.evolve(player_stats=replace(state.player_stats, sanity=sanity))


class PerceptionTests(unittest.TestCase):
    def test_distortion_bands(self) -> None:
        self.assertIs(distortion_level_for_sanity(80), DistortionLevel.NONE)
        self.assertIs(distortion_level_for_sanity(45), DistortionLevel.NONE)
        self.assertIs(distortion_level_for_sanity(44), DistortionLevel.UNEASY)
        self.assertIs(distortion_level_for_sanity(25), DistortionLevel.UNEASY)
        self.assertIs(distortion_level_for_sanity(24), DistortionLevel.SEVERE)

    def test_claims_are_verbatim_while_sanity_holds(self) -> None:
        self.assertEqual(claim_to_presentation("howl", 35, SeededRng("a")), "howl")
        self.assertEqual(claim_to_presentation(NOTHING_UNUSUAL, 70, SeededRng("a")), NOTHING_UNUSUAL)

    def test_low_sanity_rewrites_claim_text(self) -> None:
        quiet = claim_to_presentation(NOTHING_UNUSUAL, 10, SeededRng("b"))
        self.assertTrue(quiet.startswith(NOTHING_UNUSUAL))
        self.assertNotEqual(quiet, NOTHING_UNUSUAL)
        self.assertNotEqual(claim_to_presentation(NOTHING_UNUSUAL, 30, SeededRng("b")), quiet)
        loud = claim_to_presentation("missing man", 20, SeededRng("c"))
        self.assertTrue(loud.endswith(": missing man"))


class TruthSeparationTests(unittest.TestCase):
    def test_camp_truth_does_not_depend_on_sanity(self) -> None:
        checked = 0
        for index in range(30):
            state = _advance_to_duty_day(f"camp-truth-{index}", patrol=False)
            if state is None:
                continue
            clear = begin_night(_with_sanity(state, 80)).active_night_scene
            shaken = begin_night(_with_sanity(state, 10)).active_night_scene

            self.assertEqual(clear.event_card, shaken.event_card)
            self.assertEqual(
                [(r.npc_id, r.truth_observation, r.is_lying, r.claim) for r in clear.debrief_reports],
                [(r.npc_id, r.truth_observation, r.is_lying, r.claim) for r in shaken.debrief_reports],
            )
            self.assertNotEqual(
                [r.presented_claim for r in clear.debrief_reports],
                [r.presented_claim for r in shaken.debrief_reports],
            )
            self.assertEqual(clear.presented_outcome, clear.event_card.outcome)
            self.assertNotEqual(shaken.presented_outcome, clear.presented_outcome)
            checked += 1
        self.assertGreater(checked, 0)

    def test_patrol_truth_does_not_depend_on_sanity(self) -> None:
        checked = 0
        for index in range(30):
            state = _advance_to_duty_day(f"patrol-truth-{index}", patrol=True)
            if state is None:
                continue
            pool = ("nothing unusual", "tracks in snow", "howl", "distant light")
            clear = make_patrol_field_reports(_with_sanity(state, 90), state.today.day, pool)
            shaken = make_patrol_field_reports(_with_sanity(state, 5), state.today.day, pool)
            self.assertEqual(
                [(r.truth_observation, r.is_lying, r.claim) for r in clear],
                [(r.truth_observation, r.is_lying, r.claim) for r in shaken],
            )
            self.assertNotEqual([r.presented_claim for r in clear], [r.presented_claim for r in shaken])
            checked += 1
        self.assertGreater(checked, 0)


class CalmCampTests(unittest.TestCase):
    def test_mundane_camp_nights_keep_a_quiet_report(self) -> None:
        mundane_nights = 0
        for index in range(80):
            state = _advance_to_duty_day(f"calm-camp-{index}", patrol=False)
            if state is None:
                continue
            forced = state.evolve(
                hidden=replace(state.hidden, intense_streak=3, threat_seed=ThreatSeed.NONE),
            )
            scene = begin_night(forced).active_night_scene
            self.assertIs(scene.scene_type, SceneType.CAMP)
            if not scene.event_card.has_tag(NightEventTag.MUNDANE):
                continue
            mundane_nights += 1
            self.assertTrue(
                any(report.claim == NOTHING_UNUSUAL for report in scene.debrief_reports),
                f"{state.seed} day {state.today.day}",
            )
        self.assertGreater(mundane_nights, 0)

    def test_conflict_detection(self) -> None:
        state = _advance_to_duty_day("conflict-detection", patrol=False) or _advance_to_duty_day("conflict-b", patrol=False)
        reports = begin_night(state).active_night_scene.debrief_reports
        claims = {report.claim for report in reports}
        expected = NOTHING_UNUSUAL in claims and len(claims - {NOTHING_UNUSUAL}) > 0
        self.assertEqual(has_conflicting_claims(reports), expected)


class PlayerStatsTests(unittest.TestCase):
    def test_apply_clamps_to_stat_range(self) -> None:
        stats = PlayerStats(warmth=5, stamina=98, injury=0, hunger=50, sanity=50).apply(
            {"warmth": -20, "stamina": 10, "injury": -4}
        )
        self.assertEqual(stats.warmth, 0)
        self.assertEqual(stats.stamina, 100)
        self.assertEqual(stats.injury, 0)
        self.assertEqual(stats.hunger, 50)


if __name__ == "__main__":
    unittest.main()
