import sys
from dataclasses import replace
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lowborn.application.services.run_engine import begin_night, create_run, resolve_night_scene
from lowborn.domain.errors import LowbornError, SaveSlotNotFoundError, StateValidationError
from lowborn.domain.models.night import DawnReport
from lowborn.domain.models.run_state import RECENT_EVENT_LIMIT, DayPhase, HiddenState, ThreatSeed
from lowborn.domain.models.schedule import DailyDisruption, DayAssignment, DisruptionType, DutyType, ShiftType
from lowborn.domain.models.stats import CampStats, PlayerStats, merge_player_deltas, with_sign
from lowborn.infrastructure.save_migrations import migrate_save_payload, to_save_envelope


class RunStateValidationTests(unittest.TestCase):
    def test_phase_payloads_must_match(self) -> None:
        state = create_run("phase-payloads")
        night = begin_night(state)
        dawn = resolve_night_scene(night)

        with self.assertRaises(StateValidationError):
            state.evolve(phase=DayPhase.NIGHT_SCENE)
        with self.assertRaises(StateValidationError):
            night.evolve(phase=DayPhase.DAY)
        with self.assertRaises(StateValidationError):
            state.evolve(dawn_report=dawn.dawn_report)
        with self.assertRaises(StateValidationError):
            state.evolve(phase=DayPhase.WEEK_SUMMARY)

    def test_validation_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            PlayerStats(warmth=101)
        self.assertTrue(issubclass(StateValidationError, LowbornError))

    def test_schedule_must_hold_seven_days(self) -> None:
        state = create_run("short-schedule")
        with self.assertRaises(StateValidationError):
            state.evolve(schedule=state.schedule[:6])
        with self.assertRaises(StateValidationError):
            state.evolve(schedule=tuple(reversed(state.schedule)))

    def test_unknown_enum_value_is_rejected(self) -> None:
        state = create_run("bad-enum")
        with self.assertRaises(StateValidationError):
            state.evolve(phase="NIGHT")
        with self.assertRaises(StateValidationError):
            replace(state.today, assigned_duty="GUARD")

    def test_today_index_bounds(self) -> None:
        state = create_run("index-bounds")
        with self.assertRaises(StateValidationError):
            state.evolve(today_index=7)

    def test_recent_events_are_capped(self) -> None:
        state = create_run("capped")
        merged = state.with_events(*[f"line {index}" for index in range(RECENT_EVENT_LIMIT + 30)], "")
        self.assertEqual(len(merged), RECENT_EVENT_LIMIT)
        self.assertEqual(merged[-1], f"line {RECENT_EVENT_LIMIT + 29}")
        with self.assertRaises(StateValidationError):
            state.evolve(recent_events=tuple("x" for _ in range(RECENT_EVENT_LIMIT + 1)))


class DayAssignmentCoherenceTests(unittest.TestCase):
    def _day(self, scheduled: DutyType, assigned: DutyType, disruption: DailyDisruption) -> DayAssignment:
        return DayAssignment(
            day=2,
            label="Day 2 - Longwind",
            scheduled_duty=scheduled,
            scheduled_shift=ShiftType.NIGHT if scheduled is DutyType.NIGHT_WATCH else ShiftType.DAY,
            assigned_duty=assigned,
            assigned_shift=ShiftType.DAWN,
            disruption=disruption,
        )

    def test_coherent_disruptions_construct(self) -> None:
        self._day(DutyType.CAMP_WORK, DutyType.CAMP_WORK, DailyDisruption())
        self._day(DutyType.NIGHT_WATCH, DutyType.PATROL, DailyDisruption(DisruptionType.FILL_IN_PATROL, 0.3))
        self._day(DutyType.PATROL, DutyType.REST, DailyDisruption(DisruptionType.SWAP, 0.3))
        self._day(DutyType.CAMP_WAIT, DutyType.PATROL, DailyDisruption(DisruptionType.SWAP, 0.3))
        self._day(
            DutyType.PATROL,
            DutyType.PATROL,
            DailyDisruption(DisruptionType.EXTRA_DUTY, 0.3, extra_duty=DutyType.NIGHT_WATCH),
        )

    def test_fill_in_patrol_must_land_on_patrol(self) -> None:
        fill_in = DailyDisruption(DisruptionType.FILL_IN_PATROL, 0.5)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.PATROL, DutyType.CAMP_WORK, fill_in)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.PATROL, DutyType.PATROL, fill_in)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.CAMP_WORK, DutyType.REST, fill_in)

    def test_undisrupted_day_keeps_scheduled_duty(self) -> None:
        with self.assertRaises(StateValidationError):
            self._day(DutyType.CAMP_WORK, DutyType.PATROL, DailyDisruption())

    def test_extra_duty_keeps_scheduled_duty_and_skips_night_watch(self) -> None:
        extra = DailyDisruption(DisruptionType.EXTRA_DUTY, 0.3, extra_duty=DutyType.NIGHT_WATCH)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.CAMP_WORK, DutyType.REST, extra)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.NIGHT_WATCH, DutyType.NIGHT_WATCH, extra)

    def test_swap_must_cross_the_patrol_line(self) -> None:
        swap = DailyDisruption(DisruptionType.SWAP, 0.3)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.CAMP_WORK, DutyType.REST, swap)
        with self.assertRaises(StateValidationError):
            self._day(DutyType.PATROL, DutyType.PATROL, swap)

    def test_decoding_an_incoherent_saved_day_is_a_miss(self) -> None:
        envelope = to_save_envelope(create_run("incoherent-day"))
        entry = envelope["gameState"]["schedule"][0]
        entry["disruption"] = {"type": "NONE", "chance": 0.3, "reason": None, "extraDuty": None}
        entry["assignedDuty"] = "REST" if entry["scheduledDuty"] == "PATROL" else "PATROL"
        self.assertIsNone(migrate_save_payload(envelope))


class HiddenStateTests(unittest.TestCase):
    def test_focus_and_streak_bounds(self) -> None:
        HiddenState(threat_seed=ThreatSeed.REAL, investigation_focus=3, intense_streak=7)
        with self.assertRaises(StateValidationError):
            HiddenState(threat_seed=ThreatSeed.REAL, investigation_focus=4)
        with self.assertRaises(StateValidationError):
            HiddenState(threat_seed=ThreatSeed.REAL, intense_streak=8)
        with self.assertRaises(StateValidationError):
            HiddenState(threat_seed="REAL")


class StatsTests(unittest.TestCase):
    def test_defaults_match_opening_camp(self) -> None:
        self.assertEqual(
            PlayerStats().as_dict(), {"warmth": 55, "stamina": 60, "injury": 8, "hunger": 35, "sanity": 55}
        )
        self.assertEqual(CampStats().as_dict(), {"supplies": 50, "morale": 50, "discipline": 50, "rumor": 25})

    def test_merge_fills_every_key(self) -> None:
        merged = merge_player_deltas({"warmth": -1}, {"warmth": -2, "sanity": 1})
        self.assertEqual(merged, {"warmth": -3, "stamina": 0, "injury": 0, "hunger": 0, "sanity": 1})

    def test_with_sign(self) -> None:
        self.assertEqual(with_sign(3), "+3")
        self.assertEqual(with_sign(0), "0")
        self.assertEqual(with_sign(-2), "-2")

    def test_dawn_report_needs_all_deltas(self) -> None:
        with self.assertRaises(StateValidationError):
            DawnReport(day=1, title="Dawn", summary="Quiet.", rumor_reach_count=0, deltas={"morale": 1})


class ErrorTests(unittest.TestCase):
    def test_missing_slot_message(self) -> None:
        error = SaveSlotNotFoundError("autosave")
        self.assertEqual(str(error), "No save stored in slot 'autosave'.")
        self.assertIsInstance(error, KeyError)
        self.assertIsInstance(error, LowbornError)


if __name__ == "__main__":
    unittest.main()
