import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lowborn.application.services.run_engine import begin_night, create_run, resolve_night_scene
from lowborn.application.services.run_journal import (
    PENDING,
    build_run_journal_entries,
    build_shareable_run_text,
    summarize_log_deltas,
)
from lowborn.application.services.simulation_batch import play_out_week
from lowborn.domain.models.night import NightLog
from lowborn.domain.models.schedule import DisruptionType, DutyType


class RunJournalTests(unittest.TestCase):
    def test_fresh_run_journal_is_all_pending(self) -> None:
        state = create_run("journal-fresh")
        entries = build_run_journal_entries(state)
        self.assertEqual(len(entries), 7)
        for entry in entries:
            self.assertEqual(entry.night_summary, PENDING)
            self.assertEqual(entry.dawn_delta_summary, PENDING)

    def test_assignment_and_disruption_columns(self) -> None:
        state = create_run("journal-columns")
        first = build_run_journal_entries(state)[0]
        today = state.schedule[0]
        self.assertEqual(first.assignment, f"{today.assigned_duty.value} / {today.assigned_shift.value}")
        if today.disruption.type is DisruptionType.NONE:
            self.assertEqual(first.disruption, "None")
        else:
            self.assertEqual(first.disruption, today.disruption.reason)

    def test_resolved_night_fills_summary_and_deltas(self) -> None:
        state = resolve_night_scene(begin_night(create_run("journal-night")))
        entry = build_run_journal_entries(state)[0]
        self.assertEqual(entry.night_summary, state.schedule[0].summary)
        self.assertEqual(entry.dawn_delta_summary, summarize_log_deltas(state.night_logs[0]))
        self.assertEqual(build_run_journal_entries(state)[1].night_summary, PENDING)

    def test_delta_summary_format(self) -> None:
        log = NightLog(
            day=2,
            events=("Quiet Ridge",),
            duty_resolved=DutyType.CAMP_WAIT,
            debrief_choice=None,
            rumor_reach_count=0,
            player_delta={"warmth": -2, "sanity": 1},
            camp_delta={"supplies": 1, "rumor": 3},
        )
        self.assertEqual(
            summarize_log_deltas(log),
            "Sup +1 | Mor 0 | Dis 0 | Rum +3 | Warm -2 | Sta 0 | San +1 | Inj 0",
        )
        self.assertEqual(summarize_log_deltas(None), PENDING)

    def test_shareable_text_layout(self) -> None:
        state = create_run("journal-text")
        lines = build_shareable_run_text(state).splitlines()
        self.assertEqual(lines[0], "Lowborn Run Journal")
        self.assertEqual(lines[1], "Seed: journal-text")
        self.assertEqual(lines[2], "Week: 1 | Phase: DAY | Nights resolved: 0/7")
        self.assertTrue(lines[3].startswith("Camp: supplies 50, morale 50"))
        self.assertTrue(lines[4].startswith("Player: warmth 55"))
        self.assertEqual(lines[5], "")
        self.assertEqual(lines[6], "Daily Journal:")
        self.assertEqual(lines[7], f"Day 1 ({state.schedule[0].label})")
        self.assertTrue(lines[8].startswith("  Assignment: "))
        self.assertNotIn("Week Summary:", lines)

    def test_finished_week_appends_summary(self) -> None:
        state = play_out_week(create_run("journal-done"))
        text = build_shareable_run_text(state)
        self.assertIn("Nights resolved: 7/7", text)
        self.assertIn("Phase: WEEK_SUMMARY", text)
        self.assertIn("\nWeek Summary:\n", text)
        self.assertTrue(text.endswith(state.week_summary.share_text))
        self.assertNotIn(f"  Night: {PENDING}", text)


if __name__ == "__main__":
    unittest.main()
