import copy
import json
import sys
from datetime import datetime
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lowborn.application.services.npc_roster import build_npc_profiles, pick_threat_seed
from lowborn.application.services.run_engine import begin_night, create_run, resolve_night_scene, start_next_day
from lowborn.application.services.simulation_batch import play_out_week
from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.night import SceneType
from lowborn.domain.models.npc import NpcRumorState
from lowborn.domain.models.run_state import DayPhase, ThreatSeed
from lowborn.domain.models.schedule import DutyType, ShiftType
from lowborn.infrastructure.inmemory.inmemory_save_repo import InMemorySaveRepository
from lowborn.infrastructure.save_migrations import (
    CURRENT_SAVE_VERSION,
    LEGACY_DAWN_SUMMARY,
    migrate_save_payload,
    read_save_text,
    to_save_envelope,
    write_save_text,
)
from lowborn.infrastructure.save_schema import (
    DawnReportModel,
    DawnReportV4Model,
    GameStateModel,
    GameStateV3Model,
    GameStateV4Model,
    GameStateV5Model,
    HiddenStateModel,
    HiddenStateV5Model,
    NightLogModel,
    NightLogV4Model,
    NightSceneModel,
    NightSceneV4Model,
    validate_payload,
)
from lowborn.infrastructure.state_codec import encode_profile, encode_state

SAVED_AT = "2025-11-02T06:00:00+00:00"


def _mid_week_state():
    state = create_run("migration-seed")
    for _ in range(2):
        state = start_next_day(resolve_night_scene(begin_night(state)))
    return state


def _legacy_envelope(version: int, game_state: dict) -> dict:
    return {"version": version, "savedAt": SAVED_AT, "gameState": game_state}


class CurrentEnvelopeTests(unittest.TestCase):
    def test_current_envelope_is_not_migrated(self) -> None:
        state = _mid_week_state()
        result = migrate_save_payload(to_save_envelope(state))
        self.assertIsNotNone(result)
        self.assertFalse(result.migrated)
        self.assertEqual(result.state, state)

    def test_envelope_shape(self) -> None:
        envelope = to_save_envelope(create_run("shape"))
        self.assertEqual(envelope["version"], CURRENT_SAVE_VERSION)
        self.assertIsNotNone(datetime.fromisoformat(envelope["savedAt"]).tzinfo)
        self.assertEqual(envelope["gameState"]["seed"], "shape")
        self.assertIn("todayIndex", envelope["gameState"])

    def test_every_phase_survives_a_text_round_trip(self) -> None:
        state = create_run("round-trip")
        night = begin_night(state)
        dawn = resolve_night_scene(night)
        done = play_out_week(dawn)
        for snapshot in (state, night, dawn, done):
            result = read_save_text(write_save_text(snapshot))
            self.assertFalse(result.migrated)
            self.assertEqual(result.state, snapshot)


class LegacyEnvelopeTests(unittest.TestCase):
    def test_v5_without_streak_or_summary(self) -> None:
        state = _mid_week_state()
        game = encode_state(state)
        del game["hidden"]["intenseStreak"]
        del game["weekSummary"]

        result = migrate_save_payload(_legacy_envelope(5, game))

        self.assertTrue(result.migrated)
        self.assertEqual(result.state.hidden.intense_streak, 0)
        self.assertIsNone(result.state.week_summary)
        self.assertEqual(result.state.schedule, state.schedule)
        self.assertEqual(result.state.night_logs, state.night_logs)

    def test_v5_finished_week_rebuilds_missing_summary(self) -> None:
        done = play_out_week(create_run("rebuild-summary"))
        game = encode_state(done)
        game["weekSummary"] = None

        result = migrate_save_payload(_legacy_envelope(5, game))

        self.assertIs(result.state.phase, DayPhase.WEEK_SUMMARY)
        self.assertEqual(result.state.week_summary, done.week_summary)

    def test_v5_drops_blank_event_lines_and_keeps_hidden_progress(self) -> None:
        state = _mid_week_state()
        game = encode_state(state)
        game["hidden"]["intenseStreak"] = None
        game["recentEvents"] = ["", *game["recentEvents"], ""]

        result = migrate_save_payload(_legacy_envelope(5, game))

        self.assertTrue(result.migrated)
        self.assertEqual(result.state.recent_events, state.recent_events)
        self.assertEqual(result.state.hidden.rumor_adoption, state.hidden.rumor_adoption)
        self.assertEqual(result.state.hidden.investigation_focus, state.hidden.investigation_focus)

    def test_legacy_shapes_stand_apart_from_the_current_one(self) -> None:
        legacy_models = (
            GameStateV5Model,
            HiddenStateV5Model,
            GameStateV4Model,
            NightSceneV4Model,
            DawnReportV4Model,
            NightLogV4Model,
            GameStateV3Model,
        )
        current_models = (GameStateModel, HiddenStateModel, NightSceneModel, DawnReportModel, NightLogModel)
        for legacy in legacy_models:
            for current in current_models:
                self.assertFalse(issubclass(legacy, current), f"{legacy.__name__} extends {current.__name__}")

    def test_v4_gets_a_fresh_rumor_network(self) -> None:
        night = begin_night(_mid_week_state())
        game = encode_state(night)
        game["hidden"] = {"threatSeed": "REAL"}
        del game["activeNightScene"]["investigationActive"]
        del game["activeNightScene"]["debriefReports"]
        for log in game["nightLogs"]:
            del log["rumorPackets"]
            log["rumorReachCount"] = None

        result = migrate_save_payload(_legacy_envelope(4, game))

        self.assertTrue(result.migrated)
        migrated = result.state
        self.assertIs(migrated.phase, DayPhase.NIGHT_SCENE)
        self.assertIs(migrated.hidden.threat_seed, ThreatSeed.REAL)
        self.assertFalse(migrated.active_night_scene.investigation_active)
        self.assertEqual(migrated.active_night_scene.debrief_reports, ())
        self.assertEqual(set(migrated.hidden.rumor_adoption), {npc.id for npc in night.npc_profiles})
        self.assertTrue(all(node == NpcRumorState() for node in migrated.hidden.rumor_adoption.values()))
        self.assertTrue(all(log.rumor_packets == () for log in migrated.night_logs))
        self.assertTrue(all(log.rumor_reach_count == 0 for log in migrated.night_logs))

    def test_v4_unknown_threat_becomes_none(self) -> None:
        game = encode_state(create_run("odd-threat"))
        game["hidden"] = {"threatSeed": "HAUNTED"}
        result = migrate_save_payload(_legacy_envelope(4, game))
        self.assertIs(result.state.hidden.threat_seed, ThreatSeed.NONE)

    def test_v3_night_phase_becomes_dawn_report(self) -> None:
        dawn = resolve_night_scene(begin_night(create_run("v3-night")))
        game = encode_state(dawn)
        game["phase"] = "NIGHT"
        game["hidden"] = {"threatSeed": "EXAGGERATED"}
        game["recentEvents"] = ["Camp settled.", "", "Night fell."]
        for key in ("activeNightScene", "dawnReport", "weekSummary"):
            del game[key]

        result = migrate_save_payload(_legacy_envelope(3, game))

        migrated = result.state
        self.assertTrue(result.migrated)
        self.assertIs(migrated.phase, DayPhase.DAWN_REPORT)
        self.assertEqual(migrated.dawn_report.day, 1)
        self.assertEqual(migrated.dawn_report.summary, LEGACY_DAWN_SUMMARY)
        self.assertEqual(migrated.dawn_report.rumor_reach_count, dawn.night_logs[0].rumor_reach_count)
        self.assertEqual(migrated.dawn_report.deltas["morale"], dawn.night_logs[0].camp_delta["morale"])
        self.assertIs(migrated.hidden.threat_seed, ThreatSeed.EXAGGERATED)
        self.assertEqual(migrated.recent_events, ("Camp settled.", "Night fell."))

    def test_v3_day_phase_stays_day(self) -> None:
        game = encode_state(create_run("v3-day"))
        game["hidden"] = {"threatSeed": "NONE"}
        result = migrate_save_payload(_legacy_envelope(3, game))
        self.assertIs(result.state.phase, DayPhase.DAY)
        self.assertIsNone(result.state.dawn_report)

    def test_v2_schedule_logs_and_reports_are_upgraded(self) -> None:
        seed = "v2-seed"
        week_schedule = [
            {
                "day": day,
                "label": f"Day {day}",
                "dutyType": "PATROL" if day in (1, 4) else "CAMP",
                "shift": "DAWN" if day in (1, 4) else "DUSK",
                "resolved": day == 1,
                "eventTitle": "Quiet Ridge" if day == 1 else None,
                "summary": "The ridge stayed quiet." if day == 1 else "",
            }
            for day in range(1, 8)
        ]
        game = {
            "seed": seed,
            "week": 1,
            "day": 1,
            "weekSchedule": week_schedule,
            "playerStats": {"warmth": 50, "stamina": 58, "injury": 10, "hunger": 40, "sanity": 52},
            "campStats": {"supplies": 48, "morale": 51, "discipline": 49, "rumor": 27},
            "npcProfiles": [encode_profile(npc) for npc in build_npc_profiles(seed)],
            "nightLogs": [
                {
                    "day": 1,
                    "events": ["Quiet Ridge"],
                    "deltas": {"player": {"warmth": -1}, "camp": {"morale": 2, "rumor": -1}},
                    "reports": [
                        {
                            "npcId": "npc-1",
                            "claimedObservations": ["howl"],
                            "confidence": 0.6,
                            "emotion": "ANXIOUS",
                            "isLying": False,
                        }
                    ],
                    "flags": [],
                }
            ],
            "recentEvents": ["Week 1 began."],
            "todaySummary": "Patrol at dawn.",
            "complete": False,
            "hidden": {"threatSeed": "REAL"},
        }

        result = migrate_save_payload(_legacy_envelope(2, game))

        migrated = result.state
        self.assertTrue(result.migrated)
        self.assertIs(migrated.phase, DayPhase.DAWN_REPORT)
        self.assertEqual(migrated.dawn_report.deltas["morale"], 2)
        self.assertEqual(migrated.dawn_report.deltas["warmth"], -1)
        self.assertIs(migrated.schedule[0].assigned_duty, DutyType.PATROL)
        self.assertIn(migrated.schedule[1].assigned_duty, (DutyType.CAMP_WORK, DutyType.CAMP_WAIT, DutyType.REST))
        self.assertIsNone(migrated.schedule[1].summary)
        log = migrated.night_logs[0]
        self.assertEqual(log.flags, ("LEGACY_LOG_1",))
        self.assertIs(log.duty_resolved, DutyType.PATROL)
        report = log.reports[0]
        self.assertEqual(report.npc_name, "npc-1")
        self.assertEqual(report.truth_observation, "howl")
        self.assertEqual(report.presented_claim, "howl")

    def test_v1_snapshot_is_rebuilt_from_seed(self) -> None:
        seed = "v1-seed"
        payload = {
            "version": 1,
            "savedAt": SAVED_AT,
            "snapshot": {
                "seed": seed,
                "week": 1,
                "day": 3,
                "schedule": [
                    {
                        "day": day,
                        "label": f"Day {day}",
                        "plannedDuty": "PATROL" if day == 2 else "CAMP",
                        "resolved": day < 3,
                        "eventTitle": None,
                        "summary": None,
                    }
                    for day in range(1, 8)
                ],
                "stats": {
                    "supplies": 40,
                    "morale": 45,
                    "discipline": 50,
                    "rumor": 30,
                    "warmth": 50,
                    "stamina": 70,
                    "sanity": 60,
                },
                "todaySummary": "Day 3 posted.",
                "log": ["Legacy start", ""],
                "complete": False,
            },
        }

        result = migrate_save_payload(payload)

        migrated = result.state
        self.assertTrue(result.migrated)
        self.assertIs(migrated.phase, DayPhase.DAY)
        self.assertEqual(migrated.today_index, 2)
        self.assertEqual(migrated.player_stats.injury, 30)
        self.assertEqual(migrated.player_stats.hunger, 60)
        self.assertEqual(migrated.camp_stats.supplies, 40)
        self.assertEqual(migrated.npc_profiles, build_npc_profiles(seed))
        self.assertIs(migrated.hidden.threat_seed, pick_threat_seed(seed))
        self.assertEqual(
            [entry.assigned_shift for entry in migrated.schedule[:3]],
            [ShiftType.DAWN, ShiftType.DAY, ShiftType.DUSK],
        )
        self.assertIs(migrated.schedule[1].assigned_duty, DutyType.PATROL)
        self.assertEqual(migrated.recent_events, ("Legacy start",))
        self.assertEqual(migrated.night_logs, ())


class MigrationMissTests(unittest.TestCase):
    def test_unrecognised_payloads_yield_none(self) -> None:
        self.assertIsNone(migrate_save_payload({"version": 9, "savedAt": SAVED_AT, "gameState": {}}))
        self.assertIsNone(migrate_save_payload({"hello": "world"}))
        self.assertIsNone(migrate_save_payload("not a save"))
        self.assertIsNone(migrate_save_payload(None))

    def test_out_of_range_stat_is_a_miss(self) -> None:
        envelope = to_save_envelope(create_run("bad-stat"))
        envelope["gameState"]["campStats"]["morale"] = 150
        self.assertIsNone(migrate_save_payload(envelope))

    def test_wrong_schedule_length_is_a_miss(self) -> None:
        envelope = to_save_envelope(create_run("short-week"))
        envelope["gameState"]["schedule"] = envelope["gameState"]["schedule"][:6]
        self.assertIsNone(migrate_save_payload(envelope))

    def test_structurally_valid_but_inconsistent_payload_is_logged_miss(self) -> None:
        envelope = to_save_envelope(create_run("inconsistent"))
        envelope["gameState"]["phase"] = "NIGHT_SCENE"
        with self.assertLogs("lowborn.infrastructure.save_migrations", level="WARNING") as captured:
            self.assertIsNone(migrate_save_payload(envelope))
        self.assertIn("SaveEnvelopeV6", captured.output[0])

    def test_unreadable_text_is_treated_as_empty(self) -> None:
        self.assertIsNone(read_save_text(None))
        self.assertIsNone(read_save_text(""))
        with self.assertLogs("lowborn.infrastructure.save_migrations", level="WARNING"):
            self.assertIsNone(read_save_text("{not json"))

    def test_validate_payload_raises_domain_error(self) -> None:
        with self.assertRaises(StateValidationError) as ctx:
            validate_payload(GameStateModel, {"seed": ""})
        self.assertIn("GameStateModel rejected the payload", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)


class InMemorySaveRepositoryTests(unittest.TestCase):
    def test_loading_a_legacy_slot_rewrites_it_as_current(self) -> None:
        state = _mid_week_state()
        game = encode_state(state)
        del game["hidden"]["intenseStreak"]
        repository = InMemorySaveRepository({"old": json.dumps(_legacy_envelope(5, game))})

        loaded = repository.load("old")

        self.assertEqual(loaded.seed, state.seed)
        self.assertEqual(json.loads(repository.raw_text("old"))["version"], CURRENT_SAVE_VERSION)

    def test_current_slot_text_is_left_alone(self) -> None:
        text = write_save_text(create_run("untouched"))
        repository = InMemorySaveRepository({"slot": text})
        repository.load("slot")
        self.assertEqual(repository.raw_text("slot"), text)

    def test_missing_and_corrupt_slots_load_as_none(self) -> None:
        repository = InMemorySaveRepository({"broken": "{{{"})
        self.assertIsNone(repository.load("absent"))
        self.assertIsNone(repository.load("broken"))

    def test_save_clear_and_list(self) -> None:
        repository = InMemorySaveRepository()
        repository.save("b", create_run("b"))
        repository.save("a", create_run("a"))
        self.assertEqual(repository.list_slots(), ["a", "b"])
        repository.clear("a")
        repository.clear("missing")
        self.assertEqual(repository.list_slots(), ["b"])

    def test_payload_is_not_mutated_by_migration(self) -> None:
        game = encode_state(create_run("immutable"))
        envelope = _legacy_envelope(5, game)
        snapshot = copy.deepcopy(envelope)
        migrate_save_payload(envelope)
        self.assertEqual(envelope, snapshot)


if __name__ == "__main__":
    unittest.main()
