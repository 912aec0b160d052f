import json
import sys
from pathlib import Path
import unittest

from sqlalchemy import create_engine, text

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from lowborn.application.services.event_bus import EventBus
from lowborn.application.services.run_engine import begin_night, create_run, resolve_night_scene
from lowborn.application.services.run_session_service import RunSessionService
from lowborn.domain.errors import SaveSlotNotFoundError
from lowborn.domain.models.run_state import DayPhase
from lowborn.infrastructure.db.sql_save_repo import SqlSaveRepository
from lowborn.infrastructure.state_codec import encode_state


class SqlSaveRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite:///:memory:", future=True)
        self.repository = SqlSaveRepository(self.engine)
        self.repository.ensure_schema()

    def _row(self, slot: str):
        with self.engine.connect() as conn:
            return conn.execute(
                text("SELECT version, payload_json FROM save_slot WHERE slot = :slot"), {"slot": slot}
            ).first()

    def test_save_and_load_round_trip(self) -> None:
        state = resolve_night_scene(begin_night(create_run("sql-round-trip")))

        self.repository.save("autosave", state)

        self.assertEqual(self.repository.load("autosave"), state)
        self.assertEqual(self._row("autosave").version, 6)

    def test_second_save_overwrites_the_slot(self) -> None:
        first = create_run("sql-overwrite")
        second = begin_night(first)
        self.repository.save("autosave", first)
        self.repository.save("autosave", second)

        self.assertEqual(self.repository.list_slots(), ["autosave"])
        self.assertIs(self.repository.load("autosave").phase, DayPhase.NIGHT_SCENE)

    def test_list_and_clear(self) -> None:
        self.repository.save("zeta", create_run("zeta"))
        self.repository.save("alpha", create_run("alpha"))
        self.assertEqual(self.repository.list_slots(), ["alpha", "zeta"])

        self.repository.clear("zeta")

        self.assertEqual(self.repository.list_slots(), ["alpha"])
        self.assertIsNone(self.repository.load("zeta"))

    def test_missing_slot_is_none_and_require_raises(self) -> None:
        self.assertIsNone(self.repository.load("nothing-here"))
        with self.assertRaises(SaveSlotNotFoundError):
            self.repository.require("nothing-here")

    def test_legacy_row_is_migrated_and_rewritten(self) -> None:
        state = create_run("sql-legacy")
        game = encode_state(state)
        del game["hidden"]["intenseStreak"]
        legacy = json.dumps({"version": 5, "savedAt": "2025-10-01T00:00:00+00:00", "gameState": game})
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO save_slot (slot, version, payload_json, updated_at) "
                    "VALUES ('legacy', 5, :payload, '2025-10-01T00:00:00+00:00')"
                ),
                {"payload": legacy},
            )

        loaded = self.repository.load("legacy")

        self.assertEqual(loaded, state)
        row = self._row("legacy")
        self.assertEqual(row.version, 6)
        self.assertEqual(json.loads(row.payload_json)["version"], 6)

    def test_corrupt_row_loads_as_none(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO save_slot (slot, version, payload_json, updated_at) "
                    "VALUES ('broken', 6, '{\"version\": 6}', 'now')"
                )
            )
        self.assertIsNone(self.repository.load("broken"))

    def test_session_service_autosaves_to_sql(self) -> None:
        service = RunSessionService(EventBus(), repository=self.repository, slot="campaign")
        service.new_run("sql-session")
        night = service.begin_night()

        resumed = RunSessionService(EventBus(), repository=self.repository, slot="campaign").resume()

        self.assertEqual(resumed, night)


if __name__ == "__main__":
    unittest.main()
