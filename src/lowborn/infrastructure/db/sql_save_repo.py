from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from lowborn.domain.models.run_state import RunState
from lowborn.domain.repositories import SaveRepository
from lowborn.infrastructure.save_migrations import CURRENT_SAVE_VERSION, read_save_text, write_save_text

SAVE_SLOT_DDL = """
CREATE TABLE IF NOT EXISTS save_slot (
    slot VARCHAR(64) NOT NULL PRIMARY KEY,
    version INTEGER NOT NULL,
    payload_json TEXT NOT NULL,
    updated_at VARCHAR(40) NOT NULL
)
"""


class SqlSaveRepository(SaveRepository):
    """Save slots in a single ``save_slot`` table, one JSON envelope per row."""

    def __init__(self, engine) -> None:
        self.engine = engine
        self.SessionLocal = sessionmaker(bind=engine, autoflush=False)

    def ensure_schema(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(text(SAVE_SLOT_DDL))

    def _write(self, session, slot: str, payload_json: str) -> None:
        dialect = session.bind.dialect.name if session.bind is not None else "mysql"
        if dialect == "mysql":
            statement = text(
                """
                INSERT INTO save_slot (slot, version, payload_json, updated_at)
                VALUES (:slot, :version, :payload_json, :updated_at)
                ON DUPLICATE KEY UPDATE
                    version = VALUES(version),
                    payload_json = VALUES(payload_json),
                    updated_at = VALUES(updated_at)
                """
            )
        else:
            statement = text(
                """
                INSERT INTO save_slot (slot, version, payload_json, updated_at)
                VALUES (:slot, :version, :payload_json, :updated_at)
                ON CONFLICT(slot) DO UPDATE SET
                    version = excluded.version,
                    payload_json = excluded.payload_json,
                    updated_at = excluded.updated_at
                """
            )
        session.execute(
            statement,
            {
                "slot": slot,
                "version": CURRENT_SAVE_VERSION,
                "payload_json": payload_json,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    def load(self, slot: str) -> Optional[RunState]:
        with self.SessionLocal() as session:
            row = session.execute(
                text("SELECT payload_json FROM save_slot WHERE slot = :slot"),
                {"slot": slot},
            ).first()
            if row is None:
                return None
            result = read_save_text(row.payload_json)
            if result is None:
                return None
            if result.migrated:
                self._write(session, slot, write_save_text(result.state))
                session.commit()
            return result.state

    def save(self, slot: str, state: RunState) -> None:
        payload_json = write_save_text(state)
        with self.SessionLocal.begin() as session:
            self._write(session, slot, payload_json)

    def clear(self, slot: str) -> None:
        with self.SessionLocal.begin() as session:
            session.execute(text("DELETE FROM save_slot WHERE slot = :slot"), {"slot": slot})

    def list_slots(self) -> List[str]:
        with self.SessionLocal() as session:
            rows = session.execute(text("SELECT slot FROM save_slot ORDER BY slot")).all()
        return [str(row.slot) for row in rows]
