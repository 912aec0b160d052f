from __future__ import annotations

from typing import Dict, List, Optional

from lowborn.domain.models.run_state import RunState
from lowborn.domain.repositories import SaveRepository
from lowborn.infrastructure.save_migrations import read_save_text, write_save_text


class InMemorySaveRepository(SaveRepository):
    """Keeps serialized save text per slot, the same text a durable store would hold."""

    def __init__(self, slots: Optional[Dict[str, str]] = None) -> None:
        self._slots: Dict[str, str] = dict(slots or {})

    def load(self, slot: str) -> Optional[RunState]:
        result = read_save_text(self._slots.get(slot))
        if result is None:
            return None
        if result.migrated:
            self._slots[slot] = write_save_text(result.state)
        return result.state

    def save(self, slot: str, state: RunState) -> None:
        self._slots[slot] = write_save_text(state)

    def clear(self, slot: str) -> None:
        self._slots.pop(slot, None)

    def list_slots(self) -> List[str]:
        return sorted(self._slots)

    def raw_text(self, slot: str) -> Optional[str]:
        return self._slots.get(slot)
