from abc import ABC, abstractmethod
from typing import List, Optional

from lowborn.domain.errors import SaveSlotNotFoundError
from lowborn.domain.models.run_state import RunState


class SaveRepository(ABC):
    @abstractmethod
    def load(self, slot: str) -> Optional[RunState]:
        raise NotImplementedError

    @abstractmethod
    def save(self, slot: str, state: RunState) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self, slot: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_slots(self) -> List[str]:
        raise NotImplementedError

    def require(self, slot: str) -> RunState:
        """Strict variant of ``load`` for callers that cannot continue without a save."""
        state = self.load(slot)
        if state is None:
            raise SaveSlotNotFoundError(slot)
        return state
