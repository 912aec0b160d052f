from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from lowborn.domain.errors import StateValidationError
from lowborn.domain.models.stats import clamp_stat
from lowborn.domain.models.validation import require_int, require_stat, require_text


@dataclass(frozen=True)
class NpcTemplate:
    id: str
    role: str
    attitude: str = "steady"


@dataclass(frozen=True)
class NPCProfile:
    id: str
    name: str
    loyalty: int
    fear: int
    belief: int
    trust_in_player: int
    role: str

    def __post_init__(self) -> None:
        require_text("npc.id", self.id)
        require_text("npc.name", self.name)
        require_text("npc.role", self.role)
        require_stat("npc.loyalty", self.loyalty)
        require_stat("npc.fear", self.fear)
        require_stat("npc.belief", self.belief)
        require_stat("npc.trust_in_player", self.trust_in_player)

    def shifted(self, *, loyalty: int = 0, fear: int = 0, belief: int = 0, trust: int = 0) -> "NPCProfile":
        return replace(
            self,
            loyalty=clamp_stat(self.loyalty + loyalty),
            fear=clamp_stat(self.fear + fear),
            belief=clamp_stat(self.belief + belief),
            trust_in_player=clamp_stat(self.trust_in_player + trust),
        )


@dataclass(frozen=True)
class NpcRumorState:
    adopted: bool = False
    heard_count: int = 0
    spread_count: int = 0
    last_heard_day: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.adopted, bool):
            raise StateValidationError("rumor.adopted must be a boolean.")
        require_int("rumor.heard_count", self.heard_count, 0, 999)
        require_int("rumor.spread_count", self.spread_count, 0, 999)
        if self.last_heard_day is not None:
            require_int("rumor.last_heard_day", self.last_heard_day, 1, 7)


def require_unique_roster(profiles: tuple) -> None:
    seen: set[str] = set()
    for npc in profiles:
        if not isinstance(npc, NPCProfile):
            raise StateValidationError("Roster entries must be NPCProfile values.")
        if npc.id in seen:
            raise StateValidationError(f"Duplicate NPC id '{npc.id}' in roster.")
        seen.add(npc.id)
