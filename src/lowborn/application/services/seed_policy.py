from __future__ import annotations

import hashlib
import random
from typing import Iterable, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

FALLBACK_KEY = "lowborn-default-seed"


def hash_key(key: str) -> int:
    text = key if key and key.strip() else FALLBACK_KEY
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return int(digest, 16) % (2**32)


def decision_key(seed: str, name: str, *sub: object, week: Optional[int] = None, day: Optional[int] = None) -> str:
    """Build the namespaced key for one stochastic decision.

    ``decision_key("s", "shift", week=1, day=3)`` -> ``"s:week:1:day:3:shift"``.
    """

    parts = [seed]
    if week is not None:
        parts.extend(["week", str(week)])
    if day is not None:
        parts.extend(["day", str(day)])
    parts.append(name)
    parts.extend(str(item) for item in sub)
    return ":".join(parts)


class SeededRng:
    """Deterministic stream derived from a string key.

    Every decision point builds its own instance, so no draw made for one
    decision can shift the outcome of another.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        self._random = random.Random(hash_key(key))

    def next_float(self) -> float:
        return self._random.random()

    def next_int(self, low: int, high: int) -> int:
        low, high = sorted((int(low), int(high)))
        return self._random.randint(low, high)

    def pick(self, values: Sequence[T]) -> T:
        if not values:
            raise ValueError("Cannot pick from an empty sequence.")
        return values[int(self.next_float() * len(values))]

    def weighted_pick(self, entries: Iterable[Tuple[T, float]]) -> T:
        rows = [(value, max(0.0, float(weight))) for value, weight in entries]
        if not rows:
            raise ValueError("Cannot pick from an empty weighted pool.")
        total = sum(weight for _, weight in rows)
        if total <= 0:
            raise ValueError("Weighted pool needs a positive total weight.")

        threshold = self.next_float() * total
        chosen = None
        for value, weight in rows:
            if weight <= 0:
                continue
            chosen = value
            threshold -= weight
            if threshold <= 0:
                return value
        # float drift can leave a sliver of threshold after the last entry
        return chosen
