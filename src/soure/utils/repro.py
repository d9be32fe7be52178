from __future__ import annotations

import random
from typing import Any, List, MutableSequence, Optional, Protocol, Sequence


class RandomSource(Protocol):
    """Every random draw the engine makes goes through one of these methods.

    ``random.Random`` satisfies it; tests pass a seeded or scripted instance.
    """

    def randint(self, a: int, b: int) -> int:
        ...

    def shuffle(self, x: MutableSequence[Any]) -> None:
        ...

    def choice(self, seq: Sequence[Any]) -> Any:
        ...

    def choices(
        self,
        population: Sequence[Any],
        weights: Optional[Sequence[float]] = None,
        *,
        cum_weights: Optional[Sequence[float]] = None,
        k: int = 1,
    ) -> List[Any]:
        ...


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)
