"""Shared pytest fixtures for engine and server tests."""

import random
from typing import List

import pytest

from soure.engine.game_state import GameState
from soure.engine.types import ResourceType


class ScriptedDice(random.Random):
    """Seeded Random whose dice come from a queue.

    Only ``randint`` is scripted; board shuffles and breach draws stay seeded.
    """

    def __init__(self, seed: int = 0) -> None:
        super().__init__(seed)
        self.queued: List[int] = []

    def queue(self, *values: int) -> None:
        self.queued.extend(values)

    def randint(self, a: int, b: int) -> int:
        if self.queued:
            return self.queued.pop(0)
        return super().randint(a, b)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def dice():
    return ScriptedDice(seed=3)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def lobby(dice, clock):
    """A lobby with players ``a`` (creator, TL corner) and ``b`` (TR corner)."""
    state = GameState(game_id="g1", rng=dice, clock=clock)
    state.add_player("a", "Alice")
    state.add_player("b", "Bob")
    return state


@pytest.fixture
def game(lobby):
    """Two-player match in the roll phase, Alice to move."""
    result = lobby.start_match("a")
    assert result.ok
    return lobby


def give(state: GameState, player_id: str, **amounts: int) -> None:
    ledger = state.ledgers[player_id]
    for name, amount in amounts.items():
        ledger.resources[ResourceType(name)] += amount


def to_main_phase(state: GameState, d1: int = 1, d2: int = 2) -> None:
    """Roll a non-breach, non-double for the current player."""
    state.rng.queue(d1, d2)
    current = state.current_player()
    assert state.roll_dice(current.player_id).ok
