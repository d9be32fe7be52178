"""In-process game registry.

Owns every live game, serializes the actions for each game id behind its own
lock, fans snapshots out to subscribers and runs the per-game inactivity
timer. Games never share mutable state with each other.
"""

from __future__ import annotations

import asyncio
import logging
import random
import string
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from soure.config import Settings, settings as default_settings
from soure.engine.board import NumberShuffleConstraints
from soure.engine.game_state import GameState
from soure.engine.types import ActionResult, ErrorCode, Phase
from soure.utils.repro import RandomSource

logger = logging.getLogger(__name__)

Subscriber = Callable[[Dict[str, Any]], Awaitable[None]]

GAME_ID_ALPHABET = string.ascii_lowercase + string.digits
GAME_ID_LENGTH = 6


@dataclass
class GameEntry:
    game: GameState
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    timer: Optional[asyncio.TimerHandle] = None
    subscribers: Dict[str, Subscriber] = field(default_factory=dict)


ACTIONS: Dict[str, Callable[[GameState, str, Dict[str, Any]], ActionResult]] = {
    "startMatch": lambda game, user_id, payload: game.start_match(user_id),
    "rollDice": lambda game, user_id, payload: game.roll_dice(user_id, payload.get("turnSeq")),
    "placeBuilding": lambda game, user_id, payload: game.place_building(
        user_id, payload.get("tileId"), payload.get("buildingType")
    ),
    "endTurn": lambda game, user_id, payload: game.end_turn(user_id),
}


class GameRegistry:
    def __init__(
        self,
        config: Settings | None = None,
        rng_factory: Callable[[], RandomSource] = random.Random,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or default_settings
        self.rng_factory = rng_factory
        self.clock = clock
        self.games: Dict[str, GameEntry] = {}
        self.user_games: Dict[str, str] = {}
        self._id_rng = random.Random()
        self._pending: Set[asyncio.Task] = set()

    # ===== Lifecycle =====

    def _new_game_id(self) -> str:
        while True:
            game_id = "".join(self._id_rng.choice(GAME_ID_ALPHABET) for _ in range(GAME_ID_LENGTH))
            if game_id not in self.games:
                return game_id

    async def create_game(self, user_id: str, name: str) -> str:
        game_id = self._new_game_id()
        game = GameState(
            game_id=game_id,
            rng=self.rng_factory(),
            clock=self.clock,
            min_players=self.config.min_players,
            max_players=self.config.max_players,
            board_constraints=NumberShuffleConstraints(
                max_attempts=self.config.board_max_attempts
            ),
        )
        game.add_player(user_id, name)
        self.games[game_id] = GameEntry(game=game)
        self.user_games[user_id] = game_id
        self.schedule_inactivity(game_id)
        logger.info("Created game %s for %s", game_id, user_id)
        return game_id

    async def join_game(self, game_id: str, user_id: str, name: str) -> ActionResult:
        entry = self.games.get(game_id)
        if entry is None:
            return ActionResult.failure(ErrorCode.GAME_NOT_FOUND, "Game not found")
        async with entry.lock:
            result = entry.game.add_player(user_id, name)
            if not result.ok:
                return result
            self.user_games[user_id] = game_id
            if not result.extra.get("rejoined"):
                self.schedule_inactivity(game_id)
                await self._broadcast(entry)
        return result

    def remove_game(self, game_id: str) -> None:
        self.cancel_inactivity(game_id)
        entry = self.games.pop(game_id, None)
        if entry is None:
            return
        for player in entry.game.players:
            if self.user_games.get(player.player_id) == game_id:
                del self.user_games[player.player_id]
        logger.info("Removed game %s", game_id)

    def get(self, game_id: str) -> Optional[GameEntry]:
        return self.games.get(game_id)

    def active_game_for(self, user_id: str) -> Optional[str]:
        game_id = self.user_games.get(user_id)
        if game_id is None:
            return None
        entry = self.games.get(game_id)
        if entry is None or entry.game.phase == Phase.ENDED or not entry.game.is_member(user_id):
            del self.user_games[user_id]
            return None
        return game_id

    # ===== Actions =====

    async def dispatch(
        self, game_id: str, user_id: str, action: str, payload: Dict[str, Any] | None = None
    ) -> ActionResult:
        entry = self.games.get(game_id)
        if entry is None:
            return ActionResult.failure(ErrorCode.GAME_NOT_FOUND, "Game not found")
        handler = ACTIONS.get(action)
        if handler is None:
            return ActionResult.failure(ErrorCode.UNKNOWN_ACTION, f"Unknown action: {action}")
        async with entry.lock:
            if not entry.game.is_member(user_id):
                return ActionResult.failure(
                    ErrorCode.NOT_A_MEMBER, "You are not a member of this game"
                )
            result = handler(entry.game, user_id, payload or {})
            if result.ok:
                self.schedule_inactivity(game_id)
                await self._broadcast(entry)
        return result

    # ===== Subscribers =====

    async def subscribe(self, game_id: str, key: str, send: Subscriber) -> bool:
        """Register ``send`` and deliver the current snapshot to it alone."""
        entry = self.games.get(game_id)
        if entry is None:
            return False
        async with entry.lock:
            entry.subscribers[key] = send
            await send(_state_message(entry.game))
        return True

    def unsubscribe(self, game_id: str, key: str) -> None:
        entry = self.games.get(game_id)
        if entry is not None:
            entry.subscribers.pop(key, None)

    async def _broadcast(self, entry: GameEntry) -> None:
        message = _state_message(entry.game)
        for key, send in list(entry.subscribers.items()):
            try:
                await send(message)
            except Exception as exc:
                logger.warning("Dropping subscriber %s of game %s: %s", key, entry.game.game_id, exc)
                entry.subscribers.pop(key, None)

    # ===== Inactivity =====

    def schedule_inactivity(self, game_id: str) -> None:
        self.cancel_inactivity(game_id)
        entry = self.games.get(game_id)
        if entry is None or entry.game.phase == Phase.ENDED:
            return
        loop = asyncio.get_running_loop()
        entry.timer = loop.call_later(
            self.config.inactivity_seconds, self._on_inactivity_timeout, game_id
        )

    def cancel_inactivity(self, game_id: str) -> None:
        entry = self.games.get(game_id)
        if entry is not None and entry.timer is not None:
            entry.timer.cancel()
            entry.timer = None

    def _on_inactivity_timeout(self, game_id: str) -> None:
        entry = self.games.get(game_id)
        if entry is not None:
            entry.timer = None
        task = asyncio.ensure_future(self.expire(game_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def expire(self, game_id: str) -> None:
        """End an idle game, push the final snapshot, then drop it from the registry."""
        entry = self.games.get(game_id)
        if entry is None:
            return
        async with entry.lock:
            if entry.timer is not None:
                # An action landed while waiting for the lock and rescheduled the timer.
                return
            result = entry.game.end_due_to_inactivity()
            if result.ok:
                logger.info("Game %s ended due to inactivity", game_id)
                await self._broadcast(entry)
        self.remove_game(game_id)


def _state_message(game: GameState) -> Dict[str, Any]:
    return {"type": "gameState", "payload": game.get_state()}
