from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from soure.utils.repro import RandomSource

from .board import Board, NumberShuffleConstraints
from .economy import PlayerLedger
from .event_log import EventLog
from .track import track_to_list
from .types import ActionResult, DiceRoll, Phase

MIN_PLAYERS = 1
MAX_PLAYERS = 4


@dataclass
class Player:
    player_id: str
    name: str
    color: str
    corner_id: str


@dataclass
class GameState:
    game_id: str
    rng: RandomSource = field(default_factory=random.Random)
    clock: Callable[[], float] = time.time
    min_players: int = MIN_PLAYERS
    max_players: int = MAX_PLAYERS
    board_constraints: NumberShuffleConstraints = field(default_factory=NumberShuffleConstraints)
    phase: Phase = Phase.LOBBY
    players: List[Player] = field(default_factory=list)
    ledgers: Dict[str, PlayerLedger] = field(default_factory=dict)
    positions: Dict[str, int] = field(default_factory=dict)
    corner_owners: Dict[str, str] = field(default_factory=dict)
    current_turn_index: int = 0
    turn_seq: int = 0
    rolled_turn_seq: int | None = None
    last_roll: DiceRoll | None = None
    extra_turn: bool = False
    creator_id: str | None = None
    match_start_time: int | None = None
    board: Board | None = None
    event_log: EventLog = field(init=False)

    def __post_init__(self) -> None:
        self.event_log = EventLog(clock=self.clock)

    # ===== Lookups =====

    def player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def current_player(self) -> Optional[Player]:
        if self.phase in (Phase.LOBBY, Phase.ENDED) or not self.players:
            return None
        return self.players[self.current_turn_index]

    def is_member(self, player_id: str) -> bool:
        return self.player(player_id) is not None

    def now_ms(self) -> int:
        return int(self.clock() * 1000)

    # ===== Operations (see rules.py) =====

    def add_player(self, player_id: str, name: str) -> ActionResult:
        from .rules import add_player

        return add_player(self, player_id, name)

    def start_match(self, user_id: str) -> ActionResult:
        from .rules import start_match

        return start_match(self, user_id)

    def roll_dice(self, user_id: str, turn_seq: int | None = None) -> ActionResult:
        from .rules import roll_dice

        return roll_dice(self, user_id, turn_seq)

    def place_building(self, user_id: str, tile_id: int, building_type: str) -> ActionResult:
        from .buildings import place_building

        return place_building(self, user_id, tile_id, building_type)

    def end_turn(self, user_id: str) -> ActionResult:
        from .rules import end_turn

        return end_turn(self, user_id)

    def end_due_to_inactivity(self) -> ActionResult:
        from .rules import end_due_to_inactivity

        return end_due_to_inactivity(self)

    def get_state(self) -> Dict[str, object]:
        current = self.current_player()
        return {
            "gameId": self.game_id,
            "phase": self.phase.value,
            "players": [
                {
                    "id": p.player_id,
                    "name": p.name,
                    "color": p.color,
                    "cornerId": p.corner_id,
                    "positionIndex": self.positions[p.player_id],
                    "population": self.ledgers[p.player_id].population.to_dict(),
                    "dominionPoints": self.ledgers[p.player_id].dominion_points,
                    "defenseLevel": self.ledgers[p.player_id].defense_level,
                }
                for p in self.players
            ],
            "currentTurnPlayerId": current.player_id if current else None,
            "creatorId": self.creator_id,
            "turnSeq": self.turn_seq,
            "extraTurn": self.extra_turn,
            "resources": {
                pid: ledger.resources_dict() for pid, ledger in self.ledgers.items()
            },
            "lastRoll": self.last_roll.to_dict() if self.last_roll else None,
            "eventLog": self.event_log.to_list(),
            "board": self.board.to_dict() if self.board else None,
            "positionIndexByPlayerId": dict(self.positions),
            "cornerOwners": dict(self.corner_owners),
            "track": track_to_list(),
            "matchStartTime": self.match_start_time,
        }
