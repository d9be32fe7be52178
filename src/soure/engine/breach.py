"""Breach: the disruption triggered by a roll totalling 7."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from .game_state import GameState, Player
from .types import BuildingType

logger = logging.getLogger(__name__)

BREACH_TOTAL = 7
BASE_LOSS = 2
HEAVY_LOSS = 4
HEAVY_LOSS_MIN_DOMINION = 8
HEAVY_LOSS_DEFENSE_BELOW = 2


@dataclass
class BreachOutcome:
    losses: Dict[str, int] = field(default_factory=dict)
    immune: Dict[str, str] = field(default_factory=dict)
    blocked_tile_id: int | None = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "losses": dict(self.losses),
            "immune": dict(self.immune),
            "blockedTileId": self.blocked_tile_id,
        }


def loss_amount(dominion_points: int, defense_level: int) -> int:
    if dominion_points >= HEAVY_LOSS_MIN_DOMINION and defense_level < HEAVY_LOSS_DEFENSE_BELOW:
        return HEAVY_LOSS
    return BASE_LOSS


def resolve_breach(state: GameState, roller: Player) -> BreachOutcome:
    outcome = BreachOutcome()
    board = state.board
    state.event_log.add(f"Breach! {roller.name} rolled {BREACH_TOTAL}.")

    for player in state.players:
        if player.player_id == roller.player_id:
            continue
        if board.player_has_building(player.player_id, BuildingType.CAPITAL):
            outcome.immune[player.player_id] = BuildingType.CAPITAL.value
            state.event_log.add(f"{player.name} is immune (has Capital).")
            continue
        if board.player_has_building(player.player_id, BuildingType.BASTION):
            outcome.immune[player.player_id] = BuildingType.BASTION.value
            state.event_log.add(f"{player.name} is protected by Bastion.")
            continue

        ledger = state.ledgers[player.player_id]
        target = loss_amount(ledger.dominion_points, ledger.defense_level)
        discarded = ledger.discard_random(target, state.rng)
        lost = sum(discarded.values())
        outcome.losses[player.player_id] = lost
        if lost:
            state.event_log.add(f"{player.name} lost {lost} resource(s) in the Breach.")

    candidates = board.blockable_tile_ids()
    if candidates:
        tile_id = state.rng.choice(candidates)
        board.block_tile(tile_id)
        outcome.blocked_tile_id = tile_id
        tile = board.tiles[tile_id]
        state.event_log.add(f"Tile {tile_id} ({tile.resource.value}) is blocked by the Breach.")

    logger.info(
        "game %s: breach by %s, losses=%s, immune=%s, blocked=%s",
        state.game_id,
        roller.player_id,
        outcome.losses,
        outcome.immune,
        outcome.blocked_tile_id,
    )
    return outcome
