from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from .game_state import GameState, Player
from .track import TRACK, advance
from .types import RESOURCES, FieldKind, ResourceType, TrackField

logger = logging.getLogger(__name__)

# Order in which a corner toll is paid from the payer's holdings.
TOLL_PRIORITY: List[ResourceType] = list(RESOURCES)


@dataclass(frozen=True)
class Landing:
    from_index: int
    to_index: int
    field: TrackField
    gained: ResourceType | None = None
    toll_paid: ResourceType | None = None
    toll_owner: str | None = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "fromIndex": self.from_index,
            "toIndex": self.to_index,
            "field": self.field.to_dict(),
            "gained": self.gained.value if self.gained else None,
            "tollPaid": self.toll_paid.value if self.toll_paid else None,
            "tollOwner": self.toll_owner,
        }


def move_and_land(state: GameState, player: Player, steps: int) -> Landing:
    """Advance ``player`` by ``steps`` and resolve the landed field. Run once per accepted roll."""
    start = state.positions[player.player_id]
    end = advance(start, steps)
    state.positions[player.player_id] = end
    landed = TRACK[end]
    ledger = state.ledgers[player.player_id]

    if landed.kind == FieldKind.RESOURCE:
        ledger.grant({landed.resource_type: 1})
        state.event_log.add(
            f"{player.name} moved to {landed.field_id} and gained 1 {landed.resource_type.value}."
        )
        return Landing(start, end, landed, gained=landed.resource_type)

    owner_id = state.corner_owners.get(landed.corner_id)
    if owner_id is None or owner_id == player.player_id:
        state.event_log.add(f"{player.name} moved to corner {landed.corner_id}.")
        return Landing(start, end, landed)

    owner = state.player(owner_id)
    paid = ledger.take_one(TOLL_PRIORITY)
    if paid is None:
        state.event_log.add(
            f"{player.name} landed on {owner.name}'s corner {landed.corner_id} "
            f"but had nothing to pay."
        )
        logger.debug("game %s: %s owes toll but holds nothing", state.game_id, player.player_id)
        return Landing(start, end, landed, toll_owner=owner_id)

    state.ledgers[owner_id].grant({paid: 1})
    state.event_log.add(
        f"{player.name} landed on {owner.name}'s corner {landed.corner_id} "
        f"and paid 1 {paid.value}."
    )
    return Landing(start, end, landed, toll_paid=paid, toll_owner=owner_id)
