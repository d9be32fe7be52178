"""Building upgrade graph: outpost -> citadel -> capital, plus the standalone bastion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from .game_state import GameState
from .rules import require_turn
from .types import ActionResult, Building, BuildingType, ErrorCode, Phase, ResourceBank, ResourceType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildingSpec:
    cost: ResourceBank
    requires: BuildingType | None = None
    population_used: int = 0
    population_capacity: int = 0
    dominion_points: int = 0
    defense: int = 0


BUILDING_SPECS: Dict[BuildingType, BuildingSpec] = {
    BuildingType.OUTPOST: BuildingSpec(
        cost={ResourceType.STONE: 1, ResourceType.WATER: 1},
        population_used=1,
        dominion_points=1,
    ),
    BuildingType.CITADEL: BuildingSpec(
        cost={ResourceType.STONE: 2, ResourceType.FOOD: 2},
        requires=BuildingType.OUTPOST,
        population_capacity=2,
        dominion_points=2,
    ),
    BuildingType.CAPITAL: BuildingSpec(
        cost={ResourceType.STONE: 3, ResourceType.IRON: 3, ResourceType.GOLD: 2},
        requires=BuildingType.CITADEL,
        population_capacity=3,
        dominion_points=4,
    ),
    BuildingType.BASTION: BuildingSpec(
        cost={ResourceType.IRON: 1, ResourceType.FOOD: 1},
        population_used=1,
        defense=1,
    ),
}


def _format_shortfall(missing: ResourceBank) -> str:
    parts = [f"{resource.value} short by {amount}" for resource, amount in missing.items()]
    return "Not enough resources: " + ", ".join(parts)


def place_building(
    state: GameState, user_id: str, tile_id: int, building_type: str
) -> ActionResult:
    violation = require_turn(state, user_id, Phase.MAIN, "build")
    if violation is not None:
        return violation

    try:
        kind = BuildingType(str(building_type))
    except ValueError:
        return ActionResult.failure(
            ErrorCode.INVALID_BUILDING_TYPE, f"Invalid building type: {building_type}"
        )

    tile = state.board.tiles.get(tile_id) if isinstance(tile_id, int) else None
    if tile is None:
        return ActionResult.failure(ErrorCode.INVALID_TILE, "Invalid tile")

    spec = BUILDING_SPECS[kind]
    existing = tile.building_of(user_id)

    if spec.requires is not None:
        if existing is None or existing.building_type != spec.requires:
            return ActionResult.failure(
                ErrorCode.UPGRADE_PREREQUISITE_NOT_MET,
                f"{kind.value.capitalize()} must upgrade an existing "
                f"{spec.requires.value.capitalize()} on this tile",
            )
    elif existing is not None:
        return ActionResult.failure(
            ErrorCode.TILE_OCCUPIED, "You already have a building on this tile"
        )
    elif tile.buildings:
        return ActionResult.failure(
            ErrorCode.TILE_OCCUPIED, "Another player already has a building on this tile"
        )

    ledger = state.ledgers[user_id]
    missing = ledger.shortfall(spec.cost)
    if missing:
        return ActionResult.failure(
            ErrorCode.INSUFFICIENT_RESOURCES,
            _format_shortfall(missing),
            missing={resource.value: amount for resource, amount in missing.items()},
        )

    if spec.population_used > ledger.population.free:
        return ActionResult.failure(
            ErrorCode.INSUFFICIENT_POPULATION,
            f"Not enough population capacity. Need "
            f"{ledger.population.used + spec.population_used}, have {ledger.population.max}",
        )

    ledger.spend(spec.cost)

    if spec.requires is not None:
        prior = BUILDING_SPECS[spec.requires]
        ledger.dominion_points -= prior.dominion_points
        ledger.population.used -= prior.population_used
        existing.building_type = kind
    else:
        tile.buildings.append(Building(player_id=user_id, building_type=kind))

    ledger.population.used += spec.population_used
    ledger.population.max += spec.population_capacity
    ledger.dominion_points += spec.dominion_points
    ledger.defense_level += spec.defense

    name = state.player(user_id).name
    state.event_log.add(f"{name} built {kind.value} on tile {tile_id} ({tile.resource.value}).")
    logger.debug("game %s: %s built %s on tile %d", state.game_id, user_id, kind.value, tile_id)

    return ActionResult.success(
        building={"tileId": tile_id, "type": kind.value, "upgrade": spec.requires is not None}
    )
