from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from soure.utils.repro import RandomSource, make_rng

from .types import ActionResult, ErrorCode, HexTile, ResourceType

logger = logging.getLogger(__name__)

AXIAL_RADIUS = 2

STANDARD_TILE_TYPES = [
    ResourceType.STONE,
    ResourceType.STONE,
    ResourceType.STONE,
    ResourceType.STONE,
    ResourceType.STONE,
    ResourceType.FOOD,
    ResourceType.FOOD,
    ResourceType.FOOD,
    ResourceType.FOOD,
    ResourceType.WATER,
    ResourceType.WATER,
    ResourceType.WATER,
    ResourceType.IRON,
    ResourceType.IRON,
    ResourceType.IRON,
    ResourceType.GOLD,
    ResourceType.GOLD,
    ResourceType.GOLD,
    ResourceType.MARKET,
]

STANDARD_NUMBER_TOKENS = [
    2,
    3,
    3,
    4,
    4,
    5,
    5,
    6,
    6,
    8,
    8,
    9,
    9,
    10,
    10,
    11,
    11,
    12,
]

HOT_NUMBERS = (6, 8)

AXIAL_DIRECTIONS = [
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, 0),
    (-1, 1),
    (0, 1),
]


@dataclass(frozen=True)
class NumberShuffleConstraints:
    no_adjacent_six_eight: bool = True
    max_attempts: int = 100


@dataclass
class Board:
    tiles: Dict[int, HexTile]
    tile_neighbors: Dict[int, List[int]]
    blocked_tile_id: int | None = None
    constraint_satisfied: bool = True

    def special_tile_id(self) -> int | None:
        for tile in self.tiles.values():
            if tile.is_special:
                return tile.tile_id
        return None

    def blockable_tile_ids(self) -> List[int]:
        return [
            tile.tile_id
            for tile in self.tiles.values()
            if not tile.is_special and tile.tile_id != self.blocked_tile_id
        ]

    def player_has_building(self, player_id: str, building_type) -> bool:
        for tile in self.tiles.values():
            building = tile.building_of(player_id)
            if building is not None and building.building_type == building_type:
                return True
        return False

    def block_tile(self, tile_id: int) -> ActionResult:
        tile = self.tiles.get(tile_id)
        if tile is None:
            return ActionResult.failure(ErrorCode.INVALID_TILE, "Invalid tile")
        if tile.is_special:
            return ActionResult.failure(
                ErrorCode.CANNOT_BLOCK_SPECIAL_TILE, "Cannot block the Central Market"
            )
        self.blocked_tile_id = tile_id
        return ActionResult.success(blockedTileId=tile_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            "tiles": [
                {
                    "id": tile.tile_id,
                    "type": tile.resource.value,
                    "number": tile.number_token,
                    "buildings": [b.to_dict() for b in tile.buildings],
                }
                for tile in self.tiles.values()
            ],
            "blockedTileId": self.blocked_tile_id,
        }


def axial_coords(radius: int = AXIAL_RADIUS) -> List[Tuple[int, int]]:
    coords: List[Tuple[int, int]] = []
    for q in range(-radius, radius + 1):
        for r in range(-radius, radius + 1):
            if -radius <= q + r <= radius:
                coords.append((q, r))
    return coords


def build_tile_neighbors(coords: List[Tuple[int, int]]) -> Dict[int, List[int]]:
    coord_to_id = {coord: tile_id for tile_id, coord in enumerate(coords)}
    neighbors: Dict[int, List[int]] = {}
    for tile_id, (q, r) in enumerate(coords):
        tile_neighbors: List[int] = []
        for dq, dr in AXIAL_DIRECTIONS:
            neighbor_coord = (q + dq, r + dr)
            if neighbor_coord in coord_to_id:
                tile_neighbors.append(coord_to_id[neighbor_coord])
        neighbors[tile_id] = tile_neighbors
    return neighbors


def numbers_valid(
    numbers_by_tile: Dict[int, int],
    neighbors: Dict[int, List[int]],
    constraints: NumberShuffleConstraints,
) -> bool:
    for tile_id, value in numbers_by_tile.items():
        for neighbor_id in neighbors[tile_id]:
            if neighbor_id not in numbers_by_tile:
                continue
            other = numbers_by_tile[neighbor_id]
            if constraints.no_adjacent_six_eight and value in HOT_NUMBERS and other in HOT_NUMBERS:
                return False
    return True


def assign_numbers(
    tile_ids: List[int],
    numbers: List[int],
    neighbors: Dict[int, List[int]],
    rng: RandomSource,
    constraints: NumberShuffleConstraints,
) -> Tuple[Dict[int, int], bool]:
    """Shuffle tokens onto ``tile_ids`` until the constraints hold.

    Returns the assignment and whether it satisfies the constraints. When the
    attempt budget runs out the last shuffle is kept.
    """
    numbers_by_tile: Dict[int, int] = {}
    attempts = max(1, constraints.max_attempts)
    for _ in range(attempts):
        rng.shuffle(numbers)
        numbers_by_tile = {tile_id: numbers[idx] for idx, tile_id in enumerate(tile_ids)}
        if numbers_valid(numbers_by_tile, neighbors, constraints):
            return numbers_by_tile, True
    logger.warning(
        "Number token constraints not met after %d attempts; keeping last assignment",
        attempts,
    )
    return numbers_by_tile, False


def standard_board(
    rng: RandomSource | None = None,
    constraints: NumberShuffleConstraints | None = None,
    seed: int | None = None,
) -> Board:
    if rng is None:
        rng = make_rng(seed)
    if constraints is None:
        constraints = NumberShuffleConstraints()

    coords = axial_coords()
    resources = list(STANDARD_TILE_TYPES)
    numbers = list(STANDARD_NUMBER_TOKENS)

    rng.shuffle(resources)
    neighbors = build_tile_neighbors(coords)

    numbered_tiles = [
        tile_id for tile_id, resource in enumerate(resources) if resource != ResourceType.MARKET
    ]
    numbers_by_tile, satisfied = assign_numbers(
        numbered_tiles, numbers, neighbors, rng, constraints
    )

    tiles: Dict[int, HexTile] = {}
    for tile_id, resource in enumerate(resources):
        tiles[tile_id] = HexTile(
            tile_id=tile_id,
            resource=resource,
            number_token=numbers_by_tile.get(tile_id),
        )

    return Board(tiles=tiles, tile_neighbors=neighbors, constraint_satisfied=satisfied)
