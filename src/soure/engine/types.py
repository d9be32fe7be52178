from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class ResourceType(str, Enum):
    STONE = "stone"
    IRON = "iron"
    FOOD = "food"
    WATER = "water"
    GOLD = "gold"
    MARKET = "market"


# Canonical order; MARKET is a tile type only and is never held.
RESOURCES: List[ResourceType] = [
    ResourceType.STONE,
    ResourceType.IRON,
    ResourceType.FOOD,
    ResourceType.WATER,
    ResourceType.GOLD,
]


class BuildingType(str, Enum):
    OUTPOST = "outpost"
    CITADEL = "citadel"
    CAPITAL = "capital"
    BASTION = "bastion"


class FieldKind(str, Enum):
    RESOURCE = "resource"
    CORNER = "corner"


class Phase(str, Enum):
    LOBBY = "lobby"
    ROLL = "roll"
    BREACH = "breach"
    MAIN = "main"
    ENDED = "ended"


class ErrorCode(str, Enum):
    WRONG_PHASE = "wrong_phase"
    NOT_YOUR_TURN = "not_your_turn"
    NOT_CREATOR = "not_creator"
    INSUFFICIENT_PLAYERS = "insufficient_players"
    INVALID_BUILDING_TYPE = "invalid_building_type"
    INVALID_TILE = "invalid_tile"
    UPGRADE_PREREQUISITE_NOT_MET = "upgrade_prerequisite_not_met"
    INSUFFICIENT_RESOURCES = "insufficient_resources"
    INSUFFICIENT_POPULATION = "insufficient_population"
    ALREADY_ROLLED_THIS_TURN = "already_rolled_this_turn"
    CANNOT_BLOCK_SPECIAL_TILE = "cannot_block_special_tile"
    GAME_ALREADY_ENDED = "game_already_ended"
    TILE_OCCUPIED = "tile_occupied"
    GAME_FULL = "game_full"
    GAME_NOT_FOUND = "game_not_found"
    NOT_A_MEMBER = "not_a_member"
    UNKNOWN_ACTION = "unknown_action"


ResourceBank = Dict[ResourceType, int]


@dataclass
class Building:
    player_id: str
    building_type: BuildingType

    def to_dict(self) -> Dict[str, str]:
        return {"playerId": self.player_id, "type": self.building_type.value}


@dataclass
class HexTile:
    tile_id: int
    resource: ResourceType
    number_token: int | None
    buildings: List[Building] = field(default_factory=list)

    @property
    def is_special(self) -> bool:
        return self.resource == ResourceType.MARKET

    def building_of(self, player_id: str) -> Optional[Building]:
        for building in self.buildings:
            if building.player_id == player_id:
                return building
        return None


@dataclass(frozen=True)
class TrackField:
    index: int
    field_id: str
    kind: FieldKind
    resource_type: ResourceType | None = None
    corner_id: str | None = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "index": self.index,
            "id": self.field_id,
            "kind": self.kind.value,
        }
        if self.kind == FieldKind.RESOURCE:
            out["resourceType"] = self.resource_type.value
        else:
            out["cornerId"] = self.corner_id
        return out


@dataclass(frozen=True)
class DiceRoll:
    d1: int
    d2: int

    @property
    def total(self) -> int:
        return self.d1 + self.d2

    @property
    def is_double(self) -> bool:
        return self.d1 == self.d2

    def to_dict(self) -> Dict[str, object]:
        return {"d1": self.d1, "d2": self.d2, "total": self.total, "isDouble": self.is_double}


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a public engine operation. Failures carry a code and never mutate state."""

    ok: bool
    code: ErrorCode | None = None
    error: str | None = None
    extra: Dict[str, object] = field(default_factory=dict)

    @classmethod
    def success(cls, **extra: object) -> "ActionResult":
        return cls(ok=True, extra=extra)

    @classmethod
    def failure(cls, code: ErrorCode, error: str, **extra: object) -> "ActionResult":
        return cls(ok=False, code=code, error=error, extra=extra)

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {"ok": self.ok}
        if not self.ok:
            out["error"] = self.error
            out["code"] = self.code.value
        out.update(self.extra)
        return out
