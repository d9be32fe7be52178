"""Rules engine for Soure."""

from .board import Board, NumberShuffleConstraints, standard_board
from .game_state import GameState, Player
from .track import CORNER_INDEX, TRACK, TRACK_LEN
from .types import ActionResult, BuildingType, ErrorCode, Phase, ResourceType

__all__ = [
    "ActionResult",
    "Board",
    "BuildingType",
    "CORNER_INDEX",
    "ErrorCode",
    "GameState",
    "NumberShuffleConstraints",
    "Phase",
    "Player",
    "ResourceType",
    "TRACK",
    "TRACK_LEN",
    "standard_board",
]
