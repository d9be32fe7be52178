"""Static perimeter track shared by every game and every renderer.

Clockwise from the top-left: top row left to right, top-right corner, right
side top to bottom, bottom-right corner, bottom row right to left,
bottom-left corner, left side bottom to top, top-left corner.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .types import RESOURCES, FieldKind, TrackField

CORNER_IDS = ["TL", "TR", "BR", "BL"]

TOKEN_PALETTE = ["#ef4444", "#22c55e", "#38bdf8", "#facc15"]

# (side name, resource field count, corner closing the side, reversed numbering)
TRACK_SIDES: List[Tuple[str, int, str, bool]] = [
    ("top", 7, "TR", False),
    ("right", 4, "BR", False),
    ("bottom", 7, "BL", True),
    ("left", 4, "TL", True),
]


def build_track() -> Tuple[TrackField, ...]:
    fields: List[TrackField] = []
    resource_slot = 0
    for side, length, corner_id, reverse in TRACK_SIDES:
        cells = range(length - 1, -1, -1) if reverse else range(length)
        for cell in cells:
            fields.append(
                TrackField(
                    index=len(fields),
                    field_id=f"{side}-{cell}",
                    kind=FieldKind.RESOURCE,
                    resource_type=RESOURCES[resource_slot % len(RESOURCES)],
                )
            )
            resource_slot += 1
        fields.append(
            TrackField(
                index=len(fields),
                field_id=f"corner-{corner_id.lower()}",
                kind=FieldKind.CORNER,
                corner_id=corner_id,
            )
        )
    return tuple(fields)


TRACK: Tuple[TrackField, ...] = build_track()
TRACK_LEN = len(TRACK)

CORNER_INDEX: Dict[str, int] = {
    f.corner_id: f.index for f in TRACK if f.kind == FieldKind.CORNER
}


def advance(position: int, steps: int) -> int:
    return (position + steps) % TRACK_LEN


def track_to_list() -> List[Dict[str, object]]:
    return [f.to_dict() for f in TRACK]
