"""Domain models for the tri-circle rotation puzzle."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Color(str, Enum):
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    WHITE = "white"
    BLUE = "blue"


COLOR_HEX: dict[Color, str] = {
    Color.RED: "#ef4444",
    Color.GREEN: "#22c55e",
    Color.YELLOW: "#fde047",
    Color.ORANGE: "#fb923c",
    Color.WHITE: "#f8fafc",
    Color.BLUE: "#3b82f6",
}


class Direction(str, Enum):
    CW = "cw"
    CCW = "ccw"

    @property
    def inverse(self) -> Direction:
        return Direction.CCW if self is Direction.CW else Direction.CW


class Relation(str, Enum):
    SAME = "same"          # linked rotation follows the primary direction
    OPPOSITE = "opposite"  # linked rotation runs against it


class GroupName(str, Enum):
    TOP_LEFT = "top_left"
    TOP = "top"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"
    BOTTOM = "bottom"


class TransferKind(str, Enum):
    PRIMARY = "primary"
    LINKED = "linked"


Point = tuple[float, float]


# ── Static board records ──


class Circle(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    cx: float
    cy: float
    r: float
    cluster: int


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    x: float
    y: float
    parent_circle_ids: tuple[int, int]
    initial_color: Color | None = None


class NodeGroup(BaseModel):
    """A 9-node win region: one center plus eight surrounding nodes."""

    model_config = ConfigDict(frozen=True)

    name: GroupName
    center_node_id: int
    surrounding_node_ids: tuple[int, ...]
    color: Color

    @property
    def node_ids(self) -> tuple[int, ...]:
        return (self.center_node_id, *self.surrounding_node_ids)


class LinkageRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    trigger_circle_id: int
    target_group: GroupName
    relation: Relation


# ── Mutable puzzle state (as immutable snapshots) ──


class Piece(BaseModel):
    model_config = ConfigDict(frozen=True)

    home_node_id: int
    current_node_id: int
    color: Color


class Move(BaseModel):
    model_config = ConfigDict(frozen=True)

    circle_id: int
    direction: Direction

    def to_payload(self) -> dict:
        return {"circle_id": self.circle_id, "direction": self.direction.value}


class NodeTransfer(BaseModel):
    """One node-to-node hop produced by a rotation (for animation layers)."""

    from_node_id: int
    to_node_id: int
    kind: TransferKind


class RotationResult(BaseModel):
    pieces: list[Piece]
    transfers: list[NodeTransfer] = Field(default_factory=list)
