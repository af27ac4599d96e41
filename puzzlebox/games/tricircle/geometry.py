"""Static board geometry for the tri-circle puzzle.

Three clusters of concentric circles sit on the vertices of an equilateral
triangle. Nodes are the intersection points between circles of different
clusters, and the six 9-node win regions are carved out of those nodes.

Everything here is computed once at import time and never mutated.
Coordinates are screen coordinates: y grows downward, so "upper" means a
smaller y.
"""

from __future__ import annotations

import logging
import math
from itertools import combinations

from pydantic import BaseModel, ConfigDict

from puzzlebox.engine.errors import BoardGeometryError
from puzzlebox.games.tricircle.linkage import build_linkage_table
from puzzlebox.games.tricircle.types import (
    Circle,
    Color,
    GroupName,
    LinkageRule,
    Node,
    NodeGroup,
    Point,
)

logger = logging.getLogger(__name__)

# ── Core parameters ──

CENTER_X = 400.0
CENTER_Y = 325.0
# Cluster centers are one medium radius apart; this is the distance from the
# board center to each vertex of that triangle.
CLUSTER_OFFSET = 135 / math.sqrt(3)
RADII: tuple[float, float, float] = (110.0, 135.0, 160.0)
MEDIUM_RADIUS_INDEX = 1

NUM_CLUSTERS = 3
GROUP_SIZE = 9
KEY_PRECISION = 3
TANGENT_EPSILON = 1e-6

CLUSTER_CENTERS: list[Point] = [
    # top
    (CENTER_X, CENTER_Y - CLUSTER_OFFSET),
    # bottom-left
    (
        CENTER_X - CLUSTER_OFFSET * math.cos(math.pi / 6),
        CENTER_Y + CLUSTER_OFFSET * math.sin(math.pi / 6),
    ),
    # bottom-right
    (
        CENTER_X + CLUSTER_OFFSET * math.cos(math.pi / 6),
        CENTER_Y + CLUSTER_OFFSET * math.sin(math.pi / 6),
    ),
]

# Cluster pair -> (upper group, lower group)
GROUP_PAIRS: dict[tuple[int, int], tuple[GroupName, GroupName]] = {
    (0, 1): (GroupName.TOP_LEFT, GroupName.BOTTOM_LEFT),
    (0, 2): (GroupName.TOP_RIGHT, GroupName.BOTTOM_RIGHT),
    (1, 2): (GroupName.TOP, GroupName.BOTTOM),
}

GROUP_COLORS: dict[GroupName, Color] = {
    GroupName.TOP_LEFT: Color.RED,
    GroupName.TOP: Color.GREEN,
    GroupName.TOP_RIGHT: Color.YELLOW,
    GroupName.BOTTOM_LEFT: Color.ORANGE,
    GroupName.BOTTOM_RIGHT: Color.WHITE,
    GroupName.BOTTOM: Color.BLUE,
}


class Board(BaseModel):
    """Immutable tables consumed by the rotation engine and the solver."""

    model_config = ConfigDict(frozen=True)

    circles: tuple[Circle, ...]
    nodes: tuple[Node, ...]
    groups: dict[GroupName, NodeGroup]
    linkage: dict[int, LinkageRule]
    node_groups: dict[int, GroupName]

    def circle(self, circle_id: int) -> Circle | None:
        if 0 <= circle_id < len(self.circles):
            return self.circles[circle_id]
        return None

    def node(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def nodes_on_circle(self, circle_id: int) -> list[Node]:
        return [n for n in self.nodes if circle_id in n.parent_circle_ids]

    def group_of(self, node_id: int) -> GroupName:
        return self.node_groups[node_id]

    def linkage_rule(self, circle_id: int) -> LinkageRule | None:
        return self.linkage.get(circle_id)


# ── Circles ──


def build_circles() -> list[Circle]:
    """Create the 9 circles, ids in cluster-major, radius-minor order."""
    circles: list[Circle] = []
    for cluster, (cx, cy) in enumerate(CLUSTER_CENTERS):
        for r in RADII:
            circles.append(Circle(id=len(circles), cx=cx, cy=cy, r=r, cluster=cluster))
    return circles


def circle_intersections(c1: Circle, c2: Circle) -> list[Point]:
    """Return the 0, 1 or 2 points where two circumferences meet."""
    dx = c2.cx - c1.cx
    dy = c2.cy - c1.cy
    d = math.hypot(dx, dy)

    if d == 0 or d > c1.r + c2.r or d < abs(c1.r - c2.r):
        return []

    a = (c1.r * c1.r - c2.r * c2.r + d * d) / (2 * d)
    # Clamp so rounding cannot push the radicand below zero
    h = math.sqrt(max(0.0, c1.r * c1.r - a * a))

    mx = c1.cx + a * dx / d
    my = c1.cy + a * dy / d

    p1 = (mx + h * dy / d, my - h * dx / d)
    p2 = (mx - h * dy / d, my + h * dx / d)

    if (
        abs(d - (c1.r + c2.r)) < TANGENT_EPSILON
        or abs(d - abs(c1.r - c2.r)) < TANGENT_EPSILON
    ):
        return [p1]
    return [p1, p2]


def snap_to_circle(point: Point, circle: Circle) -> Point:
    """Project a point radially onto the exact circumference of *circle*."""
    dx = point[0] - circle.cx
    dy = point[1] - circle.cy
    distance = math.hypot(dx, dy)
    if distance == 0:
        return point
    scale = circle.r / distance
    return (circle.cx + dx * scale, circle.cy + dy * scale)


def point_key(point: Point) -> str:
    return f"{point[0]:.{KEY_PRECISION}f},{point[1]:.{KEY_PRECISION}f}"


# ── Nodes ──


def build_nodes(circles: list[Circle]) -> list[Node]:
    """Intersect every cross-cluster circle pair and deduplicate the points.

    Node ids are assigned in discovery order. Each point is snapped onto its
    first parent circle before being keyed.
    """
    seen: dict[str, Node] = {}

    for c1, c2 in combinations(circles, 2):
        if c1.cluster == c2.cluster:
            continue
        for raw in circle_intersections(c1, c2):
            x, y = snap_to_circle(raw, c1)
            key = point_key((x, y))
            if key in seen:
                continue
            seen[key] = Node(
                id=len(seen),
                x=x,
                y=y,
                parent_circle_ids=(c1.id, c2.id),
            )

    return sorted(seen.values(), key=lambda n: n.id)


# ── Groups ──


def _cluster_pair(node: Node, circles: list[Circle]) -> tuple[int, int]:
    a, b = (circles[cid].cluster for cid in node.parent_circle_ids)
    return (a, b) if a <= b else (b, a)


def _medium_circle(circles: list[Circle], cluster: int) -> Circle:
    for c in circles:
        if c.cluster == cluster and c.r == RADII[MEDIUM_RADIUS_INDEX]:
            return c
    raise BoardGeometryError(f"Cluster {cluster} has no medium circle")


def build_groups(circles: list[Circle], nodes: list[Node]) -> dict[GroupName, NodeGroup]:
    """Partition nodes into the six win regions.

    For each cluster pair, the two nodes lying on both medium circles are the
    group centers (upper one first). Every other node shared by that pair
    joins whichever center is nearer.
    """
    groups: dict[GroupName, NodeGroup] = {}

    for (k1, k2), (upper_name, lower_name) in GROUP_PAIRS.items():
        m1 = _medium_circle(circles, k1)
        m2 = _medium_circle(circles, k2)

        centers = sorted(
            (
                n for n in nodes
                if m1.id in n.parent_circle_ids and m2.id in n.parent_circle_ids
            ),
            key=lambda n: n.y,
        )
        if len(centers) != 2:
            raise BoardGeometryError(
                f"Expected 2 group centers for clusters {k1},{k2}, found {len(centers)}"
            )
        upper, lower = centers

        near_upper: list[int] = []
        near_lower: list[int] = []
        for n in nodes:
            if n.id in (upper.id, lower.id) or _cluster_pair(n, circles) != (k1, k2):
                continue
            dist_upper = math.hypot(n.x - upper.x, n.y - upper.y)
            dist_lower = math.hypot(n.x - lower.x, n.y - lower.y)
            if dist_upper < dist_lower:
                near_upper.append(n.id)
            else:
                near_lower.append(n.id)

        for name, center, members in (
            (upper_name, upper, near_upper),
            (lower_name, lower, near_lower),
        ):
            groups[name] = NodeGroup(
                name=name,
                center_node_id=center.id,
                surrounding_node_ids=tuple(members),
                color=GROUP_COLORS[name],
            )

    return groups


def _check_board(nodes: list[Node], groups: dict[GroupName, NodeGroup]) -> dict[int, GroupName]:
    """Verify every node sits in exactly one 9-node group."""
    if len(groups) != len(GroupName):
        raise BoardGeometryError(f"Expected {len(GroupName)} groups, got {len(groups)}")

    membership: dict[int, GroupName] = {}
    for group in groups.values():
        if len(group.node_ids) != GROUP_SIZE:
            raise BoardGeometryError(
                f"Group {group.name.value} has {len(group.node_ids)} nodes, expected {GROUP_SIZE}"
            )
        for node_id in group.node_ids:
            if node_id in membership:
                raise BoardGeometryError(
                    f"Node {node_id} belongs to both {membership[node_id].value} "
                    f"and {group.name.value}"
                )
            membership[node_id] = group.name

    missing = [n.id for n in nodes if n.id not in membership]
    if missing:
        raise BoardGeometryError(f"Nodes outside every group: {missing}")
    return membership


def initialize_board() -> Board:
    """Derive circles, nodes, groups and linkage from the fixed parameters."""
    circles = build_circles()
    nodes = build_nodes(circles)
    groups = build_groups(circles, nodes)
    membership = _check_board(nodes, groups)

    colored = tuple(
        n.model_copy(update={"initial_color": groups[membership[n.id]].color})
        for n in nodes
    )

    linkage = build_linkage_table()
    for rule in linkage.values():
        if not 0 <= rule.trigger_circle_id < len(circles):
            raise BoardGeometryError(f"Linkage trigger {rule.trigger_circle_id} is not a circle")

    logger.info(
        f"Board initialized: {len(circles)} circles, {len(colored)} nodes, "
        f"{len(groups)} groups, {len(linkage)} linkage rules"
    )
    return Board(
        circles=tuple(circles),
        nodes=colored,
        groups=groups,
        linkage=linkage,
        node_groups=membership,
    )


BOARD: Board = initialize_board()
