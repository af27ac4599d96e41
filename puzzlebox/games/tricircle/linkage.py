"""Linked-rotation rules.

Rotating some circles also spins the ring of a 9-node group elsewhere on the
board. Inner circles drive the group on the far side of the board against the
primary direction; outer circles drive a group with the primary direction.
Medium circles have no linkage.
"""

from __future__ import annotations

from puzzlebox.games.tricircle.types import Direction, GroupName, LinkageRule, Relation

# trigger circle id -> (target group, relation)
LINKAGE_RULES: dict[int, tuple[GroupName, Relation]] = {
    # Inner circles
    0: (GroupName.BOTTOM, Relation.OPPOSITE),        # top
    3: (GroupName.TOP_RIGHT, Relation.OPPOSITE),     # bottom-left
    6: (GroupName.TOP_LEFT, Relation.OPPOSITE),      # bottom-right
    # Outer circles
    2: (GroupName.TOP, Relation.SAME),               # top
    5: (GroupName.BOTTOM_RIGHT, Relation.SAME),      # bottom-left
    8: (GroupName.BOTTOM_LEFT, Relation.SAME),       # bottom-right
}


def build_linkage_table() -> dict[int, LinkageRule]:
    return {
        circle_id: LinkageRule(
            trigger_circle_id=circle_id,
            target_group=group,
            relation=relation,
        )
        for circle_id, (group, relation) in LINKAGE_RULES.items()
    }


def linked_direction(rule: LinkageRule, direction: Direction) -> Direction:
    """Direction of the linked ring given the primary rotation direction."""
    if rule.relation == Relation.SAME:
        return direction
    return direction.inverse
