"""
Sponsor Hierarchy (Tree Model)
==============================
Turns the flat, sponsor-linked member list into one rooted tree.

Why is this file needed?
------------------------
1. Single root: Several lords (members without sponsor) would form a forest.
   A synthetic, never displayed root node unifies them so that traversal and
   layout only ever deal with one tree.
2. Validation: Unknown sponsors and sponsor cycles are data errors. They are
   detected here, before anything recurses over the tree.
3. Arena: Nodes are stored in one id -> node table. A child knows its parent
   by id only; the parent owns its children through the ordered children list.

Classes:
    ExpansionState: Expanded / Collapsed flag of a node.
    TreeNode: One member (or the synthetic root) in the tree.
    Hierarchy: The node arena plus the root.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, List, Optional, Iterator, Sequence
import logging

from clubtree.model.errors import DanglingReferenceError, CycleError, DuplicateMemberError
from clubtree.model.members import MemberRecord

logger = logging.getLogger(__name__)

SYNTHETIC_ROOT_ID = "__root__"


class ExpansionState(StrEnum):
    EXPANDED = "expanded"
    COLLAPSED = "collapsed"


@dataclass(eq=False)
class TreeNode:
    id: str
    record: Optional[MemberRecord]
    parent_id: Optional[str] = None
    children: List[TreeNode] = field(default_factory=list)
    state: ExpansionState = ExpansionState.EXPANDED
    depth: int = 0

    @property
    def is_synthetic(self) -> bool:
        return self.record is None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def has_toggle(self) -> bool:
        """Only displayed nodes with children get an expand/collapse control."""
        return not self.is_synthetic and not self.is_leaf

    @property
    def is_expanded(self) -> bool:
        return self.state is ExpansionState.EXPANDED

    def __repr__(self) -> str:
        return f"TreeNode({self.id!r}, depth={self.depth}, children={len(self.children)}, {self.state})"


class Hierarchy:
    def __init__(self, root: TreeNode, nodes: Dict[str, TreeNode]) -> None:
        self.root = root
        self._nodes = nodes

    def __len__(self) -> int:
        """Number of member nodes (the synthetic root is not counted)."""
        return len(self._nodes) - 1

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def node(self, node_id: str) -> TreeNode:
        return self._nodes[node_id]

    def parent(self, node: TreeNode) -> Optional[TreeNode]:
        if node.parent_id is None:
            return None
        return self._nodes[node.parent_id]

    def ancestors(self, node: TreeNode) -> Iterator[TreeNode]:
        """Yield the ancestors of a node, nearest first, ending with the root."""
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def descendants(self, node: Optional[TreeNode] = None) -> Iterator[TreeNode]:
        """Pre-order walk below (and including) the node, ignoring expansion state."""
        stack = [node or self.root]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def members(self) -> Iterator[TreeNode]:
        """Every member node in pre-order, without the synthetic root."""
        return (n for n in self.descendants() if not n.is_synthetic)


def _check_acyclic(records: Sequence[MemberRecord], by_id: Dict[str, MemberRecord]) -> None:
    """
    Follow every sponsor chain once, iteratively.

    'done' holds ids whose chain is known to end at a lord. Walking a new chain
    keeps the ids of the current path; reaching one of them again is a cycle.
    """
    done: set[str] = set()
    for record in records:
        path: List[str] = []
        on_path: set[str] = set()
        current: Optional[str] = record.id
        while current is not None and current not in done:
            if current in on_path:
                cycle = path[path.index(current):]
                logger.error(f"Sponsor cycle detected: {' -> '.join(cycle)}")
                raise CycleError(cycle)
            path.append(current)
            on_path.add(current)
            current = by_id[current].sponsor_id
        done.update(path)


def build_hierarchy(records: Sequence[MemberRecord]) -> Hierarchy:
    """
    Build the tree under a synthetic root.

    Siblings keep the order in which their records appear in the input.

    Raises:
        DuplicateMemberError: Two records share an id, or a record uses the
            reserved root id.
        DanglingReferenceError: A sponsor id matches no record.
        CycleError: Sponsor references loop.
    """
    by_id: Dict[str, MemberRecord] = {}
    for record in records:
        if record.id in by_id or record.id == SYNTHETIC_ROOT_ID:
            logger.error(f"Duplicate or reserved member id '{record.id}'.")
            raise DuplicateMemberError(record.id)
        by_id[record.id] = record

    for record in records:
        if record.sponsor_id is not None and record.sponsor_id not in by_id:
            logger.error(f"Member '{record.id}' references unknown sponsor '{record.sponsor_id}'.")
            raise DanglingReferenceError(record.id, record.sponsor_id)

    _check_acyclic(records, by_id)

    root = TreeNode(id=SYNTHETIC_ROOT_ID, record=None)
    nodes: Dict[str, TreeNode] = {SYNTHETIC_ROOT_ID: root}
    for record in records:
        nodes[record.id] = TreeNode(
            id=record.id,
            record=record,
            parent_id=record.sponsor_id or SYNTHETIC_ROOT_ID,
        )
    # Second pass so a sponsor listed after its members still works
    for record in records:
        node = nodes[record.id]
        nodes[node.parent_id].children.append(node)

    hierarchy = Hierarchy(root=root, nodes=nodes)
    for node in hierarchy.descendants():
        for child in node.children:
            child.depth = node.depth + 1

    logger.info(f"Built hierarchy with {len(hierarchy)} members and {len(root.children)} top-level roots.")
    return hierarchy
