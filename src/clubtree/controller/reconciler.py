"""
Frame Reconciliation
====================
Matches the previously shown cards against the newly laid out ones by member
id and hands the renderer a start and an end frame for each of them.

Why is this file needed?
------------------------
1. Identity: A card keeps its id across passes; it is never confused with
   another card, so the renderer can animate it instead of redrawing.
2. Anchors: Appearing cards grow out of the place where their sponsor was
   shown; disappearing cards shrink into the collapsed ancestor that hid them.
3. Memory: The previous frame is kept in a PositionCache that is separate
   from the tree nodes, which keeps the reconciliation itself a pure function.

Classes:
    TransitionRole: enter / update / exit.
    IdDiff: The plain id classification.
    NodeTransition, EdgeTransition: Renderer payload.
    ReconciliationResult: Everything of one pass.
    PositionCache: Placements of the last completed pass.
    Reconciler: Computes the transitions.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple
import logging

from clubtree.controller.layout import LayoutEngine, LayoutNode, EdgeGeometry
from clubtree.model.geometry import Point, Placement, ORIGIN
from clubtree.model.hierarchy import Hierarchy, TreeNode, SYNTHETIC_ROOT_ID
from clubtree.model.members import MemberKind, classify_member

logger = logging.getLogger(__name__)


class TransitionRole(StrEnum):
    ENTER = "enter"
    UPDATE = "update"
    EXIT = "exit"


@dataclass(frozen=True)
class IdDiff:
    entering: Tuple[str, ...]
    updating: Tuple[str, ...]
    exiting: Tuple[str, ...]


def diff_ids(previous_ids: Iterable[str], new_ids: Iterable[str]) -> IdDiff:
    """
    Classify ids as entering (new only), updating (both) or exiting
    (previous only). Entering and updating keep the order of 'new_ids',
    exiting the order of 'previous_ids'.
    """
    previous = list(dict.fromkeys(previous_ids))
    new = list(dict.fromkeys(new_ids))
    previous_set = set(previous)
    new_set = set(new)
    return IdDiff(
        entering=tuple(i for i in new if i not in previous_set),
        updating=tuple(i for i in new if i in previous_set),
        exiting=tuple(i for i in previous if i not in new_set),
    )


@dataclass(frozen=True)
class NodeTransition:
    id: str
    kind: MemberKind
    role: TransitionRole
    start: Placement
    end: Placement


@dataclass(frozen=True)
class EdgeTransition:
    """Connector into member 'target_id'; edges are keyed by their child."""
    target_id: str
    source_id: str
    role: TransitionRole
    start: EdgeGeometry
    end: EdgeGeometry

    @property
    def is_lord_link(self) -> bool:
        return self.source_id == SYNTHETIC_ROOT_ID


@dataclass(frozen=True)
class ReconciliationResult:
    entering: Tuple[NodeTransition, ...]
    updating: Tuple[NodeTransition, ...]
    exiting: Tuple[NodeTransition, ...]
    edges: Tuple[EdgeTransition, ...]
    layout: Mapping[str, LayoutNode]

    @property
    def entering_ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self.entering)

    @property
    def updating_ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self.updating)

    @property
    def exiting_ids(self) -> Tuple[str, ...]:
        return tuple(t.id for t in self.exiting)

    def transitions(self) -> Iterator[NodeTransition]:
        yield from self.entering
        yield from self.updating
        yield from self.exiting

    def transition(self, node_id: str) -> NodeTransition:
        for t in self.transitions():
            if t.id == node_id:
                return t
        raise KeyError(node_id)


class PositionCache:
    """Placement of every card shown by the last completed pass."""
    def __init__(self) -> None:
        self._placements: Dict[str, Placement] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._placements

    def __len__(self) -> int:
        return len(self._placements)

    def get(self, node_id: str) -> Optional[Placement]:
        return self._placements.get(node_id)

    def ids(self) -> List[str]:
        return list(self._placements)

    def as_mapping(self) -> Mapping[str, Placement]:
        return dict(self._placements)

    def commit(self, layout: Mapping[str, LayoutNode]) -> None:
        """Replace the memory with the new layout; cards that left drop out."""
        self._placements = {node_id: ln.placement for node_id, ln in layout.items()}

    def clear(self) -> None:
        self._placements.clear()


class Reconciler:
    def __init__(
        self,
        hierarchy: Hierarchy,
        origin: Point = ORIGIN,
        veteran_threshold: int = 5,
        root_placement: Optional[Placement] = None,
    ) -> None:
        self.hierarchy = hierarchy
        self.origin = origin
        self.veteran_threshold = veteran_threshold
        # Lord links start here, in every frame
        self.root_placement = root_placement or LayoutEngine().root_placement

    def _source(self, node_id: str, placements: Mapping[str, Placement]) -> Tuple[str, Optional[Placement]]:
        """Parent id of a node and the parent's placement in 'placements'."""
        parent_id = self.hierarchy.node(node_id).parent_id
        if parent_id == SYNTHETIC_ROOT_ID:
            return parent_id, self.root_placement
        return parent_id, placements.get(parent_id)

    def _enter_anchor(self, node: TreeNode, previous: Mapping[str, Placement]) -> Point:
        """Last shown position of the nearest ancestor that was on screen."""
        for ancestor in self.hierarchy.ancestors(node):
            placement = previous.get(ancestor.id)
            if placement is not None:
                return placement.position
        return self.origin

    def _exit_anchor(self, node: TreeNode, layout: Mapping[str, LayoutNode]) -> Point:
        """New position of the nearest ancestor still shown, i.e. the one that was collapsed."""
        for ancestor in self.hierarchy.ancestors(node):
            layout_node = layout.get(ancestor.id)
            if layout_node is not None:
                return layout_node.position
        return self.origin

    def reconcile(
        self,
        previous: Mapping[str, Placement],
        layout: Mapping[str, LayoutNode],
    ) -> ReconciliationResult:
        """
        Compute start/end frames for every card of the previous and new pass.

        Args:
            previous: id -> placement of the last pass (a PositionCache mapping).
            layout: id -> layout node of the new pass.
        """
        diff = diff_ids(previous.keys(), layout.keys())

        entering: List[NodeTransition] = []
        updating: List[NodeTransition] = []
        exiting: List[NodeTransition] = []
        edges: List[EdgeTransition] = []
        anchors: Dict[str, Point] = {}

        for node_id in diff.entering:
            ln = layout[node_id]
            anchor = self._enter_anchor(ln.node, previous)
            anchors[node_id] = anchor
            entering.append(NodeTransition(node_id, ln.kind, TransitionRole.ENTER, ln.placement.moved_to(anchor), ln.placement))

        for node_id in diff.updating:
            ln = layout[node_id]
            updating.append(NodeTransition(node_id, ln.kind, TransitionRole.UPDATE, previous[node_id], ln.placement))

        for node_id in diff.exiting:
            node = self.hierarchy.node(node_id)
            last = previous[node_id]
            anchor = self._exit_anchor(node, layout)
            anchors[node_id] = anchor
            kind = classify_member(node.record, self.veteran_threshold)
            exiting.append(NodeTransition(node_id, kind, TransitionRole.EXIT, last, last.moved_to(anchor)))

        # Edges follow their child card
        current = {node_id: ln.placement for node_id, ln in layout.items()}
        for t in entering:
            parent_id, parent_now = self._source(t.id, current)
            if parent_now is None:
                continue
            end = EdgeGeometry.between(parent_id, parent_now, t.id, t.end)
            start = EdgeGeometry.collapsed(parent_id, t.id, anchors[t.id])
            edges.append(EdgeTransition(t.id, parent_id, TransitionRole.ENTER, start, end))

        for t in updating:
            parent_id, parent_now = self._source(t.id, current)
            if parent_now is None:
                continue
            _, parent_before = self._source(t.id, previous)
            start = EdgeGeometry.between(parent_id, parent_before or parent_now, t.id, t.start)
            end = EdgeGeometry.between(parent_id, parent_now, t.id, t.end)
            edges.append(EdgeTransition(t.id, parent_id, TransitionRole.UPDATE, start, end))

        for t in exiting:
            parent_id, parent_before = self._source(t.id, previous)
            if parent_before is None:
                continue
            start = EdgeGeometry.between(parent_id, parent_before, t.id, t.start)
            end = EdgeGeometry.collapsed(parent_id, t.id, anchors[t.id])
            edges.append(EdgeTransition(t.id, parent_id, TransitionRole.EXIT, start, end))

        logger.debug(
            f"Reconciled: {len(entering)} entering, {len(updating)} updating, {len(exiting)} exiting."
        )
        return ReconciliationResult(
            entering=tuple(entering),
            updating=tuple(updating),
            exiting=tuple(exiting),
            edges=tuple(edges),
            layout=dict(layout),
        )
