"""
Tree Layout Engine
==================
Assigns every visible member card a position and a size.

Why is this file needed?
------------------------
1. Placement: Depth in the sponsor tree decides the row (y), the sibling
   order decides the column (x).
2. Variable sizes: Lords, veterans and regular members have different card
   footprints. Spacing is computed from the real card widths so that a big
   lord card never overlaps a small neighbour.
3. Edges: The connector between sponsor and member starts and ends at the
   card borders, which again depend on each card's own size.

The packing is a contour based tidy tree: every subtree is summarised by the
leftmost and rightmost extent it occupies on each depth level, and sibling
subtrees are pushed apart until no level collides. A parent is centred over
its first and last child.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from clubtree.config import LayoutConfig
from clubtree.model.geometry import Point, Size, Box, Placement
from clubtree.model.hierarchy import TreeNode, SYNTHETIC_ROOT_ID
from clubtree.model.members import MemberKind, classify_member

logger = logging.getLogger(__name__)

# depth -> (left extent, right extent), relative to the subtree root
Contour = Dict[int, Tuple[float, float]]


@dataclass(frozen=True)
class LayoutNode:
    node: TreeNode
    kind: MemberKind
    position: Point
    size: Size

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def placement(self) -> Placement:
        return Placement(position=self.position, size=self.size)

    @property
    def box(self) -> Box:
        return self.placement.box


@dataclass(frozen=True)
class EdgeGeometry:
    """
    Cubic connector from the bottom of the sponsor card to the top of the
    member card, bending at half the vertical distance.

    Lord links hang the lords from the anchor point of the synthetic root.
    """
    source_id: str
    target_id: str
    start: Point
    control_start: Point
    control_end: Point
    end: Point
    is_lord_link: bool = False

    @staticmethod
    def between(source_id: str, source: Placement, target_id: str, target: Placement) -> EdgeGeometry:
        start = source.bottom_anchor
        end = target.top_anchor
        mid_y = (start.y + end.y) / 2
        return EdgeGeometry(
            source_id=source_id,
            target_id=target_id,
            start=start,
            control_start=Point(start.x, mid_y),
            control_end=Point(end.x, mid_y),
            end=end,
            is_lord_link=source_id == SYNTHETIC_ROOT_ID,
        )

    @staticmethod
    def collapsed(source_id: str, target_id: str, at: Point) -> EdgeGeometry:
        """Zero length connector, the first/last frame of an appearing/vanishing edge."""
        return EdgeGeometry(source_id, target_id, at, at, at, at, is_lord_link=source_id == SYNTHETIC_ROOT_ID)

    def to_svg_path(self) -> str:
        return (
            f"M {self.start.x:g} {self.start.y:g} "
            f"C {self.control_start.x:g} {self.control_start.y:g}, "
            f"{self.control_end.x:g} {self.control_end.y:g}, "
            f"{self.end.x:g} {self.end.y:g}"
        )


class LayoutEngine:
    def __init__(self, config: Optional[LayoutConfig] = None) -> None:
        self.config = config or LayoutConfig()

    def kind_of(self, node: TreeNode) -> MemberKind:
        return classify_member(node.record, self.config.veteran_threshold)

    def footprint(self, kind: MemberKind) -> Size:
        match kind:
            case MemberKind.LORD:
                return self.config.lord
            case MemberKind.VETERAN:
                return self.config.veteran
            case _:
                return self.config.regular

    def row_y(self, depth: int) -> float:
        """Lords (depth 1) sit on y = 0."""
        return (depth - 1) * self.config.level_spacing

    @property
    def root_placement(self) -> Placement:
        """
        Anchor of the synthetic root: a zero size point one level above the
        lords, on the axis the top level is centred on. It is never drawn as a
        card, only the lord links start there.
        """
        return Placement(position=Point(0.0, self.row_y(0)), size=Size(0.0, 0.0))

    def layout(self, visible: Sequence[TreeNode]) -> Dict[str, LayoutNode]:
        """
        Place the given visible nodes.

        The structure is read from the list itself: a node's laid out children
        are its children present in the list, and nodes whose parent is absent
        (the lords) become siblings on the top level, centred on x = 0.

        Returns:
            id -> LayoutNode, in pre-order.
        """
        present = {n.id: n for n in visible if not n.is_synthetic}
        if not present:
            return {}

        children_of = {
            node_id: [c for c in node.children if c.id in present]
            for node_id, node in present.items()
        }
        tops = [n for n in present.values() if n.parent_id not in present]

        order: List[TreeNode] = []
        stack = list(reversed(tops))
        while stack:
            node = stack.pop()
            order.append(node)
            stack.extend(reversed(children_of[node.id]))

        kinds = {n.id: self.kind_of(n) for n in order}
        sizes = {node_id: self.footprint(kind) for node_id, kind in kinds.items()}

        # Bottom-up: pack children, remember each child's offset from its parent
        offsets: Dict[str, float] = {}
        contours: Dict[str, Contour] = {}
        for node in reversed(order):
            half = sizes[node.id].width / 2
            kids = children_of[node.id]
            contour: Contour = {node.depth: (-half, half)}
            if kids:
                kid_offsets, merged = self._pack([contours.pop(k.id) for k in kids])
                center = (kid_offsets[0] + kid_offsets[-1]) / 2
                for kid, off in zip(kids, kid_offsets):
                    offsets[kid.id] = off - center
                for depth, (left, right) in merged.items():
                    contour[depth] = (left - center, right - center)
            contours[node.id] = contour

        top_offsets, _ = self._pack([contours[t.id] for t in tops])
        center = (top_offsets[0] + top_offsets[-1]) / 2
        xs: Dict[str, float] = {t.id: off - center for t, off in zip(tops, top_offsets)}

        result: Dict[str, LayoutNode] = {}
        for node in order:
            if node.id not in xs:
                xs[node.id] = xs[node.parent_id] + offsets[node.id]
            result[node.id] = LayoutNode(
                node=node,
                kind=kinds[node.id],
                position=Point(xs[node.id], self.row_y(node.depth)),
                size=sizes[node.id],
            )

        logger.debug(f"Laid out {len(result)} nodes under {len(tops)} top-level roots.")
        return result

    def _pack(self, contours: List[Contour]) -> Tuple[List[float], Contour]:
        """
        Push sibling subtrees left to right until no shared level collides.

        Returns:
            The offset of every subtree (first one at 0) and the merged contour.
        """
        gutter = self.config.sibling_gutter
        merged: Contour = {}
        offsets: List[float] = []
        for contour in contours:
            if not merged:
                offset = 0.0
            else:
                shared = [merged[d][1] + gutter - contour[d][0] for d in contour if d in merged]
                if shared:
                    offset = max(shared)
                else:
                    # No common level: keep the whole subtree right of everything so far
                    offset = max(r for _, r in merged.values()) + gutter - min(l for l, _ in contour.values())
            offsets.append(offset)
            for depth, (left, right) in contour.items():
                left, right = left + offset, right + offset
                if depth in merged:
                    left = min(merged[depth][0], left)
                    right = max(merged[depth][1], right)
                merged[depth] = (left, right)
        return offsets, merged

    def edges(self, layout: Dict[str, LayoutNode]) -> List[EdgeGeometry]:
        """
        Connectors for every laid out member whose sponsor is laid out too,
        plus a lord link from the root anchor to every lord.
        """
        result: List[EdgeGeometry] = []
        for layout_node in layout.values():
            parent_id = layout_node.node.parent_id
            if parent_id == SYNTHETIC_ROOT_ID:
                source = self.root_placement
            elif parent_id in layout:
                source = layout[parent_id].placement
            else:
                continue
            result.append(EdgeGeometry.between(parent_id, source, layout_node.id, layout_node.placement))
        return result
