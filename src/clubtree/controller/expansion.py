"""
Expand/collapse state and the visible node set.

Collapsing a node hides its whole subtree but leaves the stored flags of the
descendants alone, so expanding it again brings back exactly the shape the
subtree had before.
"""
from __future__ import annotations

import logging
from typing import List

from clubtree.model.hierarchy import Hierarchy, TreeNode, ExpansionState

logger = logging.getLogger(__name__)


def toggle(hierarchy: Hierarchy, node_id: str) -> bool:
    """
    Flip a node between expanded and collapsed.

    Returns:
        False for a leaf or the synthetic root (nothing to toggle), else True.

    Raises:
        KeyError: Unknown node id.
    """
    node = hierarchy.node(node_id)
    if not node.has_toggle:
        return False
    if node.is_expanded:
        node.state = ExpansionState.COLLAPSED
    else:
        node.state = ExpansionState.EXPANDED
    logger.debug(f"Toggled '{node_id}' -> {node.state}")
    return True


def expand_all(hierarchy: Hierarchy) -> int:
    """Expand every node. Returns how many nodes changed."""
    changed = 0
    for node in hierarchy.descendants():
        if not node.is_expanded:
            node.state = ExpansionState.EXPANDED
            changed += 1
    logger.debug(f"Expand all: {changed} nodes reopened.")
    return changed


def collapse_all(hierarchy: Hierarchy) -> int:
    """Collapse every member with children, leaving only the lords on screen."""
    changed = 0
    for node in hierarchy.members():
        if node.has_toggle and node.is_expanded:
            node.state = ExpansionState.COLLAPSED
            changed += 1
    logger.debug(f"Collapse all: {changed} nodes closed.")
    return changed


def visible_nodes(hierarchy: Hierarchy) -> List[TreeNode]:
    """
    Pre-order list of every node whose ancestors are all expanded.

    The synthetic root is always expanded and never part of the result.
    """
    result: List[TreeNode] = []
    stack = list(reversed(hierarchy.root.children))
    while stack:
        node = stack.pop()
        result.append(node)
        if node.is_expanded:
            stack.extend(reversed(node.children))
    return result
