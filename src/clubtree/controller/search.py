"""Search and year filter highlighting of the visible cards."""
from __future__ import annotations

from enum import StrEnum
from typing import Dict, Iterable, Optional

from clubtree.model.hierarchy import TreeNode


class MatchState(StrEnum):
    MATCH = "match"
    DIMMED = "dimmed"
    NEUTRAL = "neutral"


def _matches_text(node: TreeNode, needle: str) -> bool:
    record = node.record
    fields = (record.name, record.nickname, record.hometown)
    return any(value is not None and needle in value.lower() for value in fields)


def classify(query: str, nodes: Iterable[TreeNode]) -> Dict[str, MatchState]:
    """
    Case-insensitive substring search over name, nickname and hometown.

    A blank query leaves every card neutral.
    """
    needle = (query or "").strip().lower()
    result: Dict[str, MatchState] = {}
    for node in nodes:
        if node.is_synthetic:
            continue
        if not needle:
            result[node.id] = MatchState.NEUTRAL
        else:
            result[node.id] = MatchState.MATCH if _matches_text(node, needle) else MatchState.DIMMED
    return result


def classify_by_year(year: Optional[int], nodes: Iterable[TreeNode]) -> Dict[str, MatchState]:
    """Highlight the members who attended in 'year'; no year leaves every card neutral."""
    result: Dict[str, MatchState] = {}
    for node in nodes:
        if node.is_synthetic:
            continue
        if year is None:
            result[node.id] = MatchState.NEUTRAL
        else:
            result[node.id] = MatchState.MATCH if year in node.record.years_attended else MatchState.DIMMED
    return result
