"""
Data integrity errors raised while loading members and building the tree.

They all derive from ValueError. A session is never built from a list that
raises one of them.
"""
from __future__ import annotations

from typing import Sequence


class HierarchyError(ValueError):
    """Base class for member data that cannot be turned into a tree."""


class RecordFormatError(HierarchyError):
    """A member entry is missing a required key or has a malformed value."""


class DuplicateMemberError(HierarchyError):
    def __init__(self, member_id: str) -> None:
        super().__init__(f"Member id '{member_id}' is used more than once.")
        self.member_id = member_id


class DanglingReferenceError(HierarchyError):
    def __init__(self, member_id: str, sponsor_id: str) -> None:
        super().__init__(f"Member '{member_id}' is sponsored by unknown member '{sponsor_id}'.")
        self.member_id = member_id
        self.sponsor_id = sponsor_id


class CycleError(HierarchyError):
    """Sponsor references loop back onto themselves."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        chain = " -> ".join(self.cycle + self.cycle[:1])
        super().__init__(f"Sponsor chain forms a cycle: {chain}")
