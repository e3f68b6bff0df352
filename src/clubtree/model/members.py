"""
Member Records
==============
Defines the input schema of the tree and the read-only data derived from it.

Why is this file needed?
------------------------
1. Schema: MemberRecord is the immutable, validated form of one entry of the
   member list. Nothing downstream ever mutates it.
2. Annotations: Values computed from the whole list (the sponsor's display
   name, the tenure, the member kind) live in a separate table keyed by id
   instead of being bolted onto the record.
3. Lookup: RecordStore is the id -> record lookup shared by the hierarchy
   builder and the detail panel.

Classes:
    MemberKind: Lord / veteran / regular, drives the card footprint.
    MemberRecord: One member, as loaded.
    MemberAnnotation: Derived per-member values.
    MemberDetails: Everything the detail panel needs for one member.
    RecordStore: The loaded member list with its lookups.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, Any, Optional, Iterable, Iterator, List
import logging

from clubtree.model.errors import RecordFormatError, DuplicateMemberError

logger = logging.getLogger(__name__)

VETERAN_THRESHOLD = 5


class MemberKind(StrEnum):
    LORD = "lord"
    VETERAN = "veteran"
    REGULAR = "regular"


@dataclass(frozen=True)
class MemberRecord:
    id: str
    name: str
    nickname: Optional[str] = None
    hometown: Optional[str] = None
    sponsor_id: Optional[str] = None
    lord: bool = False
    years_attended: frozenset[int] = field(default_factory=frozenset)
    wins: int = 0
    funny_story: Optional[str] = None
    photo_url: Optional[str] = None

    @property
    def tenure(self) -> int:
        """Number of attended years."""
        return len(self.years_attended)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the member-list wire format."""
        return {
            "id": self.id,
            "name": self.name,
            "nickname": self.nickname,
            "hometown": self.hometown,
            "sponsor": self.sponsor_id,
            "lord": self.lord,
            "years_attended": sorted(self.years_attended),
            "wins": self.wins,
            "funny_story": self.funny_story,
            "photo": self.photo_url,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> MemberRecord:
        """
        Build a record from one entry of the member list.

        Optional keys may be missing or null. An empty sponsor string is the
        same as no sponsor.

        Raises:
            RecordFormatError: If 'id' or 'name' is missing, a year or the
                win count is not an integer, or 'lord' is not a boolean.
        """
        if not isinstance(data, dict):
            raise RecordFormatError(f"Member entry must be an object, got {type(data).__name__}.")

        member_id = data.get("id")
        name = data.get("name")
        if member_id is None or str(member_id).strip() == "":
            raise RecordFormatError(f"Member entry without 'id': {data!r}")
        if name is None:
            raise RecordFormatError(f"Member '{member_id}' has no 'name'.")

        try:
            years = frozenset(_as_int(y) for y in data.get("years_attended") or [])
            wins = _as_int(data.get("wins") or 0)
        except (TypeError, ValueError) as e:
            raise RecordFormatError(f"Member '{member_id}' has a malformed number: {e}") from e

        lord = data.get("lord")
        if lord is None:
            lord = False
        elif not isinstance(lord, bool):
            raise RecordFormatError(f"Member '{member_id}' has a non boolean 'lord' flag: {lord!r}")

        return MemberRecord(
            id=str(member_id),
            name=str(name),
            nickname=_optional_str(data.get("nickname")),
            hometown=_optional_str(data.get("hometown")),
            sponsor_id=_optional_str(data.get("sponsor")),
            lord=lord,
            years_attended=years,
            wins=wins,
            funny_story=_optional_str(data.get("funny_story")),
            photo_url=_optional_str(data.get("photo")),
        )


def _as_int(value: Any) -> int:
    # bool is an int subclass, but True is not a year
    if isinstance(value, bool) or isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value!r} is not an integer")
    return int(value)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def classify_member(record: MemberRecord, veteran_threshold: int = VETERAN_THRESHOLD) -> MemberKind:
    """Lords are always lords; everybody else is a veteran from the threshold on."""
    if record.lord:
        return MemberKind.LORD
    if record.tenure >= veteran_threshold:
        return MemberKind.VETERAN
    return MemberKind.REGULAR


@dataclass(frozen=True)
class MemberAnnotation:
    sponsor_name: Optional[str]
    tenure: int
    kind: MemberKind


@dataclass(frozen=True)
class MemberDetails:
    """Payload for the detail panel when a member card is activated."""
    record: MemberRecord
    annotation: MemberAnnotation

    @property
    def sorted_years(self) -> List[int]:
        return sorted(self.record.years_attended)

    @property
    def initial(self) -> str:
        """First letter of the name, used for the photo placeholder."""
        return self.record.name[:1]


class RecordStore:
    """
    The loaded member list.

    Keeps the input order (it decides the sibling order in the tree) and
    computes the annotation table once, right after loading.
    """
    def __init__(self, records: Iterable[MemberRecord], veteran_threshold: int = VETERAN_THRESHOLD):
        self._records: List[MemberRecord] = list(records)
        self._by_id: Dict[str, MemberRecord] = {}
        for record in self._records:
            if record.id in self._by_id:
                logger.error(f"Duplicate member id '{record.id}' in member list.")
                raise DuplicateMemberError(record.id)
            self._by_id[record.id] = record

        self.veteran_threshold = veteran_threshold
        self._annotations: Dict[str, MemberAnnotation] = {
            record.id: self._annotate(record) for record in self._records
        }
        logger.info(f"Record store holds {len(self._records)} members.")

    def _annotate(self, record: MemberRecord) -> MemberAnnotation:
        sponsor_name = None
        if record.sponsor_id is not None:
            sponsor = self._by_id.get(record.sponsor_id)
            sponsor_name = sponsor.name if sponsor is not None else record.sponsor_id
        return MemberAnnotation(
            sponsor_name=sponsor_name,
            tenure=record.tenure,
            kind=classify_member(record, self.veteran_threshold),
        )

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MemberRecord]:
        return iter(self._records)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._by_id

    @property
    def records(self) -> List[MemberRecord]:
        return list(self._records)

    def get(self, member_id: str) -> MemberRecord:
        return self._by_id[member_id]

    def annotation(self, member_id: str) -> MemberAnnotation:
        return self._annotations[member_id]

    def details(self, member_id: str) -> MemberDetails:
        return MemberDetails(record=self._by_id[member_id], annotation=self._annotations[member_id])
