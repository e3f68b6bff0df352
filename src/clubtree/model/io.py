"""
Input Manager (JSON)
Handles loading the flat member list from a .json file or from already
parsed data (an endpoint response, an embedded constant).
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, List, Optional

from clubtree.config import DEFAULT_MEMBERS_PATH
from clubtree.model.errors import RecordFormatError
from clubtree.model.members import MemberRecord

# Get module logger
logger = logging.getLogger(__name__)


class MemberIO:

    @staticmethod
    def parse_members(data: Any) -> List[MemberRecord]:
        """
        Convert a decoded member list into records, keeping the input order.

        Accepts either a bare list of member objects or an object with a
        'members' list.
        """
        if isinstance(data, dict) and "members" in data:
            data = data["members"]
        if not isinstance(data, list):
            msg = f"Member data must be a list, got {type(data).__name__}."
            logger.error(msg)
            raise RecordFormatError(msg)

        records: List[MemberRecord] = []
        for index, entry in enumerate(data):
            try:
                records.append(MemberRecord.from_dict(entry))
            except RecordFormatError as e:
                logger.error(f"Member entry #{index} rejected: {e}")
                raise
        logger.debug(f"Parsed {len(records)} member entries.")
        return records

    @staticmethod
    def load_members(filepath: Optional[str] = None) -> List[MemberRecord]:
        """Load the member list from a JSON file (the bundled list by default)."""
        filepath = filepath or DEFAULT_MEMBERS_PATH
        logger.info(f"Loading members from: {filepath}")
        if not os.path.exists(filepath):
            msg = f"Member file '{filepath}' does not exist."
            logger.error(msg)
            raise FileNotFoundError(msg)

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.exception(f"Failed to decode member file: {e}")
            raise RecordFormatError(f"File '{filepath}' is not valid JSON: {e}") from e

        records = MemberIO.parse_members(data)
        logger.info(f"Loaded {len(records)} members from: {filepath}")
        return records


# Module level shortcuts
load_members = MemberIO.load_members
parse_members = MemberIO.parse_members
