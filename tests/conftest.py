"""
Pytest configuration and fixtures for the member tree engine.

This module provides:
- A session wide QCoreApplication for the Qt based Store
- A record factory
- Small hand-made member lists and their hierarchies
"""

import pytest
from PySide6.QtCore import QCoreApplication

from clubtree.model.hierarchy import build_hierarchy
from clubtree.model.members import MemberRecord


# ============================================================
# QT FIXTURES
# ============================================================

@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Timers and signals need a core application instance."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


# ============================================================
# DATA FIXTURES
# ============================================================

def make_record(member_id, sponsor=None, *, name=None, lord=False, years=(), **kwargs):
    """Build a MemberRecord with sensible defaults for tests."""
    return MemberRecord(
        id=member_id,
        name=name or f"Member {member_id}",
        sponsor_id=sponsor,
        lord=lord,
        years_attended=frozenset(years),
        **kwargs,
    )


@pytest.fixture
def chain_records():
    """A -> B -> C, a single three level chain."""
    return [
        make_record("A", lord=True),
        make_record("B", "A"),
        make_record("C", "B"),
    ]


@pytest.fixture
def club_records():
    """
    Two lords with a few generations below them:

        L1            L2
       /  \\           |
      a1   a2         b1
      |              /  \\
      a11          b11  b12
    """
    return [
        make_record("L1", name="Victor Reyes", lord=True, years=range(2010, 2018)),
        make_record("L2", name="Ali Hassan", lord=True, nickname="Sultan", hometown="Dearborn", years=[2011]),
        make_record("a1", "L1", name="Greg Olsen", years=range(2012, 2017)),
        make_record("a2", "L1", name="Marco Bellini", hometown="Providence", years=[2015, 2016]),
        make_record("b1", "L2", name="Dwayne Carter", nickname="Deuce", years=range(2013, 2019)),
        make_record("a11", "a1", name="Sam Kowalski", years=[2016, 2017, 2018]),
        make_record("b11", "b1", name="Pete Nguyen", years=range(2017, 2022)),
        make_record("b12", "b1", name="Brian O'Malley", years=[2019, 2021]),
    ]


@pytest.fixture
def chain(chain_records):
    return build_hierarchy(chain_records)


@pytest.fixture
def club(club_records):
    return build_hierarchy(club_records)
