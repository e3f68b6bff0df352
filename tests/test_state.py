"""
Tests for the Qt session store: passes, deferred fit, signals.
"""

import pytest

from clubtree.app.state import Store, Highlight
from clubtree.config import SessionConfig
from clubtree.controller.reconciler import ReconciliationResult
from clubtree.controller.search import MatchState
from clubtree.model.errors import DanglingReferenceError, CycleError
from clubtree.model.members import MemberDetails

from conftest import make_record


@pytest.fixture
def store(club_records):
    store = Store.from_records(club_records)
    store.refresh()
    return store


def record_signal(signal):
    received = []
    signal.connect(lambda value: received.append(value))
    return received


# ============================================================
# CONSTRUCTION
# ============================================================

class TestConstruction:

    def test_from_records(self, club_records):
        store = Store.from_records(club_records)
        assert len(store.hierarchy) == len(club_records)
        assert store.layout == {}
        assert store.fit_pending is False

    def test_data_errors_propagate(self):
        with pytest.raises(DanglingReferenceError):
            Store.from_records([make_record("a", lord=True), make_record("b", "ghost")])
        with pytest.raises(CycleError):
            Store.from_records([make_record("a", "b"), make_record("b", "a")])

    def test_from_bundled_file(self):
        store = Store.from_file()
        result = store.refresh()
        assert len(result.entering) == 12

    def test_fit_delay_follows_transition(self):
        config = SessionConfig(transition_ms=250, fit_margin_ms=50)
        assert config.fit_delay_ms == 300


# ============================================================
# PASSES
# ============================================================

class TestPasses:

    def test_refresh_emits_and_commits(self, club_records):
        store = Store.from_records(club_records)
        frames = record_signal(store.frame_changed)
        result = store.refresh()
        assert frames == [result]
        assert isinstance(result, ReconciliationResult)
        assert store.positions.ids() == list(result.layout)

    def test_first_refresh_fits(self, club_records):
        store = Store.from_records(club_records)
        transforms = record_signal(store.transform_changed)
        store.refresh()
        assert len(transforms) == 1
        assert store.viewport.user_override is False
        # lord links start above the lords and must be on screen as well
        top = transforms[0].apply(store.layout_engine.root_placement.position)
        assert top.y >= store.config.viewport.padding - 1e-6

    def test_later_refresh_keeps_camera(self, store):
        transforms = record_signal(store.transform_changed)
        store.refresh()
        assert transforms == []

    def test_toggle_runs_pass_and_defers_fit(self, store):
        transforms = record_signal(store.transform_changed)
        result = store.toggle("b1")
        assert result.exiting_ids == ("b11", "b12")
        assert "b11" not in store.layout
        assert store.fit_pending is True
        assert transforms == []

        store.settle()
        assert store.fit_pending is False
        assert len(transforms) == 1

    def test_toggle_leaf_is_noop(self, store):
        frames = record_signal(store.frame_changed)
        assert store.toggle("a11") is None
        assert frames == []
        assert store.fit_pending is False

    def test_expand_all_when_expanded_is_noop(self, store):
        assert store.expand_all() is None

    def test_collapse_then_expand_all(self, store):
        collapsed = store.collapse_all()
        assert set(collapsed.exiting_ids) == {"a1", "a11", "a2", "b1", "b11", "b12"}
        expanded = store.expand_all()
        assert set(expanded.entering_ids) == set(collapsed.exiting_ids)

    def test_rapid_toggles_restart_fit(self, store):
        store.toggle("b1")
        store.toggle("b1")
        assert store.fit_pending is True
        assert "b11" in store.layout


# ============================================================
# CAMERA
# ============================================================

class TestCamera:

    def test_resize_fits_immediately(self, store):
        transforms = record_signal(store.transform_changed)
        transform = store.resize(400, 300)
        assert transforms == [transform]
        assert transform.scale < 1.0

    def test_zoom_emits(self, store):
        transforms = record_signal(store.transform_changed)
        before = store.transform.scale
        store.zoom_in()
        assert transforms[-1].scale == pytest.approx(before * 1.3)
        assert store.viewport.user_override is True

    def test_fit_with_nothing_shown(self, club_records):
        store = Store.from_records(club_records)
        transforms = record_signal(store.transform_changed)
        store.fit_to_view()
        assert transforms == []


# ============================================================
# OVERLAY & DETAILS
# ============================================================

class TestOverlay:

    def test_search_emits_highlight(self, store):
        highlights = record_signal(store.highlight_changed)
        highlight = store.search("ali")
        assert highlights == [highlight]
        assert isinstance(highlight, Highlight)
        assert highlight.by_query["L2"] is MatchState.MATCH
        assert highlight.by_query["L1"] is MatchState.DIMMED

    def test_year_filter_kept_apart_from_search(self, store):
        store.search("deuce")
        highlight = store.filter_year(2019)
        assert highlight.query == "deuce"
        assert highlight.by_query["b1"] is MatchState.MATCH
        assert highlight.by_year["b12"] is MatchState.MATCH
        assert highlight.by_year["L1"] is MatchState.DIMMED

    def test_search_covers_entering_cards(self, store):
        store.toggle("b1")
        store.search("pete")
        highlights = record_signal(store.highlight_changed)
        store.toggle("b1")
        assert highlights[-1].by_query["b11"] is MatchState.MATCH

    def test_select_emits_details(self, store):
        selected = record_signal(store.member_selected)
        details = store.select("a1")
        assert selected == [details]
        assert isinstance(details, MemberDetails)
        assert details.annotation.sponsor_name == "Victor Reyes"

    def test_select_unknown(self, store):
        with pytest.raises(KeyError):
            store.select("nobody")
