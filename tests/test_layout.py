"""
Tests for the variable-size tree layout.
"""

import itertools

import pytest

from clubtree.config import LayoutConfig
from clubtree.controller.expansion import toggle, visible_nodes
from clubtree.controller.layout import LayoutEngine
from clubtree.model.geometry import Point, Size
from clubtree.model.hierarchy import build_hierarchy, SYNTHETIC_ROOT_ID
from clubtree.model.members import MemberKind

from conftest import make_record


@pytest.fixture
def engine():
    return LayoutEngine()


def boxes_overlap(layout):
    for a, b in itertools.combinations(layout.values(), 2):
        if a.box.overlaps(b.box):
            return (a.id, b.id)
    return None


class TestSizing:

    def test_veteran_footprint(self, engine):
        hierarchy = build_hierarchy([
            make_record("L", lord=True),
            make_record("vet", "L", years=range(2000, 2005)),
            make_record("reg", "L", years=range(2000, 2004)),
        ])
        layout = engine.layout(visible_nodes(hierarchy))
        config = engine.config
        assert layout["vet"].kind == MemberKind.VETERAN
        assert (layout["vet"].size.width, layout["vet"].size.height) == (config.veteran.width, config.veteran.height)
        assert layout["reg"].kind == MemberKind.REGULAR
        assert (layout["reg"].size.width, layout["reg"].size.height) == (config.regular.width, config.regular.height)

    def test_lord_footprint_regardless_of_tenure(self, engine):
        hierarchy = build_hierarchy([
            make_record("young", lord=True),
            make_record("old", lord=True, years=range(1990, 2020)),
        ])
        layout = engine.layout(visible_nodes(hierarchy))
        for node_id in ("young", "old"):
            assert layout[node_id].kind == MemberKind.LORD
            assert layout[node_id].size.width == engine.config.lord.width
            assert layout[node_id].size.height == engine.config.lord.height


class TestPositions:

    def test_depth_axis(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        spacing = engine.config.level_spacing
        assert layout["L1"].position.y == 0
        assert layout["a1"].position.y == spacing
        assert layout["a11"].position.y == 2 * spacing

    def test_no_overlap(self, engine, club):
        assert boxes_overlap(engine.layout(visible_nodes(club))) is None

    def test_sibling_gap(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        a1, a2 = layout["a1"], layout["a2"]
        minimum = a1.size.width / 2 + a2.size.width / 2 + engine.config.sibling_gutter
        assert a2.position.x - a1.position.x >= minimum - 1e-9

    def test_lords_never_overlap_small_neighbours(self, engine):
        records = [make_record("L1", lord=True), make_record("L2", lord=True), make_record("L3", lord=True)]
        layout = engine.layout(visible_nodes(build_hierarchy(records)))
        xs = [layout[i].position.x for i in ("L1", "L2", "L3")]
        assert xs == sorted(xs)
        assert xs[1] - xs[0] == pytest.approx(engine.config.lord.width + engine.config.sibling_gutter)
        # top level centred on x = 0
        assert xs[1] == pytest.approx(0.0)

    def test_parent_centred_over_children(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        b11, b12 = layout["b11"].position.x, layout["b12"].position.x
        assert layout["b1"].position.x == pytest.approx((b11 + b12) / 2)

    def test_sibling_order_follows_input(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        assert layout["a1"].position.x < layout["a2"].position.x
        assert layout["L1"].position.x < layout["L2"].position.x

    def test_deep_subtrees_do_not_collide(self, engine):
        records = [
            make_record("L", lord=True),
            make_record("left", "L"),
            make_record("right", "L"),
        ]
        records += [make_record(f"l{i}", "left") for i in range(4)]
        records += [make_record(f"r{i}", "right", lord=True) for i in range(4)]
        layout = engine.layout(visible_nodes(build_hierarchy(records)))
        assert boxes_overlap(layout) is None

    def test_deterministic(self, engine, club):
        first = engine.layout(visible_nodes(club))
        second = engine.layout(visible_nodes(club))
        assert {k: v.placement for k, v in first.items()} == {k: v.placement for k, v in second.items()}

    def test_collapsed_subtree_not_laid_out(self, engine, club):
        toggle(club, "L2")
        layout = engine.layout(visible_nodes(club))
        assert "b1" not in layout
        assert list(layout) == ["L1", "a1", "a11", "a2", "L2"]

    def test_empty(self, engine):
        assert engine.layout([]) == {}

    def test_footprint_is_configured_size(self, engine):
        assert engine.footprint(MemberKind.LORD) == engine.config.lord
        assert engine.footprint(MemberKind.REGULAR) == Size(140.0, 48.0)

    def test_configurable_footprints(self, club):
        config = LayoutConfig(sibling_gutter=50.0)
        layout = LayoutEngine(config).layout(visible_nodes(club))
        a1, a2 = layout["a1"], layout["a2"]
        assert a2.box.left - a1.box.right >= 50.0 - 1e-9


class TestEdges:

    def test_endpoints_on_card_borders(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        edges = {e.target_id: e for e in engine.edges(layout)}
        edge = edges["a1"]
        lord, child = layout["L1"], layout["a1"]
        assert edge.source_id == "L1"
        assert edge.start.y == lord.position.y + lord.size.height / 2
        assert edge.end.y == child.position.y - child.size.height / 2
        assert edge.start.x == lord.position.x
        assert edge.end.x == child.position.x

    def test_control_points_at_mid_height(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        edge = next(e for e in engine.edges(layout) if e.target_id == "b11")
        mid = (edge.start.y + edge.end.y) / 2
        assert edge.control_start.y == mid
        assert edge.control_end.y == mid
        assert edge.to_svg_path().startswith("M ")

    def test_every_card_has_one_incoming_edge(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        targets = [e.target_id for e in engine.edges(layout)]
        assert sorted(targets) == sorted(layout)

    def test_lord_links_hang_from_root_anchor(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        anchor = engine.root_placement.position
        assert anchor == Point(0.0, -engine.config.level_spacing)
        lord_links = {e.target_id: e for e in engine.edges(layout) if e.is_lord_link}
        assert set(lord_links) == {"L1", "L2"}
        for lord_id, edge in lord_links.items():
            assert edge.source_id == SYNTHETIC_ROOT_ID
            assert edge.start == anchor
            assert edge.end == layout[lord_id].placement.top_anchor

    def test_member_edges_are_not_lord_links(self, engine, club):
        layout = engine.layout(visible_nodes(club))
        edge = next(e for e in engine.edges(layout) if e.target_id == "a1")
        assert edge.is_lord_link is False

    def test_root_anchor_not_laid_out(self, engine, club):
        assert SYNTHETIC_ROOT_ID not in engine.layout(visible_nodes(club))
