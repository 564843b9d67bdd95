"""Tests for the metric tree view model"""

import pytest

from models.entities import Bet, Objective, Outcome, Team
from views.metric_tree import MetricTree, build_metric_tree, metric_details, progress_band


@pytest.fixture
def tree(example_snapshot):
    return MetricTree.from_snapshot(example_snapshot)


class TestRows:
    def test_roots_in_order_with_children_nested(self, tree):
        rows = tree.rows()

        assert [(r.metric.id, r.depth) for r in rows[:5]] == [
            ("m-ob1-1", 0),
            ("m-ob1-2", 0),
            ("m-oc1-1", 0),
            ("m-b1-1", 1),
            ("m-b2-1", 1),
        ]
        assert len(rows) == 13

    def test_parent_row_shows_rolled_up_values(self, tree):
        row = next(r for r in tree.rows() if r.metric.id == "m-oc1-1")

        # Tour Completion weighted twice, Email Open Rate once
        assert row.current == pytest.approx(85 / 3)
        assert row.target == pytest.approx(80)
        assert row.percentage == 35
        assert row.band == "red"

    def test_over_target_child_caps_at_100(self, tree):
        row = next(r for r in tree.rows() if r.metric.id == "m-oc2-2")

        assert row.percentage == 100
        assert row.band == "green"

    def test_zero_progress_has_no_band(self, tree):
        row = next(r for r in tree.rows() if r.metric.id == "m-oc3-1")

        assert row.percentage == 0
        assert row.band is None

    def test_build_metric_tree_matches_rows(self, example_snapshot, tree):
        assert [r.metric.id for r in build_metric_tree(example_snapshot)] == [r.metric.id for r in tree.rows()]

    def test_cycle_does_not_recurse_forever(self, make_metric):
        tree = MetricTree([
            make_metric("root", child_metrics=["a"]),
            make_metric("a", parent_metric_id="root", child_metrics=["root", "a"]),
        ])

        assert [(r.metric.id, r.depth) for r in tree.rows()] == [("root", 0), ("a", 1)]

    def test_unlinked_flag(self, make_metric):
        tree = MetricTree([make_metric("orphan", parent_type="objective", parent_id="")])

        assert tree.rows()[0].unlinked is True


class TestParentItem:
    @pytest.fixture
    def items(self):
        return dict(
            teams=[Team(id="t", name="Product", color="bg-blue-500")],
            objectives=[Objective(id="o", title="Grow", team_id="t")],
            outcomes=[Outcome(id="oc", title="Activate", team_id="t", objective_id="o")],
            bets=[Bet(id="b", title="Tour", team_id="t", outcome_id="oc")],
        )

    def test_bet_owner_includes_outcome(self, make_metric, items):
        metric = make_metric("m", parent_type="bet", parent_id="b", team_id="t")
        tree = MetricTree([metric], **items)

        row = tree.rows()[0]
        assert row.parent_item.type == "Bet"
        assert row.parent_item.context == "Outcome: Activate"
        assert row.team.name == "Product"

    def test_outcome_owner_includes_objective(self, make_metric, items):
        tree = MetricTree([make_metric("m", parent_type="outcome", parent_id="oc")], **items)

        assert tree.rows()[0].parent_item.context == "Objective: Grow"

    def test_unknown_owner(self, make_metric, items):
        tree = MetricTree([make_metric("m", parent_type="objective", parent_id="missing")], **items)

        assert tree.rows()[0].parent_item is None

    def test_invalid_parent_type(self, make_metric, items):
        tree = MetricTree([make_metric("m", parent_type="team", parent_id="t")], **items)

        assert tree.rows()[0].parent_item is None


class TestDetails:
    def test_details_for_child(self, tree):
        details = tree.details("m-b1-1")

        assert details.row.metric.name == "Tour Completion"
        assert [m.id for m in details.parent_metrics] == ["m-oc1-1"]
        assert details.child_metrics == []
        assert details.row.parent_item.title == "Implement interactive product tour"

    def test_details_for_parent_lists_back_referencing_children(self, tree):
        details = tree.details("m-oc1-1")

        assert [m.id for m in details.child_metrics] == ["m-b1-1", "m-b2-1"]
        assert details.parent_metrics == []

    def test_unknown_metric(self, tree):
        assert tree.details("ghost") is None
        assert tree.details(None) is None


@pytest.mark.parametrize("percentage,band", [
    (0, None),
    (1, "red"),
    (49, "red"),
    (50, "yellow"),
    (79, "yellow"),
    (80, "green"),
    (100, "green"),
])
def test_progress_band(percentage, band):
    assert progress_band(percentage) == band


def test_metric_details_from_snapshot(example_snapshot):
    details = metric_details("m-oc2-2", example_snapshot)

    assert [m.id for m in details.child_metrics] == ["m-b3-1"]
    assert details.row.team.name == "Engineering"
    assert details.row.parent_item.context == "Objective: Improve User Experience"
