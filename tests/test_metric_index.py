"""Tests for building the metric lookup"""

from engine.metric_index import MetricIndex, build_index
from models.entities import Metric


def test_empty_input_gives_empty_index():
    index = build_index([])

    assert len(index) == 0
    assert index.get("anything") is None


def test_lookup_by_id(make_metric):
    metric = make_metric("m-1", current_value=1)
    index = build_index([metric])

    assert index.get("m-1") is metric
    assert "m-1" in index
    assert "m-2" not in index


def test_raw_records_are_validated():
    index = build_index([{"id": "m-1", "name": "NPS", "current_value": "42", "isNorthStar": True}])

    metric = index.get("m-1")
    assert isinstance(metric, Metric)
    assert metric.current_value == 42.0
    assert metric.is_north_star is True


def test_duplicate_ids_last_write_wins(make_metric):
    index = build_index([
        make_metric("dup", current_value=1),
        make_metric("dup", current_value=2),
    ])

    assert len(index) == 1
    assert index.get("dup").current_value == 2


def test_iteration_keeps_input_order(make_metric):
    index = build_index([make_metric("c"), make_metric("a"), make_metric("b")])

    assert [m.id for m in index] == ["c", "a", "b"]
    assert index.ids() == ["c", "a", "b"]


def test_empty_id_lookup_is_none():
    assert MetricIndex().get("") is None
    assert MetricIndex().get(None) is None


def test_referencing_children(make_metric):
    index = build_index([
        make_metric("p"),
        make_metric("c1", parent_metric_id="p"),
        make_metric("c2", parent_metric_id="other"),
    ])

    assert [m.id for m in index.referencing_children("p")] == ["c1"]


class TestMalformedRecords:
    def test_unknown_level_loads_without_level(self):
        index = build_index([{"id": "m", "name": "M", "level": "objectives", "current_value": 1}])

        assert index.get("m").level is None
        assert index.get("m").current_value == 1

    def test_missing_name_defaults_to_empty(self):
        index = build_index([{"id": "m1", "current_value": 5, "target_value": 10}])

        assert index.get("m1").name == ""

    def test_negative_weight_dropped(self):
        index = build_index([{"id": "m", "name": "M", "weight": -1}])

        assert index.get("m").weight is None

    def test_unknown_vocabulary_values_dropped(self):
        index = build_index([{
            "id": "m", "name": "M", "metricType": "financial", "timeframe": "weekly",
            "status": "later", "contribution_type": "average", "target_value": "n/a",
        }])

        metric = index.get("m")
        assert metric.metric_type is None
        assert metric.timeframe is None
        assert metric.status is None
        assert metric.contribution_type is None
        assert metric.target_value is None

    def test_record_without_id_skipped(self):
        index = build_index([{"name": "No id"}, {"id": "m", "name": "M"}])

        assert index.ids() == ["m"]
