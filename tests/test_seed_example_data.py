"""Tests for the example roadmap seeding script"""

from neo4j.exceptions import ServiceUnavailable

from data.example_roadmap import EXAMPLE_TABLES
from db.roadmap_store import RoadmapStore
from seed_example_data import SEED_ORDER, count_existing_records, in_seed_order, seed_example_roadmap


def _merged_ids(fake_client, label):
    prefix = f"MERGE (n:{label} {{id: $id}})"
    return [params["id"] for query, params in fake_client.calls if query.startswith(prefix)]


def test_seeds_every_record(fake_client):
    stored = seed_example_roadmap(RoadmapStore(fake_client))

    assert stored == sum(len(EXAMPLE_TABLES[t]) for t in SEED_ORDER)


def test_child_metrics_stored_after_parents(fake_client):
    seed_example_roadmap(RoadmapStore(fake_client))

    metric_ids = _merged_ids(fake_client, "Metric")
    assert metric_ids.index("m-oc1-1") < metric_ids.index("m-b1-1")
    assert metric_ids[-3:] == ["m-b1-1", "m-b2-1", "m-b3-1"]


def test_teams_stored_before_metrics(fake_client):
    seed_example_roadmap(RoadmapStore(fake_client))

    queries = [q for q, _ in fake_client.calls]
    first_metric = next(i for i, q in enumerate(queries) if q.startswith("MERGE (n:Metric"))
    last_team = max(i for i, q in enumerate(queries) if q.startswith("MERGE (n:Team"))
    assert last_team < first_metric


def test_failures_are_counted_not_raised(fake_client):
    fake_client.error = ServiceUnavailable("connection refused")

    assert seed_example_roadmap(RoadmapStore(fake_client)) == 0


def test_count_existing_records(fake_client):
    fake_client.results = [[{"record": {"id": "team-1", "name": "Product"}}]]

    counts = count_existing_records(RoadmapStore(fake_client))

    assert counts == {"teams": 1, "objectives": 0, "outcomes": 0, "bets": 0, "metrics": 0}


def test_grandchild_listed_first_is_stored_last(fake_client):
    metrics = [
        {"id": "grandchild", "name": "G", "parent_metric_id": "child"},
        {"id": "child", "name": "C", "parent_metric_id": "root"},
        {"id": "root", "name": "R"},
    ]

    seed_example_roadmap(RoadmapStore(fake_client), {"metrics": metrics})

    assert _merged_ids(fake_client, "Metric") == ["root", "child", "grandchild"]


def test_seed_order_survives_parent_loop():
    records = [
        {"id": "a", "parent_metric_id": "b"},
        {"id": "b", "parent_metric_id": "a"},
        {"id": "c"},
    ]

    assert [r["id"] for r in in_seed_order(records)] == ["c", "a", "b"]
