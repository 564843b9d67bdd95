"""
Pytest configuration and shared fixtures

Provides metric builders, a demo snapshot and a fake Neo4j client.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


# ===== Metric Fixtures =====


@pytest.fixture
def make_metric():
    """Build a Metric with sensible defaults; override any field by keyword"""
    from models.entities import Metric

    def _make(metric_id, **fields):
        fields.setdefault("name", metric_id.upper())
        return Metric(id=metric_id, **fields)

    return _make


@pytest.fixture
def end_to_end_metrics(make_metric):
    """Parent m1 averaging two children"""
    return [
        make_metric("m1", current_value=5, target_value=10, child_metrics=["m2", "m3"]),
        make_metric("m2", current_value=20, target_value=40, weight=1, parent_metric_id="m1"),
        make_metric("m3", current_value=60, target_value=80, weight=1, parent_metric_id="m1"),
    ]


@pytest.fixture
def example_snapshot():
    """The bundled demo roadmap as a snapshot"""
    from data.example_roadmap import ExampleRoadmapStore
    from services.roadmap_service import RoadmapService

    return RoadmapService(ExampleRoadmapStore()).get_connected_data()


# ===== Neo4j Fixtures =====


class FakeNeo4jClient:
    """Records Cypher calls and answers them from a queue of canned results"""

    def __init__(self, results=None):
        self.calls = []
        self.results = list(results or [])
        self.error = None

    def execute_query(self, query, params=None):
        self.calls.append((query, params or {}))
        if self.error is not None:
            raise self.error
        return self.results.pop(0) if self.results else []

    def close(self):
        pass


@pytest.fixture
def fake_client():
    return FakeNeo4jClient()
