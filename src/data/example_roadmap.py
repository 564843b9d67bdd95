"""
Bundled demo roadmap, usable without a database.

``ExampleRoadmapStore`` serves these records through the same
select/insert/update/delete calls as ``db.roadmap_store.RoadmapStore``.
"""

import copy
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from db.roadmap_store import StoreError
from models.entities import LEVEL_BY_PARENT_TYPE
from utils.logger import logger

EXAMPLE_TIMESTAMP = "2025-06-28T00:00:00Z"

TEAMS = [
    {"id": "team-1", "name": "Product", "color": "bg-blue-500"},
    {"id": "team-2", "name": "Engineering", "color": "bg-green-500"},
    {"id": "team-3", "name": "Design", "color": "bg-purple-500"},
    {"id": "team-4", "name": "Marketing", "color": "bg-yellow-500"},
]

OBJECTIVES = [
    {
        "id": "objective-1",
        "title": "Improve User Experience",
        "description": "Deliver a seamless and intuitive product experience",
        "executive_summary": "Enhancing overall user satisfaction and engagement",
        "team_id": "team-1",
        "is_public": True,
        "created_at": "2025-05-01T00:00:00Z",
    },
    {
        "id": "objective-2",
        "title": "Expand Market Reach",
        "description": "Grow our presence in international markets",
        "executive_summary": "Strategic expansion to new geographical markets",
        "team_id": "team-1",
        "is_public": True,
        "created_at": "2025-05-05T00:00:00Z",
    },
    {
        "id": "objective-3",
        "title": "Increase Operational Efficiency",
        "description": "Streamline internal processes and reduce costs",
        "executive_summary": "Improving development velocity and reducing overhead",
        "team_id": "team-2",
        "is_public": False,
        "created_at": "2025-05-10T00:00:00Z",
    },
]

OUTCOMES = [
    {
        "id": "outcome-1",
        "title": "Enhance User Onboarding",
        "description": "Improve new user activation and retention",
        "management_summary": "Focusing on first-time user experience and engagement",
        "objective_id": "objective-1",
        "team_id": "team-1",
        "status": "now",
        "created_at": "2025-05-15T00:00:00Z",
    },
    {
        "id": "outcome-2",
        "title": "Improve Core Performance",
        "description": "Enhance application speed and reliability",
        "management_summary": "Technical improvements for better user experience",
        "objective_id": "objective-1",
        "team_id": "team-2",
        "status": "now",
        "created_at": "2025-05-15T00:00:00Z",
    },
    {
        "id": "outcome-3",
        "title": "Launch in EMEA Region",
        "description": "Expand product availability to European markets",
        "management_summary": "International expansion to EMEA region",
        "objective_id": "objective-2",
        "team_id": "team-1",
        "status": "next",
        "created_at": "2025-05-20T00:00:00Z",
    },
    {
        "id": "outcome-4",
        "title": "Implement CI/CD Pipeline",
        "description": "Automate build, test, and deployment processes",
        "management_summary": "Streamline development workflow",
        "objective_id": "objective-3",
        "team_id": "team-2",
        "status": "next",
        "is_public": False,
        "created_at": "2025-05-25T00:00:00Z",
    },
]

BETS = [
    {
        "id": "bet-1",
        "title": "Implement interactive product tour",
        "description": "Create a step-by-step interactive guide for new users",
        "team_summary": "Engineering and Design collaboration required",
        "outcome_id": "outcome-1",
        "team_id": "team-2",
        "status": "now",
        "created_at": "2025-06-01T00:00:00Z",
    },
    {
        "id": "bet-2",
        "title": "Redesign welcome email sequence",
        "description": "Improve email engagement with personalized content",
        "team_summary": "Marketing lead with Product support",
        "outcome_id": "outcome-1",
        "team_id": "team-4",
        "status": "next",
        "created_at": "2025-06-15T00:00:00Z",
    },
    {
        "id": "bet-3",
        "title": "Optimize database queries",
        "description": "Identify and optimize slow database queries",
        "team_summary": "Backend engineering focus",
        "outcome_id": "outcome-2",
        "team_id": "team-2",
        "status": "now",
        "created_at": "2025-06-01T00:00:00Z",
    },
    {
        "id": "bet-4",
        "title": "Localize product for European markets",
        "description": "Translate UI and content for EMEA region",
        "team_summary": "Localization and internationalization effort",
        "outcome_id": "outcome-3",
        "team_id": "team-1",
        "status": "next",
        "created_at": "2025-06-20T00:00:00Z",
    },
]


def _parse_number(text: str) -> Optional[float]:
    digits = re.sub(r"[^0-9.]", "", text)
    try:
        return float(digits)
    except ValueError:
        return None


def infer_unit(name: str) -> str:
    if "Time" in name:
        return "ms"
    if "Rate" in name or "CSAT" in name:
        return "%"
    return ""


def create_metric(
    metric_id: str,
    name: str,
    current: str,
    target: str,
    parent_id: str,
    parent_type: str,
    team_id: str,
    **extra: Any,
) -> Dict[str, Any]:
    """Metric record owned by a business item; level follows the owner's tier."""
    record = {
        "id": metric_id,
        "name": name,
        "description": f"Target {target} for {name}",
        "current_value": _parse_number(current),
        "target_value": _parse_number(target),
        "unit": infer_unit(name),
        "level": LEVEL_BY_PARENT_TYPE.get(parent_type),
        "parent_type": parent_type,
        "parent_id": parent_id,
        "team_id": team_id,
        "created_at": EXAMPLE_TIMESTAMP,
        "updated_at": EXAMPLE_TIMESTAMP,
    }
    record.update(extra)
    return record


METRICS = [
    # Objective 1
    create_metric("m-ob1-1", "NPS", "42", "50", "objective-1", "objective", "team-1",
                  metric_type="business", timeframe="lagging", is_north_star=True),
    create_metric("m-ob1-2", "CSAT", "85", "90", "objective-1", "objective", "team-1",
                  metric_type="business", timeframe="lagging"),
    # Outcome 1
    create_metric("m-oc1-1", "Activation Rate", "65", "75", "outcome-1", "outcome", "team-1",
                  metric_type="product", timeframe="leading", child_metrics=["m-b1-1", "m-b2-1"]),
    create_metric("m-oc1-2", "Day 7 Retention", "35", "40", "outcome-1", "outcome", "team-1",
                  metric_type="product", timeframe="lagging"),
    # Outcome 2
    create_metric("m-oc2-1", "Page Load Time", "1200", "1000", "outcome-2", "outcome", "team-2",
                  metric_type="product"),
    create_metric("m-oc2-2", "API Response Time", "450", "300", "outcome-2", "outcome", "team-2",
                  metric_type="product", child_metrics=["m-b3-1"]),
    # Outcome 3
    create_metric("m-oc3-1", "EMEA Signups", "0", "500", "outcome-3", "outcome", "team-1",
                  metric_type="business"),
    # Outcome 4
    create_metric("m-oc4-1", "Deployment Frequency", "30", "50", "outcome-4", "outcome", "team-2"),
    create_metric("m-oc4-2", "Build Time", "15", "5", "outcome-4", "outcome", "team-2"),
    # Bets
    create_metric("m-b1-1", "Tour Completion", "30", "100", "bet-1", "bet", "team-2",
                  parent_metric_id="m-oc1-1", contribution_type="weighted", weight=2, status="in_progress"),
    create_metric("m-b2-1", "Email Open Rate", "25", "40", "bet-2", "bet", "team-4",
                  parent_metric_id="m-oc1-1", contribution_type="direct", status="todo"),
    create_metric("m-b3-1", "Query Response Time", "350", "200", "bet-3", "bet", "team-2",
                  parent_metric_id="m-oc2-2", contribution_type="direct", status="in_progress"),
    create_metric("m-b4-1", "Localization Coverage", "0", "95", "bet-4", "bet", "team-1",
                  status="todo"),
]

EXAMPLE_TABLES = {
    "teams": TEAMS,
    "objectives": OBJECTIVES,
    "outcomes": OUTCOMES,
    "bets": BETS,
    "metrics": METRICS,
}


class ExampleRoadmapStore:
    """In-memory record store seeded with a private copy of the demo tables."""

    def __init__(self, tables: Dict[str, List[dict]] = None):
        self.tables: Dict[str, List[dict]] = copy.deepcopy(tables if tables is not None else EXAMPLE_TABLES)

    def _rows(self, table: str) -> List[dict]:
        if table not in self.tables:
            raise StoreError(f"Unknown table: {table}")
        return self.tables[table]

    def select(self, table: str, filters: Dict[str, Any] = None, order_by: str = None) -> List[dict]:
        rows = [
            copy.deepcopy(row) for row in self._rows(table)
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda row: (row.get(order_by) is None, row.get(order_by) or ""))
        return rows

    def insert(self, table: str, record) -> dict:
        if isinstance(record, BaseModel):
            record = record.model_dump()
        record = {k: v for k, v in record.items() if v is not None}
        rows = self._rows(table)
        rows[:] = [row for row in rows if row.get("id") != record.get("id")]
        rows.append(copy.deepcopy(record))
        logger.debug(f"Inserted {table} record '{record.get('id')}' into example store")
        return copy.deepcopy(record)

    def update(self, table: str, record_id: str, changes) -> Optional[dict]:
        if isinstance(changes, BaseModel):
            changes = changes.model_dump(exclude_unset=True)
        for row in self._rows(table):
            if row.get("id") == record_id:
                for key, value in changes.items():
                    if key == "id":
                        continue
                    if value is None:
                        row.pop(key, None)
                    else:
                        row[key] = copy.deepcopy(value)
                return copy.deepcopy(row)
        logger.warning(f"No {table} record with id '{record_id}' to update")
        return None

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            raise StoreError(f"Refusing to delete from {table} without a filter")
        rows = self._rows(table)
        kept = [row for row in rows if not all(row.get(k) == v for k, v in filters.items())]
        deleted = len(rows) - len(kept)
        rows[:] = kept
        return deleted
