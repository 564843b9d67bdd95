"""
Structural checks over a metric snapshot.

Nothing here raises on bad data: every problem comes back as a
``MetricIssue`` for the UI to surface.
"""

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Set

from pydantic import BaseModel

from engine.hierarchy import is_unlinked
from engine.metric_index import MetricIndex
from models.entities import Metric, VALID_PARENT_TYPES


class IssueKind(str, Enum):
    UNLINKED = "unlinked"
    DANGLING_PARENT_METRIC = "dangling_parent_metric"
    DANGLING_CHILD_METRIC = "dangling_child_metric"
    DANGLING_PARENT_ITEM = "dangling_parent_item"
    EDGE_MISMATCH = "edge_mismatch"
    CYCLE = "cycle"


class MetricIssue(BaseModel):
    kind: IssueKind
    metric_id: str
    detail: str = ""


def unlinked_metrics(index: MetricIndex) -> List[Metric]:
    return [m for m in index if is_unlinked(m)]


def _on_parent_loop(metric: Metric, index: MetricIndex) -> bool:
    seen: Set[str] = set()
    current = metric
    while current.parent_metric_id:
        if current.parent_metric_id == metric.id:
            return True
        if current.parent_metric_id in seen:
            return False
        seen.add(current.parent_metric_id)
        current = index.get(current.parent_metric_id)
        if current is None:
            return False
    return False


def _on_child_loop(metric: Metric, index: MetricIndex) -> bool:
    seen: Set[str] = set()
    stack = list(metric.child_metrics or [])
    while stack:
        child_id = stack.pop()
        if child_id == metric.id:
            return True
        if child_id in seen:
            continue
        seen.add(child_id)
        child = index.get(child_id)
        if child is not None:
            stack.extend(child.child_metrics or [])
    return False


def _edge_mismatches(index: MetricIndex) -> List[MetricIssue]:
    issues = []
    for parent in index:
        declared = parent.child_metrics or []
        for child_id in declared:
            child = index.get(child_id)
            if child is not None and child.parent_metric_id and child.parent_metric_id != parent.id:
                issues.append(MetricIssue(
                    kind=IssueKind.EDGE_MISMATCH,
                    metric_id=child.id,
                    detail=f"listed by '{parent.id}' but parent_metric_id is '{child.parent_metric_id}'",
                ))
        for child in index.referencing_children(parent.id):
            if child.id not in declared:
                issues.append(MetricIssue(
                    kind=IssueKind.EDGE_MISMATCH,
                    metric_id=child.id,
                    detail=f"points at '{parent.id}' which does not list it in child_metrics",
                ))
    return issues


def find_issues(
    index: MetricIndex,
    business_items: Optional[Mapping[str, Iterable[str]]] = None,
) -> List[MetricIssue]:
    """Every structural problem in the snapshot.

    ``business_items`` maps a parent type ("objective", "outcome", "bet") to
    the ids that exist; when given, owners that don't resolve are reported.
    A dangling ``parent_metric_id`` is reported as a broken link, not as
    unlinked.
    """
    known_items: Dict[str, Set[str]] = {
        kind: set(ids) for kind, ids in (business_items or {}).items()
    }
    issues: List[MetricIssue] = []

    for metric in index:
        if is_unlinked(metric):
            issues.append(MetricIssue(
                kind=IssueKind.UNLINKED,
                metric_id=metric.id,
                detail="not linked to a parent metric or a business item",
            ))
        if metric.parent_metric_id and metric.parent_metric_id not in index:
            issues.append(MetricIssue(
                kind=IssueKind.DANGLING_PARENT_METRIC,
                metric_id=metric.id,
                detail=f"parent metric '{metric.parent_metric_id}' does not exist",
            ))
        for child_id in metric.child_metrics or []:
            if child_id not in index:
                issues.append(MetricIssue(
                    kind=IssueKind.DANGLING_CHILD_METRIC,
                    metric_id=metric.id,
                    detail=f"child metric '{child_id}' does not exist",
                ))
        if (
            business_items is not None
            and metric.parent_id
            and metric.parent_type in VALID_PARENT_TYPES
            and metric.parent_id not in known_items.get(metric.parent_type, set())
        ):
            issues.append(MetricIssue(
                kind=IssueKind.DANGLING_PARENT_ITEM,
                metric_id=metric.id,
                detail=f"{metric.parent_type} '{metric.parent_id}' does not exist",
            ))
        if _on_parent_loop(metric, index) or _on_child_loop(metric, index):
            issues.append(MetricIssue(
                kind=IssueKind.CYCLE,
                metric_id=metric.id,
                detail="metric is part of a hierarchy loop",
            ))

    issues.extend(_edge_mismatches(index))
    return issues
