from typing import Iterable, List, Optional, Set

from engine.metric_index import MetricIndex
from models.entities import Metric, VALID_PARENT_TYPES

DIRECTIONS = ("up", "down", "both")


def is_unlinked(metric: Metric) -> bool:
    """No parent metric and no valid owning business item."""
    if metric.parent_metric_id:
        return False
    has_parent_item = bool(metric.parent_id)
    has_valid_type = metric.parent_type in VALID_PARENT_TYPES
    return not (has_parent_item and has_valid_type)


def _descendants(metric: Metric, index: MetricIndex, visited: Set[str]) -> List[Metric]:
    result = []
    for child_id in metric.child_metrics or []:
        if child_id in visited:
            continue
        child = index.get(child_id)
        if child is None:
            continue
        visited.add(child.id)
        result.append(child)
        result.extend(_descendants(child, index, visited))
    return result


def _ancestors(metric: Metric, index: MetricIndex, visited: Set[str]) -> List[Metric]:
    result = []
    current = metric
    while current.parent_metric_id and current.parent_metric_id not in visited:
        parent = index.get(current.parent_metric_id)
        if parent is None:
            break
        visited.add(parent.id)
        result.append(parent)
        current = parent
    return result


def hierarchy(metric_id: str, index: MetricIndex, direction: str = "both") -> List[Metric]:
    """Metrics related to ``metric_id`` through the metric tree.

    ``down`` is the metric itself followed by a depth-first walk of
    ``child_metrics``; ``up`` is the ``parent_metric_id`` chain, nearest
    first, without the metric itself; ``both`` is self + down + up. One
    visited set is shared by the whole walk, so no id appears twice.
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

    metric = index.get(metric_id)
    if metric is None:
        return []

    visited = {metric.id}
    result: List[Metric] = []
    if direction != "up":
        result.append(metric)
        result.extend(_descendants(metric, index, visited))
    if direction != "down":
        result.extend(_ancestors(metric, index, visited))
    return result


def parent_chain(metric_id: str, index: MetricIndex) -> List[Metric]:
    return hierarchy(metric_id, index, "up")


def root_metrics(index: MetricIndex) -> List[Metric]:
    return [m for m in index if not m.parent_metric_id]


def child_metrics_of(metric_id: str, index: MetricIndex) -> List[Metric]:
    """Children found through their ``parent_metric_id`` back-reference."""
    return index.referencing_children(metric_id)


def reconcile_edges(metrics: Iterable[Metric]) -> List[Metric]:
    """Copies of ``metrics`` with the two hierarchy edges made to agree.

    A parent gains any child that names it through ``parent_metric_id``
    (appended after the declared children); a declared child without a
    ``parent_metric_id`` gets one. A child whose ``parent_metric_id`` already
    names a different metric is left alone.
    """
    copies = [m.model_copy(deep=True) for m in metrics]
    by_id = {m.id: m for m in copies}

    for metric in copies:
        parent: Optional[Metric] = by_id.get(metric.parent_metric_id) if metric.parent_metric_id else None
        if parent is None or parent.id == metric.id:
            continue
        children = parent.child_metrics or []
        if metric.id not in children:
            parent.child_metrics = children + [metric.id]

    for metric in copies:
        for child_id in metric.child_metrics or []:
            child = by_id.get(child_id)
            if child is not None and child.id != metric.id and not child.parent_metric_id:
                child.parent_metric_id = metric.id

    return copies
