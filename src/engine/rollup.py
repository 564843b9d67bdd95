"""
Roll-up of child metric values into parent values.

A parent's value is the weighted arithmetic mean of the values of the
children listed in its ``child_metrics``. By default each child contributes
its own recorded value (one level deep); ``recursive=True`` makes children
contribute their own rolled-up value instead.

Every path is total: unknown ids, dangling children, missing values and
cyclic edges degrade to "no contribution" or ``None``.
"""

import math
from typing import Optional, Set

from pydantic import BaseModel

from engine.metric_index import MetricIndex
from models.entities import Metric
from utils.logger import get_logger

logger = get_logger("engine.rollup")

VALUE_FIELDS = ("current", "target")


class MetricProgress(BaseModel):
    current: float
    target: float
    percentage: int


def contribution_weight(metric: Metric) -> float:
    """Weight a child carries in its parent's mean.

    Only ``weighted`` children use their recorded weight; ``direct``,
    ``formula`` and untagged children count once, even when a weight is
    recorded on them. An untagged child with weight 3 therefore does not
    outweigh a sibling with weight 1.
    """
    if metric.contribution_type == "weighted" and metric.weight is not None:
        return metric.weight
    return 1.0


def rollup_value(
    metric_id: str,
    index: MetricIndex,
    field: str = "current",
    recursive: bool = False,
    _path: Optional[Set[str]] = None,
) -> Optional[float]:
    if field not in VALUE_FIELDS:
        raise ValueError(f"field must be one of {VALUE_FIELDS}, got {field!r}")

    metric = index.get(metric_id)
    if metric is None:
        return None

    if not metric.child_metrics:
        return metric.field_value(field)

    path = set(_path or ())
    path.add(metric.id)

    weighted_sum = 0.0
    total_weight = 0.0
    contributors = 0
    for child_id in metric.child_metrics:
        if child_id in path:
            logger.debug(f"Cycle: {metric.id} -> {child_id} skipped")
            continue
        child = index.get(child_id)
        if child is None:
            logger.debug(f"Dangling child '{child_id}' of '{metric.id}' skipped")
            continue

        if recursive:
            value = rollup_value(child.id, index, field, recursive=True, _path=path)
        else:
            value = child.field_value(field)
        if value is None:
            continue

        weight = contribution_weight(child)
        weighted_sum += value * weight
        total_weight += weight
        contributors += 1

    if contributors == 0 or total_weight <= 0:
        return None
    return weighted_sum / total_weight


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def progress(metric_id: str, index: MetricIndex, recursive: bool = False) -> Optional[MetricProgress]:
    """Rolled-up current vs. target, with a percentage clamped to 0..100."""
    current = rollup_value(metric_id, index, "current", recursive=recursive)
    target = rollup_value(metric_id, index, "target", recursive=recursive)

    if current is None or target is None or target == 0:
        return None

    percentage = min(100, round_half_up(current / target * 100))
    return MetricProgress(current=current, target=target, percentage=max(0, percentage))


def progress_percentage(metric_id: str, index: MetricIndex) -> int:
    """Display percentage; 0 wherever progress can't be computed."""
    result = progress(metric_id, index)
    return result.percentage if result else 0


def is_complete(metric: Metric) -> bool:
    if metric.current_value is None or metric.target_value is None:
        return False
    return metric.current_value >= metric.target_value
