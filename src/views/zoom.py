from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from engine.rollup import is_complete, round_half_up
from models.entities import Bet, Metric, Outcome


class ZoomLevel(str, Enum):
    EXECUTIVE = "executive"    # objectives
    MANAGEMENT = "management"  # outcomes
    TEAM = "team"              # bets
    METRICS = "metrics"        # cross-cutting explorer


def primary_metric(metrics: Sequence[Metric]) -> Optional[Metric]:
    """First executive-level metric, else the first metric."""
    for metric in metrics:
        if metric.level == "executive":
            return metric
    return metrics[0] if metrics else None


def is_outcome_complete(metrics: Sequence[Metric]) -> bool:
    """Every metric at or above target; an outcome without metrics never is."""
    return bool(metrics) and all(is_complete(m) for m in metrics)


def count_outcomes_by_status(outcome_metrics: Iterable[Sequence[Metric]]) -> Dict[str, int]:
    metric_sets = list(outcome_metrics)
    achieved = sum(1 for metrics in metric_sets if is_outcome_complete(metrics))
    return {
        "total": len(metric_sets),
        "achieved": achieved,
        "in_progress": len(metric_sets) - achieved,
    }


def completion_percentage(achieved: int, total: int) -> int:
    return round_half_up(achieved / total * 100) if total > 0 else 0


def outcome_metrics(
    outcome_id: str,
    outcomes: Sequence[Outcome],
    bets: Sequence[Bet],
    metrics: Sequence[Metric],
) -> List[Metric]:
    """Metrics owned by the outcome plus those of its bets, deduplicated by id."""
    bet_ids = {b.id for b in bets if b.outcome_id == outcome_id}
    if not any(o.id == outcome_id for o in outcomes):
        return []

    seen = set()
    result = []
    direct = [m for m in metrics if m.parent_type == "outcome" and m.parent_id == outcome_id]
    from_bets = [m for m in metrics if m.parent_type == "bet" and m.parent_id in bet_ids]
    for metric in direct + from_bets:
        if metric.id in seen:
            continue
        seen.add(metric.id)
        result.append(metric)
    return result
