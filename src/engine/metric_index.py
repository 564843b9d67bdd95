from typing import Dict, Iterable, Iterator, List, Optional, Union

from pydantic import ValidationError

from models.entities import Metric
from utils.logger import get_logger

logger = get_logger("engine.index")

MetricRecord = Union[Metric, dict]


class MetricIndex:
    """Id -> Metric lookup over one snapshot of metrics.

    Insertion order is kept, so iteration follows the order the caller
    supplied the metrics in.
    """

    def __init__(self, metrics: Optional[Dict[str, Metric]] = None):
        self._metrics: Dict[str, Metric] = dict(metrics or {})

    def get(self, metric_id: Optional[str]) -> Optional[Metric]:
        if not metric_id:
            return None
        return self._metrics.get(metric_id)

    def ids(self) -> List[str]:
        return list(self._metrics)

    def referencing_children(self, metric_id: str) -> List[Metric]:
        """Metrics whose ``parent_metric_id`` names ``metric_id``."""
        return [m for m in self._metrics.values() if m.parent_metric_id == metric_id]

    def __contains__(self, metric_id) -> bool:
        return metric_id in self._metrics

    def __len__(self) -> int:
        return len(self._metrics)

    def __iter__(self) -> Iterator[Metric]:
        return iter(self._metrics.values())

    def __repr__(self) -> str:
        return f"MetricIndex({len(self)} metrics)"


def build_index(metrics: Iterable[MetricRecord]) -> MetricIndex:
    """Index metrics by id; raw dict records are validated into ``Metric``.

    Duplicate ids are resolved last-write-wins. Records that cannot be read
    as a metric at all (no id) are skipped with a warning.
    """
    lookup: Dict[str, Metric] = {}
    for record in metrics or []:
        try:
            metric = record if isinstance(record, Metric) else Metric.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Skipping unreadable metric record {record!r}: {e.error_count()} error(s)")
            continue
        if metric.id in lookup:
            logger.warning(f"Duplicate metric id '{metric.id}'; keeping the last record")
        lookup[metric.id] = metric
    return MetricIndex(lookup)
