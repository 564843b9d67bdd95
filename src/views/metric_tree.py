"""
View model for the metric hierarchy explorer.

Flattens the metric forest into display rows and assembles the detail panel
for a selected metric. Rendering is left to the caller (Streamlit page,
terminal inspector).
"""

from typing import List, Optional, Sequence, Set

from pydantic import BaseModel

from engine.hierarchy import child_metrics_of, is_unlinked, parent_chain, root_metrics
from engine.metric_index import MetricIndex, build_index
from engine.rollup import progress_percentage, rollup_value
from models.entities import Bet, Metric, Objective, Outcome, Team


class ParentItem(BaseModel):
    type: str
    id: str
    title: str
    # Objective of an outcome, or outcome of a bet
    context: Optional[str] = None


class MetricTreeRow(BaseModel):
    metric: Metric
    depth: int
    current: Optional[float] = None
    target: Optional[float] = None
    percentage: int = 0
    band: Optional[str] = None
    unlinked: bool = False
    team: Optional[Team] = None
    parent_item: Optional[ParentItem] = None


class MetricDetails(BaseModel):
    row: MetricTreeRow
    parent_metrics: List[Metric] = []
    child_metrics: List[Metric] = []


def progress_band(percentage: int) -> Optional[str]:
    if percentage <= 0:
        return None
    if percentage < 50:
        return "red"
    if percentage < 80:
        return "yellow"
    return "green"


class MetricTree:
    def __init__(
        self,
        metrics: Sequence[Metric],
        teams: Sequence[Team] = (),
        objectives: Sequence[Objective] = (),
        outcomes: Sequence[Outcome] = (),
        bets: Sequence[Bet] = (),
    ):
        self.index: MetricIndex = build_index(metrics)
        self.teams = {t.id: t for t in teams}
        self.objectives = {o.id: o for o in objectives}
        self.outcomes = {o.id: o for o in outcomes}
        self.bets = {b.id: b for b in bets}

    @classmethod
    def from_snapshot(cls, snapshot) -> "MetricTree":
        return cls(snapshot.metrics, snapshot.teams, snapshot.objectives, snapshot.outcomes, snapshot.bets)

    def parent_item(self, metric: Metric) -> Optional[ParentItem]:
        if not metric.parent_id or not metric.parent_type:
            return None

        if metric.parent_type == "objective":
            item = self.objectives.get(metric.parent_id)
            return ParentItem(type="Objective", id=item.id, title=item.title) if item else None

        if metric.parent_type == "outcome":
            item = self.outcomes.get(metric.parent_id)
            if item is None:
                return None
            objective = self.objectives.get(item.objective_id) if item.objective_id else None
            return ParentItem(
                type="Outcome", id=item.id, title=item.title,
                context=f"Objective: {objective.title}" if objective else None,
            )

        if metric.parent_type == "bet":
            item = self.bets.get(metric.parent_id)
            if item is None:
                return None
            outcome = self.outcomes.get(item.outcome_id)
            return ParentItem(
                type="Bet", id=item.id, title=item.title,
                context=f"Outcome: {outcome.title}" if outcome else None,
            )

        return None

    def row(self, metric: Metric, depth: int = 0) -> MetricTreeRow:
        percentage = progress_percentage(metric.id, self.index)
        return MetricTreeRow(
            metric=metric,
            depth=depth,
            current=rollup_value(metric.id, self.index, "current"),
            target=rollup_value(metric.id, self.index, "target"),
            percentage=percentage,
            band=progress_band(percentage),
            unlinked=is_unlinked(metric),
            team=self.teams.get(metric.team_id) if metric.team_id else None,
            parent_item=self.parent_item(metric),
        )

    def rows(self) -> List[MetricTreeRow]:
        """Depth-first rows starting from every metric without a parent metric."""
        rows: List[MetricTreeRow] = []
        for root in root_metrics(self.index):
            self._walk(root, 0, {root.id}, rows)
        return rows

    def _walk(self, metric: Metric, depth: int, path: Set[str], rows: List[MetricTreeRow]) -> None:
        rows.append(self.row(metric, depth))
        for child_id in metric.child_metrics or []:
            child = self.index.get(child_id)
            if child is None or child.id in path:
                continue
            self._walk(child, depth + 1, path | {child.id}, rows)

    def details(self, metric_id: str) -> Optional[MetricDetails]:
        metric = self.index.get(metric_id)
        if metric is None:
            return None
        return MetricDetails(
            row=self.row(metric),
            parent_metrics=parent_chain(metric.id, self.index),
            child_metrics=child_metrics_of(metric.id, self.index),
        )


def build_metric_tree(snapshot) -> List[MetricTreeRow]:
    return MetricTree.from_snapshot(snapshot).rows()


def metric_details(metric_id: str, snapshot) -> Optional[MetricDetails]:
    return MetricTree.from_snapshot(snapshot).details(metric_id)
