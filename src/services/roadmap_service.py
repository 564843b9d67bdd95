from typing import Dict, List, Optional

from pydantic import BaseModel

from config.settings import settings
from data.example_roadmap import ExampleRoadmapStore
from db.roadmap_store import RoadmapStore, StoreError
from models.entities import Bet, Metric, Objective, Outcome, Team
from utils.logger import logger


class BetWithMetrics(Bet):
    metrics: List[Metric] = []


class ObjectiveSummary(BaseModel):
    id: str
    title: str


class OutcomeDetail(Outcome):
    objective: Optional[ObjectiveSummary] = None
    metrics: List[Metric] = []
    bets: List[BetWithMetrics] = []


class RoadmapSnapshot(BaseModel):
    teams: List[Team] = []
    objectives: List[Objective] = []
    outcomes: List[Outcome] = []
    bets: List[Bet] = []
    metrics: List[Metric] = []

    def business_item_ids(self) -> Dict[str, List[str]]:
        return {
            "objective": [o.id for o in self.objectives],
            "outcome": [o.id for o in self.outcomes],
            "bet": [b.id for b in self.bets],
        }


class RoadmapService:
    """Reads and writes roadmap records through a record store.

    The store is anything exposing ``select/insert/update/delete`` by table
    name: the Neo4j-backed ``RoadmapStore`` or the in-memory demo store.
    """

    def __init__(self, store):
        self.store = store

    def get_metrics(self) -> List[Metric]:
        return [Metric.model_validate(row) for row in self.store.select("metrics")]

    def get_metrics_for(self, parent_type: str, parent_id: str) -> List[Metric]:
        rows = self.store.select("metrics", {"parent_type": parent_type, "parent_id": parent_id})
        return [Metric.model_validate(row) for row in rows]

    def get_outcome_with_metrics(self, outcome_id: str) -> Optional[OutcomeDetail]:
        logger.info(f"[get_outcome_with_metrics] Fetching outcome with ID: {outcome_id}")

        rows = self.store.select("outcomes", {"id": outcome_id})
        if not rows:
            logger.error(f"[get_outcome_with_metrics] No outcome found with ID: {outcome_id}")
            return None
        outcome = rows[0]

        objective = None
        if outcome.get("objective_id"):
            objective_rows = self.store.select("objectives", {"id": outcome["objective_id"]})
            if objective_rows:
                objective = ObjectiveSummary(**{k: objective_rows[0][k] for k in ("id", "title")})

        metrics = self.get_metrics_for("outcome", outcome_id)
        logger.info(f"[get_outcome_with_metrics] Fetched {len(metrics)} metrics for outcome")

        bets = []
        for bet in self.store.select("bets", {"outcome_id": outcome_id}):
            try:
                bet_metrics = self.get_metrics_for("bet", bet["id"])
            except StoreError as e:
                # One bet failing shouldn't hide the rest of the outcome
                logger.error(f"[get_outcome_with_metrics] Error fetching metrics for bet {bet['id']}: {e}")
                continue
            bets.append(BetWithMetrics(**bet, metrics=bet_metrics))
        logger.info(f"[get_outcome_with_metrics] Fetched {len(bets)} bets for outcome")

        return OutcomeDetail(**outcome, objective=objective, metrics=metrics, bets=bets)

    def get_outcomes_by_objective_id(self, objective_id: str) -> List[Outcome]:
        rows = self.store.select("outcomes", {"objective_id": objective_id}, order_by="created_at")
        return [Outcome.model_validate(row) for row in rows]

    def get_connected_data(self) -> RoadmapSnapshot:
        snapshot = RoadmapSnapshot(
            teams=[Team.model_validate(r) for r in self.store.select("teams")],
            objectives=[Objective.model_validate(r) for r in self.store.select("objectives", order_by="created_at")],
            outcomes=[Outcome.model_validate(r) for r in self.store.select("outcomes", order_by="created_at")],
            bets=[Bet.model_validate(r) for r in self.store.select("bets", order_by="created_at")],
            metrics=self.get_metrics(),
        )
        logger.info(
            f"Loaded roadmap: {len(snapshot.objectives)} objectives, {len(snapshot.outcomes)} outcomes, "
            f"{len(snapshot.bets)} bets, {len(snapshot.metrics)} metrics"
        )
        return snapshot

    def save_metric(self, metric: Metric) -> Metric:
        return Metric.model_validate(self.store.insert("metrics", metric))

    def delete_metric(self, metric_id: str) -> bool:
        return self.store.delete("metrics", {"id": metric_id}) > 0


def get_roadmap_service(data_source: str = None) -> RoadmapService:
    source = (data_source or settings.DATA_SOURCE).lower()
    if source == "neo4j":
        return RoadmapService(RoadmapStore())
    if source != "example":
        logger.warning(f"Unknown DATA_SOURCE '{source}'; using the example roadmap")
    return RoadmapService(ExampleRoadmapStore())
