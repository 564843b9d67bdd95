"""
Record-style CRUD over the roadmap graph.

Each table maps to a node label keyed by an ``id`` property. Metric links
are mirrored as relationships so the graph can be browsed directly:

    (:Objective|Outcome|Bet)-[:MEASURED_BY]->(:Metric)
    (:Metric)-[:CASCADED_TO]->(:Metric)
    (:Objective)-[:HAS_OUTCOME]->(:Outcome)-[:HAS_BET]->(:Bet)
"""

import re
from typing import Any, Dict, List, Optional, Tuple, Union

from neo4j.exceptions import DriverError, Neo4jError
from pydantic import BaseModel

from db.neo4j_client import Neo4jClient, neo4j_client
from models.entities import VALID_PARENT_TYPES
from utils.logger import logger

TABLE_LABELS = {
    "teams": "Team",
    "objectives": "Objective",
    "outcomes": "Outcome",
    "bets": "Bet",
    "metrics": "Metric",
}

PARENT_LABELS = {
    "objective": "Objective",
    "outcome": "Outcome",
    "bet": "Bet",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

RecordInput = Union[BaseModel, Dict[str, Any]]


class StoreError(Exception):
    """A record store operation failed."""


def _label(table: str) -> str:
    try:
        return TABLE_LABELS[table]
    except KeyError:
        raise StoreError(f"Unknown table: {table}") from None


def _property(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise StoreError(f"Invalid property name: {name!r}")
    return name


def _as_properties(record: RecordInput) -> Dict[str, Any]:
    if isinstance(record, BaseModel):
        record = record.model_dump()
    return {k: v for k, v in record.items() if v is not None}


def _where_clause(filters: Optional[Dict[str, Any]]) -> Tuple[str, Dict[str, Any]]:
    if not filters:
        return "", {}
    conditions = []
    params = {}
    for i, (key, value) in enumerate(filters.items()):
        conditions.append(f"n.{_property(key)} = $f{i}")
        params[f"f{i}"] = value
    return "WHERE " + " AND ".join(conditions), params


class RoadmapStore:
    def __init__(self, client: Neo4jClient = None):
        self.client = client or neo4j_client

    def _run(self, query: str, params: dict, context: str) -> List[dict]:
        try:
            return self.client.execute_query(query, params)
        except (Neo4jError, DriverError) as e:
            logger.error(f"Neo4j error in {context}: {e}")
            raise StoreError(f"Error in {context}: {e}") from e

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
    ) -> List[dict]:
        label = _label(table)
        where, params = _where_clause(filters)
        query = f"MATCH (n:{label}) {where} RETURN properties(n) AS record"
        if order_by:
            query += f" ORDER BY n.{_property(order_by)}"
        rows = self._run(query, params, f"selecting {table}")
        return [row["record"] for row in rows]

    def insert(self, table: str, record: RecordInput) -> dict:
        """Create the node, or overwrite the node with the same id."""
        label = _label(table)
        props = _as_properties(record)
        if not props.get("id"):
            raise StoreError(f"Cannot insert into {table} without an id")

        rows = self._run(
            f"MERGE (n:{label} {{id: $id}}) SET n = $props RETURN properties(n) AS record",
            {"id": props["id"], "props": props},
            f"inserting into {table}",
        )
        self._link(table, props, replace=True)
        return rows[0]["record"] if rows else props

    def update(self, table: str, record_id: str, changes: RecordInput) -> Optional[dict]:
        """Apply ``changes``; keys set to None are removed from the node."""
        label = _label(table)
        if isinstance(changes, BaseModel):
            changes = changes.model_dump(exclude_unset=True)
        changes = {_property(k): v for k, v in changes.items() if k != "id"}

        rows = self._run(
            f"MATCH (n:{label} {{id: $id}}) SET n += $changes RETURN properties(n) AS record",
            {"id": record_id, "changes": changes},
            f"updating {table}",
        )
        if not rows:
            logger.warning(f"No {table} record with id '{record_id}' to update")
            return None

        record = rows[0]["record"]
        self._link(table, record, replace=True)
        return record

    def delete(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            raise StoreError(f"Refusing to delete from {table} without a filter")
        label = _label(table)
        where, params = _where_clause(filters)
        rows = self._run(
            f"MATCH (n:{label}) {where} WITH n, n.id AS id DETACH DELETE n RETURN count(id) AS deleted",
            params,
            f"deleting from {table}",
        )
        deleted = rows[0]["deleted"] if rows else 0
        logger.info(f"Deleted {deleted} record(s) from {table}")
        return deleted

    def _unlink(self, label: str, relationships: str, record_id: str) -> None:
        self._run(
            f"MATCH (n:{label} {{id: $id}})<-[r:{relationships}]-() DELETE r",
            {"id": record_id},
            f"unlinking {label}",
        )

    def _link(self, table: str, record: Dict[str, Any], replace: bool = False) -> None:
        """Relationships pointing at the node from its parents.

        With ``replace`` the node's existing incoming parent edges are dropped
        first, so a changed parent leaves no stale edge behind.
        """
        record_id = record["id"]
        if table == "metrics":
            if replace:
                self._unlink("Metric", "CASCADED_TO|MEASURED_BY", record_id)
            if record.get("parent_metric_id"):
                self._run(
                    "MATCH (p:Metric {id: $parent_id}), (m:Metric {id: $id}) "
                    "MERGE (p)-[:CASCADED_TO]->(m)",
                    {"id": record_id, "parent_id": record["parent_metric_id"]},
                    "linking parent metric",
                )
            parent_type = record.get("parent_type")
            if record.get("parent_id") and parent_type in VALID_PARENT_TYPES:
                self._run(
                    f"MATCH (o:{PARENT_LABELS[parent_type]} {{id: $parent_id}}), (m:Metric {{id: $id}}) "
                    "MERGE (o)-[:MEASURED_BY]->(m)",
                    {"id": record_id, "parent_id": record["parent_id"]},
                    "linking metric owner",
                )
        elif table == "outcomes":
            if replace:
                self._unlink("Outcome", "HAS_OUTCOME", record_id)
            if record.get("objective_id"):
                self._run(
                    "MATCH (o:Objective {id: $parent_id}), (n:Outcome {id: $id}) MERGE (o)-[:HAS_OUTCOME]->(n)",
                    {"id": record_id, "parent_id": record["objective_id"]},
                    "linking outcome",
                )
        elif table == "bets":
            if replace:
                self._unlink("Bet", "HAS_BET", record_id)
            if record.get("outcome_id"):
                self._run(
                    "MATCH (o:Outcome {id: $parent_id}), (n:Bet {id: $id}) MERGE (o)-[:HAS_BET]->(n)",
                    {"id": record_id, "parent_id": record["outcome_id"]},
                    "linking bet",
                )
