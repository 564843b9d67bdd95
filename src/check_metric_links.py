#!/usr/bin/env python3
"""Report structural problems in the stored metric hierarchy"""

from collections import Counter

from db.neo4j_client import neo4j_client
from engine.diagnostics import find_issues
from engine.metric_index import build_index
from services.roadmap_service import get_roadmap_service

def check_cascade_relationships():
    """List the CASCADED_TO edges as stored in the graph"""

    print("=== Metric Cascade Relationships ===")

    query = """
    MATCH (parent:Metric)-[:CASCADED_TO]->(child:Metric)
    RETURN parent.id as parent_id, parent.name as parent_name,
           child.id as child_id, child.name as child_name
    ORDER BY parent_id, child_id
    """

    try:
        results = neo4j_client.execute_query(query)
        print(f"Found {len(results)} cascade relationships")
        for rel in results:
            print(f"   {rel['parent_name']} ({rel['parent_id']}) -> {rel['child_name']} ({rel['child_id']})")
    except Exception as e:
        print(f"Error: {e}")

def check_metric_issues():
    """Run the hierarchy diagnostics over the stored metrics"""

    print("\n=== Metric Hierarchy Diagnostics ===")

    snapshot = get_roadmap_service("neo4j").get_connected_data()
    index = build_index(snapshot.metrics)
    issues = find_issues(index, snapshot.business_item_ids())

    if not issues:
        print(f"✅ {len(index)} metrics, no structural issues")
        return issues

    for kind, count in Counter(issue.kind.value for issue in issues).items():
        print(f"   {kind}: {count}")
    for issue in issues:
        print(f"⚠️  [{issue.kind.value}] {issue.metric_id}: {issue.detail}")
    return issues

if __name__ == "__main__":
    check_cascade_relationships()
    check_metric_issues()
    neo4j_client.close()
