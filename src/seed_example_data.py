#!/usr/bin/env python3
"""Load the bundled example roadmap into Neo4j"""

from data.example_roadmap import EXAMPLE_TABLES
from db.neo4j_client import neo4j_client
from db.roadmap_store import RoadmapStore, StoreError

# Parents before children so relationship MATCHes find their endpoints
SEED_ORDER = ["teams", "objectives", "outcomes", "bets", "metrics"]

def count_existing_records(store: RoadmapStore) -> dict:
    """Count what is already stored per table"""

    print("=== Checking Current Roadmap Records ===")
    counts = {}
    for table in SEED_ORDER:
        counts[table] = len(store.select(table))
        print(f"  {table}: {counts[table]}")
    return counts

def parent_depth(record: dict, by_id: dict) -> int:
    """Number of parent metrics above the record (loops stop the count)"""

    depth = 0
    seen = {record["id"]}
    parent_id = record.get("parent_metric_id")
    while parent_id in by_id and parent_id not in seen:
        seen.add(parent_id)
        depth += 1
        parent_id = by_id[parent_id].get("parent_metric_id")
    return depth

def in_seed_order(records: list) -> list:
    """Parents ahead of their children, any nesting depth"""

    by_id = {r["id"]: r for r in records}
    return sorted(records, key=lambda r: parent_depth(r, by_id))

def seed_example_roadmap(store: RoadmapStore, tables: dict = None) -> int:
    """Insert (or overwrite) every example record"""

    print("\n=== Seeding Example Roadmap ===")
    success_count = 0
    total = 0
    tables = tables or EXAMPLE_TABLES
    for table in SEED_ORDER:
        # CASCADED_TO links MATCH the parent metric, so it must exist first
        for record in in_seed_order(tables.get(table, [])):
            total += 1
            try:
                store.insert(table, record)
                print(f"✅ Stored: {table}/{record['id']}")
                success_count += 1
            except StoreError as e:
                print(f"❌ Failed: {table}/{record['id']} - {e}")

    print(f"\n✅ Successfully stored {success_count}/{total} records")
    return success_count

if __name__ == "__main__":
    store = RoadmapStore(neo4j_client)
    existing = count_existing_records(store)

    expected = {table: len(EXAMPLE_TABLES[table]) for table in SEED_ORDER}
    if any(existing[table] < expected[table] for table in SEED_ORDER):
        print("\n⚠️  Example roadmap incomplete, seeding...")
        seed_example_roadmap(store)
        print("\n=== After Seeding ===")
        count_existing_records(store)
    else:
        print("\n✅ Example roadmap already present - looks good!")

    neo4j_client.close()
