import signal
import sys
from config.settings import settings
from db.neo4j_client import neo4j_client
from services.roadmap_service import get_roadmap_service
from views.metric_tree import MetricTree
from utils.logger import logger

def signal_handler(sig, frame):
    print("\n\nExiting gracefully...")
    logger.info("Application terminated by user")
    neo4j_client.close()
    sys.exit(0)

def format_row(row) -> str:
    metric = row.metric
    unit = metric.unit or ""
    line = "  " * row.depth + metric.name
    if row.unlinked:
        line += " (!) unlinked"
    if row.current is not None:
        line += f"  {row.current:.1f}{unit}"
        if row.target is not None:
            line += f" / {row.target:g}{unit}"
    if row.percentage > 0:
        line += f"  [{row.percentage}%]"
    return f"{line}  <{metric.id}>"

def print_details(tree: MetricTree, metric_id: str) -> None:
    details = tree.details(metric_id)
    if details is None:
        print(f"No metric with id '{metric_id}'")
        return

    row = details.row
    unit = row.metric.unit or ""
    print(f"\n{row.metric.name} Details")
    print(f"  Current Value: {row.current} {unit}")
    print(f"  Target: {row.target} {unit}")
    print(f"  Progress: {row.percentage}%")
    if row.team:
        print(f"  Team: {row.team.name}")
    if row.parent_item:
        context = f" ({row.parent_item.context})" if row.parent_item.context else ""
        print(f"  Parent {row.parent_item.type}: {row.parent_item.title}{context}")
    if row.metric.description:
        print(f"  Description: {row.metric.description}")
    if details.parent_metrics:
        print("  Parent Metrics: " + ", ".join(m.name for m in details.parent_metrics))
    if details.child_metrics:
        print("  Child Metrics: " + ", ".join(m.name for m in details.child_metrics))

def run_inspector():
    service = get_roadmap_service()
    tree = MetricTree.from_snapshot(service.get_connected_data())

    print(f"Metric Hierarchy ({settings.DATA_SOURCE} data)")
    rows = tree.rows()
    if not rows:
        print("No metrics available")
    for row in rows:
        print(format_row(row))

    while True:
        metric_id = input("\nEnter a metric id for details ('exit' to quit): ").strip()
        if metric_id.lower() == 'exit':
            break
        if metric_id:
            print_details(tree, metric_id)

if __name__ == "__main__":
    signal.signal(signal.SIGINT, signal_handler)
    try:
        run_inspector()
    except Exception as e:
        logger.error(f"Error: {e}")
    finally:
        neo4j_client.close()
