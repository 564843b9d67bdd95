"""
Streamlit metric explorer: the metric hierarchy, a detail panel for the
selected metric and the structural diagnostics of the current snapshot.
"""

import streamlit as st

from config.settings import settings
from engine.diagnostics import find_issues
from services.roadmap_service import RoadmapSnapshot, get_roadmap_service
from utils.logger import logger
from views.metric_tree import MetricTree

BAND_COLORS = {"red": "#ef4444", "yellow": "#eab308", "green": "#22c55e"}


@st.cache_data(ttl=60)
def load_snapshot():
    # Cached as plain data; models are rebuilt on every rerun
    return get_roadmap_service().get_connected_data().model_dump()


def render_row(row) -> None:
    metric = row.metric
    unit = metric.unit or ""
    indent = "&nbsp;" * 6 * row.depth
    warning = " ⚠️" if row.unlinked else ""
    label = f"{indent}**{metric.name}**{warning}"
    if row.parent_item:
        label += f" · {row.parent_item.type}: {row.parent_item.title}"

    left, right = st.columns([4, 1])
    left.markdown(label, unsafe_allow_html=True)
    if right.button("Details", key=f"select-{metric.id}"):
        st.session_state["selected_metric_id"] = metric.id

    if row.current is not None:
        values = f"{row.current:.1f}{unit}"
        if row.target is not None:
            values += f" / {row.target:g}{unit}"
        left.caption(values)
    if row.band:
        left.markdown(
            f"<div style='background:#e5e7eb;border-radius:9999px;height:8px'>"
            f"<div style='width:{row.percentage}%;background:{BAND_COLORS[row.band]};"
            f"border-radius:9999px;height:8px'></div></div>",
            unsafe_allow_html=True,
        )


def render_details(tree: MetricTree, metric_id: str) -> None:
    details = tree.details(metric_id)
    if details is None:
        st.info("Click on any metric to view its details")
        return

    row = details.row
    unit = row.metric.unit or ""
    st.markdown(f"#### {row.metric.name} Details")
    st.write(f"Current Value: {row.current} {unit}")
    st.write(f"Target: {row.target} {unit}")
    st.write(f"Progress: {row.percentage}%")
    if row.team:
        st.write(f"Team: {row.team.name}")
    if row.parent_item:
        st.write(f"Parent {row.parent_item.type}: {row.parent_item.title}")
    if row.metric.description:
        st.write(f"Description: {row.metric.description}")
    if details.parent_metrics:
        st.write("Parent Metrics: " + ", ".join(m.name for m in details.parent_metrics))
    for child in details.child_metrics:
        if st.button(child.name, key=f"child-{metric_id}-{child.id}"):
            st.session_state["selected_metric_id"] = child.id
            st.rerun()


def main():
    st.set_page_config(page_title="Roadmap Metrics", layout="wide")
    st.title("Metric Explorer")
    st.caption(f"Data source: {settings.DATA_SOURCE}")

    try:
        snapshot = RoadmapSnapshot.model_validate(load_snapshot())
    except Exception as e:
        logger.error(f"Failed to load roadmap: {e}")
        st.error(f"Could not load roadmap data: {e}")
        return

    tree = MetricTree.from_snapshot(snapshot)
    tree_col, detail_col = st.columns(2)

    with tree_col:
        st.subheader("Metric Hierarchy")
        rows = tree.rows()
        if not rows:
            st.write("No metrics available")
        for row in rows:
            render_row(row)

    with detail_col:
        selected = st.session_state.get("selected_metric_id")
        st.subheader("Metric Details" if selected else "Select a metric to view details")
        render_details(tree, selected)

        issues = find_issues(tree.index, snapshot.business_item_ids())
        with st.expander(f"Diagnostics ({len(issues)})"):
            for issue in issues:
                st.write(f"⚠️ [{issue.kind.value}] {issue.metric_id}: {issue.detail}")


main()
