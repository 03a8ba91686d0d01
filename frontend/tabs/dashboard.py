"""
Dashboard View — overview of all projects.

Features:
- KPI cards (overall achievement, total sales, manufacturer count)
- Top 5 projects by latest sales (sales vs target bar chart)
- Search + status filter over the project list (KPIs are never filtered)
- Project cards with click-to-open navigation
- New project form
"""

import streamlit as st

from frontend.api_client import api
from frontend.components import (
    PROJECT_STATUSES, STATUS_ALL, format_wan, project_card, status_label, top_sales_chart,
)

_STATUS_OPTIONS = [STATUS_ALL] + PROJECT_STATUSES


def _status_option_label(value: str) -> str:
    return "所有状态" if value == STATUS_ALL else status_label(value)


def _clear_filters():
    st.session_state.dash_search = ""
    st.session_state.dash_status = STATUS_ALL


def _open_project(project_id: str):
    st.session_state.selected_project_id = project_id


def render():
    """Render the dashboard view."""

    try:
        summary = api.get_summary()
        top_rows = api.get_top_projects(5)
    except Exception as e:
        st.error(f"Cannot connect to backend API: {e}")
        st.info("Make sure the backend is running: `uvicorn backend.main:app --port 8050`")
        return

    st.title("总览")
    st.caption(f"欢迎回来。您目前共管理 {summary['project_count']} 个项目。")

    # ---- KPI cards ----
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("本月整体达成率", f"{summary['achievement_rate']:.1f}%")
    with col2:
        st.metric("本月总销售额", format_wan(summary["total_sales"]))
    with col3:
        st.metric("合作厂家数", summary["manufacturer_count"])

    if top_rows:
        st.plotly_chart(top_sales_chart(top_rows), use_container_width=True)

    _render_new_project_form()

    st.divider()

    # ---- Filters + project grid ----
    st.subheader("所有项目列表")
    col1, col2 = st.columns([3, 1])
    with col1:
        search = st.text_input("搜索", placeholder="搜索项目、厂家或品种...", key="dash_search")
    with col2:
        status = st.selectbox(
            "状态", _STATUS_OPTIONS, format_func=_status_option_label, key="dash_status",
        )

    try:
        projects = api.get_projects(search=search, status=status)
        metrics_by_id = {m["project_id"]: m for m in api.get_all_project_metrics()}
    except Exception as e:
        st.error(f"Failed to load projects: {e}")
        return

    if not projects:
        st.info("没有找到匹配的项目")
        st.button("清除筛选条件", on_click=_clear_filters)
        return

    columns = st.columns(3)
    for i, project in enumerate(projects):
        with columns[i % 3]:
            project_card(project, metrics_by_id.get(project["id"], {}))
            st.button(
                "查看详情",
                key=f"open_{project['id']}",
                on_click=_open_project,
                args=(project["id"],),
                use_container_width=True,
            )


def _render_new_project_form():
    """Collapsible form to create a new project."""
    with st.expander("➕ 新增项目", expanded=False):
        with st.form("new_project_form", clear_on_submit=True):
            name = st.text_input("项目名称 *", placeholder="例如：心血管-新品上市推广")
            manufacturer = st.text_input("合作厂家 *", placeholder="例如：辉瑞制药 (Pfizer)")
            products = st.text_input("覆盖品种", placeholder="多个品种以逗号分隔")
            description = st.text_area("项目描述")

            submitted = st.form_submit_button("创建项目", type="primary")
            if submitted:
                if not name.strip() or not manufacturer.strip():
                    st.error("项目名称和合作厂家为必填项。")
                    return
                try:
                    project = api.create_project(name, manufacturer, products, description)
                except Exception as e:
                    st.error(f"Failed to create project: {e}")
                    return
                st.session_state.selected_project_id = project["id"]
                st.rerun()
