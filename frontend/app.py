"""PharmaTrack — Streamlit Frontend Entry Point."""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st

st.set_page_config(
    page_title="医药项目通",
    page_icon="💊",
    layout="wide",
    initial_sidebar_state="expanded",
)

from frontend.api_client import api, API_BASE
from frontend.tabs import dashboard, project_detail


def _select(project_id):
    if project_id is None:
        st.session_state.pop("selected_project_id", None)
    else:
        st.session_state.selected_project_id = project_id


def main():
    st.sidebar.title("医药项目通")
    st.sidebar.caption("医药商业部 · 项目经理")

    selected_id = st.session_state.get("selected_project_id")

    st.sidebar.button(
        "📊 仪表盘",
        on_click=_select, args=(None,),
        type="primary" if not selected_id else "secondary",
        use_container_width=True,
    )

    # Sidebar project list (always the full collection)
    try:
        projects = api.get_projects()
    except Exception:
        projects = []

    st.sidebar.caption(f"活跃项目 ({len(projects)})")
    for p in projects:
        dot = "🟢" if p["status"] == "Active" else "⚪"
        st.sidebar.button(
            f"{dot} {p['name']}",
            key=f"nav_{p['id']}",
            on_click=_select, args=(p["id"],),
            type="primary" if p["id"] == selected_id else "secondary",
            use_container_width=True,
        )

    st.sidebar.divider()
    st.sidebar.caption(f"Backend: {API_BASE}")
    st.sidebar.caption(f"API Docs: {API_BASE}/docs")

    if st.session_state.get("selected_project_id"):
        project_detail.render()
    else:
        dashboard.render()


if __name__ == "__main__":
    main()
