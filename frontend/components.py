"""Reusable UI components for PharmaTrack frontend."""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

# Project statuses accepted by the API, with their display labels
PROJECT_STATUSES = ["Active", "Pending", "Completed"]
STATUS_ALL = "All"

STATUS_LABELS = {
    "Active": "进行中",
    "Pending": "待定",
    "Completed": "已完成",
}

SALES_COLOR = "#0d9488"
TARGET_COLOR = "#cbd5e1"

BAND_BADGES = {
    "on_target": "🟢",
    "near_target": "🟡",
    "below_target": "🔴",
}


def status_label(status: str) -> str:
    """Chinese label for a known status; anything else is shown verbatim."""
    return STATUS_LABELS.get(status, status)


def format_wan(amount: float) -> str:
    """Format a yuan amount in units of 万 (10,000)."""
    return f"¥{amount / 10000:,.2f}万"


def status_badge(status: str) -> str:
    """Status label with a coloured dot; unknown statuses are shown verbatim."""
    dot = "🟢" if status == "Active" else "⚪"
    return f"{dot} {status_label(status)}"


def top_sales_chart(rows: list[dict]) -> go.Figure:
    """Grouped bar chart: latest actual sales vs target for the top projects."""
    if not rows:
        return go.Figure()

    df = pd.DataFrame(rows)
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["label"], y=df["sales"], name="实际销售", marker_color=SALES_COLOR,
        hovertemplate="%{x}<br>实际销售: ¥%{y:,.0f}<extra></extra>",
    ))
    fig.add_trace(go.Bar(
        x=df["label"], y=df["target"], name="目标", marker_color=TARGET_COLOR,
        hovertemplate="%{x}<br>目标: ¥%{y:,.0f}<extra></extra>",
    ))
    fig.update_layout(
        title="销售Top 5项目 (本月)",
        barmode="group",
        template="plotly_white",
        height=380,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def sales_trend_chart(monthly_data: list[dict]) -> go.Figure:
    """Line chart of actual vs target sales over the project's history."""
    if not monthly_data:
        return go.Figure()

    df = pd.DataFrame(monthly_data)
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df["month"], y=df["actual_sales"], name="实际销售", mode="lines+markers",
        line=dict(color=SALES_COLOR, width=3),
    ))
    fig.add_trace(go.Scatter(
        x=df["month"], y=df["target_sales"], name="目标", mode="lines",
        line=dict(color=TARGET_COLOR, width=2, dash="dash"),
    ))
    fig.update_layout(
        title="销售趋势",
        xaxis_title="月份", yaxis_title="¥",
        xaxis_type="category",
        template="plotly_white",
        height=380,
    )
    return fig


def history_table(history: list[dict]) -> pd.DataFrame:
    """Monthly history rows from the API, newest first, with achievement rate and band."""
    rows = []
    for d in reversed(history):
        rows.append({
            "月份": d["month"],
            "销售额": f"¥{d['actual_sales']:,.0f}",
            "目标": f"¥{d['target_sales']:,.0f}",
            "达成率": f"{BAND_BADGES.get(d['band'], '')} {d['achievement_rate']:.1f}%",
            "覆盖医院": f"{d['hospital_coverage']} 家",
            "关键活动": d.get("activities") or "-",
        })
    return pd.DataFrame(rows)


def project_card(project: dict, metrics: dict):
    """Render one project card inside the current container."""
    with st.container(border=True):
        st.markdown(f"**{project['name']}**")
        st.caption(f"{project['manufacturer']} · {status_badge(project['status'])}")
        st.caption(f"💊 {project.get('products') or '暂无品种信息'}")

        if metrics.get("latest_month"):
            st.caption(f"上月数据 ({metrics['latest_month']})")
            st.progress(
                int(metrics["progress_pct"]),
                text=f"达成率 {metrics['achievement_rate_rounded']}% · "
                     f"{metrics['actual_sales']:,.0f} / {metrics['target_sales']:,.0f}",
            )
        else:
            st.caption("暂无数据记录")
