"""
Project Detail View — one project's history, data entry and AI report.

Features:
- Header with status badge, manufacturer, covered products, description
- Edit project details form
- Monthly data entry form (same month overwrites the existing record)
- AI monthly report panel (Markdown)
- Sales trend chart and history table (newest first)

Every write is followed by st.rerun(), so the view re-reads the project
from the API before rendering again.
"""

from datetime import date

import streamlit as st

from frontend.api_client import APIError, api
from frontend.components import (
    PROJECT_STATUSES, history_table, sales_trend_chart, status_badge, status_label,
)


def _back_to_dashboard():
    st.session_state.pop("selected_project_id", None)


def render():
    """Render the detail view for st.session_state.selected_project_id."""

    project_id = st.session_state.get("selected_project_id")
    if not project_id:
        st.info("Please select a project from the dashboard first.")
        return

    try:
        project = api.get_project(project_id)
    except APIError as e:
        if e.status_code == 404:
            st.warning(f"项目 {project_id} 不存在。")
            _back_to_dashboard()
        else:
            st.error(f"Error loading project: {e}")
        return
    except Exception as e:
        st.error(f"Cannot connect to backend API: {e}")
        return

    st.button("← 返回仪表盘", on_click=_back_to_dashboard)

    # ---- Header ----
    st.title(project["name"])
    st.markdown(f"{status_badge(project['status'])} · {project['manufacturer']}")
    st.markdown(f"**覆盖品种：** {project.get('products') or '未指定品种'}")
    if project.get("description"):
        st.write(project["description"])

    col1, col2 = st.columns(2)
    with col1:
        _render_data_entry_form(project)
    with col2:
        _render_edit_form(project)

    st.divider()
    _render_ai_report(project)
    st.divider()

    # ---- Trend chart ----
    monthly_data = project.get("monthly_data", [])
    st.subheader("销售趋势")
    if monthly_data:
        st.plotly_chart(sales_trend_chart(monthly_data), use_container_width=True)
    else:
        st.info("暂无历史数据。点击“更新进度”添加数据。")

    # ---- History table ----
    st.subheader("月度历史数据")
    if monthly_data:
        try:
            history = api.get_project_history(project["id"])
        except Exception as e:
            st.error(f"Failed to load monthly history: {e}")
            return
        st.dataframe(history_table(history), use_container_width=True, hide_index=True)
    else:
        st.caption("暂无数据记录。")


def _render_data_entry_form(project: dict):
    with st.expander("➕ 更新进度", expanded=False):
        with st.form(f"data_entry_{project['id']}", clear_on_submit=True):
            month = st.date_input("月份", value=date.today(), help="按所选日期所在月份记录")
            coverage = st.number_input("覆盖医院数", min_value=0, value=0, step=1)
            actual = st.number_input("实际销售额 (¥)", min_value=0.0, value=0.0, step=1000.0)
            target = st.number_input("目标销售额 (¥)", min_value=0.0, value=0.0, step=1000.0)
            activities = st.text_area(
                "关键活动与备注",
                placeholder="例如：举办了3场区域学术会议，与连锁药店A完成了谈判...",
            )

            if st.form_submit_button("保存记录", type="primary"):
                try:
                    api.record_month(project["id"], {
                        "month": month.strftime("%Y-%m"),
                        "actual_sales": actual,
                        "target_sales": target,
                        "hospital_coverage": int(coverage),
                        "activities": activities,
                    })
                except Exception as e:
                    st.error(f"Failed to save monthly data: {e}")
                    return
                st.rerun()


def _render_edit_form(project: dict):
    statuses = list(PROJECT_STATUSES)
    # An unrecognized stored status is offered as is and left untouched on save
    if project["status"] not in statuses:
        statuses.append(project["status"])
    current = statuses.index(project["status"])

    with st.expander("✏️ 编辑项目信息", expanded=False):
        with st.form(f"edit_project_{project['id']}"):
            name = st.text_input("项目名称 *", value=project["name"])
            manufacturer = st.text_input("合作厂家 *", value=project["manufacturer"])
            products = st.text_input("覆盖品种", value=project.get("products") or "")
            description = st.text_area("项目描述", value=project.get("description") or "")
            status = st.selectbox("状态", statuses, index=current, format_func=status_label)

            if st.form_submit_button("保存修改", type="primary"):
                if not name.strip() or not manufacturer.strip():
                    st.error("项目名称和合作厂家为必填项。")
                    return
                changes = {
                    "name": name,
                    "manufacturer": manufacturer,
                    "products": products,
                    "description": description,
                }
                if status != project["status"]:
                    changes["status"] = status
                try:
                    api.edit_project(project["id"], changes)
                except Exception as e:
                    st.error(f"Failed to update project: {e}")
                    return
                st.rerun()


def _render_ai_report(project: dict):
    state_key = f"ai_report_{project['id']}"
    report = st.session_state.get(state_key)

    st.subheader("✨ AI 月度智能分析")
    if st.button("重新生成" if report else "生成分析报告", key=f"gen_{project['id']}"):
        with st.spinner("正在分析项目表现..."):
            try:
                result = api.generate_report(project["id"])
                st.session_state[state_key] = result
                report = result
            except APIError as e:
                if e.status_code == 409:
                    st.warning("报告正在生成中，请稍候。")
                else:
                    st.error(f"Failed to generate report: {e}")
            except Exception as e:
                st.error(f"Cannot connect to backend API: {e}")

    if report:
        with st.container(border=True):
            st.markdown(report["report"])
        st.caption(f"由 {report['provider']} 提供支持 · 支持 Markdown 格式")
    else:
        st.caption("点击生成按钮，基于当前销售数据和活动记录，创建专业的月度总结报告。")
