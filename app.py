import html

import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from core.data import SpreadsheetError, load_dashboard_data, prepare_context, read_spreadsheet
from core.metrics_channels import compute_channels
from core.metrics_goal import DEFAULTS, compute_goal
from core.metrics_overview import compute_overview
from core.metrics_pipeline import compute_kanban
from core.metrics_search import MIN_QUERY_LENGTH, compute_search
from core.metrics_trend import compute_trend


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 12px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 0.95rem;color: #111827;}
        .card-sub {font-size: 0.8rem;color: #6b7280;}
        .card-late {border-color: #ef4444;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .chip-late {background: #fee2e2;border-color: #fecaca;color: #b91c1c;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def section(title: str, caption: Optional[str] = None):
    container = st.container()
    container.markdown(f"#### {title}")
    if caption:
        container.caption(caption)
    with container:
        yield container


def format_filter_summary(company: str, winning_touch: str, source: str) -> str:
    chips = [
        f"Company: {company or 'All'}",
        f"Winning touch: {winning_touch or 'All'}",
        f"Source: {source or 'All'}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


@st.cache_data(show_spinner="Reading spreadsheet...")
def load_records(payload: bytes, filename: str) -> List[Dict[str, Any]]:
    return read_spreadsheet(payload, filename)


# ---------- UI setup ----------
st.set_page_config(page_title="Prospecting Dashboard", layout="wide")
inject_base_styles()
st.title("Prospecting Dashboard")
st.caption("Upload your prospecting sheet: KPIs, pipeline kanban, channel efficiency and goal planning. Nothing is stored.")

uploaded = st.file_uploader("Upload your spreadsheet", type=["xlsx", "csv"])
if uploaded is None:
    st.info("Drop an .xlsx or .csv export of the prospecting sheet to get started.")
    st.stop()

try:
    records = load_records(uploaded.getvalue(), uploaded.name)
except SpreadsheetError as exc:
    st.error(str(exc))
    st.stop()

data_ctx = load_dashboard_data(records)
options = data_ctx["filter_options"]

# ----- Sidebar: navigation + filters -----
with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Overview", "Pipeline", "Goal Planner", "Search"], index=0)

    st.markdown("---")
    st.markdown("### Filters")
    company = st.selectbox("Company", options=[""] + options["company"], format_func=lambda v: v or "All companies")
    winning_touch = st.selectbox("Winning touch", options=[""] + options["winning_touch"], format_func=lambda v: v or "All touches")
    source = st.selectbox("Source", options=[""] + options["source"], format_func=lambda v: v or "All sources")
    st.caption(f"{data_ctx['row_count']:,} contacts loaded from {uploaded.name}")

filters = {"company": company, "winning_touch": winning_touch, "source": source}
ctx = prepare_context(filters, data_ctx)
f = ctx["filters"]
filtered_df = pd.DataFrame(ctx["filtered_records"])


def render_kpi_tiles(kpis: Dict[str, Any]):
    row1 = st.columns(5)
    row1[0].metric("Total contacts", f"{kpis['total']:,}")
    row1[1].metric("Prospecting", f"{kpis['prospecting']:,}")
    row1[2].metric("Responded", f"{kpis['responded']:,}")
    row1[3].metric("Active conversations", f"{kpis['active_conversations']:,}")
    row1[4].metric("Finished", f"{kpis['finished']:,}", help="Contacts with an outcome (scheduled or closed).")
    row2 = st.columns(5)
    row2[0].metric("Scheduled", f"{kpis['scheduled']:,}")
    row2[1].metric("Late actions", f"{kpis['late']:,}", help="Prospecting contacts whose next touch date is in the past.")
    row2[2].metric("% Resp / Total", f"{kpis['response_rate']:.1%}")
    row2[3].metric("% Sched / Resp", f"{kpis['schedule_from_response_rate']:.1%}")
    row2[4].metric("% Sched / Total", f"{kpis['schedule_from_total_rate']:.1%}")


def render_overview_page():
    render_page_header("Overview", "Dashboard / Overview", format_filter_summary(f.company, f.winning_touch, f.source), filtered_df, "records.csv")
    overview = compute_overview(f, ctx)
    render_kpi_tiles(overview["kpis"])
    if overview["charts"].get("stage_distribution"):
        with section("Pipeline stages"):
            st.vega_lite_chart(overview["charts"]["stage_distribution"], use_container_width=True)

    trend = compute_trend(f, ctx)
    with section("Evolution", "Cumulative contacts, responses and meetings by day (DD/MM; the year is not part of the bucket)."):
        if trend["charts"].get("cumulative_trend"):
            st.vega_lite_chart(trend["charts"]["cumulative_trend"], use_container_width=True)
        else:
            st.info("No connection or response dates found.")

    channels = compute_channels(f, ctx)
    c1, c2 = st.columns(2)
    with c1:
        with section("Volume by channel", "Every touch sent, classified from its content."):
            if channels["charts"].get("channel_volume"):
                st.vega_lite_chart(channels["charts"]["channel_volume"], use_container_width=True)
    with c2:
        with section("Scheduling efficiency", "Meetings by the channel of the last touch sent."):
            if channels["charts"].get("channel_efficiency"):
                st.vega_lite_chart(channels["charts"]["channel_efficiency"], use_container_width=True)
            else:
                st.info("No scheduled meetings yet.")


def render_card(card: Dict[str, Any]):
    pending = card.get("pending")
    chips = [f"<span class='chip'>{card['last_touch'] or 'No touch'} · {card['last_channel']}</span>"]
    if pending:
        late_cls = " chip-late" if card["is_late"] else ""
        chips.append(f"<span class='chip{late_cls}'>Next: {pending['label']} · {pending['date'] or pending['date_str']}</span>")
    elif card["is_exhausted"]:
        chips.append("<span class='chip chip-late'>No pending touch: manual follow-up</span>")
    snippet = f"<div class='card-sub'>\"{html.escape(card['response_snippet'])}\"</div>" if card["response_snippet"] else ""
    st.markdown(
        f"""
        <div class="card{' card-late' if card['is_late'] else ''}">
          <div class="card-title">{html.escape(card["name"])}</div>
          <div class="card-sub">{html.escape(card["company"])}{" · " + html.escape(card["title"]) if card["title"] else ""}</div>
          <div class="chip-row">{''.join(chips)}</div>
          {snippet}
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_pipeline_page():
    render_page_header("Pipeline", "Dashboard / Pipeline", format_filter_summary(f.company, f.winning_touch, f.source))
    kanban = compute_kanban(f, ctx)
    cols = st.columns(len(kanban["columns"]))
    for col, column in zip(cols, kanban["columns"]):
        with col:
            st.markdown(f"**{column['stage']}** ({column['count']})")
            st.caption(column["caption"])
            for card in column["cards"]:
                render_card(card)


def render_goal_page():
    render_page_header("Goal Planner", "Dashboard / Goal Planner", format_filter_summary(f.company, f.winning_touch, f.source))
    c1, c2, c3 = st.columns(3)
    goal = c1.number_input("Meeting goal", min_value=0, value=DEFAULTS.goal, step=1)
    touches = c2.number_input("Touches per cycle", min_value=0, value=DEFAULTS.touches_per_cycle, step=1)
    days = c3.number_input("Working days", min_value=1, value=DEFAULTS.working_days, step=1)
    projection = compute_goal(f, ctx, goal=int(goal), touches_per_cycle=int(touches), working_days=int(days))["projection"]

    cols = st.columns(4)
    cols[0].metric("Meetings to go", f"{projection['remaining']:,}")
    cols[1].metric("Responses needed", f"{projection['responses_needed']:,}", help=f"At {projection['schedule_from_response_rate']:.1%} meetings per response.")
    cols[2].metric("New contacts needed", f"{projection['contacts_needed']:,}", help=f"At {projection['schedule_from_total_rate']:.1%} meetings per contact.")
    cols[3].metric("Estimated touches", f"{projection['total_touches']:,.0f}")
    st.caption(
        f"Based on your historical conversion. Adding {projection['daily_new_contacts']:,} new contacts per working day "
        f"should reach the goal in {projection['working_days']} days."
    )


def render_search_page():
    render_page_header("Search", "Dashboard / Search", "<span class='chip'>All contacts (filters ignored)</span>")
    q = st.text_input("Name, company or title", "")
    if len(q.strip()) < MIN_QUERY_LENGTH:
        st.caption(f"Type at least {MIN_QUERY_LENGTH} characters.")
        return
    result = compute_search(ctx, q=q)
    if not result["results"]:
        st.info(f'No contact found for "{q}".')
        return
    st.dataframe(pd.DataFrame(result["results"]), use_container_width=True, hide_index=True)


if nav_choice == "Overview":
    render_overview_page()
elif nav_choice == "Pipeline":
    render_pipeline_page()
elif nav_choice == "Goal Planner":
    render_goal_page()
else:
    render_search_page()
