import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date, datetime, time as dt_time

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from core.config import (
    APP_NAME,
    SUPPORTED_CURRENCIES,
    TIMER_REFRESH_SECONDS,
    TREND_DAYS,
    WORK_TYPE_LABELS,
    default_data_dir,
)
from core.domain import EXPENSE, INCOME, WORK_TYPES
from core.earnings import calculate_session_earnings, elapsed_seconds
from core.export import to_csv
from core.formatting import format_currency, format_day, format_duration, format_hours
from core.log import get_logger, setup_logging
from core.notices import pop_notice, push_notice
from core.persistence import JsonFileStorage
from core.reports import (
    earnings_by_date,
    expenses_by_category,
    monthly_summary,
    recent_sessions,
    session_export_rows,
    totals_by_type,
)
from core.store import AppStore, utc_now
from core.transforms import closed_sessions

st.set_page_config(page_title=APP_NAME, layout="wide")


def get_store() -> AppStore:
    if "store" not in st.session_state:
        data_dir = default_data_dir()
        setup_logging(log_dir=data_dir / "logs")
        get_logger("app").info(f"Opening store in {data_dir}")
        st.session_state.store = AppStore(JsonFileStorage(data_dir))
    return st.session_state.store


store = get_store()
state = store.state
settings = state.settings
currency = settings.currency
template = "plotly_dark" if settings.dark_mode else "plotly_white"


def money(amount: float) -> str:
    return format_currency(amount, currency)


def local_ts(ts: datetime) -> datetime:
    return ts.astimezone()


def work_type_label(work_type: str) -> str:
    return WORK_TYPE_LABELS.get(work_type, work_type)


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "⏱ Time Tracker", "💸 Finances", "📑 Reports", "⚙️ Settings"]
)

active = state.active_session
if active is not None:
    st.sidebar.markdown("---")
    st.sidebar.success(f"**In progress**\n\n{active.description or 'Working...'}")

notice = pop_notice(st.session_state)
if notice:
    st.success(notice)


if menu == "🏠 Overview":
    st.title("🏠 Overview")
    st.caption("Financial and productivity summary for this month.")

    stats = monthly_summary(state, utc_now())
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Estimated Balance (month)", money(stats.balance))
    with k2:
        st.metric("Hours Worked", format_hours(stats.hours))
    with k3:
        st.metric("Total Income", money(stats.total_income))
    with k4:
        st.metric("Expenses", money(stats.expense))

    col_recent, col_tip = st.columns(2)
    with col_recent:
        st.subheader("Recent Activity")
        recent = recent_sessions(state)
        if recent:
            for s in recent:
                status = (
                    f"{money(calculate_session_earnings(s, settings))} earned"
                    if s.end_time else "In progress"
                )
                st.markdown(
                    f"**{s.description or 'Untitled work'}** · `{s.type.upper()}`  \n"
                    f"{local_ts(s.start_time):%Y-%m-%d} · {status}"
                )
        else:
            st.info("No recent activity.")

    with col_tip:
        st.subheader("Financial Tip")
        side = "above" if stats.expense > stats.total_income * 0.7 else "below"
        st.info(
            "Keep your expenses under 70% of your monthly income to build a healthy "
            f"emergency reserve. Based on your current data you are **{side}** that limit."
        )

elif menu == "⏱ Time Tracker":
    st.title("⏱ Time Tracker")
    st.caption("Manage your time and maximize your earnings.")

    @st.fragment(run_every=TIMER_REFRESH_SECONDS)
    def running_timer(session_id):
        # read-only poll: re-reads "now", never touches the store
        running = store.state.active_session
        seconds = elapsed_seconds(running, utc_now()) if running and running.id == session_id else 0
        st.markdown(f"<h1 style='text-align:center;font-family:monospace'>{format_duration(seconds)}</h1>",
                    unsafe_allow_html=True)

    if active is None:
        st.markdown("<h1 style='text-align:center;font-family:monospace'>00:00:00</h1>", unsafe_allow_html=True)
        with st.form("start_form", clear_on_submit=True):
            description = st.text_input("What are you working on?")
            work_type = st.selectbox("Work type", WORK_TYPES, format_func=work_type_label)
            started = st.form_submit_button("▶ Start")
        if started:
            result = store.start_session(description, work_type)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                st.rerun()
    else:
        running_timer(active.id)
        st.write(f"Working on: **{active.description}** ({work_type_label(active.type)})")
        if st.button("⏹ Stop Work", key="btn_stop_session", type="primary"):
            store.stop_session()
            st.rerun()

    st.divider()

    with st.expander("➕ Manual Entry", expanded=False):
        with st.form("manual_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                manual_date = st.date_input("Date", value=date.today())
                manual_desc = st.text_input("Description")
                manual_type = st.selectbox("Type", WORK_TYPES, format_func=work_type_label, key="manual_type")
            with col2:
                manual_start = st.time_input("Start", value=dt_time(9, 0))
                manual_end = st.time_input("End", value=dt_time(17, 0))
                manual_break = st.number_input("Break (minutes)", min_value=0, value=0, step=5)
            saved = st.form_submit_button("Save Entry")

        if saved:
            start_dt = datetime.combine(manual_date, manual_start).astimezone()
            end_dt = datetime.combine(manual_date, manual_end).astimezone()
            result = store.add_manual_session(start_dt, end_dt, manual_desc, manual_type, manual_break)
            if result.is_left():
                st.error(result.get_error()["message"])
            else:
                push_notice(st.session_state, "✅ Entry saved!")
                st.rerun()

    st.subheader("🕘 Recent History")
    history = closed_sessions(state.sessions)
    if history:
        for s in history:
            c1, c2, c3 = st.columns([6, 2, 1])
            start, end = local_ts(s.start_time), local_ts(s.end_time)
            c1.markdown(f"**{s.description}**  \n{start:%Y-%m-%d} · {start:%H:%M} - {end:%H:%M}")
            c2.markdown(f"`{s.type.upper()}`  \n{money(calculate_session_earnings(s, settings))}")
            if c3.button("🗑", key=f"del_session_{s.id}"):
                store.delete_session(s.id)
                st.rerun()
    else:
        st.info("No entries found. Start working!")

elif menu == "💸 Finances":
    st.title("💸 Finances")
    st.caption("Track your income and expenses.")

    col_form, col_list = st.columns([1, 2])
    with col_form:
        st.subheader("New Transaction")
        with st.form("transaction_form", clear_on_submit=True):
            tx_type = st.radio("Type", [INCOME, EXPENSE], index=1, horizontal=True,
                               format_func=lambda t: "Income" if t == INCOME else "Expense")
            amount = st.number_input("Amount", min_value=0.0, step=10.0, format="%.2f")
            description = st.text_input("Description")
            category = st.text_input("Category (e.g. Rent, Food)", value="General")
            tx_date = st.date_input("Date", value=date.today())
            submitted = st.form_submit_button("Add")

        if submitted:
            store.add_transaction(tx_type, float(amount), category, tx_date, description)
            push_notice(st.session_state, "✅ Transaction added!")
            st.rerun()

    with col_list:
        st.subheader("Latest Movements")
        if state.transactions:
            for t in state.transactions:
                c1, c2, c3 = st.columns([5, 3, 1])
                sign = "+" if t.type == INCOME else "-"
                c1.markdown(f"**{t.description}**  \n{t.category} · {t.date:%Y-%m-%d}")
                c2.markdown(f"{'🟢' if t.type == INCOME else '🔴'} {sign} {money(t.amount)}")
                if c3.button("🗑", key=f"del_tx_{t.id}"):
                    store.delete_transaction(t.id)
                    st.rerun()
        else:
            st.info("No transactions recorded.")

    by_category = expenses_by_category(state.transactions)
    if by_category:
        st.subheader("Expenses by Category")
        df_cat = pd.DataFrame({"Category": list(by_category), "Total": list(by_category.values())})
        fig_cat = px.pie(df_cat, values="Total", names="Category", hole=0.4, template=template)
        st.plotly_chart(fig_cat, use_container_width=True)

elif menu == "📑 Reports":
    st.title("📑 Reports & Insights")

    if not state.sessions:
        st.info("Not enough data yet. Start recording work sessions to see the charts.")
    else:
        csv = to_csv(session_export_rows(state))
        st.download_button("⬇ Export Data", csv, file_name="full_report.csv", mime="text/csv")

        buckets = earnings_by_date(state.sessions, settings)
        df_trend = pd.DataFrame(
            [{"date": format_day(b.day), "earnings": b.earnings, "hours": b.hours} for b in buckets],
            columns=["date", "earnings", "hours"],
        )

        st.subheader("📈 Earnings Trend")
        st.caption(f"Last {TREND_DAYS} days with activity")
        fig_trend = px.area(df_trend, x="date", y="earnings", template=template,
                            labels={"date": "Date", "earnings": f"Earnings ({currency})"})
        st.plotly_chart(fig_trend, use_container_width=True)

        col_prod, col_dist = st.columns(2)
        with col_prod:
            st.subheader("⏱ Productivity vs. Revenue")
            fig_prod = go.Figure()
            fig_prod.add_trace(go.Bar(x=df_trend["date"], y=df_trend["hours"], name="Hours"))
            fig_prod.add_trace(go.Scatter(x=df_trend["date"], y=df_trend["earnings"], name="Earnings",
                                          mode="lines", yaxis="y2"))
            fig_prod.update_layout(
                template=template,
                yaxis=dict(title="Hours"),
                yaxis2=dict(title=currency, overlaying="y", side="right"),
                margin=dict(t=30, b=10, l=10, r=10),
            )
            st.plotly_chart(fig_prod, use_container_width=True)

        with col_dist:
            st.subheader("🥧 Distribution by Type")
            by_type = totals_by_type(state.sessions, settings)
            if by_type:
                df_type = pd.DataFrame([
                    {"Type": work_type_label(t.type), "Hours": round(t.hours, 1), "Earnings": t.earnings}
                    for t in by_type
                ])
                fig_type = px.pie(df_type, values="Hours", names="Type", hole=0.4, template=template)
                st.plotly_chart(fig_type, use_container_width=True)
                st.table(df_type.assign(Earnings=df_type["Earnings"].map(money)))
            else:
                st.info("No work type data yet.")

elif menu == "⚙️ Settings":
    st.title("⚙️ Settings")
    st.caption("Personalize your experience.")

    st.subheader("Appearance")
    dark_mode = st.toggle("Dark charts", value=settings.dark_mode)
    if dark_mode != settings.dark_mode:
        store.update_settings(dark_mode=dark_mode)
        st.rerun()

    st.subheader("Rates & Currency")
    col1, col2 = st.columns(2)
    with col1:
        codes = list(SUPPORTED_CURRENCIES)
        new_currency = st.selectbox(
            "Currency",
            codes,
            index=codes.index(currency) if currency in codes else 0,
            format_func=lambda c: SUPPORTED_CURRENCIES[c],
        )
    with col2:
        new_rate = st.number_input("Base hourly rate", value=float(settings.hourly_rate), step=1.0)

    st.subheader("Multipliers")
    mult_cols = st.columns(len(WORK_TYPES))
    new_multipliers = {}
    for col, work_type in zip(mult_cols, WORK_TYPES):
        with col:
            new_multipliers[work_type] = st.number_input(
                work_type.upper(),
                value=float(settings.multipliers.get(work_type, 1.0)),
                step=0.1,
                key=f"mult_{work_type}",
            )

    if st.button("💾 Save", key="btn_save_settings"):
        changes = {}
        if new_currency != settings.currency:
            changes["currency"] = new_currency
        if new_rate != settings.hourly_rate:
            changes["hourly_rate"] = new_rate
        if new_multipliers != dict(settings.multipliers):
            changes["multipliers"] = new_multipliers
        if changes:
            store.update_settings(**changes)
            push_notice(st.session_state, "Settings saved")
            st.rerun()
        else:
            st.info("Nothing to save")
