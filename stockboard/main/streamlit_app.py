# streamlit_app.py
# Run with: streamlit run stockboard/main/streamlit_app.py
from __future__ import annotations

import io
import logging
from datetime import datetime

import altair as alt
import streamlit as st

from stockboard.auth.identity import JsonIdentityProvider
from stockboard.config import get_settings
from stockboard.errors import AuthError, ValidationError, WriteError
from stockboard.inventory.record_store import JsonRecordStore
from stockboard.main.session import DashboardSession
from stockboard.main.streamlit_report_helpers import (
    changed_sale_date,
    profit_chart_frame,
    records_frame,
    revenue_cost_frame,
    sale_date_default,
)
from stockboard.reports.export import DEFAULT_CSV_NAME, summary_to_workbook, to_delimited_text
from stockboard.reports.period import Period, available_years
from stockboard.reports.summary import format_summary_text
from stockboard.utils.formatting import format_currency
from stockboard.utils.time_zone import get_report_tz

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


@st.cache_resource
def get_store() -> JsonRecordStore:
    # shared by every browser session; records are partitioned by owner id
    return JsonRecordStore(settings.records_file)


def get_session() -> DashboardSession:
    # identity is per browser session: each tab has its own signed-in owner
    if "dashboard" not in st.session_state:
        identity = JsonIdentityProvider(settings.accounts_file)
        st.session_state.dashboard = DashboardSession(identity, get_store())
    return st.session_state.dashboard


def money(v) -> str:
    return format_currency(v, settings.currency, settings.locale)


def profit_bar_chart(view, title: str) -> None:
    df = profit_chart_frame(view.profit_ranking, settings.currency, settings.locale)
    if df.empty:
        return
    base = alt.Chart(df).encode(x=alt.X("name:N", sort="-y", title="Product"))
    bars = base.mark_bar().encode(
        y=alt.Y("profit:Q", title=f"Profit ({settings.currency})"),
        tooltip=[alt.Tooltip("name", title="Product"), alt.Tooltip("label", title="Profit")],
    )
    labels = base.mark_text(dy=-6).encode(y="profit:Q", text="label:N")
    st.altair_chart((bars + labels).properties(title=title), use_container_width=True)


st.set_page_config(page_title="Stockboard", layout="wide", initial_sidebar_state="expanded")
session = get_session()

# =================================================================================
# === LOGIN / SIGN-UP
# =================================================================================
if session.owner is None:
    st.title("📦 Stockboard")
    tab_login, tab_signup = st.tabs(["Sign in", "Create account"])

    with tab_login:
        with st.form("login_form"):
            email = st.text_input("Email", placeholder="you@email.com")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign in", type="primary"):
                try:
                    session.identity.sign_in(email, password)
                    st.rerun()
                except AuthError as e:
                    st.error(e.message)

    with tab_signup:
        with st.form("signup_form"):
            name = st.text_input("Display name")
            email = st.text_input("Email", placeholder="you@email.com")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Create account", type="primary"):
                try:
                    session.identity.sign_up(email, password, display_name=name)
                    st.rerun()
                except ValidationError as e:
                    st.error(e.message)
                except AuthError as e:
                    st.error(e.message)
    st.stop()

owner = session.require_owner()
manager = session.records_manager()

# --- Sidebar ---
with st.sidebar:
    st.title("📦 Stockboard")
    st.caption(f"Signed in as {owner.email}")
    menu = st.radio("Menu", options=["📊 Dashboard", "📦 Products", "💰 Sales", "📈 Reports"])
    st.info(f"🗓️ Today: {datetime.now(get_report_tz()).strftime('%d/%m/%Y')}")
    if st.button("Sign out"):
        session.identity.sign_out()
        st.rerun()

# =================================================================================
# === DASHBOARD
# =================================================================================
if menu == "📊 Dashboard":
    st.title(f"Welcome, {owner.label}!")
    choice = st.radio("Period", ["Today", "This month", "All time"], horizontal=True, index=2)
    period = {"Today": Period.today(), "This month": Period.this_month()}.get(choice, Period.all())
    view = session.view(period)

    c1, c2, c3 = st.columns(3)
    c1.metric("Revenue", money(view.summary.total_revenue))
    c2.metric("Cost of goods sold", money(view.summary.total_cost_of_goods_sold))
    c3.metric("Net profit", money(view.summary.total_net_profit))
    c4, c5, c6 = st.columns(3)
    c4.metric("Inventory cost (all time)", money(view.summary.total_inventory_cost))
    c5.metric("Overall balance", money(view.summary.overall_balance))
    c6.metric("Unsold products", len(view.summary.unsold_records))

    if view.summary.unsold_records:
        with st.container(border=True):
            st.subheader("Products without sales")
            st.dataframe(records_frame(view.summary.unsold_records, settings.currency, settings.locale),
                         use_container_width=True)

# =================================================================================
# === PRODUCTS
# =================================================================================
elif menu == "📦 Products":
    st.title("📦 Inventory")
    records = list(session.records)

    tab_list, tab_add, tab_edit = st.tabs(["📜 List", "➕ Add", "✏️ Edit / Delete"])

    with tab_list:
        keyword = st.text_input("Search by name")
        shown = manager.search_records(keyword) if keyword else records
        if shown:
            st.dataframe(records_frame(shown, settings.currency, settings.locale), use_container_width=True)
        else:
            st.info("No products found." if keyword else "No products yet.")
        st.download_button(
            "📥 Export CSV",
            data=to_delimited_text(records).encode("utf-8"),
            file_name=DEFAULT_CSV_NAME,
            mime="text/csv",
            disabled=not records,
        )

    with tab_add:
        with st.form("add_record_form"):
            name = st.text_input("Name")
            c1, c2 = st.columns(2)
            qty_bought = c1.number_input("Quantity purchased", min_value=0, step=1)
            qty_sold = c2.number_input("Quantity sold", min_value=0, step=1)
            c3, c4 = st.columns(2)
            purchase = c3.text_input("Unit purchase price", value="0")
            sale = c4.text_input("Unit sale price", value="0")
            sale_date = st.date_input("Last sale date", value=datetime.now(get_report_tz()).date())
            if st.form_submit_button("Add product", type="primary"):
                try:
                    manager.add_record(name, qty_bought, purchase, sale, qty_sold,
                                       last_sale_date=datetime.combine(sale_date, datetime.min.time()))
                    st.toast("Product added.")
                    st.rerun()
                except ValidationError as e:
                    st.error(f"{e.field}: {e.message}")
                except WriteError as e:
                    st.toast(f"Could not save the product: {e}")

    with tab_edit:
        if not records:
            st.info("No products yet.")
        else:
            by_id = {r.id: r for r in records}
            rid = st.selectbox("Product", options=list(by_id), format_func=lambda i: by_id[i].name)
            current = by_id[rid]
            with st.form("edit_record_form"):
                name = st.text_input("Name", value=current.name)
                c1, c2 = st.columns(2)
                qty_bought = c1.number_input("Quantity purchased", min_value=0, step=1,
                                             value=current.quantity_purchased)
                qty_sold = c2.number_input("Quantity sold", min_value=0, step=1, value=current.quantity_sold)
                c3, c4 = st.columns(2)
                purchase = c3.text_input("Unit purchase price", value=str(current.purchase_price))
                sale = c4.text_input("Unit sale price", value=str(current.sale_price))
                sale_date = st.date_input("Last sale date", value=sale_date_default(current.last_sale_date))
                if st.form_submit_button("Save changes", type="primary"):
                    changes = dict(name=name, quantity_purchased=qty_bought, quantity_sold=qty_sold,
                                   purchase_price=purchase, sale_price=sale)
                    new_date = changed_sale_date(current.last_sale_date, sale_date)
                    if new_date is not None:
                        changes["last_sale_date"] = new_date
                    try:
                        manager.update_record(rid, **changes)
                        st.toast("Product updated.")
                        st.rerun()
                    except ValidationError as e:
                        st.error(f"{e.field}: {e.message}")
                    except WriteError as e:
                        st.toast(f"Could not save the product: {e}")
            if st.button("❌ Delete product", type="secondary"):
                try:
                    manager.delete_record(rid)
                    st.toast("Product deleted.")
                    st.rerun()
                except WriteError as e:
                    st.toast(f"Could not delete the product: {e}")

# =================================================================================
# === SALES (month / year filter)
# =================================================================================
elif menu == "💰 Sales":
    st.title("💰 Sales")
    years = available_years()
    c1, c2 = st.columns(2)
    month_choice = c1.selectbox("Month", options=["All months", *MONTHS])
    year = c2.selectbox("Year", options=years)
    month = None if month_choice == "All months" else MONTHS.index(month_choice) + 1
    view = session.view(Period.for_year(year, month))

    m1, m2, m3 = st.columns(3)
    m1.metric("Revenue", money(view.summary.total_revenue))
    m2.metric("Cost of goods sold", money(view.summary.total_cost_of_goods_sold))
    m3.metric("Net profit", money(view.summary.total_net_profit))

    if not view.filtered:
        st.warning(f"No sales in {view.period.label}.")
    else:
        profit_bar_chart(view, f"Profit by product - {view.period.label}")
        df_rc = revenue_cost_frame(view.revenue_cost, settings.currency, settings.locale)
        if not df_rc.empty:
            st.altair_chart(alt.Chart(df_rc).mark_line(point=True).encode(
                x=alt.X("name:N", title="Product"),
                y=alt.Y("amount:Q", title=settings.currency),
                color="series:N",
                tooltip=["name", "series", alt.Tooltip("label", title="Amount")],
            ).properties(title=f"Revenue vs. cost - {view.period.label}"), use_container_width=True)

# =================================================================================
# === REPORTS (all time)
# =================================================================================
elif menu == "📈 Reports":
    st.title("📈 Store reports")
    view = session.view(Period.all())
    if not view.records:
        st.info("Add products and record sales to see reports.")
    else:
        st.text_area("Summary", value=format_summary_text(view.summary, view.profit_ranking,
                                                          currency=settings.currency, locale=settings.locale),
                     height=320, disabled=True)
        profit_bar_chart(view, "Profit by product")
        buf = io.BytesIO()
        summary_to_workbook(view.summary, view.records, view.period.label).save(buf)
        st.download_button(
            "📥 Download Excel report",
            data=buf.getvalue(),
            file_name="stockboard_report.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
