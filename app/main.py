import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
import plotly.express as px

from finreport.config import Settings, configure_logging, format_money
from finreport.domain import EXPENSE, INCOME, INVESTMENT
from finreport.filters import ALL, available_years, by_category, by_payment_status, by_period, by_type, period_label, select
from finreport.frames import breakdown_frame, consolidated_frame, listing_frame, matrix_frame, series_frame
from finreport.lazy import top_categories
from finreport.listings import SORT_KEYS, default_order, grouped_listing
from finreport.references import category_label, display_subtitle, display_title
from finreport.reports import bank_rows, category_rows, consolidated_table, recent_transactions, unpaid_expenses
from finreport.series import bank_matrix, category_matrix, matrix_totals, provisioned_series, realized_series
from finreport.services import ReportService
from finreport.transforms import load_seed

settings = Settings()
configure_logging(settings)

st.set_page_config(page_title=settings.app_name, layout="wide")

if "dataset" not in st.session_state:
    st.session_state.dataset = load_seed(settings.seed_path)

dataset = st.session_state.dataset
transactions, categories, subcategories, bank_accounts = dataset


def money(value) -> str:
    return format_money(value, settings)


menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "📑 Reports", "📊 Analytics"])

years = [ALL] + list(available_years(transactions))
year = st.sidebar.selectbox("Year", years, format_func=lambda y: "All years" if y == ALL else str(y))
month = st.sidebar.selectbox(
    "Month",
    [ALL] + list(range(1, 13)),
    format_func=lambda m: "All months" if m == ALL else pd.Timestamp(2000, m, 1).strftime("%B"),
)
st.sidebar.caption(period_label(year, month))

service = ReportService()
period = service.period_report(dataset, year, month)
for step in period["steps"]:
    if "error" in step:
        st.sidebar.warning(f"{step['calculator']}: {step['error']}")
result = period["result"]
report = result["report"]

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")

    cash_flow = result["cash_flow"]
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Received income", money(cash_flow.received_income))
    with k2:
        st.metric("Paid expenses", money(cash_flow.paid_expenses))
    with k3:
        st.metric("Realized balance", money(cash_flow.balance))
    with k4:
        st.metric("Unpaid expenses", money(report.total_unpaid_expenses))

    view = st.radio("Cash flow", ["Realized", "Provisioned"], horizontal=True)
    df_series = series_frame(realized_series(transactions, year), provisioned_series(transactions, year))
    fig_ts = go.Figure()
    if view == "Realized":
        fig_ts.add_trace(go.Scatter(x=df_series["month"], y=df_series["received_income"], mode="lines+markers", name="Received"))
        fig_ts.add_trace(go.Scatter(x=df_series["month"], y=df_series["paid_expenses"], mode="lines+markers", name="Paid"))
        fig_ts.add_trace(go.Bar(x=df_series["month"], y=df_series["balance"], name="Balance", opacity=0.4))
    else:
        fig_ts.add_trace(go.Bar(x=df_series["month"], y=df_series["total_income"], name="Income"))
        fig_ts.add_trace(go.Bar(x=df_series["month"], y=df_series["total_expenses"], name="Expenses"))
    fig_ts.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    col_inc, col_exp = st.columns(2)
    for col, rows, title in (
        (col_inc, result["income_rows"], "Income by category"),
        (col_exp, result["expense_rows"], "Expenses by category"),
    ):
        with col:
            st.subheader(title)
            if rows:
                for row in rows:
                    st.write(f"**{row.label}** · {money(row.amount)} ({float(row.percent_of_total):.1f}%)")
                    st.progress(min(1.0, float(row.percent_of_max) / 100))
            else:
                st.info("Nothing recorded for this period")

    col_pay, col_recent = st.columns(2)
    with col_pay:
        st.subheader("⏰ To pay")
        pending = unpaid_expenses(transactions, settings.unpaid_limit)
        if pending:
            for t in pending:
                st.write(f"{t.date} · {display_title(t, categories, subcategories)} · {money(t.amount)}")
        else:
            st.success("No pending expenses")
    with col_recent:
        st.subheader("🕒 Recent transactions")
        for t in recent_transactions(transactions, settings.recent_limit):
            sign = "-" if t.type == EXPENSE else ""
            st.write(f"{t.date} · {category_label(categories, t.category) if t.type != INVESTMENT else 'Investment'} · {sign}{money(t.amount)}")

elif menu == "📑 Reports":
    st.title("📑 Reports")

    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Provisioned income", money(report.total_income))
    c2.metric("Received income", money(report.total_received_income))
    c3.metric("Expenses", money(report.total_expenses))
    c4.metric("Investments", money(report.total_investments))
    c5.metric("Period balance", money(report.balance))

    col_cat, col_inv = st.columns(2)
    with col_cat:
        st.subheader("Monthly statement by category")
        df_exp = breakdown_frame(category_rows(report.expenses_by_category, categories))
        if not df_exp.empty:
            fig_cat = px.bar(df_exp, x="label", y="amount", title="Expenses", template="plotly_dark")
            st.plotly_chart(fig_cat, use_container_width=True)
        st.table(breakdown_frame(category_rows(report.income_by_category, categories)))
    with col_inv:
        st.subheader("Investment statement")
        statement = result["investments"]
        st.write(f"Entries: {money(statement.entries)} · Withdrawals: {money(statement.withdrawals)} · Net: {money(statement.net)}")
        df_bank = breakdown_frame(bank_rows(report.investments_by_bank, bank_accounts))
        if not df_bank.empty:
            st.table(df_bank)
        else:
            st.info("No investments in this period")

    st.subheader("Consolidated monthly summary")
    df_cons = consolidated_frame(consolidated_table(transactions, year))
    st.dataframe(df_cons.round(2), use_container_width=True)
    st.download_button("⬇ Download CSV", df_cons.to_csv(), file_name="consolidated.csv")

    with st.expander("Intermediate steps", expanded=False):
        for step in period["steps"]:
            st.write(step["calculator"], sorted(step.get("output", {}).keys()))

elif menu == "📊 Analytics":
    st.title("📊 Analytics")

    kind = st.selectbox("Type", [EXPENSE, INCOME, INVESTMENT], format_func=str.capitalize)
    col_a, col_b, col_c = st.columns(3)
    with col_a:
        type_cats = [c for c in categories if c.type == kind]
        cat_choice = st.selectbox("Category", [None] + [c.id for c in type_cats],
                                  format_func=lambda cid: "All categories" if cid is None else str(category_label(categories, cid)),
                                  disabled=kind == INVESTMENT)
    with col_b:
        status = st.selectbox("Status", [ALL, "paid", "pending"], disabled=kind == INVESTMENT)
    with col_c:
        sort_by = st.selectbox("Sort by", [k for k in SORT_KEYS if k != ("bank" if kind != INVESTMENT else "category")], index=2)
        order = st.radio("Order", ["asc", "desc"], index=0 if default_order(sort_by) == "asc" else 1, horizontal=True)

    preds = [by_type(kind), by_period(year, month)]
    if kind != INVESTMENT:
        preds += [by_category(cat_choice), by_payment_status(status)]
    selected = select(transactions, *preds)

    st.subheader("Monthly totals")
    if kind == INVESTMENT:
        rows = bank_matrix(selected, bank_accounts, year, sort_by="total")
    else:
        rows = category_matrix(selected, categories, subcategories, kind, year, sort_by="total")
    df_matrix = matrix_frame(rows)
    st.dataframe(df_matrix, use_container_width=True)
    _, grand_total = matrix_totals(rows)
    st.caption(f"Grand total: {money(grand_total)}")

    if kind != INVESTMENT:
        st.subheader("Top categories")
        df_top = pd.DataFrame([{"Category": str(n), "Amount": float(v)} for n, v in top_categories(selected, categories, 5, kind)])
        if not df_top.empty:
            st.plotly_chart(px.bar(df_top, x="Category", y="Amount", template="plotly_dark"), use_container_width=True)

    st.subheader("Detailed transactions")
    groups = grouped_listing(selected, sort_by, order, categories, subcategories, bank_accounts)
    if groups:
        for group in groups:
            with st.expander(f"{group.label} · {group.count} · {money(group.total)}", expanded=False):
                for t in group.transactions:
                    subtitle = display_subtitle(t, categories, subcategories)
                    st.write(f"{t.date} · **{display_title(t, categories, subcategories)}** {subtitle} · {money(t.amount)}")
        df_list = listing_frame(groups, categories, subcategories, bank_accounts)
        st.download_button("⬇ Download Filtered Data", df_list.to_csv(index=False), file_name="transactions_filtered.csv", mime="text/csv")
    else:
        st.info("No transactions match the selected filters")
