"""Dashboard view: headline numbers, recent expenses and top categories.

To run the app from the command line::

    streamlit run expense_tracker/Home.py
"""

from __future__ import annotations

from datetime import date

import streamlit as st

try:
    from . import db
    from .formatting import escape_dollar_for_markdown, format_currency
    from .overview import load_dashboard
    from .shared_sidebar import render_shared_sidebar, show_store_error
except ImportError:
    import db
    from formatting import escape_dollar_for_markdown, format_currency
    from overview import load_dashboard
    from shared_sidebar import render_shared_sidebar, show_store_error


def main() -> None:
    """Render the Dashboard page."""
    st.set_page_config(page_title="Dashboard", page_icon="💰", layout="wide")
    sidebar = render_shared_sidebar()
    user_id = sidebar['user_id']
    currency = sidebar['currency']

    st.header("💰 Dashboard")
    st.caption("Overview of your expenses and budgets")

    today = date.today()
    try:
        summary = load_dashboard(user_id, today=today)
    except db.DataStoreError as exc:
        show_store_error("load dashboard data", exc)
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("💸 Total Expenses", format_currency(summary['total_expenses'], currency), help="All time")
    with col2:
        st.metric("📅 This Month", format_currency(summary['monthly_expenses'], currency))
    with col3:
        st.metric(
            "🎯 Budget Used",
            f"{summary['budget_progress']:.0f}%",
            help=(
                f"{format_currency(summary['budget_used'], currency)} of "
                f"{format_currency(summary['total_budget'], currency)} in monthly budgets"
            ),
        )
        st.progress(min(summary['budget_progress'], 100.0) / 100.0)
    with col4:
        st.metric("📈 Daily Average", format_currency(summary['daily_average'], currency), help="This month")

    left, right = st.columns(2)
    with left:
        st.subheader("🧾 Recent Expenses")
        recent = summary['recent_expenses']
        if not recent:
            st.info("No expenses yet. Add your first expense on the Expenses page.")
        for expense in recent:
            category = expense.category.name if expense.category else "Uncategorized"
            day = expense.expense_date.strftime('%b %d, %Y') if expense.expense_date else ''
            st.markdown(escape_dollar_for_markdown(
                f"**{expense.title}** · {category} · {day}  \n"
                f"-{format_currency(expense.amount, currency)}"
            ))

    with right:
        st.subheader("🏷️ Top Categories This Month")
        top = summary['top_categories']
        if top.empty:
            st.info("No spending recorded this month.")
        for _, row in top.iterrows():
            st.markdown(
                f"<span style='color:{row['Color']}'>●</span> **{row['Category']}** "
                f"{escape_dollar_for_markdown(format_currency(row['Amount'], currency))}",
                unsafe_allow_html=True,
            )
            st.progress(min(float(row['Percentage']), 100.0) / 100.0)


if __name__ == "__main__":
    main()
