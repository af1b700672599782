"""
Streamlit Dashboard for Meal Claims Tracker

A desktop-friendly front end over the same flows the HTTP API uses.

Pages:
1. Add Expense - form with optional receipt photo
2. Expenses - today's allowance, period totals, newest-first list
3. Public Holidays - reference list of holidays
4. Export - download the claim spreadsheet with receipts as a zip

Run with:
    streamlit run app/main.py
"""

from datetime import date

import streamlit as st

from meal_tracker.config import get_settings
from meal_tracker.logs import configure_logging
from meal_tracker.models.expense import ExpenseInput, HolidayInput, ReceiptUpload
from meal_tracker.orchestrator import (
    ExpenseFlow,
    ExportFlow,
    HolidayFlow,
    create_app_components,
)
from meal_tracker.services.storage import NotFoundError, StorageError
from meal_tracker.validation import ValidationFailedError


# Page configuration
st.set_page_config(
    page_title="Meal Claims Tracker",
    page_icon="🍱",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .over-limit {
        color: #dc3545;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    settings = get_settings()
    configure_logging(settings.log_level)
    return create_app_components(settings)


def main():
    """Main application entry point."""
    components = get_components()
    currency = components.settings.currency_label

    st.sidebar.title("🍱 Meal Claims")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Expense", "📋 Expenses", "📅 Public Holidays", "📦 Export"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        f"""
        **Claim rules:**
        - Monday to Friday only
        - No future dates
        - Single receipts above {currency}{components.settings.transaction_cap:.2f} are stored at the cap
        - Daily claims are capped at {currency}{components.settings.daily_cap:.2f}
        """
    )

    if page == "➕ Add Expense":
        render_add_page(components.expense_flow)
    elif page == "📋 Expenses":
        render_expenses_page(components.expense_flow, currency)
    elif page == "📅 Public Holidays":
        render_holidays_page(components.holiday_flow)
    elif page == "📦 Export":
        render_export_page(components.export_flow)


def render_add_page(expense_flow: ExpenseFlow):
    """Render the add expense form."""
    st.title("➕ Add Expense")

    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)

        with col1:
            expense_date = st.date_input("Date *", value=date.today(), max_value=date.today())
            amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")

        with col2:
            place = st.text_input("Place/Restaurant *", placeholder="e.g. Nasi Kandar Pelita")
            receipt_file = st.file_uploader(
                "Receipt photo (optional)",
                type=get_settings().supported_formats_list,
            )

        submitted = st.form_submit_button("💾 Save Expense", type="primary")

    if not submitted:
        return

    receipt = None
    if receipt_file is not None:
        receipt = ReceiptUpload(
            filename=receipt_file.name,
            content=receipt_file.getvalue(),
            content_type=receipt_file.type,
        )

    form = ExpenseInput(
        date=expense_date.isoformat(),
        amount=str(amount),
        place=place,
    )

    try:
        expense = expense_flow.add_expense(form, receipt)
    except ValidationFailedError as e:
        st.error(str(e))
        return
    except StorageError:
        st.error("Failed to add expense")
        return

    st.success(
        f"Saved {expense.day} {expense.date.isoformat()} - {expense.place} "
        f"({expense.amount:.2f})"
    )


def render_expenses_page(expense_flow: ExpenseFlow, currency: str):
    """Render the summary cards and the expense list."""
    st.title("📋 Expenses")

    try:
        summary = expense_flow.summarize()
        expenses = expense_flow.list_expenses()
    except StorageError:
        st.error("Failed to load expenses")
        return

    st.markdown(f"### Today: {currency} {summary.today_total:.2f}")
    st.progress(int(summary.usage_percent))
    if summary.over_limit > 0:
        st.markdown(
            f'<p class="over-limit">Can only claim {currency} {summary.daily_cap:.2f} '
            f'({currency} {summary.over_limit:.2f} over limit)</p>',
            unsafe_allow_html=True,
        )
    else:
        st.caption(f"{currency} {summary.remaining_today:.2f} remaining")

    col1, col2, col3 = st.columns(3)
    col1.metric("This Week", f"{currency} {summary.week_total:.2f}")
    col2.metric("This Month", f"{currency} {summary.month_total:.2f}")
    col3.metric("Overall", f"{currency} {summary.overall_total:.2f}")

    st.markdown("---")

    if not expenses:
        st.info("No expenses added yet")
        return

    for expense in expenses:
        col1, col2, col3, col4, col5 = st.columns([2, 2, 2, 4, 1])
        col1.write(expense.date.isoformat())
        col2.write(expense.day)
        col3.write(f"{currency} {expense.amount:.2f}")
        col4.write(expense.place)
        if col5.button("🗑️", key=f"delete_{expense.id}", help="Delete expense"):
            try:
                expense_flow.delete_expense(expense.id)
            except NotFoundError:
                st.warning("Expense was already deleted")
            st.rerun()


def render_holidays_page(holiday_flow: HolidayFlow):
    """Render the public holiday list and form."""
    st.title("📅 Public Holidays")

    with st.form("holiday_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        holiday_date = col1.date_input("Date *")
        name = col2.text_input("Name *", placeholder="e.g. Hari Merdeka")
        submitted = st.form_submit_button("Add Holiday")

    if submitted:
        try:
            holiday_flow.add_holiday(HolidayInput(date=holiday_date.isoformat(), name=name))
            st.success("Public holiday added successfully")
        except ValidationFailedError as e:
            st.error(str(e))
        except StorageError:
            st.error("Failed to add holiday")

    try:
        holidays = holiday_flow.list_holidays()
    except StorageError:
        st.error("Failed to load holidays")
        return

    if not holidays:
        st.info("No public holidays added yet")
        return

    for holiday in holidays:
        col1, col2, col3 = st.columns([2, 5, 1])
        col1.write(holiday.date.isoformat())
        col2.write(holiday.name)
        if col3.button("🗑️", key=f"holiday_{holiday.id}"):
            try:
                holiday_flow.delete_holiday(holiday.id)
            except NotFoundError:
                st.warning("Holiday was already deleted")
            except StorageError:
                st.error("Failed to delete holiday")
                return
            st.rerun()


def render_export_page(export_flow: ExportFlow):
    """Render the export page."""
    st.title("📦 Export")
    st.markdown(
        "Download a spreadsheet of every expense, grouped by day with capped "
        "daily totals, together with all receipt photos."
    )

    try:
        report = export_flow.build_report()
    except StorageError:
        st.error("Failed to load expenses")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Expenses", report.expense_count)
    col2.metric("Days", report.day_count)
    col3.metric("Total Claimable", f"{report.total_claimable:.2f}")

    if st.button("📦 Prepare Export", type="primary"):
        with st.spinner("Building archive..."):
            try:
                filename, archive = export_flow.export_archive()
            except Exception as e:
                st.error(f"Failed to export: {e}")
                return
        st.download_button(
            "⬇️ Download",
            data=archive,
            file_name=filename,
            mime="application/zip",
        )


if __name__ == "__main__":
    main()
