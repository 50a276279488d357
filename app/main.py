"""
Streamlit Frontend for Budget & Loan Tracker

The user interface for recording expenses, loans and loan payments.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every action re-renders from the state the tracker returns
3. Errors are shown next to the data, never instead of it
4. Rows are addressed by their stored index, not by display order

All reads and writes go through BudgetTracker; this module never
touches storage directly.
"""

from datetime import date

import streamlit as st

from budget_tracker.config import validate_all_settings
from budget_tracker.models import INDEFINITE_TERM, Expense, Loan, Payment
from budget_tracker.orchestrator import BudgetTracker, create_app_components


# Page configuration
st.set_page_config(
    page_title="Budget & Loan Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_storage=False)


def show_error(envelope) -> None:
    """Show an envelope's error, if any."""
    if getattr(envelope, "error", None):
        st.error(f"❌ {envelope.error}")


def money(value) -> str:
    return f"{value:,.2f}"


def describe_loan(loan: Loan) -> str:
    category = loan.category or "Uncategorised"
    return f"#{loan.index} {category} - {money(loan.total_amount)} @ {loan.apr}%"


def describe_expense(expense: Expense) -> str:
    return f"{expense.date_label} {expense.category} {money(expense.amount)} {expense.description}"


def describe_payment(payment: Payment) -> str:
    return f"#{payment.index} loan #{payment.loan_index} - {payment.date.isoformat()} {money(payment.amount)}"


def main():
    """Main application entry point."""
    tracker, sheets_client = get_components()

    # Sidebar navigation
    st.sidebar.title("💰 Budget & Loan Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🧾 Expenses", "🏷️ Categories", "🏦 Loans", "💸 Payments", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if sheets_client is None:
        st.sidebar.warning("Running without Google Sheets: data is kept in memory only.")

    # Route to appropriate page
    if page == "🧾 Expenses":
        render_expenses_page(tracker)
    elif page == "🏷️ Categories":
        render_categories_page(tracker)
    elif page == "🏦 Loans":
        render_loans_page(tracker)
    elif page == "💸 Payments":
        render_payments_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(tracker, sheets_client)


def render_expenses_page(tracker: BudgetTracker):
    """Render the expenses page: add, search, delete and totals."""
    st.title("🧾 Expenses")

    categories = tracker.get_categories()

    with st.form("add_expense", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            expense_date = st.date_input("Date", value=date.today())
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        with col2:
            category = st.selectbox("Category", options=categories or ["Other"])
            description = st.text_input("Description")
        submitted = st.form_submit_button("➕ Add Expense", type="primary")

    if submitted:
        summary = tracker.add_expense(expense_date, amount, description, category)
        if summary.error:
            show_error(summary)
        else:
            st.success("✅ Expense added")

    st.markdown("---")

    search = st.text_input(
        "🔍 Search",
        placeholder="Date, description or category",
        help="Matches anywhere in the date (YYYY-MM-DD), description or category",
    )
    summary = tracker.get_expenses(search or None)
    show_error(summary)

    st.markdown(f'<div class="big-number">{money(summary.total)}</div>', unsafe_allow_html=True)

    if not summary.expenses:
        st.info("📋 No expenses yet.")
        return

    st.dataframe(
        [
            {
                "Date": e.date_label,
                "Amount": float(e.amount),
                "Description": e.description,
                "Category": e.category,
            }
            for e in summary.expenses
        ],
        use_container_width=True,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### Monthly")
        for month, totals in summary.monthly_expenses.items():
            with st.expander(month):
                for name, total in totals.items():
                    st.markdown(f"- **{name}:** {money(total)}")
    with col2:
        st.markdown("### Overall")
        for name, total in summary.overall_expenses.items():
            st.markdown(f"- **{name}:** {money(total)}")

    st.markdown("---")
    to_remove = st.selectbox(
        "Delete expense",
        options=summary.expenses,
        format_func=describe_expense,
    )
    if st.button("🗑️ Delete Expense") and to_remove is not None:
        result = tracker.remove_expense(to_remove.index)
        if result.error:
            show_error(result)
        else:
            st.rerun()


def render_categories_page(tracker: BudgetTracker):
    """Render the category list."""
    st.title("🏷️ Categories")

    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("New category")
        submitted = st.form_submit_button("➕ Add Category", type="primary")

    if submitted:
        if not name.strip():
            st.warning("⚠️ Category name cannot be blank.")
        else:
            tracker.add_category(name)
            st.success(f"✅ Added {name.strip()}")

    for category in tracker.get_categories():
        st.markdown(f"- {category}")


def loan_form(key: str, loan: Loan = None):
    """Loan input fields. Returns (submitted, values)."""
    with st.form(key):
        col1, col2 = st.columns(2)
        with col1:
            total_amount = st.number_input(
                "Total Amount",
                min_value=0.0,
                value=float(loan.total_amount) if loan else 0.0,
                step=100.0,
                format="%.2f",
            )
            apr = st.number_input(
                "APR (%)",
                min_value=0.0,
                value=float(loan.apr) if loan else 0.0,
                step=0.1,
                format="%.2f",
            )
            term = st.number_input(
                "Term (months, 0 = indefinite)",
                min_value=0,
                value=0 if loan is None or loan.is_indefinite else int(loan.term),
                step=1,
            )
        with col2:
            category = st.text_input("Category", value=loan.category if loan else "")
            monthly_payment = st.number_input(
                "Monthly Payment (0 = calculate)",
                min_value=0.0,
                value=0.0,
                step=10.0,
                format="%.2f",
            )
        submitted = st.form_submit_button("💾 Save Loan", type="primary")

    values = {
        "total_amount": total_amount,
        "apr": apr,
        "term": term,
        "category": category,
        "monthly_payment": monthly_payment or None,
    }
    return submitted, values


def render_loans_page(tracker: BudgetTracker):
    """Render the loans page: add, edit and delete."""
    st.title("🏦 Loans")

    with st.expander("➕ Add Loan", expanded=False):
        submitted, values = loan_form("add_loan")
        if submitted:
            result = tracker.add_loan(**values)
            if result.error:
                show_error(result)
            else:
                st.success("✅ Loan added")

    result = tracker.get_loans()
    show_error(result)

    if not result.loans:
        st.info("📋 No loans yet.")
        return

    st.dataframe(
        [
            {
                "#": loan.index,
                "Category": loan.category,
                "Total": float(loan.total_amount),
                "APR": float(loan.apr),
                "Term": str(loan.term),
                "Monthly": float(loan.monthly_payment),
                "Total Interest": float(loan.total_interest),
                "Remaining": float(loan.remaining_balance),
            }
            for loan in result.loans
        ],
        use_container_width=True,
    )

    st.markdown("---")
    selected = st.selectbox("Select loan", options=result.loans, format_func=describe_loan)
    if selected is None:
        return

    with st.expander("✏️ Edit Loan"):
        st.caption(
            "Saving restarts the balance at the total amount and re-applies "
            "this loan's payments."
        )
        submitted, values = loan_form(f"edit_loan_{selected.index}", selected)
        if submitted:
            updated = tracker.update_loan(selected.index, **values)
            if updated.error:
                show_error(updated)
            else:
                st.rerun()

    if selected.is_indefinite:
        st.caption(f"Term: {INDEFINITE_TERM}")

    confirm = st.checkbox("I understand this also deletes the loan's payments")
    if st.button("🗑️ Delete Loan", disabled=not confirm):
        removed = tracker.remove_loan(selected.index)
        if removed.error:
            show_error(removed)
        else:
            st.rerun()


def render_payments_page(tracker: BudgetTracker):
    """Render the payments page: add, edit and delete."""
    st.title("💸 Payments")

    snapshot = tracker.get_initial_data()
    show_error(snapshot)

    if not snapshot.loans:
        st.info("📋 Add a loan before recording payments.")
        return

    with st.form("add_payment", clear_on_submit=True):
        loan = st.selectbox("Loan", options=snapshot.loans, format_func=describe_loan)
        col1, col2 = st.columns(2)
        with col1:
            paid_on = st.date_input("Date", value=date.today())
        with col2:
            amount = st.number_input(
                "Amount",
                min_value=0.0,
                value=float(loan.monthly_payment) if loan else 0.0,
                step=10.0,
                format="%.2f",
            )
        submitted = st.form_submit_button("➕ Add Payment", type="primary")

    if submitted and loan is not None:
        result = tracker.add_payment(loan.index, paid_on, amount)
        if result.error:
            show_error(result)
        else:
            st.rerun()

    if not snapshot.payments:
        st.info("📋 No payments yet.")
        return

    st.dataframe(
        [
            {
                "#": p.index,
                "Loan": p.loan_index,
                "Date": p.date.isoformat(),
                "Amount": float(p.amount),
                "Principal": float(p.principal_paid),
                "Interest": float(p.interest_paid),
                "Remaining": float(p.remaining_balance),
                "Payments Left": "N/A" if p.payments_left is None else p.payments_left,
            }
            for p in snapshot.payments
        ],
        use_container_width=True,
    )

    st.markdown("---")
    selected = st.selectbox("Select payment", options=snapshot.payments, format_func=describe_payment)
    if selected is None:
        return

    loans_by_index = {loan.index: loan for loan in snapshot.loans}
    loan_options = list(loans_by_index)

    with st.expander("✏️ Edit Payment"):
        with st.form(f"edit_payment_{selected.index}"):
            loan_index = st.selectbox(
                "Loan",
                options=loan_options,
                index=loan_options.index(selected.loan_index) if selected.loan_index in loans_by_index else 0,
                format_func=lambda i: describe_loan(loans_by_index[i]),
            )
            paid_on = st.date_input("Date", value=selected.date)
            amount = st.number_input(
                "Amount",
                min_value=0.0,
                value=float(selected.amount),
                step=10.0,
                format="%.2f",
            )
            submitted = st.form_submit_button("💾 Save Payment", type="primary")

        if submitted:
            result = tracker.update_payment(selected.index, loan_index, paid_on, amount)
            if result.error:
                show_error(result)
            else:
                st.rerun()

    if st.button("🗑️ Delete Payment"):
        result = tracker.remove_payment(selected.index)
        if result.error:
            show_error(result)
        else:
            st.rerun()


def render_settings_page(tracker: BudgetTracker, sheets_client):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if sheets_client is None:
        st.warning("Google Sheets is not in use. Data will be lost when the app restarts.")

    settings = tracker.settings
    st.markdown("### Loan Arithmetic")
    st.markdown(f"- **Payment recalculation:** {settings.payment_recalculation.value}")
    st.markdown(f"- **Indefinite interest (add):** {settings.indefinite_interest_on_create.value}")
    st.markdown(f"- **Indefinite interest (edit):** {settings.indefinite_interest_on_update.value}")
    st.markdown(f"- **Timezone:** {settings.timezone}")

    st.markdown("---")
    st.markdown("### Import Legacy Loans")
    st.markdown(
        "Copies loans from the old single-sheet layout "
        "(Total Amount, APR, Term, Category) into the Loans sheet."
    )
    source = st.text_input("Source sheet", value="Sheet1")
    force = st.checkbox("Import even if Loans already has data")
    if st.button("📥 Import", type="primary"):
        report = tracker.import_legacy_loans(source or None, force=force)
        if report.error:
            show_error(report)
        elif not report.source_found:
            st.warning(f"⚠️ No sheet named '{report.source_table}' found.")
        else:
            st.success(f"✅ Imported {report.imported} loan(s)")
        for message in report.skipped:
            st.warning(f"Skipped {message}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with "
        "`GOOGLE_SHEETS_CREDENTIALS_PATH` and `GOOGLE_SHEETS_SPREADSHEET_ID`. "
        "Loan behaviour is set with `PAYMENT_RECALCULATION`, "
        "`INDEFINITE_INTEREST_ON_CREATE` and `INDEFINITE_INTEREST_ON_UPDATE`."
    )


if __name__ == "__main__":
    main()
