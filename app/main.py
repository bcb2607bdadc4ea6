"""
Streamlit Frontend for WiseVault

Four pages mirror the app's tabs: Dashboard, Bills, Insights, Settings.

DESIGN PRINCIPLES:
1. Every figure on screen comes from the ledger's derived metrics
2. Invalid form input is ignored silently; the form simply stays open
3. One ledger per browser session, held in session_state
4. Currency only changes the symbol shown, never the numbers
"""

import html
import logging
import time
from datetime import date

import streamlit as st

from wisevault import __version__
from wisevault.config import get_settings, validate_all_settings
from wisevault.formatting import format_money, format_signed, ordinal
from wisevault.ledger import metrics
from wisevault.models.ledger import MAX_BILL_NAME_LENGTH, Currency, TransactionType
from wisevault.orchestrator import AppComponents, create_app_components
from wisevault.services.export import bills_to_csv, transactions_to_csv


# Page configuration
st.set_page_config(
    page_title="WiseVault",
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
    .splash {
        text-align: center;
        margin-top: 20vh;
        font-size: 3em;
        font-weight: bold;
        color: #1f77b4;
    }
    .bill-card {
        padding: 16px;
        border-radius: 12px;
        border: 1px solid rgba(128, 128, 128, 0.2);
        margin: 6px 0;
    }
    .positive { color: #28a745; }
    .negative { color: #dc3545; }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


def get_components() -> AppComponents:
    """Get or create this session's components."""
    if "components" not in st.session_state:
        logging.basicConfig(level=get_settings().app.log_level)
        st.session_state.components = create_app_components(use_storage=True)
    return st.session_state.components


def show_splash() -> None:
    """One-shot intro screen at the start of a session."""
    if st.session_state.get("splash_done"):
        return
    placeholder = st.empty()
    with placeholder.container():
        st.markdown('<div class="splash">WiseVault</div>', unsafe_allow_html=True)
        with st.spinner(""):
            time.sleep(get_settings().app.splash_delay_seconds)
    placeholder.empty()
    st.session_state.splash_done = True


def _tone(amount) -> str:
    return "positive" if amount >= 0 else "negative"


def main():
    """Main application entry point."""
    show_splash()
    components = get_components()
    currency = components.store.preferences.currency

    st.sidebar.title("💰 WiseVault")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Bills", "📈 Insights", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.caption(f"Balance: {format_money(components.store.balance, currency)}")

    if page == "📊 Dashboard":
        render_dashboard_page(components, currency)
    elif page == "🧾 Bills":
        render_bills_page(components, currency)
    elif page == "📈 Insights":
        render_insights_page(components, currency)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_dashboard_page(components: AppComponents, currency: Currency):
    """Balance card, budget overview and the transaction list."""
    st.title("📊 Dashboard")
    store = components.store
    summary = store.summary()

    # Balance card
    st.markdown(f"""
    <div>
        <p>Current Balance</p>
        <div class="big-number {_tone(summary.balance)}">{format_money(summary.balance, currency)}</div>
        <h4 class="{_tone(summary.after_bills)}">After Bills: {format_money(summary.after_bills, currency)}</h4>
    </div>
    """, unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    col1.metric("Income", format_money(summary.total_income, currency))
    col2.metric("Expenses", format_money(summary.total_expenses, currency))

    # Budget overview
    st.markdown("### Budget Overview")
    budget = summary.budget
    st.markdown(f"**Monthly** {format_money(budget.spent, currency)}"
                + (" ⚠️" if budget.is_near_limit else ""))
    st.progress(budget.spending_progress)
    st.caption(f"Limit: {format_money(budget.monthly_limit, currency)}")

    st.markdown(f"**Savings** {format_money(budget.saved_amount, currency)}")
    st.progress(budget.savings_progress)
    st.caption(f"Goal: {format_money(budget.savings_goal, currency)}")

    # Add transaction
    st.markdown("---")
    with st.expander("➕ Add Transaction"):
        with st.form("add_transaction"):
            amount = st.text_input("Amount")
            description = st.text_input("Description")
            txn_type = st.radio(
                "Type",
                options=[TransactionType.EXPENSE, TransactionType.INCOME],
                format_func=lambda t: t.value.title(),
                horizontal=True,
            )
            if st.form_submit_button("Add", type="primary"):
                if components.transactions.submit_transaction(amount, description, txn_type):
                    st.rerun()

    # Transaction list
    st.markdown("### Transactions")
    if not store.transactions:
        st.caption("No transactions yet")
    for transaction in store.transactions:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(f"**{transaction.description}**")
            st.caption(transaction.date.strftime("%b %d, %Y %H:%M"))
        with col2:
            tone = "positive" if transaction.is_income else "negative"
            st.markdown(
                f'<span class="{tone}">{format_signed(transaction, currency)}</span>',
                unsafe_allow_html=True,
            )
        with col3:
            if st.button("🗑️", key=f"del-{transaction.id}"):
                components.transactions.delete_transaction(transaction.id)
                st.rerun()


def render_bills_page(components: AppComponents, currency: Currency):
    """Bills sorted by due day, with paid toggles and the add-bill form."""
    st.title("🧾 Bills")
    store = components.store

    bills = store.bills_by_due_day()
    if not bills:
        st.caption("No bills added yet")

    columns = st.columns(3)
    for index, bill in enumerate(bills):
        with columns[index % 3]:
            st.markdown(f"""
            <div class="bill-card">
                <h4>{html.escape(bill.name)}</h4>
                <p>{format_money(bill.amount, currency)}</p>
                <small>Due: {ordinal(bill.due_day)} of month</small>
            </div>
            """, unsafe_allow_html=True)
            label = "✅ Paid" if bill.is_paid else "⭕ Mark as Paid"
            if st.button(label, key=f"toggle-{bill.id}"):
                components.bills.toggle_paid(bill.id)
                st.rerun()
            if st.button("Remove", key=f"remove-{bill.id}"):
                components.bills.remove_bill(bill.id)
                st.rerun()

    st.markdown(f"#### Total to fund: {format_money(store.unpaid_bills_total, currency)}")

    st.markdown("---")
    with st.expander("➕ Add Bill"):
        with st.form("add_bill"):
            amount = st.text_input("Amount")
            name = st.text_input("Bill Name", max_chars=MAX_BILL_NAME_LENGTH)
            due_day = st.number_input("Due Day", min_value=1, max_value=31, value=1, step=1)
            recurring = st.checkbox("Monthly Recurrence", value=True)
            if st.form_submit_button("Add", type="primary"):
                if components.bills.submit_bill(amount, name, int(due_day), recurring):
                    st.rerun()


def render_insights_page(components: AppComponents, currency: Currency):
    """Spending per month."""
    st.title("📈 Insights")
    spending = metrics.monthly_spending(components.store.transactions)

    if not spending:
        st.info("Insights will appear once you record some expenses.")
        return

    labels = [date(year, month, 1).strftime("%b %Y") for year, month in spending]
    st.bar_chart(
        {"Month": labels, "Spent": [float(v) for v in spending.values()]},
        x="Month",
        y="Spent",
    )

    this_month = components.store.total_spent_this_month()
    st.metric("Spent this month", format_money(this_month, currency))


def render_settings_page(components: AppComponents):
    """Budget targets, preferences, data management, activity."""
    st.title("⚙️ Settings")
    store = components.store
    budget = store.budget
    prefs = store.preferences

    with st.form("settings"):
        st.markdown("### Budget Settings")
        monthly_limit = st.text_input("Monthly Limit", value=str(budget.monthly_limit))
        savings_goal = st.text_input("Savings Goal", value=str(budget.savings_goal))

        st.markdown("### Preferences")
        currency = st.selectbox(
            "Currency",
            options=list(Currency),
            index=list(Currency).index(prefs.currency),
            format_func=lambda c: c.label,
        )
        use_biometrics = st.toggle("Use Face ID / Touch ID", value=prefs.use_biometrics)

        if st.form_submit_button("Save", type="primary"):
            if components.settings.submit_settings(
                monthly_limit, savings_goal, currency, use_biometrics
            ):
                st.rerun()

    st.markdown("### Data Management")
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            "Export Transactions (CSV)",
            data=transactions_to_csv(store.transactions),
            file_name="transactions.csv",
            mime="text/csv",
        )
        st.download_button(
            "Export Bills (CSV)",
            data=bills_to_csv(store.bills),
            file_name="bills.csv",
            mime="text/csv",
        )
        if st.button("Export to folder"):
            paths = components.settings.export_data()
            st.success("Exported: " + ", ".join(str(p) for p in paths))
    with col2:
        confirm = st.checkbox("I understand this cannot be undone")
        if st.button("Clear All Data", disabled=not confirm):
            components.settings.clear_all_data()
            st.rerun()

    st.markdown("### Recent Activity")
    limit = get_settings().app.recent_activity_limit
    for event in components.settings.recent_activity(limit):
        st.caption(f"{event.timestamp.strftime('%H:%M:%S')} · {event.description}")

    st.markdown("### About")
    st.markdown(f"Version {__version__}")
    storage = components.storage
    st.caption(f"Storage: {storage.location if storage else 'this session only'}")

    status = validate_all_settings()
    for name in ("app", "budget", "storage"):
        if status[name]:
            st.success(f"✅ {name} settings")
        else:
            st.error(f"❌ {name} settings: {status[f'{name}_error']}")
    if not all(status[name] for name in ("app", "budget", "storage")):
        st.info("See `.env.example` for the available variables.")


if __name__ == "__main__":
    main()
