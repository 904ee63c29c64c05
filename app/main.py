"""
Streamlit Frontend for FinanceAI

This is the user interface over the finance core:
- Dashboard with totals, alerts, a daily income/expense chart
  and the expense breakdown
- Transaction entry and history
- Budget cards
- Savings goals with contributions
- The advisor chat

DESIGN PRINCIPLES:
1. The UI never writes to the store directly, only through the flows
2. Form input is validated before anything is recorded
3. Every session gets its own store; nothing is shared or persisted
"""

import asyncio

import streamlit as st

from financeai.agents import format_amount
from financeai.audit import configure_logging
from financeai.models.finance import (
    BUDGET_CATEGORIES,
    EXPENSE_CATEGORIES,
    GOAL_CATEGORIES,
    INCOME_CATEGORIES,
    BudgetPeriod,
    BudgetUpdate,
    MessageSender,
    TransactionType,
)
from financeai.models.metrics import BudgetHealth
from financeai.orchestrator import AppComponents, create_app_components
from financeai.services.store import DuplicateError


# Page configuration
st.set_page_config(
    page_title="FinanceAI",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .alert-box {
        padding: 16px;
        background-color: #fef3c7;
        border-radius: 10px;
        border-left: 5px solid #f59e0b;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)

HEALTH_ICONS = {
    BudgetHealth.ON_TRACK: "🟢",
    BudgetHealth.WARNING: "🟡",
    BudgetHealth.OVER_LIMIT: "🔴",
}


def run_async(loop: asyncio.AbstractEventLoop, coro):
    """Run a coroutine on the session's event loop."""
    asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


def get_components() -> AppComponents:
    """Get or create this session's components."""
    if "components" not in st.session_state:
        configure_logging()
        loop = asyncio.new_event_loop()
        st.session_state.loop = loop
        st.session_state.components = create_app_components(loop=loop)
    return st.session_state.components


def show_validation(components: AppComponents, result) -> None:
    summary = components.validator.get_user_friendly_summary(result)
    if result.has_errors:
        st.error(summary)
    elif result.warnings:
        st.warning(summary)


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("📈 FinanceAI")
    st.sidebar.caption("Track • Budget • Achieve")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "💳 Transactions", "🎯 Budgets", "🏦 Savings Goals",
         "🤖 AI Advisor", "📜 Activity"],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard(components)
    elif page == "💳 Transactions":
        render_transactions_page(components)
    elif page == "🎯 Budgets":
        render_budgets_page(components)
    elif page == "🏦 Savings Goals":
        render_goals_page(components)
    elif page == "🤖 AI Advisor":
        render_advisor_page(components)
    elif page == "📜 Activity":
        render_activity_page(components)


def render_dashboard(components: AppComponents):
    """Render the overview page."""
    st.title("📊 Financial Overview")
    metrics = components.metrics
    snapshot = metrics.snapshot()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Income", format_amount(snapshot.total_income))
    col2.metric("Total Expenses", format_amount(snapshot.total_expenses))
    col3.metric("Net Worth", format_amount(snapshot.net_position))
    col4.metric("Savings Progress", f"{snapshot.savings_progress_ratio * 100:.0f}%")

    if snapshot.over_budget_count > 0:
        plural = "s" if snapshot.over_budget_count > 1 else ""
        st.markdown(f"""
        <div class="alert-box">
            <strong>⚠️ Budget Alert</strong><br/>
            You have {snapshot.over_budget_count} budget{plural} that have exceeded their limit.
        </div>
        """, unsafe_allow_html=True)

    left, right = st.columns(2)

    with left:
        st.subheader("Income vs Expenses")
        series = metrics.daily_series()
        st.area_chart(
            {
                "date": [d.day.strftime("%m/%d") for d in series],
                "income": [float(d.income) for d in series],
                "expenses": [float(d.expenses) for d in series],
            },
            x="date",
        )

    with right:
        st.subheader("Expense Breakdown")
        breakdown = metrics.expense_breakdown_by_category()
        if breakdown:
            st.bar_chart(
                {
                    "category": list(breakdown),
                    "amount": [float(v) for v in breakdown.values()],
                },
                x="category",
            )
        else:
            st.info("No expenses recorded yet.")

    st.subheader("Recent Transactions")
    render_transaction_rows(metrics.recent_transactions())


def render_transaction_rows(transactions):
    if not transactions:
        st.info("No transactions yet.")
        return
    for t in transactions:
        sign = "+" if t.type == TransactionType.INCOME else "-"
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.markdown(f"**{t.description or t.category}**  \n{t.category}")
        col2.write(t.transaction_date.strftime("%b %d, %Y"))
        col3.markdown(f"**{sign}{format_amount(t.amount)}**")


def render_transactions_page(components: AppComponents):
    """Render transaction entry and history."""
    st.title("💳 Transactions")

    with st.expander("➕ Add Transaction", expanded=False):
        tx_type = st.selectbox(
            "Type",
            options=[TransactionType.EXPENSE, TransactionType.INCOME],
            format_func=lambda x: x.value.title(),
        )
        categories = EXPENSE_CATEGORIES if tx_type == TransactionType.EXPENSE else INCOME_CATEGORIES

        with st.form("transaction_form", clear_on_submit=True):
            amount = st.text_input("Amount *", placeholder="0.00")
            category = st.selectbox("Category *", options=categories)
            description = st.text_input("Description")
            tx_date = st.date_input("Date")
            submitted = st.form_submit_button("Add Transaction", type="primary")

        if submitted:
            result = components.validator.validate_transaction(
                transaction_type=tx_type,
                amount=amount,
                category=category,
                description=description,
                transaction_date=tx_date,
            )
            show_validation(components, result)
            if result.is_valid:
                components.finance_flow.add_transaction(**result.cleaned)
                st.success("Transaction recorded")

    st.subheader("History")
    render_transaction_rows(components.store.state.transactions)


def render_budgets_page(components: AppComponents):
    """Render budget cards and the add-budget form."""
    st.title("🎯 Budget Tracker")
    st.markdown("Monitor your spending limits and stay on track")

    with st.expander("➕ Add Budget", expanded=False):
        with st.form("budget_form", clear_on_submit=True):
            category = st.selectbox("Category *", options=BUDGET_CATEGORIES)
            limit = st.text_input("Budget Limit *", placeholder="0.00")
            period = st.selectbox(
                "Period *",
                options=list(BudgetPeriod),
                index=list(BudgetPeriod).index(BudgetPeriod.MONTHLY),
                format_func=lambda x: x.value.title(),
            )
            submitted = st.form_submit_button("Add Budget", type="primary")

        if submitted:
            result = components.validator.validate_budget(category, limit, period)
            show_validation(components, result)
            if result.is_valid:
                try:
                    components.finance_flow.add_budget(**result.cleaned)
                    st.success(f"Budget for {category} added")
                except DuplicateError as e:
                    st.error(str(e))

    statuses = components.metrics.budget_statuses()
    if not statuses:
        st.info("No budgets yet.")
        return

    for status in statuses:
        with st.container(border=True):
            st.markdown(f"{HEALTH_ICONS[status.health]} **{status.category}**")
            st.progress(float(status.percentage) / 100)
            col1, col2, col3 = st.columns(3)
            col1.metric("Spent", format_amount(status.spent))
            col2.metric("Limit", format_amount(status.limit))
            col3.metric("Remaining", format_amount(status.remaining))

            new_limit = st.text_input(
                "Adjust limit", key=f"limit_{status.budget_id}", placeholder=str(status.limit)
            )
            if st.button("Update limit", key=f"update_{status.budget_id}") and new_limit:
                result = components.validator.validate_limit(new_limit)
                show_validation(components, result)
                if result.is_valid:
                    components.finance_flow.update_budget(
                        status.budget_id, BudgetUpdate(limit=result.cleaned["limit"])
                    )
                    st.rerun()


def render_goals_page(components: AppComponents):
    """Render savings goals with contributions."""
    st.title("🏦 Savings Goals")
    st.markdown("Track your progress toward financial milestones")

    with st.expander("➕ Add Goal", expanded=False):
        with st.form("goal_form", clear_on_submit=True):
            title = st.text_input("Goal Title *")
            target = st.text_input("Target Amount *", placeholder="0.00")
            deadline = st.date_input("Target Date *")
            category = st.selectbox("Category", options=GOAL_CATEGORIES)
            submitted = st.form_submit_button("Add Goal", type="primary")

        if submitted:
            result = components.validator.validate_goal(title, target, deadline, category)
            show_validation(components, result)
            if result.is_valid:
                components.finance_flow.add_savings_goal(**result.cleaned)
                st.success(f"Goal '{title}' added")

    progress_list = components.metrics.goal_progress()
    if not progress_list:
        st.info("No savings goals yet.")
        return

    for progress in progress_list:
        with st.container(border=True):
            header = f"**{progress.title}**"
            if progress.completed:
                header += "  ✅ Completed!"
            st.markdown(header)
            st.progress(float(progress.percentage) / 100)
            col1, col2, col3 = st.columns(3)
            col1.metric("Saved", format_amount(progress.current_amount))
            col2.metric("Target", format_amount(progress.target_amount))
            days = progress.days_remaining
            col3.metric("Days left", days if days >= 0 else f"{-days} overdue")

            amount = st.text_input(
                "Contribution", key=f"contrib_{progress.goal_id}", placeholder="0.00"
            )
            if st.button("Add Money", key=f"add_{progress.goal_id}") and amount:
                result = components.validator.validate_contribution(amount)
                show_validation(components, result)
                if result.is_valid:
                    components.finance_flow.contribute_to_goal(
                        progress.goal_id, result.cleaned["amount"]
                    )
                    st.rerun()


def render_advisor_page(components: AppComponents):
    """Render the advisor chat."""
    st.title("🤖 AI Financial Advisor")
    chat_flow = components.chat_flow

    history = components.store.state.chat_history
    if not history:
        with st.chat_message("assistant"):
            st.write(chat_flow.greeting)

    for message in history:
        role = "user" if message.sender == MessageSender.USER else "assistant"
        with st.chat_message(role):
            st.write(message.content)

    prompt = st.chat_input("Ask about your finances...")
    if prompt:
        if chat_flow.send_message(prompt) is not None:
            with st.spinner("Advisor is typing..."):
                run_async(st.session_state.loop, chat_flow.wait_for_pending_replies())
        st.rerun()


def render_activity_page(components: AppComponents):
    """Render the session's audit trail."""
    st.title("📜 Activity")
    events = components.audit_logger.recent(50)
    if not events:
        st.info("Nothing has happened yet in this session.")
        return
    for event in events:
        st.markdown(
            f"`{event.timestamp.strftime('%H:%M:%S')}` "
            f"**{event.event_type.value}** {event.description}"
        )


if __name__ == "__main__":
    main()
