"""
Streamlit Frontend for SimpleBudget

This is the user interface for tracking a personal budget day to day.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every figure comes from one computed DashboardSnapshot
3. Clear error messages in simple language
4. Visual feedback for all operations
5. Destructive actions (reset, restore) need explicit confirmation

The UI never computes money itself:
- Reads go through DashboardFlow.load
- Writes go through the ledger / planning / maintenance flows
- Validation problems are shown as returned by the validator
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

import streamlit as st

from simple_budget.aggregation import (
    category_budget_estimate,
    days_until_due,
    monthly_interest_amount,
)
from simple_budget.aggregation.trends import empty_series
from simple_budget.config import validate_all_settings
from simple_budget.models import (
    SUGGESTED_CATEGORIES,
    AccountDraft,
    AccountType,
    BudgetDraft,
    GoalDraft,
    GoalSortOption,
    IncomeFrequency,
    IncomeSource,
    ProgressTier,
    TransactionDraft,
    TransactionType,
)
from simple_budget.orchestrator import AppComponents, create_app_components
from simple_budget.services.storage import DuplicateError, NotFoundError, StorageError
from simple_budget.validation import ValidationFailedError


# Page configuration
st.set_page_config(
    page_title="SimpleBudget",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

TIER_LABELS = {
    ProgressTier.NOMINAL: "🟢 On track",
    ProgressTier.WARNING: "🟠 Getting close",
    ProgressTier.OVER_LIMIT: "🔴 Over budget",
}

PAGES = ["📊 Dashboard", "🧾 Transactions", "📅 Budget", "🎯 Goals", "🏦 Accounts", "⚙️ Settings"]

STORAGE_FAILURE_MESSAGE = "Something went wrong while saving. Your data was not changed."


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    components = create_app_components()
    components.maintenance.seed_default_accounts()
    return components


def money(amount: Optional[Decimal], privacy: bool = False) -> str:
    if amount is None:
        return "—"
    if privacy:
        return "•••••"
    return f"${amount:,.2f}"


def show_validation_error(components: AppComponents, error: ValidationFailedError) -> None:
    st.error(components.validator.get_user_friendly_summary(error.result))


def main():
    """Main application entry point."""
    try:
        components = get_components()
    except StorageError as e:
        st.error(f"❌ Could not open your budget data: {e}")
        return

    preferences = components.preferences.load()

    # Sidebar navigation
    st.sidebar.title("💰 SimpleBudget")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        PAGES,
        index=min(preferences.selected_tab, len(PAGES) - 1),
    )
    selected_tab = PAGES.index(page)
    if selected_tab != preferences.selected_tab:
        preferences = components.preferences.update(selected_tab=selected_tab)

    privacy = st.sidebar.toggle("Privacy mode", value=preferences.privacy_mode)
    if privacy != preferences.privacy_mode:
        preferences = components.preferences.update(privacy_mode=privacy)

    # Route to appropriate page
    try:
        if page == PAGES[0]:
            render_dashboard_page(components, privacy)
        elif page == PAGES[1]:
            render_transactions_page(components, privacy)
        elif page == PAGES[2]:
            render_budget_page(components, privacy)
        elif page == PAGES[3]:
            render_goals_page(components, privacy)
        elif page == PAGES[4]:
            render_accounts_page(components, privacy)
        elif page == PAGES[5]:
            render_settings_page(components)
    except StorageError:
        st.error(STORAGE_FAILURE_MESSAGE)


def render_dashboard_page(components: AppComponents, privacy: bool):
    """Render the dashboard."""
    st.title("📊 Dashboard")
    snapshot = components.dashboard.load()
    summary = snapshot.budget
    net_worth = snapshot.net_worth

    col1, col2, col3 = st.columns(3)
    with col1:
        delta = None
        if net_worth.change_amount is not None and not privacy:
            delta = money(net_worth.change_amount)
        st.metric("Net worth", money(net_worth.net_worth, privacy), delta=delta)
        if not net_worth.has_sufficient_history:
            st.caption("Add more transactions to see how your net worth changes month to month.")
    with col2:
        st.metric("Spent this month", money(summary.total_spent, privacy))
        st.caption(f"Daily average {money(summary.daily_average, privacy)}")
    with col3:
        if summary.has_budget:
            st.metric("Remaining budget", money(summary.remaining_budget, privacy))
        else:
            st.metric("Remaining budget", "—")
            st.caption("No budget set for this month yet.")

    if summary.has_budget and summary.usage_percentage is not None:
        st.progress(
            min(summary.usage_percentage / 100, 1.0),
            text=f"{TIER_LABELS[summary.progress_tier]} · {summary.usage_percentage:.0f}% used",
        )
    st.caption(f"{summary.month_progress}% of the month has passed")

    st.markdown("---")
    left, right = st.columns(2)
    with left:
        st.subheader("Spending by category")
        if summary.category_spending:
            for entry in summary.category_spending:
                st.write(f"**{entry.category}** · {money(entry.amount, privacy)}")
        else:
            st.info("No expenses recorded this month.")
    with right:
        st.subheader("Last 7 days")
        if empty_series(snapshot.weekly_spending):
            st.info("No spending in the last week.")
        else:
            st.bar_chart(
                [{"day": p.day, "amount": float(p.amount)} for p in snapshot.weekly_spending],
                x="day",
                y="amount",
            )

    st.subheader("Monthly spending")
    if not empty_series(snapshot.monthly_spending):
        st.bar_chart(
            [{"month": f"{p.month} {p.year}", "amount": float(p.amount)} for p in snapshot.monthly_spending],
            x="month",
            y="amount",
        )

    st.subheader("Savings goals")
    for goal in snapshot.goals:
        st.progress(goal.progress_ratio, text=f"{goal.name} · {goal.progress_percentage:.0f}%")

    st.subheader("Recent transactions")
    for transaction in snapshot.recent_transactions:
        sign = "-" if transaction.is_expense else "+"
        amount = money(transaction.amount, privacy)
        st.write(
            f"{transaction.date:%b %d} · **{transaction.title}** "
            f"({transaction.category_label}) {sign}{amount}"
        )


def render_transactions_page(components: AppComponents, privacy: bool):
    """Render the transaction list, entry form and export."""
    st.title("🧾 Transactions")
    accounts = components.ledger.accounts()
    account_names = {account.id: account.name for account in accounts}

    with st.expander("➕ Add transaction", expanded=False):
        with st.form("add_transaction", clear_on_submit=True):
            title = st.text_input("Title")
            amount = st.text_input("Amount", placeholder="0.00")
            transaction_type = st.radio(
                "Type",
                list(TransactionType),
                format_func=lambda t: t.value.capitalize(),
                horizontal=True,
            )
            category = st.selectbox("Category", SUGGESTED_CATEGORIES)
            when = st.date_input("Date", value=date.today())
            account_id = st.selectbox(
                "Account",
                [None] + list(account_names),
                format_func=lambda a: "No account" if a is None else account_names[a],
            )
            notes = st.text_area("Notes")
            if st.form_submit_button("Save"):
                try:
                    components.ledger.record_transaction(TransactionDraft(
                        title=title,
                        amount=amount,
                        category=category,
                        date=datetime.combine(when, datetime.now().time()),
                        transaction_type=transaction_type,
                        notes=notes or None,
                        account_id=account_id,
                    ))
                    st.success("✅ Transaction saved")
                except ValidationFailedError as e:
                    show_validation_error(components, e)

    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        start = st.date_input("From", value=today.replace(day=1))
    with col2:
        end = st.date_input("To", value=today)
    date_from = datetime.combine(start, time.min)
    date_to = datetime.combine(end + timedelta(days=1), time.min)

    transactions = components.ledger.transactions(date_from=date_from, date_to=date_to)
    if not transactions:
        st.info("No transactions in this period.")
    for transaction in transactions:
        cols = st.columns([6, 2, 1])
        with cols[0]:
            account = account_names.get(transaction.account_id, "")
            st.write(
                f"{transaction.date:%Y-%m-%d} · **{transaction.title}** · "
                f"{transaction.category_label} {account}"
            )
        with cols[1]:
            sign = "-" if transaction.is_expense else "+"
            st.write(f"{sign}{money(transaction.amount, privacy)}")
        with cols[2]:
            if st.button("🗑️", key=f"delete_{transaction.id}"):
                components.ledger.delete_transaction(transaction.id)
                st.rerun()

    st.markdown("---")
    filename, csv_text = components.maintenance.export_transactions(date_from, date_to, today)
    st.download_button("⬇️ Export CSV", data=csv_text, file_name=filename, mime="text/csv")

    if transactions and st.checkbox("I want to delete every transaction in this period"):
        if st.button("Delete period"):
            deleted = components.ledger.delete_transactions(date_from, date_to)
            st.success(f"Deleted {deleted} transaction(s)")
            st.rerun()


def render_budget_page(components: AppComponents, privacy: bool):
    """Render the monthly budget editor."""
    st.title("📅 Budget")
    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        year = st.number_input("Year", min_value=1900, max_value=9999, value=today.year)
    with col2:
        month = st.selectbox("Month", list(range(1, 13)), index=today.month - 1)

    budget = components.planning.get_budget(int(year), month)
    snapshot = components.dashboard.load(year=int(year), month=month)
    summary = snapshot.budget

    if budget is None:
        st.info("No budget for this month yet.")
    else:
        st.metric("Budget", money(budget.amount, privacy))
        if budget.has_income_sources:
            st.metric("Monthly income", money(summary.total_monthly_income, privacy))
        st.metric("Remaining", money(summary.remaining_budget, privacy))

        st.subheader("Income sources")
        for source in budget.income_sources:
            cols = st.columns([6, 1])
            with cols[0]:
                st.write(f"**{source.name}** · {money(source.amount, privacy)} {source.frequency.value}")
            with cols[1]:
                if st.button("🗑️", key=f"income_{source.id}"):
                    try:
                        components.planning.remove_income_source(int(year), month, source.id)
                        st.rerun()
                    except ValidationFailedError as e:
                        show_validation_error(components, e)

        with st.form("add_income", clear_on_submit=True):
            name = st.text_input("Income source", max_chars=100)
            amount = st.number_input("Amount", min_value=0.0, step=50.0)
            frequency = st.selectbox("Frequency", list(IncomeFrequency), format_func=lambda f: f.value)
            if st.form_submit_button("Add income source") and name.strip():
                try:
                    components.planning.add_income_source(
                        int(year), month,
                        IncomeSource(name=name, amount=Decimal(str(amount)), frequency=frequency),
                    )
                    st.rerun()
                except ValidationFailedError as e:
                    show_validation_error(components, e)

        if summary.category_spending:
            st.subheader("Estimated category budgets")
            for entry in summary.category_spending:
                estimate = category_budget_estimate(entry.category, summary.category_spending, budget.amount)
                st.write(
                    f"**{entry.category}** · spent {money(entry.amount, privacy)} "
                    f"of ~{money(estimate, privacy)}"
                )

        if st.checkbox("I want to delete this month's budget"):
            if st.button("🗑️ Delete budget"):
                components.planning.delete_budget(int(year), month)
                st.rerun()

    st.subheader("Set budget")
    with st.form("budget"):
        amount = st.text_input("Monthly budget", value=str(budget.amount) if budget else "")
        notes = st.text_area("Notes", value=(budget.notes or "") if budget else "")
        if st.form_submit_button("Save budget"):
            try:
                components.planning.save_budget(BudgetDraft(
                    amount=amount,
                    month=month,
                    year=int(year),
                    notes=notes or None,
                    income_sources=budget.income_sources if budget else [],
                ))
                st.success("✅ Budget saved")
                st.rerun()
            except ValidationFailedError as e:
                show_validation_error(components, e)


def render_goals_page(components: AppComponents, privacy: bool):
    """Render savings goals."""
    st.title("🎯 Goals")
    option = st.selectbox("Sort by", list(GoalSortOption), format_func=lambda o: o.value)

    for goal in components.planning.goals(option):
        with st.container(border=True):
            st.progress(goal.progress_ratio, text=f"**{goal.name}** · {goal.progress_percentage:.0f}%")
            st.write(
                f"{money(goal.current_amount, privacy)} of {money(goal.target_amount, privacy)} · "
                f"{money(goal.remaining_amount, privacy)} to go"
            )
            if goal.is_complete:
                st.success("🎉 Goal reached!")
            elif goal.is_past_deadline:
                st.warning(f"Deadline {goal.deadline} has passed")
            elif goal.required_monthly_contribution is not None:
                st.caption(
                    f"Save {money(goal.required_monthly_contribution, privacy)} a month "
                    f"to reach it by {goal.deadline}"
                )

            cols = st.columns([4, 1, 1])
            with cols[0]:
                new_amount = st.text_input("Current amount", key=f"amount_{goal.goal_id}")
            with cols[1]:
                if st.button("Update", key=f"update_{goal.goal_id}"):
                    try:
                        components.planning.update_goal_amount(goal.goal_id, new_amount)
                        st.rerun()
                    except ValidationFailedError as e:
                        show_validation_error(components, e)
            with cols[2]:
                if st.button("🗑️", key=f"delete_goal_{goal.goal_id}"):
                    components.planning.delete_goal(goal.goal_id)
                    st.rerun()

    st.subheader("New goal")
    with st.form("goal", clear_on_submit=True):
        name = st.text_input("Name")
        target = st.text_input("Target amount")
        current = st.text_input("Already saved", value="0")
        has_deadline = st.checkbox("Set a deadline")
        deadline = st.date_input("Deadline", value=date.today() + timedelta(days=180))
        if st.form_submit_button("Create goal"):
            try:
                components.planning.create_goal(GoalDraft(
                    name=name,
                    target_amount=target,
                    current_amount=current,
                    deadline=deadline if has_deadline else None,
                ))
                st.success("✅ Goal created")
                st.rerun()
            except ValidationFailedError as e:
                show_validation_error(components, e)


def render_accounts_page(components: AppComponents, privacy: bool):
    """Render accounts and net worth."""
    st.title("🏦 Accounts")
    snapshot = components.dashboard.load()
    net_worth = snapshot.net_worth

    col1, col2, col3 = st.columns(3)
    col1.metric("Assets", money(net_worth.total_assets, privacy))
    col2.metric("Debt", money(net_worth.total_debt, privacy))
    col3.metric("Net worth", money(net_worth.net_worth, privacy))

    for account in snapshot.accounts:
        with st.container(border=True):
            st.write(f"**{account.name}** · {account.account_type.value} · {money(account.balance, privacy)}")
            if account.is_debt:
                interest = monthly_interest_amount(account)
                if interest > 0:
                    st.caption(f"About {money(interest, privacy)} interest per month")
                days = days_until_due(account)
                if days is not None:
                    st.caption(f"Due {account.due_date} ({days} days)")
                    if days < 0 and st.button("Mark paid", key=f"paid_{account.id}"):
                        components.ledger.advance_due_date(account.id)
                        st.rerun()
            new_name = st.text_input("Rename", key=f"rename_{account.id}")
            if st.button("Rename", key=f"rename_btn_{account.id}") and new_name:
                try:
                    components.ledger.rename_account(account.id, new_name)
                    st.rerun()
                except ValidationFailedError as e:
                    show_validation_error(components, e)
            if st.button("🗑️ Delete", key=f"delete_account_{account.id}"):
                components.ledger.delete_account(account.id)
                st.rerun()

    st.subheader("Add account")
    with st.form("account", clear_on_submit=True):
        name = st.text_input("Name")
        account_type = st.selectbox("Type", list(AccountType), format_func=lambda t: t.value)
        balance = st.text_input("Balance", value="0")
        interest_rate = st.text_input("Interest rate (%)", help="Debt accounts only")
        has_due_date = st.checkbox("Has a due date")
        due_date = st.date_input("Due date", value=date.today())
        if st.form_submit_button("Add account"):
            try:
                components.ledger.add_account(AccountDraft(
                    name=name,
                    account_type=account_type,
                    balance=balance,
                    is_debt=account_type.is_debt_type,
                    interest_rate=interest_rate,
                    due_date=due_date if has_due_date else None,
                ))
                st.success("✅ Account added")
                st.rerun()
            except ValidationFailedError as e:
                show_validation_error(components, e)


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration")
    status = validate_all_settings()
    for name in ("store", "budget", "app"):
        if status.get(name, False):
            st.success(f"✅ {name.capitalize()} settings OK")
        else:
            st.error(f"❌ {name.capitalize()} settings - {status.get(f'{name}_error', 'invalid')}")

    st.markdown("---")
    st.markdown("### Backups")
    if st.button("💾 Create backup"):
        try:
            path = components.maintenance.create_backup()
            st.success(f"Backup saved as {path.name}")
        except DuplicateError:
            st.warning("A backup was taken a moment ago. Wait a second and try again.")

    backups = components.maintenance.list_backups()
    if backups:
        choice = st.selectbox("Restore from", backups, format_func=lambda p: p.name)
        confirm = st.checkbox("I understand restoring replaces all current data")
        if st.button("♻️ Restore", disabled=not confirm):
            try:
                components.maintenance.restore_backup(choice)
                st.success("Store restored")
            except NotFoundError:
                st.error("That backup no longer exists.")
    else:
        st.info("No backups yet.")

    st.markdown("---")
    st.markdown("### Reset")
    confirm_reset = st.checkbox("I understand resetting deletes every account, transaction, budget and goal")
    if st.button("🧹 Reset all data", disabled=not confirm_reset):
        deleted = components.maintenance.reset_store()
        st.success(f"Reset complete ({sum(deleted.values())} records removed)")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "Variables use the `SIMPLE_BUDGET_STORE_` and `SIMPLE_BUDGET_BUDGET_` prefixes."
    )


if __name__ == "__main__":
    main()
