"""
Streamlit Frontend for Money Tracker

Pages:
- /            Welcome (public), or the dashboard once signed in
- /login       Email/password or Google sign-in
- /register    Account creation
- /transactions, /categories, /settings  (signed-in only)

Every navigation goes through the RouteGuard, which waits for the session
to settle before deciding where the user may go.
"""

import asyncio
from datetime import date

import streamlit as st

from money_tracker.config import validate_all_settings
from money_tracker.formatting import (
    CURRENCIES,
    DATE_FORMATS,
    THEMES,
    format_currency,
    format_date,
    format_percentage,
)
from money_tracker.models import TransactionKind, UserSettings
from money_tracker.orchestrator import AppContext, create_app_context
from money_tracker.routing import GuardAction


# Page configuration
st.set_page_config(
    page_title="Money Tracker",
    page_icon="💸",
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
        font-size: 2.2em;
        font-weight: bold;
        color: #2c3e50;
    }
    .income { color: #16a34a; }
    .expense { color: #dc2626; }
</style>
""", unsafe_allow_html=True)


PAGES = {
    "🏠 Dashboard": "/",
    "💳 Transactions": "/transactions",
    "🏷️ Categories": "/categories",
    "⚙️ Settings": "/settings",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_context() -> AppContext:
    """Get or create this browser session's AppContext."""
    if "app_context" not in st.session_state:
        context = create_app_context()
        run_async(context.start(timeout=10))
        st.session_state.app_context = context
    return st.session_state.app_context


def navigate(path: str) -> None:
    st.session_state.path = path
    st.rerun()


def main():
    """Main application entry point."""
    context = get_context()

    if "path" not in st.session_state:
        st.session_state.path = "/"

    decision = run_async(context.guard.resolve(st.session_state.path))
    if decision.action == GuardAction.REDIRECT:
        navigate(decision.target)

    render_sidebar(context)

    path = st.session_state.path
    if path == "/login":
        render_login_page(context)
    elif path == "/register":
        render_register_page(context)
    elif path == "/transactions":
        render_transactions_page(context)
    elif path == "/categories":
        render_categories_page(context)
    elif path == "/settings":
        render_settings_page(context)
    elif context.identity is not None:
        render_dashboard_page(context)
    else:
        render_welcome_page()


def render_sidebar(context: AppContext):
    st.sidebar.title("💸 Money Tracker")
    st.sidebar.markdown("---")

    identity = context.identity
    if identity is None:
        if st.sidebar.button("🔑 Sign in"):
            navigate("/login")
        if st.sidebar.button("📝 Create account"):
            navigate("/register")
        return

    st.sidebar.markdown(f"Signed in as **{identity.email or identity.uid}**")
    current = next(
        (label for label, path in PAGES.items() if path == st.session_state.path),
        "🏠 Dashboard",
    )
    page = st.sidebar.radio(
        "Navigate to:",
        list(PAGES),
        index=list(PAGES).index(current),
    )
    if PAGES[page] != st.session_state.path:
        navigate(PAGES[page])

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sign out"):
        run_async(context.sign_out())
        navigate("/login")


def render_welcome_page():
    st.title("💸 Money Tracker")
    st.markdown(
        """
        Keep track of where your money comes from and where it goes.

        - Record income and expenses
        - Group them into your own categories
        - Watch your monthly budget
        """
    )


def render_login_page(context: AppContext):
    st.title("🔑 Sign in")

    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        try:
            run_async(context.sign_in(email, password))
            navigate("/")
        except Exception as e:
            st.error(f"Sign in failed: {e}")

    with st.expander("Sign in with Google"):
        id_token = st.text_input("Google ID token", type="password")
        if st.button("Continue with Google") and id_token:
            try:
                run_async(context.sign_in_with_federated_provider(id_token))
                navigate("/")
            except Exception as e:
                st.error(f"Google sign in failed: {e}")

    if st.button("No account yet? Register"):
        navigate("/register")


def render_register_page(context: AppContext):
    st.title("📝 Create account")

    with st.form("register"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm password", type="password")
        submitted = st.form_submit_button("Register", type="primary")

    if submitted:
        if password != confirm:
            st.error("Passwords do not match")
        else:
            try:
                run_async(context.register(email, password))
                navigate("/")
            except Exception as e:
                st.error(f"Registration failed: {e}")

    if st.button("Already registered? Sign in"):
        navigate("/login")


def render_dashboard_page(context: AppContext):
    st.title("🏠 Dashboard")

    settings = context.settings.settings
    transactions = context.transactions
    stats = context.stats

    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("**Income**")
        st.markdown(
            f'<div class="big-number income">{format_currency(transactions.income, settings.currency)}</div>',
            unsafe_allow_html=True,
        )
    with col2:
        st.markdown("**Expense**")
        st.markdown(
            f'<div class="big-number expense">{format_currency(transactions.expense, settings.currency)}</div>',
            unsafe_allow_html=True,
        )
    with col3:
        st.markdown("**Balance**")
        st.markdown(
            f'<div class="big-number">{format_currency(transactions.balance, settings.currency)}</div>',
            unsafe_allow_html=True,
        )

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("### Monthly budget")
        budget = stats.budget_status
        if budget.budget > 0:
            st.progress(min(budget.percentage, 100.0) / 100)
            st.markdown(
                f"{format_currency(budget.spent, settings.currency)} of "
                f"{format_currency(budget.budget, settings.currency)} "
                f"({budget.percentage:.1f}%)"
            )
        else:
            st.info("Set a monthly budget on the Settings page.")
        st.metric("Spending vs last month", format_percentage(stats.monthly_trend))

        weekly = stats.weekly_budget_status
        if weekly.budget > 0:
            st.markdown("### Weekly budget")
            st.progress(min(weekly.percentage, 100.0) / 100)
            st.markdown(
                f"{format_currency(weekly.spent, settings.currency)} of "
                f"{format_currency(weekly.budget, settings.currency)}"
            )

    with col2:
        st.markdown("### Top categories")
        top = stats.top_categories
        if not top:
            st.info("No expenses yet.")
        for category, total in top:
            st.markdown(f"- **{category}**: {format_currency(total, settings.currency)}")

    st.markdown("### Recent transactions")
    recent = stats.recent_transactions
    if not recent:
        st.info("No transactions yet. Add one on the Transactions page.")
    for t in recent:
        sign = "+" if t.kind == TransactionKind.INCOME else "-"
        st.markdown(
            f"{format_date(t.transaction_date, settings.date_format)} · "
            f"{t.category} · {t.description} · "
            f"**{sign}{format_currency(t.amount, settings.currency)}**"
        )

    if st.button("☁️ Back up to Google Sheets"):
        try:
            counts = run_async(context.backup_if_enabled())
            if counts is None:
                st.info("Backup is switched off or not configured.")
            else:
                st.success(f"Backed up {counts[0]} transactions and {counts[1]} categories.")
        except Exception as e:
            st.error(f"Backup failed: {e}")


def render_transactions_page(context: AppContext):
    st.title("💳 Transactions")

    settings = context.settings.settings
    store = context.transactions

    with st.form("add_transaction", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            kind = st.selectbox(
                "Type",
                options=list(TransactionKind),
                index=list(TransactionKind).index(settings.default_transaction_type),
                format_func=lambda k: k.value.title(),
            )
            names = [c.name for c in context.categories.by_kind(kind)]
            category = st.selectbox("Category", options=names) if names else st.text_input("Category")
        with col2:
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
            transaction_date = st.date_input("Date", value=date.today())
        description = st.text_input("Description")
        submitted = st.form_submit_button("➕ Add transaction", type="primary")

    if submitted:
        try:
            run_async(store.add(category, description, amount, kind, transaction_date))
            st.success("Transaction added")
            run_async(context.backup_if_enabled())
        except Exception as e:
            st.error(str(e))

    st.markdown("---")

    if not store.items:
        st.info("No transactions yet.")

    for t in store.items:
        col1, col2, col3 = st.columns([6, 2, 1])
        with col1:
            st.markdown(
                f"{format_date(t.transaction_date, settings.date_format)} · "
                f"**{t.category}** · {t.description}"
            )
        with col2:
            css = "income" if t.kind == TransactionKind.INCOME else "expense"
            st.markdown(
                f'<span class="{css}">{format_currency(t.amount, settings.currency)}</span>',
                unsafe_allow_html=True,
            )
        with col3:
            if st.button("🗑️", key=f"delete_{t.id}"):
                try:
                    run_async(store.remove(t.id))
                    st.rerun()
                except Exception as e:
                    st.error(str(e))


def render_categories_page(context: AppContext):
    st.title("🏷️ Categories")

    store = context.categories

    with st.form("add_category", clear_on_submit=True):
        col1, col2, col3 = st.columns([3, 2, 1])
        with col1:
            name = st.text_input("Name")
        with col2:
            kind = st.selectbox(
                "Type",
                options=list(TransactionKind),
                format_func=lambda k: k.value.title(),
            )
        with col3:
            color = st.color_picker("Color", value=store.default_color)
        submitted = st.form_submit_button("➕ Add category", type="primary")

    if submitted:
        try:
            run_async(store.add(name, kind, color))
            st.success("Category added")
        except Exception as e:
            st.error(str(e))

    st.markdown("---")

    for kind in TransactionKind:
        st.markdown(f"### {kind.value.title()}")
        categories = store.by_kind(kind)
        if not categories:
            st.caption("None yet")
        for category in categories:
            col1, col2, col3 = st.columns([5, 2, 1])
            with col1:
                new_name = st.text_input(
                    "Name", value=category.name, key=f"name_{category.id}",
                    label_visibility="collapsed",
                )
            with col2:
                if st.button("💾 Save", key=f"save_{category.id}") and new_name != category.name:
                    try:
                        run_async(store.update(category.model_copy(update={"name": new_name})))
                        st.rerun()
                    except Exception as e:
                        st.error(str(e))
            with col3:
                if st.button("🗑️", key=f"delete_{category.id}"):
                    try:
                        run_async(store.remove(category.id))
                        st.rerun()
                    except Exception as e:
                        st.error(str(e))


def render_settings_page(context: AppContext):
    st.title("⚙️ Settings")

    store = context.settings
    current = store.settings
    if store.error:
        st.warning(f"Could not load your saved settings: {store.error}")

    currency_codes = [c["code"] for c in CURRENCIES]
    date_formats = [f["value"] for f in DATE_FORMATS]
    themes = [t["value"] for t in THEMES]

    with st.form("settings"):
        currency = st.selectbox(
            "Currency",
            options=currency_codes,
            index=currency_codes.index(current.currency) if current.currency in currency_codes else 0,
            format_func=lambda code: next(f"{c['symbol']} {c['name']}" for c in CURRENCIES if c["code"] == code),
        )
        date_format = st.selectbox(
            "Date format",
            options=date_formats,
            index=date_formats.index(current.date_format) if current.date_format in date_formats else 0,
            format_func=lambda v: next(f["label"] for f in DATE_FORMATS if f["value"] == v),
        )
        theme = st.selectbox(
            "Theme",
            options=themes,
            index=themes.index(current.theme) if current.theme in themes else 0,
            format_func=lambda v: next(t["label"] for t in THEMES if t["value"] == v),
        )
        default_kind = st.selectbox(
            "Default transaction type",
            options=list(TransactionKind),
            index=list(TransactionKind).index(current.default_transaction_type),
            format_func=lambda k: k.value.title(),
        )
        monthly_budget = st.number_input("Monthly budget", value=float(current.monthly_budget), step=10.0)
        weekly_budget = st.number_input("Weekly budget", value=float(current.weekly_budget), step=10.0)
        notifications = st.checkbox("Notifications", value=current.notifications)
        auto_backup = st.checkbox("Automatic backup to Google Sheets", value=current.auto_backup)

        col1, col2 = st.columns(2)
        with col1:
            save = st.form_submit_button("💾 Save settings", type="primary")
        with col2:
            reset = st.form_submit_button("↩️ Reset to defaults")

    if save:
        try:
            run_async(store.save(UserSettings(
                currency=currency,
                date_format=date_format,
                theme=theme,
                notifications=notifications,
                auto_backup=auto_backup,
                default_transaction_type=default_kind,
                monthly_budget=monthly_budget,
                weekly_budget=weekly_budget,
            )))
            st.success("Settings saved")
        except Exception as e:
            st.error(f"Could not save settings: {e}")

    if reset:
        try:
            run_async(store.reset())
            st.success("Settings reset to defaults")
            st.rerun()
        except Exception as e:
            st.error(f"Could not reset settings: {e}")

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()
    services = [
        ("Firebase (Auth + Firestore)", "firebase"),
        ("Google Sheets (Backup)", "google_sheets"),
        ("Application", "app"),
    ]
    for label, key in services:
        if status.get(key, False):
            st.success(f"✅ {label} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {label} - {error}")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
