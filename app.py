"""
Activity Logs - Streamlit UI
Dashboard for clients logging program activities and coaches reviewing them.
"""
import streamlit as st
import pandas as pd
import logging
import os
from datetime import date

from activity_logs.config import get_settings

settings = get_settings()

# Create logs directory if it doesn't exist
os.makedirs(os.path.dirname(settings.log_file) or '.', exist_ok=True)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format=settings.log_format,
    handlers=[
        logging.FileHandler(settings.log_file),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# Import application modules
from activity_logs.database.connection import DatabaseManager
from activity_logs.database.repositories import ActivityRepository, UserRepository
from activity_logs.database.migrations import create_activity_schema, create_auth_schema
from activity_logs.exceptions import ActivityLogError
from activity_logs.models import ActivityType, ActivityStatus, LogType, UserRole
from activity_logs.scheduling.duration_calculator import format_duration
from activity_logs.scheduling.week_calculator import format_week_range, weeks_in_month
from activity_logs.services.activity_service import ActivityService
from activity_logs.services.user_service import UserService

# Page configuration
st.set_page_config(
    page_title="Activity Logs",
    page_icon="📋",
    layout="wide",
    initial_sidebar_state="expanded"
)


# Initialize databases and services (cached)
@st.cache_resource
def init_application():
    """Initialize application components."""
    try:
        activity_db = DatabaseManager(settings)
        auth_db = DatabaseManager.for_auth(settings)

        # Ensure schemas exist
        create_activity_schema(activity_db)
        create_auth_schema(auth_db)

        user_repo = UserRepository(auth_db)
        activity_service = ActivityService(ActivityRepository(activity_db), user_repo, settings)
        user_service = UserService(user_repo, settings)

        logger.info("Application initialized successfully")
        return activity_service, user_service
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        st.error(f"❌ Initialization failed: {e}")
        st.stop()


activity_service, user_service = init_application()

# =============================================================================
# SIDEBAR: SIGN IN & NAVIGATION
# =============================================================================
st.sidebar.title("📋 Activity Logs")

actor = st.session_state.get("actor")
if actor is None:
    email = st.sidebar.text_input("Email", placeholder="you@example.com")
    if st.sidebar.button("Sign in", type="primary"):
        try:
            st.session_state["actor"] = user_service.sign_in(email)
            st.rerun()
        except ActivityLogError as e:
            st.sidebar.error(f"❌ {e}")
    st.info("👈 Sign in with the email your program registered.")
    st.stop()

st.sidebar.write(f"Signed in as **{actor.display_name}** ({actor.role.value})")
if st.sidebar.button("Sign out"):
    st.session_state.pop("actor", None)
    st.rerun()

pages = ["📅 My Logs", "➕ Log Activity", "👤 Profile"]
if actor.role.is_staff:
    pages += ["👥 Clients", "📄 Weekly Report"]
page = st.sidebar.radio("Select Page", pages)

first_day, last_day = activity_service.editable_range()
st.sidebar.markdown("---")
st.sidebar.info(
    f"**Editable window**\n\n"
    f"{first_day:%b %d} – {last_day:%b %d, %Y}\n\n"
    "Activities outside these weeks are read-only."
)


def render_weekly_logs(owner_id: str, month: date):
    """Render a month of weekly logs as a calendar of week rows."""
    result = activity_service.weekly_logs(actor, owner_id=owner_id, month=month)
    if result.skipped_count:
        st.warning(f"⚠️ {result.skipped_count} activities could not be shown (missing log type)")

    logs_by_week = {}
    for log in result.logs:
        logs_by_week.setdefault(log.week_start, []).append(log)

    for week in reversed(weeks_in_month(month)):
        week_logs = logs_by_week.get(week, [])
        total = sum(log.total_duration_minutes for log in week_logs)
        with st.expander(f"Week of {format_week_range(week)} · {format_duration(total)}", expanded=bool(week_logs)):
            if not week_logs:
                st.caption("No activities logged")
                continue

            for log in week_logs:
                st.subheader(f"{log.log_type.label} ({format_duration(log.total_duration_minutes)})")
                for activity in log.activities:
                    editable = activity_service.can_edit(actor, activity)
                    badge = "✏️" if editable else "🔒"
                    st.write(
                        f"{badge} **{activity.date:%a %b %d}** · {activity.activity_type.value} · "
                        f"{activity.time_range or format_duration(activity.duration)} · {activity.status.value}"
                    )
                    if activity.description:
                        st.caption(activity.description)
                    for comment in activity.comments:
                        st.info(f"💬 {comment.author_name} ({comment.author_role.value}): {comment.text}")

                    if editable:
                        if st.button("Delete", key=f"delete-{activity.id}"):
                            activity_service.delete_activity(actor, activity.id)
                            st.rerun()


# =============================================================================
# PAGE 1: MY LOGS
# =============================================================================
if page == "📅 My Logs":
    st.title("📅 My Activity Logs")
    month = st.date_input("Month", value=date.today())
    try:
        render_weekly_logs(actor.user_id, month)
    except ActivityLogError as e:
        st.error(f"❌ {e}")

# =============================================================================
# PAGE 2: LOG ACTIVITY
# =============================================================================
elif page == "➕ Log Activity":
    st.title("➕ Log Activity")

    owner_id = actor.user_id
    if actor.role.is_staff:
        clients = user_service.list_users(actor, role=UserRole.CLIENT, limit=200).items
        if clients:
            choice = st.selectbox("Client", clients, format_func=str)
            owner_id = choice.id

    with st.form("activity_form"):
        log_type = st.selectbox("Log", list(LogType), format_func=lambda t: t.label)
        activity_date = st.date_input("Date", value=date.today(), min_value=first_day, max_value=last_day)
        col1, col2 = st.columns(2)
        start_time = col1.time_input("Start time", value=None)
        end_time = col2.time_input("End time", value=None)
        activity_type = st.selectbox("Activity type", list(ActivityType), format_func=lambda t: t.value)
        status = st.selectbox("Status", list(ActivityStatus), index=1, format_func=lambda s: s.value)
        description = st.text_area("Description")
        notes = st.text_area("Notes")
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            record = activity_service.create_activity(actor, {
                "owner_id": owner_id,
                "log_type": log_type,
                "date": activity_date,
                "start_time": start_time.strftime("%H:%M") if start_time else None,
                "end_time": end_time.strftime("%H:%M") if end_time else None,
                "activity_type": activity_type,
                "status": status,
                "description": description,
                "notes": notes or None,
            })
            st.success(f"✅ Saved ({format_duration(record.duration)})")
        except (ActivityLogError, ValueError) as e:
            st.error(f"❌ {e}")
            logger.error(f"Create activity failed: {e}")

# =============================================================================
# PAGE 3: PROFILE
# =============================================================================
elif page == "👤 Profile":
    st.title("👤 Profile")
    new_name = st.text_input("Display name", value=actor.name)
    if st.button("Update name"):
        try:
            st.session_state["actor"] = user_service.update_name(actor, new_name)
            st.success("✅ Name updated")
        except ActivityLogError as e:
            st.error(f"❌ {e}")

# =============================================================================
# PAGE 4: CLIENTS (coaches & admins)
# =============================================================================
elif page == "👥 Clients":
    st.title("👥 Clients")

    page_number = st.number_input("Page", min_value=1, value=1, step=1)
    listing = user_service.list_users(actor, role=UserRole.CLIENT, page=int(page_number))
    st.caption(f"{listing.total} clients · page {listing.page} of {max(listing.total_pages, 1)}")

    if not listing.items:
        st.warning("⚠️ No clients found.")
    else:
        df_clients = pd.DataFrame([
            {"Name": u.name, "Email": str(u.email), "Phone": u.phone or "",
             "Last Login": u.last_login.strftime("%Y-%m-%d %H:%M") if u.last_login else "Never"}
            for u in listing.items
        ])
        st.dataframe(df_clients, use_container_width=True)

        client = st.selectbox("🔍 Select Client", listing.items, format_func=str)
        month = st.date_input("Month", value=date.today(), key="client_month")
        render_weekly_logs(client.id, month)

        st.subheader("💬 Add Comment")
        recent = activity_service.list_activities(actor, owner_id=client.id, limit=25)
        if recent:
            target = st.selectbox(
                "Activity", recent,
                format_func=lambda a: f"{a.activity.date:%b %d} · {a.activity.activity_type.value} · {a.activity.description[:40]}"
            )
            text = st.text_area("Comment")
            if st.button("Post comment"):
                try:
                    activity_service.add_comment(actor, target.activity.id, text)
                    st.success("✅ Comment added")
                    st.rerun()
                except ActivityLogError as e:
                    st.error(f"❌ {e}")

# =============================================================================
# PAGE 5: WEEKLY REPORT (coaches & admins)
# =============================================================================
elif page == "📄 Weekly Report":
    st.title("📄 Weekly Report")

    clients = user_service.list_users(actor, role=UserRole.CLIENT, limit=200).items
    if not clients:
        st.warning("⚠️ No clients found.")
        st.stop()

    client = st.selectbox("Client", clients, format_func=str)
    week = st.date_input("Any day in the week", value=date.today())

    try:
        report = activity_service.export_week_report(actor, client.id, week)
    except ActivityLogError as e:
        st.error(f"❌ {e}")
        st.stop()

    st.header(report.title)
    st.write(f"**Participant:** {report.participant_name}")
    st.write(f"**Week:** {report.week_label}")
    st.caption(f"Generated: {report.generated_at:%m/%d/%Y}")

    if report.is_empty:
        st.info("No activities found for this week.")
    for section in report.sections:
        st.subheader(section.title)
        st.write(f"Total Time: {section.total_time}")
        st.dataframe(section.table, use_container_width=True, hide_index=True)

    st.download_button(
        "⬇️ Download CSV",
        data=report.to_csv(),
        file_name=report.export_filename(),
        mime="text/csv",
        disabled=report.is_empty,
    )
    logger.info(f"Report viewed by {actor.user_id} for {client.id}, week {report.week_label}")
