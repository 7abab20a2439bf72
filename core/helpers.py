import uuid
import streamlit as st


def generate_id() -> str:
    """Opaque primary key for patients and sessions."""
    return str(uuid.uuid4())


def format_date(value) -> str:
    """Format a date/datetime for lists; '—' when missing."""
    if not value:
        return "—"
    return value.strftime("%Y-%m-%d")


def format_datetime(value) -> str:
    if not value:
        return "—"
    return value.strftime("%Y-%m-%d %H:%M")


# -----------------------------
# Sidebar helpers
# -----------------------------
def hide_default_sidebar_nav():
    """Hide Streamlit's default multi-page navigation for a cleaner custom menu.

    Sidebar is also collapsed by default via app-wide set_page_config.
    """
    st.markdown(
        """
        <style>
        /* Hide the auto-generated Pages section */
        [data-testid="stSidebarNav"] { display: none; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_sidebar():
    """Render the clinic sidebar menu.

    Items:
    - Patient List
    - Add Patient
    - Settings
    """
    hide_default_sidebar_nav()
    with st.sidebar:
        st.markdown("### Menu")
        if st.button("Patient List", use_container_width=True):
            st.switch_page("pages/patient_list.py")
        if st.button("Add Patient", use_container_width=True):
            st.switch_page("pages/add_patient.py")
        st.divider()
        if st.button("Settings", use_container_width=True):
            st.switch_page("pages/settings.py")
