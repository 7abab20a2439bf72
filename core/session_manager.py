import logging

import streamlit as st

from core.config import SETTINGS_PATH, configure_logging
from core.database import init_db
from core.errors import TrackerError
from services.session_counter import SessionCounter
from services.settings_service import JsonFileSettingsStore

logger = logging.getLogger(__name__)


@st.cache_resource
def _bootstrap():
    """Runs once per server process, whichever page is opened first."""
    configure_logging()
    init_db()
    return True


def init_session_state():
    """Ensure tables exist and required session keys are present."""
    try:
        _bootstrap()
    except TrackerError as e:
        logger.error("Startup failed: %s", e)
        st.error(str(e))
        st.stop()

    if "selected_patient" not in st.session_state:
        st.session_state.selected_patient = None
    if "counter" not in st.session_state:
        st.session_state.counter = SessionCounter()
    if "selected_acupoints" not in st.session_state:
        st.session_state.selected_acupoints = []
    if "flash" not in st.session_state:
        st.session_state.flash = []


def select_patient(patient_id: str):
    """Switching patient discards the counters of the previous one."""
    if st.session_state.get("selected_patient") != patient_id:
        st.session_state.counter = SessionCounter()
        st.session_state.selected_acupoints = []
        st.session_state.pop("edit_counter", None)
        st.session_state.pop("editing_session_id", None)
        st.session_state.pop("editing_session_date", None)
    st.session_state.selected_patient = patient_id


def clear_selection():
    """Forget the selected patient, counter and acupoint selection."""
    st.session_state.pop("selected_patient", None)
    st.session_state.pop("counter", None)
    st.session_state.pop("selected_acupoints", None)
    st.session_state.pop("edit_counter", None)
    st.session_state.pop("editing_session_id", None)
    st.session_state.pop("editing_session_date", None)


def get_counter(key: str = "counter") -> SessionCounter:
    if key not in st.session_state:
        st.session_state[key] = SessionCounter()
    return st.session_state[key]


def get_settings_store():
    return JsonFileSettingsStore(SETTINGS_PATH)


def flash(message: str, level: str = "success"):
    """Queue a message for the next rendered page (survives st.switch_page)."""
    st.session_state.setdefault("flash", []).append((level, message))


def show_flash():
    for level, message in st.session_state.pop("flash", []):
        getattr(st, level, st.info)(message)
    st.session_state.flash = []


def require_patient():
    """Return the selected patient id or send the user back to the patient list."""
    init_session_state()
    patient_id = st.session_state.get("selected_patient")
    if not patient_id:
        flash("No patient selected. Please choose a patient first.", "warning")
        st.switch_page("pages/patient_list.py")
    return patient_id
