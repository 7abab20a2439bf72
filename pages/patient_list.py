import logging

import streamlit as st

from core.database import get_db_context
from core.errors import TrackerError
from core.helpers import render_sidebar, format_date
from core.session_manager import init_session_state, select_patient, show_flash
from services.patient_service import list_patient_summaries, search_patients

logger = logging.getLogger(__name__)

# Page config is set globally in app.py

init_session_state()
render_sidebar()

header, action = st.columns([4, 1])
with header:
    st.title("Patient Management")
    st.write("Manage acupuncture treatment patients.")
with action:
    if st.button("➕ Add Patient", use_container_width=True):
        st.switch_page("pages/add_patient.py")

show_flash()

# Search bar
search_query = st.text_input("Search by name or medical record number", placeholder="e.g., Chen or MRN0012")

# Load patients
try:
    with get_db_context() as db:
        summaries = list_patient_summaries(db)
except TrackerError as e:
    logger.error("Could not load patient list: %s", e)
    st.error("Could not load the patient list.")
    st.stop()

summaries = search_patients(summaries, search_query)

# If no patients
if not summaries:
    st.info("No patients found.")
    st.stop()

for summary in summaries:
    p = summary.patient
    with st.container():
        left, right = st.columns([3, 2])
        with left:
            st.write(f"**{p.name}**  —  {p.medical_record_number}")
            details = [p.gender]
            if p.patient_group:
                details.append(p.patient_group)
            if p.bed_number:
                details.append(f"Bed {p.bed_number}")
            st.caption(" • ".join(details))
        with right:
            st.write(f"Sessions: {summary.session_count}")
            st.write(f"Last session: {format_date(summary.last_session_date)}")

        col1, col2 = st.columns([1, 1])
        with col1:
            if st.button("Start Treatment", key=f"treat_{p.id}"):
                select_patient(p.id)
                st.switch_page("pages/treatment.py")
        with col2:
            if st.button("Edit Patient", key=f"edit_{p.id}"):
                select_patient(p.id)
                st.switch_page("pages/edit_patient.py")

        st.markdown("---")
