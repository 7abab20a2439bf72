import logging

import streamlit as st

from core.database import get_db_context
from core.errors import ConflictError, TrackerError, ValidationError
from core.helpers import render_sidebar
from core.session_manager import init_session_state, select_patient, get_settings_store, flash
from services.patient_service import GENDER_OPTIONS, create_patient
from services.settings_service import load_groups

logger = logging.getLogger(__name__)

# Page config is set globally in app.py

init_session_state()
render_sidebar()

st.title("Add Patient")
st.write("Create a new patient record.")

groups = load_groups(get_settings_store())

with st.form("patient_form"):
    mrn = st.text_input("Medical Record Number *", placeholder="Enter the medical record number")
    name = st.text_input("Full Name *", placeholder="Enter the patient's name")
    gender = st.selectbox("Gender *", GENDER_OPTIONS, index=None, placeholder="Select gender")
    group = st.selectbox("Group", groups, index=0 if groups else None)
    bed = st.text_input("Bed Number", placeholder="Optional")
    submitted = st.form_submit_button("Save Patient", type="primary")

if submitted:
    try:
        with get_db_context() as db:
            patient = create_patient(
                db,
                medical_record_number=mrn,
                name=name,
                gender=gender,
                patient_group=group,
                bed_number=bed,
            )
    except (ValidationError, ConflictError) as e:
        st.error(str(e))
    except TrackerError as e:
        logger.error("Could not create patient: %s", e)
        st.error("Could not create the patient. Please try again.")
    else:
        select_patient(patient.id)
        flash(f"Patient {patient.name} created.")
        st.switch_page("pages/treatment.py")

if st.button("Cancel"):
    st.switch_page("pages/patient_list.py")
