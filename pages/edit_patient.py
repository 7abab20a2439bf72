import logging

import streamlit as st

from core.database import get_db_context
from core.errors import ConflictError, NotFoundError, TrackerError, ValidationError
from core.helpers import render_sidebar
from core.session_manager import (
    init_session_state,
    require_patient,
    get_settings_store,
    clear_selection,
    flash,
)
from services.patient_service import GENDER_OPTIONS, get_patient, update_patient, delete_patient
from services.settings_service import load_groups

logger = logging.getLogger(__name__)

init_session_state()
render_sidebar()

st.title("Edit Patient")

patient_id = require_patient()

try:
    with get_db_context() as db:
        patient = get_patient(db, patient_id)
except NotFoundError:
    clear_selection()
    flash("Patient not found.", "error")
    st.switch_page("pages/patient_list.py")
except TrackerError as e:
    logger.error("Could not load patient %s: %s", patient_id, e)
    st.error("Could not load the patient. Please try again.")
    st.stop()

groups = load_groups(get_settings_store())
if patient.patient_group and patient.patient_group not in groups:
    groups = groups + [patient.patient_group]

with st.form("edit_patient_form"):
    mrn = st.text_input("Medical Record Number *", value=patient.medical_record_number)
    name = st.text_input("Full Name *", value=patient.name)
    gender = st.selectbox(
        "Gender *",
        GENDER_OPTIONS,
        index=GENDER_OPTIONS.index(patient.gender) if patient.gender in GENDER_OPTIONS else 0,
    )
    group = st.selectbox(
        "Group",
        groups,
        index=groups.index(patient.patient_group) if patient.patient_group in groups else 0,
    )
    bed = st.text_input("Bed Number", value=patient.bed_number or "")
    submitted = st.form_submit_button("Update Patient", type="primary")

if submitted:
    try:
        with get_db_context() as db:
            update_patient(
                db,
                patient_id,
                medical_record_number=mrn,
                name=name,
                gender=gender,
                patient_group=group,
                bed_number=bed,
            )
    except (ValidationError, ConflictError) as e:
        st.error(str(e))
    except NotFoundError:
        clear_selection()
        flash("Patient not found.", "error")
        st.switch_page("pages/patient_list.py")
    except TrackerError as e:
        logger.error("Could not update patient %s: %s", patient_id, e)
        st.error("Could not update the patient. Please try again.")
    else:
        flash("Patient info updated.")
        st.switch_page("pages/patient_list.py")

# Danger zone: delete patient
with st.expander("🗑️ Delete Patient", expanded=False):
    st.warning("Deleting a patient will remove all their treatment sessions. This cannot be undone.")
    confirm = st.text_input("Type DELETE to confirm", value="")
    if st.button("Delete Patient", type="secondary", help="Irreversible action"):
        if confirm.strip().upper() == "DELETE":
            try:
                with get_db_context() as db:
                    delete_patient(db, patient_id)
            except TrackerError as e:
                logger.error("Could not delete patient %s: %s", patient_id, e)
                st.error("Failed to delete patient.")
            else:
                clear_selection()
                flash("Patient deleted.")
                st.switch_page("pages/patient_list.py")
        else:
            st.error("Confirmation text does not match DELETE.")

if st.button("Back to Patient List"):
    st.switch_page("pages/patient_list.py")
