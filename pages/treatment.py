import logging

import streamlit as st

from core.database import get_db_context
from core.errors import NotFoundError, TrackerError, ValidationError
from core.helpers import render_sidebar, format_date, format_datetime
from core.session_manager import (
    init_session_state,
    require_patient,
    get_counter,
    clear_selection,
    flash,
    show_flash,
)
from core.time_utils import time_since, format_elapsed
from models.body_region import BodyRegion
from services.patient_service import get_patient
from services.session_service import list_sessions_for_patient, save_counter, complete_needle_removal
from services.settings_service import format_acupoints

logger = logging.getLogger(__name__)

init_session_state()
render_sidebar()

patient_id = require_patient()

try:
    with get_db_context() as db:
        patient = get_patient(db, patient_id)
        sessions = list_sessions_for_patient(db, patient_id)
except NotFoundError:
    clear_selection()
    flash("Patient not found.", "error")
    st.switch_page("pages/patient_list.py")
except TrackerError as e:
    logger.error("Could not load treatment page for %s: %s", patient_id, e)
    st.error("Could not load the patient. Please try again.")
    st.stop()

st.title("Acupuncture Treatment")
st.subheader(f"{patient.name} ({patient.medical_record_number})")
st.caption(" • ".join(x for x in [patient.gender, patient.patient_group, patient.bed_number and f"Bed {patient.bed_number}"] if x))

show_flash()

counter = get_counter()

# -----------------------------
# Summary
# -----------------------------
colA, colB = st.columns(2)
with colA:
    st.metric("Total Needles", counter.total())
with colB:
    st.metric("Regions Used", counter.active_region_count())

# -----------------------------
# Acupoints
# -----------------------------
selected_acupoints = st.session_state.get("selected_acupoints", [])
acupoint_text = format_acupoints(selected_acupoints)

st.write("### Acupoints")
a1, a2 = st.columns([3, 1])
with a1:
    st.write(acupoint_text or "No acupoints selected.")
with a2:
    if st.button("Select Acupoints", use_container_width=True):
        st.switch_page("pages/acupoint_selection.py")

# -----------------------------
# Counter panel
# -----------------------------
st.write("### Needle Counts")
columns = st.columns(3)
for i, region in enumerate(BodyRegion):
    with columns[i % 3]:
        with st.container(border=True):
            st.markdown(f"**{region.label}**")
            st.markdown(f"## {counter.count(region)}")
            minus, plus, reset = st.columns(3)
            with minus:
                st.button("−", key=f"dec_{region.value}", on_click=counter.decrement, args=(region,),
                          disabled=counter.count(region) == 0)
            with plus:
                st.button("+", key=f"inc_{region.value}", on_click=counter.increment, args=(region,))
            with reset:
                st.button("↺", key=f"reset_{region.value}", on_click=counter.reset_one, args=(region,),
                          disabled=counter.count(region) == 0, help="Reset this region")

c1, c2 = st.columns(2)
with c1:
    st.button("Reset All Counts", on_click=counter.reset_all, disabled=counter.total() == 0,
              use_container_width=True)
with c2:
    if st.button("💾 Save Session", type="primary", disabled=counter.total() == 0, use_container_width=True):
        try:
            with get_db_context() as db:
                save_counter(db, counter, patient_id, acupoints=acupoint_text or None)
        except ValidationError as e:
            st.error(str(e))
        except NotFoundError:
            clear_selection()
            flash("Patient not found.", "error")
            st.switch_page("pages/patient_list.py")
        except TrackerError as e:
            # Counter is untouched so the user can retry
            logger.error("Could not save session for %s: %s", patient_id, e)
            st.error("Could not save the session. Your counts are kept, please try again.")
        else:
            st.session_state.selected_acupoints = []
            flash("Treatment session saved.")
            st.rerun()

# -----------------------------
# Session history
# -----------------------------
st.markdown("---")
st.write("### Treatment History")

if not sessions:
    st.info("No sessions recorded for this patient yet.")
    st.stop()

for s in sessions:
    with st.container(border=True):
        left, right = st.columns([3, 2])
        with left:
            st.write(f"**{format_date(s.session_date)}** — {s.total_needles} needles")
            counts = ", ".join(
                f"{region.label} {value}" for region, value in s.region_counts().items() if value
            )
            st.caption(counts or "No needles")
            if s.acupoints:
                st.caption(f"Acupoints: {s.acupoints}")
        with right:
            if s.needle_removed:
                st.success(f"Needles removed at {format_datetime(s.needle_removal_time)}")
            else:
                st.warning(f"In progress for {format_elapsed(time_since(s.created_at))}")

        b1, b2 = st.columns(2)
        with b1:
            if st.button("✏️ Edit Session", key=f"edit_{s.id}"):
                st.session_state["editing_session_id"] = s.id
                st.session_state.pop("edit_counter", None)
                st.switch_page("pages/edit_session.py")
        with b2:
            if st.button("Complete Needle Removal", key=f"remove_{s.id}", disabled=s.needle_removed):
                try:
                    with get_db_context() as db:
                        complete_needle_removal(db, s.id)
                except ValidationError as e:
                    st.warning(str(e))
                except TrackerError as e:
                    logger.error("Could not record needle removal for %s: %s", s.id, e)
                    st.error("Could not record needle removal. Please try again.")
                else:
                    flash("Needle removal recorded.")
                    st.rerun()
