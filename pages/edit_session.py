import logging

import streamlit as st

from core.database import get_db_context
from core.errors import NotFoundError, TrackerError, ValidationError
from core.helpers import render_sidebar, format_date
from core.session_manager import init_session_state, require_patient, get_counter, flash
from models.body_region import BodyRegion
from services.session_service import get_session, save_counter

logger = logging.getLogger(__name__)

init_session_state()
render_sidebar()

st.title("Edit Treatment Session")

patient_id = require_patient()
session_id = st.session_state.get("editing_session_id")

if not session_id:
    flash("No session selected.", "warning")
    st.switch_page("pages/treatment.py")

counter = get_counter("edit_counter")

# Load once; later reruns keep the user's edits
if counter.session_id != session_id:
    try:
        with get_db_context() as db:
            record = get_session(db, session_id)
    except NotFoundError:
        st.session_state.pop("editing_session_id", None)
        flash("Could not load the treatment session.", "error")
        st.switch_page("pages/treatment.py")
    except TrackerError as e:
        logger.error("Could not load session %s: %s", session_id, e)
        st.error("Could not load the treatment session. Please try again.")
        st.stop()
    counter.from_record(record)
    st.session_state["editing_session_date"] = record.session_date

st.caption(f"Session of {format_date(st.session_state.get('editing_session_date'))}")

colA, colB = st.columns(2)
with colA:
    st.metric("Total Needles", counter.total())
with colB:
    st.metric("Regions Used", counter.active_region_count())

for region in BodyRegion:
    with st.container(border=True):
        name, value, minus, plus, reset = st.columns([3, 1, 1, 1, 1])
        with name:
            st.markdown(f"**{region.label}**")
        with value:
            st.markdown(f"**{counter.count(region)}**")
        with minus:
            st.button("−", key=f"edit_dec_{region.value}", on_click=counter.decrement, args=(region,),
                      disabled=counter.count(region) == 0)
        with plus:
            st.button("+", key=f"edit_inc_{region.value}", on_click=counter.increment, args=(region,))
        with reset:
            st.button("↺", key=f"edit_reset_{region.value}", on_click=counter.reset_one, args=(region,),
                      disabled=counter.count(region) == 0)


def _leave():
    st.session_state.pop("edit_counter", None)
    st.session_state.pop("editing_session_id", None)
    st.session_state.pop("editing_session_date", None)
    st.switch_page("pages/treatment.py")


c1, c2 = st.columns(2)
with c1:
    if st.button("Cancel", use_container_width=True):
        _leave()
with c2:
    if st.button("💾 Save Changes", type="primary", use_container_width=True, disabled=counter.total() == 0):
        try:
            with get_db_context() as db:
                save_counter(db, counter, patient_id)
        except ValidationError as e:
            st.error(str(e))
        except NotFoundError:
            flash("The treatment session no longer exists.", "error")
            _leave()
        except TrackerError as e:
            logger.error("Could not update session %s: %s", session_id, e)
            st.error("Could not update the session. Your changes are kept, please try again.")
        else:
            flash("Treatment session updated.")
            _leave()
