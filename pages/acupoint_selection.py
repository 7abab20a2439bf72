import streamlit as st

from core.helpers import render_sidebar
from core.session_manager import init_session_state, require_patient, get_settings_store
from services.settings_service import load_acupoint_settings, format_acupoints

init_session_state()
render_sidebar()
require_patient()

st.title("Acupoint Selection")
st.write("Select the acupoints for this treatment.")

acupoints = load_acupoint_settings(get_settings_store()).names

# Work on a draft so Back discards changes
if "acupoint_draft" not in st.session_state:
    st.session_state.acupoint_draft = list(st.session_state.get("selected_acupoints", []))
draft = st.session_state.acupoint_draft


def _toggle(name: str):
    if name in draft:
        draft.remove(name)
    else:
        draft.append(name)


columns = st.columns(6)
for index, name in enumerate(acupoints):
    with columns[index % 6]:
        st.button(
            name,
            key=f"acupoint_{index}",
            on_click=_toggle,
            args=(name,),
            type="primary" if name in draft else "secondary",
            use_container_width=True,
        )

if draft:
    st.write("**Selected:** " + format_acupoints(draft))

c1, c2 = st.columns(2)
with c1:
    if st.button("Back to Treatment", use_container_width=True):
        st.session_state.pop("acupoint_draft", None)
        st.switch_page("pages/treatment.py")
with c2:
    if st.button("Done", type="primary", use_container_width=True):
        st.session_state.selected_acupoints = list(draft)
        st.session_state.pop("acupoint_draft", None)
        st.switch_page("pages/treatment.py")
