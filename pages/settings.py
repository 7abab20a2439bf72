import streamlit as st

from core.errors import TrackerError
from core.helpers import render_sidebar
from core.session_manager import init_session_state, get_settings_store, show_flash, flash
from services.settings_service import (
    MIN_ACUPOINTS,
    MAX_ACUPOINTS,
    load_groups,
    add_group,
    rename_group,
    delete_group,
    load_acupoint_settings,
    resize_acupoint_names,
    save_acupoint_settings,
)

init_session_state()
render_sidebar()

st.title("Settings")
st.write("Manage system settings.")

show_flash()

store = get_settings_store()

# -----------------------------
# Groups
# -----------------------------
st.subheader("Groups")

new_col, add_col = st.columns([4, 1])
with new_col:
    new_group = st.text_input("New group", placeholder="Enter a group name", key="new_group_name")
with add_col:
    st.write("")
    if st.button("➕ Add", use_container_width=True):
        try:
            add_group(store, new_group)
        except TrackerError as e:
            st.error(str(e))
        else:
            flash("Group added.")
            st.rerun()

for index, group in enumerate(load_groups(store)):
    name_col, save_col, delete_col = st.columns([4, 1, 1])
    with name_col:
        edited = st.text_input(f"Group {index + 1}", value=group, key=f"group_{index}_{group}",
                               label_visibility="collapsed")
    with save_col:
        if st.button("Save", key=f"save_group_{index}", disabled=edited == group, use_container_width=True):
            try:
                rename_group(store, index, edited)
            except TrackerError as e:
                st.error(str(e))
            else:
                flash("Group name updated.")
                st.rerun()
    with delete_col:
        if st.button("🗑️", key=f"delete_group_{index}", use_container_width=True, help=f"Delete {group}"):
            try:
                delete_group(store, index)
            except TrackerError as e:
                st.error(str(e))
            else:
                flash(f"Group '{group}' deleted.")
                st.rerun()

st.markdown("---")

# -----------------------------
# Acupoints
# -----------------------------
st.subheader("Acupoints")

settings = load_acupoint_settings(store)

count = st.number_input(
    f"Number of acupoints ({MIN_ACUPOINTS}-{MAX_ACUPOINTS})",
    min_value=MIN_ACUPOINTS,
    max_value=MAX_ACUPOINTS,
    value=settings.count,
    step=1,
)
names = resize_acupoint_names(settings.names, count)

with st.form("acupoint_names"):
    columns = st.columns(4)
    edited_names = []
    for index, name in enumerate(names):
        with columns[index % 4]:
            edited_names.append(st.text_input(f"#{index + 1}", value=name, key=f"acupoint_name_{index}"))
    submitted = st.form_submit_button("Save Acupoint Settings", type="primary")

if submitted:
    try:
        save_acupoint_settings(store, edited_names)
    except TrackerError as e:
        st.error(str(e))
    else:
        flash("Acupoint settings saved.")
        st.rerun()
