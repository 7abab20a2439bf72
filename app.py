import streamlit as st

from core.session_manager import init_session_state


def main():
    st.set_page_config(
        page_title="Body Point Tracker",
        page_icon="📍",
        layout="wide",
        initial_sidebar_state="collapsed",
    )

    init_session_state()

    # The patient list is the landing page
    st.switch_page("pages/patient_list.py")


if __name__ == "__main__":
    main()
