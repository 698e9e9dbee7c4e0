import streamlit as st
import logging, os, uuid
from ruralgp_engine.profile_models import build_applicant_profile
from ruralgp_engine.incentive_calculator_logic import evaluate_profile
from ruralgp_engine.usage_events import (
    get_events_connection, record_event,
    EVENT_CALCULATOR_STARTED, EVENT_CALCULATOR_COMPLETED,
)
from ruralgp_engine.ui_intake_screen import display_intake_form
from ruralgp_engine.ui_results_screen import display_results
from ruralgp_engine.utils import get_eligible_programs

DEFAULT_EVENTS_DB_PATH = "ruralgp_events.db"

st.set_page_config(page_title="🩺 Rural GP Incentives Calculator", layout="wide")


# --- Events DB Path Setup ---
def get_events_db_path():
    """st.secrets first, then the RURALGP_EVENTS_DB environment variable, then the default file."""
    try:
        secret_path = st.secrets.get("EVENTS_DB_PATH")
        if secret_path:
            return secret_path
    except Exception:
        # No secrets.toml available
        pass
    return os.environ.get("RURALGP_EVENTS_DB", DEFAULT_EVENTS_DB_PATH)


@st.cache_resource
def get_cached_events_connection(db_path):
    return get_events_connection(db_path)


def log_usage_event(event_type):
    """Records a usage event; failures are logged and never interrupt the calculator."""
    try:
        conn = get_cached_events_connection(get_events_db_path())
    except Exception as e:
        logging.error(f"Could not open usage events store: {e}")
        return
    form_data = st.session_state.form_data
    result = record_event(
        conn, event_type,
        session_id=st.session_state.session_id,
        remoteness_tier=form_data.get("mmm"),
        professional_status=form_data.get("professional_status"),
    )
    if "error" in result:
        logging.error(f"Usage event '{event_type}' not recorded: {result['error']}")


# --- Session State Initialization ---
if 'form_data' not in st.session_state:
    st.session_state.form_data = {}
if 'session_id' not in st.session_state:
    st.session_state.session_id = str(uuid.uuid4())
if 'started_event_logged' not in st.session_state:
    st.session_state.started_event_logged = False
if 'completed_event_logged' not in st.session_state:
    st.session_state.completed_event_logged = False


def clear_form_data():
    """Resets all answers, keeping the session id."""
    for key in list(st.session_state.keys()):
        if key not in ['session_id', 'started_event_logged', 'completed_event_logged']:
            del st.session_state[key]
    st.session_state.form_data = {}


if __name__ == "__main__":

    st.title("🩺 Rural GP Incentives Calculator")
    st.markdown("Estimate HELP reduction, grants, registrar and Workforce Incentive Program payments over six years.")

    if not st.session_state.started_event_logged:
        log_usage_event(EVENT_CALCULATOR_STARTED)
        st.session_state.started_event_logged = True

    with st.sidebar:
        st.subheader("Rural GP Incentives")
        if st.button("Start Over", icon=":material/restart_alt:", use_container_width=True, key="sidebar_start_over"):
            clear_form_data()
            st.rerun()

    form_col, results_col = st.columns([2, 3])

    with form_col:
        required_answered = display_intake_form()

    with results_col:
        if required_answered:
            profile = build_applicant_profile(st.session_state.form_data)
            results = evaluate_profile(profile)
            display_results(results, get_eligible_programs(profile))

            if not st.session_state.completed_event_logged:
                log_usage_event(EVENT_CALCULATOR_COMPLETED)
                st.session_state.completed_event_logged = True
        else:
            st.info("Answer Q1 and Q2 to see your estimated incentives.", icon="📋")
