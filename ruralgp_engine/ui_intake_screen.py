import streamlit as st
from ruralgp_engine.utils import (
    TOOLTIPS,
    TIER_OPTIONS, DEGREE_LENGTH_OPTIONS, PRIMARY_CARE_DAYS_OPTIONS,
    ACTIVITY_BAND_OPTIONS, PROFESSIONAL_STATUS_OPTIONS, COLLEGE_OPTIONS,
    PATHWAY_OPTIONS_BY_COLLEGE, EMERGENCY_SERVICE_OPTIONS, SKILL_OPTIONS,
    YES_NO_OPTIONS,
)


def _select(label, options, form_key, widget_key, placeholder="Select an option"):
    """Selectbox that starts empty and keeps its answer in form_data."""
    form_data = st.session_state.form_data
    current = form_data.get(form_key)
    form_data[form_key] = st.selectbox(
        label,
        options=options,
        index=options.index(current) if current in options else None,
        placeholder=placeholder,
        key=widget_key,
        help=TOOLTIPS.get(form_key),
    )
    return form_data[form_key]


def _clear(*form_keys):
    for form_key in form_keys:
        st.session_state.form_data.pop(form_key, None)


def display_intake_form():
    """
    Renders the calculator questions. Answers are stored in
    `st.session_state.form_data` under the keys read by build_applicant_profile.
    Returns True once the required questions are answered.
    """
    form_data = st.session_state.form_data

    # ---- Section 1: Required ----
    st.subheader("📍 Section 1: Location & Primary Care")
    _select("Q1: What is the MMM category of your practice location?", TIER_OPTIONS, "mmm", "tier_select")
    _select("Q2: How many days per year do you work in primary care?", PRIMARY_CARE_DAYS_OPTIONS,
            "primary_care_days", "primary_care_days_select")

    # ---- Section 2: HELP debt ----
    st.subheader("🎓 Section 2: HELP Debt (Optional)")
    col1, col2 = st.columns(2)
    with col1:
        form_data["help_debt_balance"] = st.number_input(
            "Q3: Current HELP debt balance ($)",
            min_value=0.0,
            value=float(form_data.get("help_debt_balance") or 0.0),
            step=1000.0,
            key="help_debt_input",
            help=TOOLTIPS.get("help_debt_balance"),
        )
    with col2:
        _select("Degree length (years)", DEGREE_LENGTH_OPTIONS, "degree_length", "degree_length_select")

    # ---- Section 3: Professional status & practice areas ----
    st.subheader("🩺 Section 3: Professional Status & Practice Areas")
    status = _select("Q4: What is your professional status?", PROFESSIONAL_STATUS_OPTIONS,
                     "professional_status", "status_select")

    if status == "GP Registrar":
        _clear("advanced_skill", "selected_skills", "days_worked",
               "emergency_care", "emergency_service_type", "emergency_shifts")
        college = _select("Which college are you training with?", COLLEGE_OPTIONS, "college_type", "college_select")
        if college:
            pathway = _select("Which training pathway?", PATHWAY_OPTIONS_BY_COLLEGE[college],
                              "training_pathway", "pathway_select", placeholder="Select pathway")
            if pathway in ("AGPT", "RVTS"):
                _select("Are you in a state salaried position with paid study leave?", YES_NO_OPTIONS,
                        "state_salaried", "state_salaried_select")
            else:
                _clear("state_salaried")
        else:
            _clear("training_pathway", "state_salaried")

    elif status in ("VR GP", "Neither"):
        _clear("college_type", "training_pathway", "state_salaried")

        advanced = _select("Q5: Do you have an advanced skill?", YES_NO_OPTIONS, "advanced_skill", "advanced_skill_select")
        if advanced == "Yes":
            form_data["selected_skills"] = st.multiselect(
                "Which skills do you have?",
                options=SKILL_OPTIONS,
                default=[s for s in form_data.get("selected_skills", []) if s in SKILL_OPTIONS],
                key="skills_multiselect",
                help=TOOLTIPS.get("selected_skills"),
            )
            _select("How many days per year do you work in your area of advanced skill/s?",
                    ACTIVITY_BAND_OPTIONS, "days_worked", "days_worked_select", placeholder="Select days")
        else:
            _clear("selected_skills", "days_worked")

        emergency = _select("Q6: Do you provide emergency care?", YES_NO_OPTIONS, "emergency_care", "emergency_care_select")
        if emergency == "Yes":
            service = _select("Is this service Medical or Mental Health related?", EMERGENCY_SERVICE_OPTIONS,
                              "emergency_service_type", "emergency_type_select", placeholder="Select type")
            if service in ("Medical", "Both"):
                _select("How many emergency shifts per year?", ACTIVITY_BAND_OPTIONS,
                        "emergency_shifts", "emergency_shifts_select", placeholder="Select range")
            else:
                _clear("emergency_shifts")
        else:
            _clear("emergency_service_type", "emergency_shifts")

    return bool(form_data.get("mmm") and form_data.get("primary_care_days"))
