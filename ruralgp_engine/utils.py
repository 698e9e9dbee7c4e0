from decimal import Decimal, ROUND_HALF_UP
import pandas as pd
from ruralgp_engine.profile_models import (
    RemotenessTier, DegreeLength, PrimaryCareDaysBand, ActivityBand,
    ProfessionalStatus, TrainingCollege, EmergencyServiceType,
    PATHWAYS_BY_COLLEGE, ADVANCED_SKILL_AREAS,
)
from ruralgp_engine.incentive_definitions import (
    INCENTIVE_PROGRAMS, PROGRAMS_BY_ID, PROGRAM_YEARS,
    HELP_REDUCTION_YEARS, AGPT_REGISTRAR_RATES, RVTS_REGISTRAR_RATES,
    WIP_MEDICAL_ELEVATED_RATES, WIP_MEDICAL_BASE_RATES,
    WIP_TIER_GROUPS, WIP_ACTIVITY_RATES,
)
from ruralgp_engine.incentive_calculator_logic import is_program_eligible

YEAR_COLUMNS = [f"Year {year}" for year in range(1, PROGRAM_YEARS + 1)]

# --- Form options (labels double as enum values) ---
TIER_OPTIONS = [tier.value for tier in RemotenessTier]
DEGREE_LENGTH_OPTIONS = [length.value for length in DegreeLength]
PRIMARY_CARE_DAYS_OPTIONS = [band.value for band in PrimaryCareDaysBand]
ACTIVITY_BAND_OPTIONS = [band.value for band in ActivityBand]
PROFESSIONAL_STATUS_OPTIONS = [status.value for status in ProfessionalStatus]
COLLEGE_OPTIONS = [college.value for college in TrainingCollege]
EMERGENCY_SERVICE_OPTIONS = [service.value for service in EmergencyServiceType]
PATHWAY_OPTIONS_BY_COLLEGE = {
    college.value: [pathway.value for pathway in pathways]
    for college, pathways in PATHWAYS_BY_COLLEGE.items()
}
SKILL_OPTIONS = list(ADVANCED_SKILL_AREAS)
YES_NO_OPTIONS = ["Yes", "No"]

# --- Static Tooltips / Helper Texts ---
TOOLTIPS = {
    "mmm": "The Modified Monash Model (MMM) category of the town you practise in, from MMM 1 (major city) to MMM 7 (very remote).",
    "primary_care_days": "Days per year you work in primary care. Several programs need more than 47 days, and HELP reduction needs 144 or more.",
    "degree_length": "Length of the medical degree your HELP debt relates to. It controls which years the debt is reduced in.",
    "help_debt_balance": "Your outstanding HELP (HECS) balance in dollars.",
    "professional_status": "GP registrars and vocationally registered (VR) GPs receive the higher WIP Doctor stream rate.",
    "college_type": "The college you are training with.",
    "training_pathway": "Your training pathway. Available pathways depend on the college.",
    "state_salaried": "Registrars in a state salaried position with paid study leave are not eligible for salary support or paid study leave payments.",
    "advanced_skill": "Do you practise an advanced skill recognised by the Workforce Incentive Program?",
    "selected_skills": "Surgery, anaesthesia and obstetrics also attract rural procedural grants in MMM 3-7.",
    "days_worked": "Days per year you work in your area(s) of advanced skill.",
    "emergency_care": "Do you provide emergency care in your community?",
    "emergency_service_type": "Medical emergency services count towards the WIP Emergency stream; both types attract rural grants.",
    "emergency_shifts": "Emergency shifts per year.",
}


def round_for_display(amount: float) -> int:
    """Rounds to the nearest whole dollar, halves rounding up."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount: float, gray_out_zero: bool = False) -> str:
    if amount == 0 and gray_out_zero:
        return "—"
    return f"${round_for_display(amount):,}"


def build_results_dataframe(results: dict) -> pd.DataFrame:
    """
    One row per program plus a "Total" row; columns Year 1..Year 6 and Total.
    Values are left unrounded.
    """
    rows = {
        PROGRAMS_BY_ID[program_id]["short_name"]: schedule
        for program_id, schedule in results["schedules"].items()
    }
    rows["Total"] = results["yearly_totals"]

    df = pd.DataFrame.from_dict(rows, orient="index", columns=YEAR_COLUMNS)
    df["Total"] = df[YEAR_COLUMNS].sum(axis=1)
    return df


def get_eligible_programs(profile) -> list:
    """Programs whose eligibility rules pass for this profile (amounts may still be zero)."""
    return [program for program in INCENTIVE_PROGRAMS if is_program_eligible(profile, program["id"])]


# --- Reference Tables (shown beside the results) ---
def _help_reference_table():
    rows = {}
    for tier in RemotenessTier:
        rows[tier.value] = [
            " & ".join(f"Year {y}" for y in HELP_REDUCTION_YEARS[(tier, length)])
            if (tier, length) in HELP_REDUCTION_YEARS else "Not eligible"
            for length in DegreeLength
        ]
    return pd.DataFrame.from_dict(
        rows, orient="index", columns=[f"{length.value}-year degree" for length in DegreeLength]
    )


def _registrar_reference_table():
    rows = {
        tier.value: [AGPT_REGISTRAR_RATES[tier], RVTS_REGISTRAR_RATES[tier]]
        for tier in RemotenessTier
    }
    return pd.DataFrame.from_dict(
        rows, orient="index",
        columns=["AGPT (Years 1-2)", "ACRRM RVTS (Years 1-4)"]
    )


def _wip_medical_reference_table(rates):
    rows = {tier.value: list(rates[tier]) + [rates[tier][-1]] for tier in RemotenessTier}
    return pd.DataFrame.from_dict(rows, orient="index", columns=YEAR_COLUMNS)


def _wip_activity_reference_table():
    groups = list(dict.fromkeys(WIP_TIER_GROUPS.values()))
    rows = {group: [WIP_ACTIVITY_RATES[(group, band)] for band in ActivityBand] for group in groups}
    return pd.DataFrame.from_dict(
        rows, orient="index", columns=[f"{band.value} days" for band in ActivityBand]
    )


def build_reference_tables() -> dict:
    """Reference rate tables keyed by a display title."""
    return {
        "HELP Reduction Timing": _help_reference_table(),
        "Registrar Payments (per year)": _registrar_reference_table(),
        "WIP Doctor Stream (Registrar / VR GP)": _wip_medical_reference_table(WIP_MEDICAL_ELEVATED_RATES),
        "WIP Doctor Stream (Other)": _wip_medical_reference_table(WIP_MEDICAL_BASE_RATES),
        "WIP Emergency & Advanced Skills (per year)": _wip_activity_reference_table(),
    }
