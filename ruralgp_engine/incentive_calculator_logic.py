import logging
import numpy as np
from ruralgp_engine.profile_models import ApplicantProfile, DegreeLength
from ruralgp_engine.incentive_definitions import (
    PROGRAM_YEARS, PROGRAMS_BY_ID, INCENTIVE_PROGRAMS,
    HELP_REDUCTION_YEARS,
    RURAL_GRANT_SKILL_AMOUNTS, RURAL_GRANT_EMERGENCY_AMOUNTS,
    REGISTRAR_SCHEDULES,
    SALARY_SUPPORT_AMOUNTS, PAID_STUDY_LEAVE_AMOUNTS,
    WIP_MEDICAL_ELEVATED_RATES, WIP_MEDICAL_BASE_RATES,
    WIP_TIER_GROUPS, WIP_ACTIVITY_RATES,
)

calc_logger = logging.getLogger('incentive_calculator')


def empty_schedule():
    return [0.0] * PROGRAM_YEARS


def _schedule_from_years(amounts_by_year: dict):
    """Builds a 6-slot schedule from a {program year (1-based): amount} mapping."""
    schedule = empty_schedule()
    for year, amount in amounts_by_year.items():
        schedule[year - 1] += float(amount)
    return schedule


def _flat_schedule(amount):
    return [float(amount)] * PROGRAM_YEARS


# --- Eligibility Rule Engine ---
def passes_rules(profile: ApplicantProfile, rules: list) -> bool:
    """
    Evaluates declarative rules (see incentive_definitions) against a profile.
    All rules must hold; a missing value fails every condition.
    """
    for rule in rules:
        condition = rule["condition"]
        user_value = getattr(profile, rule["field"], None)

        if condition == "is_set":
            if user_value is None: return False
        elif condition == "is_true":
            if not user_value: return False
        elif user_value is None:
            return False  # Can't evaluate if data is missing
        elif condition == "is_one_of":
            if user_value not in rule["value"]: return False
        elif condition == "is_equal_to":
            if user_value != rule["value"]: return False
        elif condition == "is_not_equal_to":
            if user_value == rule["value"]: return False
        elif condition == "is_greater_than":
            if not float(user_value) > rule["value"]: return False
        else:
            raise ValueError(f"Unknown eligibility condition '{condition}'.")
    return True


def is_program_eligible(profile: ApplicantProfile, program_id: str) -> bool:
    return passes_rules(profile, PROGRAMS_BY_ID[program_id]["eligibility_rules"])


# ======================= THE EIGHT CALCULATORS =======================
def calculate_help_debt_reduction(profile: ApplicantProfile):
    """
    Half of the HELP balance is written off in each of two program years.
    The years depend on remoteness tier and degree length; a missing degree
    length follows the four-year timing.
    """
    if not is_program_eligible(profile, "help_reduction"):
        return empty_schedule()

    degree_length = profile.degree_length or DegreeLength.FOUR
    years = HELP_REDUCTION_YEARS.get((profile.remoteness_tier, degree_length))
    if not years:
        return empty_schedule()

    half_amount = profile.help_debt_balance / 2
    return _schedule_from_years({year: half_amount for year in years})


def calculate_rural_grants(profile: ApplicantProfile):
    """Flat annual grant for procedural skills and emergency services, repeated every year."""
    if not is_program_eligible(profile, "rural_grants"):
        return empty_schedule()

    amount = sum(value for skill, value in RURAL_GRANT_SKILL_AMOUNTS.items()
                 if skill in profile.advanced_skill_areas)

    service_type = profile.emergency_service_type
    if service_type is not None:
        if service_type.includes_medical:
            amount += RURAL_GRANT_EMERGENCY_AMOUNTS["medical"]
        if service_type.includes_mental_health:
            amount += RURAL_GRANT_EMERGENCY_AMOUNTS["mental_health"]

    return _flat_schedule(amount)


def calculate_registrar_payments(profile: ApplicantProfile):
    if not is_program_eligible(profile, "registrar_payments"):
        return empty_schedule()

    schedule_def = REGISTRAR_SCHEDULES.get((profile.training_college, profile.training_pathway))
    if schedule_def is None:
        # Unknown combination, or a pathway funded outside these programs
        return empty_schedule()

    rate = schedule_def["rates"].get(profile.remoteness_tier, 0.0)
    return _schedule_from_years({year: rate for year in schedule_def["paid_years"]})


def calculate_salary_support(profile: ApplicantProfile):
    if not is_program_eligible(profile, "salary_support"):
        return empty_schedule()
    return _schedule_from_years(SALARY_SUPPORT_AMOUNTS.get(profile.training_pathway, {}))


def calculate_paid_study_leave(profile: ApplicantProfile):
    if not is_program_eligible(profile, "paid_study_leave"):
        return empty_schedule()
    return _schedule_from_years(PAID_STUDY_LEAVE_AMOUNTS.get(profile.training_pathway, {}))


def calculate_wip_medical(profile: ApplicantProfile):
    """
    WIP Doctor stream. Registrars and VR GPs are paid from the elevated table,
    status "Neither" from the base table, and an unanswered status gets
    nothing. The tables hold five yearly values; the fifth-year rate
    continues into Year 6.
    """
    if not is_program_eligible(profile, "wip_medical"):
        return empty_schedule()

    if profile.is_registrar or profile.is_vocationally_registered:
        rates = WIP_MEDICAL_ELEVATED_RATES
    else:
        rates = WIP_MEDICAL_BASE_RATES

    five_year_rates = rates.get(profile.remoteness_tier)
    if five_year_rates is None:
        return empty_schedule()
    return [float(amount) for amount in five_year_rates] + [float(five_year_rates[-1])]


def _calculate_wip_activity_stream(profile: ApplicantProfile, program_id: str):
    """Shared lookup for the emergency and advanced skills streams: (tier group, activity band) -> flat annual rate."""
    program = PROGRAMS_BY_ID[program_id]
    if not passes_rules(profile, program["eligibility_rules"]):
        return empty_schedule()

    tier_group = WIP_TIER_GROUPS.get(profile.remoteness_tier)
    band = getattr(profile, program["band_field"])
    if tier_group is None or band is None:
        return empty_schedule()

    return _flat_schedule(WIP_ACTIVITY_RATES.get((tier_group, band), 0))


def calculate_wip_emergency(profile: ApplicantProfile):
    return _calculate_wip_activity_stream(profile, "wip_emergency")


def calculate_wip_advanced_skills(profile: ApplicantProfile):
    return _calculate_wip_activity_stream(profile, "wip_advanced_skills")


CALCULATORS = {
    "help_reduction": calculate_help_debt_reduction,
    "rural_grants": calculate_rural_grants,
    "registrar_payments": calculate_registrar_payments,
    "salary_support": calculate_salary_support,
    "paid_study_leave": calculate_paid_study_leave,
    "wip_medical": calculate_wip_medical,
    "wip_emergency": calculate_wip_emergency,
    "wip_advanced_skills": calculate_wip_advanced_skills,
}


# ======================= AGGREGATION =======================
def aggregate_payment_schedules(schedules: dict) -> dict:
    """
    Sums the per-program schedules year by year.

    Amounts are kept as unrounded floats so cents survive until display;
    use utils.format_currency for presentation.

    Returns:
        {
            "yearly_totals": list of 6 floats,
            "grand_total": float,
            "eligible_category_count": int,
        }
    """
    if not schedules:
        return {"yearly_totals": empty_schedule(), "grand_total": 0.0, "eligible_category_count": 0}

    matrix = np.array([list(vector) for vector in schedules.values()], dtype=float)
    yearly_totals = matrix.sum(axis=0)

    return {
        "yearly_totals": [float(total) for total in yearly_totals],
        "grand_total": float(yearly_totals.sum()),
        "eligible_category_count": int((matrix > 0).any(axis=1).sum()),
    }


# ======================= MASTER EVALUATION =======================
def evaluate_profile(profile: ApplicantProfile) -> dict:
    """
    Runs every incentive program for one applicant.

    Programs with service requirements (HELP reduction needs 144+ primary
    care days) are zeroed here when the requirement is not met; the
    individual calculators do not apply these requirements.
    """
    schedules = {}
    for program in INCENTIVE_PROGRAMS:
        if passes_rules(profile, program["service_requirement_rules"]):
            schedules[program["id"]] = CALCULATORS[program["id"]](profile)
        else:
            schedules[program["id"]] = empty_schedule()

    results = {"schedules": schedules}
    results.update(aggregate_payment_schedules(schedules))

    calc_logger.debug(
        f"Evaluated profile: tier={profile.remoteness_tier}, status={profile.professional_status}, "
        f"grand_total={results['grand_total']:.2f}, categories={results['eligible_category_count']}"
    )
    return results
