from ruralgp_engine.profile_models import (
    RemotenessTier as T,
    DegreeLength,
    PrimaryCareDaysBand,
    ActivityBand,
    TrainingCollege,
    TrainingPathway,
    EmergencyServiceType,
    MAINSTREAM_PATHWAYS,
)

PROGRAM_YEARS = 6

RURAL_TIERS = [T.MMM3, T.MMM4, T.MMM5, T.MMM6, T.MMM7]

# ==========================================================================================
# LOOKUP TABLES
# Every table is keyed by enum members (never by list position).
# ==========================================================================================

# --- HELP debt reduction: (tier, degree length) -> the two program years receiving half the balance ---
HELP_REDUCTION_YEARS = {
    (T.MMM3, DegreeLength.FOUR): (2, 4), (T.MMM3, DegreeLength.FIVE): (3, 5), (T.MMM3, DegreeLength.SIX): (3, 6),
    (T.MMM4, DegreeLength.FOUR): (2, 4), (T.MMM4, DegreeLength.FIVE): (3, 5), (T.MMM4, DegreeLength.SIX): (3, 6),
    (T.MMM5, DegreeLength.FOUR): (2, 4), (T.MMM5, DegreeLength.FIVE): (3, 5), (T.MMM5, DegreeLength.SIX): (3, 6),
    (T.MMM6, DegreeLength.FOUR): (1, 2), (T.MMM6, DegreeLength.FIVE): (2, 3), (T.MMM6, DegreeLength.SIX): (2, 3),
    (T.MMM7, DegreeLength.FOUR): (1, 2), (T.MMM7, DegreeLength.FIVE): (2, 3), (T.MMM7, DegreeLength.SIX): (2, 3),
}

# --- Rural procedural grants: flat annual amounts ---
RURAL_GRANT_SKILL_AMOUNTS = {
    "Surgery": 20000,
    "Anaesthesia": 20000,
    "Obstetrics and Gynaecology": 20000,
}
RURAL_GRANT_EMERGENCY_AMOUNTS = {
    "medical": 6000,
    "mental_health": 6000,
}

# --- Registrar payments ---
AGPT_REGISTRAR_RATES = {
    T.MMM1: 0.0, T.MMM2: 3675.60, T.MMM3: 6993.86, T.MMM4: 6993.86,
    T.MMM5: 9822.02, T.MMM6: 18888.50, T.MMM7: 18888.50,
}
RVTS_REGISTRAR_RATES = {
    T.MMM1: 0.0, T.MMM2: 3600.0, T.MMM3: 6850.0, T.MMM4: 6850.0,
    T.MMM5: 9620.0, T.MMM6: 18500.0, T.MMM7: 18500.0,
}

# (college, pathway) -> rate table and the program years it is paid in.
# None marks combinations funded outside these programs; they always pay zero.
REGISTRAR_SCHEDULES = {
    (TrainingCollege.ACRRM, TrainingPathway.AGPT): {"rates": AGPT_REGISTRAR_RATES, "paid_years": (1, 2)},
    (TrainingCollege.ACRRM, TrainingPathway.RVTS): {"rates": RVTS_REGISTRAR_RATES, "paid_years": (1, 2, 3, 4)},
    (TrainingCollege.ACRRM, TrainingPathway.INDEPENDENT): None,
    (TrainingCollege.RACGP, TrainingPathway.AGPT): {"rates": AGPT_REGISTRAR_RATES, "paid_years": (1, 2)},
    (TrainingCollege.RACGP, TrainingPathway.RVTS): None,
    (TrainingCollege.RACGP, TrainingPathway.FELLOWSHIP_SUPPORT): None,
}

# --- Salary support & paid study leave: pathway -> {program year: amount} ---
SALARY_SUPPORT_AMOUNTS = {
    TrainingPathway.AGPT: {1: 30000.0},
    TrainingPathway.RVTS: {1: 30000.0},
}
PAID_STUDY_LEAVE_AMOUNTS = {
    TrainingPathway.AGPT: {1: 2587.42, 2: 2762.98},
    TrainingPathway.RVTS: {1: 2446.44, 2: 2762.98},
}

# --- WIP Doctor stream: tier -> payments for years 1..5 (year 6 repeats year 5) ---
WIP_MEDICAL_ELEVATED_RATES = {
    T.MMM1: (0, 0, 0, 0, 0),
    T.MMM2: (0, 0, 0, 0, 0),
    T.MMM3: (0, 4500, 7500, 7500, 12000),
    T.MMM4: (0, 8000, 13000, 13000, 18000),
    T.MMM5: (0, 12000, 17000, 17000, 23000),
    T.MMM6: (16000, 16000, 25000, 25000, 35000),
    T.MMM7: (25000, 25000, 35000, 35000, 60000),
}
WIP_MEDICAL_BASE_RATES = {
    T.MMM1: (0, 0, 0, 0, 0),
    T.MMM2: (0, 0, 0, 0, 0),
    T.MMM3: (0, 3600, 6000, 6000, 9600),
    T.MMM4: (0, 6400, 10400, 10400, 14400),
    T.MMM5: (0, 9600, 13600, 13600, 18400),
    T.MMM6: (12800, 12800, 20000, 20000, 28000),
    T.MMM7: (20000, 20000, 28000, 28000, 48000),
}

# --- WIP Emergency / Advanced Skills streams ---
WIP_TIER_GROUPS = {
    T.MMM1: "MMM 1-2", T.MMM2: "MMM 1-2",
    T.MMM3: "MMM 3",
    T.MMM4: "MMM 4-5", T.MMM5: "MMM 4-5",
    T.MMM6: "MMM 6-7", T.MMM7: "MMM 6-7",
}
WIP_ACTIVITY_RATES = {
    ("MMM 1-2", ActivityBand.DAYS_1_TO_10): 0, ("MMM 1-2", ActivityBand.DAYS_11_TO_21): 0,
    ("MMM 1-2", ActivityBand.DAYS_22_TO_47): 0, ("MMM 1-2", ActivityBand.DAYS_48_PLUS): 0,
    ("MMM 3", ActivityBand.DAYS_1_TO_10): 0, ("MMM 3", ActivityBand.DAYS_11_TO_21): 4000,
    ("MMM 3", ActivityBand.DAYS_22_TO_47): 4000, ("MMM 3", ActivityBand.DAYS_48_PLUS): 4000,
    ("MMM 4-5", ActivityBand.DAYS_1_TO_10): 0, ("MMM 4-5", ActivityBand.DAYS_11_TO_21): 5000,
    ("MMM 4-5", ActivityBand.DAYS_22_TO_47): 7500, ("MMM 4-5", ActivityBand.DAYS_48_PLUS): 9500,
    ("MMM 6-7", ActivityBand.DAYS_1_TO_10): 0, ("MMM 6-7", ActivityBand.DAYS_11_TO_21): 9000,
    ("MMM 6-7", ActivityBand.DAYS_22_TO_47): 10500, ("MMM 6-7", ActivityBand.DAYS_48_PLUS): 10500,
}

# ==========================================================================================
# PROGRAM DEFINITIONS
# `eligibility_rules` are checked against ApplicantProfile attributes before any table
# lookup. `service_requirement_rules` apply only in the full evaluation.
# ==========================================================================================
INCENTIVE_PROGRAMS = [
    {
        "id": "help_reduction",
        "name": "HELP Debt Reduction",
        "short_name": "HELP Reduction",
        "eligibility_rules": [
            {"field": "help_debt_balance", "condition": "is_greater_than", "value": 0},
            {"field": "remoteness_tier", "condition": "is_one_of", "value": RURAL_TIERS},
        ],
        "service_requirement_rules": [
            {"field": "primary_care_days_band", "condition": "is_equal_to", "value": PrimaryCareDaysBand.FROM_144},
        ],
        "tables": {"reduction_years": HELP_REDUCTION_YEARS},
        "range_tooltip": "Half of your HELP balance is written off in each of two program years. Timing depends on location and degree length. Requires 144+ primary care days per year.",
        "formula_text": "HELP Balance / 2, paid in two program years",
    },
    {
        "id": "rural_grants",
        "name": "Rural Procedural Grants",
        "short_name": "Rural Grants",
        "eligibility_rules": [
            {"field": "remoteness_tier", "condition": "is_one_of", "value": RURAL_TIERS},
        ],
        "service_requirement_rules": [],
        "tables": {
            "skill_amounts": RURAL_GRANT_SKILL_AMOUNTS,
            "emergency_amounts": RURAL_GRANT_EMERGENCY_AMOUNTS,
        },
        "range_tooltip": "$20,000 a year for each of surgery, anaesthesia and obstetrics, plus $6,000 each for medical and mental health emergency services (MMM 3-7).",
        "formula_text": "Sum of procedural skill and emergency amounts, every year",
    },
    {
        "id": "registrar_payments",
        "name": "Registrar Rural Incentive Payments",
        "short_name": "Registrar Payments",
        "eligibility_rules": [
            {"field": "is_registrar", "condition": "is_true"},
        ],
        "service_requirement_rules": [],
        "tables": {"schedules": REGISTRAR_SCHEDULES},
        "range_tooltip": "Paid to registrars by location. RVTS with RACGP and ACRRM independent pathway trainees are funded elsewhere.",
        "formula_text": "Tier rate for (college, pathway), paid in Years 1-2 (AGPT) or 1-4 (ACRRM RVTS)",
    },
    {
        "id": "salary_support",
        "name": "Registrar Salary Support",
        "short_name": "Salary Support",
        "eligibility_rules": [
            {"field": "is_registrar", "condition": "is_true"},
            {"field": "state_salaried_with_study_leave_pay", "condition": "is_equal_to", "value": False},
            {"field": "training_pathway", "condition": "is_one_of", "value": list(MAINSTREAM_PATHWAYS)},
        ],
        "service_requirement_rules": [],
        "tables": {"amounts": SALARY_SUPPORT_AMOUNTS},
        "range_tooltip": "$30,000 in Year 1 for AGPT and RVTS registrars not in a state salaried position.",
        "formula_text": "$30,000 in Year 1",
    },
    {
        "id": "paid_study_leave",
        "name": "Paid Study Leave",
        "short_name": "Paid Study Leave",
        "eligibility_rules": [
            {"field": "is_registrar", "condition": "is_true"},
            {"field": "state_salaried_with_study_leave_pay", "condition": "is_equal_to", "value": False},
            {"field": "training_pathway", "condition": "is_one_of", "value": list(MAINSTREAM_PATHWAYS)},
        ],
        "service_requirement_rules": [],
        "tables": {"amounts": PAID_STUDY_LEAVE_AMOUNTS},
        "range_tooltip": "Study leave payments in Years 1 and 2 for AGPT and RVTS registrars not in a state salaried position.",
        "formula_text": "AGPT: $2,587.42 + $2,762.98; RVTS: $2,446.44 + $2,762.98",
    },
    {
        "id": "wip_medical",
        "name": "WIP Doctor Stream",
        "short_name": "WIP Doctor",
        "eligibility_rules": [
            {"field": "remoteness_tier", "condition": "is_set"},
            {"field": "professional_status", "condition": "is_set"},
        ],
        "service_requirement_rules": [],
        "tables": {
            "elevated_rates": WIP_MEDICAL_ELEVATED_RATES,
            "base_rates": WIP_MEDICAL_BASE_RATES,
        },
        "range_tooltip": "Workforce Incentive Program payments by location and length of service. Registrars and VR GPs receive the higher rate.",
        "formula_text": "Tier rate for the program year (Year 6 = Year 5)",
    },
    {
        "id": "wip_emergency",
        "name": "WIP Emergency Medicine Stream",
        "short_name": "WIP Emergency",
        "eligibility_rules": [
            {"field": "primary_care_days_band", "condition": "is_set"},
            {"field": "primary_care_days_band", "condition": "is_not_equal_to", "value": PrimaryCareDaysBand.UP_TO_47},
            {"field": "provides_emergency_care", "condition": "is_true"},
            {"field": "emergency_service_type", "condition": "is_one_of",
             "value": [EmergencyServiceType.MEDICAL, EmergencyServiceType.BOTH]},
        ],
        "service_requirement_rules": [],
        "tables": {"tier_groups": WIP_TIER_GROUPS, "rates": WIP_ACTIVITY_RATES},
        "band_field": "emergency_shifts_band",
        "range_tooltip": "Annual payment for medical emergency shifts, by location and shifts per year. Requires more than 47 primary care days.",
        "formula_text": "Rate for (tier group, shifts band), every year",
    },
    {
        "id": "wip_advanced_skills",
        "name": "WIP Advanced Skills Stream",
        "short_name": "WIP Adv Skills",
        "eligibility_rules": [
            {"field": "primary_care_days_band", "condition": "is_set"},
            {"field": "primary_care_days_band", "condition": "is_not_equal_to", "value": PrimaryCareDaysBand.UP_TO_47},
            {"field": "has_advanced_skill", "condition": "is_true"},
        ],
        "service_requirement_rules": [],
        "tables": {"tier_groups": WIP_TIER_GROUPS, "rates": WIP_ACTIVITY_RATES},
        "band_field": "advanced_skill_days_band",
        "range_tooltip": "Annual payment for days worked in an advanced skill, by location. Requires more than 47 primary care days.",
        "formula_text": "Rate for (tier group, days band), every year",
    },
]

PROGRAMS_BY_ID = {program["id"]: program for program in INCENTIVE_PROGRAMS}
