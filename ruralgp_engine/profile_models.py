import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RemotenessTier(str, Enum):
    """Modified Monash Model category of the practice location."""
    MMM1 = "MMM 1"
    MMM2 = "MMM 2"
    MMM3 = "MMM 3"
    MMM4 = "MMM 4"
    MMM5 = "MMM 5"
    MMM6 = "MMM 6"
    MMM7 = "MMM 7"

    @property
    def level(self) -> int:
        return int(self.value.split(" ")[1])


class DegreeLength(str, Enum):
    FOUR = "4"
    FIVE = "5"
    SIX = "6"


class PrimaryCareDaysBand(str, Enum):
    UP_TO_47 = "47 or less"
    FROM_48_TO_95 = "48-95"
    FROM_96_TO_143 = "96-143"
    FROM_144 = "144+"


class ActivityBand(str, Enum):
    """Days (or shifts) per year spent on an advanced skill or in emergency care."""
    DAYS_1_TO_10 = "1-10"
    DAYS_11_TO_21 = "11-21"
    DAYS_22_TO_47 = "22-47"
    DAYS_48_PLUS = "48+"


class ProfessionalStatus(str, Enum):
    REGISTRAR = "GP Registrar"
    VOCATIONALLY_REGISTERED = "VR GP"
    NEITHER = "Neither"


class TrainingCollege(str, Enum):
    ACRRM = "ACRRM"
    RACGP = "RACGP"


class TrainingPathway(str, Enum):
    AGPT = "AGPT"
    RVTS = "RVTS"
    INDEPENDENT = "Independent"
    FELLOWSHIP_SUPPORT = "Fellowship Support"


class EmergencyServiceType(str, Enum):
    MEDICAL = "Medical"
    MENTAL_HEALTH = "Mental Health"
    BOTH = "Both"

    @property
    def includes_medical(self) -> bool:
        return self in (EmergencyServiceType.MEDICAL, EmergencyServiceType.BOTH)

    @property
    def includes_mental_health(self) -> bool:
        return self in (EmergencyServiceType.MENTAL_HEALTH, EmergencyServiceType.BOTH)


# Pathways offered by each college; the form only shows these combinations.
PATHWAYS_BY_COLLEGE = {
    TrainingCollege.ACRRM: (TrainingPathway.AGPT, TrainingPathway.RVTS, TrainingPathway.INDEPENDENT),
    TrainingCollege.RACGP: (TrainingPathway.AGPT, TrainingPathway.RVTS, TrainingPathway.FELLOWSHIP_SUPPORT),
}

# The two pathways eligible for salary support and paid study leave
MAINSTREAM_PATHWAYS = (TrainingPathway.AGPT, TrainingPathway.RVTS)

ADVANCED_SKILL_AREAS = (
    "Adult Internal Medicine",
    "Anaesthesia",
    "Aboriginal and Torres Strait Islander Health",
    "Mental Health",
    "Obstetrics and Gynaecology",
    "Paediatrics and Child Health",
    "Palliative Care",
    "Remote Medicine",
    "Surgery",
    "Small Town Rural General Practice",
)


@dataclass(frozen=True)
class ApplicantProfile:
    """
    The circumstances a GP declares on the calculator form.

    Every field is optional. A missing value never raises anywhere in the
    engine; it simply means the programs that depend on it pay nothing.
    """
    remoteness_tier: Optional[RemotenessTier] = None
    degree_length: Optional[DegreeLength] = None
    help_debt_balance: float = 0.0
    primary_care_days_band: Optional[PrimaryCareDaysBand] = None
    professional_status: Optional[ProfessionalStatus] = None
    training_college: Optional[TrainingCollege] = None
    training_pathway: Optional[TrainingPathway] = None
    state_salaried_with_study_leave_pay: Optional[bool] = None
    has_advanced_skill: bool = False
    advanced_skill_areas: frozenset = field(default_factory=frozenset)
    advanced_skill_days_band: Optional[ActivityBand] = None
    provides_emergency_care: bool = False
    emergency_service_type: Optional[EmergencyServiceType] = None
    emergency_shifts_band: Optional[ActivityBand] = None

    @property
    def is_registrar(self) -> bool:
        return self.professional_status == ProfessionalStatus.REGISTRAR

    @property
    def is_vocationally_registered(self) -> bool:
        return self.professional_status == ProfessionalStatus.VOCATIONALLY_REGISTERED


# --- Band classification from raw counts ---
def classify_primary_care_days(days: int) -> Optional[PrimaryCareDaysBand]:
    """Returns the primary care band for a yearly day count, or None for non-positive/invalid counts."""
    try:
        days = int(days)
    except (ValueError, TypeError):
        return None
    if days <= 0:
        return None
    if days <= 47:
        return PrimaryCareDaysBand.UP_TO_47
    if days <= 95:
        return PrimaryCareDaysBand.FROM_48_TO_95
    if days <= 143:
        return PrimaryCareDaysBand.FROM_96_TO_143
    return PrimaryCareDaysBand.FROM_144


def classify_activity_days(days: int) -> Optional[ActivityBand]:
    """Returns the activity band for a yearly count of skill days or emergency shifts."""
    try:
        days = int(days)
    except (ValueError, TypeError):
        return None
    if days <= 0:
        return None
    if days <= 10:
        return ActivityBand.DAYS_1_TO_10
    if days <= 21:
        return ActivityBand.DAYS_11_TO_21
    if days <= 47:
        return ActivityBand.DAYS_22_TO_47
    return ActivityBand.DAYS_48_PLUS


# --- Input normalizer ---
def _coerce_enum(enum_cls, raw_value):
    """Maps a raw form value onto `enum_cls`, returning None for blanks and unknown labels."""
    if raw_value is None or raw_value == "":
        return None
    if isinstance(raw_value, enum_cls):
        return raw_value
    try:
        return enum_cls(str(raw_value).strip())
    except ValueError:
        return None


def _parse_remoteness_tier(raw_value) -> Optional[RemotenessTier]:
    tier = _coerce_enum(RemotenessTier, raw_value)
    if tier is not None or raw_value is None:
        return tier
    # Also accept a bare level such as 4 or "4"
    match = re.fullmatch(r"(?:MMM\s*)?([1-7])", str(raw_value).strip(), flags=re.IGNORECASE)
    if match:
        return RemotenessTier(f"MMM {match.group(1)}")
    return None


def _parse_activity_band(raw_value) -> Optional[ActivityBand]:
    """
    Accepts either a band or a form label such as "22-47 days" / "48+ days".
    Labels are classified by their lower bound so wording changes on the
    form cannot shift an applicant into the wrong bucket.
    """
    band = _coerce_enum(ActivityBand, raw_value)
    if band is not None or raw_value is None:
        return band
    if isinstance(raw_value, int):
        return classify_activity_days(raw_value)
    match = re.match(r"\s*(\d+)", str(raw_value))
    if not match:
        return None
    return classify_activity_days(int(match.group(1)))


def _parse_yes_no(raw_value) -> bool:
    if isinstance(raw_value, bool):
        return raw_value
    return str(raw_value).strip().lower() == "yes"


def _parse_optional_yes_no(raw_value) -> Optional[bool]:
    """Maps "Yes"/"No" to True/False; an unanswered question stays None."""
    if isinstance(raw_value, bool):
        return raw_value
    answer = str(raw_value).strip().lower() if raw_value is not None else ""
    if answer == "yes":
        return True
    if answer == "no":
        return False
    return None


def _parse_amount(raw_value) -> float:
    if raw_value is None or raw_value == "":
        return 0.0
    try:
        amount = float(str(raw_value).replace(",", "").replace("$", "").strip())
    except ValueError:
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return max(amount, 0.0)


def build_applicant_profile(form_data: dict) -> ApplicantProfile:
    """
    Builds an ApplicantProfile from the raw values collected by the form.

    Keys follow the form (`mmm`, `degree_length`, `help_debt_balance`,
    `primary_care_days`, `professional_status`, `college_type`,
    `training_pathway`, `state_salaried`, `advanced_skill`, `selected_skills`,
    `days_worked`, `emergency_care`, `emergency_service_type`,
    `emergency_shifts`). Missing keys and unrecognised labels become None.
    """
    skills = form_data.get("selected_skills") or []
    return ApplicantProfile(
        remoteness_tier=_parse_remoteness_tier(form_data.get("mmm")),
        degree_length=_coerce_enum(DegreeLength, form_data.get("degree_length")),
        help_debt_balance=_parse_amount(form_data.get("help_debt_balance")),
        primary_care_days_band=_coerce_enum(PrimaryCareDaysBand, form_data.get("primary_care_days")),
        professional_status=_coerce_enum(ProfessionalStatus, form_data.get("professional_status")),
        training_college=_coerce_enum(TrainingCollege, form_data.get("college_type")),
        training_pathway=_coerce_enum(TrainingPathway, form_data.get("training_pathway")),
        state_salaried_with_study_leave_pay=_parse_optional_yes_no(form_data.get("state_salaried")),
        has_advanced_skill=_parse_yes_no(form_data.get("advanced_skill", "No")),
        advanced_skill_areas=frozenset(s for s in skills if s in ADVANCED_SKILL_AREAS),
        advanced_skill_days_band=_parse_activity_band(form_data.get("days_worked")),
        provides_emergency_care=_parse_yes_no(form_data.get("emergency_care", "No")),
        emergency_service_type=_coerce_enum(EmergencyServiceType, form_data.get("emergency_service_type")),
        emergency_shifts_band=_parse_activity_band(form_data.get("emergency_shifts")),
    )
