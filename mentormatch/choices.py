"""
Closed enumerations for every categorical questionnaire field.

Values are the option values stored by the questionnaires, so a member
compares equal to the raw string it was parsed from.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


class Specialty(str, Enum):
    """Medical specialty (mentor practice or mentee interest)."""
    INTERNAL_MEDICINE = "internal-medicine"
    PEDIATRICS = "pediatrics"
    SURGERY = "surgery"
    PSYCHIATRY = "psychiatry"
    EMERGENCY_MEDICINE = "emergency-medicine"
    FAMILY_MEDICINE = "family-medicine"
    RADIOLOGY = "radiology"
    ANESTHESIOLOGY = "anesthesiology"
    DERMATOLOGY = "dermatology"
    NEUROLOGY = "neurology"
    ORTHOPEDICS = "orthopedics"
    CARDIOLOGY = "cardiology"
    OTHER = "other"


class HelpArea(str, Enum):
    """Assistance topic a mentee asks for or a mentor offers."""
    MCAT_PREPARATION = "mcat-preparation"
    PERSONAL_ESSAYS = "personal-essays"
    INTERVIEW_SKILLS = "interview-skills"
    MEDICAL_COURSEWORK_EXAMS = "medical-coursework-exams"
    RESEARCH_OPPORTUNITIES = "research-opportunities"
    RESEARCH_MENTORSHIP = "research-mentorship"
    WORK_LIFE_BALANCE = "work-life-balance"
    NAVIGATING_MEDICAL_SCHOOL_RESIDENCY = "navigating-medical-school-residency"


class ApplicationTarget(str, Enum):
    """When the mentee plans to apply."""
    NEXT_6_MONTHS = "next-6-months"
    IN_1_2_YEARS = "in-1-2-years"
    IN_3_PLUS_YEARS = "in-3-plus-years"
    NOT_SURE = "not-sure"


class MentorshipStyle(str, Enum):
    STRUCTURED = "structured"
    FLEXIBLE = "flexible"
    MIX = "mix"


class CommunicationFrequency(str, Enum):
    """How often to meet. BI_MONTHLY only appears on the mentor form."""
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    BI_MONTHLY = "bi-monthly"
    MONTHLY = "monthly"
    AS_NEEDED = "as-needed"


class CommunicationMode(str, Enum):
    EMAIL = "email"
    VIDEO_CALLS = "video-calls"
    PHONE_CALLS = "phone-calls"
    TEXT_MESSAGES = "text-messages"
    IN_PERSON = "in-person"


class DegreeTrack(str, Enum):
    """Degree the mentee is aiming for."""
    MD = "md"
    DO = "do"
    BOTH = "both"


class Degree(str, Enum):
    """Degree the mentor holds."""
    MD = "md"
    DO = "do"
    MD_PHD = "md-phd"
    CURRENT_MEDICAL_STUDENT = "current-medical-student"


class CareerStage(str, Enum):
    MEDICAL_STUDENT_M1_M2 = "medical-student-m1-m2"
    MEDICAL_STUDENT_M3_M4 = "medical-student-m3-m4"
    RESIDENT_FELLOW = "resident-fellow"
    ATTENDING_PHYSICIAN = "attending-physician"
    PHYSICIAN_SCIENTIST = "physician-scientist"


class ApplicantBackground(str, Enum):
    TRADITIONAL = "traditional"
    NON_TRADITIONAL = "non-traditional"
    FIRST_GEN = "first-gen"
    URM = "urm"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NON_BINARY = "non-binary"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


# Shared experiences that count as a full background match on their own
HIGH_VALUE_BACKGROUNDS: FrozenSet[ApplicantBackground] = frozenset({
    ApplicantBackground.FIRST_GEN,
    ApplicantBackground.URM,
    ApplicantBackground.NON_TRADITIONAL,
})


def parse_choice(enum_cls: Type[E], value) -> Optional[E]:
    """
    Look up an enum member by value.

    Returns None for missing or unknown values instead of raising, so an
    unexpected option simply fails to match.
    """
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def parse_choices(enum_cls: Type[E], values: Optional[Iterable]) -> FrozenSet[E]:
    """Parse a multi-select answer, dropping unknown values."""
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    parsed = (parse_choice(enum_cls, v) for v in values)
    return frozenset(p for p in parsed if p is not None)


def choice_values(enum_cls: Type[Enum]) -> list[str]:
    """All allowed raw values for an enumeration, in declaration order."""
    return [member.value for member in enum_cls]
