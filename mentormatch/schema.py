from typing import Any, Dict, List, Type
from enum import Enum

from .choices import (
    ApplicantBackground,
    ApplicationTarget,
    CareerStage,
    CommunicationFrequency,
    CommunicationMode,
    Degree,
    DegreeTrack,
    Gender,
    HelpArea,
    MentorshipStyle,
    Specialty,
    choice_values,
)
from .normalize import normalize_bool, normalize_choice_value, normalize_record_keys

MAX_MENTEE_HELP_AREAS = 3
MAX_MENTOR_EXPERTISE = 5

MENTEE_REQUIRED_CHOICES = {
    "primary_specialty_interest": Specialty,
    "application_target": ApplicationTarget,
    "preferred_mentorship_style": MentorshipStyle,
    "communication_frequency": CommunicationFrequency,
    "degree_track_preference": DegreeTrack,
}
MENTEE_MULTI_CHOICES = {
    "communication_modes": CommunicationMode,
    "applicant_background": ApplicantBackground,
}

MENTOR_REQUIRED_CHOICES = {
    "medical_specialty": Specialty,
    "career_stage": CareerStage,
    "degree": Degree,
    "mentorship_style": MentorshipStyle,
    "communication_frequency": CommunicationFrequency,
}
MENTOR_MULTI_CHOICES = {
    "communication_modes": CommunicationMode,
    "applicant_background": ApplicantBackground,
}


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _check_choice(data: Dict[str, Any], f: str, enum_cls: Type[Enum], errors: List[str]) -> None:
    if f not in data or data[f] is None:
        errors.append(f"Missing required field: {f}")
        return
    v = data[f]
    if not _is_non_empty_str(v):
        errors.append(f"Field '{f}' must be a non-empty string")
        return
    if normalize_choice_value(v) not in choice_values(enum_cls):
        errors.append(f"Field '{f}' has unknown value '{v}'")


def _check_multi(
    data: Dict[str, Any],
    f: str,
    enum_cls: Type[Enum],
    errors: List[str],
    min_items: int = 0,
    max_items: int | None = None,
) -> None:
    v = data.get(f)
    if v is None:
        v = []
    if not isinstance(v, list):
        errors.append(f"Field '{f}' must be a list")
        return
    allowed = choice_values(enum_cls)
    for item in v:
        if not _is_non_empty_str(item) or normalize_choice_value(item) not in allowed:
            errors.append(f"Field '{f}' has unknown value '{item}'")
    if len(v) < min_items:
        errors.append(f"Field '{f}' needs at least {min_items} selection(s)")
    if max_items is not None and len(v) > max_items:
        errors.append(f"Field '{f}' allows at most {max_items} selections")


def validate_mentee(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    Accepts either the camelCase questionnaire payload or a stored row.
    """
    data = normalize_record_keys(data)
    errors: List[str] = []

    for f, enum_cls in MENTEE_REQUIRED_CHOICES.items():
        _check_choice(data, f, enum_cls, errors)

    _check_multi(data, "help_areas", HelpArea, errors, max_items=MAX_MENTEE_HELP_AREAS)
    for f, enum_cls in MENTEE_MULTI_CHOICES.items():
        _check_multi(data, f, enum_cls, errors)

    # Conditional preferences: the toggle needs its follow-up answer
    if normalize_bool(data.get("prefer_mentor_same_gender", False)):
        _check_choice(data, "preferred_gender", Gender, errors)
    if normalize_bool(data.get("prefer_alumni_mentor", False)):
        if not _is_non_empty_str(data.get("preferred_university")):
            errors.append("Field 'preferred_university' is required when prefer_alumni_mentor is set")

    return errors


def validate_mentor(data: Dict[str, Any]) -> List[str]:
    """Returns a list of validation error messages. Empty list means valid."""
    data = normalize_record_keys(data)
    errors: List[str] = []

    for f, enum_cls in MENTOR_REQUIRED_CHOICES.items():
        _check_choice(data, f, enum_cls, errors)

    _check_multi(data, "areas_of_expertise", HelpArea, errors, min_items=1, max_items=MAX_MENTOR_EXPERTISE)
    for f, enum_cls in MENTOR_MULTI_CHOICES.items():
        _check_multi(data, f, enum_cls, errors)

    if data.get("gender") is not None:
        _check_choice(data, "gender", Gender, errors)
    if data.get("alma_mater") is not None and not isinstance(data["alma_mater"], str):
        errors.append("Field 'alma_mater' must be a string if provided")

    return errors


def validate_profile(role: str, data: Dict[str, Any]) -> List[str]:
    if role == "mentee":
        return validate_mentee(data)
    if role == "mentor":
        return validate_mentor(data)
    raise ValueError(f"Unknown role: {role}")
