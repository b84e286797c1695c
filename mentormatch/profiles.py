"""
Mentee and mentor profiles.

Profiles are built once at the boundary from either shape a record can
arrive in (questionnaire form state in camelCase, stored rows in
snake_case) and are read-only afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

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
    parse_choice,
    parse_choices,
)
from .normalize import normalize_bool, normalize_choice_value, normalize_name, normalize_record_keys


def _choice(enum_cls, value):
    if isinstance(value, str):
        value = normalize_choice_value(value)
    return parse_choice(enum_cls, value)


def _choices(enum_cls, values):
    if isinstance(values, str):
        values = [values]
    if values:
        values = [normalize_choice_value(v) if isinstance(v, str) else v for v in values]
    return parse_choices(enum_cls, values)


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    text = normalize_name(str(value))
    return text or None


def _value(member):
    return member.value if member is not None else None


def _values(members) -> list[str]:
    return sorted(m.value for m in members)


@dataclass(frozen=True)
class MenteeProfile:
    """Answers from the mentee questionnaire that matter for matching."""

    id: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    academic_level: Optional[str] = None
    mcat_status: Optional[str] = None
    primary_specialty_interest: Optional[Specialty] = None
    help_areas: FrozenSet[HelpArea] = field(default_factory=frozenset)
    application_target: Optional[ApplicationTarget] = None
    preferred_mentorship_style: Optional[MentorshipStyle] = None
    communication_frequency: Optional[CommunicationFrequency] = None
    communication_modes: FrozenSet[CommunicationMode] = field(default_factory=frozenset)
    in_person_preference: bool = False
    geographic_preference: Optional[str] = None
    city_state: Optional[str] = None
    degree_track_preference: Optional[DegreeTrack] = None
    applicant_background: FrozenSet[ApplicantBackground] = field(default_factory=frozenset)
    prefer_mentor_same_gender: bool = False
    preferred_gender: Optional[Gender] = None
    prefer_alumni_mentor: bool = False
    preferred_university: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MenteeProfile":
        """
        Build a profile from a form-state or stored-row dict.

        Unknown option values are dropped rather than rejected; use
        schema.validate_mentee to reject them up front.
        """
        r = normalize_record_keys(record)
        return cls(
            id=_optional_str(r.get("id")),
            first_name=normalize_name(str(r.get("first_name") or "")),
            last_name=normalize_name(str(r.get("last_name") or "")),
            academic_level=_optional_str(r.get("academic_level")),
            mcat_status=_optional_str(r.get("mcat_status")),
            primary_specialty_interest=_choice(Specialty, r.get("primary_specialty_interest")),
            help_areas=_choices(HelpArea, r.get("help_areas")),
            application_target=_choice(ApplicationTarget, r.get("application_target")),
            preferred_mentorship_style=_choice(MentorshipStyle, r.get("preferred_mentorship_style")),
            communication_frequency=_choice(CommunicationFrequency, r.get("communication_frequency")),
            communication_modes=_choices(CommunicationMode, r.get("communication_modes")),
            in_person_preference=normalize_bool(r.get("in_person_preference", False)),
            geographic_preference=_optional_str(r.get("geographic_preference")),
            city_state=_optional_str(r.get("city_state")),
            degree_track_preference=_choice(DegreeTrack, r.get("degree_track_preference")),
            applicant_background=_choices(ApplicantBackground, r.get("applicant_background")),
            prefer_mentor_same_gender=normalize_bool(r.get("prefer_mentor_same_gender", False)),
            preferred_gender=_choice(Gender, r.get("preferred_gender")),
            prefer_alumni_mentor=normalize_bool(r.get("prefer_alumni_mentor", False)),
            preferred_university=_optional_str(r.get("preferred_university")),
        )

    def to_record(self) -> Dict[str, Any]:
        """Snake_case dict of plain values, the shape stored in the mentees table."""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "academic_level": self.academic_level,
            "mcat_status": self.mcat_status,
            "primary_specialty_interest": _value(self.primary_specialty_interest),
            "help_areas": _values(self.help_areas),
            "application_target": _value(self.application_target),
            "preferred_mentorship_style": _value(self.preferred_mentorship_style),
            "communication_frequency": _value(self.communication_frequency),
            "communication_modes": _values(self.communication_modes),
            "in_person_preference": self.in_person_preference,
            "geographic_preference": self.geographic_preference,
            "city_state": self.city_state,
            "degree_track_preference": _value(self.degree_track_preference),
            "applicant_background": _values(self.applicant_background),
            "prefer_mentor_same_gender": self.prefer_mentor_same_gender,
            "preferred_gender": _value(self.preferred_gender),
            "prefer_alumni_mentor": self.prefer_alumni_mentor,
            "preferred_university": self.preferred_university,
        }


@dataclass(frozen=True)
class MentorProfile:
    """Answers from the mentor questionnaire."""

    id: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    medical_specialty: Optional[Specialty] = None
    areas_of_expertise: FrozenSet[HelpArea] = field(default_factory=frozenset)
    career_stage: Optional[CareerStage] = None
    degree: Optional[Degree] = None
    research_field: Optional[str] = None
    research_mentorship_capacity: Optional[str] = None
    mentorship_style: Optional[MentorshipStyle] = None
    communication_frequency: Optional[CommunicationFrequency] = None
    communication_modes: FrozenSet[CommunicationMode] = field(default_factory=frozenset)
    in_person_availability: bool = False
    geographic_openness: Optional[str] = None
    city_state: Optional[str] = None
    applicant_background: FrozenSet[ApplicantBackground] = field(default_factory=frozenset)
    gender: Optional[Gender] = None
    alma_mater: Optional[str] = None

    @property
    def display_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p) or (self.id or "")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "MentorProfile":
        r = normalize_record_keys(record)
        return cls(
            id=_optional_str(r.get("id")),
            first_name=normalize_name(str(r.get("first_name") or "")),
            last_name=normalize_name(str(r.get("last_name") or "")),
            medical_specialty=_choice(Specialty, r.get("medical_specialty")),
            areas_of_expertise=_choices(HelpArea, r.get("areas_of_expertise")),
            career_stage=_choice(CareerStage, r.get("career_stage")),
            degree=_choice(Degree, r.get("degree")),
            research_field=_optional_str(r.get("research_field")),
            research_mentorship_capacity=_optional_str(r.get("research_mentorship_capacity")),
            mentorship_style=_choice(MentorshipStyle, r.get("mentorship_style")),
            communication_frequency=_choice(CommunicationFrequency, r.get("communication_frequency")),
            communication_modes=_choices(CommunicationMode, r.get("communication_modes")),
            in_person_availability=normalize_bool(r.get("in_person_availability", False)),
            geographic_openness=_optional_str(r.get("geographic_openness")),
            city_state=_optional_str(r.get("city_state")),
            applicant_background=_choices(ApplicantBackground, r.get("applicant_background")),
            gender=_choice(Gender, r.get("gender")),
            alma_mater=_optional_str(r.get("alma_mater")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "medical_specialty": _value(self.medical_specialty),
            "areas_of_expertise": _values(self.areas_of_expertise),
            "career_stage": _value(self.career_stage),
            "degree": _value(self.degree),
            "research_field": self.research_field,
            "research_mentorship_capacity": self.research_mentorship_capacity,
            "mentorship_style": _value(self.mentorship_style),
            "communication_frequency": _value(self.communication_frequency),
            "communication_modes": _values(self.communication_modes),
            "in_person_availability": self.in_person_availability,
            "geographic_openness": self.geographic_openness,
            "city_state": self.city_state,
            "applicant_background": _values(self.applicant_background),
            "gender": _value(self.gender),
            "alma_mater": self.alma_mater,
        }
