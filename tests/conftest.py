"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Dict, Any, List

from mentormatch.profiles import MenteeProfile, MentorProfile
from mentormatch.store import SQLiteStore


@pytest.fixture
def cardiology_mentee_record() -> Dict[str, Any]:
    """Mentee questionnaire payload in form-state (camelCase) shape."""
    return {
        "id": "mentee-1",
        "firstName": "Emily",
        "lastName": "Dalton",
        "primarySpecialtyInterest": "cardiology",
        "helpAreas": ["mcat-preparation", "interview-skills"],
        "applicationTarget": "next-6-months",
        "preferredMentorshipStyle": "structured",
        "communicationFrequency": "weekly",
        "communicationModes": ["email", "video-calls"],
        "degreeTrackPreference": "md",
        "applicantBackground": ["first-gen"],
    }


@pytest.fixture
def cardiology_mentor_record() -> Dict[str, Any]:
    """Mentor row in stored (snake_case) shape."""
    return {
        "id": "mentor-1",
        "first_name": "Ana",
        "last_name": "Reyes",
        "medical_specialty": "cardiology",
        "areas_of_expertise": ["mcat-preparation", "interview-skills", "research-mentorship"],
        "career_stage": "attending-physician",
        "mentorship_style": "structured",
        "communication_frequency": "weekly",
        "communication_modes": ["email", "phone-calls"],
        "degree": "md",
        "applicant_background": ["first-gen", "urm"],
    }


@pytest.fixture
def unrelated_mentor_record() -> Dict[str, Any]:
    """Mentor sharing nothing with the cardiology mentee."""
    return {
        "id": "mentor-2",
        "first_name": "Sam",
        "last_name": "Okafor",
        "medical_specialty": "dermatology",
        "areas_of_expertise": ["work-life-balance"],
        "career_stage": "medical-student-m1-m2",
        "mentorship_style": "flexible",
        "communication_frequency": "bi-monthly",
        "communication_modes": ["in-person"],
        "degree": "current-medical-student",
        "applicant_background": ["traditional"],
    }


@pytest.fixture
def mentee(cardiology_mentee_record) -> MenteeProfile:
    return MenteeProfile.from_record(cardiology_mentee_record)


@pytest.fixture
def mentor(cardiology_mentor_record) -> MentorProfile:
    return MentorProfile.from_record(cardiology_mentor_record)


@pytest.fixture
def unrelated_mentor(unrelated_mentor_record) -> MentorProfile:
    return MentorProfile.from_record(unrelated_mentor_record)


def make_mentor(mentor_id: str, **fields) -> MentorProfile:
    """Build a mentor with only the given answers filled in."""
    return MentorProfile.from_record({"id": mentor_id, **fields})


@pytest.fixture
def mentor_pool(cardiology_mentor_record) -> List[MentorProfile]:
    """Seven mentors with distinct, predictable scores for the cardiology mentee."""
    return [
        make_mentor("m-specialty", medical_specialty="cardiology"),                 # 9
        MentorProfile.from_record(cardiology_mentor_record),                        # 47
        make_mentor("m-nothing", medical_specialty="surgery"),                      # 0
        make_mentor("m-style", mentorship_style="structured"),                      # 7
        make_mentor("m-two", medical_specialty="cardiology", degree="md"),          # 15
        make_mentor("m-help", areas_of_expertise=["mcat-preparation"]),             # 3
        make_mentor("m-stage", career_stage="resident-fellow", degree="md-phd"),    # 11
    ]


@pytest.fixture
def sqlite_store(tmp_path):
    store = SQLiteStore(tmp_path / "test.db")
    yield store
    store.close()
