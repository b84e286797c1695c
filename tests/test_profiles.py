"""
Tests for profile construction and boundary normalization.
"""

from mentormatch.choices import (
    ApplicantBackground,
    CommunicationMode,
    Gender,
    HelpArea,
    Specialty,
    parse_choice,
    parse_choices,
)
from mentormatch.normalize import camel_to_snake, normalize_choice_value, normalize_record_keys
from mentormatch.profiles import MenteeProfile, MentorProfile


class TestNormalize:
    """Test key and value normalization."""

    def test_camel_to_snake(self):
        assert camel_to_snake("primarySpecialtyInterest") == "primary_specialty_interest"
        assert camel_to_snake("preferMentorSameGender") == "prefer_mentor_same_gender"
        assert camel_to_snake("help_areas") == "help_areas"
        assert camel_to_snake("id") == "id"

    def test_choice_value(self):
        assert normalize_choice_value("  Video Calls ") == "video-calls"
        assert normalize_choice_value("first_gen") == "first-gen"

    def test_camel_value_wins(self):
        record = {"helpAreas": ["mcat-preparation"], "help_areas": ["personal-essays"]}
        assert normalize_record_keys(record) == {"help_areas": ["mcat-preparation"]}

    def test_snake_value_fills_blank_camel(self):
        record = {"primarySpecialtyInterest": "", "primary_specialty_interest": "surgery"}
        assert normalize_record_keys(record)["primary_specialty_interest"] == "surgery"

    def test_blank_snake_does_not_override_camel(self):
        record = {"primary_specialty_interest": "", "primarySpecialtyInterest": "surgery"}
        assert normalize_record_keys(record)["primary_specialty_interest"] == "surgery"


class TestChoices:
    """Test enum parsing helpers."""

    def test_unknown_value_is_none(self):
        assert parse_choice(Specialty, "podiatry") is None
        assert parse_choice(Specialty, None) is None

    def test_known_value(self):
        assert parse_choice(Specialty, "cardiology") is Specialty.CARDIOLOGY

    def test_multi_drops_unknown(self):
        parsed = parse_choices(CommunicationMode, ["email", "carrier-pigeon"])
        assert parsed == frozenset({CommunicationMode.EMAIL})

    def test_multi_accepts_single_string(self):
        assert parse_choices(CommunicationMode, "email") == frozenset({CommunicationMode.EMAIL})


class TestMenteeProfile:
    """Test mentee construction from either record shape."""

    def test_from_form_state(self, cardiology_mentee_record):
        mentee = MenteeProfile.from_record(cardiology_mentee_record)
        assert mentee.id == "mentee-1"
        assert mentee.first_name == "Emily"
        assert mentee.primary_specialty_interest is Specialty.CARDIOLOGY
        assert mentee.help_areas == frozenset({HelpArea.MCAT_PREPARATION, HelpArea.INTERVIEW_SKILLS})
        assert mentee.applicant_background == frozenset({ApplicantBackground.FIRST_GEN})
        assert mentee.prefer_mentor_same_gender is False

    def test_form_state_and_row_agree(self, cardiology_mentee_record):
        """Both record shapes should normalize to the same profile."""
        from_form = MenteeProfile.from_record(cardiology_mentee_record)
        from_row = MenteeProfile.from_record(from_form.to_record())
        assert from_form == from_row

    def test_loose_values_are_normalized(self):
        mentee = MenteeProfile.from_record({
            "communication_modes": ["Email", "Video Calls"],
            "preferred_gender": "Female",
            "prefer_mentor_same_gender": "yes",
        })
        assert mentee.communication_modes == frozenset({CommunicationMode.EMAIL, CommunicationMode.VIDEO_CALLS})
        assert mentee.preferred_gender is Gender.FEMALE
        assert mentee.prefer_mentor_same_gender is True

    def test_location_answers_round_trip(self, cardiology_mentee_record):
        cardiology_mentee_record.update({
            "inPersonPreference": True,
            "geographicPreference": "within-50-miles",
            "cityState": " Boston,  MA ",
        })
        mentee = MenteeProfile.from_record(cardiology_mentee_record)
        assert mentee.in_person_preference is True
        assert mentee.city_state == "Boston, MA"

        record = mentee.to_record()
        assert record["geographic_preference"] == "within-50-miles"
        assert MenteeProfile.from_record(record) == mentee

    def test_missing_fields_default(self):
        mentee = MenteeProfile.from_record({})
        assert mentee.id is None
        assert mentee.primary_specialty_interest is None
        assert mentee.communication_modes == frozenset()
        assert mentee.preferred_university is None

    def test_to_record_is_sorted_and_plain(self, cardiology_mentee_record):
        record = MenteeProfile.from_record(cardiology_mentee_record).to_record()
        assert record["help_areas"] == ["interview-skills", "mcat-preparation"]
        assert record["primary_specialty_interest"] == "cardiology"
        assert record["preferred_gender"] is None


class TestMentorProfile:
    """Test mentor construction."""

    def test_from_row(self, cardiology_mentor_record):
        mentor = MentorProfile.from_record(cardiology_mentor_record)
        assert mentor.medical_specialty is Specialty.CARDIOLOGY
        assert HelpArea.RESEARCH_MENTORSHIP in mentor.areas_of_expertise
        assert mentor.display_name == "Ana Reyes"

    def test_from_form_state(self):
        mentor = MentorProfile.from_record({
            "id": "m-9",
            "medicalSpecialty": "pediatrics",
            "areasOfExpertise": ["personal-essays"],
            "almaMater": "  Johns   Hopkins University ",
        })
        assert mentor.medical_specialty is Specialty.PEDIATRICS
        assert mentor.alma_mater == "Johns Hopkins University"

    def test_display_name_falls_back_to_id(self):
        assert MentorProfile.from_record({"id": "m-3"}).display_name == "m-3"

    def test_round_trip(self, cardiology_mentor_record):
        mentor = MentorProfile.from_record(cardiology_mentor_record)
        assert MentorProfile.from_record(mentor.to_record()) == mentor
