"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for mentor, mentee and match storage.
"""

import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, UniqueConstraint, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Mentor(Base):
    """Mentor questionnaire answers."""

    __tablename__ = "mentors"

    id = Column(String, primary_key=True, default=_new_id)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    medical_specialty = Column(String)
    areas_of_expertise = Column(JSON, nullable=False, default=list)
    career_stage = Column(String)
    degree = Column(String)
    research_field = Column(String)
    research_mentorship_capacity = Column(String)
    mentorship_style = Column(String)
    communication_frequency = Column(String)
    communication_modes = Column(JSON, nullable=False, default=list)
    in_person_availability = Column(Boolean, nullable=False, default=False)
    geographic_openness = Column(String)
    city_state = Column(String)
    applicant_background = Column(JSON, nullable=False, default=list)
    gender = Column(String)
    alma_mater = Column(String)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_record(self) -> Dict[str, Any]:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns if c.name != "created_at"}


class Mentee(Base):
    """Mentee questionnaire answers."""

    __tablename__ = "mentees"

    id = Column(String, primary_key=True, default=_new_id)
    first_name = Column(String, nullable=False, default="")
    last_name = Column(String, nullable=False, default="")
    academic_level = Column(String)
    mcat_status = Column(String)
    primary_specialty_interest = Column(String)
    help_areas = Column(JSON, nullable=False, default=list)
    application_target = Column(String)
    preferred_mentorship_style = Column(String)
    communication_frequency = Column(String)
    communication_modes = Column(JSON, nullable=False, default=list)
    in_person_preference = Column(Boolean, nullable=False, default=False)
    geographic_preference = Column(String)
    city_state = Column(String)
    degree_track_preference = Column(String)
    applicant_background = Column(JSON, nullable=False, default=list)
    prefer_mentor_same_gender = Column(Boolean, nullable=False, default=False)
    preferred_gender = Column(String)
    prefer_alumni_mentor = Column(Boolean, nullable=False, default=False)
    preferred_university = Column(String)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_record(self) -> Dict[str, Any]:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns if c.name != "created_at"}


class Match(Base):
    """A proposed mentee/mentor pairing and its review status."""

    __tablename__ = "matches"
    __table_args__ = (UniqueConstraint("mentee_id", "mentor_id", name="uq_matches_pair"),)

    id = Column(String, primary_key=True, default=_new_id)
    mentee_id = Column(String, nullable=False, index=True)
    mentor_id = Column(String, nullable=False)
    match_score = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending, accepted, declined
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mentee_id": self.mentee_id,
            "mentor_id": self.mentor_id,
            "match_score": self.match_score,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def init_database(db_path: Path) -> Engine:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Engine bound to the file; the caller owns it and should dispose it
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    return engine


def session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to an engine from init_database."""
    return sessionmaker(bind=engine)
