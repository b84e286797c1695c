"""
Match result domain model.

Represents the outcome of scoring one mentee against one mentor, with a
per-factor breakdown so a score can always be explained.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .profiles import MentorProfile


class MatchStatus(str, Enum):
    """Lifecycle of a stored match."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass(frozen=True)
class MatchFactors:
    """The seven weighted sub-scores. Bonuses are kept separately."""

    specialty: float = 0
    help_areas: float = 0
    communication: float = 0
    background: float = 0
    degree_track: float = 0
    mentorship_style: float = 0
    timeline: float = 0

    def __post_init__(self):
        for name, value in self._items():
            if value < 0:
                raise ValueError(f"factor '{name}' must be non-negative, got {value}")

    def _items(self):
        return (
            ("specialty", self.specialty),
            ("helpAreas", self.help_areas),
            ("communication", self.communication),
            ("background", self.background),
            ("degreeTrack", self.degree_track),
            ("mentorshipStyle", self.mentorship_style),
            ("timeline", self.timeline),
        )

    def total(self) -> float:
        return sum(value for _, value in self._items())

    def to_dict(self) -> Dict[str, float]:
        """Factor breakdown keyed the way the web client displays it."""
        return dict(self._items())


@dataclass(frozen=True)
class MatchResult:
    """
    Frozen score of one mentor for one mentee.

    score is the rounded factor total plus any flat bonuses and is never
    negative.
    """

    mentor_id: Optional[str]
    mentor: MentorProfile
    score: int
    factors: MatchFactors
    bonuses: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.score < 0:
            raise ValueError(f"score must be non-negative, got {self.score}")
        for name, value in self.bonuses.items():
            if value < 0:
                raise ValueError(f"bonus '{name}' must be non-negative, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mentor_id": self.mentor_id,
            "mentor": self.mentor.to_record(),
            "score": self.score,
            "factors": self.factors.to_dict(),
            "bonuses": dict(self.bonuses),
        }


@dataclass(frozen=True)
class MatchRecord:
    """A match as handed to the store: {mentee_id, mentor_id, match_score, status}."""

    mentee_id: str
    mentor_id: str
    match_score: int
    status: MatchStatus = MatchStatus.PENDING

    @classmethod
    def from_result(cls, mentee_id: str, result: MatchResult) -> "MatchRecord":
        if not result.mentor_id:
            raise ValueError("cannot store a match for a mentor without an id")
        return cls(mentee_id=mentee_id, mentor_id=result.mentor_id, match_score=result.score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mentee_id": self.mentee_id,
            "mentor_id": self.mentor_id,
            "match_score": self.match_score,
            "status": self.status.value,
        }
