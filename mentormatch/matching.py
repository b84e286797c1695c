"""
Mentee-to-mentor matching with weighted attribute scoring.

Deterministic and stateless: the same mentee, mentor pool and weights
always produce the same ranked results. Each factor is computed on its
own and the seven factors are summed; two flat bonuses (same gender,
shared alma mater) are added after rounding.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .choices import (
    HIGH_VALUE_BACKGROUNDS,
    ApplicationTarget,
    CareerStage,
    CommunicationFrequency,
    Degree,
    DegreeTrack,
    MentorshipStyle,
)
from .logger import get_logger
from .match_result import MatchFactors, MatchResult
from .profiles import MenteeProfile, MentorProfile

logger = get_logger()


@dataclass(frozen=True)
class MatchWeights:
    """Weights for each factor. Shared read-only between scoring passes."""

    specialty: int = 9
    help_areas: int = 9
    timeline: int = 7
    mentorship_style: int = 7
    communication: int = 7
    degree_track: int = 6
    background: int = 6
    gender_bonus: int = 2
    alumni_bonus: int = 2
    help_area_points: int = 3  # per shared help area, capped at help_areas
    max_results: int = 5

    def __post_init__(self):
        for name in (
            "specialty", "help_areas", "timeline", "mentorship_style", "communication",
            "degree_track", "background", "gender_bonus", "alumni_bonus", "help_area_points",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"weight '{name}' must be non-negative")
        if self.max_results < 0:
            raise ValueError("max_results must be non-negative")

    @property
    def max_score(self) -> int:
        """Highest total any pair can reach."""
        return (
            self.specialty + self.help_areas + self.timeline + self.mentorship_style
            + self.communication + self.degree_track + self.background
            + self.gender_bonus + self.alumni_bonus
        )


DEFAULT_WEIGHTS = MatchWeights()

# Share of the timeline weight per (application target, mentor career stage)
TIMELINE_COMPATIBILITY: Dict[tuple, float] = {
    (ApplicationTarget.NEXT_6_MONTHS, CareerStage.ATTENDING_PHYSICIAN): 1.0,
    (ApplicationTarget.NEXT_6_MONTHS, CareerStage.RESIDENT_FELLOW): 1.0,
    (ApplicationTarget.NEXT_6_MONTHS, CareerStage.MEDICAL_STUDENT_M3_M4): 0.7,
    (ApplicationTarget.IN_1_2_YEARS, CareerStage.RESIDENT_FELLOW): 1.0,
    (ApplicationTarget.IN_1_2_YEARS, CareerStage.MEDICAL_STUDENT_M3_M4): 1.0,
    (ApplicationTarget.IN_1_2_YEARS, CareerStage.ATTENDING_PHYSICIAN): 0.8,
}
# Long-horizon mentees get this share whatever the mentor's stage
OPEN_TIMELINES = {ApplicationTarget.IN_3_PLUS_YEARS, ApplicationTarget.NOT_SURE}
OPEN_TIMELINE_SHARE = 0.6

MIX_STYLE_SHARE = 0.7

FREQUENCY_MATCH_SHARE = 0.6
FREQUENCY_ADJACENT_SHARE = 0.3
MODES_SHARE = 0.4
# Only neighbours in this chain are compatible; bi-monthly is not in it
FREQUENCY_CHAIN = (
    CommunicationFrequency.WEEKLY,
    CommunicationFrequency.BI_WEEKLY,
    CommunicationFrequency.MONTHLY,
    CommunicationFrequency.AS_NEEDED,
)

BOTH_TRACK_SHARE = 0.8
MD_PHD_SHARE = 0.7


def js_round(value: float) -> int:
    """Round half up, the way the web client rounds (Python's round() is half-to-even)."""
    return int(math.floor(value + 0.5))


def specialty_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int) -> float:
    interest = mentee.primary_specialty_interest
    if interest is not None and interest == mentor.medical_specialty:
        return weight
    return 0


def help_area_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int, points: int = 3) -> float:
    overlap = len(mentee.help_areas & mentor.areas_of_expertise)
    if overlap == 0:
        return 0
    return min(overlap * points, weight)


def timeline_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int) -> float:
    """Urgent applicants favour experienced mentors; long-horizon ones take anyone."""
    target = mentee.application_target
    if target is None:
        return 0
    if target in OPEN_TIMELINES:
        return weight * OPEN_TIMELINE_SHARE
    share = TIMELINE_COMPATIBILITY.get((target, mentor.career_stage), 0)
    return weight * share if share else 0


def mentorship_style_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int) -> float:
    # Exact match first: a "mix" mentee with a "mix" mentor gets full weight
    style = mentee.preferred_mentorship_style
    if style is not None and style == mentor.mentorship_style:
        return weight
    if mentor.mentorship_style == MentorshipStyle.MIX:
        return weight * MIX_STYLE_SHARE
    return 0


def _frequencies_adjacent(a: CommunicationFrequency, b: CommunicationFrequency) -> bool:
    if a not in FREQUENCY_CHAIN or b not in FREQUENCY_CHAIN:
        return False
    return abs(FREQUENCY_CHAIN.index(a) - FREQUENCY_CHAIN.index(b)) == 1


def communication_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int) -> int:
    """
    Frequency and channel compatibility, rounded.

    Frequency: exact match earns 60% of the weight, a neighbouring frequency
    30%. Channels: up to 40%, scaled by the share of the mentee's channels
    the mentor also uses.
    """
    score = 0.0

    mentee_freq = mentee.communication_frequency
    mentor_freq = mentor.communication_frequency
    if mentee_freq is not None and mentee_freq == mentor_freq:
        score += weight * FREQUENCY_MATCH_SHARE
    elif mentee_freq is not None and mentor_freq is not None and _frequencies_adjacent(mentee_freq, mentor_freq):
        score += weight * FREQUENCY_ADJACENT_SHARE

    mentee_modes = mentee.communication_modes
    if mentee_modes:
        mode_overlap = len(mentee_modes & mentor.communication_modes)
        if mode_overlap > 0:
            score += weight * MODES_SHARE * (mode_overlap / len(mentee_modes))

    return js_round(score)


def degree_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int) -> float:
    """
    Degree track compatibility.

    Same-degree and "both" rules are checked before the MD/PhD fallback, so
    an MD/PhD mentor earns the fallback share for any track.
    """
    track = mentee.degree_track_preference
    degree = mentor.degree

    if track == DegreeTrack.MD and degree == Degree.MD:
        return weight
    if track == DegreeTrack.DO and degree == Degree.DO:
        return weight
    if track == DegreeTrack.BOTH and degree in (Degree.MD, Degree.DO):
        return weight * BOTH_TRACK_SHARE

    if degree == Degree.MD_PHD:
        return weight * MD_PHD_SHARE

    return 0


def background_score(mentee: MenteeProfile, mentor: MentorProfile, weight: int) -> int:
    shared = mentee.applicant_background & mentor.applicant_background
    if not shared:
        return 0

    # Any shared first-gen / URM / non-traditional experience is a full match
    if shared & HIGH_VALUE_BACKGROUNDS:
        return weight

    return js_round(weight * (len(shared) / len(mentee.applicant_background)))


def _bonuses(mentee: MenteeProfile, mentor: MentorProfile, weights: MatchWeights) -> Dict[str, int]:
    bonuses: Dict[str, int] = {}
    if (
        mentee.prefer_mentor_same_gender
        and mentee.preferred_gender is not None
        and mentee.preferred_gender == mentor.gender
    ):
        bonuses["gender"] = weights.gender_bonus
    if (
        mentee.prefer_alumni_mentor
        and mentee.preferred_university is not None
        and mentee.preferred_university == mentor.alma_mater
    ):
        bonuses["alumni"] = weights.alumni_bonus
    return bonuses


def score_one(
    mentee: MenteeProfile,
    mentor: MentorProfile,
    weights: MatchWeights = DEFAULT_WEIGHTS,
) -> MatchResult:
    """
    Score one mentor for one mentee.

    Args:
        mentee: Canonical mentee profile
        mentor: Canonical mentor profile
        weights: Factor weights (defaults to DEFAULT_WEIGHTS)

    Returns:
        MatchResult with the integer score and the seven-factor breakdown
    """
    factors = MatchFactors(
        specialty=specialty_score(mentee, mentor, weights.specialty),
        help_areas=help_area_score(mentee, mentor, weights.help_areas, weights.help_area_points),
        communication=communication_score(mentee, mentor, weights.communication),
        background=background_score(mentee, mentor, weights.background),
        degree_track=degree_score(mentee, mentor, weights.degree_track),
        mentorship_style=mentorship_style_score(mentee, mentor, weights.mentorship_style),
        timeline=timeline_score(mentee, mentor, weights.timeline),
    )
    bonuses = _bonuses(mentee, mentor, weights)
    score = js_round(factors.total()) + sum(bonuses.values())

    return MatchResult(
        mentor_id=mentor.id,
        mentor=mentor,
        score=score,
        factors=factors,
        bonuses=bonuses,
    )


def find_matches(
    mentee: MenteeProfile,
    mentors: Iterable[MentorProfile],
    weights: MatchWeights = DEFAULT_WEIGHTS,
    limit: Optional[int] = None,
) -> List[MatchResult]:
    """
    Rank a mentor pool for one mentee.

    Mentors scoring zero are dropped, the rest are sorted by score
    (highest first, ties keep pool order) and cut to the top results.

    Args:
        mentee: Canonical mentee profile
        mentors: Candidate mentor profiles (may be empty)
        weights: Factor weights
        limit: Max results; defaults to weights.max_results

    Raises:
        ValueError: If limit is negative

    Returns:
        Up to `limit` MatchResults, best first
    """
    if limit is None:
        limit = weights.max_results
    if limit < 0:
        raise ValueError("limit must be non-negative")

    scored = []
    for mentor in mentors:
        result = score_one(mentee, mentor, weights)
        logger.debug(
            "Scored mentor",
            mentor_id=result.mentor_id,
            score=result.score,
            factors=result.factors.to_dict(),
        )
        scored.append(result)

    positive = [r for r in scored if r.score > 0]
    ranked = sorted(positive, key=lambda r: r.score, reverse=True)[:limit]

    logger.record_match_run(len(scored), len(ranked))
    logger.info(
        f"Matched mentee against {len(scored)} mentors",
        mentee_id=mentee.id,
        above_zero=len(positive),
        returned=len(ranked),
    )
    return ranked
