"""
Matching service.

Glue between the store and the scorer: registers questionnaire answers,
runs a matching pass for a mentee, hands the results back to the store
and moves stored matches through their review lifecycle.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .logger import get_logger
from .match_result import MatchRecord, MatchResult, MatchStatus
from .matching import DEFAULT_WEIGHTS, MatchWeights, find_matches
from .profiles import MenteeProfile, MentorProfile
from .schema import validate_profile
from .store import MatchNotFound, MatchStore, StoreError

logger = get_logger()

ALLOWED_TRANSITIONS = {
    MatchStatus.PENDING: {MatchStatus.ACCEPTED, MatchStatus.DECLINED},
}


class InvalidTransition(Exception):
    """Raised when a match status change is not allowed."""


@dataclass
class MatchRun:
    """Outcome of one matching pass. matches stay usable even if saving failed."""

    mentee: MenteeProfile
    matches: List[MatchResult]
    mentors_considered: int = 0
    saved: List[Dict[str, Any]] = field(default_factory=list)
    persist_error: Optional[str] = None

    @property
    def persisted(self) -> bool:
        return self.persist_error is None and len(self.saved) == len(self.matches)


def ingest_profile(data: Dict[str, Any], role: str, store: MatchStore) -> Dict[str, Any]:
    """
    Validate questionnaire answers and save them as a mentee or mentor.

    Returns a status dict instead of raising on invalid input; store
    failures still raise StoreError.
    """
    errors = validate_profile(role, data)
    if errors:
        logger.warning("Rejected profile", role=role, errors=errors)
        return {"id": None, "status": "validation_error", "errors": errors}

    if role == "mentee":
        record = MenteeProfile.from_record(data).to_record()
        profile_id = store.save_mentee(record)
    else:
        record = MentorProfile.from_record(data).to_record()
        profile_id = store.save_mentor(record)

    logger.info("Saved profile", role=role, id=profile_id)
    return {"id": profile_id, "status": "saved"}


def load_mentor_pool(store: MatchStore) -> List[MentorProfile]:
    return [MentorProfile.from_record(r) for r in store.fetch_mentors()]


def load_mentee(store: MatchStore, mentee_id: str) -> MenteeProfile:
    record = store.fetch_mentee(mentee_id)
    if record is None:
        raise ValueError(f"Mentee not found: {mentee_id}")
    return MenteeProfile.from_record(record)


def persist_matches(mentee_id: str, matches: Sequence[MatchResult], store: MatchStore) -> List[Dict[str, Any]]:
    """
    Save matches as pending {mentee_id, mentor_id, match_score, status} rows.

    Raises:
        StoreError: If the store rejects the write
    """
    if not matches:
        return []
    records = [MatchRecord.from_result(mentee_id, m) for m in matches]
    saved = store.insert_matches(records)
    logger.info(f"Saved {len(records)} matches", mentee_id=mentee_id)
    return saved


def run_matching(
    mentee: MenteeProfile,
    store: MatchStore,
    persist: bool = True,
    weights: MatchWeights = DEFAULT_WEIGHTS,
    mentors: Optional[Sequence[MentorProfile]] = None,
) -> MatchRun:
    """
    Score a mentee against the mentor pool and save the top matches.

    A failure to fetch the pool raises StoreError. A failure to save is
    logged and reported on MatchRun.persist_error; the computed matches
    are returned either way.
    """
    if mentors is None:
        mentors = load_mentor_pool(store)

    matches = find_matches(mentee, mentors, weights)
    run = MatchRun(mentee=mentee, matches=matches, mentors_considered=len(mentors))

    if not persist or not matches:
        return run
    if not mentee.id:
        run.persist_error = "mentee has no id; matches were not saved"
        logger.warning("Skipping save for mentee without id", matches=len(matches))
        return run

    try:
        run.saved = persist_matches(mentee.id, matches, store)
    except (StoreError, ValueError) as e:
        run.persist_error = str(e)
        logger.error("Failed to save matches", mentee_id=mentee.id, error=str(e))
    return run


def update_match_status(store: MatchStore, match_id: str, status) -> Dict[str, Any]:
    """
    Accept or decline a pending match.

    Raises:
        InvalidTransition: If the match is not pending or status is not accepted/declined
        MatchNotFound: If no match has this id
    """
    try:
        target = MatchStatus(status)
    except ValueError:
        raise InvalidTransition(f"Unknown status: {status}")

    current = store.get_match(match_id)
    if current is None:
        raise MatchNotFound(f"Match not found: {match_id}", operation="get_match")

    stored = current.get("status") or MatchStatus.PENDING.value
    try:
        current_status = MatchStatus(stored)
    except ValueError:
        raise InvalidTransition(f"Match {match_id} has unknown status '{stored}'")
    if target not in ALLOWED_TRANSITIONS.get(current_status, set()):
        raise InvalidTransition(f"Cannot move match {match_id} from {current_status.value} to {target.value}")

    updated = store.update_match_status(match_id, target)
    logger.info("Updated match status", match_id=match_id, status=target.value)
    return updated
