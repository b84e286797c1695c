"""
Profile and match storage.

Two backends share one interface: a local SQLite database (SQLAlchemy)
and a hosted Supabase project reached through its PostgREST API. Both
hand back plain dict records; converting them to profiles happens in
the service layer. Every failure surfaces as StoreError.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests
from sqlalchemy.exc import SQLAlchemyError

from .database import Match, Mentee, Mentor, init_database, session_factory
from .logger import get_logger
from .match_result import MatchRecord, MatchStatus
from .retry import (
    CircuitBreaker,
    CircuitOpenError,
    RetryError,
    exponential_backoff,
    is_transient_error,
    should_retry_http_status,
)

logger = get_logger()


class StoreError(Exception):
    """Raised when a read or write against the store fails."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class TransientStoreError(StoreError):
    """A failure worth retrying (timeouts, rate limits, 5xx)."""


class MatchNotFound(StoreError):
    pass


def _columns(model, record: Dict[str, Any]) -> Dict[str, Any]:
    names = {c.name for c in model.__table__.columns}
    return {k: v for k, v in record.items() if k in names and v is not None}


class MatchStore:
    """Operations the matching service needs from a backend."""

    def fetch_mentors(self) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def fetch_mentee(self, mentee_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save_mentor(self, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    def save_mentee(self, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    def insert_matches(self, records: Iterable[MatchRecord]) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def list_matches(self, mentee_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    def get_match(self, match_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def update_match_status(self, match_id: str, status: MatchStatus) -> Dict[str, Any]:
        raise NotImplementedError


class SQLiteStore(MatchStore):
    """Local store backed by a SQLite file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.engine = init_database(self.db_path)
        self._session_factory = session_factory(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def _run(self, operation: str, fn: Callable):
        logger.record_store_call(operation)
        session = self._session_factory()
        try:
            result = fn(session)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.record_store_failure(operation, type(e).__name__)
            logger.error(f"Store {operation} failed", db=str(self.db_path), error=str(e))
            raise StoreError(f"{operation} failed: {e}", operation=operation) from e
        finally:
            session.close()
        logger.record_store_success(operation)
        return result

    def fetch_mentors(self) -> List[Dict[str, Any]]:
        return self._run(
            "fetch_mentors",
            lambda s: [m.to_record() for m in s.query(Mentor).order_by(Mentor.created_at, Mentor.id)],
        )

    def fetch_mentee(self, mentee_id: str) -> Optional[Dict[str, Any]]:
        def op(s):
            mentee = s.get(Mentee, mentee_id)
            return mentee.to_record() if mentee else None
        return self._run("fetch_mentee", op)

    def _save(self, operation: str, model, record: Dict[str, Any]) -> str:
        def op(s):
            row = s.merge(model(**_columns(model, record)))
            s.flush()
            return row.id
        return self._run(operation, op)

    def save_mentor(self, record: Dict[str, Any]) -> str:
        return self._save("save_mentor", Mentor, record)

    def save_mentee(self, record: Dict[str, Any]) -> str:
        return self._save("save_mentee", Mentee, record)

    def insert_matches(self, records: Iterable[MatchRecord]) -> List[Dict[str, Any]]:
        """
        Store matches, one row per mentee/mentor pair.

        Re-running a mentee refreshes the score of an existing pair and
        keeps its status.
        """
        records = list(records)

        def op(s):
            stored = []
            for rec in records:
                row = s.query(Match).filter_by(mentee_id=rec.mentee_id, mentor_id=rec.mentor_id).first()
                if row is None:
                    row = Match(
                        mentee_id=rec.mentee_id,
                        mentor_id=rec.mentor_id,
                        match_score=rec.match_score,
                        status=rec.status.value,
                    )
                    s.add(row)
                else:
                    row.match_score = rec.match_score
                s.flush()
                stored.append(row.to_record())
            return stored
        return self._run("insert_matches", op)

    def list_matches(self, mentee_id: str) -> List[Dict[str, Any]]:
        return self._run(
            "list_matches",
            lambda s: [
                m.to_record()
                for m in s.query(Match).filter_by(mentee_id=mentee_id).order_by(Match.match_score.desc(), Match.created_at)
            ],
        )

    def get_match(self, match_id: str) -> Optional[Dict[str, Any]]:
        def op(s):
            match = s.get(Match, match_id)
            return match.to_record() if match else None
        return self._run("get_match", op)

    def update_match_status(self, match_id: str, status: MatchStatus) -> Dict[str, Any]:
        def op(s):
            match = s.get(Match, match_id)
            if match is None:
                return None
            match.status = MatchStatus(status).value
            s.flush()
            return match.to_record()
        updated = self._run("update_match_status", op)
        if updated is None:
            raise MatchNotFound(f"Match not found: {match_id}", operation="update_match_status")
        return updated


class SupabaseStore(MatchStore):
    """
    Store backed by a Supabase project (PostgREST over HTTPS).

    Timeouts, connection errors and 408/429/5xx responses are retried
    with exponential backoff. Repeated exhausted retries open a circuit
    breaker so later calls fail fast.
    """

    def __init__(
        self,
        url: str,
        key: str,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
        max_retries: int = 3,
        base_delay: float = 1.0,
        breaker: Optional[CircuitBreaker] = None,
    ):
        if not url:
            raise ValueError("Missing SUPABASE_URL. Set env var or pass url.")
        if not key:
            raise ValueError("Missing SUPABASE_KEY. Set env var or pass key.")
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        })
        self.timeout = timeout
        self.breaker = breaker or CircuitBreaker(failure_threshold=3, recovery_timeout=60, expected_exception=RetryError)
        self._send = exponential_backoff(
            max_retries=max_retries,
            base_delay=base_delay,
            exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, TransientStoreError),
            on_retry=self._log_retry,
        )(self._send_once)

    @staticmethod
    def _log_retry(attempt: int, error: Exception, delay: float):
        logger.warning("Retrying store request", attempt=attempt, delay=delay, error=str(error))

    def _send_once(self, method: str, url: str, **kwargs) -> requests.Response:
        resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if should_retry_http_status(resp.status_code):
            raise TransientStoreError(f"Store responded {resp.status_code}: {url}")
        resp.raise_for_status()
        return resp

    def _request(
        self,
        operation: str,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        prefer: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        logger.record_store_call(operation)
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = self.breaker.call(
                self._send, method, f"{self.base_url}/{table}", params=params, json=payload, headers=headers
            )
            data = resp.json() if resp.content else []
        except (RetryError, CircuitOpenError, requests.exceptions.RequestException, ValueError) as e:
            status = None
            if isinstance(e, requests.exceptions.HTTPError) and e.response is not None:
                status = e.response.status_code
            error_type = f"HTTPError_{status}" if status else type(e).__name__
            logger.record_store_failure(operation, error_type)
            logger.error(
                f"Store {operation} failed",
                table=table,
                status=status,
                transient=is_transient_error(e),
                error=str(e),
            )
            raise StoreError(f"{operation} failed: {e}", operation=operation) from e

        logger.record_store_success(operation)
        return data if isinstance(data, list) else [data]

    def fetch_mentors(self) -> List[Dict[str, Any]]:
        return self._request("fetch_mentors", "GET", "mentors", params={"select": "*"})

    def fetch_mentee(self, mentee_id: str) -> Optional[Dict[str, Any]]:
        rows = self._request("fetch_mentee", "GET", "mentees", params={"select": "*", "id": f"eq.{mentee_id}"})
        return rows[0] if rows else None

    def _save(self, operation: str, table: str, record: Dict[str, Any]) -> str:
        payload = {k: v for k, v in record.items() if v is not None}
        rows = self._request(
            operation, "POST", table, payload=payload,
            prefer="return=representation,resolution=merge-duplicates",
        )
        if not rows or "id" not in rows[0]:
            raise StoreError(f"{operation} returned no id", operation=operation)
        return str(rows[0]["id"])

    def save_mentor(self, record: Dict[str, Any]) -> str:
        return self._save("save_mentor", "mentors", record)

    def save_mentee(self, record: Dict[str, Any]) -> str:
        return self._save("save_mentee", "mentees", record)

    def insert_matches(self, records: Iterable[MatchRecord]) -> List[Dict[str, Any]]:
        payload = [r.to_dict() for r in records]
        return self._request("insert_matches", "POST", "matches", payload=payload, prefer="return=representation")

    def list_matches(self, mentee_id: str) -> List[Dict[str, Any]]:
        return self._request(
            "list_matches", "GET", "matches",
            params={"select": "*", "mentee_id": f"eq.{mentee_id}", "order": "match_score.desc"},
        )

    def get_match(self, match_id: str) -> Optional[Dict[str, Any]]:
        rows = self._request("get_match", "GET", "matches", params={"select": "*", "id": f"eq.{match_id}"})
        return rows[0] if rows else None

    def update_match_status(self, match_id: str, status: MatchStatus) -> Dict[str, Any]:
        rows = self._request(
            "update_match_status", "PATCH", "matches",
            params={"id": f"eq.{match_id}"},
            payload={"status": MatchStatus(status).value},
            prefer="return=representation",
        )
        if not rows:
            raise MatchNotFound(f"Match not found: {match_id}", operation="update_match_status")
        return rows[0]
