"""
Per-session cache of the most recently parsed resume.

One record per session id, last write wins. Records older than the TTL are
treated as absent. Operations on the same session id are serialized with a
per-key lock so a concurrent set and clear cannot interleave.
"""
import logging
import threading
import weakref
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

from sqlalchemy.orm import Session, sessionmaker

from .models import ResumeSession
from .schemas import SessionResumeRecord, UserProfile

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ResumeSessionStore:
    def __init__(self, session_factory: sessionmaker, ttl_seconds: int = 24 * 60 * 60):
        self._session_factory = session_factory
        self.ttl = timedelta(seconds=ttl_seconds)
        # entries vanish once no caller holds the lock
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, session_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = self._locks[session_id] = threading.Lock()
            return lock

    @contextmanager
    def _db(self, session_id: str) -> Iterator[Session]:
        with self._lock_for(session_id):
            db = self._session_factory()
            try:
                yield db
            finally:
                db.close()

    def set(self, session_id: str, record: SessionResumeRecord) -> None:
        uploaded = record.uploadedAt
        if uploaded.tzinfo is not None:
            uploaded = uploaded.astimezone(timezone.utc).replace(tzinfo=None)
        with self._db(session_id) as db:
            row = db.get(ResumeSession, session_id) or ResumeSession(session_id=session_id)
            row.data = record.data.model_dump()
            row.filename = record.filename
            row.raw_text = record.rawText
            row.uploaded_at = uploaded
            row.expires_at = _utcnow() + self.ttl
            db.add(row)
            db.commit()
        logger.info(f"Stored parsed resume '{record.filename}' for session {session_id[:8]}")

    def get(self, session_id: str) -> Optional[SessionResumeRecord]:
        with self._db(session_id) as db:
            row = db.get(ResumeSession, session_id)
            if row is None:
                return None
            if row.expires_at is not None and row.expires_at <= _utcnow():
                db.delete(row)
                db.commit()
                return None
            return SessionResumeRecord(
                data=UserProfile.model_validate(row.data or {}),
                filename=row.filename or "",
                uploadedAt=row.uploaded_at.replace(tzinfo=timezone.utc),
                rawText=row.raw_text or "",
            )

    def clear(self, session_id: str) -> None:
        with self._db(session_id) as db:
            row = db.get(ResumeSession, session_id)
            if row is not None:
                db.delete(row)
                db.commit()
