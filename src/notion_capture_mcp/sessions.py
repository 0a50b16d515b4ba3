"""In-memory capture sessions — one input bundle and working result each."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .config import get_config
from .models.content import StructuredContent
from .models.inputs import InputBundle, InputFile
from .previews import PreviewRegistry
from .state import INITIAL_STATE, Action, AppState, Reset, reduce

logger = logging.getLogger(__name__)


@dataclass
class CaptureSession:
    """Working state for one capture: inputs, result, status and previews."""

    session_id: str
    bundle: InputBundle = field(default_factory=InputBundle)
    content: StructuredContent | None = None
    state: AppState = INITIAL_STATE
    previews: PreviewRegistry = field(default_factory=PreviewRegistry)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    created_at: datetime = field(default_factory=datetime.now)
    last_active: datetime = field(default_factory=datetime.now)

    def dispatch(self, action: Action) -> AppState:
        self.state = reduce(self.state, action)
        self.last_active = datetime.now()
        return self.state

    def add_files(self, files: list[InputFile]) -> None:
        """Append files and acquire a preview for each."""
        for file in files:
            self.bundle.files.append(file)
            self.previews.acquire(file)

    def remove_file(self, index: int) -> InputFile:
        """Remove the file at *index* and release its preview.

        Raises:
            IndexError: *index* is out of range.
        """
        if not 0 <= index < len(self.bundle.files):
            raise IndexError(f"No file at index {index} (session has {len(self.bundle.files)})")
        self.previews.release(index)
        return self.bundle.files.pop(index)

    def reset_inputs(self) -> None:
        """Clear text, files and result; previews are always released."""
        try:
            self.bundle = InputBundle()
            self.content = None
        finally:
            self.previews.release_all()

    def reset(self) -> None:
        self.reset_inputs()
        self.dispatch(Reset())


class SessionStore:
    """Process-wide session registry with TTL eviction."""

    def __init__(self) -> None:
        self._sessions: dict[str, CaptureSession] = {}

    def create(self) -> CaptureSession:
        """Create a new session, evicting expired ones first."""
        self._evict_expired()
        cfg = get_config()
        if len(self._sessions) >= cfg.max_sessions:
            oldest_id = min(self._sessions, key=lambda k: self._sessions[k].last_active)
            self._discard(oldest_id)

        sid = uuid.uuid4().hex[:12]
        session = CaptureSession(session_id=sid)
        self._sessions[sid] = session
        return session

    def get(self, session_id: str) -> CaptureSession:
        """Look up a session by ID.

        Raises:
            KeyError: Unknown or expired session.
        """
        self._evict_expired()
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"Session {session_id} not found")
        session.last_active = datetime.now()
        return session

    def remove(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            return False
        self._discard(session_id)
        return True

    def clear(self) -> int:
        """Drop every session and release their previews. Returns count removed."""
        ids = list(self._sessions)
        for sid in ids:
            self._discard(sid)
        return len(ids)

    def _discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id)
        released = session.previews.release_all()
        if released:
            logger.debug("Released %d preview(s) for session %s", released, session_id)

    def _evict_expired(self) -> int:
        """Remove sessions that have exceeded the configured timeout. Returns count evicted."""
        timeout = timedelta(hours=get_config().session_timeout_hours)
        now = datetime.now()
        expired = [sid for sid, s in self._sessions.items() if now - s.last_active > timeout]
        for sid in expired:
            self._discard(sid)
        return len(expired)

    @property
    def count(self) -> int:
        """Number of live sessions."""
        return len(self._sessions)


# Module-level singleton
session_store = SessionStore()
