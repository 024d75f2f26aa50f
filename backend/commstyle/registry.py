from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Dict, List, Sequence

from .catalog import QUESTION_PAIRS, QuestionPair
from .session_state import QuestionnaireSession
from .snapshots import SnapshotStore

logger = logging.getLogger(__name__)


class SessionRegistry:
	"""Live questionnaire sessions keyed by the authenticated subject.

	A session is created (or resumed from its snapshot) on first use and
	dropped on logout or after sitting idle. Eviction only forgets the
	in-memory copy; the snapshot stays so a returning caller resumes.
	One registry is owned by each application instance.
	"""

	def __init__(
		self,
		store: SnapshotStore,
		catalog: Sequence[QuestionPair] = QUESTION_PAIRS,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		self.store = store
		self.catalog: List[QuestionPair] = list(catalog)
		self._sessions: Dict[str, QuestionnaireSession] = {}
		self._last_used: Dict[str, float] = {}
		self._clock = clock
		self._lock = threading.Lock()

	def get(self, key: str) -> QuestionnaireSession:
		with self._lock:
			session = self._sessions.get(key)
			if session is None:
				session = self.store.load(key, self.catalog)
				if session is None:
					session = QuestionnaireSession(self.catalog)
				else:
					logger.info("Resumed questionnaire for %s at %s/%d", key, session.stage.value, session.question_index)
				session.authenticated = True
				self._sessions[key] = session
			self._last_used[key] = self._clock()
			return session

	def persist(self, key: str) -> None:
		session = self._sessions.get(key)
		if session is not None:
			self.store.save(key, session)

	def reset(self, key: str) -> QuestionnaireSession:
		session = self.get(key)
		session.reset()
		self.store.clear(key)
		return session

	def dispose(self, key: str) -> None:
		with self._lock:
			self._sessions.pop(key, None)
			self._last_used.pop(key, None)
		self.store.clear(key)

	def evict_idle(self, max_idle_seconds: float) -> int:
		"""Forget sessions not used for `max_idle_seconds`; returns how many were dropped."""
		cutoff = self._clock() - max_idle_seconds
		with self._lock:
			stale = [key for key, used in self._last_used.items() if used <= cutoff]
			for key in stale:
				self._sessions.pop(key, None)
				self._last_used.pop(key, None)
		return len(stale)

	def __contains__(self, key: str) -> bool:
		return key in self._sessions

	def __len__(self) -> int:
		return len(self._sessions)
