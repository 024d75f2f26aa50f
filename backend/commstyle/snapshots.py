from __future__ import annotations
import json
import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from sqlalchemy.orm import Session

from .catalog import QUESTION_PAIRS, QuestionPair
from .models import SessionSnapshot
from .session_state import QuestionnaireSession

logger = logging.getLogger(__name__)


class SnapshotStore:
	"""Durable copy of each caller's questionnaire state.

	Reads treat missing or corrupt rows as "no prior session". Writes are
	best-effort: failures are logged and never reach the caller.
	"""

	def __init__(self, session_factory: Callable[[], Session]) -> None:
		self._session_factory = session_factory

	def load(self, key: str, catalog: Sequence[QuestionPair] = QUESTION_PAIRS) -> Optional[QuestionnaireSession]:
		db = self._session_factory()
		try:
			row = db.get(SessionSnapshot, key)
			if row is None:
				return None
			data = json.loads(row.payload)
			if not isinstance(data, dict):
				raise ValueError("snapshot payload is not an object")
			return QuestionnaireSession.from_snapshot(data, catalog)
		except (ValueError, TypeError) as exc:
			logger.warning("Ignoring unreadable snapshot for %s: %s", key, exc)
			return None
		except Exception:
			logger.warning("Snapshot read failed for %s", key, exc_info=True)
			return None
		finally:
			db.close()

	def save(self, key: str, session: QuestionnaireSession) -> None:
		db = self._session_factory()
		try:
			row = db.get(SessionSnapshot, key)
			payload = json.dumps(session.to_snapshot())
			if row is None:
				db.add(SessionSnapshot(snapshot_key=key, payload=payload))
			else:
				row.payload = payload
				row.updated_at = datetime.utcnow()
			db.commit()
		except Exception:
			db.rollback()
			logger.warning("Snapshot write failed for %s", key, exc_info=True)
		finally:
			db.close()

	def clear(self, key: str) -> None:
		db = self._session_factory()
		try:
			row = db.get(SessionSnapshot, key)
			if row is not None:
				db.delete(row)
				db.commit()
		except Exception:
			db.rollback()
			logger.warning("Snapshot clear failed for %s", key, exc_info=True)
		finally:
			db.close()
