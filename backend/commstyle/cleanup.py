from __future__ import annotations
from datetime import datetime, timedelta
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import AuthSession, SessionSnapshot


def purge_stale_snapshots(db: Session, days: int = 7) -> int:
	"""Remove snapshots and auth sessions untouched for `days` days; returns rows removed."""
	if days <= 0:
		return 0
	threshold = datetime.utcnow() - timedelta(days=days)
	removed = 0
	res = db.execute(delete(SessionSnapshot).where(SessionSnapshot.updated_at < threshold))
	removed += res.rowcount or 0
	# A dormant login can no longer resume anything, so drop it too
	res = db.execute(delete(AuthSession).where(AuthSession.last_activity_at < threshold))
	removed += res.rowcount or 0
	db.commit()
	return removed
