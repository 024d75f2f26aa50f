from __future__ import annotations
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .models import AuthUser, UserResult
from .scoring import Scores


class UserProfileRecord(BaseModel):
	username: str
	display_name: Optional[str] = None
	team: Optional[str] = None
	role: str = "user"
	scores: Optional[Scores] = None
	completed_at: Optional[datetime] = None


def save_user_results(db: Session, username: str, scores: Scores) -> None:
	row = db.get(UserResult, username)
	if row is None:
		row = UserResult(username=username)
	row.score_a, row.score_b, row.score_c, row.score_d = scores.a, scores.b, scores.c, scores.d
	row.completed_at = datetime.utcnow()
	db.merge(row)
	db.commit()


def _scores_of(row: Optional[UserResult]) -> Optional[Scores]:
	if row is None:
		return None
	return Scores(a=row.score_a, b=row.score_b, c=row.score_c, d=row.score_d)


def list_user_profiles(db: Session, team: Optional[str] = None) -> List[UserProfileRecord]:
	query = db.query(AuthUser, UserResult).outerjoin(UserResult, UserResult.username == AuthUser.username)
	if team:
		query = query.filter(AuthUser.team == team)
	records: List[UserProfileRecord] = []
	for user, result in query.order_by(AuthUser.username).all():
		records.append(
			UserProfileRecord(
				username=user.username,
				display_name=user.display_name,
				team=user.team,
				role=user.role,
				scores=_scores_of(result),
				completed_at=result.completed_at if result is not None else None,
			)
		)
	return records
