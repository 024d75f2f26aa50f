"""Team administration: rosters, team style summaries and the team AI coach."""

from __future__ import annotations
import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..analysis import team_distribution
from ..coach import CoachService
from ..db import get_db
from ..deps import get_coach
from ..errors import CoachUnavailableError
from ..models import Team
from ..profiles import ProfileColor
from ..records import UserProfileRecord, list_user_profiles
from ..scoring import dominant_color, plot_position, rank_composites
from .auth import User, require_admin
from .coach import AdviceResponse, consume_request_quota

router = APIRouter(prefix="/admin", tags=["admin"])

logger = logging.getLogger(__name__)


class UserRow(UserProfileRecord):
	dominant: Optional[ProfileColor] = None
	# Roster badge: top of the sum ranking
	composite_leader: Optional[ProfileColor] = None


class TeamOut(BaseModel):
	name: str
	created_at: datetime
	member_count: int


class CreateTeamRequest(BaseModel):
	name: str


class PlotPoint(BaseModel):
	username: str
	display_name: Optional[str] = None
	x: float
	y: float
	dominant: ProfileColor


class TeamSummary(BaseModel):
	team: str
	member_count: int
	completed_count: int
	by_dominant: Dict[ProfileColor, int]
	by_composite: Dict[ProfileColor, int]
	points: List[PlotPoint]


class TeamCoachRequest(BaseModel):
	challenge: str


def _roster_or_404(db: Session, team: str) -> List[UserProfileRecord]:
	roster = list_user_profiles(db, team=team)
	if not roster and db.get(Team, team) is None:
		raise HTTPException(status_code=404, detail="team not found")
	return roster


def _roster_for_coach(db: Session, team: str, username: str) -> List[UserProfileRecord]:
	roster = _roster_or_404(db, team)
	consume_request_quota(db, username)
	return roster


@router.get("/users", response_model=List[UserRow])
def users(team: Optional[str] = None, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
	rows = []
	for record in list_user_profiles(db, team=team):
		row = UserRow(**record.model_dump())
		if record.scores is not None:
			row.dominant = dominant_color(record.scores)
			row.composite_leader = rank_composites(record.scores)[0][0]
		rows.append(row)
	return rows


@router.get("/teams", response_model=List[TeamOut])
def teams(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
	counts: Dict[str, int] = {}
	for record in list_user_profiles(db):
		if record.team:
			counts[record.team] = counts.get(record.team, 0) + 1
	return [
		TeamOut(name=t.name, created_at=t.created_at, member_count=counts.get(t.name, 0))
		for t in db.query(Team).order_by(Team.name).all()
	]


@router.post("/teams", response_model=TeamOut, status_code=201)
def create_team(req: CreateTeamRequest, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
	name = (req.name or "").strip()
	if not name:
		raise HTTPException(status_code=400, detail="team name is required")
	if db.get(Team, name) is not None:
		raise HTTPException(status_code=409, detail="team name already exists")
	row = Team(name=name)
	db.add(row)
	db.commit()
	db.refresh(row)
	logger.info("Team %s created by %s", name, admin.username)
	return TeamOut(name=row.name, created_at=row.created_at, member_count=0)


@router.get("/teams/{name}/summary", response_model=TeamSummary)
def team_summary(name: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
	roster = _roster_or_404(db, name)
	dist = team_distribution(r.scores for r in roster)
	points = []
	for r in roster:
		if r.scores is None:
			continue
		x, y = plot_position(r.scores)
		points.append(PlotPoint(username=r.username, display_name=r.display_name, x=x, y=y, dominant=dominant_color(r.scores)))
	return TeamSummary(
		team=name,
		member_count=len(roster),
		completed_count=dist.total,
		by_dominant=dist.by_dominant,
		by_composite=dist.by_composite,
		points=points,
	)


@router.post("/teams/{name}/coach", response_model=AdviceResponse)
async def team_coach(
	name: str,
	req: TeamCoachRequest,
	admin: User = Depends(require_admin),
	db: Session = Depends(get_db),
	coach: CoachService = Depends(get_coach),
):
	challenge = (req.challenge or "").strip()
	if not challenge:
		raise HTTPException(status_code=400, detail="challenge is required")
	roster = await run_in_threadpool(_roster_for_coach, db, name, admin.username)
	try:
		text = await coach.team_advice(name, roster, challenge)
	except CoachUnavailableError as exc:
		raise HTTPException(status_code=503, detail=exc.message)
	return AdviceResponse(text=text)
