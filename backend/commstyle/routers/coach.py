from fastapi import APIRouter, HTTPException, Depends
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field
from typing import List
from sqlalchemy.orm import Session

from ..coach import PRESET_QUESTIONS, ChatTurn, CoachService
from ..db import get_db
from ..deps import get_coach, get_registry
from ..errors import CoachUnavailableError
from ..models import AuthUser
from ..registry import SessionRegistry
from ..scoring import Scores
from ..session_state import Stage
from .auth import get_current_user, User

router = APIRouter(prefix="/coach", tags=["coach"])

# Only the most recent turns are resent as conversation context
MAX_HISTORY_TURNS = 20
MAX_QUESTION_CHARS = 4000


class AdviceRequest(BaseModel):
	question: str
	history: List[ChatTurn] = Field(default_factory=list)


class AdviceResponse(BaseModel):
	text: str


def consume_request_quota(db: Session, username: str) -> None:
	# Enforce per-user request limits (account holders only)
	row = db.query(AuthUser).filter(AuthUser.username == username).first()
	if row:
		if row.requests_used >= row.requests_limit:
			raise HTTPException(status_code=429, detail="request limit reached")
		row.requests_used += 1
		db.add(row)
		db.commit()


def _finished_scores(registry: SessionRegistry, db: Session, username: str) -> Scores:
	# Snapshot reads and the quota commit block, so this runs off the event loop
	session = registry.get(username)
	if session.stage != Stage.RESULTS:
		raise HTTPException(status_code=409, detail="questionnaire is not finished")
	consume_request_quota(db, username)
	return session.scores()


@router.get("/presets")
async def presets():
	return {"questions": PRESET_QUESTIONS}


@router.post("/advice", response_model=AdviceResponse)
async def advice(
	req: AdviceRequest,
	user: User = Depends(get_current_user),
	registry: SessionRegistry = Depends(get_registry),
	coach: CoachService = Depends(get_coach),
	db: Session = Depends(get_db),
):
	question = (req.question or "").strip()
	if not question:
		raise HTTPException(status_code=400, detail="question is required")
	# Optional safety clamp to avoid extremely long prompts
	if len(question) > MAX_QUESTION_CHARS:
		question = question[:MAX_QUESTION_CHARS]
	scores = await run_in_threadpool(_finished_scores, registry, db, user.username)
	try:
		text = await coach.personal_advice(scores, question, req.history[-MAX_HISTORY_TURNS:])
	except CoachUnavailableError as exc:
		raise HTTPException(status_code=503, detail=exc.message)
	return AdviceResponse(text=text)
