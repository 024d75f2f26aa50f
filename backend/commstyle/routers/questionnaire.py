"""
Questionnaire router

Drives the intro -> questionnaire -> results flow for the authenticated
caller. Every transition is followed by a best-effort snapshot write so a
reload resumes where the caller left off.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, StrictInt
from sqlalchemy.orm import Session

from ..analysis import ProfileAnalysis, build_profile_analysis
from ..catalog import DEFAULT_ANSWER, MAX_SCORE_PER_AXIS, SLIDER_MAX, SLIDER_MIN, QuestionPair
from ..db import get_db
from ..deps import get_registry, get_settings
from ..errors import InvalidTransitionError, QuestionnaireError
from ..profiles import DominantProfile, ProfileColor
from ..records import save_user_results
from ..registry import SessionRegistry
from ..scoring import Scores, classify_dominant, quadrant_products, rank_composites
from ..session_state import QuestionnaireSession, Stage
from ..settings import Settings
from .auth import User, get_current_user

router = APIRouter(prefix="/questionnaire", tags=["questionnaire"])

logger = logging.getLogger(__name__)


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CatalogResponse(BaseModel):
	questions: List[QuestionPair]
	slider_min: int = SLIDER_MIN
	slider_max: int = SLIDER_MAX
	default_value: int = DEFAULT_ANSWER
	max_score_per_axis: int = MAX_SCORE_PER_AXIS


class StateResponse(BaseModel):
	authenticated: bool
	stage: Stage
	question_index: int
	total_questions: int
	current_question: Optional[QuestionPair] = None
	answers: Dict[str, int]


class AnswerRequest(BaseModel):
	question_id: str
	value: StrictInt


class RankedStyle(BaseModel):
	color: ProfileColor
	value: int


class ResultsResponse(BaseModel):
	scores: Scores
	max_score_per_axis: int = MAX_SCORE_PER_AXIS
	dominant: DominantProfile
	quadrants: Dict[ProfileColor, int]
	ranking: List[RankedStyle]
	analysis: ProfileAnalysis


# ============================================================================
# HELPERS
# ============================================================================

def _state(session: QuestionnaireSession) -> StateResponse:
	return StateResponse(
		authenticated=session.authenticated,
		stage=session.stage,
		question_index=session.question_index,
		total_questions=len(session.catalog),
		current_question=session.current_question,
		answers=dict(session.answers),
	)


def _raise_for(exc: QuestionnaireError) -> None:
	status = 409 if isinstance(exc, InvalidTransitionError) else 422
	raise HTTPException(status_code=status, detail=str(exc))


def _apply(registry: SessionRegistry, user: User, action: str, *args) -> Tuple[QuestionnaireSession, Stage]:
	session = registry.get(user.username)
	before = session.stage
	try:
		getattr(session, action)(*args)
	except QuestionnaireError as exc:
		_raise_for(exc)
	registry.persist(user.username)
	return session, before


def build_results(scores: Scores) -> ResultsResponse:
	return ResultsResponse(
		scores=scores,
		dominant=classify_dominant(scores),
		quadrants=quadrant_products(scores),
		ranking=[RankedStyle(color=color, value=value) for color, value in rank_composites(scores)],
		analysis=build_profile_analysis(scores),
	)


def _record_completion(db: Session, user: User, scores: Scores, app_settings: Settings) -> None:
	# Only account holders in the full feature set have a results record
	if not app_settings.is_full or user.is_guest:
		return
	try:
		save_user_results(db, user.username, scores)
	except Exception:
		db.rollback()
		logger.warning("Could not save results for %s", user.username, exc_info=True)


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/catalog", response_model=CatalogResponse)
async def catalog(registry: SessionRegistry = Depends(get_registry)):
	return CatalogResponse(questions=registry.catalog)


@router.get("/state", response_model=StateResponse)
def state(user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	return _state(registry.get(user.username))


@router.post("/start", response_model=StateResponse)
def start(user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	session, _ = _apply(registry, user, "start")
	return _state(session)


@router.post("/answer", response_model=StateResponse)
def answer(req: AnswerRequest, user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	session, _ = _apply(registry, user, "answer", req.question_id, req.value)
	return _state(session)


@router.post("/next", response_model=StateResponse)
def next_question(
	user: User = Depends(get_current_user),
	registry: SessionRegistry = Depends(get_registry),
	db: Session = Depends(get_db),
	app_settings: Settings = Depends(get_settings),
):
	session, before = _apply(registry, user, "next")
	if before == Stage.QUESTIONNAIRE and session.stage == Stage.RESULTS:
		_record_completion(db, user, session.scores(), app_settings)
	return _state(session)


@router.post("/prev", response_model=StateResponse)
def prev_question(user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	session, _ = _apply(registry, user, "prev")
	return _state(session)


@router.post("/edit", response_model=StateResponse)
def edit(user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	session, _ = _apply(registry, user, "edit")
	return _state(session)


@router.post("/reset", response_model=StateResponse)
def reset(user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	return _state(registry.reset(user.username))


@router.get("/results", response_model=ResultsResponse)
def results(user: User = Depends(get_current_user), registry: SessionRegistry = Depends(get_registry)):
	session = registry.get(user.username)
	if session.stage != Stage.RESULTS:
		raise HTTPException(status_code=409, detail="questionnaire is not finished")
	return build_results(session.scores())
