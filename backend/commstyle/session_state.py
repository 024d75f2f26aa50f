"""Questionnaire session state machine.

Stages run ``intro -> questionnaire -> results``; ``edit`` re-enters the
questionnaire from results with answers intact and ``reset`` returns to the
intro from anywhere. Each session object belongs to exactly one caller.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, StrictInt, ValidationError

from .catalog import DEFAULT_ANSWER, QUESTION_PAIRS, SLIDER_MAX, SLIDER_MIN, QuestionPair
from .errors import InvalidAnswerError, InvalidTransitionError, UnknownQuestionError
from .scoring import Scores, compute_scores


class Stage(str, Enum):
	INTRO = "intro"
	QUESTIONNAIRE = "questionnaire"
	RESULTS = "results"


class SessionSnapshotPayload(BaseModel):
	authenticated: bool = False
	stage: Stage = Stage.INTRO
	question_index: int = Field(default=0, ge=0)
	answers: Dict[str, StrictInt] = Field(default_factory=dict)


def _is_slider_value(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool) and SLIDER_MIN <= value <= SLIDER_MAX


class QuestionnaireSession:
	def __init__(self, catalog: Sequence[QuestionPair] = QUESTION_PAIRS, *, authenticated: bool = False) -> None:
		if not catalog:
			raise ValueError("catalog must contain at least one question")
		self.catalog: List[QuestionPair] = list(catalog)
		self._ids = {q.id for q in self.catalog}
		self.authenticated = authenticated
		self.stage = Stage.INTRO
		self.question_index = 0
		self.answers: Dict[str, int] = self._default_answers()

	def _default_answers(self) -> Dict[str, int]:
		return {q.id: DEFAULT_ANSWER for q in self.catalog}

	@property
	def last_index(self) -> int:
		return len(self.catalog) - 1

	@property
	def current_question(self) -> Optional[QuestionPair]:
		if self.stage != Stage.QUESTIONNAIRE:
			return None
		return self.catalog[self.question_index]

	def _require(self, action: str, stage: Stage) -> None:
		if self.stage != stage:
			raise InvalidTransitionError(action, self.stage.value)

	# ---- transitions ----

	def start(self) -> None:
		self._require("start", Stage.INTRO)
		for qid, value in self._default_answers().items():
			self.answers.setdefault(qid, value)
		self.question_index = 0
		self.stage = Stage.QUESTIONNAIRE

	def answer(self, question_id: str, value: Any) -> None:
		self._require("answer", Stage.QUESTIONNAIRE)
		if question_id not in self._ids:
			raise UnknownQuestionError(question_id)
		if not _is_slider_value(value):
			raise InvalidAnswerError(question_id, value)
		self.answers[question_id] = value

	def next(self) -> None:
		self._require("advance", Stage.QUESTIONNAIRE)
		if self.question_index < self.last_index:
			self.question_index += 1
		else:
			self.stage = Stage.RESULTS

	def prev(self) -> None:
		self._require("go back", Stage.QUESTIONNAIRE)
		if self.question_index > 0:
			self.question_index -= 1

	def edit(self) -> None:
		self._require("edit", Stage.RESULTS)
		self.question_index = 0
		self.stage = Stage.QUESTIONNAIRE

	def reset(self) -> None:
		self.answers = self._default_answers()
		self.question_index = 0
		self.stage = Stage.INTRO

	# ---- derived ----

	def scores(self) -> Scores:
		return compute_scores(self.catalog, self.answers)

	def to_snapshot(self) -> Dict[str, Any]:
		return SessionSnapshotPayload(
			authenticated=self.authenticated,
			stage=self.stage,
			question_index=self.question_index,
			answers=dict(self.answers),
		).model_dump(mode="json")

	@classmethod
	def from_snapshot(cls, data: Mapping[str, Any], catalog: Sequence[QuestionPair] = QUESTION_PAIRS) -> "QuestionnaireSession":
		"""Rebuild a session; raises ValueError when the payload does not describe a valid state."""
		try:
			payload = SessionSnapshotPayload.model_validate(data)
		except ValidationError as exc:
			raise ValueError(f"invalid session snapshot: {exc}") from exc
		session = cls(catalog, authenticated=payload.authenticated)
		if payload.question_index > session.last_index:
			raise ValueError(f"snapshot question index {payload.question_index} is out of range")
		for qid, value in payload.answers.items():
			if qid not in session._ids:
				raise UnknownQuestionError(qid)
			if not _is_slider_value(value):
				raise InvalidAnswerError(qid, value)
			session.answers[qid] = value
		session.stage = payload.stage
		session.question_index = payload.question_index
		return session
