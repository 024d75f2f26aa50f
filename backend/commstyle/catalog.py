"""Static trait-pair question catalog.

Each question offers two opposing traits on a 1-6 slider. Questions in the
``ab`` group split their points between axis A (extroverted) and axis B
(introverted); the ``cd`` group splits between C (task-oriented) and
D (people-oriented).
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, model_validator

from .errors import CatalogError


class Axis(str, Enum):
	A = "a"
	B = "b"
	C = "c"
	D = "d"


AXIS_GROUPINGS: Tuple[Tuple[Axis, Axis], ...] = ((Axis.A, Axis.B), (Axis.C, Axis.D))

AXIS_LABELS: Dict[Axis, str] = {
	Axis.A: "extroverted",
	Axis.B: "introverted",
	Axis.C: "task-oriented",
	Axis.D: "people-oriented",
}

SLIDER_MIN = 1
SLIDER_MAX = 6
DEFAULT_ANSWER = 4
POINTS_PER_QUESTION = SLIDER_MAX - SLIDER_MIN


class QuestionPair(BaseModel):
	model_config = ConfigDict(frozen=True)

	id: str
	trait_labels: Tuple[str, str]
	axis_pair: Tuple[Axis, Axis]

	@model_validator(mode="after")
	def _check_grouping(self) -> "QuestionPair":
		if self.axis_pair not in AXIS_GROUPINGS:
			raise ValueError(f"question {self.id!r} mixes axes {self.axis_pair}; expected A/B or C/D")
		return self


def _pair(qid: str, first: str, second: str) -> QuestionPair:
	axes = AXIS_GROUPINGS[0] if qid.startswith("ab") else AXIS_GROUPINGS[1]
	return QuestionPair(id=qid, trait_labels=(first, second), axis_pair=axes)


QUESTION_PAIRS: List[QuestionPair] = [
	# A vs B
	_pair("ab1", "Talkative", "Quiet"),
	_pair("ab2", "Involved", "Observant"),
	_pair("ab3", "Sociable", "Reserved"),
	_pair("ab4", "Outgoing on stage", "Intimate"),
	_pair("ab5", "Expresses freely", "Speaks sparingly"),
	_pair("ab6", "Bold", "Cautious"),
	_pair("ab7", "Doer", "Thinker"),
	_pair("ab8", "Extroverted", "Introverted"),
	_pair("ab9", "Speaker", "Listener"),
	_pair("ab10", "Voices feelings", "Keeps feelings inside"),
	_pair("ab11", "Enthusiastic", "Calm"),
	_pair("ab12", "Impatient", "Patient"),
	_pair("ab13", "Leads", "Blends in"),
	_pair("ab14", "Fast", "Slow"),
	_pair("ab15", "Argumentative", "Seeks harmony"),
	# C vs D
	_pair("cd1", "Formal", "Informal"),
	_pair("cd2", "Analytical", "Intuitive"),
	_pair("cd3", "Detail-focused", "Sees the big picture"),
	_pair("cd4", "Insistent", "Yielding"),
	_pair("cd5", "Stands firm", "Goes along"),
	_pair("cd6", "Calculated", "Spontaneous"),
	_pair("cd7", "Task-oriented", "Relationship-oriented"),
	_pair("cd8", "Distant", "Approachable"),
	_pair("cd9", "Restrained", "Impulsive"),
	_pair("cd10", "Structured", "Unstructured"),
	_pair("cd11", "Keeps apart", "Mingles with people"),
	_pair("cd12", "Rigid", "Flexible"),
	_pair("cd13", "Intellectual", "Emotional"),
	_pair("cd14", "Opinionated", "Compromising"),
	_pair("cd15", "Values procedures and methods", "Values people and relationships"),
]


def validate_catalog(catalog: Sequence[QuestionPair]) -> None:
	seen: set[str] = set()
	for question in catalog:
		if question.id in seen:
			raise CatalogError(f"duplicate question id {question.id!r}")
		if question.axis_pair not in AXIS_GROUPINGS:
			raise CatalogError(f"question {question.id!r} mixes axis groupings")
		seen.add(question.id)


def questions_per_grouping(catalog: Sequence[QuestionPair]) -> Dict[Tuple[Axis, Axis], int]:
	counts = {grouping: 0 for grouping in AXIS_GROUPINGS}
	for question in catalog:
		counts[question.axis_pair] += 1
	return counts


validate_catalog(QUESTION_PAIRS)

# 15 questions per grouping, 5 points each
MAX_SCORE_PER_AXIS = max(questions_per_grouping(QUESTION_PAIRS).values()) * POINTS_PER_QUESTION
