"""Axis scoring and dominant-style classification.

Every question distributes exactly five points between the two axes of its
pair, so ``a + b`` and ``c + d`` are fixed by the number of questions in each
grouping. The dominant style needs strength on both contributing axes, which
is why the classifier compares products rather than sums.
"""

from __future__ import annotations
from typing import Dict, List, Mapping, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .catalog import Axis, DEFAULT_ANSWER, SLIDER_MAX, SLIDER_MIN, QuestionPair
from .profiles import DominantProfile, ProfileColor, get_profile


class Scores(BaseModel):
	model_config = ConfigDict(frozen=True)

	a: int = Field(default=0, ge=0)
	b: int = Field(default=0, ge=0)
	c: int = Field(default=0, ge=0)
	d: int = Field(default=0, ge=0)

	def __getitem__(self, axis: Axis) -> int:
		return getattr(self, Axis(axis).value)


def compute_scores(catalog: Sequence[QuestionPair], answers: Mapping[str, int]) -> Scores:
	# Values are trusted to be in [1, 6]; the session layer rejects anything else.
	totals: Dict[Axis, int] = {axis: 0 for axis in Axis}
	for question in catalog:
		value = answers.get(question.id, DEFAULT_ANSWER)
		first, second = question.axis_pair
		totals[first] += SLIDER_MAX - value
		totals[second] += value - SLIDER_MIN
	return Scores(**{axis.value: total for axis, total in totals.items()})


# Iteration order doubles as the tie-break: the first maximum wins.
QUADRANT_ORDER: Tuple[ProfileColor, ...] = (
	ProfileColor.RED,
	ProfileColor.BLUE,
	ProfileColor.YELLOW,
	ProfileColor.GREEN,
)


def quadrant_products(scores: Scores) -> Dict[ProfileColor, int]:
	return {
		ProfileColor.RED: scores.a * scores.c,
		ProfileColor.BLUE: scores.b * scores.c,
		ProfileColor.YELLOW: scores.a * scores.d,
		ProfileColor.GREEN: scores.b * scores.d,
	}


def dominant_color(scores: Scores) -> ProfileColor:
	products = quadrant_products(scores)
	best = QUADRANT_ORDER[0]
	for key in QUADRANT_ORDER[1:]:
		if products[key] > products[best]:
			best = key
	return best


def classify_dominant(scores: Scores) -> DominantProfile:
	return get_profile(dominant_color(scores))


# Sum ranking is a separate path used for narratives; its own key order
# settles ties because the sort is stable.
COMPOSITE_ORDER: Tuple[ProfileColor, ...] = (
	ProfileColor.RED,
	ProfileColor.YELLOW,
	ProfileColor.GREEN,
	ProfileColor.BLUE,
)


def composite_scores(scores: Scores) -> Dict[ProfileColor, int]:
	return {
		ProfileColor.RED: scores.a + scores.c,
		ProfileColor.YELLOW: scores.a + scores.d,
		ProfileColor.GREEN: scores.b + scores.d,
		ProfileColor.BLUE: scores.b + scores.c,
	}


def rank_composites(scores: Scores) -> List[Tuple[ProfileColor, int]]:
	sums = composite_scores(scores)
	return sorted(((key, sums[key]) for key in COMPOSITE_ORDER), key=lambda item: -item[1])


def plot_position(scores: Scores) -> Tuple[float, float]:
	"""Team-map coordinates in percent: x runs introverted -> extroverted, y task -> people."""
	total_x = (scores.a + scores.b) or 1
	total_y = (scores.c + scores.d) or 1
	return scores.a / total_x * 100, scores.d / total_y * 100
