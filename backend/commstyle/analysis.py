from __future__ import annotations
from typing import Dict, Iterable, Optional

from pydantic import BaseModel

from .profiles import ProfileColor, get_profile
from .scoring import QUADRANT_ORDER, COMPOSITE_ORDER, Scores, dominant_color, rank_composites


# Secondary style is only called out when it carries more than this share
SECONDARY_SHARE_THRESHOLD = 20


class ProfileAnalysis(BaseModel):
	general: str
	strengths: str
	weaknesses: str
	recommendations: str


BALANCED_ANALYSIS = ProfileAnalysis(
	general="A dominant profile could not be determined. Your answers may have been perfectly balanced.",
	strengths="The ability to see every side equally.",
	weaknesses="Difficulty committing to a preferred course of action.",
	recommendations="Notice in which situations you feel most at ease to discover your natural tendencies.",
)


def _percent(part: int, total: int) -> int:
	# Round half up
	return int(part * 100 / total + 0.5)


def build_profile_analysis(scores: Scores) -> ProfileAnalysis:
	ranking = rank_composites(scores)
	total = sum(value for _, value in ranking)
	if total == 0:
		return BALANCED_ANALYSIS

	(dominant_key, dominant_value), (secondary_key, secondary_value), _, (weakest_key, _) = ranking
	dominant = get_profile(dominant_key)
	secondary = get_profile(secondary_key)
	weakest = get_profile(weakest_key)
	dominant_pct = _percent(dominant_value, total)
	secondary_pct = _percent(secondary_value, total)
	show_secondary = secondary_pct > SECONDARY_SHARE_THRESHOLD

	general = (
		f"Your profile shows a dominant {dominant.color} style ({dominant.adjective}), making up about "
		f"{dominant_pct}% of the mix. Your natural tendency leans towards {dominant.general}"
	)
	if show_secondary:
		general += (
			f" Your notable secondary style is {secondary.color} ({secondary.adjective}), contributing about "
			f"{secondary_pct}% of the profile. This combination gives you a distinctive approach."
		)
	else:
		general += " Your profile is highly focused, which makes your communication style consistent and predictable to others."

	strengths = (
		f"Your standout strengths come from the {dominant.color} style. You excel at "
		f"{dominant.strengths[0].lower()} and {dominant.strengths[1].lower()}."
	)
	if show_secondary:
		strengths += (
			f" The {secondary.color} style adds {secondary.strengths[0].lower()} and "
			f"{secondary.strengths[1].lower()}."
		)

	weaknesses = (
		f"Every strength has a shadow side. The dominance of the {dominant.color} style can sometimes lead to "
		f"{dominant.weaknesses[0].lower()} or {dominant.weaknesses[1].lower()}."
		f" The relatively low share of the {weakest.color} style suggests that qualities such as "
		f"{weakest.strengths[0].lower()} and {weakest.strengths[1].lower()} are not your natural tendency "
		"and require more conscious effort."
	)

	recommendations = (
		f"To make the most of your potential, focus on {dominant.recommendation_focus}."
		f" A key recommendation is to grow your awareness of the {weakest.color} style's qualities. "
		f"For example, deliberately try {weakest.recommendation_focus}, even when it feels less natural."
	)
	return ProfileAnalysis(general=general, strengths=strengths, weaknesses=weaknesses, recommendations=recommendations)


def primary_and_secondary(scores: Scores) -> tuple[ProfileColor, ProfileColor]:
	ranking = rank_composites(scores)
	return ranking[0][0], ranking[1][0]


class TeamDistribution(BaseModel):
	total: int
	by_dominant: Dict[ProfileColor, int]
	by_composite: Dict[ProfileColor, int]


def team_distribution(score_sets: Iterable[Optional[Scores]]) -> TeamDistribution:
	"""Counts members per style; members without completed scores are skipped."""
	by_dominant = {key: 0 for key in QUADRANT_ORDER}
	by_composite = {key: 0 for key in COMPOSITE_ORDER}
	total = 0
	for scores in score_sets:
		if scores is None:
			continue
		by_dominant[dominant_color(scores)] += 1
		by_composite[rank_composites(scores)[0][0]] += 1
		total += 1
	return TeamDistribution(total=total, by_dominant=by_dominant, by_composite=by_composite)
