from __future__ import annotations
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict


class ProfileColor(str, Enum):
	RED = "RED"
	BLUE = "BLUE"
	YELLOW = "YELLOW"
	GREEN = "GREEN"


class DominantProfile(BaseModel):
	model_config = ConfigDict(frozen=True)

	key: ProfileColor
	name: str
	color: str
	description: str
	strengths: Tuple[str, ...]
	weaknesses: Tuple[str, ...]
	# Coaching metadata used by the narrative builder and the AI prompts
	adjective: str
	archetype: str
	general: str
	recommendation_focus: str


PROFILES: Dict[ProfileColor, DominantProfile] = {
	ProfileColor.RED: DominantProfile(
		key=ProfileColor.RED,
		name="Red - The Driver",
		color="red",
		description=(
			"Extroverted and task-oriented. You are direct, decisive and focused on results. "
			"You like to take charge, move fast and turn goals into action."
		),
		strengths=(
			"Drives processes forward",
			"Decisive under pressure",
			"Direct and efficient communication",
			"Relentless focus on the goal",
		),
		weaknesses=(
			"Impatience",
			"May come across as controlling or aggressive",
			"Difficulty listening to differing opinions",
			"Focus on the 'what' at the expense of the 'how'",
		),
		adjective="determined",
		archetype="the Captain",
		general=(
			"natural leadership, determination and a sharp focus on the goal. You are results-driven, "
			"enjoy challenges and are not afraid to make fast decisions."
		),
		recommendation_focus="combining your determination with active listening and empathy",
	),
	ProfileColor.BLUE: DominantProfile(
		key=ProfileColor.BLUE,
		name="Blue - The Analyst",
		color="blue",
		description=(
			"Introverted and task-oriented. You are precise, thorough and data-driven. "
			"You value quality, structure and well-reasoned decisions."
		),
		strengths=(
			"Excellent planning and organization",
			"Precision and attention to detail",
			"Logical, analytical thinking",
			"Maintaining high standards",
		),
		weaknesses=(
			"Over-criticism of self and others",
			"Analysis paralysis",
			"May come across as cold, distant or pessimistic",
			"Difficulty improvising",
		),
		adjective="precise",
		archetype="the Professor",
		general=(
			"analytical thinking, thoroughness and an uncompromising drive for quality. You rely on data "
			"and care about details, procedures and order."
		),
		recommendation_focus="balancing the pursuit of perfection with the need to move forward pragmatically",
	),
	ProfileColor.YELLOW: DominantProfile(
		key=ProfileColor.YELLOW,
		name="Yellow - The Influencer",
		color="yellow",
		description=(
			"Extroverted and people-oriented. You are enthusiastic, sociable and inspiring. "
			"You draw energy from others and bring ideas to life."
		),
		strengths=(
			"Building relationships and social influence",
			"Motivating through vision and enthusiasm",
			"Creative, big-picture thinking",
			"Creating a positive atmosphere",
		),
		weaknesses=(
			"Difficulty with details and order",
			"Tendency to avoid conflict",
			"Over-optimism that can lead to poor planning",
			"Needs recognition and positive feedback",
		),
		adjective="influential",
		archetype="the Star",
		general=(
			"charisma, optimism and the ability to excite others. You are creative, sociable and draw "
			"energy from social interaction."
		),
		recommendation_focus="translating big ideas into practical work plans",
	),
	ProfileColor.GREEN: DominantProfile(
		key=ProfileColor.GREEN,
		name="Green - The Supporter",
		color="green",
		description=(
			"Introverted and people-oriented. You are patient, loyal and caring. "
			"You value harmony, stability and strong relationships."
		),
		strengths=(
			"Listening and empathy",
			"Reliability and stability",
			"Mediating and resolving conflicts",
			"Creating a supportive, harmonious workplace",
		),
		weaknesses=(
			"Avoiding conflict and confrontation",
			"Resistance to sudden change",
			"Difficulty making quick decisions",
			"Setting aside personal needs for the group",
		),
		adjective="supportive",
		archetype="the Diplomat",
		general=(
			"stability, harmony and a deep commitment to relationships. You are an excellent team player, "
			"patient, a good listener and an anchor of support."
		),
		recommendation_focus="expressing your views assertively and respectfully",
	),
}


def get_profile(key: ProfileColor) -> DominantProfile:
	return PROFILES[key]
