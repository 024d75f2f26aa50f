"""AI coaching narratives built on top of a user's (or a team's) scores."""

from __future__ import annotations
import logging
from typing import Callable, Iterable, List, Literal, Optional

from pydantic import BaseModel

from .analysis import build_profile_analysis, primary_and_secondary, team_distribution
from .catalog import MAX_SCORE_PER_AXIS
from .errors import CoachUnavailableError
from .gemini_client import GeminiClient, GeminiError
from .profiles import ProfileColor, get_profile
from .records import UserProfileRecord
from .scoring import Scores
from .settings import Settings

logger = logging.getLogger(__name__)


PRESET_QUESTIONS: List[str] = [
	"How can I improve the way my team works together?",
	"What is the best way for me to influence others?",
	"Give me a tip for handling conflicts.",
	"How can I leverage my strengths to advance my career?",
]

MSG_NOT_CONFIGURED = "The AI coach is not configured on the server. Please try again later."
MSG_OVERLOADED = "Sorry, the AI service is under heavy load right now. Please try again in a few minutes."
MSG_BAD_KEY = "The configured API key is invalid or lacks the required permissions."
MSG_BILLING = "There is a billing problem with the AI service account."
MSG_LOCATION = "The AI service is not available from your current location."
MSG_EMPTY = "I couldn't put together an answer right now. Please try again."


class ChatTurn(BaseModel):
	sender: Literal["user", "ai"]
	text: str


KNOWLEDGE_BASE = """\
1. Color archetypes:
- Red (the Captain): a leader; direct, competitive, goal-focused. Asks "what?".
- Yellow (the Star): sociable, creative, optimistic, influential. Asks "who?".
- Green (the Diplomat): supportive, patient, dependable, a team player. Asks "how?".
- Blue (the Professor): analytical, precise, organized, deliberate. Asks "why?".

2. Communicating effectively with each style:
- With Red: be direct, concise and results-focused. Present options, not problems.
- With Yellow: be warm and friendly and focus on vision and big ideas. Let them talk.
- With Green: be patient, build trust and emphasize security and stability. Ask for their opinion.
- With Blue: be organized, accurate and backed by data. Give them time to think.

3. Development tips for each style:
- Red: practice active listening, learn to delegate, show appreciation for others.
- Yellow: focus on time management, pay attention to details, turn ideas into tasks.
- Green: learn to say no, make decisions faster, be more open to change.
- Blue: learn to decide with 80% of the information, be more open to emotions, celebrate successes."""

GUIDELINES = """\
1. Identity: you are Inspire, an expert coach. Do not mention that you are a language model or an AI.
2. Context: do not repeat the written analysis or the numeric scores. Use them only as background to understand the user deeply.
3. Focus: answer the user's question directly, professionally and practically. Provide concrete action steps.
4. Language: use rich, fluent and positive language.
5. Structure: format answers in Markdown for readability (headings, lists, emphasis).
6. Integration: ground your answer in the unique combination of colors in the user's profile. If they ask about working with someone else, use the knowledge on communicating effectively with each style.
7. Style: get straight to the point. Do not open with a greeting."""


def build_coach_instruction(scores: Scores) -> str:
	analysis = build_profile_analysis(scores)
	return (
		"You are \"Inspire\", a world-class personal coach and organizational consultant specializing in "
		"communication styles according to Jung's four-color model.\n"
		"The user has completed a questionnaire; below is their full communication profile. Use all of it to give "
		"the most accurate and personal advice.\n\n"
		"### Part A: written analysis of the user's profile (the most important context)\n"
		f"- General analysis: {analysis.general}\n"
		f"- Key strengths: {analysis.strengths}\n"
		f"- Areas for development: {analysis.weaknesses}\n\n"
		"### Part B: the user's raw scores (for reference)\n"
		f"- Extroversion (red/yellow styles): {scores.a} out of {MAX_SCORE_PER_AXIS}.\n"
		f"- Introversion (blue/green styles): {scores.b} out of {MAX_SCORE_PER_AXIS}.\n"
		f"- Task orientation (red/blue styles): {scores.c} out of {MAX_SCORE_PER_AXIS}.\n"
		f"- People orientation (yellow/green styles): {scores.d} out of {MAX_SCORE_PER_AXIS}.\n\n"
		"### Part C: your knowledge of the color model\n"
		f"{KNOWLEDGE_BASE}\n\n"
		"### Part D: answer guidelines (mandatory)\n"
		f"{GUIDELINES}"
	)


def build_team_instruction(team: str, profiles: Iterable[UserProfileRecord], challenge: str) -> str:
	dist = team_distribution(p.scores for p in profiles)
	counts = dist.by_composite
	return (
		f"You are a senior organizational consultant analyzing the team \"{team}\" of {dist.total} members.\n"
		f"Team composition: {counts[ProfileColor.RED]} red, {counts[ProfileColor.YELLOW]} yellow, "
		f"{counts[ProfileColor.GREEN]} green, {counts[ProfileColor.BLUE]} blue.\n"
		f"Analyze the challenge: \"{challenge}\" and provide strategic solutions grounded in this color composition. "
		"Format the answer in Markdown and do not open with a greeting."
	)


def friendly_error_message(err: Exception) -> str:
	text = str(err)
	if isinstance(err, GeminiError):
		text = f"{text} {err.body}"
		if err.status_code == 503:
			return MSG_OVERLOADED
	lowered = text.lower()
	if "overloaded" in lowered or "503" in lowered:
		return MSG_OVERLOADED
	if "api key not valid" in lowered or "permission denied" in lowered or "permission_denied" in lowered:
		return MSG_BAD_KEY
	if "billing" in lowered:
		return MSG_BILLING
	if "user location is not supported" in lowered:
		return MSG_LOCATION
	return f"An unexpected error occurred while talking to the AI service. Details: {err}"


def history_to_turns(history: Iterable[ChatTurn], question: str) -> List[dict]:
	turns = [{"role": "model" if t.sender == "ai" else "user", "text": t.text} for t in history if t.text.strip()]
	turns.append({"role": "user", "text": question})
	return turns


class CoachService:
	def __init__(self, app_settings: Settings, client_factory: Optional[Callable[[], GeminiClient]] = None) -> None:
		self.settings = app_settings
		self._client_factory = client_factory or (lambda: GeminiClient(app_settings=app_settings))

	async def _run(self, turns: List[dict], system_instruction: str, temperature: float) -> str:
		try:
			client = self._client_factory()
		except ValueError as exc:
			logger.error("AI coach unavailable: %s", exc)
			raise CoachUnavailableError(MSG_NOT_CONFIGURED, cause=exc) from exc
		try:
			text = await client.generate_chat(turns, system_instruction=system_instruction, temperature=temperature)
		except Exception as exc:
			logger.error("AI coach call failed: %s", exc)
			raise CoachUnavailableError(friendly_error_message(exc), cause=exc) from exc
		finally:
			await client.aclose()
		return text or MSG_EMPTY

	async def personal_advice(self, scores: Scores, question: str, history: Iterable[ChatTurn] = ()) -> str:
		dominant, secondary = primary_and_secondary(scores)
		logger.info("Coaching request for %s/%s profile", get_profile(dominant).color, get_profile(secondary).color)
		return await self._run(
			history_to_turns(history, question),
			build_coach_instruction(scores),
			self.settings.coach_temperature,
		)

	async def team_advice(self, team: str, profiles: List[UserProfileRecord], challenge: str) -> str:
		return await self._run(
			[{"role": "user", "text": challenge}],
			build_team_instruction(team, profiles, challenge),
			self.settings.team_coach_temperature,
		)
