import pytest

from commstyle.coach import (
    MSG_BAD_KEY,
    MSG_BILLING,
    MSG_EMPTY,
    MSG_LOCATION,
    MSG_NOT_CONFIGURED,
    MSG_OVERLOADED,
    ChatTurn,
    CoachService,
    build_coach_instruction,
    build_team_instruction,
    friendly_error_message,
    history_to_turns,
)
from commstyle.errors import CoachUnavailableError
from commstyle.gemini_client import GeminiError
from commstyle.records import UserProfileRecord
from commstyle.scoring import Scores
from commstyle.settings import Settings

DEFAULT_SCORES = Scores(a=30, b=45, c=30, d=45)


class StubClient:
    def __init__(self, reply="advice", error=None):
        self.reply = reply
        self.error = error
        self.calls = []
        self.closed = False

    async def generate_chat(self, turns, *, system_instruction=None, temperature=None):
        self.calls.append((turns, system_instruction, temperature))
        if self.error:
            raise self.error
        return self.reply

    async def aclose(self):
        self.closed = True


def test_coach_instruction_carries_analysis_and_raw_scores():
    instruction = build_coach_instruction(DEFAULT_SCORES)
    assert "dominant green style" in instruction
    assert "Extroversion (red/yellow styles): 30 out of 75." in instruction
    assert "People orientation (yellow/green styles): 45 out of 75." in instruction
    assert "Red (the Captain)" in instruction
    assert "Do not open with a greeting." in instruction


def test_team_instruction_counts_styles():
    roster = [
        UserProfileRecord(username="a", scores=Scores(a=75, b=0, c=75, d=0)),
        UserProfileRecord(username="b", scores=DEFAULT_SCORES),
        UserProfileRecord(username="c"),
    ]
    instruction = build_team_instruction("alpha", roster, "We miss deadlines")
    assert "of 2 members" in instruction
    assert "1 red, 0 yellow, 1 green, 0 blue" in instruction
    assert "We miss deadlines" in instruction


def test_history_is_replayed_before_question():
    turns = history_to_turns(
        [ChatTurn(sender="user", text="first"), ChatTurn(sender="ai", text="reply"), ChatTurn(sender="ai", text="  ")],
        "second",
    )
    assert turns == [
        {"role": "user", "text": "first"},
        {"role": "model", "text": "reply"},
        {"role": "user", "text": "second"},
    ]


@pytest.mark.parametrize(
    "error, expected",
    [
        (GeminiError("busy", status_code=503), MSG_OVERLOADED),
        (RuntimeError("model is overloaded"), MSG_OVERLOADED),
        (GeminiError("bad", status_code=400, body="API key not valid"), MSG_BAD_KEY),
        (GeminiError("denied", status_code=403, body="PERMISSION_DENIED"), MSG_BAD_KEY),
        (RuntimeError("billing account disabled"), MSG_BILLING),
        (RuntimeError("User location is not supported for the API use."), MSG_LOCATION),
    ],
)
def test_friendly_error_messages(error, expected):
    assert friendly_error_message(error) == expected


def test_unknown_errors_include_details():
    message = friendly_error_message(RuntimeError("socket closed"))
    assert "socket closed" in message


async def test_personal_advice_uses_coach_temperature():
    stub = StubClient(reply="## Do this")
    service = CoachService(Settings(COACH_TEMPERATURE=0.3), client_factory=lambda: stub)
    text = await service.personal_advice(DEFAULT_SCORES, "How do I lead?", [ChatTurn(sender="user", text="hi")])
    assert text == "## Do this"
    turns, instruction, temperature = stub.calls[0]
    assert turns[-1] == {"role": "user", "text": "How do I lead?"}
    assert "Inspire" in instruction
    assert temperature == 0.3
    assert stub.closed


async def test_empty_reply_becomes_apology():
    service = CoachService(Settings(), client_factory=lambda: StubClient(reply=""))
    assert await service.personal_advice(DEFAULT_SCORES, "q") == MSG_EMPTY


async def test_failures_become_coach_unavailable():
    stub = StubClient(error=GeminiError("busy", status_code=503))
    service = CoachService(Settings(), client_factory=lambda: stub)
    with pytest.raises(CoachUnavailableError) as excinfo:
        await service.team_advice("alpha", [], "challenge")
    assert excinfo.value.message == MSG_OVERLOADED
    assert stub.closed


async def test_missing_configuration_becomes_coach_unavailable():
    def factory():
        raise ValueError("GEMINI_API_KEY is not configured")

    service = CoachService(Settings(), client_factory=factory)
    with pytest.raises(CoachUnavailableError) as excinfo:
        await service.personal_advice(DEFAULT_SCORES, "q")
    assert excinfo.value.message == MSG_NOT_CONFIGURED
