from __future__ import annotations


class CatalogError(ValueError):
	"""Raised when the static question catalog is malformed."""


class QuestionnaireError(ValueError):
	"""Base class for questionnaire input contract violations."""


class InvalidAnswerError(QuestionnaireError):
	def __init__(self, question_id: str, value: object) -> None:
		super().__init__(f"answer for {question_id!r} must be an integer between 1 and 6, got {value!r}")
		self.question_id = question_id
		self.value = value


class UnknownQuestionError(QuestionnaireError):
	def __init__(self, question_id: str) -> None:
		super().__init__(f"unknown question id {question_id!r}")
		self.question_id = question_id


class InvalidTransitionError(QuestionnaireError):
	def __init__(self, action: str, stage: str) -> None:
		super().__init__(f"cannot {action} while in stage {stage!r}")
		self.action = action
		self.stage = stage


class CoachUnavailableError(RuntimeError):
	"""The narrative service failed; `message` is safe to show to the user."""

	def __init__(self, message: str, *, cause: Exception | None = None) -> None:
		super().__init__(message)
		self.message = message
		self.cause = cause
