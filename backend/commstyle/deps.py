from __future__ import annotations
from fastapi import Request

from .coach import CoachService
from .registry import SessionRegistry
from .settings import Settings


def get_settings(request: Request) -> Settings:
	return request.app.state.settings


def get_registry(request: Request) -> SessionRegistry:
	return request.app.state.registry


def get_coach(request: Request) -> CoachService:
	return request.app.state.coach
