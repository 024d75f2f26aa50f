from __future__ import annotations
from typing import Optional
import asyncio
import logging

from fastapi import FastAPI

from .coach import CoachService
from .db import Base, SessionLocal, engine, get_db, ensure_schema
from .cleanup import purge_stale_snapshots
from .registry import SessionRegistry
from .settings import Settings, settings as default_settings
from .snapshots import SnapshotStore
from .routers import admin, auth, coach, health, questionnaire

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 60 * 60


def _purge_once(app: FastAPI) -> None:
	app_settings: Settings = app.state.settings
	# Past token expiry nobody can reach a live session; its snapshot still resumes it
	evicted = app.state.registry.evict_idle(app_settings.access_token_expire_minutes * 60)
	if evicted:
		logger.info("Evicted %d idle questionnaire sessions", evicted)
	try:
		db = next(get_db())
		removed = purge_stale_snapshots(db, app_settings.snapshot_retention_days)
		if removed:
			logger.info("Purged %d stale snapshot/session rows", removed)
	except Exception:
		logger.warning("Snapshot cleanup failed", exc_info=True)


async def _cleanup_watcher(app: FastAPI):
	while True:
		await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
		_purge_once(app)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
	app_settings = app_settings or default_settings
	app = FastAPI(title="Communication Style Profile API")
	app.state.settings = app_settings
	app.state.registry = SessionRegistry(SnapshotStore(SessionLocal))
	app.state.coach = CoachService(app_settings)

	app.include_router(health.router)
	app.include_router(auth.router)
	app.include_router(questionnaire.router)
	app.include_router(coach.router)
	if app_settings.is_full:
		app.include_router(auth.account_router)
		app.include_router(admin.router)

	@app.on_event("startup")
	async def startup_event():
		logger.info("Starting in %s mode", app_settings.feature_set.value)
		# Initialize DB schema
		Base.metadata.create_all(bind=engine)
		# Apply lightweight dev migrations
		try:
			ensure_schema()
		except Exception:
			logger.warning("Schema migration failed", exc_info=True)
		# Best-effort cleanup at startup, then hourly
		_purge_once(app)
		app.state.cleanup_task = asyncio.create_task(_cleanup_watcher(app))

	@app.on_event("shutdown")
	async def shutdown_event():
		task = getattr(app.state, "cleanup_task", None)
		if task is not None:
			task.cancel()

	return app


app = create_app()
