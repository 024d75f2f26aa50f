from __future__ import annotations
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
import logging

from .settings import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url or "sqlite:///./app.db"

_engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
	_engine_kwargs["connect_args"] = {"check_same_thread": False}
	# In-memory databases live on a single connection
	if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
		_engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, future=True, **_engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


# Best-effort lightweight migrations for development (SQLite-friendly)
def ensure_schema() -> None:
	try:
		inspector = inspect(engine)
		tables = set(inspector.get_table_names())
	except Exception:
		logger.warning("Could not inspect database schema", exc_info=True)
		return
	if "auth_users" in tables:
		cols = {c["name"] for c in inspector.get_columns("auth_users")}
		with engine.begin() as conn:
			if "display_name" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_users ADD COLUMN display_name VARCHAR(256)")
			if "team" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_users ADD COLUMN team VARCHAR(128)")
			if "role" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_users ADD COLUMN role VARCHAR(16) DEFAULT 'user' NOT NULL")
			if "requests_used" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_users ADD COLUMN requests_used INTEGER DEFAULT 0 NOT NULL")
			if "requests_limit" not in cols:
				conn.exec_driver_sql("ALTER TABLE auth_users ADD COLUMN requests_limit INTEGER DEFAULT 1000 NOT NULL")
