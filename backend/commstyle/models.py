from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Primary key is username
	username = Column(String(128), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	display_name = Column(String(256), nullable=True)
	team = Column(String(128), nullable=True, index=True)
	# "user" or "admin"
	role = Column(String(16), default="user", nullable=False)
	requests_used = Column(Integer, default=0, nullable=False)
	requests_limit = Column(Integer, default=1000, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# JWT id (jti); a token is only honoured while its row exists
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Team(Base):
	__tablename__ = "teams"
	name = Column(String(128), primary_key=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserResult(Base):
	__tablename__ = "user_results"
	username = Column(String(128), primary_key=True)
	score_a = Column(Integer, nullable=False)
	score_b = Column(Integer, nullable=False)
	score_c = Column(Integer, nullable=False)
	score_d = Column(Integer, nullable=False)
	completed_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class SessionSnapshot(Base):
	__tablename__ = "session_snapshots"
	snapshot_key = Column(String(128), primary_key=True)
	payload = Column(Text, nullable=False)  # JSON string snapshot
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
