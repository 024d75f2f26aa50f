from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class FeatureSet(str, Enum):
	# "simple": shared-password gate only. "full": accounts, teams and the admin dashboard.
	SIMPLE = "simple"
	FULL = "full"


class Settings(BaseSettings):
	feature_set: FeatureSet = Field(default=FeatureSet.SIMPLE, validation_alias="FEATURE_SET")
	# Shared secret for the simple password gate (compared case-insensitively)
	access_password: str = Field(default="inspire", validation_alias="ACCESS_PASSWORD")
	# Registration code that grants the admin role; admin sign-up is disabled when unset
	admin_code: str | None = Field(default=None, validation_alias="ADMIN_CODE")

	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	# Retry policy for overloaded (503) responses
	gemini_max_attempts: int = Field(default=5, validation_alias="GEMINI_MAX_ATTEMPTS")
	gemini_initial_backoff_seconds: float = Field(default=0.5, validation_alias="GEMINI_INITIAL_BACKOFF_SECONDS")
	coach_temperature: float = Field(default=0.7, validation_alias="COACH_TEMPERATURE")
	team_coach_temperature: float = Field(default=0.8, validation_alias="TEAM_COACH_TEMPERATURE")

	# OpenRouter fallback configuration (optional)
	openrouter_api_key: str | None = Field(default=None, validation_alias="OPENROUTER_API_KEY")
	openrouter_model: str = Field(default="x-ai/grok-4-fast:free", validation_alias="OPENROUTER_MODEL")
	openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1/chat/completions", validation_alias="OPENROUTER_BASE_URL")
	openrouter_referer: str = Field(default="https://localhost", validation_alias="OPENROUTER_HTTP_REFERER")
	openrouter_title: str = Field(default="Communication Style Profile", validation_alias="OPENROUTER_TITLE")

	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Seed user
	seed_username: str | None = Field(default=None, validation_alias="SEED_USERNAME")
	seed_password_plain: str | None = Field(default=None, validation_alias="SEED_PASSWORD")

	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	# Snapshots untouched for longer than this are purged; 0 disables the purge
	snapshot_retention_days: int = Field(default=7, validation_alias="SNAPSHOT_RETENTION_DAYS")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

	@property
	def is_full(self) -> bool:
		return self.feature_set == FeatureSet.FULL

settings = Settings()
