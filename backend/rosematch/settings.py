"""Settings for the RoseMatch backend with observability configuration."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")

	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("rosematch-api", "SERVICE_NAME")
	git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_metrics_public: bool = _env_field(False, "OBS_METRICS_PUBLIC")
	obs_admin_token: Optional[str] = _env_field(None, "OBS_ADMIN_TOKEN")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(0.1, "LOG_SAMPLING_RATE_INFO")
	cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

	# Discovery engine knobs
	discovery_match_probability: float = _env_field(0.4, "DISCOVERY_MATCH_PROBABILITY")
	# Seed for the match resolver's random source; unset means OS entropy
	discovery_random_seed: Optional[int] = _env_field(None, "DISCOVERY_RANDOM_SEED")
	discovery_session_ttl_seconds: int = _env_field(3600, "DISCOVERY_SESSION_TTL_SECONDS")
	notifications_max_items: int = _env_field(100, "NOTIFICATIONS_MAX_ITEMS")

	# Environment helpers
	def is_prod(self) -> bool:
		return self.environment.lower() in ("prod", "production", "live")

	def is_dev(self) -> bool:
		return self.environment.lower() in ("dev", "development", "test")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		env_nested_delimiter="__",
		extra="ignore",
	)

	@field_validator("cors_allow_origins", mode="before")
	def _split_cors(cls, value):  # type: ignore[override]
		if value in (None, ""):
			return ()
		if isinstance(value, str):
			return tuple(part.strip() for part in value.split(",") if part.strip())
		if isinstance(value, (list, tuple, set)):
			return tuple(str(item).strip() for item in value if str(item).strip())
		return ()

	@field_validator("discovery_match_probability")
	def _check_probability(cls, value: float) -> float:  # type: ignore[override]
		if not 0.0 <= value <= 1.0:
			raise ValueError("discovery_match_probability must be within [0, 1]")
		return value


def _normalise_level(level: str) -> str:
	return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)

