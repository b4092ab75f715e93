from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Provider can be "openai_compatible" (chat completions, Cerebras by default) or "gemini" (Generative Language API)
	generation_provider: str = Field(default="openai_compatible", validation_alias="GENERATION_PROVIDER")
	# OpenAI-compatible chat completions endpoint
	chat_api_key: str | None = Field(default=None, validation_alias="CEREBRAS_API_KEY")
	chat_base_url: str = Field(default="https://api.cerebras.ai/v1", validation_alias="CEREBRAS_BASE_URL")
	chat_model: str = Field(default="qwen-3-235b-a22b-instruct-2507", validation_alias="CHAT_MODEL")
	# Gemini configuration
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")

	generation_temperature: float = Field(default=0.2, validation_alias="GENERATION_TEMPERATURE")
	# A full module is a few thousand tokens of JSON
	generation_max_tokens: int = Field(default=4096, validation_alias="GENERATION_MAX_TOKENS")
	request_timeout_seconds: float = Field(default=60.0, validation_alias="REQUEST_TIMEOUT_SECONDS")

	# Adaptive engine
	quiz_item_count: int = Field(default=5, validation_alias="QUIZ_ITEM_COUNT")
	strong_threshold: int = Field(default=80, validation_alias="STRONG_THRESHOLD")
	weak_threshold: int = Field(default=60, validation_alias="WEAK_THRESHOLD")
	fallback_intro_chars: int = Field(default=500, validation_alias="FALLBACK_INTRO_CHARS")
	max_source_chars: int = Field(default=12000, validation_alias="MAX_SOURCE_CHARS")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	# Progress rows untouched for longer than this are purged at startup
	progress_retention_days: int = Field(default=7, validation_alias="PROGRESS_RETENTION_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
