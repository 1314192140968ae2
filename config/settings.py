# config/settings.py
import os
import sys
from typing import Optional
from dotenv import load_dotenv
from pydantic import ValidationError, Field, field_validator
from pydantic_settings import BaseSettings
from util.constants import ExternalURIs
from util.enums import Environment


if os.getenv("APP_ENV", Environment.DEV) == Environment.DEV:
    load_dotenv()


class Settings(BaseSettings):
    # App
    APP_ENV: str = Field(default=Environment.DEV.value, validation_alias="APP_ENV")

    # CORS & Limits
    ALLOWED_ORIGIN: str = Field(default="*", validation_alias="ALLOWED_ORIGIN")
    MAX_FILE_MB: int = Field(default=10, validation_alias="MAX_FILE_MB")
    MAX_RULES: int = Field(default=10, validation_alias="MAX_RULES")
    DOCUMENT_CHAR_LIMIT: int = Field(default=12000, validation_alias="DOCUMENT_CHAR_LIMIT")
    TRUST_PROXY: bool = Field(default=False, validation_alias="TRUST_PROXY")

    # Rate limiting is only wired when REDIS_URL is present
    REDIS_URL: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    RATE_LIMIT_TIMES: int = Field(default=20, validation_alias="RATE_LIMIT_TIMES")
    RATE_LIMIT_SECONDS: int = Field(default=60, validation_alias="RATE_LIMIT_SECONDS")

    # Backend selection
    LLM_PROVIDER: Optional[str] = Field(default=None, validation_alias="LLM_PROVIDER")
    SAMPLING_TEMPERATURE: float = 0.2
    BACKEND_TIMEOUT_SECONDS: float = Field(
        default=45.0, validation_alias="BACKEND_TIMEOUT_SECONDS"
    )
    EVAL_CONCURRENCY: int = Field(default=10, validation_alias="EVAL_CONCURRENCY")

    # OpenAI Settings
    OPENAI_API_KEY: Optional[str] = Field(default=None, validation_alias="OPENAI_API_KEY")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    OPENAI_API_URL: str = Field(
        default=ExternalURIs.OPENAI_CHAT, validation_alias="OPENAI_API_URL"
    )

    # Mistral Settings
    MISTRAL_API_KEY: Optional[str] = Field(
        default=None, validation_alias="MISTRAL_API_KEY"
    )
    MISTRAL_MODEL: str = Field(
        default="mistral-medium-latest", validation_alias="MISTRAL_MODEL"
    )
    MISTRAL_API_URL: str = Field(
        default=ExternalURIs.MISTRAL_CHAT, validation_alias="MISTRAL_API_URL"
    )

    # Groq Settings (OpenAI-compatible Responses API)
    GROQ_API_KEY: Optional[str] = Field(default=None, validation_alias="GROQ_API_KEY")
    GROQ_MODEL: str = Field(default="openai/gpt-oss-20b", validation_alias="GROQ_MODEL")
    GROQ_BASE_URL: str = Field(
        default=ExternalURIs.GROQ_BASE, validation_alias="GROQ_BASE_URL"
    )

    # Logging knobs
    LOGGER_NAME: str = "pdf-rule-checker"
    LOG_LEVEL: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    LOG_TO_FILE: bool = Field(default=False, validation_alias="LOG_TO_FILE")
    LOG_DIR: str = Field(default="logs", validation_alias="LOG_DIR")
    LOG_FILE_NAME: str = Field(default="app.log", validation_alias="LOG_FILE_NAME")
    LOG_MAX_BYTES: int = Field(
        default=50 * 1024 * 1024, validation_alias="LOG_MAX_BYTES"
    )
    LOG_BACKUP_COUNT: int = Field(default=5, validation_alias="LOG_BACKUP_COUNT")

    # Prompts
    EVAL_SYSTEM_PROMPT: str = (
        "You evaluate business documents against simple compliance rules."
    )

    EVAL_USER_PROMPT: str = (
        "You are validating whether a PDF document satisfies a specific rule.\n"
        'Return strict JSON with the keys: status ("pass" or "fail"), evidence (short quote),\n'
        "reasoning (one sentence), confidence (0-100 integer).\n"
        "\n"
        'Rule: "{rule}"\n'
        "Document text:\n"
        '"""\n'
        "{document}\n"
        '"""\n'
        "JSON Response:\n"
    )

    @field_validator(
        "OPENAI_API_KEY", "MISTRAL_API_KEY", "GROQ_API_KEY", "REDIS_URL", mode="before"
    )
    @classmethod
    def _blank_is_absent(cls, v):
        # Keys are trimmed; whitespace-only means "not configured"
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("LLM_PROVIDER", mode="before")
    @classmethod
    def _lower_provider(cls, v):
        if isinstance(v, str):
            return v.strip().lower() or None
        return v


try:
    settings = Settings()
except ValidationError as e:
    print("❌ Missing/invalid environment variables:", file=sys.stderr)
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", []))
        msg = err.get("msg", "")
        print(f" - {loc}: {msg}", file=sys.stderr)
    sys.exit(1)
except Exception as e:
    print(f"❌ Settings initialization failed: {e}", file=sys.stderr)
    sys.exit(1)
