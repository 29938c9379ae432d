import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration class"""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    FLASK_ENV = os.getenv("FLASK_ENV", "development")
    DEBUG = os.getenv("DEBUG", "True") == "True"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # SQLAlchemy configuration
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI", "sqlite:///gojun.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Front-end origins allowed to call /api/*
    ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173")

    # Text-generation provider
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "anthropic")
    LLM_MODEL = os.getenv("LLM_MODEL")  # None -> provider default
    LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "4096"))
    LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "60"))
    LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "2"))
    LLM_BACKOFF_BASE = float(os.getenv("LLM_BACKOFF_BASE", "0.5"))
    ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

    # Managed auth service that issues the bearer tokens
    SUPABASE_URL = os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # Google OAuth code exchange
    GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_REDIRECT_URI = os.getenv(
        "GOOGLE_REDIRECT_URI", "http://localhost:5001/api/auth/callback"
    )


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 20,
        "max_overflow": 10,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    # Never reach real providers from the test suite
    ANTHROPIC_API_KEY = "test-anthropic-key"
    OPENAI_API_KEY = None
    SUPABASE_URL = "https://example.supabase.co"
    SUPABASE_SERVICE_ROLE_KEY = "test-service-key"
    GOOGLE_CLIENT_ID = "test-client-id"
    GOOGLE_CLIENT_SECRET = "test-client-secret"
    GOOGLE_REDIRECT_URI = "http://localhost/api/auth/callback"
    LLM_BACKOFF_BASE = 0.0


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


@dataclass(frozen=True)
class Settings:
    """Read-only snapshot of the settings the services need.

    Built once per application in ``create_app`` and handed to services
    explicitly, so request handlers never read ``os.environ`` themselves.
    """

    llm_provider: str = "anthropic"
    llm_model: Optional[str] = None
    llm_max_tokens: int = 4096
    llm_timeout: float = 60.0
    llm_max_retries: int = 2
    llm_backoff_base: float = 0.5
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_redirect_uri: Optional[str] = None
    allowed_origins: Tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Settings":
        """Build settings from a Flask config (or any mapping of upper-case keys)."""
        origins = values.get("ALLOWED_ORIGINS") or ""
        if isinstance(origins, str):
            origins = [origin.strip() for origin in origins.split(",")]

        return cls(
            llm_provider=(values.get("LLM_PROVIDER") or "anthropic").lower(),
            llm_model=values.get("LLM_MODEL") or None,
            llm_max_tokens=int(values.get("LLM_MAX_TOKENS", 4096)),
            llm_timeout=float(values.get("LLM_TIMEOUT", 60.0)),
            llm_max_retries=int(values.get("LLM_MAX_RETRIES", 2)),
            llm_backoff_base=float(values.get("LLM_BACKOFF_BASE", 0.5)),
            anthropic_api_key=values.get("ANTHROPIC_API_KEY") or None,
            openai_api_key=values.get("OPENAI_API_KEY") or None,
            supabase_url=values.get("SUPABASE_URL") or None,
            supabase_service_role_key=values.get("SUPABASE_SERVICE_ROLE_KEY") or None,
            google_client_id=values.get("GOOGLE_CLIENT_ID") or None,
            google_client_secret=values.get("GOOGLE_CLIENT_SECRET") or None,
            google_redirect_uri=values.get("GOOGLE_REDIRECT_URI") or None,
            allowed_origins=tuple(origin for origin in origins if origin),
        )
