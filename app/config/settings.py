from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field

# Values from .env never override variables already set in the environment
load_dotenv()


class Settings(BaseSettings):
    """Studio configuration, read from the environment and .env."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Persona Content Studio"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Persona-driven image and text generation API"

    # Record store
    STORAGE_BACKEND: str = Field(default="sql", description="Record store backend: 'sql' or 'supabase'")
    DATABASE_URL: str = ""
    LOCAL_SQLITE_PATH: str = "sqlite+aiosqlite:///./local.db"
    SUPABASE_DATABASE_NAME: str = "postgres"
    SUPABASE_DATABASE_USER: str = "postgres"
    SUPABASE_DATABASE_PASSWORD: str = ""
    SUPABASE_DATABASE_HOST: str = ""
    SUPABASE_DATABASE_PORT: int = 5432

    # Supabase REST + Storage
    SUPABASE_URL: str = Field(default="", description="Supabase project URL (https://xxx.supabase.co)")
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = Field(default="", description="Service role key used for table and bucket access")
    SUPABASE_STORAGE_BUCKET: str = "persona-images"

    # Persona reference images
    BINARY_STORE_BACKEND: str = Field(default="local", description="Binary store backend: 'local' or 'supabase'")
    LOCAL_UPLOAD_DIR: str = "uploads"
    UPLOADS_URL_PREFIX: str = "/uploads"
    MAX_IMAGE_UPLOAD_BYTES: int = Field(default=5 * 1024 * 1024, gt=0)

    # Bearer tokens
    LOCAL_AUTH_SECRET: str = "JWT_SECRET_KEY"
    LOCAL_AUTH_TOKEN_EXP_SECONDS: int = 3600

    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0, description="Upper bound on a single provider call")
    OPENAI_IMAGE_SIZE: str = "1024x1024"
    OPENAI_TEMPERATURE: float = 0.7
    OPENAI_MAX_TOKENS: int = 1000
    OPENAI_SYSTEM_PROMPT: str = (
        "You are a content assistant that writes on-brand copy for the user's persona."
    )

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    def _supabase_postgres_url(self) -> str:
        if not self.SUPABASE_DATABASE_HOST.strip() or not self.SUPABASE_DATABASE_PASSWORD.strip():
            return ""
        return (
            f"postgresql://{self.SUPABASE_DATABASE_USER}:{self.SUPABASE_DATABASE_PASSWORD}@"
            f"{self.SUPABASE_DATABASE_HOST}:{self.SUPABASE_DATABASE_PORT}/{self.SUPABASE_DATABASE_NAME}?sslmode=require"
        )

    @computed_field
    @property
    def effective_database_url(self) -> str:
        """First of: DATABASE_URL, Supabase Postgres, LOCAL_SQLITE_PATH."""
        for candidate in (self.DATABASE_URL, self._supabase_postgres_url(), self.LOCAL_SQLITE_PATH):
            if candidate and candidate.strip():
                return candidate.strip()
        return "sqlite+aiosqlite:///./local.db"


settings = Settings()
