from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = Field(..., alias="DATABASE_URL")
    DEBUG: bool = Field(default=False, alias="DEBUG")
    ALLOWED_ORIGINS: list[str] = Field(
        default=["http://localhost:3000"], alias="ALLOWED_ORIGINS"
    )

    # Auth
    JWT_SECRET: str = Field(..., alias="JWT_SECRET")
    JWT_ALGORITHM: str = Field(default="HS256", alias="JWT_ALGORITHM")
    AUTH_COOKIE_NAME: str = Field(default="auth_token", alias="AUTH_COOKIE_NAME")
    AUTH_TOKEN_EXPIRE_DAYS: int = Field(default=7, alias="AUTH_TOKEN_EXPIRE_DAYS")

    # Completion API
    GOOGLE_API_KEY: str = Field(..., alias="GOOGLE_API_KEY")
    LLM_MODEL: str = Field(default="gemini-2.5-flash-lite", alias="LLM_MODEL")
    LLM_TEMPERATURE: float = Field(default=0.7, alias="LLM_TEMPERATURE")
    LLM_MAX_TOKENS: int = Field(default=500, alias="LLM_MAX_TOKENS")

    # Assistant Configuration
    MAX_KNOWLEDGE_ARTICLES: int = Field(default=3, alias="MAX_KNOWLEDGE_ARTICLES")
    RECENT_TICKETS_LIMIT: int = Field(default=5, alias="RECENT_TICKETS_LIMIT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
