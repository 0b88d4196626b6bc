from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='forbid',
    )

    DATABASE_URL: str
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = 'HS256'
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    APP_ENV: str = 'development'
    CORS_ORIGINS: str = 'http://localhost:3001'
    LOG_LEVEL: str = 'INFO'

    UPLOAD_REWARD_XP: int = 1000
    PATH_COMPLETION_REWARD_XP: int = 1000
    REWARD_GRANT_MAX_ATTEMPTS: int = 3
    REWARD_GRANT_RETRY_BACKOFF_MS: int = 50

    @field_validator('DATABASE_URL')
    @classmethod
    def validate_database_url(cls, value: str) -> str:
        if not value.startswith(('postgresql', 'sqlite')):
            raise ValueError('DATABASE_URL must point to PostgreSQL (or SQLite for local runs)')
        return value

    @field_validator('JWT_SECRET_KEY')
    @classmethod
    def validate_jwt_secret_strength(cls, value: str) -> str:
        if len(value) < 32:
            raise ValueError('JWT secrets must be at least 32 characters')
        return value

    @field_validator('UPLOAD_REWARD_XP', 'PATH_COMPLETION_REWARD_XP')
    @classmethod
    def validate_reward_amount(cls, value: int) -> int:
        if value <= 0:
            raise ValueError('Reward amounts must be positive')
        return value

    @field_validator('REWARD_GRANT_MAX_ATTEMPTS')
    @classmethod
    def validate_max_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError('REWARD_GRANT_MAX_ATTEMPTS must be at least 1')
        return value

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.CORS_ORIGINS.split(',') if item.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
