"""
Application and database configuration settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration settings, read from the environment or .env."""

    # PostgreSQL connection settings
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "panda_pocket_development"

    # Full URL, takes precedence over the postgres_* parts
    database_url_override: str | None = None

    # Connection pool settings
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30

    # HTTP settings
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    # For testing
    testing: bool = False
    test_database_url: str | None = None

    @property
    def database_url(self) -> str:
        """Get the async database URL for SQLAlchemy."""
        if self.testing and self.test_database_url:
            return self.test_database_url
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
