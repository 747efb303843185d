from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"
    cors_origin: str = "*"
    log_level: str = "INFO"
    static_dir: Path = BASE_DIR / "static"

    # Relational store (MySQL)
    database_url: str = ""
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "db_force"
    db_pool_size: int = 20
    db_queue_limit: int = 100  # 0 = unlimited

    # Document store (MongoDB)
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db: str = "db_force"
    mongo_timeout_ms: int = 5000

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def relational_url(self) -> str:
        """
        SQLAlchemy URL for the relational store.

        DATABASE_URL wins when set; otherwise the URL is assembled from the
        DB_* variables for the aiomysql driver.
        """
        if self.database_url:
            return self.database_url
        return URL.create(
            "mysql+aiomysql",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query={"charset": "utf8mb4"},
        ).render_as_string(hide_password=False)

    def masked(self) -> dict:
        """Settings safe to log (password hidden)."""
        data = self.model_dump(exclude={"database_url"})
        data["db_password"] = "***" if self.db_password else "(empty)"
        return data


@lru_cache
def get_settings() -> Settings:
    return Settings()
