"""Runtime configuration for the multizone backend.

Settings are read once from the environment (and an optional `.env` file)
at process start and handed to `create_app()`; nothing reads the
environment after that.
"""

import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv
from sqlalchemy.engine import URL


@dataclass(frozen=True)
class Settings:
    """Immutable process configuration."""

    db_host: str = "postgres"
    db_port: int = 5432
    db_user: str = "admin"
    db_password: str = "devpassword"
    db_name: str = "multizone"
    # Full SQLAlchemy URL; when set it wins over the db_* parts.
    database_url: Optional[str] = None
    port: int = 8080
    zone_main_url: str = "http://zone-main"
    zone_admin_url: str = "http://zone-admin/admin"
    debug: bool = False
    db_pool_size: int = 5
    db_max_overflow: int = 5
    db_pool_timeout: int = 30

    @property
    def sqlalchemy_url(self) -> str:
        """Return the SQLAlchemy URL for the configured datastore."""
        if self.database_url:
            return self.database_url
        url = URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def zones(self) -> Tuple[Tuple[str, str], ...]:
        """(name, url) pairs of the zones checked by the health checker."""
        return (
            ("zone-main", self.zone_main_url),
            ("zone-admin", self.zone_admin_url),
        )


def _env(key: str, default: str) -> str:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def load_settings() -> Settings:
    """Build `Settings` from environment variables."""
    load_dotenv()
    return Settings(
        db_host=_env("DB_HOST", "postgres"),
        db_port=int(_env("DB_PORT", "5432")),
        db_user=_env("DB_USER", "admin"),
        db_password=_env("DB_PASSWORD", "devpassword"),
        db_name=_env("DB_NAME", "multizone"),
        database_url=os.getenv("DATABASE_URL") or None,
        port=int(_env("PORT", "8080")),
        zone_main_url=_env("ZONE_MAIN_URL", "http://zone-main"),
        zone_admin_url=_env("ZONE_ADMIN_URL", "http://zone-admin/admin"),
        debug=_env("DEBUG", "False").lower() == "true",
        db_pool_size=int(_env("DB_POOL_SIZE", "5")),
        db_max_overflow=int(_env("DB_MAX_OVERFLOW", "5")),
        db_pool_timeout=int(_env("DB_POOL_TIMEOUT_SEC", "30")),
    )
