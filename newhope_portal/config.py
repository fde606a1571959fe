import logging
import os
from dataclasses import dataclass, field

log = logging.getLogger("newhope-portal.config")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        log.warning("Invalid integer for %s=%r, using default %s", name, raw, default)
        return default


@dataclass
class Settings:
    secret_key: str = field(default_factory=lambda: os.getenv("SECRET_KEY", "change_this_secret_in_production"))
    # In-memory by default: restarting the process resets the portal
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite://"))
    session_expire_minutes: int = field(default_factory=lambda: _env_int("SESSION_EXPIRE_MINUTES", 60 * 8))
    session_cookie_name: str = field(default_factory=lambda: os.getenv("SESSION_COOKIE_NAME", "session"))
    admin_name: str = field(default_factory=lambda: os.getenv("ADMIN_NAME", "Site Administrator"))
    admin_email: str = field(default_factory=lambda: os.getenv("ADMIN_EMAIL", "admin@newhope.com"))
    admin_password: str = field(default_factory=lambda: os.getenv("ADMIN_PASSWORD", "admin123"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


def get_settings() -> Settings:
    return Settings()
