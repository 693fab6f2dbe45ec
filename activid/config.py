from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


class ConfigError(RuntimeError):
    pass


def _get_optional(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v

def _get_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise ConfigError(f"Invalid int for {name}: {v}") from e


def _get_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v.strip() == '':
        return default
    v = v.strip().lower()
    if v in ('1','true','yes','y','on'):
        return True
    if v in ('0','false','no','n','off'):
        return False
    raise ConfigError(f"Invalid bool for {name}: {v}")

@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str

    session_secret: str | None
    register_password: str | None
    imagekit_public_key: str | None
    imagekit_private_key: str | None

    cookie_secure: bool
    web_host: str
    web_port: int

def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        # Default: local SQLite
        database_url = "sqlite+aiosqlite:///./activid.db"

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        database_url=database_url,
        log_level=log_level,
        session_secret=_get_optional("INVITATION_REGISTER_SESSION_SECRET"),
        register_password=_get_optional("INVITATION_REGISTER_PASSWORD"),
        imagekit_public_key=_get_optional("IMAGEKIT_PUBLIC_KEY"),
        imagekit_private_key=_get_optional("IMAGEKIT_PRIVATE_KEY"),
        cookie_secure=_get_bool("COOKIE_SECURE", False),
        web_host=os.getenv("WEB_HOST", "0.0.0.0"),
        web_port=_get_int("WEB_PORT", 8080),
    )
