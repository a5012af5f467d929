from os import getenv
from typing import Optional


def normalize_database_url(url: Optional[str]) -> Optional[str]:
    # Neon/Heroku donnent des URLs "postgres://", SQLAlchemy veut le driver explicite
    if not url or not url.strip():
        return None
    url = url.strip()
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


class Settings:
    DATABASE_URL = normalize_database_url(getenv("DATABASE_URL") or getenv("NEON_DATABASE_URL"))
    SQL_ECHO = getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")
    TASK_LIST_LIMIT = int(getenv("TASK_LIST_LIMIT", "200"))  # plafond des listes
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO").upper()
    CORS_ALLOW_ORIGIN = getenv("CORS_ALLOW_ORIGIN", "*")

settings = Settings()
