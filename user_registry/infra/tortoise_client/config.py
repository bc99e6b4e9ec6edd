"""
Tortoise ORM configuration
"""
from pathlib import Path
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

MODELS_MODULE = "user_registry.infra.tortoise_client.models"

_POOLED_SCHEMES = {"postgres", "asyncpg", "mysql"}


def with_pool_size(db_url: str, pool_size: int) -> str:
    """Add the connection pool bound to a pooled DSN; sqlite is left untouched."""
    parts = urlsplit(db_url)
    if parts.scheme not in _POOLED_SCHEMES:
        return db_url
    query = dict(parse_qsl(parts.query))
    query.setdefault("minsize", "1")
    query["maxsize"] = str(pool_size)
    return urlunsplit(parts._replace(query=urlencode(query)))


def build_tortoise_config(db_url: str, pool_size: int) -> dict:
    return {
        "connections": {
            "default": with_pool_size(db_url, pool_size)
        },
        "apps": {
            "models": {
                "models": [MODELS_MODULE],
                "default_connection": "default",
            },
        },
        "use_tz": True,
        "timezone": "UTC",
    }


def ensure_sqlite_directory(db_url: str) -> None:
    """Create the parent directory of a file-backed sqlite database."""
    parts = urlsplit(db_url)
    if parts.scheme != "sqlite":
        return
    path = db_url[len("sqlite://"):].split("?", 1)[0]
    if not path or path == ":memory:":
        return
    Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
