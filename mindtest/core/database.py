import ssl
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def normalize_database_url(url: str) -> tuple[str, dict[str, Any]]:
    """
    Normalize a database URL for the async drivers.

    Hosted Postgres providers hand out ``postgres://`` URLs with libpq params
    (sslmode, channel_binding) that asyncpg doesn't accept. We switch the
    driver, strip them and handle SSL via connect_args.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme

    if scheme in ("postgres", "postgresql"):
        scheme = "postgresql+asyncpg"
    if not scheme.startswith("postgresql"):
        return url, {}

    params = parse_qs(parsed.query)
    sslmode = (params.get("sslmode") or [""])[0]

    # Remove unsupported asyncpg params
    for param in ["sslmode", "channel_binding", "options"]:
        params.pop(param, None)

    new_query = urlencode(params, doseq=True)
    clean_url = urlunparse(parsed._replace(scheme=scheme, query=new_query))

    if sslmode in ("require", "verify-ca", "verify-full"):
        return clean_url, {"ssl": ssl.create_default_context()}
    return clean_url, {}


def _ensure_sqlite_dir(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


def create_engine(url: str, echo: bool = False, **kwargs: Any) -> AsyncEngine:
    """Create the async engine backing a Storage instance."""
    clean_url, connect_args = normalize_database_url(url)
    is_sqlite = make_url(clean_url).get_backend_name() == "sqlite"

    if is_sqlite:
        _ensure_sqlite_dir(clean_url)
    else:
        kwargs.setdefault("pool_size", 5)
        kwargs.setdefault("max_overflow", 10)
        kwargs.setdefault("pool_recycle", 280)

    engine = create_async_engine(
        clean_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
        **kwargs,
    )

    if is_sqlite and make_url(clean_url).database not in (None, "", ":memory:"):

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return engine
