from __future__ import annotations

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from inspection_api.core.config import settings


def build_engine(url: str | None = None, *, echo: bool | None = None) -> Engine:
    database_url = url or settings.DATABASE_URL
    connect_args: dict = {}
    if database_url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a worker thread pool.
        connect_args["check_same_thread"] = False

    engine = create_engine(
        database_url,
        echo=settings.DB_ECHO if echo is None else echo,
        pool_pre_ping=not database_url.startswith("sqlite"),
        connect_args=connect_args,
    )

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, _connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request) -> Iterator[Session]:
    # Apps built around their own engine carry a matching session factory.
    factory = getattr(request.app.state, "session_factory", None) or SessionLocal
    db = factory()
    try:
        yield db
    finally:
        db.close()
