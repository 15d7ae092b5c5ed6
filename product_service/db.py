from sqlalchemy import create_engine, text, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import NullPool

from .config import Settings


class Base(DeclarativeBase):
    pass


def _quote_ident(ident: str) -> str:
    # Postgres identifier quoting (schema names come from env)
    return '"' + ident.replace('"', '""') + '"'


def make_engine(settings: Settings) -> Engine:
    engine = create_engine(
        settings.database_url,
        poolclass=NullPool,
        pool_pre_ping=True,
    )

    if engine.dialect.name == "postgresql":
        schema = _quote_ident(settings.db_schema)

        @event.listens_for(engine, "connect")
        def _set_search_path(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            cur.execute(f"SET search_path TO {schema}")
            cur.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_schema(engine: Engine, schema: str) -> None:
    """
    Create the Postgres schema named by DB_SCHEMA if it is missing.
    Only Postgres has schemas; other dialects are left alone.
    """
    if engine.dialect.name != "postgresql":
        return
    quoted = _quote_ident(schema)
    with engine.begin() as conn:
        conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {quoted}"))
        conn.execute(text(f"SET search_path TO {quoted}"))
