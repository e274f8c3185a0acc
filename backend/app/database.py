"""
Configuration de la connexion à la base de données.
Le moteur et la fabrique de sessions sont construits par create_app() et
portés par app.state : aucun handle global au niveau module.
"""

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import Settings

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    """
    Crée le moteur SQLAlchemy à partir de la configuration.

    PostgreSQL : pool dimensionné, isolation READ COMMITTED, statement_timeout.
    SQLite (dev/tests) : clés étrangères activées pour que les ON DELETE CASCADE
    et la contrainte UNIQUE soient réellement appliqués.
    """
    url = settings.DATABASE_URL

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,
        isolation_level=settings.DB_ISOLATION_LEVEL,
        connect_args={"options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"},
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
