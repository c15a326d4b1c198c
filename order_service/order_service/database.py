"""Engine and session factory for the order database."""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .config import settings
from .logger import logger
from .models import Base


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL.

    SQLite connections get foreign key enforcement switched on so that the
    ``ON DELETE CASCADE`` clauses of the ledger tables are honoured.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, echo=echo, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    else:
        # Recycle pooled connections before the server drops them
        engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            pool_recycle=1800,
            pool_size=5,
            max_overflow=10,
        )
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database schema ready on {engine.url.render_as_string(hide_password=True)}")


def check_connection(engine: Engine) -> bool:
    """Return True when the database answers a trivial query."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


engine = build_engine(settings.database_url, echo=settings.echo_sql)
SessionLocal = build_session_factory(engine)
