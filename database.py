import logging
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.exc import SQLAlchemyError

from utils.errors import StorageError

logger = logging.getLogger(__name__)

# Define Base for SQLAlchemy models before the engine helpers use it
Base = declarative_base()

IN_MEMORY_URL = "sqlite://"


def _casefold(value):
    if value is None:
        return None
    return value.casefold()


def _register_sql_functions(dbapi_connection, connection_record):
    # SQLite's own lower() only folds ASCII; search needs Myanmar/Hakha text too
    dbapi_connection.create_function("casefold", 1, _casefold, deterministic=True)


def database_url(db_path):
    """Build the SQLAlchemy URL for a database file, or in-memory for None/':memory:'."""
    if db_path is None or str(db_path) == ":memory:":
        return IN_MEMORY_URL
    return f"sqlite:///{Path(db_path)}"


def create_store_engine(db_path=None, echo=False):
    """Create the engine for the local scripture store.

    StaticPool keeps exactly one DBAPI connection for the lifetime of the
    engine, so every session in the process shares it.
    """
    url = database_url(db_path)
    if url != IN_MEMORY_URL:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Opening scripture store at {url}")
    engine = create_engine(
        url,
        echo=echo,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _register_sql_functions)
    return engine


def make_session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope(session_factory):
    """Provide a transactional scope around a series of operations."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"SQLAlchemy Session Error: {e}")
        raise StorageError(str(e)) from e
    except Exception as e:
        db.rollback()
        logger.error(f"General Session Error: {e}")
        raise
    finally:
        db.close()
