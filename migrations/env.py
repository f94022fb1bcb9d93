"""Schema versioning for the local scripture store.

The on-disk version lives in the single-row ``schema_version`` table. When it
is behind ``CURRENT_SCHEMA_VERSION`` every pending step in
``migrations/versions`` runs in order and the row is rewritten afterwards;
when it is current the same tables are created from the ORM metadata with
existence checks, so both paths end in the same schema.
"""
import logging

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import inspect, select, delete, insert
from sqlalchemy.exc import SQLAlchemyError

from database import Base
import models  # noqa: F401  (registers every table on Base.metadata)
from models.schema_version import SchemaVersion
from migrations.versions import v0001_create_books_and_verses, v0002_create_bookmarks_table
from utils.errors import MigrationError

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2  # Increment when a step is added below

STEPS = sorted(
    [v0001_create_books_and_verses, v0002_create_bookmarks_table],
    key=lambda step: step.revision,
)

schema_version_table = SchemaVersion.__table__


def get_schema_version(connection) -> int:
    """Return the on-disk schema version, 0 when nothing was ever migrated."""
    if not inspect(connection).has_table(schema_version_table.name):
        return 0
    version = connection.execute(
        select(schema_version_table.c.version).limit(1)
    ).scalar()
    return version or 0


def write_schema_version(connection, version) -> None:
    schema_version_table.create(connection, checkfirst=True)
    connection.execute(delete(schema_version_table))
    connection.execute(insert(schema_version_table).values(version=version))


def pending_steps(from_version, to_version):
    return [step for step in STEPS if from_version < step.revision <= to_version]


def run_migrations(connection, from_version, to_version) -> None:
    """Apply every step between the two versions, then record the target."""
    logger.info(f"Migrating schema from v{from_version} to v{to_version}")
    op = Operations(MigrationContext.configure(connection))

    for step in pending_steps(from_version, to_version):
        logger.info(f"Migration v{step.down_revision}->v{step.revision}: {step.__name__.rsplit('.', 1)[-1]}")
        step.upgrade(op)

    # Only reached when every step above succeeded
    write_schema_version(connection, to_version)
    logger.info(f"Schema migration completed: v{from_version} -> v{to_version}")


def ensure_tables(connection) -> None:
    """Create any missing table or index (idempotent)."""
    Base.metadata.create_all(connection, checkfirst=True)
    for table in Base.metadata.sorted_tables:
        for index in table.indexes:
            index.create(connection, checkfirst=True)


def migrate(engine, target_version=CURRENT_SCHEMA_VERSION) -> int:
    """
    Bring the database at ``engine`` to ``target_version``.

    Returns the schema version in effect afterwards. Any database failure is
    raised as MigrationError; steps already applied are not rolled back, but
    every step is safe to run again.
    """
    from_version = None
    try:
        with engine.begin() as connection:
            from_version = get_schema_version(connection)
            logger.info(f"Current schema version: {from_version}")

            if from_version < target_version:
                run_migrations(connection, from_version, target_version)
                return target_version

            if from_version > target_version:
                logger.warning(
                    f"Database schema v{from_version} is newer than this code (v{target_version}); "
                    "leaving it as is"
                )
            ensure_tables(connection)
            return from_version
    except SQLAlchemyError as e:
        logger.error(f"Schema migration error: {e}", exc_info=True)
        raise MigrationError(
            f"Schema migration to v{target_version} failed: {e}",
            from_version=from_version,
            to_version=target_version,
        ) from e
