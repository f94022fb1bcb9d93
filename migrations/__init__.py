from .env import (
    CURRENT_SCHEMA_VERSION,
    ensure_tables,
    get_schema_version,
    migrate,
    run_migrations,
)

__all__ = [
    'CURRENT_SCHEMA_VERSION',
    'ensure_tables',
    'get_schema_version',
    'migrate',
    'run_migrations',
]
