"""create_books_and_verses

Revision: 1
Revises: 0 (empty database)

Initial layout. Installations that predate schema versioning kept books and
verses in a different shape and never held bookmarks, so those two tables
are rebuilt when their columns do not match; matching tables are kept.
"""
import logging

import sqlalchemy as sa

from migrations.helpers import create_index_if_missing, has_table, table_columns

logger = logging.getLogger(__name__)

# revision identifiers, compared against the schema_version row
revision = 1
down_revision = 0

BOOK_COLUMNS = {'id', 'translation', 'name', 'chapters'}
VERSE_COLUMNS = {'id', 'translation', 'book_id', 'book_name', 'chapter', 'verse', 'text'}


def _drop_if_legacy(op, table_name, expected_columns):
    if not has_table(op, table_name):
        return
    columns = table_columns(op, table_name)
    if columns != expected_columns:
        logger.warning(f"Dropping pre-v1 table {table_name!r} with columns {sorted(columns)}")
        op.drop_table(table_name)


def upgrade(op) -> None:
    _drop_if_legacy(op, 'verses', VERSE_COLUMNS)
    _drop_if_legacy(op, 'books', BOOK_COLUMNS)

    if not has_table(op, 'books'):
        op.create_table('books',
            sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
            sa.Column('translation', sa.String(), nullable=False),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('chapters', sa.Integer(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('translation', 'name', name='uq_books_translation_name'),
        )
    if not has_table(op, 'verses'):
        op.create_table('verses',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('translation', sa.String(), nullable=False),
            sa.Column('book_id', sa.Integer(), nullable=False),
            sa.Column('book_name', sa.String(), nullable=False),
            sa.Column('chapter', sa.Integer(), nullable=False),
            sa.Column('verse', sa.Integer(), nullable=False),
            sa.Column('text', sa.Text(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('translation', 'book_name', 'chapter', 'verse', name='uq_verses_reference'),
            sqlite_autoincrement=True,
        )

    create_index_if_missing(op, 'idx_verses_book_chapter', 'verses', ['translation', 'book_id', 'chapter'])
    create_index_if_missing(op, 'idx_verses_search', 'verses', ['translation', 'text'])
    create_index_if_missing(op, 'idx_books_translation', 'books', ['translation'])
