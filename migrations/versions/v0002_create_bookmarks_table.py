"""create_bookmarks_table

Revision: 2
Revises: 1

Adds the bookmarks table. Books and verses are left untouched; this step
and every later one must never drop a table holding user data.
"""
import sqlalchemy as sa

from migrations.helpers import create_index_if_missing, has_table


# revision identifiers, compared against the schema_version row
revision = 2
down_revision = 1


def upgrade(op) -> None:
    if not has_table(op, 'bookmarks'):
        op.create_table('bookmarks',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.String(), nullable=False),
            sa.Column('verse_id', sa.Integer(), nullable=False),
            sa.Column('note', sa.Text(), nullable=True),
            sa.Column('created_at', sa.BigInteger(), nullable=False),
            sa.ForeignKeyConstraint(['verse_id'], ['verses.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True,
        )
    create_index_if_missing(op, 'idx_bookmarks_user', 'bookmarks', ['user_id'])
    create_index_if_missing(op, 'idx_bookmarks_verse', 'bookmarks', ['verse_id'])
    create_index_if_missing(op, 'idx_bookmarks_user_verse', 'bookmarks', ['user_id', 'verse_id'])
