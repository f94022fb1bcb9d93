"""Existence checks shared by the migration steps.

Every step can be re-run after a crash, so each create is guarded. A fresh
inspector is taken per call because earlier operations in the same run
change the schema.
"""
from sqlalchemy import inspect


def _inspector(op):
    return inspect(op.get_bind())


def has_table(op, table_name):
    return _inspector(op).has_table(table_name)


def table_columns(op, table_name):
    return {column['name'] for column in _inspector(op).get_columns(table_name)}


def has_index(op, table_name, index_name):
    return any(index['name'] == index_name for index in _inspector(op).get_indexes(table_name))


def create_index_if_missing(op, index_name, table_name, columns, unique=False):
    if not has_index(op, table_name, index_name):
        op.create_index(index_name, table_name, columns, unique=unique)
