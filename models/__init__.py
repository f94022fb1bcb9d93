# This file makes the models directory a Python package
from .bible import Book, Verse
from .bookmark import Bookmark
from .schema_version import SchemaVersion

__all__ = [
    'Book',
    'Verse',
    'Bookmark',
    'SchemaVersion',
]
