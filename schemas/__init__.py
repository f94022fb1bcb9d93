from .bible_schemas import Book, Verse, VerseRecord, ParsedTranslation
from .bookmark_schemas import Bookmark, BookmarkCreate

__all__ = [
    'Book',
    'Verse',
    'VerseRecord',
    'ParsedTranslation',
    'Bookmark',
    'BookmarkCreate',
]
