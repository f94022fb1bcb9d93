# services/scripture_repository.py
import logging
import time
from contextlib import contextmanager

from sqlalchemy import select, insert, delete, func, Text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import contains_eager

from database import create_store_engine, make_session_factory, session_scope
from migrations import migrate
from models import Book, Verse, Bookmark
from schemas import bible_schemas, bookmark_schemas
from utils.errors import NotInitializedError

logger = logging.getLogger(__name__)

DEFAULT_SEED_BATCH_SIZE = 2000
MAX_SEARCH_RESULTS = 100

books_table = Book.__table__
verses_table = Verse.__table__


def _now_ms():
    return int(time.time() * 1000)


class ScriptureRepository:
    """
    The only read/write gateway to books, verses and bookmarks.

    One instance owns the single database connection of the process. Call
    init() once at startup before anything else, and close() at shutdown.
    """

    def __init__(self, engine, seed_batch_size=DEFAULT_SEED_BATCH_SIZE, search_limit=MAX_SEARCH_RESULTS):
        if seed_batch_size < 1:
            raise ValueError("seed_batch_size must be positive")
        self._engine = engine
        self._session_factory = make_session_factory(engine)
        self.seed_batch_size = seed_batch_size
        self.search_limit = max(1, min(search_limit, MAX_SEARCH_RESULTS))
        self.schema_version = None
        self._closed = False

    @classmethod
    def open(cls, db_path=None, **kwargs):
        """Open a repository on a database file (in memory when db_path is None)."""
        return cls(create_store_engine(db_path), **kwargs)

    @classmethod
    def from_config(cls, config):
        return cls.open(
            config.SQLITE_DB_PATH,
            seed_batch_size=config.SEED_BATCH_SIZE,
            search_limit=config.SEARCH_RESULT_LIMIT,
        )

    @property
    def engine(self):
        return self._engine

    @property
    def is_initialized(self):
        return self.schema_version is not None and not self._closed

    def init(self):
        """Migrate the schema; must complete before any other operation."""
        if self._closed:
            raise NotInitializedError('init')
        self.schema_version = migrate(self._engine)
        logger.info(f"Bible database initialized successfully (schema v{self.schema_version})")
        return self.schema_version

    def close(self):
        if not self._closed:
            self._engine.dispose()
            self._closed = True
            self.schema_version = None
            logger.info("Scripture store closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _require_initialized(self, operation):
        if not self.is_initialized:
            raise NotInitializedError(operation)

    @contextmanager
    def _session(self, operation):
        self._require_initialized(operation)
        with session_scope(self._session_factory) as db:
            yield db

    # ============================================
    # Seeding
    # ============================================

    def is_seeded(self, translation):
        with self._session('is_seeded') as db:
            found = db.execute(
                select(Book.id).where(Book.translation == translation).limit(1)
            ).first()
        return found is not None

    def seed(self, translation, books, verses):
        """
        Upsert every book, then every verse in batches of ``seed_batch_size``.

        Re-running with the same data leaves the row counts unchanged; running
        with corrected data overwrites text in place, so verse ids (and the
        bookmarks pointing at them) survive a re-seed.
        """
        self._require_initialized('seed')
        book_rows = [
            dict(bible_schemas.Book.model_validate(book).model_dump(), translation=translation)
            for book in books
        ]
        verse_rows = [
            dict(bible_schemas.VerseRecord.model_validate(verse).model_dump(exclude={'id'}), translation=translation)
            for verse in verses
        ]

        logger.info(f"Starting {translation} Bible database seeding...")
        if book_rows:
            with self._session('seed') as db:
                db.execute(insert(books_table).prefix_with('OR REPLACE'), book_rows)

        upsert = sqlite_insert(verses_table)
        upsert = upsert.on_conflict_do_update(
            index_elements=['translation', 'book_name', 'chapter', 'verse'],
            set_={'book_id': upsert.excluded.book_id, 'text': upsert.excluded.text},
        )

        total = len(verse_rows)
        for start in range(0, total, self.seed_batch_size):
            batch = verse_rows[start:start + self.seed_batch_size]
            with self._session('seed') as db:
                db.execute(upsert, batch)
            logger.info(f"Seeded {min(start + self.seed_batch_size, total)} / {total} {translation} verses")

        logger.info(f"{translation} Bible database seeding completed successfully")

    # ============================================
    # Reading
    # ============================================

    def list_books(self, translation):
        with self._session('list_books') as db:
            rows = db.scalars(
                select(Book).where(Book.translation == translation).order_by(Book.id)
            ).all()
            return [bible_schemas.Book.model_validate(row) for row in rows]

    def list_verses(self, translation, book_id, chapter):
        # Served by idx_verses_book_chapter
        with self._session('list_verses') as db:
            rows = db.scalars(
                select(Verse)
                .where(
                    Verse.translation == translation,
                    Verse.book_id == book_id,
                    Verse.chapter == chapter,
                )
                .order_by(Verse.verse)
            ).all()
            return [bible_schemas.Verse.model_validate(row) for row in rows]

    def get_verse(self, verse_id):
        with self._session('get_verse') as db:
            row = db.get(Verse, verse_id)
            return bible_schemas.Verse.model_validate(row) if row is not None else None

    def count_verses(self, translation):
        with self._session('count_verses') as db:
            return db.scalar(
                select(func.count(Verse.id)).where(Verse.translation == translation)
            )

    def search(self, translation, query, book_id=None):
        """
        Case-insensitive literal substring search over verse text.

        Case folding is Unicode-aware (Python's str.casefold); ``%`` and ``_``
        in the query match themselves. A blank query returns nothing. Results
        are ordered by book, chapter and verse and capped at 100 rows.
        """
        self._require_initialized('search')
        needle = (query or '').strip()
        if not needle:
            return []

        conditions = [
            Verse.translation == translation,
            func.casefold(Verse.text, type_=Text).contains(needle.casefold(), autoescape=True),
        ]
        if book_id is not None:
            conditions.append(Verse.book_id == book_id)

        with self._session('search') as db:
            rows = db.scalars(
                select(Verse)
                .where(*conditions)
                .order_by(Verse.book_id, Verse.chapter, Verse.verse)
                .limit(self.search_limit)
            ).all()
            results = [bible_schemas.Verse.model_validate(row) for row in rows]

        logger.debug(f"Search {needle!r} in {translation} returned {len(results)} verse(s)")
        return results

    def list_languages(self):
        with self._session('list_languages') as db:
            return list(db.scalars(
                select(Book.translation).distinct().order_by(Book.translation)
            ))

    # ============================================
    # Bookmarks
    # ============================================

    def add_bookmark(self, user_id, verse_id, note=None):
        data = bookmark_schemas.BookmarkCreate(user_id=user_id, verse_id=verse_id, note=note)
        with self._session('add_bookmark') as db:
            return self._insert_bookmark(db, data)

    def _insert_bookmark(self, db, data):
        bookmark = Bookmark(
            user_id=data.user_id,
            verse_id=data.verse_id,
            note=data.note,
            created_at=_now_ms(),
        )
        db.add(bookmark)
        db.flush()  # To get the id
        return bookmark.id

    def list_bookmarks(self, user_id):
        with self._session('list_bookmarks') as db:
            rows = db.scalars(
                select(Bookmark)
                .join(Bookmark.verse)
                .options(contains_eager(Bookmark.verse))
                .where(Bookmark.user_id == user_id)
                .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            ).all()
            return [bookmark_schemas.Bookmark.model_validate(row) for row in rows]

    def remove_bookmark(self, bookmark_id):
        with self._session('remove_bookmark') as db:
            db.execute(delete(Bookmark).where(Bookmark.id == bookmark_id))

    def is_bookmarked(self, user_id, verse_id):
        with self._session('is_bookmarked') as db:
            return self._find_bookmark(db, user_id, verse_id) is not None

    def _find_bookmark(self, db, user_id, verse_id):
        return db.scalar(
            select(Bookmark.id)
            .where(Bookmark.user_id == user_id, Bookmark.verse_id == verse_id)
            .limit(1)
        )

    def toggle_bookmark(self, user_id, verse_id, note=None):
        """
        Flip the bookmark state of a verse for a user.

        Returns True when the verse is bookmarked afterwards. The check and the
        write share one transaction on the single connection; nothing in the
        schema forbids a second bookmark for the same pair.
        """
        data = bookmark_schemas.BookmarkCreate(user_id=user_id, verse_id=verse_id, note=note)
        with self._session('toggle_bookmark') as db:
            if self._find_bookmark(db, user_id, verse_id) is not None:
                db.execute(
                    delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.verse_id == verse_id)
                )
                return False
            self._insert_bookmark(db, data)
            return True
