# utils/xml_parser.py
"""Streaming parser for Bible translation markup.

Accepts both vocabularies found in the shipped assets::

    <book name="Genesis"><chapter number="1"><verse number="1">...</verse></chapter></book>
    <b n="Genesis"><c n="1"><v n="1">...</v></c></b>

with or without a wrapping root element. Older sources carried no chapter or
verse numbers at all; missing numbers are assigned sequentially.
"""
import logging
import re
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape, unescape

from schemas.bible_schemas import Book, VerseRecord, ParsedTranslation
from utils.errors import EmptyParseError

logger = logging.getLogger(__name__)

BOOK_TAGS = {'b', 'book'}
CHAPTER_TAGS = {'c', 'chapter'}
VERSE_TAGS = {'v', 'verse'}

NAME_ATTRS = ('name', 'n')
NUMBER_ATTRS = ('number', 'n')

# Book ids must not collide when several translations share the store
BOOK_ID_BASES = {
    'myanmar': 1000,
    'hakha': 2000,
}

_XML_DECLARATION_RE = re.compile(r'^\s*<\?xml[^>]*\?>')
_CDATA_RE = re.compile(r'^<!\[CDATA\[(.*)\]\]>$', re.DOTALL)
_CDATA_SECTION_RE = re.compile(r'<!\[CDATA\[(.*?)\]\]>', re.DOTALL)
_ENTITIES = {'&quot;': '"'}  # &amp; &lt; &gt; are handled by unescape itself
_WRAPPER_TAG = 'church-mate-source'


def book_id_base(translation):
    """Return the first book id of a translation's id range."""
    try:
        return BOOK_ID_BASES[translation]
    except KeyError:
        raise ValueError(
            f"No book id range registered for translation {translation!r}; pass base_id explicitly"
        ) from None


def normalize_verse_text(raw, decoded=False):
    """Trim, unwrap a literal CDATA marker and decode the standard entities.

    With ``decoded=True`` the markup parser has already resolved the entities
    of plain text, so only an unwrapped CDATA payload is decoded.
    """
    text = (raw or '').strip()
    match = _CDATA_RE.match(text)
    if match:
        text = match.group(1)
    elif decoded:
        return text
    return unescape(text, _ENTITIES).strip()


def _local_name(tag):
    return tag.rsplit('}', 1)[-1].lower()


def _first_attr(element, names):
    for name in names:
        value = element.get(name)
        if value is not None:
            return value.strip()
    return None


class _TranslationBuilder:
    """Accumulates records while pull events arrive in document order."""

    def __init__(self, translation, base_id, book_names):
        self.translation = translation
        self.next_book_id = base_id
        self.book_names = book_names or []
        self.books = []
        self.verses = []
        self.anomalies = []

        self._book = None
        self._book_chapters = set()
        self._chapter = None
        self._verse = None
        self._last_chapter = 0
        self._last_verse = 0

    def anomaly(self, message):
        logger.warning(f"[{self.translation}] {message}")
        self.anomalies.append(message)

    def _number(self, element, previous, what):
        raw = _first_attr(element, NUMBER_ATTRS)
        if raw is None:
            return previous + 1
        try:
            number = int(raw)
        except ValueError:
            number = 0
        if number < 1:
            self.anomaly(f"Invalid {what} number {raw!r}; numbering sequentially")
            return previous + 1
        return number

    def start_book(self, element):
        index = len(self.books)
        name = _first_attr(element, NAME_ATTRS)
        if not name:
            if index < len(self.book_names):
                name = self.book_names[index]
            else:
                name = f"Book {index + 1}"
                self.anomaly(f"Book #{index + 1} has no name; using {name!r}")

        self._book = Book(id=self.next_book_id, name=name, chapters=0)
        self.next_book_id += 1
        self.books.append(self._book)
        self._book_chapters = set()
        self._chapter = None
        self._last_chapter = 0

    def start_chapter(self, element):
        if self._book is None:
            self.anomaly("Chapter outside of a book; ignored")
            return
        self._chapter = self._number(element, self._last_chapter, 'chapter')
        self._last_chapter = self._chapter
        self._last_verse = 0
        self._book_chapters.add(self._chapter)
        self._book.chapters = len(self._book_chapters)

    def start_verse(self, element):
        # Numbering is fixed at the start tag, the text is only complete at the end tag
        if self._book is None or self._chapter is None:
            self._verse = None
            return
        self._verse = self._number(element, self._last_verse, 'verse')
        self._last_verse = self._verse

    def end_verse(self, element):
        if self._verse is None:
            self.anomaly("Verse outside of a chapter; ignored")
            return
        self.verses.append(VerseRecord(
            book_id=self._book.id,
            book_name=self._book.name,
            chapter=self._chapter,
            verse=self._verse,
            text=normalize_verse_text(''.join(element.itertext()), decoded=True),
        ))
        self._verse = None

    def end_chapter(self):
        self._chapter = None

    def end_book(self):
        self._book = None
        self._chapter = None


def _escape_cdata(match):
    # Keeps the marker as text so the payload reaches normalize_verse_text verbatim
    return escape(match.group(0))


def _wrap(source_text):
    body = _XML_DECLARATION_RE.sub('', source_text.lstrip('\ufeff'), count=1)
    body = _CDATA_SECTION_RE.sub(_escape_cdata, body)
    return f'<{_WRAPPER_TAG}>{body}</{_WRAPPER_TAG}>'


def _drain(parser, builder):
    for event, element in parser.read_events():
        tag = _local_name(element.tag)
        if event == 'start':
            if tag in BOOK_TAGS:
                builder.start_book(element)
            elif tag in CHAPTER_TAGS:
                builder.start_chapter(element)
            elif tag in VERSE_TAGS:
                builder.start_verse(element)
        else:
            if tag in VERSE_TAGS:
                builder.end_verse(element)
                element.clear()
            elif tag in CHAPTER_TAGS:
                builder.end_chapter()
                element.clear()
            elif tag in BOOK_TAGS:
                builder.end_book()
                element.clear()


def parse_translation(source_text, translation, base_id=None, book_names=None):
    """
    Parse one translation's markup into book and verse records.

    Args:
        source_text: Raw markup text (the caller does the file I/O).
        translation: Translation tag, e.g. 'myanmar' or 'hakha'.
        base_id: First book id; defaults to the translation's registered range.
        book_names: Optional canonical names for books lacking a name attribute.

    Returns:
        ParsedTranslation with books and verses in document order. Structural
        errors stop the parse early; what was read so far is kept and the
        problem is listed in ``anomalies``.

    Raises:
        EmptyParseError: when not a single book was recognized.
    """
    if base_id is None:
        base_id = book_id_base(translation)

    logger.info(f"Starting {translation} Bible XML parsing...")
    builder = _TranslationBuilder(translation, base_id, book_names)
    parser = ET.XMLPullParser(events=('start', 'end'))

    try:
        parser.feed(_wrap(source_text))
        _drain(parser, builder)
        parser.close()
        _drain(parser, builder)
    except ET.ParseError as e:
        line, column = getattr(e, 'position', (None, None))
        builder.anomaly(f"Malformed markup at line {line}, column {column}: {e}; keeping partial result")

    if not builder.books:
        raise EmptyParseError(translation, builder.anomalies)

    logger.info(
        f"{translation} Bible parsed: {len(builder.books)} books, {len(builder.verses)} verses"
    )
    return ParsedTranslation(
        translation=translation,
        books=builder.books,
        verses=builder.verses,
        anomalies=builder.anomalies,
    )
