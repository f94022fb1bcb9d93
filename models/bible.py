# models/bible.py
from sqlalchemy import Column, Integer, String, Text, UniqueConstraint, Index
from database import Base


class Book(Base):
    __tablename__ = 'books'
    __table_args__ = (
        UniqueConstraint('translation', 'name', name='uq_books_translation_name'),
        Index('idx_books_translation', 'translation'),
    )

    # Ids come from the parser's per-translation range, never from the database
    id = Column(Integer, primary_key=True, autoincrement=False)
    translation = Column(String, nullable=False)
    name = Column(String, nullable=False)
    chapters = Column(Integer, nullable=False)

    def __repr__(self):
        return f'<Book {self.id} [{self.translation}] {self.name} ({self.chapters} chapters)>'


class Verse(Base):
    __tablename__ = 'verses'
    __table_args__ = (
        UniqueConstraint('translation', 'book_name', 'chapter', 'verse', name='uq_verses_reference'),
        Index('idx_verses_book_chapter', 'translation', 'book_id', 'chapter'),
        Index('idx_verses_search', 'translation', 'text'),
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True)
    translation = Column(String, nullable=False)
    book_id = Column(Integer, nullable=False)
    book_name = Column(String, nullable=False)  # Denormalized so chapter reads skip the join
    chapter = Column(Integer, nullable=False)
    verse = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)

    def __repr__(self):
        return f'<Verse {self.id} [{self.translation}] {self.book_name} {self.chapter}:{self.verse}>'
