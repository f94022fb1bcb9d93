from sqlalchemy import Column, Integer, String, ForeignKey, BigInteger, Text, Index
from sqlalchemy.orm import relationship
from database import Base


class Bookmark(Base):
    __tablename__ = 'bookmarks'
    __table_args__ = (
        Index('idx_bookmarks_user', 'user_id'),
        Index('idx_bookmarks_verse', 'verse_id'),
        Index('idx_bookmarks_user_verse', 'user_id', 'verse_id'),
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)  # Opaque id from the identity provider
    verse_id = Column(Integer, ForeignKey('verses.id'), nullable=False)
    note = Column(Text, nullable=True)  # Set at creation, never edited
    created_at = Column(BigInteger, nullable=False)  # Epoch milliseconds

    verse = relationship("Verse")

    def __repr__(self):
        return f'<Bookmark {self.id} User: {self.user_id} - verse {self.verse_id}>'
