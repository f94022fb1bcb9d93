from pydantic import BaseModel, ConfigDict
from typing import Optional

from .bible_schemas import Verse


class BookmarkBase(BaseModel):
    user_id: str
    verse_id: int
    note: Optional[str] = None


class BookmarkCreate(BookmarkBase):
    pass


class Bookmark(BookmarkBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: int  # Epoch milliseconds
    verse: Verse
