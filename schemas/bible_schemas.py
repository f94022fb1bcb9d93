from pydantic import BaseModel, ConfigDict, Field
from typing import List


class Book(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    chapters: int = Field(..., ge=0)


class VerseRecord(BaseModel):
    """A parsed verse before it has a database identity."""
    book_id: int
    book_name: str
    chapter: int = Field(..., ge=1)
    verse: int = Field(..., ge=1)
    text: str


class Verse(VerseRecord):
    model_config = ConfigDict(from_attributes=True)

    id: int


class ParsedTranslation(BaseModel):
    translation: str
    books: List[Book] = Field(default_factory=list)
    verses: List[VerseRecord] = Field(default_factory=list)
    anomalies: List[str] = Field(default_factory=list)
