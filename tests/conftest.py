import pytest

from schemas.bible_schemas import Book, VerseRecord
from services.scripture_repository import ScriptureRepository


HAKHA_XML = """<?xml version="1.0" encoding="utf-8"?>
<bible>
  <b n="Genesis">
    <c n="1">
      <v n="1">A hramthawkhatnak ah Pathian nih van le vawlei a ser.</v>
      <v n="2">Vawlei cu a lakkhal i a ra-awng.</v>
    </c>
    <c n="2">
      <v n="1">Cucaah van le vawlei cu an dih.</v>
    </c>
  </b>
  <b n="Exodus">
    <c n="1">
      <v n="1">Israel fale an min cu hihi an si.</v>
    </c>
  </b>
</bible>
"""

MYANMAR_XML = """<bible>
  <book name="ကမ္ဘာဦး">
    <chapter number="1">
      <verse number="1">အစအဦး၌ ဘုရားသခင်သည် ကောင်းကင်နှင့် မြေကြီးကို ဖန်ဆင်းတော်မူ၏။</verse>
    </chapter>
  </book>
</bible>
"""


@pytest.fixture
def repository():
    repo = ScriptureRepository.open(None)
    repo.init()
    yield repo
    repo.close()


@pytest.fixture
def genesis_book():
    return Book(id=1, name="Genesis", chapters=1)


@pytest.fixture
def genesis_verse():
    return VerseRecord(
        book_id=1,
        book_name="Genesis",
        chapter=1,
        verse=1,
        text="In the beginning...",
    )


@pytest.fixture
def seeded_repository(repository, genesis_book, genesis_verse):
    repository.seed("hakha", [genesis_book], [genesis_verse])
    return repository
