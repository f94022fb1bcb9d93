import pytest

from schemas.bible_schemas import Book, VerseRecord
from services.scripture_repository import ScriptureRepository, MAX_SEARCH_RESULTS
from tests.conftest import HAKHA_XML, MYANMAR_XML
from utils.errors import NotInitializedError
from utils.xml_parser import parse_translation


def make_verses(count, text="Let there be light", book_id=1, book_name="Genesis", chapter=1):
    return [
        VerseRecord(book_id=book_id, book_name=book_name, chapter=chapter, verse=n, text=f"{text} {n}")
        for n in range(1, count + 1)
    ]


OPERATIONS = [
    ('is_seeded', lambda repo: repo.is_seeded('hakha')),
    ('seed', lambda repo: repo.seed('hakha', [], [])),
    ('list_books', lambda repo: repo.list_books('hakha')),
    ('list_verses', lambda repo: repo.list_verses('hakha', 1, 1)),
    ('get_verse', lambda repo: repo.get_verse(1)),
    ('count_verses', lambda repo: repo.count_verses('hakha')),
    ('search', lambda repo: repo.search('hakha', '')),
    ('list_languages', lambda repo: repo.list_languages()),
    ('add_bookmark', lambda repo: repo.add_bookmark('u1', 1)),
    ('list_bookmarks', lambda repo: repo.list_bookmarks('u1')),
    ('remove_bookmark', lambda repo: repo.remove_bookmark(1)),
    ('is_bookmarked', lambda repo: repo.is_bookmarked('u1', 1)),
    ('toggle_bookmark', lambda repo: repo.toggle_bookmark('u1', 1)),
]


@pytest.mark.parametrize("name, call", OPERATIONS, ids=[name for name, _ in OPERATIONS])
def test_operations_before_init_raise(name, call):
    repo = ScriptureRepository.open(None)
    try:
        with pytest.raises(NotInitializedError) as exc_info:
            call(repo)
        assert exc_info.value.operation == name
    finally:
        repo.close()


@pytest.mark.parametrize("name, call", OPERATIONS, ids=[name for name, _ in OPERATIONS])
def test_operations_after_close_raise(name, call):
    repo = ScriptureRepository.open(None)
    repo.init()
    repo.close()

    with pytest.raises(NotInitializedError):
        call(repo)


def test_init_reports_schema_version():
    with ScriptureRepository.open(None) as repo:
        assert not repo.is_initialized
        assert repo.init() == 2
        assert repo.is_initialized
        assert repo.schema_version == 2


def test_closed_repository_cannot_be_reinitialized():
    repo = ScriptureRepository.open(None)
    repo.close()
    with pytest.raises(NotInitializedError):
        repo.init()


def test_seed_then_read(seeded_repository):
    books = seeded_repository.list_books("hakha")
    verses = seeded_repository.list_verses("hakha", 1, 1)

    assert [(b.id, b.name, b.chapters) for b in books] == [(1, "Genesis", 1)]
    assert len(verses) == 1
    assert verses[0].text == "In the beginning..."


def test_is_seeded(repository, genesis_book, genesis_verse):
    assert not repository.is_seeded("hakha")
    repository.seed("hakha", [genesis_book], [genesis_verse])
    assert repository.is_seeded("hakha")
    assert not repository.is_seeded("myanmar")


def test_seed_twice_keeps_counts(repository):
    parsed = parse_translation(HAKHA_XML, "hakha")

    repository.seed("hakha", parsed.books, parsed.verses)
    first = (len(repository.list_books("hakha")), repository.count_verses("hakha"))
    repository.seed("hakha", parsed.books, parsed.verses)

    assert (len(repository.list_books("hakha")), repository.count_verses("hakha")) == first == (2, 4)


def test_reseed_overwrites_text_and_keeps_ids(seeded_repository, genesis_book):
    original = seeded_repository.list_verses("hakha", 1, 1)[0]

    corrected = VerseRecord(book_id=1, book_name="Genesis", chapter=1, verse=1, text="In the beginning God")
    seeded_repository.seed("hakha", [genesis_book], [corrected])

    verses = seeded_repository.list_verses("hakha", 1, 1)
    assert len(verses) == 1
    assert verses[0].id == original.id
    assert verses[0].text == "In the beginning God"


def test_seed_in_small_batches_stores_everything():
    with ScriptureRepository.open(None, seed_batch_size=3) as repo:
        repo.init()
        repo.seed("hakha", [Book(id=1, name="Genesis", chapters=1)], make_verses(10))

        assert repo.count_verses("hakha") == 10
        assert [v.verse for v in repo.list_verses("hakha", 1, 1)] == list(range(1, 11))


def test_seed_accepts_plain_dicts(repository):
    repository.seed(
        "hakha",
        [{"id": 1, "name": "Genesis", "chapters": 1}],
        [{"book_id": 1, "book_name": "Genesis", "chapter": 1, "verse": 1, "text": "In the beginning..."}],
    )
    assert repository.count_verses("hakha") == 1


def test_translations_are_isolated(repository):
    hakha = parse_translation(HAKHA_XML, "hakha")
    myanmar = parse_translation(MYANMAR_XML, "myanmar")

    repository.seed("hakha", hakha.books, hakha.verses)
    repository.seed("myanmar", myanmar.books, myanmar.verses)

    assert [b.id for b in repository.list_books("hakha")] == [2000, 2001]
    assert [b.id for b in repository.list_books("myanmar")] == [1000]
    assert repository.count_verses("hakha") == 4
    assert repository.count_verses("myanmar") == 1
    assert repository.list_verses("hakha", 1000, 1) == []
    assert [v.book_name for v in repository.list_verses("myanmar", 1000, 1)] == ["ကမ္ဘာဦး"]


def test_list_languages(repository):
    assert repository.list_languages() == []

    for source, translation in ((MYANMAR_XML, "myanmar"), (HAKHA_XML, "hakha")):
        parsed = parse_translation(source, translation)
        repository.seed(translation, parsed.books, parsed.verses)

    assert repository.list_languages() == ["hakha", "myanmar"]


def test_list_verses_orders_by_verse_number(repository):
    verses = list(reversed(make_verses(5)))
    repository.seed("hakha", [Book(id=1, name="Genesis", chapters=1)], verses)

    assert [v.verse for v in repository.list_verses("hakha", 1, 1)] == [1, 2, 3, 4, 5]


def test_get_verse(seeded_repository):
    verse = seeded_repository.list_verses("hakha", 1, 1)[0]

    assert seeded_repository.get_verse(verse.id) == verse
    assert seeded_repository.get_verse(9999) is None


class TestSearch:

    @pytest.fixture
    def repo(self, repository):
        parsed = parse_translation(HAKHA_XML, "hakha")
        repository.seed("hakha", parsed.books, parsed.verses)
        return repository

    def test_case_insensitive(self, repo):
        results = repo.search("hakha", "VAN LE VAWLEI")

        assert [(v.book_id, v.chapter, v.verse) for v in results] == [(2000, 1, 1), (2000, 2, 1)]

    def test_book_filter(self, repo):
        assert repo.search("hakha", "an", book_id=2001)[0].book_name == "Exodus"
        assert all(v.book_id == 2001 for v in repo.search("hakha", "an", book_id=2001))

    def test_other_translation_not_searched(self, repo):
        assert repo.search("myanmar", "vawlei") == []

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_blank_query_returns_nothing(self, repo, query):
        assert repo.search("hakha", query) == []

    def test_wildcards_match_literally(self, repository):
        repository.seed("hakha", [Book(id=1, name="Genesis", chapters=1)], [
            VerseRecord(book_id=1, book_name="Genesis", chapter=1, verse=1, text="fully 100% sure"),
            VerseRecord(book_id=1, book_name="Genesis", chapter=1, verse=2, text="no percent here"),
            VerseRecord(book_id=1, book_name="Genesis", chapter=1, verse=3, text="snake_case"),
        ])

        assert [v.verse for v in repository.search("hakha", "%")] == [1]
        assert [v.verse for v in repository.search("hakha", "_")] == [3]

    def test_unicode_case_folding(self, repository):
        repository.seed("hakha", [Book(id=1, name="Genesis", chapters=1)], [
            VerseRecord(book_id=1, book_name="Genesis", chapter=1, verse=1, text="ÉLAN Straße"),
        ])

        assert len(repository.search("hakha", "élan")) == 1
        assert len(repository.search("hakha", "STRASSE")) == 1

    def test_results_are_capped(self, repository):
        repository.seed("hakha", [Book(id=1, name="Genesis", chapters=1)], make_verses(150))

        results = repository.search("hakha", "light")
        assert len(results) == MAX_SEARCH_RESULTS
        assert [v.verse for v in results] == list(range(1, MAX_SEARCH_RESULTS + 1))

    def test_configured_limit_below_cap(self):
        with ScriptureRepository.open(None, search_limit=5) as repo:
            repo.init()
            repo.seed("hakha", [Book(id=1, name="Genesis", chapters=1)], make_verses(20))
            assert len(repo.search("hakha", "light")) == 5


def test_file_database_persists_between_opens(tmp_path, genesis_book, genesis_verse):
    db_path = tmp_path / "nested" / "church.db"

    with ScriptureRepository.open(db_path) as repo:
        repo.init()
        repo.seed("hakha", [genesis_book], [genesis_verse])

    with ScriptureRepository.open(db_path) as repo:
        assert repo.init() == 2
        assert repo.count_verses("hakha") == 1
