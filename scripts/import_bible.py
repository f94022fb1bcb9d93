# scripts/import_bible.py
import sys
from pathlib import Path
from dotenv import load_dotenv

# Add the parent directory to the Python path properly
current_dir = Path(__file__).resolve().parent
project_dir = current_dir.parent
sys.path.insert(0, str(project_dir))

from config import Config
from services.scripture_repository import ScriptureRepository
from utils.xml_parser import parse_translation


def import_bible(xml_path, translation, db_path=None, base_id=None):
    """Parse an XML Bible and seed it into the store at db_path.

    base_id is required for translations without a registered book id range.

    Returns the (books, verses) counts stored for the translation afterwards.
    """
    print(f"Reading XML file from: {xml_path}")
    xml_content = Path(xml_path).read_text(encoding='utf-8')

    print("Parsing XML...")
    parsed = parse_translation(xml_content, translation, base_id=base_id)
    print(f"- Books: {len(parsed.books)}")
    print(f"- Verses: {len(parsed.verses)}")
    for anomaly in parsed.anomalies:
        print(f"Warning: {anomaly}")

    if db_path is None:
        load_dotenv()
        db_path = Config.from_env().SQLITE_DB_PATH

    with ScriptureRepository.open(db_path) as repository:
        repository.init()
        repository.seed(translation, parsed.books, parsed.verses)

        stored_books = len(repository.list_books(translation))
        stored_verses = repository.count_verses(translation)

    print(f"\nImport complete!")
    print(f"Stored {stored_books} books and {stored_verses} verses for {translation} in {db_path}")

    # Verify expected verse count
    if stored_verses != len(parsed.verses):
        print(f"\nWarning: Parsed {len(parsed.verses)} verses but the store holds {stored_verses}")
        print("Rows from an earlier import of this translation may still be present.")

    return stored_books, stored_verses


if __name__ == '__main__':
    if len(sys.argv) not in (3, 4, 5):
        print("Usage: python import_bible.py <path_to_bible.xml> <translation> [db_path] [book_id_base]")
        sys.exit(1)

    import_bible(
        sys.argv[1],
        sys.argv[2],
        sys.argv[3] if len(sys.argv) >= 4 else None,
        int(sys.argv[4]) if len(sys.argv) == 5 else None,
    )
