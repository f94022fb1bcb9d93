# app.py
import logging
import sys
from pathlib import Path

from config import Config
from schemas.bible_schemas import Book, VerseRecord, ParsedTranslation
from services.scripture_repository import ScriptureRepository
from utils.errors import AppInitializationError, ConfigurationError, EmptyParseError, ScriptureStoreError
from utils.first_launch import FirstLaunchFlag
from utils.xml_parser import parse_translation, book_id_base

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level='INFO'):
    # Configure logging to output to stdout
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def load_translation_source(config, translation):
    """Read <BIBLE_SOURCE_DIR>/<translation>.xml as text."""
    path = Path(config.BIBLE_SOURCE_DIR) / f"{translation}.xml"
    logger.info(f"Loading {translation} Bible source from {path}")
    return path.read_text(encoding='utf-8')


def placeholder_seed(translation, base_id=None):
    """Minimal data so the reader has something to show when a source cannot be imported."""
    base = base_id if base_id is not None else book_id_base(translation)
    return ParsedTranslation(
        translation=translation,
        books=[
            Book(id=base, name='Genesis', chapters=50),
            Book(id=base + 1, name='Exodus', chapters=40),
        ],
        verses=[
            VerseRecord(
                book_id=base,
                book_name='Genesis',
                chapter=1,
                verse=1,
                text='In the beginning God created the heaven and the earth.',
            ),
        ],
    )


class ChurchMateApp:
    """
    Application lifecycle around the scripture store.

    start() initializes the store and, on first launch, imports every
    configured translation that is not yet seeded. The first launch is only
    recorded after seeding finished, so an interrupted import is retried on
    the next start.
    """

    def __init__(self, config=None, repository=None, source_loader=None, first_launch=None):
        self.config = config or Config.from_env()
        self.repository = repository or ScriptureRepository.from_config(self.config)
        self.source_loader = source_loader or (lambda translation: load_translation_source(self.config, translation))
        self.first_launch = first_launch or FirstLaunchFlag(self.config.first_launch_marker)
        self.loading_message = 'Initializing...'

    def _status(self, message):
        self.loading_message = message
        logger.info(message)

    def start(self):
        self._status('Initializing database...')
        try:
            self.repository.init()
        except ScriptureStoreError as e:
            logger.error(f"Error initializing app: {e}", exc_info=True)
            self._status(f"Error: {e}. Please restart.")
            raise AppInitializationError(self.loading_message) from e

        if self.first_launch.is_first_launch():
            self._status('First launch detected. Preparing Bible data...')
            pending = [t for t in self.config.TRANSLATIONS if not self.repository.is_seeded(t)]
            if pending:
                self._status('Importing Bibles from XML files...')
                for translation in pending:
                    self.import_translation(translation)
                self._status('Bible import completed!')
            else:
                logger.info('Bibles already imported')
            self.first_launch.mark_complete()

        self._status('Loading app...')
        return self

    def import_translation(self, translation):
        """Parse and seed one translation, falling back to placeholder data."""
        base_id = self.config.book_id_base(translation)
        try:
            parsed = parse_translation(self.source_loader(translation), translation, base_id=base_id)
        except (EmptyParseError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Error importing {translation} Bible: {e}. Using sample data...")
            parsed = placeholder_seed(translation, base_id)

        self._status(f"Importing {translation} Bible ({len(parsed.verses)} verses)...")
        self.repository.seed(translation, parsed.books, parsed.verses)
        return parsed

    def stop(self):
        self.repository.close()

    def __enter__(self):
        try:
            return self.start()
        except Exception:
            self.stop()
            raise

    def __exit__(self, exc_type, exc, tb):
        self.stop()


def main():
    try:
        config = Config.from_env()
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1
    configure_logging(config.LOG_LEVEL)
    try:
        with ChurchMateApp(config) as church_app:
            languages = church_app.repository.list_languages()
            logger.info(f"Scripture store ready; translations: {', '.join(languages) or '(none)'}")
    except AppInitializationError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
