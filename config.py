# config.py
import os
from pathlib import Path

from dotenv import load_dotenv

from utils.errors import ConfigurationError
from utils.xml_parser import BOOK_ID_BASES

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_TRANSLATIONS = ('myanmar', 'hakha')

# Book ids of one translation are allocated from base to base + BOOK_ID_RANGE - 1
BOOK_ID_RANGE = 1000


def _int_env(name, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _book_id_bases_env(name, default):
    """Parse "falam=3000,tedim=4000" on top of the registered bases."""
    bases = dict(default)
    value = os.getenv(name)
    if not value:
        return bases
    for item in value.split(','):
        if not item.strip():
            continue
        translation, sep, base = item.partition('=')
        try:
            if not sep:
                raise ValueError(item)
            bases[translation.strip()] = int(base)
        except ValueError:
            raise ConfigurationError(
                f"{name} entries must look like translation=base, got {item.strip()!r}"
            ) from None
    return bases


class Config:
    SQLITE_DB_PATH = os.path.join(BASE_DIR, 'church.db')
    BIBLE_SOURCE_DIR = os.path.join(BASE_DIR, 'assets', 'bibles')
    FIRST_LAUNCH_MARKER = None  # Defaults to a file beside the database
    LOG_LEVEL = 'INFO'
    SEED_BATCH_SIZE = 2000
    SEARCH_RESULT_LIMIT = 100
    TRANSLATIONS = DEFAULT_TRANSLATIONS
    BOOK_ID_BASES = BOOK_ID_BASES

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(Config, key):
                raise AttributeError(f"Unknown config option {key!r}")
            setattr(self, key, value)
        self.validate()

    def validate(self):
        """Every configured translation needs its own book id range."""
        missing = [t for t in self.TRANSLATIONS if t not in self.BOOK_ID_BASES]
        if missing:
            raise ConfigurationError(
                f"No book id base configured for {', '.join(missing)}; "
                "add it to CHURCH_MATE_BOOK_ID_BASES"
            )

        ranges = sorted((self.BOOK_ID_BASES[t], t) for t in self.TRANSLATIONS)
        for (low, low_name), (high, high_name) in zip(ranges, ranges[1:]):
            if high - low < BOOK_ID_RANGE:
                raise ConfigurationError(
                    f"Book id ranges of {low_name} ({low}) and {high_name} ({high}) overlap; "
                    f"bases must be at least {BOOK_ID_RANGE} apart"
                )

    def book_id_base(self, translation):
        try:
            return self.BOOK_ID_BASES[translation]
        except KeyError:
            raise ConfigurationError(f"No book id base configured for {translation}") from None

    @property
    def first_launch_marker(self):
        if self.FIRST_LAUNCH_MARKER:
            return Path(self.FIRST_LAUNCH_MARKER)
        if self.SQLITE_DB_PATH in (None, ':memory:'):
            return None
        return Path(self.SQLITE_DB_PATH).with_name('.first_launch_complete')

    @classmethod
    def from_env(cls, env_file=None):
        """Build a Config from environment variables (and a .env file if present)."""
        load_dotenv(env_file)
        translations = os.getenv('CHURCH_MATE_TRANSLATIONS')
        return cls(
            SQLITE_DB_PATH=os.getenv('CHURCH_MATE_DB_PATH', cls.SQLITE_DB_PATH),
            BIBLE_SOURCE_DIR=os.getenv('CHURCH_MATE_BIBLE_DIR', cls.BIBLE_SOURCE_DIR),
            FIRST_LAUNCH_MARKER=os.getenv('CHURCH_MATE_FIRST_LAUNCH_MARKER') or None,
            LOG_LEVEL=os.getenv('CHURCH_MATE_LOG_LEVEL', cls.LOG_LEVEL).upper(),
            SEED_BATCH_SIZE=_int_env('CHURCH_MATE_SEED_BATCH_SIZE', cls.SEED_BATCH_SIZE),
            SEARCH_RESULT_LIMIT=_int_env('CHURCH_MATE_SEARCH_LIMIT', cls.SEARCH_RESULT_LIMIT),
            TRANSLATIONS=tuple(
                t.strip() for t in translations.split(',') if t.strip()
            ) if translations else cls.TRANSLATIONS,
            BOOK_ID_BASES=_book_id_bases_env('CHURCH_MATE_BOOK_ID_BASES', cls.BOOK_ID_BASES),
        )
