# utils/errors.py


class ScriptureStoreError(Exception):
    """Base class for every error raised by the scripture store."""


class NotInitializedError(ScriptureStoreError):
    """An operation was attempted before the schema was migrated."""

    def __init__(self, operation=None):
        message = "Scripture store is not initialized; call init() first"
        if operation:
            message = f"{message} (attempted {operation})"
        super().__init__(message)
        self.operation = operation


class MigrationError(ScriptureStoreError):
    """A schema statement failed while moving between versions."""

    def __init__(self, message, from_version=None, to_version=None):
        super().__init__(message)
        self.from_version = from_version
        self.to_version = to_version


class StorageError(ScriptureStoreError):
    """Underlying read/write failure of the local database."""


class BibleParseError(ScriptureStoreError):
    """Base class for parser failures that are reported to the caller."""


class EmptyParseError(BibleParseError):
    """The source markup did not yield a single book."""

    def __init__(self, translation, anomalies=None):
        super().__init__(f"No books recognized in {translation} source")
        self.translation = translation
        self.anomalies = list(anomalies or [])


class ConfigurationError(ScriptureStoreError, ValueError):
    """A configuration value is missing, malformed or inconsistent."""


class AppInitializationError(ScriptureStoreError):
    """Startup could not bring the store into a usable state."""
