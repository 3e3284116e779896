"""Error types raised by the JSON translation pipeline."""
from typing import Optional


class TranslatorError(Exception):
    """Base class for every error the translator surfaces to the command line."""


class ConfigurationError(TranslatorError):
    """Raised when the configuration file, environment or flags are unusable."""


class MalformedDocument(TranslatorError):
    """Raised when a document is not a flat JSON object of string values."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class FileSystemError(TranslatorError):
    """Raised when a document cannot be read, or the output cannot be written."""


class TranslationCallFailure(TranslatorError):
    """Raised when the translation API reports a transport, auth or API error."""


class TranslationMismatch(TranslatorError):
    """
    Raised when the API returns a different number of lines than were sent.

    Accepting a short or long answer would shift translations onto the wrong
    keys, so the whole batch is rejected.
    """

    def __init__(self, sent: int, received: int):
        self.sent = sent
        self.received = received
        super().__init__(f"translation mismatch: got {received} translations for {sent} texts")
