"""
Application error hierarchy.

Request-level errors (input validation, no usable text, no cards) abort the
whole analysis request. Extraction, completion and persistence errors are
recovered where they happen and only show up in logs or per-card outcomes.
"""


class PaperCardsError(Exception):
    """Base class for all business errors."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    @property
    def kind(self) -> str:
        return self.__class__.__name__


class InputValidationError(PaperCardsError):
    """Missing or malformed request fields, raised before any external call."""

    status_code = 400


class NoUsableText(PaperCardsError):
    """Every full-text source was exhausted without a valid result."""

    status_code = 400


class ExtractionQualityTooLow(PaperCardsError):
    """A single source produced text that failed the quality check."""

    def __init__(self, message: str = "", word_count: int = 0, char_count: int = 0):
        super().__init__(message)
        self.word_count = word_count
        self.char_count = char_count


class NoCardsSelected(PaperCardsError):
    status_code = 400


class IdentityNotFound(PaperCardsError):
    """The acting identity has no account record."""

    status_code = 404


class PaperNotFound(PaperCardsError):
    """The external paper key has no record for the account."""

    status_code = 404


class CompletionFailure(PaperCardsError):
    """The LLM call failed or returned nothing usable."""

    status_code = 502


class UnexpectedServerError(PaperCardsError):
    status_code = 500

    def __init__(self, message: str = "", error_type: str | None = None):
        super().__init__(message)
        self.error_type = error_type
