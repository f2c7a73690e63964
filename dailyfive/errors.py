"""Exception hierarchy for the Daily Five generator."""


class DailyFiveError(Exception):
    """Base exception for generator failures."""
    pass


class SourceUnavailableError(DailyFiveError):
    """Raised when every question source in the chain failed."""

    def __init__(self, message: str, failures: list | None = None):
        super().__init__(message)
        self.failures = failures or []


class InsufficientQuestionsError(DailyFiveError):
    """Raised when fewer questions than required survive every fallback tier."""

    def __init__(self, message: str, found: int = 0, required: int = 5):
        super().__init__(message)
        self.found = found
        self.required = required


class ArtifactWriteError(DailyFiveError):
    """Raised when the artifact/ledger pair could not be persisted."""
    pass


class InvalidArtifactError(DailyFiveError):
    """Raised when an assembled artifact fails schema validation; nothing is written."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message)
        self.errors = errors or []
