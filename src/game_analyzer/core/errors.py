# ===== IMPORTS & DEPENDENCIES =====
from typing import Optional, List, TYPE_CHECKING

if TYPE_CHECKING:
    from game_analyzer.analysis.validator import ValidationResult


# ===== ERROR TYPES =====
class AnalyzerError(Exception):
    """Base class for every failure the analyzer surfaces."""


class FetchFailure(AnalyzerError):
    """The source page could not be retrieved (HTTP error or network error)."""

    def __init__(self, url: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        self.url = url
        self.status = status
        self.cause = cause
        if status is not None:
            message = f"Failed to fetch {url}: HTTP {status}"
        else:
            message = f"Failed to fetch {url}: {type(cause).__name__ if cause else 'network error'}"
        super().__init__(message)


class ParseFailure(AnalyzerError):
    """An enrichment response did not match the expected structured shape."""

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw[:200]
        super().__init__(message)


class ValidationFailure(AnalyzerError):
    """The merged record failed one or more hard checks."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        super().__init__(f"Validation failed: {', '.join(result.errors)}")

    @property
    def errors(self) -> List[str]:
        return self.result.errors


class DeliveryFailure(AnalyzerError):
    """The webhook answered with a non-2xx status or could not be reached."""

    def __init__(self, url: str, status: Optional[int] = None, cause: Optional[BaseException] = None):
        self.url = url
        self.status = status
        self.cause = cause
        detail = f"HTTP {status}" if status is not None else (type(cause).__name__ if cause else "network error")
        super().__init__(f"Webhook delivery to {url} failed: {detail}")


class AnalysisFailed(AnalyzerError):
    """
    Automatic analysis did not produce a usable record; the caller should
    fall back to manual entry. `reason` is 'fetch_failed' or 'validation_failed'.
    """

    def __init__(self, reason: str, cause: AnalyzerError):
        self.reason = reason
        self.cause = cause
        super().__init__("Could not analyze game URL automatically")
