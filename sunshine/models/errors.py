"""Error taxonomy for the sync pipeline and its collaborators."""


class SunshineError(Exception):
    """Base class for all sync errors."""


class ParseError(SunshineError):
    """Provider JSON could not be turned into typed values."""


class MalformedLocation(ParseError):
    """Location lookup response is missing required fields."""


class MalformedForecast(ParseError):
    """Forecast response is missing required fields or has wrong types."""


class TransportError(SunshineError):
    """Any failure fetching raw provider text."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StoreError(SunshineError):
    """The dataset sink could not replace the cached records."""


class NotifyError(SunshineError):
    """The notifier failed. Never fatal to a sync run."""
