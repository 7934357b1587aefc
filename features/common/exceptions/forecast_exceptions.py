class ForecastError(Exception):
    """Base exception for forecast engine errors."""
    pass

class SourceUnavailableError(ForecastError):
    """Raised when an upstream feed fails, times out or returns unusable data."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")

class UserReportError(ForecastError):
    """Raised when a single user's report cannot be produced or sent."""
    pass

class BatchFatalError(ForecastError):
    """Raised when a distribution run cannot continue at all."""
    pass

class LockAcquisitionError(ForecastError):
    """Raised when the lock store cannot complete its check-and-set."""
    pass

class UnknownSpotError(ForecastError):
    """Raised when a spot id is not in the catalog."""
    pass

class ReportSkippedError(ForecastError):
    """Raised when every spot a user follows failed; the user is skipped, not errored."""
    pass
