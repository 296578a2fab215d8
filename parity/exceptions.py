class ParityError(Exception):
    """Base class for every error raised by the parity checks."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotANumber(ParityError, ValueError):
    """Raised when a cell's text does not parse as a count."""


class ExtractionError(ParityError):
    """Raised when a comparison unit could not extract enough data to compare."""


class RowNotFound(ExtractionError):
    """Raised when a required table row (e.g. "Demand forecast") is missing."""


class PivotNotFound(ExtractionError):
    """Raised when the current-period label is absent from the demand series."""
    def __init__(self, pivot_label, labels):
        super().__init__(
            f"Current month {pivot_label} not found in demand labels: [{', '.join(labels)}]"
        )
        self.pivot_label = pivot_label
        self.labels = list(labels)


class InsufficientComparison(ExtractionError):
    """Raised when fewer months than required could be aligned and compared."""
    def __init__(self, compared_count, minimum):
        super().__init__(f"Compared {compared_count} months, at least {minimum} required")
        self.compared_count = compared_count
        self.minimum = minimum


class MismatchFailure(ParityError):
    """Raised when a locked comparison unit has values that disagree."""
    def __init__(self, message, mismatches=None):
        super().__init__(message)
        self.mismatches = list(mismatches or [])


class AuthError(ParityError):
    """Raised when the stored browser session is missing or expired."""
