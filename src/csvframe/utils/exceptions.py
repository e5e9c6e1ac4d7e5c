from typing import Optional


class CSVFrameError(Exception):
    """
    Base exception for all csvframe errors
    """
    pass


class ConfigurationError(CSVFrameError):
    """
    Raised when a load or report configuration is invalid
    """
    pass


class SourceUnavailableError(CSVFrameError):
    """
    Raised when the source file cannot be opened for reading
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to open source '{path}': {reason}")
        self.path = path
        self.reason = reason


class EmptySourceError(CSVFrameError):
    """
    Raised when the source holds no header line
    """
    pass


class CapacityExceededError(CSVFrameError):
    """
    Raised when the header or the data section grows past a configured ceiling.
    """

    def __init__(self, what: str, limit: int, observed: int):
        super().__init__(
            f"Refusing to load more than {limit} {what} "
            f"(reached {observed}). Increase the configured limit if this is expected."
        )
        self.what = what
        self.limit = limit
        self.observed = observed


class MalformedNumericFieldError(CSVFrameError):
    """
    Raised in strict mode when a data token is not a float literal
    """

    def __init__(self, line_number: int, column: int, token: str):
        super().__init__(
            f"Malformed numeric field at line {line_number}, column {column}: {token!r}"
        )
        self.line_number = line_number
        self.column = column
        self.token = token


class ColumnCountMismatchError(CSVFrameError):
    """
    Raised in strict mode when a data row does not match the header width
    """

    def __init__(self, line_number: int, expected: int, actual: int):
        super().__init__(
            f"Line {line_number} has {actual} values but the header declares {expected} columns"
        )
        self.line_number = line_number
        self.expected = expected
        self.actual = actual


class StatisticsUnavailableError(CSVFrameError):
    """
    Raised when min/max are requested from a frame loaded without detailed statistics
    """

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "Detailed statistics were not computed. Load with detailed_statistics=True."
        )
