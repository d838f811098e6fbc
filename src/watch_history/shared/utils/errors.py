"""
Error handling for the application.
"""

from watch_history.shared.utils.types import ErrorType


class ExtractionError(Exception):
    """Custom exception for extraction pipeline errors.

    Raised only at the edges of the pipeline: invalid chunking arguments and
    the hard timeout of the synchronous wrapper. Entry-level and chunk-level
    problems are logged and skipped instead.
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.PARSE_ERROR,
    ):
        """
        Initialize an ExtractionError.

        Args:
            message (str): A human-readable error message.
            error_type (ErrorType): The category of the error (default: PARSE_ERROR).
        """
        self.message = message
        self.error_type = error_type
        super().__init__(self.message)


class NormalizationError(Exception):
    """Custom exception for when a raw entry cannot become a WatchRecord."""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.NORMALIZATION_ERROR,
    ):
        """
        Initialize a NormalizationError.

        Args:
            message (str): A human-readable error message.
            error_type (ErrorType): The category of the error (default: NORMALIZATION_ERROR).
        """
        self.message = message
        self.error_type = error_type
        super().__init__(self.message)


class WorkerError(Exception):
    """Custom exception for offload worker failures.

    Raised by the executor when the worker posts an ``error`` message or
    exits without posting a ``complete`` message.
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.WORKER_ERROR,
    ):
        """
        Initialize a WorkerError.

        Args:
            message (str): A human-readable error message.
            error_type (ErrorType): The category of the error (default: WORKER_ERROR).
        """
        self.message = message
        self.error_type = error_type
        super().__init__(self.message)
