from enum import Enum
from typing import Any, Dict, List, Literal, TypedDict, Union


class ErrorType(Enum):
    """
    Enumeration for various error types used in the application.

    Attributes:
        GENERAL_ERROR: Represents a general error that does not fall into specific categories.
        PARSE_ERROR: Represents an error that occurs while extracting entries from markup.
        SOUP_ERROR: Represents an error related to BeautifulSoup operations.
        VALUE_ERROR: Represents an error caused by invalid values.
        TIMESTAMP_ERROR: Represents an error while resolving a raw timestamp.
        NORMALIZATION_ERROR: Represents an error while building a canonical record.
        WORKER_ERROR: Represents an error reported by (or about) an offload worker.
        TIMEOUT_ERROR: Represents a hard timeout in the synchronous wrapper.
        UNKNOWN_ERROR: Represents an unknown or unspecified error.
    """

    GENERAL_ERROR = "GENERAL_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    SOUP_ERROR = "SOUP_ERROR"
    VALUE_ERROR = "VALUE_ERROR"
    TIMESTAMP_ERROR = "TIMESTAMP_ERROR"
    NORMALIZATION_ERROR = "NORMALIZATION_ERROR"
    WORKER_ERROR = "WORKER_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ProgressMessage(TypedDict):
    """
    A TypedDict representing an incremental progress update from a worker.

    Attributes:
        type (str): Always "progress".
        processed (int): Records produced so far.
        total (int): Estimated total records for the document.
        percentage (float): Share of chunks finished, 0-100.
        eta (float): Estimated seconds remaining.
        current_chunk (int): 1-based index of the last finished chunk.
        total_chunks (int): Number of chunks in the document.
    """

    type: Literal["progress"]
    processed: int
    total: int
    percentage: float
    eta: float
    current_chunk: int
    total_chunks: int


class CompleteMessage(TypedDict):
    """
    A TypedDict representing the final result of a worker run.

    Attributes:
        type (str): Always "complete".
        records (List[Any]): The WatchRecord sequence in document order.
        summary (Any): The ImportSummary built from the records.
    """

    type: Literal["complete"]
    records: List[Any]
    summary: Any


class ErrorMessage(TypedDict):
    """
    A TypedDict representing a failed worker run.

    Attributes:
        type (str): Always "error".
        error (str): A human-readable error message.
    """

    type: Literal["error"]
    error: str


# Define the worker message types
WorkerMessage = Union[ProgressMessage, CompleteMessage, ErrorMessage]

# Options shipped to a worker process, plain values only
WorkerOptions = Dict[str, Any]
