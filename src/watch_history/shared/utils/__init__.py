"""
Utility functions and shared resources.
"""

from .configs import base_configs, chunk_configs
from .errors import ExtractionError, NormalizationError, WorkerError
from .helpers import WatchRecordEncoder, markup_to_text, sanitize_text
from .logger import logger
from .types import ErrorType
