"""
Main application for running the parsing pipeline off the caller's thread.

Both executors run the same pipeline body and speak the same message
protocol: zero or more ``progress`` messages followed by exactly one
``complete`` or ``error`` message.
"""

import asyncio
import json
import multiprocessing as mp
import queue
import sys
from typing import Any, Callable, Dict, List, Optional, Tuple

from watch_history.scheduler.service import ParserService, ParsingOptions
from watch_history.shared.schemas.dto import ChunkProgress, ImportSummary, WatchRecord
from watch_history.shared.utils.configs import base_configs
from watch_history.shared.utils.errors import WorkerError
from watch_history.shared.utils.helpers import WatchRecordEncoder
from watch_history.shared.utils.logger import logger
from watch_history.shared.utils.types import ErrorType, WorkerMessage, WorkerOptions
from watch_history.timestamps.stats import ExtractionStats

MessageSink = Callable[[WorkerMessage], None]
CancelCheck = Callable[[], bool]
PipelineResult = Tuple[List[WatchRecord], ImportSummary]

# Options that can cross a process boundary
WORKER_OPTION_KEYS = (
    "chunk_size",
    "min_timestamp_confidence",
    "enable_international",
    "use_markup_parser",
    "debug_timestamps",
)


def build_options_payload(options: Dict[str, Any]) -> WorkerOptions:
    """
    Keep the plain option values a worker understands.

    Args:
        options: Keyword options given to an executor

    Returns:
        Dictionary of plain option values
    """
    ignored = sorted(set(options) - set(WORKER_OPTION_KEYS))
    if ignored:
        logger.warning(f"Ignoring options not supported by workers: {ignored}")
    return {key: options[key] for key in WORKER_OPTION_KEYS if key in options}


async def run_pipeline(
    document: str,
    options_payload: WorkerOptions,
    post: MessageSink,
    should_cancel: Optional[CancelCheck] = None,
) -> None:
    """
    Parse a document and post the outcome as protocol messages.

    Args:
        document: The exported history page
        options_payload: Plain option values
        post: Receives every message
        should_cancel: Polled before each chunk
    """
    try:

        def on_progress(progress: ChunkProgress) -> None:
            post(progress.to_message())

        options = ParsingOptions(
            chunk_size=options_payload.get("chunk_size"),
            on_progress=on_progress,
            should_cancel=should_cancel,
            min_timestamp_confidence=options_payload.get(
                "min_timestamp_confidence", base_configs["min_timestamp_confidence"]
            ),
            enable_international=options_payload.get("enable_international", True),
            use_markup_parser=options_payload.get("use_markup_parser", True),
            debug_timestamps=options_payload.get("debug_timestamps", False),
            stats=ExtractionStats(),
        )
        service = ParserService(options)
        records = await service.parse(document)
        summary = service.generate_summary(records)
    except Exception as e:
        logger.error(f"A {ErrorType.WORKER_ERROR.value} occurred while parsing: {e}")
        post({"type": "error", "error": str(e) or e.__class__.__name__})
        return

    post({"type": "complete", "records": records, "summary": summary})


def handle_message(
    message: WorkerMessage, on_message: Optional[MessageSink]
) -> Optional[PipelineResult]:
    """
    Forward a message and turn terminal messages into a result or an error.

    Returns:
        The records and summary for a ``complete`` message, None otherwise

    Raises:
        WorkerError: For an ``error`` message
    """
    if on_message is not None:
        on_message(message)
    if message["type"] == "complete":
        return message["records"], message["summary"]
    if message["type"] == "error":
        raise WorkerError(message=f"Worker failed: {message['error']}")
    return None


class DirectExecutor:
    """
    Runs the pipeline in the current process, on the running event loop.

    Messages reach ``on_message`` as they are posted, so progress arrives
    between chunks.
    """

    async def run(
        self,
        document: str,
        on_message: Optional[MessageSink] = None,
        should_cancel: Optional[CancelCheck] = None,
        **options,
    ) -> PipelineResult:
        """
        Parse a document in process.

        Args:
            document: The exported history page
            on_message: Receives every protocol message
            should_cancel: Polled before each chunk
            **options: Plain parsing options

        Returns:
            Tuple of (records, summary)

        Raises:
            WorkerError: If the pipeline posts an error
        """
        results: List[PipelineResult] = []

        def relay(message: WorkerMessage) -> None:
            result = handle_message(message, on_message)
            if result is not None:
                results.append(result)

        await run_pipeline(
            document, build_options_payload(options), relay, should_cancel
        )
        if not results:
            raise WorkerError(message="Pipeline finished without a result")
        return results[0]


def _pipeline_worker_entry(
    *,
    document: str,
    options_payload: WorkerOptions,
    message_queue: Any,
    cancel_event: Any,
) -> None:
    asyncio.run(
        run_pipeline(
            document, options_payload, message_queue.put, cancel_event.is_set
        )
    )


class OffloadExecutor:
    """
    Runs the pipeline in a separate process, one document per process.

    Messages are relayed from the worker's queue to ``on_message`` as they
    arrive. Cancellation is forwarded through an event the worker polls
    before each chunk, so a cancelled run still completes with the records
    parsed so far.
    """

    worker_entry = staticmethod(_pipeline_worker_entry)

    def __init__(self, poll_seconds: float = 0.2, shutdown_timeout: float = 5.0):
        """
        Initialize the executor.

        Args:
            poll_seconds: How long each queue read waits before checking the worker
            shutdown_timeout: How long to wait for the worker to exit
        """
        self.poll_seconds = poll_seconds
        self.shutdown_timeout = shutdown_timeout

    async def run(
        self,
        document: str,
        on_message: Optional[MessageSink] = None,
        should_cancel: Optional[CancelCheck] = None,
        **options,
    ) -> PipelineResult:
        """
        Parse a document in a worker process.

        Args:
            document: The exported history page
            on_message: Receives every protocol message
            should_cancel: Polled between queue reads
            **options: Plain parsing options

        Returns:
            Tuple of (records, summary)

        Raises:
            WorkerError: If the worker posts an error or exits without a result
        """
        mp_ctx = mp.get_context("spawn")
        message_queue = mp_ctx.Queue()
        cancel_event = mp_ctx.Event()
        process = mp_ctx.Process(
            target=self.worker_entry,
            kwargs={
                "document": document,
                "options_payload": build_options_payload(options),
                "message_queue": message_queue,
                "cancel_event": cancel_event,
            },
            daemon=True,
        )
        process.start()
        logger.info(f"Started parser worker {process.pid}")
        loop = asyncio.get_running_loop()

        try:
            while True:
                if should_cancel is not None and should_cancel():
                    cancel_event.set()
                try:
                    message = await loop.run_in_executor(
                        None, message_queue.get, True, self.poll_seconds
                    )
                except queue.Empty:
                    if process.is_alive():
                        continue
                    try:
                        message = message_queue.get_nowait()
                    except queue.Empty:
                        raise WorkerError(
                            message=f"Worker exited with code {process.exitcode} "
                            "before completing",
                        )
                result = handle_message(message, on_message)
                if result is not None:
                    return result
        finally:
            process.join(timeout=self.shutdown_timeout)
            if process.is_alive():
                logger.warning(f"Terminating parser worker {process.pid}")
                process.terminate()
                process.join(timeout=self.shutdown_timeout)
            message_queue.cancel_join_thread()
            message_queue.close()


if __name__ == "__main__":
    """Parse an exported history file in a worker process and print the summary."""
    if len(sys.argv) < 2:
        print("usage: python -m watch_history.worker.app <watch-history.html>")
        sys.exit(1)

    with open(sys.argv[1], encoding="utf-8") as history_file:
        html = history_file.read()

    def print_progress(message: WorkerMessage) -> None:
        if message["type"] == "progress":
            logger.info(
                f"Chunk {message['current_chunk']}/{message['total_chunks']}: "
                f"{message['processed']} records ({message['percentage']:.0f}%)"
            )

    records, summary = asyncio.run(OffloadExecutor().run(html, on_message=print_progress))
    print(json.dumps(summary, cls=WatchRecordEncoder, indent=2))
