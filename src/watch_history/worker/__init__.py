"""
Executors that run the parsing pipeline in process or in a worker process.
"""

from .app import DirectExecutor, OffloadExecutor, build_options_payload, run_pipeline
