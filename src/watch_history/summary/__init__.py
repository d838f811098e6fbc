"""
Import summary builder.
"""

from .service import compute_timestamp_stats, generate_summary
