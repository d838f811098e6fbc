"""
Record normalization: canonical records, derived calendar fields, identity.
"""

from .service import (
    RecordNormalizer,
    derive_calendar_fields,
    extract_channel_id,
    extract_video_id,
    generate_fingerprint,
)
