"""
Body Normalization Module
=========================
Form decoding for PUT bodies and upload storage.
"""

from .normalizer import (
    NormalizedBody,
    normalize_body,
    detect_boundary,
    parse_urlencoded,
    parse_multipart,
    UPLOAD_FIELD,
)
from .uploads import StoredUpload, discard_uploads, safe_filename, store_upload

__all__ = [
    "NormalizedBody",
    "normalize_body",
    "detect_boundary",
    "parse_urlencoded",
    "parse_multipart",
    "UPLOAD_FIELD",
    "StoredUpload",
    "discard_uploads",
    "safe_filename",
    "store_upload",
]
