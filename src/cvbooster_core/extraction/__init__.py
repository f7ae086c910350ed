from .extractor import (
    MAX_UPLOAD_SIZE,
    UPLOAD_CONTENT_TYPES,
    aextract_text,
    detect_file_type,
    extract_text,
    validate_upload,
)

__all__ = [
    "MAX_UPLOAD_SIZE",
    "UPLOAD_CONTENT_TYPES",
    "aextract_text",
    "detect_file_type",
    "extract_text",
    "validate_upload",
]
