from .formatter import (
    ATS_PUNCTUATION,
    DEFAULT_TITLE,
    UNSPECIFIED,
    format_cv_for_ats,
    is_ats_safe,
    sanitize_ats_text,
    split_lines,
)

__all__ = [
    "ATS_PUNCTUATION",
    "DEFAULT_TITLE",
    "UNSPECIFIED",
    "format_cv_for_ats",
    "is_ats_safe",
    "sanitize_ats_text",
    "split_lines",
]
