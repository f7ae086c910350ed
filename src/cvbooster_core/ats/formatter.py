"""ATS-friendly text formatting.

Applicant tracking systems choke on decorative glyphs, exotic punctuation
and irregular whitespace. ``format_cv_for_ats`` turns a stored document into
a plain header / body / footer text that every export format renders.
"""

import re
from typing import List, Optional

DEFAULT_TITLE = "CV"
UNSPECIFIED = "Non spécifié"
SEPARATOR = "---"

# Punctuation kept verbatim on top of letters, digits and whitespace
ATS_PUNCTUATION = frozenset("-.@(),:/•+'#&")

_HORIZONTAL_WS = re.compile(r"[^\S\r\n]+")
_BLANK_LINES = re.compile(r"\n{3,}")


def is_ats_safe(char: str) -> bool:
    return char.isalpha() or char.isdigit() or char.isspace() or char in ATS_PUNCTUATION


def sanitize_ats_text(content: Optional[str]) -> str:
    """Normalize free text for ATS parsers.

    Line endings become LF and unsafe characters become spaces. Bullets
    become dashes, horizontal whitespace runs collapse to one space,
    blank-line runs collapse to a single blank line and the result is
    trimmed. Applying it twice gives the same result as applying it once.
    """
    if not content:
        return ""
    text = content.replace("\r\n", "\n").replace("\r", "\n")
    text = "".join(ch if is_ats_safe(ch) else " " for ch in text)
    text = text.replace("•", "-")
    text = _HORIZONTAL_WS.sub(" ", text)
    text = _BLANK_LINES.sub("\n\n", text)
    return text.strip()


def format_cv_for_ats(
    title: Optional[str],
    content: Optional[str],
    sector: Optional[str] = None,
    position: Optional[str] = None,
) -> str:
    """Build the full ATS export text: title, sanitized body, metadata footer."""
    parts = [f"{title or DEFAULT_TITLE}\n\n"]
    parts.append(sanitize_ats_text(content))
    parts.append(f"\n\n{SEPARATOR}\n")
    parts.append(f"Secteur: {sector or UNSPECIFIED}\n")
    parts.append(f"Poste visé: {position or UNSPECIFIED}\n")
    return "".join(parts)


def split_lines(text: str) -> List[str]:
    """Split on line breaks, treating CRLF and lone CR like LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
