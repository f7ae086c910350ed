import asyncio
import unicodedata
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote

from ..ats import DEFAULT_TITLE


class ExportFormat(str, Enum):
    TXT = "txt"
    PDF = "pdf"
    DOCX = "docx"


def filename_stem(title: Optional[str]) -> str:
    """Derive a download file stem from a document title."""
    if not title:
        return DEFAULT_TITLE
    cleaned = "".join(
        ch for ch in title
        if ch not in '"\\/' and unicodedata.category(ch)[0] != "C"
    ).strip()
    return cleaned or DEFAULT_TITLE


@dataclass
class ExportArtifact:
    """A rendered export ready to be sent as a file download"""
    content: bytes
    media_type: str
    filename: str

    @property
    def content_disposition(self) -> str:
        ascii_name = (
            unicodedata.normalize("NFKD", self.filename)
            .encode("ascii", "ignore")
            .decode("ascii")
        )
        if ascii_name == self.filename:
            return f'attachment; filename="{self.filename}"'
        return (
            f'attachment; filename="{ascii_name}"; '
            f"filename*=UTF-8''{quote(self.filename)}"
        )


class BaseExporter(ABC):
    """Base exporter class that defines the interface for all export formats"""

    format: ExportFormat
    media_type: str

    @abstractmethod
    def render(self, title: str, text: str) -> bytes:
        """Serialize ATS-formatted text into the format's bytes"""
        pass

    def build_filename(self, title: Optional[str]) -> str:
        return f"{filename_stem(title)}_ATS.{self.format.value}"

    def export(self, title: Optional[str], text: str) -> ExportArtifact:
        """Render text and wrap it with the download metadata"""
        return ExportArtifact(
            content=self.render(title or DEFAULT_TITLE, text),
            media_type=self.media_type,
            filename=self.build_filename(title),
        )

    # --------------------
    # Async counterparts
    # --------------------
    async def aexport(self, title: Optional[str], text: str) -> ExportArtifact:
        """Async wrapper for export using a thread to avoid blocking the event loop."""
        return await asyncio.to_thread(self.export, title, text)
