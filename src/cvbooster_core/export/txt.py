from .base import BaseExporter, ExportFormat


class TxtExporter(BaseExporter):
    """Plain text export, the most reliable format for ATS parsers"""

    format = ExportFormat.TXT
    media_type = "text/plain; charset=utf-8"

    def render(self, title: str, text: str) -> bytes:
        return text.encode("utf-8")
