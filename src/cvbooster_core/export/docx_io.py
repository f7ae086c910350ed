from io import BytesIO

from docx import Document as DocxDocument
from docx.shared import Pt

from ..ats import split_lines
from .base import BaseExporter, ExportFormat


class DocxExporter(BaseExporter):
    """Word export: bold title, blank paragraph, then one paragraph per line"""

    format = ExportFormat.DOCX
    media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

    def __init__(self, font_name: str = "Arial", title_size: int = 16, body_size: int = 11):
        self.font_name = font_name
        self.title_size = title_size
        self.body_size = body_size

    def _add_paragraph(self, d, text: str, size: int, bold: bool = False) -> None:
        p = d.add_paragraph()
        run = p.add_run(text)
        run.font.name = self.font_name
        run.font.size = Pt(size)
        run.bold = bold

    def render(self, title: str, text: str) -> bytes:
        d = DocxDocument()
        d.core_properties.title = title
        self._add_paragraph(d, title, self.title_size, bold=True)
        self._add_paragraph(d, "", self.body_size)
        for line in split_lines(text):
            self._add_paragraph(d, line, self.body_size)

        buf = BytesIO()
        d.save(buf)
        return buf.getvalue()
