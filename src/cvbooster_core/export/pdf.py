from io import BytesIO
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from ..ats import split_lines
from .base import BaseExporter, ExportFormat

# Searched in order when export.pdf.unicode_font_path is not set
UNICODE_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:/Windows/Fonts/arial.ttf",
)


def find_unicode_font(configured: Optional[str] = None) -> Optional[str]:
    """Return the first TrueType font file that exists, configured path first"""
    candidates = ((configured,) if configured else ()) + UNICODE_FONT_CANDIDATES
    for candidate in candidates:
        if Path(candidate).is_file():
            return candidate
    if configured:
        logger.warning(f"PDF Unicode font not found: {configured}")
    return None


def is_winansi(text: str) -> bool:
    """True when the standard Type 1 fonts can draw every character"""
    try:
        text.encode("cp1252")
    except UnicodeEncodeError:
        return False
    return True


class PdfExporter(BaseExporter):
    """PDF export with a standard font and computed pagination.

    Geometry is expressed in millimetres measured from the top of the page:
    the first baseline sits on the top margin, every line advances by
    ``line_height`` and a new page starts once the next line would pass
    ``page_height - margin``.

    Text outside WinAnsi (Cyrillic, Polish, Greek...) is drawn with a
    TrueType font registered from ``unicode_font_path`` or a system font.
    """

    format = ExportFormat.PDF
    media_type = "application/pdf"

    def __init__(
        self,
        font_name: str = "Helvetica",
        font_size: float = 12,
        margin: float = 20,
        line_height: float = 6,
        text_width: float = 170,
        pagesize: Tuple[float, float] = A4,
        unicode_font_path: Optional[str] = None,
    ):
        self.font_name = font_name
        self.font_size = font_size
        self.margin = margin
        self.line_height = line_height
        self.text_width = text_width
        self.pagesize = pagesize
        self.unicode_font_path = unicode_font_path

    @property
    def max_y(self) -> float:
        return self.pagesize[1] / mm - self.margin

    @property
    def lines_per_page(self) -> int:
        usable = self.max_y - self.margin
        return int(usable // self.line_height)

    def unicode_font(self) -> Optional[str]:
        """Register the Unicode TrueType font once and return its name"""
        path = find_unicode_font(self.unicode_font_path)
        if path is None:
            return None
        name = f"CVBooster-{Path(path).stem}"
        if name not in pdfmetrics.getRegisteredFontNames():
            pdfmetrics.registerFont(TTFont(name, path))
            logger.info(f"Registered PDF font {name} from {path}")
        return name

    def font_for(self, text: str) -> str:
        if is_winansi(text):
            return self.font_name
        font = self.unicode_font()
        if font is None:
            logger.warning("No Unicode TrueType font available, some characters will not render")
            return self.font_name
        return font

    def _hard_split(self, piece: str, font_name: str, max_width: float) -> List[str]:
        # a single word wider than the text column is cut between characters
        if pdfmetrics.stringWidth(piece, font_name, self.font_size) <= max_width:
            return [piece]
        parts: List[str] = []
        current = ""
        for ch in piece:
            if current and pdfmetrics.stringWidth(current + ch, font_name, self.font_size) > max_width:
                parts.append(current)
                current = ch
            else:
                current += ch
        parts.append(current)
        return parts

    def wrap(self, text: str, font_name: Optional[str] = None) -> List[str]:
        """Word-wrap every logical line to the text width, keeping blank lines"""
        font_name = font_name or self.font_for(text)
        max_width = self.text_width * mm
        wrapped: List[str] = []
        for line in split_lines(text):
            if not line.strip():
                wrapped.append("")
                continue
            for piece in simpleSplit(line, font_name, self.font_size, max_width) or [""]:
                wrapped.extend(self._hard_split(piece, font_name, max_width))
        return wrapped

    def paginate(self, lines: List[str]) -> List[List[str]]:
        pages: List[List[str]] = [[]]
        current_y = self.margin
        for line in lines:
            if current_y + self.line_height > self.max_y:
                pages.append([])
                current_y = self.margin
            pages[-1].append(line)
            current_y += self.line_height
        return pages

    def render(self, title: str, text: str) -> bytes:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=self.pagesize, invariant=True)
        c.setTitle(title)
        c.setAuthor("CVBooster")
        _, page_height = self.pagesize
        font_name = self.font_for(text)

        for page_lines in self.paginate(self.wrap(text, font_name)):
            # font state does not survive showPage()
            c.setFont(font_name, self.font_size)
            current_y = self.margin
            for line in page_lines:
                if line:
                    c.drawString(self.margin * mm, page_height - current_y * mm, line)
                current_y += self.line_height
            c.showPage()

        c.save()
        return buf.getvalue()
