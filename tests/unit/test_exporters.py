"""Unit tests for the TXT / PDF / DOCX exporters."""

import copy
from io import BytesIO

import pdfplumber
import pytest
from docx import Document
from docx.shared import Pt
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from cvbooster_core.ats import format_cv_for_ats, split_lines
from cvbooster_core.exceptions import ExportError
from cvbooster_core.export import (
    DocxExporter,
    ExporterFactory,
    ExportFormat,
    PdfExporter,
    TxtExporter,
    export_document,
    filename_stem,
)
from cvbooster_core.export import pdf as pdf_module
from cvbooster_core.export.pdf import find_unicode_font, is_winansi
from cvbooster_core.models import Cv


def _compact(text: str) -> str:
    return "".join(text.split())


def _numbered_lines(count: int) -> str:
    return "\n".join(f"Ligne {i}" for i in range(count))


@pytest.fixture
def cv():
    return Cv(
        id="cv-1",
        user_id="user-1",
        title="Jean Dupont",
        content="• Python\n• FastAPI\n\n\n\nExpérience ★ 10 ans",
        sector="Informatique",
        position="Backend",
    )


@pytest.mark.unit
def test_txt_artifact():
    artifact = TxtExporter().export("Jean Dupont", "Jean Dupont\n\nCorps")
    assert artifact.content == "Jean Dupont\n\nCorps".encode("utf-8")
    assert artifact.media_type == "text/plain; charset=utf-8"
    assert artifact.filename == "Jean Dupont_ATS.txt"
    assert artifact.content_disposition == 'attachment; filename="Jean Dupont_ATS.txt"'


@pytest.mark.unit
def test_non_ascii_title_gets_rfc5987_filename():
    artifact = TxtExporter().export("Hélène", "x")
    disposition = artifact.content_disposition
    assert 'filename="Helene_ATS.txt"' in disposition
    assert "filename*=UTF-8''H%C3%A9l%C3%A8ne_ATS.txt" in disposition


@pytest.mark.unit
def test_filename_stem():
    assert filename_stem(None) == "CV"
    assert filename_stem("") == "CV"
    assert filename_stem('a/b"c\\d') == "abcd"
    assert filename_stem("\n") == "CV"


@pytest.mark.unit
def test_pdf_page_capacity():
    exporter = PdfExporter()
    assert exporter.lines_per_page == 42
    pages = exporter.paginate([f"l{i}" for i in range(100)])
    assert [len(p) for p in pages] == [42, 42, 16]


@pytest.mark.unit
def test_pdf_paginate_keeps_every_line_in_order():
    lines = [f"l{i}" for i in range(250)]
    pages = PdfExporter().paginate(lines)
    assert [line for page in pages for line in page] == lines


@pytest.mark.unit
def test_pdf_wrap_fits_width_and_keeps_words():
    exporter = PdfExporter()
    line = " ".join(f"compétence{i}" for i in range(60))
    wrapped = exporter.wrap(f"{line}\n\nfin")
    assert len(wrapped) > 3
    assert wrapped[-2:] == ["", "fin"]
    for part in wrapped:
        assert stringWidth(part, "Helvetica", 12) <= 170 * mm
    assert " ".join(wrapped[:-2]).split() == line.split()


@pytest.mark.unit
def test_pdf_multi_page_content_is_complete():
    text = _numbered_lines(100)
    artifact = PdfExporter().export("Long CV", text)
    assert artifact.media_type == "application/pdf"
    assert artifact.content.startswith(b"%PDF")

    with pdfplumber.open(BytesIO(artifact.content)) as pdf:
        assert len(pdf.pages) == 3
        extracted = "\n".join(page.extract_text() or "" for page in pdf.pages)

    assert _compact(extracted) == _compact(text)


@pytest.mark.unit
def test_pdf_short_document_is_single_page():
    artifact = PdfExporter().export("CV", "Une seule ligne")
    with pdfplumber.open(BytesIO(artifact.content)) as pdf:
        assert len(pdf.pages) == 1


@pytest.mark.unit
def test_docx_paragraph_structure():
    text = "Titre\n\nLigne A\nLigne B\n---\nSecteur: X"
    artifact = DocxExporter().export("Jean Dupont", text)
    assert artifact.filename == "Jean Dupont_ATS.docx"

    paragraphs = Document(BytesIO(artifact.content)).paragraphs
    title = paragraphs[0]
    assert title.text == "Jean Dupont"
    assert title.runs[0].bold
    assert title.runs[0].font.size == Pt(16)
    assert title.runs[0].font.name == "Arial"
    assert paragraphs[1].text == ""
    assert [p.text for p in paragraphs[2:]] == split_lines(text)
    assert paragraphs[2].runs[0].font.size == Pt(11)


@pytest.mark.unit
def test_factory():
    assert isinstance(ExporterFactory.create("pdf"), PdfExporter)
    assert isinstance(ExporterFactory.create(ExportFormat.DOCX), DocxExporter)
    assert isinstance(ExporterFactory.create("TXT"), TxtExporter)
    assert set(ExporterFactory.get_supported_formats()) == {"txt", "pdf", "docx"}
    with pytest.raises(ValueError):
        ExporterFactory.create("odt")


@pytest.mark.unit
@pytest.mark.parametrize("fmt", ["txt", "pdf", "docx"])
def test_export_document_does_not_mutate_cv(cv, fmt):
    before = copy.deepcopy(cv)
    artifact = export_document(cv, fmt)
    assert cv == before
    assert artifact.filename == f"Jean Dupont_ATS.{fmt}"


@pytest.mark.unit
def test_all_formats_carry_the_same_text(cv):
    expected = _compact(format_cv_for_ats(cv.title, cv.content, cv.sector, cv.position))

    txt = export_document(cv, "txt").content.decode("utf-8")
    assert _compact(txt) == expected

    paragraphs = Document(BytesIO(export_document(cv, "docx").content)).paragraphs
    assert _compact("\n".join(p.text for p in paragraphs[2:])) == expected

    with pdfplumber.open(BytesIO(export_document(cv, "pdf").content)) as pdf:
        pdf_text = "\n".join(page.extract_text() or "" for page in pdf.pages)
    assert _compact(pdf_text) == expected


@pytest.mark.unit
def test_export_failure_is_wrapped(cv, monkeypatch):
    def broken(self, title, text):
        raise RuntimeError("font missing")

    monkeypatch.setattr(PdfExporter, "render", broken)
    with pytest.raises(ExportError) as excinfo:
        export_document(cv, "pdf")
    assert excinfo.value.fmt == "pdf"


LONG_URL = "https://www.linkedin.com/in/" + "jean-dupont-" * 12


@pytest.fixture
def unicode_font_path():
    path = find_unicode_font()
    if path is None:
        pytest.skip("no Unicode TrueType font installed")
    return path


@pytest.mark.unit
def test_pdf_wrap_breaks_words_wider_than_the_page():
    wrapped = PdfExporter().wrap(f"LinkedIn: {LONG_URL}")
    assert len(wrapped) > 2
    for part in wrapped:
        assert stringWidth(part, "Helvetica", 12) <= 170 * mm
    assert "".join(wrapped).replace(" ", "") == "LinkedIn:" + LONG_URL


@pytest.mark.unit
def test_pdf_long_url_is_extracted_whole():
    artifact = PdfExporter().export("CV", LONG_URL)
    with pdfplumber.open(BytesIO(artifact.content)) as pdf:
        extracted = "\n".join(page.extract_text() or "" for page in pdf.pages)
    assert _compact(extracted) == LONG_URL


@pytest.mark.unit
def test_is_winansi():
    assert is_winansi("Éléonore, Ça coûte 5 €")
    assert not is_winansi("Łódź")
    assert not is_winansi("Иван Петров")


@pytest.mark.unit
def test_latin_text_keeps_the_standard_font():
    assert PdfExporter().font_for("Expérience à Genève") == "Helvetica"


@pytest.mark.unit
def test_missing_unicode_font_falls_back_to_standard_font(monkeypatch):
    monkeypatch.setattr(pdf_module, "UNICODE_FONT_CANDIDATES", ())
    exporter = PdfExporter(unicode_font_path="/nonexistent/font.ttf")
    assert exporter.font_for("Иван Петров") == "Helvetica"
    assert exporter.export("CV", "Иван Петров").content.startswith(b"%PDF")


@pytest.mark.unit
def test_pdf_renders_non_latin_text_with_unicode_font(unicode_font_path):
    text = format_cv_for_ats("Иван Петров", "Опыт работы: Python Łódź ŐŰ")
    exporter = PdfExporter(unicode_font_path=unicode_font_path)
    assert exporter.font_for(text) != "Helvetica"

    artifact = exporter.export("Иван Петров", text)
    with pdfplumber.open(BytesIO(artifact.content)) as pdf:
        extracted = "\n".join(page.extract_text() or "" for page in pdf.pages)
    assert _compact(extracted) == _compact(text)


@pytest.mark.unit
def test_all_formats_carry_the_same_non_latin_text(unicode_font_path):
    cv = Cv(
        id="cv-2",
        user_id="user-1",
        title="Anna Kowalska",
        content="Doświadczenie: Łódź, Kraków\nОпыт работы: Python",
        sector="Informatique",
        position="Backend",
    )
    expected = _compact(format_cv_for_ats(cv.title, cv.content, cv.sector, cv.position))

    assert _compact(export_document(cv, "txt").content.decode("utf-8")) == expected

    paragraphs = Document(BytesIO(export_document(cv, "docx").content)).paragraphs
    assert _compact("\n".join(p.text for p in paragraphs[2:])) == expected

    artifact = export_document(cv, "pdf", {"unicode_font_path": unicode_font_path})
    with pdfplumber.open(BytesIO(artifact.content)) as pdf:
        pdf_text = "\n".join(page.extract_text() or "" for page in pdf.pages)
    assert _compact(pdf_text) == expected
