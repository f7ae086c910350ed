"""ATS export layer (TXT, PDF, DOCX).

Exposes:
- ExportFormat / ExportArtifact: format names and the rendered download
- Exporters: TxtExporter, PdfExporter (reportlab), DocxExporter (python-docx)
- ExporterFactory and export_document for the full format-then-serialize step
"""

from .base import BaseExporter, ExportArtifact, ExportFormat, filename_stem
from .docx_io import DocxExporter
from .factory import ExporterFactory
from .pdf import PdfExporter
from .pipeline import aexport_document, export_document
from .txt import TxtExporter

__all__ = [
    "BaseExporter",
    "ExportArtifact",
    "ExportFormat",
    "filename_stem",
    "DocxExporter",
    "ExporterFactory",
    "PdfExporter",
    "TxtExporter",
    "aexport_document",
    "export_document",
]
