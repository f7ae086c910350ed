from typing import Dict, Type, Union

from .base import BaseExporter, ExportFormat
from .docx_io import DocxExporter
from .pdf import PdfExporter
from .txt import TxtExporter


class ExporterFactory:
    """Factory class for creating exporter instances"""

    _exporters: Dict[str, Type[BaseExporter]] = {
        ExportFormat.TXT.value: TxtExporter,
        ExportFormat.PDF.value: PdfExporter,
        ExportFormat.DOCX.value: DocxExporter,
    }

    @classmethod
    def create(cls, fmt: Union[str, ExportFormat], **options) -> BaseExporter:
        """Create an exporter instance

        Args:
            fmt: Export format name (e.g., 'pdf')
            **options: Keyword arguments forwarded to the exporter constructor

        Returns:
            BaseExporter: exporter instance

        Raises:
            ValueError: If fmt is not supported
        """
        key = fmt.value if isinstance(fmt, ExportFormat) else str(fmt).lower()
        if key not in cls._exporters:
            raise ValueError(f"Unsupported export format: {fmt}. "
                             f"Supported formats: {list(cls._exporters.keys())}")
        return cls._exporters[key](**options)

    @classmethod
    def get_supported_formats(cls) -> list:
        """Get list of supported format names"""
        return list(cls._exporters.keys())
