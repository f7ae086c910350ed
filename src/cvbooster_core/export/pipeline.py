import asyncio
from typing import Any, Dict, Optional, Union

from loguru import logger

from ..ats import format_cv_for_ats
from ..exceptions import ExportError
from ..models import Cv
from .base import ExportArtifact, ExportFormat
from .factory import ExporterFactory


def export_document(
    cv: Cv,
    fmt: Union[str, ExportFormat],
    options: Optional[Dict[str, Any]] = None,
) -> ExportArtifact:
    """High-level export: format the CV for ATS, then serialize it.

    The CV is only read. ``options`` are forwarded to the exporter
    constructor (e.g. PDF margins from the export config section).
    Unsupported formats raise ValueError; any rendering failure is
    re-raised as ExportError.
    """
    exporter = ExporterFactory.create(fmt, **(options or {}))
    text = format_cv_for_ats(cv.title, cv.content, cv.sector, cv.position)
    try:
        artifact = exporter.export(cv.title, text)
    except Exception as e:
        raise ExportError(exporter.format.value, str(e)) from e

    logger.info(
        f"Exported CV {cv.id} as {exporter.format.value} ({len(artifact.content)} bytes)"
    )
    return artifact


async def aexport_document(
    cv: Cv,
    fmt: Union[str, ExportFormat],
    options: Optional[Dict[str, Any]] = None,
) -> ExportArtifact:
    """Async: export a CV in a worker thread."""
    return await asyncio.to_thread(export_document, cv, fmt, options)
