"""
上传文件文本提取 - PDF / DOCX / DOC / TXT
"""

import asyncio
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

import pdfplumber
from docx import Document as DocxDocument
from loguru import logger

from ..exceptions import UnsupportedFileTypeError

MAX_UPLOAD_SIZE = 5 * 1024 * 1024

# 支持的文件类型定义
UPLOAD_CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
}

UNSUPPORTED_TYPE_MESSAGE = "Type de fichier non supporté. Utilisez PDF, DOC, DOCX ou TXT."


def detect_file_type(filename: Optional[str], content_type: Optional[str] = None) -> Optional[str]:
    """根据MIME类型或扩展名确定文件类型, 返回扩展名"""
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        for suffix, known in UPLOAD_CONTENT_TYPES.items():
            if mime == known:
                return suffix
    if filename:
        suffix = Path(filename).suffix.lower()
        if suffix in UPLOAD_CONTENT_TYPES:
            return suffix
    return None


def validate_upload(
    file_content: bytes,
    filename: Optional[str],
    content_type: Optional[str] = None,
    max_size: int = MAX_UPLOAD_SIZE,
) -> Tuple[bool, str]:
    """验证上传文件"""
    if not filename:
        return False, "Aucun fichier uploadé"
    if detect_file_type(filename, content_type) is None:
        return False, UNSUPPORTED_TYPE_MESSAGE
    if len(file_content) == 0:
        return False, "Fichier vide"
    if len(file_content) > max_size:
        return False, f"Fichier trop volumineux (maximum {max_size // (1024 * 1024)} Mo)"
    return True, ""


def _read_pdf(data: bytes) -> str:
    with pdfplumber.open(BytesIO(data)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def _read_docx(data: bytes) -> str:
    docx = DocxDocument(BytesIO(data))
    return "\n".join(p.text for p in docx.paragraphs)


def extract_text(file_content: bytes, filename: str, content_type: Optional[str] = None) -> str:
    """提取上传文件的文本内容

    Unreadable PDF / Word files yield a French notice asking the user to
    convert the file, so the upload itself still succeeds.

    Raises:
        UnsupportedFileTypeError: 文件类型不受支持
    """
    file_type = detect_file_type(filename, content_type)
    if file_type is None:
        raise UnsupportedFileTypeError(UNSUPPORTED_TYPE_MESSAGE)

    if file_type == ".txt":
        return file_content.decode("utf-8", errors="replace")

    if file_type == ".pdf":
        try:
            return _read_pdf(file_content)
        except Exception as e:
            logger.error(f"Error parsing PDF {filename}: {e}")
            return (
                f"[Erreur lors de l'extraction du PDF: {filename}]\n\n"
                "Veuillez convertir votre fichier en DOCX ou TXT pour une meilleure extraction du texte."
            )

    try:
        return _read_docx(file_content)
    except Exception as e:
        logger.error(f"Error parsing Word file {filename}: {e}")
        if file_type == ".doc":
            return (
                f"[Erreur lors de l'extraction du fichier .doc: {filename}]\n\n"
                "Veuillez convertir votre fichier en PDF ou DOCX pour une meilleure extraction du texte."
            )
        return (
            f"[Erreur lors de l'extraction du texte: {filename}]\n\n"
            "Veuillez vérifier que votre fichier n'est pas corrompu et réessayer."
        )


async def aextract_text(file_content: bytes, filename: str, content_type: Optional[str] = None) -> str:
    """Async wrapper for extract_text using a thread to avoid blocking the event loop."""
    return await asyncio.to_thread(extract_text, file_content, filename, content_type)
