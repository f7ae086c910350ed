"""
CVBooster Core - 简历优化核心库

提供ATS导出、联盟推广追踪、文件文本提取和AI分析等核心功能的Python库
"""

__version__ = "0.1.0"
__author__ = "CVBooster Team"

from .ats import format_cv_for_ats, sanitize_ats_text
from .export import ExporterFactory, ExportFormat, export_document
from .models import *
from .server import CVBoosterServer, PostgreSQLManager

__all__ = [
    "CVBoosterServer",
    "PostgreSQLManager",
    "ExporterFactory",
    "ExportFormat",
    "export_document",
    "format_cv_for_ats",
    "sanitize_ats_text",
]
