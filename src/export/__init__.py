"""Spreadsheet export of claim datasets."""

from .workbook import (
    DEFAULT_EXPORT_FILENAME,
    XLSX_MEDIA_TYPE,
    WorkbookExport,
    build_export,
    export_workbook,
    sheet_title,
)

__all__ = [
    "DEFAULT_EXPORT_FILENAME",
    "XLSX_MEDIA_TYPE",
    "WorkbookExport",
    "build_export",
    "export_workbook",
    "sheet_title",
]
