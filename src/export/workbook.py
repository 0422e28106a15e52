"""
Excel export of claim datasets.

One worksheet per dataset: a styled header row with the field labels,
then one row per entry in canonical field order.
"""

import io
import logging
import re
from dataclasses import dataclass
from typing import Collection, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from ..intake import FIELD_LABELS, FIELD_ORDER, Entry, ExportError, NotFoundError
from ..storage import RecordStore

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DEFAULT_EXPORT_FILENAME = "data-export.xlsx"

COLUMN_WIDTH = 20
HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")

# Excel rejects these in sheet titles and caps titles at 31 characters
_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")
MAX_TITLE_LENGTH = 31


@dataclass
class WorkbookExport:
    """A rendered workbook ready to send as an attachment."""
    content: bytes
    filename: str
    media_type: str = XLSX_MEDIA_TYPE


def sheet_title(dataset_name: str, used: Collection[str] = ()) -> str:
    """
    Worksheet title for a dataset name.

    Args:
        dataset_name: Dataset the worksheet holds
        used: Lower-cased titles already in the workbook; Excel compares
            titles case-insensitively

    Returns:
        A valid title of at most 31 characters not present in ``used``
    """
    base = _INVALID_TITLE_CHARS.sub("_", dataset_name) or "Sheet"
    title = base[:MAX_TITLE_LENGTH]
    n = 1
    while title.lower() in used:
        suffix = str(n)
        title = base[:MAX_TITLE_LENGTH - len(suffix)] + suffix
        n += 1
    return title


def export_workbook(
    dataset_names: Sequence[str],
    rows_by_dataset: Mapping[str, Sequence[Entry]],
) -> bytes:
    """
    Render datasets into an .xlsx workbook.

    Args:
        dataset_names: Datasets to include, one worksheet each, in this order
        rows_by_dataset: Entries per dataset name

    Returns:
        The complete workbook as bytes

    Raises:
        ExportError: No dataset names given
    """
    if not dataset_names:
        raise ExportError("No data to export")

    workbook = Workbook()
    workbook.remove(workbook.active)
    headers = [FIELD_LABELS[key] for key in FIELD_ORDER]
    used_titles = set()

    for name in dataset_names:
        title = sheet_title(name, used_titles)
        used_titles.add(title.lower())
        worksheet = workbook.create_sheet(title=title)
        worksheet.append(headers)
        for cell in worksheet[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL

        for entry in rows_by_dataset.get(name, []):
            worksheet.append(entry.as_row())

        for column in range(1, len(FIELD_ORDER) + 1):
            worksheet.column_dimensions[get_column_letter(column)].width = COLUMN_WIDTH

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_export(store: RecordStore, dataset: Optional[str] = None) -> WorkbookExport:
    """
    Export one dataset, or every dataset, from a record store.

    Raises:
        NotFoundError: the named dataset holds no entries
        ExportError: no dataset to export
    """
    if dataset:
        if not store.dataset_exists(dataset):
            raise NotFoundError("Dataset not found")
        names = [dataset]
        filename = f"{dataset}-export.xlsx"
    else:
        names = store.list_dataset_names()
        filename = DEFAULT_EXPORT_FILENAME

    rows = {name: store.list_entries(name) for name in names}
    content = export_workbook(names, rows)
    logger.info(
        f"Exported {len(names)} dataset(s), "
        f"{sum(len(r) for r in rows.values())} entries -> {filename}"
    )
    return WorkbookExport(content=content, filename=filename)
