"""
Multi-request operations on class sheets.

Each function sends exactly one API call. The Sheets API applies a batch
atomically: if any request is rejected, nothing in the batch is applied, and
the error is reported as a BatchOperationError without retrying.
"""
from typing import Any, Dict, Iterable, List

import gspread
import gspread.exceptions
from gspread.utils import absolute_range_name

from core.errors import BatchOperationError
from core.logger import logger
from sheets.sheet_requests import (
    GridRegion,
    Request,
    request_add_protected_range,
    request_duplicate_sheet,
    request_set_hidden,
)


def batch_update(spreadsheet: gspread.Spreadsheet, requests: Iterable[Request]) -> Dict[str, Any]:
    requests = list(requests)
    logger.debug(f"Performing batch update of spreadsheet {spreadsheet.id} with {len(requests)} request(s): {requests}")
    try:
        return spreadsheet.batch_update({'requests': requests})
    except gspread.exceptions.APIError as e:
        logger.error(f"Batch update of spreadsheet {spreadsheet.id} rejected: {str(e)}")
        raise BatchOperationError(f"Batch update rejected: {str(e)}", request_count=len(requests), cause=e)


def duplicate_sheets(
    spreadsheet: gspread.Spreadsheet,
    source_sheet_id: int,
    names: List[str],
    insert_index: int,
) -> List[int]:
    """
    Duplicate the source sheet once per name, placing the copies consecutively
    from insert_index. Returns the new sheet ids in the order of names.
    """
    if not names:
        return []

    response = batch_update(
        spreadsheet,
        (
            request_duplicate_sheet(source_sheet_id, name, insert_index + offset)
            for offset, name in enumerate(names)
        ),
    )
    replies = response.get('replies', [])
    if len(replies) != len(names):
        raise BatchOperationError(
            f"Expected {len(names)} duplicate replies, got {len(replies)}",
            request_count=len(names),
        )
    return [reply['duplicateSheet']['properties']['sheetId'] for reply in replies]


def protection_requests(
    sheet_ids: Iterable[int],
    editor_email: str,
    regions: Iterable[GridRegion],
    description: str = None,
) -> List[Request]:
    """Per sheet: make it visible, then lock everything except the editable regions."""
    regions = list(regions)
    requests = []
    for sheet_id in sheet_ids:
        requests.append(request_set_hidden(sheet_id, False))
        requests.append(request_add_protected_range(sheet_id, regions, [editor_email], description))
    return requests


def protect_sheets(
    spreadsheet: gspread.Spreadsheet,
    sheet_ids: List[int],
    editor_email: str,
    regions: Iterable[GridRegion],
    description: str = None,
) -> None:
    requests = protection_requests(sheet_ids, editor_email, regions, description)
    if requests:
        batch_update(spreadsheet, requests)
        logger.info(f"Protected {len(sheet_ids)} sheet(s) for editor {editor_email}")


def write_labels(spreadsheet: gspread.Spreadsheet, names: List[str], label_cell: str) -> None:
    """Write each name into label_cell of the sheet carrying that name."""
    if not names:
        return

    data = [
        {'range': absolute_range_name(name, label_cell), 'values': [[name]]}
        for name in names
    ]
    try:
        spreadsheet.values_batch_update({'valueInputOption': 'RAW', 'data': data})
    except gspread.exceptions.APIError as e:
        logger.error(f"Writing labels to spreadsheet {spreadsheet.id} failed: {str(e)}")
        raise BatchOperationError(f"Writing labels failed: {str(e)}", request_count=len(data), cause=e)
