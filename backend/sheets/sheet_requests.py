"""
Builders for Google Sheets API batchUpdate requests.

Every function returns a plain JSON-compatible dict, so a list of them can be
sent as the "requests" body of a single spreadsheets.batchUpdate call.
"""
import enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from gspread.utils import a1_range_to_grid_range

Request = Dict[str, Any]


class Dimension(enum.Enum):
    rows = "ROWS"
    columns = "COLUMNS"


class PasteType(enum.Enum):
    normal = "PASTE_NORMAL"
    values = "PASTE_VALUES"
    format = "PASTE_FORMAT"


@dataclass(frozen=True)
class GridRegion:
    """
    Rectangular region of a sheet with zero-based, end-exclusive bounds.
    A bound of None leaves that side unbounded.
    """
    start_row: Optional[int] = None
    end_row: Optional[int] = None
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    @classmethod
    def from_a1(cls, a1: str) -> "GridRegion":
        """Parse A1 notation such as 'A7:R70' or '1:6'."""
        grid = a1_range_to_grid_range(a1)
        return cls(
            start_row=grid.get("startRowIndex"),
            end_row=grid.get("endRowIndex"),
            start_column=grid.get("startColumnIndex"),
            end_column=grid.get("endColumnIndex"),
        )


def request(name: str, /, **params) -> Request:
    return {name: params}


def grid_range(sheet_id: int, region: Optional[GridRegion] = None) -> Dict[str, Any]:
    """Produces a value for the API type GridRange; no region means the whole sheet."""
    r = {"sheetId": sheet_id}
    if region is None:
        return r

    for key, value in (
        ("startRowIndex", region.start_row),
        ("endRowIndex", region.end_row),
        ("startColumnIndex", region.start_column),
        ("endColumnIndex", region.end_column),
    ):
        if value is not None:
            r[key] = value
    return r


def dimension_range(sheet_id: int, dimension: Dimension, start: Optional[int] = None, end: Optional[int] = None):
    r = {
        "sheetId": sheet_id,
        "dimension": dimension.value,
    }
    if start is not None:
        r["startIndex"] = start
    if end is not None:
        r["endIndex"] = end
    return r


def request_duplicate_sheet(source_sheet_id: int, new_name: str, insert_index: int) -> Request:
    return request(
        "duplicateSheet",
        sourceSheetId=source_sheet_id,
        newSheetName=new_name,
        insertSheetIndex=insert_index,
    )


def request_set_hidden(sheet_id: int, hidden: bool) -> Request:
    return request(
        "updateSheetProperties",
        properties={
            "sheetId": sheet_id,
            "hidden": hidden,
        },
        fields="hidden",
    )


def request_update_title(sheet_id: int, title: str) -> Request:
    return request(
        "updateSheetProperties",
        properties={
            "sheetId": sheet_id,
            "title": title,
        },
        fields="title",
    )


def request_add_protected_range(
    sheet_id: int,
    unprotected: Iterable[GridRegion],
    editors: Iterable[str],
    description: Optional[str] = None,
) -> Request:
    """
    Protect a whole sheet, leaving the given regions editable.
    Only the listed users may edit the protected part.
    """
    protected_range = {
        "range": grid_range(sheet_id),
        "unprotectedRanges": [grid_range(sheet_id, region) for region in unprotected],
        "editors": {"users": list(editors)},
        "warningOnly": False,
    }
    if description is not None:
        protected_range["description"] = description
    return request("addProtectedRange", protectedRange=protected_range)


def request_delete_protected_range(protected_range_id: int) -> Request:
    return request("deleteProtectedRange", protectedRangeId=protected_range_id)


def request_delete_sheet(sheet_id: int) -> Request:
    return request("deleteSheet", sheetId=sheet_id)


def request_copy_paste(source: Dict[str, Any], destination: Dict[str, Any], paste_type: PasteType = PasteType.normal) -> Request:
    return request(
        "copyPaste",
        source=source,
        destination=destination,
        pasteType=paste_type.value,
        pasteOrientation="NORMAL",
    )


def request_append_dimension(sheet_id: int, dimension: Dimension, length: int) -> Request:
    return request(
        "appendDimension",
        sheetId=sheet_id,
        dimension=dimension.value,
        length=length,
    )


def request_update_dimension_size(sheet_id: int, dimension: Dimension, start: int, end: int, pixel_size: int) -> Request:
    return request(
        "updateDimensionProperties",
        range=dimension_range(sheet_id, dimension, start, end),
        properties={"pixelSize": pixel_size},
        fields="pixelSize",
    )


def request_set_rows_hidden(sheet_id: int, start: int, end: int, hidden: bool) -> Request:
    return request(
        "updateDimensionProperties",
        range=dimension_range(sheet_id, Dimension.rows, start, end),
        properties={"hiddenByUser": hidden},
        fields="hiddenByUser",
    )


def requests_dimension_sizes(sheet_id: int, dimension: Dimension, sizes: List[Optional[int]]) -> List[Request]:
    """
    Requests setting the pixel size of each index of a dimension.
    Consecutive indices of equal size are merged into one request; None entries are skipped.
    """
    requests = []
    start = 0
    while start < len(sizes):
        size = sizes[start]
        end = start + 1
        while end < len(sizes) and sizes[end] == size:
            end += 1
        if size is not None:
            requests.append(request_update_dimension_size(sheet_id, dimension, start, end, size))
        start = end
    return requests
