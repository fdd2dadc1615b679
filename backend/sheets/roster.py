"""
Reading the class roster from the control sheet.
"""
from typing import List

import gspread
import gspread.exceptions
import pandas as pd

from core.config import ClassSheetConfig
from core.google_client import retry_with_backoff
from core.logger import logger


def normalize_names(values: List[List[str]]) -> List[str]:
    """
    Flatten a single-column value range into class names.
    Blank cells are dropped, names are trimmed and only the first occurrence
    of each name is kept, in top-to-bottom order.
    """
    flat = [row[0] if row else '' for row in values]
    names = pd.Series(flat, dtype='object').fillna('').astype(str).str.strip()
    names = names[names != '']
    return names.drop_duplicates().tolist()


def read_column(spreadsheet: gspread.Spreadsheet, sheet_name: str, a1_range: str) -> List[List[str]]:
    """Values of a range on the named sheet, or [] if the sheet does not exist."""
    try:
        worksheet = spreadsheet.worksheet(sheet_name)
    except gspread.exceptions.WorksheetNotFound:
        logger.warning(f"Control sheet '{sheet_name}' not found in spreadsheet {spreadsheet.id}")
        return []
    return retry_with_backoff(lambda: worksheet.get(a1_range))


def read_roster(spreadsheet: gspread.Spreadsheet, config: ClassSheetConfig) -> List[str]:
    """Ordered, de-duplicated class names listed on the control sheet."""
    roster = normalize_names(read_column(spreadsheet, config.control_sheet, config.roster_range))
    logger.info(f"Roster has {len(roster)} class(es)")
    return roster
