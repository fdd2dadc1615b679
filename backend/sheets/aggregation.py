"""
Aggregation sheet that stacks the data block of every class sheet.
"""
from typing import List

import gspread
import gspread.exceptions
from gspread.utils import ValueInputOption, absolute_range_name

from core.config import ClassSheetConfig
from core.logger import logger


def aggregation_formula(class_names: List[str], data_range: str) -> str:
    """
    QUERY over the vertical concatenation of data_range on every class sheet,
    keeping only rows whose first column is filled.
    """
    if not class_names:
        return ''
    stacked = ';'.join(absolute_range_name(name, data_range) for name in class_names)
    return f'=QUERY({{{stacked}}},"select * where Col1 is not null",0)'


def refresh_aggregation(spreadsheet: gspread.Spreadsheet, class_names: List[str], config: ClassSheetConfig) -> bool:
    """Rewrite the aggregation formula. Returns False when the aggregation sheet is missing."""
    try:
        worksheet = spreadsheet.worksheet(config.aggregation_sheet)
    except gspread.exceptions.WorksheetNotFound:
        logger.warning(f"Aggregation sheet '{config.aggregation_sheet}' not found, skipping refresh")
        return False

    if not class_names:
        logger.warning(f"No class sheets to aggregate, clearing '{config.aggregation_sheet}'!{config.aggregation_cell}")
    formula = aggregation_formula(class_names, config.aggregation_range)
    worksheet.update(
        values=[[formula]],
        range_name=config.aggregation_cell,
        value_input_option=ValueInputOption.user_entered,
    )
    logger.info(f"Aggregation formula refreshed over {len(class_names)} class sheet(s)")
    return True
