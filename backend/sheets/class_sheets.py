"""
Creation and protection of class sheets.

A class sheet is a copy of the template sheet for one class on the roster.
New class sheets are created in three batch calls (duplicate, protect, label),
after which the aggregation sheet is refreshed. Class sheets that already
exist are left as they are.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import gspread
import gspread.exceptions

from core.config import ClassSheetConfig, InvocationContext
from core.errors import PreconditionError, WorkbookAdminError
from core.google_client import retry_with_backoff
from core.logger import logger
from sheets.aggregation import refresh_aggregation
from sheets.batch_operations import batch_update, duplicate_sheets, protect_sheets, write_labels
from sheets.notifications import Notifier
from sheets.roster import normalize_names, read_column, read_roster
from sheets.sheet_index import SheetIndex
from sheets.sheet_requests import GridRegion, request_delete_protected_range, request_set_rows_hidden


@dataclass
class CreationResult:
    created: List[str] = field(default_factory=list)
    sheet_ids: List[int] = field(default_factory=list)
    existing: List[str] = field(default_factory=list)
    aggregation_refreshed: bool = False

    def to_dict(self):
        return {
            'created': self.created,
            'sheetIds': self.sheet_ids,
            'existing': self.existing,
            'aggregationRefreshed': self.aggregation_refreshed,
        }


def prepare_control_sheet(spreadsheet: gspread.Spreadsheet, config: ClassSheetConfig) -> None:
    """Show the roster rows holding a class name and hide the blank ones."""
    if not config.hide_blank_roster_rows:
        return
    try:
        worksheet = spreadsheet.worksheet(config.control_sheet)
    except gspread.exceptions.WorksheetNotFound:
        logger.warning(f"Control sheet '{config.control_sheet}' not found, skipping preparation")
        return

    region = GridRegion.from_a1(config.roster_range)
    values = retry_with_backoff(lambda: worksheet.get(config.roster_range))
    row_count = len(values) if region.end_row is None else region.end_row - region.start_row
    blank = []
    for offset in range(row_count):
        row = values[offset] if offset < len(values) else []
        blank.append(not (row and str(row[0]).strip()))

    requests = []
    start = 0
    while start < len(blank):
        end = start + 1
        while end < len(blank) and blank[end] == blank[start]:
            end += 1
        requests.append(request_set_rows_hidden(
            worksheet.id, region.start_row + start, region.start_row + end, blank[start]
        ))
        start = end

    if requests:
        batch_update(spreadsheet, requests)
        logger.info(f"Hid {sum(blank)} blank roster row(s) on '{config.control_sheet}'")


def remove_class_protections(spreadsheet: gspread.Spreadsheet, config: ClassSheetConfig) -> List[str]:
    """
    Delete the whole-sheet protections of every class sheet listed on the
    control sheet. Returns the names of the sheets that had protections removed.
    """
    names = set(normalize_names(read_column(spreadsheet, config.control_sheet, config.cleanup_range)))
    if not names:
        return []

    metadata = spreadsheet.fetch_sheet_metadata(params={
        'fields': 'sheets(properties(sheetId,title),protectedRanges(protectedRangeId,range))',
    })

    requests = []
    cleared = []
    for sheet in metadata.get('sheets', []):
        title = sheet['properties']['title'].strip()
        if title not in names:
            continue
        sheet_requests = [
            request_delete_protected_range(protected['protectedRangeId'])
            for protected in sheet.get('protectedRanges', [])
            if set(protected.get('range', {})) <= {'sheetId'}
        ]
        if sheet_requests:
            requests.extend(sheet_requests)
            cleared.append(title)
            logger.info(f"Removing {len(sheet_requests)} protection(s) from sheet '{title}'")

    if requests:
        batch_update(spreadsheet, requests)
    return cleared


class ClassSheetCreator:
    """Creates the class sheets missing from a workbook."""

    def __init__(self, spreadsheet: gspread.Spreadsheet, config: ClassSheetConfig, notifier: Optional[Notifier] = None):
        self.spreadsheet = spreadsheet
        self.config = config
        self.notifier = notifier or Notifier()

    def run(self, context: InvocationContext) -> CreationResult:
        try:
            return self._create(context)
        except WorkbookAdminError as e:
            self.notifier.alert(str(e))
            raise

    def _create(self, context: InvocationContext) -> CreationResult:
        config = self.config
        prepare_control_sheet(self.spreadsheet, config)

        index = SheetIndex.build(self.spreadsheet)
        template = index.get(config.template_sheet)
        if template is None:
            raise PreconditionError(f"Sheet '{config.template_sheet}' not found!")

        roster = read_roster(self.spreadsheet, config)
        to_create = index.missing(roster)
        result = CreationResult(existing=[name for name in roster if name in index])

        if not to_create:
            logger.info("No new class sheets to create")
        else:
            logger.info(f"Creating {len(to_create)} class sheet(s) in batch...")
            insert_index = index.insertion_index_after(config.template_sheet)
            sheet_ids = duplicate_sheets(self.spreadsheet, template.id, to_create, insert_index)
            protect_sheets(
                self.spreadsheet,
                sheet_ids,
                context.user_email,
                config.allow_list,
                config.protection_description,
            )
            write_labels(self.spreadsheet, to_create, config.label_cell)
            result.created = to_create
            result.sheet_ids = sheet_ids

        result.aggregation_refreshed = refresh_aggregation(self.spreadsheet, roster, config)

        if result.created:
            logger.info(f"{len(result.created)} class sheet(s) created successfully")
        return result
