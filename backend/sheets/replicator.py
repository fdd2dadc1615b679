"""
Replication of a template sheet into a new spreadsheet for one student record.

The new spreadsheet is named after the student's identifying field, filed into
a folder next to the active workbook, and receives the template's content,
formatting and dimensions plus the mapped fields of the active sheet.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

import gspread
import gspread.exceptions
from gspread.utils import ValueInputOption, ValueRenderOption, absolute_range_name

from core.config import InvocationContext, ReplicationConfig
from core.errors import PreconditionError
from core.google_client import open_spreadsheet, retry_with_backoff
from core.logger import logger
from google_drive import GoogleDriveClient
from sheets.batch_operations import batch_update
from sheets.notifications import Notifier
from sheets.sheet_requests import (
    Dimension,
    GridRegion,
    grid_range,
    request_append_dimension,
    request_copy_paste,
    request_delete_sheet,
    requests_dimension_sizes,
)

LAYOUT_FIELDS = (
    'sheets(properties(sheetId,title,gridProperties(rowCount,columnCount)),'
    'data(rowMetadata(pixelSize),columnMetadata(pixelSize)))'
)


@dataclass
class TemplateLayout:
    worksheet: gspread.Worksheet
    row_count: int
    column_count: int
    row_heights: List[Optional[int]] = field(default_factory=list)
    column_widths: List[Optional[int]] = field(default_factory=list)


@dataclass
class FieldCopyOutcome:
    """Result of copying one mapped field into the new spreadsheet."""
    field: str
    address: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReplicationResult:
    spreadsheet_id: str
    name: str
    url: str
    folder_id: str
    fields: List[FieldCopyOutcome] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [
            f"Failed to copy field '{outcome.field}' ({outcome.address}): {outcome.error}"
            for outcome in self.fields
            if not outcome.ok
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'spreadsheetId': self.spreadsheet_id,
            'name': self.name,
            'url': self.url,
            'folderId': self.folder_id,
            'copiedFields': [outcome.field for outcome in self.fields if outcome.ok],
            'warnings': self.warnings,
        }


def read_cell(worksheet: gspread.Worksheet, address: str) -> Any:
    cell = retry_with_backoff(
        lambda: worksheet.acell(address, value_render_option=ValueRenderOption.unformatted)
    )
    return cell.value


def copy_field(source: gspread.Worksheet, destination: gspread.Worksheet, name: str, address: str) -> FieldCopyOutcome:
    """Copy one cell; failures are reported in the outcome instead of raised."""
    try:
        value = read_cell(source, address)
        destination.update(
            values=[[value]],
            range_name=address,
            value_input_option=ValueInputOption.raw,
        )
        return FieldCopyOutcome(field=name, address=address, value=value)
    except Exception as e:  # each field copy is best effort
        logger.warning(f"[!] Failed to copy field '{name}' ({address}): {str(e)}")
        return FieldCopyOutcome(field=name, address=address, error=str(e))


def load_template_layout(spreadsheet: gspread.Spreadsheet, sheet_name: str) -> TemplateLayout:
    try:
        worksheet = spreadsheet.worksheet(sheet_name)
    except gspread.exceptions.WorksheetNotFound:
        raise PreconditionError(f'Sheet "{sheet_name}" not found in the template spreadsheet!')

    metadata = retry_with_backoff(lambda: spreadsheet.fetch_sheet_metadata(params={
        'ranges': absolute_range_name(sheet_name),
        'includeGridData': 'true',
        'fields': LAYOUT_FIELDS,
    }))
    sheet = metadata['sheets'][0]
    grid = sheet['properties']['gridProperties']
    data = (sheet.get('data') or [{}])[0]
    return TemplateLayout(
        worksheet=worksheet,
        row_count=grid['rowCount'],
        column_count=grid['columnCount'],
        row_heights=[entry.get('pixelSize') for entry in data.get('rowMetadata', [])],
        column_widths=[entry.get('pixelSize') for entry in data.get('columnMetadata', [])],
    )


class TemplateReplicator:
    """Builds a new spreadsheet from the template sheet for the active student record."""

    def __init__(
        self,
        client: gspread.Client,
        drive: GoogleDriveClient,
        config: ReplicationConfig,
        now: Callable[[ZoneInfo], datetime] = datetime.now,
    ):
        self.client = client
        self.drive = drive
        self.config = config
        self.now = now

    def spreadsheet_name(self, identifier: Any) -> str:
        timestamp = self.now(ZoneInfo(self.config.timezone)).strftime(self.config.date_format)
        return f"{self.config.name_prefix}{identifier} - {timestamp}"

    def resolve_folder(self, spreadsheet_id: str) -> str:
        parent_id = self.drive.get_parent_folder(spreadsheet_id)
        if not parent_id:
            raise PreconditionError("The active spreadsheet is not stored in any Drive folder.")
        return self.drive.get_or_create_folder(self.config.folder_name, parent_id)

    def run(self, context: InvocationContext, notifier: Optional[Notifier] = None) -> ReplicationResult:
        notifier = notifier or Notifier()
        logger.info("Starting template replication")
        try:
            return self._replicate(context, notifier)
        except Exception as e:
            logger.error(f"Template replication failed: {str(e)}", exc_info=True)
            notifier.alert(f"Error generating {self.config.folder_name}: {str(e)}")
            raise

    def _replicate(self, context: InvocationContext, notifier: Notifier) -> ReplicationResult:
        config = self.config
        if not context.sheet_name:
            raise PreconditionError("No active sheet given.")

        # Everything that can fail on a precondition happens before any file is created.
        folder_id = self.resolve_folder(context.spreadsheet_id)
        active_spreadsheet = open_spreadsheet(self.client, context.spreadsheet_id)
        try:
            active = active_spreadsheet.worksheet(context.sheet_name)
        except gspread.exceptions.WorksheetNotFound:
            raise PreconditionError(f"Sheet '{context.sheet_name}' not found in the active spreadsheet.")

        if not config.template_spreadsheet_id:
            raise PreconditionError("REPLICATION_TEMPLATE_SPREADSHEET_ID is not set.")
        template_spreadsheet = open_spreadsheet(self.client, config.template_spreadsheet_id)
        layout = load_template_layout(template_spreadsheet, config.template_sheet)

        id_address = config.field_map.get(config.id_field)
        if not id_address:
            raise PreconditionError(f"No cell address configured for field '{config.id_field}'.")
        identifier = read_cell(active, id_address)
        if identifier is None or str(identifier).strip() == '':
            raise PreconditionError(
                f"{config.id_field} not found in cell {id_address} of the active spreadsheet."
            )
        logger.info(f"{config.id_field}: {identifier}")

        name = self.spreadsheet_name(identifier)
        spreadsheet = self.client.create(name)
        destination = spreadsheet.sheet1
        destination.update_title(config.template_sheet)
        self.drive.move_file(spreadsheet.id, folder_id)
        logger.info(f"Spreadsheet created: {name}")

        self._resize(spreadsheet, destination, layout)
        self._copy_content(spreadsheet, destination, layout)
        outcomes = [
            copy_field(active, destination, field_name, address)
            for field_name, address in config.field_map.items()
        ]
        display_name = next(
            (o.value for o in outcomes if o.field == config.name_field and o.ok and o.value),
            identifier,
        )
        self._copy_dimensions(spreadsheet, destination, layout)

        result = ReplicationResult(
            spreadsheet_id=spreadsheet.id,
            name=name,
            url=spreadsheet.url,
            folder_id=folder_id,
            fields=outcomes,
        )
        logger.info(f"Spreadsheet created successfully: {name}")
        logger.info(f"URL: {result.url}")

        notifier.toast(f"{config.folder_name} generated successfully for: {display_name}", 'Success', 10)
        notifier.show_link_dialog(
            f"{config.folder_name} created",
            f"The {config.folder_name} for {display_name} was created.",
            result.url,
        )
        return result

    def _resize(self, spreadsheet: gspread.Spreadsheet, destination: gspread.Worksheet, layout: TemplateLayout) -> None:
        requests = []
        if layout.row_count > destination.row_count:
            requests.append(request_append_dimension(
                destination.id, Dimension.rows, layout.row_count - destination.row_count
            ))
        if layout.column_count > destination.col_count:
            requests.append(request_append_dimension(
                destination.id, Dimension.columns, layout.column_count - destination.col_count
            ))
        if requests:
            batch_update(spreadsheet, requests)

    def _copy_content(self, spreadsheet: gspread.Spreadsheet, destination: gspread.Worksheet, layout: TemplateLayout) -> None:
        """
        Paste the full template range onto the destination sheet.
        copyPaste only works within one spreadsheet, so the template sheet is
        first copied into the new spreadsheet and removed after pasting.
        """
        scratch = layout.worksheet.copy_to(spreadsheet.id)
        scratch_id = scratch['sheetId']
        region = GridRegion(0, layout.row_count, 0, layout.column_count)
        batch_update(spreadsheet, [
            request_copy_paste(grid_range(scratch_id, region), grid_range(destination.id, region)),
            request_delete_sheet(scratch_id),
        ])

    def _copy_dimensions(self, spreadsheet: gspread.Spreadsheet, destination: gspread.Worksheet, layout: TemplateLayout) -> None:
        requests = (
            requests_dimension_sizes(destination.id, Dimension.columns, layout.column_widths)
            + requests_dimension_sizes(destination.id, Dimension.rows, layout.row_heights)
        )
        if requests:
            batch_update(spreadsheet, requests)
