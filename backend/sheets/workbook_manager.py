"""
Workbook administration manager.

Wires the Google clients and configuration together and exposes the
operations the API offers: class-sheet creation, protection removal and
template replication.
"""
from typing import List, Optional

import gspread

from core.config import AppConfig, InvocationContext
from core.errors import PreconditionError
from core.google_client import authorize_sheets, load_credentials, open_spreadsheet
from core.logger import logger
from google_drive import GoogleDriveClient
from sheets.class_sheets import ClassSheetCreator, CreationResult, remove_class_protections
from sheets.notifications import Notifier
from sheets.replicator import ReplicationResult, TemplateReplicator


class WorkbookAdminManager:
    """Runs workbook operations on behalf of an explicit invocation context."""

    def __init__(
        self,
        config: AppConfig,
        client: Optional[gspread.Client] = None,
        drive: Optional[GoogleDriveClient] = None,
        credentials=None,
    ):
        self.config = config
        if client is None or drive is None:
            credentials = credentials or load_credentials()
            client = client or authorize_sheets(credentials)
            drive = drive or GoogleDriveClient(credentials)
        self.client = client
        self.drive = drive
        # Protection editors default to the identity the API calls run as.
        self.default_editor = config.editor_email or getattr(credentials, 'service_account_email', None)

    def context(
        self,
        spreadsheet_id: Optional[str] = None,
        user_email: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> InvocationContext:
        spreadsheet_id = spreadsheet_id or self.config.workbook_spreadsheet_id
        if not spreadsheet_id:
            raise PreconditionError("No spreadsheet given and WORKBOOK_SPREADSHEET_ID is not set.")
        return InvocationContext(
            spreadsheet_id=spreadsheet_id,
            user_email=user_email or self.default_editor,
            sheet_name=sheet_name,
        )

    def create_class_sheets(self, context: InvocationContext, notifier: Optional[Notifier] = None) -> CreationResult:
        if not context.user_email:
            raise PreconditionError("No editor email given and EDITOR_EMAIL is not set.")
        spreadsheet = open_spreadsheet(self.client, context.spreadsheet_id)
        creator = ClassSheetCreator(spreadsheet, self.config.class_sheets, notifier)
        return creator.run(context)

    def remove_class_protections(self, context: InvocationContext) -> List[str]:
        spreadsheet = open_spreadsheet(self.client, context.spreadsheet_id)
        cleared = remove_class_protections(spreadsheet, self.config.class_sheets)
        logger.info(f"Protections removed from {len(cleared)} class sheet(s)")
        return cleared

    def replicate_template(self, context: InvocationContext, notifier: Optional[Notifier] = None) -> ReplicationResult:
        replicator = TemplateReplicator(self.client, self.drive, self.config.replication)
        return replicator.run(context, notifier)
