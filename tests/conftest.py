import os
import tempfile
from types import SimpleNamespace
from unittest.mock import MagicMock

# Must be set before core.auth / core.logger are imported.
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key')
os.environ.setdefault('ADMIN_PASSWORD', 'test-password')
os.environ.setdefault('CORS_ORIGINS', 'http://localhost:5173')
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='workbook-admin-logs-'))

import gspread.exceptions
import pytest


def make_api_error(code=400, status='INVALID_ARGUMENT', message='Request rejected'):
    response = MagicMock()
    response.json.return_value = {'error': {'code': code, 'message': message, 'status': status}}
    response.text = message
    return gspread.exceptions.APIError(response)


class FakeWorksheet:
    def __init__(self, title, sheet_id, values=None, cells=None, row_count=1000, col_count=26):
        self.title = title
        self.id = sheet_id
        self.values = values or {}
        self.cells = cells or {}
        self.row_count = row_count
        self.col_count = col_count
        self.fail_reads = set()
        self.read_errors = {}
        self.updates = []
        self.copied_to = []

    def get(self, range_name):
        return self.values.get(range_name, [])

    def acell(self, label, value_render_option=None):
        if label in self.fail_reads:
            raise gspread.exceptions.GSpreadException(f'cannot read {label}')
        if label in self.read_errors:
            raise self.read_errors[label]
        return SimpleNamespace(value=self.cells.get(label))

    def update(self, values=None, range_name=None, **kwargs):
        self.updates.append((range_name, values, kwargs))

    def update_title(self, title):
        self.title = title

    def copy_to(self, spreadsheet_id):
        self.copied_to.append(spreadsheet_id)
        return {'sheetId': 999, 'title': f'Copy of {self.title}'}


class FakeSpreadsheet:
    def __init__(self, worksheets, spreadsheet_id='spreadsheet-id', metadata=None):
        self._worksheets = list(worksheets)
        self.id = spreadsheet_id
        self.metadata = metadata or {'sheets': []}
        self.batch_calls = []
        self.values_calls = []
        self.metadata_params = []
        self.fail_batch = None
        self._next_id = 1000

    @property
    def url(self):
        return f'https://docs.google.com/spreadsheets/d/{self.id}'

    @property
    def sheet1(self):
        return self._worksheets[0]

    def worksheets(self):
        return list(self._worksheets)

    def worksheet(self, title):
        for worksheet in self._worksheets:
            if worksheet.title == title:
                return worksheet
        raise gspread.exceptions.WorksheetNotFound(title)

    def batch_update(self, body):
        requests = body['requests']
        self.batch_calls.append(requests)
        if self.fail_batch is not None:
            raise self.fail_batch
        replies = []
        for request in requests:
            if 'duplicateSheet' in request:
                params = request['duplicateSheet']
                sheet_id = self._next_id
                self._next_id += 1
                self._worksheets.insert(
                    params['insertSheetIndex'],
                    FakeWorksheet(params['newSheetName'], sheet_id),
                )
                replies.append({'duplicateSheet': {'properties': {'sheetId': sheet_id, 'title': params['newSheetName']}}})
            else:
                replies.append({})
        return {'spreadsheetId': self.id, 'replies': replies}

    def values_batch_update(self, body):
        self.values_calls.append(body)
        return {'spreadsheetId': self.id}

    def fetch_sheet_metadata(self, params=None):
        self.metadata_params.append(params)
        return self.metadata


@pytest.fixture
def class_workbook():
    """Workbook with a control sheet listing two classes, the template and the aggregation sheet."""
    control = FakeWorksheet('Piloto', 1, values={
        'C4:C39': [['Turma A'], [], ['  Turma B '], ['Turma A']],
        'C4:C40': [['Turma A'], [], ['Turma B']],
    })
    return FakeSpreadsheet([
        control,
        FakeWorksheet('Base', 2),
        FakeWorksheet('ALL', 3),
    ])
