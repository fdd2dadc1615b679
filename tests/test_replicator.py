from datetime import datetime
from unittest.mock import MagicMock

import pytest
from conftest import FakeSpreadsheet, FakeWorksheet

from core.config import InvocationContext, ReplicationConfig
from core.errors import PreconditionError
from google_drive import GoogleDriveClient
from sheets.notifications import CollectingNotifier
from sheets.replicator import TemplateReplicator

TEMPLATE_ROWS = 1200
TEMPLATE_COLUMNS = 30


def template_metadata():
    return {'sheets': [{
        'properties': {
            'sheetId': 7,
            'title': 'Doc_Ananf',
            'gridProperties': {'rowCount': TEMPLATE_ROWS, 'columnCount': TEMPLATE_COLUMNS},
        },
        'data': [{
            'rowMetadata': [{'pixelSize': 21}] * TEMPLATE_ROWS,
            'columnMetadata': [{'pixelSize': 120}] * 10 + [{'pixelSize': 80}] * (TEMPLATE_COLUMNS - 10),
        }],
    }]}


@pytest.fixture
def setup():
    active = FakeWorksheet('Aluno 1', 1, cells={'C3': 20231234, 'C4': 'Maria Souza'})
    active_spreadsheet = FakeSpreadsheet([active], spreadsheet_id='active-id')
    template_spreadsheet = FakeSpreadsheet(
        [FakeWorksheet('Doc_Ananf', 7)], spreadsheet_id='template-id', metadata=template_metadata()
    )
    new_spreadsheet = FakeSpreadsheet([FakeWorksheet('Sheet1', 0)], spreadsheet_id='new-id')

    client = MagicMock()
    client.open_by_key.side_effect = {'active-id': active_spreadsheet, 'template-id': template_spreadsheet}.__getitem__
    client.create.return_value = new_spreadsheet

    drive = MagicMock(spec=GoogleDriveClient)
    drive.get_parent_folder.return_value = 'parent-folder'
    drive.get_or_create_folder.return_value = 'ananf-folder'

    replicator = TemplateReplicator(
        client,
        drive,
        ReplicationConfig(template_spreadsheet_id='template-id'),
        now=lambda tz: datetime(2024, 3, 5, 14, 7, 9, tzinfo=tz),
    )
    context = InvocationContext(spreadsheet_id='active-id', sheet_name='Aluno 1')
    return {
        'active': active,
        'template': template_spreadsheet,
        'new': new_spreadsheet,
        'client': client,
        'drive': drive,
        'replicator': replicator,
        'context': context,
    }


def test_replicates_template_into_new_spreadsheet(setup):
    notifier = CollectingNotifier()
    result = setup['replicator'].run(setup['context'], notifier)
    new = setup['new']
    destination = new.sheet1

    assert result.name == 'ANANF_20231234 - 2024/03/05 14:07:09'
    setup['client'].create.assert_called_once_with(result.name)
    setup['drive'].get_or_create_folder.assert_called_once_with('ANANF', 'parent-folder')
    setup['drive'].move_file.assert_called_once_with('new-id', 'ananf-folder')
    assert destination.title == 'Doc_Ananf'
    assert result.url == 'https://docs.google.com/spreadsheets/d/new-id'

    resize, paste, dimensions = new.batch_calls
    appended = {r['appendDimension']['dimension']: r['appendDimension']['length'] for r in resize}
    assert appended == {'ROWS': TEMPLATE_ROWS - 1000, 'COLUMNS': TEMPLATE_COLUMNS - 26}

    copy_paste = paste[0]['copyPaste']
    assert copy_paste['source']['sheetId'] == 999
    assert copy_paste['destination']['sheetId'] == destination.id
    assert copy_paste['destination']['endRowIndex'] == TEMPLATE_ROWS
    assert copy_paste['destination']['endColumnIndex'] == TEMPLATE_COLUMNS
    assert copy_paste['pasteType'] == 'PASTE_NORMAL'
    assert paste[1] == {'deleteSheet': {'sheetId': 999}}
    assert setup['template'].worksheet('Doc_Ananf').copied_to == ['new-id']

    sizes = [
        (r['updateDimensionProperties']['range']['dimension'],
         r['updateDimensionProperties']['range']['startIndex'],
         r['updateDimensionProperties']['range']['endIndex'],
         r['updateDimensionProperties']['properties']['pixelSize'])
        for r in dimensions
    ]
    assert sizes == [
        ('COLUMNS', 0, 10, 120),
        ('COLUMNS', 10, TEMPLATE_COLUMNS, 80),
        ('ROWS', 0, TEMPLATE_ROWS, 21),
    ]

    assert [(address, values) for address, values, _ in destination.updates] == [
        ('C3', [[20231234]]),
        ('C4', [['Maria Souza']]),
    ]
    assert result.warnings == []

    kinds = [n.kind for n in notifier.notifications]
    assert kinds == ['toast', 'dialog']
    assert 'Maria Souza' in notifier.notifications[0].message
    assert 'href="https://docs.google.com/spreadsheets/d/new-id"' in notifier.notifications[1].html


def test_no_resize_when_destination_is_large_enough(setup):
    setup['new'].sheet1.row_count = 5000
    setup['new'].sheet1.col_count = 60
    setup['replicator'].run(setup['context'])

    paste, dimensions = setup['new'].batch_calls
    assert 'copyPaste' in paste[0]


def test_empty_identifier_aborts_before_creating_anything(setup):
    setup['active'].cells['C3'] = '  '
    notifier = CollectingNotifier()

    with pytest.raises(PreconditionError):
        setup['replicator'].run(setup['context'], notifier)

    setup['client'].create.assert_not_called()
    setup['drive'].move_file.assert_not_called()
    assert [n.kind for n in notifier.notifications] == ['alert']
    assert 'RA' in notifier.notifications[0].message


def test_workbook_outside_any_folder_aborts(setup):
    setup['drive'].get_parent_folder.return_value = None

    with pytest.raises(PreconditionError):
        setup['replicator'].run(setup['context'])

    setup['client'].create.assert_not_called()


def test_missing_template_sheet_aborts(setup):
    setup['template']._worksheets = [FakeWorksheet('Other', 8)]

    with pytest.raises(PreconditionError):
        setup['replicator'].run(setup['context'])

    setup['client'].create.assert_not_called()


def test_failed_field_copy_is_reported_not_fatal(setup):
    setup['active'].fail_reads.add('C4')
    notifier = CollectingNotifier()

    result = setup['replicator'].run(setup['context'], notifier)

    assert [outcome.ok for outcome in result.fields] == [True, False]
    assert len(result.warnings) == 1
    assert "'nomeAluno'" in result.warnings[0]
    assert result.to_dict()['copiedFields'] == ['RA']
    # Falls back to the identifier when the name could not be copied.
    assert '20231234' in notifier.notifications[0].message
    assert len(setup['new'].batch_calls) == 3


def test_field_copy_survives_transport_errors(setup):
    setup['active'].read_errors['C4'] = ConnectionError('connection reset')

    result = setup['replicator'].run(setup['context'], CollectingNotifier())

    assert [outcome.ok for outcome in result.fields] == [True, False]
    assert 'connection reset' in result.fields[1].error
    assert result.spreadsheet_id == 'new-id'
