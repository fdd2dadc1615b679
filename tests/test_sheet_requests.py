from core.config import DEFAULT_ALLOW_LIST, ClassSheetConfig
from sheets.sheet_requests import (
    Dimension,
    GridRegion,
    grid_range,
    request_add_protected_range,
    request_duplicate_sheet,
    requests_dimension_sizes,
)


def test_region_from_a1_block():
    assert GridRegion.from_a1('A7:R70') == GridRegion(6, 70, 0, 18)
    assert GridRegion.from_a1('AZ7:BB70') == GridRegion(6, 70, 51, 54)


def test_region_from_a1_whole_rows():
    assert GridRegion.from_a1('1:6') == GridRegion(start_row=0, end_row=6)


def test_default_allow_list_regions():
    regions = ClassSheetConfig().allow_list
    assert len(regions) == len(DEFAULT_ALLOW_LIST) == 6
    assert set(regions) == {
        GridRegion(0, 6, None, None),
        GridRegion(6, 70, 0, 18),
        GridRegion(6, 70, 22, 24),
        GridRegion(6, 70, 26, 27),
        GridRegion(6, 70, 49, 50),
        GridRegion(6, 70, 51, 54),
    }


def test_grid_range_omits_unbounded_sides():
    assert grid_range(5) == {'sheetId': 5}
    assert grid_range(5, GridRegion(start_row=0, end_row=6)) == {
        'sheetId': 5,
        'startRowIndex': 0,
        'endRowIndex': 6,
    }


def test_duplicate_request():
    assert request_duplicate_sheet(2, 'Turma A', 3) == {
        'duplicateSheet': {'sourceSheetId': 2, 'newSheetName': 'Turma A', 'insertSheetIndex': 3}
    }


def test_protected_range_covers_whole_sheet_with_single_editor():
    request = request_add_protected_range(9, [GridRegion(0, 6)], ['teacher@school.org'])
    protected = request['addProtectedRange']['protectedRange']
    assert protected['range'] == {'sheetId': 9}
    assert protected['unprotectedRanges'] == [{'sheetId': 9, 'startRowIndex': 0, 'endRowIndex': 6}]
    assert protected['editors'] == {'users': ['teacher@school.org']}
    assert protected['warningOnly'] is False


def test_dimension_sizes_merge_equal_runs():
    requests = requests_dimension_sizes(4, Dimension.columns, [100, 100, 50, None, 50])
    ranges = [
        (r['updateDimensionProperties']['range']['startIndex'],
         r['updateDimensionProperties']['range']['endIndex'],
         r['updateDimensionProperties']['properties']['pixelSize'])
        for r in requests
    ]
    assert ranges == [(0, 2, 100), (2, 3, 50), (4, 5, 50)]
    assert requests[0]['updateDimensionProperties']['range']['dimension'] == 'COLUMNS'
