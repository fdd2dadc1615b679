"""
Configuration for the workbook administration operations.

Values come from environment variables (loaded from .env by app.py) and are
collected into frozen dataclasses that components receive explicitly.
"""
import json
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from sheets.sheet_requests import GridRegion

# Editable regions of every class sheet, in A1 notation.
DEFAULT_ALLOW_LIST = (
    '1:6',        # header rows
    'A7:R70',     # main data block
    'W7:X70',
    'AA7:AA70',
    'AX7:AX70',
    'AZ7:BB70',
)

DEFAULT_FIELD_MAP = {
    'RA': 'C3',
    'nomeAluno': 'C4',
}


def _parse_allow_list(value: Optional[str]) -> Tuple[GridRegion, ...]:
    ranges = DEFAULT_ALLOW_LIST
    if value:
        ranges = tuple(part.strip() for part in value.split(',') if part.strip())
    return tuple(GridRegion.from_a1(a1) for a1 in ranges)


def _parse_field_map(value: Optional[str]) -> Dict[str, str]:
    if not value:
        return dict(DEFAULT_FIELD_MAP)
    try:
        field_map = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid FIELD_MAP_JSON format: {e}")
    if not isinstance(field_map, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in field_map.items()
    ):
        raise ValueError("FIELD_MAP_JSON must be an object mapping field names to cell addresses")
    return field_map


@dataclass(frozen=True)
class ClassSheetConfig:
    """Layout of the class-management workbook."""
    template_sheet: str = 'Base'
    control_sheet: str = 'Piloto'
    roster_range: str = 'C4:C39'
    cleanup_range: str = 'C4:C40'
    label_cell: str = 'A5'
    allow_list: Tuple[GridRegion, ...] = field(default_factory=lambda: _parse_allow_list(None))
    protection_description: str = 'Class sheet'
    hide_blank_roster_rows: bool = True
    aggregation_sheet: str = 'ALL'
    aggregation_cell: str = 'A7'
    aggregation_range: str = 'A7:BB70'

    @classmethod
    def from_env(cls) -> 'ClassSheetConfig':
        return cls(
            template_sheet=os.getenv('CLASS_TEMPLATE_SHEET', 'Base'),
            control_sheet=os.getenv('CLASS_CONTROL_SHEET', 'Piloto'),
            roster_range=os.getenv('CLASS_ROSTER_RANGE', 'C4:C39'),
            cleanup_range=os.getenv('CLASS_CLEANUP_RANGE', 'C4:C40'),
            label_cell=os.getenv('CLASS_LABEL_CELL', 'A5'),
            allow_list=_parse_allow_list(os.getenv('CLASS_ALLOW_LIST')),
            hide_blank_roster_rows=os.getenv('CLASS_HIDE_BLANK_ROWS', 'true').lower() == 'true',
            aggregation_sheet=os.getenv('AGGREGATION_SHEET', 'ALL'),
            aggregation_cell=os.getenv('AGGREGATION_CELL', 'A7'),
            aggregation_range=os.getenv('AGGREGATION_RANGE', 'A7:BB70'),
        )


@dataclass(frozen=True)
class ReplicationConfig:
    """Where the replication template lives and how copies are named and filed."""
    template_spreadsheet_id: str = ''
    template_sheet: str = 'Doc_Ananf'
    folder_name: str = 'ANANF'
    name_prefix: str = 'ANANF_'
    timezone: str = 'America/Sao_Paulo'
    date_format: str = '%Y/%m/%d %H:%M:%S'
    field_map: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FIELD_MAP))
    id_field: str = 'RA'
    name_field: str = 'nomeAluno'

    @classmethod
    def from_env(cls) -> 'ReplicationConfig':
        return cls(
            template_spreadsheet_id=os.getenv('REPLICATION_TEMPLATE_SPREADSHEET_ID', ''),
            template_sheet=os.getenv('REPLICATION_TEMPLATE_SHEET', 'Doc_Ananf'),
            folder_name=os.getenv('REPLICATION_FOLDER_NAME', 'ANANF'),
            name_prefix=os.getenv('REPLICATION_NAME_PREFIX', 'ANANF_'),
            timezone=os.getenv('REPLICATION_TIMEZONE', 'America/Sao_Paulo'),
            field_map=_parse_field_map(os.getenv('FIELD_MAP_JSON')),
            id_field=os.getenv('REPLICATION_ID_FIELD', 'RA'),
            name_field=os.getenv('REPLICATION_NAME_FIELD', 'nomeAluno'),
        )


@dataclass(frozen=True)
class AppConfig:
    """Everything the workbook manager needs besides credentials."""
    workbook_spreadsheet_id: Optional[str]
    editor_email: Optional[str]
    class_sheets: ClassSheetConfig
    replication: ReplicationConfig

    @classmethod
    def from_env(cls) -> 'AppConfig':
        return cls(
            workbook_spreadsheet_id=os.getenv('WORKBOOK_SPREADSHEET_ID') or None,
            editor_email=os.getenv('EDITOR_EMAIL') or None,
            class_sheets=ClassSheetConfig.from_env(),
            replication=ReplicationConfig.from_env(),
        )


@dataclass(frozen=True)
class InvocationContext:
    """The workbook, sheet and user an operation runs on behalf of."""
    spreadsheet_id: str
    user_email: Optional[str] = None
    sheet_name: Optional[str] = None
