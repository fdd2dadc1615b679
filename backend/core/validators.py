"""Input validation for API endpoints"""
import re
from typing import Any, Dict, Optional

class ValidationError(Exception):
    """Custom validation error"""
    pass

_SPREADSHEET_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{20,}$')
_EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

def _optional_string(data: Dict[str, Any], key: str, errors: list) -> Optional[str]:
    value = data.get(key)
    if value is None or value == '':
        return None
    if not isinstance(value, str):
        errors.append(f'{key} must be a string')
        return None
    return value.strip()

def validate_class_sheet_request(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate the body of a class-sheet creation or cleanup request"""
    data = data or {}
    errors = []

    spreadsheet_id = _optional_string(data, 'spreadsheetId', errors)
    if spreadsheet_id and not _SPREADSHEET_ID_PATTERN.match(spreadsheet_id):
        errors.append('spreadsheetId is not a valid spreadsheet id')

    user_email = _optional_string(data, 'userEmail', errors)
    if user_email and not _EMAIL_PATTERN.match(user_email):
        errors.append('userEmail must be a valid email address')

    if errors:
        raise ValidationError('; '.join(errors))

    return {'spreadsheetId': spreadsheet_id, 'userEmail': user_email}

def validate_replication_request(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Validate the body of a replication request"""
    data = data or {}
    errors = []

    # Required fields
    spreadsheet_id = _optional_string(data, 'spreadsheetId', errors)
    if not spreadsheet_id:
        errors.append('spreadsheetId is required and must be a non-empty string')
    elif not _SPREADSHEET_ID_PATTERN.match(spreadsheet_id):
        errors.append('spreadsheetId is not a valid spreadsheet id')

    sheet_name = _optional_string(data, 'sheetName', errors)
    if not sheet_name:
        errors.append('sheetName is required and must be a non-empty string')

    user_email = _optional_string(data, 'userEmail', errors)
    if user_email and not _EMAIL_PATTERN.match(user_email):
        errors.append('userEmail must be a valid email address')

    if errors:
        raise ValidationError('; '.join(errors))

    return {'spreadsheetId': spreadsheet_id, 'sheetName': sheet_name, 'userEmail': user_email}
