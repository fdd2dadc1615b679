"""
Service-account credentials and API call helpers shared by the Sheets and Drive clients.
"""
import base64
import json
import os
import time
from typing import Callable, TypeVar

import gspread
import gspread.exceptions
from google.oauth2 import service_account

from core.errors import PreconditionError
from core.logger import logger

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive',
]

T = TypeVar('T')


def load_credentials() -> service_account.Credentials:
    """
    Load service account credentials.

    Tried in order: SERVICE_ACCOUNT_BASE64 (best for hosted deployments),
    SERVICE_ACCOUNT_JSON (raw JSON string) and GOOGLE_SERVICE_ACCOUNT_PATH
    (file, for local development).
    """
    service_account_base64 = os.getenv('SERVICE_ACCOUNT_BASE64')
    service_account_json = os.getenv('SERVICE_ACCOUNT_JSON')

    if service_account_base64:
        try:
            decoded_json = base64.b64decode(service_account_base64).decode('utf-8')
            service_account_info = json.loads(decoded_json)
        except (ValueError, UnicodeDecodeError) as e:
            raise ValueError(f"Invalid SERVICE_ACCOUNT_BASE64: {e}")
        return service_account.Credentials.from_service_account_info(service_account_info, scopes=SCOPES)

    if service_account_json:
        try:
            service_account_info = json.loads(service_account_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid SERVICE_ACCOUNT_JSON format: {e}")
        return service_account.Credentials.from_service_account_info(service_account_info, scopes=SCOPES)

    service_account_path = os.getenv('GOOGLE_SERVICE_ACCOUNT_PATH', './service_account.json')
    if not os.path.exists(service_account_path):
        raise FileNotFoundError(
            f"Service account file not found: {service_account_path}. "
            "Either set SERVICE_ACCOUNT_JSON environment variable or provide a valid file path."
        )
    return service_account.Credentials.from_service_account_file(service_account_path, scopes=SCOPES)


def authorize_sheets(credentials) -> gspread.Client:
    """Initialize gspread client with service account credentials."""
    try:
        client = gspread.authorize(credentials)
        logger.info("Google Sheets client initialized successfully")
        return client
    except Exception as e:
        logger.error(f"Error initializing Google Sheets client: {str(e)}", exc_info=True)
        raise


def is_rate_limit_error(error: Exception) -> bool:
    if not isinstance(error, gspread.exceptions.APIError):
        return False
    error_dict = error.response if isinstance(error.response, dict) else {}
    if error_dict.get('status') == 'RESOURCE_EXHAUSTED' or '429' in str(error_dict.get('code', '')):
        return True
    return getattr(error, 'code', None) == 429


def retry_with_backoff(func: Callable[[], T], max_retries: int = 3, initial_delay: float = 5, sleep=time.sleep) -> T:
    """
    Retry a read-only call with exponential backoff on rate limit errors.

    Args:
        func: Function to retry
        max_retries: Maximum number of attempts
        initial_delay: Initial delay in seconds (doubles each retry)
        sleep: Sleep function, replaceable in tests
    """
    for attempt in range(max_retries):
        try:
            return func()
        except gspread.exceptions.APIError as e:
            if is_rate_limit_error(e) and attempt < max_retries - 1:
                delay = initial_delay * (2 ** attempt)
                logger.warning(
                    f"Rate limit hit (429), retrying in {delay} seconds "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                sleep(delay)
                continue
            raise


def open_spreadsheet(client: gspread.Client, spreadsheet_id: str) -> gspread.Spreadsheet:
    try:
        return retry_with_backoff(lambda: client.open_by_key(spreadsheet_id))
    except gspread.exceptions.SpreadsheetNotFound:
        logger.error(f"Spreadsheet not found: {spreadsheet_id}")
        raise PreconditionError(f"Spreadsheet not found: {spreadsheet_id}")
