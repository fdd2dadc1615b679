import gspread.exceptions
import pytest
from conftest import make_api_error

from core.errors import PreconditionError
from core.google_client import is_rate_limit_error, open_spreadsheet, retry_with_backoff


def test_rate_limit_detection():
    assert is_rate_limit_error(make_api_error(429, 'RESOURCE_EXHAUSTED'))
    assert not is_rate_limit_error(make_api_error(400, 'INVALID_ARGUMENT'))
    assert not is_rate_limit_error(ValueError('429'))


def test_retry_with_backoff_retries_rate_limits():
    calls = []
    delays = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise make_api_error(429, 'RESOURCE_EXHAUSTED')
        return 'ok'

    assert retry_with_backoff(flaky, sleep=delays.append) == 'ok'
    assert delays == [5, 10]


def test_retry_with_backoff_gives_up():
    def always_limited():
        raise make_api_error(429, 'RESOURCE_EXHAUSTED')

    with pytest.raises(gspread.exceptions.APIError):
        retry_with_backoff(always_limited, max_retries=2, sleep=lambda _: None)


def test_retry_with_backoff_does_not_retry_other_errors():
    calls = []

    def rejected():
        calls.append(1)
        raise make_api_error(400, 'INVALID_ARGUMENT')

    with pytest.raises(gspread.exceptions.APIError):
        retry_with_backoff(rejected, sleep=lambda _: None)
    assert len(calls) == 1


def test_open_spreadsheet_not_found():
    class Client:
        def open_by_key(self, key):
            raise gspread.exceptions.SpreadsheetNotFound(key)

    with pytest.raises(PreconditionError):
        open_spreadsheet(Client(), 'missing')
