"""
Mapping of operation errors to JSON responses.
"""
from typing import Optional

from flask import jsonify

from core.errors import BatchOperationError, PreconditionError
from core.logger import logger
from core.validators import ValidationError
from sheets.notifications import CollectingNotifier


def error_response(e: Exception, action: str, notifier: Optional[CollectingNotifier] = None):
    """JSON error body with the notifications raised before the failure."""
    if isinstance(e, ValidationError):
        status = 400
    elif isinstance(e, PreconditionError):
        logger.warning(f"{action} aborted: {str(e)}")
        status = 400
    elif isinstance(e, BatchOperationError):
        logger.error(f"{action} failed in a batch of {e.request_count} request(s): {str(e)}")
        status = 409
    else:
        logger.error(f"Error {action.lower()}: {str(e)}", exc_info=True)
        status = 500

    body = {"success": False, "error": str(e)}
    if notifier is not None:
        body["notifications"] = notifier.as_dicts()
    return jsonify(body), status
