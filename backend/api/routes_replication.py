"""
Template replication routes.
"""
from typing import Optional

from flask import Blueprint, jsonify, request

from api.responses import error_response
from core.auth import require_auth
from core.validators import validate_replication_request
from sheets.notifications import CollectingNotifier


def register_replication_routes(
    api: Blueprint,
    workbook_manager: Optional[object],
) -> None:
    """Register replication routes on the given blueprint."""

    @api.route("/admin/replications", methods=["POST"])
    @require_auth
    def replicate_template():
        """Create a spreadsheet from the template for the student on the given sheet."""
        if not workbook_manager:
            return jsonify({"error": "Workbook manager not configured"}), 500

        notifier = CollectingNotifier()
        try:
            data = validate_replication_request(request.get_json(silent=True))
            context = workbook_manager.context(
                spreadsheet_id=data["spreadsheetId"],
                user_email=data["userEmail"],
                sheet_name=data["sheetName"],
            )
            result = workbook_manager.replicate_template(context, notifier)
            return (
                jsonify(
                    {
                        "success": True,
                        **result.to_dict(),
                        "notifications": notifier.as_dicts(),
                    }
                ),
                201,
            )
        except Exception as e:
            return error_response(e, "Template replication", notifier)
