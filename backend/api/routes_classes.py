"""
Class sheet routes (creation + protection cleanup).
"""
from typing import Optional

from flask import Blueprint, jsonify, request

from api.responses import error_response
from core.auth import require_auth
from core.logger import logger
from core.validators import validate_class_sheet_request
from sheets.notifications import CollectingNotifier


def register_class_routes(
    api: Blueprint,
    workbook_manager: Optional[object],
) -> None:
    """Register class sheet routes on the given blueprint."""

    @api.route("/admin/class-sheets", methods=["POST"])
    @require_auth
    def create_class_sheets():
        """Create a protected, labeled sheet for every class on the roster that has none."""
        if not workbook_manager:
            return jsonify({"error": "Workbook manager not configured"}), 500

        notifier = CollectingNotifier()
        try:
            data = validate_class_sheet_request(request.get_json(silent=True))
            context = workbook_manager.context(
                spreadsheet_id=data["spreadsheetId"],
                user_email=data["userEmail"],
            )
            result = workbook_manager.create_class_sheets(context, notifier)
            logger.info(f"Class sheet creation finished: {len(result.created)} created")
            return (
                jsonify(
                    {
                        "success": True,
                        **result.to_dict(),
                        "notifications": notifier.as_dicts(),
                    }
                ),
                201 if result.created else 200,
            )
        except Exception as e:
            return error_response(e, "Class sheet creation", notifier)

    @api.route("/admin/class-sheets/protections/remove", methods=["POST"])
    @require_auth
    def remove_class_protections():
        """Remove the whole-sheet protections of the class sheets on the roster."""
        if not workbook_manager:
            return jsonify({"error": "Workbook manager not configured"}), 500

        try:
            data = validate_class_sheet_request(request.get_json(silent=True))
            context = workbook_manager.context(spreadsheet_id=data["spreadsheetId"])
            cleared = workbook_manager.remove_class_protections(context)
            return jsonify({"success": True, "cleared": cleared}), 200
        except Exception as e:
            return error_response(e, "Protection removal")
