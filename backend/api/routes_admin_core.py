"""
Admin core routes: authentication.
"""
from flask import Blueprint, jsonify, request

from core.auth import (
    check_rate_limit,
    clear_login_attempts,
    create_jwt_token,
    get_client_ip,
    record_failed_login,
    verify_password,
)
from core.logger import logger


def register_admin_core_routes(api: Blueprint) -> None:
    """Register admin auth routes on the given blueprint."""

    @api.route("/admin/login", methods=["POST"])
    def admin_login():
        """Verify admin password and return JWT token."""
        try:
            if not check_rate_limit():
                logger.warning(f"Rate limit exceeded for IP: {get_client_ip()}")
                return (
                    jsonify(
                        {
                            "success": False,
                            "error": "Too many login attempts. Please try again later.",
                        }
                    ),
                    429,
                )

            data = request.get_json(silent=True) or {}
            password = data.get("password", "")

            if verify_password(password):
                clear_login_attempts(get_client_ip())
                logger.info(f"Admin login successful from IP: {get_client_ip()}")
                return (
                    jsonify(
                        {
                            "success": True,
                            "message": "Login successful",
                            "token": create_jwt_token(),
                        }
                    ),
                    200,
                )

            record_failed_login()
            logger.warning(f"Failed login attempt from IP: {get_client_ip()}")
            return jsonify({"success": False, "error": "Invalid password"}), 401
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error in admin login: {str(e)}", exc_info=True)
            return jsonify({"error": "Internal server error"}), 500
