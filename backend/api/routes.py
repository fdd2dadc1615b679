from flask import Blueprint

from api.routes_admin_core import register_admin_core_routes
from api.routes_classes import register_class_routes
from api.routes_replication import register_replication_routes
from core.config import AppConfig
from core.logger import logger


def create_api(workbook_manager=None) -> Blueprint:
    """Blueprint with every route group registered on it."""
    api = Blueprint("api", __name__)
    register_admin_core_routes(api)
    register_class_routes(api, workbook_manager)
    register_replication_routes(api, workbook_manager)
    return api


def init_workbook_manager():
    """Workbook manager built from the environment, or None if Google access is not configured."""
    try:
        from sheets.workbook_manager import WorkbookAdminManager

        return WorkbookAdminManager(AppConfig.from_env())
    except Exception as e:  # pragma: no cover - defensive
        logger.warning(f"Workbook manager not initialized: {type(e).__name__}: {e}")
        return None
