import logging
from api.utils import error_response
from utils.exceptions import ShopError

logger = logging.getLogger(__name__)

def register_error_handlers(app):
    @app.errorhandler(ShopError)
    def handle_shop_error(error):
        from models import db
        db.session.rollback()
        return error_response(error.message, error.code, error.status_code, error.details)

    @app.errorhandler(404)
    def handle_not_found(error):
        return error_response("Resource not found", "NOT_FOUND", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return error_response("Method not allowed", "METHOD_NOT_ALLOWED", 405)

    @app.errorhandler(500)
    def handle_internal_error(error):
        logger.error(f"Unhandled server error: {error}")
        return error_response("Internal server error", "INTERNAL_ERROR", 500)
