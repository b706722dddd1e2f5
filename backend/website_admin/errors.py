from flask import jsonify
from werkzeug.exceptions import HTTPException
from website_admin.domain.invariants.exceptions import (
    IllegalTransition,
    InvariantViolation,
    PageNotFound,
    StaleDraft,
)


def _error(name, message, status_code):
    response = jsonify({
        "error": name,
        "message": message,
    })
    response.status_code = status_code
    return response


def register_error_handlers(app):
    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        return _error("InvariantViolation", str(error), 400)

    @app.errorhandler(IllegalTransition)
    def handle_illegal_transition(error):
        return _error("IllegalTransition", str(error), 409)

    @app.errorhandler(StaleDraft)
    def handle_stale_draft(error):
        return _error("StaleDraft", str(error), 409)

    @app.errorhandler(PageNotFound)
    def handle_page_not_found(error):
        return _error("NotFound", str(error), 404)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return _error(error.name, error.description, error.code)
