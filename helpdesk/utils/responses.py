"""JSON error responses shared by the API blueprints."""

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from helpdesk.exceptions import DomainException
from helpdesk.utils.messages import ERROR_INVALID_INPUT


def json_error(message, status=400, code=None, **extra):
    body = {'message': str(message)}
    if code:
        body['code'] = code
    body.update(extra)
    return jsonify(body), status


def form_errors(form):
    return {name: [str(m) for m in messages] for name, messages in form.errors.items()}


def form_error_response(form):
    return json_error(ERROR_INVALID_INPUT, 400, code='VALIDATION_ERROR', errors=form_errors(form))


def handle_domain_exception(error: DomainException):
    current_app.logger.info(f"{error.code}: {error.message}")
    return json_error(error.message, error.status_code, code=error.code)


def handle_unexpected_exception(error):
    if isinstance(error, HTTPException):
        return json_error(error.description, error.code, code=error.name.upper().replace(' ', '_'))
    current_app.logger.exception(f"Unhandled error: {error}")
    return json_error('Internal server error', 500, code='INTERNAL_ERROR')


def register_error_handlers(app):
    app.register_error_handler(DomainException, handle_domain_exception)
    app.register_error_handler(Exception, handle_unexpected_exception)
