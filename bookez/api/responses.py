from datetime import datetime
from flask import jsonify, current_app
from bookez.services.errors import BookingError


class BadRequest(ValueError):
    """Malformed request payload or query string."""


def parse_date(value, field='date'):
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise BadRequest(f"'{field}' must be a date in YYYY-MM-DD format.")


def parse_time(value, field):
    try:
        return datetime.strptime(value, '%H:%M').time()
    except (TypeError, ValueError):
        raise BadRequest(f"'{field}' must be a time in HH:MM format.")


def parse_enum(enum_cls, value, field):
    if value is None or value == '':
        return None
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ', '.join(e.value for e in enum_cls)
        raise BadRequest(f"'{field}' must be one of: {allowed}.")


def parse_int(value, field, default=None):
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{field}' must be an integer.")


def require_int(value, field):
    if isinstance(value, bool):
        raise BadRequest(f"'{field}' must be an integer.")
    parsed = parse_int(value, field)
    if parsed is None:
        raise BadRequest(f"'{field}' is required.")
    return parsed


def require_json(request):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("No input data provided")
    return data


def bad_request(e):
    return jsonify({'error': 'bad_request', 'message': str(e)}), 400


def error_response(error: BookingError):
    return jsonify(error.to_dict()), error.http_status


def server_error(e, action):
    current_app.logger.error(f"Error {action}: {e}", exc_info=True)
    return jsonify({'error': 'server_error', 'message': 'Internal Server Error'}), 500


def outcome_response(outcome, status=200, render=None):
    if not outcome.ok:
        return error_response(outcome.error)
    value = outcome.value
    return jsonify(render(value) if render else value.to_dict()), status
