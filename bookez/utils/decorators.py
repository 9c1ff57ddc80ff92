from functools import wraps
from flask import request, jsonify, current_app
import jwt
from bookez.extensions import db
from bookez.models import Member, AccountRole
from bookez.services.errors import InfrastructureError
from bookez.utils import clock


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        if 'Authorization' in request.headers:
            # Bearer <token>
            auth_header = request.headers['Authorization']
            if auth_header.startswith("Bearer "):
                token = auth_header.split(" ")[1]

        if not token:
            return jsonify({'message': 'Token is missing!'}), 401

        try:
            data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            return jsonify({'message': 'Token is invalid!', 'error': str(e)}), 401

        current_member = db.session.get(Member, data.get('member_id'))
        if not current_member:
            return jsonify({'message': 'Token is invalid!', 'error': 'Member not found'}), 401
        if not current_member.is_active_account:
            return jsonify({'message': 'Account is inactive'}), 403

        return f(current_member, *args, **kwargs)

    return decorated


def admin_required(f):
    # Stack below token_required: the member arrives as the first argument
    @wraps(f)
    def decorated(*args, **kwargs):
        current_member = args[0]
        if not current_member.role.is_elevated:
            return jsonify({'message': 'Admin privilege required'}), 403
        return f(*args, **kwargs)
    return decorated


def super_admin_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        current_member = args[0]
        if current_member.role != AccountRole.SUPER_ADMIN:
            return jsonify({'message': 'Super admin privilege required'}), 403
        return f(*args, **kwargs)
    return decorated


def sync_statuses(f):
    """Bring booking and room statuses up to date before the view runs."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if current_app.config.get('SYNC_STATUSES_ON_READ', True):
            from bookez.services.status_service import get_status_engine
            try:
                get_status_engine().run(clock.now())
            except InfrastructureError:
                return jsonify({'error': 'server_error', 'message': 'Internal Server Error'}), 500
        return f(*args, **kwargs)
    return decorated
