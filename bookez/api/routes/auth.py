from flask import Blueprint, request, jsonify, current_app
from bookez.extensions import db
from bookez.models import Member
from bookez.utils.decorators import token_required
from werkzeug.security import check_password_hash
import jwt
from datetime import datetime, timedelta, timezone

auth_bp = Blueprint('auth', __name__)


def issue_token(member):
    return jwt.encode({
        'member_id': member.id,
        'role': member.role.value,
        'exp': datetime.now(timezone.utc) + timedelta(hours=current_app.config['JWT_EXPIRY_HOURS'])
    }, current_app.config['SECRET_KEY'], algorithm="HS256")


@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    member_id = (data.get('member_id') or '').strip()
    password = data.get('password') or ''

    member = db.session.get(Member, member_id) if member_id else None
    if not member or not member.password_hash or not check_password_hash(member.password_hash, password):
        return jsonify({'message': 'Invalid credentials'}), 401
    if not member.is_active_account:
        return jsonify({'message': 'Your account is inactive. Contact an administrator.'}), 403

    current_app.logger.info(f"Member {member.id} logged in")
    return jsonify({'token': issue_token(member), 'member': member.to_dict()})


@auth_bp.route('/me', methods=['GET'])
@token_required
def whoami(current_member):
    return jsonify(current_member.to_dict())
