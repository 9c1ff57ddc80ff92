from flask import Blueprint, jsonify
from bookez.api.responses import error_response
from bookez.services.errors import BookingError
from bookez.services.member_service import MemberService
from bookez.utils.decorators import token_required

members_bp = Blueprint('members', __name__)


@members_bp.route('/<member_id>', methods=['GET'])
@token_required
def lookup_member(current_member, member_id):
    """Used by the booking form to add participants by id."""
    try:
        member = MemberService.lookup(member_id.strip())
    except BookingError as e:
        return error_response(e)
    return jsonify({'id': member.id, 'username': member.username})
