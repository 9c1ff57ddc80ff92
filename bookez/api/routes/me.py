from flask import Blueprint, jsonify
from bookez.services.member_service import MemberService
from bookez.services.booking_service import BookingService
from bookez.utils.decorators import token_required, sync_statuses
from bookez.utils import clock

me_bp = Blueprint('me', __name__)


@me_bp.route('/suspension', methods=['GET'])
@token_required
@sync_statuses
def my_suspension(current_member):
    return jsonify(MemberService.standing(current_member.id, clock.now()))


@me_bp.route('/active-booking', methods=['GET'])
@token_required
@sync_statuses
def my_active_booking(current_member):
    booking = BookingService.active_booking_for(current_member.id)
    return jsonify({'booking': booking.to_dict() if booking else None})
