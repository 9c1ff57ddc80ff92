from flask import Blueprint, request, jsonify
from bookez.api.responses import BadRequest, parse_date, parse_enum, bad_request, error_response
from bookez.models import RoomType
from bookez.services.errors import BookingError
from bookez.services.room_service import RoomService
from bookez.services.schedule_service import ScheduleService
from bookez.utils.decorators import token_required, sync_statuses

rooms_bp = Blueprint('rooms', __name__)


@rooms_bp.route('', methods=['GET'])
@token_required
@sync_statuses
def list_rooms(current_member):
    try:
        room_type = parse_enum(RoomType, request.args.get('type'), 'type')
    except BadRequest as e:
        return bad_request(e)
    rooms = RoomService.list_rooms(room_type=room_type, name=request.args.get('name'))
    return jsonify([r.to_dict() for r in rooms])


@rooms_bp.route('/<int:room_id>', methods=['GET'])
@token_required
@sync_statuses
def get_room(current_member, room_id):
    try:
        room = RoomService.get_room(room_id)
    except BookingError as e:
        return error_response(e)
    return jsonify(room.to_dict())


@rooms_bp.route('/<int:room_id>/timeslots', methods=['GET'])
@token_required
@sync_statuses
def get_timeslots(current_member, room_id):
    try:
        target_date = parse_date(request.args.get('date'))
        room = RoomService.get_room(room_id)
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    return jsonify({
        'room_id': room.id,
        'date': target_date.isoformat(),
        'booked': ScheduleService.booked_timeslots(room.id, target_date)
    })
