from flask import Blueprint, request, jsonify
from bookez.api.responses import (
    BadRequest, parse_date, parse_time, parse_enum, parse_int, require_int, require_json,
    bad_request, error_response, server_error, outcome_response
)
from bookez.models import RoomType, RoomStatus, BookingStatus, AccountRole, AccountStatus
from bookez.services.booking_service import BookingService
from bookez.services.errors import BookingError, InfrastructureError
from bookez.services.feedback_service import FeedbackService
from bookez.services.member_service import MemberService
from bookez.services.operating_hours_service import OperatingHoursService
from bookez.services.report_service import ReportService, PERIODS
from bookez.services.room_service import RoomService
from bookez.services.suspension_service import SuspensionService
from bookez.utils.context import RequestContext
from bookez.utils.decorators import token_required, admin_required, super_admin_required, sync_statuses
from bookez.utils import clock

admin_bp = Blueprint('admin', __name__)


# --- ROOMS MANAGEMENT ---

def _room_fields(data, partial):
    fields = {}
    for key in ('name', 'description', 'rules', 'photo'):
        if key in data:
            if data[key] is not None and not isinstance(data[key], str):
                raise BadRequest(f"'{key}' must be a string.")
            fields[key] = data[key].strip() if data[key] else data[key]
    for key in ('min_capacity', 'max_capacity'):
        if key in data:
            fields[key] = parse_int(data[key], key)
    for key, enum_cls in (('room_type', RoomType), ('status', RoomStatus)):
        if key in data:
            fields[key] = parse_enum(enum_cls, data[key], key)
            if fields[key] is None:
                raise BadRequest(f"'{key}' cannot be empty.")
    if not partial:
        for key in ('name', 'room_type', 'min_capacity', 'max_capacity'):
            if fields.get(key) is None:
                raise BadRequest(f"'{key}' is required.")
    return fields


@admin_bp.route('/rooms', methods=['GET'])
@token_required
@admin_required
@sync_statuses
def get_rooms(current_member):
    try:
        room_type = parse_enum(RoomType, request.args.get('type'), 'type')
    except BadRequest as e:
        return bad_request(e)
    rooms = RoomService.list_rooms(room_type=room_type, name=request.args.get('name'))
    return jsonify([r.to_dict() for r in rooms]), 200


@admin_bp.route('/rooms', methods=['POST'])
@token_required
@admin_required
def create_room(current_member):
    try:
        fields = _room_fields(require_json(request), partial=False)
        room = RoomService.create_room(**fields)
        return jsonify({'message': 'Room created', 'room': room.to_dict()}), 201
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "creating room")


@admin_bp.route('/rooms/<int:room_id>', methods=['PUT'])
@token_required
@admin_required
def update_room(current_member, room_id):
    try:
        fields = _room_fields(require_json(request), partial=True)
        room = RoomService.update_room(room_id, **fields)
        return jsonify({'message': 'Room updated', 'room': room.to_dict()}), 200
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "updating room")


@admin_bp.route('/rooms/<int:room_id>', methods=['DELETE'])
@token_required
@admin_required
@sync_statuses
def delete_room(current_member, room_id):
    try:
        deleted = RoomService.delete_room(room_id)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "deleting room")
    if deleted:
        return jsonify({'message': 'Room deleted'}), 200
    return jsonify({'message': 'Room has booking history and was marked UNAVAILABLE instead'}), 200


# --- BOOKINGS ---

@admin_bp.route('/bookings', methods=['GET'])
@token_required
@admin_required
@sync_statuses
def list_bookings(current_member):
    args = request.args
    try:
        booking_date = parse_date(args['date']) if args.get('date') else None
        pagination = BookingService.filter_bookings(
            room_id=parse_int(args.get('room_id'), 'room_id'),
            status=parse_enum(BookingStatus, args.get('status'), 'status'),
            booking_date=booking_date,
            name=args.get('name'),
            page=parse_int(args.get('page'), 'page', default=1),
            per_page=parse_int(args.get('per_page'), 'per_page')
        )
    except BadRequest as e:
        return bad_request(e)
    return jsonify({
        'items': [b.to_dict() for b in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total
    })


@admin_bp.route('/bookings/<int:booking_id>/check-in', methods=['POST'])
@token_required
@admin_required
@sync_statuses
def check_in_member(current_member, booking_id):
    try:
        data = require_json(request)
        if not data.get('member_id'):
            raise BadRequest("'member_id' is required.")
        outcome = BookingService.check_in(
            RequestContext.for_member(current_member), booking_id, member_id=data['member_id']
        )
        return outcome_response(outcome)
    except BadRequest as e:
        return bad_request(e)
    except InfrastructureError as e:
        return server_error(e, "checking in member")


@admin_bp.route('/bookings/<int:booking_id>/check-in-all', methods=['POST'])
@token_required
@admin_required
@sync_statuses
def check_in_all(current_member, booking_id):
    try:
        outcome = BookingService.check_in_all(RequestContext.for_member(current_member), booking_id)
        return outcome_response(outcome)
    except InfrastructureError as e:
        return server_error(e, "checking in all members")


@admin_bp.route('/stats', methods=['GET'])
@token_required
@admin_required
@sync_statuses
def booking_stats(current_member):
    return jsonify(BookingService.statistics(clock.now().date()))


@admin_bp.route('/reports', methods=['GET'])
@token_required
@admin_required
@sync_statuses
def usage_report(current_member):
    period = (request.args.get('period') or 'day').lower()
    try:
        if period not in PERIODS:
            raise BadRequest(f"'period' must be one of: {', '.join(PERIODS)}.")
        reference = parse_date(request.args['date']) if request.args.get('date') else clock.now().date()
    except BadRequest as e:
        return bad_request(e)
    report = ReportService.usage_report(period, reference)
    report['available_years'] = ReportService.available_years()
    return jsonify(report)


@admin_bp.route('/reports/feedback', methods=['GET'])
@token_required
@admin_required
def feedback_report(current_member):
    try:
        limit = parse_int(request.args.get('limit'), 'limit', default=10)
    except BadRequest as e:
        return bad_request(e)
    return jsonify(FeedbackService.summary(limit=max(1, min(limit, 100))))


# --- MEMBERS ---

@admin_bp.route('/members', methods=['GET'])
@token_required
@admin_required
def list_members(current_member):
    try:
        members = MemberService.list_members(
            search=request.args.get('search'),
            role=parse_enum(AccountRole, request.args.get('role'), 'role'),
            status=parse_enum(AccountStatus, request.args.get('status'), 'status')
        )
    except BadRequest as e:
        return bad_request(e)
    return jsonify([m.to_dict() for m in members])


@admin_bp.route('/members/<member_id>/status', methods=['PUT'])
@token_required
@admin_required
def set_member_status(current_member, member_id):
    try:
        data = require_json(request)
        status = parse_enum(AccountStatus, data.get('status'), 'status')
        if status is None:
            raise BadRequest("'status' is required.")
        member = MemberService.set_status(current_member.id, member_id, status)
        return jsonify({'message': 'Member updated', 'member': member.to_dict()})
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "updating member status")


@admin_bp.route('/members/<member_id>/violations', methods=['GET'])
@token_required
@admin_required
@sync_statuses
def member_violations(current_member, member_id):
    try:
        MemberService.get_member(member_id)
    except BookingError as e:
        return error_response(e)
    standing = MemberService.standing(member_id, clock.now())
    standing['violations'] = [v.to_dict() for v in SuspensionService.violation_history(member_id)]
    standing['suspensions'] = [s.to_dict() for s in SuspensionService.suspension_history(member_id)]
    return jsonify(standing)


# --- EXTERNAL BOOKINGS (super admin) ---

@admin_bp.route('/external-bookings', methods=['GET'])
@token_required
@super_admin_required
@sync_statuses
def list_external_bookings(current_member):
    try:
        pagination = BookingService.filter_bookings(
            status=parse_enum(BookingStatus, request.args.get('status'), 'status'),
            name=request.args.get('name'),
            external=True,
            page=parse_int(request.args.get('page'), 'page', default=1)
        )
    except BadRequest as e:
        return bad_request(e)
    return jsonify({
        'items': [b.to_dict(include_members=False) for b in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total
    })


@admin_bp.route('/external-bookings', methods=['POST'])
@token_required
@super_admin_required
@sync_statuses
def create_external_booking(current_member):
    try:
        data = require_json(request)
        outcome = BookingService.create_external_booking(
            RequestContext.for_member(current_member),
            room_id=require_int(data.get('room_id'), 'room_id'),
            organization_name=data.get('organization_name'),
            booking_date=parse_date(data.get('date')),
            start=parse_time(data.get('start_time'), 'start_time'),
            end=parse_time(data.get('end_time'), 'end_time'),
            attachment=data.get('attachment')
        )
        return outcome_response(outcome, 201, render=lambda b: b.to_dict(include_members=False))
    except BadRequest as e:
        return bad_request(e)
    except InfrastructureError as e:
        return server_error(e, "creating external booking")


@admin_bp.route('/external-bookings/<int:booking_id>', methods=['DELETE'])
@token_required
@super_admin_required
@sync_statuses
def cancel_external_booking(current_member, booking_id):
    try:
        outcome = BookingService.cancel_external(RequestContext.for_member(current_member), booking_id)
        return outcome_response(outcome, render=lambda b: b.to_dict(include_members=False))
    except InfrastructureError as e:
        return server_error(e, "cancelling external booking")


# --- OPERATING HOURS & HOLIDAYS (super admin) ---

@admin_bp.route('/operating-hours', methods=['GET'])
@token_required
@admin_required
def get_operating_hours(current_member):
    return jsonify([h.to_dict() for h in OperatingHoursService.list_operating_hours()])


@admin_bp.route('/operating-hours/<int:weekday>', methods=['PUT'])
@token_required
@super_admin_required
def update_operating_hours(current_member, weekday):
    try:
        data = require_json(request)
        hours = OperatingHoursService.update_operating_hours(
            weekday,
            parse_time(data.get('open_time'), 'open_time'),
            parse_time(data.get('close_time'), 'close_time'),
            bool(data.get('is_active', True)),
            updated_by=current_member.id
        )
        return jsonify({'message': 'Operating hours updated', 'operating_hours': hours.to_dict()})
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "updating operating hours")


@admin_bp.route('/holidays', methods=['GET'])
@token_required
@admin_required
def get_holidays(current_member):
    upcoming = request.args.get('upcoming') in ('1', 'true')
    holidays = OperatingHoursService.list_holidays(upcoming_from=clock.now().date() if upcoming else None)
    return jsonify([h.to_dict() for h in holidays])


@admin_bp.route('/holidays', methods=['POST'])
@token_required
@super_admin_required
def create_holiday(current_member):
    try:
        data = require_json(request)
        holiday, active_count = OperatingHoursService.create_holiday(
            parse_date(data.get('date')),
            (data.get('description') or '').strip(),
            created_by=current_member.id,
            today=clock.now().date()
        )
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "creating holiday")

    body = {'message': 'Holiday created', 'holiday': holiday.to_dict()}
    if active_count:
        body['warning'] = (f"There are {active_count} active booking(s) on this date. "
                           f"They are not cancelled automatically.")
    return jsonify(body), 201


@admin_bp.route('/holidays/<int:holiday_id>', methods=['PUT'])
@token_required
@super_admin_required
def update_holiday(current_member, holiday_id):
    try:
        data = require_json(request)
        holiday = OperatingHoursService.update_holiday(
            holiday_id, parse_date(data.get('date')), (data.get('description') or '').strip()
        )
        return jsonify({'message': 'Holiday updated', 'holiday': holiday.to_dict()})
    except BadRequest as e:
        return bad_request(e)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "updating holiday")


@admin_bp.route('/holidays/<int:holiday_id>', methods=['DELETE'])
@token_required
@super_admin_required
def delete_holiday(current_member, holiday_id):
    try:
        OperatingHoursService.delete_holiday(holiday_id)
    except BookingError as e:
        return error_response(e)
    except InfrastructureError as e:
        return server_error(e, "deleting holiday")
    return jsonify({'message': 'Holiday deleted'})
