from flask import Blueprint, request, jsonify
from bookez.api.responses import (
    BadRequest, parse_date, parse_time, require_int, require_json, bad_request, server_error, outcome_response
)
from bookez.services.booking_service import BookingService
from bookez.services.feedback_service import FeedbackService
from bookez.services.errors import InfrastructureError
from bookez.utils.context import RequestContext
from bookez.utils.decorators import token_required, sync_statuses

bookings_bp = Blueprint('bookings', __name__)


def _parse_window(data):
    return (
        parse_date(data.get('date')),
        parse_time(data.get('start_time'), 'start_time'),
        parse_time(data.get('end_time'), 'end_time')
    )


@bookings_bp.route('', methods=['POST'])
@token_required
@sync_statuses
def create_booking(current_member):
    try:
        data = require_json(request)
        booking_date, start, end = _parse_window(data)
        participants = data.get('participant_ids') or []
        if not isinstance(participants, list):
            raise BadRequest("'participant_ids' must be a list of member ids.")

        outcome = BookingService.create_booking(
            RequestContext.for_member(current_member),
            room_id=require_int(data.get('room_id'), 'room_id'),
            booking_date=booking_date,
            start=start,
            end=end,
            participant_ids=participants
        )
        return outcome_response(outcome, 201)
    except BadRequest as e:
        return bad_request(e)
    except InfrastructureError as e:
        return server_error(e, "creating booking")


@bookings_bp.route('/mine', methods=['GET'])
@token_required
@sync_statuses
def get_my_bookings(current_member):
    bookings = BookingService.get_member_bookings(current_member.id)
    return jsonify([b.to_dict() for b in bookings])


@bookings_bp.route('/<int:booking_id>', methods=['GET'])
@token_required
@sync_statuses
def get_booking(current_member, booking_id):
    outcome = BookingService.get_booking(RequestContext.for_member(current_member), booking_id)
    return outcome_response(outcome)


@bookings_bp.route('/<int:booking_id>/schedule', methods=['PUT'])
@token_required
@sync_statuses
def reschedule_booking(current_member, booking_id):
    try:
        data = require_json(request)
        booking_date, start, end = _parse_window(data)
        outcome = BookingService.reschedule(
            RequestContext.for_member(current_member),
            booking_id,
            booking_date, start, end,
            reason=data.get('reason')
        )
        return outcome_response(outcome)
    except BadRequest as e:
        return bad_request(e)
    except InfrastructureError as e:
        return server_error(e, "rescheduling booking")


@bookings_bp.route('/<int:booking_id>', methods=['DELETE'])
@token_required
@sync_statuses
def cancel_booking(current_member, booking_id):
    try:
        outcome = BookingService.cancel(RequestContext.for_member(current_member), booking_id)
        return outcome_response(outcome)
    except InfrastructureError as e:
        return server_error(e, "cancelling booking")


@bookings_bp.route('/<int:booking_id>/check-in', methods=['POST'])
@token_required
@sync_statuses
def check_in(current_member, booking_id):
    data = request.get_json(silent=True) or {}
    try:
        outcome = BookingService.check_in(
            RequestContext.for_member(current_member), booking_id, member_id=data.get('member_id')
        )
        return outcome_response(outcome)
    except InfrastructureError as e:
        return server_error(e, "checking in")


@bookings_bp.route('/<int:booking_id>/complete', methods=['POST'])
@token_required
@sync_statuses
def complete_booking(current_member, booking_id):
    try:
        outcome = BookingService.complete(RequestContext.for_member(current_member), booking_id)
        return outcome_response(outcome)
    except InfrastructureError as e:
        return server_error(e, "completing booking")


@bookings_bp.route('/<int:booking_id>/feedback', methods=['POST'])
@token_required
@sync_statuses
def submit_feedback(current_member, booking_id):
    try:
        data = require_json(request)
        if data.get('rating') is None:
            raise BadRequest("'rating' is required.")
        outcome = FeedbackService.submit_feedback(
            RequestContext.for_member(current_member), booking_id, data['rating'], data.get('comment')
        )
        return outcome_response(outcome, 201)
    except BadRequest as e:
        return bad_request(e)
    except InfrastructureError as e:
        return server_error(e, "saving feedback")
