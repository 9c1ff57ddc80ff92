from datetime import date, time, datetime
import pytest
from bookez.models import BookingStatus, AccountRole
from bookez.services.booking_service import BookingService
from bookez.services.errors import PolicyViolation, ConflictError, EligibilityError, StateError, NotFoundError

DAY = date(2025, 6, 1)


@pytest.fixture
def booking(app, leader, participant, room, ctx_for):
    outcome = BookingService.create_booking(ctx_for(leader), room.id, DAY, time(10, 0), time(11, 0), [participant.id])
    assert outcome.ok
    return outcome.value


def at(hour, minute=0, day=DAY):
    return datetime.combine(day, time(hour, minute))


# --- RESCHEDULE ---

def test_reschedule_moves_schedule_in_place(app, booking, leader, ctx_for):
    schedule_id = booking.schedule.id
    outcome = BookingService.reschedule(ctx_for(leader, at(8)), booking.id, DAY, time(13, 0), time(14, 30),
                                        reason='Lecture moved')

    assert outcome.ok
    assert booking.schedule.id == schedule_id
    assert booking.schedule.start_time == time(13, 0)
    assert booking.schedule.reschedule_reason == 'Lecture moved'
    assert booking.duration_minutes == 90


def test_reschedule_within_an_hour_of_start_is_rejected(app, booking, leader, ctx_for):
    outcome = BookingService.reschedule(ctx_for(leader, at(9, 30)), booking.id, DAY, time(13, 0), time(14, 0))

    assert isinstance(outcome.error, StateError)
    assert booking.schedule.start_time == time(10, 0)


def test_reschedule_exactly_one_hour_before_is_allowed(app, booking, leader, ctx_for):
    outcome = BookingService.reschedule(ctx_for(leader, at(9)), booking.id, DAY, time(13, 0), time(14, 0))
    assert outcome.ok


def test_reschedule_only_by_leader(app, booking, participant, ctx_for):
    outcome = BookingService.reschedule(ctx_for(participant, at(8)), booking.id, DAY, time(13, 0), time(14, 0))
    assert isinstance(outcome.error, EligibilityError)


def test_reschedule_after_check_in_is_rejected(app, booking, leader, participant, ctx_for):
    BookingService.check_in(ctx_for(participant, at(8)), booking.id)
    outcome = BookingService.reschedule(ctx_for(leader, at(8)), booking.id, DAY, time(13, 0), time(14, 0))
    assert isinstance(outcome.error, StateError)


def test_reschedule_uses_five_minute_buffer(app, booking, leader, ctx_for):
    outcome = BookingService.reschedule(ctx_for(leader, at(8)), booking.id, DAY, time(8, 3), time(9, 0))
    assert isinstance(outcome.error, PolicyViolation)


def test_reschedule_ignores_own_slot_but_not_others(app, booking, leader, make_member, room, ctx_for):
    outcome = BookingService.reschedule(ctx_for(leader, at(8)), booking.id, DAY, time(10, 30), time(11, 30))
    assert outcome.ok

    other, friend = make_member(), make_member()
    assert BookingService.create_booking(ctx_for(other), room.id, DAY, time(12, 0), time(13, 0), [friend.id]).ok

    outcome = BookingService.reschedule(ctx_for(leader, at(8)), booking.id, DAY, time(12, 30), time(13, 30))
    assert isinstance(outcome.error, ConflictError)


# --- CANCEL ---

def test_cancel_by_leader(app, booking, leader, ctx_for):
    outcome = BookingService.cancel(ctx_for(leader, at(8)), booking.id)
    assert outcome.ok
    assert booking.status == BookingStatus.DIBATALKAN

    outcome = BookingService.cancel(ctx_for(leader, at(8)), booking.id)
    assert isinstance(outcome.error, StateError)


def test_cancel_by_participant_is_rejected(app, booking, participant, ctx_for):
    outcome = BookingService.cancel(ctx_for(participant, at(8)), booking.id)
    assert isinstance(outcome.error, EligibilityError)
    assert booking.status == BookingStatus.AKTIF


def test_cancel_unknown_booking(app, leader, ctx_for):
    outcome = BookingService.cancel(ctx_for(leader, at(8)), 12345)
    assert isinstance(outcome.error, NotFoundError)


# --- CHECK-IN ---

def test_self_check_in_keeps_first_timestamp(app, booking, participant, ctx_for):
    BookingService.check_in(ctx_for(participant, at(9, 50)), booking.id)
    BookingService.check_in(ctx_for(participant, at(10, 5)), booking.id)

    entry = booking.roster_entry(participant.id)
    assert entry.checked_in
    assert entry.checked_in_at == at(9, 50)


def test_check_in_only_on_booking_date(app, booking, participant, ctx_for):
    outcome = BookingService.check_in(ctx_for(participant, datetime(2025, 5, 31, 10, 0)), booking.id)
    assert isinstance(outcome.error, StateError)


def test_user_cannot_check_in_someone_else(app, booking, leader, participant, ctx_for):
    outcome = BookingService.check_in(ctx_for(leader, at(9)), booking.id, member_id=participant.id)
    assert isinstance(outcome.error, EligibilityError)


def test_admin_check_in_and_check_in_all(app, booking, leader, participant, make_member, ctx_for):
    admin = make_member(role=AccountRole.ADMIN)

    outcome = BookingService.check_in(ctx_for(admin, at(9)), booking.id, member_id=participant.id)
    assert outcome.ok
    assert booking.checked_in_count == 1

    outcome = BookingService.check_in_all(ctx_for(leader, at(9)), booking.id)
    assert isinstance(outcome.error, EligibilityError)

    outcome = BookingService.check_in_all(ctx_for(admin, at(9, 30)), booking.id)
    assert outcome.ok
    assert booking.checked_in_count == 2
    assert booking.roster_entry(participant.id).checked_in_at == at(9)


def test_check_in_member_outside_roster(app, booking, make_member, ctx_for):
    admin = make_member(role=AccountRole.SUPER_ADMIN)
    stranger = make_member()
    outcome = BookingService.check_in(ctx_for(admin, at(9)), booking.id, member_id=stranger.id)
    assert isinstance(outcome.error, NotFoundError)


# --- COMPLETE ---

def test_complete_during_booking(app, booking, leader, ctx_for):
    notified = []
    app.extensions['bookez_completion_listeners'] = (notified.append,)

    outcome = BookingService.complete(ctx_for(leader, at(10, 30)), booking.id)

    assert outcome.ok
    assert booking.status == BookingStatus.SELESAI
    assert notified == [booking]


@pytest.mark.parametrize('now', [at(9, 59), at(11, 1), datetime(2025, 5, 31, 10, 30), datetime(2025, 6, 2, 10, 30)])
def test_complete_outside_window_is_rejected(app, booking, leader, ctx_for, now):
    outcome = BookingService.complete(ctx_for(leader, now), booking.id)
    assert isinstance(outcome.error, StateError)
    assert booking.status == BookingStatus.AKTIF


def test_complete_only_by_leader(app, booking, participant, ctx_for):
    outcome = BookingService.complete(ctx_for(participant, at(10, 30)), booking.id)
    assert isinstance(outcome.error, EligibilityError)


# --- READ ---

def test_get_booking_access(app, booking, leader, make_member, ctx_for):
    assert BookingService.get_booking(ctx_for(leader), booking.id).ok
    assert isinstance(BookingService.get_booking(ctx_for(make_member()), booking.id).error, EligibilityError)
    assert BookingService.get_booking(ctx_for(make_member(role=AccountRole.ADMIN)), booking.id).ok


def test_filter_bookings_and_statistics(app, booking, leader, make_member, room, ctx_for):
    other, friend = make_member(), make_member()
    second = BookingService.create_booking(ctx_for(other), room.id, DAY, time(13, 0), time(14, 0), [friend.id]).value
    BookingService.cancel(ctx_for(other), second.id)

    page = BookingService.filter_bookings(status=BookingStatus.AKTIF)
    assert [b.id for b in page.items] == [booking.id]

    page = BookingService.filter_bookings(name=other.username)
    assert [b.id for b in page.items] == [second.id]

    page = BookingService.filter_bookings(booking_date=DAY, per_page=1)
    assert page.total == 2 and page.pages == 2

    stats = BookingService.statistics(DAY)
    assert stats['total'] == 2
    assert stats['by_status']['DIBATALKAN'] == 1
    assert stats['active_today'] == 1


def test_completion_listeners_are_registered_per_app(app):
    from bookez.services.notification_service import NotificationService
    assert app.extensions['bookez_completion_listeners'] == (NotificationService.booking_completed,)


def test_admin_check_in_accepts_numeric_member_id(app, booking, make_member, make_room, ctx_for):
    admin = make_member(role=AccountRole.ADMIN)
    numeric = make_member('2301')
    other = BookingService.create_booking(ctx_for(numeric), make_room(name='Ruang Angka').id, DAY,
                                          time(13, 0), time(14, 0), [make_member().id]).value

    outcome = BookingService.check_in(ctx_for(admin, at(12, 55)), other.id, member_id=2301)

    assert outcome.ok
    assert other.roster_entry('2301').checked_in
