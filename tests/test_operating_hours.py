from datetime import date, time
import pytest
from bookez.models import Holiday, OperatingHours
from bookez.services.booking_service import BookingService
from bookez.services.operating_hours_service import OperatingHoursService
from bookez.services.errors import PolicyViolation, ConflictError, NotFoundError

MONDAY = date(2025, 6, 2)


def test_fallback_window_without_configured_row(app):
    assert OperatingHoursService.check_operating_window(0, time(8, 0), time(19, 0)) == (True, "OK")
    allowed, reason = OperatingHoursService.check_operating_window(0, time(7, 30), time(9, 0))
    assert not allowed
    assert '07:30' in reason


def test_configured_window(app, leader):
    OperatingHoursService.update_operating_hours(0, time(9, 0), time(15, 0), True, updated_by=leader.id)

    assert OperatingHoursService.check_operating_window(0, time(9, 0), time(15, 0))[0]
    assert not OperatingHoursService.check_operating_window(0, time(8, 30), time(10, 0))[0]
    assert not OperatingHoursService.check_operating_window(0, time(14, 30), time(15, 30))[0]
    # Other weekdays still fall back to the defaults
    assert OperatingHoursService.check_operating_window(1, time(8, 0), time(9, 0))[0]


def test_update_operating_hours_validates(app, leader):
    with pytest.raises(PolicyViolation):
        OperatingHoursService.update_operating_hours(0, time(15, 0), time(9, 0), True, updated_by=leader.id)
    with pytest.raises(PolicyViolation):
        OperatingHoursService.update_operating_hours(7, time(9, 0), time(15, 0), True, updated_by=leader.id)

    hours = OperatingHoursService.update_operating_hours(6, time(9, 0), time(12, 0), False, updated_by=leader.id)
    assert OperatingHours.query.count() == 1
    assert hours.to_dict() == {'weekday': 6, 'open_time': '09:00', 'close_time': '12:00', 'is_active': False}


def test_create_holiday_warns_about_active_bookings(app, leader, participant, room, ctx_for):
    BookingService.create_booking(ctx_for(leader), room.id, MONDAY, time(10, 0), time(11, 0), [participant.id])

    holiday, active_count = OperatingHoursService.create_holiday(MONDAY, 'Idul Adha', leader.id, today=date(2025, 6, 1))

    assert active_count == 1
    assert OperatingHoursService.is_holiday(MONDAY)
    assert holiday.to_dict()['description'] == 'Idul Adha'


def test_create_holiday_rejects_past_and_duplicates(app, leader):
    today = date(2025, 6, 1)
    with pytest.raises(PolicyViolation):
        OperatingHoursService.create_holiday(date(2025, 5, 31), 'Kemarin', leader.id, today=today)
    with pytest.raises(PolicyViolation):
        OperatingHoursService.create_holiday(MONDAY, '', leader.id, today=today)

    OperatingHoursService.create_holiday(MONDAY, 'Idul Adha', leader.id, today=today)
    with pytest.raises(ConflictError):
        OperatingHoursService.create_holiday(MONDAY, 'Duplikat', leader.id, today=today)


def test_update_and_delete_holiday(app, leader):
    holiday, _ = OperatingHoursService.create_holiday(MONDAY, 'Idul Adha', leader.id, today=date(2025, 6, 1))
    other, _ = OperatingHoursService.create_holiday(date(2025, 6, 3), 'Cuti bersama', leader.id,
                                                    today=date(2025, 6, 1))

    with pytest.raises(ConflictError):
        OperatingHoursService.update_holiday(other.id, MONDAY, 'Cuti bersama')

    OperatingHoursService.update_holiday(other.id, date(2025, 6, 4), 'Cuti bersama')
    assert [h.date for h in OperatingHoursService.list_holidays(upcoming_from=date(2025, 6, 1))] == [
        MONDAY, date(2025, 6, 4)
    ]

    OperatingHoursService.delete_holiday(holiday.id)
    assert Holiday.query.count() == 1
    with pytest.raises(NotFoundError):
        OperatingHoursService.delete_holiday(holiday.id)
