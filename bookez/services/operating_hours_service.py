from datetime import date, time
from flask import current_app
from bookez.models import OperatingHours, Holiday, Booking, Schedule, BookingStatus
from bookez.extensions import db
from bookez.services.errors import PolicyViolation, ConflictError, NotFoundError
from bookez.utils.db import commit

WEEKDAY_NAMES = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']


class OperatingHoursService:

    @staticmethod
    def is_holiday(target_date: date) -> bool:
        return Holiday.query.filter_by(date=target_date).first() is not None

    @staticmethod
    def check_holiday(target_date: date):
        """Return (allowed, reason) for a booking date."""
        holiday = Holiday.query.filter_by(date=target_date).first()
        if holiday:
            return False, f"Bookings are not allowed on {target_date.isoformat()}: {holiday.description}"
        return True, "OK"

    @staticmethod
    def check_operating_window(weekday: int, start: time, end: time):
        """
        Return (allowed, reason) for a start/end time on a weekday.
        Weekdays without a configured row fall back to the default working hours.
        """
        hours = OperatingHours.query.filter_by(weekday=weekday).first()
        if hours is None:
            open_time = time(current_app.config['WORKING_HOURS_START'])
            close_time = time(current_app.config['WORKING_HOURS_END'])
        else:
            if not hours.is_active:
                return False, f"The library is closed on {WEEKDAY_NAMES[weekday]}."
            open_time, close_time = hours.open_time, hours.close_time

        # Both ends must be inside the window
        if start < open_time:
            return False, (f"Start time {start.strftime('%H:%M')} is before opening time "
                           f"{open_time.strftime('%H:%M')}.")
        if end > close_time:
            return False, (f"End time {end.strftime('%H:%M')} is after closing time "
                           f"{close_time.strftime('%H:%M')}.")
        return True, "OK"

    @staticmethod
    def validate(target_date: date, start: time, end: time):
        """Raise PolicyViolation if the date is a holiday or outside operating hours."""
        allowed, reason = OperatingHoursService.check_holiday(target_date)
        if not allowed:
            raise PolicyViolation(reason)
        allowed, reason = OperatingHoursService.check_operating_window(target_date.weekday(), start, end)
        if not allowed:
            raise PolicyViolation(reason)

    # --- ADMINISTRATION ---

    @staticmethod
    def list_operating_hours():
        return OperatingHours.query.order_by(OperatingHours.weekday).all()

    @staticmethod
    def update_operating_hours(weekday, open_time, close_time, is_active, updated_by):
        if weekday not in range(7):
            raise PolicyViolation("Weekday must be between 0 (Monday) and 6 (Sunday).")
        if open_time >= close_time:
            raise PolicyViolation("Opening time must be earlier than closing time.")

        hours = OperatingHours.query.filter_by(weekday=weekday).first()
        if hours is None:
            hours = OperatingHours(weekday=weekday)
            db.session.add(hours)
        hours.open_time = open_time
        hours.close_time = close_time
        hours.is_active = is_active
        hours.updated_by = updated_by
        commit("updating operating hours")
        return hours

    @staticmethod
    def list_holidays(upcoming_from: date = None):
        query = Holiday.query
        if upcoming_from:
            query = query.filter(Holiday.date >= upcoming_from)
            return query.order_by(Holiday.date.asc()).all()
        return query.order_by(Holiday.date.desc()).all()

    @staticmethod
    def count_active_bookings_on(target_date: date) -> int:
        return Booking.query.join(Schedule).filter(
            Schedule.date == target_date,
            Booking.status == BookingStatus.AKTIF
        ).count()

    @staticmethod
    def create_holiday(target_date: date, description: str, created_by: str, today: date):
        """
        Create a holiday. Returns (holiday, active_booking_count) so the caller
        can warn about bookings that already exist on that date.
        """
        if not description:
            raise PolicyViolation("Holiday description is required.")
        if target_date < today:
            raise PolicyViolation("Holidays cannot be added in the past.")
        if OperatingHoursService.is_holiday(target_date):
            raise ConflictError("This date is already registered as a holiday.")

        active_count = OperatingHoursService.count_active_bookings_on(target_date)
        if active_count:
            current_app.logger.warning(
                f"Adding holiday on {target_date} while {active_count} active booking(s) exist."
            )

        holiday = Holiday(date=target_date, description=description, created_by=created_by)
        db.session.add(holiday)
        commit("creating holiday")
        return holiday, active_count

    @staticmethod
    def update_holiday(holiday_id, target_date: date, description: str):
        holiday = db.session.get(Holiday, holiday_id)
        if not holiday:
            raise NotFoundError("Holiday not found.")
        if not description:
            raise PolicyViolation("Holiday description is required.")

        existing = Holiday.query.filter_by(date=target_date).first()
        if existing and existing.id != holiday.id:
            raise ConflictError("This date is already registered as a holiday.")

        holiday.date = target_date
        holiday.description = description
        commit("updating holiday")
        return holiday

    @staticmethod
    def delete_holiday(holiday_id):
        holiday = db.session.get(Holiday, holiday_id)
        if not holiday:
            raise NotFoundError("Holiday not found.")
        db.session.delete(holiday)
        commit("deleting holiday")

