from datetime import date, time
from bookez.models import Booking, BookingMember, Schedule, Room, Member, BookingStatus
from bookez.extensions import db


class ScheduleService:

    @staticmethod
    def lock_room(room_id):
        """
        Load the room row with SELECT ... FOR UPDATE so that concurrent creations
        for the same room serialize between the conflict check and the insert.
        """
        return db.session.query(Room).filter(Room.id == room_id).with_for_update().first()

    @staticmethod
    def _active_on(target_date: date):
        return Schedule.query.join(Booking).filter(
            Schedule.date == target_date,
            Booking.status == BookingStatus.AKTIF
        )

    @staticmethod
    def has_room_conflict(room_id, target_date: date, start: time, end: time, exclude_booking_id=None) -> bool:
        """Check if any AKTIF booking of the room overlaps [start, end)."""
        # (StartA < EndB) and (EndA > StartB)
        query = ScheduleService._active_on(target_date).filter(
            Booking.room_id == room_id,
            Schedule.start_time < end,
            Schedule.end_time > start
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.first() is not None

    @staticmethod
    def member_conflicts(member_ids, target_date: date, start: time, end: time, exclude_booking_id=None):
        """Return the members that already hold an overlapping AKTIF booking."""
        if not member_ids:
            return []
        query = db.session.query(Member).join(
            BookingMember, BookingMember.member_id == Member.id
        ).join(
            Booking, Booking.id == BookingMember.booking_id
        ).join(
            Schedule, Schedule.booking_id == Booking.id
        ).filter(
            BookingMember.member_id.in_(member_ids),
            Booking.status == BookingStatus.AKTIF,
            Schedule.date == target_date,
            Schedule.start_time < end,
            Schedule.end_time > start
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.distinct().all()

    @staticmethod
    def booked_timeslots(room_id, target_date: date):
        """Booked windows of a room on a date, for the booking form."""
        schedules = ScheduleService._active_on(target_date).filter(
            Booking.room_id == room_id
        ).order_by(Schedule.start_time).all()
        return [
            {
                'booking_id': s.booking_id,
                'start_time': s.start_time.strftime('%H:%M'),
                'end_time': s.end_time.strftime('%H:%M')
            }
            for s in schedules
        ]
