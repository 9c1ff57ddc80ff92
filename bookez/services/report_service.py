from collections import OrderedDict
from datetime import date, timedelta
from bookez.models import Booking, Schedule, Room, BookingStatus
from bookez.extensions import db
from bookez.services.errors import PolicyViolation

PERIODS = ('day', 'week', 'month', 'year')


class ReportService:
    """Usage reports for the admin dashboard, by day, week, month or year."""

    @staticmethod
    def period_bounds(period: str, reference: date):
        """Inclusive (start, end) dates of the period containing `reference`. Weeks start on Monday."""
        if period == 'day':
            return reference, reference
        if period == 'week':
            start = reference - timedelta(days=reference.weekday())
            return start, start + timedelta(days=6)
        if period == 'month':
            start = reference.replace(day=1)
            next_month = (start + timedelta(days=32)).replace(day=1)
            return start, next_month - timedelta(days=1)
        if period == 'year':
            return date(reference.year, 1, 1), date(reference.year, 12, 31)
        raise PolicyViolation(f"Unknown report period '{period}'. Use one of: {', '.join(PERIODS)}.")

    @staticmethod
    def _bucket(period: str, booking_date: date) -> str:
        if period == 'month':
            # Monday of the booking's week
            return (booking_date - timedelta(days=booking_date.weekday())).isoformat()
        if period == 'year':
            return booking_date.strftime('%Y-%m')
        return booking_date.isoformat()

    @staticmethod
    def usage_report(period: str, reference: date):
        start, end = ReportService.period_bounds(period, reference)
        bookings = Booking.query.join(Schedule).filter(
            Schedule.date >= start,
            Schedule.date <= end
        ).order_by(Schedule.date.asc(), Schedule.start_time.asc()).all()

        by_status = {status.value: 0 for status in BookingStatus}
        breakdown = OrderedDict()
        per_room = {}
        total_duration = 0
        for booking in bookings:
            by_status[booking.status.value] += 1
            total_duration += booking.duration_minutes

            bucket = breakdown.setdefault(ReportService._bucket(period, booking.schedule.date),
                                          {'bookings': 0, 'duration_minutes': 0})
            bucket['bookings'] += 1
            bucket['duration_minutes'] += booking.duration_minutes

            usage = per_room.setdefault(booking.room_id, [0, 0])
            usage[0] += 1
            usage[1] += booking.duration_minutes

        room_usage = []
        for room in Room.query.order_by(Room.name.asc()).all():
            count, duration = per_room.get(room.id, (0, 0))
            room_usage.append({
                'room_id': room.id,
                'room_name': room.name,
                'room_type': room.room_type.value,
                'bookings': count,
                'duration_minutes': duration
            })
        # Stable sort keeps rooms with equal counts in name order
        room_usage.sort(key=lambda r: r['bookings'], reverse=True)

        report = {
            'period': period,
            'start': start.isoformat(),
            'end': end.isoformat(),
            'total_bookings': len(bookings),
            'total_duration_minutes': total_duration,
            'average_duration_minutes': round(total_duration / len(bookings), 1) if bookings else 0,
            'by_status': by_status,
            'breakdown': [dict(key=key, **values) for key, values in breakdown.items()],
            'room_usage': room_usage,
            'most_booked_room': room_usage[0]['room_name'] if room_usage and room_usage[0]['bookings'] else None
        }
        if period != 'year':
            report['bookings'] = [b.to_dict(include_members=False) for b in bookings]
        return report

    @staticmethod
    def available_years():
        rows = db.session.query(Schedule.date).distinct().all()
        return sorted({row[0].year for row in rows}, reverse=True)
