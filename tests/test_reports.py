from datetime import date, time, datetime
import pytest
from bookez.services.booking_service import BookingService
from bookez.services.feedback_service import FeedbackService
from bookez.services.report_service import ReportService
from bookez.services.errors import PolicyViolation


@pytest.fixture
def bookings(app, make_member, make_room, room, ctx_for):
    """Three bookings in June 2025 (two in the week of 2 June) and one in July."""
    other_room = make_room(name='Aula Kecil', min_capacity=2, max_capacity=10)
    created = []
    for room_used, day, start, end in [
        (room, date(2025, 6, 2), time(9, 0), time(10, 0)),
        (room, date(2025, 6, 4), time(13, 0), time(13, 30)),
        (other_room, date(2025, 6, 20), time(10, 0), time(12, 0)),
        (room, date(2025, 7, 1), time(8, 0), time(9, 0)),
    ]:
        lead, friend = make_member(), make_member()
        outcome = BookingService.create_booking(ctx_for(lead), room_used.id, day, start, end, [friend.id])
        assert outcome.ok
        created.append((lead, outcome.value))
    return created


@pytest.mark.parametrize('period, reference, expected', [
    ('day', date(2025, 6, 4), (date(2025, 6, 4), date(2025, 6, 4))),
    ('week', date(2025, 6, 4), (date(2025, 6, 2), date(2025, 6, 8))),
    ('month', date(2025, 2, 14), (date(2025, 2, 1), date(2025, 2, 28))),
    ('month', date(2025, 12, 31), (date(2025, 12, 1), date(2025, 12, 31))),
    ('year', date(2025, 6, 4), (date(2025, 1, 1), date(2025, 12, 31))),
])
def test_period_bounds(period, reference, expected):
    assert ReportService.period_bounds(period, reference) == expected


def test_unknown_period(app):
    with pytest.raises(PolicyViolation):
        ReportService.period_bounds('decade', date(2025, 6, 1))


def test_weekly_report(app, bookings, room):
    report = ReportService.usage_report('week', date(2025, 6, 3))

    assert report['start'] == '2025-06-02' and report['end'] == '2025-06-08'
    assert report['total_bookings'] == 2
    assert report['total_duration_minutes'] == 90
    assert report['average_duration_minutes'] == 45.0
    assert report['by_status']['AKTIF'] == 2
    assert [b['key'] for b in report['breakdown']] == ['2025-06-02', '2025-06-04']
    assert report['most_booked_room'] == room.name
    assert len(report['bookings']) == 2


def test_monthly_report_counts_cancellations_and_room_usage(app, bookings, ctx_for):
    lead, cancelled = bookings[1]
    BookingService.cancel(ctx_for(lead), cancelled.id)

    report = ReportService.usage_report('month', date(2025, 6, 15))

    assert report['total_bookings'] == 3
    assert report['by_status']['DIBATALKAN'] == 1
    assert report['total_duration_minutes'] == 60 + 30 + 120
    # Weekly buckets keyed by Monday
    assert [b['key'] for b in report['breakdown']] == ['2025-06-02', '2025-06-16']
    usage = {r['room_name']: (r['bookings'], r['duration_minutes']) for r in report['room_usage']}
    assert usage == {'Ruang Diskusi': (2, 90), 'Aula Kecil': (1, 120)}


def test_yearly_report_groups_by_month(app, bookings):
    report = ReportService.usage_report('year', date(2025, 1, 1))

    assert report['total_bookings'] == 4
    assert report['breakdown'] == [
        {'key': '2025-06', 'bookings': 3, 'duration_minutes': 210},
        {'key': '2025-07', 'bookings': 1, 'duration_minutes': 60},
    ]
    assert 'bookings' not in report
    assert ReportService.available_years() == [2025]


def test_empty_period(app, room):
    report = ReportService.usage_report('day', date(2025, 6, 1))

    assert report['total_bookings'] == 0
    assert report['average_duration_minutes'] == 0
    assert report['most_booked_room'] is None
    assert report['room_usage'][0]['bookings'] == 0


def test_feedback_summary(app, bookings, ctx_for):
    ratings = [4, 5]
    for (lead, booking), rating in zip(bookings[:2], ratings):
        during = datetime.combine(booking.schedule.date, booking.schedule.start_time).replace(minute=15)
        assert BookingService.complete(ctx_for(lead, during), booking.id).ok
        assert FeedbackService.submit_feedback(ctx_for(lead, during), booking.id, rating).ok

    summary = FeedbackService.summary(limit=1)

    assert summary['average_rating'] == 4.5
    assert summary['count'] == 2
    assert [f['booking_code'] for f in summary['latest']] == [bookings[1][1].code]
