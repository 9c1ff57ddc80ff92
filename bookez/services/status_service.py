"""
Status transition engine.

Keeps booking and room status consistent with the wall clock without a
dedicated background process. The sweep is re-run at the start of every
booking-related request (and by the ``flask sweep-statuses`` command), so
every pass must be idempotent.

Order matters: the no-show pass runs before the completion pass, so a booking
with zero check-ins whose end time has also passed becomes HANGUS, not SELESAI.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Sequence, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bookez.extensions import db
from bookez.models import Booking, Schedule, Room, BookingStatus, RoomStatus
from bookez.services.errors import InfrastructureError


@dataclass(frozen=True)
class NoShowEvent:
    booking_id: int
    member_ids: Tuple[str, ...]
    occurred_at: datetime


@dataclass
class SweepResult:
    forfeited: List[int] = field(default_factory=list)
    completed: List[int] = field(default_factory=list)
    rooms_changed: int = 0

    @property
    def changed(self):
        return bool(self.forfeited or self.completed or self.rooms_changed)


class StatusTransitionEngine:

    def __init__(self, listeners: Sequence[Callable] = (), notifiers: Sequence[Callable] = ()):
        # listeners run inside the sweep transaction, notifiers after it commits
        self.listeners = list(listeners)
        self.notifiers = list(notifiers)

    @staticmethod
    def _transition(booking_id, target: BookingStatus) -> bool:
        """Conditional UPDATE; False if the booking already left AKTIF."""
        result = db.session.execute(
            db.update(Booking)
            .where(Booking.id == booking_id, Booking.status == BookingStatus.AKTIF)
            .values(status=target)
        )
        return result.rowcount == 1

    @staticmethod
    def _active_candidates(now: datetime):
        return Booking.query.join(Schedule).filter(
            Booking.status == BookingStatus.AKTIF,
            Schedule.date <= now.date()
        ).all()

    def apply_no_show_transitions(self, now: datetime) -> List[NoShowEvent]:
        grace = timedelta(minutes=current_app.config['NO_SHOW_GRACE_MINUTES'])
        events = []
        for booking in self._active_candidates(now):
            # External bookings have no roster to check in
            if booking.is_external:
                continue
            if booking.schedule.starts_at >= now - grace:
                continue
            if booking.checked_in_count > 0:
                continue
            if self._transition(booking.id, BookingStatus.HANGUS):
                events.append(NoShowEvent(
                    booking_id=booking.id,
                    member_ids=tuple(m.member_id for m in booking.members),
                    occurred_at=now
                ))
        return events

    def apply_completion_transitions(self, now: datetime) -> List[int]:
        completed = []
        for booking in self._active_candidates(now):
            if booking.schedule.ends_at >= now:
                continue
            if not booking.is_external and booking.checked_in_count == 0:
                continue
            if self._transition(booking.id, BookingStatus.SELESAI):
                completed.append(booking.id)
        return completed

    @staticmethod
    def recompute_room_availability(now: datetime) -> int:
        in_use = set()
        todays = Schedule.query.join(Booking).filter(
            Schedule.date == now.date(),
            Booking.status == BookingStatus.AKTIF
        ).all()
        for schedule in todays:
            if schedule.starts_at <= now <= schedule.ends_at:
                in_use.add(schedule.booking.room_id)

        changed = 0
        for room in Room.query.filter(Room.status != RoomStatus.UNAVAILABLE).all():
            target = RoomStatus.IN_USE if room.id in in_use else RoomStatus.AVAILABLE
            if room.status != target:
                room.status = target
                changed += 1
        return changed

    def run(self, now: datetime) -> SweepResult:
        result = SweepResult()
        try:
            events = self.apply_no_show_transitions(now)
            for event in events:
                for listener in self.listeners:
                    listener(event)
            result.forfeited = [e.booking_id for e in events]
            result.completed = self.apply_completion_transitions(now)
            result.rooms_changed = self.recompute_room_availability(now)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Status sweep failed: {e}")
            raise InfrastructureError(str(e)) from e

        if result.changed:
            current_app.logger.info(
                f"Status sweep at {now}: {len(result.forfeited)} HANGUS, "
                f"{len(result.completed)} SELESAI, {result.rooms_changed} room(s) updated"
            )
        for event in events:
            for notify in self.notifiers:
                notify(event)
        return result


def build_default_engine():
    from bookez.services.suspension_service import SuspensionService
    from bookez.services.notification_service import NotificationService

    return StatusTransitionEngine(
        listeners=[SuspensionService.record_no_show],
        notifiers=[NotificationService.no_show]
    )


def get_status_engine() -> StatusTransitionEngine:
    return current_app.extensions['bookez_status_engine']
