import uuid
from datetime import datetime, date, time, timedelta
from flask import current_app
from sqlalchemy import or_, and_
from sqlalchemy.orm import aliased
from bookez.models import (
    Room, Booking, BookingMember, Schedule, Member,
    BookingStatus, RosterRole, RoomType, RoomStatus
)
from bookez.extensions import db
from bookez.services.errors import (
    PolicyViolation, ConflictError, EligibilityError, BlockedError, StateError, NotFoundError,
    returns_outcome
)
from bookez.services.operating_hours_service import OperatingHoursService
from bookez.services.schedule_service import ScheduleService
from bookez.services.suspension_service import SuspensionService
from bookez.utils.context import RequestContext
from bookez.utils.db import commit


class BookingService:
    """
    Entry point for every booking mutation coming from the user and admin APIs.
    Public operations return an Outcome; validation helpers raise BookingErrors.
    """

    # --- VALIDATION HELPERS ---

    @staticmethod
    def ensure_not_in_past(booking_date: date, start: time, now: datetime, buffer_minutes: int):
        starts_at = datetime.combine(booking_date, start)
        if starts_at < now + timedelta(minutes=buffer_minutes):
            if booking_date < now.date():
                raise PolicyViolation("The booking date cannot be in the past.")
            if buffer_minutes:
                raise PolicyViolation(f"The start time must be at least {buffer_minutes} minutes from now.")
            raise PolicyViolation("The start time cannot be in the past.")

    @staticmethod
    def duration_minutes(start: time, end: time) -> int:
        """Validated duration of a same-day window, in minutes."""
        minutes = int((datetime.combine(date.min, end) - datetime.combine(date.min, start)).total_seconds() // 60)
        if minutes <= 0:
            raise PolicyViolation("The end time must be after the start time.")
        minimum = current_app.config['MIN_BOOKING_MINUTES']
        if minutes < minimum:
            # Must exceed the no-show grace window, or the booking is forfeited on arrival
            raise PolicyViolation(
                f"Bookings must last at least {minimum} minutes "
                f"(check-in grace period is {current_app.config['NO_SHOW_GRACE_MINUTES']} minutes)."
            )
        return minutes

    @staticmethod
    def ensure_not_blocked(member_id, now: datetime):
        suspension = SuspensionService.active_suspension(member_id, now)
        if suspension:
            raise BlockedError(
                f"You cannot make bookings: {suspension.reason}. "
                f"Booking is possible again from {suspension.end_at.strftime('%d %B %Y %H:%M')}."
            )

    @staticmethod
    def active_booking_for(member_id):
        """The AKTIF booking the member belongs to, as leader or participant."""
        return Booking.query.join(BookingMember).filter(
            BookingMember.member_id == member_id,
            Booking.status == BookingStatus.AKTIF
        ).first()

    @staticmethod
    def validate_roster(room: Room, roster_ids, now: datetime):
        """Capacity, eligibility and suspension checks for leader + participants."""
        # Capacity
        if not room.min_capacity <= len(roster_ids) <= room.max_capacity:
            raise PolicyViolation(
                f"The number of participants must be between {room.min_capacity} and {room.max_capacity}."
            )

        # Duplicates
        seen, duplicates = set(), []
        for member_id in roster_ids:
            if member_id in seen and member_id not in duplicates:
                duplicates.append(member_id)
            seen.add(member_id)
        if duplicates:
            raise EligibilityError(f"Members listed more than once: {', '.join(duplicates)}.")

        # Eligibility
        members = []
        for member_id in roster_ids:
            member = db.session.get(Member, member_id)
            if not member:
                raise NotFoundError(f"Member {member_id} not found.")
            if not member.is_active_account:
                raise EligibilityError(f"The account of {member.username} ({member.id}) is not active.")
            if member.role.is_elevated:
                raise EligibilityError(f"{member.username} ({member.id}) is an administrator and cannot join bookings.")
            members.append(member)

        # Suspensions
        blocked = []
        for member in members:
            suspension = SuspensionService.active_suspension(member.id, now)
            if suspension:
                blocked.append(f"{member.username} ({member.id}) until {suspension.end_at.strftime('%d %B %Y %H:%M')}")
        if blocked:
            raise BlockedError(f"These members are currently blocked from booking: {'; '.join(blocked)}.")
        return members

    @staticmethod
    def ensure_no_conflicts(room_id, booking_date: date, start: time, end: time, member_ids=None,
                            exclude_booking_id=None):
        if ScheduleService.has_room_conflict(room_id, booking_date, start, end, exclude_booking_id):
            raise ConflictError("The selected time overlaps another booking for this room.")
        if member_ids:
            conflicted = ScheduleService.member_conflicts(member_ids, booking_date, start, end, exclude_booking_id)
            if conflicted:
                names = ', '.join(f"{m.username} ({m.id})" for m in conflicted)
                raise ConflictError(f"These members already have a booking at the same time: {names}.")

    @staticmethod
    def generate_code():
        while True:
            code = uuid.uuid4().hex[:7].upper()
            if not Booking.query.filter_by(code=code).first():
                return code

    @staticmethod
    def _get(booking_id) -> Booking:
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found.")
        return booking

    @staticmethod
    def _ensure_leader(ctx: RequestContext, booking: Booking, action: str):
        leader = booking.leader
        if not leader or leader.member_id != ctx.member_id:
            raise EligibilityError(f"Only the booking leader can {action} this booking.")

    @staticmethod
    def _ensure_active(booking: Booking, action: str):
        if booking.status != BookingStatus.AKTIF:
            raise StateError(f"A booking with status {booking.status.value} cannot be {action}.")

    # --- CREATE ---

    @staticmethod
    @returns_outcome
    def create_booking(ctx: RequestContext, room_id, booking_date: date, start: time, end: time,
                       participant_ids=None):
        """
        Main entry point to book a room.
        Validations fail fast in a fixed order and nothing is written unless all pass.
        """
        now = ctx.now
        leader_id = ctx.member_id
        participant_ids = [str(p).strip() for p in (participant_ids or []) if p and str(p).strip()]

        # 1. Leader not suspended
        BookingService.ensure_not_blocked(leader_id, now)

        # 2. One active booking per person
        if BookingService.active_booking_for(leader_id):
            raise EligibilityError("You already have an active booking. Finish or cancel it first.")

        # 3. Room (locked until commit/rollback)
        room = ScheduleService.lock_room(room_id)
        if not room:
            raise NotFoundError("Room not found.")
        if room.room_type != RoomType.GENERAL:
            raise PolicyViolation("This room cannot be booked by users.")
        if room.status != RoomStatus.AVAILABLE:
            raise StateError("This room is not available for booking right now.")

        # 4. Not in the past
        BookingService.ensure_not_in_past(booking_date, start, now, current_app.config['BOOKING_BUFFER_MINUTES'])

        # 5. Duration
        duration = BookingService.duration_minutes(start, end)

        # 6. Operating hours and holidays
        OperatingHoursService.validate(booking_date, start, end)

        # 7-9. Roster
        roster_ids = [leader_id] + participant_ids
        BookingService.validate_roster(room, roster_ids, now)

        # 10-11. Room and member overlaps
        BookingService.ensure_no_conflicts(room.id, booking_date, start, end, member_ids=roster_ids)

        booking = Booking(
            code=BookingService.generate_code(),
            room_id=room.id,
            duration_minutes=duration,
            status=BookingStatus.AKTIF
        )
        booking.members.append(BookingMember(member_id=leader_id, role=RosterRole.LEADER))
        for member_id in participant_ids:
            booking.members.append(BookingMember(member_id=member_id, role=RosterRole.PARTICIPANT))
        booking.schedule = Schedule(date=booking_date, start_time=start, end_time=end)

        db.session.add(booking)
        commit("creating booking")
        current_app.logger.info(f"Booking {booking.code} created by {leader_id} for room {room.id}")
        return booking

    @staticmethod
    @returns_outcome
    def create_external_booking(ctx: RequestContext, room_id, organization_name, booking_date: date,
                                start: time, end: time, attachment=None):
        """Meeting-room booking on behalf of an outside organization (no roster)."""
        if not ctx.is_super_admin:
            raise EligibilityError("Only super admins can create external bookings.")
        organization_name = (organization_name or '').strip()
        if not organization_name:
            raise PolicyViolation("The organization name is required.")
        if booking_date < ctx.now.date():
            raise PolicyViolation("The booking date cannot be in the past.")

        duration = BookingService.duration_minutes(start, end)
        OperatingHoursService.validate(booking_date, start, end)

        room = ScheduleService.lock_room(room_id)
        if not room:
            raise NotFoundError("Room not found.")
        if room.room_type != RoomType.MEETING:
            raise PolicyViolation("Only meeting rooms can be booked externally.")

        BookingService.ensure_no_conflicts(room.id, booking_date, start, end)

        booking = Booking(
            code=BookingService.generate_code(),
            room_id=room.id,
            duration_minutes=duration,
            status=BookingStatus.AKTIF,
            organization_name=organization_name,
            attachment=attachment
        )
        booking.schedule = Schedule(date=booking_date, start_time=start, end_time=end)
        db.session.add(booking)
        commit("creating external booking")
        current_app.logger.info(f"External booking {booking.code} created for {organization_name}")
        return booking

    # --- LIFECYCLE ---

    @staticmethod
    @returns_outcome
    def reschedule(ctx: RequestContext, booking_id, new_date: date, start: time, end: time, reason=None):
        now = ctx.now
        booking = BookingService._get(booking_id)
        BookingService._ensure_leader(ctx, booking, 'reschedule')
        BookingService._ensure_active(booking, 'rescheduled')

        if booking.checked_in_count > 0:
            raise StateError("The booking cannot be rescheduled because a member has already checked in.")

        cutoff = timedelta(minutes=current_app.config['RESCHEDULE_CUTOFF_MINUTES'])
        if booking.schedule.starts_at - now < cutoff:
            raise StateError(
                f"Rescheduling is only possible at least {int(cutoff.total_seconds() // 60)} minutes "
                f"before the booking starts."
            )

        ScheduleService.lock_room(booking.room_id)
        BookingService.ensure_not_in_past(new_date, start, now, current_app.config['RESCHEDULE_BUFFER_MINUTES'])
        duration = BookingService.duration_minutes(start, end)
        OperatingHoursService.validate(new_date, start, end)
        BookingService.ensure_no_conflicts(booking.room_id, new_date, start, end, exclude_booking_id=booking.id)

        schedule = booking.schedule
        schedule.date = new_date
        schedule.start_time = start
        schedule.end_time = end
        schedule.reschedule_reason = reason or "Rescheduled by leader"
        booking.duration_minutes = duration
        commit("rescheduling booking")
        current_app.logger.info(f"Booking {booking.code} rescheduled to {new_date} {start}-{end}")
        return booking

    @staticmethod
    @returns_outcome
    def cancel(ctx: RequestContext, booking_id):
        booking = BookingService._get(booking_id)
        BookingService._ensure_leader(ctx, booking, 'cancel')
        BookingService._ensure_active(booking, 'cancelled')

        booking.status = BookingStatus.DIBATALKAN
        commit("cancelling booking")
        current_app.logger.info(f"Booking {booking.code} cancelled by {ctx.member_id}")
        return booking

    @staticmethod
    @returns_outcome
    def cancel_external(ctx: RequestContext, booking_id):
        if not ctx.is_super_admin:
            raise EligibilityError("Only super admins can cancel external bookings.")
        booking = BookingService._get(booking_id)
        if not booking.is_external:
            raise NotFoundError("External booking not found.")
        BookingService._ensure_active(booking, 'cancelled')

        booking.status = BookingStatus.DIBATALKAN
        commit("cancelling external booking")
        return booking

    @staticmethod
    def _ensure_check_in_window(booking: Booking, now: datetime):
        BookingService._ensure_active(booking, 'checked in')
        if booking.schedule.date != now.date():
            raise StateError(
                f"Check-in is only possible on the booking date ({booking.schedule.date.strftime('%d %B %Y')})."
            )

    @staticmethod
    @returns_outcome
    def check_in(ctx: RequestContext, booking_id, member_id=None):
        member_id = str(member_id).strip() if member_id is not None else ctx.member_id
        booking = BookingService._get(booking_id)
        if member_id != ctx.member_id and not ctx.is_admin:
            raise EligibilityError("You can only check yourself in.")
        BookingService._ensure_check_in_window(booking, ctx.now)

        entry = booking.roster_entry(member_id)
        if not entry:
            raise NotFoundError(f"Member {member_id} is not part of this booking.")
        if not entry.checked_in:
            entry.checked_in = True
            entry.checked_in_at = ctx.now
            commit("checking in")
        return booking

    @staticmethod
    @returns_outcome
    def check_in_all(ctx: RequestContext, booking_id):
        if not ctx.is_admin:
            raise EligibilityError("Admin privilege required.")
        booking = BookingService._get(booking_id)
        BookingService._ensure_check_in_window(booking, ctx.now)

        for entry in booking.members:
            if not entry.checked_in:
                entry.checked_in = True
                entry.checked_in_at = ctx.now
        commit("checking in all members")
        return booking

    @staticmethod
    @returns_outcome
    def complete(ctx: RequestContext, booking_id):
        """Leader marks the booking finished while it is running."""
        now = ctx.now
        booking = BookingService._get(booking_id)
        BookingService._ensure_leader(ctx, booking, 'complete')
        BookingService._ensure_active(booking, 'completed')

        schedule = booking.schedule
        if now.date() < schedule.date:
            raise StateError("A booking can only be completed on its booking date.")
        if now.date() > schedule.date:
            raise StateError("The booking date has passed; its status will be updated automatically.")
        if now < schedule.starts_at:
            minutes = -(-(schedule.starts_at - now).total_seconds() // 60)
            raise StateError(
                f"The booking can be completed after it starts at {schedule.start_time.strftime('%H:%M')} "
                f"({int(minutes)} minutes left)."
            )
        if now > schedule.ends_at:
            raise StateError("The booking time is already over.")

        booking.status = BookingStatus.SELESAI
        commit("completing booking")
        for listener in current_app.extensions.get('bookez_completion_listeners', ()):
            listener(booking)
        return booking

    # --- READ ---

    @staticmethod
    @returns_outcome
    def get_booking(ctx: RequestContext, booking_id):
        booking = BookingService._get(booking_id)
        if not ctx.is_admin and booking.roster_entry(ctx.member_id) is None:
            raise EligibilityError("You do not have access to this booking.")
        return booking

    @staticmethod
    def get_member_bookings(member_id):
        """All bookings the member takes part in, most recent schedule first."""
        return Booking.query.join(BookingMember).join(Schedule).filter(
            BookingMember.member_id == member_id
        ).order_by(Schedule.date.desc(), Schedule.start_time.desc()).all()

    @staticmethod
    def filter_bookings(room_id=None, status: BookingStatus = None, booking_date: date = None,
                        name=None, external=None, page=1, per_page=None):
        """Admin booking list; `name` matches the leader's username or the organization."""
        leader_entry = aliased(BookingMember)
        leader = aliased(Member)
        query = Booking.query.join(Schedule).outerjoin(
            leader_entry, and_(leader_entry.booking_id == Booking.id, leader_entry.role == RosterRole.LEADER)
        ).outerjoin(leader, leader.id == leader_entry.member_id)

        if room_id:
            query = query.filter(Booking.room_id == room_id)
        if status:
            query = query.filter(Booking.status == status)
        if booking_date:
            query = query.filter(Schedule.date == booking_date)
        if name:
            pattern = f"%{name}%"
            query = query.filter(or_(leader.username.ilike(pattern), Booking.organization_name.ilike(pattern)))
        if external is not None:
            query = query.filter(
                Booking.organization_name.isnot(None) if external else Booking.organization_name.is_(None)
            )

        query = query.order_by(Schedule.date.desc(), Schedule.start_time.desc(), Booking.id.desc())
        per_page = per_page or current_app.config['BOOKINGS_PER_PAGE']
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def statistics(today: date):
        counts = {status.value: 0 for status in BookingStatus}
        rows = db.session.query(Booking.status, db.func.count(Booking.id)).group_by(Booking.status).all()
        for status, count in rows:
            counts[status.value] = count
        return {
            'total': sum(counts.values()),
            'by_status': counts,
            'active_today': OperatingHoursService.count_active_bookings_on(today)
        }
