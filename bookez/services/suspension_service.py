from datetime import datetime, timedelta
from flask import current_app
from bookez.models import Violation, Suspension, SuspensionKind
from bookez.extensions import db


class SuspensionService:
    """Turns repeated no-shows into escalating booking restrictions."""

    @staticmethod
    def count_recent_violations(member_id, now: datetime) -> int:
        window_start = now - timedelta(days=current_app.config['VIOLATION_WINDOW_DAYS'])
        return Violation.query.filter(
            Violation.member_id == member_id,
            Violation.occurred_at >= window_start,
            Violation.occurred_at <= now
        ).count()

    @staticmethod
    def active_suspension(member_id, now: datetime):
        return Suspension.query.filter(
            Suspension.member_id == member_id,
            Suspension.start_at <= now,
            Suspension.end_at > now
        ).order_by(Suspension.end_at.desc()).first()

    @staticmethod
    def is_blocked(member_id, now: datetime) -> bool:
        return SuspensionService.active_suspension(member_id, now) is not None

    @staticmethod
    def record_no_show(event):
        """
        Listener for NoShowEvent. Records one violation per member and creates or
        refreshes the member's suspension. Does not commit; the caller owns the
        transaction.
        """
        for member_id in event.member_ids:
            db.session.add(Violation(member_id=member_id, booking_id=event.booking_id,
                                     occurred_at=event.occurred_at))
            db.session.flush()
            SuspensionService.apply_penalty(member_id, event.occurred_at)

    @staticmethod
    def apply_penalty(member_id, now: datetime):
        config = current_app.config
        threshold = config['SUSPENSION_THRESHOLD']
        count = SuspensionService.count_recent_violations(member_id, now)

        if count >= threshold:
            kind = SuspensionKind.SUSPEND
            end_at = now + timedelta(days=config['SUSPENSION_DAYS'])
            reason = f"repeated no-show suspension ({count} no-shows in {config['VIOLATION_WINDOW_DAYS']} days)"
        else:
            kind = SuspensionKind.BLOCK
            end_at = now + timedelta(hours=config['BLOCK_HOURS'])
            reason = f"temporary block ({count}/{threshold})"

        suspension = SuspensionService.active_suspension(member_id, now)
        if suspension is None:
            suspension = Suspension(member_id=member_id, kind=kind, reason=reason, start_at=now, end_at=end_at)
            db.session.add(suspension)
        else:
            # Refresh, never shorten
            suspension.kind = kind
            suspension.reason = reason
            suspension.end_at = max(suspension.end_at, end_at)

        current_app.logger.warning(
            f"Member {member_id} penalized after no-show #{count}: {kind.value} until {suspension.end_at}"
        )
        return suspension

    @staticmethod
    def violation_history(member_id):
        return Violation.query.filter_by(member_id=member_id).order_by(Violation.occurred_at.desc()).all()

    @staticmethod
    def suspension_history(member_id):
        return Suspension.query.filter_by(member_id=member_id).order_by(Suspension.start_at.desc()).all()
