from datetime import datetime
from flask import current_app
from sqlalchemy import or_
from bookez.models import Member, AccountRole, AccountStatus
from bookez.extensions import db
from bookez.services.errors import EligibilityError, NotFoundError
from bookez.services.suspension_service import SuspensionService
from bookez.utils.db import commit


class MemberService:

    @staticmethod
    def get_member(member_id):
        member = db.session.get(Member, member_id)
        if not member:
            raise NotFoundError(f"Member {member_id} not found.")
        return member

    @staticmethod
    def lookup(member_id):
        """Roster lookup used while composing a booking; only active users qualify."""
        member = MemberService.get_member(member_id)
        if not member.is_active_account:
            raise EligibilityError(f"The account of {member.username} ({member.id}) is not active.")
        if member.role.is_elevated:
            raise EligibilityError(f"{member.username} ({member.id}) is an administrator and cannot join bookings.")
        return member

    @staticmethod
    def list_members(search=None, role: AccountRole = None, status: AccountStatus = None):
        query = Member.query
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Member.id.ilike(pattern), Member.username.ilike(pattern),
                                     Member.email.ilike(pattern)))
        if role:
            query = query.filter(Member.role == role)
        if status:
            query = query.filter(Member.status == status)
        return query.order_by(Member.created_at.desc(), Member.id.asc()).all()

    @staticmethod
    def set_status(acting_member_id, member_id, status: AccountStatus):
        member = MemberService.get_member(member_id)
        if member.id == acting_member_id:
            raise EligibilityError("You cannot change the status of your own account.")
        if member.role == AccountRole.SUPER_ADMIN:
            raise EligibilityError("Super admin accounts cannot be deactivated.")

        member.status = status
        commit("updating member status")
        current_app.logger.info(f"Member {member.id} set to {status.value} by {acting_member_id}")
        return member

    @staticmethod
    def standing(member_id, now: datetime):
        """Current block/suspension and violation count for a member."""
        suspension = SuspensionService.active_suspension(member_id, now)
        return {
            'member_id': member_id,
            'blocked': suspension is not None,
            'suspension': suspension.to_dict() if suspension else None,
            'recent_violations': SuspensionService.count_recent_violations(member_id, now),
            'violation_window_days': current_app.config['VIOLATION_WINDOW_DAYS']
        }
