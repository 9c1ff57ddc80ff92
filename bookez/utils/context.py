from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from bookez.models.enums import AccountRole
from bookez.utils import clock


@dataclass(frozen=True)
class RequestContext:
    """Identity and clock for a single request.

    Built once per request by the route layer and passed explicitly into every
    booking operation.
    """
    member_id: str
    role: AccountRole
    now: datetime

    @property
    def is_admin(self):
        return self.role.is_elevated

    @property
    def is_super_admin(self):
        return self.role == AccountRole.SUPER_ADMIN

    @classmethod
    def for_member(cls, member, now: Optional[datetime] = None):
        return cls(member_id=member.id, role=member.role, now=now or clock.now())
