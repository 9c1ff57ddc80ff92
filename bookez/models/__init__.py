from bookez.models.enums import (
    BookingStatus, RosterRole, RoomType, RoomStatus, AccountRole, AccountStatus, SuspensionKind
)
from bookez.models.member import Member
from bookez.models.room import Room
from bookez.models.booking import Booking, BookingMember, Schedule
from bookez.models.suspension import Violation, Suspension
from bookez.models.settings import OperatingHours, Holiday
from bookez.models.feedback import Feedback
