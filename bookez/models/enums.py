import enum


class BookingStatus(str, enum.Enum):
    AKTIF = 'AKTIF'
    SELESAI = 'SELESAI'
    DIBATALKAN = 'DIBATALKAN'
    HANGUS = 'HANGUS'


class RosterRole(str, enum.Enum):
    LEADER = 'LEADER'
    PARTICIPANT = 'PARTICIPANT'


class RoomType(str, enum.Enum):
    GENERAL = 'GENERAL'   # bookable by users
    MEETING = 'MEETING'   # external bookings only


class RoomStatus(str, enum.Enum):
    AVAILABLE = 'AVAILABLE'
    IN_USE = 'IN_USE'
    UNAVAILABLE = 'UNAVAILABLE'


class AccountRole(str, enum.Enum):
    USER = 'USER'
    ADMIN = 'ADMIN'
    SUPER_ADMIN = 'SUPER_ADMIN'

    @property
    def is_elevated(self):
        return self in (AccountRole.ADMIN, AccountRole.SUPER_ADMIN)


class AccountStatus(str, enum.Enum):
    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'


class SuspensionKind(str, enum.Enum):
    BLOCK = 'BLOCK'       # 24 hours
    SUSPEND = 'SUSPEND'   # 7 days
