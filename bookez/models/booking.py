from bookez.extensions import db
from bookez.models.enums import BookingStatus, RosterRole
from datetime import datetime

class Booking(db.Model):
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(7), unique=True, nullable=False, index=True)
    room_id = db.Column(db.Integer, db.ForeignKey('rooms.id'), nullable=False)
    duration_minutes = db.Column(db.Integer, nullable=False)
    status = db.Column(db.Enum(BookingStatus), nullable=False, default=BookingStatus.AKTIF, index=True)

    # External bookings only
    organization_name = db.Column(db.String(128))
    attachment = db.Column(db.String(255))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    room = db.relationship('Room', back_populates='bookings')
    members = db.relationship('BookingMember', back_populates='booking', cascade='all, delete-orphan',
                              order_by='BookingMember.id')
    schedule = db.relationship('Schedule', back_populates='booking', uselist=False, cascade='all, delete-orphan')
    feedback = db.relationship('Feedback', back_populates='booking', uselist=False, cascade='all, delete-orphan')

    @property
    def is_external(self):
        return self.organization_name is not None

    @property
    def leader(self):
        for m in self.members:
            if m.role == RosterRole.LEADER:
                return m
        return None

    def roster_entry(self, member_id):
        for m in self.members:
            if m.member_id == member_id:
                return m
        return None

    @property
    def checked_in_count(self):
        return sum(1 for m in self.members if m.checked_in)

    def to_dict(self, include_members=True):
        data = {
            'id': self.id,
            'code': self.code,
            'room_id': self.room_id,
            'room_name': self.room.name if self.room else None,
            'duration_minutes': self.duration_minutes,
            'status': self.status.value,
            'organization_name': self.organization_name,
            'attachment': self.attachment,
            'schedule': self.schedule.to_dict() if self.schedule else None,
        }
        if include_members:
            data['members'] = [m.to_dict() for m in self.members]
        return data


class BookingMember(db.Model):
    __tablename__ = 'booking_members'

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, index=True)
    member_id = db.Column(db.String(32), db.ForeignKey('members.id'), nullable=False, index=True)
    role = db.Column(db.Enum(RosterRole), nullable=False, default=RosterRole.PARTICIPANT)
    checked_in = db.Column(db.Boolean, nullable=False, default=False)
    checked_in_at = db.Column(db.DateTime)

    booking = db.relationship('Booking', back_populates='members')
    member = db.relationship('Member')

    __table_args__ = (
        db.UniqueConstraint('booking_id', 'member_id', name='uq_booking_member'),
    )

    @property
    def is_leader(self):
        return self.role == RosterRole.LEADER

    def to_dict(self):
        return {
            'member_id': self.member_id,
            'username': self.member.username if self.member else None,
            'role': self.role.value,
            'checked_in': self.checked_in,
            'checked_in_at': self.checked_in_at.isoformat() if self.checked_in_at else None
        }


class Schedule(db.Model):
    __tablename__ = 'schedules'

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, unique=True)
    date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    reschedule_reason = db.Column(db.String(255))

    booking = db.relationship('Booking', back_populates='schedule')

    __table_args__ = (
        db.CheckConstraint('end_time > start_time', name='check_schedule_order'),
    )

    @property
    def starts_at(self):
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self):
        return datetime.combine(self.date, self.end_time)

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'start_time': self.start_time.strftime('%H:%M'),
            'end_time': self.end_time.strftime('%H:%M'),
            'reschedule_reason': self.reschedule_reason
        }
