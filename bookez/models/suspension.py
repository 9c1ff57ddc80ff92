from bookez.extensions import db
from bookez.models.enums import SuspensionKind

class Violation(db.Model):
    """One no-show (HANGUS) attributed to one member."""
    __tablename__ = 'violations'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.String(32), db.ForeignKey('members.id'), nullable=False, index=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False)
    occurred_at = db.Column(db.DateTime, nullable=False, index=True)

    def to_dict(self):
        return {
            'member_id': self.member_id,
            'booking_id': self.booking_id,
            'occurred_at': self.occurred_at.isoformat()
        }


class Suspension(db.Model):
    __tablename__ = 'suspensions'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.String(32), db.ForeignKey('members.id'), nullable=False, index=True)
    kind = db.Column(db.Enum(SuspensionKind), nullable=False)
    reason = db.Column(db.String(255))
    start_at = db.Column(db.DateTime, nullable=False)
    end_at = db.Column(db.DateTime, nullable=False, index=True)

    def to_dict(self):
        return {
            'member_id': self.member_id,
            'kind': self.kind.value,
            'reason': self.reason,
            'start_at': self.start_at.isoformat(),
            'end_at': self.end_at.isoformat()
        }
