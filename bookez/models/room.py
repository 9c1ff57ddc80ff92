from bookez.extensions import db
from bookez.models.enums import RoomType, RoomStatus

class Room(db.Model):
    __tablename__ = 'rooms'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)
    room_type = db.Column(db.Enum(RoomType), nullable=False, default=RoomType.GENERAL)
    min_capacity = db.Column(db.Integer, nullable=False)
    max_capacity = db.Column(db.Integer, nullable=False)
    # AVAILABLE / IN_USE are recomputed from bookings, UNAVAILABLE is set by admins
    status = db.Column(db.Enum(RoomStatus), nullable=False, default=RoomStatus.AVAILABLE)
    description = db.Column(db.Text)
    rules = db.Column(db.Text)
    photo = db.Column(db.String(255))

    bookings = db.relationship('Booking', back_populates='room', lazy='dynamic')

    __table_args__ = (
        db.CheckConstraint('min_capacity > 0', name='check_min_capacity_positive'),
        db.CheckConstraint('min_capacity < max_capacity', name='check_capacity_order'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'room_type': self.room_type.value,
            'min_capacity': self.min_capacity,
            'max_capacity': self.max_capacity,
            'status': self.status.value,
            'description': self.description,
            'rules': self.rules,
            'photo': self.photo
        }
