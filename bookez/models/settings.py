from bookez.extensions import db
from datetime import datetime

class OperatingHours(db.Model):
    __tablename__ = 'operating_hours'

    id = db.Column(db.Integer, primary_key=True)
    weekday = db.Column(db.Integer, unique=True, nullable=False)  # 0 = Monday
    open_time = db.Column(db.Time, nullable=False)
    close_time = db.Column(db.Time, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    updated_by = db.Column(db.String(32), db.ForeignKey('members.id'))

    def to_dict(self):
        return {
            'weekday': self.weekday,
            'open_time': self.open_time.strftime('%H:%M'),
            'close_time': self.close_time.strftime('%H:%M'),
            'is_active': self.is_active
        }


class Holiday(db.Model):
    __tablename__ = 'holidays'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=False)
    created_by = db.Column(db.String(32), db.ForeignKey('members.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            'description': self.description
        }
