from bookez.extensions import db
from bookez.models.enums import AccountRole, AccountStatus
from datetime import datetime

class Member(db.Model):
    __tablename__ = 'members'

    # University id number (NIM/NIP)
    id = db.Column(db.String(32), primary_key=True)
    username = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.Enum(AccountRole), nullable=False, default=AccountRole.USER)
    status = db.Column(db.Enum(AccountStatus), nullable=False, default=AccountStatus.ACTIVE)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def is_active_account(self):
        return self.status == AccountStatus.ACTIVE

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role.value,
            'status': self.status.value
        }
