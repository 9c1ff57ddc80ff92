import pytest
from datetime import datetime
from werkzeug.security import generate_password_hash
from bookez import create_app
from bookez.config import TestingConfig
from bookez.extensions import db
from bookez.models import Member, Room, AccountRole, AccountStatus, RoomType
from bookez.utils.context import RequestContext

# 2025-06-01 is a Sunday; no operating-hours rows means the 08:00-19:00 fallback applies
MORNING = datetime(2025, 6, 1, 8, 0)


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_member(app):
    counter = {'n': 0}

    def _make(member_id=None, role=AccountRole.USER, status=AccountStatus.ACTIVE, password='secret'):
        counter['n'] += 1
        member_id = member_id or f"M{counter['n']:04d}"
        member = Member(
            id=member_id,
            username=f"user_{member_id.lower()}",
            email=f"{member_id.lower()}@campus.ac.id",
            password_hash=generate_password_hash(password),
            role=role,
            status=status
        )
        db.session.add(member)
        db.session.commit()
        return member
    return _make


@pytest.fixture
def make_room(app):
    def _make(name='Ruang Diskusi', min_capacity=2, max_capacity=4, room_type=RoomType.GENERAL):
        room = Room(name=name, room_type=room_type, min_capacity=min_capacity, max_capacity=max_capacity)
        db.session.add(room)
        db.session.commit()
        return room
    return _make


@pytest.fixture
def leader(make_member):
    return make_member('L001')


@pytest.fixture
def participant(make_member):
    return make_member('P001')


@pytest.fixture
def room(make_room):
    return make_room()


@pytest.fixture
def ctx_for():
    def _ctx(member, now=MORNING):
        return RequestContext.for_member(member, now=now)
    return _ctx


@pytest.fixture
def auth_headers(app):
    from bookez.api.routes.auth import issue_token

    def _headers(member):
        return {'Authorization': f"Bearer {issue_token(member)}"}
    return _headers
