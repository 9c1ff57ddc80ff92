from datetime import time
from bookez import create_app
from bookez.extensions import db
from bookez.models import Member, Room, OperatingHours, AccountRole, RoomType
from werkzeug.security import generate_password_hash

app = create_app()

with app.app_context():
    db.create_all()

    # Create Super Admin
    if not db.session.get(Member, 'SA001'):
        admin = Member(
            id='SA001',
            username='superadmin',
            email='superadmin@bookez.ac.id',
            password_hash=generate_password_hash('password', method='pbkdf2:sha256'),
            role=AccountRole.SUPER_ADMIN
        )
        db.session.add(admin)
        print("Super admin created (SA001/password)")

    # Create Rooms
    rooms_data = [
        {"name": "Ruang Diskusi 1", "room_type": RoomType.GENERAL, "min_capacity": 2, "max_capacity": 6},
        {"name": "Ruang Diskusi 2", "room_type": RoomType.GENERAL, "min_capacity": 3, "max_capacity": 8},
        {"name": "Ruang Audio Visual", "room_type": RoomType.GENERAL, "min_capacity": 5, "max_capacity": 20},
        {"name": "Ruang Rapat", "room_type": RoomType.MEETING, "min_capacity": 5, "max_capacity": 30}
    ]

    for r_data in rooms_data:
        if not Room.query.filter_by(name=r_data['name']).first():
            room = Room(**r_data)
            db.session.add(room)
            print(f"Room {room.name} created.")

    # Monday-Friday 08:00-19:00, Saturday 08:00-14:00, closed on Sunday
    hours_data = [(weekday, time(8, 0), time(19, 0), True) for weekday in range(5)]
    hours_data += [(5, time(8, 0), time(14, 0), True), (6, time(8, 0), time(14, 0), False)]
    for weekday, open_time, close_time, is_active in hours_data:
        if not OperatingHours.query.filter_by(weekday=weekday).first():
            db.session.add(OperatingHours(weekday=weekday, open_time=open_time,
                                          close_time=close_time, is_active=is_active))

    db.session.commit()
    print("Database seeded successfully.")
