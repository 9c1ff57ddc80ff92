from bookez.models import Room, Booking, RoomType, RoomStatus, BookingStatus
from bookez.extensions import db
from bookez.services.errors import PolicyViolation, ConflictError, NotFoundError, StateError
from bookez.utils.db import commit


class RoomService:

    @staticmethod
    def get_room(room_id):
        room = db.session.get(Room, room_id)
        if not room:
            raise NotFoundError("Room not found.")
        return room

    @staticmethod
    def list_rooms(room_type: RoomType = None, name: str = None):
        query = Room.query
        if room_type:
            query = query.filter(Room.room_type == room_type)
        if name:
            query = query.filter(Room.name.ilike(f"%{name}%"))
        return query.order_by(Room.name.asc()).all()

    @staticmethod
    def validate_capacity(min_capacity, max_capacity):
        if min_capacity is None or max_capacity is None or min_capacity <= 0 or max_capacity <= 0:
            raise PolicyViolation("Room capacities must be positive numbers.")
        if min_capacity >= max_capacity:
            raise PolicyViolation("Minimum capacity must be lower than maximum capacity.")

    @staticmethod
    def create_room(name, room_type: RoomType, min_capacity, max_capacity, description=None,
                    rules=None, photo=None, status: RoomStatus = RoomStatus.AVAILABLE):
        if not name:
            raise PolicyViolation("Room name is required.")
        RoomService.validate_capacity(min_capacity, max_capacity)
        if Room.query.filter_by(name=name).first():
            raise ConflictError("Room name already exists.")

        room = Room(
            name=name,
            room_type=room_type,
            min_capacity=min_capacity,
            max_capacity=max_capacity,
            description=description,
            rules=rules,
            photo=photo,
            status=status
        )
        db.session.add(room)
        commit("creating room")
        return room

    @staticmethod
    def update_room(room_id, **fields):
        room = RoomService.get_room(room_id)

        name = fields.get('name', room.name)
        if not name:
            raise PolicyViolation("Room name is required.")
        if name != room.name and Room.query.filter_by(name=name).first():
            raise ConflictError("Room name already exists.")
        RoomService.validate_capacity(fields.get('min_capacity', room.min_capacity),
                                      fields.get('max_capacity', room.max_capacity))

        for key in ('name', 'room_type', 'min_capacity', 'max_capacity', 'description', 'rules', 'photo', 'status'):
            if key in fields:
                setattr(room, key, fields[key])
        commit("updating room")
        return room

    @staticmethod
    def is_in_use(room_id) -> bool:
        return Booking.query.filter(
            Booking.room_id == room_id,
            Booking.status == BookingStatus.AKTIF
        ).first() is not None

    @staticmethod
    def delete_room(room_id):
        room = RoomService.get_room(room_id)
        if RoomService.is_in_use(room_id):
            raise StateError("Cannot delete a room that has active bookings.")
        if room.bookings.first() is not None:
            # Keep history intact; retire the room instead
            room.status = RoomStatus.UNAVAILABLE
            commit("retiring room")
            return False
        db.session.delete(room)
        commit("deleting room")
        return True

