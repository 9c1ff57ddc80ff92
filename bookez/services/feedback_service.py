from flask import current_app
from bookez.models import Booking, Feedback, BookingStatus
from bookez.extensions import db
from bookez.services.errors import PolicyViolation, EligibilityError, StateError, NotFoundError, returns_outcome
from bookez.utils.context import RequestContext
from bookez.utils.db import commit


class FeedbackService:

    @staticmethod
    @returns_outcome
    def submit_feedback(ctx: RequestContext, booking_id, rating, comment=None):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking not found.")

        leader = booking.leader
        if not leader or leader.member_id != ctx.member_id:
            raise EligibilityError("Only the booking leader can give feedback.")
        if booking.status != BookingStatus.SELESAI:
            raise StateError("Feedback can only be given for completed bookings.")
        if booking.feedback is not None:
            raise StateError("Feedback has already been submitted for this booking.")

        try:
            rating = int(rating)
        except (TypeError, ValueError):
            raise PolicyViolation("Rating must be a number between 1 and 5.")
        if not 1 <= rating <= 5:
            raise PolicyViolation("Rating must be a number between 1 and 5.")

        feedback = Feedback(booking_id=booking.id, rating=rating, comment=(comment or '').strip() or None,
                            created_at=ctx.now)
        db.session.add(feedback)
        commit("saving feedback")
        current_app.logger.info(f"Feedback ({rating}/5) received for booking {booking.code}")
        return feedback

    @staticmethod
    def summary(limit=10):
        """Average rating, feedback count and the latest entries with their booking codes."""
        average, count = db.session.query(db.func.avg(Feedback.rating), db.func.count(Feedback.id)).one()
        latest = Feedback.query.order_by(Feedback.id.desc()).limit(limit).all()
        return {
            'average_rating': round(float(average), 2) if average is not None else 0.0,
            'count': count,
            'latest': [dict(f.to_dict(), booking_code=f.booking.code) for f in latest]
        }
