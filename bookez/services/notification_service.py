import requests
from flask import current_app


class NotificationService:
    """Posts booking events to an external webhook, if one is configured."""

    @staticmethod
    def send(event_type: str, payload: dict) -> bool:
        url = current_app.config.get('NOTIFY_WEBHOOK_URL')
        if not url:
            return False

        try:
            response = requests.post(url, json={'event': event_type, 'data': payload}, timeout=5)
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            current_app.logger.warning(f"Notification '{event_type}' could not be delivered: {e}")
            return False

    @staticmethod
    def no_show(event):
        NotificationService.send('booking.no_show', {
            'booking_id': event.booking_id,
            'member_ids': list(event.member_ids),
            'occurred_at': event.occurred_at.isoformat()
        })

    @staticmethod
    def booking_completed(booking):
        # Feedback is requested from the leader once a booking is finished
        leader = booking.leader
        NotificationService.send('booking.completed', {
            'booking_id': booking.id,
            'code': booking.code,
            'leader_id': leader.member_id if leader else None
        })
