"""Typed outcomes for booking operations.

Expected business failures are modelled as ``BookingError`` subclasses. Each one
carries a stable ``code`` for callers and a human-readable ``reason``. Operations
return them inside an ``Outcome`` instead of letting them escape. Storage
failures are different: they roll back and surface as ``InfrastructureError``.
"""
from dataclasses import dataclass
from functools import wraps
from typing import Any, Optional

from bookez.extensions import db


class BookingError(ValueError):
    code = 'booking_error'
    http_status = 400

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason

    def to_dict(self):
        return {'error': self.code, 'message': self.reason}


class PolicyViolation(BookingError):
    """Capacity, duration, operating hours, holiday or buffer time."""
    code = 'policy_violation'
    http_status = 400


class ConflictError(BookingError):
    """Time-slot overlap for the room or for a roster member."""
    code = 'conflict'
    http_status = 409


class EligibilityError(BookingError):
    """Inactive member, elevated role, duplicate roster entry, or not the leader."""
    code = 'eligibility'
    http_status = 403


class BlockedError(BookingError):
    code = 'blocked'
    http_status = 403


class StateError(BookingError):
    """Wrong booking status or outside the allowed time window."""
    code = 'invalid_state'
    http_status = 409


class NotFoundError(BookingError):
    code = 'not_found'
    http_status = 404


class InfrastructureError(Exception):
    """Storage failure; the transaction has already been rolled back."""


@dataclass
class Outcome:
    value: Any = None
    error: Optional[BookingError] = None

    @property
    def ok(self):
        return self.error is None

    @classmethod
    def success(cls, value=None):
        return cls(value=value)

    @classmethod
    def failure(cls, error: BookingError):
        return cls(error=error)


def returns_outcome(f):
    """
    Wrap a service operation so expected BookingErrors come back as
    Outcome.failure and the return value as Outcome.success. The session is
    rolled back on failure so no partial writes (or row locks) survive.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return Outcome.success(f(*args, **kwargs))
        except BookingError as e:
            db.session.rollback()
            return Outcome.failure(e)
    return decorated
