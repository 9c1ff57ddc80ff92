from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from bookez.extensions import db
from bookez.services.errors import InfrastructureError


def commit(action: str):
    """Commit the session; on failure roll back and raise InfrastructureError."""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error {action}: {e}")
        raise InfrastructureError(str(e)) from e
