import click
from flask import Flask
from bookez.config import DevelopmentConfig
from bookez.extensions import db, migrate


def create_app(config_class=DevelopmentConfig):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from bookez import models  # noqa: F401 registers tables for migrations
    from bookez.services.status_service import build_default_engine
    from bookez.services.notification_service import NotificationService
    app.extensions['bookez_status_engine'] = build_default_engine()
    # Called with the booking after its leader marks it finished
    app.extensions['bookez_completion_listeners'] = (NotificationService.booking_completed,)

    # Register Blueprints
    from bookez.api.routes.auth import auth_bp
    from bookez.api.routes.rooms import rooms_bp
    from bookez.api.routes.members import members_bp
    from bookez.api.routes.bookings import bookings_bp
    from bookez.api.routes.me import me_bp
    from bookez.api.routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(rooms_bp, url_prefix='/api/rooms')
    app.register_blueprint(members_bp, url_prefix='/api/members')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(me_bp, url_prefix='/api/me')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route('/health')
    def health():
        return {"status": "ok", "app": "BookEZ"}

    @app.cli.command('sweep-statuses')
    def sweep_statuses():
        """Run the booking status sweep once (schedule with cron)."""
        from bookez.services.status_service import get_status_engine
        from bookez.utils import clock
        result = get_status_engine().run(clock.now())
        click.echo(f"{len(result.forfeited)} forfeited, {len(result.completed)} completed, "
                   f"{result.rooms_changed} room(s) updated")

    return app
