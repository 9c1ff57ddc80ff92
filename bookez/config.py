import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bookez.db'
    TIMEZONE = os.environ.get('BOOKEZ_TIMEZONE') or 'Asia/Jakarta'
    NOTIFY_WEBHOOK_URL = os.environ.get('NOTIFY_WEBHOOK_URL')
    JWT_EXPIRY_HOURS = 24

    # Fallback when a weekday has no operating hours row
    WORKING_HOURS_START = 8  # 8 AM
    WORKING_HOURS_END = 19   # 7 PM

    # Business Rules Defaults
    NO_SHOW_GRACE_MINUTES = 10
    MIN_BOOKING_MINUTES = 15
    BOOKING_BUFFER_MINUTES = 0
    RESCHEDULE_BUFFER_MINUTES = 5
    RESCHEDULE_CUTOFF_MINUTES = 60
    VIOLATION_WINDOW_DAYS = 30
    BLOCK_HOURS = 24
    SUSPENSION_DAYS = 7
    SUSPENSION_THRESHOLD = 3

    BOOKINGS_PER_PAGE = 10
    SYNC_STATUSES_ON_READ = True

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    NOTIFY_WEBHOOK_URL = None

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
