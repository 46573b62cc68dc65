"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env next to this module
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))

    # Database Settings
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'typing_test')

    # Authentication Settings
    JWT_SECRET = os.getenv('JWT_SECRET')
    JWT_EXPIRATION_SECONDS = int(os.getenv('JWT_EXPIRATION_SECONDS', 3600))
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', 12))
    MAX_FAILED_LOGINS = int(os.getenv('MAX_FAILED_LOGINS', 5))
    LOCK_DURATION_SECONDS = int(os.getenv('LOCK_DURATION_SECONDS', 900))

    # Password Reset Settings
    RESET_TOKEN_BYTES = int(os.getenv('RESET_TOKEN_BYTES', 20))
    RESET_TOKEN_TTL_SECONDS = int(os.getenv('RESET_TOKEN_TTL_SECONDS', 3600))
    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:3000')

    # Mail Settings
    EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'log')  # "log" or "smtp"
    MAIL_SERVER = os.getenv('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.getenv('MAIL_PORT', 587))
    MAIL_USERNAME = os.getenv('MAIL_USERNAME', '')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD', '')
    MAIL_FROM = os.getenv('MAIL_FROM', os.getenv('MAIL_USERNAME', 'noreply@example.com'))
    MAIL_ASYNC = os.getenv('MAIL_ASYNC', 'True').lower() == 'true'
    MAIL_MAX_RETRIES = int(os.getenv('MAIL_MAX_RETRIES', 3))
    MAIL_RETRY_DELAY_SECONDS = float(os.getenv('MAIL_RETRY_DELAY_SECONDS', 2))

    # Progress Settings
    PROGRESS_MAX_RETRIES = int(os.getenv('PROGRESS_MAX_RETRIES', 5))

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    JWT_SECRET = 'test-jwt-secret'
    BCRYPT_ROUNDS = 4
    EMAIL_BACKEND = 'log'
    MAIL_ASYNC = False
    MAIL_RETRY_DELAY_SECONDS = 0
    FRONTEND_URL = 'http://frontend.test'


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
