"""
Services Package

Contains all business logic and service classes.
"""

from .account_service import AccountService, get_account_service, initialize_account_service
from .progress_service import ProgressService, get_progress_service, initialize_progress_service
from .mail_service import MailService
from .database import connect, ensure_indexes


def initialize_services(app_config, client=None):
    """
    Connect to MongoDB and build every service from the Flask config.

    Args:
        app_config: Flask config mapping
        client: Optional pre-built MongoDB client

    Returns:
        Tuple of (AccountService, ProgressService)
    """
    client, db = connect(app_config.get('MONGO_URI'), app_config.get('MONGO_DB_NAME', 'typing_test'), client)
    users = db.users
    ensure_indexes(users)

    mail_service = MailService.from_config(app_config)
    account_service = initialize_account_service(users, app_config.get('JWT_SECRET'), mail_service)
    progress_service = initialize_progress_service(users, app_config.get('PROGRESS_MAX_RETRIES', 5))
    return account_service, progress_service


__all__ = [
    'AccountService', 'get_account_service', 'initialize_account_service',
    'ProgressService', 'get_progress_service', 'initialize_progress_service',
    'MailService', 'connect', 'ensure_indexes', 'initialize_services'
]
