"""
Database Connection

Creates the MongoDB client and prepares the users collection.
"""

import logging

from pymongo import ASCENDING
from pymongo.mongo_client import MongoClient
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)


def connect(mongo_uri: str, db_name: str, client=None):
    """
    Open (or reuse) a MongoDB client and return the target database.

    Args:
        mongo_uri: MongoDB connection string, ignored when client is given
        db_name: Database name
        client: An already-built client (tests pass a mongomock client)

    Returns:
        Tuple of (client, database)
    """
    if client is None:
        client = MongoClient(mongo_uri, server_api=ServerApi('1'))

        # Test connection
        try:
            client.admin.command('ping')
            logger.info("Successfully connected to MongoDB")
        except Exception as e:
            logger.error("MongoDB connection error: %s", e)
            raise

    return client, client[db_name]


def ensure_indexes(users_collection) -> None:
    """Create the unique identity indexes and the reset-token lookup index."""
    users_collection.create_index([('username', ASCENDING)], unique=True)
    users_collection.create_index([('email', ASCENDING)], unique=True)
    users_collection.create_index([('resetPasswordToken', ASCENDING)], sparse=True)
