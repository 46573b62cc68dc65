"""
Utilities Package

Contains utility functions and the activity logger.
"""

from .helpers import get_user_identity, parse_object_id, to_json_value, utcnow
from .activity_logger import activity_logger

__all__ = ['get_user_identity', 'parse_object_id', 'to_json_value', 'utcnow', 'activity_logger']
