"""
Helper Functions

Contains utility functions used throughout the application.
"""

import datetime
from typing import Any, Dict, Optional

from bson.objectid import ObjectId
from bson.errors import InvalidId
from flask import request


def get_user_identity(request_obj=None) -> Dict[str, str]:
    """Extract user identity information from request."""
    if request_obj is None:
        request_obj = request

    user_ip = request_obj.remote_addr or 'unknown'

    return {
        'user_ip': user_ip,
        'user_agent': request_obj.headers.get('User-Agent', 'unknown') if hasattr(request_obj, 'headers') else 'unknown'
    }


def utcnow() -> datetime.datetime:
    """Current UTC time as a naive datetime, matching what MongoDB hands back."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for value, or None if it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_json_value(value: Any) -> Any:
    """Convert BSON types (ObjectId, datetime) nested in value to JSON-friendly ones."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return value
