"""
ObjectId parsing for ids that arrive from requests or tokens.
"""

from bson import ObjectId
from bson.errors import InvalidId

from common.utils.exceptions import NotFoundException


def to_object_id(value: str, message: str, code: str) -> ObjectId:
    """Parse an id from a request, treating malformed ids as missing."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundException(message=message, code=code)


def to_user_id(value: str) -> ObjectId:
    """Parse a user id, e.g. a token subject."""
    return to_object_id(value, "User not found", "USER_NOT_FOUND")
