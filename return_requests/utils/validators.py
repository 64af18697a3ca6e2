"""Custom validators"""

from bson import ObjectId
from bson.errors import InvalidId
from typing import Optional


def validate_object_id(id_str: str) -> bool:
    """
    Validate if a string is a valid MongoDB ObjectId

    Args:
        id_str: String to validate

    Returns:
        True if valid ObjectId, False otherwise
    """
    try:
        ObjectId(id_str)
        return True
    except (InvalidId, TypeError):
        return False


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only form input"""
    return value is None or not value.strip()
