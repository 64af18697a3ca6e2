"""Utility functions"""

from return_requests.utils.pagination import page_to_skip
from return_requests.utils.validators import validate_object_id, is_blank

__all__ = ["page_to_skip", "validate_object_id", "is_blank"]
