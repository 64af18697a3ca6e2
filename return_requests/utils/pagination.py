"""Pagination utilities"""


def page_to_skip(page: int = 1, limit: int = 20) -> int:
    """
    Convert a 1-indexed page number to a cursor skip

    Args:
        page: Current page number (1-indexed)
        limit: Number of items per page

    Returns:
        Number of documents to skip
    """
    return (max(page, 1) - 1) * limit
