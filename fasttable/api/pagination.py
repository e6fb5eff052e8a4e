"""
Pagination utilities for server-side table queries.

The widget pages with ``start`` (row offset) and ``length`` (row count).
Both are handed to the store unchanged; the store decides what negative
offsets and a zero or negative ``length`` mean.
"""

from typing import Dict, TypeVar

from fasttable.db.store import PendingQuery

Q = TypeVar("Q", bound=PendingQuery)


class PaginationParams:
    """
    Offset/limit window of one table draw.

    Attributes:
        start: Offset of the first row
        length: Number of rows; 0 or negative means unbounded
    """

    def __init__(self, start: int = 0, length: int = 0):
        self.start = start
        self.length = length

    def get_skip(self) -> int:
        """
        Number of rows to skip.

        Returns:
            The requested offset
        """
        return self.start

    def get_limit(self) -> int:
        """
        Number of rows to return.

        Returns:
            The requested length; 0 or negative means unbounded
        """
        return self.length

    def apply(self, query: Q) -> Q:
        """
        Apply the window to a pending query.

        Args:
            query: Pending store query

        Returns:
            The same query with skip and limit set
        """
        return query.skip(self.get_skip()).limit(self.get_limit())

    def to_dict(self) -> Dict[str, int]:
        """
        Convert pagination parameters to a dictionary.

        Returns:
            Dictionary with start and length
        """
        return {"start": self.start, "length": self.length}
