"""
Store capability set consumed by the table query adapter.

A store wraps one collection/table. It hands out chainable pending queries,
counts rows for a predicate and reports the declared kind of each field.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Sequence

from fasttable.schemas.query import FieldKind


class PendingQuery(ABC):
    """
    Chainable query builder returned by BaseStore.find.

    Every builder method returns the query itself; nothing runs until
    ``execute`` is awaited.
    """

    @abstractmethod
    def populate(self, paths: Sequence[str]) -> "PendingQuery":
        """Load the named relations along with each row."""
        pass

    @abstractmethod
    def or_(self, predicates: Sequence[Mapping[str, Any]]) -> "PendingQuery":
        """AND the disjunction of ``predicates`` into the query."""
        pass

    @abstractmethod
    def and_(self, predicates: Sequence[Mapping[str, Any]]) -> "PendingQuery":
        """AND every one of ``predicates`` into the query."""
        pass

    @abstractmethod
    def sort(self, fields: Sequence[Any]) -> "PendingQuery":
        """Order rows by sort fields (objects with ``field`` and ``descending``), primary first."""
        pass

    @abstractmethod
    def skip(self, n: int) -> "PendingQuery":
        """Skip the first ``n`` matching rows."""
        pass

    @abstractmethod
    def limit(self, n: int) -> "PendingQuery":
        """Return at most ``n`` rows; 0 or negative means unbounded."""
        pass

    @abstractmethod
    async def execute(self) -> List[Any]:
        """Run the query and return the matching rows."""
        pass


class BaseStore(ABC):
    """
    Abstract base class for stores.

    Defines the operations the table query adapter relies on.
    """

    @abstractmethod
    def find(self, predicate: Mapping[str, Any]) -> PendingQuery:
        """Start a query for rows matching ``predicate``."""
        pass

    @abstractmethod
    async def count_documents(self, predicate: Mapping[str, Any]) -> int:
        """Count rows matching ``predicate``."""
        pass

    @abstractmethod
    def field_kinds(self) -> Dict[str, FieldKind]:
        """Declared kind of every field of the collection."""
        pass
