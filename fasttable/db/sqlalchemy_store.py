"""
SQLAlchemy implementation of the store capability set.

Predicates are compiled into SQLAlchemy WHERE clauses against one declarative
model, relations are populated with ``selectinload`` and field kinds come from
the mapped columns' Python types.

Supported predicate forms:
- ``{"name": "Anna"}`` equality (``None`` compares with IS NULL)
- ``{"name": re.compile("ann", re.IGNORECASE)}`` regular expression
- ``{"age": {"$gte": 18, "$lt": 65}}`` operators from FilterOperator
- ``{"$or": [...]}`` / ``{"$and": [...]}`` nested predicates
- ``{"company.name": "Acme"}`` dotted paths through many-to-one relations

Text values compared with a number, boolean or date column are converted to
the column's type first (``"30"``, ``"true"``, ``"2024-01-10"``). A value that
does not convert matches nothing.

Limitations:
- Dotted paths follow many-to-one relations only, joined with LEFT OUTER
  JOIN; collections are rejected. They are not reported by ``field_kinds``,
  so a general search skips them.
- Case-insensitive regular expressions are sent with an inline ``(?i)`` flag,
  which SQLite (Python ``re``) and PostgreSQL understand.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple, Type

from sqlalchemy import and_, false, func, inspect, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from fasttable.db.store import BaseStore, PendingQuery
from fasttable.errors.exceptions import BadRequestError
from fasttable.logging import Logger, ensure_logger
from fasttable.schemas.query import FieldKind, FilterOperator, LogicalOperator
from fasttable.schemas.terms import parse_bool, parse_date, parse_number


def kind_for_type(python_type: type) -> FieldKind:
    """
    Map a Python type to the FieldKind used for search.

    Args:
        python_type: Type of the values stored in a column

    Returns:
        Matching FieldKind; bool and unknown types are FieldKind.OTHER
    """
    if issubclass(python_type, bool):
        return FieldKind.OTHER
    if issubclass(python_type, str):
        return FieldKind.STRING
    if issubclass(python_type, (int, float, Decimal)):
        return FieldKind.NUMBER
    if issubclass(python_type, (datetime, date)):
        return FieldKind.DATE
    return FieldKind.OTHER


def coerce_value(value: Any, python_type: Optional[type]) -> Any:
    """
    Convert a text value to the Python type of the column it is compared with.

    Non-text values, text columns and columns of unknown type are left alone.

    Args:
        value: Value from a predicate
        python_type: Type of the values stored in the column, if known

    Returns:
        Converted value

    Raises:
        ValueError: If the text cannot be read as the column's type
    """
    if not isinstance(value, str) or python_type is None or issubclass(python_type, str):
        return value
    if issubclass(python_type, bool):
        converted: Any = parse_bool(value)
    elif issubclass(python_type, (int, float, Decimal)):
        converted = parse_number(value)
    elif issubclass(python_type, datetime):
        converted = parse_date(value)
    elif issubclass(python_type, date):
        parsed = parse_date(value)
        converted = parsed.date() if parsed is not None else None
    else:
        return value
    if converted is None:
        raise ValueError(f"'{value}' is not a valid {python_type.__name__}")
    return converted


def _python_type(attr: Any) -> Optional[type]:
    try:
        return attr.columns[0].type.python_type
    except NotImplementedError:
        return None


def _is_operator_mapping(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(str(key).startswith("$") for key in value)
    )


def _add_joins(joins: List[Any], relations: Sequence[Any]) -> None:
    # Compared by identity; relationship attributes overload ==
    for relation in relations:
        if not any(relation is seen for seen in joins):
            joins.append(relation)


class FieldRef(NamedTuple):
    """A field path resolved against a model."""

    column: Any
    python_type: Optional[type]
    kind: FieldKind
    joins: Tuple[Any, ...]


class SQLAlchemyPendingQuery(PendingQuery):
    """
    Pending query over a SQLAlchemyStore.

    Predicates are compiled as soon as they are added, so unknown fields
    fail before anything is sent to the database.
    """

    def __init__(self, store: "SQLAlchemyStore", predicate: Mapping[str, Any]):
        self._store = store
        self._joins: List[Any] = []
        self._where: List[ColumnElement[bool]] = [store.compile(predicate, self._joins)]
        self._options: List[Any] = []
        self._order_by: List[Any] = []
        self._offset = 0
        self._limit: Optional[int] = None

    def populate(self, paths: Sequence[str]) -> "SQLAlchemyPendingQuery":
        if isinstance(paths, str):
            paths = [paths]
        for path in paths:
            for name in str(path).split():
                self._options.append(self._store.loader_option(name))
        return self

    def or_(self, predicates: Sequence[Mapping[str, Any]]) -> "SQLAlchemyPendingQuery":
        self._where.append(
            self._store.compile({LogicalOperator.OR.value: predicates}, self._joins)
        )
        return self

    def and_(self, predicates: Sequence[Mapping[str, Any]]) -> "SQLAlchemyPendingQuery":
        self._where.append(
            self._store.compile({LogicalOperator.AND.value: predicates}, self._joins)
        )
        return self

    def sort(self, fields: Sequence[Any]) -> "SQLAlchemyPendingQuery":
        self._order_by = [self._store.order_clause(field, self._joins) for field in fields]
        return self

    def skip(self, n: int) -> "SQLAlchemyPendingQuery":
        self._offset = max(int(n), 0)
        return self

    def limit(self, n: int) -> "SQLAlchemyPendingQuery":
        n = int(n)
        self._limit = n if n > 0 else None
        return self

    def statement(self) -> Select:
        """Build the SELECT statement for the current state of the query."""
        stmt = select(self._store.model)
        for relation in self._joins:
            stmt = stmt.outerjoin(relation)
        stmt = stmt.where(*self._where)
        if self._options:
            stmt = stmt.options(*self._options)
        if self._order_by:
            stmt = stmt.order_by(*self._order_by)
        if self._offset:
            stmt = stmt.offset(self._offset)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    async def execute(self) -> List[Any]:
        result = await self._store.session.execute(self.statement())
        rows = list(result.scalars().all())
        self._store.logger.debug(
            f"Fetched {len(rows)} {self._store.model.__name__} rows "
            f"(offset={self._offset}, limit={self._limit})"
        )
        return rows


class SQLAlchemyStore(BaseStore):
    """
    Store over one SQLAlchemy declarative model and an async session.

    Example:
        ```python
        async with SessionLocal() as session:
            store = SQLAlchemyStore(session, User)
            response = await datatables_query(store, request_body)
        ```
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Type[Any],
        logger: Optional[Logger] = None,
    ) -> None:
        self.session = session
        self.model = model
        self.mapper = inspect(model)
        self.logger = ensure_logger(logger, __name__)
        self._kinds = self._introspect_kinds()

    def find(self, predicate: Mapping[str, Any]) -> SQLAlchemyPendingQuery:
        return SQLAlchemyPendingQuery(self, predicate)

    async def count_documents(self, predicate: Mapping[str, Any]) -> int:
        joins: List[Any] = []
        where = self.compile(predicate, joins)
        stmt = select(func.count()).select_from(self.model)
        for relation in joins:
            stmt = stmt.outerjoin(relation)
        count = await self.session.scalar(stmt.where(where))
        return int(count or 0)

    def field_kinds(self) -> Dict[str, FieldKind]:
        return dict(self._kinds)

    def _introspect_kinds(self) -> Dict[str, FieldKind]:
        kinds: Dict[str, FieldKind] = {}
        for attr in self.mapper.column_attrs:
            python_type = _python_type(attr)
            kinds[attr.key] = FieldKind.OTHER if python_type is None else kind_for_type(python_type)
        return kinds

    def resolve(self, path: str) -> FieldRef:
        """
        Resolve a field name or a dotted path such as ``company.name``.

        Every segment but the last must be a many-to-one relationship; the
        last must be a column of the related model.

        Raises:
            BadRequestError: If the path does not lead to a column
        """
        mapper = self.mapper
        joins: List[Any] = []
        *relations, name = path.split(".")
        for relation in relations:
            prop = mapper.relationships.get(relation)
            if prop is None or prop.uselist:
                raise BadRequestError(
                    message=f"Unknown field '{path}' for {self.model.__name__}",
                    details={"field": path},
                )
            joins.append(getattr(mapper.class_, relation))
            mapper = prop.mapper
        attr = mapper.column_attrs.get(name)
        if attr is None:
            raise BadRequestError(
                message=f"Unknown field '{path}' for {self.model.__name__}",
                details={"field": path},
            )
        python_type = _python_type(attr)
        kind = FieldKind.OTHER if python_type is None else kind_for_type(python_type)
        return FieldRef(getattr(mapper.class_, name), python_type, kind, tuple(joins))

    def loader_option(self, path: str) -> Any:
        """
        Build a ``selectinload`` option for a relation path such as ``author.company``.

        Raises:
            BadRequestError: If a segment of the path is not a relationship
        """
        mapper = self.mapper
        option = None
        for name in path.split("."):
            if name not in mapper.relationships:
                raise BadRequestError(
                    message=f"Unknown relation '{path}' for {self.model.__name__}",
                    details={"populate": path},
                )
            attr = getattr(mapper.class_, name)
            option = selectinload(attr) if option is None else option.selectinload(attr)
            mapper = mapper.relationships[name].mapper
        return option

    def order_clause(self, sort_field: Any, joins: Optional[List[Any]] = None) -> Any:
        """
        Build an ORDER BY clause, collecting the joins a dotted path needs into ``joins``.
        """
        ref = self.resolve(sort_field.field)
        if joins is not None:
            _add_joins(joins, ref.joins)
        return ref.column.desc() if sort_field.descending else ref.column.asc()

    def compile(
        self, predicate: Mapping[str, Any], joins: Optional[List[Any]] = None
    ) -> ColumnElement[bool]:
        """
        Compile a predicate into a WHERE clause.

        Args:
            predicate: Predicate mapping; empty means "match everything"
            joins: List collecting the relations dotted paths join through

        Returns:
            SQLAlchemy boolean clause

        Raises:
            BadRequestError: For unknown fields, operators or empty groups
        """
        if joins is None:
            joins = []
        clauses: List[ColumnElement[bool]] = []
        for key, value in predicate.items():
            if key in (LogicalOperator.AND.value, LogicalOperator.OR.value):
                if not value:
                    raise BadRequestError(
                        message=f"{key} requires a non-empty list of predicates"
                    )
                parts = [self.compile(part, joins) for part in value]
                combine = and_ if key == LogicalOperator.AND.value else or_
                clauses.append(combine(*parts))
            elif str(key).startswith("$"):
                raise BadRequestError(message=f"Unsupported predicate operator '{key}'")
            else:
                ref = self.resolve(key)
                _add_joins(joins, ref.joins)
                clauses.append(self._field_clause(ref, value))
        return and_(true(), *clauses)

    def _field_clause(self, ref: FieldRef, value: Any) -> ColumnElement[bool]:
        column = ref.column

        if isinstance(value, re.Pattern):
            return self._regex_clause(column, ref.kind, value.pattern, bool(value.flags & re.IGNORECASE))
        if _is_operator_mapping(value):
            return self._operator_clauses(ref, value)
        if value is None:
            return column.is_(None)
        try:
            return column == coerce_value(value, ref.python_type)
        except ValueError:
            return false()

    def _operator_clauses(
        self, ref: FieldRef, operators: Mapping[str, Any]
    ) -> ColumnElement[bool]:
        column = ref.column
        clauses: List[ColumnElement[bool]] = []
        options = str(operators.get(FilterOperator.OPTIONS.value, ""))

        for key, value in operators.items():
            try:
                operator = FilterOperator(key)
            except ValueError:
                valid_operators = ", ".join([op.value for op in FilterOperator])
                raise BadRequestError(
                    message=(
                        f"Invalid filter operator: {key}. "
                        f"Allowed operators are: {valid_operators}"
                    )
                )

            if operator == FilterOperator.OPTIONS:
                continue
            elif operator == FilterOperator.REGEX:
                if isinstance(value, re.Pattern):
                    ignore_case = bool(value.flags & re.IGNORECASE) or "i" in options
                    value = value.pattern
                else:
                    ignore_case = "i" in options
                clauses.append(self._regex_clause(column, ref.kind, str(value), ignore_case))
            elif operator in (FilterOperator.IN, FilterOperator.NOT_IN):
                values = self._coerce_all(value, ref.python_type)
                if operator == FilterOperator.IN:
                    clauses.append(column.in_(values))
                else:
                    clauses.append(or_(column.not_in(values), column.is_(None)))
            else:
                clauses.append(self._comparison(column, operator, value, ref.python_type))

        return and_(true(), *clauses)

    def _comparison(
        self, column: Any, operator: FilterOperator, value: Any, python_type: Optional[type]
    ) -> ColumnElement[bool]:
        if value is None:
            if operator == FilterOperator.EQ:
                return column.is_(None)
            if operator == FilterOperator.NE:
                return column.isnot(None)
        try:
            value = coerce_value(value, python_type)
        except ValueError:
            # Nothing equals a value of the wrong type
            return true() if operator == FilterOperator.NE else false()

        if operator == FilterOperator.EQ:
            return column == value
        if operator == FilterOperator.NE:
            # NULL rows count as "not equal"
            return or_(column != value, column.is_(None))
        if operator == FilterOperator.GT:
            return column > value
        if operator == FilterOperator.GE:
            return column >= value
        if operator == FilterOperator.LT:
            return column < value
        return column <= value

    @staticmethod
    def _coerce_all(values: Any, python_type: Optional[type]) -> List[Any]:
        coerced = []
        for value in values:
            try:
                coerced.append(coerce_value(value, python_type))
            except ValueError:
                continue
        return coerced

    def _regex_clause(
        self, column: Any, kind: FieldKind, pattern: str, ignore_case: bool
    ) -> ColumnElement[bool]:
        # Regular expressions only match text
        if kind is not FieldKind.STRING:
            return false()
        if ignore_case:
            pattern = f"(?i){pattern}"
        return column.regexp_match(pattern)
