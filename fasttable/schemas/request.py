"""
Request schemas for server-side table queries.

These models describe the request a DataTables widget sends when
``serverSide`` processing is enabled. Values arrive form-encoded as often as
JSON, so numeric strings and "true"/"false" flags are accepted; anything that
cannot be read as the declared type is rejected before a query is built.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Pattern, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from fasttable.errors.exceptions import ValidationError
from fasttable.schemas.query import SortDirection


def _as_text(value: Any) -> Any:
    """Read missing terms as empty and scalar terms as their text."""
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class SearchSpec(BaseModel):
    """
    A search term, either global or for a single column.

    Attributes:
        value: Search term; empty means no search
        regex: Treat the term as a case-insensitive regular expression
    """

    model_config = ConfigDict(extra="ignore")

    value: str = Field(default="", description="Search term")
    regex: bool = Field(default=False, description="Interpret the term as a regex")

    @field_validator("value", mode="before")
    def value_as_text(cls, value):
        return _as_text(value)

    @model_validator(mode="after")
    def check_pattern(self) -> "SearchSpec":
        if self.regex and self.value:
            try:
                re.compile(self.value)
            except re.error as e:
                raise ValueError(f"Invalid regular expression '{self.value}': {e}")
        return self

    def compile(self) -> Union[str, Pattern[str]]:
        """
        Return the value to match against.

        Returns:
            A case-insensitive pattern when ``regex`` is set, else the literal term
        """
        if self.regex:
            return re.compile(self.value, re.IGNORECASE)
        return self.value


class OrderSpec(BaseModel):
    """
    One entry of the multi-column sort.

    Attributes:
        column: Index into the request's ``columns``
        dir: Sort direction
    """

    model_config = ConfigDict(extra="ignore")

    column: int = Field(..., ge=0, description="Index of the column to sort by")
    dir: SortDirection = Field(default=SortDirection.ASC, description="Sort direction")

    @field_validator("dir", mode="before")
    def lower_direction(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class ColumnSpec(BaseModel):
    """
    Per-column metadata sent by the widget.

    Attributes:
        data: Field name the column displays
        name: Optional column name
        searchable: Whether the column takes part in the general search
        orderable: Whether the widget allows sorting on the column
        search: Column-level filter term
    """

    model_config = ConfigDict(extra="ignore")

    data: Optional[str] = Field(default=None, description="Field name")
    name: Optional[str] = Field(default=None, description="Column name")
    searchable: bool = Field(default=True)
    orderable: bool = Field(default=True)
    search: SearchSpec = Field(default_factory=SearchSpec)

    @field_validator("data", "name", mode="before")
    def blank_to_none(cls, value):
        value = _as_text(value)
        return value or None


class TableRequest(BaseModel):
    """
    Full request descriptor for one table draw.

    Attributes:
        draw: Draw counter, echoed back in the response
        start: Offset of the first row
        length: Number of rows; 0 or negative means unbounded
        search: General search applied across searchable columns
        order: Sort entries, primary first
        columns: Column definitions
        populate: Relations to load along with each row
        find: Base predicate
    """

    model_config = ConfigDict(extra="ignore")

    draw: int = Field(default=0)
    start: int = Field(default=0)
    length: int = Field(default=0)
    search: SearchSpec = Field(default_factory=SearchSpec)
    order: List[OrderSpec] = Field(default_factory=list)
    columns: List[ColumnSpec] = Field(default_factory=list)
    populate: List[str] = Field(default_factory=list)
    find: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("search", mode="before")
    def empty_search(cls, value):
        return {} if value is None else value

    @field_validator("order", "columns", "populate", mode="before")
    def empty_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return value

    @field_validator("find", mode="before")
    def empty_find(cls, value):
        return {} if value is None else value

    @model_validator(mode="after")
    def check_order_columns(self) -> "TableRequest":
        for entry in self.order:
            if entry.column >= len(self.columns):
                raise ValueError(
                    f"Order column {entry.column} is out of range "
                    f"for {len(self.columns)} columns"
                )
            if self.columns[entry.column].data is None:
                raise ValueError(f"Order column {entry.column} has no data field")
        return self

    @classmethod
    def parse(cls, request: Union["TableRequest", Mapping[str, Any]]) -> "TableRequest":
        """
        Validate a raw request descriptor.

        Args:
            request: A TableRequest or a mapping in the widget's wire format

        Returns:
            Validated TableRequest

        Raises:
            ValidationError: If the descriptor is malformed
        """
        if isinstance(request, cls):
            return request
        try:
            return cls.model_validate(request or {})
        except PydanticValidationError as e:
            fields = [
                {
                    "field": ".".join(str(item) for item in error["loc"]),
                    "message": error["msg"],
                    "code": "VALIDATION_ERROR",
                }
                for error in e.errors()
            ]
            raise ValidationError(message="Invalid table request", fields=fields)
