"""
Tests for the sorting module.

This module contains tests for SortDirection, SortField and build_sort.
"""

from fasttable.api.sorting import SortField, build_sort
from fasttable.schemas.query import SortDirection
from fasttable.schemas.request import ColumnSpec, OrderSpec

COLUMNS = [
    ColumnSpec(data="name"),
    ColumnSpec(data="age"),
    ColumnSpec(data="email"),
]


class TestSortDirection:
    """Tests for the SortDirection enum."""

    def test_values(self):
        """Test that enum values are correct."""
        assert SortDirection.ASC == "asc"
        assert SortDirection.DESC == "desc"


class TestSortField:
    """Tests for the SortField class."""

    def test_init(self):
        """Test initialization with default direction."""
        field = SortField("name")
        assert field.field == "name"
        assert field.direction == SortDirection.ASC
        assert not field.descending

    def test_init_with_direction(self):
        """Test initialization with specified direction."""
        field = SortField("name", SortDirection.DESC)
        assert field.direction == SortDirection.DESC
        assert field.descending

    def test_to_dict(self):
        """Test conversion to dictionary."""
        field = SortField("name", SortDirection.DESC)
        assert field.to_dict() == {"field": "name", "direction": "desc"}

    def test_string_representation(self):
        """Test string representation."""
        assert str(SortField("age", SortDirection.DESC)) == "age:desc"
        assert "SortField(field='age'" in repr(SortField("age"))

    def test_equality(self):
        """Test value equality."""
        assert SortField("age") == SortField("age", SortDirection.ASC)
        assert SortField("age") != SortField("age", SortDirection.DESC)
        assert SortField("age") != "age"


class TestBuildSort:
    """Tests for build_sort."""

    def test_default_sort(self):
        """Test that a request without order sorts by id descending."""
        assert build_sort([], COLUMNS) == [SortField("id", SortDirection.DESC)]

    def test_custom_default_field(self):
        """Test a configured default sort field."""
        assert build_sort([], COLUMNS, "created_at") == [
            SortField("created_at", SortDirection.DESC)
        ]

    def test_order_maps_column_index_to_field(self):
        """Test that order entries refer to columns by index."""
        order = [OrderSpec(column=1, dir="desc")]
        assert build_sort(order, COLUMNS) == [SortField("age", SortDirection.DESC)]

    def test_order_keeps_priority(self):
        """Test that the first order entry is the primary key."""
        order = [OrderSpec(column=2, dir="asc"), OrderSpec(column=0, dir="desc")]
        assert build_sort(order, COLUMNS) == [
            SortField("email", SortDirection.ASC),
            SortField("name", SortDirection.DESC),
        ]

    def test_repeated_column(self):
        """Test that a repeated column keeps its position and takes the last direction."""
        order = [
            OrderSpec(column=0, dir="asc"),
            OrderSpec(column=1, dir="asc"),
            OrderSpec(column=0, dir="desc"),
        ]
        assert build_sort(order, COLUMNS) == [
            SortField("name", SortDirection.DESC),
            SortField("age", SortDirection.ASC),
        ]
