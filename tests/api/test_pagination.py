"""
Tests for the pagination module.
"""

from unittest.mock import MagicMock

from fasttable.api.pagination import PaginationParams


class TestPaginationParams:
    """Tests for the PaginationParams class."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        params = PaginationParams()
        assert params.start == 0
        assert params.length == 0

    def test_skip_and_limit(self):
        """Test skip and limit for a bounded window."""
        params = PaginationParams(start=20, length=10)
        assert params.get_skip() == 20
        assert params.get_limit() == 10

    def test_unbounded_limit_passes_through(self):
        """Test that zero or negative lengths are left to the store."""
        assert PaginationParams(length=0).get_limit() == 0
        assert PaginationParams(length=-1).get_limit() == -1

    def test_to_dict(self):
        """Test conversion to dictionary."""
        assert PaginationParams(5, 25).to_dict() == {"start": 5, "length": 25}

    def test_apply_passes_values_through(self):
        """Test that the window is handed to the query unchanged."""
        query = MagicMock()
        query.skip.return_value = query
        query.limit.return_value = query

        result = PaginationParams(start=-3, length=-1).apply(query)

        assert result is query
        query.skip.assert_called_once_with(-3)
        query.limit.assert_called_once_with(-1)

    def test_apply_uses_getters(self):
        """Test that apply reads the window through get_skip and get_limit."""

        class FirstPage(PaginationParams):
            def get_skip(self):
                return 0

        query = MagicMock()
        query.skip.return_value = query
        query.limit.return_value = query

        FirstPage(start=40, length=10).apply(query)

        query.skip.assert_called_once_with(0)
        query.limit.assert_called_once_with(10)
