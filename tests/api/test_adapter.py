"""
Tests for the table query adapter.

The store is a mock so these tests check what the adapter asks for,
not what a database returns.
"""

import logging
import re

import pytest

from fasttable.api.adapter import QueryAdapter, TableQuery, build_query, datatables_query
from fasttable.api.pagination import PaginationParams
from fasttable.api.sorting import SortField
from fasttable.config import TestingSettings
from fasttable.errors.exceptions import ValidationError
from fasttable.schemas.query import FieldKind, SortDirection
from fasttable.schemas.request import TableRequest
from fasttable.schemas.response import TableResponse


def make_request(**overrides):
    request = {
        "draw": 3,
        "start": 0,
        "length": 10,
        "columns": [
            {"data": "name", "searchable": True},
            {"data": "age", "searchable": True},
            {"data": "email", "searchable": False},
        ],
    }
    request.update(overrides)
    return request


class TestBuildQuery:
    """Tests for planning a request without I/O."""

    def test_plain_request(self):
        """Test a request with no search, filter or order."""
        table_query = build_query(TableRequest.parse(make_request()))
        assert table_query.predicate == {}
        assert table_query.any_of == []
        assert table_query.all_of == []
        assert table_query.sort == [SortField("id", SortDirection.DESC)]
        assert table_query.pagination.to_dict() == {"start": 0, "length": 10}

    def test_find_and_additional(self):
        """Test that the caller predicate is merged over find."""
        request = TableRequest.parse(make_request(find={"status": "active", "age": 30}))
        table_query = build_query(request, {"status": "inactive"})
        assert table_query.predicate == {"status": "inactive", "age": 30}

    def test_search_uses_field_kinds(self):
        """Test that the OR group honours the declared kinds."""
        request = TableRequest.parse(make_request(search={"value": "30"}))
        kinds = {"name": FieldKind.STRING, "age": FieldKind.NUMBER}
        table_query = build_query(request, field_kinds=kinds)
        assert table_query.any_of == [{"name": "30"}, {"age": 30}]

    def test_populate(self):
        """Test that populate paths are carried into the plan."""
        request = TableRequest.parse(make_request(populate="company owner"))
        assert build_query(request).populate == ["company", "owner"]

    def test_filtered_predicate(self):
        """Test the combined predicate used for filtered counts."""
        table_query = TableQuery(
            predicate={"status": "active"},
            any_of=[{"name": "a"}, {"email": "a"}],
            all_of=[{"age": 30}],
        )
        assert table_query.filtered_predicate == {
            "$and": [
                {"status": "active"},
                {"$or": [{"name": "a"}, {"email": "a"}]},
                {"age": 30},
            ]
        }

    def test_filtered_predicate_single_clause(self):
        """Test that a lone clause is not wrapped."""
        assert TableQuery(predicate={"status": "active"}).filtered_predicate == {
            "status": "active"
        }
        assert TableQuery(predicate={}).filtered_predicate == {}

    def test_apply_order(self, mock_store):
        """Test that the plan drives the pending query in order."""
        query = mock_store.pending
        table_query = TableQuery(
            predicate={},
            any_of=[{"name": "a"}],
            all_of=[{"age": 30}],
            sort=[SortField("name")],
            populate=["company"],
            pagination=PaginationParams(5, 10),
        )

        assert table_query.apply(query) is query

        assert [name for name, _, _ in query.method_calls] == [
            "populate",
            "or_",
            "and_",
            "sort",
            "skip",
            "limit",
        ]
        query.or_.assert_called_once_with([{"name": "a"}])
        query.and_.assert_called_once_with([{"age": 30}])

    def test_apply_skips_empty_groups(self, mock_store):
        """Test that empty OR/AND groups are not sent to the store."""
        TableQuery(predicate={}).apply(mock_store.pending)
        mock_store.pending.or_.assert_not_called()
        mock_store.pending.and_.assert_not_called()


class TestQueryAdapter:
    """Tests for QueryAdapter.execute."""

    @pytest.mark.asyncio
    async def test_no_search_uses_base_predicate_only(self, mock_store):
        """Test that a plain request only finds by the base predicate."""
        adapter = QueryAdapter()
        await adapter.execute(mock_store, make_request(), {"deleted": False})

        mock_store.find.assert_called_once_with({"deleted": False})
        mock_store.pending.or_.assert_not_called()
        mock_store.pending.and_.assert_not_called()
        mock_store.pending.sort.assert_called_once_with([SortField("id", SortDirection.DESC)])
        mock_store.pending.skip.assert_called_once_with(0)
        mock_store.pending.limit.assert_called_once_with(10)

    @pytest.mark.asyncio
    async def test_response_envelope(self, mock_store):
        """Test that the draw is echoed and both counts are the base count."""
        rows = [{"name": "Anna"}, {"name": "Dan"}]
        mock_store.pending.execute.return_value = rows
        mock_store.count_documents.return_value = 42

        response = await QueryAdapter().execute(mock_store, make_request(draw=7))

        assert isinstance(response, TableResponse)
        assert response.draw == 7
        assert response.records_total == 42
        assert response.records_filtered == 42
        assert response.data == rows
        assert response.to_dict() == {
            "draw": 7,
            "recordsTotal": 42,
            "recordsFiltered": 42,
            "data": rows,
        }

    @pytest.mark.asyncio
    async def test_missing_draw(self, mock_store):
        """Test that a request without draw echoes 0."""
        request = make_request()
        del request["draw"]
        response = await QueryAdapter().execute(mock_store, request)
        assert response.draw == 0

    @pytest.mark.asyncio
    async def test_read_before_count(self, mock_store):
        """Test that the page is read before the rows are counted."""
        calls = []
        mock_store.pending.execute.side_effect = lambda: calls.append("read") or []
        mock_store.count_documents.side_effect = lambda predicate: calls.append("count") or 1

        await QueryAdapter().execute(mock_store, make_request())

        assert calls == ["read", "count"]

    @pytest.mark.asyncio
    async def test_count_ignores_search_and_filters(self, mock_store):
        """Test that the total is counted over the base predicate only."""
        mock_store.field_kinds.return_value = {"name": FieldKind.STRING}
        request = make_request(
            search={"value": "ann", "regex": True},
            columns=[
                {"data": "name"},
                {"data": "status", "search": {"value": "active"}},
            ],
            find={"deleted": False},
        )

        await QueryAdapter().execute(mock_store, request)

        mock_store.count_documents.assert_awaited_once_with({"deleted": False})
        mock_store.pending.and_.assert_called_once_with([{"status": "active"}])
        (or_group,), _ = mock_store.pending.or_.call_args
        assert list(or_group[0]) == ["name"]
        assert or_group[0]["name"].pattern == "ann"

    @pytest.mark.asyncio
    async def test_count_filtered(self, mock_store):
        """Test the opt-in filtered count."""
        mock_store.count_documents.side_effect = [10, 4]
        request = make_request(columns=[{"data": "status", "search": {"value": "active"}}])

        response = await QueryAdapter(count_filtered=True).execute(
            mock_store, request, {"deleted": False}
        )

        assert response.records_total == 10
        assert response.records_filtered == 4
        assert mock_store.count_documents.await_args_list[1].args == (
            {"$and": [{"deleted": False}, {"status": "active"}]},
        )

    @pytest.mark.asyncio
    async def test_field_kinds_only_for_search(self, mock_store):
        """Test that field kinds are looked up only when there is a search term."""
        await QueryAdapter().execute(mock_store, make_request())
        mock_store.field_kinds.assert_not_called()

        await QueryAdapter().execute(mock_store, make_request(search={"value": "x"}))
        mock_store.field_kinds.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_search_group_is_logged(self, mock_store, caplog):
        """Test that the OR group is logged at debug level."""
        logger = logging.getLogger("tests.adapter")
        logger.setLevel(logging.DEBUG)
        caplog.set_level(logging.DEBUG, logger="tests.adapter")
        mock_store.field_kinds.return_value = {"name": FieldKind.STRING}

        await QueryAdapter(logger=logger).execute(
            mock_store, make_request(search={"value": "anna"})
        )

        assert "General search OR group: [{'name': 'anna'}]" in caplog.text

    @pytest.mark.asyncio
    async def test_sort_and_window_are_logged(self, mock_store, caplog):
        """Test that the planned sort and window are logged at debug level."""
        logger = logging.getLogger("tests.adapter.plan")
        logger.setLevel(logging.DEBUG)
        caplog.set_level(logging.DEBUG, logger="tests.adapter.plan")

        await QueryAdapter(logger=logger).execute(
            mock_store, make_request(start=10, length=5)
        )

        assert (
            "Sort: [{'field': 'id', 'direction': 'desc'}], "
            "window: {'start': 10, 'length': 5}"
        ) in caplog.text

    @pytest.mark.asyncio
    async def test_malformed_request(self, mock_store):
        """Test that malformed descriptors are rejected before the store is used."""
        request = make_request(order=[{"column": 9, "dir": "asc"}])

        with pytest.raises(ValidationError) as exc_info:
            await QueryAdapter().execute(mock_store, request)

        assert exc_info.value.message == "Invalid table request"
        assert exc_info.value.fields
        mock_store.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_error_propagates(self, mock_store):
        """Test that store failures are not translated."""
        mock_store.pending.execute.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError, match="connection lost"):
            await QueryAdapter().execute(mock_store, make_request())

        mock_store.count_documents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_default_sort_field(self, mock_store):
        """Test the configured default sort field."""
        await QueryAdapter(default_sort_field="created_at").execute(
            mock_store, make_request()
        )
        mock_store.pending.sort.assert_called_once_with(
            [SortField("created_at", SortDirection.DESC)]
        )

    def test_from_settings(self, monkeypatch):
        """Test building an adapter from settings."""
        monkeypatch.setenv("DATATABLES_DEFAULT_SORT_FIELD", "created_at")
        monkeypatch.setenv("DATATABLES_COUNT_FILTERED", "true")

        adapter = QueryAdapter.from_settings(TestingSettings())

        assert adapter.default_sort_field == "created_at"
        assert adapter.count_filtered is True


class TestDatatablesQuery:
    """Tests for the datatables_query entry point."""

    @pytest.mark.asyncio
    async def test_defaults(self, mock_store):
        """Test a call without settings."""
        mock_store.count_documents.return_value = 2
        response = await datatables_query(mock_store, make_request(), {"deleted": False})
        assert response.records_total == 2
        mock_store.find.assert_called_once_with({"deleted": False})

    @pytest.mark.asyncio
    async def test_with_settings(self, mock_store, monkeypatch):
        """Test a call with settings."""
        monkeypatch.setenv("DATATABLES_DEFAULT_SORT_FIELD", "name")
        await datatables_query(mock_store, make_request(), settings=TestingSettings())
        mock_store.pending.sort.assert_called_once_with(
            [SortField("name", SortDirection.DESC)]
        )

    @pytest.mark.asyncio
    async def test_accepts_parsed_request(self, mock_store):
        """Test that an already validated request is used as is."""
        request = TableRequest.parse(make_request(draw=11))
        response = await datatables_query(mock_store, request)
        assert response.draw == 11


def test_regex_search_term_is_case_insensitive_pattern():
    """Regex search terms reach the store as compiled, case-insensitive patterns."""
    request = TableRequest.parse(make_request(search={"value": "AnN", "regex": True}))
    table_query = build_query(request, field_kinds={"name": FieldKind.STRING})
    pattern = table_query.any_of[0]["name"]
    assert isinstance(pattern, re.Pattern)
    assert pattern.search("anna")
