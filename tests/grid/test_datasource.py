"""
Tests for GridDataSource (the host grid contract).

Covers window requests, stale-result detection, the edit sink and the
resize entry point.
"""

import asyncio

import pytest

from sheetgrid.grid import GridDataSource, SparseGrid


@pytest.fixture
def source(grid):
    return GridDataSource(grid)


class TestRequest:
    """Tests for GridDataSource.request()."""

    @pytest.mark.asyncio
    async def test_request_returns_rows_and_total(self, source):
        source.on_edit(42, 3, "hello")

        response = await source.request(40, 45)

        assert len(response.rows) == 5
        assert response.rows[2]["col_3"] == "hello"
        assert response.total_row_count == 100000
        assert response.start_row == 40
        assert response.end_row == 45

    @pytest.mark.asyncio
    async def test_end_row_is_clamped_to_row_count(self):
        source = GridDataSource(SparseGrid(3, 2))

        response = await source.request(0, 5)

        assert len(response.rows) == 3
        assert response.end_row == 3
        assert response.total_row_count == 3

    @pytest.mark.asyncio
    async def test_request_ids_increase(self, source):
        first = await source.request(0, 10)
        second = await source.request(10, 20)

        assert second.request_id == first.request_id + 1
        assert source.last_request_id == second.request_id

    @pytest.mark.asyncio
    async def test_superseded_response_is_stale(self, source):
        first = await source.request(0, 10)
        second = await source.request(0, 10)

        assert source.is_stale(first)
        assert not source.is_stale(second)

    @pytest.mark.asyncio
    async def test_resize_makes_response_stale(self, source):
        response = await source.request(0, 10)
        assert not source.is_stale(response)

        assert source.resize(50, 10)

        assert source.is_stale(response)

    @pytest.mark.asyncio
    async def test_overlapping_requests_resolve_independently(self, source):
        """Both in-flight requests complete; only the newest is current."""
        older, newer = await asyncio.gather(source.request(0, 5), source.request(5, 10))

        assert source.is_stale(older)
        assert not source.is_stale(newer)
        assert newer.start_row == 5

    @pytest.mark.asyncio
    async def test_window_past_end_reports_empty_range(self):
        source = GridDataSource(SparseGrid(10, 2))

        response = await source.request(20, 30)

        assert response.rows == []
        assert response.start_row == 10
        assert response.end_row == 10
        assert response.total_row_count == 10

    @pytest.mark.asyncio
    async def test_edit_while_request_is_suspended(self, source, grid):
        """An edit landing mid-request is stored and shows up in the next window."""
        task = asyncio.ensure_future(source.request(0, 5))
        await asyncio.sleep(0)
        assert not task.done()

        source.on_edit(2, 1, "late")
        in_flight = await task

        assert grid.store[(2, 1)] == "late"
        assert len(in_flight.rows) == 5

        follow_up = await source.request(0, 5)
        assert follow_up.rows[2]["col_1"] == "late"
        assert source.is_stale(in_flight)
        assert not source.is_stale(follow_up)


class TestOnEdit:
    """Tests for GridDataSource.on_edit()."""

    def test_edit_by_column_index(self, source):
        source.on_edit(1, 2, "v")
        assert source.grid.get_cell(1, 2) == "v"

    def test_edit_by_field_name(self, source):
        source.on_edit(1, "col_2", "v")
        assert source.grid.get_cell(1, 2) == "v"

    def test_none_value_clears(self, source):
        source.on_edit(1, 2, "v")
        source.on_edit(1, 2, None)
        assert len(source.grid) == 0

    def test_unknown_field_name_raises(self, source):
        with pytest.raises(ValueError):
            source.on_edit(1, "price", "v")


class TestResize:
    """Tests for GridDataSource.resize()."""

    def test_accepted_resize_returns_true(self, source):
        assert source.resize(10, 3) is True
        assert source.grid.row_count == 10
        assert source.grid.col_count == 3

    def test_rejected_resize_returns_false_and_keeps_size(self, source):
        assert source.resize(-1, 10) is False
        assert source.grid.row_count == 100000
        assert source.grid.col_count == 10
        assert source.grid.generation == 0
