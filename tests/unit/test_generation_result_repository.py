from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from bpmnhub.database.exceptions import GenerationResultNotFoundError
from bpmnhub.database.models import GenerationResultRecord
from bpmnhub.database.repositories.generation_result_repository import (
    GenerationResultRepository,
)

_NOW = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
_GET_CONNECTION = (
    "bpmnhub.database.repositories.generation_result_repository.get_connection"
)


def _make_row() -> dict:
    return {
        "id": 5,
        "project_id": 7,
        "cycle": 1,
        "outcome": "success",
        "payload": "<definitions/>",
        "kind": "as_is",
        "status": "pending",
        "attempts": 0,
        "error_message": None,
        "locked_at": None,
        "created_at": _NOW,
        "updated_at": _NOW,
    }


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _cursor_conn(row: dict | None) -> MagicMock:
    mock_cursor = MagicMock()
    mock_cursor.fetchone.return_value = row
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn


class TestClaimNextResult:
    def test_returns_none_when_nothing_pending(self) -> None:
        conn = _cursor_conn(None)

        result = GenerationResultRepository(max_attempts=3).claim_next_result(conn)

        assert result is None
        conn.execute.assert_not_called()
        conn.commit.assert_not_called()

    def test_claims_and_marks_processing(self) -> None:
        conn = _cursor_conn(_make_row())

        result = GenerationResultRepository(max_attempts=3).claim_next_result(conn)

        assert isinstance(result, GenerationResultRecord)
        assert result.id == 5
        assert result.status == "processing"
        sql, params = conn.execute.call_args.args
        assert "status = 'processing'" in sql
        assert params == (5,)
        conn.commit.assert_called_once()

    def test_skips_locked_rows_and_exhausted_attempts(self) -> None:
        conn = _cursor_conn(None)

        GenerationResultRepository(max_attempts=4).claim_next_result(conn)

        cursor = conn.cursor.return_value.__enter__.return_value
        sql, params = cursor.execute.call_args.args
        assert "FOR UPDATE SKIP LOCKED" in sql
        assert params == (4,)


class TestStatusUpdates:
    @patch(_GET_CONNECTION)
    def test_mark_applied(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        GenerationResultRepository(max_attempts=3).mark_applied(5)

        _sql, params = mock_conn.execute.call_args.args
        assert params == ("applied", 5)
        mock_conn.commit.assert_called_once()

    @patch(_GET_CONNECTION)
    def test_mark_discarded(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        GenerationResultRepository(max_attempts=3).mark_discarded(5)

        _sql, params = mock_conn.execute.call_args.args
        assert params == ("discarded", 5)

    @patch(_GET_CONNECTION)
    def test_mark_failed_keeps_error(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        GenerationResultRepository(max_attempts=3).mark_failed(5, "boom")

        sql, params = mock_conn.execute.call_args.args
        assert "status = 'failed'" in sql
        assert params == ("boom", 5)
        mock_conn.commit.assert_called_once()

    @patch(_GET_CONNECTION)
    def test_record_error_leaves_status(self, mock_get_conn: MagicMock) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        GenerationResultRepository(max_attempts=3).record_error(5, "boom")

        sql, params = mock_conn.execute.call_args.args
        assert "status" not in sql.split("WHERE")[0]
        assert params == ("boom", 5)

    @patch(_GET_CONNECTION)
    def test_increment_attempts_returns_to_pending(
        self, mock_get_conn: MagicMock
    ) -> None:
        mock_conn, _cursor = _mock_connection(mock_get_conn)

        GenerationResultRepository(max_attempts=3).increment_attempts(5)

        sql, params = mock_conn.execute.call_args.args
        assert "attempts = attempts + 1" in sql
        assert "status = 'pending'" in sql
        assert params == (5,)


class TestFindById:
    @patch(_GET_CONNECTION)
    def test_returns_record(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = _make_row()

        record = GenerationResultRepository(max_attempts=3).find_by_id(5)

        assert record.project_id == 7
        assert record.outcome == "success"
        assert record.created_at == _NOW

    @patch(_GET_CONNECTION)
    def test_raises_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(
            GenerationResultNotFoundError, match="Generation result 9 not found"
        ):
            GenerationResultRepository(max_attempts=3).find_by_id(9)
