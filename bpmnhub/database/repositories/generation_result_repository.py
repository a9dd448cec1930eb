from typing import Any

import psycopg
from psycopg.rows import dict_row

from bpmnhub.database.connection import get_connection
from bpmnhub.database.exceptions import GenerationResultNotFoundError
from bpmnhub.database.models import GenerationResultRecord

_COLUMNS = """
    id, project_id, cycle, outcome, payload, kind, status, attempts,
    error_message, locked_at, created_at, updated_at
"""


class GenerationResultRepository:
    """Database operations for the generation_results table."""

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def claim_next_result(
        self, conn: psycopg.Connection[Any]
    ) -> GenerationResultRecord | None:
        """Claim the oldest pending result using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM generation_results
                WHERE status = 'pending'
                  AND attempts < %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()

        if row is None:
            return None

        conn.execute(
            """
            UPDATE generation_results
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        record = self._row_to_record(row)
        record.status = "processing"
        return record

    def mark_applied(self, result_id: int) -> None:
        """The result moved its project out of processing."""
        self._set_status(result_id, "applied")

    def mark_discarded(self, result_id: int) -> None:
        """The result arrived for a project no longer awaiting it."""
        self._set_status(result_id, "discarded")

    def mark_failed(self, result_id: int, error: str) -> None:
        """Give up delivering a result."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE generation_results
                SET status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, result_id),
            )
            conn.commit()

    def record_error(self, result_id: int, error: str) -> None:
        """Keep the latest delivery error without changing the status."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE generation_results
                SET error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, result_id),
            )
            conn.commit()

    def increment_attempts(self, result_id: int) -> None:
        """Increment attempt count and return the result to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE generation_results
                SET attempts = attempts + 1, status = 'pending',
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (result_id,),
            )
            conn.commit()

    def find_by_id(self, result_id: int) -> GenerationResultRecord:
        """Find a result by ID.

        Raises:
            GenerationResultNotFoundError: if no row has this ID.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM generation_results WHERE id = %s",
                    (result_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise GenerationResultNotFoundError(f"Generation result {result_id} not found")
        return self._row_to_record(row)

    def _set_status(self, result_id: int, status: str) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE generation_results
                SET status = %s, locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (status, result_id),
            )
            conn.commit()

    @staticmethod
    def _row_to_record(row: dict[str, Any]) -> GenerationResultRecord:
        return GenerationResultRecord(
            id=row["id"],
            project_id=row["project_id"],
            cycle=row["cycle"],
            outcome=row["outcome"],
            payload=row["payload"],
            kind=row["kind"],
            status=row["status"],
            attempts=row["attempts"],
            error_message=row["error_message"],
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
