from unittest.mock import MagicMock

from bpmnhub.database.models import GenerationResultRecord
from bpmnhub.worker.result_runner import ResultRunner


def _make_runner(
    max_attempts: int = 3,
) -> tuple[ResultRunner, MagicMock, MagicMock]:
    """Create a ResultRunner with mocked dependencies."""
    mock_processor = MagicMock()
    mock_repo = MagicMock()
    settings = MagicMock(max_result_attempts=max_attempts)
    runner = ResultRunner(mock_processor, mock_repo, settings)
    return runner, mock_processor, mock_repo


def _make_record(attempts: int = 0) -> GenerationResultRecord:
    return GenerationResultRecord(
        id=1,
        project_id=10,
        cycle=1,
        outcome="success",
        payload="<definitions/>",
        kind="as_is",
        status="processing",
        attempts=attempts,
    )


class TestSuccessfulDelivery:
    def test_calls_processor(self) -> None:
        runner, mock_processor, _repo = _make_runner()
        record = _make_record()

        runner.run(record)

        mock_processor.process.assert_called_once_with(record)

    def test_marks_applied(self) -> None:
        runner, mock_processor, mock_repo = _make_runner()
        mock_processor.process.return_value = MagicMock(applied=True)

        runner.run(_make_record())

        mock_repo.mark_applied.assert_called_once_with(1)
        mock_repo.mark_discarded.assert_not_called()

    def test_marks_discarded_when_not_applied(self) -> None:
        runner, mock_processor, mock_repo = _make_runner()
        mock_processor.process.return_value = MagicMock(applied=False)

        runner.run(_make_record())

        mock_repo.mark_discarded.assert_called_once_with(1)
        mock_repo.mark_applied.assert_not_called()


class TestFailureBelowMax:
    def test_increments_attempts(self) -> None:
        runner, mock_processor, mock_repo = _make_runner(max_attempts=3)
        mock_processor.process.side_effect = Exception("boom")

        runner.run(_make_record(attempts=0))

        mock_repo.increment_attempts.assert_called_once_with(1)
        mock_repo.mark_failed.assert_not_called()

    def test_does_not_mark_applied(self) -> None:
        runner, mock_processor, mock_repo = _make_runner(max_attempts=3)
        mock_processor.process.side_effect = Exception("boom")

        runner.run(_make_record(attempts=1))

        mock_repo.mark_applied.assert_not_called()
        mock_repo.mark_discarded.assert_not_called()


class TestFailureAtMax:
    def test_marks_failed(self) -> None:
        runner, mock_processor, mock_repo = _make_runner(max_attempts=3)
        mock_processor.process.side_effect = Exception("boom")

        runner.run(_make_record(attempts=2))

        mock_repo.mark_failed.assert_called_once_with(1, "boom")
        mock_repo.increment_attempts.assert_not_called()

    def test_marks_failed_when_over_max(self) -> None:
        runner, mock_processor, mock_repo = _make_runner(max_attempts=3)
        mock_processor.process.side_effect = Exception("boom")

        runner.run(_make_record(attempts=5))

        mock_repo.mark_failed.assert_called_once_with(1, "boom")
