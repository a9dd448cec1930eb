from dataclasses import dataclass
from datetime import datetime


@dataclass
class GenerationResultRecord:
    """Represents a row from the generation_results table.

    Rows are written by the external generation workflow: ``outcome`` is
    ``success`` (``payload`` holds BPMN XML) or ``failure`` (``payload`` holds
    the reason).
    """

    id: int
    project_id: int
    cycle: int | None
    outcome: str
    payload: str
    kind: str
    status: str
    attempts: int
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
