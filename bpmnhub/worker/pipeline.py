from abc import ABC, abstractmethod
from dataclasses import dataclass

from bpmnhub.database.models import GenerationResultRecord
from bpmnhub.workflow.models import Project, TransitionResult


@dataclass(slots=True)
class ResultContext:
    record: GenerationResultRecord
    project: Project | None = None
    transition: TransitionResult | None = None
    error_message: str = ""

    @property
    def applied(self) -> bool:
        return self.transition is not None and self.transition.applied


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: ResultContext) -> ResultContext:
        raise NotImplementedError
