from abc import ABC, abstractmethod
from typing import Any, Optional
from app.core.jobs.types import JobStatus


class IStatusNotifier(ABC):
    """
    Side channel to the job record store.
    The pipeline calls it but never depends on it: failures are ignored, nothing is retried.
    """
    @abstractmethod
    def notify(self, job_id: Any, status: JobStatus, error_message: Optional[str] = None) -> None:
        pass
