"""Job statuses returned by bulk operations.

Bulk calls (``create_many``, ``update_many``, ``destroy_many``) answer with
a job status; callers poll it through ``JobStatuses.show``.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from zendesk_client.clients.base import ResourceClient
from zendesk_client.clients.pagination import AggregatedResult
from zendesk_client.clients.transport import ApiResponse

logger = logging.getLogger(__name__)


class JobState(Enum):
    QUEUED = "queued"
    WORKING = "working"
    COMPLETED = "completed"
    FAILED = "failed"
    KILLED = "killed"


@dataclass
class JobStatus:
    """Progress record of an asynchronous bulk job."""

    id: str
    status: JobState
    url: Optional[str] = None
    progress: Optional[int] = None
    total: Optional[int] = None
    message: Optional[str] = None
    results: list = field(default_factory=list)

    @property
    def is_finished(self) -> bool:
        return self.status in (JobState.COMPLETED, JobState.FAILED, JobState.KILLED)

    @classmethod
    def from_payload(cls, payload: dict) -> "JobStatus":
        """Build from a ``job_status`` object.

        Raises:
            ValueError: If the payload has no id or an unknown status
        """
        if not payload or not payload.get("id"):
            raise ValueError("job status payload has no id")
        return cls(
            id=str(payload["id"]),
            status=JobState(payload.get("status")),
            url=payload.get("url"),
            progress=payload.get("progress"),
            total=payload.get("total"),
            message=payload.get("message"),
            results=payload.get("results") or [],
        )

    @classmethod
    def from_response(cls, response: ApiResponse) -> "JobStatus":
        return cls.from_payload(response.result.get("job_status") or {})


class JobStatuses:
    """Wrapper for the job_statuses endpoints."""

    JSON_NAMES = ("job_statuses", "job_status")

    def __init__(self, client: ResourceClient):
        self.client = client

    def list(self) -> AggregatedResult:
        return self.client.get_all(["job_statuses"], result_keys=self.JSON_NAMES)

    def show(self, job_id: str) -> JobStatus:
        """Fetch the current state of one job."""
        return JobStatus.from_response(self.client.get(["job_statuses", job_id]))

    def show_many(self, job_ids: Iterable[str]) -> List[JobStatus]:
        result = self.client.get_all(
            ["job_statuses", "show_many", {"ids": list(job_ids)}],
            result_keys=self.JSON_NAMES,
        )
        return [JobStatus.from_payload(item) for item in result]
