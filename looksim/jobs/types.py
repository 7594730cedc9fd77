"""Job and artifact data contracts for `looksim.jobs.client`.

Job lifecycle (as observed by the client):
    queued -> running -> succeeded | failed | canceled

    The client never mutates a job; it only observes provider snapshots. Once a
    terminal status is observed the client stops polling and the job is
    consumed.

Normalization:
    `Job.from_provider` maps provider status words onto `JobStatus` and drops
    `output`/`error` fields that do not belong to the observed status, so the
    invariants below hold for every `Job` the client hands out:
    - `output` is present only when status is `succeeded`.
    - `error` is present only when status is `failed` or `canceled`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from looksim.image.data_uri import encode_data_uri


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELED})

# Replicate reports `starting`/`processing`; both spellings of canceled appear
# across providers.
_STATUS_ALIASES = {
    "starting": JobStatus.QUEUED,
    "queued": JobStatus.QUEUED,
    "pending": JobStatus.QUEUED,
    "processing": JobStatus.RUNNING,
    "running": JobStatus.RUNNING,
    "succeeded": JobStatus.SUCCEEDED,
    "successful": JobStatus.SUCCEEDED,
    "failed": JobStatus.FAILED,
    "canceled": JobStatus.CANCELED,
    "cancelled": JobStatus.CANCELED,
}


def parse_status(raw: Any) -> JobStatus:
    """Map a provider status word to `JobStatus`; unknown words count as running."""
    return _STATUS_ALIASES.get(str(raw or "").strip().lower(), JobStatus.RUNNING)


@dataclass(frozen=True)
class Job:
    """Snapshot of a provider-side generation job.

    Attributes:
        id: Provider-assigned identifier.
        status: Normalized status.
        output: Asset references (URLs or data URIs); empty unless succeeded.
        error: Provider error message; `None` unless failed/canceled.
        raw_status: Status word exactly as the provider reported it.
    """

    id: str
    status: JobStatus
    output: List[str] = field(default_factory=list)
    error: Optional[str] = None
    raw_status: Optional[str] = None

    @classmethod
    def from_provider(cls, payload: dict) -> "Job":
        if not isinstance(payload, dict):
            raise ValueError("Job payload must be a JSON object")

        status = parse_status(payload.get("status"))

        output: List[str] = []
        error = None
        if status is JobStatus.SUCCEEDED:
            raw_output = payload.get("output")
            if isinstance(raw_output, (list, tuple)):
                output = [str(item) for item in raw_output if item]
            elif raw_output:
                output = [str(raw_output)]
        elif status in (JobStatus.FAILED, JobStatus.CANCELED):
            error = payload.get("error") or None
            if error is not None:
                error = str(error)

        return cls(
            id=str(payload.get("id") or ""),
            status=status,
            output=output,
            error=error,
            raw_status=payload.get("status"),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def first_output(self) -> Optional[str]:
        return self.output[0] if self.output else None

    def failure_message(self) -> str:
        """Provider error text, or a generic message naming the status."""
        return self.error or f"Prediction {self.status.value}"


@dataclass(frozen=True)
class Artifact:
    """Finished generation result resolved to bytes."""

    data: bytes
    content_type: str = "image/png"
    source: Optional[str] = None

    def to_data_uri(self) -> str:
        return encode_data_uri(self.data, self.content_type)
