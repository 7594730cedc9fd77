"""Asynchronous generation job package.

Scope:
    Drives provider-side generation jobs through create -> poll -> fetch and
    returns the finished artifact.

Composition:
    - `types`: `Job`, `JobStatus` and `Artifact` data contracts.
    - `errors`: exception taxonomy shared with provider adapters and handlers.
    - `client`: `AsyncJobClient`, the parametrized polling adapter.
"""

from looksim.jobs.client import AsyncJobClient
from looksim.jobs.errors import (
    ConfigurationError,
    EmptyOutputError,
    FetchError,
    GenerationError,
    JobFailedError,
    JobTimeoutError,
    StatusCheckError,
    SubmissionError,
    UnexpectedResponseError,
    UpstreamRequestError,
)
from looksim.jobs.types import Artifact, Job, JobStatus

__all__ = [
    "AsyncJobClient",
    "Artifact",
    "Job",
    "JobStatus",
    "ConfigurationError",
    "EmptyOutputError",
    "FetchError",
    "GenerationError",
    "JobFailedError",
    "JobTimeoutError",
    "StatusCheckError",
    "SubmissionError",
    "UnexpectedResponseError",
    "UpstreamRequestError",
]
