"""Asynchronous create -> poll -> fetch adapter for provider generation jobs.

Processing flow:
    1. Submit the provider payload to the job creation endpoint.
    2. Poll the job status endpoint at a fixed interval until a terminal status
       is observed or the max wait (measured from loop start) is exhausted.
    3. Pick the first output reference of a succeeded job.
    4. Resolve it to bytes (download URLs, decode inline data URIs).

Polling rules (checked in this order on every iteration):
    - `succeeded` -> return the job.
    - `failed` / `canceled` -> `JobFailedError` with the provider message.
    - elapsed >= max wait -> `JobTimeoutError`.
    The sleep before the next poll is clamped to the remaining budget and the
    deadline is re-checked after every sleep, so no status request is issued
    at or after the deadline.

Concurrency:
    One coroutine per request, cooperative waits via the injected sleep
    function (defaults to `asyncio.sleep`). No state is shared between jobs and
    there is no cancellation signal; a job runs to success, failure or timeout.

Retry behavior:
    None. Every failure path is terminal for the job.

Resource ownership:
    A client created without an `http_client` owns its `httpx.AsyncClient` and
    releases it in `aclose()` (or on `async with` exit). Injected clients are
    left to their creator.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

import httpx

from looksim.config.provider_config import (
    HTTP_TIMEOUT_SECONDS,
    IMAGE_PROVIDERS,
    JOB_MAX_WAIT_SECONDS,
    JOB_POLL_INTERVAL_SECONDS,
)
from looksim.image.data_uri import is_data_uri, parse_image
from looksim.jobs.errors import (
    EmptyOutputError,
    FetchError,
    JobFailedError,
    JobTimeoutError,
    StatusCheckError,
    SubmissionError,
)
from looksim.jobs.types import Artifact, Job, JobStatus


logger = logging.getLogger(__name__)

DEFAULT_STATUS_PATH = "predictions/{job_id}"


class AsyncJobClient:
    """Parametrized polling adapter around a provider's job REST resource.

    Args:
        base_url: Provider API root; creation/status paths are joined onto it.
        headers: Auth headers sent with creation and status requests. They are
            not sent when downloading artifacts.
        poll_interval: Seconds between status requests.
        max_wait: Upper bound in seconds for the polling loop.
        http_client: Optional shared `httpx.AsyncClient`.
        status_path: Template for the status endpoint (`{job_id}` placeholder).
        sleep: Awaitable sleep used between polls.
        clock: Monotonic clock used to measure elapsed time.
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        *,
        poll_interval: float = JOB_POLL_INTERVAL_SECONDS,
        max_wait: float = JOB_MAX_WAIT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        status_path: str = DEFAULT_STATUS_PATH,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if max_wait < 0:
            raise ValueError("max_wait must not be negative")

        self.base_url = base_url.rstrip("/") + "/"
        self.headers = dict(headers or {})
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.status_path = status_path

        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def for_replicate(cls, api_token: str, **kwargs) -> "AsyncJobClient":
        """Build a client for Replicate's predictions API."""
        return cls(
            IMAGE_PROVIDERS["replicate"]["url"],
            headers={"Authorization": f"Bearer {api_token}"},
            **kwargs,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "AsyncJobClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # =========================================================
    # SINGLE OPERATION
    # =========================================================

    async def run_job(self, path: str, payload: dict, as_data_uri: bool = False):
        """Submit a job, wait for it, and return its first output.

        Args:
            path: Creation endpoint relative to `base_url`.
            payload: Provider-specific JSON body.
            as_data_uri: Return a `data:` URI string instead of an `Artifact`.

        Returns:
            `Artifact`, or its data URI when `as_data_uri` is set.

        Raises:
            SubmissionError, StatusCheckError, JobFailedError, JobTimeoutError,
            EmptyOutputError, FetchError.
        """
        job = await self.submit(path, payload)
        job = await self.wait_for_job(job)
        artifact = await self.fetch_artifact(self.first_output(job))
        return artifact.to_data_uri() if as_data_uri else artifact

    # =========================================================
    # STAGES
    # =========================================================

    async def submit(self, path: str, payload: dict) -> Job:
        url = self._url(path)
        try:
            response = await self._http.post(
                url,
                json=payload,
                headers={**self.headers, "Content-Type": "application/json"},
            )
        except httpx.RequestError as exc:
            raise SubmissionError(f"Failed to reach provider: {exc}", detail=str(exc)) from exc

        if not response.is_success:
            raise SubmissionError(
                f"Job creation failed with status {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        try:
            job = Job.from_provider(response.json())
        except ValueError as exc:
            raise SubmissionError(
                "Provider returned an unreadable job payload",
                status_code=response.status_code,
                detail=response.text,
            ) from exc

        if not job.id:
            raise SubmissionError(
                "Provider did not return a job id",
                status_code=response.status_code,
                detail=response.text,
            )

        logger.info("Prediction created: %s (%s)", job.id, job.status.value)
        return job

    async def get_job(self, job_id: str) -> Job:
        url = self._url(self.status_path.format(job_id=job_id))
        try:
            response = await self._http.get(url, headers=self.headers)
        except httpx.RequestError as exc:
            raise StatusCheckError(f"Failed to get prediction status: {exc}", detail=str(exc)) from exc

        if not response.is_success:
            raise StatusCheckError(
                f"Failed to get prediction status: {response.status_code}",
                status_code=response.status_code,
                detail=response.text,
            )

        try:
            return Job.from_provider(response.json())
        except ValueError as exc:
            raise StatusCheckError(
                "Provider returned an unreadable status payload",
                status_code=response.status_code,
                detail=response.text,
            ) from exc

    async def wait_for_job(self, job: Job | str) -> Job:
        """Poll until `job` reaches a terminal status.

        Accepts the `Job` returned by `submit` (a job that is already terminal
        at creation is settled without polling) or a bare job id.
        """
        if isinstance(job, Job) and job.is_terminal:
            return self._settle(job)

        job_id = job.id if isinstance(job, Job) else job
        start = self._clock()

        while True:
            current = await self.get_job(job_id)
            logger.debug("Prediction %s status: %s", job_id, current.raw_status)

            if current.is_terminal:
                return self._settle(current)

            remaining = self.max_wait - (self._clock() - start)
            if remaining > 0:
                await self._sleep(min(self.poll_interval, remaining))
                # Sleeps may overshoot; the deadline is checked again on waking.
                remaining = self.max_wait - (self._clock() - start)

            if remaining <= 0:
                logger.warning("Prediction %s still %s at the %gs deadline", job_id, current.status.value, self.max_wait)
                raise JobTimeoutError(job_id, self.max_wait)

    @staticmethod
    def first_output(job: Job) -> str:
        ref = job.first_output()
        if not ref:
            raise EmptyOutputError("No output image generated")
        return ref

    async def fetch_artifact(self, ref: str) -> Artifact:
        """Resolve an output reference to bytes.

        Inline data URIs are decoded locally; anything else is downloaded
        without provider auth headers.
        """
        if is_data_uri(ref):
            try:
                inline = parse_image(ref, default_mime="image/png")
                return Artifact(data=inline.to_bytes(), content_type=inline.mime_type, source="inline")
            except ValueError as exc:
                raise FetchError(f"Invalid inline artifact: {exc}") from exc

        try:
            response = await self._http.get(ref)
        except httpx.RequestError as exc:
            raise FetchError("Failed to fetch generated image", url=ref) from exc

        if not response.is_success:
            raise FetchError("Failed to fetch generated image", url=ref, status_code=response.status_code)

        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not content_type.startswith("image/"):
            content_type = "image/png"
        return Artifact(data=response.content, content_type=content_type, source=ref)

    # =========================================================
    # INTERNALS
    # =========================================================

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return self.base_url + path.lstrip("/")

    @staticmethod
    def _settle(job: Job) -> Job:
        if job.status is JobStatus.SUCCEEDED:
            return job
        raise JobFailedError(job.failure_message())
