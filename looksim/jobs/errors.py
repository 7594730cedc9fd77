"""Error taxonomy for generation requests.

Every failure a provider adapter can report is a `GenerationError`. HTTP
handlers catch these at the boundary and translate them into JSON error
bodies; nothing below the handler layer swallows them, apart from the
documented fallback of the hair PNG pipeline.
"""


class GenerationError(RuntimeError):
    """Base class for all provider-side generation failures."""


class ConfigurationError(GenerationError):
    """A required credential or setting is missing."""


class UpstreamRequestError(GenerationError):
    """A provider answered with a non-2xx status or was unreachable.

    Attributes:
        status_code: Provider HTTP status, or `None` for transport failures.
        detail: Provider response text, passed through to callers verbatim.
    """

    def __init__(self, message, status_code=None, detail=None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class SubmissionError(UpstreamRequestError):
    """Job creation failed or did not yield a job id."""


class StatusCheckError(UpstreamRequestError):
    """A status poll for a running job failed."""


class JobFailedError(GenerationError):
    """The provider reported the job as failed or canceled."""


class JobTimeoutError(GenerationError, TimeoutError):
    """The job did not reach a terminal status within the max wait."""

    def __init__(self, job_id, max_wait):
        super().__init__(f"Prediction timed out after {max_wait:g}s (job {job_id})")
        self.job_id = job_id
        self.max_wait = max_wait


class EmptyOutputError(GenerationError):
    """The job succeeded but produced nothing to return."""


class FetchError(GenerationError):
    """The artifact reference could not be downloaded."""

    def __init__(self, message, url=None, status_code=None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class UnexpectedResponseError(GenerationError):
    """A 2xx provider response did not contain a usable result."""

    def __init__(self, message, detail=None):
        super().__init__(message)
        self.detail = detail
