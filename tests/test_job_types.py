import pytest

from looksim.jobs.types import Artifact, Job, JobStatus, parse_status


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("starting", JobStatus.QUEUED),
        ("processing", JobStatus.RUNNING),
        ("succeeded", JobStatus.SUCCEEDED),
        ("failed", JobStatus.FAILED),
        ("canceled", JobStatus.CANCELED),
        ("cancelled", JobStatus.CANCELED),
        ("warming-up", JobStatus.RUNNING),
        (None, JobStatus.RUNNING),
    ],
)
def test_parse_status(raw, expected):
    assert parse_status(raw) is expected


def test_running_job_drops_output_and_error():
    job = Job.from_provider({"id": "p1", "status": "processing", "output": ["u"], "error": "x"})
    assert job.output == []
    assert job.error is None
    assert not job.is_terminal


def test_succeeded_job_keeps_output_but_not_error():
    job = Job.from_provider({"id": "p1", "status": "succeeded", "output": ["a", None, "b"], "error": "stale"})
    assert job.output == ["a", "b"]
    assert job.error is None
    assert job.first_output() == "a"


def test_scalar_output_becomes_single_item_list():
    job = Job.from_provider({"id": "p1", "status": "succeeded", "output": "https://x/y.png"})
    assert job.output == ["https://x/y.png"]


def test_failed_job_keeps_error_but_not_output():
    job = Job.from_provider({"id": "p1", "status": "failed", "output": ["u"], "error": "boom"})
    assert job.output == []
    assert job.failure_message() == "boom"
    assert job.is_terminal


def test_failure_message_falls_back_to_status():
    job = Job.from_provider({"id": "p1", "status": "failed"})
    assert job.failure_message() == "Prediction failed"


def test_raw_status_is_preserved():
    assert Job.from_provider({"id": "p1", "status": "starting"}).raw_status == "starting"


def test_non_object_payload_is_rejected():
    with pytest.raises(ValueError):
        Job.from_provider(["not", "a", "job"])


def test_artifact_data_uri():
    assert Artifact(data=b"abc", content_type="image/webp").to_data_uri() == "data:image/webp;base64,YWJj"
