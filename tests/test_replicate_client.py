import base64

import pytest

from looksim.image.replicate_client import edit_hairstyle, generate_hair_png
from looksim.jobs.client import AsyncJobClient
from looksim.jobs.errors import EmptyOutputError, SubmissionError

HAIR_MODEL = "black-forest-labs/flux-schnell"
BG_MODEL = "lucataco/remove-bg"
EDIT_MODEL = "black-forest-labs/flux-kontext-pro"

HAIR_URL = "https://replicate.delivery/hair.png"
TRANSPARENT_URL = "https://replicate.delivery/hair-transparent.png"
HAIR_BYTES = b"opaque-hair"
TRANSPARENT_BYTES = b"transparent-hair"


def _data_uri(data):
    return "data:image/png;base64," + base64.b64encode(data).decode()


@pytest.fixture
def jobs(replicate, clock):
    return AsyncJobClient.for_replicate(
        "r8-token",
        http_client=replicate.client(),
        sleep=clock.sleep,
        clock=clock,
        max_wait=10,
    )


@pytest.fixture
def hair_stage(replicate):
    replicate.on_create(HAIR_MODEL, {"id": "hair", "status": "starting"})
    replicate.script("hair", {"status": "processing"}, {"status": "succeeded", "output": [HAIR_URL]})
    replicate.asset(HAIR_URL, body=HAIR_BYTES)
    return replicate


@pytest.mark.asyncio
async def test_both_stages_succeed(jobs, hair_stage):
    hair_stage.on_create(BG_MODEL, {"id": "bg", "status": "starting"})
    hair_stage.script("bg", {"status": "succeeded", "output": TRANSPARENT_URL})
    hair_stage.asset(TRANSPARENT_URL, body=TRANSPARENT_BYTES)

    result = await generate_hair_png(jobs, "wolf cut", "male")

    assert result.has_transparency is True
    assert result.data_uri == _data_uri(TRANSPARENT_BYTES)
    assert hair_stage.created_payloads(BG_MODEL) == [{"input": {"image": HAIR_URL}}]
    hair_prompt = hair_stage.created_payloads(HAIR_MODEL)[0]["input"]["prompt"]
    assert hair_prompt.startswith("A male hairstyle")


@pytest.mark.asyncio
async def test_background_removal_rejected_falls_back_to_stage_one(jobs, hair_stage):
    hair_stage.on_create_error(BG_MODEL, 500, "model unavailable")

    result = await generate_hair_png(jobs, "wolf cut", "female")

    assert result.has_transparency is False
    assert result.data_uri == _data_uri(HAIR_BYTES)


@pytest.mark.asyncio
async def test_background_removal_empty_output_falls_back(jobs, hair_stage):
    hair_stage.on_create(BG_MODEL, {"id": "bg", "status": "starting"})
    hair_stage.script("bg", {"status": "succeeded", "output": None})

    result = await generate_hair_png(jobs, "wolf cut")

    assert result.has_transparency is False
    assert result.data_uri == _data_uri(HAIR_BYTES)


@pytest.mark.asyncio
async def test_background_removal_job_failure_falls_back(jobs, hair_stage):
    hair_stage.on_create(BG_MODEL, {"id": "bg", "status": "starting"})
    hair_stage.script("bg", {"status": "failed", "error": "out of memory"})

    result = await generate_hair_png(jobs, "wolf cut")

    assert result.has_transparency is False


@pytest.mark.asyncio
async def test_background_removal_timeout_falls_back(jobs, hair_stage, clock):
    hair_stage.on_create(BG_MODEL, {"id": "bg", "status": "starting"})
    hair_stage.script("bg", {"status": "processing"})

    result = await generate_hair_png(jobs, "wolf cut")

    assert result.has_transparency is False
    assert result.data_uri == _data_uri(HAIR_BYTES)
    assert len(hair_stage.polls("bg")) > 1
    assert clock.now >= 10


@pytest.mark.asyncio
async def test_transparent_image_download_failure_falls_back(jobs, hair_stage):
    hair_stage.on_create(BG_MODEL, {"id": "bg", "status": "starting"})
    hair_stage.script("bg", {"status": "succeeded", "output": [TRANSPARENT_URL]})
    hair_stage.asset(TRANSPARENT_URL, body=b"missing", status_code=404)

    result = await generate_hair_png(jobs, "wolf cut")

    assert result.has_transparency is False
    assert result.data_uri == _data_uri(HAIR_BYTES)


@pytest.mark.asyncio
async def test_stage_one_rejected_aborts(jobs, replicate):
    replicate.on_create_error(HAIR_MODEL, 402, "insufficient credit")

    with pytest.raises(SubmissionError) as excinfo:
        await generate_hair_png(jobs, "wolf cut")

    assert excinfo.value.detail == "insufficient credit"
    assert replicate.created_payloads(BG_MODEL) == []


@pytest.mark.asyncio
async def test_stage_one_empty_output_aborts(jobs, replicate):
    replicate.on_create(HAIR_MODEL, {"id": "hair", "status": "starting"})
    replicate.script("hair", {"status": "succeeded", "output": []})

    with pytest.raises(EmptyOutputError, match="No hair image generated"):
        await generate_hair_png(jobs, "wolf cut")


@pytest.mark.asyncio
async def test_edit_hairstyle_sends_data_uri_and_prompt(jobs, replicate):
    replicate.on_create(EDIT_MODEL, {"id": "edit", "status": "starting"})
    replicate.script("edit", {"status": "succeeded", "output": [HAIR_URL]})
    replicate.asset(HAIR_URL, body=HAIR_BYTES)

    result = await edit_hairstyle(jobs, "YWJj", "bob cut", {"parting": "right"})

    assert result == _data_uri(HAIR_BYTES)
    payload = replicate.created_payloads(EDIT_MODEL)[0]["input"]
    assert payload["input_image"] == "data:image/jpeg;base64,YWJj"
    assert payload["prompt"].startswith("Change ONLY the hairstyle to: bob cut, parted on the right side.")
    assert payload["aspect_ratio"] == "1:1"
    assert payload["output_format"] == "png"
