"""Replicate-specific generation flows built on `AsyncJobClient`.

Flows:
    - `edit_hairstyle`: one flux-kontext-pro edit job on the user's photo.
    - `generate_hair_png`: two-stage pipeline producing a hair-only PNG.
        1. flux-schnell renders the hairstyle on a white background.
        2. A background-removal model turns it into a transparent PNG.

Degradation policy (hair PNG pipeline):
    Stage 1 failures abort the request. Any stage 2 failure (submission
    rejected, job failed or timed out, empty output, download failure) falls
    back to the stage 1 artifact tagged `has_transparency=False`. This is the
    only place in the service where a generation error is not propagated.

Input handling:
    Bare base64 photos are sent as `data:image/jpeg;base64,...` URIs since
    Replicate accepts data URIs for file inputs.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from looksim.config.provider_config import (
    REPLICATE_BG_REMOVAL_MODEL,
    REPLICATE_EDIT_MODEL,
    REPLICATE_HAIR_MODEL,
)
from looksim.image.data_uri import ensure_data_uri
from looksim.jobs.client import AsyncJobClient
from looksim.jobs.errors import EmptyOutputError, GenerationError
from looksim.prompting.prompt_builder import (
    build_hair_png_prompt,
    build_replicate_edit_prompt,
    build_style_request,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HairPngResult:
    """Hair PNG pipeline output; `has_transparency` is False on fallback."""

    data_uri: str
    has_transparency: bool


def model_predictions_path(model: str) -> str:
    """Creation endpoint for an official Replicate model (`owner/name`)."""
    return f"models/{model}/predictions"


async def edit_hairstyle(
    jobs: AsyncJobClient,
    image: str,
    prompt: str,
    settings: Optional[dict] = None,
) -> str:
    """Run the flux-kontext-pro hairstyle edit and return a PNG data URI."""
    edit_prompt = build_replicate_edit_prompt(build_style_request(prompt, settings))
    payload = {
        "input": {
            "prompt": edit_prompt,
            "input_image": ensure_data_uri(image),
            "aspect_ratio": "1:1",
            "safety_tolerance": 2,
            "output_format": "png",
        }
    }
    return await jobs.run_job(model_predictions_path(REPLICATE_EDIT_MODEL), payload, as_data_uri=True)


async def generate_hair_png(
    jobs: AsyncJobClient,
    style_prompt: str,
    gender: Optional[str] = None,
) -> HairPngResult:
    """Generate a hair-only PNG, degrading to an opaque image on stage 2 failure.

    Raises:
        SubmissionError: Stage 1 job could not be created.
        EmptyOutputError: Stage 1 succeeded without an image.
        GenerationError: Any other stage 1 failure, or failure to download the
            stage 1 image during fallback.
    """
    logger.info("Hair PNG stage 1: generating hair image")
    hair_payload = {
        "input": {
            "prompt": build_hair_png_prompt(style_prompt, gender),
            "aspect_ratio": "1:1",
            "output_format": "png",
            "num_outputs": 1,
        }
    }
    hair_job = await jobs.submit(model_predictions_path(REPLICATE_HAIR_MODEL), hair_payload)
    hair_job = await jobs.wait_for_job(hair_job)
    try:
        hair_url = jobs.first_output(hair_job)
    except EmptyOutputError as exc:
        raise EmptyOutputError("No hair image generated") from exc

    logger.info("Hair PNG stage 2: removing background")
    try:
        transparent = await jobs.run_job(
            model_predictions_path(REPLICATE_BG_REMOVAL_MODEL),
            {"input": {"image": hair_url}},
        )
    except GenerationError as exc:
        logger.warning("Background removal failed, returning original image: %s", exc)
        original = await jobs.fetch_artifact(hair_url)
        return HairPngResult(data_uri=original.to_data_uri(), has_transparency=False)

    return HairPngResult(data_uri=transparent.to_data_uri(), has_transparency=True)
