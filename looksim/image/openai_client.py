"""OpenAI Images Edit client.

Processing flow:
    1. Decode the user photo to bytes.
    2. POST a multipart `images/edits` request (model, prompt, size, quality,
       image file).
    3. Return `b64_json` directly, or download `url` and re-encode it.

Error handling strategy:
    - Malformed photo -> `ValueError` (handlers answer 400).
    - Non-2xx or unreachable endpoint -> `UpstreamRequestError`.
    - `data` list missing -> `UnexpectedResponseError`.
    - Entry without `b64_json`/`url` -> `EmptyOutputError`.
    - Result URL download failure -> `FetchError`.
"""

import logging
from typing import Optional

import httpx

from looksim.config.provider_config import IMAGE_PROVIDERS, OPENAI_IMAGE_MODEL
from looksim.image.data_uri import encode_data_uri, parse_image
from looksim.jobs.errors import EmptyOutputError, FetchError, UnexpectedResponseError, UpstreamRequestError
from looksim.prompting.prompt_builder import build_openai_edit_prompt, build_style_request

logger = logging.getLogger(__name__)

EDIT_SIZE = "1024x1024"
EDIT_QUALITY = "high"


async def edit_with_openai(
    http: httpx.AsyncClient,
    api_key: str,
    image: str,
    prompt: str,
    settings: Optional[dict] = None,
) -> str:
    """Transform the hair in `image` with the OpenAI edit endpoint."""
    inline = parse_image(image, default_mime="image/png")
    image_bytes = inline.to_bytes()
    ext = "jpg" if inline.mime_type == "image/jpeg" else "png"

    form = {
        "model": OPENAI_IMAGE_MODEL,
        "prompt": build_openai_edit_prompt(build_style_request(prompt, settings)),
        "size": EDIT_SIZE,
        "quality": EDIT_QUALITY,
    }
    files = {"image": (f"input.{ext}", image_bytes, inline.mime_type)}

    logger.info("Calling OpenAI Images Edit API with %s (%d bytes)", OPENAI_IMAGE_MODEL, len(image_bytes))
    try:
        response = await http.post(
            IMAGE_PROVIDERS["openai"]["url"],
            data=form,
            files=files,
            headers={"Authorization": f"Bearer {api_key}"},
        )
    except httpx.RequestError as exc:
        raise UpstreamRequestError("Failed to edit image", detail=str(exc)) from exc

    if not response.is_success:
        logger.error("OpenAI API error %s: %s", response.status_code, response.text)
        raise UpstreamRequestError(
            "Failed to edit image",
            status_code=response.status_code,
            detail=response.text,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise UnexpectedResponseError("Invalid response format", detail=response.text) from exc

    entries = data.get("data") if isinstance(data, dict) else None
    if not entries:
        raise UnexpectedResponseError("Invalid response format", detail=data)

    first = entries[0] or {}
    if first.get("b64_json"):
        return f"data:image/png;base64,{first['b64_json']}"

    if first.get("url"):
        return await _download_as_data_uri(http, first["url"])

    raise EmptyOutputError("No image in response")


async def _download_as_data_uri(http: httpx.AsyncClient, url: str) -> str:
    try:
        response = await http.get(url)
    except httpx.RequestError as exc:
        raise FetchError("Failed to fetch generated image", url=url) from exc
    if not response.is_success:
        raise FetchError("Failed to fetch generated image", url=url, status_code=response.status_code)
    return encode_data_uri(response.content, "image/png")
