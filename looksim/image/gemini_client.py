"""Gemini image-editing client.

Processing flow:
    1. Split the user photo into MIME type and base64 payload.
    2. Send one `generateContent` request with the photo as `inlineData` and the
       hair transformation prompt as text.
    3. Return the first `inlineData` part of the first candidate as a data URI.

Gemini answers synchronously, so no job polling is involved.

Error handling strategy:
    - Non-2xx or unreachable endpoint -> `UpstreamRequestError`.
    - No candidates / no parts -> `EmptyOutputError`.
    - Text-only answer or unknown shape -> `UnexpectedResponseError`.
"""

import logging
from typing import Optional

import httpx

from looksim.config.provider_config import GEMINI_IMAGE_MODEL, GEMINI_URL_TEMPLATE
from looksim.image.data_uri import parse_image
from looksim.jobs.errors import EmptyOutputError, UnexpectedResponseError, UpstreamRequestError
from looksim.prompting.prompt_builder import build_gemini_prompt, build_style_request

logger = logging.getLogger(__name__)


def build_payload(image: str, prompt: str, settings: Optional[dict] = None) -> dict:
    inline = parse_image(image)
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"inlineData": {"mimeType": inline.mime_type, "data": inline.base64_data}},
                    {"text": build_gemini_prompt(build_style_request(prompt, settings))},
                ],
            }
        ],
        "generationConfig": {
            "responseModalities": ["image", "text"],
        },
    }


def extract_image(data: dict) -> str:
    """Pull the generated image out of a `generateContent` response."""
    candidates = data.get("candidates") or []
    if not candidates:
        raise EmptyOutputError("No response from AI model")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    if not parts:
        raise EmptyOutputError("No content in response")

    for part in parts:
        inline = part.get("inlineData")
        if inline and inline.get("data"):
            mime_type = inline.get("mimeType") or "image/png"
            return f"data:{mime_type};base64,{inline['data']}"

    for part in parts:
        if part.get("text"):
            raise UnexpectedResponseError("Model returned text instead of image", detail=part["text"])

    raise UnexpectedResponseError("Unexpected response format")


async def edit_with_gemini(
    http: httpx.AsyncClient,
    api_key: str,
    image: str,
    prompt: str,
    settings: Optional[dict] = None,
) -> str:
    """Transform the hair in `image` with Gemini and return a data URI."""
    payload = build_payload(image, prompt, settings)
    url = GEMINI_URL_TEMPLATE.format(model=GEMINI_IMAGE_MODEL)
    headers = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }

    try:
        response = await http.post(url, json=payload, headers=headers)
    except httpx.RequestError as exc:
        raise UpstreamRequestError("Failed to generate image", detail=str(exc)) from exc

    if not response.is_success:
        logger.error("Gemini API error %s: %s", response.status_code, response.text)
        raise UpstreamRequestError(
            "Failed to generate image",
            status_code=response.status_code,
            detail=response.text,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise UnexpectedResponseError("Unexpected response format", detail=response.text) from exc
    if not isinstance(data, dict):
        raise UnexpectedResponseError("Unexpected response format")

    return extract_image(data)
