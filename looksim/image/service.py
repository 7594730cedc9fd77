"""Image service dispatcher used by the HTTP handlers.

Role in pipeline:
    - Receives validated generation parameters from a handler.
    - Resolves the provider credential (fails fast when it is missing).
    - Selects the provider adapter (`gemini`, `replicate`, `openai`).
    - Returns the finished image as a data URI.

Resource ownership:
    Each call opens one `httpx.AsyncClient` (unless the caller supplies one) and
    closes it before returning, on success and on error.

Error handling strategy:
    Exceptions from provider adapters are propagated unchanged; handlers own
    the translation to HTTP responses.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx

from looksim.config.provider_config import (
    HTTP_TIMEOUT_SECONDS,
    JOB_MAX_WAIT_SECONDS,
    load_key,
    missing_key_message,
)
from looksim.image import replicate_client
from looksim.image.gemini_client import edit_with_gemini
from looksim.image.openai_client import edit_with_openai
from looksim.jobs.client import AsyncJobClient
from looksim.jobs.errors import ConfigurationError

SUPPORTED_PROVIDERS = ("gemini", "replicate", "openai")


def require_key(provider: str) -> str:
    """Return the provider credential or raise `ConfigurationError`."""
    api_key = load_key(provider)
    if not api_key:
        raise ConfigurationError(missing_key_message(provider))
    return api_key


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS, follow_redirects=True)


@asynccontextmanager
async def _http_scope(http_client: Optional[httpx.AsyncClient]):
    if http_client is not None:
        yield http_client
        return
    client = create_http_client()
    try:
        yield client
    finally:
        await client.aclose()


async def generate_image(
    provider: str,
    image: str,
    prompt: str,
    settings: Optional[dict] = None,
    *,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    max_wait: float = JOB_MAX_WAIT_SECONDS,
) -> str:
    """Transform the hair in `image` via the selected provider.

    Args:
        provider: One of `SUPPORTED_PROVIDERS`.
        image: User photo as data URI or bare base64.
        prompt: Style request text.
        settings: Optional hair settings refining the prompt.
        api_key: Pre-resolved credential; looked up when omitted.
        http_client: Shared client; a private one is opened when omitted.
        max_wait: Polling budget for job-based providers (Replicate).

    Returns:
        Result image as a data URI.
    """
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unknown image provider: {provider}")

    api_key = api_key or require_key(provider)

    async with _http_scope(http_client) as http:
        if provider == "gemini":
            return await edit_with_gemini(http, api_key, image, prompt, settings)

        if provider == "openai":
            return await edit_with_openai(http, api_key, image, prompt, settings)

        async with AsyncJobClient.for_replicate(api_key, http_client=http, max_wait=max_wait) as jobs:
            return await replicate_client.edit_hairstyle(jobs, image, prompt, settings)


async def generate_hair_png(
    style_prompt: str,
    gender: Optional[str] = None,
    *,
    api_key: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    max_wait: float = JOB_MAX_WAIT_SECONDS,
) -> replicate_client.HairPngResult:
    """Run the two-stage hair PNG pipeline on Replicate."""
    api_key = api_key or require_key("replicate")

    async with _http_scope(http_client) as http:
        async with AsyncJobClient.for_replicate(api_key, http_client=http, max_wait=max_wait) as jobs:
            return await replicate_client.generate_hair_png(jobs, style_prompt, gender)
