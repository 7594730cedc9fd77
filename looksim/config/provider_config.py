"""Provider/runtime configuration for the generation layer.

Architectural role:
    Centralizes provider endpoints, model selection, polling limits and
    credential lookup for `looksim.jobs`, `looksim.image` and `looksim.api`.

Resolution model:
    - Endpoints, models and polling limits are resolved at import time from the
      process environment (after `load_dotenv()`).
    - Credentials are resolved per call through `load_key`, so a key removed
      from the environment is noticed by the next request.

Failure behavior:
    Missing key material is represented as `None`; handlers turn that into a
    configuration error before any network call is made.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_float(name, default):
    raw = os.getenv(name, "").strip()
    if not raw:
        return float(default)
    return float(raw)


# =========================================================
# POLLING / TRANSPORT LIMITS
# =========================================================

JOB_POLL_INTERVAL_SECONDS = _env_float("JOB_POLL_INTERVAL_SECONDS", 2)
JOB_MAX_WAIT_SECONDS = _env_float("JOB_MAX_WAIT_SECONDS", 120)
HTTP_TIMEOUT_SECONDS = _env_float("HTTP_TIMEOUT_SECONDS", 120)

# Local development proxy (generate-replicate only).
DEV_PROXY_MAX_WAIT_SECONDS = _env_float("DEV_PROXY_MAX_WAIT_SECONDS", 180)
DEV_PROXY_PORT = int(os.getenv("DEV_PROXY_PORT", "3001"))


# =========================================================
# MODEL SELECTION
# =========================================================

REPLICATE_EDIT_MODEL = os.getenv("REPLICATE_EDIT_MODEL", "black-forest-labs/flux-kontext-pro")
REPLICATE_HAIR_MODEL = os.getenv("REPLICATE_HAIR_MODEL", "black-forest-labs/flux-schnell")
REPLICATE_BG_REMOVAL_MODEL = os.getenv("REPLICATE_BG_REMOVAL_MODEL", "lucataco/remove-bg")
GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.0-flash-exp")
OPENAI_IMAGE_MODEL = os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1")


# =========================================================
# PROVIDER MAP
# =========================================================
# `env` lists credential variables in lookup order; `key_file` is the fallback
# consulted when none of them is set.

IMAGE_PROVIDERS = {

    "gemini": {
        "url": "https://generativelanguage.googleapis.com/v1beta/models",
        "env": ("GEMINI_API_KEY", "VITE_GEMINI_API_KEY"),
        "key_file": "config/gemini.key",
        "label": "Gemini API key",
    },

    "openai": {
        "url": "https://api.openai.com/v1/images/edits",
        "env": ("OPENAI_API_KEY",),
        "key_file": "config/openai.key",
        "label": "OpenAI API key",
    },

    "replicate": {
        "url": "https://api.replicate.com/v1/",
        "env": ("REPLICATE_API_TOKEN",),
        "key_file": "config/replicate.key",
        "label": "Replicate API token",
    },

}

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)


# =========================================================
# S3 REFERENCE STORAGE
# =========================================================

AWS_REGION = os.getenv("AWS_REGION", "ap-northeast-2")
S3_BUCKET = os.getenv("S3_BUCKET", "hairstyle-ai-references")
S3_PREFIX = os.getenv("S3_PREFIX", "references/")
S3_CACHE_CONTROL = "max-age=31536000"


def load_key(provider):
    """Load the credential for an image provider.

    Resolution order:
        1. Each environment variable listed under the provider's `env` entry.
        2. Raw contents of the provider's `key_file`.

    Args:
        provider: Key of `IMAGE_PROVIDERS` (`gemini`, `openai`, `replicate`).

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - Unknown provider raises `ValueError`.
        - Whitespace-only values count as missing.
    """
    config = IMAGE_PROVIDERS.get(provider)
    if not config:
        raise ValueError(f"Unknown image provider: {provider}")

    for name in config["env"]:
        value = (os.getenv(name) or "").strip()
        if value:
            return value

    path = config.get("key_file")
    if not path or not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def missing_key_message(provider):
    """Return the handler-facing error text for an unconfigured provider."""
    return f"{IMAGE_PROVIDERS[provider]['label']} not configured"
