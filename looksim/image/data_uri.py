"""Data URI helpers for inline image payloads.

Clients send photos as `data:<mime>;base64,<payload>` strings (or bare base64),
and every handler answers with the same shape. This module converts between
those strings and raw bytes.

Validation:
    - Decoding uses strict base64 validation; malformed payloads raise
      `ValueError` so handlers can answer 400.
    - No size limit is enforced here.
"""

import base64
import binascii
import re
from dataclasses import dataclass

DEFAULT_MIME_TYPE = "image/jpeg"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]+)?(?P<params>(;[^;,]+)*),(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class InlineImage:
    """Base64 payload split from its MIME type."""

    mime_type: str
    base64_data: str

    def to_bytes(self) -> bytes:
        return decode_base64(self.base64_data)

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_data}"


def is_data_uri(value: str) -> bool:
    return isinstance(value, str) and value.startswith("data:")


def parse_image(value: str, default_mime: str = DEFAULT_MIME_TYPE) -> InlineImage:
    """Split an image reference into MIME type and base64 payload.

    Args:
        value: Data URI or bare base64 string.
        default_mime: MIME type assumed for bare base64 input.

    Returns:
        `InlineImage` carrying the payload exactly as received (not re-encoded).

    Raises:
        ValueError: Empty input, or a data URI that is not base64-encoded.
    """
    if not value:
        raise ValueError("Empty image payload")

    if not is_data_uri(value):
        return InlineImage(mime_type=default_mime, base64_data=value.strip())

    match = _DATA_URI_RE.match(value)
    if not match or ";base64" not in (match.group("params") or ""):
        raise ValueError("Image data URI must be base64-encoded")

    return InlineImage(
        mime_type=match.group("mime") or default_mime,
        base64_data=match.group("data").strip(),
    )


def ensure_data_uri(value: str, default_mime: str = DEFAULT_MIME_TYPE) -> str:
    """Return `value` as a data URI, prefixing bare base64 with `default_mime`."""
    if is_data_uri(value):
        return value
    return f"data:{default_mime};base64,{value}"


def decode_base64(data: str) -> bytes:
    """Decode standard base64 text, raising `ValueError` when it is malformed."""
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid base64 payload") from exc


def encode_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
