"""Prompt assembly helpers used by the provider adapters.

This module only builds prompt strings from already validated inputs. Provider
selection, image handling and model invocation happen outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering of prompt components.
    - No I/O and no global state mutation.

Prompt safety model:
    - User text is interpolated as a raw string.
    - Identity preservation is instruction-led; nothing here can enforce it.
"""

from typing import Optional


# =========================================================
# STYLE SETTINGS
# =========================================================
# Phrases appended after the base style prompt. Unknown values are skipped
# rather than rejected, so older clients sending extra options still work.

VOLUME_PHRASES = {
    "flat": "with flat sleek low volume",
    "natural": "with natural medium volume",
    "voluminous": "with high volume and body",
}

PARTING_PHRASES = {
    "left": "parted on the left side",
    "center": "parted in the center",
    "right": "parted on the right side",
    "none": "with no visible part",
}

NATURAL_COLOR_IDS = {"", "natural"}


def build_settings_clause(settings: Optional[dict]) -> str:
    """Render hair settings as a comma-separated phrase list.

    Component order:
        1) hair color (skipped for `natural`)
        2) volume
        3) parting

    Args:
        settings: Client `settings` object (`color`, `volume`, `parting`; the
            `length` object is not rendered).

    Returns:
        Clause string, empty when nothing applies.
    """
    if not isinstance(settings, dict):
        return ""

    parts = []

    color = str(settings.get("color") or "").strip()
    if color.lower() not in NATURAL_COLOR_IDS:
        parts.append(f"{color.replace('-', ' ')} hair color")

    volume = VOLUME_PHRASES.get(str(settings.get("volume") or "").lower())
    if volume:
        parts.append(volume)

    parting = PARTING_PHRASES.get(str(settings.get("parting") or "").lower())
    if parting:
        parts.append(parting)

    return ", ".join(parts)


def build_style_request(prompt: str, settings: Optional[dict] = None) -> str:
    """Join the client's style prompt with its settings clause."""
    prompt = prompt.strip()
    clause = build_settings_clause(settings)
    if not clause:
        return prompt
    return f"{prompt}, {clause}"


# =========================================================
# PROVIDER EDIT PROMPTS
# =========================================================

def build_gemini_prompt(style_request: str) -> str:
    return (
        "You are an expert hair stylist AI. Transform ONLY the hair in this photo "
        "while keeping the face, skin, and all other features completely unchanged.\n\n"
        "Hair transformation request:\n"
        f"{style_request}\n\n"
        "CRITICAL INSTRUCTIONS:\n"
        "1. ONLY modify the hair - do NOT change the face, eyes, nose, mouth, skin tone, "
        "or any facial features\n"
        "2. Keep the person's identity perfectly preserved\n"
        "3. The new hairstyle should look natural and realistic on this person\n"
        "4. Maintain the same lighting and photo quality\n"
        "5. Generate a photorealistic result\n\n"
        "Generate the transformed image now."
    )


def build_replicate_edit_prompt(style_request: str) -> str:
    return (
        f"Change ONLY the hairstyle to: {style_request}.\n"
        "Keep the exact same face, skin, eyes, expression, and all other features "
        "completely unchanged.\n"
        "The person's identity must remain 100% the same. Only transform the hair."
    )


def build_openai_edit_prompt(style_request: str) -> str:
    return (
        f"Transform ONLY the hairstyle to: {style_request}.\n"
        "CRITICAL: Keep the exact same face, skin tone, eyes, expression, facial "
        "features, and all other body parts completely unchanged.\n"
        "The person's identity must remain 100% identical. Only change the hair - "
        "nothing else.\n"
        "Make sure the new hairstyle looks natural and realistic on this person."
    )


# =========================================================
# HAIR PNG PROMPT
# =========================================================
# Stage 1 of the hair PNG pipeline renders hair alone on white so the
# background-removal stage has a clean subject.

def build_hair_png_prompt(style_prompt: str, gender: Optional[str] = None) -> str:
    """Build the isolated-hair prompt; any gender other than `male` renders female."""
    subject = "male" if str(gender or "").lower() == "male" else "female"
    return "\n".join([
        f"A {subject} hairstyle isolated on pure white background,",
        f"{style_prompt.strip()},",
        "hair only without face or body,",
        "professional hair product photography style,",
        "high resolution, studio lighting,",
        "transparent background ready,",
        "hair floating in air,",
        "no mannequin head,",
        "pure white background #FFFFFF",
    ])
