"""Image generation adapter package.

Scope:
    Provides image-to-image provider clients (Gemini, OpenAI, Replicate), the
    two-stage hair PNG pipeline, and a small dispatch service used by the HTTP
    handlers.

Non-goals:
    - No local image processing (resizing, compositing, segmentation).
    - No persistence of inputs or results.
"""
