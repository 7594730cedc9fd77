"""LookSim API adapter package.

Architectural role:
- Defines the external HTTP boundary (serverless-style JSON handlers).
- Performs transport-level validation and response shaping.
- Delegates generation work to `looksim.image.service` and uploads to
  `looksim.storage`.
"""
