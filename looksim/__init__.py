"""LookSim generation backend.

Architectural role:
    Server side of the LookSim hairstyle simulator. HTTP handlers accept a user
    photo plus a style request and forward it to third-party image-generation
    providers (Gemini, OpenAI, Replicate), then return the finished image as an
    embeddable data URI.

Package split:
    - `config`: environment-driven provider configuration and key lookup.
    - `jobs`: job/artifact types, error taxonomy and the asynchronous
      create-then-poll job adapter.
    - `image`: provider adapters and the provider dispatcher.
    - `prompting`: deterministic prompt assembly.
    - `storage`: S3 upload of reference images.
    - `api`: FastAPI handlers and the local development proxy.
"""

__version__ = "0.1.0"
