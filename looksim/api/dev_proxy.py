"""
Local development proxy for the Replicate handler.

Architectural role:
- Serves only `POST /api/generate-replicate` over plain HTTP on a fixed port so
  the front end can be developed without a serverless runtime.
- Same request/response contract and polling semantics as the deployed
  handler, with a longer max wait (180 s by default).

Startup behavior:
- Loads `.env` (through `looksim.config.provider_config`).
- Exits with status 1 when `REPLICATE_API_TOKEN` is not configured.

Usage:
    python -m looksim.api.dev_proxy [--host 127.0.0.1] [--port 3001]
"""

import argparse
import logging
import os
import sys

import uvicorn

from looksim.api.http_api import create_app
from looksim.config.provider_config import DEV_PROXY_MAX_WAIT_SECONDS, DEV_PROXY_PORT, load_key

logger = logging.getLogger(__name__)


def create_dev_app():
    return create_app(
        routes=("generate-replicate",),
        replicate_max_wait=DEV_PROXY_MAX_WAIT_SECONDS,
        title="LookSim Replicate dev proxy",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Local Replicate API proxy")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=DEV_PROXY_PORT)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not load_key("replicate"):
        logger.error("REPLICATE_API_TOKEN not found in .env file")
        return 1

    logger.info("Replicate proxy server running on http://%s:%d", args.host, args.port)
    logger.info("Endpoints: POST /api/generate-replicate")
    uvicorn.run(create_dev_app(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
