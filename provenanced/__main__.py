"""Run provenanced with ``python -m provenanced``.

Host, port, log level and worker count come from provenanced.yaml and
PROVENANCED_* environment variables.
"""

import logging
import sys

import uvicorn

from provenance_library.config.loader import load_config

logger = logging.getLogger(__name__)


def main() -> None:
    """Load settings and serve the FastAPI app with uvicorn."""
    settings = load_config()
    log_level = settings.log_level.lower()
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Serving provenanced on http://{settings.host}:{settings.port} ({settings.workers} worker(s))")

    try:
        # An import string is required for more than one worker
        uvicorn.run(
            "provenanced.main:app",
            host=settings.host,
            port=settings.port,
            log_level=log_level,
            workers=settings.workers,
        )
    except KeyboardInterrupt:
        logger.info("Received interrupt, shutting down")
    except Exception as e:
        logger.error(f"Failed to start daemon: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
