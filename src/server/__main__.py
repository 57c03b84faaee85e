"""Run the onboarding API with ``python -m server``."""

import os

import uvicorn

from backlogiq.utils.logging_config import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


def main() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    logger.info("Starting onboarding API", extra={"host": host, "port": port, "reload": reload})
    # log_config=None leaves the handlers from configure_logging in place.
    uvicorn.run("server.main:app", host=host, port=port, reload=reload, log_config=None)


if __name__ == "__main__":
    main()
