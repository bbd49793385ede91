"""Run the metrics ingestion service.

Run with:
    python -m cloudwatchr

Configuration comes from CLOUDWATCHR_* environment variables (see
cloudwatchr.config.Settings).
"""

import logging

import uvicorn

from cloudwatchr.adapters.frameworks.fastapi import create_app
from cloudwatchr.adapters.logging import LOG_FORMAT
from cloudwatchr.config import Settings


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
