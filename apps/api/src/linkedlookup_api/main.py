from __future__ import annotations

import logging

import uvicorn
from dotenv import find_dotenv, load_dotenv

from linkedlookup_api.app import create_app
from linkedlookup_core import SERVICE_API, get_settings
from linkedlookup_observability import setup_logging


def main() -> None:
    load_dotenv(find_dotenv(usecwd=True))
    settings = get_settings()
    setup_logging(SERVICE_API, level=settings.log_level, log_format=settings.log_format)
    logging.getLogger(__name__).info(
        "api_starting",
        extra={
            "environment": settings.environment,
            "host": settings.api_host,
            "port": settings.api_port,
            "dev_relay": settings.use_dev_relay,
        },
    )
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    main()
