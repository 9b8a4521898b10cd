"""Logging setup shared by the API process and background email tasks."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    # basicConfig is a no-op when the root logger already has handlers (uvicorn, pytest)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("backend").setLevel(level)
