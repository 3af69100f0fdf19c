# File: api/logging_config.py
import logging
import os
import sys

def setup_logging(level: str | None = None):
    """
    Configures logging for the application to output structured logs to stdout.
    The level comes from LOG_LEVEL (default INFO).
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers to avoid duplicate logs
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - [%(name)s] - %(message)s'
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # httpx logs every request URL at INFO, and those URLs carry the CSE key
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)

    logging.info("Logging configured successfully.")
