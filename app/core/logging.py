"""Logging configuration."""
import logging
import sys
from typing import Iterable

NOISY_LOGGERS = ("httpx", "openai", "azure.core.pipeline.policies.http_logging_policy")


def setup_logging(level: str = "INFO", quiet: Iterable[str] = NOISY_LOGGERS) -> None:
    """Send application logs to stdout and cap client libraries at WARNING."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        stream=sys.stdout,
    )
    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
