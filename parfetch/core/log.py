import logging

from parfetch.core.errors import ConfigError

LOG_FMT = "%(levelname)s | %(asctime)s | %(name)s | %(message)s"
DATE_FMT = "%H:%M:%S"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def init_logger(level: str = "INFO") -> logging.Logger:
    name = str(level).upper()
    if name not in LEVELS:
        raise ConfigError(f"unknown log level {level!r} (expected one of {', '.join(LEVELS)})")
    logging.basicConfig(level=name, format=LOG_FMT, datefmt=DATE_FMT)
    for noisy in ("urllib3", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(logging.WARNING, logging.getLogger(noisy).level))
    return logging.getLogger("parfetch")
