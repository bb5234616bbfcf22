import logging
import os


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """
    Return `name`'s logger. The handler and level live on the top-level
    logger of the dotted name ("relay" for "relay.fetcher"), so children
    inherit them and nothing is printed twice.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    top = logging.getLogger(name.split(".", 1)[0])
    if level is not None or top.level == logging.NOTSET:
        top.setLevel(resolved)

    # Add a handler once (avoid duplicate logs)
    if not top.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        top.addHandler(handler)

    return logging.getLogger(name)
