import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set the root level and add a stream handler unless one is already installed (uvicorn, pytest)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT))
        root.addHandler(handler)

    # Reduce noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
