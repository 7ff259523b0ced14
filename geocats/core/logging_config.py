"""Root logger configuration, applied once when the application is created."""

import logging


def setup_logging(level: str = "INFO") -> None:
    """
    Attach a console handler to the root logger and set its level.

    Does nothing if the root logger already has handlers (tests, repeated create_app calls).
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
    )
    root.addHandler(handler)
