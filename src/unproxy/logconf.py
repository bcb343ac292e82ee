"""Console logging for the ``unproxy`` logger hierarchy.

The library only emits records (``unproxy.copier``, ``unproxy.placeholder``);
applications opt into output by attaching a handler here.

Usage:
    from unproxy.logconf import configure_logger

    configure_logger(logging.DEBUG)   # traversal summaries and aborted paths
"""

import logging


def configure_logger(level: int = logging.INFO, name: str = "unproxy") -> logging.Logger:
    """Attach one stream handler to the package logger and return ``name``."""
    root = logging.getLogger("unproxy")
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("[unproxy] %(levelname)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)
    return logging.getLogger(name)
