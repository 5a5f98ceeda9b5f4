import logging
import sys

from marketplace.config import settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the "marketplace" namespace.
    The stream handler is attached once, on the namespace root.
    """
    root = logging.getLogger("marketplace")
    if not root.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(h)
        root.setLevel(settings.LOG_LEVEL.upper())
    if name == "marketplace" or name.startswith("marketplace."):
        return logging.getLogger(name)
    return logging.getLogger(f"marketplace.{name}")
