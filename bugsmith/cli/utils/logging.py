import logging
import sys


logger = logging.getLogger("bugsmith")


def configure_logging(debug: bool):
    """
    Configures the logging system based on the debug flag.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
