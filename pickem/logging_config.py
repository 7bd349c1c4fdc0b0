import logging
import sys


def setup_logging(level=logging.INFO) -> None:
    logger = logging.getLogger()
    if logger.handlers:
        logger.setLevel(level)
        return  # already configured (gunicorn, pytest, a second create_app)
    logger.setLevel(level)
    h = logging.StreamHandler(sys.stdout)
    h.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s - %(message)s"
    ))
    logger.addHandler(h)
