from sensai.util import logging

from arduinols.constants import ARDUINOLS_LOG_FORMAT


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configures logging with the arduinols log format, for use by embedding applications.
    """
    logging.configure(format=ARDUINOLS_LOG_FORMAT, level=level)
    # configure() does not change the level if the root logger already has handlers
    logging.getLogger().setLevel(level)
