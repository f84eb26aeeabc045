"""Logging set up for the IdP server"""
import copy
import logging
import os
from logging.config import dictConfig
from typing import Optional
from typing import Tuple

from pseudoidp.utils import load_config_file

LOGGING_DEFAULT = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {"default": {"format": "%(asctime)s %(name)s %(levelname)s %(message)s"}},
    "handlers": {"default": {"class": "logging.StreamHandler", "formatter": "default"}},
    "root": {"handlers": ["default"], "level": "INFO"},
    # werkzeug logs every request on INFO
    "loggers": {"werkzeug": {"level": "WARNING"}},
}


def logging_dict(config: Optional[dict] = None, filename: Optional[str] = "") -> Tuple[dict, str]:
    """
    Pick the logging configuration to use.

    :param config: A dictConfig style dictionary, wins if given
    :param filename: A YAML or JSON file with a dictConfig style dictionary
    :return: tuple of the dictionary and where it came from
    """
    if config is not None:
        return copy.deepcopy(config), "dictionary"
    if filename and os.path.exists(filename):
        return load_config_file(filename), "file {}".format(filename)
    return copy.deepcopy(LOGGING_DEFAULT), "default"


def configure_logging(
    debug: Optional[bool] = False,
    config: Optional[dict] = None,
    filename: Optional[str] = "",
) -> logging.Logger:
    """Configure logging"""

    config_dict, config_source = logging_dict(config, filename)
    if debug:
        config_dict.setdefault("root", {})["level"] = "DEBUG"

    dictConfig(config_dict)
    logger = logging.getLogger()
    logger.debug("Configured logging using: {}".format(config_source))
    return logger
