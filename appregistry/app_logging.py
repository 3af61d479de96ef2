"""JSON log formatting for the app registry."""

import logging
from pythonjsonlogger import jsonlogger


def setup_logger(level: int = logging.INFO) -> None:
    """Install a JSON formatter on the root logger (once)."""
    logger = logging.getLogger()
    logger.setLevel(level)
    if any(isinstance(handler.formatter, jsonlogger.JsonFormatter)
           for handler in logger.handlers):
        return
    logHandler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    logHandler.setFormatter(formatter)
    logger.addHandler(logHandler)
