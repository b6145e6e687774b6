import sys
from typing import Optional

from loguru import logger

from inventory_search.config import AppConfig, get_config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


class AppLogger:
    """Owns the loguru sink for the process.

    The sink is rebuilt only when the active settings object changes, so
    modules can ask for loggers freely at import time.
    """

    def __init__(self) -> None:
        self._configured_for: Optional[AppConfig] = None
        self._sink_id: Optional[int] = None

    def configure(self, config: AppConfig) -> None:
        if self._sink_id is not None:
            logger.remove(self._sink_id)
        else:
            logger.remove()
        logger.configure(extra={"name": "inventory_search"})
        self._sink_id = logger.add(
            lambda msg: print(msg, end="", file=sys.stderr),
            level=config.log_level,
            format=LOG_FORMAT,
            serialize=config.log_json,
        )
        self._configured_for = config

    def get_logger(self, name: Optional[str] = None):
        config = get_config()
        if config is not self._configured_for:
            self.configure(config)
        if name:
            return logger.bind(name=name)
        return logger


_app_logger = AppLogger()


def get_logger(name: Optional[str] = None):
    """Logger bound to `name`, using the current log settings."""
    return _app_logger.get_logger(name)
