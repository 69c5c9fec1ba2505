import logging
import sys

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FAIRPLAY_", env_file=".env", env_file_encoding="utf-8",
                                      extra="ignore")

    log_level: str = "INFO"

    # Seed pairs
    nonce_base: int = 0

    # Games
    max_multiplier: float = 1_000_000.0
    mines_board_size: int = 25
    plinko_default_rows: int = 12

    # HTTP
    api_host: str = "127.0.0.1"
    api_port: int = 8000


settings = Settings()

# Stream for loggers created after redirect_logs; stdout until then
_log_stream = None


def get_logger(name: str, level: int = None, stream=None) -> logging.Logger:
    """Logger writing to stdout (or ``stream``), level taken from settings unless given."""
    if level is None:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # get_logger may be called more than once per module name
    if not logger.handlers:
        handler = logging.StreamHandler(stream or _log_stream or sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)

    return logger


def redirect_logs(stream, prefix: str = "fairplay") -> None:
    """Point every handler of the package's loggers at ``stream``."""
    global _log_stream
    _log_stream = stream
    for name, logger in list(logging.root.manager.loggerDict.items()):
        if name.split(".")[0] != prefix or not isinstance(logger, logging.Logger):
            continue
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(stream)
