"""Logging setup for the koperasi bot."""

import logging

LOG_FORMAT = '%(asctime)s:%(levelname)s:%(name)s: %(message)s'

# Loggers under these names are written even below the configured level
CRITICAL_MODULES = ('koperasi.auth', 'koperasi.backend', 'koperasi.storage')


class CriticalModuleFilter(logging.Filter):
    """Drop records below ``level`` unless they come from a critical module."""

    def __init__(self, level: int, critical_modules=CRITICAL_MODULES):
        super().__init__()
        self.level = level
        self.critical_modules = tuple(critical_modules)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= self.level:
            return True
        return any(
            record.name == module or record.name.startswith(module + '.')
            for module in self.critical_modules
        )


def setup_logging(log_file: str = 'koperasi.log', level: str = 'INFO') -> logging.Logger:
    """
    Configure the ``koperasi`` and ``discord`` loggers.

    The koperasi logger itself stays at DEBUG so critical modules can pass
    through; the handler filter applies the configured level to the rest.

    Args:
        log_file: Path of the log file, opened in write mode
        level: Level name such as 'DEBUG' or 'INFO'

    Returns:
        The configured ``koperasi`` logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.FileHandler(filename=log_file, encoding='utf-8', mode='w')
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CriticalModuleFilter(log_level))

    logger = logging.getLogger('koperasi')
    discord_logger = logging.getLogger('discord')
    for configured in (logger, discord_logger):
        for old in configured.handlers[:]:
            configured.removeHandler(old)
            old.close()
        configured.addHandler(handler)

    logger.setLevel(logging.DEBUG)
    discord_logger.setLevel(max(log_level, logging.INFO))

    return logger
