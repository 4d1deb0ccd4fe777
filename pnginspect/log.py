# pnginspect/log.py
"""
Общая настройка логирования для всего пакета.

Модули получают логгер так:
    from pnginspect.log import get_logger
    logger = get_logger(__name__)

Настройка (формат, уровень, обработчик) делается один раз в точке входа CLI.
"""

import logging
import sys


DEFAULT_FORMAT = "[%(levelname)s] %(name)s - %(message)s"

# Теги подсистем для поиска по логам
PARSER = "[PARSER]"
DECODER = "[DECODER]"
AUDIT = "[AUDIT]"
REPORT = "[REPORT]"
CLI = "[CLI]"


def configure_logging(level: int = logging.INFO, fmt: str = DEFAULT_FORMAT, stream=sys.stderr) -> None:
    # Повторный вызов не дублирует обработчики
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "PARSER", "DECODER", "AUDIT", "REPORT", "CLI"]
