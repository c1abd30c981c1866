"""hyper_fx._log
================
Логирование в иерархии ``hyper_fx``.

Библиотека никогда не пишет в stdout: все сообщения идут через
:func:`get_logger`. Настройка выполняется лениво, один раз.

Переменные окружения:
    HYPER_FX_LOG_LEVEL  DEBUG / INFO / WARNING (по умолчанию) / ERROR
    HYPER_FX_LOG_FILE   необязательный путь, строки дописываются в конец
"""

import logging
import os
import sys

__all__ = ["get_logger"]

_ROOT = "hyper_fx"
_CONFIGURED = False


def _configure_once() -> None:
    """Однократная инициализация корневого логгера ``hyper_fx``."""
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    root = logging.getLogger(_ROOT)
    level_name = os.environ.get("HYPER_FX_LOG_LEVEL", "WARNING").upper()
    root.setLevel(getattr(logging, level_name, logging.WARNING))

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(console)

    log_file = os.environ.get("HYPER_FX_LOG_FILE")
    if log_file:
        fh = logging.FileHandler(log_file, mode="a")
        fh.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        root.addHandler(fh)


def get_logger(name: str) -> logging.Logger:
    """Возвращает логгер внутри иерархии ``hyper_fx``.

    Args:
        name: обычно ``__name__`` вызывающего модуля.
    """
    _configure_once()
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")
