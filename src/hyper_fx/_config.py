"""hyper_fx._config
===================
Глобальные настройки библиотеки.

Значения читаются из окружения при импорте и могут быть изменены
во время работы через :func:`configure`. Некорректные значения
окружения не прерывают импорт: выдаётся предупреждение и берётся
значение по умолчанию.
"""

from __future__ import annotations

import os
import warnings
from typing import Any, Dict

from ._log import get_logger

__all__ = ["settings", "configure", "DEFAULTS"]

log = get_logger(__name__)

# Значения по умолчанию (число членов ряда Тейлора совпадает с матричными
# алгебрами: exp 35, log 8, остальные 18)
DEFAULTS: Dict[str, int] = {
    "file_storage_threshold": 0,   # 0 - никогда не использовать файл
    "taylor_exp_terms": 35,
    "taylor_log_terms": 8,
    "taylor_trig_terms": 18,
    "high_prec_dps": 50,
}

_ENV = {
    "file_storage_threshold": "HYPER_FX_FILE_STORAGE_THRESHOLD",
    "taylor_exp_terms": "HYPER_FX_TAYLOR_EXP_TERMS",
    "taylor_log_terms": "HYPER_FX_TAYLOR_LOG_TERMS",
    "taylor_trig_terms": "HYPER_FX_TAYLOR_TRIG_TERMS",
    "high_prec_dps": "HYPER_FX_HIGH_PREC_DPS",
}


def _validate(key: str, value: Any) -> int:
    if key not in DEFAULTS:
        raise KeyError(f"Unknown hyper_fx setting: {key!r}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Setting {key!r} must be an int, got {type(value).__name__}")
    if key == "file_storage_threshold":
        if value < 0:
            raise ValueError(f"Setting {key!r} must be non-negative, got {value}")
    elif value <= 0:
        raise ValueError(f"Setting {key!r} must be positive, got {value}")
    return value


def _from_env() -> Dict[str, int]:
    result = dict(DEFAULTS)
    for key, env_name in _ENV.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        try:
            result[key] = _validate(key, int(raw))
        except (TypeError, ValueError):
            warnings.warn(
                f"hyper_fx: ignoring invalid {env_name}={raw!r}, "
                f"using default {DEFAULTS[key]}",
                stacklevel=2,
            )
    return result


settings: Dict[str, int] = _from_env()


def configure(**kwargs: int) -> Dict[str, int]:
    """Меняет настройки во время работы и возвращает предыдущие значения.

    >>> old = configure(taylor_exp_terms=50)
    >>> configure(**old)  # откат
    """
    checked = {key: _validate(key, value) for key, value in kwargs.items()}
    previous = {key: settings[key] for key in checked}
    settings.update(checked)
    log.debug("settings updated: %s", checked)
    return previous
