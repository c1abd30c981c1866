"""Тесты настроек, логирования и интерфейсов алгебр."""

import logging

import pytest

from hyper_fx import (
    OCTONION_FLOAT64,
    QUATERNION_FLOAT64,
    QUATERNION_MATRIX_FLOAT64,
    QUATERNION_RMODULE_FLOAT64,
    QUATERNION_TENSOR_FLOAT64,
    configure,
    get_logger,
    protocols,
    settings,
)
from hyper_fx import _config


# -----------------------------------------------------------------------------
# configure
# -----------------------------------------------------------------------------

def test_configure_returns_previous_values():
    old = configure(taylor_exp_terms=50, taylor_trig_terms=20)
    try:
        assert old == {"taylor_exp_terms": 35, "taylor_trig_terms": 18}
        assert settings["taylor_exp_terms"] == 50
        assert settings["taylor_trig_terms"] == 20
    finally:
        configure(**old)
    assert settings["taylor_exp_terms"] == 35


def test_configure_is_atomic():
    """Ошибка в одном ключе не меняет остальные."""
    with pytest.raises(ValueError):
        configure(taylor_exp_terms=40, taylor_log_terms=0)
    assert settings["taylor_exp_terms"] == 35


@pytest.mark.parametrize(
    "kwargs, error",
    [
        ({"no_such_setting": 1}, KeyError),
        ({"taylor_exp_terms": 0}, ValueError),
        ({"high_prec_dps": -5}, ValueError),
        ({"file_storage_threshold": -1}, ValueError),
        ({"taylor_log_terms": 2.5}, TypeError),
        ({"taylor_log_terms": True}, TypeError),
    ],
    ids=["unknown", "zero-terms", "negative-dps", "negative-threshold", "float", "bool"],
)
def test_configure_rejects_bad_values(kwargs, error):
    with pytest.raises(error):
        configure(**kwargs)


def test_threshold_may_be_zero():
    old = configure(file_storage_threshold=0)
    configure(**old)


# -----------------------------------------------------------------------------
# Переменные окружения
# -----------------------------------------------------------------------------

def test_env_values_are_read(monkeypatch):
    monkeypatch.setenv("HYPER_FX_TAYLOR_EXP_TERMS", "40")
    monkeypatch.setenv("HYPER_FX_FILE_STORAGE_THRESHOLD", "1024")
    values = _config._from_env()
    assert values["taylor_exp_terms"] == 40
    assert values["file_storage_threshold"] == 1024
    assert values["taylor_log_terms"] == 8


@pytest.mark.parametrize("raw", ["abc", "-3", "0", "1.5"], ids=["text", "negative", "zero", "float"])
def test_bad_env_value_warns_and_uses_default(monkeypatch, raw):
    monkeypatch.setenv("HYPER_FX_TAYLOR_EXP_TERMS", raw)
    with pytest.warns(UserWarning, match="ignoring invalid HYPER_FX_TAYLOR_EXP_TERMS"):
        values = _config._from_env()
    assert values["taylor_exp_terms"] == 35


# -----------------------------------------------------------------------------
# Логирование
# -----------------------------------------------------------------------------

def test_logger_hierarchy():
    assert get_logger("hyper_fx._matrix").name == "hyper_fx._matrix"
    assert get_logger("hyper_fx").name == "hyper_fx"
    assert get_logger("user.module").name == "hyper_fx.user.module"


def test_settings_change_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="hyper_fx"):
        old = configure(taylor_log_terms=9)
        configure(**old)
    assert "settings updated" in caplog.text


def test_taylor_terms_are_logged(caplog):
    m = QUATERNION_MATRIX_FLOAT64.construct(1, 1)
    with caplog.at_level(logging.DEBUG, logger="hyper_fx"):
        QUATERNION_MATRIX_FLOAT64.exp(m)
    assert "taylor exp: 35 terms" in caplog.text


# -----------------------------------------------------------------------------
# Интерфейсы алгебр
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "alg, present, absent",
    [
        (QUATERNION_FLOAT64,
         ["SkewField", "Norm", "Exponential", "Trigonometric", "Hyperbolic", "RealConstants", "Random"],
         ["ScaleByScalar"]),
        (OCTONION_FLOAT64, ["SkewField", "Scale", "Tolerance", "NaN", "Infinite"], ["ScaleByScalar"]),
        (QUATERNION_RMODULE_FLOAT64, ["Group", "Norm", "ScaleByScalar", "Rounding"], ["Ring", "Exponential"]),
        (QUATERNION_MATRIX_FLOAT64, ["Ring", "Exponential", "Trigonometric", "RealConstants"], []),
        (QUATERNION_TENSOR_FLOAT64, ["Ring", "ScaleByScalar"], ["SkewField", "Exponential"]),
    ],
    ids=["quaternion", "octonion", "rmodule", "matrix", "tensor"],
)
def test_algebra_capabilities(alg, present, absent):
    for name in present:
        assert isinstance(alg, getattr(protocols, name)), name
    for name in absent:
        assert not isinstance(alg, getattr(protocols, name)), name
