"""hyper_fx._round
=================
Округление компонент к кратному `delta` в одном из режимов RoundMode.
"""

from __future__ import annotations

import enum

import torch

__all__ = ["RoundMode", "round_components"]


class RoundMode(enum.Enum):
    NEGATIVE = "negative"                  # к -inf
    POSITIVE = "positive"                  # к +inf
    AWAY_FROM_ORIGIN = "away_from_origin"
    TOWARDS_ORIGIN = "towards_origin"
    HALF_UP = "half_up"                    # середина от нуля: 2.5 -> 3, -2.5 -> -3
    HALF_DOWN = "half_down"                # середина к нулю: 2.5 -> 2, -2.5 -> -2
    HALF_EVEN = "half_even"                # 2.5 -> 2, 3.5 -> 4
    HALF_ODD = "half_odd"                  # 2.5 -> 3, 3.5 -> 3
    EXACT = "exact"                        # ошибка, если значение не кратно delta
    NONE = "none"


def _half(q: torch.Tensor, mode: RoundMode) -> torch.Tensor:
    """Ближайшее целое; середины решает `mode`.

    Считается по модулю: |q| - floor(|q|) вычисляется точно.
    """
    a = q.abs()
    f = torch.floor(a)
    frac = a - f
    if mode is RoundMode.HALF_UP:
        tie_up = torch.ones_like(frac, dtype=torch.bool)
    elif mode is RoundMode.HALF_DOWN:
        tie_up = torch.zeros_like(frac, dtype=torch.bool)
    else:
        # к нечётному: чётный f поднимается
        tie_up = torch.remainder(f, 2) == 0
    up = (frac > 0.5) | ((frac == 0.5) & tie_up)
    return torch.copysign(torch.where(up, f + 1, f), q)


def round_components(x: torch.Tensor, mode: RoundMode, delta: float) -> torch.Tensor:
    """Округляет каждый элемент `x` к ближайшему кратному `delta`.

    NaN и бесконечности проходят без изменений.
    """
    if not isinstance(mode, RoundMode):
        raise TypeError(f"mode must be a RoundMode, got {type(mode).__name__}")
    delta = float(delta)
    if not delta > 0:
        raise ValueError(f"round delta must be positive, got {delta}")

    if mode is RoundMode.NONE:
        return x.clone()

    q = x / delta
    if mode is RoundMode.EXACT:
        finite = torch.isfinite(q)
        if (finite & (q != torch.round(q))).any():
            raise ArithmeticError("Rounding necessary: value is not a multiple of delta")
        return x.clone()

    if mode is RoundMode.NEGATIVE:
        k = torch.floor(q)
    elif mode is RoundMode.POSITIVE:
        k = torch.ceil(q)
    elif mode is RoundMode.AWAY_FROM_ORIGIN:
        k = torch.where(q >= 0, torch.ceil(q), torch.floor(q))
    elif mode is RoundMode.TOWARDS_ORIGIN:
        k = torch.trunc(q)
    elif mode is RoundMode.HALF_EVEN:
        # torch.round округляет середину к чётному
        k = torch.round(q)
    else:
        k = _half(q, mode)

    result = k * delta
    # inf / delta и обратно даёт inf, но NaN должен остаться NaN
    return torch.where(torch.isfinite(x), result, x)
