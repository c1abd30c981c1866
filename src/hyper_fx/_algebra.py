"""hyper_fx._algebra
===================
Скалярные алгебры кватернионов и октонионов.

Алгебра - stateless-синглтон (одна на тип и точность), который не
владеет данными и только предоставляет операции над членами.
Точность задаётся dtype, реализация одна для float32 и float64.

    >>> from hyper_fx import QUATERNION_FLOAT64 as Q
    >>> a = Q.construct(1, 2, 3, 4)
    >>> Q.multiply(a, Q.conjugate(a))   # {30.0,0.0,0.0,0.0}
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import torch

from . import _algorithms
from . import _core
from ._base import AlgebraBase
from ._members import DEFAULT_DTYPE, Hypercomplex, Octonion, Quaternion, _check_dtype

__all__ = [
    "HypercomplexAlgebra",
    "QuaternionAlgebra",
    "OctonionAlgebra",
    "QUATERNION_FLOAT32",
    "QUATERNION_FLOAT64",
    "OCTONION_FLOAT32",
    "OCTONION_FLOAT64",
    "scalar_algebra",
]

# Константы, которых нет в math
EULER_GAMMA = 0.57721566490153286060
GOLDEN_RATIO = 1.61803398874989484820


class HypercomplexAlgebra(AlgebraBase):
    """Кольцо с делением (для октонионов - неассоциативное)."""

    KIND = "scalar"

    def __init__(self, element_type, dtype: torch.dtype):
        self.MEMBER_TYPE = element_type
        super().__init__(element_type, dtype)

    # -----------------------------------------------------------------
    # Ядра над сырыми тензорами [..., n]; ими пользуются агрегатные алгебры
    # -----------------------------------------------------------------
    def product(self, x: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
        return _core.multiply(x, y, self.table)

    def quotient(self, x: torch.Tensor, y: torch.Tensor) -> torch.Tensor:
        return _core.divide(x, y, self.table)

    # -----------------------------------------------------------------
    # Конструирование
    # -----------------------------------------------------------------
    def construct(self, *values: float) -> Hypercomplex:
        return self.element_type(*values, dtype=self.dtype)

    def construct_from_string(self, text: str) -> Hypercomplex:
        return self.element_type.from_string(text, dtype=self.dtype)

    def _const(self, values, out):
        comps = torch.zeros(self.n, dtype=self.dtype)
        for idx, v in values:
            comps[idx] = v
        return self._store(comps, out)

    def zero(self, out=None):
        if out is None:
            return self.construct()
        return super().zero(out)

    def unity(self, out=None):
        return self._const([(0, 1.0)], out)

    def is_unity(self, a) -> bool:
        self._check(a)
        return self.equal(a, self.unity())

    # -----------------------------------------------------------------
    # Кольцо
    # -----------------------------------------------------------------
    def multiply(self, a, b, out=None):
        """a * b (порядок важен: умножение некоммутативно)."""
        self._check(a, b)
        return self._store(self.product(a.components, b.components), out)

    def power(self, power: int, a, out=None):
        """Целая степень возведением в квадрат; отрицательная - через invert."""
        self._check(a)
        return _algorithms.power_any(self, power, a, out)

    # -----------------------------------------------------------------
    # Тело (skew field)
    # -----------------------------------------------------------------
    def invert(self, a, out=None):
        """conjugate(a) / norm(a)^2; на нуле - Inf/NaN, а не исключение."""
        self._check(a)
        return self._store(_core.invert(a.components), out)

    def divide(self, a, b, out=None):
        """a * invert(b)."""
        self._check(a, b)
        return self._store(self.quotient(a.components, b.components), out)

    def norm2(self, a) -> float:
        self._check(a)
        return _core.norm2(a.components).item()

    # -----------------------------------------------------------------
    # Вещественная и мнимая часть, случайные значения
    # -----------------------------------------------------------------
    def real(self, a) -> float:
        self._check(a)
        return a.components[0].item()

    def unreal(self, a, out=None):
        self._check(a)
        return self._store(_core.unreal(a.components), out)

    def random(self, out=None, generator: Optional[torch.Generator] = None):
        if out is None:
            out = self.construct()
        return super().random(out, generator)

    def nan(self, out=None):
        return super().nan(out if out is not None else self.construct())

    def infinite(self, out=None):
        return super().infinite(out if out is not None else self.construct())

    # -----------------------------------------------------------------
    # Константы
    # -----------------------------------------------------------------
    def pi(self, out=None):
        return self._const([(0, math.pi)], out)

    def e(self, out=None):
        return self._const([(0, math.e)], out)

    def gamma(self, out=None):
        return self._const([(0, EULER_GAMMA)], out)

    def phi(self, out=None):
        return self._const([(0, GOLDEN_RATIO)], out)

    def i(self, out=None):
        return self._const([(1, 1.0)], out)

    def j(self, out=None):
        return self._const([(2, 1.0)], out)

    def k(self, out=None):
        return self._const([(3, 1.0)], out)

    # -----------------------------------------------------------------
    # Экспонента и логарифм
    # -----------------------------------------------------------------
    def exp(self, a, out=None):
        self._check(a)
        return self._store(_core.exp(a.components), out)

    def log(self, a, out=None):
        self._check(a)
        return self._store(_core.log(a.components), out)

    def pow(self, a, b, out=None):
        """exp(b * log(a)), b умножается слева."""
        self._check(a, b)
        b_log_a = self.product(b.components, _core.log(a.components))
        return self._store(_core.exp(b_log_a), out)

    def sqrt(self, a, out=None):
        return self.pow(a, self.construct(0.5), out)

    def cbrt(self, a, out=None):
        return self.pow(a, self.construct(1.0 / 3.0), out)

    # -----------------------------------------------------------------
    # Тригонометрия
    # -----------------------------------------------------------------
    def sin(self, a, out=None):
        self._check(a)
        return self._store(_core.sin(a.components), out)

    def cos(self, a, out=None):
        self._check(a)
        return self._store(_core.cos(a.components), out)

    def sin_and_cos(self, a, sin_out=None, cos_out=None) -> Tuple[Hypercomplex, Hypercomplex]:
        self._check(a)
        s = _core.sin(a.components)
        c = _core.cos(a.components)
        return self._store(s, sin_out), self._store(c, cos_out)

    def tan(self, a, out=None):
        self._check(a)
        return self._store(self.quotient(_core.sin(a.components), _core.cos(a.components)), out)

    # -----------------------------------------------------------------
    # Гиперболические функции
    # -----------------------------------------------------------------
    def _exp_pair(self, a) -> Tuple[torch.Tensor, torch.Tensor]:
        return _core.exp(a.components), _core.exp(-a.components)

    def sinh(self, a, out=None):
        self._check(a)
        plus, minus = self._exp_pair(a)
        return self._store((plus - minus) * 0.5, out)

    def cosh(self, a, out=None):
        self._check(a)
        plus, minus = self._exp_pair(a)
        return self._store((plus + minus) * 0.5, out)

    def sinh_and_cosh(self, a, sinh_out=None, cosh_out=None) -> Tuple[Hypercomplex, Hypercomplex]:
        self._check(a)
        plus, minus = self._exp_pair(a)
        return self._store((plus - minus) * 0.5, sinh_out), self._store((plus + minus) * 0.5, cosh_out)

    def tanh(self, a, out=None):
        self._check(a)
        plus, minus = self._exp_pair(a)
        return self._store(self.quotient(plus - minus, plus + minus), out)

    # -----------------------------------------------------------------
    # sinc-семейство
    # -----------------------------------------------------------------
    def sinc(self, a, out=None):
        return _algorithms.sinc(self, a, out)

    def sinch(self, a, out=None):
        return _algorithms.sinch(self, a, out)

    def sincpi(self, a, out=None):
        return _algorithms.sincpi(self, a, out)

    def sinchpi(self, a, out=None):
        return _algorithms.sinchpi(self, a, out)

    # -----------------------------------------------------------------
    # Масштабирование
    # -----------------------------------------------------------------
    def scale(self, factor, a, out=None):
        """factor * a."""
        return self.multiply(factor, a, out)

    def scale_components(self, factor: float, a, out=None):
        return self.scale_by_double(factor, a, out)


class QuaternionAlgebra(HypercomplexAlgebra):
    def __init__(self, dtype: torch.dtype):
        super().__init__(Quaternion, dtype)


class OctonionAlgebra(HypercomplexAlgebra):
    def __init__(self, dtype: torch.dtype):
        super().__init__(Octonion, dtype)

    def l(self, out=None):  # noqa: E743
        return self._const([(4, 1.0)], out)

    def i0(self, out=None):
        return self._const([(5, 1.0)], out)

    def j0(self, out=None):
        return self._const([(6, 1.0)], out)

    def k0(self, out=None):
        return self._const([(7, 1.0)], out)


QUATERNION_FLOAT32 = QuaternionAlgebra(torch.float32)
QUATERNION_FLOAT64 = QuaternionAlgebra(torch.float64)
OCTONION_FLOAT32 = OctonionAlgebra(torch.float32)
OCTONION_FLOAT64 = OctonionAlgebra(torch.float64)

_SCALAR_ALGEBRAS = {
    (Quaternion, torch.float32): QUATERNION_FLOAT32,
    (Quaternion, torch.float64): QUATERNION_FLOAT64,
    (Octonion, torch.float32): OCTONION_FLOAT32,
    (Octonion, torch.float64): OCTONION_FLOAT64,
}


def scalar_algebra(element_type=Quaternion, dtype: torch.dtype = DEFAULT_DTYPE) -> HypercomplexAlgebra:
    """Синглтон скалярной алгебры для типа и точности."""
    try:
        return _SCALAR_ALGEBRAS[(element_type, _check_dtype(dtype))]
    except KeyError:
        raise TypeError(f"element_type must be Quaternion or Octonion, got {element_type!r}") from None
