"""hyper_fx._protocols
=====================
Интерфейсы возможностей алгебр.

Алгебры не наследуют эти классы: соответствие проверяется
структурно (``isinstance(alg, Ring)`` работает благодаря
``runtime_checkable``). Обобщённые алгоритмы из _algorithms
требуют от алгебры только методы соответствующего интерфейса.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = [
    "Group",
    "Ring",
    "SkewField",
    "Norm",
    "Rounding",
    "Exponential",
    "Trigonometric",
    "Hyperbolic",
    "Scale",
    "ScaleByScalar",
    "Tolerance",
    "NaN",
    "Infinite",
    "RealConstants",
    "Random",
]


@runtime_checkable
class Group(Protocol):
    def zero(self, out): ...
    def assign(self, a, out=None): ...
    def equal(self, a, b) -> bool: ...
    def not_equal(self, a, b) -> bool: ...
    def add(self, a, b, out=None): ...
    def subtract(self, a, b, out=None): ...
    def negate(self, a, out=None): ...
    def is_zero(self, a) -> bool: ...


@runtime_checkable
class Ring(Group, Protocol):
    def unity(self, out): ...
    def multiply(self, a, b, out=None): ...
    def power(self, power: int, a, out=None): ...


@runtime_checkable
class SkewField(Ring, Protocol):
    def invert(self, a, out=None): ...
    def divide(self, a, b, out=None): ...


@runtime_checkable
class Norm(Protocol):
    def norm(self, a) -> float: ...


@runtime_checkable
class Rounding(Protocol):
    def round(self, mode, delta: float, a, out=None): ...


@runtime_checkable
class Exponential(Protocol):
    def exp(self, a, out=None): ...
    def log(self, a, out=None): ...


@runtime_checkable
class Trigonometric(Protocol):
    def sin(self, a, out=None): ...
    def cos(self, a, out=None): ...
    def tan(self, a, out=None): ...
    def sin_and_cos(self, a, sin_out=None, cos_out=None): ...


@runtime_checkable
class Hyperbolic(Protocol):
    def sinh(self, a, out=None): ...
    def cosh(self, a, out=None): ...
    def tanh(self, a, out=None): ...
    def sinh_and_cosh(self, a, sinh_out=None, cosh_out=None): ...


@runtime_checkable
class Scale(Protocol):
    def scale_by_double(self, factor: float, a, out=None): ...
    def scale_by_high_prec(self, factor, a, out=None, mp_ctx=None): ...
    def scale_by_rational(self, numerator: int, denominator: int, a, out=None): ...
    def scale_by_two(self, num_times: int, a, out=None): ...
    def scale_by_one_half(self, num_times: int, a, out=None): ...


@runtime_checkable
class ScaleByScalar(Protocol):
    """Действие скаляра на элементы агрегата."""

    def scale(self, factor, a, out=None): ...
    def add_scalar(self, value, a, out=None): ...
    def subtract_scalar(self, value, a, out=None): ...
    def multiply_by_scalar(self, factor, a, out=None): ...
    def divide_by_scalar(self, factor, a, out=None): ...


@runtime_checkable
class Tolerance(Protocol):
    def within(self, tol: float, a, b) -> bool: ...


@runtime_checkable
class NaN(Protocol):
    def is_nan(self, a) -> bool: ...
    def nan(self, out): ...


@runtime_checkable
class Infinite(Protocol):
    def is_infinite(self, a) -> bool: ...
    def infinite(self, out): ...


@runtime_checkable
class RealConstants(Protocol):
    def pi(self, out): ...
    def e(self, out): ...
    def gamma(self, out): ...
    def phi(self, out): ...


@runtime_checkable
class Random(Protocol):
    def random(self, out, generator=None): ...
