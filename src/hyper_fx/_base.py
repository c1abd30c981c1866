"""hyper_fx._base
================
Общая часть всех алгебр: операции, которые для скаляра, вектора,
матрицы и тензора выполняются одинаково, покомпонентно.

Соглашение о вызовах: входы идут первыми, результат пишется в
необязательный `out=` и возвращается. Результат всегда вычисляется
целиком до записи, поэтому `out` может совпадать с любым входом
(кроме операций, где это явно запрещено, например матричного умножения).
"""

from __future__ import annotations

from typing import Optional

import torch
from mpmath import mp

from . import _core
from ._config import settings
from ._members import Member, register_algebra
from ._round import RoundMode, round_components
from ._storage import allocate, wants_file_storage

__all__ = ["AlgebraBase", "AggregateAlgebra"]


class AlgebraBase:
    """Покомпонентные операции, общие для всех видов членов.

    Наследник задаёт MEMBER_TYPE и KIND (имя для сообщений об ошибках).
    """

    MEMBER_TYPE: type = Member
    KIND = "member"

    def __init__(self, element_type, dtype: torch.dtype):
        self.element_type = element_type
        self.dtype = dtype
        self.n = element_type.N_COMPONENTS
        self.table = _core.OCTONION_TABLE if self.n == 8 else _core.QUATERNION_TABLE
        register_algebra(self.MEMBER_TYPE, self.n, dtype, self)

    def __repr__(self) -> str:
        precision = "Float32" if self.dtype == torch.float32 else "Float64"
        return f"<{self.element_type.__name__}{precision} {type(self).__name__}>"

    # -----------------------------------------------------------------
    # Вспомогательные
    # -----------------------------------------------------------------
    def _check(self, *members) -> None:
        for m in members:
            if not isinstance(m, self.MEMBER_TYPE):
                raise TypeError(
                    f"{type(self).__name__} expects {self.MEMBER_TYPE.__name__}, got {type(m).__name__}"
                )
            if m.n_components != self.n or m.dtype != self.dtype:
                raise TypeError(
                    f"{self!r} cannot operate on {type(m).__name__} with "
                    f"{m.n_components} components of {m.dtype}"
                )

    def _check_same_shape(self, a, b, what: str = "add") -> None:
        if a.shape != b.shape:
            raise ValueError(f"{self.KIND} {what} shape mismatch: {a.shape} vs {b.shape}")

    def _new(self, components: torch.Tensor):
        return self.MEMBER_TYPE.from_components(components)

    def _store(self, components: torch.Tensor, out=None):
        if out is None:
            return self._new(components)
        self._check(out)
        out._replace_components(components)
        return out

    def construct_like(self, a):
        """Нулевой член той же формы, что и `a`."""
        full = tuple(a.components.shape)
        resolved = wants_file_storage(full)
        return self.MEMBER_TYPE.from_components(allocate(full, self.dtype, file_backed=resolved), file_backed=resolved)

    # -----------------------------------------------------------------
    # Группа по сложению
    # -----------------------------------------------------------------
    def zero(self, out):
        """Обнуляет `out`, сохраняя форму."""
        self._check(out)
        out.components.zero_()
        return out

    def assign(self, a, out=None):
        self._check(a)
        if out is a:
            return a
        return self._store(a.components.clone(), out)

    def equal(self, a, b) -> bool:
        """Точное покомпонентное равенство (NaN не равен ничему)."""
        self._check(a, b)
        return a.shape == b.shape and torch.equal(a.components, b.components)

    def not_equal(self, a, b) -> bool:
        return not self.equal(a, b)

    def add(self, a, b, out=None):
        self._check(a, b)
        self._check_same_shape(a, b, "add")
        return self._store(a.components + b.components, out)

    def subtract(self, a, b, out=None):
        self._check(a, b)
        self._check_same_shape(a, b, "subtract")
        return self._store(a.components - b.components, out)

    def negate(self, a, out=None):
        """0 - a."""
        self._check(a)
        return self._store(torch.zeros_like(a.components) - a.components, out)

    def conjugate(self, a, out=None):
        """Покомпонентное сопряжение каждого элемента."""
        self._check(a)
        return self._store(_core.conjugate(a.components), out)

    # -----------------------------------------------------------------
    # Норма
    # -----------------------------------------------------------------
    def norm(self, a) -> float:
        """Евклидова норма по всем компонентам, устойчивая к переполнению."""
        self._check(a)
        return _core.norm(a.components.reshape(-1)).item()

    # -----------------------------------------------------------------
    # NaN / Inf / ноль
    # -----------------------------------------------------------------
    def is_nan(self, a) -> bool:
        self._check(a)
        return bool(_core.is_nan(a.components).any())

    def nan(self, out):
        self._check(out)
        out.components.fill_(float("nan"))
        return out

    def is_infinite(self, a) -> bool:
        self._check(a)
        return not self.is_nan(a) and bool(_core.is_infinite(a.components).any())

    def infinite(self, out):
        self._check(out)
        out.components.fill_(float("inf"))
        return out

    def is_zero(self, a) -> bool:
        """Точная проверка на ноль, без допуска."""
        self._check(a)
        return bool(_core.is_zero(a.components).all())

    # -----------------------------------------------------------------
    # Округление и допуск
    # -----------------------------------------------------------------
    def round(self, mode: RoundMode, delta: float, a, out=None):
        self._check(a)
        return self._store(round_components(a.components, mode, delta), out)

    def within(self, tol: float, a, b) -> bool:
        """|a - b| <= tol для каждой компоненты; разные формы - False."""
        self._check(a, b)
        if a.shape != b.shape:
            return False
        return bool(((a.components - b.components).abs() <= tol).all())

    # -----------------------------------------------------------------
    # Масштабирование
    # -----------------------------------------------------------------
    def scale_by_double(self, factor: float, a, out=None):
        self._check(a)
        return self._store(a.components * float(factor), out)

    def scale_by_high_prec(self, factor, a, out=None, mp_ctx=None):
        """Умножение в произвольной точности (mpmath), затем сужение."""
        self._check(a)
        ctx = mp_ctx if mp_ctx is not None else mp
        with ctx.workdps(settings["high_prec_dps"]):
            f = ctx.mpf(factor)
            scaled = [float(ctx.mpf(repr(c)) * f) for c in a.components.reshape(-1).tolist()]
        result = torch.tensor(scaled, dtype=self.dtype).reshape(a.components.shape)
        return self._store(result, out)

    def scale_by_rational(self, numerator: int, denominator: int, a, out=None):
        """a * numerator / denominator (деление на 0 - семантика IEEE)."""
        self._check(a)
        return self._store(a.components * float(numerator) / float(denominator), out)

    def scale_by_two(self, num_times: int, a, out=None):
        self._check(a)
        exponent = torch.full_like(a.components, float(int(num_times)))
        return self._store(torch.ldexp(a.components, exponent), out)

    def scale_by_one_half(self, num_times: int, a, out=None):
        return self.scale_by_two(-int(num_times), a, out)

    # -----------------------------------------------------------------
    # Случайные значения
    # -----------------------------------------------------------------
    def random(self, out, generator: Optional[torch.Generator] = None):
        """Каждая компонента равномерно распределена на [0, 1)."""
        self._check(out)
        values = torch.rand(out.components.shape, generator=generator, dtype=self.dtype)
        out.components.copy_(values)
        return out


class AggregateAlgebra(AlgebraBase):
    """Общее для векторов, матриц и тензоров: действие скаляра на элементы.

    Наследник задаёт `self.scalar` до вызова конструктора базы.
    """

    scalar = None

    def _check_scalar(self, value) -> None:
        self.scalar._check(value)

    def _check_elements(self, a, b, what: str) -> None:
        if a.shape != b.shape:
            raise ValueError(f"{self.KIND} {what}: mismatched shapes {a.shape} vs {b.shape}")

    def scale(self, factor, a, out=None):
        """factor * a_i для каждого элемента (умножение слева)."""
        self._check(a)
        self._check_scalar(factor)
        return self._store(self.scalar.product(factor.components, a.components), out)

    def multiply_by_scalar(self, factor, a, out=None):
        return self.scale(factor, a, out)

    def divide_by_scalar(self, factor, a, out=None):
        """a_i * invert(factor)."""
        self._check(a)
        self._check_scalar(factor)
        return self._store(self.scalar.quotient(a.components, factor.components), out)

    def add_scalar(self, value, a, out=None):
        """Прибавляет скаляр к каждому элементу."""
        self._check(a)
        self._check_scalar(value)
        return self._store(a.components + value.components, out)

    def subtract_scalar(self, value, a, out=None):
        """a_i - value для каждого элемента."""
        self._check(a)
        self._check_scalar(value)
        return self._store(a.components - value.components, out)

    def multiply_elements(self, a, b, out=None):
        self._check(a, b)
        self._check_elements(a, b, "multiply elements")
        return self._store(self.scalar.product(a.components, b.components), out)

    def divide_elements(self, a, b, out=None):
        self._check(a, b)
        self._check_elements(a, b, "divide elements")
        return self._store(self.scalar.quotient(a.components, b.components), out)
