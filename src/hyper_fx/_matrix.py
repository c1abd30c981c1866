"""hyper_fx._matrix
==================
Алгебра матриц гиперкомплексных чисел.

Умножение, определитель и обращение берутся из _algorithms;
трансцендентные функции считаются рядами Тейлора, число членов
берётся из настроек в момент вызова.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import torch

from . import _algorithms
from ._algebra import (
    EULER_GAMMA,
    GOLDEN_RATIO,
    OCTONION_FLOAT32,
    OCTONION_FLOAT64,
    QUATERNION_FLOAT32,
    QUATERNION_FLOAT64,
    HypercomplexAlgebra,
)
from ._base import AggregateAlgebra
from ._config import settings
from ._members import Hypercomplex, MatrixMember
from ._rmodule import (
    OCTONION_RMODULE_FLOAT32,
    OCTONION_RMODULE_FLOAT64,
    QUATERNION_RMODULE_FLOAT32,
    QUATERNION_RMODULE_FLOAT64,
    RModuleAlgebra,
)
from ._storage import allocate, wants_file_storage

__all__ = [
    "MatrixAlgebra",
    "QUATERNION_MATRIX_FLOAT32",
    "QUATERNION_MATRIX_FLOAT64",
    "OCTONION_MATRIX_FLOAT32",
    "OCTONION_MATRIX_FLOAT64",
]


class MatrixAlgebra(AggregateAlgebra):
    """Матрицы над скалярной алгеброй; обращение идёт через векторную."""

    MEMBER_TYPE = MatrixMember
    KIND = "matrix"

    def __init__(self, scalar: HypercomplexAlgebra, rmodule: RModuleAlgebra):
        self.scalar = scalar
        self.rmodule = rmodule
        super().__init__(scalar.element_type, scalar.dtype)

    def _check_square(self, a: MatrixMember, what: str) -> None:
        if not a.is_square():
            raise ValueError(f"{what} needs a square matrix, got {a.rows}x{a.cols}")

    # --- Конструирование ---
    def construct(self, rows: int = 0, cols: int = 0, file_backed: Optional[bool] = None) -> MatrixMember:
        if rows < 0 or cols < 0:
            raise ValueError(f"negative matrix dimensions {rows}x{cols}")
        full = (rows, cols, self.n)
        resolved = wants_file_storage(full, file_backed)
        return MatrixMember(allocate(full, self.dtype, file_backed=resolved), file_backed=resolved)

    def construct_from_string(self, text: str) -> MatrixMember:
        return MatrixMember.from_string(text, self.element_type, self.dtype)

    def _diagonal(self, value: float, out: MatrixMember) -> MatrixMember:
        self._check(out)
        comps = torch.zeros_like(out.components)
        for idx in range(min(out.rows, out.cols)):
            comps[idx, idx, 0] = value
        return self._store(comps, out)

    def unity(self, out: MatrixMember) -> MatrixMember:
        """Единицы на главной диагонали (для прямоугольной - ведущей)."""
        return self._diagonal(1.0, out)

    def is_unity(self, a: MatrixMember) -> bool:
        self._check(a)
        return self.equal(a, self._diagonal(1.0, self.construct_like(a)))

    # --- Константы на диагонали ---
    def pi(self, out: MatrixMember) -> MatrixMember:
        return self._diagonal(math.pi, out)

    def e(self, out: MatrixMember) -> MatrixMember:
        return self._diagonal(math.e, out)

    def gamma(self, out: MatrixMember) -> MatrixMember:
        return self._diagonal(EULER_GAMMA, out)

    def phi(self, out: MatrixMember) -> MatrixMember:
        return self._diagonal(GOLDEN_RATIO, out)

    # --- Кольцо ---
    def multiply(self, a, b, out=None):
        self._check(a, b)
        return _algorithms.matrix_multiply(self, a, b, out)

    def power(self, power: int, a, out=None):
        self._check(a)
        self._check_square(a, "power")
        return _algorithms.power_any(self, power, a, out)

    def invert(self, a, out=None):
        self._check(a)
        return _algorithms.matrix_invert(self, self.rmodule, a, out)

    def divide(self, a, b, out=None):
        """a * invert(b)."""
        self._check(a, b)
        return self._store(self.multiply(a, self.invert(b)).components, out)

    def det(self, a, out: Optional[Hypercomplex] = None) -> Hypercomplex:
        self._check(a)
        return _algorithms.matrix_determinant(self, a, out)

    # --- Транспонирование ---
    def transpose(self, a, out=None):
        self._check(a)
        return self._store(a.components.transpose(0, 1).clone(), out)

    def conjugate_transpose(self, a, out=None):
        self._check(a)
        return self.conjugate(self.transpose(a), out)

    def direct_product(self, a, b, out=None):
        """Произведение Кронекера: блок (i, j) равен a[i, j] * b."""
        self._check(a, b)
        x = a.components[:, None, :, None, :]
        y = b.components[None, :, None, :, :]
        comps = self.scalar.product(x, y).reshape(a.rows * b.rows, a.cols * b.cols, self.n)
        return self._store(comps, out)

    # -----------------------------------------------------------------
    # Трансцендентные функции (ряды Тейлора)
    # -----------------------------------------------------------------
    def exp(self, a, out=None):
        self._check(a)
        self._check_square(a, "exp")
        return _algorithms.taylor_estimate_exp(self, settings["taylor_exp_terms"], a, out)

    def log(self, a, out=None):
        """Ряд по (a - I); сходится, когда a близка к единичной."""
        self._check(a)
        self._check_square(a, "log")
        return _algorithms.taylor_estimate_log(self, settings["taylor_log_terms"], a, out)

    def sin(self, a, out=None):
        self._check(a)
        self._check_square(a, "sin")
        return _algorithms.taylor_estimate_sin(self, settings["taylor_trig_terms"], a, out)

    def cos(self, a, out=None):
        self._check(a)
        self._check_square(a, "cos")
        return _algorithms.taylor_estimate_cos(self, settings["taylor_trig_terms"], a, out)

    def sin_and_cos(self, a, sin_out=None, cos_out=None) -> Tuple[MatrixMember, MatrixMember]:
        s = self.sin(a)
        c = self.cos(a)
        return self.assign(s, sin_out), self.assign(c, cos_out)

    def tan(self, a, out=None):
        s, c = self.sin_and_cos(a)
        return self.divide(s, c, out)

    def sinh(self, a, out=None):
        self._check(a)
        self._check_square(a, "sinh")
        return _algorithms.taylor_estimate_sinh(self, settings["taylor_trig_terms"], a, out)

    def cosh(self, a, out=None):
        self._check(a)
        self._check_square(a, "cosh")
        return _algorithms.taylor_estimate_cosh(self, settings["taylor_trig_terms"], a, out)

    def sinh_and_cosh(self, a, sinh_out=None, cosh_out=None) -> Tuple[MatrixMember, MatrixMember]:
        s = self.sinh(a)
        c = self.cosh(a)
        return self.assign(s, sinh_out), self.assign(c, cosh_out)

    def tanh(self, a, out=None):
        s, c = self.sinh_and_cosh(a)
        return self.divide(s, c, out)

    def sinc(self, a, out=None):
        return _algorithms.sinc(self, a, out)

    def sinch(self, a, out=None):
        return _algorithms.sinch(self, a, out)

    def sincpi(self, a, out=None):
        return _algorithms.sincpi(self, a, out)

    def sinchpi(self, a, out=None):
        return _algorithms.sinchpi(self, a, out)


QUATERNION_MATRIX_FLOAT32 = MatrixAlgebra(QUATERNION_FLOAT32, QUATERNION_RMODULE_FLOAT32)
QUATERNION_MATRIX_FLOAT64 = MatrixAlgebra(QUATERNION_FLOAT64, QUATERNION_RMODULE_FLOAT64)
OCTONION_MATRIX_FLOAT32 = MatrixAlgebra(OCTONION_FLOAT32, OCTONION_RMODULE_FLOAT32)
OCTONION_MATRIX_FLOAT64 = MatrixAlgebra(OCTONION_FLOAT64, OCTONION_RMODULE_FLOAT64)
