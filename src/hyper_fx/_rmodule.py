"""hyper_fx._rmodule
===================
Алгебра векторов (RModule) над скалярной алгеброй той же точности.
Поэлементные операции выполняются ядрами скалярной алгебры сразу над
всем тензором [length, n].
"""

from __future__ import annotations

from typing import Optional

import torch

from ._algebra import (
    OCTONION_FLOAT32,
    OCTONION_FLOAT64,
    QUATERNION_FLOAT32,
    QUATERNION_FLOAT64,
    HypercomplexAlgebra,
)
from ._base import AggregateAlgebra
from ._members import Hypercomplex, MatrixMember, RModuleMember, TensorMember
from ._storage import allocate, wants_file_storage

__all__ = [
    "RModuleAlgebra",
    "QUATERNION_RMODULE_FLOAT32",
    "QUATERNION_RMODULE_FLOAT64",
    "OCTONION_RMODULE_FLOAT32",
    "OCTONION_RMODULE_FLOAT64",
]


class RModuleAlgebra(AggregateAlgebra):
    """Векторы гиперкомплексных чисел."""

    MEMBER_TYPE = RModuleMember
    KIND = "rmodule"

    def __init__(self, scalar: HypercomplexAlgebra):
        self.scalar = scalar
        super().__init__(scalar.element_type, scalar.dtype)

    # --- Конструирование ---
    def construct(self, length: int = 0, file_backed: Optional[bool] = None) -> RModuleMember:
        if length < 0:
            raise ValueError(f"negative vector length {length}")
        full = (length, self.n)
        resolved = wants_file_storage(full, file_backed)
        return RModuleMember(allocate(full, self.dtype, file_backed=resolved), file_backed=resolved)

    def construct_from_string(self, text: str) -> RModuleMember:
        return RModuleMember.from_string(text, self.element_type, self.dtype)

    def construct_from_values(self, values) -> RModuleMember:
        """Вектор из последовательности скаляров этой алгебры."""
        result = self.construct(len(values))
        for idx, value in enumerate(values):
            result.set_v(idx, value)
        return result

    # --- Произведения векторов ---
    def dot_product(self, a, b, out=None) -> Hypercomplex:
        """sum_i conj(a_i) * b_i; для a == b результат равен norm(a)^2."""
        self._check(a, b)
        self._check_same_shape(a, b, "dot product")
        conj_a = a.components.clone()
        conj_a[..., 1:] = -conj_a[..., 1:]
        total = self.scalar.product(conj_a, b.components).sum(dim=0)
        return self.scalar._store(total, out)

    def cross_product(self, a, b, out=None):
        """Векторное произведение для векторов длины 3 (порядок множителей сохраняется)."""
        self._check(a, b)
        if a.length != 3 or b.length != 3:
            raise ValueError(f"cross product requires vectors of length 3, got {a.length} and {b.length}")
        P = self.scalar.product
        x, y = a.components, b.components
        comps = torch.stack([
            P(x[1], y[2]) - P(x[2], y[1]),
            P(x[2], y[0]) - P(x[0], y[2]),
            P(x[0], y[1]) - P(x[1], y[0]),
        ])
        return self._store(comps, out)

    def perp_dot_product(self, a, b, out=None) -> Hypercomplex:
        """a0 * b1 - a1 * b0 для векторов длины 2."""
        self._check(a, b)
        if a.length != 2 or b.length != 2:
            raise ValueError(f"perp dot product requires vectors of length 2, got {a.length} and {b.length}")
        P = self.scalar.product
        x, y = a.components, b.components
        return self.scalar._store(P(x[0], y[1]) - P(x[1], y[0]), out)

    def vector_triple_product(self, a, b, c, out=None):
        """a x (b x c)."""
        return self.cross_product(a, self.cross_product(b, c), out)

    def scalar_triple_product(self, a, b, c, out=None) -> Hypercomplex:
        """a . (b x c)."""
        return self.dot_product(a, self.cross_product(b, c), out)

    def direct_product(self, a, b, out: Optional[MatrixMember] = None) -> MatrixMember:
        """Матрица m[i][j] = a_i * b_j."""
        self._check(a, b)
        comps = self.scalar.product(a.components.unsqueeze(1), b.components.unsqueeze(0))
        if out is None:
            return MatrixMember(comps)
        out._replace_components(comps)
        return out

    def vector_direct_product(self, a, b, out: Optional[TensorMember] = None) -> TensorMember:
        """То же, что direct_product, но результат - тензор ранга 2."""
        self._check(a, b)
        self._check_same_shape(a, b, "direct product")
        comps = self.scalar.product(a.components.unsqueeze(1), b.components.unsqueeze(0))
        if out is None:
            return TensorMember(comps)
        out._replace_components(comps)
        return out


QUATERNION_RMODULE_FLOAT32 = RModuleAlgebra(QUATERNION_FLOAT32)
QUATERNION_RMODULE_FLOAT64 = RModuleAlgebra(QUATERNION_FLOAT64)
OCTONION_RMODULE_FLOAT32 = RModuleAlgebra(OCTONION_FLOAT32)
OCTONION_RMODULE_FLOAT64 = RModuleAlgebra(OCTONION_FLOAT64)
