"""hyper_fx._tensor
==================
Декартовы тензоры гиперкомплексных чисел: все измерения равны,
компоненты хранятся в тензоре [d] * rank + [n].

Произведение тензоров (`multiply`) внешнее; поэлементные операции
требуют одинаковой формы. Индексы ковариантны и контравариантны
одновременно (декартов базис), поэтому raise_index / lower_index
только проверяют номер индекса и копируют данные.
"""

from __future__ import annotations

from typing import Optional

from . import _algorithms
from ._algebra import (
    OCTONION_FLOAT32,
    OCTONION_FLOAT64,
    QUATERNION_FLOAT32,
    QUATERNION_FLOAT64,
    HypercomplexAlgebra,
)
from ._base import AggregateAlgebra
from ._members import Hypercomplex, TensorMember
from ._storage import allocate, wants_file_storage

__all__ = [
    "TensorAlgebra",
    "QUATERNION_TENSOR_FLOAT32",
    "QUATERNION_TENSOR_FLOAT64",
    "OCTONION_TENSOR_FLOAT32",
    "OCTONION_TENSOR_FLOAT64",
]


class TensorAlgebra(AggregateAlgebra):
    MEMBER_TYPE = TensorMember
    KIND = "tensor"

    def __init__(self, scalar: HypercomplexAlgebra):
        self.scalar = scalar
        super().__init__(scalar.element_type, scalar.dtype)

    # --- Конструирование ---
    def construct(self, rank: int = 0, dim_count: int = 0, file_backed: Optional[bool] = None) -> TensorMember:
        if rank < 0 or dim_count < 0:
            raise ValueError(f"invalid tensor rank {rank} / dimension count {dim_count}")
        full = (dim_count,) * rank + (self.n,)
        resolved = wants_file_storage(full, file_backed)
        return TensorMember(allocate(full, self.dtype, file_backed=resolved), file_backed=resolved)

    def construct_from_string(self, text: str) -> TensorMember:
        return TensorMember.from_string(text, self.element_type, self.dtype)

    def unity(self, out: TensorMember) -> TensorMember:
        self._check(out)
        return _algorithms.tensor_unity(self, out)

    # --- Сложение: сообщение об ошибке общее для add и subtract ---
    def add(self, a, b, out=None):
        self._check(a, b)
        self._check_same_shape(a, b, "add")
        return self._store(a.components + b.components, out)

    def subtract(self, a, b, out=None):
        self._check(a, b)
        self._check_same_shape(a, b, "add")
        return self._store(a.components - b.components, out)

    def divide_by_scalar(self, factor: Hypercomplex, a, out=None):
        """scale(invert(factor), a)."""
        self._check(a)
        self._check_scalar(factor)
        return self.scale(self.scalar.invert(factor), a, out)

    # --- Тензорные произведения ---
    def multiply(self, a, b, out=None):
        """Произведение тензоров = внешнее произведение."""
        return self.outer_product(a, b, out)

    def outer_product(self, a, b, out=None):
        self._check(a, b)
        return _algorithms.tensor_outer_product(self, a, b, out)

    def contract(self, i: int, j: int, a, out=None):
        self._check(a)
        return _algorithms.tensor_contract(self, i, j, a, out)

    def inner_product(self, a_index: int, b_index: int, a, b, out=None):
        self._check(a, b)
        return _algorithms.tensor_inner_product(self, a_index, b_index, a, b, out)

    def power(self, power: int, a, out=None):
        self._check(a)
        return _algorithms.tensor_power(self, power, a, out)

    # --- Индексы ---
    def _check_tensor_index(self, index: int, a: TensorMember) -> None:
        if index < 0 or index >= a.rank:
            raise ValueError(f"index {index} out of bounds for tensor of rank {a.rank}")

    def raise_index(self, index: int, a, out=None):
        self._check(a)
        self._check_tensor_index(index, a)
        return self.assign(a, out)

    def lower_index(self, index: int, a, out=None):
        self._check(a)
        self._check_tensor_index(index, a)
        return self.assign(a, out)


QUATERNION_TENSOR_FLOAT32 = TensorAlgebra(QUATERNION_FLOAT32)
QUATERNION_TENSOR_FLOAT64 = TensorAlgebra(QUATERNION_FLOAT64)
OCTONION_TENSOR_FLOAT32 = TensorAlgebra(OCTONION_FLOAT32)
OCTONION_TENSOR_FLOAT64 = TensorAlgebra(OCTONION_FLOAT64)
