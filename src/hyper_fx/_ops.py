from __future__ import annotations

"""hyper_fx._ops
================
Реализации функций torch для членов, перехватываемых через
__torch_function__.

Каждая функция определяет алгебру по типу аргументов и вызывает её
операцию. Вещественные числа Python приводятся к скаляру того же
типа и точности, что и член.
"""

import numbers
from typing import Tuple, Union

import torch

from ._members import (
    Hypercomplex,
    MatrixMember,
    Member,
    RModuleMember,
    implements,
)

__all__ = [
    "member_add",
    "member_sub",
    "member_mul",
    "member_div",
    "member_neg",
    "member_matmul",
    "member_pow",
]

Operand = Union[Member, numbers.Real, torch.Tensor]


# -----------------------------------------------------------------------------
# Вспомогательные утилиты
# -----------------------------------------------------------------------------

def _as_scalar(value: Operand, like: Member) -> Member:
    """Приводит число или 0-мерный тензор к скаляру типа `like`."""
    if isinstance(value, Member):
        return value
    if isinstance(value, torch.Tensor):
        if value.ndim != 0:
            raise TypeError("only 0-dim tensors can be mixed with hyper_fx members")
        value = value.item()
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"unsupported operand type {type(value).__name__}")
    return like.element_type(float(value), dtype=like.dtype)


def _unify_args(x: Operand, y: Operand) -> Tuple[Member, Member]:
    is_x_member = isinstance(x, Member)
    is_y_member = isinstance(y, Member)
    if not is_x_member and not is_y_member:
        raise TypeError("At least one argument must be a hyper_fx member.")
    if not is_x_member:
        x = _as_scalar(x, y)
    if not is_y_member:
        y = _as_scalar(y, x)
    return x, y


def _right_scale(a: Member, factor: Hypercomplex) -> Member:
    """a_i * factor (множитель справа)."""
    alg = a.algebra
    alg.scalar._check(factor)
    return alg._store(alg.scalar.product(a.components, factor.components))


def _unary(name: str):
    def impl(x: Member) -> Member:
        alg = x.algebra
        method = getattr(alg, name, None)
        if method is None:
            raise NotImplementedError(f"{type(x).__name__}: {name} is not supported")
        return method(x)
    impl.__name__ = f"member_{name}"
    impl.__doc__ = f"Реализация `torch.{name}` через алгебру члена."
    return impl


# -----------------------------------------------------------------------------
# Арифметика
# -----------------------------------------------------------------------------

@implements(torch.neg)
def member_neg(x: Member) -> Member:
    return x.algebra.negate(x)


@implements(torch.add)
def member_add(x: Operand, y: Operand) -> Member:
    """Сумма; скаляр прибавляется к каждому элементу агрегата."""
    x, y = _unify_args(x, y)
    if isinstance(x, Hypercomplex) and not isinstance(y, Hypercomplex):
        return y.algebra.add_scalar(x, y)
    if isinstance(y, Hypercomplex) and not isinstance(x, Hypercomplex):
        return x.algebra.add_scalar(y, x)
    return x.algebra.add(x, y)


@implements(torch.sub)
def member_sub(x: Operand, y: Operand) -> Member:
    x, y = _unify_args(x, y)
    if isinstance(x, Hypercomplex) and not isinstance(y, Hypercomplex):
        # s - a_i = -(a_i - s)
        alg = y.algebra
        return alg.negate(alg.subtract_scalar(x, y))
    if isinstance(y, Hypercomplex) and not isinstance(x, Hypercomplex):
        return x.algebra.subtract_scalar(y, x)
    return x.algebra.subtract(x, y)


@implements(torch.mul)
def member_mul(x: Operand, y: Operand) -> Member:
    """Произведение с сохранением порядка множителей.

    Скаляр * скаляр - умножение в алгебре; скаляр * агрегат - scale;
    агрегат * агрегат - поэлементное произведение.
    """
    x, y = _unify_args(x, y)
    if isinstance(x, Hypercomplex):
        if isinstance(y, Hypercomplex):
            return x.algebra.multiply(x, y)
        return y.algebra.scale(x, y)
    if isinstance(y, Hypercomplex):
        return _right_scale(x, y)
    return x.algebra.multiply_elements(x, y)


@implements(torch.div)
def member_div(x: Operand, y: Operand) -> Member:
    x, y = _unify_args(x, y)
    if isinstance(y, Hypercomplex):
        if isinstance(x, Hypercomplex):
            return x.algebra.divide(x, y)
        return x.algebra.divide_by_scalar(y, x)
    if isinstance(x, Hypercomplex):
        raise TypeError(f"cannot divide a scalar by {type(y).__name__}")
    return x.algebra.divide_elements(x, y)


@implements(torch.true_divide)
def member_true_divide(x: Operand, y: Operand) -> Member:
    return member_div(x, y)


@implements(torch.matmul)
def member_matmul(a: Member, b: Member) -> Member:
    """Матричное произведение; вектор слева - строка, справа - столбец."""
    if isinstance(a, MatrixMember) and isinstance(b, MatrixMember):
        return a.algebra.multiply(a, b)
    if isinstance(a, MatrixMember) and isinstance(b, RModuleMember):
        column = MatrixMember(b.components.unsqueeze(1))
        result = a.algebra.multiply(a, column)
        return RModuleMember(result.components.squeeze(1))
    if isinstance(a, RModuleMember) and isinstance(b, MatrixMember):
        row = MatrixMember(a.components.unsqueeze(0))
        result = b.algebra.multiply(row, b)
        return RModuleMember(result.components.squeeze(0))
    if isinstance(a, RModuleMember) and isinstance(b, RModuleMember):
        return a.algebra.dot_product(a, b)
    raise TypeError(f"matmul is not defined for {type(a).__name__} @ {type(b).__name__}")


@implements(torch.pow)
def member_pow(base: Member, exponent: Operand) -> Member:
    """Целая степень через power; иначе для скаляров exp(e * log(base))."""
    if isinstance(exponent, numbers.Integral) and not isinstance(exponent, bool):
        power = getattr(base.algebra, "power", None)
        if power is None:
            raise NotImplementedError(f"{type(base).__name__}: power is not supported")
        return power(int(exponent), base)
    if not isinstance(base, Hypercomplex):
        raise NotImplementedError(f"{type(base).__name__}: only integer powers are supported")
    return base.algebra.pow(base, _as_scalar(exponent, base))


@implements(torch.equal)
def member_equal(x: Member, y: Member) -> bool:
    if type(x) is not type(y) or x.n_components != y.n_components or x.dtype != y.dtype:
        return False
    return x.algebra.equal(x, y)


# -----------------------------------------------------------------------------
# Трансцендентные функции
# -----------------------------------------------------------------------------

for _name in ("exp", "log", "sin", "cos", "tan", "sinh", "cosh", "tanh", "sqrt"):
    implements(getattr(torch, _name))(_unary(_name))

del _name
