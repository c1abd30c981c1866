"""hyper_fx._algorithms
======================
Обобщённые алгоритмы, написанные один раз и параметризованные
объектом алгебры.

Функции ничего не знают о конкретном типе члена: им передаётся
алгебра (скалярная, векторная, матричная или тензорная), и они
пользуются только её операциями. Поэтому, например, ряд Тейлора
для exp одинаково работает и для кватерниона, и для матрицы
октонионов.

* power_any: целая степень возведением в квадрат
* sinc / sinch / sincpi / sinchpi
* taylor_estimate_*: exp, log, sin, cos, sinh, cosh
* matrix_*: умножение, определитель, обращение (Гаусс-Жордан)
* tensor_*: свёртка, внешнее и внутреннее произведение, степень, единица
"""

from __future__ import annotations

import math

import torch

from . import _core
from ._log import get_logger
from ._members import RModuleMember

__all__ = [
    "power_any",
    "sinc",
    "sinch",
    "sincpi",
    "sinchpi",
    "taylor_estimate_exp",
    "taylor_estimate_log",
    "taylor_estimate_sin",
    "taylor_estimate_cos",
    "taylor_estimate_sinh",
    "taylor_estimate_cosh",
    "matrix_multiply",
    "matrix_determinant",
    "matrix_invert",
    "tensor_contract",
    "tensor_outer_product",
    "tensor_inner_product",
    "tensor_power",
    "tensor_unity",
]

log = get_logger(__name__)


def _unity_like(alg, a):
    one = alg.construct_like(a)
    alg.unity(one)
    return one


# -----------------------------------------------------------------------------
# Степени
# -----------------------------------------------------------------------------

def power_any(alg, power: int, a, out=None):
    """a ** power для любой алгебры с unity / multiply / invert.

    power < 0 - обращение, затем степень |power|; power == 0 - единица,
    кроме нулевого a (0 ** 0 не определено).
    """
    if isinstance(power, bool) or not isinstance(power, int):
        raise TypeError(f"power must be an int, got {type(power).__name__}")
    if power < 0:
        return power_any(alg, -power, alg.invert(a), out)
    if power == 0:
        if alg.is_zero(a):
            raise ArithmeticError("0^0 is undefined")
        return alg.assign(_unity_like(alg, a), out)

    # Стандартный алгоритм exponentiation by squaring
    result = None
    base = alg.assign(a)
    while power > 0:
        if power % 2 == 1:
            result = base if result is None else alg.multiply(result, base)
        power //= 2
        if power:
            base = alg.multiply(base, base)
    return alg.assign(result, out)


# -----------------------------------------------------------------------------
# sinc-семейство: f(x) / x с единицей в нуле
# -----------------------------------------------------------------------------

def _ratio_or_unity(alg, func, a, scale: float, out):
    if alg.is_zero(a):
        return alg.assign(_unity_like(alg, a), out)
    x = a if scale == 1.0 else alg.scale_by_double(scale, a)
    return alg.divide(func(x), x, out)


def sinc(alg, a, out=None):
    return _ratio_or_unity(alg, alg.sin, a, 1.0, out)


def sinch(alg, a, out=None):
    return _ratio_or_unity(alg, alg.sinh, a, 1.0, out)


def sincpi(alg, a, out=None):
    return _ratio_or_unity(alg, alg.sin, a, math.pi, out)


def sinchpi(alg, a, out=None):
    return _ratio_or_unity(alg, alg.sinh, a, math.pi, out)


# -----------------------------------------------------------------------------
# Ряды Тейлора
# -----------------------------------------------------------------------------

def _check_terms(terms: int) -> None:
    if isinstance(terms, bool) or not isinstance(terms, int) or terms < 1:
        raise ValueError(f"number of Taylor terms must be a positive int, got {terms!r}")


def taylor_estimate_exp(alg, terms: int, a, out=None):
    """sum_{k < terms} a^k / k!"""
    _check_terms(terms)
    log.debug("taylor exp: %d terms", terms)
    term = _unity_like(alg, a)
    total = alg.assign(term)
    for k in range(1, terms):
        term = alg.scale_by_rational(1, k, alg.multiply(term, a))
        total = alg.add(total, term)
    return alg.assign(total, out)


def taylor_estimate_log(alg, terms: int, a, out=None):
    """log(a) = sum_{k=1..terms} (-1)^(k+1) (a - 1)^k / k.

    Ряд сходится только вблизи единицы (норма a - 1 меньше 1).
    """
    _check_terms(terms)
    log.debug("taylor log: %d terms", terms)
    y = alg.subtract(a, _unity_like(alg, a))
    term = alg.assign(y)
    total = alg.assign(y)
    for k in range(2, terms + 1):
        term = alg.multiply(term, y)
        sign = 1 if k % 2 == 1 else -1
        total = alg.add(total, alg.scale_by_rational(sign, k, term))
    return alg.assign(total, out)


def _odd_series(alg, terms: int, a, sign: int, out):
    # a - a^3/3! + a^5/5! ... (sign = -1) или с плюсами (sign = +1)
    x2 = alg.multiply(a, a)
    term = alg.assign(a)
    total = alg.assign(a)
    for k in range(1, terms):
        term = alg.scale_by_rational(sign, (2 * k) * (2 * k + 1), alg.multiply(term, x2))
        total = alg.add(total, term)
    return alg.assign(total, out)


def _even_series(alg, terms: int, a, sign: int, out):
    x2 = alg.multiply(a, a)
    term = _unity_like(alg, a)
    total = alg.assign(term)
    for k in range(1, terms):
        term = alg.scale_by_rational(sign, (2 * k - 1) * (2 * k), alg.multiply(term, x2))
        total = alg.add(total, term)
    return alg.assign(total, out)


def taylor_estimate_sin(alg, terms: int, a, out=None):
    _check_terms(terms)
    log.debug("taylor sin: %d terms", terms)
    return _odd_series(alg, terms, a, -1, out)


def taylor_estimate_cos(alg, terms: int, a, out=None):
    _check_terms(terms)
    log.debug("taylor cos: %d terms", terms)
    return _even_series(alg, terms, a, -1, out)


def taylor_estimate_sinh(alg, terms: int, a, out=None):
    _check_terms(terms)
    log.debug("taylor sinh: %d terms", terms)
    return _odd_series(alg, terms, a, +1, out)


def taylor_estimate_cosh(alg, terms: int, a, out=None):
    _check_terms(terms)
    log.debug("taylor cosh: %d terms", terms)
    return _even_series(alg, terms, a, +1, out)


# -----------------------------------------------------------------------------
# Матрицы
# -----------------------------------------------------------------------------

def matrix_multiply(matrix_alg, a, b, out=None):
    """Классическое произведение матриц; out не может совпадать с a или b."""
    if a.cols != b.rows:
        raise ValueError(f"Matrix dimensions don't match for multiply: {a.shape} vs {b.shape}")
    if out is a or out is b:
        raise ValueError("matrix multiply: output must not be one of the inputs")
    # [R, K, 1, n] * [1, K, C, n] -> [R, K, C, n], сумма по K
    products = matrix_alg.scalar.product(a.components.unsqueeze(2), b.components.unsqueeze(0))
    return matrix_alg._store(products.sum(dim=1), out)


def _eliminate_determinant(product, invert, m: torch.Tensor) -> torch.Tensor:
    """Исключение Гаусса с выбором главного элемента по норме.

    Определитель - упорядоченное произведение ведущих элементов
    (слева направо) со знаком перестановки строк.
    """
    m = m.clone()
    n = m.shape[0]
    det = torch.zeros(m.shape[-1], dtype=m.dtype)
    det[0] = 1.0
    sign = 1.0
    for col in range(n):
        norms = _core.norm(m[col:, col])
        offset = int(torch.argmax(norms))
        if norms[offset] == 0:
            log.debug("determinant: zero pivot in column %d", col)
            return torch.zeros_like(det)
        p = col + offset
        if p != col:
            m[[col, p]] = m[[p, col]]
            sign = -sign
        pivot = m[col, col].clone()
        det = product(det, pivot)
        if col + 1 < n:
            factors = product(m[col + 1:, col], invert(pivot))
            m[col + 1:, col:] -= product(factors.unsqueeze(1), m[col, col:].unsqueeze(0))
    return det * sign


def matrix_determinant(matrix_alg, a, out=None):
    """Определитель квадратной матрицы как скаляр.

    Для n <= 3 - разложение по первой строке с произведениями строго
    в порядке строк; для больших n - исключение Гаусса. Для
    коммутирующих элементов оба способа дают обычный определитель.
    """
    scalar = matrix_alg.scalar
    if a.rows != a.cols:
        raise ValueError(f"determinant needs a square matrix, got {a.rows}x{a.cols}")
    n = a.rows
    m = a.components
    P = scalar.product
    if n == 0:
        det = torch.zeros(scalar.n, dtype=scalar.dtype)
        det[0] = 1.0
    elif n == 1:
        det = m[0, 0].clone()
    elif n == 2:
        det = P(m[0, 0], m[1, 1]) - P(m[0, 1], m[1, 0])
    elif n == 3:
        minor0 = P(m[1, 1], m[2, 2]) - P(m[1, 2], m[2, 1])
        minor1 = P(m[1, 0], m[2, 2]) - P(m[1, 2], m[2, 0])
        minor2 = P(m[1, 0], m[2, 1]) - P(m[1, 1], m[2, 0])
        det = P(m[0, 0], minor0) - P(m[0, 1], minor1) + P(m[0, 2], minor2)
    else:
        det = _eliminate_determinant(P, _core.invert, m)
    return scalar._store(det, out)


def matrix_invert(matrix_alg, rmodule_alg, a, out=None):
    """Обращение методом Гаусса-Жордана над строками-векторами.

    Строки обрабатываются операциями векторной алгебры: деление строки
    на ведущий элемент слева и вычитание кратных строк. Вырожденная
    матрица не вызывает исключения: результат содержит NaN / Inf.
    """
    scalar = matrix_alg.scalar
    if a.rows != a.cols:
        raise ValueError(f"invert needs a square matrix, got {a.rows}x{a.cols}")
    n = a.rows
    identity = torch.zeros(n, n, scalar.n, dtype=scalar.dtype)
    for idx in range(n):
        identity[idx, idx, 0] = 1.0

    work = [RModuleMember(a.components[r].clone()) for r in range(n)]
    result = [RModuleMember(identity[r].clone()) for r in range(n)]

    for col in range(n):
        norms = [scalar.norm(work[r].v(col)) for r in range(col, n)]
        best = max(range(len(norms)), key=lambda idx: norms[idx])
        if norms[best] == 0:
            log.debug("invert: singular matrix, zero pivot in column %d", col)
        p = col + best
        if p != col:
            work[col], work[p] = work[p], work[col]
            result[col], result[p] = result[p], result[col]

        inv = scalar.invert(work[col].v(col))
        work[col] = rmodule_alg.scale(inv, work[col])
        result[col] = rmodule_alg.scale(inv, result[col])

        for r in range(n):
            if r == col:
                continue
            factor = work[r].v(col)
            if scalar.is_zero(factor):
                continue
            work[r] = rmodule_alg.subtract(work[r], rmodule_alg.scale(factor, work[col]))
            result[r] = rmodule_alg.subtract(result[r], rmodule_alg.scale(factor, result[col]))

    if n == 0:
        return matrix_alg._store(identity, out)
    return matrix_alg._store(torch.stack([row.components for row in result]), out)


# -----------------------------------------------------------------------------
# Декартовы тензоры
# -----------------------------------------------------------------------------

def tensor_contract(tensor_alg, i: int, j: int, a, out=None):
    """Свёртка по паре индексов (i, j): ранг уменьшается на 2."""
    if out is a:
        raise ValueError("tensor contract: output must not be the input")
    rank = a.rank
    if rank < 2:
        raise ValueError(f"tensor contract needs rank >= 2, got rank {rank}")
    if i == j:
        raise ValueError("tensor contract: cannot contract an index with itself")
    if not (0 <= i < rank and 0 <= j < rank):
        raise ValueError(f"tensor contract: index out of bounds ({i}, {j}) for rank {rank}")
    # диагональ уходит в последнее измерение, компоненты остаются перед ним
    comps = torch.diagonal(a.components, dim1=i, dim2=j).sum(dim=-1)
    return tensor_alg._store(comps, out)


def tensor_outer_product(tensor_alg, a, b, out=None):
    """Внешнее произведение: ранги складываются, число элементов перемножается."""
    if a.rank and b.rank and a.dim_count != b.dim_count:
        raise ValueError(
            f"tensor outer product dimension mismatch: {a.dim_count} vs {b.dim_count}"
        )
    n = tensor_alg.n
    x = a.components.reshape(a.shape + (1,) * b.rank + (n,))
    y = b.components.reshape((1,) * a.rank + b.shape + (n,))
    return tensor_alg._store(tensor_alg.scalar.product(x, y), out)


def tensor_inner_product(tensor_alg, a_index: int, b_index: int, a, b, out=None):
    """Внешнее произведение со свёрткой по (a_index, a.rank + b_index)."""
    if a_index < 0 or b_index < 0:
        raise ValueError(f"inner product: negative index ({a_index}, {b_index})")
    if a_index >= a.rank or b_index >= b.rank:
        raise ValueError(
            f"inner product: index out of bounds ({a_index}, {b_index}) for ranks ({a.rank}, {b.rank})"
        )
    outer = tensor_outer_product(tensor_alg, a, b)
    return tensor_contract(tensor_alg, a_index, a.rank + b_index, outer, out)


def tensor_power(tensor_alg, power: int, a, out=None):
    """Поэлементная степень повторным multiply_elements; форма не меняется."""
    if isinstance(power, bool) or not isinstance(power, int):
        raise TypeError(f"power must be an int, got {type(power).__name__}")
    if power < 0:
        raise NotImplementedError("negative tensor powers are not supported")
    if power == 0:
        if tensor_alg.is_zero(a):
            raise ArithmeticError("0^0 is undefined")
        ones = torch.zeros_like(a.components)
        ones[..., 0] = 1.0
        return tensor_alg._store(ones, out)
    result = tensor_alg.assign(a)
    for _ in range(power - 1):
        result = tensor_alg.multiply_elements(result, a)
    return tensor_alg._store(result.components, out)


def tensor_unity(tensor_alg, out):
    """Единица там, где все индексы равны; остальное обнуляется."""
    comps = torch.zeros_like(out.components)
    if out.rank == 0:
        comps[0] = 1.0
    else:
        for idx in range(out.dim_count):
            comps[(idx,) * out.rank + (0,)] = 1.0
    return tensor_alg._store(comps, out)
