from __future__ import annotations

"""hyper_fx._core
=================
Покомпонентные ядра гиперкомплексной арифметики.

Все функции принимают тензоры формы `[..., n]` (n = 4 для кватернионов,
n = 8 для октонионов), работают с broadcasting по ведущим измерениям
и возвращают новый тензор. Здесь нет знания о членах и алгебрах: это
чистые численные примитивы, которыми пользуются и скалярная алгебра,
и агрегатные (векторы, матрицы, тензоры).

* multiply: произведение по таблице умножения (Гамильтон / Кэли-Диксон)
* conjugate, norm, norm2, invert
* exp, log, sin, cos: обобщения комплексных тождеств на «мнимую» часть
"""

from typing import Dict, List, Sequence, Tuple

import torch

__all__ = [
    "QUATERNION_TABLE",
    "OCTONION_TABLE",
    "multiply",
    "conjugate",
    "norm",
    "norm2",
    "invert",
    "divide",
    "unreal",
    "sinc_real",
    "sinhc_real",
    "exp",
    "log",
    "sin",
    "cos",
    "is_nan",
    "is_infinite",
    "is_zero",
]


# -----------------------------------------------------------------------------
# Таблицы умножения
# -----------------------------------------------------------------------------

# Порядок базиса: r, i, j, k, l, i0, j0, k0.
# Строка - компонента левого множителя, столбец - правого.
# Элемент (знак, индекс): e_row * e_col = знак * e_индекс.
OCTONION_TABLE: Tuple[Tuple[Tuple[int, int], ...], ...] = (
    ((+1, 0), (+1, 1), (+1, 2), (+1, 3), (+1, 4), (+1, 5), (+1, 6), (+1, 7)),
    ((+1, 1), (-1, 0), (+1, 3), (-1, 2), (+1, 5), (-1, 4), (-1, 7), (+1, 6)),
    ((+1, 2), (-1, 3), (-1, 0), (+1, 1), (+1, 6), (+1, 7), (-1, 4), (-1, 5)),
    ((+1, 3), (+1, 2), (-1, 1), (-1, 0), (+1, 7), (-1, 6), (+1, 5), (-1, 4)),
    ((+1, 4), (-1, 5), (-1, 6), (-1, 7), (-1, 0), (+1, 1), (+1, 2), (+1, 3)),
    ((+1, 5), (+1, 4), (-1, 7), (+1, 6), (-1, 1), (-1, 0), (-1, 3), (+1, 2)),
    ((+1, 6), (+1, 7), (+1, 4), (-1, 5), (-1, 2), (+1, 3), (-1, 0), (-1, 1)),
    ((+1, 7), (-1, 6), (+1, 5), (+1, 4), (-1, 3), (-1, 2), (+1, 1), (-1, 0)),
)

# Кватернионы Гамильтона - левый верхний блок 4x4 таблицы октонионов
QUATERNION_TABLE = tuple(row[:4] for row in OCTONION_TABLE[:4])

# Кэш тензоров перестановок и знаков: (id таблицы, dtype, device) -> (perm, signs)
_CACHED_TABLES: Dict[Tuple[int, torch.dtype, torch.device], Tuple[torch.Tensor, torch.Tensor]] = {}


def _gather_form(table: Sequence[Sequence[Tuple[int, int]]]) -> Tuple[List[List[int]], List[List[int]]]:
    """Переводит таблицу в форму для gather.

    Для каждой пары (p, m) существует ровно один q, для которого
    e_p * e_q даёт ±e_m. Возвращает perm[p][m] = q и signs[p][m].
    """
    n = len(table)
    perm = [[0] * n for _ in range(n)]
    signs = [[0] * n for _ in range(n)]
    for p in range(n):
        for q in range(n):
            sign, m = table[p][q]
            perm[p][m] = q
            signs[p][m] = sign
    return perm, signs


def _tables_for(table, dtype: torch.dtype, device: torch.device) -> Tuple[torch.Tensor, torch.Tensor]:
    key = (id(table), dtype, device)
    cached = _CACHED_TABLES.get(key)
    if cached is None:
        perm, signs = _gather_form(table)
        cached = (
            torch.tensor(perm, dtype=torch.long, device=device),
            torch.tensor(signs, dtype=dtype, device=device),
        )
        _CACHED_TABLES[key] = cached
    return cached


def multiply(a: torch.Tensor, b: torch.Tensor, table) -> torch.Tensor:
    """Произведение a * b по таблице умножения (порядок важен).

    c[..., m] = sum_p a[..., p] * signs[p, m] * b[..., perm[p, m]]
    """
    perm, signs = _tables_for(table, a.dtype, a.device)
    # b[..., perm]: [..., n, n], строки по p, столбцы по m
    terms = a.unsqueeze(-1) * b[..., perm] * signs
    return terms.sum(dim=-2)


# -----------------------------------------------------------------------------
# Сопряжение, норма, обращение
# -----------------------------------------------------------------------------

def conjugate(x: torch.Tensor) -> torch.Tensor:
    """Сопряжение: знак меняется у всех компонент, кроме вещественной."""
    result = -x
    result[..., 0] = x[..., 0]
    return result


def unreal(x: torch.Tensor) -> torch.Tensor:
    """Копия с обнулённой вещественной частью."""
    result = x.clone()
    result[..., 0] = 0
    return result


def norm(x: torch.Tensor) -> torch.Tensor:
    """Евклидова норма, устойчивая к переполнению.

    Компоненты делятся на максимальный модуль перед суммированием
    квадратов, поэтому norm(1e300, 1e300, 0, 0) остаётся конечной.
    Если максимум равен 0, норма равна 0.
    """
    max_abs = x.abs().amax(dim=-1)
    # защита от 0/0: там, где максимум 0, делим на 1 и затем обнуляем
    safe = torch.where(max_abs == 0, torch.ones_like(max_abs), max_abs)
    scaled = x / safe.unsqueeze(-1)
    result = safe * torch.sqrt((scaled * scaled).sum(dim=-1))
    return torch.where(max_abs == 0, torch.zeros_like(result), result)


def norm2(x: torch.Tensor) -> torch.Tensor:
    n = norm(x)
    return n * n


def invert(x: torch.Tensor) -> torch.Tensor:
    """conjugate(x) / norm(x)^2 - семантика IEEE, без исключений на нуле."""
    return conjugate(x) / norm2(x).unsqueeze(-1)


def divide(a: torch.Tensor, b: torch.Tensor, table) -> torch.Tensor:
    """a * invert(b)."""
    return multiply(a, invert(b), table)


# -----------------------------------------------------------------------------
# Вещественные вспомогательные функции
# -----------------------------------------------------------------------------

def sinc_real(z: torch.Tensor) -> torch.Tensor:
    """sin(z) / z, 1 в нуле (ненормированная, в отличие от torch.sinc)."""
    safe = torch.where(z == 0, torch.ones_like(z), z)
    return torch.where(z == 0, torch.ones_like(z), torch.sin(safe) / safe)


def sinhc_real(z: torch.Tensor) -> torch.Tensor:
    """sinh(z) / z, 1 в нуле."""
    safe = torch.where(z == 0, torch.ones_like(z), z)
    return torch.where(z == 0, torch.ones_like(z), torch.sinh(safe) / safe)


def _combine(real: torch.Tensor, factor: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
    """Собирает результат: вещественная часть `real`, мнимые = factor * x_c."""
    result = x * factor.unsqueeze(-1)
    result[..., 0] = real
    return result


# -----------------------------------------------------------------------------
# Трансцендентные функции
# -----------------------------------------------------------------------------

def exp(x: torch.Tensor) -> torch.Tensor:
    """exp(r + u) = e^r (cos|u| + sinc|u| * u)."""
    z = norm(unreal(x))
    u = torch.exp(x[..., 0])
    return _combine(u * torch.cos(z), u * sinc_real(z), x)


def log(x: torch.Tensor) -> torch.Tensor:
    """Главная ветвь логарифма через комплексный log(r + i|u|).

    Когда множитель для мнимой части получается NaN или бесконечным,
    нулевые мнимые компоненты заменяются на sign(factor) * компонента
    (если хотя бы одна из i, j, k ненулевая).
    """
    r = x[..., 0]
    z = norm(unreal(x))
    log_real = torch.log(torch.hypot(r, z))
    angle = torch.atan2(z, r)
    factor = torch.where(z == 0, angle, angle / torch.where(z == 0, torch.ones_like(z), z))

    result = x * factor.unsqueeze(-1)
    special = ~torch.isfinite(factor)
    if special.any():
        ijk_zero = (x[..., 1:4] == 0).all(dim=-1)
        use_sign = (special & ~ijk_zero).unsqueeze(-1)
        signed = x * torch.sign(factor).unsqueeze(-1)
        result = torch.where(use_sign & (x == 0), signed, result)
    result[..., 0] = log_real
    return result


def sin(x: torch.Tensor) -> torch.Tensor:
    """sin(r)cosh|u| + cos(r) sinhc|u| * u."""
    r = x[..., 0]
    z = norm(unreal(x))
    return _combine(torch.sin(r) * torch.cosh(z), torch.cos(r) * sinhc_real(z), x)


def cos(x: torch.Tensor) -> torch.Tensor:
    """cos(r)cosh|u| - sin(r) sinhc|u| * u."""
    r = x[..., 0]
    z = norm(unreal(x))
    return _combine(torch.cos(r) * torch.cosh(z), -torch.sin(r) * sinhc_real(z), x)


# -----------------------------------------------------------------------------
# Предикаты
# -----------------------------------------------------------------------------

def is_nan(x: torch.Tensor) -> torch.Tensor:
    """True, если хоть одна компонента NaN (по элементам)."""
    return torch.isnan(x).any(dim=-1)


def is_infinite(x: torch.Tensor) -> torch.Tensor:
    """True, если нет NaN и хоть одна компонента бесконечна."""
    return ~is_nan(x) & torch.isinf(x).any(dim=-1)


def is_zero(x: torch.Tensor) -> torch.Tensor:
    """Точное сравнение всех компонент с нулём, без допуска."""
    return (x == 0).all(dim=-1)
