"""hyper_fx._members
===================
Члены (значения): скаляры Quaternion / Octonion и агрегаты
RModuleMember, MatrixMember, TensorMember.

Член - это обёртка вокруг torch.Tensor `components` формы [..., n],
а не его подкласс. Члены только хранят данные; вся арифметика живёт
в алгебрах. Операторы Python (`+`, `*`, `@`, ...) уходят в функции
torch, а те через __torch_function__ и реестр HANDLED_FUNCTIONS
попадают в реализации из _ops.py, которые вызывают алгебру члена.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple, Type

import torch

from ._storage import allocate, wants_file_storage
from ._text import TensorStringRepresentation, format_components

__all__ = [
    "HANDLED_FUNCTIONS",
    "implements",
    "SUPPORTED_DTYPES",
    "DEFAULT_DTYPE",
    "Member",
    "Hypercomplex",
    "Quaternion",
    "Octonion",
    "RModuleMember",
    "MatrixMember",
    "TensorMember",
    "register_algebra",
    "algebra_for",
]

SUPPORTED_DTYPES = (torch.float32, torch.float64)
DEFAULT_DTYPE = torch.float64

# Глобальный диспатчер. Заполняется декоратором @implements в _ops.py
HANDLED_FUNCTIONS: Dict[Any, Any] = {}

# (класс члена, число компонент, dtype) -> алгебра; заполняют модули алгебр
_ALGEBRAS: Dict[Tuple[type, int, torch.dtype], Any] = {}


def implements(torch_function):
    """Декоратор для регистрации реализаций функций torch."""
    def decorator(func):
        HANDLED_FUNCTIONS[torch_function] = func
        return func
    return decorator


def register_algebra(member_type: type, n_components: int, dtype: torch.dtype, algebra) -> None:
    _ALGEBRAS[(member_type, n_components, dtype)] = algebra


def algebra_for(member_type: type, n_components: int, dtype: torch.dtype):
    try:
        return _ALGEBRAS[(member_type, n_components, dtype)]
    except KeyError:
        raise TypeError(
            f"No algebra registered for {member_type.__name__} with "
            f"{n_components} components of {dtype}"
        ) from None


def _dispatch(func, *args):
    # torch.add(2.0, member) не проходит разбор аргументов torch,
    # поэтому отражённые операторы идут в реестр напрямую
    if func not in HANDLED_FUNCTIONS:
        raise NotImplementedError(f"PyTorch function {func.__name__} is not implemented.")
    return HANDLED_FUNCTIONS[func](*args)


def _check_dtype(dtype: torch.dtype) -> torch.dtype:
    if dtype not in SUPPORTED_DTYPES:
        raise TypeError(f"components dtype must be torch.float32 or torch.float64, got {dtype}")
    return dtype


def _is_zero_value(value) -> bool:
    if isinstance(value, Hypercomplex):
        return bool((value.components == 0).all())
    if isinstance(value, torch.Tensor):
        return bool((value == 0).all())
    return value == 0


class Member:
    """База всех членов: хранит тензор компонент [..., n]."""

    def __init__(self, components: torch.Tensor, file_backed: bool = False):
        if not isinstance(components, torch.Tensor):
            raise TypeError("components must be a torch.Tensor")
        _check_dtype(components.dtype)
        if components.ndim == 0 or components.shape[-1] not in (4, 8):
            raise ValueError(
                f"last dimension of components must be 4 or 8, got shape {tuple(components.shape)}"
            )
        self.components = components
        self.file_backed = file_backed

    # --- Свойства ---
    @property
    def dtype(self) -> torch.dtype:
        return self.components.dtype

    @property
    def device(self):
        return self.components.device

    @property
    def n_components(self) -> int:
        return self.components.shape[-1]

    @property
    def shape(self) -> Tuple[int, ...]:
        """Форма без измерения компонент."""
        return tuple(self.components.shape[:-1])

    @property
    def element_type(self) -> Type["Hypercomplex"]:
        return Quaternion if self.n_components == 4 else Octonion

    @property
    def algebra(self):
        return algebra_for(type(self), self.n_components, self.dtype)

    def _replace_components(self, components: torch.Tensor) -> None:
        """Записывает новые компоненты, сохраняя хранилище при той же форме."""
        if components.shape == self.components.shape:
            self.components.copy_(components)
            return
        file_backed = wants_file_storage(components.shape, self.file_backed or None)
        fresh = allocate(components.shape, self.dtype, file_backed=file_backed)
        fresh.copy_(components)
        self.components = fresh
        self.file_backed = file_backed

    def _element(self, components: torch.Tensor) -> "Hypercomplex":
        return self.element_type.from_components(components.clone())

    def _set_element(self, index: Tuple[int, ...], value) -> None:
        if isinstance(value, Hypercomplex):
            if value.n_components > self.n_components:
                # лишние компоненты допустимы только нулевые
                if not bool((value.components[self.n_components:] == 0).all()):
                    raise ValueError("cannot store octonion with nonzero upper components in a quaternion member")
            comps = value.components[: self.n_components]
            self.components[index].zero_()
            self.components[index][: comps.shape[0]] = comps
        else:
            self.components[index].zero_()
            self.components[index][0] = float(value)

    def to_mpmath(self, mp_ctx) -> list:
        """Компоненты как mpf (через строковое представление, без округления)."""
        return [mp_ctx.mpf(repr(c)) for c in self.components.flatten().tolist()]

    def __str__(self) -> str:
        return format_components(self.components)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self}, dtype={self.dtype})"

    # --- Протокол диспатчинга PyTorch ---
    @classmethod
    def __torch_function__(cls, func, types, args=(), kwargs=None):
        if kwargs is None:
            kwargs = {}
        if func in HANDLED_FUNCTIONS:
            return HANDLED_FUNCTIONS[func](*args, **kwargs)
        raise NotImplementedError(f"{cls.__name__}: PyTorch function {func.__name__} is not implemented.")

    # --- Магические методы для операторов ---
    def __add__(self, other):
        return torch.add(self, other)

    def __radd__(self, other):
        return _dispatch(torch.add, other, self)

    def __sub__(self, other):
        return torch.sub(self, other)

    def __rsub__(self, other):
        return _dispatch(torch.sub, other, self)

    def __mul__(self, other):
        return torch.mul(self, other)

    def __rmul__(self, other):
        return _dispatch(torch.mul, other, self)

    def __truediv__(self, other):
        return torch.div(self, other)

    def __rtruediv__(self, other):
        return _dispatch(torch.div, other, self)

    def __matmul__(self, other):
        return torch.matmul(self, other)

    def __rmatmul__(self, other):
        return _dispatch(torch.matmul, other, self)

    def __neg__(self):
        return torch.neg(self)

    def __pow__(self, exponent):
        return torch.pow(self, exponent)

    def __abs__(self) -> float:
        return self.algebra.norm(self)


# -----------------------------------------------------------------------------
# Скаляры
# -----------------------------------------------------------------------------

def _component_property(index: int, name: str):
    def getter(self) -> float:
        return self.components[index].item()

    def setter(self, value: float) -> None:
        self.components[index] = float(value)

    return property(getter, setter, doc=f"Компонента {name}.")


class Hypercomplex(Member):
    """Гиперкомплексное число фиксированной размерности."""

    N_COMPONENTS = 0

    def __init__(self, *values: float, dtype: Optional[torch.dtype] = None,
                 components: Optional[torch.Tensor] = None):
        if components is not None:
            if values:
                raise TypeError("pass either component values or a components tensor, not both")
            if components.shape != (self.N_COMPONENTS,):
                raise ValueError(
                    f"{type(self).__name__} components must have shape ({self.N_COMPONENTS},), "
                    f"got {tuple(components.shape)}"
                )
            super().__init__(components)
            return
        if len(values) > self.N_COMPONENTS:
            raise ValueError(f"{type(self).__name__} takes at most {self.N_COMPONENTS} components, got {len(values)}")
        dtype = _check_dtype(dtype if dtype is not None else DEFAULT_DTYPE)
        comps = torch.zeros(self.N_COMPONENTS, dtype=dtype)
        for idx, v in enumerate(values):
            comps[idx] = float(v)
        super().__init__(comps)

    @classmethod
    def from_components(cls, components: torch.Tensor, file_backed: bool = False) -> "Hypercomplex":
        return cls(components=components)

    @classmethod
    def from_string(cls, text: str, dtype: torch.dtype = DEFAULT_DTYPE) -> "Hypercomplex":
        rep = TensorStringRepresentation(text)
        if rep.rank != 0:
            raise ValueError(f"expected a single {cls.__name__} value, got dimensions {rep.dimensions}")
        return cls.from_components(rep.to_components(cls.N_COMPONENTS, _check_dtype(dtype)))

    @classmethod
    def from_mpmath(cls, values: Sequence, dtype: torch.dtype = DEFAULT_DTYPE) -> "Hypercomplex":
        """Создаёт число из mpf-значений (сужение до dtype)."""
        return cls(*[float(v) for v in values], dtype=dtype)

    def copy(self) -> "Hypercomplex":
        return type(self).from_components(self.components.clone())

    def component(self, idx: int) -> float:
        """Компонента по номеру; за пределами [0, n) - 0."""
        if idx < 0 or idx >= self.N_COMPONENTS:
            return 0.0
        return self.components[idx].item()

    def set_component(self, idx: int, value: float) -> None:
        """Запись компоненты; 0 за пределами игнорируется, иное - ошибка."""
        if idx < 0 or idx >= self.N_COMPONENTS:
            if value != 0:
                raise ValueError("cannot set nonzero value outside extents")
            return
        self.components[idx] = float(value)

    def values(self) -> Tuple[float, ...]:
        return tuple(self.components.tolist())


class Quaternion(Hypercomplex):
    """Кватернион r + i·i + j·j + k·k."""

    N_COMPONENTS = 4

    r = _component_property(0, "r")
    i = _component_property(1, "i")
    j = _component_property(2, "j")
    k = _component_property(3, "k")


class Octonion(Hypercomplex):
    """Октонион: кватернионная часть плюс l, i0, j0, k0."""

    N_COMPONENTS = 8

    r = _component_property(0, "r")
    i = _component_property(1, "i")
    j = _component_property(2, "j")
    k = _component_property(3, "k")
    l = _component_property(4, "l")  # noqa: E741
    i0 = _component_property(5, "i0")
    j0 = _component_property(6, "j0")
    k0 = _component_property(7, "k0")


def _n_for(element_type) -> int:
    if element_type not in (Quaternion, Octonion):
        raise TypeError(f"element_type must be Quaternion or Octonion, got {element_type!r}")
    return element_type.N_COMPONENTS


# -----------------------------------------------------------------------------
# Агрегаты
# -----------------------------------------------------------------------------

class _Aggregate(Member):
    """Общие для векторов, матриц и тензоров методы доступа к элементам."""

    ORDER = 0  # число измерений формы; -1 для тензора произвольного ранга

    @classmethod
    def zeros(cls, shape: Sequence[int], element_type=Quaternion,
              dtype: torch.dtype = DEFAULT_DTYPE, file_backed: Optional[bool] = None):
        full = tuple(shape) + (_n_for(element_type),)
        resolved = wants_file_storage(full, file_backed)
        components = allocate(full, _check_dtype(dtype), file_backed=resolved)
        return cls(components, file_backed=resolved)

    @classmethod
    def from_components(cls, components: torch.Tensor, file_backed: bool = False):
        return cls(components, file_backed=file_backed)

    @classmethod
    def from_string(cls, text: str, element_type=Quaternion, dtype: torch.dtype = DEFAULT_DTYPE):
        rep = TensorStringRepresentation(text)
        components = rep.to_components(_n_for(element_type), _check_dtype(dtype))
        return cls(cls._coerce_parsed(components))

    @classmethod
    def _coerce_parsed(cls, components: torch.Tensor) -> torch.Tensor:
        return components

    def copy(self):
        return type(self)(self.components.clone())

    def _check_index(self, index: Tuple[int, ...]) -> bool:
        """True, если индекс внутри формы; IndexError для отрицательных."""
        if len(index) != len(self.shape):
            raise ValueError(f"expected {len(self.shape)} indices, got {len(index)}")
        for idx in index:
            if idx < 0:
                raise IndexError(f"negative index {idx}")
        return all(idx < size for idx, size in zip(index, self.shape))

    def _get(self, index: Tuple[int, ...]) -> Hypercomplex:
        if not self._check_index(index):
            return self.element_type.from_components(
                torch.zeros(self.n_components, dtype=self.dtype)
            )
        return self._element(self.components[index])

    def _put(self, index: Tuple[int, ...], value) -> None:
        if not self._check_index(index):
            if not _is_zero_value(value):
                raise ValueError("cannot set nonzero value outside extents")
            return
        self._set_element(index, value)

    def _reallocate(self, shape: Tuple[int, ...]) -> None:
        """init(): при той же форме обнуляет, иначе выделяет заново."""
        full = tuple(shape) + (self.n_components,)
        if tuple(self.components.shape) == full:
            self.components.zero_()
            return
        resolved = wants_file_storage(full, self.file_backed or None)
        self.components = allocate(full, self.dtype, file_backed=resolved)
        self.file_backed = resolved


class RModuleMember(_Aggregate):
    """Вектор гиперкомплексных чисел, компоненты [length, n]."""

    def __init__(self, components: torch.Tensor, file_backed: bool = False):
        super().__init__(components, file_backed)
        if components.ndim != 2:
            raise ValueError(f"RModule components must be [length, n], got shape {tuple(components.shape)}")

    @classmethod
    def _coerce_parsed(cls, components):
        if components.ndim == 1:
            return components.unsqueeze(0)
        return components

    @property
    def length(self) -> int:
        return self.components.shape[0]

    def v(self, i: int) -> Hypercomplex:
        return self._get((i,))

    def set_v(self, i: int, value) -> None:
        self._put((i,), value)

    def init(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"negative vector length {size}")
        self._reallocate((size,))

    def dimension(self, d: int) -> int:
        if d < 0:
            raise ValueError("can't query negative dimension")
        return self.length if d == 0 else 1

    def __len__(self) -> int:
        return self.length


class MatrixMember(_Aggregate):
    """Матрица гиперкомплексных чисел, компоненты [rows, cols, n] (row-major)."""

    def __init__(self, components: torch.Tensor, file_backed: bool = False):
        super().__init__(components, file_backed)
        if components.ndim != 3:
            raise ValueError(f"Matrix components must be [rows, cols, n], got shape {tuple(components.shape)}")

    @classmethod
    def _coerce_parsed(cls, components):
        # скаляр -> 1x1, вектор -> одна строка, [] -> 0x0
        if components.ndim == 2 and components.shape[0] == 0:
            return components.reshape(0, 0, components.shape[-1])
        while components.ndim < 3:
            components = components.unsqueeze(0)
        return components

    @property
    def rows(self) -> int:
        return self.components.shape[0]

    @property
    def cols(self) -> int:
        return self.components.shape[1]

    def is_square(self) -> bool:
        return self.rows == self.cols

    def v(self, r: int, c: int) -> Hypercomplex:
        return self._get((r, c))

    def set_v(self, r: int, c: int, value) -> None:
        self._put((r, c), value)

    def init(self, rows: int, cols: int) -> None:
        if rows < 0 or cols < 0:
            raise ValueError(f"negative matrix dimensions {rows}x{cols}")
        self._reallocate((rows, cols))

    def dimension(self, d: int) -> int:
        if d < 0:
            raise ValueError("can't query negative dimension")
        if d == 0:
            return self.rows
        if d == 1:
            return self.cols
        return 1

    def row(self, r: int) -> "RModuleMember":
        return RModuleMember(self.components[r].clone())

    def col(self, c: int) -> "RModuleMember":
        return RModuleMember(self.components[:, c].clone())


class TensorMember(_Aggregate):
    """Декартов тензор: все измерения равны dim_count, компоненты [d]*rank + [n]."""

    def __init__(self, components: torch.Tensor, file_backed: bool = False):
        super().__init__(components, file_backed)
        dims = set(components.shape[:-1])
        if len(dims) > 1:
            raise ValueError(
                f"Cartesian tensor needs equal dimensions, got shape {tuple(components.shape[:-1])}"
            )

    @classmethod
    def zeros_cartesian(cls, rank: int, dim_count: int, element_type=Quaternion,
                        dtype: torch.dtype = DEFAULT_DTYPE, file_backed: Optional[bool] = None):
        if rank < 0 or dim_count < 0:
            raise ValueError(f"invalid tensor rank {rank} / dimension count {dim_count}")
        return cls.zeros((dim_count,) * rank, element_type, dtype, file_backed)

    @property
    def rank(self) -> int:
        return self.components.ndim - 1

    @property
    def dim_count(self) -> int:
        return self.components.shape[0] if self.rank > 0 else 0

    def v(self, index: Sequence[int]) -> Hypercomplex:
        return self._get(tuple(index))

    def set_v(self, index: Sequence[int], value) -> None:
        self._put(tuple(index), value)

    def init(self, rank: int, dim_count: int) -> None:
        if rank < 0 or dim_count < 0:
            raise ValueError(f"invalid tensor rank {rank} / dimension count {dim_count}")
        self._reallocate((dim_count,) * rank)

    def dimension(self, d: int) -> int:
        if d < 0:
            raise ValueError("can't query negative dimension")
        return self.dim_count if d < self.rank else 1
