"""hyper_fx._storage
===================
Хранилище компонент членов: в памяти или в файле.

Большие векторы и матрицы могут не помещаться в оперативную память,
поэтому при превышении порога (`file_storage_threshold`) тензор
компонент размещается в `numpy.memmap` на временном файле и
оборачивается через `torch.from_numpy` без копирования.

Здесь же находится двоичный ввод-вывод компонент: плоский массив
float32/float64 в порядке r, i, j, k[, l, i0, j0, k0].
"""

from __future__ import annotations

import os
import tempfile
from typing import Optional, Sequence, Union

import numpy as np
import torch

from ._config import settings
from ._log import get_logger

__all__ = ["allocate", "wants_file_storage", "to_float_file", "from_float_file"]

log = get_logger(__name__)

_NUMPY_DTYPES = {
    torch.float32: np.float32,
    torch.float64: np.float64,
}

PathLike = Union[str, "os.PathLike[str]"]


def _numpy_dtype(dtype: torch.dtype):
    try:
        return _NUMPY_DTYPES[dtype]
    except KeyError:
        raise TypeError(f"Unsupported component dtype: {dtype}") from None


def _numel(shape: Sequence[int]) -> int:
    result = 1
    for s in shape:
        result *= int(s)
    return result


def wants_file_storage(shape: Sequence[int], file_backed: Optional[bool] = None) -> bool:
    """Решает, размещать ли тензор формы `shape` в файле."""
    if file_backed is not None:
        return bool(file_backed)
    threshold = settings["file_storage_threshold"]
    return threshold > 0 and _numel(shape) > threshold


def allocate(shape: Sequence[int], dtype: torch.dtype, file_backed: Optional[bool] = None) -> torch.Tensor:
    """Создаёт нулевой тензор компонент формы `shape`.

    Args:
        shape: полная форма, включая последнее измерение компонент.
        dtype: torch.float32 или torch.float64.
        file_backed: True / False - принудительно; None - по порогу
            из настроек (0 отключает файловое хранение).
    """
    shape = tuple(int(s) for s in shape)
    np_dtype = _numpy_dtype(dtype)
    numel = _numel(shape)
    file_backed = wants_file_storage(shape, file_backed)

    # memmap нулевой длины не создаётся
    if not file_backed or numel == 0:
        return torch.zeros(shape, dtype=dtype)

    # Файл удаляется при закрытии, отображение держит собственный дескриптор
    handle = tempfile.TemporaryFile(prefix="hyper_fx_")
    mapped = np.memmap(handle, dtype=np_dtype, mode="w+", shape=shape)
    log.debug("file-backed storage: %d elements of %s", numel, np.dtype(np_dtype).name)
    return torch.from_numpy(mapped)


def _components_of(target) -> torch.Tensor:
    # член или сам тензор компонент
    return getattr(target, "components", target)


def to_float_file(member, path: PathLike) -> None:
    """Записывает компоненты члена в файл как плоский массив (порядок хранения)."""
    data = _components_of(member).detach().cpu().contiguous().numpy()
    data.tofile(os.fspath(path))
    log.debug("wrote %d components to %s", data.size, path)


def from_float_file(path: PathLike, member) -> None:
    """Читает компоненты из файла на место компонент `member`.

    Размер файла обязан совпадать с числом компонент.
    """
    components = _components_of(member)
    np_dtype = _numpy_dtype(components.dtype)
    data = np.fromfile(os.fspath(path), dtype=np_dtype)
    if data.size != components.numel():
        raise ValueError(
            f"File {os.fspath(path)!r} holds {data.size} components, expected {components.numel()}"
        )
    components.copy_(torch.from_numpy(data).reshape(components.shape))
    log.debug("read %d components from %s", data.size, path)
