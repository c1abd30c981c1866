"""hyper_fx: кватернионы и октонионы поверх PyTorch.

Скаляры, векторы (RModule), матрицы и декартовы тензоры над
кватернионами и октонионами с точностью float32 / float64. Операции
живут в алгебрах-синглтонах; члены хранят компоненты в torch.Tensor
и поддерживают операторы Python через __torch_function__.

    >>> from hyper_fx import Quaternion
    >>> a = Quaternion(1, 2, 3, 4)
    >>> print(a * a.algebra.conjugate(a))
    {30.0,0.0,0.0,0.0}
"""

from ._log import get_logger  # noqa: F401
from ._config import configure, settings  # noqa: F401
from ._round import RoundMode  # noqa: F401
from ._storage import allocate, from_float_file, to_float_file  # noqa: F401
from ._text import TensorStringRepresentation, format_components  # noqa: F401
from ._members import (  # noqa: F401
    Hypercomplex,
    MatrixMember,
    Member,
    Octonion,
    Quaternion,
    RModuleMember,
    TensorMember,
)
from ._algebra import (  # noqa: F401
    OCTONION_FLOAT32,
    OCTONION_FLOAT64,
    QUATERNION_FLOAT32,
    QUATERNION_FLOAT64,
    HypercomplexAlgebra,
    OctonionAlgebra,
    QuaternionAlgebra,
    scalar_algebra,
)
from ._rmodule import (  # noqa: F401
    OCTONION_RMODULE_FLOAT32,
    OCTONION_RMODULE_FLOAT64,
    QUATERNION_RMODULE_FLOAT32,
    QUATERNION_RMODULE_FLOAT64,
    RModuleAlgebra,
)
from ._matrix import (  # noqa: F401
    OCTONION_MATRIX_FLOAT32,
    OCTONION_MATRIX_FLOAT64,
    QUATERNION_MATRIX_FLOAT32,
    QUATERNION_MATRIX_FLOAT64,
    MatrixAlgebra,
)
from ._tensor import (  # noqa: F401
    OCTONION_TENSOR_FLOAT32,
    OCTONION_TENSOR_FLOAT64,
    QUATERNION_TENSOR_FLOAT32,
    QUATERNION_TENSOR_FLOAT64,
    TensorAlgebra,
)
from . import _algorithms as algorithms  # noqa: F401
from . import _protocols as protocols  # noqa: F401

# Импортируем _ops ради побочных эффектов (регистрация HANDLED_FUNCTIONS)
from . import _ops as _member_ops  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "get_logger",
    "configure",
    "settings",
    "RoundMode",
    "allocate",
    "to_float_file",
    "from_float_file",
    "TensorStringRepresentation",
    "format_components",
    "Member",
    "Hypercomplex",
    "Quaternion",
    "Octonion",
    "RModuleMember",
    "MatrixMember",
    "TensorMember",
    "HypercomplexAlgebra",
    "QuaternionAlgebra",
    "OctonionAlgebra",
    "RModuleAlgebra",
    "MatrixAlgebra",
    "TensorAlgebra",
    "scalar_algebra",
    "QUATERNION_FLOAT32",
    "QUATERNION_FLOAT64",
    "OCTONION_FLOAT32",
    "OCTONION_FLOAT64",
    "QUATERNION_RMODULE_FLOAT32",
    "QUATERNION_RMODULE_FLOAT64",
    "OCTONION_RMODULE_FLOAT32",
    "OCTONION_RMODULE_FLOAT64",
    "QUATERNION_MATRIX_FLOAT32",
    "QUATERNION_MATRIX_FLOAT64",
    "OCTONION_MATRIX_FLOAT32",
    "OCTONION_MATRIX_FLOAT64",
    "QUATERNION_TENSOR_FLOAT32",
    "QUATERNION_TENSOR_FLOAT64",
    "OCTONION_TENSOR_FLOAT32",
    "OCTONION_TENSOR_FLOAT64",
    "algorithms",
    "protocols",
]
