import torch
from mpmath import mp
from typing import List

import hypothesis.strategies as st

from hyper_fx import Hypercomplex, Member, Octonion, Quaternion

mp.dps = 200  # Повысим точность для надежности


def to_mp_values(member: Member) -> List[mp.mpf]:
    """Плоский список компонент члена как mpmath-числа (без округления)."""
    return member.to_mpmath(mp)


def complex_quaternion(z: complex, dtype: torch.dtype = torch.float64) -> Quaternion:
    """Кватернион r + i*y, вложение комплексного числа."""
    return Quaternion(z.real, z.imag, 0.0, 0.0, dtype=dtype)


def mp_complex(q: Hypercomplex) -> mp.mpc:
    """Обратное вложение: используются только компоненты r и i."""
    return mp.mpc(q.r, q.i)


def assert_complex_close(q: Hypercomplex, expected: mp.mpc, tol: float = 1e-12) -> None:
    """Сравнивает кватернион с комплексным эталоном; j, k должны быть нулевыми."""
    scale = max(1.0, float(abs(expected)))
    assert abs(mp_complex(q) - expected) <= tol * scale, f"{q} != {expected}"
    assert q.j == 0.0 and q.k == 0.0


def assert_members_close(a: Member, b: Member, tol: float = 1e-12) -> None:
    """Покомпонентное сравнение с допуском (формы обязаны совпадать)."""
    assert a.shape == b.shape, f"shape {a.shape} != {b.shape}"
    diff = (a.components - b.components).abs().max().item() if a.components.numel() else 0.0
    assert diff <= tol, f"max difference {diff} > {tol}:\n{a}\n{b}"


# Стратегии hypothesis: умеренные значения, чтобы сравнения с допуском были устойчивы
finite_components = st.floats(
    min_value=-10.0, max_value=10.0, allow_nan=False, allow_infinity=False, allow_subnormal=False
)

quaternions = st.lists(finite_components, min_size=4, max_size=4).map(lambda v: Quaternion(*v))
octonions = st.lists(finite_components, min_size=8, max_size=8).map(lambda v: Octonion(*v))
nonzero_quaternions = quaternions.filter(lambda q: q.algebra.norm(q) > 1e-3)
nonzero_octonions = octonions.filter(lambda o: o.algebra.norm(o) > 1e-3)
