"""Тесты скалярных алгебр кватернионов и октонионов."""

import math

import torch
import pytest
from mpmath import mp
from hypothesis import given, settings

from hyper_fx import (
    OCTONION_FLOAT32,
    OCTONION_FLOAT64,
    QUATERNION_FLOAT32,
    QUATERNION_FLOAT64,
    Octonion,
    Quaternion,
    RoundMode,
    scalar_algebra,
)
from tests.helpers import (
    assert_complex_close,
    assert_members_close,
    complex_quaternion,
    nonzero_octonions,
    nonzero_quaternions,
    octonions,
    quaternions,
)

mp.dps = 200

Q = QUATERNION_FLOAT64
O = OCTONION_FLOAT64

ALL_ALGEBRAS = [QUATERNION_FLOAT32, QUATERNION_FLOAT64, OCTONION_FLOAT32, OCTONION_FLOAT64]
ALGEBRA_IDS = ["q32", "q64", "o32", "o64"]


# -----------------------------------------------------------------------------
# Базовые свойства кольца
# -----------------------------------------------------------------------------

def test_octonion_times_conjugate_is_109():
    """a * conj(a) для октониона из исходного сценария даёт (109, 0, ..., 0)."""
    a = Octonion(-1, 5, -2, 7, -1, -2, -3, -4)
    b = O.conjugate(a)
    c = O.multiply(a, b)
    assert abs(c.r - 109) < 1e-10
    for name in ("i", "j", "k", "l", "i0", "j0", "k0"):
        assert abs(getattr(c, name)) < 1e-10


@settings(max_examples=100, deadline=None)
@given(a=quaternions)
def test_quaternion_times_conjugate_is_norm_squared(a):
    c = Q.multiply(a, Q.conjugate(a))
    assert math.isclose(c.r, Q.norm(a) ** 2, rel_tol=1e-12, abs_tol=1e-12)
    assert max(abs(c.i), abs(c.j), abs(c.k)) < 1e-12


@settings(max_examples=100, deadline=None)
@given(a=octonions, b=octonions)
def test_addition_commutes(a, b):
    assert O.equal(O.add(a, b), O.add(b, a))


def test_multiplication_does_not_commute():
    """i * j = k, но j * i = -k."""
    i, j = Q.i(), Q.j()
    assert Q.equal(Q.multiply(i, j), Q.k())
    assert Q.equal(Q.multiply(j, i), Q.negate(Q.k()))
    assert Q.not_equal(Q.multiply(i, j), Q.multiply(j, i))


@settings(max_examples=100, deadline=None)
@given(a=octonions)
def test_conjugate_is_involution(a):
    assert O.equal(O.conjugate(O.conjugate(a)), a)


@settings(max_examples=100, deadline=None)
@given(a=nonzero_quaternions)
def test_invert_invert(a):
    assert_members_close(Q.invert(Q.invert(a)), a, tol=1e-9)


@settings(max_examples=100, deadline=None)
@given(a=nonzero_octonions, b=nonzero_octonions)
def test_divide_then_multiply(a, b):
    """(a / b) * b = a: октонионы альтернативны, поэтому тождество верно."""
    assert_members_close(O.multiply(O.divide(a, b), b), a, tol=1e-9)


def test_unity_zero_and_predicates():
    one = Q.unity()
    assert Q.is_unity(one)
    assert Q.is_zero(Q.zero())
    assert not Q.is_zero(one)
    assert Q.is_nan(Q.nan())
    assert not Q.is_infinite(Q.nan())
    assert Q.is_infinite(Q.infinite())
    half_nan = Quaternion(float("inf"), float("nan"), 0, 0)
    assert Q.is_nan(half_nan)
    assert not Q.is_infinite(half_nan)


def test_invert_zero_does_not_raise():
    result = Q.invert(Q.zero())
    assert Q.is_nan(result) or Q.is_infinite(result)


def test_out_may_alias_input():
    """Результат можно писать в один из входов."""
    a = Quaternion(1, 2, 3, 4)
    b = Quaternion(0, 1, 0, 0)
    expected = Q.multiply(a, b)
    returned = Q.multiply(a, b, out=a)
    assert returned is a
    assert Q.equal(a, expected)


def test_assign_same_object_is_noop():
    a = Quaternion(1, 2, 3, 4)
    assert Q.assign(a, a) is a


def test_type_checks():
    with pytest.raises(TypeError):
        Q.add(Quaternion(1), Octonion(1))
    with pytest.raises(TypeError):
        Q.add(Quaternion(1, dtype=torch.float32), Quaternion(1))
    with pytest.raises(TypeError, match="components dtype"):
        Quaternion(1, dtype=torch.int32)


# -----------------------------------------------------------------------------
# Степени
# -----------------------------------------------------------------------------

@settings(max_examples=50, deadline=None)
@given(a=quaternions)
def test_power_matches_repeated_multiply(a):
    expected = Q.multiply(Q.multiply(a, a), a)
    assert_members_close(Q.power(3, a), expected, tol=1e-9)


def test_power_special_cases():
    a = Quaternion(1, 1, 0, 0)
    assert Q.is_unity(Q.power(0, a))
    assert_members_close(Q.power(-1, a), Q.invert(a))
    assert_members_close(Q.power(-2, a), Q.invert(Q.multiply(a, a)))
    with pytest.raises(ArithmeticError, match="0\\^0"):
        Q.power(0, Q.zero())
    with pytest.raises(TypeError, match="power must be an int"):
        Q.power(1.5, a)


# -----------------------------------------------------------------------------
# Трансцендентные функции: эталон - комплексные числа mpmath
# -----------------------------------------------------------------------------

COMPLEX_POINTS = [0.5 + 0.25j, -1.25 + 2.0j, 2.0 - 0.75j, 0.3 + 0.0j]
COMPLEX_IDS = ["q1", "q2", "q4", "real"]


@pytest.mark.parametrize("z", COMPLEX_POINTS, ids=COMPLEX_IDS)
@pytest.mark.parametrize(
    "name, reference",
    [
        ("exp", mp.exp),
        ("log", mp.log),
        ("sin", mp.sin),
        ("cos", mp.cos),
        ("tan", mp.tan),
        ("sinh", mp.sinh),
        ("cosh", mp.cosh),
        ("tanh", mp.tanh),
        ("sqrt", mp.sqrt),
        ("sinc", lambda w: mp.sin(w) / w),
        ("sinch", lambda w: mp.sinh(w) / w),
        ("sincpi", lambda w: mp.sin(mp.pi * w) / (mp.pi * w)),
        ("sinchpi", lambda w: mp.sinh(mp.pi * w) / (mp.pi * w)),
    ],
)
def test_transcendentals_match_complex(name, reference, z):
    """На вложенных комплексных числах функции совпадают с mpmath."""
    q = complex_quaternion(z)
    result = getattr(Q, name)(q)
    assert_complex_close(result, reference(mp.mpc(z.real, z.imag)), tol=1e-12)


@pytest.mark.parametrize("axis", ["j", "k"])
def test_exp_along_other_axes(axis):
    """exp(t * u) = cos t + u sin t для любой мнимой единицы u."""
    t = 0.7
    q = Quaternion(0, 0, 0, 0)
    setattr(q, axis, t)
    result = Q.exp(q)
    assert math.isclose(result.r, math.cos(t), rel_tol=1e-14)
    assert math.isclose(getattr(result, axis), math.sin(t), rel_tol=1e-14)


def test_sin_and_cos_pairs():
    a = Quaternion(0.3, -0.2, 0.5, 0.1)
    s, c = Q.sin_and_cos(a)
    assert Q.equal(s, Q.sin(a))
    assert Q.equal(c, Q.cos(a))
    sh, ch = Q.sinh_and_cosh(a)
    assert Q.equal(sh, Q.sinh(a))
    assert Q.equal(ch, Q.cosh(a))


@settings(max_examples=50, deadline=None)
@given(a=quaternions)
def test_sin_squared_plus_cos_squared(a):
    """sin^2 + cos^2 = 1 (sin(a) и cos(a) коммутируют)."""
    if Q.norm(a) > 3:
        return
    s, c = Q.sin_and_cos(a)
    total = Q.add(Q.multiply(s, s), Q.multiply(c, c))
    assert_members_close(total, Q.unity(), tol=1e-9)


def test_sinc_family_at_zero():
    for name in ("sinc", "sinch", "sincpi", "sinchpi"):
        assert Q.is_unity(getattr(Q, name)(Q.zero()))


def test_pow_and_cbrt():
    eight = Quaternion(8.0)
    assert_members_close(Q.cbrt(eight), Quaternion(2.0), tol=1e-14)
    a = complex_quaternion(1.5 + 0.5j)
    b = complex_quaternion(0.25 - 1.0j)
    expected = mp.power(mp.mpc(1.5, 0.5), mp.mpc(0.25, -1.0))
    assert_complex_close(Q.pow(a, b), expected, tol=1e-12)


def test_log_of_negative_real_uses_real_part_only():
    """Для отрицательного вещественного аргумента мнимая часть log равна нулю."""
    result = Q.log(Quaternion(-1.0))
    assert Q.is_zero(result)


def test_octonion_exp_log_roundtrip():
    a = Octonion(0.5, -0.25, 0.1, 0.2, -0.3, 0.4, 0.05, -0.15)
    assert_members_close(O.exp(O.log(a)), a, tol=1e-13)


# -----------------------------------------------------------------------------
# Константы, части, случайные значения
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("alg", ALL_ALGEBRAS, ids=ALGEBRA_IDS)
def test_constants(alg):
    tol = 1e-6 if alg.dtype == torch.float32 else 1e-15
    assert math.isclose(alg.real(alg.pi()), math.pi, rel_tol=tol)
    assert math.isclose(alg.real(alg.e()), math.e, rel_tol=tol)
    assert math.isclose(alg.real(alg.gamma()), 0.5772156649015329, rel_tol=tol)
    assert math.isclose(alg.real(alg.phi()), (1 + math.sqrt(5)) / 2, rel_tol=tol)
    assert alg.is_zero(alg.unreal(alg.pi()))


def test_octonion_basis_units():
    units = [O.i(), O.j(), O.k(), O.l(), O.i0(), O.j0(), O.k0()]
    for idx, unit in enumerate(units, start=1):
        assert unit.component(idx) == 1.0
        assert O.equal(O.multiply(unit, unit), O.negate(O.unity()))


def test_real_and_unreal():
    a = Quaternion(1, 2, 3, 4)
    assert Q.real(a) == 1.0
    assert Q.unreal(a).values() == (0.0, 2.0, 3.0, 4.0)
    assert math.isclose(Q.norm2(a), 30.0)


def test_random_is_in_unit_interval():
    gen = torch.Generator().manual_seed(1234)
    a = O.random(generator=gen)
    assert ((a.components >= 0) & (a.components < 1)).all()


def test_scalar_algebra_lookup():
    assert scalar_algebra(Quaternion, torch.float32) is QUATERNION_FLOAT32
    assert scalar_algebra(Octonion) is OCTONION_FLOAT64
    with pytest.raises(TypeError):
        scalar_algebra(int)


# -----------------------------------------------------------------------------
# Масштабирование, округление, допуск
# -----------------------------------------------------------------------------

def test_scale_variants():
    a = Quaternion(1, -2, 3, -4)
    assert Q.scale_by_double(2.0, a).values() == (2.0, -4.0, 6.0, -8.0)
    assert Q.scale_by_rational(3, 4, a).values() == (0.75, -1.5, 2.25, -3.0)
    assert Q.scale_by_two(3, a).values() == (8.0, -16.0, 24.0, -32.0)
    assert Q.scale_by_one_half(1, a).values() == (0.5, -1.0, 1.5, -2.0)
    assert Q.scale_components(-1.0, a).values() == (-1.0, 2.0, -3.0, 4.0)
    assert Q.equal(Q.scale(Q.i(), a), Q.multiply(Q.i(), a))


def test_scale_by_high_prec():
    """Множитель mpf применяется в высокой точности и только потом сужается."""
    a = Quaternion(3.0, 0.0, 0.0, 0.0)
    result = Q.scale_by_high_prec(mp.mpf(1) / 3, a)
    assert result.r == 1.0


def test_scale_by_rational_zero_denominator_is_ieee():
    result = Q.scale_by_rational(1, 0, Quaternion(1.0))
    assert Q.is_infinite(result) or Q.is_nan(result)


def test_round_and_within():
    a = Quaternion(2.5, -2.5, 3.5, 0.26)
    rounded = Q.round(RoundMode.HALF_EVEN, 1.0, a)
    assert rounded.values() == (2.0, -2.0, 4.0, 0.0)
    assert Q.within(0.5, a, rounded)
    assert not Q.within(0.1, a, rounded)
    assert not Q.within(1.0, Quaternion(float("nan")), Quaternion(float("nan")))


def test_float32_precision_path():
    a = Quaternion(1, 2, 3, 4, dtype=torch.float32)
    c = QUATERNION_FLOAT32.multiply(a, QUATERNION_FLOAT32.conjugate(a))
    assert c.dtype == torch.float32
    assert c.values() == (30.0, 0.0, 0.0, 0.0)
