"""Тесты текстового представления членов."""

import torch
import pytest
from mpmath import mp

from hyper_fx import (
    OCTONION_MATRIX_FLOAT64,
    QUATERNION_FLOAT32,
    QUATERNION_FLOAT64,
    QUATERNION_MATRIX_FLOAT64,
    QUATERNION_RMODULE_FLOAT64,
    QUATERNION_TENSOR_FLOAT64,
    MatrixMember,
    Octonion,
    Quaternion,
    RModuleMember,
    TensorMember,
    TensorStringRepresentation,
    format_components,
)

mp.dps = 200


@pytest.mark.parametrize(
    "text, dimensions",
    [
        ("1", ()),
        ("{1}", ()),
        ("{1,2}", ()),
        ("[1,2]", (2,)),
        ("[{1,2},{3,4},{5}]", (3,)),
        ("[[1][2]]", (2, 1)),
        ("[[1,2][3,4]]", (2, 2)),
        ("[1,2][3,4]", (2, 2)),
        ("[[1,2],[3,4],[5,6]]", (3, 2)),
        ("[[[1,2][3,4]][[5,6][7,8]]]", (2, 2, 2)),
        ("[]", (0,)),
        ("[[][]]", (2, 0)),
    ],
    ids=["number", "brace", "brace2", "vector", "vector-braces", "column", "matrix",
         "implicit-outer", "comma-groups", "rank3", "empty", "empty-rows"],
)
def test_parse_dimensions(text, dimensions):
    """Проверяет форму, полученную разбором строки (внешняя скобка - первое измерение)."""
    rep = TensorStringRepresentation(text)
    assert rep.dimensions == dimensions
    expected_count = 1
    for d in dimensions:
        expected_count *= d
    assert len(rep.values) == expected_count
    assert all(len(v) == 8 for v in rep.values)


def test_parse_values_are_high_precision():
    """Значения хранятся как mpf без сужения до double."""
    rep = TensorStringRepresentation("{0.1,-2.5e3,inf,nan}")
    first = rep.values[0]
    assert abs(first[0] - mp.mpf("0.1")) < mp.mpf(10) ** -45
    assert float(first[0]) == 0.1
    assert first[1] == -2500
    assert first[2] == mp.inf
    assert mp.isnan(first[3])
    assert first[4:] == [0, 0, 0, 0]


def test_parse_nine_components_ignores_extra():
    q = Octonion.from_string("{1,2,3,4,5,6,7,8,9}")
    assert q.values() == (1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0)
    # для кватерниона лишние компоненты тоже отбрасываются
    assert Quaternion.from_string("{1,2,3,4,5,6}").values() == (1.0, 2.0, 3.0, 4.0)


def test_values_are_in_row_major_order():
    rep = TensorStringRepresentation("[[1,2][3,4]]")
    assert [v[0] for v in rep.values] == [1, 2, 3, 4]


@pytest.mark.parametrize(
    "text",
    ["", "[", "[1,2", "[1,2]]", "[[][1]]", "{1,}", "[[1,2][3]]", "abc", "1 2"],
    ids=["empty", "open", "unclosed", "extra-close", "ragged-empty", "trailing-comma",
         "ragged", "garbage", "bare-values"],
)
def test_parse_errors(text):
    with pytest.raises(ValueError):
        TensorStringRepresentation(text)


def test_scalar_format():
    assert str(Quaternion(1, -2, 0.5, 0)) == "{1.0,-2.0,0.5,0.0}"
    assert str(Octonion(1)) == "{1.0,0.0,0.0,0.0,0.0,0.0,0.0,0.0}"


def test_aggregate_format():
    v = RModuleMember(torch.tensor([[1.0, 0, 0, 0], [2.0, 0, 0, 0]], dtype=torch.float64))
    assert str(v) == "[{1.0,0.0,0.0,0.0},{2.0,0.0,0.0,0.0}]"
    m = QUATERNION_MATRIX_FLOAT64.construct(2, 2)
    QUATERNION_MATRIX_FLOAT64.unity(m)
    assert str(m) == (
        "[[{1.0,0.0,0.0,0.0},{0.0,0.0,0.0,0.0}]"
        "[{0.0,0.0,0.0,0.0},{1.0,0.0,0.0,0.0}]]"
    )
    assert format_components(torch.zeros(0, 4, dtype=torch.float64)) == "[]"
    assert format_components(torch.zeros(2, 0, 4, dtype=torch.float64)) == "[[][]]"


def test_scalar_roundtrip_is_exact():
    a = Quaternion(0.1, 1.0 / 3.0, -2.0 ** -40, 1e300)
    b = QUATERNION_FLOAT64.construct_from_string(str(a))
    assert QUATERNION_FLOAT64.equal(a, b)


def test_float32_roundtrip_is_exact():
    a = Quaternion(0.1, 1.0 / 3.0, 7.0, -1e-20, dtype=torch.float32)
    b = QUATERNION_FLOAT32.construct_from_string(str(a))
    assert QUATERNION_FLOAT32.equal(a, b)


def test_rmodule_roundtrip():
    gen = torch.Generator().manual_seed(7)
    v = QUATERNION_RMODULE_FLOAT64.random(QUATERNION_RMODULE_FLOAT64.construct(5), generator=gen)
    w = QUATERNION_RMODULE_FLOAT64.construct_from_string(str(v))
    assert QUATERNION_RMODULE_FLOAT64.equal(v, w)


def test_matrix_roundtrip():
    gen = torch.Generator().manual_seed(11)
    alg = OCTONION_MATRIX_FLOAT64
    m = alg.random(alg.construct(2, 3), generator=gen)
    back = alg.construct_from_string(str(m))
    assert back.rows == 2 and back.cols == 3
    assert alg.equal(m, back)


def test_tensor_roundtrip():
    gen = torch.Generator().manual_seed(3)
    alg = QUATERNION_TENSOR_FLOAT64
    t = alg.random(alg.construct(3, 2), generator=gen)
    back = alg.construct_from_string(str(t))
    assert back.rank == 3 and back.dim_count == 2
    assert alg.equal(t, back)


def test_empty_aggregates_roundtrip():
    """Пустые векторы и матрицы без столбцов переживают str -> разбор."""
    v = QUATERNION_RMODULE_FLOAT64.construct(0)
    assert RModuleMember.from_string(str(v)).shape == (0,)
    alg = QUATERNION_MATRIX_FLOAT64
    for rows, cols in [(2, 0), (1, 0), (0, 0)]:
        back = alg.construct_from_string(str(alg.construct(rows, cols)))
        assert back.shape == (rows, cols)


def test_float32_narrowing_rounds_once():
    """Чуть выше середины между float32: двойное округление через double дало бы 1.0."""
    text = mp.nstr(mp.mpf(1) + mp.mpf(2) ** -24 + mp.mpf(2) ** -60, 40)
    q = QUATERNION_FLOAT32.construct_from_string("{" + text + "}")
    assert q.r == 1.0 + 2.0 ** -23
    assert QUATERNION_FLOAT64.construct_from_string("{" + text + "}").r == 1.0 + 2.0 ** -24


def test_member_from_string_coercion():
    """Скаляр становится матрицей 1x1, вектор - одной строкой матрицы."""
    assert MatrixMember.from_string("7").shape == (1, 1)
    assert MatrixMember.from_string("[1,2,3]").shape == (1, 3)
    assert RModuleMember.from_string("5").shape == (1,)
    assert TensorMember.from_string("[[1,2][3,4]]").rank == 2
    with pytest.raises(ValueError, match="single Quaternion"):
        Quaternion.from_string("[1,2]")
    with pytest.raises(ValueError, match="Cartesian"):
        TensorMember.from_string("[[1,2,3][4,5,6]]")
