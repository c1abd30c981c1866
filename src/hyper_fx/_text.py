"""hyper_fx._text
================
Текстовое представление членов.

Формат:
    скаляр   ``1``, ``{1}``, ``{1,2,3,4}`` (недостающие компоненты равны 0)
    вектор   ``[1,2]``, ``[{1,2},{3,4}]``
    матрица  ``[[1,2][3,4]]`` или без внешних скобок ``[1,2][3,4]``
    тензор   ``[[[...][...]][[...][...]]]``

Разбор идёт через промежуточное представление высокой точности
(mpmath): `TensorStringRepresentation` хранит форму и значения
каждого элемента как список из 8 `mpf`, а сужение до float32/float64
выполняется только при создании тензора компонент.
"""

from __future__ import annotations

import re
from typing import Any, List, Sequence, Tuple, Union

import torch
from mpmath import mp

from ._config import settings

__all__ = ["TensorStringRepresentation", "format_components", "MAX_COMPONENTS"]

MAX_COMPONENTS = 8

_MANTISSA_BITS = {torch.float32: 24, torch.float64: 53}

_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<punct>[\[\]{},])"
    r"|(?P<number>[-+]?(?:inf|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?))"
    r")",
    re.IGNORECASE,
)

# Лист разбора: список mpf компонент элемента
_Leaf = Tuple[str, List[Any]]
_Node = Union[_Leaf, List[Any]]


def _tokenize(text: str) -> List[str]:
    tokens = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _TOKEN.match(stripped, pos)
        if match is None:
            raise ValueError(f"Unexpected character {stripped[pos]!r} at position {pos} in {text!r}")
        tokens.append(match.group("punct") or match.group("number"))
        pos = match.end()
    if not tokens:
        raise ValueError("Empty tensor string")
    return tokens


class _Parser:
    """Рекурсивный спуск по грамматике: sequence := item (','? item)*."""

    def __init__(self, tokens: List[str], ctx):
        self.tokens = tokens
        self.pos = 0
        self.ctx = ctx

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self, expected=None) -> str:
        token = self.peek()
        if token is None:
            raise ValueError("Unexpected end of tensor string")
        if expected is not None and token != expected:
            raise ValueError(f"Expected {expected!r}, got {token!r}")
        self.pos += 1
        return token

    def number(self, token: str):
        if token in "[]{},":
            raise ValueError(f"Expected a number, got {token!r}")
        return self.ctx.mpf(token.lower())

    def item(self) -> _Node:
        token = self.take()
        if token == "{":
            values = [self.number(self.take())]
            while self.peek() == ",":
                self.take(",")
                values.append(self.number(self.take()))
            self.take("}")
            return ("leaf", values)
        if token == "[":
            # [] - измерение нулевой длины
            children = self.sequence()
            self.take("]")
            return children
        return ("leaf", [self.number(token)])

    def sequence(self) -> List[_Node]:
        items: List[_Node] = []
        while self.peek() not in (None, "]"):
            if items and self.peek() == ",":
                self.take(",")
            items.append(self.item())
        return items


def _is_leaf(node) -> bool:
    return isinstance(node, tuple)


def _shape_of(node: _Node) -> Tuple[int, ...]:
    if _is_leaf(node):
        return ()
    if not node:
        return (0,)
    shapes = {_shape_of(child) for child in node}
    if len(shapes) != 1:
        raise ValueError("Ragged tensor string: sibling groups differ in shape")
    return (len(node),) + shapes.pop()


def _flatten(node: _Node, out: List[List[Any]], ctx) -> None:
    if _is_leaf(node):
        values = list(node[1][:MAX_COMPONENTS])
        values.extend(ctx.mpf(0) for _ in range(MAX_COMPONENTS - len(values)))
        out.append(values)
        return
    for child in node:
        _flatten(child, out, ctx)


class TensorStringRepresentation:
    """Разобранная строка: форма и значения элементов высокой точности.

    Attributes:
        dimensions: форма (внешняя скобка первая); () для скаляра.
        values: плоский список элементов в порядке C, каждый элемент:
            список из 8 mpf (r, i, j, k, l, i0, j0, k0).
    """

    def __init__(self, text: str, mp_ctx=None):
        ctx = mp_ctx if mp_ctx is not None else mp
        self._ctx = ctx
        with ctx.workdps(settings["high_prec_dps"]):
            parser = _Parser(_tokenize(text), ctx)
            items = parser.sequence()
            if parser.peek() is not None:
                raise ValueError(f"Unbalanced brackets in tensor string {text!r}")
            if not items:
                raise ValueError("Empty tensor string")
            # несколько групп подряд на верхнем уровне - неявная внешняя скобка
            root: _Node = items[0] if len(items) == 1 else items
            if len(items) > 1 and any(_is_leaf(item) for item in items):
                raise ValueError(f"Top-level values must be enclosed in brackets: {text!r}")
            self.dimensions: Tuple[int, ...] = _shape_of(root)
            self.values: List[List[Any]] = []
            _flatten(root, self.values, ctx)

    @property
    def rank(self) -> int:
        return len(self.dimensions)

    def to_components(self, n_components: int, dtype: torch.dtype) -> torch.Tensor:
        """Сужает значения до тензора формы dimensions + (n_components,).

        Для float32 значение сначала округляется до 24 бит мантиссы в mpmath,
        после чего переход через double точен. Исключение - субнормальные
        float32: они округляются дважды.
        """
        prec = _MANTISSA_BITS[dtype]
        with self._ctx.workprec(prec):
            data = [[float(+v) for v in element[:n_components]] for element in self.values]
        return torch.tensor(data, dtype=dtype).reshape(self.dimensions + (n_components,))



def _format_element(values: Sequence[float]) -> str:
    return "{" + ",".join(repr(float(v)) for v in values) + "}"


def _format_nested(data, depth: int) -> str:
    # depth - число оставшихся измерений формы; на дне списки компонент
    if depth == 0:
        return _format_element(data)
    if depth == 1:
        return "[" + ",".join(_format_element(element) for element in data) + "]"
    return "[" + "".join(_format_nested(child, depth - 1) for child in data) + "]"


def format_components(components: torch.Tensor) -> str:
    """Форматирует тензор компонент [..., n] в строку.

    Скаляр: ``{r,i,...}``, вектор: ``[{..},{..}]``, матрица:
    ``[[{..},{..}][{..},{..}]]``. Числа пишутся через repr, поэтому
    разбор результата даёт исходные значения без потерь.
    """
    return _format_nested(components.detach().cpu().tolist(), components.ndim - 1)
