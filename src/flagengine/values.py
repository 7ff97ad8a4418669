"""評価コンテキストの値型と文字列化・数値変換

コンテキストの属性値は str / int / float / bool と、それらのリスト（タプル）に限定する。
比較はすべて stringify() と to_number() を経由して行うため、型ごとの扱いはここで完結する。
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from types import MappingProxyType
from typing import TypeAlias, Union

AttributeValue: TypeAlias = Union[
    str,
    int,
    float,
    bool,
    list["AttributeValue"],
    tuple["AttributeValue", ...],
]

Context: TypeAlias = Mapping[str, AttributeValue]

EMPTY_CONTEXT: Context = MappingProxyType({})

# これ以上の絶対値を持つ整数値の float は指数表記のまま扱う
_INTEGRAL_FLOAT_LIMIT = 1e21

# int_max_str_digits の下限 (640) より小さい桁数で分割する
_INT_CHUNK_DIGITS = 500
_INT_CHUNK = 10**_INT_CHUNK_DIGITS


def _int_text(value: int) -> str:
    try:
        return str(value)
    except ValueError:
        # 10 進変換の桁数上限を超える整数は分割して変換する
        n = abs(value)
        chunks: list[str] = []
        while n:
            n, rest = divmod(n, _INT_CHUNK)
            chunks.append(f"{rest:0{_INT_CHUNK_DIGITS}d}")
        digits = "".join(reversed(chunks)).lstrip("0")
        return f"-{digits}" if value < 0 else digits


def _float_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < _INTEGRAL_FLOAT_LIMIT:
        return str(int(value))
    return repr(value)


def context_or_empty(context: Context | None) -> Context:
    """None のコンテキストを空のコンテキストとして扱う。"""
    return context if context is not None else EMPTY_CONTEXT


def stringify(value: object) -> str:
    """値を比較用の正規文字列に変換する。

    - bool は "true" / "false"
    - 整数値の float は整数表記（25.0 -> "25"）、非有限値は "+Inf" / "-Inf" / "NaN"
    - list / tuple は "[a b c]"
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return _int_text(value)
    if isinstance(value, float):
        return _float_text(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(stringify(item) for item in value) + "]"
    return str(value)


def to_number(value: object) -> float | None:
    """値を数値に変換する。変換できなければ None。

    int / float と数値文字列のみ受け付ける。bool と float の範囲を超える int は数値として扱わない。
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError:
            return None
    if isinstance(value, str):
        if not value or value != value.strip() or "_" in value:
            return None
        try:
            return float(value)
        except ValueError:
            return None
    return None
