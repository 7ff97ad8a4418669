"""条件演算子の定義"""

from __future__ import annotations

from enum import Enum


class Operator(str, Enum):
    """条件評価で使う比較演算子。値は設定ファイル上の表記。"""

    EQUAL = "=="
    NOT_EQUAL = "!="
    IN = "in"
    NOT_IN = "not_in"
    GREATER_THAN = ">"
    GREATER_THAN_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_THAN_OR_EQUAL = "<="
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    REGEX = "regex"

    @classmethod
    def parse(cls, token: object) -> Operator | None:
        """表記から演算子を得る。未知の表記なら None。"""
        if isinstance(token, cls):
            return token
        try:
            return cls(token)
        except ValueError:
            return None

    @classmethod
    def is_valid(cls, token: object) -> bool:
        """サポート対象の演算子か確認する。"""
        return cls.parse(token) is not None
