"""条件評価"""

from __future__ import annotations

import operator as _op
import re
from collections.abc import Callable, Iterable

from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import Condition
from .operators import Operator
from .values import Context, context_or_empty, stringify, to_number

_Compare = Callable[[object, object], bool]

_ORDERING: dict[Operator, _Compare] = {
    Operator.GREATER_THAN: _op.gt,
    Operator.GREATER_THAN_OR_EQUAL: _op.ge,
    Operator.LESS_THAN: _op.lt,
    Operator.LESS_THAN_OR_EQUAL: _op.le,
}


class ConditionEvaluator:
    """コンテキストに対して条件を評価する。状態を持たないのでスレッド間で共有してよい。"""

    def evaluate(self, condition: Condition, context: Context | None) -> bool:
        """単一の条件を評価する。

        コンテキストに属性がなければ不一致とし、その後で negate を適用する。
        None のコンテキストは空として扱う。

        Raises:
            FeatureFlagError: 条件が不正な場合、または正規表現が不正な場合
        """
        condition.validate()
        context = context_or_empty(context)

        if condition.attribute not in context:
            return self._apply_negate(False, condition.negate)

        result = self._evaluate_operator(
            condition.operator,  # type: ignore[arg-type]
            context[condition.attribute],
            condition.value,
        )
        return self._apply_negate(result, condition.negate)

    def evaluate_all(self, conditions: Iterable[Condition], context: Context | None) -> bool:
        """すべての条件が一致するか評価する（AND）。最初の不一致またはエラーで打ち切る。"""
        for condition in conditions:
            if not self.evaluate(condition, context):
                return False
        return True

    @staticmethod
    def _apply_negate(result: bool, negate: bool) -> bool:
        return not result if negate else result

    def _evaluate_operator(self, op: Operator, ctx_value: object, cond_value: object) -> bool:
        if op is Operator.EQUAL:
            return self._equal(ctx_value, cond_value)
        if op is Operator.NOT_EQUAL:
            return not self._equal(ctx_value, cond_value)
        if op is Operator.IN:
            return self._in(ctx_value, cond_value)
        if op is Operator.NOT_IN:
            return not self._in(ctx_value, cond_value)
        if op in _ORDERING:
            return self._compare(ctx_value, cond_value, _ORDERING[op])
        if op is Operator.CONTAINS:
            return stringify(cond_value) in stringify(ctx_value)
        if op is Operator.STARTS_WITH:
            return stringify(ctx_value).startswith(stringify(cond_value))
        if op is Operator.ENDS_WITH:
            return stringify(ctx_value).endswith(stringify(cond_value))
        if op is Operator.REGEX:
            return self._regex(ctx_value, cond_value)
        raise FeatureFlagError(
            FeatureFlagErrorCodes.INVALID_OPERATOR,
            f"unsupported operator: {op!r}",
        )

    @staticmethod
    def _equal(ctx_value: object, cond_value: object) -> bool:
        return stringify(ctx_value) == stringify(cond_value)

    def _in(self, ctx_value: object, cond_value: object) -> bool:
        # リストでなければ単一値の等価比較
        if not isinstance(cond_value, (list, tuple)):
            return self._equal(ctx_value, cond_value)
        ctx_str = stringify(ctx_value)
        return any(stringify(item) == ctx_str for item in cond_value)

    @staticmethod
    def _compare(ctx_value: object, cond_value: object, compare: _Compare) -> bool:
        # どちらかが数値に変換できなければ文字列として辞書順比較する
        ctx_num = to_number(ctx_value)
        cond_num = to_number(cond_value)
        if ctx_num is None or cond_num is None:
            return compare(stringify(ctx_value), stringify(cond_value))
        return compare(ctx_num, cond_num)

    @staticmethod
    def _regex(ctx_value: object, cond_value: object) -> bool:
        pattern = stringify(cond_value)
        try:
            return re.search(pattern, stringify(ctx_value)) is not None
        except (re.error, OverflowError, RecursionError) as e:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_PATTERN,
                f"invalid regex pattern: {pattern!r}",
                cause=e,
            ) from e
