"""FlagStore: スレッドセーフなフラグレジストリと評価"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType

import structlog

from .evaluator import ConditionEvaluator
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import EvaluationReason, EvaluationResult, Flag
from .rollout import HashRolloutStrategy, RolloutStrategy
from .switchback import SwitchbackInfo, SwitchbackRolloutStrategy
from .values import Context, context_or_empty

logger = structlog.get_logger(__name__)

VARIANT_ON = "on"
VARIANT_OFF = "off"


class FlagStore:
    """フラグ定義を保持し、評価クエリに答えるレジストリ。

    更新はロックで直列化し、新しい辞書を作って参照を差し替える。
    読み取り側はロックを取らず、取得した時点のスナップショットに対して評価する。
    Flag は不変なので、評価中に更新が入っても評価中のフラグは変わらない。
    """

    def __init__(
        self,
        strategy: RolloutStrategy | None = None,
        evaluator: ConditionEvaluator | None = None,
    ) -> None:
        self._lock = threading.Lock()
        self._flags: Mapping[str, Flag] = MappingProxyType({})
        self._strategy: RolloutStrategy = strategy or HashRolloutStrategy()
        self._evaluator = evaluator or ConditionEvaluator()

    @property
    def strategy(self) -> RolloutStrategy:
        """有効なロールアウト戦略。"""
        return self._strategy

    # ------------------------------------------------------------
    # レジストリ操作
    # ------------------------------------------------------------

    def add_flag(self, flag: Flag) -> None:
        """フラグを検証して追加する。同名のフラグは置き換える。

        Raises:
            FeatureFlagError: フラグ定義が不正な場合（ストアは変更されない）
        """
        flag.validate()
        with self._lock:
            flags = dict(self._flags)
            flags[flag.name] = flag
            self._flags = MappingProxyType(flags)
        logger.debug("flag added", flag=flag.name)

    def add_flags(self, flags: Iterable[Flag]) -> None:
        """複数のフラグを追加する。1 つでも不正ならどれも追加しない。"""
        validated = list(flags)
        for flag in validated:
            flag.validate()
        with self._lock:
            merged = dict(self._flags)
            for flag in validated:
                merged[flag.name] = flag
            self._flags = MappingProxyType(merged)
        logger.debug("flags added", count=len(validated))

    def get_flag(self, name: str) -> Flag:
        """名前でフラグを取得する。

        Raises:
            FeatureFlagError: フラグが存在しない場合
        """
        flag = self._flags.get(name)
        if flag is None:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.FLAG_NOT_FOUND,
                f"flag not found: {name}",
            )
        return flag

    def remove_flag(self, name: str) -> bool:
        """フラグを削除する。削除できたら True。"""
        with self._lock:
            if name not in self._flags:
                return False
            flags = dict(self._flags)
            del flags[name]
            self._flags = MappingProxyType(flags)
        logger.debug("flag removed", flag=name)
        return True

    def clear(self) -> None:
        """すべてのフラグを削除する。"""
        with self._lock:
            self._flags = MappingProxyType({})
        logger.debug("flags cleared")

    def list_flags(self) -> list[str]:
        """フラグ名をソートして返す。"""
        return sorted(self._flags)

    def count(self) -> int:
        return len(self._flags)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    # ------------------------------------------------------------
    # 評価
    # ------------------------------------------------------------

    def is_enabled(self, name: str, context: Context | None = None) -> bool:
        """フラグが有効か判定する。エラーは記録して False を返す。"""
        flag = self._flags.get(name)
        if flag is None:
            logger.warning("flag not found", flag=name)
            return False
        try:
            return self._check_enabled(flag, context_or_empty(context)).enabled
        except FeatureFlagError as e:
            logger.warning("flag evaluation failed", flag=name, code=e.code, error=str(e))
            return False

    def is_enabled_strict(self, name: str, context: Context | None = None) -> bool:
        """is_enabled と同じ判定を行い、エラーはそのまま送出する。"""
        flag = self.get_flag(name)
        return self._check_enabled(flag, context_or_empty(context)).enabled

    def get_variant(self, name: str, context: Context | None = None) -> tuple[str, bool]:
        """バリアント名と有効かどうかを返す。エラー時は (default_variant, False)。"""
        flag = self._flags.get(name)
        if flag is None:
            logger.warning("flag not found", flag=name)
            return "", False
        try:
            result = self._evaluate_variant(flag, context_or_empty(context))
        except FeatureFlagError as e:
            logger.warning("flag evaluation failed", flag=name, code=e.code, error=str(e))
            return flag.default_variant, False
        return result.variant, result.enabled

    def get_variant_strict(self, name: str, context: Context | None = None) -> tuple[str, bool]:
        """get_variant と同じ判定を行い、エラーはそのまま送出する。"""
        result = self.evaluate(name, context)
        return result.variant, result.enabled

    def evaluate(self, name: str, context: Context | None = None) -> EvaluationResult:
        """バリアントを評価し、理由付きの結果を返す。

        Raises:
            FeatureFlagError: フラグが存在しない場合、または条件評価に失敗した場合
        """
        flag = self.get_flag(name)
        return self._evaluate_variant(flag, context_or_empty(context))

    def switchback_info(self) -> SwitchbackInfo | None:
        """スイッチバック戦略の現在状態。ハッシュ戦略なら None。"""
        if isinstance(self._strategy, SwitchbackRolloutStrategy):
            return self._strategy.info()
        return None

    def _check_enabled(self, flag: Flag, context: Context) -> EvaluationResult:
        if not flag.enabled:
            return self._result(flag, False, VARIANT_OFF, EvaluationReason.FLAG_DISABLED)
        # バリアント付きフラグは get_variant で評価する
        if flag.has_variants():
            return self._result(flag, False, VARIANT_OFF, EvaluationReason.VARIANTS_CONFIGURED)
        if not self._evaluator.evaluate_all(flag.conditions, context):
            return self._result(flag, False, VARIANT_OFF, EvaluationReason.CONDITIONS_NOT_MET)
        return self._rollout(flag, context)

    def _evaluate_variant(self, flag: Flag, context: Context) -> EvaluationResult:
        if not flag.enabled:
            return self._result(
                flag, False, flag.default_variant, EvaluationReason.FLAG_DISABLED
            )
        if not self._evaluator.evaluate_all(flag.conditions, context):
            return self._result(
                flag, False, flag.default_variant, EvaluationReason.CONDITIONS_NOT_MET
            )
        if not flag.has_variants():
            return self._rollout(flag, context)

        name = self._strategy.get_variant(flag, context)
        variant = next((v for v in flag.variants if v.name == name), None)
        if variant is None:
            return self._result(
                flag, False, flag.default_variant, EvaluationReason.DEFAULT_VARIANT
            )
        if variant.conditions and not self._evaluator.evaluate_all(variant.conditions, context):
            return self._result(
                flag, False, flag.default_variant, EvaluationReason.VARIANT_CONDITIONS_NOT_MET
            )
        return self._result(flag, True, variant.name, EvaluationReason.VARIANT_ASSIGNED)

    def _rollout(self, flag: Flag, context: Context) -> EvaluationResult:
        if self._strategy.should_rollout(flag, context):
            return self._result(flag, True, VARIANT_ON, EvaluationReason.ROLLOUT_MATCHED)
        return self._result(flag, False, VARIANT_OFF, EvaluationReason.ROLLOUT_NOT_MATCHED)

    @staticmethod
    def _result(
        flag: Flag, enabled: bool, variant: str, reason: EvaluationReason
    ) -> EvaluationResult:
        return EvaluationResult(flag_key=flag.name, enabled=enabled, variant=variant, reason=reason)
