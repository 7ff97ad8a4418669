"""ロールアウト戦略"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from .hashing import FNVHasher, Hasher
from .models import Flag
from .values import Context, context_or_empty, stringify


class RolloutKind(str, Enum):
    """ロールアウト戦略の種類。"""

    HASH = "hash"
    SWITCHBACK = "switchback"


class RolloutStrategy(ABC):
    """ロールアウト判定とバリアント選択の抽象基底クラス。

    実装は HashRolloutStrategy と SwitchbackRolloutStrategy の 2 種類のみ。
    どちらが有効かは kind で判別できる。
    """

    kind: RolloutKind

    @abstractmethod
    def should_rollout(self, flag: Flag, context: Context | None) -> bool:
        """フラグをこのコンテキストで有効にするか判定する。"""
        ...

    @abstractmethod
    def get_variant(self, flag: Flag, context: Context | None) -> str:
        """このコンテキストに割り当てるバリアント名を返す。"""
        ...


class HashRolloutStrategy(RolloutStrategy):
    """ロールアウトキーのハッシュによる決定的なロールアウト。

    同じフラグ名・同じキー値なら、プロセスをまたいでも常に同じ判定になる。
    """

    kind = RolloutKind.HASH

    def __init__(self, hasher: Hasher | None = None) -> None:
        self._hasher: Hasher = hasher or FNVHasher()

    def should_rollout(self, flag: Flag, context: Context | None) -> bool:
        if flag.rollout >= 100:
            return True
        if flag.rollout <= 0:
            return False

        context = context_or_empty(context)
        key = flag.get_rollout_key()
        if key not in context:
            # キーがなければ一貫した判定ができないので無効側に倒す
            return False

        bucket = self._hasher.hash(f"{flag.name}:{stringify(context[key])}")
        return bucket < flag.rollout

    def get_variant(self, flag: Flag, context: Context | None) -> str:
        if not flag.has_variants():
            return flag.default_variant

        context = context_or_empty(context)
        key = flag.get_rollout_key()
        if key not in context:
            return flag.default_variant

        bucket = self._hasher.hash(f"{flag.name}:variant:{stringify(context[key])}")
        cumulative = 0
        for variant in flag.variants:
            cumulative += variant.weight
            if bucket < cumulative:
                return variant.name

        # 重み合計が 100 未満で、割り当てのない範囲に入った
        return flag.default_variant
