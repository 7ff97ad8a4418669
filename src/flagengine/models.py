"""フラグ定義と評価結果のデータモデル"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .operators import Operator
from .values import AttributeValue

DEFAULT_ROLLOUT_KEY = "user_id"


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


@dataclass(frozen=True)
class Condition:
    """属性に対する単一の条件。"""

    attribute: str
    operator: Operator | str
    value: AttributeValue = ""
    negate: bool = False

    def __post_init__(self) -> None:
        parsed = Operator.parse(self.operator)
        if parsed is not None:
            object.__setattr__(self, "operator", parsed)
        object.__setattr__(self, "value", _freeze(self.value))

    def validate(self) -> None:
        """条件の形式を検証する。"""
        if not self.attribute:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_CONDITION,
                "condition attribute must not be empty",
            )
        if not isinstance(self.operator, Operator):
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_OPERATOR,
                f"unsupported operator: {self.operator!r}",
            )

    def to_dict(self) -> dict[str, Any]:
        operator = self.operator.value if isinstance(self.operator, Operator) else self.operator
        return {
            "attribute": self.attribute,
            "operator": operator,
            "value": _thaw(self.value),
            "negate": self.negate,
        }


@dataclass(frozen=True)
class Variant:
    """A/B テストのバリアント。"""

    name: str
    weight: int = 0
    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "weight": self.weight,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass(frozen=True)
class Flag:
    """フィーチャーフラグ定義。

    variants を持つフラグは is_enabled では常に False となり、get_variant で評価する。
    バリアントの重み合計は 100 以下であればよく、残りのハッシュ空間は default_variant になる。
    """

    name: str
    enabled: bool = False
    rollout: int = 0
    rollout_key: str = DEFAULT_ROLLOUT_KEY
    conditions: tuple[Condition, ...] = ()
    variants: tuple[Variant, ...] = ()
    default_variant: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "variants", tuple(self.variants))

    def has_variants(self) -> bool:
        return len(self.variants) > 0

    def get_rollout_key(self) -> str:
        """ロールアウトのハッシュに使うコンテキストのキーを返す。"""
        return self.rollout_key or DEFAULT_ROLLOUT_KEY

    def validate(self) -> None:
        """フラグ定義を検証する。不正なら FeatureFlagError を送出する。"""
        if not self.name:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_FLAG,
                "flag name must not be empty",
            )
        if not 0 <= self.rollout <= 100:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_ROLLOUT,
                f"rollout must be between 0 and 100, got {self.rollout} ({self.name})",
            )
        for condition in self.conditions:
            condition.validate()

        total_weight = 0
        for variant in self.variants:
            if not variant.name:
                raise FeatureFlagError(
                    FeatureFlagErrorCodes.INVALID_FLAG,
                    f"variant name must not be empty ({self.name})",
                )
            if not 0 <= variant.weight <= 100:
                raise FeatureFlagError(
                    FeatureFlagErrorCodes.INVALID_ROLLOUT,
                    f"variant weight must be between 0 and 100, got {variant.weight} "
                    f"({self.name}/{variant.name})",
                )
            total_weight += variant.weight
            for condition in variant.conditions:
                condition.validate()

        if total_weight > 100:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.INVALID_ROLLOUT,
                f"sum of variant weights must not exceed 100, got {total_weight} ({self.name})",
            )

    def to_dict(self) -> dict[str, Any]:
        """設定ファイルと同じフィールド名の辞書に変換する。"""
        return {
            "name": self.name,
            "enabled": self.enabled,
            "rollout": self.rollout,
            "rollout_key": self.rollout_key,
            "conditions": [c.to_dict() for c in self.conditions],
            "variants": [v.to_dict() for v in self.variants],
            "default_variant": self.default_variant,
        }


class EvaluationReason(str, Enum):
    """評価結果の理由。"""

    FLAG_DISABLED = "FLAG_DISABLED"
    CONDITIONS_NOT_MET = "CONDITIONS_NOT_MET"
    VARIANTS_CONFIGURED = "VARIANTS_CONFIGURED"
    ROLLOUT_MATCHED = "ROLLOUT_MATCHED"
    ROLLOUT_NOT_MATCHED = "ROLLOUT_NOT_MATCHED"
    VARIANT_ASSIGNED = "VARIANT_ASSIGNED"
    VARIANT_CONDITIONS_NOT_MET = "VARIANT_CONDITIONS_NOT_MET"
    DEFAULT_VARIANT = "DEFAULT_VARIANT"


@dataclass
class EvaluationResult:
    """フラグ評価結果。"""

    flag_key: str
    enabled: bool
    variant: str
    reason: EvaluationReason
