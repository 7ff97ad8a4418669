"""設定ファイルのスキーマ（pydantic BaseModel）"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .models import DEFAULT_ROLLOUT_KEY, Condition, Flag, Variant
from .operators import Operator
from .switchback import SwitchbackConfig


class ConditionConfig(BaseModel):
    """条件設定。"""

    attribute: str = Field(min_length=1)
    operator: Operator
    value: Any = ""
    negate: bool = False

    def to_condition(self) -> Condition:
        return Condition(
            attribute=self.attribute,
            operator=self.operator,
            value=self.value,
            negate=self.negate,
        )


class VariantConfig(BaseModel):
    """バリアント設定。"""

    name: str = Field(min_length=1)
    weight: int = Field(default=0, ge=0, le=100)
    conditions: list[ConditionConfig] = Field(default_factory=list)

    def to_variant(self) -> Variant:
        return Variant(
            name=self.name,
            weight=self.weight,
            conditions=tuple(c.to_condition() for c in self.conditions),
        )


class FlagConfig(BaseModel):
    """フラグ設定。"""

    name: str = Field(min_length=1)
    enabled: bool = False
    rollout: int = Field(default=0, ge=0, le=100)
    rollout_key: str = DEFAULT_ROLLOUT_KEY
    conditions: list[ConditionConfig] = Field(default_factory=list)
    variants: list[VariantConfig] = Field(default_factory=list)
    default_variant: str = ""

    def to_flag(self) -> Flag:
        return Flag(
            name=self.name,
            enabled=self.enabled,
            rollout=self.rollout,
            rollout_key=self.rollout_key,
            conditions=tuple(c.to_condition() for c in self.conditions),
            variants=tuple(v.to_variant() for v in self.variants),
            default_variant=self.default_variant,
        )


class SwitchbackSection(BaseModel):
    """スイッチバック設定。"""

    interval_minutes: int = Field(default=30, ge=1)
    start_time: datetime | None = None
    daily_swap: bool = False

    def to_config(self) -> SwitchbackConfig:
        return SwitchbackConfig(
            interval_minutes=self.interval_minutes,
            start_time=self.start_time,
            daily_swap=self.daily_swap,
        )


class FlagsDocument(BaseModel):
    """フラグ設定ファイル全体。"""

    flags: list[FlagConfig] = Field(default_factory=list)
    switchback: SwitchbackSection | None = None
