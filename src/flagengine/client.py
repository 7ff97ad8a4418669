"""FeatureFlagClient プロトコル"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import EvaluationResult, Flag
from .values import Context


@runtime_checkable
class FeatureFlagClientProtocol(Protocol):
    """フィーチャーフラグクライアントプロトコル。"""

    def evaluate(self, name: str, context: Context | None = None) -> EvaluationResult: ...

    def get_flag(self, name: str) -> Flag: ...

    def is_enabled(self, name: str, context: Context | None = None) -> bool: ...

    def get_variant(self, name: str, context: Context | None = None) -> tuple[str, bool]: ...
