"""flagengine の例外型定義"""

from __future__ import annotations


class FeatureFlagError(Exception):
    """flagengine のエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class FeatureFlagErrorCodes:
    """エラーコード定数。"""

    # 設定エラー
    INVALID_FLAG: str = "INVALID_FLAG"
    INVALID_ROLLOUT: str = "INVALID_ROLLOUT"
    INVALID_CONDITION: str = "INVALID_CONDITION"
    INVALID_OPERATOR: str = "INVALID_OPERATOR"
    INVALID_CONFIG: str = "INVALID_CONFIG"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_JSON: str = "PARSE_JSON_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"
    UNSUPPORTED_FORMAT: str = "UNSUPPORTED_FORMAT"

    # 参照エラー
    FLAG_NOT_FOUND: str = "FLAG_NOT_FOUND"

    # 評価エラー
    INVALID_PATTERN: str = "INVALID_PATTERN"
    SWITCHBACK_NOT_STARTED: str = "SWITCHBACK_NOT_STARTED"
