"""フラグ設定ファイル（JSON / YAML）の読み込み"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .config import FlagsDocument
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import Flag
from .store import FlagStore
from .switchback import Clock, SwitchbackRolloutStrategy

logger = structlog.get_logger(__name__)

_JSON_SUFFIXES = frozenset({".json"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _validate(data: Any, source: str) -> FlagsDocument:
    try:
        return FlagsDocument.model_validate(data)
    except ValidationError as e:
        raise FeatureFlagError(
            code=FeatureFlagErrorCodes.VALIDATION,
            message=f"Flag config validation failed: {source}: {e}",
            cause=e,
        ) from e


def parse_json(text: str, source: str = "<string>") -> FlagsDocument:
    """JSON 文字列をパースして FlagsDocument を返す。"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FeatureFlagError(
            code=FeatureFlagErrorCodes.PARSE_JSON,
            message=f"Failed to parse JSON: {source}",
            cause=e,
        ) from e
    return _validate(data, source)


def parse_yaml(text: str, source: str = "<string>") -> FlagsDocument:
    """YAML 文字列をパースして FlagsDocument を返す。"""
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise FeatureFlagError(
            code=FeatureFlagErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {source}",
            cause=e,
        ) from e
    return _validate(data, source)


def load(path: Path) -> FlagsDocument:
    """設定ファイルを読み込む。形式は拡張子（.json / .yaml / .yml）で判定する。"""
    suffix = path.suffix.lower()
    if suffix not in _JSON_SUFFIXES | _YAML_SUFFIXES:
        raise FeatureFlagError(
            code=FeatureFlagErrorCodes.UNSUPPORTED_FORMAT,
            message=f"Unsupported config format: {path}",
        )
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FeatureFlagError(
            code=FeatureFlagErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    if suffix in _JSON_SUFFIXES:
        return parse_json(text, str(path))
    return parse_yaml(text, str(path))


def to_flags(document: FlagsDocument) -> list[Flag]:
    """FlagsDocument を検証済みの Flag リストに変換する。"""
    flags = [config.to_flag() for config in document.flags]
    for flag in flags:
        flag.validate()
    return flags


def load_flags(path: Path) -> list[Flag]:
    """設定ファイルから検証済みの Flag リストを読み込む。"""
    flags = to_flags(load(path))
    logger.info("flags loaded", path=str(path), count=len(flags))
    return flags


def load_into_store(path: Path, store: FlagStore) -> list[Flag]:
    """設定ファイルのフラグをストアに追加する。1 つでも不正ならどれも追加しない。"""
    flags = load_flags(path)
    store.add_flags(flags)
    return flags


def build_store(path: Path, clock: Clock | None = None) -> FlagStore:
    """設定ファイルから FlagStore を作る。

    switchback セクションがあればスイッチバック戦略、なければハッシュ戦略を使う。
    clock はスイッチバック戦略の現在時刻取得関数（テスト用）。
    """
    document = load(path)
    flags = to_flags(document)
    if document.switchback is not None:
        store = FlagStore(SwitchbackRolloutStrategy(document.switchback.to_config(), clock))
    else:
        store = FlagStore()
    store.add_flags(flags)
    logger.info(
        "flag store built",
        path=str(path),
        count=len(flags),
        strategy=store.strategy.kind.value,
    )
    return store
