"""ロールアウト判定用のハッシュ"""

from __future__ import annotations

from typing import Protocol

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF

BUCKET_COUNT = 100


def fnv1a_32(data: bytes) -> int:
    """32bit FNV-1a ハッシュ値を返す。"""
    h = _FNV32_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * _FNV32_PRIME) & _MASK32
    return h


class Hasher(Protocol):
    """文字列を 0〜99 のバケットに割り当てるハッシャープロトコル。"""

    def hash(self, s: str) -> int: ...


class FNVHasher:
    """FNV-1a による決定的ハッシャー。プロセスやプラットフォームに依存しない。"""

    def hash(self, s: str) -> int:
        return fnv1a_32(s.encode("utf-8")) % BUCKET_COUNT
