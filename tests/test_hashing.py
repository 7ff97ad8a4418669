"""ハッシュのユニットテスト"""

import pytest
from flagengine.hashing import FNVHasher, fnv1a_32


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (b"", 0x811C9DC5),
        (b"a", 0xE40C292C),
        (b"foobar", 0xBF9CF968),
    ],
)
def test_fnv1a_32_known_vectors(data: bytes, expected: int) -> None:
    """FNV-1a の既知のテストベクタと一致すること。"""
    assert fnv1a_32(data) == expected


def test_hash_is_deterministic() -> None:
    """同じ入力は常に同じバケットになること。"""
    hasher = FNVHasher()
    results = {hasher.hash("test:user123") for _ in range(10)}
    assert len(results) == 1


def test_hash_matches_fingerprint_modulo_100() -> None:
    """バケットは UTF-8 バイト列のフィンガープリントを 100 で割った余り。"""
    hasher = FNVHasher()
    assert hasher.hash("feature:ユーザー") == fnv1a_32("feature:ユーザー".encode()) % 100


def test_hash_range() -> None:
    """バケットは 0〜99 に収まること。"""
    hasher = FNVHasher()
    for i in range(1000):
        assert 0 <= hasher.hash(f"flag:user-{i}") < 100


def test_hash_distribution_covers_all_buckets() -> None:
    """十分な入力ですべてのバケットが使われること。"""
    hasher = FNVHasher()
    buckets = {hasher.hash(f"flag:user-{i}") for i in range(10_000)}
    assert buckets == set(range(100))
