"""ハッシュロールアウト戦略のユニットテスト"""

import pytest
from flagengine import FNVHasher, Flag, HashRolloutStrategy, RolloutKind, Variant


class RecordingHasher:
    """固定バケットを返し、ハッシュ入力を記録するハッシャー。"""

    def __init__(self, bucket: int) -> None:
        self.bucket = bucket
        self.inputs: list[str] = []

    def hash(self, s: str) -> int:
        self.inputs.append(s)
        return self.bucket


def test_kind_is_hash() -> None:
    assert HashRolloutStrategy().kind is RolloutKind.HASH


def test_full_rollout_skips_hashing() -> None:
    """rollout=100 はハッシュせずに常に True。"""
    hasher = RecordingHasher(99)
    strategy = HashRolloutStrategy(hasher)
    assert strategy.should_rollout(Flag(name="f", rollout=100), {}) is True
    assert hasher.inputs == []


def test_zero_rollout_is_false() -> None:
    """rollout=0 は常に False。"""
    strategy = HashRolloutStrategy(RecordingHasher(0))
    assert strategy.should_rollout(Flag(name="f", rollout=0), {"user_id": "u1"}) is False


def test_missing_rollout_key_is_false() -> None:
    """ロールアウトキーがなければ False。"""
    strategy = HashRolloutStrategy(RecordingHasher(0))
    assert strategy.should_rollout(Flag(name="f", rollout=50), {"org_id": "o1"}) is False


@pytest.mark.parametrize(("bucket", "expected"), [(0, True), (49, True), (50, False), (99, False)])
def test_bucket_compared_with_rollout(bucket: int, expected: bool) -> None:
    """バケットが rollout 未満なら True。"""
    hasher = RecordingHasher(bucket)
    strategy = HashRolloutStrategy(hasher)
    assert strategy.should_rollout(Flag(name="checkout", rollout=50), {"user_id": 42}) is expected
    assert hasher.inputs == ["checkout:42"]


def test_custom_rollout_key() -> None:
    """rollout_key で指定した属性をハッシュすること。"""
    hasher = RecordingHasher(0)
    strategy = HashRolloutStrategy(hasher)
    flag = Flag(name="org_flag", rollout=10, rollout_key="org_id")
    assert strategy.should_rollout(flag, {"user_id": "u1", "org_id": "acme"}) is True
    assert hasher.inputs == ["org_flag:acme"]


def test_distribution_converges_to_rollout() -> None:
    """多数の ID で有効率が rollout に収束すること。"""
    strategy = HashRolloutStrategy()
    flag = Flag(name="new_checkout", rollout=50)
    enabled = sum(
        strategy.should_rollout(flag, {"user_id": f"user-{i}"}) for i in range(10_000)
    )
    assert 4_500 <= enabled <= 5_500


def test_should_rollout_is_deterministic() -> None:
    """同じ ID は常に同じ判定になること。"""
    flag = Flag(name="new_checkout", rollout=30)
    for i in range(200):
        context = {"user_id": f"user-{i}"}
        first = HashRolloutStrategy().should_rollout(flag, context)
        assert all(HashRolloutStrategy().should_rollout(flag, context) is first for _ in range(3))


def test_variant_without_variants_returns_default() -> None:
    strategy = HashRolloutStrategy(RecordingHasher(0))
    assert strategy.get_variant(Flag(name="f", default_variant="off"), {"user_id": "u"}) == "off"


def test_variant_missing_key_returns_default() -> None:
    flag = Flag(name="f", variants=[Variant("a", 100)], default_variant="control")
    assert HashRolloutStrategy(RecordingHasher(0)).get_variant(flag, {}) == "control"


@pytest.mark.parametrize(
    ("bucket", "expected"),
    [(0, "a"), (29, "a"), (30, "b"), (79, "b"), (80, "default"), (99, "default")],
)
def test_variant_cumulative_weights(bucket: int, expected: str) -> None:
    """累積重みでバリアントを選び、割り当てのない範囲は default_variant。"""
    hasher = RecordingHasher(bucket)
    flag = Flag(
        name="exp",
        variants=[Variant("a", 30), Variant("b", 50)],
        default_variant="default",
    )
    assert HashRolloutStrategy(hasher).get_variant(flag, {"user_id": "u7"}) == expected
    assert hasher.inputs == ["exp:variant:u7"]


def test_variant_assignment_is_deterministic() -> None:
    """同じ ID には常に同じバリアントが割り当てられること。"""
    flag = Flag(
        name="pricing",
        variants=[Variant("control", 34), Variant("a", 33), Variant("b", 33)],
        default_variant="control",
    )
    strategy = HashRolloutStrategy()
    for i in range(200):
        context = {"user_id": i}
        assert strategy.get_variant(flag, context) == strategy.get_variant(flag, context)


def test_variant_uses_fnv_bucket_by_default() -> None:
    """デフォルトのハッシャーは FNV-1a。"""
    flag = Flag(name="pricing", variants=[Variant("a", 50), Variant("b", 50)])
    bucket = FNVHasher().hash("pricing:variant:user-1")
    expected = "a" if bucket < 50 else "b"
    assert HashRolloutStrategy().get_variant(flag, {"user_id": "user-1"}) == expected


def test_none_context_is_empty() -> None:
    """None のコンテキストはキーなしとして扱うこと。"""
    hasher = RecordingHasher(0)
    strategy = HashRolloutStrategy(hasher)
    flag = Flag(
        name="f",
        rollout=50,
        variants=[Variant("a", 100)],
        default_variant="a_default",
    )
    assert strategy.should_rollout(flag, None) is False
    assert strategy.get_variant(flag, None) == "a_default"
    assert hasher.inputs == []
