"""データモデルと検証のユニットテスト"""

import dataclasses

import pytest
from flagengine import (
    Condition,
    FeatureFlagError,
    FeatureFlagErrorCodes,
    Flag,
    Operator,
    Variant,
)


def test_condition_parses_operator_token() -> None:
    """演算子の表記が Operator に変換されること。"""
    condition = Condition(attribute="country", operator="in", value=["US", "CA"])
    assert condition.operator is Operator.IN
    assert condition.value == ("US", "CA")


def test_condition_unknown_operator_is_invalid() -> None:
    """未知の演算子は INVALID_OPERATOR。"""
    condition = Condition(attribute="plan", operator="like", value="pro")
    with pytest.raises(FeatureFlagError) as exc_info:
        condition.validate()
    assert exc_info.value.code == FeatureFlagErrorCodes.INVALID_OPERATOR


def test_condition_empty_attribute_is_invalid() -> None:
    """属性名が空なら INVALID_CONDITION。"""
    with pytest.raises(FeatureFlagError) as exc_info:
        Condition(attribute="", operator=Operator.EQUAL, value="x").validate()
    assert exc_info.value.code == FeatureFlagErrorCodes.INVALID_CONDITION


def test_flag_defaults() -> None:
    """Flag のデフォルト値。"""
    flag = Flag(name="f")
    assert flag.enabled is False
    assert flag.rollout == 0
    assert flag.get_rollout_key() == "user_id"
    assert flag.has_variants() is False


def test_empty_rollout_key_falls_back_to_user_id() -> None:
    """rollout_key が空なら user_id を使うこと。"""
    assert Flag(name="f", rollout_key="").get_rollout_key() == "user_id"
    assert Flag(name="f", rollout_key="org_id").get_rollout_key() == "org_id"


def test_flag_is_immutable() -> None:
    """Flag は変更できないこと。"""
    flag = Flag(name="f", conditions=[Condition("a", "==", 1)])
    assert isinstance(flag.conditions, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        flag.enabled = True  # type: ignore[misc]


@pytest.mark.parametrize(
    ("flag", "code"),
    [
        (Flag(name=""), FeatureFlagErrorCodes.INVALID_FLAG),
        (Flag(name="f", rollout=150), FeatureFlagErrorCodes.INVALID_ROLLOUT),
        (Flag(name="f", rollout=-1), FeatureFlagErrorCodes.INVALID_ROLLOUT),
        (
            Flag(name="f", conditions=[Condition("", "==", "x")]),
            FeatureFlagErrorCodes.INVALID_CONDITION,
        ),
        (
            Flag(name="f", variants=[Variant("a", 60), Variant("b", 50)]),
            FeatureFlagErrorCodes.INVALID_ROLLOUT,
        ),
        (
            Flag(name="f", variants=[Variant("a", 101)]),
            FeatureFlagErrorCodes.INVALID_ROLLOUT,
        ),
        (
            Flag(name="f", variants=[Variant("a", 50, [Condition("x", "~=", 1)])]),
            FeatureFlagErrorCodes.INVALID_OPERATOR,
        ),
        (Flag(name="f", variants=[Variant("", 50)]), FeatureFlagErrorCodes.INVALID_FLAG),
    ],
)
def test_flag_validation_errors(flag: Flag, code: str) -> None:
    """不正なフラグ定義はエラーコード付きで拒否されること。"""
    with pytest.raises(FeatureFlagError) as exc_info:
        flag.validate()
    assert exc_info.value.code == code


def test_variant_weights_below_100_are_valid() -> None:
    """重み合計が 100 未満でも有効であること。"""
    Flag(name="f", variants=[Variant("a", 30), Variant("b", 30)]).validate()


def test_flag_to_dict_uses_wire_field_names() -> None:
    """to_dict は設定ファイルのフィールド名を使うこと。"""
    flag = Flag(
        name="pricing",
        enabled=True,
        rollout=20,
        conditions=[Condition("country", Operator.IN, ["US", "CA"], negate=True)],
        variants=[Variant("control", 50), Variant("treatment", 50)],
        default_variant="control",
    )
    assert flag.to_dict() == {
        "name": "pricing",
        "enabled": True,
        "rollout": 20,
        "rollout_key": "user_id",
        "conditions": [
            {"attribute": "country", "operator": "in", "value": ["US", "CA"], "negate": True}
        ],
        "variants": [
            {"name": "control", "weight": 50, "conditions": []},
            {"name": "treatment", "weight": 50, "conditions": []},
        ],
        "default_variant": "control",
    }


def test_error_str_includes_code() -> None:
    """FeatureFlagError の文字列表現にコードが含まれること。"""
    error = FeatureFlagError(FeatureFlagErrorCodes.FLAG_NOT_FOUND, "flag not found: x")
    assert str(error) == "FLAG_NOT_FOUND: flag not found: x"
