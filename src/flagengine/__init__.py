"""flagengine: feature flag evaluation library."""

from .client import FeatureFlagClientProtocol
from .config import (
    ConditionConfig,
    FlagConfig,
    FlagsDocument,
    SwitchbackSection,
    VariantConfig,
)
from .evaluator import ConditionEvaluator
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .hashing import FNVHasher, Hasher, fnv1a_32
from .loader import build_store, load, load_flags, load_into_store, parse_json, parse_yaml
from .logger import new_logger
from .models import (
    DEFAULT_ROLLOUT_KEY,
    Condition,
    EvaluationReason,
    EvaluationResult,
    Flag,
    Variant,
)
from .operators import Operator
from .rollout import HashRolloutStrategy, RolloutKind, RolloutStrategy
from .store import VARIANT_OFF, VARIANT_ON, FlagStore
from .switchback import SwitchbackConfig, SwitchbackInfo, SwitchbackRolloutStrategy
from .values import AttributeValue, Context, stringify, to_number

__all__ = [
    "AttributeValue",
    "Condition",
    "ConditionConfig",
    "ConditionEvaluator",
    "Context",
    "DEFAULT_ROLLOUT_KEY",
    "EvaluationReason",
    "EvaluationResult",
    "FNVHasher",
    "FeatureFlagClientProtocol",
    "FeatureFlagError",
    "FeatureFlagErrorCodes",
    "Flag",
    "FlagConfig",
    "FlagStore",
    "FlagsDocument",
    "HashRolloutStrategy",
    "Hasher",
    "Operator",
    "RolloutKind",
    "RolloutStrategy",
    "SwitchbackConfig",
    "SwitchbackInfo",
    "SwitchbackRolloutStrategy",
    "SwitchbackSection",
    "VARIANT_OFF",
    "VARIANT_ON",
    "Variant",
    "VariantConfig",
    "build_store",
    "fnv1a_32",
    "load",
    "load_flags",
    "load_into_store",
    "new_logger",
    "parse_json",
    "parse_yaml",
    "stringify",
    "to_number",
]
