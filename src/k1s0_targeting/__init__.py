"""k1s0 targeting library."""

from .comparator import compare_numbers, is_numeric
from .config import DecisionSection, EngineConfig, LogSection, load_config
from .context import NULL_RULE_KEY, DecisionContext, ForcedDecision, ForcedDecisionStore
from .decision import DecisionVariables, FlagDecision
from .engine import TargetingEngine
from .exceptions import (
    MalformedConditionError,
    TargetingError,
    TargetingErrorCodes,
    UnknownMatchTypeError,
)
from .logger import logger_from_config, new_logger
from .matchers import (
    ExactMatcher,
    ExistsMatcher,
    GreaterOrEqualMatcher,
    GreaterThanMatcher,
    LegacyMatcher,
    LessOrEqualMatcher,
    LessThanMatcher,
    Matcher,
    SemverMatcher,
    SubstringMatcher,
)
from .models import AttributeCondition, Ternary, Variation
from .reasons import DecideOption, DecisionMessages, DecisionReasons
from .registry import MatchRegistry, MatchTypes, default_registry
from .semver import compare_versions

__all__ = [
    "AttributeCondition",
    "DecideOption",
    "DecisionContext",
    "DecisionMessages",
    "DecisionReasons",
    "DecisionSection",
    "DecisionVariables",
    "EngineConfig",
    "ExactMatcher",
    "ExistsMatcher",
    "FlagDecision",
    "ForcedDecision",
    "ForcedDecisionStore",
    "GreaterOrEqualMatcher",
    "GreaterThanMatcher",
    "LegacyMatcher",
    "LessOrEqualMatcher",
    "LessThanMatcher",
    "LogSection",
    "MalformedConditionError",
    "MatchRegistry",
    "MatchTypes",
    "Matcher",
    "NULL_RULE_KEY",
    "SemverMatcher",
    "SubstringMatcher",
    "TargetingEngine",
    "TargetingError",
    "TargetingErrorCodes",
    "Ternary",
    "UnknownMatchTypeError",
    "Variation",
    "compare_numbers",
    "compare_versions",
    "default_registry",
    "is_numeric",
    "load_config",
    "logger_from_config",
    "new_logger",
]
