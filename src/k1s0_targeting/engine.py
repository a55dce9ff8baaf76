"""TargetingEngine: 条件評価とデシジョン構築の窓口"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import structlog

from .config import EngineConfig
from .context import DecisionContext, ForcedDecision, ForcedDecisionStore
from .decision import DecisionVariables, FlagDecision
from .logger import logger_from_config
from .matchers import Matcher
from .models import CUSTOM_ATTRIBUTE_CONDITION_TYPE, AttributeCondition, Ternary, Variation
from .reasons import DecideOption, DecisionMessages, DecisionReasons
from .registry import MatchRegistry, default_registry


class TargetingEngine:
    """ターゲティング条件の評価エンジン。

    マッチレジストリとフォースドデシジョンストアはインスタンスごとに保持するため、
    異なる設定のエンジンを同一プロセス内で共存させられる。
    logger を渡さずに config を渡した場合は config.log からロガーを構成する。
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        registry: MatchRegistry | None = None,
        forced_decisions: ForcedDecisionStore | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._config = config if config is not None else EngineConfig()
        self._registry = registry if registry is not None else default_registry()
        self._forced_decisions = (
            forced_decisions if forced_decisions is not None else ForcedDecisionStore()
        )
        if logger is None:
            logger = (
                logger_from_config(config.log)
                if config is not None
                else structlog.stdlib.get_logger(__name__)
            )
        self._logger = logger

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def registry(self) -> MatchRegistry:
        return self._registry

    @property
    def forced_decisions(self) -> ForcedDecisionStore:
        return self._forced_decisions

    # --- 条件評価 ---

    def evaluate(self, match_type: str | None, condition_value: Any, attribute_value: Any) -> Ternary:
        """マッチタイプに対応する戦略で条件値と属性値を比較する。

        Raises:
            UnknownMatchTypeError: match_type が登録されていない場合
            MalformedConditionError: 条件値がマッチ戦略の想定する型でない場合
        """
        matcher = self._registry.lookup(match_type)
        return matcher.eval(condition_value, attribute_value)

    def register_matcher(self, name: str, matcher: Matcher) -> None:
        self._registry.register(name, matcher)
        self._logger.debug("matcher registered", match_type=name)

    def evaluate_condition(
        self,
        condition: AttributeCondition,
        attributes: Mapping[str, Any] | None,
        reasons: DecisionReasons | None = None,
    ) -> Ternary:
        """単一のオーディエンス条件をユーザー属性に対して評価する。

        UNKNOWN になった理由はログとデシジョン理由に残す。
        """
        attributes = attributes or {}
        reasons = reasons if reasons is not None else DecisionReasons()

        if condition.type != CUSTOM_ATTRIBUTE_CONDITION_TYPE:
            message = reasons.add_info(
                'Audience condition "{0}" uses an unknown condition type. '
                "You may need to upgrade to a newer release of k1s0-targeting.",
                condition,
            )
            self._logger.warning(message, condition_type=condition.type)
            return Ternary.UNKNOWN

        attribute_value = attributes.get(condition.name)
        result = self.evaluate(condition.match, condition.value, attribute_value)
        if result is not Ternary.UNKNOWN:
            return result

        if condition.name not in attributes:
            message = reasons.add_info(
                'Audience condition "{0}" evaluated to UNKNOWN because no value was passed '
                'for user attribute "{1}".',
                condition,
                condition.name,
            )
            self._logger.debug(message)
        elif attribute_value is None:
            message = reasons.add_info(
                'Audience condition "{0}" evaluated to UNKNOWN because a null value was passed '
                'for user attribute "{1}".',
                condition,
                condition.name,
            )
            self._logger.debug(message)
        else:
            message = reasons.add_info(
                'Audience condition "{0}" evaluated to UNKNOWN because a value of type "{1}" '
                'was passed for user attribute "{2}".',
                condition,
                type(attribute_value).__name__,
                condition.name,
            )
            self._logger.warning(message)
        return Ternary.UNKNOWN

    # --- フォースドデシジョン ---

    def set_forced_decision(self, context: DecisionContext, decision: ForcedDecision) -> None:
        self._forced_decisions.set(context, decision)

    def get_forced_decision(self, context: DecisionContext) -> ForcedDecision | None:
        return self._forced_decisions.get(context)

    def remove_forced_decision(self, context: DecisionContext) -> bool:
        return self._forced_decisions.remove(context)

    def find_forced_variation(
        self,
        context: DecisionContext,
        variations: Iterable[Variation],
        reasons: DecisionReasons | None = None,
    ) -> Variation | None:
        """フォースドデシジョンをフラグのバリエーションに解決する。

        オーディエンス評価やバケッティングより前に呼び出すこと。
        該当するフォースドデシジョンがない、またはバリエーションが存在しない場合は None を返す。
        """
        forced = self._forced_decisions.get(context)
        if forced is None:
            return None

        reasons = reasons if reasons is not None else DecisionReasons()
        rule_key = context.rule_key if context.rule_key is not None else "null"
        by_key = {variation.key: variation for variation in variations}
        variation = by_key.get(forced.variation_key)
        if variation is None:
            message = reasons.add_info(
                DecisionMessages.FORCED_VARIATION_INVALID, context.flag_key, rule_key
            )
            self._logger.info(message)
            return None

        message = reasons.add_info(
            DecisionMessages.FORCED_VARIATION_MAPPED,
            variation.key,
            context.flag_key,
            rule_key,
        )
        self._logger.info(message)
        return variation

    def decide_forced(
        self,
        flag_key: str,
        rule_key: str | None,
        variations: Iterable[Variation],
        options: Iterable[DecideOption] | None = None,
    ) -> FlagDecision | None:
        """フォースドデシジョンがあればそのバリエーションでデシジョンを返す。

        None の場合、呼び出し側は通常のオーディエンス評価に進む。
        """
        resolved_options = self.resolve_options(options)
        reasons = DecisionReasons.new_instance(resolved_options)
        variation = self.find_forced_variation(
            DecisionContext(flag_key, rule_key), variations, reasons
        )
        if variation is None:
            return None

        variables = (
            {} if DecideOption.EXCLUDE_VARIABLES in resolved_options else variation.variables
        )
        return FlagDecision.build(
            variation_key=variation.key,
            enabled=variation.feature_enabled,
            variables=variables,
            rule_key=rule_key,
            flag_key=flag_key,
            reasons=reasons,
        )

    # --- デシジョン構築 ---

    def resolve_options(self, options: Iterable[DecideOption] | None = None) -> set[DecideOption]:
        """設定のデフォルトオプションと呼び出しごとのオプションを合成する。"""
        return set(self._config.decisions.default_options) | set(options or ())

    def new_reasons(self, options: Iterable[DecideOption] | None = None) -> DecisionReasons:
        return DecisionReasons.new_instance(self.resolve_options(options))

    def build_decision(
        self,
        variation_key: str | None,
        enabled: bool,
        variables: DecisionVariables | Mapping[str, Any] | None,
        rule_key: str | None,
        flag_key: str,
        reasons: DecisionReasons | Sequence[str] | None = None,
    ) -> FlagDecision:
        return FlagDecision.build(variation_key, enabled, variables, rule_key, flag_key, reasons)

    def new_error_decision(self, flag_key: str, error_message: str) -> FlagDecision:
        self._logger.error("decision failed", flag_key=flag_key, reason=error_message)
        return FlagDecision.new_error_decision(flag_key, error_message)
