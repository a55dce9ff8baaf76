"""TargetingEngine のユニットテスト"""

from typing import Any

import pytest
import structlog
from k1s0_targeting import (
    AttributeCondition,
    DecideOption,
    DecisionContext,
    DecisionReasons,
    DecisionSection,
    EngineConfig,
    LogSection,
    ForcedDecision,
    ForcedDecisionStore,
    MalformedConditionError,
    MatchRegistry,
    TargetingEngine,
    Ternary,
    UnknownMatchTypeError,
    Variation,
)

VARIATIONS = [
    Variation(key="control", id="1", feature_enabled=False, variables={"color": "blue"}),
    Variation(key="treatment", id="2", feature_enabled=True, variables={"color": "red"}),
]


class RecordingMatcher:
    def __init__(self, result: Ternary) -> None:
        self.result = result
        self.calls: list[tuple[Any, Any]] = []

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        self.calls.append((condition_value, attribute_value))
        return self.result


def test_evaluate_dispatches_to_standard_matchers() -> None:
    """標準マッチタイプで評価できること。"""
    engine = TargetingEngine()
    assert engine.evaluate("exact", "chrome", "chrome") is Ternary.MATCH
    assert engine.evaluate("substring", "abc", "xabcy") is Ternary.MATCH
    assert engine.evaluate("gt", 10, 11) is Ternary.MATCH
    assert engine.evaluate("lt", 10, "eleven") is Ternary.UNKNOWN
    assert engine.evaluate(None, "42", 42) is Ternary.MATCH


def test_evaluate_unknown_match_type_raises() -> None:
    """未登録のマッチタイプはエラー。"""
    with pytest.raises(UnknownMatchTypeError):
        TargetingEngine().evaluate("regex", ".*", "abc")


def test_evaluate_malformed_condition_raises() -> None:
    """ルール定義が不正な場合はエラー。"""
    with pytest.raises(MalformedConditionError):
        TargetingEngine().evaluate("substring", 42, "abc")


def test_register_matcher_dispatches_to_custom() -> None:
    """登録したマッチャーの結果をそのまま返すこと。"""
    engine = TargetingEngine()
    matcher = RecordingMatcher(Ternary.UNKNOWN)
    engine.register_matcher("custom", matcher)

    assert engine.evaluate("custom", "cv", "av") is Ternary.UNKNOWN
    assert matcher.calls == [("cv", "av")]


def test_engines_do_not_share_registries() -> None:
    """エンジンごとにレジストリが独立していること。"""
    first = TargetingEngine()
    second = TargetingEngine()
    first.register_matcher("custom", RecordingMatcher(Ternary.MATCH))
    with pytest.raises(UnknownMatchTypeError):
        second.evaluate("custom", "cv", "av")


def test_empty_registry_is_kept() -> None:
    """空のレジストリを渡した場合もそのまま使うこと。"""
    engine = TargetingEngine(registry=MatchRegistry())
    with pytest.raises(UnknownMatchTypeError):
        engine.evaluate("exact", "a", "a")


def test_evaluate_condition_match() -> None:
    """属性マップに対して条件を評価すること。"""
    engine = TargetingEngine()
    condition = AttributeCondition(name="browser", value="chrome", match="exact")
    assert engine.evaluate_condition(condition, {"browser": "chrome"}) is Ternary.MATCH
    assert engine.evaluate_condition(condition, {"browser": "safari"}) is Ternary.NO_MATCH


def test_evaluate_condition_missing_attribute() -> None:
    """属性が渡されていない場合は UNKNOWN と理由を残すこと。"""
    engine = TargetingEngine()
    reasons = DecisionReasons(include_reasons=True)
    condition = AttributeCondition(name="age", value=18, match="ge")

    assert engine.evaluate_condition(condition, {}, reasons) is Ternary.UNKNOWN
    assert len(reasons.to_report()) == 1
    assert 'no value was passed for user attribute "age"' in reasons.to_report()[0]


def test_evaluate_condition_null_attribute() -> None:
    """属性値が None の場合の理由。"""
    engine = TargetingEngine()
    reasons = DecisionReasons(include_reasons=True)
    condition = AttributeCondition(name="age", value=18, match="ge")

    assert engine.evaluate_condition(condition, {"age": None}, reasons) is Ternary.UNKNOWN
    assert "a null value was passed" in reasons.to_report()[0]


def test_evaluate_condition_wrong_type() -> None:
    """属性値の型が合わない場合の理由。"""
    engine = TargetingEngine()
    reasons = DecisionReasons(include_reasons=True)
    condition = AttributeCondition(name="age", value=18, match="ge")

    assert engine.evaluate_condition(condition, {"age": "eighteen"}, reasons) is Ternary.UNKNOWN
    assert 'a value of type "str" was passed' in reasons.to_report()[0]


def test_evaluate_condition_unknown_type() -> None:
    """未知の条件タイプは UNKNOWN。"""
    engine = TargetingEngine()
    condition = AttributeCondition(name="browser", value="chrome", match="exact", type="third_party")
    reasons = DecisionReasons(include_reasons=True)
    assert engine.evaluate_condition(condition, {"browser": "chrome"}, reasons) is Ternary.UNKNOWN
    assert "uses an unknown condition type" in reasons.to_report()[0]
    assert "SDK" not in reasons.to_report()[0]


def test_evaluate_condition_legacy_and_exists() -> None:
    """legacy と exists は属性なしで NO_MATCH になること。"""
    engine = TargetingEngine()
    assert engine.evaluate_condition(AttributeCondition(name="plan", value="pro"), None) is Ternary.NO_MATCH
    assert (
        engine.evaluate_condition(AttributeCondition(name="plan", match="exists"), {"plan": "pro"})
        is Ternary.MATCH
    )


def test_evaluate_condition_propagates_malformed() -> None:
    """不正な条件はエラーとして伝播すること。"""
    engine = TargetingEngine()
    with pytest.raises(MalformedConditionError):
        engine.evaluate_condition(AttributeCondition(name="a", value=1, match="substring"), {"a": "1"})


def test_forced_decision_via_engine() -> None:
    """エンジン経由でフォースドデシジョンを操作できること。"""
    engine = TargetingEngine()
    ctx = DecisionContext("flag", "rule")
    engine.set_forced_decision(ctx, ForcedDecision("treatment"))
    assert engine.get_forced_decision(ctx) == ForcedDecision("treatment")
    assert engine.remove_forced_decision(ctx) is True
    assert engine.get_forced_decision(ctx) is None
    assert engine.remove_forced_decision(ctx) is False


def test_find_forced_variation() -> None:
    """フォースドデシジョンをバリエーションに解決すること。"""
    engine = TargetingEngine()
    ctx = DecisionContext("flag", "rule")
    engine.set_forced_decision(ctx, ForcedDecision("treatment"))
    reasons = DecisionReasons(include_reasons=True)

    variation = engine.find_forced_variation(ctx, VARIATIONS, reasons)

    assert variation is not None
    assert variation.key == "treatment"
    assert reasons.to_report() == [
        "Variation (treatment) is mapped to flag (flag) and rule (rule) in the forced decision map."
    ]


def test_find_forced_variation_invalid_key() -> None:
    """存在しないバリエーションの場合は None と理由を残すこと。"""
    engine = TargetingEngine()
    ctx = DecisionContext("flag")
    engine.set_forced_decision(ctx, ForcedDecision("missing"))
    reasons = DecisionReasons(include_reasons=True)

    assert engine.find_forced_variation(ctx, VARIATIONS, reasons) is None
    assert reasons.to_report() == [
        "Invalid variation is mapped to flag (flag) and rule (null) in the forced decision map."
    ]


def test_find_forced_variation_absent() -> None:
    """フォースドデシジョンがなければ None。"""
    assert TargetingEngine().find_forced_variation(DecisionContext("flag"), VARIATIONS) is None


def test_decide_forced_builds_decision() -> None:
    """フォースドデシジョンからデシジョンを組み立てること。"""
    engine = TargetingEngine()
    engine.set_forced_decision(DecisionContext("flag", "rule"), ForcedDecision("treatment"))

    decision = engine.decide_forced("flag", "rule", VARIATIONS, [DecideOption.INCLUDE_REASONS])

    assert decision is not None
    assert decision.variation_key == "treatment"
    assert decision.enabled is True
    assert decision.variables == {"color": "red"}
    assert decision.rule_key == "rule"
    assert len(decision.reasons) == 1


def test_decide_forced_disabled_variation() -> None:
    """機能が無効なバリエーションでは enabled が False。"""
    engine = TargetingEngine()
    engine.set_forced_decision(DecisionContext("flag"), ForcedDecision("control"))

    decision = engine.decide_forced("flag", None, VARIATIONS)

    assert decision is not None
    assert decision.enabled is False
    assert decision.reasons == ()


def test_decide_forced_exclude_variables_from_config() -> None:
    """設定のデフォルトオプションが適用されること。"""
    config = EngineConfig(
        decisions=DecisionSection(default_options=[DecideOption.EXCLUDE_VARIABLES])
    )
    engine = TargetingEngine(config=config)
    engine.set_forced_decision(DecisionContext("flag"), ForcedDecision("treatment"))

    decision = engine.decide_forced("flag", None, VARIATIONS)

    assert decision is not None
    assert decision.variables == {}


def test_decide_forced_without_forced_decision() -> None:
    """フォースドデシジョンがない場合は None を返すこと。"""
    assert TargetingEngine().decide_forced("flag", "rule", VARIATIONS) is None


def test_engine_uses_given_store() -> None:
    """渡されたストアを共有すること。"""
    store = ForcedDecisionStore()
    engine = TargetingEngine(forced_decisions=store)
    engine.set_forced_decision(DecisionContext("flag"), ForcedDecision("a"))
    assert engine.forced_decisions is store
    assert len(store) == 1


def test_build_and_error_decision() -> None:
    """デシジョン構築の窓口。"""
    engine = TargetingEngine()
    reasons = engine.new_reasons([DecideOption.INCLUDE_REASONS])
    reasons.add_info("ok")

    decision = engine.build_decision("v1", True, {"k": 1}, "r1", "flag", reasons)
    assert decision.reasons == ("ok",)

    error = engine.new_error_decision("flagA", "boom")
    assert error.enabled is False
    assert error.variation_key is None
    assert error.reasons == ("boom",)


def test_engine_configures_logger_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """logger 未指定で config を渡すと config.log からロガーを構成すること。"""
    sections: list[LogSection] = []

    def fake_logger_from_config(section: LogSection) -> Any:
        sections.append(section)
        return structlog.stdlib.get_logger("test")

    monkeypatch.setattr("k1s0_targeting.engine.logger_from_config", fake_logger_from_config)
    log = LogSection(level="DEBUG", format="text")
    TargetingEngine(config=EngineConfig(log=log))
    assert sections == [log]


def test_engine_prefers_injected_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    """logger が渡された場合は config.log を使わないこと。"""
    calls: list[LogSection] = []
    monkeypatch.setattr("k1s0_targeting.engine.logger_from_config", calls.append)
    TargetingEngine(config=EngineConfig(), logger=structlog.stdlib.get_logger("test"))
    TargetingEngine()
    assert calls == []
