"""マッチ戦略の実装"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from .comparator import compare_numbers, is_numeric
from .exceptions import MalformedConditionError
from .models import Ternary
from .semver import compare_versions, is_valid_version


class Matcher(Protocol):
    """条件値と属性値を比較するマッチ戦略プロトコル。

    実装はステートレスで副作用を持たないこと。ルール定義が不正な場合は
    MalformedConditionError を送出し、属性値が比較できない場合は Ternary.UNKNOWN を返す。
    """

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary: ...


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, str):
        return "str"
    if isinstance(value, (int, float)):
        return "number"
    return type(value).__name__


def _legacy_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ExactMatcher:
    """完全一致。数値同士は数値として比較する。"""

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        if is_numeric(attribute_value):
            if is_numeric(condition_value):
                return Ternary.from_bool(compare_numbers(attribute_value, condition_value) == 0)
            return Ternary.UNKNOWN

        if _kind(condition_value) not in ("str", "bool", "number"):
            raise MalformedConditionError(
                f"exact condition value must be a string, boolean or number: {condition_value!r}"
            )
        if attribute_value is None:
            return Ternary.UNKNOWN
        if _kind(condition_value) != _kind(attribute_value):
            return Ternary.UNKNOWN
        if not isinstance(condition_value, (str, bool)):
            # 数値条件と範囲外の数値属性 (inf など)
            return Ternary.UNKNOWN
        return Ternary.from_bool(condition_value == attribute_value)


class ExistsMatcher:
    """属性値が存在すれば一致。条件値は参照しない。"""

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        return Ternary.from_bool(attribute_value is not None)


class SubstringMatcher:
    """属性値が条件値を部分文字列として含めば一致。"""

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        if not isinstance(condition_value, str):
            raise MalformedConditionError(
                f"substring condition value must be a string: {condition_value!r}"
            )
        if not isinstance(attribute_value, str):
            return Ternary.UNKNOWN
        return Ternary.from_bool(condition_value in attribute_value)


class NumericMatcher:
    """数値比較の共通実装。predicate は compare_numbers(属性値, 条件値) の結果を受け取る。"""

    def __init__(self, name: str, predicate: Callable[[int], bool]) -> None:
        self._name = name
        self._predicate = predicate

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        if not is_numeric(condition_value):
            raise MalformedConditionError(
                f"{self._name} condition value must be a number: {condition_value!r}"
            )
        if not is_numeric(attribute_value):
            return Ternary.UNKNOWN
        return Ternary.from_bool(self._predicate(compare_numbers(attribute_value, condition_value)))

    def __repr__(self) -> str:
        return f"NumericMatcher({self._name!r})"


class GreaterThanMatcher(NumericMatcher):
    def __init__(self) -> None:
        super().__init__("gt", lambda order: order > 0)


class GreaterOrEqualMatcher(NumericMatcher):
    def __init__(self) -> None:
        super().__init__("ge", lambda order: order >= 0)


class LessThanMatcher(NumericMatcher):
    def __init__(self) -> None:
        super().__init__("lt", lambda order: order < 0)


class LessOrEqualMatcher(NumericMatcher):
    def __init__(self) -> None:
        super().__init__("le", lambda order: order <= 0)


class LegacyMatcher:
    """マッチタイプを持たない旧形式の条件。文字列表現同士で比較する。"""

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        if not isinstance(condition_value, str):
            raise MalformedConditionError(
                f"legacy condition value must be a string: {condition_value!r}"
            )
        if attribute_value is None:
            return Ternary.NO_MATCH
        return Ternary.from_bool(condition_value == _legacy_string(attribute_value))


class SemverMatcher:
    """セマンティックバージョン比較の共通実装。"""

    def __init__(self, name: str, predicate: Callable[[int], bool]) -> None:
        self._name = name
        self._predicate = predicate

    def eval(self, condition_value: Any, attribute_value: Any) -> Ternary:
        if not is_valid_version(condition_value):
            raise MalformedConditionError(
                f"{self._name} condition value must be a semantic version string: {condition_value!r}"
            )
        if not is_valid_version(attribute_value):
            return Ternary.UNKNOWN
        return Ternary.from_bool(self._predicate(compare_versions(condition_value, attribute_value)))

    def __repr__(self) -> str:
        return f"SemverMatcher({self._name!r})"


def semver_matchers() -> dict[str, SemverMatcher]:
    """semver 系マッチャーをマッチタイプ名付きで返す。"""
    return {
        "semver_eq": SemverMatcher("semver_eq", lambda order: order == 0),
        "semver_ge": SemverMatcher("semver_ge", lambda order: order >= 0),
        "semver_gt": SemverMatcher("semver_gt", lambda order: order > 0),
        "semver_le": SemverMatcher("semver_le", lambda order: order <= 0),
        "semver_lt": SemverMatcher("semver_lt", lambda order: order < 0),
    }
