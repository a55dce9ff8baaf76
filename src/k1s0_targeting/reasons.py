"""デシジョン理由の収集"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any


class DecideOption(str, Enum):
    """デシジョン API のオプション。"""

    DISABLE_DECISION_EVENT = "DISABLE_DECISION_EVENT"
    ENABLED_FLAGS_ONLY = "ENABLED_FLAGS_ONLY"
    IGNORE_USER_PROFILE_SERVICE = "IGNORE_USER_PROFILE_SERVICE"
    INCLUDE_REASONS = "INCLUDE_REASONS"
    EXCLUDE_VARIABLES = "EXCLUDE_VARIABLES"


class DecisionMessages:
    """デシジョン理由のメッセージテンプレート。"""

    ENGINE_NOT_READY: str = "Targeting engine not configured properly yet."
    FLAG_KEY_INVALID: str = 'No flag was found for key "{0}".'
    VARIABLE_VALUE_INVALID: str = 'Variable value for key "{0}" is invalid or wrong type.'
    FORCED_VARIATION_MAPPED: str = (
        "Variation ({0}) is mapped to flag ({1}) and rule ({2}) in the forced decision map."
    )
    FORCED_VARIATION_INVALID: str = (
        "Invalid variation is mapped to flag ({0}) and rule ({1}) in the forced decision map."
    )

    @staticmethod
    def reason(template: str, *args: Any) -> str:
        return template.format(*args)


class DecisionReasons:
    """1回の評価で記録されたデシジョン理由。

    include_reasons が False の場合は記録を行わず、メッセージの整形だけを行う。
    """

    def __init__(self, include_reasons: bool = False) -> None:
        self._include_reasons = include_reasons
        self._reasons: list[str] = []

    @classmethod
    def new_instance(cls, options: Iterable[DecideOption] | None = None) -> DecisionReasons:
        """INCLUDE_REASONS が指定されている場合のみ理由を収集するインスタンスを返す。"""
        return cls(include_reasons=DecideOption.INCLUDE_REASONS in set(options or ()))

    @property
    def include_reasons(self) -> bool:
        return self._include_reasons

    def add_error(self, template: str, *args: Any) -> str:
        message = DecisionMessages.reason(template, *args)
        if self._include_reasons:
            self._reasons.append(message)
        return message

    def add_info(self, template: str, *args: Any) -> str:
        message = DecisionMessages.reason(template, *args)
        if self._include_reasons:
            self._reasons.append(message)
        return message

    def merge(self, other: DecisionReasons | None) -> DecisionReasons:
        """other の理由を末尾に追加して self を返す。"""
        if other is not None and self._include_reasons:
            self._reasons.extend(other._reasons)
        return self

    def __iadd__(self, other: DecisionReasons | None) -> DecisionReasons:
        return self.merge(other)

    def to_report(self) -> list[str]:
        """記録された理由を追加順に返す。"""
        return list(self._reasons)

    def __len__(self) -> int:
        return len(self._reasons)
