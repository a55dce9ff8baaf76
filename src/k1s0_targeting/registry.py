"""マッチタイプ名からマッチ戦略を解決するレジストリ"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import MappingProxyType

from .exceptions import UnknownMatchTypeError
from .matchers import (
    ExactMatcher,
    ExistsMatcher,
    GreaterOrEqualMatcher,
    GreaterThanMatcher,
    LegacyMatcher,
    LessOrEqualMatcher,
    LessThanMatcher,
    Matcher,
    SubstringMatcher,
    semver_matchers,
)


class MatchTypes:
    """標準マッチタイプ名の定数。"""

    EXACT: str = "exact"
    EXISTS: str = "exists"
    GREATER_THAN: str = "gt"
    GREATER_OR_EQUAL: str = "ge"
    LESS_THAN: str = "lt"
    LESS_OR_EQUAL: str = "le"
    SUBSTRING: str = "substring"
    LEGACY: str = "legacy"
    SEMVER_EQ: str = "semver_eq"
    SEMVER_GE: str = "semver_ge"
    SEMVER_GT: str = "semver_gt"
    SEMVER_LE: str = "semver_le"
    SEMVER_LT: str = "semver_lt"


class MatchRegistry:
    """マッチタイプ名 → マッチ戦略のレジストリ。

    書き込みのたびに不変スナップショットを作り直して差し替えるため、
    lookup はロックを取らずに register と並行して呼び出せる。
    """

    def __init__(self, matchers: Mapping[str, Matcher] | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot: Mapping[str, Matcher] = MappingProxyType(dict(matchers or {}))

    def lookup(self, name: str | None) -> Matcher:
        """マッチ戦略を返す。name が空の場合は legacy を使う。

        Raises:
            UnknownMatchTypeError: 該当する戦略が登録されていない場合
        """
        resolved = name or MatchTypes.LEGACY
        matcher = self._snapshot.get(resolved)
        if matcher is None:
            raise UnknownMatchTypeError(resolved)
        return matcher

    def register(self, name: str, matcher: Matcher) -> None:
        """マッチ戦略を登録する。同名の登録は置き換える。"""
        with self._lock:
            updated = dict(self._snapshot)
            updated[name] = matcher
            self._snapshot = MappingProxyType(updated)

    def unregister(self, name: str) -> bool:
        """登録を削除する。削除した場合は True を返す。"""
        with self._lock:
            if name not in self._snapshot:
                return False
            updated = dict(self._snapshot)
            del updated[name]
            self._snapshot = MappingProxyType(updated)
            return True

    def names(self) -> list[str]:
        return sorted(self._snapshot)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)


def default_registry() -> MatchRegistry:
    """標準マッチタイプをすべて登録したレジストリを返す。"""
    matchers: dict[str, Matcher] = {
        MatchTypes.EXACT: ExactMatcher(),
        MatchTypes.EXISTS: ExistsMatcher(),
        MatchTypes.GREATER_THAN: GreaterThanMatcher(),
        MatchTypes.GREATER_OR_EQUAL: GreaterOrEqualMatcher(),
        MatchTypes.LESS_THAN: LessThanMatcher(),
        MatchTypes.LESS_OR_EQUAL: LessOrEqualMatcher(),
        MatchTypes.SUBSTRING: SubstringMatcher(),
        MatchTypes.LEGACY: LegacyMatcher(),
    }
    matchers.update(semver_matchers())
    return MatchRegistry(matchers)
