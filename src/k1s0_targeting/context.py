"""フォースドデシジョンのコンテキストとストア"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

NULL_RULE_KEY = "$opt-null-rule-key"
KEY_DIVIDER = "-"


@dataclass(frozen=True)
class DecisionContext:
    """(flag_key, rule_key) の組。rule_key が None の場合はフラグ単位の指定になる。

    等価性とハッシュは合成キー key のみで決まる。
    """

    flag_key: str | None = field(compare=False)
    rule_key: str | None = field(default=None, compare=False)
    key: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        rule_part = self.rule_key if self.rule_key is not None else NULL_RULE_KEY
        object.__setattr__(self, "key", f"{self.flag_key}{KEY_DIVIDER}{rule_part}")


@dataclass(frozen=True)
class ForcedDecision:
    """強制するバリエーション。"""

    variation_key: str


class ForcedDecisionStore:
    """DecisionContext をキーにフォースドデシジョンを保持するスレッドセーフなストア。"""

    def __init__(self, decisions: dict[str, ForcedDecision] | None = None) -> None:
        self._lock = threading.RLock()
        self._decisions: dict[str, ForcedDecision] = dict(decisions or {})

    def set(self, context: DecisionContext, decision: ForcedDecision) -> None:
        """フォースドデシジョンを設定する。flag_key が None のコンテキストは無視する。"""
        if context.flag_key is None:
            return
        with self._lock:
            self._decisions[context.key] = decision

    def get(self, context: DecisionContext) -> ForcedDecision | None:
        if context.flag_key is None:
            return None
        with self._lock:
            return self._decisions.get(context.key)

    def remove(self, context: DecisionContext) -> bool:
        """削除できた場合は True を返す。"""
        with self._lock:
            return self._decisions.pop(context.key, None) is not None

    def remove_all(self) -> None:
        with self._lock:
            self._decisions.clear()

    def copy(self) -> ForcedDecisionStore:
        with self._lock:
            return ForcedDecisionStore(self._decisions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._decisions)
