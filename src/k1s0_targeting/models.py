"""targeting データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

CUSTOM_ATTRIBUTE_CONDITION_TYPE = "custom_attribute"


class Ternary(str, Enum):
    """条件評価の三値結果。

    UNKNOWN は実行時の属性値が比較できなかったことを表し、NO_MATCH とは区別される。
    """

    MATCH = "match"
    NO_MATCH = "no_match"
    UNKNOWN = "unknown"

    @classmethod
    def from_bool(cls, matched: bool) -> Ternary:
        return cls.MATCH if matched else cls.NO_MATCH


@dataclass(frozen=True)
class AttributeCondition:
    """単一のユーザー属性に対するオーディエンス条件。

    match が None の場合はマッチタイプ導入前のレガシー条件として扱う。
    """

    name: str
    value: Any = None
    match: str | None = None
    type: str = CUSTOM_ATTRIBUTE_CONDITION_TYPE


@dataclass(frozen=True)
class Variation:
    """フラグのバリエーション。"""

    key: str
    id: str = ""
    feature_enabled: bool = False
    variables: dict[str, Any] = field(default_factory=dict)
