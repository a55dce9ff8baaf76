"""デシジョン結果モデル"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from .exceptions import TargetingError, TargetingErrorCodes
from .reasons import DecisionReasons

logger = structlog.stdlib.get_logger(__name__)

_MISSING = object()


class DecisionVariables:
    """デシジョンに紐づく変数の集合。JSON 文字列と辞書の両方の形で参照できる。"""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> DecisionVariables:
        return cls(values)

    @classmethod
    def from_json(cls, payload: str) -> DecisionVariables:
        """JSON オブジェクト文字列から生成する。

        Raises:
            TargetingError: JSON として解釈できない、またはオブジェクトでない場合 (INVALID_JSON)
        """
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            raise TargetingError(
                TargetingErrorCodes.INVALID_JSON,
                "Provided string could not be converted to map.",
                cause=e,
            ) from e
        if not isinstance(data, dict):
            raise TargetingError(
                TargetingErrorCodes.INVALID_JSON,
                f"Expected a JSON object, got {type(data).__name__}",
            )
        return cls(data)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def to_json(self) -> str:
        return json.dumps(self._values, separators=(",", ":"))

    def get_value(self, path: str | None = None, default: Any = None) -> Any:
        """ドット区切りのパスで値を取得する。

        path が空の場合は全体を辞書で返す。例: {"k1": {"k2": "v"}} に対して "k1.k2" は "v"。
        """
        if not path:
            return self.to_dict()
        current: Any = self._values
        for segment in path.split("."):
            if not isinstance(current, Mapping):
                current = _MISSING
                break
            current = current.get(segment, _MISSING)
            if current is _MISSING:
                break
        if current is _MISSING:
            logger.warning("Value for JSON key not found.", path=path)
            return default
        return current

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DecisionVariables):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __len__(self) -> int:
        return len(self._values)

    def __str__(self) -> str:
        return self.to_json()

    def __repr__(self) -> str:
        return f"DecisionVariables({self._values!r})"


@dataclass(frozen=True)
class FlagDecision:
    """フラグ評価のデシジョン結果。

    enabled は、バリエーションが解決され、そのバリエーションの機能が有効な場合にのみ True になる。
    """

    flag_key: str
    variation_key: str | None = None
    enabled: bool = False
    variables: DecisionVariables = field(default_factory=DecisionVariables)
    rule_key: str | None = None
    reasons: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        variation_key: str | None,
        enabled: bool,
        variables: DecisionVariables | Mapping[str, Any] | None,
        rule_key: str | None,
        flag_key: str,
        reasons: DecisionReasons | Sequence[str] | None = None,
    ) -> FlagDecision:
        """評価結果からデシジョンを組み立てる。

        variation_key が None の場合、enabled は常に False になる。
        """
        if not isinstance(variables, DecisionVariables):
            variables = DecisionVariables(variables)
        if isinstance(reasons, DecisionReasons):
            report = tuple(reasons.to_report())
        else:
            report = tuple(reasons or ())
        return cls(
            flag_key=flag_key,
            variation_key=variation_key,
            enabled=bool(enabled) and variation_key is not None,
            variables=variables,
            rule_key=rule_key,
            reasons=report,
        )

    @classmethod
    def new_error_decision(cls, flag_key: str, error_message: str) -> FlagDecision:
        """設定や入力が不正で評価を続けられない場合のデシジョンを返す。"""
        return cls(flag_key=flag_key, reasons=(error_message,))

    def to_dict(self) -> dict[str, Any]:
        return {
            "flag_key": self.flag_key,
            "variation_key": self.variation_key,
            "enabled": self.enabled,
            "variables": self.variables.to_dict(),
            "rule_key": self.rule_key,
            "reasons": list(self.reasons),
        }
