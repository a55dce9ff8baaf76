"""数値比較ユーティリティ"""

from __future__ import annotations

import math
from typing import Any

from .exceptions import TargetingError, TargetingErrorCodes

# 倍精度浮動小数点で正確に表現できる整数の上限
MAX_NUMERIC_MAGNITUDE = 2**53


def is_numeric(value: Any) -> bool:
    """比較可能な数値かどうかを判定する。bool は数値として扱わない。"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return abs(value) <= MAX_NUMERIC_MAGNITUDE


def compare_numbers(left: Any, right: Any) -> int:
    """2つの数値を float に変換して比較し、-1 / 0 / 1 を返す。

    Raises:
        TargetingError: いずれかの値が数値でない場合 (INVALID_NUMBER)
    """
    if not is_numeric(left) or not is_numeric(right):
        raise TargetingError(
            TargetingErrorCodes.INVALID_NUMBER,
            f"Cannot compare non-numeric values: {left!r}, {right!r}",
        )
    lhs = float(left)
    rhs = float(right)
    return (lhs > rhs) - (lhs < rhs)
