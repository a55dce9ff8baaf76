"""セマンティックバージョンの分解と比較"""

from __future__ import annotations

import re

from .exceptions import TargetingError, TargetingErrorCodes

PRE_RELEASE_SEPARATOR = "-"
BUILD_SEPARATOR = "+"

_DIGITS_RE = re.compile(r"^[0-9]+$")


def _is_digits(part: str) -> bool:
    return bool(_DIGITS_RE.match(part))


def is_pre_release(version: str) -> bool:
    """'-' が '+' より前にあればプレリリースとみなす。"""
    pre_index = version.find(PRE_RELEASE_SEPARATOR)
    if pre_index < 0:
        return False
    build_index = version.find(BUILD_SEPARATOR)
    return build_index < 0 or pre_index < build_index


def is_build(version: str) -> bool:
    """'+' が '-' より前にあればビルドメタデータ付きとみなす。"""
    build_index = version.find(BUILD_SEPARATOR)
    if build_index < 0:
        return False
    pre_index = version.find(PRE_RELEASE_SEPARATOR)
    return pre_index < 0 or build_index < pre_index


def split_version(version: str) -> list[str] | None:
    """バージョン文字列を [major, minor, patch, suffix] 形式の部品に分解する。

    minor / patch は省略可能。不正な形式の場合は None を返す。
    """
    if not version or any(ch.isspace() for ch in version):
        return None

    prefix = version
    suffix: list[str] = []
    if is_pre_release(version):
        prefix, rest = version.split(PRE_RELEASE_SEPARATOR, 1)
        suffix = [rest]
    elif is_build(version):
        prefix, rest = version.split(BUILD_SEPARATOR, 1)
        suffix = [rest]

    if prefix.count(".") > 2:
        return None
    parts = prefix.split(".")
    if not all(_is_digits(part) for part in parts):
        return None
    return parts + suffix


def is_valid_version(version: object) -> bool:
    return isinstance(version, str) and split_version(version) is not None


def compare_versions(target: str, user: str) -> int:
    """ターゲットバージョンに対するユーザーバージョンの大小を -1 / 0 / 1 で返す。

    比較はターゲット側の部品数で行う。ターゲットが "2" の場合、"2.1.0" は等しいとみなす。

    Raises:
        TargetingError: どちらかが不正なバージョン形式の場合 (INVALID_VERSION)
    """
    target_parts = split_version(target)
    user_parts = split_version(user)
    if target_parts is None or user_parts is None:
        raise TargetingError(
            TargetingErrorCodes.INVALID_VERSION,
            f"Invalid semantic version: target={target!r}, user={user!r}",
        )

    target_pre_release = is_pre_release(target)
    target_build = is_build(target)
    user_pre_release = is_pre_release(user)

    for index, target_part in enumerate(target_parts):
        if len(user_parts) <= index:
            return 1 if target_pre_release or target_build else -1
        user_part = user_parts[index]
        if _is_digits(user_part) and _is_digits(target_part):
            user_number = int(user_part)
            target_number = int(target_part)
            if user_number != target_number:
                return 1 if user_number > target_number else -1
            continue
        if user_part < target_part:
            return 1 if target_pre_release and not user_pre_release else -1
        if user_part > target_part:
            return -1 if not target_pre_release and user_pre_release else 1

    if user_pre_release and not target_pre_release:
        return -1
    return 0
