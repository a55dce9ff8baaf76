"""targeting ライブラリの例外型定義"""

from __future__ import annotations


class TargetingError(Exception):
    """targeting ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class TargetingErrorCodes:
    """TargetingError のエラーコード定数。"""

    MALFORMED_CONDITION: str = "MALFORMED_CONDITION"
    UNKNOWN_MATCH_TYPE: str = "UNKNOWN_MATCH_TYPE"
    INVALID_NUMBER: str = "INVALID_NUMBER"
    INVALID_VERSION: str = "INVALID_VERSION"
    INVALID_JSON: str = "INVALID_JSON"
    READ_FILE: str = "READ_FILE_ERROR"
    PARSE_YAML: str = "PARSE_YAML_ERROR"
    VALIDATION: str = "VALIDATION_ERROR"


class MalformedConditionError(TargetingError):
    """ルール定義そのものが不正な場合のエラー。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(TargetingErrorCodes.MALFORMED_CONDITION, message, cause)


class UnknownMatchTypeError(TargetingError):
    """登録されていないマッチタイプを参照した場合のエラー。"""

    def __init__(self, match_type: str) -> None:
        super().__init__(
            TargetingErrorCodes.UNKNOWN_MATCH_TYPE,
            f"No matcher registered for match type: {match_type}",
        )
        self.match_type = match_type
