"""エンジン設定の型定義と読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import TargetingError, TargetingErrorCodes
from .reasons import DecideOption


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class DecisionSection(BaseModel):
    """デシジョン設定。"""

    default_options: list[DecideOption] = Field(default_factory=list)


class EngineConfig(BaseModel):
    """TargetingEngine の設定全体。"""

    log: LogSection = Field(default_factory=LogSection)
    decisions: DecisionSection = Field(default_factory=DecisionSection)


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TargetingError(
            code=TargetingErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise TargetingError(
            code=TargetingErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    return data


def load_config(path: Path) -> EngineConfig:
    """設定ファイルを読み込んで EngineConfig を返す。"""
    data = _read_yaml(path)
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise TargetingError(
            code=TargetingErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
