"""Configuration models for the discovery runtime."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

CONFIG_ENV = "CAPDISCOVER_CONFIG"


class CandidateConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    package: str
    version: str = "*"
    entry: str

    @field_validator("package")
    @classmethod
    def validate_package(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("package must not be blank")
        return value

    @field_validator("entry")
    @classmethod
    def validate_entry(cls, value: str) -> str:
        mod_name, _, attr = value.partition(":")
        if not mod_name or not attr:
            raise ValueError(f"entry '{value}' must look like 'module:attr'")
        return value


class CapabilityConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    prefer: List[str] = Field(default_factory=list)
    candidates: List[CandidateConfig] = Field(default_factory=list)
    use_defaults: bool = True


class DiscoveryConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    extensions: List[str] = Field(default_factory=list)
    entry_points: bool = True
    builtin: bool = True
    pins: Dict[str, str] = Field(default_factory=dict)
    capabilities: Dict[str, CapabilityConfig] = Field(default_factory=dict)


def load_config(path: Optional[str | os.PathLike[str]] = None) -> DiscoveryConfig:
    """Read a JSON config file.

    Without *path* the ``CAPDISCOVER_CONFIG`` environment variable is used;
    when neither is set the defaults apply.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV) or None
        if path is None:
            return DiscoveryConfig()
    target = Path(path)
    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read config {target}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"config {target} is not valid JSON: {exc}") from exc
    try:
        return DiscoveryConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {target}: {exc}") from exc


__all__ = ["CandidateConfig", "CapabilityConfig", "DiscoveryConfig", "load_config", "CONFIG_ENV"]
