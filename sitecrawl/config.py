# === FILE: sitecrawl/config.py ===
"""
Loading and validation of the crawler configuration.
Pydantic describes the schema; YAML and JSON files provide defaults that the
command line may override.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, model_validator

from sitecrawl import __version__


class CrawlerConfig(BaseModel):
    """Settings for a single crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    start_url: HttpUrl = Field(..., description="Seed URL; its authority defines the crawl scope.")
    threads: int = Field(4, ge=1, description="Number of worker threads.")
    connect_timeout: float = Field(10.0, gt=0, description="Connect timeout per request (seconds).")
    total_timeout: float = Field(20.0, gt=0, description="Total timeout per request (seconds).")
    verify_tls: bool = Field(True, description="Validate server certificates.")
    user_agent: str = Field(f"sitecrawl/{__version__}", min_length=1, description="User-Agent header.")
    respect_robots: bool = Field(False, description="Consult robots.txt before each fetch.")
    progress_interval: float = Field(2.0, gt=0, description="Seconds between progress reports.")

    @model_validator(mode="after")
    def _check_timeouts(self) -> CrawlerConfig:
        if self.connect_timeout > self.total_timeout:
            raise ValueError("connect_timeout must not exceed total_timeout")
        return self

    @property
    def seed_url(self) -> str:
        return str(self.start_url)


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def _read_file(path: Union[str, Path, None]) -> dict[str, Any]:
    if path is None:
        if not _DEFAULT_CFG.exists():
            return {}
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    Keyword overrides take precedence over the file; overrides set to None
    are ignored so unset CLI options fall back to the file or the defaults.
    Without *path*, ``configs/default.yaml`` is used when present.
    """
    data = _read_file(path)
    data.update({key: value for key, value in overrides.items() if value is not None})
    return CrawlerConfig(**data)


__all__ = ["CrawlerConfig", "load_config"]
