"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kubelineage.models.config import ExportConfig, GraphConfig, LineageConfig, LogConfig

_EXPORT_FORMATS = {"dot", "mermaid"}


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBELINEAGE_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_root_name(value: str) -> str:
    # The root name becomes part of the root's resource key ("cluster/<name>").
    if not value or not re.match(r"^[A-Za-z0-9][A-Za-z0-9._:@-]*$", value):
        raise ValueError(f"Invalid root name: {value!r}")
    return value


def _validate_export_format(value: str) -> str:
    if value.lower() not in _EXPORT_FORMATS:
        raise ValueError(f"Invalid export format: {value}. Must be one of {_EXPORT_FORMATS}")
    return value.lower()


def load_config() -> LineageConfig:
    """Load configuration from KUBELINEAGE_* environment variables."""
    return LineageConfig(
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            json_output=_env_bool("LOG_JSON", True),
        ),
        graph=GraphConfig(
            root_name=_validate_root_name(_env("ROOT_NAME", "cluster")),
            validate_ownership=_env_bool("VALIDATE_OWNERSHIP", True),
        ),
        export=ExportConfig(
            format=_validate_export_format(_env("EXPORT_FORMAT", "dot")),
        ),
    )
