"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    json_output: bool = True


@dataclass
class GraphConfig:
    """Lineage graph construction configuration."""

    root_name: str = "cluster"
    validate_ownership: bool = True


@dataclass
class ExportConfig:
    """Graph description export configuration."""

    format: str = "dot"


@dataclass
class LineageConfig:
    """Top-level kubelineage configuration."""

    log: LogConfig = field(default_factory=LogConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
