"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class SourceConfig:
    """Block source configuration."""
    type: str = "replay"
    path: str = ""
    interval: float = 0.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            type=d.get("type", "replay"),
            path=d.get("path", ""),
            interval=float(d.get("interval", 0.0) or 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "path": self.path,
            "interval": self.interval,
        }


@dataclass
class MonitorSettings:
    """Observation loop settings."""
    stats_log_interval: float = 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MonitorSettings":
        return cls(stats_log_interval=float(d.get("stats_log_interval", 60.0)))

    def to_dict(self) -> Dict[str, Any]:
        return {"stats_log_interval": self.stats_log_interval}


@dataclass
class WebConfig:
    """Status API configuration."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=bool(d.get("enabled", False)),
            host=d.get("host", "127.0.0.1"),
            port=int(d.get("port", 5000)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "host": self.host,
            "port": self.port,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    bridge: str = ""
    timeout_seconds: float = 600.0
    source: SourceConfig = field(default_factory=SourceConfig)
    monitor: MonitorSettings = field(default_factory=MonitorSettings)
    web: WebConfig = field(default_factory=WebConfig)
    bridges: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    log_path: str = "logs/bridge_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            bridge=d.get("bridge", ""),
            timeout_seconds=float(d.get("timeout_seconds", 600.0)),
            source=SourceConfig.from_dict(d.get("source") or {}),
            monitor=MonitorSettings.from_dict(d.get("monitor") or {}),
            web=WebConfig.from_dict(d.get("web") or {}),
            bridges=dict(d.get("bridges") or {}),
            log_path=d.get("log_path", "logs/bridge_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for passing to the engine factory)."""
        d: Dict[str, Any] = {
            "bridge": self.bridge,
            "timeout_seconds": self.timeout_seconds,
            "source": self.source.to_dict(),
            "monitor": self.monitor.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
        if self.bridges:
            d["bridges"] = self.bridges
        return d

