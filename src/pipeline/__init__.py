"""
Pipeline module for the bridge relay monitor.

The pipeline orchestrates the full observation flow:
- Block acquisition from block sources
- Event classification
- Invariant enforcement
- Termination on success, violation or timeout
"""

from .engine import MonitorConfig, MonitorEngine, create_engine_from_config

__all__ = [
    "MonitorConfig",
    "MonitorEngine",
    "create_engine_from_config",
]
