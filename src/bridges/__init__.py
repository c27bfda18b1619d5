"""
Bridge descriptors for the relay monitor.

Each descriptor tells the classifier which pallets and event methods belong
to one bridge instance on the monitored chain.
"""

from .descriptor import BUILTIN_BRIDGES, BridgeDescriptor, resolve_bridge

__all__ = [
    "BUILTIN_BRIDGES",
    "BridgeDescriptor",
    "resolve_bridge",
]
