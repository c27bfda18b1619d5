"""
Bridge descriptors.

A descriptor names the pallets under which one bridge instance emits its
events on the monitored chain, and the para id of the bridged bridge hub.
It is the only per-bridge input of the classifier and the enforcer.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from models.block import BlockEvent


REQUIRED_DESCRIPTOR_FIELDS = (
    "grandpa_pallet_name",
    "parachains_pallet_name",
    "messages_pallet_name",
    "bridged_bridge_hub_para_id",
)


@dataclass(frozen=True)
class BridgeDescriptor:
    """
    Static description of one bridge as seen from the monitored chain.

    Attributes:
        name: Registry name (e.g. "rococo-at-westend").
        grandpa_pallet_name: Pallet importing bridged relay chain headers.
        parachains_pallet_name: Pallet importing bridged parachain heads.
        messages_pallet_name: Pallet emitting message events.
        bridged_bridge_hub_para_id: Para id of the bridged bridge hub.
    """
    name: str
    grandpa_pallet_name: str
    parachains_pallet_name: str
    messages_pallet_name: str
    bridged_bridge_hub_para_id: int
    messages_received_method: str = "MessagesReceived"
    messages_delivered_method: str = "MessagesDelivered"
    grandpa_import_method: str = "UpdatedBestFinalizedHeader"
    parachain_import_method: str = "UpdatedParachainHead"

    def is_message_received(self, event: BlockEvent) -> bool:
        return (
            event.section == self.messages_pallet_name
            and event.method == self.messages_received_method
        )

    def is_message_delivered(self, event: BlockEvent) -> bool:
        return (
            event.section == self.messages_pallet_name
            and event.method == self.messages_delivered_method
        )

    def is_consensus_header_import(self, event: BlockEvent) -> bool:
        return (
            event.section == self.grandpa_pallet_name
            and event.method == self.grandpa_import_method
        )

    def is_parachain_header_import(self, event: BlockEvent) -> bool:
        return (
            event.section == self.parachains_pallet_name
            and event.method == self.parachain_import_method
        )

    @classmethod
    def from_dict(cls, name: str, d: Dict[str, Any]) -> "BridgeDescriptor":
        """Adapter: Create from a `bridges.<name>` config section."""
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown bridge descriptor fields for {name}: {sorted(unknown)}")
        missing = [key for key in REQUIRED_DESCRIPTOR_FIELDS if key not in d]
        if missing:
            raise ValueError(f"Missing bridge descriptor fields for {name}: {missing}")
        values = dict(d)
        values["name"] = name
        values["bridged_bridge_hub_para_id"] = int(values["bridged_bridge_hub_para_id"])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "name"}


BUILTIN_BRIDGES: Dict[str, BridgeDescriptor] = {
    "rococo-at-westend": BridgeDescriptor(
        name="rococo-at-westend",
        grandpa_pallet_name="bridgeRococoGrandpa",
        parachains_pallet_name="bridgeRococoParachains",
        messages_pallet_name="bridgeRococoMessages",
        bridged_bridge_hub_para_id=1013,
    ),
    "westend-at-rococo": BridgeDescriptor(
        name="westend-at-rococo",
        grandpa_pallet_name="bridgeWestendGrandpa",
        parachains_pallet_name="bridgeWestendParachains",
        messages_pallet_name="bridgeWestendMessages",
        bridged_bridge_hub_para_id=1002,
    ),
}


def resolve_bridge(
    name: str,
    overrides: Optional[Mapping[str, Dict[str, Any]]] = None,
) -> BridgeDescriptor:
    """
    Look up a bridge descriptor by name.

    Descriptors declared in config (`overrides`) take precedence over the
    built-in ones.

    Raises:
        KeyError: If no descriptor with this name exists.
    """
    if overrides and name in overrides:
        return BridgeDescriptor.from_dict(name, overrides[name] or {})
    if name in BUILTIN_BRIDGES:
        return BUILTIN_BRIDGES[name]
    known = sorted(set(BUILTIN_BRIDGES) | set(overrides or {}))
    raise KeyError(f"Unknown bridge '{name}' (known: {', '.join(known)})")
