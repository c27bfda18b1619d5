"""
Block models: events, state snapshots and block notifications.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple


@dataclass(frozen=True)
class BlockEvent:
    """
    A runtime event as emitted by the chain.

    Attributes:
        section: Pallet name the event belongs to (e.g. "bridgeRococoMessages").
        method: Event variant name (e.g. "MessagesReceived").
        data: Event payload, opaque to the monitor.
    """
    section: str
    method: str
    data: Any = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BlockEvent":
        if not isinstance(d, dict) or "section" not in d or "method" not in d:
            raise ValueError(f"Event requires 'section' and 'method': {d!r}")
        return cls(
            section=str(d["section"]),
            method=str(d["method"]),
            data=d.get("data", {}),
        )

    def to_dict(self) -> dict:
        return {"section": self.section, "method": self.method, "data": self.data}

    def __str__(self) -> str:
        return f"{self.section}.{self.method}"


@dataclass(frozen=True)
class StateSnapshot:
    """
    Bridge pallet storage read at one block.

    Attributes:
        grandpa_authority_set_id: Id of the bridged GRANDPA authority set.
        para_heads: Para ids that have a best head recorded by the parachains pallet.
    """
    grandpa_authority_set_id: int = 0
    para_heads: FrozenSet[int] = frozenset()

    def has_para_head(self, para_id: int) -> bool:
        return para_id in self.para_heads

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "StateSnapshot":
        d = d or {}
        if not isinstance(d, dict):
            raise ValueError(f"State snapshot must be a mapping: {d!r}")
        para_heads = d.get("para_heads") or []
        if not isinstance(para_heads, list):
            raise ValueError(f"para_heads must be a list of para ids: {para_heads!r}")
        try:
            return cls(
                grandpa_authority_set_id=int(d.get("grandpa_authority_set_id", 0)),
                para_heads=frozenset(int(p) for p in para_heads),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid state snapshot {d!r}: {e}") from e

    def to_dict(self) -> dict:
        return {
            "grandpa_authority_set_id": self.grandpa_authority_set_id,
            "para_heads": sorted(self.para_heads),
        }


@dataclass(frozen=True)
class BlockNotification:
    """
    One block delivered by a block source.

    Carries the events attached to the block together with the bridge state
    at its parent and at the block itself, so the idle-block check can diff
    the two without querying the chain.
    """
    number: int
    block_hash: str
    parent_hash: str
    events: Tuple[BlockEvent, ...] = ()
    parent_state: StateSnapshot = field(default_factory=StateSnapshot)
    current_state: StateSnapshot = field(default_factory=StateSnapshot)

    @classmethod
    def create(
        cls,
        number: int,
        events: Iterable[BlockEvent] = (),
        parent_state: Optional[StateSnapshot] = None,
        current_state: Optional[StateSnapshot] = None,
        block_hash: Optional[str] = None,
        parent_hash: Optional[str] = None,
    ) -> "BlockNotification":
        """Build a notification, deriving placeholder hashes from the block number."""
        return cls(
            number=number,
            block_hash=block_hash or f"0x{number:064x}",
            parent_hash=parent_hash or f"0x{max(number - 1, 0):064x}",
            events=tuple(events),
            parent_state=parent_state or StateSnapshot(),
            current_state=current_state or parent_state or StateSnapshot(),
        )
