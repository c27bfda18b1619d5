"""
Header import invariants enforced on every observed block.

A relay that works correctly only submits bridged headers when it needs them
to prove messages. Two regimes are checked, selected by whether the block
carries message activity:

- Idle block: only headers the chain must import anyway are tolerated. The
  limits come from comparing bridge storage at the parent block with storage
  at the block itself (authority set changes, first parachain head).
- Message block: at most one GRANDPA header and at most one parachain head
  may accompany the messages.

The checks follow the same strategy interface so the enforcer can select one
per block without knowing how its limits are derived.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from bridges.descriptor import BridgeDescriptor
from models.block import StateSnapshot
from models.counts import EventCounts


CONSENSUS_HEADER = "consensus-header"
PARACHAIN_HEADER = "parachain-header"

REGIME_IDLE = "idle"
REGIME_MESSAGES = "messages"

# Headers tolerated next to message activity in the same block
MAX_IMPORTS_WITH_MESSAGES = 1


@dataclass(frozen=True)
class Violation:
    """
    An exceeded header import bound.

    Attributes:
        kind: CONSENSUS_HEADER or PARACHAIN_HEADER.
        regime: REGIME_IDLE or REGIME_MESSAGES.
        observed: Imports seen in the block.
        allowed: Imports the regime permits.
    """
    kind: str
    regime: str
    observed: int
    allowed: int

    @property
    def description(self) -> str:
        return f"{self.kind} imports: {self.observed} / allowed {self.allowed}"

    def __str__(self) -> str:
        return self.description


def _check_bound(kind: str, regime: str, observed: int, allowed: int) -> Optional[Violation]:
    if observed > allowed:
        return Violation(kind=kind, regime=regime, observed=observed, allowed=allowed)
    return None


class InvariantCheck(ABC):
    """
    A per-block header import check.

    Checks are stateless; everything they need arrives with the call.
    """

    regime: str = ""

    def __init__(self, descriptor: BridgeDescriptor):
        self._descriptor = descriptor

    @property
    def descriptor(self) -> BridgeDescriptor:
        return self._descriptor

    @abstractmethod
    def check(
        self,
        counts: EventCounts,
        parent_state: StateSnapshot,
        current_state: StateSnapshot,
    ) -> Optional[Violation]:
        """
        Verify one block.

        Args:
            counts: Classified events of the block.
            parent_state: Bridge storage at the parent block.
            current_state: Bridge storage at the block itself.

        Returns:
            The first violated bound, or None if the block is acceptable.
        """
        pass


class IdleBlockCheck(InvariantCheck):
    """
    Check for blocks without message activity.

    Only mandatory GRANDPA headers (one per authority set change) and the
    initial head of the bridged bridge hub may be imported.
    """

    regime = REGIME_IDLE

    def allowed_consensus_imports(self, parent_state: StateSnapshot, current_state: StateSnapshot) -> int:
        delta = current_state.grandpa_authority_set_id - parent_state.grandpa_authority_set_id
        return max(delta, 0)

    def allowed_parachain_imports(self, parent_state: StateSnapshot) -> int:
        if parent_state.has_para_head(self._descriptor.bridged_bridge_hub_para_id):
            return 0
        return 1

    def check(
        self,
        counts: EventCounts,
        parent_state: StateSnapshot,
        current_state: StateSnapshot,
    ) -> Optional[Violation]:
        return _check_bound(
            CONSENSUS_HEADER,
            self.regime,
            counts.consensus_header_imports,
            self.allowed_consensus_imports(parent_state, current_state),
        ) or _check_bound(
            PARACHAIN_HEADER,
            self.regime,
            counts.parachain_header_imports,
            self.allowed_parachain_imports(parent_state),
        )


class MessageActivityCheck(InvariantCheck):
    """Check for blocks carrying MessagesReceived or MessagesDelivered."""

    regime = REGIME_MESSAGES

    def check(
        self,
        counts: EventCounts,
        parent_state: StateSnapshot,
        current_state: StateSnapshot,
    ) -> Optional[Violation]:
        return _check_bound(
            CONSENSUS_HEADER,
            self.regime,
            counts.consensus_header_imports,
            MAX_IMPORTS_WITH_MESSAGES,
        ) or _check_bound(
            PARACHAIN_HEADER,
            self.regime,
            counts.parachain_header_imports,
            MAX_IMPORTS_WITH_MESSAGES,
        )


class InvariantEnforcer:
    """
    Selects and runs the check matching a block's regime.

    Example:
        enforcer = InvariantEnforcer(descriptor)
        violation = enforcer.enforce(counts, parent_state, current_state)
        if violation is not None:
            fail(violation)
    """

    def __init__(self, descriptor: BridgeDescriptor):
        self._descriptor = descriptor
        self._idle_check = IdleBlockCheck(descriptor)
        self._message_check = MessageActivityCheck(descriptor)

    @property
    def descriptor(self) -> BridgeDescriptor:
        return self._descriptor

    def select_check(self, counts: EventCounts) -> InvariantCheck:
        if counts.has_message_activity:
            return self._message_check
        return self._idle_check

    def enforce(
        self,
        counts: EventCounts,
        parent_state: Optional[StateSnapshot] = None,
        current_state: Optional[StateSnapshot] = None,
    ) -> Optional[Violation]:
        """
        Check one block.

        Missing snapshots are treated as empty bridge storage. When only the
        parent snapshot is given, the block is assumed not to change it.
        """
        parent_state = parent_state or StateSnapshot()
        current_state = current_state or parent_state
        return self.select_check(counts).check(counts, parent_state, current_state)


def enforce(
    descriptor: BridgeDescriptor,
    counts: EventCounts,
    parent_state: Optional[StateSnapshot] = None,
    current_state: Optional[StateSnapshot] = None,
) -> Optional[Violation]:
    """Functional shortcut for InvariantEnforcer(descriptor).enforce(...)."""
    return InvariantEnforcer(descriptor).enforce(counts, parent_state, current_state)
