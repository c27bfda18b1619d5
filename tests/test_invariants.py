"""
Tests for header import invariants.
"""

import pytest

from algorithms.invariants import (
    CONSENSUS_HEADER,
    PARACHAIN_HEADER,
    REGIME_IDLE,
    REGIME_MESSAGES,
    IdleBlockCheck,
    InvariantEnforcer,
    MessageActivityCheck,
    Violation,
    enforce,
)
from models.block import StateSnapshot
from models.counts import EventCounts

from conftest import BRIDGE_HUB_PARA_ID, SYNCED_STATE


EMPTY_STATE = StateSnapshot()


def _rotated(state, by=1):
    """Same storage with the authority set id advanced."""
    return StateSnapshot(state.grandpa_authority_set_id + by, state.para_heads)


class TestViolation:
    def test_description(self):
        violation = Violation(kind=CONSENSUS_HEADER, regime=REGIME_MESSAGES, observed=2, allowed=1)

        assert violation.description == "consensus-header imports: 2 / allowed 1"
        assert str(violation) == violation.description


class TestIdleBlockCheck:
    def test_no_imports_ok(self, descriptor):
        check = IdleBlockCheck(descriptor)

        assert check.check(EventCounts(), SYNCED_STATE, SYNCED_STATE) is None

    def test_mandatory_grandpa_header_ok(self, descriptor):
        """A header that enacts an authority set change is allowed."""
        counts = EventCounts(consensus_header_imports=1)

        assert enforce(descriptor, counts, SYNCED_STATE, _rotated(SYNCED_STATE)) is None

    def test_grandpa_header_without_set_change_fails(self, descriptor):
        counts = EventCounts(consensus_header_imports=1)

        violation = enforce(descriptor, counts, SYNCED_STATE, SYNCED_STATE)

        assert violation == Violation(CONSENSUS_HEADER, REGIME_IDLE, observed=1, allowed=0)

    def test_excess_grandpa_headers_fail(self, descriptor):
        counts = EventCounts(consensus_header_imports=2)

        violation = enforce(descriptor, counts, SYNCED_STATE, _rotated(SYNCED_STATE))

        assert violation.kind == CONSENSUS_HEADER
        assert violation.observed == 2
        assert violation.allowed == 1
        assert "2 / allowed 1" in violation.description

    def test_allowed_consensus_never_negative(self, descriptor):
        check = IdleBlockCheck(descriptor)

        assert check.allowed_consensus_imports(_rotated(SYNCED_STATE), SYNCED_STATE) == 0

    def test_initial_parachain_head_ok(self, descriptor):
        counts = EventCounts(parachain_header_imports=1)
        after = StateSnapshot(0, frozenset({BRIDGE_HUB_PARA_ID}))

        assert enforce(descriptor, counts, EMPTY_STATE, after) is None

    def test_parachain_head_update_fails(self, descriptor):
        """Replacing a known head without messages is not allowed."""
        counts = EventCounts(parachain_header_imports=1)

        violation = enforce(descriptor, counts, SYNCED_STATE, SYNCED_STATE)

        assert violation == Violation(PARACHAIN_HEADER, REGIME_IDLE, observed=1, allowed=0)

    def test_two_initial_parachain_heads_fail(self, descriptor):
        counts = EventCounts(parachain_header_imports=2)

        violation = enforce(descriptor, counts, EMPTY_STATE, EMPTY_STATE)

        assert violation.kind == PARACHAIN_HEADER
        assert violation.allowed == 1

    def test_head_of_other_parachain_does_not_count_as_known(self, descriptor):
        counts = EventCounts(parachain_header_imports=1)
        parent = StateSnapshot(5, frozenset({2000}))

        assert enforce(descriptor, counts, parent, parent) is None

    def test_consensus_checked_before_parachain(self, descriptor):
        counts = EventCounts(consensus_header_imports=3, parachain_header_imports=3)

        violation = enforce(descriptor, counts, SYNCED_STATE, SYNCED_STATE)

        assert violation.kind == CONSENSUS_HEADER


class TestMessageActivityCheck:
    @pytest.mark.parametrize("received,delivered", [(True, False), (False, True), (True, True)])
    def test_one_of_each_ok(self, descriptor, received, delivered):
        counts = EventCounts(
            messages_received=received,
            messages_delivered=delivered,
            consensus_header_imports=1,
            parachain_header_imports=1,
        )

        assert enforce(descriptor, counts, SYNCED_STATE, SYNCED_STATE) is None

    def test_two_consensus_imports_fail(self, descriptor):
        counts = EventCounts(messages_received=True, consensus_header_imports=2)

        violation = enforce(descriptor, counts, SYNCED_STATE, SYNCED_STATE)

        assert violation == Violation(CONSENSUS_HEADER, REGIME_MESSAGES, observed=2, allowed=1)
        assert violation.description == "consensus-header imports: 2 / allowed 1"

    def test_two_parachain_imports_fail(self, descriptor):
        counts = EventCounts(messages_delivered=True, parachain_header_imports=2)

        violation = enforce(descriptor, counts, SYNCED_STATE, SYNCED_STATE)

        assert violation.kind == PARACHAIN_HEADER
        assert violation.description == "parachain-header imports: 2 / allowed 1"

    def test_state_diff_not_consulted(self, descriptor):
        """With messages, a known head may still be updated once."""
        check = MessageActivityCheck(descriptor)
        counts = EventCounts(messages_received=True, parachain_header_imports=1, consensus_header_imports=1)

        assert check.check(counts, SYNCED_STATE, SYNCED_STATE) is None


class TestInvariantEnforcer:
    def test_selects_regime(self, descriptor):
        enforcer = InvariantEnforcer(descriptor)

        assert isinstance(enforcer.select_check(EventCounts()), IdleBlockCheck)
        assert isinstance(enforcer.select_check(EventCounts(messages_delivered=True)), MessageActivityCheck)

    def test_missing_snapshots_mean_empty_storage(self, descriptor):
        enforcer = InvariantEnforcer(descriptor)

        assert enforcer.enforce(EventCounts(parachain_header_imports=1)) is None
        assert enforcer.enforce(EventCounts(consensus_header_imports=1)) is not None

    def test_current_defaults_to_parent(self, descriptor):
        enforcer = InvariantEnforcer(descriptor)

        violation = enforcer.enforce(EventCounts(parachain_header_imports=1), SYNCED_STATE)

        assert violation is not None
        assert violation.allowed == 0
