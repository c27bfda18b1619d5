"""
Monitor engine for the bridge relay monitor.

This module drives the observation loop: blocks from a BlockSource are
classified, checked against the header import invariants and folded into the
run's MonitorState until both message conditions are met, an invariant is
violated, or the observation window elapses.

Block notifications and the timeout are multiplexed into a single queue with
a single consumer, so exactly one of them decides the outcome and whatever
arrives afterwards is dropped.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from algorithms.classification import classify
from algorithms.invariants import InvariantEnforcer
from bridges.descriptor import BridgeDescriptor, resolve_bridge
from models.block import BlockNotification
from models.counts import EventCounts
from models.errors import InvariantViolation, MonitorFailure, SourceError, TimeoutExpired
from models.outcome import MonitorOutcome, MonitorPhase, MonitorState
from observation import BlockSource, create_source_from_config


# Queue item kinds
_BLOCK = "block"
_TIMEOUT = "timeout"
_SOURCE_ERROR = "source_error"


@dataclass
class MonitorConfig:
    """
    Configuration for the monitor engine.

    Attributes:
        timeout_seconds: Observation window before failing by timeout.
        stats_log_interval: Seconds between progress log messages.
        shutdown_grace: Seconds to wait for the feeder thread on shutdown.
    """
    timeout_seconds: float = 600.0
    stats_log_interval: float = 60.0
    shutdown_grace: float = 2.0


@dataclass
class MonitorStats:
    """Runtime statistics for the engine."""
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    message_blocks: int = 0
    consensus_header_imports: int = 0
    parachain_header_imports: int = 0


class MonitorEngine:
    """
    Pass/fail observer of a bridge relay.

    This engine:
    - Reads blocks from any BlockSource on a feeder thread
    - Classifies each block's events (pure, per block)
    - Enforces the header import invariants (fatal on violation)
    - Tracks whether messages were ever received and delivered
    - Fails when the observation window elapses first

    Example:
        source = ReplayBlockSource(ReplayBlockSourceConfig(path="trace.yaml"))
        engine = MonitorEngine(source, descriptor, MonitorConfig(timeout_seconds=300))
        outcome = engine.run()
        sys.exit(outcome.exit_code)
    """

    def __init__(
        self,
        source: BlockSource,
        descriptor: BridgeDescriptor,
        config: Optional[MonitorConfig] = None,
        status: Any = None,
    ):
        self.source = source
        self.descriptor = descriptor
        self.config = config or MonitorConfig()
        self.state = MonitorState()
        self.stats = MonitorStats()
        self._enforcer = InvariantEnforcer(descriptor)
        self._status = status
        self._phase = MonitorPhase.OBSERVING
        self._outcome: Optional[MonitorOutcome] = None
        self._queue: "queue.Queue[Tuple[str, Any]]" = queue.Queue()
        self._stop_feeding = threading.Event()
        self._feeder: Optional[threading.Thread] = None
        self._timer: Optional[threading.Timer] = None
        self._callbacks: List[Callable[[BlockNotification, EventCounts], None]] = []

    @property
    def phase(self) -> MonitorPhase:
        return self._phase

    @property
    def outcome(self) -> Optional[MonitorOutcome]:
        return self._outcome

    @property
    def is_terminated(self) -> bool:
        return self._phase is MonitorPhase.TERMINATED

    def add_callback(self, callback: Callable[[BlockNotification, EventCounts], None]) -> None:
        """
        Add a callback to be called after each accepted block.

        Args:
            callback: Function taking (block, counts) as arguments.
        """
        self._callbacks.append(callback)

    def handle_block(self, block: BlockNotification) -> Optional[MonitorOutcome]:
        """
        Process one block.

        Returns the outcome if this block terminated the run, None otherwise.
        Blocks arriving after termination are ignored.
        """
        if self.is_terminated:
            logging.debug(f"Ignoring block #{block.number}: monitor already terminated")
            return None

        counts = classify(self.descriptor, block.events)
        violation = self._enforcer.enforce(counts, block.parent_state, block.current_state)
        if violation is not None:
            self._log_events(block)
            failure = InvariantViolation(violation, block_number=block.number, block_hash=block.block_hash)
            return self._terminate(MonitorOutcome.failed(failure, self.state.blocks_observed, block.number))

        self.state.observe(block.number, counts)
        self._accumulate(counts)
        if counts.has_message_activity:
            logging.info(
                f"Block #{block.number}: received={counts.messages_received} "
                f"delivered={counts.messages_delivered} "
                f"grandpa_imports={counts.consensus_header_imports} "
                f"parachain_imports={counts.parachain_header_imports}"
            )
        else:
            logging.debug(f"Block #{block.number}: no message activity")

        for callback in self._callbacks:
            try:
                callback(block, counts)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

        self._publish_status()

        if self.state.is_complete:
            return self._terminate(MonitorOutcome.success(self.state.blocks_observed, block.number))
        return None

    def handle_timeout(self) -> Optional[MonitorOutcome]:
        """
        Process expiry of the observation window.

        Returns the failure outcome, or None if the run had already terminated.
        """
        if self.is_terminated:
            return None
        failure = TimeoutExpired(self.state.missing_conditions(), self.config.timeout_seconds)
        return self._terminate(MonitorOutcome.failed(failure, self.state.blocks_observed))

    def run(self) -> MonitorOutcome:
        """
        Run the observation loop until an outcome is decided.

        Opens the source, starts the feeder thread and the timeout timer, then
        consumes the queue on the calling thread. Resources are released
        before returning.
        """
        self.stats = MonitorStats()
        self._publish_status()

        try:
            self.source.open()
        except Exception as e:
            logging.error(f"Failed to open block source {self.source.source_id}: {e}")
            return self._terminate(MonitorOutcome.failed(SourceError(str(e)), 0))

        logging.info(
            f"Monitor started: bridge={self.descriptor.name} source={self.source.source_id} "
            f"timeout={self.config.timeout_seconds}s"
        )
        self._start_timer()
        self._start_feeder()

        try:
            while not self.is_terminated:
                try:
                    kind, payload = self._queue.get(timeout=self.config.stats_log_interval)
                except queue.Empty:
                    self._handle_periodic_tasks()
                    continue
                self._dispatch(kind, payload)
                self._handle_periodic_tasks()
        except KeyboardInterrupt:
            logging.info("Monitor interrupted by user")
            self._terminate(MonitorOutcome.failed(
                MonitorFailure("Monitor interrupted by user"), self.state.blocks_observed,
            ))
        finally:
            self._cleanup()

        return self._outcome

    def _dispatch(self, kind: str, payload: Any) -> None:
        if kind == _BLOCK:
            self.handle_block(payload)
        elif kind == _TIMEOUT:
            self.handle_timeout()
        elif kind == _SOURCE_ERROR and not self.is_terminated:
            self._terminate(MonitorOutcome.failed(
                SourceError(f"Block source failed: {payload}"),
                self.state.blocks_observed,
                self.state.last_block_number,
            ))

    def _start_timer(self) -> None:
        self._timer = threading.Timer(self.config.timeout_seconds, self._queue.put, args=((_TIMEOUT, None),))
        self._timer.daemon = True
        self._timer.start()

    def _start_feeder(self) -> None:
        self._feeder = threading.Thread(target=self._feed, name="block-feeder", daemon=True)
        self._feeder.start()

    def _feed(self) -> None:
        """Feeder thread: forward blocks from the source into the queue."""
        try:
            for block in self.source:
                if self._stop_feeding.is_set():
                    return
                self._queue.put((_BLOCK, block))
        except Exception as e:
            if not self._stop_feeding.is_set():
                logging.error(f"Block source error: {e}")
                self._queue.put((_SOURCE_ERROR, e))
            return
        if not self._stop_feeding.is_set():
            logging.info(f"Block source exhausted after {self.source.block_index} blocks")

    def _terminate(self, outcome: MonitorOutcome) -> MonitorOutcome:
        self._phase = MonitorPhase.TERMINATED
        self._outcome = outcome
        if outcome.succeeded:
            logging.info(
                f"Monitor succeeded at block #{outcome.block_number} "
                f"after {outcome.blocks_observed} blocks"
            )
        else:
            logging.error(f"Monitor failed: {outcome.reason}")
        self._publish_status()
        return outcome

    def _accumulate(self, counts: EventCounts) -> None:
        if counts.has_message_activity:
            self.stats.message_blocks += 1
        self.stats.consensus_header_imports += counts.consensus_header_imports
        self.stats.parachain_header_imports += counts.parachain_header_imports

    def _log_events(self, block: BlockNotification) -> None:
        """Dump the events of an offending block."""
        logging.error(f"Events of block #{block.number} ({block.block_hash}):")
        for event in block.events:
            logging.error(f"  {event} {event.data!r}")

    def _handle_periodic_tasks(self) -> None:
        """Log progress periodically."""
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Monitor stats: blocks={self.state.blocks_observed}, "
                f"message_blocks={self.stats.message_blocks}, "
                f"grandpa_imports={self.stats.consensus_header_imports}, "
                f"parachain_imports={self.stats.parachain_header_imports}, "
                f"received={self.state.ever_received_message}, "
                f"delivered={self.state.ever_delivered_message}"
            )
            self.stats.last_stats_log_time = now

    def _publish_status(self) -> None:
        if self._status is not None and hasattr(self._status, "update_monitor"):
            self._status.update_monitor(self.snapshot())

    def snapshot(self) -> Dict[str, Any]:
        """Point-in-time view of the run for status reporting."""
        return {
            "bridge": self.descriptor.name,
            "phase": self._phase.value,
            "ever_received_message": self.state.ever_received_message,
            "ever_delivered_message": self.state.ever_delivered_message,
            "blocks_observed": self.state.blocks_observed,
            "last_block_number": self.state.last_block_number,
            "outcome": self._outcome.to_dict() if self._outcome else None,
            "start_time": self.stats.start_time,
        }

    def _cleanup(self) -> None:
        """Cancel the timer and unsubscribe from the source."""
        self._stop_feeding.set()
        if self._timer is not None:
            self._timer.cancel()

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        if self._feeder is not None and self._feeder is not threading.current_thread():
            self._feeder.join(timeout=self.config.shutdown_grace)

        logging.info("Monitor stopped")


def create_engine_from_config(
    config: Dict[str, Any],
    status: Any = None,
) -> MonitorEngine:
    """
    Factory function to create a MonitorEngine from the application config dict.

    Args:
        config: Full application config dict.
        status: Optional status board published to the web API.
    """
    descriptor = resolve_bridge(config["bridge"], config.get("bridges"))
    source = create_source_from_config(config.get("source", {}) or {}, source_id=descriptor.name)

    monitor_cfg = config.get("monitor", {}) or {}
    engine_config = MonitorConfig(
        timeout_seconds=float(config["timeout_seconds"]),
        stats_log_interval=float(monitor_cfg.get("stats_log_interval", 60.0)),
    )
    return MonitorEngine(source, descriptor, engine_config, status=status)
