from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter

from ..api_models import HealthResponse, MonitorStatusResponse, OutcomeResponse
from ..state import state

router = APIRouter()

# Seconds without a published update before the feed is reported stale
STALE_AFTER_S = 60.0


def _compute_warnings(snapshot: Optional[Dict[str, Any]], last_update_age_s: Optional[float]) -> List[str]:
    """
    Warnings for /api/status.
    Thresholds: no update for more than STALE_AFTER_S while observing => feed_stale.
    """
    warnings: List[str] = []
    if snapshot is None:
        warnings.append("monitor_not_started")
        return warnings

    if snapshot.get("phase") == "observing":
        if last_update_age_s is None or last_update_age_s > STALE_AFTER_S:
            warnings.append("feed_stale")
        if not snapshot.get("ever_received_message"):
            warnings.append("no_messages_received")
        if not snapshot.get("ever_delivered_message"):
            warnings.append("no_messages_delivered")
    return warnings


def _derive_status(snapshot: Optional[Dict[str, Any]]) -> str:
    if snapshot is None:
        return "idle"
    outcome = snapshot.get("outcome")
    if outcome is None:
        return "running"
    return "passed" if outcome.get("succeeded") else "failed"


def _last_update_age() -> Optional[float]:
    last_ts = state.get_system_stats_copy().get("last_update_ts")
    if last_ts is None:
        return None
    return time.time() - last_ts


@router.get("/status", response_model=MonitorStatusResponse)
def get_status():
    snapshot = state.get_monitor_copy()
    warnings = _compute_warnings(snapshot, _last_update_age())
    if snapshot is None:
        return MonitorStatusResponse(phase="idle", warnings=warnings)

    start_time = snapshot.get("start_time")
    outcome = snapshot.get("outcome")
    return MonitorStatusResponse(
        bridge=snapshot.get("bridge"),
        phase=snapshot.get("phase", "observing"),
        ever_received_message=snapshot.get("ever_received_message", False),
        ever_delivered_message=snapshot.get("ever_delivered_message", False),
        blocks_observed=snapshot.get("blocks_observed", 0),
        last_block_number=snapshot.get("last_block_number"),
        uptime_seconds=int(time.time() - start_time) if start_time else None,
        outcome=OutcomeResponse(**outcome) if outcome else None,
        warnings=warnings,
    )


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status=_derive_status(state.get_monitor_copy()),
        last_update_age_s=_last_update_age(),
        timestamp=time.time(),
    )
