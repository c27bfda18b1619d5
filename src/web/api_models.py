from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class OutcomeResponse(BaseModel):
    succeeded: bool
    reason: str
    failure_type: Optional[str] = None
    blocks_observed: int = 0
    block_number: Optional[int] = None


class MonitorStatusResponse(BaseModel):
    """
    Monitor status optimized for polling while a bridge test runs.
    """
    bridge: Optional[str] = Field(None, description="Bridge descriptor name")
    phase: str = Field(..., description="idle|observing|terminated")
    ever_received_message: bool = False
    ever_delivered_message: bool = False
    blocks_observed: int = 0
    last_block_number: Optional[int] = None
    uptime_seconds: Optional[int] = None
    outcome: Optional[OutcomeResponse] = None
    warnings: list[str] = Field(default_factory=list, description="Active warnings")


class HealthResponse(BaseModel):
    status: str = Field(..., description="running|passed|failed|idle")
    last_update_age_s: Optional[float] = None
    timestamp: float
