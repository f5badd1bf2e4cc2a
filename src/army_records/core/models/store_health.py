"""
StoreHealth model: result of probing the database.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class StoreHealth(BaseModel):
    """
    Result of a store connectivity check.

    Attributes:
        connected: Whether the probe query succeeded
        checked_at: When the probe ran
        error: Failure description, None when connected
        soldier_count: Number of stored soldiers seen by the probe
        latency_ms: Round-trip time of the probe
    """

    connected: bool
    checked_at: datetime = Field(default_factory=datetime.utcnow)
    error: str | None = None
    soldier_count: int | None = None
    latency_ms: float | None = None
