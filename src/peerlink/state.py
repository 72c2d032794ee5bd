"""Peer link models shared by the table and the monitor."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field

from .latency import LatencyTracker


class Offerer(enum.Enum):
    """Lado que ofereceu a conexão."""

    REMOTE = "REMOTE"
    LOCAL = "LOCAL"


STATUS_NEW = "NEW"
STATUS_CONNECTED = "CONNECTED"
STATUS_QUIET = "QUIET"
STATUS_CLOSED = "CLOSED"


@dataclass(slots=True)
class PeerLink:
    """Enlace com um peer remoto conforme mantido na ``PeerTable``."""

    remote_address: str
    remote_port: int
    remote_id: int
    remote_username: str
    offerer: Offerer
    connected: bool = False
    echo_requests_sent: int = 0
    status: str = STATUS_NEW
    tracker: LatencyTracker = field(default_factory=LatencyTracker)

    @property
    def endpoint(self) -> str:
        return f"{self.remote_address}:{self.remote_port}"

    def to_dict(self) -> dict:
        data = {
            "remote_id": self.remote_id,
            "remote_username": self.remote_username,
            "endpoint": self.endpoint,
            "offerer": self.offerer.value,
            "connected": self.connected,
            "status": self.status,
            "echo_requests_sent": self.echo_requests_sent,
        }
        data.update(self.tracker.snapshot())
        return data
