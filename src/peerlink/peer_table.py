"""Thread-safe in-memory registry of peer links and their latency trackers."""
from __future__ import annotations

import logging
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional

from .config import MonitorSettings
from .latency import LatencyTracker
from .state import STATUS_CLOSED, STATUS_CONNECTED, STATUS_QUIET, Offerer, PeerLink


logger = logging.getLogger(__name__)


class PeerTable:
    """Mantém os enlaces ativos, um ``LatencyTracker`` por peer.

    - Cria o tracker quando o enlace é aberto e o descarta no ``remove``.
    - Encaminha cada RTT recebido para o tracker do peer.
    - Fornece snapshots e a lista de peers silenciosos para o ``LinkMonitor``.
    """

    def __init__(
        self,
        settings: Optional[MonitorSettings] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.settings = settings or MonitorSettings()
        self._clock = clock
        self._links: Dict[int, PeerLink] = {}
        self._lock = RLock()

    def open_link(
        self,
        remote_address: str,
        remote_port: int,
        remote_id: int,
        remote_username: str,
        offerer: Offerer,
    ) -> PeerLink:
        """Registra um novo enlace (substitui um anterior com o mesmo id)."""
        tracker = LatencyTracker(
            window_size=self.settings.window_size,
            quiet_threshold_ms=self.settings.quiet_threshold_ms,
            clock=self._clock,
        )
        link = PeerLink(
            remote_address=remote_address,
            remote_port=remote_port,
            remote_id=remote_id,
            remote_username=remote_username,
            offerer=offerer,
            tracker=tracker,
        )
        with self._lock:
            replaced = self._links.get(remote_id)
            if replaced is not None:
                replaced.status = STATUS_CLOSED
                logger.info("[%s] Enlace anterior substituído", remote_id)
            self._links[remote_id] = link
        logger.debug("[%s] Enlace aberto com %s (%s)", remote_id, link.endpoint, offerer.value)
        return link

    def get(self, remote_id: int) -> Optional[PeerLink]:
        with self._lock:
            return self._links.get(remote_id)

    def exists(self, remote_id: int) -> bool:
        with self._lock:
            return remote_id in self._links

    def all(self) -> Iterable[PeerLink]:
        with self._lock:
            return list(self._links.values())

    def remove(self, remote_id: int) -> Optional[PeerLink]:
        with self._lock:
            link = self._links.pop(remote_id, None)
        if link is not None:
            link.connected = False
            link.status = STATUS_CLOSED
            logger.debug("[%s] Enlace removido", remote_id)
        return link

    def mark_connected(self, remote_id: int) -> None:
        with self._lock:
            link = self._links.get(remote_id)
            if link:
                link.connected = True
                link.status = STATUS_CONNECTED

    def mark_quiet(self, remote_id: int) -> bool:
        """Marca o peer como QUIET se ainda estiver silencioso; retorna True apenas na transição."""
        with self._lock:
            link = self._links.get(remote_id)
            if link is None or link.status == STATUS_QUIET:
                return False
            # O RTT pode ter chegado depois de quiet_peers().
            if not (link.connected and link.tracker.is_quiet()):
                return False
            link.status = STATUS_QUIET
            return True

    def record_echo_sent(self, remote_id: int) -> None:
        with self._lock:
            link = self._links.get(remote_id)
            if link:
                link.echo_requests_sent += 1

    def record_latency(self, remote_id: int, rtt_ms: int) -> Optional[int]:
        """Alimenta o tracker do peer; retorna a latência média ou None se desconhecido."""
        with self._lock:
            link = self._links.get(remote_id)
            if link is None:
                logger.debug("[%s] RTT para peer desconhecido ignorado", remote_id)
                return None
            latency = link.tracker.accept(rtt_ms)
            if link.status == STATUS_QUIET:
                link.status = STATUS_CONNECTED
                logger.info("[%s] Peer voltou a responder (latência %dms)", remote_id, latency)
            return latency

    def quiet_peers(self) -> List[PeerLink]:
        """Peers conectados cujo tracker está silencioso."""
        with self._lock:
            return [
                link for link in self._links.values()
                if link.connected and link.tracker.is_quiet()
            ]

    def stats(self) -> Dict[str, int]:
        """Retorna contadores básicos dos enlaces."""

        with self._lock:
            total = len(self._links)
            connected = sum(1 for link in self._links.values() if link.connected)
            quiet = sum(1 for link in self._links.values() if link.status == STATUS_QUIET)
        return {"total": total, "connected": connected, "quiet": quiet}

    def snapshot(self) -> List[dict]:
        with self._lock:
            links = list(self._links.values())
        return [link.to_dict() for link in links]
