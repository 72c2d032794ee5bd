"""Periodic liveness checks over the peer table."""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from .config import MonitorSettings
from .peer_table import PeerTable
from .state import PeerLink


logger = logging.getLogger(__name__)


class LinkMonitor:
    """Consulta a ``PeerTable`` a cada intervalo e sinaliza enlaces silenciosos.

    O callback ``on_quiet`` é chamado uma vez por transição para QUIET; a
    decisão de sondar, reconectar ou derrubar o enlace fica com o chamador.
    """

    def __init__(
        self,
        settings: MonitorSettings,
        peer_table: PeerTable,
        on_quiet: Optional[Callable[[PeerLink], None]] = None,
    ) -> None:
        self.settings = settings
        self.peer_table = peer_table
        self.on_quiet = on_quiet
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def start(self) -> None:
        """Inicia a thread de monitoramento."""

        if self._thread and self._thread.is_alive():
            return

        def _loop() -> None:
            while not self._stop_event.is_set():
                self._stop_event.wait(self.settings.poll_interval)
                if not self._stop_event.is_set():
                    self.check_once()

        self._stop_event.clear()
        self._thread = threading.Thread(target=_loop, name="link-monitor", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            # Chamado de dentro do on_quiet: o loop termina sozinho.
            return
        if thread.is_alive():
            thread.join(timeout=2)
        if not thread.is_alive():
            self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def check_once(self) -> List[PeerLink]:
        """Executa uma verificação; retorna os peers que ficaram silenciosos agora."""

        newly_quiet: List[PeerLink] = []
        for link in self.peer_table.quiet_peers():
            if not self.peer_table.mark_quiet(link.remote_id):
                continue
            newly_quiet.append(link)
            logger.warning(
                "[%s] Peer silencioso há %.0fms (%s)",
                link.remote_id,
                link.tracker.idle_ms(),
                link.endpoint,
            )
            if self.on_quiet:
                try:
                    self.on_quiet(link)
                except Exception:
                    logger.exception("[%s] Erro no callback de peer silencioso", link.remote_id)
        return newly_quiet
