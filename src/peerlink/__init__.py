"""Peer-link health monitoring for the session manager.

Módulos:
- ``latency`` mantém a janela de RTT por peer (latência, jitter, silêncio).
- ``ports`` sorteia e testa portas locais livres (TCP ou UDP).
- ``state`` e ``peer_table`` modelam os enlaces e seus trackers.
- ``keep_alive`` verifica periodicamente os enlaces silenciosos.
- ``config`` carrega parâmetros de arquivo JSON.
- ``main`` expõe a alocação de porta na linha de comando.
"""
from .config import ConfigValidationError, MonitorSettings
from .keep_alive import LinkMonitor
from .latency import InvalidSample, LatencyTracker
from .peer_table import PeerTable
from .ports import AllocationExhausted, TransportKind, find_free_port
from .state import Offerer, PeerLink

__all__ = [
    "AllocationExhausted",
    "ConfigValidationError",
    "InvalidSample",
    "LatencyTracker",
    "LinkMonitor",
    "MonitorSettings",
    "Offerer",
    "PeerLink",
    "PeerTable",
    "TransportKind",
    "find_free_port",
]
