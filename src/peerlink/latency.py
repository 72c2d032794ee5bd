"""Rolling round-trip latency window for a single remote peer."""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, List, Optional


WINDOW_SIZE = 10
QUIET_THRESHOLD_MS = 5000


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class InvalidSample(ValueError):
    """Amostra de RTT inválida (não inteira ou negativa)."""


class LatencyTracker:
    """Mantém as últimas amostras de RTT (ms) e deriva latência, jitter e silêncio.

    A janela é FIFO de capacidade fixa: ao aceitar a 11ª amostra a mais antiga
    é descartada. Janela vazia vale 0 para latência e jitter. Todas as
    operações compartilham um único lock, então a janela e ``last_update``
    nunca são observados no meio de uma atualização.
    """

    def __init__(
        self,
        window_size: int = WINDOW_SIZE,
        quiet_threshold_ms: float = QUIET_THRESHOLD_MS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._clock = clock or monotonic_ms
        self._samples: Deque[int] = deque(maxlen=window_size)
        self._lock = threading.RLock()
        self.quiet_threshold_ms = quiet_threshold_ms
        # Enlace recém-criado não conta como silencioso.
        self._last_update = self._clock()

    @property
    def last_update(self) -> float:
        with self._lock:
            return self._last_update

    def accept(self, sample: int) -> int:
        """Registra uma amostra de RTT e retorna a latência média atualizada."""
        if not isinstance(sample, int) or isinstance(sample, bool):
            raise InvalidSample(f"RTT deve ser inteiro em ms, recebido: {type(sample).__name__}")
        if sample < 0:
            raise InvalidSample(f"RTT negativo: {sample}")
        with self._lock:
            self._last_update = self._clock()
            self._samples.append(sample)
            return self.latency()

    def latency(self) -> int:
        """Média aritmética truncada em direção a zero; 0 com janela vazia."""
        with self._lock:
            if not self._samples:
                return 0
            # Amostras são não-negativas, então divisão inteira == truncamento.
            return sum(self._samples) // len(self._samples)

    def jitter(self) -> int:
        """Maior desvio (acima ou abaixo) em relação à média da janela."""
        with self._lock:
            if not self._samples:
                return 0
            lat = self.latency()
            return max(max(self._samples) - lat, lat - min(self._samples))

    def idle_ms(self) -> float:
        with self._lock:
            return self._clock() - self._last_update

    def is_quiet(self) -> bool:
        return self.idle_ms() > self.quiet_threshold_ms

    def samples(self) -> List[int]:
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def snapshot(self) -> Dict[str, object]:
        """Retorna as métricas atuais de forma consistente (um único lock)."""

        with self._lock:
            idle = self.idle_ms()
            return {
                "latency_ms": self.latency(),
                "jitter_ms": self.jitter(),
                "samples": len(self._samples),
                "idle_ms": idle,
                "quiet": idle > self.quiet_threshold_ms,
            }
