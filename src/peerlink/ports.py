"""Ephemeral local-port allocation by random bind probing."""
from __future__ import annotations

import enum
import logging
import random
import socket
from typing import Optional


logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 10000

# Fonte de entropia do SO: sem estado compartilhado entre threads.
_system_random = random.SystemRandom()


class TransportKind(enum.Enum):
    STREAM = "tcp"
    DATAGRAM = "udp"

    @property
    def socket_type(self) -> int:
        return socket.SOCK_STREAM if self is TransportKind.STREAM else socket.SOCK_DGRAM


class AllocationExhausted(RuntimeError):
    """Nenhuma porta livre encontrada dentro do número máximo de tentativas."""

    def __init__(self, min_port: int, max_port: int, kind: TransportKind, attempts: int) -> None:
        super().__init__(
            f"Nenhuma porta {kind.value} livre em [{min_port}, {max_port}) após {attempts} tentativas"
        )
        self.min_port = min_port
        self.max_port = max_port
        self.kind = kind
        self.attempts = attempts


def _try_bind(host: str, port: int, kind: TransportKind) -> bool:
    # Sem SO_REUSEADDR: o bind precisa ser exclusivo.
    sock = socket.socket(socket.AF_INET, kind.socket_type)
    try:
        sock.bind((host, port))
    except OSError:
        return False
    finally:
        sock.close()
    return True


def find_free_port(
    min_port: int,
    max_port: int,
    kind: TransportKind = TransportKind.STREAM,
    *,
    attempts: int = MAX_ATTEMPTS,
    host: str = "",
    rng: Optional[random.Random] = None,
) -> int:
    """Sorteia portas em ``[min_port, max_port)`` até conseguir um bind.

    O socket é liberado logo após o teste, então a porta retornada é apenas
    uma sugestão: o chamador deve estar pronto para alocar de novo se o seu
    próprio bind falhar.

    Raises:
        ValueError: Se a faixa for vazia ou estiver fora de 1-65535.
        AllocationExhausted: Se todas as ``attempts`` tentativas falharem.
    """
    if min_port >= max_port:
        raise ValueError(f"faixa vazia: [{min_port}, {max_port})")
    if min_port < 1 or max_port > 65536:
        raise ValueError(f"faixa fora dos limites de porta: [{min_port}, {max_port})")
    if attempts < 1:
        raise ValueError(f"attempts deve ser positivo, recebido: {attempts}")

    source = rng or _system_random
    for _ in range(attempts):
        candidate = source.randrange(min_port, max_port)
        if _try_bind(host, candidate, kind):
            logger.debug("Porta %s livre encontrada: %d", kind.value, candidate)
            return candidate

    logger.error("Não foi possível encontrar porta %s livre em [%d, %d)", kind.value, min_port, max_port)
    raise AllocationExhausted(min_port, max_port, kind, attempts)


def find_free_tcp_port(min_port: int, max_port: int) -> int:
    return find_free_port(min_port, max_port, TransportKind.STREAM)


def find_free_udp_port(min_port: int, max_port: int) -> int:
    return find_free_port(min_port, max_port, TransportKind.DATAGRAM)
