"""Configuration helpers for the peer-link monitor.

Responsabilidades:
- Carregar arquivos ``config.json`` e aplicar defaults seguros.
- Validar limites (faixa de portas, janela de amostras, limiar de silêncio).
- Traduzir o transporte configurado para ``TransportKind``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .ports import MAX_ATTEMPTS, TransportKind


MIN_PORT = 1
MAX_PORT = 65535
MIN_WINDOW = 1
MAX_WINDOW = 1024
TRANSPORTS = {"tcp": TransportKind.STREAM, "udp": TransportKind.DATAGRAM}


class ConfigValidationError(ValueError):
    """Erro de validação de configuração."""
    pass


def validate_port(port: int) -> int:
    """Valida uma porta (1-65535)."""
    if not isinstance(port, int) or isinstance(port, bool):
        raise ConfigValidationError(f"port deve ser inteiro, recebido: {type(port).__name__}")
    if port < MIN_PORT or port > MAX_PORT:
        raise ConfigValidationError(f"port deve estar entre {MIN_PORT} e {MAX_PORT}, recebido: {port}")
    return port


def validate_port_range(port_min: int, port_max: int) -> tuple[int, int]:
    """Valida a faixa ``[port_min, port_max)``; ``port_max`` pode ser 65536."""
    validate_port(port_min)
    if not isinstance(port_max, int) or isinstance(port_max, bool):
        raise ConfigValidationError(f"port_max deve ser inteiro, recebido: {type(port_max).__name__}")
    if port_max <= port_min or port_max > MAX_PORT + 1:
        raise ConfigValidationError(
            f"faixa de portas inválida: [{port_min}, {port_max}) (exige min < max <= {MAX_PORT + 1})"
        )
    return port_min, port_max


def validate_window(size: int) -> int:
    if not isinstance(size, int) or isinstance(size, bool):
        raise ConfigValidationError(f"window_size deve ser inteiro, recebido: {type(size).__name__}")
    if size < MIN_WINDOW or size > MAX_WINDOW:
        raise ConfigValidationError(f"window_size deve estar entre {MIN_WINDOW} e {MAX_WINDOW}, recebido: {size}")
    return size


def validate_positive(name: str, value: float) -> float:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ConfigValidationError(f"{name} deve ser numérico, recebido: {type(value).__name__}")
    if value <= 0:
        raise ConfigValidationError(f"{name} deve ser positivo, recebido: {value}")
    return value


def validate_attempts(attempts: int) -> int:
    if not isinstance(attempts, int) or isinstance(attempts, bool):
        raise ConfigValidationError(f"port_attempts deve ser inteiro, recebido: {type(attempts).__name__}")
    return int(validate_positive("port_attempts", attempts))


def validate_log_level(level: str) -> str:
    """Valida o nível de log (DEBUG, INFO, WARNING, ...)."""
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        raise ConfigValidationError(f"log_level inválido: {level!r}")
    return level.upper()


def validate_transport(transport: str) -> TransportKind:
    """Valida o campo transport (``tcp`` ou ``udp``)."""
    if not isinstance(transport, str) or transport.lower() not in TRANSPORTS:
        raise ConfigValidationError(f"transport deve ser 'tcp' ou 'udp', recebido: {transport!r}")
    return TRANSPORTS[transport.lower()]


@dataclass(slots=True)
class MonitorSettings:
    """Conjunto de parâmetros do monitor de enlaces e do alocador de portas.

    Os defaults reproduzem os valores fixos do monitor (janela de 10 amostras,
    silêncio após 5000 ms, 10000 tentativas de bind).
    """

    quiet_threshold_ms: int = 5000
    window_size: int = 10
    poll_interval: float = 1.0  # segundos; usado pelo LinkMonitor.
    port_min: int = 6000
    port_max: int = 7000
    transport: str = "udp"
    port_attempts: int = MAX_ATTEMPTS
    bind_host: str = ""
    log_level: str = "INFO"
    config_file: Optional[Path] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def transport_kind(self) -> TransportKind:
        return validate_transport(self.transport)

    def validate(self) -> None:
        """Valida todos os campos.

        Raises:
            ConfigValidationError: Se algum campo estiver fora dos limites.
        """
        validate_positive("quiet_threshold_ms", self.quiet_threshold_ms)
        validate_window(self.window_size)
        validate_positive("poll_interval", self.poll_interval)
        validate_port_range(self.port_min, self.port_max)
        validate_transport(self.transport)
        validate_attempts(self.port_attempts)
        self.log_level = validate_log_level(self.log_level)

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "MonitorSettings":
        """Carrega configurações de um arquivo JSON, se existir."""

        if path is None or not path.exists():
            return cls(config_file=path)

        try:
            with path.open("r", encoding="utf-8") as fp:
                raw_data = json.load(fp)
        except json.JSONDecodeError as exc:
            raise ConfigValidationError(f"JSON inválido em {path}: {exc}") from exc
        if not isinstance(raw_data, dict):
            raise ConfigValidationError(f"{path} deve conter um objeto JSON")

        known_fields = {f.name for f in fields(cls)} - {"config_file", "extra"}
        init_kwargs: Dict[str, Any] = {
            key: value for key, value in raw_data.items() if key in known_fields
        }
        extra = {key: value for key, value in raw_data.items() if key not in known_fields}
        settings = cls(**init_kwargs, config_file=path)
        settings.extra.update(extra)
        settings.validate()
        return settings

    def to_dict(self) -> Dict[str, Any]:
        """Exporta a configuração atual (útil para logs e debug)."""

        return {
            "quiet_threshold_ms": self.quiet_threshold_ms,
            "window_size": self.window_size,
            "poll_interval": self.poll_interval,
            "port_min": self.port_min,
            "port_max": self.port_max,
            "transport": self.transport,
            "port_attempts": self.port_attempts,
            "bind_host": self.bind_host,
            "log_level": self.log_level,
            "config_file": str(self.config_file) if self.config_file else None,
            "extra": self.extra,
        }
