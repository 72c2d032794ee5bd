"""Entry-point helper for allocating an ephemeral local port."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigValidationError, MonitorSettings
from .ports import AllocationExhausted, find_free_port


logger = logging.getLogger(__name__)


def find_default_config() -> Path | None:
    """Procura config.json no diretório atual."""
    config_in_cwd = Path.cwd() / "config.json"
    if config_in_cwd.exists():
        return config_in_cwd
    return None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Aloca uma porta local livre")
    parser.add_argument("--config", type=Path, help="Caminho para arquivo de configuração", default=None)
    parser.add_argument("--min", dest="port_min", type=int, help="Menor porta da faixa (inclusiva)", default=None)
    parser.add_argument("--max", dest="port_max", type=int, help="Maior porta da faixa (exclusiva)", default=None)
    transport = parser.add_mutually_exclusive_group()
    transport.add_argument("--tcp", dest="transport", action="store_const", const="tcp", default=None)
    transport.add_argument("--udp", dest="transport", action="store_const", const="udp")
    parser.add_argument("--attempts", type=int, help="Número máximo de tentativas de bind", default=None)
    parser.add_argument("--log-level", help="Override de nível de log", default=None)
    return parser


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    config_path = args.config if args.config else find_default_config()
    try:
        settings = MonitorSettings.from_file(config_path)
        if args.port_min is not None:
            settings.port_min = args.port_min
        if args.port_max is not None:
            settings.port_max = args.port_max
        if args.transport:
            settings.transport = args.transport
        if args.attempts is not None:
            settings.port_attempts = args.attempts
        if args.log_level:
            settings.log_level = args.log_level.upper()
        settings.validate()
    except ConfigValidationError as exc:
        print(f"Configuração inválida: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)
    logger.debug("Configuração: %s", settings.to_dict())

    try:
        port = find_free_port(
            settings.port_min,
            settings.port_max,
            settings.transport_kind,
            attempts=settings.port_attempts,
            host=settings.bind_host,
        )
    except AllocationExhausted as exc:
        logger.error("%s", exc)
        return 1

    print(port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
