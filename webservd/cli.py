"""Command-line entry point: load the configuration and serve each server."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from webservd.config import (
    ConfigError,
    ServerConfig,
    TokenType,
    parse_server,
    tokenize_config,
)
from webservd.network import ServerManager

__all__ = ["setup", "main"]

DEFAULT_CONFIG = "servers/default.conf"


def _read(path: str | Path) -> str:
    try:
        return Path(path).read_text()
    except OSError:
        return ""


def setup(config_path: str | Path) -> list[ServerConfig]:
    """Parse the configuration file, keeping the servers read before any error.

    A parse error is reported on standard error.
    """
    tokens = tokenize_config(_read(config_path))
    servers: list[ServerConfig] = []
    pos = 0
    try:
        while pos < len(tokens):
            token = tokens[pos]
            if token.type is TokenType.WORD and token.value == "server":
                server, pos = parse_server(tokens, pos + 1)
                servers.append(server)
            else:
                raise ConfigError("Expected 'server' block")
    except ConfigError as exc:
        print(exc, file=sys.stderr)
    return servers


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="webservd", description="Run the web server.")
    parser.add_argument(
        "config",
        nargs="?",
        default=DEFAULT_CONFIG,
        help=f"configuration file (default: {DEFAULT_CONFIG})",
    )
    args = parser.parse_args(argv)

    try:
        for server in setup(args.config):
            with ServerManager(server) as manager:
                manager.server_loop()
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())