"""Tokenizer and parser for the server configuration format."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

__all__ = [
    "ConfigError",
    "TokenType",
    "Token",
    "LocationConfig",
    "ServerConfig",
    "tokenize_config",
    "format_tokens",
    "parse_location",
    "parse_server",
    "parse_config",
    "load_config",
]


class ConfigError(ValueError):
    """Raised when a configuration cannot be parsed."""


class TokenType(enum.Enum):
    WORD = "WORD"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    SEMICOLON = "SEMICOLON"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str

    def __str__(self) -> str:
        return f"{self.type.name}('{self.value}')"


def _join(values: Iterable[str]) -> str:
    return "[" + ", ".join(values) + "]"


@dataclass
class LocationConfig:
    path: str = ""
    root: str = ""
    alias: str = ""
    index: str = ""
    return_path: str = ""
    autoindex: bool = False
    allow_methods: list[str] = field(default_factory=list)
    cgi_path: list[str] = field(default_factory=list)
    cgi_ext: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            "LocationConfig {\n"
            f"  path: {self.path}\n"
            f"  root: {self.root}\n"
            f"  alias: {self.alias}\n"
            f"  index: {self.index}\n"
            f"  return_path: {self.return_path}\n"
            f"  autoindex: {'true' if self.autoindex else 'false'}\n"
            f"  allow_methods: {_join(self.allow_methods)}\n"
            f"  cgi_path: {_join(self.cgi_path)}\n"
            f"  cgi_ext: {_join(self.cgi_ext)}\n"
            "}"
        )


@dataclass
class ServerConfig:
    host: str = ""
    port: int = 0
    server_name: str = ""
    error_pages_dir: str = ""
    client_max_body_size: int = 0
    root: str = ""
    index: str = ""
    locations: list[LocationConfig] = field(default_factory=list)

    def __str__(self) -> str:
        locations = "".join(f"{location}\n" for location in self.locations)
        return (
            "ServerConfig {\n"
            f"  host: {self.host}\n"
            f"  port: {self.port}\n"
            f"  server_name: {self.server_name}\n"
            f"  error_pages_dir: {self.error_pages_dir}\n"
            f"  client_max_body_size: {self.client_max_body_size}\n"
            f"  root: {self.root}\n"
            f"  index: {self.index}\n"
            "  locations: [\n"
            f"{locations}"
            "  ]\n"
            "}"
        )


_WHITESPACE = frozenset(" \t\n\v\f\r")
_PUNCTUATION = {
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
}


def tokenize_config(text: str) -> list[Token]:
    """Split configuration text into words, braces and semicolons.

    A ``#`` starts a comment that runs through the end of its line.
    """
    tokens: list[Token] = []
    current: list[str] = []

    def flush() -> None:
        if current:
            tokens.append(Token(TokenType.WORD, "".join(current)))
            current.clear()

    chars = iter(text)
    for char in chars:
        if char in _WHITESPACE:
            flush()
        elif char in _PUNCTUATION:
            flush()
            tokens.append(Token(_PUNCTUATION[char], char))
        elif char == "#":
            for skipped in chars:
                if skipped == "\n":
                    break
        else:
            current.append(char)
    flush()
    return tokens


def format_tokens(tokens: Iterable[Token]) -> str:
    """Render a token list, one token per line, inside brackets."""
    return "\n[" + "".join(f"{token}\n" for token in tokens) + "]\n"


_ATOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _peek(tokens: list[Token], pos: int) -> Token:
    if pos >= len(tokens):
        raise ConfigError("Unexpected end of configuration")
    return tokens[pos]


def _expect_word(tokens: list[Token], pos: int, message: str) -> tuple[str, int]:
    if pos >= len(tokens) or tokens[pos].type is not TokenType.WORD:
        raise ConfigError(message)
    return tokens[pos].value, pos + 1


def _collect_words(tokens: list[Token], pos: int, into: list[str]) -> int:
    while _peek(tokens, pos).type is TokenType.WORD:
        into.append(tokens[pos].value)
        pos += 1
    return pos


_LOCATION_SINGLE = {
    "root": ("root", "Expected root value"),
    "alias": ("alias", "Expected alias value"),
    "index": ("index", "Expected index value"),
    "return": ("return_path", "Expected return value"),
}
_LOCATION_LISTS = ("allow_methods", "cgi_path", "cgi_ext")


def parse_location(tokens: list[Token], pos: int, path: str) -> tuple[LocationConfig, int]:
    """Parse a location block starting at its ``{``.

    Returns the location and the position just after its closing ``}``.
    """
    location = LocationConfig(path=path)
    if _peek(tokens, pos).type is not TokenType.LBRACE:
        raise ConfigError("Expected '{' after location path")
    pos += 1

    while _peek(tokens, pos).type is not TokenType.RBRACE:
        key, pos = _expect_word(tokens, pos, "Expected directive key")
        if key in _LOCATION_SINGLE:
            attribute, message = _LOCATION_SINGLE[key]
            value, pos = _expect_word(tokens, pos, message)
            setattr(location, attribute, value)
        elif key == "autoindex":
            value, pos = _expect_word(tokens, pos, "Expected autoindex value")
            location.autoindex = value == "on"
        elif key in _LOCATION_LISTS:
            pos = _collect_words(tokens, pos, getattr(location, key))
        else:
            raise ConfigError(f"Unknown location directive: {key}")

        if _peek(tokens, pos).type is not TokenType.SEMICOLON:
            raise ConfigError("Missing semicolon in location block")
        pos += 1
    return location, pos + 1


_SERVER_STRINGS = {
    "host": ("host", "Expected host value"),
    "server_name": ("server_name", "Expected server_name"),
    "error_pages": ("error_pages_dir", "Expected error page"),
    "root": ("root", "Expected root value"),
    "index": ("index", "Expected index value"),
}


def parse_server(tokens: list[Token], pos: int) -> tuple[ServerConfig, int]:
    """Parse a server block starting at its ``{``.

    Returns the server and the position just after its closing ``}``.
    """
    server = ServerConfig()
    if _peek(tokens, pos).type is not TokenType.LBRACE:
        raise ConfigError("Expected '{' after server")
    pos += 1

    while _peek(tokens, pos).type is not TokenType.RBRACE:
        key, pos = _expect_word(tokens, pos, "Expected directive key")
        if key in ("listen", "port"):
            value, pos = _expect_word(tokens, pos, "Expected listen port")
            server.port = _atoi(value)
        elif key == "client_max_body_size":
            value, pos = _expect_word(tokens, pos, "Expected size")
            server.client_max_body_size = _atoi(value)
        elif key in _SERVER_STRINGS:
            attribute, message = _SERVER_STRINGS[key]
            value, pos = _expect_word(tokens, pos, message)
            setattr(server, attribute, value)
        elif key == "location":
            path, pos = _expect_word(tokens, pos, "Expected location path")
            location, pos = parse_location(tokens, pos, path)
            server.locations.append(location)
        else:
            raise ConfigError(f"Unknown server directive: {key}")

        if pos < len(tokens) and tokens[pos].type is TokenType.SEMICOLON:
            pos += 1
    return server, pos + 1


def parse_config(text: str) -> list[ServerConfig]:
    """Parse configuration text made of ``server`` blocks."""
    tokens = tokenize_config(text)
    servers: list[ServerConfig] = []
    pos = 0
    while pos < len(tokens):
        token = tokens[pos]
        if token.type is TokenType.WORD and token.value == "server":
            server, pos = parse_server(tokens, pos + 1)
            servers.append(server)
        else:
            raise ConfigError("Expected 'server' block")
    return servers


def _read_text(path: str | Path) -> str:
    try:
        return Path(path).read_text()
    except OSError:
        return ""


def load_config(path: str | Path) -> list[ServerConfig]:
    """Read and parse a configuration file; an unreadable file counts as empty."""
    return parse_config(_read_text(path))