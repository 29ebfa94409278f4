# webservd

A small server that reads an nginx-like configuration file, opens a
listening TCP socket for a `server` block, accepts clients on it and reads
their requests.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Running

```
webservd [CONFIG]
```

`CONFIG` defaults to `servers/default.conf` in the current directory. An
unreadable file is treated as empty, so no server is started.

The configuration is parsed block by block. If a block is malformed, the
error is printed to standard error and the `server` blocks read before it
are still used. Each server is then served in turn: its loop runs until it
is stopped, so later servers are only started once the earlier one has
finished. Ctrl-C ends the program. If a listening socket cannot be set up
(for example the port is in use), the error is printed and the command
exits with status 1.

## Configuration

The configuration is made of `server` blocks holding directives and
`location` blocks. A `#` starts a comment that runs to the end of its line.

```
# comments run to the end of the line
server {
    listen 8080;
    host 127.0.0.1;
    server_name localhost;
    error_pages ./errors;
    client_max_body_size 1024;
    root ./www;
    index index.html;

    location /images {
        root ./www/images;
        autoindex on;
        allow_methods GET POST;
    }

    location /cgi-bin {
        cgi_path /usr/bin/python3;
        cgi_ext .py;
    }
}
```

Server directives: `listen` (or `port`), `host`, `server_name`,
`error_pages`, `client_max_body_size`, `root`, `index` and `location`.
Numeric values are read like C's `atoi`: leading digits are used and a
value without any gives 0. The semicolon after a server directive is
optional.

Location directives: `root`, `alias`, `index`, `return`, `autoindex`
(`on` enables it, any other value disables it), `allow_methods`,
`cgi_path` and `cgi_ext`; the last three take any number of words. Every
location directive must end with a semicolon.

Anything other than a `server` block at the top level, an unknown
directive, a missing brace, a missing value, a missing semicolon inside a
location or an unexpected end of input raises
`webservd.config.ConfigError` (a `ValueError`).

## Using it as a library

```python
from webservd.config import load_config, parse_config
from webservd.logger import Logger
from webservd.network import ServerManager

servers = load_config("servers/default.conf")
for server in servers:
    print(server)

with ServerManager(servers[0], Logger()) as manager:
    manager.server_loop(max_events=10)
```

`webservd.config`:

- `tokenize_config(text)` splits text into `Token`s of type
  `TokenType.WORD`, `LBRACE`, `RBRACE` or `SEMICOLON`; `format_tokens`
  renders a token list for debugging.
- `parse_server(tokens, pos)` and `parse_location(tokens, pos, path)` parse
  one block starting at its `{` and return the result with the position
  after the closing `}`.
- `parse_config(text)` returns a list of `ServerConfig`, each holding a
  list of `LocationConfig`; `load_config(path)` does the same for a file.
  Both dataclasses print as a readable block with `str()`.

`webservd.logger`:

- `Logger(stream=None)` writes `[YYYY-MM-DD HH:MM:SS] [LEVEL] message`
  lines to the given stream, or to standard output. It has `info`,
  `warning`, `error`, `debug`, `log(level, message)` with a `LogLevel`, and
  `server_info(message, server_name, host, port)`.
- `timestamp()` returns the current local time in that format.

`webservd.network`:

- `ServerSocket(config, logger=None)` binds to the configured host and
  port on `setup()` and listens with a backlog of 10; `address` gives the
  bound address, `accept_client()` accepts a connection and
  `respond(client, response)` sends text or bytes to a client.
- `Client(server_socket)` accepts one connection; `read_request()` reads
  at most `client_max_body_size - 1` bytes into `raw_request`.
- `ServerManager(config, logger=None)` sets up the listening socket and
  registers it with a selector. `server_loop(max_events=None)` accepts new
  clients and reads their requests until `stop()` is called or
  `max_events` events were handled, returning the number handled. Each
  request received is written as-is to the logger's stream; a client that
  closes its connection or fails to read is removed. `close()` (or leaving
  the `with` block) closes every client and the listening socket.

## What it does not do

The server reads requests but does not parse HTTP or answer them: no
response is sent, no files are served from `root`, and the `index`,
`error_pages`, `autoindex`, `return`, `allow_methods` and CGI settings are
parsed and kept in the configuration but not acted upon.