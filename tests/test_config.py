import pytest

from webservd.config import (
    ConfigError,
    LocationConfig,
    ServerConfig,
    Token,
    TokenType,
    format_tokens,
    load_config,
    parse_config,
    parse_location,
    parse_server,
    tokenize_config,
)

SAMPLE = """
server {
    listen 8080;
    host 127.0.0.1;
    server_name example.com;   # primary site
    error_pages errors/;
    client_max_body_size 1024;
    root www;
    index index.html;
    location /upload {
        allow_methods GET POST;
        autoindex on;
        cgi_path /usr/bin/python3 /bin/sh;
        cgi_ext .py .sh;
        root www/up;
        return /;
        alias /a;
        index up.html;
    }
}
server {
    port 9090;
}
"""


def words(tokens):
    return [t.value for t in tokens]


def test_tokenize_punctuation_and_words():
    tokens = tokenize_config("server{listen 80;}")
    assert [t.type for t in tokens] == [
        TokenType.WORD,
        TokenType.LBRACE,
        TokenType.WORD,
        TokenType.WORD,
        TokenType.SEMICOLON,
        TokenType.RBRACE,
    ]
    assert words(tokens) == ["server", "{", "listen", "80", ";", "}"]


def test_tokenize_trailing_word_and_whitespace():
    assert words(tokenize_config(" \t a\nb\r\n c")) == ["a", "b", "c"]


def test_tokenize_empty():
    assert tokenize_config("") == []


def test_comment_runs_to_end_of_line():
    assert words(tokenize_config("a; # comment { }\nb")) == ["a", ";", "b"]


def test_comment_without_newline_ends_input():
    assert words(tokenize_config("a # trailing")) == ["a"]


def test_comment_glued_to_word_joins_next_line():
    assert words(tokenize_config("ab#x\ncd")) == ["abcd"]


def test_token_str_and_format_tokens():
    tokens = [Token(TokenType.WORD, "server"), Token(TokenType.LBRACE, "{")]
    assert str(tokens[0]) == "WORD('server')"
    assert format_tokens(tokens) == "\n[WORD('server')\nLBRACE('{')\n]\n"


def test_parse_full_sample():
    servers = parse_config(SAMPLE)
    assert len(servers) == 2
    first, second = servers
    assert first.port == 8080
    assert first.host == "127.0.0.1"
    assert first.server_name == "example.com"
    assert first.error_pages_dir == "errors/"
    assert first.client_max_body_size == 1024
    assert first.root == "www"
    assert first.index == "index.html"
    assert len(first.locations) == 1
    loc = first.locations[0]
    assert loc.path == "/upload"
    assert loc.allow_methods == ["GET", "POST"]
    assert loc.autoindex is True
    assert loc.cgi_path == ["/usr/bin/python3", "/bin/sh"]
    assert loc.cgi_ext == [".py", ".sh"]
    assert loc.root == "www/up"
    assert loc.return_path == "/"
    assert loc.alias == "/a"
    assert loc.index == "up.html"
    assert second.port == 9090
    assert second.locations == []


def test_autoindex_other_than_on_is_false():
    servers = parse_config("server { location / { autoindex yes; } }")
    assert servers[0].locations[0].autoindex is False


def test_port_uses_leading_digits():
    assert parse_config("server { listen 81abc; }")[0].port == 81
    assert parse_config("server { listen abc; }")[0].port == 0


def test_server_semicolon_is_optional():
    servers = parse_config("server { root www index i.html }")
    assert servers[0].root == "www"
    assert servers[0].index == "i.html"


def test_parse_server_returns_position_after_block():
    tokens = tokenize_config("{ root x; } tail")
    server, pos = parse_server(tokens, 0)
    assert server.root == "x"
    assert tokens[pos].value == "tail"


def test_parse_location_returns_position_after_block():
    tokens = tokenize_config("{ root r; } next")
    location, pos = parse_location(tokens, 0, "/p")
    assert location.path == "/p"
    assert location.root == "r"
    assert tokens[pos].value == "next"


@pytest.mark.parametrize(
    "text, message",
    [
        ("listen 80;", "Expected 'server' block"),
        ("server listen", "Expected '{' after server"),
        ("server { bogus 1; }", "Unknown server directive: bogus"),
        ("server { ; }", "Expected directive key"),
        ("server { listen ; }", "Expected listen port"),
        ("server { host ; }", "Expected host value"),
        ("server { location { } }", "Expected location path"),
        ("server { location / root }", "Expected '{' after location path"),
        ("server { location / { weird x; } }", "Unknown location directive: weird"),
        ("server { location / { root x } }", "Missing semicolon in location block"),
        ("server { location / { return ; } }", "Expected return value"),
        ("server { listen 80;", "Unexpected end of configuration"),
    ],
)
def test_parse_errors(text, message):
    with pytest.raises(ConfigError) as excinfo:
        parse_config(text)
    assert str(excinfo.value) == message


def test_location_str():
    location = LocationConfig(path="/", allow_methods=["GET", "POST"], autoindex=True)
    assert str(location) == (
        "LocationConfig {\n"
        "  path: /\n"
        "  root: \n"
        "  alias: \n"
        "  index: \n"
        "  return_path: \n"
        "  autoindex: true\n"
        "  allow_methods: [GET, POST]\n"
        "  cgi_path: []\n"
        "  cgi_ext: []\n"
        "}"
    )


def test_server_str_embeds_locations():
    location = LocationConfig(path="/x")
    server = ServerConfig(host="h", port=80, locations=[location])
    text = str(server)
    assert text.startswith("ServerConfig {\n  host: h\n  port: 80\n")
    assert f"  locations: [\n{location}\n  ]\n}}" in text
    assert text.endswith("}")


def test_load_config_reads_file(tmp_path):
    path = tmp_path / "default.conf"
    path.write_text(SAMPLE)
    assert load_config(path) == parse_config(SAMPLE)


def test_load_config_missing_file_is_empty(tmp_path):
    assert load_config(tmp_path / "absent.conf") == []