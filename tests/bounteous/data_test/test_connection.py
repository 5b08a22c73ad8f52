"""Tests for connection-string parsing, masking and connection builders"""
import pytest

from bounteous.data.connection import (
    ConnectionBuilder,
    StaticConnectionBuilder,
    mask_connection_string,
    parse_connection_string,
)
from bounteous.data.errors import ConfigurationError


def test_parse_lowercases_and_trims_keys():
    pairs = parse_connection_string(" Server = db.local ;DATABASE=shop;Uid=admin;Pwd=pass;")
    assert pairs == {'server': 'db.local', 'database': 'shop', 'uid': 'admin', 'pwd': 'pass'}


def test_parse_ignores_empty_segments():
    assert parse_connection_string(";;Server=localhost;;") == {'server': 'localhost'}
    assert parse_connection_string("") == {}


def test_parse_last_duplicate_wins():
    assert parse_connection_string("Port=3306;port=3307")['port'] == '3307'


def test_parse_keeps_equals_in_value():
    assert parse_connection_string("Pwd=a=b")['pwd'] == 'a=b'


@pytest.mark.parametrize("text, expected", [
    ('Pwd="se;cret"', 'se;cret'),
    ("Pwd='x=y;z'", 'x=y;z'),
    ('Pwd="say ""hi"""', 'say "hi"'),
    ("Pwd = 'it''s'", "it's"),
])
def test_parse_quoted_values(text, expected):
    assert parse_connection_string(text)['pwd'] == expected


def test_parse_apostrophe_inside_unquoted_value():
    assert parse_connection_string("Database=o'neil;Port=1") == {'database': "o'neil", 'port': '1'}


@pytest.mark.parametrize("text", ["Server", "Server=x;junk", "=value", 'Pwd="open'])
def test_parse_rejects_malformed(text):
    with pytest.raises(ConfigurationError):
        parse_connection_string(text)


def test_parse_rejects_none():
    with pytest.raises(ConfigurationError):
        parse_connection_string(None)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        parse_connection_string("broken")


def test_mask_replaces_password_values():
    masked = mask_connection_string("Server=x;Uid=root;Pwd=secret;")
    assert masked == "Server=x;Uid=root;Pwd=*****;"
    assert "secret" not in mask_connection_string('Password="p;w";Server=x')


def test_mask_leaves_strings_without_password():
    assert mask_connection_string("Server=x;Database=y") == "Server=x;Database=y"
    assert mask_connection_string("") == ""


def test_mask_hides_unparseable_strings():
    assert mask_connection_string('Pwd="never closed') == "*****"


def test_static_builder_defaults_to_admin_string():
    builder = StaticConnectionBuilder("Server=admin;")
    assert isinstance(builder, ConnectionBuilder)
    assert builder.admin_connection_string == "Server=admin;"
    assert builder.connection_string == "Server=admin;"


def test_static_builder_separate_connection_string():
    builder = StaticConnectionBuilder("Server=admin;", "Server=app;")
    assert builder.connection_string == "Server=app;"


def test_connection_builder_is_abstract():
    with pytest.raises(TypeError):
        ConnectionBuilder()
