"""Tests for ServerConfig."""

import pytest

from waypost import MountPrecedence, ServerConfig
from waypost.middleware import BodyParserOptions


def test_defaults():
    config = ServerConfig()
    assert config.host == "127.0.0.1"
    assert config.port == 8080
    assert config.use_body_parser
    assert config.body_parser == BodyParserOptions()
    assert config.precedence is MountPrecedence.GENERAL_FIRST
    assert config.max_body_bytes is None


def test_from_env():
    config = ServerConfig.from_env({
        "WAYPOST_HOST": "0.0.0.0",
        "WAYPOST_PORT": "9000",
        "WAYPOST_LOG_LEVEL": "debug",
        "WAYPOST_PARSE_JSON": "false",
        "WAYPOST_BODY_PARSER": "yes",
        "WAYPOST_PRECEDENCE": "specific_first",
        "WAYPOST_TEMP_DIR": "/tmp/uploads",
    })
    assert config.host == "0.0.0.0"
    assert config.port == 9000
    assert config.log_level_number == 10
    assert config.body_parser == BodyParserOptions(parse_json=False)
    assert config.precedence is MountPrecedence.SPECIFIC_FIRST
    assert config.temp_dir == "/tmp/uploads"


def test_from_env_ignores_unrelated_variables():
    assert ServerConfig.from_env({"PORT": "1"}).port == 8080


@pytest.mark.parametrize(
    ("env", "message"),
    [
        ({"WAYPOST_PORT": "http"}, "must be an integer"),
        ({"WAYPOST_PORT": "70000"}, "port must be between"),
        ({"WAYPOST_LOG_LEVEL": "LOUD"}, "unknown log level"),
        ({"WAYPOST_PARSE_JSON": "maybe"}, "must be a boolean"),
        ({"WAYPOST_PRECEDENCE": "random"}, "must be one of"),
    ],
)
def test_invalid_values_fail_fast(env, message):
    with pytest.raises(ValueError, match=message):
        ServerConfig.from_env(env)
