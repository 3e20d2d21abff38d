from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from trojango.config import (
    ConfigError,
    from_context,
    register_config_creator,
    with_config,
    with_json_config,
    with_yaml_config,
)


@dataclass
class Foo:
    field1: str = ""
    field2: bool = False


@dataclass
class SampleStruct:
    field1: str = ""
    field2: bool = False
    field3: list[Foo] = field(default_factory=list)


@dataclass
class Keyed:
    run_type: str = field(default="", metadata={"json": "run_type", "yaml": "run-type"})
    log_level: int = field(default=1, metadata={"json": "log_level", "yaml": "log-level"})


@pytest.fixture(autouse=True)
def _register():
    register_config_creator("test", SampleStruct)
    register_config_creator("keyed", Keyed)


def test_json_config():
    data = b"""
    {
        "field1": "test1",
        "field2": true,
        "field3": [
            {
                "field1": "aaaa",
                "field2": true
            }
        ]
    }
    """
    ctx = with_json_config({}, data)
    cfg = from_context(ctx, "test")
    assert cfg.field1 == "test1"
    assert cfg.field2 is True
    assert cfg.field3 == [Foo("aaaa", True)]


def test_yaml_config():
    data = b"""
field1: 012345678
field2: true
field3:
  - field1: test
    field2: true
"""
    ctx = with_yaml_config({}, data)
    cfg = from_context(ctx, "test")
    assert cfg.field1 == "012345678"
    assert cfg.field2 is True
    assert cfg.field3[0].field1 == "test"


def test_json_keys_match_case_insensitively():
    ctx = with_json_config(None, '{"FIELD1": "upper"}')
    assert from_context(ctx, "test").field1 == "upper"


def test_metadata_keys_per_format():
    json_ctx = with_json_config({}, '{"run_type": "client", "log_level": 0}')
    yaml_ctx = with_yaml_config({}, "run-type: server\nlog-level: 2\n")
    assert from_context(json_ctx, "keyed") == Keyed("client", 0)
    assert from_context(yaml_ctx, "keyed") == Keyed("server", 2)


def test_defaults_kept_when_missing():
    ctx = with_json_config({}, "{}")
    assert from_context(ctx, "keyed") == Keyed("", 1)


def test_empty_yaml_gives_defaults():
    ctx = with_yaml_config({}, b"")
    assert from_context(ctx, "test") == SampleStruct()


def test_existing_context_entries_preserved():
    ctx = with_config({}, "other", {"value": 1})
    ctx = with_json_config(ctx, "{}")
    assert from_context(ctx, "other") == {"value": 1}


def test_with_config_round_trip():
    cfg = Keyed("nat", 3)
    ctx = with_config(None, "manual", cfg)
    assert from_context(ctx, "manual") is cfg
    assert from_context(ctx, "absent") is None


def test_invalid_json_raises():
    with pytest.raises(ConfigError):
        with_json_config({}, b"{not json")


def test_invalid_yaml_raises():
    with pytest.raises(ConfigError):
        with_yaml_config({}, b"field1: [unclosed")


def test_type_mismatch_raises():
    with pytest.raises(ConfigError):
        with_json_config({}, '{"field2": "yes"}')
    with pytest.raises(ConfigError):
        with_json_config({}, '{"log_level": "high"}')