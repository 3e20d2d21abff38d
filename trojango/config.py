"""Registry of module configurations parsed from one JSON or YAML document.

A creator returns a fresh default configuration: a dataclass instance or a
dict. Dataclass fields may name their keys through field metadata
``{"json": ..., "yaml": ...}``; otherwise the field name is used (matched
case-insensitively for JSON, lower-cased for YAML). Field metadata ``"type"``
overrides the annotated type of a field.
"""

from __future__ import annotations

import dataclasses
import json
import re
import typing
from collections.abc import Callable, Mapping
from typing import Any

import yaml

from trojango.common import TrojanError

Creator = Callable[[], Any]

_SUFFIX = "_CONFIG"
_creators: dict[str, Creator] = {}

_NAMED_TYPES: dict[str, Any] = {
    "str": str,
    "int": int,
    "bool": bool,
    "float": float,
    "Any": Any,
    "list": list,
    "List": list,
    "dict": dict,
    "Dict": dict,
}
_LIST_RE = re.compile(r"(?:list|List)\[(.+)\]")
_DICT_RE = re.compile(r"(?:dict|Dict)\[([^,\[\]]+),(.+)\]")


class ConfigError(TrojanError):
    """Raised when configuration data cannot be parsed."""


def register_config_creator(name: str, creator: Creator) -> None:
    """Register a factory for the default config of module ``name``."""
    _creators[name + _SUFFIX] = creator


def _resolve(tp: Any) -> Any:
    """Map a written annotation to a type; unknown names become Any."""
    if not isinstance(tp, str):
        return tp
    text = tp.replace(" ", "").replace("typing.", "")
    if text in _NAMED_TYPES:
        return _NAMED_TYPES[text]
    match = _LIST_RE.fullmatch(text)
    if match:
        return list[_resolve(match.group(1))]
    match = _DICT_RE.fullmatch(text)
    if match:
        return dict[_resolve(match.group(1)), _resolve(match.group(2))]
    return Any


def _field_type(field: dataclasses.Field) -> Any:
    override = field.metadata.get("type")
    if override is not None:
        return override
    return _resolve(field.type)


def _field_key(field: dataclasses.Field, fmt: str) -> str:
    key = field.metadata.get(fmt)
    if key:
        return key
    return field.name if fmt == "json" else field.name.lower()


def _lookup(data: Mapping, key: str, fmt: str) -> tuple[bool, Any]:
    if key in data:
        return True, data[key]
    if fmt == "json":
        folded = key.casefold()
        for candidate, value in data.items():
            if isinstance(candidate, str) and candidate.casefold() == folded:
                return True, value
    return False, None


def _fill(target: Any, data: Any, fmt: str) -> Any:
    if not isinstance(data, Mapping):
        raise ConfigError(f"expected a mapping, got {type(data).__name__}")
    if isinstance(target, dict):
        target.update(data)
        return target
    if not dataclasses.is_dataclass(target) or isinstance(target, type):
        raise ConfigError(f"unsupported config type {type(target).__name__}")
    for field in dataclasses.fields(target):
        found, value = _lookup(data, _field_key(field, fmt), fmt)
        if not found:
            continue
        current = getattr(target, field.name)
        setattr(target, field.name, _coerce(_field_type(field), value, fmt, current, field.name))
    return target


def _coerce(tp: Any, value: Any, fmt: str, current: Any, where: str) -> Any:
    if value is None:
        return current
    origin = typing.get_origin(tp)
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        base = current if isinstance(current, tp) else tp()
        return _fill(base, value, fmt)
    if origin is list:
        if not isinstance(value, list):
            raise ConfigError(f"{where}: expected a list")
        args = typing.get_args(tp)
        item_type = args[0] if args else Any
        return [_coerce(item_type, item, fmt, None, where) for item in value]
    if origin is dict:
        if not isinstance(value, Mapping):
            raise ConfigError(f"{where}: expected a mapping")
        args = typing.get_args(tp)
        value_type = args[1] if len(args) == 2 else Any
        return {k: _coerce(value_type, v, fmt, None, where) for k, v in value.items()}
    if tp is bool:
        if not isinstance(value, bool):
            raise ConfigError(f"{where}: expected a boolean")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"{where}: expected an integer")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{where}: expected a number")
        return float(value)
    if tp is str:
        if isinstance(value, str):
            return value
        if fmt == "yaml" and isinstance(value, (int, float, bool)):
            return str(value).lower() if isinstance(value, bool) else str(value)
        raise ConfigError(f"{where}: expected a string")
    if (
        dataclasses.is_dataclass(current)
        and not isinstance(current, type)
        and isinstance(value, Mapping)
    ):
        return _fill(current, value, fmt)
    return value


def _parse(document: Any, fmt: str) -> dict[str, Any]:
    if document is None:
        document = {}
    return {name: _fill(creator(), document, fmt) for name, creator in _creators.items()}


def _as_text(data: bytes | str) -> str:
    return data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data


def _merge(ctx: Mapping | None, configs: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(ctx or {})
    merged.update(configs)
    return merged


def with_json_config(ctx: Mapping | None, data: bytes | str) -> dict[str, Any]:
    """Return a new context holding every registered config parsed from JSON."""
    try:
        document = json.loads(_as_text(data))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ConfigError("invalid json config").base(exc) from exc
    return _merge(ctx, _parse(document, "json"))


def with_yaml_config(ctx: Mapping | None, data: bytes | str) -> dict[str, Any]:
    """Return a new context holding every registered config parsed from YAML."""
    try:
        document = yaml.safe_load(_as_text(data))
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        raise ConfigError("invalid yaml config").base(exc) from exc
    return _merge(ctx, _parse(document, "yaml"))


def with_config(ctx: Mapping | None, name: str, cfg: Any) -> dict[str, Any]:
    """Return a new context with ``cfg`` stored for module ``name``."""
    return _merge(ctx, {name + _SUFFIX: cfg})


def from_context(ctx: Mapping | None, name: str) -> Any:
    """Return the config stored for module ``name``, or None."""
    if not ctx:
        return None
    return ctx.get(name + _SUFFIX)