"""Keyserver configuration held in a TOML document."""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import IO, Any

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1
_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})


def _display(value: Any) -> str:
    """Render a configuration value the way it reads as plain text."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


class Settings:
    """Configuration options addressed by dotted keys such as ``a.b.c``."""

    def __init__(self, tree: dict[str, Any] | None = None) -> None:
        self.tree: dict[str, Any] = {} if tree is None else tree

    def get(self, key: str) -> Any:
        """Return the value at the dotted key, or None if it is absent."""
        node: Any = self.tree
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Store a value at the dotted key, creating tables along the way."""
        *parents, leaf = key.split(".")
        node = self.tree
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value

    def get_string(self, key: str) -> str:
        return self.get_string_default(key, "")

    def get_string_default(self, key: str, default: str) -> str:
        value = self.get(key)
        return value if isinstance(value, str) else default

    def _get_int(self, key: str) -> int:
        value = self.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        text = _display(value)
        if not _INT_PATTERN.fullmatch(text):
            raise ValueError(f"invalid integer for {key!r}: {text!r}")
        result = int(text)
        if not _INT_MIN <= result <= _INT_MAX:
            raise ValueError(f"integer out of range for {key!r}: {text!r}")
        self.set(key, result)
        return result

    def must_get_int(self, key: str) -> int:
        """Return the integer value for the key; raise ValueError if invalid."""
        return self._get_int(key)

    def get_int_default(self, key: str, default: int) -> int:
        try:
            return self._get_int(key)
        except ValueError:
            return default

    def get_bool(self, key: str) -> bool:
        """Interpret the key as a boolean, storing the interpretation back."""
        value = self.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            result = value != 0
        elif isinstance(value, str):
            result = value in _TRUE_WORDS
        else:
            result = False
        self.set(key, result)
        return result

    def get_strings(self, key: str) -> list[str]:
        value = self.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]


_config: Settings | None = None


def config() -> Settings | None:
    """Return the global settings, or None if none were loaded."""
    return _config


def set_config(contents: str) -> Settings:
    """Replace the global settings with the parsed TOML text."""
    global _config
    _config = Settings(tomllib.loads(contents))
    return _config


def load_config(stream: IO[str] | IO[bytes]) -> Settings:
    """Replace the global settings with TOML read from a stream."""
    data = stream.read()
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return set_config(data)


def load_config_file(path: str | Path) -> Settings:
    """Replace the global settings with the contents of a TOML file."""
    global _config
    with open(path, "rb") as handle:
        tree = tomllib.load(handle)
    _config = Settings(tree)
    return _config