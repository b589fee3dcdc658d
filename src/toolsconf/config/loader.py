"""
Configuration source chain.

A Loader holds an ordered list of getters (where the config bytes come from)
and an ordered list of unmarshallers (how the bytes are parsed). The first
getter that succeeds provides the bytes, the first unmarshaller that accepts
them provides the config map.

Default file search order (no explicit path):
1. <dir>/<name>.toml, <dir>/<name>.yaml, <dir>/<name>.yml for every search dir
2. <dir>/<name>.conf (TOML) for every search dir
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Protocol, Sequence

import structlog
import yaml

from toolsconf.config.settings import DEFAULT_CONFIG_DIR, DEFAULT_CONFIG_NAME
from toolsconf.core.errors import ConfigFormatError, ConfigSourceError

logger = structlog.get_logger()

CONF_SUFFIX = ".conf"
YAML_SUFFIXES = (".yaml", ".yml")
SEARCH_SUFFIXES = (".toml", ".yaml", ".yml")


class Getter(Protocol):
    """Source of raw config bytes."""

    def get_config(self) -> bytes | None:
        ...


class Unmarshaller(Protocol):
    """Parser turning raw config bytes into a config map."""

    def unmarshal(self, data: bytes) -> dict[str, Any]:
        ...


class FileGetter:
    """Reads config bytes from a file."""

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)

    def get_config(self) -> bytes:
        return self.config_path.read_bytes()

    def __repr__(self) -> str:
        return f"FileGetter({str(self.config_path)!r})"


class BytesGetter:
    """Returns config bytes held in memory."""

    def __init__(self, config_data: bytes | None):
        self.config_data = config_data

    def get_config(self) -> bytes | None:
        return self.config_data


class TomlUnmarshaller:
    """Parses TOML documents."""

    name = "toml"

    def unmarshal(self, data: bytes) -> dict[str, Any]:
        return tomllib.loads(data.decode("utf-8"))


class YamlUnmarshaller:
    """Parses YAML documents; the top level must be a mapping."""

    name = "yaml"

    def unmarshal(self, data: bytes) -> dict[str, Any]:
        parsed = yaml.safe_load(data)
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise ValueError(
                f"config document must be a mapping, got {type(parsed).__name__}"
            )
        return parsed


class Loader:
    """Gets config bytes from the first working getter and parses them."""

    def __init__(self, getters: Sequence[Getter], unmarshallers: Sequence[Unmarshaller]):
        self.getters = list(getters)
        self.unmarshallers = list(unmarshallers)

    def load(self) -> dict[str, Any]:
        """
        Run the getter chain then the unmarshaller chain.

        Raises:
            ConfigSourceError: every getter failed
            ConfigFormatError: every unmarshaller failed
        """
        data: bytes | None = None
        last_error: Exception | None = ConfigSourceError("no config getters configured")

        for getter in self.getters:
            try:
                data = getter.get_config()
            except Exception as e:
                logger.debug("config_getter_failed", getter=repr(getter), error=str(e))
                last_error = e
                continue
            last_error = None
            logger.debug("config_getter_succeeded", getter=repr(getter))
            break

        if last_error is not None:
            raise ConfigSourceError("failed to get config") from last_error

        if data is None:
            data = b""

        last_error = ConfigFormatError("no config unmarshallers configured")

        for unmarshaller in self.unmarshallers:
            try:
                result = unmarshaller.unmarshal(data)
            except Exception as e:
                logger.debug(
                    "config_unmarshal_failed",
                    unmarshaller=type(unmarshaller).__name__,
                    error=str(e),
                )
                last_error = e
                continue
            logger.debug("config_unmarshalled", unmarshaller=type(unmarshaller).__name__)
            return result

        raise ConfigFormatError("failed to unmarshal config") from last_error


def unmarshallers_for(path: str | Path) -> list[Unmarshaller]:
    """Order the format decoders by file extension; TOML first unless YAML is explicit."""
    if Path(path).suffix.lower() in YAML_SUFFIXES:
        return [YamlUnmarshaller(), TomlUnmarshaller()]
    return [TomlUnmarshaller(), YamlUnmarshaller()]


def default_config_path(
    config_dirs: Sequence[str | Path] = (DEFAULT_CONFIG_DIR,),
    config_name: str = DEFAULT_CONFIG_NAME,
) -> Path:
    """The well-known fallback config file."""
    return Path(config_dirs[0]) / f"{config_name}{CONF_SUFFIX}"


def new_tools_loader(
    config_path: str | Path,
    config_dirs: Sequence[str | Path] = (DEFAULT_CONFIG_DIR,),
    config_name: str = DEFAULT_CONFIG_NAME,
) -> Loader:
    """
    Loader for the database tools config files.

    Tries config_path first and falls back to the default .conf file; both
    are parsed as TOML first, then YAML.
    """
    return Loader(
        getters=[
            FileGetter(config_path),
            FileGetter(default_config_path(config_dirs, config_name)),
        ],
        unmarshallers=[TomlUnmarshaller(), YamlUnmarshaller()],
    )


def find_config_file(
    config_dirs: Sequence[str | Path] = (DEFAULT_CONFIG_DIR,),
    config_name: str = DEFAULT_CONFIG_NAME,
) -> Path | None:
    """
    Search the config dirs for the default config file.

    Returns:
        Path to config file or None if not found
    """
    for suffixes in (SEARCH_SUFFIXES, (CONF_SUFFIX,)):
        for config_dir in config_dirs:
            for suffix in suffixes:
                candidate = Path(config_dir) / f"{config_name}{suffix}"
                if candidate.is_file():
                    return candidate
    return None


__all__ = [
    "Getter",
    "Unmarshaller",
    "FileGetter",
    "BytesGetter",
    "TomlUnmarshaller",
    "YamlUnmarshaller",
    "Loader",
    "unmarshallers_for",
    "default_config_path",
    "new_tools_loader",
    "find_config_file",
]
