"""
Scoped views over the tools config file and merging them into flags.

A single config file can describe several deployments. Sections are named
after the tool area they configure (``cluster``, ``uda``, ...) and may carry
an instance suffix (``cluster_prod``). Selecting instance ``prod`` keeps only
the ``*_prod`` sections and renames them to their base names.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Protocol, Sequence

import structlog

from toolsconf.config.schema import validate_config_data
from toolsconf.core.errors import FlagValueError, ToolsConfError

if TYPE_CHECKING:
    from toolsconf.flags.flagset import FlagSet

logger = structlog.get_logger()


class CFGLoader(Protocol):
    def load(self) -> dict[str, Any]:
        ...


def filter_instance(cfg: dict[str, Any], instance: str) -> None:
    """Keep only sections ending in _<instance>, renamed to their base name. Mutates cfg."""
    if not instance:
        return

    suffix = "_" + instance

    for section in list(cfg):
        if not section.endswith(suffix):
            del cfg[section]

    for section in list(cfg):
        cfg[section[: -len(suffix)]] = cfg.pop(section)


def filter_sections(cfg: dict[str, Any], sections: Sequence[str]) -> None:
    """Drop every top-level key not in sections; no sections keeps everything. Mutates cfg."""
    if not sections:
        return

    keep = set(sections)
    for section in list(cfg):
        if section not in keep:
            del cfg[section]


def resolve_scope(
    raw: dict[str, Any], instance: str = "", sections: Sequence[str] = ()
) -> dict[str, Any]:
    """Return the instance/section scoped view of raw, leaving raw untouched."""
    scoped = copy.deepcopy(raw)
    filter_instance(scoped, instance)
    filter_sections(scoped, sections)
    return scoped


def stringify_value(value: Any) -> str:
    """Render a config value the way a user would type it on the command line."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify_value(v) for v in value)
    if value is None:
        return ""
    return str(value)


def apply_config_values(flag_set: FlagSet, values: dict[str, Any]) -> list[str]:
    """
    Feed config values into every flag not given on the command line.

    All flags are attempted even when some reject their value.

    Returns:
        Names of the flags that took a value from the config

    Raises:
        FlagValueError: at least one flag rejected its value; names the last one
    """
    applied: list[str] = []
    errors: dict[str, Exception] = {}

    for flag in flag_set:
        if flag.name not in values or flag.changed:
            continue
        try:
            flag.value.set(stringify_value(values[flag.name]))
        except (ValueError, ToolsConfError) as e:
            logger.debug("config_value_rejected", flag=flag.name, error=str(e))
            errors[flag.name] = e
            continue
        applied.append(flag.name)

    if errors:
        name, last = list(errors.items())[-1]
        raise FlagValueError(f"invalid value for flag --{name}: {last}", errors) from last

    return applied


class Config:
    """
    Config data retrieved and unmarshalled by a loader.

    Data is loaded once and reused until refresh() marks it stale.
    """

    def __init__(self, loader: CFGLoader):
        self.loader = loader
        self.data: dict[str, Any] = {}
        self.loaded = False

    def load(self) -> None:
        if self.loaded:
            return
        self.data = self.loader.load()
        self.loaded = True

    def refresh(self) -> None:
        self.loaded = False

    def get_config(self) -> dict[str, Any]:
        self.load()
        return self.data

    def validate_config(self, schema: str | dict[str, Any]) -> None:
        """Validate the config data against a JSON schema (text or mapping)."""
        validate_config_data(self.get_config(), schema)


class ToolsConfig(Config):
    """Config restricted to one instance and, optionally, a set of sections."""

    def __init__(
        self,
        loader: CFGLoader,
        sections: Sequence[str] | None = None,
        instance: str = "",
    ):
        super().__init__(loader)
        self.sections = list(sections or [])
        self.instance = instance

    def load(self) -> None:
        if self.loaded:
            return
        super().load()
        filter_instance(self.data, self.instance)
        filter_sections(self.data, self.sections)

    def set_flags(self, sections: Sequence[str] | None, flag_set: FlagSet) -> list[str]:
        """
        Set flags from the given sections, flattened left to right.

        With no sections, the config's own sections are used; when those are
        empty too, every section in the file is used.
        """
        cfg = self.get_config()

        selected = list(sections or self.sections or cfg.keys())

        merged: dict[str, Any] = {}
        for section in selected:
            values = cfg.get(section)
            if isinstance(values, dict):
                merged.update(values)

        return apply_config_values(flag_set, merged)


__all__ = [
    "CFGLoader",
    "Config",
    "ToolsConfig",
    "filter_instance",
    "filter_sections",
    "resolve_scope",
    "stringify_value",
    "apply_config_values",
]
