"""
Binding of command-line flags to config file keys.

Tools bind each of their flag sets to a config section, then call
init_config() once the command line has been parsed. Every bound flag that
was not given on the command line takes its value from the config file.

Key composition for flag "host" bound to section "cluster":
- no instance:         cluster.host
- instance "prod":     cluster_prod.host
- empty section, prod: prod.host
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

import structlog

from toolsconf.config.loader import FileGetter, Loader, find_config_file, unmarshallers_for
from toolsconf.config.settings import get_settings
from toolsconf.config.tools import Config, apply_config_values

if TYPE_CHECKING:
    from toolsconf.flags.flagset import Flag, FlagSet

logger = structlog.get_logger()

_MISSING = object()


@dataclass
class FlagBinding:
    flag: Flag
    section: str = ""

    def key(self, instance: str = "") -> str:
        """Config key this flag reads from for the given instance."""
        section = self.section
        if instance:
            section = f"{section}_{instance}" if section else instance
        if not section:
            return self.flag.name
        return f"{section}.{self.flag.name}"


def lookup_key(raw: dict[str, Any], key: str) -> Any:
    """Walk a dotted key through nested mappings; _MISSING when absent."""
    node: Any = raw
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


class ConfigResolver:
    """
    Flag binding table plus the config file it resolves against.

    The search path defaults to the TOOLSCONF_ settings.
    """

    def __init__(
        self,
        config_dirs: Sequence[str | Path] | None = None,
        config_name: str | None = None,
    ):
        settings = get_settings()
        self.config_dirs = list(config_dirs if config_dirs is not None else settings.config_dirs)
        self.config_name = config_name or settings.config_name
        self.config: Config | None = None
        self._bindings: dict[Flag, FlagBinding] = {}

    def bind_flags(self, flag_set: FlagSet, section: str = "") -> None:
        """Bind every flag in flag_set to section; re-binding replaces the section."""
        for flag in flag_set:
            self._bindings[flag] = FlagBinding(flag, section)

    def binding(self, flag: Flag) -> FlagBinding | None:
        return self._bindings.get(flag)

    def locate_config(self, config_file: str | Path | None = None) -> Path | None:
        """The explicit file when given, otherwise the first default file found."""
        if config_file:
            return Path(config_file)
        return find_config_file(self.config_dirs, self.config_name)

    def new_loader(self, config_file: str | Path) -> Loader:
        return Loader([FileGetter(config_file)], unmarshallers_for(config_file))

    def init_config(
        self,
        config_file: str | Path | None,
        instance: str,
        flag_set: FlagSet,
    ) -> str | None:
        """
        Load the config file and apply it to the unchanged bound flags.

        Args:
            config_file: Explicit path; when empty the search dirs are scanned
            instance: Deployment instance whose suffixed sections apply
            flag_set: Flags to fill in

        Returns:
            Path of the config file used, or None if no default file exists

        Raises:
            ConfigSourceError: explicit config file could not be read
            ConfigFormatError: config file is neither TOML nor YAML
            FlagValueError: a flag rejected its config value
        """
        path = self.locate_config(config_file)
        if path is None:
            logger.debug(
                "config_file_not_found",
                config_dirs=[str(d) for d in self.config_dirs],
                config_name=self.config_name,
            )
            return None

        self.config = Config(self.new_loader(path))
        raw = self.config.get_config()
        logger.debug("config_file_loaded", path=str(path), instance=instance or None)

        values: dict[str, Any] = {}
        for flag in flag_set:
            binding = self._bindings.get(flag)
            if binding is None:
                continue
            value = lookup_key(raw, binding.key(instance))
            if value is not _MISSING:
                values[flag.name] = value

        applied = apply_config_values(flag_set, values)
        logger.debug("config_flags_applied", flags=applied)

        return str(path)

    def reset(self) -> None:
        """Forget every binding and the loaded config."""
        self._bindings.clear()
        self.config = None


_default_resolver: ConfigResolver | None = None


def get_config_resolver() -> ConfigResolver:
    """Process wide resolver used by the command line entry point."""
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = ConfigResolver()
    return _default_resolver


__all__ = [
    "FlagBinding",
    "ConfigResolver",
    "get_config_resolver",
    "lookup_key",
]
